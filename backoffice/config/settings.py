from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # ── Application ──────────────────────────────────────────────
    app_name: str = "Listener Marketplace Back Office"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # ── Database ─────────────────────────────────────────────────
    mongodb_atlas_uri: Optional[str] = None
    database_name: str = "backoffice_db"

    # ── JWT / Security ───────────────────────────────────────────
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # marketplace accounts

    # ── Admin sessions ───────────────────────────────────────────
    session_timeout_seconds: int = 30 * 60
    session_tick_seconds: float = 1.0
    login_delay_seconds: float = 0.5

    # ── Platform key (for the first-admin set-up endpoint) ───────
    app_key: str = "backoffice_application"

    # ── Pagination ───────────────────────────────────────────────
    default_page_size: int = 10
    max_page_size: int = 100

    # ── CORS ─────────────────────────────────────────────────────
    cors_allowed_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]
    cors_allow_credentials: bool = True
    cors_allowed_methods: list[str] = ["*"]
    cors_allowed_headers: list[str] = ["*"]

    class Config:
        env_file = ".env.local"
        extra = "ignore"


# ── Module-level singleton ──────────────────────────────────────
settings = Settings()
