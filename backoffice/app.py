"""
Listener Marketplace Back Office — Main application.

Assembles all packages: config, middleware, admin auth, roles, admins,
accounts, users, sessions, listeners.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backoffice.auth import SessionManager
from backoffice.auth.store import SessionStore
from backoffice.config import DatabaseManager, Settings, settings as default_settings
from backoffice.container import Repositories
from backoffice.middleware import AuthPermissionMiddleware, RequestLoggingMiddleware
from backoffice.roles import RoleService
from backoffice.utils import Logger, configure_logging, error_response

# ── Route imports ────────────────────────────────────────────────
from backoffice.accounts.routes import accounts_router
from backoffice.admins.routes import admins_router, setup_router
from backoffice.auth.routes import auth_router
from backoffice.listeners.routes import listeners_router
from backoffice.roles.routes import roles_router
from backoffice.sessions.routes import sessions_router
from backoffice.users.routes import users_router

logger = Logger("app")


# ── Lifespan ─────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg: Settings = app.state.settings
    db_manager = None

    if app.state.repositories is None:
        db_manager = DatabaseManager(cfg.mongodb_atlas_uri, cfg.database_name)
        await db_manager.connect()
        app.state.repositories = Repositories.mongo(db_manager.database)
    app.state.db_manager = db_manager

    repos: Repositories = app.state.repositories
    await RoleService(repos.roles).ensure_system_roles()

    manager = SessionManager(
        app.state.session_store or repos.admin_sessions,
        timeout_seconds=cfg.session_timeout_seconds,
        tick_interval=cfg.session_tick_seconds,
    )
    await manager.restore()
    app.state.session_manager = manager

    yield

    await manager.shutdown()
    if db_manager:
        db_manager.close()


# ── App factory ──────────────────────────────────────────────────
def create_app(
    repositories: Repositories | None = None,
    session_store: SessionStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    cfg = settings or default_settings
    configure_logging(cfg.debug)

    app = FastAPI(
        title=cfg.app_name,
        version=cfg.app_version,
        description="Back office for a listener marketplace with role-based access",
        docs_url="/api/docs",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.repositories = repositories
    app.state.session_store = session_store
    app.state.login_delay = cfg.login_delay_seconds

    # ── Auth + RBAC middleware ───────────────────────────────
    app.add_middleware(AuthPermissionMiddleware)

    # ── Request logging (runs on every request) ──────────────
    app.add_middleware(RequestLoggingMiddleware)

    # ── CORS (outermost) ─────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_allowed_origins,
        allow_credentials=cfg.cors_allow_credentials,
        allow_methods=cfg.cors_allowed_methods,
        allow_headers=cfg.cors_allowed_headers,
    )

    # ── Error envelope ───────────────────────────────────────
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = error_response(str(exc.detail), code=exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    # ── Global exception handler ─────────────────────────────
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {
                    "code": 500,
                    "message": str(exc) if cfg.debug else "Internal server error",
                },
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    # ── Routes ───────────────────────────────────────────────
    app.include_router(accounts_router, prefix="/api", tags=["Accounts"])
    app.include_router(users_router, prefix="/api/users", tags=["Users"])
    app.include_router(sessions_router, prefix="/api/sessions", tags=["Sessions"])
    app.include_router(listeners_router, prefix="/api/listeners", tags=["Listeners"])
    app.include_router(auth_router, prefix="/api/admin/auth", tags=["Admin Authentication"])
    app.include_router(setup_router, prefix="/api/admin", tags=["Back Office Setup"])
    app.include_router(admins_router, prefix="/api/admin/admins", tags=["Admins"])
    app.include_router(roles_router, prefix="/api/admin/roles", tags=["Roles & Permissions"])

    # ── Health check ─────────────────────────────────────────
    @app.get("/health")
    async def health():
        db_manager = getattr(app.state, "db_manager", None)
        return {
            "status": "healthy",
            "app": cfg.app_name,
            "version": cfg.app_version,
            "database": db_manager.is_connected if db_manager else False,
            "adminSessions": len(app.state.session_manager),
        }

    return app


# ── Create the app instance ──────────────────────────────────────
app = create_app()
