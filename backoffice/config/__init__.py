from .settings import Settings, settings
from .database import DatabaseManager

__all__ = ["Settings", "settings", "DatabaseManager"]
