from .repository import AdminDirectory, InMemoryAdminDirectory, MongoAdminDirectory

__all__ = ["AdminDirectory", "InMemoryAdminDirectory", "MongoAdminDirectory"]
