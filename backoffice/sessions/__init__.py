from .repository import SessionRepository, InMemorySessionRepository, MongoSessionRepository

__all__ = ["SessionRepository", "InMemorySessionRepository", "MongoSessionRepository"]
