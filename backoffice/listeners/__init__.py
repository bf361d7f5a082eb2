from .repository import ListenerRepository, InMemoryListenerRepository, MongoListenerRepository

__all__ = ["ListenerRepository", "InMemoryListenerRepository", "MongoListenerRepository"]
