from .repository import UserRepository, InMemoryUserRepository, MongoUserRepository

__all__ = ["UserRepository", "InMemoryUserRepository", "MongoUserRepository"]
