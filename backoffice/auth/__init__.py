from .session import AdminSession, SessionCountdown, SessionManager, SessionState
from .store import InMemorySessionStore, MongoSessionStore, SessionStore

__all__ = [
    "AdminSession",
    "SessionCountdown",
    "SessionManager",
    "SessionState",
    "InMemorySessionStore",
    "MongoSessionStore",
    "SessionStore",
]
