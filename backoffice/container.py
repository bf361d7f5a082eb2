"""
Storage wiring.

One `Repositories` bundle is built per application and kept on
`app.state.repositories`: Mongo-backed in production, in-memory for tests.
"""

from dataclasses import dataclass, field

from motor.motor_asyncio import AsyncIOMotorDatabase

from backoffice.admins import AdminDirectory, InMemoryAdminDirectory, MongoAdminDirectory
from backoffice.auth import InMemorySessionStore, MongoSessionStore, SessionStore
from backoffice.listeners import (
    InMemoryListenerRepository,
    ListenerRepository,
    MongoListenerRepository,
)
from backoffice.roles import InMemoryRoleRepository, MongoRoleRepository, RoleRepository
from backoffice.sessions import (
    InMemorySessionRepository,
    MongoSessionRepository,
    SessionRepository,
)
from backoffice.users import InMemoryUserRepository, MongoUserRepository, UserRepository


@dataclass
class Repositories:
    roles: RoleRepository
    admins: AdminDirectory
    users: UserRepository
    sessions: SessionRepository
    listeners: ListenerRepository
    admin_sessions: SessionStore = field(default_factory=InMemorySessionStore)

    @classmethod
    def in_memory(cls) -> "Repositories":
        return cls(
            roles=InMemoryRoleRepository(),
            admins=InMemoryAdminDirectory(),
            users=InMemoryUserRepository(),
            sessions=InMemorySessionRepository(),
            listeners=InMemoryListenerRepository(),
            admin_sessions=InMemorySessionStore(),
        )

    @classmethod
    def mongo(cls, db: AsyncIOMotorDatabase) -> "Repositories":
        return cls(
            roles=MongoRoleRepository(db),
            admins=MongoAdminDirectory(db),
            users=MongoUserRepository(db),
            sessions=MongoSessionRepository(db),
            listeners=MongoListenerRepository(db),
            admin_sessions=MongoSessionStore(db),
        )
