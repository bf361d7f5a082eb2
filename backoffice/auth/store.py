"""
Durable admin-session storage.

Each live admin session is persisted as one record carrying an absolute
`expires_at`, so sessions survive a process restart. Records whose expiry
has passed are discarded on restore.
"""

import copy
from abc import ABC, abstractmethod

from motor.motor_asyncio import AsyncIOMotorDatabase


class SessionStore(ABC):
    @abstractmethod
    async def save(self, record: dict) -> None:
        """Insert or replace the record for record['session_id']."""

    @abstractmethod
    async def load_all(self) -> list[dict]:
        """Every stored record, expired ones included."""

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Forget a session; a missing id is not an error."""


class InMemorySessionStore(SessionStore):
    def __init__(self):
        self._records: dict[str, dict] = {}

    async def save(self, record: dict) -> None:
        self._records[record["session_id"]] = copy.deepcopy(record)

    async def load_all(self) -> list[dict]:
        return [copy.deepcopy(r) for r in self._records.values()]

    async def delete(self, session_id: str) -> None:
        self._records.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._records


class MongoSessionStore(SessionStore):
    """Collection: admin_sessions"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.sessions = db["admin_sessions"]

    async def save(self, record: dict) -> None:
        await self.sessions.replace_one(
            {"session_id": record["session_id"]}, record, upsert=True
        )

    async def load_all(self) -> list[dict]:
        records = []
        async for doc in self.sessions.find({}):
            doc.pop("_id", None)
            records.append(doc)
        return records

    async def delete(self, session_id: str) -> None:
        await self.sessions.delete_one({"session_id": session_id})
