"""
Counseling session storage.

Records are keyed by `_id`; `session_id` is the unique business key used
by clients. Sort fields are stored snake_case.
"""

import copy
from abc import ABC, abstractmethod
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from backoffice.utils import from_mongo


class SessionRepository(ABC):
    @abstractmethod
    async def insert(self, session: dict) -> dict: ...

    @abstractmethod
    async def get(self, record_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def get_by_session_id(self, session_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def list_page(
        self, filters: dict, sort_by: str, descending: bool, skip: int, limit: int
    ) -> list[dict]: ...

    @abstractmethod
    async def count(self, filters: dict) -> int: ...

    @abstractmethod
    async def update(self, record_id: str, fields: dict) -> Optional[dict]: ...

    @abstractmethod
    async def delete(self, record_id: str) -> Optional[dict]:
        """Remove a record and return it, or None when absent."""

    @abstractmethod
    async def find_for_participant(self, user_id: str) -> list[dict]:
        """Sessions where the user is either the user or the listener."""

    @abstractmethod
    async def delete_many(self, record_ids: list[str]) -> int: ...


class InMemorySessionRepository(SessionRepository):
    def __init__(self):
        self._sessions: dict[str, dict] = {}

    async def insert(self, session: dict) -> dict:
        self._sessions[session["_id"]] = copy.deepcopy(session)
        return copy.deepcopy(session)

    async def get(self, record_id: str) -> Optional[dict]:
        session = self._sessions.get(record_id)
        return copy.deepcopy(session) if session else None

    async def get_by_session_id(self, session_id: str) -> Optional[dict]:
        for session in self._sessions.values():
            if session["session_id"] == session_id:
                return copy.deepcopy(session)
        return None

    def _matching(self, filters: dict) -> list[dict]:
        return [
            s
            for s in self._sessions.values()
            if all(s.get(k) == v for k, v in filters.items())
        ]

    async def list_page(self, filters, sort_by, descending, skip, limit) -> list[dict]:
        rows = sorted(
            self._matching(filters),
            key=lambda s: (s.get(sort_by) is not None, s.get(sort_by)),
            reverse=descending,
        )
        return [copy.deepcopy(s) for s in rows[skip : skip + limit]]

    async def count(self, filters: dict) -> int:
        return len(self._matching(filters))

    async def update(self, record_id: str, fields: dict) -> Optional[dict]:
        session = self._sessions.get(record_id)
        if session is None:
            return None
        session.update(copy.deepcopy(fields))
        return copy.deepcopy(session)

    async def delete(self, record_id: str) -> Optional[dict]:
        return self._sessions.pop(record_id, None)

    async def find_for_participant(self, user_id: str) -> list[dict]:
        return [
            copy.deepcopy(s)
            for s in self._sessions.values()
            if s.get("user") == user_id or s.get("listener") == user_id
        ]

    async def delete_many(self, record_ids: list[str]) -> int:
        return sum(1 for rid in record_ids if self._sessions.pop(rid, None) is not None)


class MongoSessionRepository(SessionRepository):
    """Collection: sessions"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.sessions = db["sessions"]

    async def insert(self, session: dict) -> dict:
        doc = {**session, "_id": ObjectId(session["_id"])}
        await self.sessions.insert_one(doc)
        return from_mongo(doc)

    async def get(self, record_id: str) -> Optional[dict]:
        if not ObjectId.is_valid(record_id):
            return None
        return from_mongo(await self.sessions.find_one({"_id": ObjectId(record_id)}))

    async def get_by_session_id(self, session_id: str) -> Optional[dict]:
        return from_mongo(await self.sessions.find_one({"session_id": session_id}))

    async def list_page(self, filters, sort_by, descending, skip, limit) -> list[dict]:
        cursor = (
            self.sessions.find(filters)
            .sort(sort_by, DESCENDING if descending else ASCENDING)
            .skip(skip)
            .limit(limit)
        )
        return [from_mongo(doc) async for doc in cursor]

    async def count(self, filters: dict) -> int:
        return await self.sessions.count_documents(filters)

    async def update(self, record_id: str, fields: dict) -> Optional[dict]:
        if not ObjectId.is_valid(record_id):
            return None
        doc = await self.sessions.find_one_and_update(
            {"_id": ObjectId(record_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return from_mongo(doc)

    async def delete(self, record_id: str) -> Optional[dict]:
        if not ObjectId.is_valid(record_id):
            return None
        return from_mongo(await self.sessions.find_one_and_delete({"_id": ObjectId(record_id)}))

    async def find_for_participant(self, user_id: str) -> list[dict]:
        cursor = self.sessions.find({"$or": [{"user": user_id}, {"listener": user_id}]})
        return [from_mongo(doc) async for doc in cursor]

    async def delete_many(self, record_ids: list[str]) -> int:
        ids = [ObjectId(r) for r in record_ids if ObjectId.is_valid(r)]
        if not ids:
            return 0
        result = await self.sessions.delete_many({"_id": {"$in": ids}})
        return result.deleted_count
