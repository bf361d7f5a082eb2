import copy
from abc import ABC, abstractmethod
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from backoffice.utils import from_mongo


class ListenerRepository(ABC):
    """Listener profiles; one per user, linked through `user_id`."""

    @abstractmethod
    async def insert(self, listener: dict) -> dict: ...

    @abstractmethod
    async def get(self, listener_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def get_by_user(self, user_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def list_page(self, status: str | None, skip: int, limit: int) -> list[dict]:
        """Newest first."""

    @abstractmethod
    async def count(self, status: str | None = None) -> int: ...

    @abstractmethod
    async def update(self, listener_id: str, fields: dict) -> Optional[dict]: ...

    @abstractmethod
    async def delete(self, listener_id: str) -> bool: ...


class InMemoryListenerRepository(ListenerRepository):
    def __init__(self):
        self._listeners: dict[str, dict] = {}

    async def insert(self, listener: dict) -> dict:
        self._listeners[listener["_id"]] = copy.deepcopy(listener)
        return copy.deepcopy(listener)

    async def get(self, listener_id: str) -> Optional[dict]:
        listener = self._listeners.get(listener_id)
        return copy.deepcopy(listener) if listener else None

    async def get_by_user(self, user_id: str) -> Optional[dict]:
        for listener in self._listeners.values():
            if listener["user_id"] == user_id:
                return copy.deepcopy(listener)
        return None

    def _matching(self, status: str | None) -> list[dict]:
        return [
            row
            for row in self._listeners.values()
            if status is None or row["status"] == status
        ]

    async def list_page(self, status, skip, limit) -> list[dict]:
        # insertion order stands in for created_at
        rows = list(reversed(self._matching(status)))
        return [copy.deepcopy(row) for row in rows[skip : skip + limit]]

    async def count(self, status=None) -> int:
        return len(self._matching(status))

    async def update(self, listener_id: str, fields: dict) -> Optional[dict]:
        listener = self._listeners.get(listener_id)
        if listener is None:
            return None
        listener.update(copy.deepcopy(fields))
        return copy.deepcopy(listener)

    async def delete(self, listener_id: str) -> bool:
        return self._listeners.pop(listener_id, None) is not None


class MongoListenerRepository(ListenerRepository):
    """Collection: listeners"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.listeners = db["listeners"]

    async def insert(self, listener: dict) -> dict:
        doc = {**listener, "_id": ObjectId(listener["_id"])}
        await self.listeners.insert_one(doc)
        return from_mongo(doc)

    async def get(self, listener_id: str) -> Optional[dict]:
        if not ObjectId.is_valid(listener_id):
            return None
        return from_mongo(await self.listeners.find_one({"_id": ObjectId(listener_id)}))

    async def get_by_user(self, user_id: str) -> Optional[dict]:
        return from_mongo(await self.listeners.find_one({"user_id": user_id}))

    async def list_page(self, status, skip, limit) -> list[dict]:
        query = {"status": status} if status else {}
        cursor = self.listeners.find(query).sort("created_at", -1).skip(skip).limit(limit)
        return [from_mongo(doc) async for doc in cursor]

    async def count(self, status=None) -> int:
        return await self.listeners.count_documents({"status": status} if status else {})

    async def update(self, listener_id: str, fields: dict) -> Optional[dict]:
        if not ObjectId.is_valid(listener_id):
            return None
        doc = await self.listeners.find_one_and_update(
            {"_id": ObjectId(listener_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return from_mongo(doc)

    async def delete(self, listener_id: str) -> bool:
        if not ObjectId.is_valid(listener_id):
            return False
        result = await self.listeners.delete_one({"_id": ObjectId(listener_id)})
        return result.deleted_count > 0
