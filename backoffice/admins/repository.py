"""
Admin directory backends.

The directory is the lookup the login flow authenticates against. It is
injected wherever it is needed; there is no module-level admin list.
"""

import copy
from abc import ABC, abstractmethod
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from backoffice.utils import from_mongo


class AdminDirectory(ABC):
    """Storage contract for admin accounts keyed by string id."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[dict]:
        """Admin with this email (case-insensitive), or None."""

    @abstractmethod
    async def get(self, admin_id: str) -> Optional[dict]:
        """Admin by id, or None."""

    @abstractmethod
    async def list_all(self) -> list[dict]:
        """All admins in creation order."""

    @abstractmethod
    async def insert(self, admin: dict) -> dict:
        """Store a new admin (its `_id` is already set) and return it."""

    @abstractmethod
    async def update(self, admin_id: str, fields: dict) -> Optional[dict]:
        """Set `fields` on an admin and return the updated record."""

    @abstractmethod
    async def count(self) -> int:
        """Number of admins."""


class InMemoryAdminDirectory(AdminDirectory):
    def __init__(self, admins: list[dict] | None = None):
        self._admins: dict[str, dict] = {}
        for admin in admins or []:
            self._admins[admin["_id"]] = copy.deepcopy(admin)

    async def find_by_email(self, email: str) -> Optional[dict]:
        wanted = email.strip().lower()
        for admin in self._admins.values():
            if admin["email"].lower() == wanted:
                return copy.deepcopy(admin)
        return None

    async def get(self, admin_id: str) -> Optional[dict]:
        admin = self._admins.get(admin_id)
        return copy.deepcopy(admin) if admin else None

    async def list_all(self) -> list[dict]:
        return [copy.deepcopy(a) for a in self._admins.values()]

    async def insert(self, admin: dict) -> dict:
        self._admins[admin["_id"]] = copy.deepcopy(admin)
        return copy.deepcopy(admin)

    async def update(self, admin_id: str, fields: dict) -> Optional[dict]:
        admin = self._admins.get(admin_id)
        if admin is None:
            return None
        admin.update(copy.deepcopy(fields))
        return copy.deepcopy(admin)

    async def count(self) -> int:
        return len(self._admins)


class MongoAdminDirectory(AdminDirectory):
    """Collection: admins"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.admins = db["admins"]

    async def find_by_email(self, email: str) -> Optional[dict]:
        return from_mongo(await self.admins.find_one({"email": email.strip().lower()}))

    async def get(self, admin_id: str) -> Optional[dict]:
        if not ObjectId.is_valid(admin_id):
            return None
        return from_mongo(await self.admins.find_one({"_id": ObjectId(admin_id)}))

    async def list_all(self) -> list[dict]:
        cursor = self.admins.find({}).sort("_id", 1)
        return [from_mongo(doc) async for doc in cursor]

    async def insert(self, admin: dict) -> dict:
        doc = {**admin, "_id": ObjectId(admin["_id"])}
        await self.admins.insert_one(doc)
        return from_mongo(doc)

    async def update(self, admin_id: str, fields: dict) -> Optional[dict]:
        if not ObjectId.is_valid(admin_id):
            return None
        doc = await self.admins.find_one_and_update(
            {"_id": ObjectId(admin_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return from_mongo(doc)

    async def count(self) -> int:
        return await self.admins.count_documents({})
