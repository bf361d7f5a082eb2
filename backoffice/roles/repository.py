"""
Role storage backends.

RoleRepository is the contract the role service depends on. The in-memory
backend serves tests and local runs; the Mongo backend is used in
production. Both hand out copies, so a caller mutating a returned record
never changes what is stored.
"""

import copy
import re
from abc import ABC, abstractmethod
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from backoffice.utils import from_mongo


class RoleRepository(ABC):
    """Storage contract for role records keyed by string id."""

    @abstractmethod
    async def insert(self, role: dict) -> dict:
        """Store a new role (its `_id` is already set) and return it."""

    @abstractmethod
    async def get(self, role_id: str) -> Optional[dict]:
        """Role by id, or None."""

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[dict]:
        """Role whose name matches case-insensitively, or None."""

    @abstractmethod
    async def list_all(self) -> list[dict]:
        """All roles in insertion order."""

    @abstractmethod
    async def update(self, role_id: str, fields: dict) -> Optional[dict]:
        """Set `fields` on a role and return the updated record."""

    @abstractmethod
    async def delete(self, role_id: str) -> bool:
        """Remove a role; False when it did not exist."""

    @abstractmethod
    async def adjust_assigned(self, role_id: str, delta: int) -> None:
        """Change `assigned_to` by `delta`, never going below zero."""


class InMemoryRoleRepository(RoleRepository):
    def __init__(self):
        self._roles: dict[str, dict] = {}

    async def insert(self, role: dict) -> dict:
        self._roles[role["_id"]] = copy.deepcopy(role)
        return copy.deepcopy(role)

    async def get(self, role_id: str) -> Optional[dict]:
        role = self._roles.get(role_id)
        return copy.deepcopy(role) if role else None

    async def get_by_name(self, name: str) -> Optional[dict]:
        wanted = name.strip().lower()
        for role in self._roles.values():
            if role["name"].lower() == wanted:
                return copy.deepcopy(role)
        return None

    async def list_all(self) -> list[dict]:
        return [copy.deepcopy(r) for r in self._roles.values()]

    async def update(self, role_id: str, fields: dict) -> Optional[dict]:
        role = self._roles.get(role_id)
        if role is None:
            return None
        role.update(copy.deepcopy(fields))
        return copy.deepcopy(role)

    async def delete(self, role_id: str) -> bool:
        return self._roles.pop(role_id, None) is not None

    async def adjust_assigned(self, role_id: str, delta: int) -> None:
        role = self._roles.get(role_id)
        if role is not None:
            role["assigned_to"] = max(0, role.get("assigned_to", 0) + delta)


class MongoRoleRepository(RoleRepository):
    """Collection: roles"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.roles = db["roles"]

    async def insert(self, role: dict) -> dict:
        doc = {**role, "_id": ObjectId(role["_id"])}
        await self.roles.insert_one(doc)
        return from_mongo(doc)

    async def get(self, role_id: str) -> Optional[dict]:
        if not ObjectId.is_valid(role_id):
            return None
        return from_mongo(await self.roles.find_one({"_id": ObjectId(role_id)}))

    async def get_by_name(self, name: str) -> Optional[dict]:
        pattern = f"^{re.escape(name.strip())}$"
        doc = await self.roles.find_one({"name": {"$regex": pattern, "$options": "i"}})
        return from_mongo(doc)

    async def list_all(self) -> list[dict]:
        cursor = self.roles.find({}).sort("_id", 1)
        return [from_mongo(doc) async for doc in cursor]

    async def update(self, role_id: str, fields: dict) -> Optional[dict]:
        if not ObjectId.is_valid(role_id):
            return None
        doc = await self.roles.find_one_and_update(
            {"_id": ObjectId(role_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return from_mongo(doc)

    async def delete(self, role_id: str) -> bool:
        if not ObjectId.is_valid(role_id):
            return False
        result = await self.roles.delete_one({"_id": ObjectId(role_id)})
        return result.deleted_count > 0

    async def adjust_assigned(self, role_id: str, delta: int) -> None:
        if not ObjectId.is_valid(role_id):
            return
        filters: dict = {"_id": ObjectId(role_id)}
        if delta < 0:
            filters["assigned_to"] = {"$gte": -delta}
        await self.roles.update_one(filters, {"$inc": {"assigned_to": delta}})
