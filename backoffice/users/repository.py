"""
Marketplace user storage.

Users reference their counseling sessions by id in `sessions`; the session
store keeps the opposite link (`user` / `listener`).
"""

import copy
from abc import ABC, abstractmethod
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from backoffice.utils import from_mongo


class UserRepository(ABC):
    @abstractmethod
    async def insert(self, user: dict) -> dict: ...

    @abstractmethod
    async def get(self, user_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[dict]: ...

    @abstractmethod
    async def find_conflict(
        self, email: str | None, username: str | None, exclude_id: str | None = None
    ) -> Optional[dict]:
        """Another user holding this email or username."""

    @abstractmethod
    async def list_page(self, role: str | None, skip: int, limit: int) -> list[dict]: ...

    @abstractmethod
    async def count(self, role: str | None = None) -> int: ...

    @abstractmethod
    async def update(self, user_id: str, fields: dict) -> Optional[dict]: ...

    @abstractmethod
    async def delete(self, user_id: str) -> bool: ...

    @abstractmethod
    async def push_session(self, user_id: str, session_id: str) -> None: ...

    @abstractmethod
    async def pull_sessions(self, user_ids: list[str], session_ids: list[str]) -> None: ...


class InMemoryUserRepository(UserRepository):
    def __init__(self):
        self._users: dict[str, dict] = {}

    async def insert(self, user: dict) -> dict:
        self._users[user["_id"]] = copy.deepcopy(user)
        return copy.deepcopy(user)

    async def get(self, user_id: str) -> Optional[dict]:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    async def find_by_email(self, email: str) -> Optional[dict]:
        for user in self._users.values():
            if user["email"] == email:
                return copy.deepcopy(user)
        return None

    async def find_conflict(self, email, username, exclude_id=None) -> Optional[dict]:
        for user in self._users.values():
            if user["_id"] == exclude_id:
                continue
            if (email and user["email"] == email) or (username and user["username"] == username):
                return copy.deepcopy(user)
        return None

    def _matching(self, role: str | None) -> list[dict]:
        return [u for u in self._users.values() if role is None or u.get("role") == role]

    async def list_page(self, role, skip, limit) -> list[dict]:
        return [copy.deepcopy(u) for u in self._matching(role)[skip : skip + limit]]

    async def count(self, role=None) -> int:
        return len(self._matching(role))

    async def update(self, user_id: str, fields: dict) -> Optional[dict]:
        user = self._users.get(user_id)
        if user is None:
            return None
        user.update(copy.deepcopy(fields))
        return copy.deepcopy(user)

    async def delete(self, user_id: str) -> bool:
        return self._users.pop(user_id, None) is not None

    async def push_session(self, user_id: str, session_id: str) -> None:
        user = self._users.get(user_id)
        if user is not None:
            user.setdefault("sessions", []).append(session_id)

    async def pull_sessions(self, user_ids: list[str], session_ids: list[str]) -> None:
        drop = set(session_ids)
        for user_id in user_ids:
            user = self._users.get(user_id)
            if user is not None:
                user["sessions"] = [s for s in user.get("sessions", []) if s not in drop]


class MongoUserRepository(UserRepository):
    """Collection: users"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.users = db["users"]

    async def insert(self, user: dict) -> dict:
        doc = {**user, "_id": ObjectId(user["_id"])}
        await self.users.insert_one(doc)
        return from_mongo(doc)

    async def get(self, user_id: str) -> Optional[dict]:
        if not ObjectId.is_valid(user_id):
            return None
        return from_mongo(await self.users.find_one({"_id": ObjectId(user_id)}))

    async def find_by_email(self, email: str) -> Optional[dict]:
        return from_mongo(await self.users.find_one({"email": email}))

    async def find_conflict(self, email, username, exclude_id=None) -> Optional[dict]:
        clauses = []
        if email:
            clauses.append({"email": email})
        if username:
            clauses.append({"username": username})
        if not clauses:
            return None
        query: dict = {"$or": clauses}
        if exclude_id and ObjectId.is_valid(exclude_id):
            query["_id"] = {"$ne": ObjectId(exclude_id)}
        return from_mongo(await self.users.find_one(query))

    async def list_page(self, role, skip, limit) -> list[dict]:
        query = {"role": role} if role else {}
        cursor = self.users.find(query).sort("_id", 1).skip(skip).limit(limit)
        return [from_mongo(doc) async for doc in cursor]

    async def count(self, role=None) -> int:
        return await self.users.count_documents({"role": role} if role else {})

    async def update(self, user_id: str, fields: dict) -> Optional[dict]:
        if not ObjectId.is_valid(user_id):
            return None
        doc = await self.users.find_one_and_update(
            {"_id": ObjectId(user_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return from_mongo(doc)

    async def delete(self, user_id: str) -> bool:
        if not ObjectId.is_valid(user_id):
            return False
        result = await self.users.delete_one({"_id": ObjectId(user_id)})
        return result.deleted_count > 0

    async def push_session(self, user_id: str, session_id: str) -> None:
        if ObjectId.is_valid(user_id):
            await self.users.update_one(
                {"_id": ObjectId(user_id)}, {"$push": {"sessions": session_id}}
            )

    async def pull_sessions(self, user_ids: list[str], session_ids: list[str]) -> None:
        ids = [ObjectId(u) for u in user_ids if ObjectId.is_valid(u)]
        if ids and session_ids:
            await self.users.update_many(
                {"_id": {"$in": ids}},
                {"$pull": {"sessions": {"$in": session_ids}}},
            )
