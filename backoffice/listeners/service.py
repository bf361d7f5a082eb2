"""Listener management — promote users to listeners and manage their profiles."""

from datetime import datetime, timezone
from typing import Optional

from backoffice.users.repository import UserRepository
from backoffice.utils import (
    Logger,
    NotFoundError,
    ValidationError,
    new_object_id,
    page_window,
    serialize_mongo_doc,
)
from .repository import ListenerRepository

logger = Logger(__name__)

DEFAULT_COMMISSION = "20%"


def serialize_listener(listener: dict, user: Optional[dict] = None) -> dict:
    doc = serialize_mongo_doc(listener)
    data = {
        "id": doc["_id"],
        "userId": doc.get("user_id"),
        "expertise": doc.get("expertise", []),
        "experience": doc.get("experience", 0),
        "commission": doc.get("commission", DEFAULT_COMMISSION),
        "status": doc.get("status"),
        "createdAt": doc.get("created_at"),
        "updatedAt": doc.get("updated_at"),
    }
    if user:
        data["user"] = {
            "username": user.get("username"),
            "email": user.get("email"),
            "phone": f"{user.get('c_code') or ''} {user.get('phone_number') or ''}".strip(),
            "role": user.get("role"),
            "status": user.get("status"),
        }
    return data


class ListenerService:
    def __init__(self, listeners: ListenerRepository, users: UserRepository):
        self.listeners = listeners
        self.users = users

    async def promote(
        self,
        user_id: str,
        expertise: list[str],
        experience: int,
        commission: Optional[str] = None,
    ) -> dict:
        """Create a pending listener profile and switch the user's role."""
        user = await self.users.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        if await self.listeners.get_by_user(user_id):
            raise ValidationError("User is already a listener")

        now = datetime.now(timezone.utc)
        listener = await self.listeners.insert(
            {
                "_id": new_object_id(),
                "user_id": user_id,
                "expertise": expertise,
                "experience": experience,
                "commission": commission or DEFAULT_COMMISSION,
                "status": "pending",
                "created_at": now,
                "updated_at": now,
            }
        )
        await self.users.update(user_id, {"role": "listener", "updated_at": now})
        logger.info(f"User {user['username']} promoted to listener")
        return listener

    async def list_listeners(
        self, page: int, limit: int, status: Optional[str] = None
    ) -> tuple[list[dict], int]:
        rows = await self.listeners.list_page(status, page_window(page, limit), limit)
        return rows, await self.listeners.count(status)

    async def get_listener(self, listener_id: str) -> dict:
        listener = await self.listeners.get(listener_id)
        if not listener:
            raise NotFoundError("Listener not found")
        return listener

    async def user_for(self, listener: dict) -> Optional[dict]:
        return await self.users.get(listener["user_id"])

    async def update_listener(self, listener_id: str, fields: dict) -> dict:
        fields = {k: v for k, v in fields.items() if v is not None}
        fields["updated_at"] = datetime.now(timezone.utc)
        listener = await self.listeners.update(listener_id, fields)
        if not listener:
            raise NotFoundError("Listener not found")
        return listener

    async def remove_listener(self, listener_id: str) -> None:
        """Delete the profile and revert the user to a plain `user`."""
        listener = await self.get_listener(listener_id)
        if await self.users.get(listener["user_id"]):
            await self.users.update(
                listener["user_id"],
                {"role": "user", "updated_at": datetime.now(timezone.utc)},
            )
        await self.listeners.delete(listener_id)
        logger.info(f"Listener {listener_id} removed and reverted to user")
