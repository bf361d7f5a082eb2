"""User management — list, view, edit and delete marketplace users."""

from datetime import datetime, timezone

from backoffice.auth.helpers import hash_password
from backoffice.sessions.repository import SessionRepository
from backoffice.utils import (
    ConflictError,
    Logger,
    NotFoundError,
    ValidationError,
    page_window,
    serialize_mongo_doc,
)
from .repository import UserRepository

logger = Logger(__name__)


def serialize_user(user: dict, include_role: bool = True) -> dict:
    """User record → safe API shape (no password)."""
    doc = serialize_mongo_doc(user)
    phone = f"{doc.get('c_code') or ''} {doc.get('phone_number') or ''}".strip()
    data = {
        "id": doc["_id"],
        "userId": doc.get("username"),
        "alias": doc.get("username"),
        "contact": {"email": doc.get("email"), "phone": phone},
        "status": doc.get("status"),
        "wallet": 0.0,
        "sessions": len(doc.get("sessions") or []),
        "registered": doc.get("registered"),
        "lastActive": doc.get("last_active"),
    }
    if include_role:
        data["role"] = doc.get("role")
    return data


class UserService:
    def __init__(self, users: UserRepository, sessions: SessionRepository):
        self.users = users
        self.sessions = sessions

    async def list_users(self, page: int, limit: int) -> tuple[list[dict], int]:
        """Page of plain `user` accounts plus the total count."""
        rows = await self.users.list_page("user", page_window(page, limit), limit)
        total = await self.users.count("user")
        return rows, total

    async def get_user(self, user_id: str) -> dict:
        user = await self.users.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_user(self, user_id: str, fields: dict) -> dict:
        """
        Apply a partial update.

        A whitespace-only password is rejected; an empty one is ignored;
        anything else is re-hashed. Email/username must stay unique.
        """
        fields = {k: v for k, v in fields.items() if v is not None}

        password = fields.pop("password", None)
        if password:
            if not password.strip():
                raise ValidationError("Password cannot be empty")
            fields["password"] = hash_password(password)

        # stored emails are lowercase; register and login match on that
        if fields.get("email"):
            fields["email"] = fields["email"].strip().lower()

        email, username = fields.get("email"), fields.get("username")
        if email or username:
            clash = await self.users.find_conflict(email, username, exclude_id=user_id)
            if clash:
                if email and clash["email"] == email:
                    raise ConflictError("Another user with this email already exists")
                raise ConflictError("Another user with this username already exists")

        fields["updated_at"] = datetime.now(timezone.utc)
        updated = await self.users.update(user_id, fields)
        if not updated:
            raise NotFoundError("User not found, update failed")
        return updated

    async def delete_user(self, user_id: str) -> dict:
        """
        Delete a user together with every session they took part in.

        Steps run as independent writes:
          1. Find sessions where the user is the user or the listener
          2. Pull those session ids from the counterpart users
          3. Delete the sessions
          4. Delete the user
        A failure part-way leaves the earlier writes in place.
        """
        if not await self.users.get(user_id):
            raise NotFoundError("User not found, delete failed")

        doomed = await self.sessions.find_for_participant(user_id)
        removed = 0
        if doomed:
            session_ids = [s["_id"] for s in doomed]
            counterparts: set[str] = set()
            for s in doomed:
                other = s["user"] if s.get("user") != user_id else s.get("listener")
                if other:
                    counterparts.add(other)

            await self.users.pull_sessions(sorted(counterparts), session_ids)
            removed = await self.sessions.delete_many(session_ids)

        if not await self.users.delete(user_id):
            raise NotFoundError("User not found, delete failed")

        logger.info(f"User {user_id} deleted with {removed} session(s)")
        return {"deletedSessions": removed}
