"""Counseling session management — create, list, edit, end and delete sessions."""

from datetime import datetime, timezone
from typing import Optional

from backoffice.users.repository import UserRepository
from backoffice.utils import (
    ConflictError,
    Logger,
    NotFoundError,
    ValidationError,
    new_object_id,
    page_window,
    parse_object_id,
    serialize_mongo_doc,
)
from .repository import SessionRepository

logger = Logger(__name__)

REQUIRED_FIELDS = {
    "session_id": "sessionId",
    "user": "user",
    "listener": "listener",
    "type": "type",
    "start_time": "startTime",
    "amount": "amount",
}

# API sort key → stored field
SORT_FIELDS: dict[str, str] = {
    "startTime": "start_time",
    "sessionId": "session_id",
    "type": "type",
    "amount": "amount",
    "durationInMinutes": "duration_in_minutes",
    "status": "status",
    "paymentStatus": "payment_status",
    "createdAt": "created_at",
}

FILTER_FIELDS: dict[str, str] = {
    "status": "status",
    "type": "type",
    "paymentStatus": "payment_status",
}


def serialize_session(session: dict, usernames: dict[str, str] | None = None) -> dict:
    """Session record → table row, participants shown by username."""
    names = usernames or {}
    doc = serialize_mongo_doc(session)
    return {
        "id": doc["_id"],
        "sessionId": doc.get("session_id"),
        "user": names.get(doc.get("user")) or "N/A",
        "listener": names.get(doc.get("listener")) or "N/A",
        "type": doc.get("type"),
        "startTime": doc.get("start_time"),
        "duration": f"{doc.get('duration_in_minutes', 0)} min",
        "status": doc.get("status"),
        "payment": doc.get("payment_status"),
        "amount": doc.get("amount"),
    }


class SessionService:
    def __init__(self, sessions: SessionRepository, users: UserRepository):
        self.sessions = sessions
        self.users = users

    async def usernames_for(self, sessions: list[dict]) -> dict[str, str]:
        """user id → username for every participant of `sessions`."""
        ids = {s.get(k) for s in sessions for k in ("user", "listener") if s.get(k)}
        names = {}
        for user_id in ids:
            user = await self.users.get(user_id)
            if user:
                names[user_id] = user.get("username")
        return names

    async def get_session(self, record_id: str) -> dict:
        session = await self.sessions.get(record_id)
        if not session:
            raise NotFoundError("Session not found")
        return session

    async def create_session(self, data: dict) -> dict:
        missing = [api for field, api in REQUIRED_FIELDS.items() if data.get(field) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        user_id = parse_object_id(data["user"], "user ID")
        listener_id = parse_object_id(data["listener"], "listener ID")

        if await self.sessions.get_by_session_id(data["session_id"]):
            raise ConflictError("A session with this 'sessionId' already exists.")

        now = datetime.now(timezone.utc)
        session = await self.sessions.insert(
            {
                **data,
                "_id": new_object_id(),
                "user": user_id,
                "listener": listener_id,
                "created_at": now,
                "updated_at": now,
            }
        )
        await self.users.push_session(user_id, session["_id"])
        await self.users.push_session(listener_id, session["_id"])
        logger.info(f"Session {session['session_id']} created")
        return session

    async def list_sessions(
        self,
        page: int,
        limit: int,
        filters: Optional[dict] = None,
        sort_by: str = "startTime",
        order: str = "desc",
    ) -> tuple[list[dict], int]:
        if sort_by not in SORT_FIELDS:
            raise ValidationError(f"Cannot sort by '{sort_by}'")

        query = {
            FILTER_FIELDS[k]: v for k, v in (filters or {}).items() if k in FILTER_FIELDS and v
        }
        rows = await self.sessions.list_page(
            query,
            SORT_FIELDS[sort_by],
            descending=order != "asc",
            skip=page_window(page, limit),
            limit=limit,
        )
        total = await self.sessions.count(query)
        return rows, total

    async def update_session(self, record_id: str, fields: dict) -> dict:
        fields = {k: v for k, v in fields.items() if v is not None}
        fields["updated_at"] = datetime.now(timezone.utc)
        updated = await self.sessions.update(record_id, fields)
        if not updated:
            raise NotFoundError("Session not found, update failed")
        return updated

    async def end_session(self, record_id: str) -> dict:
        """Mark a session completed."""
        await self.get_session(record_id)
        ended = await self.sessions.update(
            record_id,
            {"status": "completed", "updated_at": datetime.now(timezone.utc)},
        )
        logger.info(f"Session {ended['session_id']} ended")
        return ended

    async def delete_session(self, record_id: str) -> dict:
        deleted = await self.sessions.delete(record_id)
        if not deleted:
            raise NotFoundError("Session not found, delete failed")

        participants = [p for p in (deleted.get("user"), deleted.get("listener")) if p]
        await self.users.pull_sessions(participants, [deleted["_id"]])
        logger.info(f"Session {deleted['session_id']} deleted")
        return deleted
