"""Marketplace account registration and login."""

from datetime import datetime, timezone

from backoffice.auth.helpers import create_access_token, hash_password, verify_password
from backoffice.users.repository import UserRepository
from backoffice.users.service import serialize_user
from backoffice.utils import AuthenticationError, ConflictError, Logger, new_object_id

logger = Logger(__name__)


class AccountService:
    def __init__(self, users: UserRepository):
        self.users = users

    async def register(
        self, email: str, username: str, password: str, c_code: str, phone_number: str
    ) -> dict:
        email = email.strip().lower()
        username = username.strip()
        clash = await self.users.find_conflict(email, username)
        if clash:
            if clash["email"] == email:
                raise ConflictError("User with this email already exists")
            raise ConflictError("Username is already taken")

        now = datetime.now(timezone.utc)
        user = await self.users.insert(
            {
                "_id": new_object_id(),
                "email": email,
                "username": username,
                "password": hash_password(password),
                "role": "user",
                "c_code": c_code,
                "phone_number": phone_number,
                "status": "active",
                "registered": now,
                "last_active": None,
                "sessions": [],
                "tickets": [],
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info(f"Account registered: {username}")
        return user

    async def login(self, email: str, password: str) -> dict:
        user = await self.users.find_by_email(email.strip().lower())
        if not user or not verify_password(password, user.get("password", "")):
            raise AuthenticationError("Invalid credentials")

        now = datetime.now(timezone.utc)
        user = await self.users.update(user["_id"], {"last_active": now})
        token = create_access_token(
            data={"sub": user["_id"], "role": user.get("role"), "kind": "account"}
        )
        return {
            "access_token": token,
            "token_type": "bearer",
            "user": serialize_user(user),
        }
