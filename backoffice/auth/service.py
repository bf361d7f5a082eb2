"""Admin authentication — login against the admin directory, open a timed session."""

from datetime import datetime, timezone
from typing import Optional

from backoffice.admins.repository import AdminDirectory
from backoffice.roles.service import RoleService
from backoffice.utils import AuthenticationError, Logger
from .helpers import create_access_token, verify_password
from .session import AdminSession, SessionManager

logger = Logger(__name__)


class AuthService:
    def __init__(
        self,
        admins: AdminDirectory,
        roles: RoleService,
        sessions: SessionManager,
        login_delay: float = 0.0,
    ):
        self.admins = admins
        self.roles = roles
        self.sessions = sessions
        self.login_delay = login_delay

    async def login(self, email: str, password: str) -> dict:
        """
        1. Wait out the login delay (state: authenticating).
        2. Find the admin by email; an empty password never matches.
        3. Verify the stored hash.
        4. Resolve the role's permission matrix (empty → deny all).
        5. Open the session, start its countdown, issue a JWT.
        """
        session = self.sessions.new_session()
        session.begin_authentication()
        try:
            await self.sessions.authentication_delay(self.login_delay)

            # ── 2. Directory lookup ──────────────────────────────
            admin = await self.admins.find_by_email(email or "")
            if not admin or not password:
                raise AuthenticationError("Invalid credentials")

            # ── 3. Password ──────────────────────────────────────
            if admin.get("password") and not verify_password(password, admin["password"]):
                raise AuthenticationError("Invalid credentials")

            # ── 4. Permissions ───────────────────────────────────
            permissions = await self.roles.resolve_permissions(
                admin.get("role"), admin.get("custom_role_id")
            )
        except BaseException:
            session.fail_authentication()
            logger.warning(f"Admin login failed for {email}")
            raise

        # ── 5. Session + token ───────────────────────────────────
        identity = {"id": admin["_id"], "name": admin.get("name"), "email": admin["email"]}
        await self.sessions.activate(session, identity, admin.get("role"), permissions)
        await self.admins.update(admin["_id"], {"last_login": datetime.now(timezone.utc)})

        token = create_access_token(
            data={
                "sub": admin["_id"],
                "sid": session.session_id,
                "role": admin.get("role"),
                "kind": "admin",
            }
        )
        return {
            "access_token": token,
            "token_type": "bearer",
            "session": session.snapshot(),
        }

    async def sync_session(self, session: AdminSession) -> Optional[AdminSession]:
        """
        Re-read the admin's role reference and apply it to the live session.

        A role reassignment or a custom role edit takes effect on the next
        request. An admin no longer in the directory loses the session.
        """
        admin = await self.admins.get(session.admin["id"]) if session.admin else None
        if admin is None:
            await self.sessions.logout(session.session_id)
            return None

        permissions = await self.roles.resolve_permissions(
            admin.get("role"), admin.get("custom_role_id")
        )
        await self.sessions.apply_role(session, admin.get("role"), permissions)
        return session

    async def logout(self, session_id: str) -> bool:
        return await self.sessions.logout(session_id)
