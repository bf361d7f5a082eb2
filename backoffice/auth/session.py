"""
Admin session lifecycle.

    logged_out → authenticating → authenticated → (expired | logged_out)

An authenticated session owns a SessionCountdown that ticks once per
interval. Reaching zero expires the session; logging out ends it the same
way (timer cancelled, credentials cleared, stored record removed).
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from backoffice.rbac import accessible_modules
from backoffice.utils import Logger
from .store import SessionStore

logger = Logger(__name__)


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Mongo hands back naive datetimes that are already UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SessionCountdown:
    """
    Cancellable countdown bound to one session.

    `tick()` is the unit of progress; `start()` drives it from an asyncio
    task every `interval` seconds. `on_expire` fires exactly once.
    """

    def __init__(
        self,
        duration: int,
        on_expire: Callable[[], Any],
        interval: float = 1.0,
    ):
        self.duration = duration
        self.remaining = duration
        self.interval = interval
        self._on_expire = on_expire
        self._expired = False
        self._task: Optional[asyncio.Task] = None

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> int:
        if self._expired:
            return 0
        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self._expired = True
            self._on_expire()
        return self.remaining

    def reset(self) -> None:
        if not self._expired:
            self.remaining = self.duration

    def start(self) -> None:
        if not self.running and not self._expired:
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while not self._expired:
            await asyncio.sleep(self.interval)
            self.tick()

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()


class AdminSession:
    """One admin's session: identity, role, permission matrix and countdown."""

    def __init__(
        self,
        session_id: str | None = None,
        *,
        timeout_seconds: int = 30 * 60,
        tick_interval: float = 1.0,
        on_end: Callable[["AdminSession", str], Any] | None = None,
    ):
        self.session_id = session_id or uuid4().hex
        self.state = SessionState.LOGGED_OUT
        self.admin: dict | None = None
        self.role: str | None = None
        self.permissions: dict = {}
        self.expires_at: datetime | None = None
        self.countdown: SessionCountdown | None = None
        self._timeout = timeout_seconds
        self._interval = tick_interval
        self._on_end = on_end

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def remaining_seconds(self) -> int:
        return self.countdown.remaining if self.countdown and self.is_authenticated else 0

    # ── Transitions ──────────────────────────────────────────────
    def begin_authentication(self) -> None:
        if self.state == SessionState.AUTHENTICATED:
            raise RuntimeError("Session is already authenticated")
        self.state = SessionState.AUTHENTICATING

    def fail_authentication(self) -> None:
        if self.state == SessionState.AUTHENTICATING:
            self.state = SessionState.LOGGED_OUT

    def establish(
        self,
        admin: dict,
        role: str | None,
        permissions: dict,
        remaining: int | None = None,
    ) -> None:
        """Enter `authenticated` with a fresh (or restored) countdown."""
        self.admin = admin
        self.role = role
        self.permissions = permissions
        self.countdown = SessionCountdown(self._timeout, self._expire, self._interval)
        if remaining is not None:
            self.countdown.remaining = max(1, min(remaining, self._timeout))
        self.expires_at = _utcnow() + timedelta(seconds=self.countdown.remaining)
        self.state = SessionState.AUTHENTICATED

    def start_timer(self) -> None:
        if self.countdown and self.is_authenticated:
            self.countdown.start()

    def tick(self) -> int:
        return self.countdown.tick() if self.countdown and self.is_authenticated else 0

    def reset_session_timeout(self) -> None:
        """Restart the countdown at full duration (called on admin activity)."""
        if self.countdown and self.is_authenticated:
            self.countdown.reset()
            self.expires_at = _utcnow() + timedelta(seconds=self.countdown.remaining)

    def logout(self) -> None:
        self._end(SessionState.LOGGED_OUT, "logout")

    def close(self) -> None:
        """Tear down the timer without ending the session (process shutdown)."""
        if self.countdown:
            self.countdown.cancel()

    def _expire(self) -> None:
        self._end(SessionState.EXPIRED, "expired")

    def _end(self, state: SessionState, reason: str) -> None:
        if self.state != SessionState.AUTHENTICATED:
            return
        if self.countdown:
            self.countdown.cancel()
        self.admin = None
        self.role = None
        self.permissions = {}
        self.expires_at = None
        self.state = state
        if self._on_end:
            self._on_end(self, reason)

    # ── Views ────────────────────────────────────────────────────
    def to_record(self) -> dict:
        """Persisted shape: identity, role, matrix and absolute expiry."""
        return {
            "session_id": self.session_id,
            "admin_id": self.admin["id"] if self.admin else None,
            "admin_name": self.admin["name"] if self.admin else None,
            "admin_email": self.admin["email"] if self.admin else None,
            "role": self.role,
            "permissions": self.permissions,
            "expires_at": self.expires_at,
        }

    def snapshot(self) -> dict:
        return {
            "sessionId": self.session_id,
            "state": self.state.value,
            "isAuthenticated": self.is_authenticated,
            "admin": self.admin,
            "role": self.role,
            "permissions": self.permissions,
            "modules": accessible_modules(self.permissions),
            "sessionTimeout": self.remaining_seconds,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
        }


class SessionManager:
    """
    Registry of live admin sessions.

    Owned by the application (app.state), started and shut down by the
    lifespan. Expired sessions remove themselves; their stored records are
    deleted in the background.
    """

    def __init__(
        self,
        store: SessionStore,
        timeout_seconds: int = 30 * 60,
        tick_interval: float = 1.0,
    ):
        self.store = store
        self.timeout_seconds = timeout_seconds
        self.tick_interval = tick_interval
        self._sessions: dict[str, AdminSession] = {}
        self._background: set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._sessions)

    def new_session(self) -> AdminSession:
        return AdminSession(
            timeout_seconds=self.timeout_seconds,
            tick_interval=self.tick_interval,
            on_end=self._session_ended,
        )

    def _track(self, aw: Awaitable) -> asyncio.Task:
        task = asyncio.ensure_future(aw)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def authentication_delay(self, seconds: float) -> None:
        """Artificial login wait; cancelled if the manager shuts down meanwhile."""
        if seconds > 0:
            await self._track(asyncio.sleep(seconds))

    async def activate(
        self, session: AdminSession, admin: dict, role: str | None, permissions: dict
    ) -> AdminSession:
        session.establish(admin, role, permissions)
        await self.store.save(session.to_record())
        self._sessions[session.session_id] = session
        session.start_timer()
        logger.info(f"Admin session opened for {admin['email']} ({role})")
        return session

    def get(self, session_id: str | None) -> Optional[AdminSession]:
        session = self._sessions.get(session_id) if session_id else None
        return session if session and session.is_authenticated else None

    async def touch(self, session_id: str) -> Optional[AdminSession]:
        """Reset the countdown of a live session and persist the new expiry."""
        session = self.get(session_id)
        if session is None:
            return None
        session.reset_session_timeout()
        await self.store.save(session.to_record())
        return session

    async def apply_role(
        self, session: AdminSession, role: str | None, permissions: dict
    ) -> bool:
        """Swap in the admin's current role and matrix; False when unchanged."""
        if not session.is_authenticated:
            return False
        if session.role == role and session.permissions == permissions:
            return False
        previous = session.role
        session.role = role
        session.permissions = permissions
        await self.store.save(session.to_record())
        logger.info(
            f"Admin session {session.session_id} now holds '{role}' (was '{previous}')"
        )
        return True

    async def logout(self, session_id: str) -> bool:
        session = self.get(session_id)
        if session is None:
            return False
        email = session.admin["email"] if session.admin else "unknown"
        session.logout()
        await self.store.delete(session_id)
        logger.info(f"Admin session closed for {email}")
        return True

    def _session_ended(self, session: AdminSession, reason: str) -> None:
        self._sessions.pop(session.session_id, None)
        if reason == "expired":
            logger.info(f"Admin session {session.session_id} expired")
            self._track(self.store.delete(session.session_id))

    async def restore(self) -> int:
        """Reload persisted sessions; records already past expiry are dropped."""
        now = _utcnow()
        restored = 0
        for record in await self.store.load_all():
            expires_at = record.get("expires_at")
            remaining = (
                int((_as_utc(expires_at) - now).total_seconds()) if expires_at else 0
            )
            if remaining <= 0:
                await self.store.delete(record["session_id"])
                continue

            session = AdminSession(
                record["session_id"],
                timeout_seconds=self.timeout_seconds,
                tick_interval=self.tick_interval,
                on_end=self._session_ended,
            )
            admin = {
                "id": record.get("admin_id"),
                "name": record.get("admin_name"),
                "email": record.get("admin_email"),
            }
            session.establish(admin, record.get("role"), record.get("permissions") or {}, remaining)
            self._sessions[session.session_id] = session
            session.start_timer()
            restored += 1

        if restored:
            logger.info(f"Restored {restored} admin session(s)")
        return restored

    async def shutdown(self) -> None:
        """Cancel every timer and pending login wait; stored sessions are kept."""
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()

        pending = [t for t in self._background if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
