"""
Admin session + permission middleware.

Runs on every request (except PUBLIC_ROUTES):
  1. Decode the bearer JWT → admin id + session id
  2. Look up the live admin session; a missing/expired one is a 401
  3. Reset the session countdown (activity)
  4. Re-read the admin's role so reassignments and role edits apply at once
  5. Set request.state.admin, request.state.role, request.state.permissions
  6. Check the permission matrix for the target route
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from backoffice.auth.helpers import decode_access_token
from backoffice.dependencies import get_auth_service
from backoffice.rbac.permissions import (
    has_action_permission,
    resolve_permission_from_request,
)
from backoffice.utils import AuthenticationError, Logger, error_response

logger = Logger("request")

# Routes that skip all auth / permission checks
PUBLIC_ROUTES = [
    "/api/register",
    "/api/login",
    "/api/admin/auth/login",
    "/api/admin/set-up",
    "/health",
    "/openapi.json",
    "/api/docs",
    "/redoc",
]


class AuthPermissionMiddleware(BaseHTTPMiddleware):
    """Single middleware that handles admin session verification + RBAC enforcement."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        # ── Skip preflight and public routes ─────────────────────
        if request.method == "OPTIONS" or any(
            path == route or path.startswith(route + "/") for route in PUBLIC_ROUTES
        ):
            return await call_next(request)

        # ── Extract & decode JWT ─────────────────────────────────
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return error_response("Missing Authorization header", code=401)

        if not auth_header.startswith("Bearer "):
            return error_response(
                "Invalid token format. Expected 'Bearer <token>'", code=401
            )

        token = auth_header.split(" ", 1)[1].strip()
        try:
            payload = decode_access_token(token)
        except AuthenticationError as e:
            return error_response(e.detail, code=401)

        if payload.get("kind") != "admin":
            return error_response("Admin session required", code=401)

        # ── Live session + activity reset ────────────────────────
        manager = request.app.state.session_manager
        session = await manager.touch(payload.get("sid"))
        if session is None:
            return error_response("Session expired", code=401)

        # ── Current role (reassignments and role edits apply at once) ──
        session = await get_auth_service(request).sync_session(session)
        if session is None:
            return error_response("Session expired", code=401)

        request.state.admin_session = session
        request.state.admin = session.admin
        request.state.role = session.role
        request.state.permissions = session.permissions

        # ── RBAC check ───────────────────────────────────────────
        required = resolve_permission_from_request(request)
        if required and not has_action_permission(session.permissions, *required):
            module, action = required
            return error_response(
                f"Permission denied. Requires: {module}.{action}", code=403
            )

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request: method, path, status code, and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "unknown"

        logger.info(f"--> {method} {path} (from {client})")

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = round((time.time() - start) * 1000, 2)
            logger.error(f"<-- {method} {path} | 500 | {duration}ms")
            logger.exception(f"    Exception: {exc}")
            raise

        duration = round((time.time() - start) * 1000, 2)
        status = response.status_code

        if status >= 500:
            logger.error(f"<-- {method} {path} | {status} | {duration}ms")
        elif status >= 400:
            logger.warning(f"<-- {method} {path} | {status} | {duration}ms")
        else:
            logger.info(f"<-- {method} {path} | {status} | {duration}ms")

        return response
