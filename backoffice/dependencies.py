"""
FastAPI dependencies.

Services are built per request from the repositories and session manager
held on `app.state`; nothing here is a module-level singleton.
"""

from typing import Optional

from fastapi import Request

from backoffice.accounts.service import AccountService
from backoffice.admins.service import AdminService
from backoffice.auth.service import AuthService
from backoffice.auth.session import AdminSession, SessionManager
from backoffice.config import settings
from backoffice.container import Repositories
from backoffice.listeners.service import ListenerService
from backoffice.roles.service import RoleService
from backoffice.sessions.service import SessionService
from backoffice.users.service import UserService
from backoffice.utils import AuthenticationError


def get_repositories(request: Request) -> Repositories:
    return request.app.state.repositories


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_role_service(request: Request) -> RoleService:
    return RoleService(get_repositories(request).roles)


def get_admin_service(request: Request) -> AdminService:
    repos = get_repositories(request)
    return AdminService(repos.admins, RoleService(repos.roles))


def get_auth_service(request: Request) -> AuthService:
    repos = get_repositories(request)
    delay = getattr(request.app.state, "login_delay", settings.login_delay_seconds)
    return AuthService(
        repos.admins,
        RoleService(repos.roles),
        get_session_manager(request),
        login_delay=delay,
    )


def get_user_service(request: Request) -> UserService:
    repos = get_repositories(request)
    return UserService(repos.users, repos.sessions)


def get_session_service(request: Request) -> SessionService:
    repos = get_repositories(request)
    return SessionService(repos.sessions, repos.users)


def get_listener_service(request: Request) -> ListenerService:
    repos = get_repositories(request)
    return ListenerService(repos.listeners, repos.users)


def get_account_service(request: Request) -> AccountService:
    return AccountService(get_repositories(request).users)


def current_session(request: Request) -> AdminSession:
    """The admin session attached by the auth middleware."""
    session = getattr(request.state, "admin_session", None)
    if session is None or not session.is_authenticated:
        raise AuthenticationError("Not authenticated")
    return session


def current_admin_id(request: Request) -> Optional[str]:
    admin = getattr(request.state, "admin", None)
    return admin["id"] if admin else None
