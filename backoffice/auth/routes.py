from fastapi import APIRouter, Depends

from backoffice.dependencies import current_session, get_auth_service, get_session_manager
from backoffice.utils import success_response
from .schemas import AdminLoginRequest
from .service import AuthService
from .session import AdminSession, SessionManager

auth_router = APIRouter()


@auth_router.post("/login")
async def login(
    body: AdminLoginRequest,
    svc: AuthService = Depends(get_auth_service),
):
    """Authenticate an admin and open a timed session."""
    result = await svc.login(email=body.email, password=body.password)
    return success_response(data=result, message="Login successful")


@auth_router.post("/logout")
async def logout(
    session: AdminSession = Depends(current_session),
    svc: AuthService = Depends(get_auth_service),
):
    await svc.logout(session.session_id)
    return success_response(message="Logged out")


@auth_router.get("/session")
async def get_session(session: AdminSession = Depends(current_session)):
    """State, remaining seconds, role and permission matrix of the caller's session."""
    return success_response(data=session.snapshot())


@auth_router.post("/session/refresh")
async def refresh_session(
    session: AdminSession = Depends(current_session),
    manager: SessionManager = Depends(get_session_manager),
):
    refreshed = await manager.touch(session.session_id)
    return success_response(data=refreshed.snapshot(), message="Session refreshed")
