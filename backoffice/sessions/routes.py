"""
Counseling session routes.

Endpoints:
    POST   /                 Create a session (pushed onto both participants)
    GET    /                 List (?status, ?type, ?paymentStatus, ?sortBy, ?order)
    GET    /{id}             Single session
    PUT    /{id}             Edit
    POST   /{id}/end         Mark completed (sessionManagement.endSession)
    DELETE /{id}             Delete (pulled from both participants)
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request

from backoffice.config import settings
from backoffice.dependencies import get_session_service
from backoffice.rbac.decorators import require_permission
from backoffice.utils import paginated_response, parse_object_id, success_response
from .schemas import (
    CreateSessionRequest,
    PaymentStatus,
    SessionStatus,
    SessionType,
    UpdateSessionRequest,
)
from .service import SessionService, serialize_session

sessions_router = APIRouter()


async def _row(svc: SessionService, session: dict) -> dict:
    return serialize_session(session, await svc.usernames_for([session]))


@sessions_router.post("")
async def create_session(
    body: CreateSessionRequest,
    svc: SessionService = Depends(get_session_service),
):
    session = await svc.create_session(body.model_dump())
    return success_response(
        data=await _row(svc, session), message="Session created successfully", code=201
    )


@sessions_router.get("")
async def list_sessions(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status: Optional[SessionStatus] = None,
    type: Optional[SessionType] = None,
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    sort_by: str = Query("startTime", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
    svc: SessionService = Depends(get_session_service),
):
    filters = {
        "status": status.value if status else None,
        "type": type.value if type else None,
        "paymentStatus": payment_status.value if payment_status else None,
    }
    rows, total = await svc.list_sessions(page, limit, filters, sort_by, order)
    names = await svc.usernames_for(rows)
    return paginated_response(
        items=[serialize_session(s, names) for s in rows],
        page=page,
        limit=limit,
        total=total,
        message="All sessions fetched successfully",
    )


@sessions_router.get("/{session_id}")
async def get_session(session_id: str, svc: SessionService = Depends(get_session_service)):
    session = await svc.get_session(parse_object_id(session_id, "session ID"))
    return success_response(data=await _row(svc, session))


@sessions_router.put("/{session_id}")
async def update_session(
    session_id: str,
    body: UpdateSessionRequest,
    svc: SessionService = Depends(get_session_service),
):
    session = await svc.update_session(
        parse_object_id(session_id, "session ID"), body.model_dump()
    )
    return success_response(data=await _row(svc, session), message="Session updated successfully")


@sessions_router.post("/{session_id}/end")
@require_permission("sessionManagement", "endSession")
async def end_session(
    request: Request,
    session_id: str,
    svc: SessionService = Depends(get_session_service),
):
    session = await svc.end_session(parse_object_id(session_id, "session ID"))
    return success_response(data=await _row(svc, session), message="Session ended")


@sessions_router.delete("/{session_id}")
async def delete_session(session_id: str, svc: SessionService = Depends(get_session_service)):
    await svc.delete_session(parse_object_id(session_id, "session ID"))
    return success_response(
        message="Session deleted successfully and removed from user/listener"
    )
