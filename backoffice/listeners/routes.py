from typing import Optional

from fastapi import APIRouter, Depends, Query

from backoffice.config import settings
from backoffice.dependencies import get_listener_service
from backoffice.utils import paginated_response, parse_object_id, success_response
from .schemas import ListenerStatus, PromoteListenerRequest, UpdateListenerRequest
from .service import ListenerService, serialize_listener

listeners_router = APIRouter()


@listeners_router.post("")
async def promote_listener(
    body: PromoteListenerRequest,
    svc: ListenerService = Depends(get_listener_service),
):
    """Promote an existing user to listener (status: pending)."""
    listener = await svc.promote(
        user_id=parse_object_id(body.user_id, "user ID"),
        expertise=body.expertise,
        experience=body.experience,
        commission=body.commission,
    )
    return success_response(
        data=serialize_listener(listener),
        message="User promoted to listener successfully",
        code=201,
    )


@listeners_router.get("")
async def list_listeners(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status: Optional[ListenerStatus] = None,
    svc: ListenerService = Depends(get_listener_service),
):
    rows, total = await svc.list_listeners(page, limit, status.value if status else None)
    items = [serialize_listener(row, await svc.user_for(row)) for row in rows]
    return paginated_response(
        items=items, page=page, limit=limit, total=total, message="Listeners fetched"
    )


@listeners_router.get("/{listener_id}")
async def get_listener(listener_id: str, svc: ListenerService = Depends(get_listener_service)):
    listener = await svc.get_listener(parse_object_id(listener_id, "listener ID"))
    return success_response(data=serialize_listener(listener, await svc.user_for(listener)))


@listeners_router.put("/{listener_id}")
async def update_listener(
    listener_id: str,
    body: UpdateListenerRequest,
    svc: ListenerService = Depends(get_listener_service),
):
    listener = await svc.update_listener(
        parse_object_id(listener_id, "listener ID"), body.model_dump()
    )
    return success_response(data=serialize_listener(listener), message="Listener updated")


@listeners_router.delete("/{listener_id}")
async def remove_listener(listener_id: str, svc: ListenerService = Depends(get_listener_service)):
    await svc.remove_listener(parse_object_id(listener_id, "listener ID"))
    return success_response(message="Listener removed and reverted to user")
