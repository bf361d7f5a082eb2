from fastapi import APIRouter, Depends, Query

from backoffice.config import settings
from backoffice.dependencies import get_user_service
from backoffice.utils import paginated_response, parse_object_id, success_response
from .schemas import UpdateUserRequest
from .service import UserService, serialize_user

users_router = APIRouter()


@users_router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    svc: UserService = Depends(get_user_service),
):
    rows, total = await svc.list_users(page, limit)
    return paginated_response(
        items=[serialize_user(u, include_role=False) for u in rows],
        page=page,
        limit=limit,
        total=total,
        message="Users fetched successfully",
    )


@users_router.get("/{user_id}")
async def get_user(user_id: str, svc: UserService = Depends(get_user_service)):
    user = await svc.get_user(parse_object_id(user_id, "user ID"))
    return success_response(data=serialize_user(user), message="User fetched successfully")


@users_router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    svc: UserService = Depends(get_user_service),
):
    user = await svc.update_user(
        parse_object_id(user_id, "user ID"), body.model_dump(mode="json")
    )
    return success_response(data=serialize_user(user), message="User updated successfully")


@users_router.delete("/{user_id}")
async def delete_user(user_id: str, svc: UserService = Depends(get_user_service)):
    """Delete the user and every session they took part in."""
    result = await svc.delete_user(parse_object_id(user_id, "user ID"))
    return success_response(
        data=result, message="User and all associated sessions deleted successfully"
    )
