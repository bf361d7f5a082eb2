from fastapi import APIRouter, Depends, Header, Request

from backoffice.dependencies import get_admin_service
from backoffice.rbac.decorators import require_permission
from backoffice.utils import AuthenticationError, parse_object_id, success_response
from .schemas import AdminSetupRequest, AssignRoleRequest, CreateAdminRequest
from .service import AdminService, serialize_admin

admins_router = APIRouter()
setup_router = APIRouter()


def _require_app_key(
    request: Request, app_key: str | None = Header(None, alias="app-key")
) -> bool:
    """Guard: only callers holding the platform app-key can bootstrap."""
    if app_key != request.app.state.settings.app_key:
        raise AuthenticationError("Invalid app-key")
    return True


@setup_router.post("/set-up")
async def setup_backoffice(
    body: AdminSetupRequest,
    svc: AdminService = Depends(get_admin_service),
    _: bool = Depends(_require_app_key),
):
    """Create the first SuperAdmin and seed the system roles."""
    result = await svc.setup_first_admin(body.name, body.email, body.password)
    return success_response(data=result, message="Back office set up", code=201)


@admins_router.get("")
async def list_admins(svc: AdminService = Depends(get_admin_service)):
    admins = await svc.list_admins()
    return success_response(
        data={"admins": [serialize_admin(a) for a in admins], "total": len(admins)}
    )


@admins_router.get("/{admin_id}")
async def get_admin(admin_id: str, svc: AdminService = Depends(get_admin_service)):
    admin = await svc.get_admin(parse_object_id(admin_id, "admin ID"))
    return success_response(data=serialize_admin(admin))


@admins_router.post("")
async def create_admin(
    body: CreateAdminRequest,
    svc: AdminService = Depends(get_admin_service),
):
    admin = await svc.create_admin(
        name=body.name,
        email=body.email,
        password=body.password,
        role_id=parse_object_id(body.role_id, "role ID"),
        two_factor_enabled=body.two_factor_enabled,
        permissions=body.permissions,
    )
    return success_response(data=serialize_admin(admin), message="Admin created", code=201)


@admins_router.put("/{admin_id}/role")
@require_permission("rolesPermissions", "edit")
async def assign_role(
    request: Request,
    admin_id: str,
    body: AssignRoleRequest,
    svc: AdminService = Depends(get_admin_service),
):
    admin = await svc.assign_role(
        parse_object_id(admin_id, "admin ID"),
        parse_object_id(body.role_id, "role ID"),
    )
    return success_response(data=serialize_admin(admin), message="Role assigned")
