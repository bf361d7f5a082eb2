"""
Roles & Permissions routes.

Endpoints:
    GET    /                        List roles (?q= searches name/description)
    GET    /modules                 Module/flag vocabulary for the permission form
    GET    /assignments             Which admin holds which role
    POST   /permissions/toggle      Enable/disable every flag of one module (not persisted)
    GET    /{id}                    Single role
    POST   /                        Create a custom role
    PUT    /{id}                    Edit a custom role
    POST   /{id}/duplicate          Copy any role into a new custom role
    DELETE /{id}                    Delete an unassigned custom role
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from backoffice.dependencies import current_admin_id, get_admin_service, get_role_service
from backoffice.admins.service import AdminService
from backoffice.rbac import MODULE_ACTIONS, MODULE_LABELS, MODULES, default_matrix, enabled_actions
from backoffice.utils import parse_object_id, success_response
from .schemas import CreateRoleRequest, ToggleModuleRequest, UpdateRoleRequest
from .service import RoleService, serialize_role

roles_router = APIRouter()


@roles_router.get("")
async def list_roles(
    q: Optional[str] = Query(None, description="Case-insensitive search on name/description"),
    svc: RoleService = Depends(get_role_service),
):
    roles = await svc.list_roles(query=q)
    return success_response(
        data={"roles": [serialize_role(r) for r in roles], "total": len(roles)}
    )


@roles_router.get("/modules")
async def list_modules():
    modules = [
        {"key": m, "label": MODULE_LABELS[m], "actions": list(MODULE_ACTIONS[m])}
        for m in MODULES
    ]
    return success_response(data={"modules": modules, "defaults": default_matrix()})


@roles_router.get("/assignments")
async def list_assignments(admin_svc: AdminService = Depends(get_admin_service)):
    assignments = await admin_svc.list_assignments()
    return success_response(data={"assignments": assignments})


@roles_router.post("/permissions/toggle")
async def toggle_module_permissions(
    body: ToggleModuleRequest,
    svc: RoleService = Depends(get_role_service),
):
    matrix = svc.toggle_module(body.permissions, body.module.value, body.enabled)
    return success_response(data={"permissions": matrix})


@roles_router.get("/{role_id}")
async def get_role(role_id: str, svc: RoleService = Depends(get_role_service)):
    role = await svc.get_role(parse_object_id(role_id, "role ID"))
    data = serialize_role(role)
    data["enabled"] = enabled_actions(role.get("permissions"))
    return success_response(data=data)


@roles_router.post("")
async def create_role(
    request: Request,
    body: CreateRoleRequest,
    svc: RoleService = Depends(get_role_service),
):
    role = await svc.create_role(
        name=body.name,
        description=body.description,
        permissions=body.permissions,
        created_by=current_admin_id(request),
    )
    return success_response(
        data=serialize_role(role),
        message=f"Role \"{role['name']}\" created successfully",
        code=201,
    )


@roles_router.put("/{role_id}")
async def update_role(
    role_id: str,
    body: UpdateRoleRequest,
    svc: RoleService = Depends(get_role_service),
):
    role = await svc.update_role(
        parse_object_id(role_id, "role ID"),
        name=body.name,
        description=body.description,
        permissions=body.permissions,
    )
    return success_response(data=serialize_role(role), message="Role updated successfully")


@roles_router.post("/{role_id}/duplicate")
async def duplicate_role(
    request: Request,
    role_id: str,
    svc: RoleService = Depends(get_role_service),
):
    role = await svc.duplicate_role(
        parse_object_id(role_id, "role ID"), created_by=current_admin_id(request)
    )
    return success_response(
        data=serialize_role(role), message="Role duplicated successfully", code=201
    )


@roles_router.delete("/{role_id}")
async def delete_role(role_id: str, svc: RoleService = Depends(get_role_service)):
    result = await svc.delete_role(parse_object_id(role_id, "role ID"))
    return success_response(data=result, message="Role deleted successfully")
