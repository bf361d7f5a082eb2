from pydantic import BaseModel, Field
from typing import Optional

from backoffice.rbac.modules import Module
from backoffice.rbac.schemas import PermissionMatrix


class CreateRoleRequest(BaseModel):
    """POST /admin/roles"""
    name: str = Field(..., max_length=100)
    description: str = Field("", max_length=500)
    permissions: PermissionMatrix = Field(default_factory=PermissionMatrix)


class UpdateRoleRequest(BaseModel):
    """PUT /admin/roles/{role_id} — omitted fields stay unchanged."""
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    permissions: Optional[PermissionMatrix] = None


class ToggleModuleRequest(BaseModel):
    """POST /admin/roles/permissions/toggle — form composition only."""
    permissions: PermissionMatrix = Field(default_factory=PermissionMatrix)
    module: Module
    enabled: bool
