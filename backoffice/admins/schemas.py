from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List


class CreateAdminRequest(BaseModel):
    """POST /admin/admins"""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role_id: str
    two_factor_enabled: bool = False
    permissions: Optional[List[str]] = None


class AssignRoleRequest(BaseModel):
    """PUT /admin/admins/{admin_id}/role"""
    role_id: str


class AdminSetupRequest(BaseModel):
    """POST /admin/set-up — first SuperAdmin; password generated when omitted."""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=8)
