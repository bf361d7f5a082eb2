"""Admin service — admin accounts and their role assignments."""

import secrets
import string
from datetime import datetime, timezone
from typing import Optional

from backoffice.auth.helpers import hash_password
from backoffice.rbac import accessible_modules, is_system_role
from backoffice.rbac.matrix import SUPER_ADMIN
from backoffice.roles.service import RoleService
from backoffice.utils import (
    ConflictError,
    Logger,
    NotFoundError,
    new_object_id,
    serialize_mongo_doc,
)
from .repository import AdminDirectory

logger = Logger(__name__)


def _generate_password(length: int = 14) -> str:
    alphabet = string.ascii_letters + string.digits + "!@#$%"
    return "".join(secrets.choice(alphabet) for _ in range(length))


def serialize_admin(admin: dict) -> dict:
    """Admin record → API shape, never including the password hash."""
    doc = serialize_mongo_doc(admin)
    return {
        "id": doc["_id"],
        "name": doc.get("name"),
        "email": doc.get("email"),
        "role": doc.get("role"),
        "customRoleId": doc.get("custom_role_id"),
        "twoFactorEnabled": doc.get("two_factor_enabled", False),
        "permissions": doc.get("permissions", []),
        "createdAt": doc.get("created_at"),
        "lastLogin": doc.get("last_login"),
    }


class AdminService:
    def __init__(self, admins: AdminDirectory, roles: RoleService):
        self.admins = admins
        self.roles = roles

    async def get_admin(self, admin_id: str) -> dict:
        admin = await self.admins.get(admin_id)
        if not admin:
            raise NotFoundError("Admin not found")
        return admin

    async def list_admins(self) -> list[dict]:
        return await self.admins.list_all()

    async def _role_record_for(self, admin: dict) -> Optional[dict]:
        if admin.get("custom_role_id"):
            return await self.roles.find_role(admin["custom_role_id"])
        if admin.get("role"):
            return await self.roles.get_role_by_name(admin["role"])
        return None

    async def create_admin(
        self,
        name: str,
        email: str,
        password: str,
        role_id: str,
        two_factor_enabled: bool = False,
        permissions: Optional[list[str]] = None,
    ) -> dict:
        """Create an admin holding `role_id`; email must be unique."""
        email = email.strip().lower()
        if await self.admins.find_by_email(email):
            raise ConflictError("Admin with this email already exists")

        role = await self.roles.get_role(role_id)
        if permissions is None:
            permissions = (
                ["*"] if role["name"] == SUPER_ADMIN else accessible_modules(role["permissions"])
            )

        now = datetime.now(timezone.utc)
        admin = await self.admins.insert(
            {
                "_id": new_object_id(),
                "name": name.strip(),
                "email": email,
                "password": hash_password(password),
                "role": role["name"],
                "custom_role_id": None if role.get("is_system") else role["_id"],
                "two_factor_enabled": two_factor_enabled,
                "permissions": permissions,
                "created_at": now,
                "updated_at": now,
                "last_login": None,
            }
        )
        await self.roles.record_assignment(role["_id"], +1)
        logger.info(f"Admin {email} created with role '{role['name']}'")
        return admin

    async def assign_role(self, admin_id: str, role_id: str) -> dict:
        """Move an admin to another role, keeping both roles' assignedTo counts."""
        admin = await self.get_admin(admin_id)
        new_role = await self.roles.get_role(role_id)
        old_role = await self._role_record_for(admin)

        if old_role and old_role["_id"] == new_role["_id"]:
            return admin

        updated = await self.admins.update(
            admin_id,
            {
                "role": new_role["name"],
                "custom_role_id": None if new_role.get("is_system") else new_role["_id"],
                "updated_at": datetime.now(timezone.utc),
            },
        )
        if old_role:
            await self.roles.record_assignment(old_role["_id"], -1)
        await self.roles.record_assignment(new_role["_id"], +1)
        logger.info(
            f"Admin {admin['email']} moved from "
            f"'{old_role['name'] if old_role else admin.get('role')}' to '{new_role['name']}'"
        )
        return updated

    async def list_assignments(self) -> list[dict]:
        """Admin → resolved role, the 'Role Assignments' view."""
        assignments = []
        for admin in await self.admins.list_all():
            role = await self._role_record_for(admin)
            assignments.append(
                {
                    "adminId": admin["_id"],
                    "name": admin.get("name"),
                    "email": admin.get("email"),
                    "role": role["name"] if role else admin.get("role"),
                    "roleId": role["_id"] if role else None,
                    "isSystemRole": is_system_role(role["name"]) if role else False,
                    "assignedDate": serialize_mongo_doc(admin).get("created_at"),
                    "status": "active",
                }
            )
        return assignments

    async def setup_first_admin(
        self, name: str, email: str, password: Optional[str] = None
    ) -> dict:
        """
        Bootstrap the back office:
          1. Refuse when any admin already exists
          2. Make sure the system roles are seeded
          3. Create a SuperAdmin (generating a password when none is given)
        """
        if await self.admins.count() > 0:
            raise ConflictError("Back office is already set up")

        await self.roles.ensure_system_roles()
        super_admin = await self.roles.get_role_by_name(SUPER_ADMIN)

        temp_password = password or _generate_password()
        admin = await self.create_admin(
            name=name,
            email=email,
            password=temp_password,
            role_id=super_admin["_id"],
            two_factor_enabled=False,
        )
        result = {"admin": serialize_admin(admin)}
        if not password:
            result["temporary_password"] = temp_password
        return result
