"""Role service — create, edit, duplicate and delete roles over a RoleRepository."""

import copy
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as SchemaValidationError

from backoffice.rbac.matrix import (
    SYSTEM_ROLES,
    SYSTEM_ROLE_DESCRIPTIONS,
    default_matrix,
    get_system_matrix,
    is_system_role,
    toggle_module,
)
from backoffice.rbac.modules import is_known_module
from backoffice.rbac.schemas import PermissionMatrix
from backoffice.utils import (
    AuthorizationError,
    ConflictError,
    Logger,
    NotFoundError,
    ValidationError,
    new_object_id,
    serialize_mongo_doc,
)
from .repository import RoleRepository

logger = Logger(__name__)


def serialize_role(role: dict) -> dict:
    """Role record → API shape (camelCase keys)."""
    doc = serialize_mongo_doc(role)
    return {
        "id": doc["_id"],
        "name": doc["name"],
        "description": doc.get("description", ""),
        "isSystem": doc.get("is_system", False),
        "permissions": doc.get("permissions", {}),
        "assignedTo": doc.get("assigned_to", 0),
        "createdAt": doc.get("created_at"),
        "updatedAt": doc.get("updated_at"),
        "createdBy": doc.get("created_by"),
    }


def normalize_matrix(permissions: Any) -> dict:
    """
    Validate a matrix against the module/flag vocabulary.

    Omitted modules and flags are filled with False; unknown ones are
    rejected with a 400.
    """
    if permissions is None:
        return default_matrix()
    if isinstance(permissions, PermissionMatrix):
        return permissions.to_matrix()
    try:
        return PermissionMatrix.model_validate(permissions).to_matrix()
    except SchemaValidationError as e:
        raise ValidationError(f"Invalid permission matrix: {e.errors()[0]['msg']}")


class RoleService:
    def __init__(self, roles: RoleRepository):
        self.roles = roles

    # ── Lookups ──────────────────────────────────────────────────
    async def get_role(self, role_id: str) -> dict:
        role = await self.roles.get(role_id)
        if not role:
            raise NotFoundError("Role not found")
        return role

    async def find_role(self, role_id: str) -> Optional[dict]:
        return await self.roles.get(role_id)

    async def get_role_by_name(self, name: str) -> Optional[dict]:
        return await self.roles.get_by_name(name)

    async def list_roles(self, query: Optional[str] = None) -> list[dict]:
        """All roles in insertion order, filtered by name/description substring."""
        roles = await self.roles.list_all()
        if not query:
            return roles
        needle = query.lower()
        return [
            r
            for r in roles
            if needle in r["name"].lower() or needle in (r.get("description") or "").lower()
        ]

    # ── Mutations ────────────────────────────────────────────────
    async def create_role(
        self,
        name: str,
        description: str = "",
        permissions: Any = None,
        created_by: str | None = None,
    ) -> dict:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Role name is required")
        if await self.roles.get_by_name(clean_name):
            raise ConflictError(f"Role '{clean_name}' already exists")

        now = datetime.now(timezone.utc)
        role = await self.roles.insert(
            {
                "_id": new_object_id(),
                "name": clean_name,
                "description": (description or "").strip(),
                "is_system": False,
                "permissions": normalize_matrix(permissions),
                "assigned_to": 0,
                "created_at": now,
                "updated_at": now,
                "created_by": created_by,
            }
        )
        logger.info(f"Role '{clean_name}' created by {created_by}")
        return role

    async def update_role(
        self,
        role_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        permissions: Any = None,
    ) -> dict:
        role = await self.get_role(role_id)
        if role.get("is_system"):
            raise AuthorizationError("System roles cannot be modified")

        fields: dict = {}
        if name is not None:
            clean_name = name.strip()
            if not clean_name:
                raise ValidationError("Role name is required")
            clash = await self.roles.get_by_name(clean_name)
            if clash and clash["_id"] != role_id:
                raise ConflictError(f"Role '{clean_name}' already exists")
            fields["name"] = clean_name
        if description is not None:
            fields["description"] = description.strip()
        if permissions is not None:
            fields["permissions"] = normalize_matrix(permissions)
        fields["updated_at"] = datetime.now(timezone.utc)

        updated = await self.roles.update(role_id, fields)
        if not updated:
            raise NotFoundError("Role not found")
        logger.info(f"Role '{updated['name']}' updated")
        return updated

    async def duplicate_role(self, role_id: str, created_by: str | None = None) -> dict:
        """Copy a role's matrix into a new custom role named '<name> (Copy)'."""
        source = await self.get_role(role_id)

        name = f"{source['name']} (Copy)"
        suffix = 2
        while await self.roles.get_by_name(name):
            name = f"{source['name']} (Copy {suffix})"
            suffix += 1

        now = datetime.now(timezone.utc)
        role = await self.roles.insert(
            {
                "_id": new_object_id(),
                "name": name,
                "description": source.get("description", ""),
                "is_system": False,
                "permissions": copy.deepcopy(source.get("permissions") or {}),
                "assigned_to": 0,
                "created_at": now,
                "updated_at": now,
                "created_by": created_by,
            }
        )
        logger.info(f"Role '{source['name']}' duplicated as '{name}'")
        return role

    async def delete_role(self, role_id: str) -> dict:
        role = await self.get_role(role_id)
        if role.get("is_system"):
            raise ConflictError("Cannot delete system roles")
        if role.get("assigned_to", 0) > 0:
            raise ConflictError("Cannot delete role that is assigned to admins")

        await self.roles.delete(role_id)
        logger.info(f"Role '{role['name']}' deleted")
        return {"message": "Role deleted successfully"}

    def toggle_module(self, permissions: Any, module: str, enabled: bool) -> dict:
        """Set every flag of one module at once; nothing is persisted."""
        if not is_known_module(module):
            raise ValidationError(f"Unknown module '{module}'")
        return toggle_module(normalize_matrix(permissions), module, enabled)

    # ── Assignment bookkeeping ───────────────────────────────────
    async def record_assignment(self, role_id: str | None, delta: int) -> None:
        if role_id:
            await self.roles.adjust_assigned(role_id, delta)

    async def resolve_permissions(
        self, role_name: str | None, custom_role_id: str | None = None
    ) -> dict:
        """
        Matrix for an admin's role reference.

        Custom role id wins, then built-in role name, then a stored role with
        that name. An unresolvable reference yields an empty (deny-all) matrix.
        """
        if custom_role_id:
            role = await self.roles.get(custom_role_id)
            return copy.deepcopy(role["permissions"]) if role else {}
        if is_system_role(role_name):
            return get_system_matrix(role_name)
        if role_name:
            role = await self.roles.get_by_name(role_name)
            if role:
                return copy.deepcopy(role["permissions"])
        return {}

    async def ensure_system_roles(self) -> list[dict]:
        """Seed the built-in roles; keep their stored matrices in sync with code."""
        seeded = []
        for name in SYSTEM_ROLES:
            matrix = get_system_matrix(name)
            existing = await self.roles.get_by_name(name)
            if existing:
                if existing.get("permissions") != matrix or not existing.get("is_system"):
                    existing = await self.roles.update(
                        existing["_id"], {"permissions": matrix, "is_system": True}
                    )
                seeded.append(existing)
                continue

            now = datetime.now(timezone.utc)
            role = await self.roles.insert(
                {
                    "_id": new_object_id(),
                    "name": name,
                    "description": SYSTEM_ROLE_DESCRIPTIONS[name],
                    "is_system": True,
                    "permissions": matrix,
                    "assigned_to": 0,
                    "created_at": now,
                    "updated_at": now,
                    "created_by": "system",
                }
            )
            logger.info(f"Seeded system role '{name}'")
            seeded.append(role)
        return seeded
