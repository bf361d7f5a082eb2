"""
Permission checking utilities.

Every check here is fail-closed: an unknown role, module, or action, or a
missing matrix, evaluates to False. Nothing in this module raises.
"""

from collections.abc import Mapping
from typing import Any

from starlette.requests import Request

from .matrix import ROLE_MODULE_ACCESS
from .modules import MODULE_ACTIONS, MODULES


# ── Map URL path segments to modules ─────────────────────────────
# /api/{segment}/...
MODULE_MAP: dict[str, str] = {
    "users": "userManagement",
    "listeners": "listenerManagement",
    "sessions": "sessionManagement",
}

# /api/admin/{segment}/...
ADMIN_MODULE_MAP: dict[str, str] = {
    "admins": "adminManagement",
    "roles": "rolesPermissions",
}

# ── Map HTTP methods to actions ──────────────────────────────────
METHOD_TO_ACTION: dict[str, str] = {
    "GET": "view",
    "POST": "create",
    "PUT": "edit",
    "PATCH": "edit",
    "DELETE": "delete",
}

# Trailing path segments that name a capability instead of plain CRUD
ACTION_SEGMENTS: dict[str, str] = {
    "duplicate": "create",
    "toggle": "view",
    "end": "endSession",
}


def has_permission(role: str | None, module: str) -> bool:
    """Simple view-level gate for a system role."""
    return bool(ROLE_MODULE_ACCESS.get(role or "", {}).get(module, False))


def has_action_permission(matrix: Mapping[str, Any] | None, module: str, action: str) -> bool:
    """
    Granular check of one capability flag.

    A missing matrix or module entry denies; `view` is read directly;
    any other action defaults to denied when the flag is absent.
    """
    if not matrix:
        return False
    module_perms = matrix.get(module)
    if not isinstance(module_perms, Mapping):
        return False

    if action == "view" and "view" in module_perms:
        return module_perms["view"] is True

    return module_perms.get(action, False) is True


def enabled_actions(matrix: Mapping[str, Any] | None) -> dict[str, list[str]]:
    """Module → granted flags, omitting modules with nothing granted."""
    result: dict[str, list[str]] = {}
    for module in MODULES:
        granted = [
            action
            for action in MODULE_ACTIONS[module]
            if has_action_permission(matrix, module, action)
        ]
        if granted:
            result[module] = granted
    return result


def accessible_modules(matrix: Mapping[str, Any] | None) -> list[str]:
    """Modules whose `view` flag is granted, in navigation order."""
    return [module for module in MODULES if has_action_permission(matrix, module, "view")]


def resolve_permission_from_path(path: str, method: str) -> tuple[str, str] | None:
    """
    Derive the required (module, action) from a path and HTTP method.

    URL patterns expected:
        /api/{resource}/...
        /api/admin/{resource}/...
    Returns None when the path belongs to no gated module.
    """
    parts = [p for p in path.strip("/").split("/") if p]
    if len(parts) < 2 or parts[0] != "api":
        return None

    if parts[1] == "admin":
        module = ADMIN_MODULE_MAP.get(parts[2]) if len(parts) > 2 else None
    else:
        module = MODULE_MAP.get(parts[1])

    action = METHOD_TO_ACTION.get(method.upper())
    if not module or not action:
        return None

    if method.upper() != "GET" and parts[-1] in ACTION_SEGMENTS:
        action = ACTION_SEGMENTS[parts[-1]]

    return module, action


def resolve_permission_from_request(request: Request) -> tuple[str, str] | None:
    return resolve_permission_from_path(request.url.path, request.method)
