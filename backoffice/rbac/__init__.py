from .modules import Module, MODULES, MODULE_ACTIONS, MODULE_LABELS
from .matrix import (
    SYSTEM_ROLES,
    SYSTEM_ROLE_DESCRIPTIONS,
    default_matrix,
    get_system_matrix,
    is_system_role,
    toggle_module,
)
from .permissions import (
    accessible_modules,
    enabled_actions,
    has_action_permission,
    has_permission,
    resolve_permission_from_request,
)
from .schemas import PermissionMatrix

__all__ = [
    "Module",
    "MODULES",
    "MODULE_ACTIONS",
    "MODULE_LABELS",
    "SYSTEM_ROLES",
    "SYSTEM_ROLE_DESCRIPTIONS",
    "default_matrix",
    "get_system_matrix",
    "is_system_role",
    "toggle_module",
    "accessible_modules",
    "enabled_actions",
    "has_action_permission",
    "has_permission",
    "resolve_permission_from_request",
    "PermissionMatrix",
]
