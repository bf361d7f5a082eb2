"""
Role definitions and permission matrix.

Matrix format:  {module: {flag: bool}}
  - Modules : the 13 keys of MODULE_ACTIONS
  - Flags   : view/create/edit/delete/export plus module-specific actions
  - A flag that is absent or False is denied.

The four system roles are defined exhaustively here. Accessors hand out deep
copies so callers can never mutate a built-in.
"""

import copy

from .modules import MODULE_ACTIONS, MODULES, is_known_module

PermissionMap = dict[str, dict[str, bool]]


# ── Canonical shapes ────────────────────────────────────────────
def full_access() -> dict[str, bool]:
    return {"view": True, "create": True, "edit": True, "delete": True, "export": True}


def read_only() -> dict[str, bool]:
    return {"view": True, "create": False, "edit": False, "delete": False, "export": False}


def view_and_edit() -> dict[str, bool]:
    return {"view": True, "create": False, "edit": True, "delete": False, "export": False}


def no_access() -> dict[str, bool]:
    return {"view": False, "create": False, "edit": False, "delete": False, "export": False}


SUPER_ADMIN = "SuperAdmin"
SUPPORT = "Support"
FINANCE = "Finance"
COMPLIANCE = "Compliance"

SYSTEM_ROLES: tuple[str, ...] = (SUPER_ADMIN, SUPPORT, FINANCE, COMPLIANCE)

SYSTEM_ROLE_DESCRIPTIONS: dict[str, str] = {
    SUPER_ADMIN: "Full access to all features and settings",
    SUPPORT: "Handle user tickets, sessions, and basic user management",
    FINANCE: "Manage payments, wallets, withdrawals, and financial reports",
    COMPLIANCE: "Monitor compliance, review content, and manage audits",
}

_SYSTEM_ROLE_MATRICES: dict[str, PermissionMap] = {
    SUPER_ADMIN: {
        "dashboard": {"view": True},
        "userManagement": full_access(),
        "listenerManagement": full_access(),
        "sessionManagement": {**full_access(), "endSession": True},
        "compliance": {**full_access(), "viewMessages": True, "flagContent": True},
        "walletPayments": {
            **full_access(),
            "processRefund": True,
            "approveWithdrawal": True,
            "manualAdjustment": True,
        },
        "supportTicketing": {**full_access(), "assignTickets": True, "closeTickets": True},
        "notifications": {**full_access(), "sendPush": True, "sendEmail": True},
        "reports": {"view": True, "export": True, "accessFinancial": True},
        "settings": {**full_access(), "modifyRazorpay": True, "modifyCommission": True},
        "adminManagement": full_access(),
        "rolesPermissions": full_access(),
        "systemHealth": {"view": True},
    },
    SUPPORT: {
        "dashboard": {"view": True},
        "userManagement": view_and_edit(),
        "listenerManagement": read_only(),
        "sessionManagement": {**view_and_edit(), "endSession": False},
        "compliance": {**read_only(), "viewMessages": False, "flagContent": False},
        "walletPayments": {
            **no_access(),
            "processRefund": False,
            "approveWithdrawal": False,
            "manualAdjustment": False,
        },
        "supportTicketing": {**full_access(), "assignTickets": True, "closeTickets": True},
        "notifications": {**full_access(), "sendPush": True, "sendEmail": True},
        "reports": {"view": False, "export": False, "accessFinancial": False},
        "settings": {**no_access(), "modifyRazorpay": False, "modifyCommission": False},
        "adminManagement": no_access(),
        "rolesPermissions": no_access(),
        "systemHealth": {"view": False},
    },
    FINANCE: {
        "dashboard": {"view": True},
        "userManagement": read_only(),
        "listenerManagement": view_and_edit(),
        "sessionManagement": {**read_only(), "endSession": False},
        "compliance": {**no_access(), "viewMessages": False, "flagContent": False},
        "walletPayments": {
            **full_access(),
            "processRefund": True,
            "approveWithdrawal": True,
            "manualAdjustment": True,
        },
        "supportTicketing": {**read_only(), "assignTickets": False, "closeTickets": False},
        "notifications": {**no_access(), "sendPush": False, "sendEmail": False},
        "reports": {"view": True, "export": True, "accessFinancial": True},
        "settings": {**read_only(), "modifyRazorpay": True, "modifyCommission": True},
        "adminManagement": no_access(),
        "rolesPermissions": no_access(),
        "systemHealth": {"view": False},
    },
    COMPLIANCE: {
        "dashboard": {"view": True},
        "userManagement": view_and_edit(),
        "listenerManagement": view_and_edit(),
        "sessionManagement": {**full_access(), "endSession": True},
        "compliance": {**full_access(), "viewMessages": True, "flagContent": True},
        "walletPayments": {
            **read_only(),
            "processRefund": False,
            "approveWithdrawal": False,
            "manualAdjustment": False,
        },
        "supportTicketing": {**full_access(), "assignTickets": True, "closeTickets": True},
        "notifications": {**read_only(), "sendPush": False, "sendEmail": False},
        "reports": {"view": True, "export": True, "accessFinancial": False},
        "settings": {**read_only(), "modifyRazorpay": False, "modifyCommission": False},
        "adminManagement": no_access(),
        "rolesPermissions": no_access(),
        "systemHealth": {"view": False},
    },
}

# Simple module access (navigation gating, kept for older clients)
ROLE_MODULE_ACCESS: dict[str, dict[str, bool]] = {
    SUPER_ADMIN: {module: True for module in MODULES},
    SUPPORT: {
        "dashboard": True,
        "userManagement": True,
        "listenerManagement": False,
        "sessionManagement": True,
        "compliance": False,
        "walletPayments": False,
        "supportTicketing": True,
        "notifications": True,
        "reports": False,
        "settings": False,
        "adminManagement": False,
        "rolesPermissions": False,
        "systemHealth": False,
    },
    FINANCE: {
        "dashboard": True,
        "userManagement": False,
        "listenerManagement": True,
        "sessionManagement": True,
        "compliance": False,
        "walletPayments": True,
        "supportTicketing": False,
        "notifications": False,
        "reports": True,
        "settings": False,
        "adminManagement": False,
        "rolesPermissions": False,
        "systemHealth": False,
    },
    COMPLIANCE: {
        "dashboard": True,
        "userManagement": True,
        "listenerManagement": True,
        "sessionManagement": True,
        "compliance": True,
        "walletPayments": False,
        "supportTicketing": True,
        "notifications": False,
        "reports": True,
        "settings": False,
        "adminManagement": False,
        "rolesPermissions": False,
        "systemHealth": False,
    },
}


def is_system_role(name: str | None) -> bool:
    return name in SYSTEM_ROLES


def get_system_matrix(role: str | None) -> PermissionMap | None:
    """Deep copy of a built-in role's matrix, or None for non-system roles."""
    matrix = _SYSTEM_ROLE_MATRICES.get(role) if role else None
    return copy.deepcopy(matrix) if matrix is not None else None


def default_matrix() -> PermissionMap:
    """All-false matrix over every module and flag (create-form default)."""
    return {module: {action: False for action in actions} for module, actions in MODULE_ACTIONS.items()}


def toggle_module(matrix: PermissionMap, module: str, enabled: bool) -> PermissionMap:
    """
    Return a new matrix with every flag of `module` set to `enabled`.

    Flags are taken from the module's vocabulary, so a sparse entry is
    filled in rather than only flipping the keys that happen to be present.
    """
    if not is_known_module(module):
        raise KeyError(module)
    updated = copy.deepcopy(matrix)
    updated[module] = {action: enabled for action in MODULE_ACTIONS[module]}
    return updated
