"""
The 13 back-office modules and the capability flags each one understands.

Flag names are the wire names used in stored permission matrices
(e.g. "approveWithdrawal"), not Python attribute names.
"""

from enum import Enum


class Module(str, Enum):
    DASHBOARD = "dashboard"
    USER_MANAGEMENT = "userManagement"
    LISTENER_MANAGEMENT = "listenerManagement"
    SESSION_MANAGEMENT = "sessionManagement"
    COMPLIANCE = "compliance"
    WALLET_PAYMENTS = "walletPayments"
    SUPPORT_TICKETING = "supportTicketing"
    NOTIFICATIONS = "notifications"
    REPORTS = "reports"
    SETTINGS = "settings"
    ADMIN_MANAGEMENT = "adminManagement"
    ROLES_PERMISSIONS = "rolesPermissions"
    SYSTEM_HEALTH = "systemHealth"


CRUD_ACTIONS: tuple[str, ...] = ("view", "create", "edit", "delete", "export")

MODULE_ACTIONS: dict[str, tuple[str, ...]] = {
    Module.DASHBOARD.value: ("view",),
    Module.USER_MANAGEMENT.value: CRUD_ACTIONS,
    Module.LISTENER_MANAGEMENT.value: CRUD_ACTIONS,
    Module.SESSION_MANAGEMENT.value: CRUD_ACTIONS + ("endSession",),
    Module.COMPLIANCE.value: CRUD_ACTIONS + ("viewMessages", "flagContent"),
    Module.WALLET_PAYMENTS.value: CRUD_ACTIONS
    + ("processRefund", "approveWithdrawal", "manualAdjustment"),
    Module.SUPPORT_TICKETING.value: CRUD_ACTIONS + ("assignTickets", "closeTickets"),
    Module.NOTIFICATIONS.value: CRUD_ACTIONS + ("sendPush", "sendEmail"),
    Module.REPORTS.value: ("view", "export", "accessFinancial"),
    Module.SETTINGS.value: CRUD_ACTIONS + ("modifyRazorpay", "modifyCommission"),
    Module.ADMIN_MANAGEMENT.value: CRUD_ACTIONS,
    Module.ROLES_PERMISSIONS.value: CRUD_ACTIONS,
    Module.SYSTEM_HEALTH.value: ("view",),
}

MODULE_LABELS: dict[str, str] = {
    Module.DASHBOARD.value: "Dashboard",
    Module.USER_MANAGEMENT.value: "User Management",
    Module.LISTENER_MANAGEMENT.value: "Listener Management",
    Module.SESSION_MANAGEMENT.value: "Session Management",
    Module.COMPLIANCE.value: "Compliance",
    Module.WALLET_PAYMENTS.value: "Wallet & Payments",
    Module.SUPPORT_TICKETING.value: "Support Tickets",
    Module.NOTIFICATIONS.value: "Notifications",
    Module.REPORTS.value: "Reports & Analytics",
    Module.SETTINGS.value: "Settings",
    Module.ADMIN_MANAGEMENT.value: "Admin Management",
    Module.ROLES_PERMISSIONS.value: "Roles & Permissions",
    Module.SYSTEM_HEALTH.value: "System Health",
}

MODULES: tuple[str, ...] = tuple(m.value for m in Module)


def is_known_module(module: str) -> bool:
    return module in MODULE_ACTIONS
