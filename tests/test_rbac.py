"""
Tests for the permission matrix and authorization checks.
"""

import pytest
from pydantic import ValidationError as SchemaValidationError

from backoffice.rbac import (
    MODULE_ACTIONS,
    MODULES,
    PermissionMatrix,
    SYSTEM_ROLES,
    accessible_modules,
    default_matrix,
    enabled_actions,
    get_system_matrix,
    has_action_permission,
    has_permission,
    toggle_module,
)
from backoffice.rbac.matrix import full_access, no_access, read_only, view_and_edit
from backoffice.rbac.permissions import resolve_permission_from_path


class TestSystemMatrices:
    """Built-in role matrices."""

    @pytest.mark.parametrize("role", SYSTEM_ROLES)
    def test_every_module_defined_with_exact_vocabulary(self, role):
        matrix = get_system_matrix(role)
        assert set(matrix) == set(MODULES)
        for module, actions in MODULE_ACTIONS.items():
            assert set(matrix[module]) == set(actions), module

    def test_super_admin_has_every_flag(self):
        matrix = get_system_matrix("SuperAdmin")
        for module, actions in MODULE_ACTIONS.items():
            for action in actions:
                assert has_action_permission(matrix, module, action), f"{module}.{action}"

    @pytest.mark.parametrize("role", SYSTEM_ROLES)
    def test_every_role_sees_dashboard(self, role):
        assert has_permission(role, "dashboard") is True

    def test_accessors_hand_out_copies(self):
        matrix = get_system_matrix("Support")
        matrix["walletPayments"]["view"] = True
        assert get_system_matrix("Support")["walletPayments"]["view"] is False

    def test_unknown_role_has_no_matrix(self):
        assert get_system_matrix("Content Moderator") is None
        assert has_action_permission(get_system_matrix("Content Moderator"), "dashboard", "view") is False

    def test_finance_overrides(self):
        matrix = get_system_matrix("Finance")
        assert matrix["walletPayments"]["approveWithdrawal"] is True
        assert matrix["settings"] == {**read_only(), "modifyRazorpay": True, "modifyCommission": True}
        assert matrix["listenerManagement"] == view_and_edit()

    def test_canonical_shapes_are_fresh(self):
        shape = full_access()
        shape["view"] = False
        assert full_access()["view"] is True
        assert not any(no_access().values())


class TestHasActionPermission:
    """Fail-closed granular check."""

    def test_missing_module_denies_every_action(self):
        matrix = get_system_matrix("Support")
        del matrix["reports"]
        for action in ("view", "export", "accessFinancial", "anything"):
            assert has_action_permission(matrix, "reports", action) is False

    def test_unknown_module_and_action_deny(self):
        matrix = get_system_matrix("SuperAdmin")
        assert has_action_permission(matrix, "payroll", "view") is False
        assert has_action_permission(matrix, "userManagement", "impersonate") is False

    @pytest.mark.parametrize("matrix", [None, {}, {"dashboard": None}, {"dashboard": "yes"}])
    def test_malformed_matrix_denies(self, matrix):
        assert has_action_permission(matrix, "dashboard", "view") is False

    def test_truthy_non_bool_flag_denies(self):
        assert has_action_permission({"reports": {"view": 1, "export": "true"}}, "reports", "view") is False
        assert has_action_permission({"reports": {"view": 1, "export": "true"}}, "reports", "export") is False

    def test_view_read_directly(self):
        assert has_action_permission({"dashboard": {"view": True}}, "dashboard", "view") is True
        assert has_action_permission({"dashboard": {"view": False}}, "dashboard", "view") is False

    def test_legacy_gate_unknowns(self):
        assert has_permission(None, "dashboard") is False
        assert has_permission("Support", "payroll") is False
        assert has_permission("Support", "walletPayments") is False


class TestMatrixHelpers:
    def test_default_matrix_all_false(self):
        matrix = default_matrix()
        assert set(matrix) == set(MODULES)
        assert not any(flag for flags in matrix.values() for flag in flags.values())

    def test_toggle_module_sets_every_flag(self):
        before = default_matrix()
        after = toggle_module(before, "walletPayments", True)
        assert all(after["walletPayments"].values())
        assert set(after["walletPayments"]) == set(MODULE_ACTIONS["walletPayments"])
        assert not any(before["walletPayments"].values())

        off = toggle_module(after, "walletPayments", False)
        assert not any(off["walletPayments"].values())

    def test_toggle_module_unknown(self):
        with pytest.raises(KeyError):
            toggle_module(default_matrix(), "payroll", True)

    def test_enabled_actions_and_navigation(self):
        matrix = get_system_matrix("Finance")
        granted = enabled_actions(matrix)
        assert "compliance" not in granted
        assert granted["reports"] == ["view", "export", "accessFinancial"]

        modules = accessible_modules(matrix)
        assert modules[0] == "dashboard"
        assert "walletPayments" in modules
        assert "adminManagement" not in modules


class TestPermissionMatrixRecord:
    """Typed matrix validation at the API edge."""

    def test_missing_flags_filled_with_false(self):
        matrix = PermissionMatrix.model_validate({"reports": {"view": True}}).to_matrix()
        assert matrix["reports"] == {"view": True, "export": False, "accessFinancial": False}
        assert matrix["dashboard"] == {"view": False}
        assert set(matrix) == set(MODULES)

    def test_unknown_module_rejected(self):
        with pytest.raises(SchemaValidationError):
            PermissionMatrix.model_validate({"payroll": {"view": True}})

    def test_unknown_flag_rejected(self):
        with pytest.raises(SchemaValidationError):
            PermissionMatrix.model_validate({"dashboard": {"view": True, "delete": True}})

    def test_non_bool_flag_rejected(self):
        with pytest.raises(SchemaValidationError):
            PermissionMatrix.model_validate({"dashboard": {"view": "yes"}})

    def test_system_matrices_round_trip(self):
        for role in SYSTEM_ROLES:
            matrix = get_system_matrix(role)
            assert PermissionMatrix.model_validate(matrix).to_matrix() == matrix


class TestResolvePermission:
    """Path + method → (module, action)."""

    @pytest.mark.parametrize(
        "path,method,expected",
        [
            ("/api/users", "GET", ("userManagement", "view")),
            ("/api/users/abc", "PUT", ("userManagement", "edit")),
            ("/api/users/abc", "PATCH", ("userManagement", "edit")),
            ("/api/users/abc", "DELETE", ("userManagement", "delete")),
            ("/api/listeners", "POST", ("listenerManagement", "create")),
            ("/api/sessions/abc/end", "POST", ("sessionManagement", "endSession")),
            ("/api/admin/roles", "GET", ("rolesPermissions", "view")),
            ("/api/admin/roles/abc/duplicate", "POST", ("rolesPermissions", "create")),
            ("/api/admin/roles/permissions/toggle", "POST", ("rolesPermissions", "view")),
            ("/api/admin/admins", "POST", ("adminManagement", "create")),
        ],
    )
    def test_known_routes(self, path, method, expected):
        assert resolve_permission_from_path(path, method) == expected

    @pytest.mark.parametrize(
        "path,method",
        [
            ("/health", "GET"),
            ("/api/admin/auth/session", "GET"),
            ("/api/payroll", "GET"),
            ("/api/users", "OPTIONS"),
        ],
    )
    def test_ungated_routes(self, path, method):
        assert resolve_permission_from_path(path, method) is None
