"""
Tests for the admin-facing API: set-up, admin auth, roles and admins.
"""

import time

from fastapi.testclient import TestClient

from backoffice.app import create_app
from backoffice.config import Settings
from backoffice.container import Repositories
from conftest import SUPER_EMAIL, SUPER_PASSWORD, bearer, login_admin, role_id_by_name


class TestSetup:
    def test_requires_app_key(self, client):
        resp = client.post(
            "/api/admin/set-up",
            json={"name": "Root", "email": SUPER_EMAIL},
            headers={"app-key": "wrong"},
        )
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "error": {"code": 401, "message": "Invalid app-key"}}

    def test_only_once(self, client, super_headers, test_settings):
        resp = client.post(
            "/api/admin/set-up",
            json={"name": "Again", "email": "again@backoffice.io"},
            headers={"app-key": test_settings.app_key},
        )
        assert resp.status_code == 409


class TestAdminAuth:
    def test_login_and_session(self, client, super_headers):
        resp = client.get("/api/admin/auth/session", headers=super_headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["state"] == "authenticated"
        assert data["role"] == "SuperAdmin"
        assert data["admin"]["email"] == SUPER_EMAIL
        assert 1795 <= data["sessionTimeout"] <= 1800
        assert len(data["modules"]) == 13

    def test_bad_credentials(self, client, super_headers):
        resp = client.post(
            "/api/admin/auth/login", json={"email": SUPER_EMAIL, "password": "nope"}
        )
        assert resp.status_code == 401
        assert resp.json()["success"] is False

        resp = client.post(
            "/api/admin/auth/login", json={"email": "ghost@backoffice.io", "password": "x"}
        )
        assert resp.status_code == 401
        assert len(client.app.state.session_manager) == 1

    def test_missing_and_malformed_tokens(self, client):
        assert client.get("/api/admin/roles").status_code == 401
        assert client.get("/api/admin/roles", headers={"Authorization": "Token x"}).status_code == 401
        assert client.get("/api/admin/roles", headers=bearer("not-a-jwt")).status_code == 401

    def test_refresh(self, client, super_headers):
        resp = client.post("/api/admin/auth/session/refresh", headers=super_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["sessionTimeout"] == 1800

    def test_logout_ends_session(self, client, super_headers):
        assert client.post("/api/admin/auth/logout", headers=super_headers).status_code == 200
        resp = client.get("/api/admin/auth/session", headers=super_headers)
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Session expired"

    def test_account_token_rejected(self, client):
        client.post(
            "/api/register",
            json={
                "email": "u@backoffice.io",
                "username": "u1",
                "password": "pw-123456",
                "cCode": "+91",
                "phoneNumber": "9999999999",
            },
        )
        login = client.post("/api/login", json={"email": "u@backoffice.io", "password": "pw-123456"})
        token = login.json()["data"]["access_token"]
        assert client.get("/api/users", headers=bearer(token)).status_code == 401


class TestSessionExpiry:
    def test_countdown_expiry_returns_401(self):
        settings = Settings(
            login_delay_seconds=0,
            session_timeout_seconds=1,
            session_tick_seconds=0.05,
            app_key="k",
            secret_key="s",
        )
        app = create_app(repositories=Repositories.in_memory(), settings=settings)
        with TestClient(app) as client:
            client.post(
                "/api/admin/set-up",
                json={"name": "Root", "email": SUPER_EMAIL, "password": SUPER_PASSWORD},
                headers={"app-key": "k"},
            )
            headers = login_admin(client, SUPER_EMAIL, SUPER_PASSWORD)
            time.sleep(0.5)

            resp = client.get("/api/admin/auth/session", headers=headers)
            assert resp.status_code == 401
            assert len(app.state.session_manager) == 0


class TestPermissionGate:
    def test_support_cannot_reach_roles(self, client, make_admin):
        support = make_admin("Support", "sam@backoffice.io")
        resp = client.get("/api/admin/roles", headers=support)
        assert resp.status_code == 403
        assert resp.json()["error"]["message"] == "Permission denied. Requires: rolesPermissions.view"

    def test_support_can_view_users_but_not_delete(self, client, make_admin):
        support = make_admin("Support", "sam@backoffice.io")
        assert client.get("/api/users", headers=support).status_code == 200
        resp = client.delete(f"/api/users/{'0' * 24}", headers=support)
        assert resp.status_code == 403

    def test_finance_cannot_end_sessions(self, client, make_admin):
        finance = make_admin("Finance", "fin@backoffice.io")
        resp = client.post(f"/api/sessions/{'0' * 24}/end", headers=finance)
        assert resp.status_code == 403

    def test_custom_role_gates_requests(self, client, super_headers, make_admin):
        client.post(
            "/api/admin/roles",
            json={"name": "Listener Desk", "permissions": {"listenerManagement": {"view": True}}},
            headers=super_headers,
        )
        desk = make_admin("Listener Desk", "desk@backoffice.io")
        assert client.get("/api/listeners", headers=desk).status_code == 200
        assert client.get("/api/users", headers=desk).status_code == 403
        assert client.get("/api/admin/auth/session", headers=desk).json()["data"]["modules"] == [
            "listenerManagement"
        ]


class TestRoleChangesApplyToLiveSessions:
    def _admin_id(self, client, headers, email):
        admins = client.get("/api/admin/admins", headers=headers).json()["data"]["admins"]
        return next(a["id"] for a in admins if a["email"] == email)

    def test_reassigned_admin_loses_old_rights(self, client, super_headers, make_admin):
        support = make_admin("Support", "sam@backoffice.io")

        def edit_user():
            return client.put(f"/api/users/{'0' * 24}", json={"status": "active"}, headers=support)

        assert edit_user().status_code == 404

        resp = client.put(
            f"/api/admin/admins/{self._admin_id(client, super_headers, 'sam@backoffice.io')}/role",
            json={"role_id": role_id_by_name(client, super_headers, "Finance")},
            headers=super_headers,
        )
        assert resp.status_code == 200

        resp = edit_user()
        assert resp.status_code == 403
        assert resp.json()["error"]["message"] == "Permission denied. Requires: userManagement.edit"

        session = client.get("/api/admin/auth/session", headers=support).json()["data"]
        assert session["role"] == "Finance"
        assert session["permissions"]["walletPayments"]["approveWithdrawal"] is True

    def test_custom_role_edit_revokes_access(self, client, super_headers, make_admin):
        role = client.post(
            "/api/admin/roles",
            json={"name": "Desk", "permissions": {"userManagement": {"view": True}}},
            headers=super_headers,
        ).json()["data"]
        desk = make_admin("Desk", "desk@backoffice.io")
        assert client.get("/api/users", headers=desk).status_code == 200

        resp = client.put(
            f"/api/admin/roles/{role['id']}", json={"permissions": {}}, headers=super_headers
        )
        assert resp.status_code == 200

        assert client.get("/api/users", headers=desk).status_code == 403
        assert client.get("/api/admin/auth/session", headers=desk).json()["data"]["modules"] == []


class TestRolesApi:
    def test_list_and_modules(self, client, super_headers):
        resp = client.get("/api/admin/roles", headers=super_headers)
        body = resp.json()
        assert body["success"] is True
        assert [r["name"] for r in body["data"]["roles"]] == [
            "SuperAdmin",
            "Support",
            "Finance",
            "Compliance",
        ]
        assert all(r["isSystem"] for r in body["data"]["roles"])

        modules = client.get("/api/admin/roles/modules", headers=super_headers).json()["data"]
        assert len(modules["modules"]) == 13
        session_module = next(m for m in modules["modules"] if m["key"] == "sessionManagement")
        assert "endSession" in session_module["actions"]

    def test_create_search_and_get(self, client, super_headers):
        resp = client.post(
            "/api/admin/roles",
            json={
                "name": "Content Moderator",
                "description": "Reviews flagged content",
                "permissions": {"compliance": {"view": True, "flagContent": True}},
            },
            headers=super_headers,
        )
        assert resp.status_code == 201
        role = resp.json()["data"]
        assert role["isSystem"] is False
        assert role["assignedTo"] == 0
        assert role["createdBy"] is not None

        found = client.get("/api/admin/roles?q=moderator", headers=super_headers).json()["data"]
        assert [r["name"] for r in found["roles"]] == ["Content Moderator"]

        detail = client.get(f"/api/admin/roles/{role['id']}", headers=super_headers).json()["data"]
        assert detail["enabled"] == {"compliance": ["view", "flagContent"]}

    def test_create_validation(self, client, super_headers):
        resp = client.post("/api/admin/roles", json={"name": "  "}, headers=super_headers)
        assert resp.status_code == 400
        resp = client.post(
            "/api/admin/roles",
            json={"name": "Bad", "permissions": {"payroll": {"view": True}}},
            headers=super_headers,
        )
        assert resp.status_code == 422
        resp = client.post("/api/admin/roles", json={"name": "support"}, headers=super_headers)
        assert resp.status_code == 409

    def test_system_role_edit_and_delete_rejected(self, client, super_headers):
        finance_id = role_id_by_name(client, super_headers, "Finance")
        resp = client.put(
            f"/api/admin/roles/{finance_id}", json={"name": "Money"}, headers=super_headers
        )
        assert resp.status_code == 403
        assert client.delete(f"/api/admin/roles/{finance_id}", headers=super_headers).status_code == 409

    def test_duplicate_finance(self, client, super_headers):
        finance_id = role_id_by_name(client, super_headers, "Finance")
        resp = client.post(f"/api/admin/roles/{finance_id}/duplicate", headers=super_headers)
        assert resp.status_code == 201
        copy = resp.json()["data"]
        assert copy["name"] == "Finance (Copy)"
        assert copy["isSystem"] is False

        client.put(
            f"/api/admin/roles/{copy['id']}",
            json={"permissions": {"dashboard": {"view": True}}},
            headers=super_headers,
        )
        original = client.get(f"/api/admin/roles/{finance_id}", headers=super_headers).json()["data"]
        assert original["permissions"]["walletPayments"]["approveWithdrawal"] is True

    def test_delete_custom_role(self, client, super_headers):
        role = client.post(
            "/api/admin/roles", json={"name": "Temp"}, headers=super_headers
        ).json()["data"]
        assert client.delete(f"/api/admin/roles/{role['id']}", headers=super_headers).status_code == 200
        assert client.get(f"/api/admin/roles/{role['id']}", headers=super_headers).status_code == 404

    def test_malformed_id(self, client, super_headers):
        assert client.get("/api/admin/roles/not-an-id", headers=super_headers).status_code == 400

    def test_toggle(self, client, super_headers):
        resp = client.post(
            "/api/admin/roles/permissions/toggle",
            json={"module": "walletPayments", "enabled": True},
            headers=super_headers,
        )
        matrix = resp.json()["data"]["permissions"]
        assert all(matrix["walletPayments"].values())
        assert not any(matrix["reports"].values())
        assert len(client.get("/api/admin/roles", headers=super_headers).json()["data"]["roles"]) == 4


class TestAdminsApi:
    def test_create_list_and_assign(self, client, super_headers):
        support_id = role_id_by_name(client, super_headers, "Support")
        finance_id = role_id_by_name(client, super_headers, "Finance")

        resp = client.post(
            "/api/admin/admins",
            json={
                "name": "Sam Support",
                "email": "sam@backoffice.io",
                "password": "password-123",
                "role_id": support_id,
            },
            headers=super_headers,
        )
        assert resp.status_code == 201
        admin = resp.json()["data"]
        assert "password" not in admin

        listing = client.get("/api/admin/admins", headers=super_headers).json()["data"]
        assert listing["total"] == 2

        resp = client.put(
            f"/api/admin/admins/{admin['id']}/role",
            json={"role_id": finance_id},
            headers=super_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["role"] == "Finance"

        roles = {
            r["name"]: r["assignedTo"]
            for r in client.get("/api/admin/roles", headers=super_headers).json()["data"]["roles"]
        }
        assert roles["Support"] == 0
        assert roles["Finance"] == 1
        assert roles["SuperAdmin"] == 1

        assignments = client.get("/api/admin/roles/assignments", headers=super_headers).json()
        assert {a["email"]: a["role"] for a in assignments["data"]["assignments"]} == {
            SUPER_EMAIL: "SuperAdmin",
            "sam@backoffice.io": "Finance",
        }

    def test_duplicate_email(self, client, super_headers):
        support_id = role_id_by_name(client, super_headers, "Support")
        body = {
            "name": "Root Again",
            "email": SUPER_EMAIL,
            "password": "password-123",
            "role_id": support_id,
        }
        assert client.post("/api/admin/admins", json=body, headers=super_headers).status_code == 409

    def test_get_unknown_admin(self, client, super_headers):
        assert client.get(f"/api/admin/admins/{'0' * 24}", headers=super_headers).status_code == 404
