"""
Shared fixtures.

Every app under test runs on the in-memory repositories and session store;
no MongoDB is needed.
"""

import pytest
from fastapi.testclient import TestClient

from backoffice.app import create_app
from backoffice.config import Settings
from backoffice.container import Repositories
from backoffice.roles import InMemoryRoleRepository, RoleService

SUPER_EMAIL = "root@backoffice.io"
SUPER_PASSWORD = "sup3r-secret"


@pytest.fixture
def test_settings():
    return Settings(
        login_delay_seconds=0,
        session_timeout_seconds=1800,
        session_tick_seconds=1.0,
        app_key="test-app-key",
        secret_key="test-secret",
    )


@pytest.fixture
def repos():
    return Repositories.in_memory()


@pytest.fixture
def app(repos, test_settings):
    return create_app(repositories=repos, settings=test_settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def role_service():
    svc = RoleService(InMemoryRoleRepository())
    await svc.ensure_system_roles()
    return svc


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login_admin(client: TestClient, email: str, password: str) -> dict:
    resp = client.post("/api/admin/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return bearer(resp.json()["data"]["access_token"])


def role_id_by_name(client: TestClient, headers: dict, name: str) -> str:
    resp = client.get("/api/admin/roles", headers=headers)
    for role in resp.json()["data"]["roles"]:
        if role["name"] == name:
            return role["id"]
    raise AssertionError(f"role {name} not found")


@pytest.fixture
def super_headers(client, test_settings):
    """Bootstrap the back office and log the first SuperAdmin in."""
    resp = client.post(
        "/api/admin/set-up",
        json={"name": "Root Admin", "email": SUPER_EMAIL, "password": SUPER_PASSWORD},
        headers={"app-key": test_settings.app_key},
    )
    assert resp.status_code == 201, resp.text
    return login_admin(client, SUPER_EMAIL, SUPER_PASSWORD)


@pytest.fixture
def make_admin(client, super_headers):
    """Create an admin holding `role_name` and return their auth headers."""

    def _make(role_name: str, email: str, password: str = "password-123") -> dict:
        resp = client.post(
            "/api/admin/admins",
            json={
                "name": f"{role_name} Admin",
                "email": email,
                "password": password,
                "role_id": role_id_by_name(client, super_headers, role_name),
            },
            headers=super_headers,
        )
        assert resp.status_code == 201, resp.text
        return login_admin(client, email, password)

    return _make
