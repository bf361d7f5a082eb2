"""
Tests for the marketplace side: accounts, users, counseling sessions and
listeners, all driven through the HTTP API.
"""

import pytest

MISSING_ID = "0" * 24


@pytest.fixture
def register(client):
    """Register a marketplace account and return its id."""

    def _register(username: str, email: str | None = None, password: str = "pw-123456") -> str:
        resp = client.post(
            "/api/register",
            json={
                "email": email or f"{username}@backoffice.io",
                "username": username,
                "password": password,
                "cCode": "+91",
                "phoneNumber": "9876543210",
            },
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]["id"]

    return _register


@pytest.fixture
def book(client, super_headers):
    """Create a counseling session between two accounts."""

    def _book(session_id: str, user: str, listener: str, **extra) -> dict:
        body = {
            "sessionId": session_id,
            "user": user,
            "listener": listener,
            "type": "chat",
            "startTime": "2026-03-01T10:00:00Z",
            "amount": 250.0,
            **extra,
        }
        resp = client.post("/api/sessions", json=body, headers=super_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _book


class TestAccounts:
    def test_register_and_login(self, client, register):
        user_id = register("alice", "Alice@Backoffice.io")

        resp = client.post("/api/login", json={"email": "alice@backoffice.io", "password": "pw-123456"})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["token_type"] == "bearer"
        assert data["user"]["id"] == user_id
        assert data["user"]["contact"] == {"email": "alice@backoffice.io", "phone": "+91 9876543210"}
        assert data["user"]["lastActive"] is not None
        assert "password" not in data["user"]

    def test_duplicates_rejected(self, client, register):
        register("alice")
        body = {
            "email": "alice@backoffice.io",
            "username": "someone-else",
            "password": "x",
            "cCode": "+1",
            "phoneNumber": "5550100",
        }
        resp = client.post("/api/register", json=body)
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "User with this email already exists"

        body.update(email="other@backoffice.io", username="alice")
        resp = client.post("/api/register", json=body)
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "Username is already taken"

    def test_bad_login(self, client, register):
        register("alice")
        resp = client.post("/api/login", json={"email": "alice@backoffice.io", "password": "nope"})
        assert resp.status_code == 401
        resp = client.post("/api/login", json={"email": "ghost@backoffice.io", "password": "nope"})
        assert resp.status_code == 401


class TestUsersApi:
    def test_list_pagination_envelope(self, client, super_headers, register):
        for i in range(3):
            register(f"user{i}")

        resp = client.get("/api/users?page=2&limit=2", headers=super_headers)
        body = resp.json()
        assert body["success"] is True
        assert body["page"] == 2
        assert body["limit"] == 2
        assert body["total"] == 3
        assert body["totalPages"] == 2
        assert body["count"] == 1
        assert "role" not in body["data"][0]

    def test_list_hides_listeners(self, client, super_headers, register):
        alice = register("alice")
        register("bob")
        client.post("/api/listeners", json={"userId": alice}, headers=super_headers)
        body = client.get("/api/users", headers=super_headers).json()
        assert body["total"] == 1
        assert body["data"][0]["alias"] == "bob"

    def test_get(self, client, super_headers, register):
        user_id = register("alice")
        data = client.get(f"/api/users/{user_id}", headers=super_headers).json()["data"]
        assert data["userId"] == "alice"
        assert data["role"] == "user"
        assert data["wallet"] == 0.0

        assert client.get("/api/users/not-an-id", headers=super_headers).status_code == 400
        assert client.get(f"/api/users/{MISSING_ID}", headers=super_headers).status_code == 404

    def test_update(self, client, super_headers, register):
        user_id = register("alice")
        register("bob")

        resp = client.put(
            f"/api/users/{user_id}",
            json={"status": "blocked", "phoneNumber": "1112223333"},
            headers=super_headers,
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["status"] == "blocked"
        assert data["contact"]["phone"] == "+91 1112223333"

        resp = client.put(f"/api/users/{user_id}", json={"username": "bob"}, headers=super_headers)
        assert resp.status_code == 409
        resp = client.put(
            f"/api/users/{user_id}", json={"email": "bob@backoffice.io"}, headers=super_headers
        )
        assert resp.status_code == 409

        resp = client.put(
            f"/api/users/{MISSING_ID}", json={"status": "active"}, headers=super_headers
        )
        assert resp.status_code == 404

    def test_email_update_is_case_insensitive(self, client, super_headers, register):
        register("alice")
        bob = register("bob")

        resp = client.put(
            f"/api/users/{bob}", json={"email": "Alice@backoffice.io"}, headers=super_headers
        )
        assert resp.status_code == 409

        resp = client.put(
            f"/api/users/{bob}", json={"email": "Bob.New@backoffice.io"}, headers=super_headers
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["contact"]["email"] == "bob.new@backoffice.io"

        login = client.post("/api/login", json={"email": "Bob.New@backoffice.io", "password": "pw-123456"})
        assert login.status_code == 200

    def test_password_rules(self, client, super_headers, register):
        user_id = register("alice")

        resp = client.put(f"/api/users/{user_id}", json={"password": "   "}, headers=super_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Password cannot be empty"

        resp = client.put(f"/api/users/{user_id}", json={"password": ""}, headers=super_headers)
        assert resp.status_code == 200
        login = client.post("/api/login", json={"email": "alice@backoffice.io", "password": "pw-123456"})
        assert login.status_code == 200

        client.put(f"/api/users/{user_id}", json={"password": "n3w-pass"}, headers=super_headers)
        login = client.post("/api/login", json={"email": "alice@backoffice.io", "password": "n3w-pass"})
        assert login.status_code == 200

    def test_delete_cascades_sessions(self, client, super_headers, register, book):
        alice = register("alice")
        bob = register("bob")
        carol = register("carol")
        book("S-1", alice, bob)
        book("S-2", carol, alice)
        kept = book("S-3", bob, carol)

        resp = client.delete(f"/api/users/{alice}", headers=super_headers)
        assert resp.status_code == 200
        assert resp.json()["data"] == {"deletedSessions": 2}

        assert client.get(f"/api/users/{alice}", headers=super_headers).status_code == 404
        sessions = client.get("/api/sessions", headers=super_headers).json()
        assert [s["sessionId"] for s in sessions["data"]] == ["S-3"]
        assert client.get(f"/api/users/{bob}", headers=super_headers).json()["data"]["sessions"] == 1
        assert client.get(f"/api/users/{carol}", headers=super_headers).json()["data"]["sessions"] == 1
        assert client.get(f"/api/sessions/{kept['id']}", headers=super_headers).status_code == 200

        assert client.delete(f"/api/users/{alice}", headers=super_headers).status_code == 404


class TestSessionsApi:
    def test_create(self, client, super_headers, register, book):
        alice, bob = register("alice"), register("bob")
        row = book("S-1", alice, bob, durationInMinutes=45)
        assert row["user"] == "alice"
        assert row["listener"] == "bob"
        assert row["duration"] == "45 min"
        assert row["status"] == "scheduled"
        assert row["payment"] == "pending"

        alice_row = client.get(f"/api/users/{alice}", headers=super_headers).json()["data"]
        assert alice_row["sessions"] == 1

    def test_missing_fields(self, client, super_headers):
        resp = client.post("/api/sessions", json={"sessionId": "S-1"}, headers=super_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == (
            "Missing required fields: user, listener, type, startTime, amount"
        )

    def test_duplicate_session_id(self, client, super_headers, register, book):
        alice, bob = register("alice"), register("bob")
        book("S-1", alice, bob)
        resp = client.post(
            "/api/sessions",
            json={
                "sessionId": "S-1",
                "user": alice,
                "listener": bob,
                "type": "audio",
                "startTime": "2026-03-02T10:00:00Z",
                "amount": 10,
            },
            headers=super_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "A session with this 'sessionId' already exists."

    def test_malformed_participant(self, client, super_headers):
        resp = client.post(
            "/api/sessions",
            json={
                "sessionId": "S-1",
                "user": "nope",
                "listener": MISSING_ID,
                "type": "chat",
                "startTime": "2026-03-01T10:00:00Z",
                "amount": 1,
            },
            headers=super_headers,
        )
        assert resp.status_code == 400

    def test_unknown_participants_show_na(self, client, super_headers, book):
        row = book("S-9", MISSING_ID, "f" * 24)
        assert row["user"] == "N/A"
        assert row["listener"] == "N/A"

    def test_list_filters_and_sort(self, client, super_headers, register, book):
        alice, bob = register("alice"), register("bob")
        book("S-1", alice, bob, amount=300, startTime="2026-03-01T10:00:00Z")
        book("S-2", alice, bob, amount=100, type="video", startTime="2026-03-03T10:00:00Z")
        book("S-3", alice, bob, amount=200, paymentStatus="completed", startTime="2026-03-02T10:00:00Z")

        default = client.get("/api/sessions", headers=super_headers).json()
        assert [s["sessionId"] for s in default["data"]] == ["S-2", "S-3", "S-1"]

        by_amount = client.get("/api/sessions?sortBy=amount&order=asc", headers=super_headers).json()
        assert [s["sessionId"] for s in by_amount["data"]] == ["S-2", "S-3", "S-1"]

        videos = client.get("/api/sessions?type=video", headers=super_headers).json()
        assert videos["total"] == 1
        assert videos["data"][0]["sessionId"] == "S-2"

        paid = client.get("/api/sessions?paymentStatus=completed", headers=super_headers).json()
        assert [s["sessionId"] for s in paid["data"]] == ["S-3"]

        assert client.get("/api/sessions?sortBy=password", headers=super_headers).status_code == 400
        assert client.get("/api/sessions?status=lost", headers=super_headers).status_code == 422

    def test_update_end_and_delete(self, client, super_headers, register, book):
        alice, bob = register("alice"), register("bob")
        row = book("S-1", alice, bob)

        resp = client.put(
            f"/api/sessions/{row['id']}",
            json={"status": "ongoing", "amount": 99.5},
            headers=super_headers,
        )
        assert resp.json()["data"]["status"] == "ongoing"
        assert resp.json()["data"]["amount"] == 99.5

        resp = client.post(f"/api/sessions/{row['id']}/end", headers=super_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "completed"

        assert client.delete(f"/api/sessions/{row['id']}", headers=super_headers).status_code == 200
        assert client.get(f"/api/users/{alice}", headers=super_headers).json()["data"]["sessions"] == 0
        assert client.get(f"/api/users/{bob}", headers=super_headers).json()["data"]["sessions"] == 0
        assert client.get(f"/api/sessions/{row['id']}", headers=super_headers).status_code == 404
        assert client.delete(f"/api/sessions/{row['id']}", headers=super_headers).status_code == 404

    def test_end_missing_session(self, client, super_headers):
        assert client.post(f"/api/sessions/{MISSING_ID}/end", headers=super_headers).status_code == 404

    def test_compliance_can_end_sessions(self, client, make_admin, register, book):
        compliance = make_admin("Compliance", "cleo@backoffice.io")
        row = book("S-1", register("alice"), register("bob"))
        resp = client.post(f"/api/sessions/{row['id']}/end", headers=compliance)
        assert resp.status_code == 200


class TestListenersApi:
    def test_promote(self, client, super_headers, register):
        alice = register("alice")
        resp = client.post(
            "/api/listeners",
            json={"userId": alice, "expertise": ["grief", "stress"], "experience": 4},
            headers=super_headers,
        )
        assert resp.status_code == 201
        listener = resp.json()["data"]
        assert listener["status"] == "pending"
        assert listener["commission"] == "20%"
        assert listener["userId"] == alice

        user = client.get(f"/api/users/{alice}", headers=super_headers).json()["data"]
        assert user["role"] == "listener"

    def test_promote_errors(self, client, super_headers, register):
        resp = client.post("/api/listeners", json={"userId": MISSING_ID}, headers=super_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "User not found"

        alice = register("alice")
        client.post("/api/listeners", json={"userId": alice}, headers=super_headers)
        resp = client.post("/api/listeners", json={"userId": alice}, headers=super_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "User is already a listener"

    def test_list_newest_first_with_user(self, client, super_headers, register):
        for name in ("alice", "bob"):
            client.post("/api/listeners", json={"userId": register(name)}, headers=super_headers)

        body = client.get("/api/listeners", headers=super_headers).json()
        assert body["total"] == 2
        assert [row["user"]["username"] for row in body["data"]] == ["bob", "alice"]

        assert client.get("/api/listeners?status=approved", headers=super_headers).json()["total"] == 0

    def test_update_and_remove(self, client, super_headers, register):
        alice = register("alice")
        listener = client.post(
            "/api/listeners", json={"userId": alice, "commission": "15%"}, headers=super_headers
        ).json()["data"]
        assert listener["commission"] == "15%"

        resp = client.put(
            f"/api/listeners/{listener['id']}",
            json={"status": "approved", "experience": 6},
            headers=super_headers,
        )
        data = resp.json()["data"]
        assert data["status"] == "approved"
        assert data["experience"] == 6

        detail = client.get(f"/api/listeners/{listener['id']}", headers=super_headers).json()["data"]
        assert detail["user"]["email"] == "alice@backoffice.io"

        assert client.delete(f"/api/listeners/{listener['id']}", headers=super_headers).status_code == 200
        user = client.get(f"/api/users/{alice}", headers=super_headers).json()["data"]
        assert user["role"] == "user"
        assert client.get(f"/api/listeners/{listener['id']}", headers=super_headers).status_code == 404
