"""
tests/test_api_routes.py -- Integration tests for the HTTP surface.

These tests run through the full stack: FastAPI routing -> gate dependencies
-> AuthService -> SQL stores -> exception handlers. Response bodies are
compared exactly, since clients parse them.

Fixtures used (from conftest.py):
  - api_client: TestClient with cookie persistence; "root"/"rootpass" is an admin.
  - stores: the (users, sessions) pair wired into the app.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import text

from auth.errors import HashingError
from core.config import get_settings

COOKIE = get_settings().session_cookie_name
# Seeded by the api_client fixture.
ADMIN_USERNAME = "root"
ADMIN_PASSWORD = "rootpass"


def _signup(client: TestClient, username: str, password: str):
    return client.post("/auth/signup", json={"username": username, "password": password})


def _login(client: TestClient, username: str, password: str):
    return client.post("/auth/login", json={"username": username, "password": password})


class TestScenarios:
    def test_alice_signup_login_profile_admin(self, api_client: TestClient) -> None:
        resp = _signup(api_client, "alice", "secret")
        assert resp.status_code == 200
        assert resp.json() == "ok"

        resp = _login(api_client, "alice", "secret")
        assert resp.status_code == 200
        assert resp.json() == "ok"

        resp = api_client.get("/profile")
        assert resp.status_code == 200
        assert resp.json() == {"username": "alice"}

        resp = api_client.get("/admin")
        assert resp.status_code == 403
        assert resp.json() == {"error": "Not authorized for this content"}

    def test_login_unknown_user(self, api_client: TestClient) -> None:
        resp = _login(api_client, "bob", "x")
        assert resp.status_code == 401
        assert resp.json() == {"error": "User not found"}
        assert COOKIE not in api_client.cookies


class TestLogin:
    def test_wrong_password_creates_no_session(self, api_client: TestClient) -> None:
        resp = _login(api_client, ADMIN_USERNAME, "not-the-password")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Incorrect password"}
        assert COOKIE not in api_client.cookies
        assert api_client.get("/profile").status_code == 401

    def test_admin_login_profile_includes_role(self, api_client: TestClient) -> None:
        assert _login(api_client, ADMIN_USERNAME, ADMIN_PASSWORD).status_code == 200
        resp = api_client.get("/profile")
        assert resp.json() == {"username": "root", "role": "admin"}

    def test_login_sets_httponly_cookie_and_no_store(self, api_client: TestClient) -> None:
        resp = _login(api_client, ADMIN_USERNAME, ADMIN_PASSWORD)
        set_cookie = resp.headers["set-cookie"].lower()
        assert set_cookie.startswith(f"{COOKIE}=")
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie
        assert resp.headers["cache-control"] == "no-store"

    def test_login_rotates_session_token(self, api_client: TestClient, stores) -> None:
        _users, sessions = stores
        _login(api_client, ADMIN_USERNAME, ADMIN_PASSWORD)
        first = api_client.cookies[COOKIE]
        _login(api_client, ADMIN_USERNAME, ADMIN_PASSWORD)
        second = api_client.cookies[COOKIE]

        assert first != second
        assert sessions.get(first) is None
        assert sessions.get(second) is not None

    def test_session_payload_never_holds_password_hash(self, api_client: TestClient, stores) -> None:
        users, sessions = stores
        _login(api_client, ADMIN_USERNAME, ADMIN_PASSWORD)
        stored_hash = users.find_by_username(ADMIN_USERNAME).password_hash

        with sessions.engine.connect() as conn:
            payloads = [row[0] for row in conn.execute(text("SELECT payload FROM sessions"))]
        assert payloads
        assert all(stored_hash not in p and "password" not in p for p in payloads)

    def test_overlong_password_known_user(self, api_client: TestClient) -> None:
        resp = _login(api_client, ADMIN_USERNAME, "a" * 100)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Incorrect password"}
        assert COOKIE not in api_client.cookies

    def test_overlong_password_unknown_user(self, api_client: TestClient) -> None:
        resp = _login(api_client, "nobody", "a" * 100)
        assert resp.status_code == 401
        assert resp.json() == {"error": "User not found"}

    def test_overlong_password_signup_is_unknown_error(self, api_client: TestClient, stores) -> None:
        users, _sessions = stores
        resp = _signup(api_client, "frank", "a" * 100)
        assert resp.status_code == 500
        assert resp.json() == "Unknown error"
        assert users.find_by_username("frank") is None

    def test_missing_username_is_validation_error(self, api_client: TestClient) -> None:
        resp = api_client.post("/auth/login", json={"password": "x"})
        assert resp.status_code == 422
        assert resp.json()["error"] == "Request validation failed."


class TestSignup:
    def test_duplicate_username(self, api_client: TestClient, stores) -> None:
        users, _sessions = stores
        assert _signup(api_client, "alice", "secret").status_code == 200
        before = api_client.cookies[COOKIE]

        resp = _signup(api_client, "alice", "different")
        assert resp.status_code == 400
        assert resp.json() == {"error": "User already exists"}

        # The existing session and the existing account are untouched.
        assert api_client.cookies[COOKIE] == before
        assert api_client.get("/profile").json() == {"username": "alice"}
        assert _login(api_client, "alice", "secret").status_code == 200

    def test_duplicate_of_admin_cannot_take_over(self, api_client: TestClient, stores) -> None:
        users, _sessions = stores
        resp = _signup(api_client, ADMIN_USERNAME, "attacker")
        assert resp.status_code == 400
        assert COOKIE not in api_client.cookies
        assert users.find_by_username(ADMIN_USERNAME).role == "admin"

    def test_empty_password_is_unknown_error(self, api_client: TestClient, stores) -> None:
        users, _sessions = stores
        resp = _signup(api_client, "carol", "")
        assert resp.status_code == 500
        assert resp.json() == "Unknown error"
        assert users.find_by_username("carol") is None
        assert COOKIE not in api_client.cookies

    def test_missing_password_is_unknown_error(self, api_client: TestClient, stores) -> None:
        users, _sessions = stores
        resp = api_client.post("/auth/signup", json={"username": "carol"})
        assert resp.status_code == 500
        assert resp.json() == "Unknown error"
        assert users.find_by_username("carol") is None

    def test_hasher_failure_skips_insert_and_session(self, api_client: TestClient, stores, monkeypatch) -> None:
        users, _sessions = stores

        def boom(plain: str) -> str:
            raise HashingError("primitive failed")

        monkeypatch.setattr(api_client.app.state.auth_service.hasher, "hash", boom)

        resp = _signup(api_client, "dave", "secret")
        assert resp.status_code == 500
        assert resp.json() == "Unknown error"
        assert users.find_by_username("dave") is None
        assert COOKIE not in api_client.cookies
        assert api_client.get("/profile").status_code == 401

    def test_signup_stores_hash_not_plaintext(self, api_client: TestClient, stores) -> None:
        users, _sessions = stores
        _signup(api_client, "erin", "secret")
        record = users.find_by_username("erin")
        assert record.password_hash != "secret"
        assert record.password_hash.startswith("$2b$")
        assert record.role is None


class TestGatedRoutes:
    def test_profile_requires_login(self, api_client: TestClient) -> None:
        resp = api_client.get("/profile")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Please log in"}

    def test_profile_with_forged_cookie(self, api_client: TestClient) -> None:
        api_client.cookies.set(COOKIE, "forged-token")
        resp = api_client.get("/profile")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Please log in"}

    def test_admin_without_session_is_unauthenticated(self, api_client: TestClient) -> None:
        resp = api_client.get("/admin")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Please log in"}

    def test_admin_with_admin_role(self, api_client: TestClient) -> None:
        _login(api_client, ADMIN_USERNAME, ADMIN_PASSWORD)
        resp = api_client.get("/admin")
        assert resp.status_code == 200
        assert resp.json() == "ok"


class TestLogout:
    def test_logout_ends_session(self, api_client: TestClient, stores) -> None:
        _users, sessions = stores
        _login(api_client, ADMIN_USERNAME, ADMIN_PASSWORD)
        token = api_client.cookies[COOKIE]

        resp = api_client.post("/auth/logout")
        assert resp.status_code == 200
        assert resp.json() == "ok"
        assert sessions.get(token) is None
        assert api_client.get("/profile").status_code == 401

    def test_logout_without_session(self, api_client: TestClient) -> None:
        assert api_client.post("/auth/logout").status_code == 200


def test_health_no_auth_required(api_client: TestClient) -> None:
    resp = api_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert "version" in resp.json()


def test_unknown_route_uses_error_shape(api_client: TestClient) -> None:
    resp = api_client.get("/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}
