"""End-to-end tests for the authentication HTTP API.

The app runs on the test container: in-memory repositories and mock
OAuth clients.
"""

import base64
import json
import re
import time
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from authhost.interface.api.app import create_app
from tests.conftest import digest_authorization
from tests.di import build_test_container

PASSWORD = "correct horse"


@pytest.fixture
def client(monkeypatch):
    """Test client with a fresh container and one seeded admin."""
    monkeypatch.setenv(
        "AUTH__SEED_USERS",
        json.dumps([{"username": "root", "password": "root-password", "roles": ["Admin"]}]),
    )
    app = create_app(build_test_container())
    with TestClient(app) as test_client:
        yield test_client


def _register(client: TestClient, username: str = "alice", auto_login: bool = False):
    return client.post(
        "/register",
        json={"username": username, "password": PASSWORD, "auto_login": auto_login},
    )


def _basic(username: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


class TestSampleService:
    """Health and hello endpoints."""

    def test_hello(self, client):
        assert client.get("/hello/World").json() == {"result": "Hello, World!"}
        assert client.get("/hello").json() == {"result": "Hello, !"}

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["environment"] == "test"


class TestCredentialsFlow:
    """Register, sign in, inspect and sign out."""

    def test_full_session_lifecycle(self, client):
        """Should carry the session in a cookie until logout."""
        # Arrange
        assert _register(client).status_code == 201

        # Act
        login = client.post(
            "/auth/credentials", json={"username": "alice", "password": PASSWORD}
        )
        me = client.get("/auth/me")
        logout = client.post("/auth/logout")
        after = client.get("/auth/me")

        # Assert
        assert login.status_code == 200
        assert "HttpOnly" in login.headers["set-cookie"]
        assert me.json()["authenticated"] is True
        assert me.json()["user"]["username"] == "alice"
        assert logout.json() == {"success": True, "message": "Successfully logged out"}
        assert after.json() == {"authenticated": False, "user": None}

    def test_bearer_token(self, client):
        _register(client)
        token = client.post(
            "/auth/credentials", json={"username": "alice", "password": PASSWORD}
        ).json()["session_id"]
        client.cookies.clear()

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.json()["authenticated"] is True

    def test_rolling_session_extends_on_use(self, client):
        """Should push a rolling session's expiry forward on every request."""
        # Arrange
        _register(client)
        login = client.post(
            "/auth/credentials",
            json={
                "username": "alice",
                "password": PASSWORD,
                "remember_me": True,
                "ttl_seconds": 2,
            },
        )
        issued = datetime.fromisoformat(login.json()["expires_at"])
        bearer = {"Authorization": f"Bearer {login.json()['session_id']}"}
        client.cookies.clear()
        time.sleep(1.2)

        # Act
        me = client.get("/auth/me", headers=bearer)

        # Assert
        extended = datetime.fromisoformat(me.json()["user"]["session_expires_at"])
        assert login.json()["rolling"] is True
        assert extended > issued
        assert "set-cookie" in me.headers
        client.cookies.clear()
        time.sleep(1.2)
        assert client.get("/auth/me", headers=bearer).json()["authenticated"] is True

    def test_wrong_password(self, client):
        """Should answer 401 with a stable body and a challenge."""
        _register(client)

        response = client.post(
            "/auth/credentials", json={"username": "alice", "password": "nope-nope"}
        )

        assert response.status_code == 401
        assert response.json() == {
            "error": "invalid_credential",
            "message": "Invalid username or password",
        }
        assert "www-authenticate" in response.headers

    def test_lockout(self, client):
        _register(client)
        for _ in range(5):
            client.post("/auth/credentials", json={"username": "alice", "password": "nope-nope"})

        response = client.post(
            "/auth/credentials", json={"username": "alice", "password": PASSWORD}
        )

        assert response.status_code == 423
        assert response.json()["error"] == "account_locked"

    def test_duplicate_registration(self, client):
        _register(client)

        response = _register(client, "ALICE")

        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_username"

    def test_weak_password(self, client):
        response = client.post("/register", json={"username": "alice", "password": "short"})

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_change_password_signs_out(self, client):
        # Arrange
        _register(client, auto_login=True)

        # Act
        response = client.post(
            "/users/me/password",
            json={"current_password": PASSWORD, "new_password": "battery staple"},
        )

        # Assert
        assert response.json()["revoked_sessions"] == 1
        assert client.get("/auth/me").json()["authenticated"] is False
        assert (
            client.post(
                "/auth/credentials",
                json={"username": "alice", "password": "battery staple"},
            ).status_code
            == 200
        )

    def test_delete_account(self, client):
        _register(client, auto_login=True)

        response = client.delete("/users/me")

        assert response.status_code == 200
        assert client.post(
            "/auth/credentials", json={"username": "alice", "password": PASSWORD}
        ).status_code == 401

    def test_protected_endpoints_need_a_session(self, client):
        assert client.post("/auth/refresh").status_code == 401
        assert client.delete("/users/me").status_code == 401
        assert client.post("/auth/logout").status_code == 200


class TestHttpAuthSchemes:
    """HTTP Basic and Digest sign-in."""

    def test_basic_challenge_then_login(self, client):
        _register(client)

        challenge = client.post("/auth/basic")
        login = client.post("/auth/basic", headers=_basic("alice", PASSWORD))

        assert challenge.status_code == 401
        assert challenge.headers["www-authenticate"] == 'Basic realm="authhost"'
        assert login.status_code == 200
        assert login.json()["provider"] == "basic"

    def test_digest_challenge_then_login(self, client):
        """Should answer the challenge nonce with a valid response."""
        # Arrange
        _register(client)
        challenge = client.post("/auth/digest")
        nonce = re.search(r'nonce="([^"]+)"', challenge.headers["www-authenticate"]).group(1)

        # Act
        login = client.post(
            "/auth/digest",
            headers={"Authorization": digest_authorization("alice", PASSWORD, nonce)},
        )

        # Assert
        assert challenge.status_code == 401
        assert login.status_code == 200
        assert login.json()["provider"] == "digest"

    def test_digest_replay_is_challenged_as_stale(self, client):
        _register(client)
        challenge = client.post("/auth/digest")
        nonce = re.search(r'nonce="([^"]+)"', challenge.headers["www-authenticate"]).group(1)
        headers = {"Authorization": digest_authorization("alice", PASSWORD, nonce)}
        assert client.post("/auth/digest", headers=headers).status_code == 200

        replay = client.post("/auth/digest", headers=headers)

        assert replay.status_code == 401
        assert replay.headers["www-authenticate"].endswith("stale=true")

    def test_digest_wrong_password_gets_new_challenge(self, client):
        _register(client)
        challenge = client.post("/auth/digest")
        nonce = re.search(r'nonce="([^"]+)"', challenge.headers["www-authenticate"]).group(1)

        response = client.post(
            "/auth/digest",
            headers={"Authorization": digest_authorization("alice", "wrong password", nonce)},
        )

        assert response.status_code == 401
        assert response.headers["www-authenticate"].startswith("Digest ")
        assert "stale" not in response.headers["www-authenticate"]

    def test_digest_forged_nonce_is_stale(self, client):
        _register(client)

        response = client.post(
            "/auth/digest",
            headers={"Authorization": digest_authorization("alice", PASSWORD, "Zm9yZ2Vk")},
        )

        assert response.status_code == 401
        assert response.headers["www-authenticate"].endswith("stale=true")


class TestOAuthFlow:
    """External provider sign-in with mock clients."""

    def test_login_then_callback(self, client):
        """Should start a login and sign in on the callback."""
        # Act
        start = client.post("/auth/login", json={"provider": "github"})
        state = start.json()["state"]
        callback = client.get("/auth/callback/github", params={"code": "abc", "state": state})
        me = client.get("/auth/me").json()

        # Assert
        assert start.status_code == 200
        assert "mock=true" in start.json()["authorization_url"]
        assert callback.status_code == 200
        assert me["user"]["identities"][0]["external_id"] == "github-abc"

    def test_denied_consent(self, client):
        response = client.get("/auth/callback/google", params={"error": "access_denied"})

        assert response.status_code == 502
        assert response.json()["error"] == "provider_rejected"

    def test_provider_unreachable(self, client):
        response = client.get(
            "/auth/callback/vk", params={"code": "unreachable", "state": "s"}
        )

        assert response.status_code == 503

    def test_unknown_provider(self, client):
        assert client.post("/auth/login", json={"provider": "myspace"}).status_code == 422
        assert client.post("/auth/login", json={"provider": "basic"}).status_code == 502


class TestRoles:
    """Role administration by the seeded admin."""

    def test_admin_assigns_role(self, client):
        # Arrange
        _register(client, "bob")
        client.post("/auth/credentials", json={"username": "root", "password": "root-password"})

        # Act
        response = client.post("/roles/assign", json={"username": "bob", "roles": ["Editor"]})

        # Assert
        assert response.status_code == 200
        assert response.json()["roles"] == ["Editor"]

    def test_non_admin_is_forbidden(self, client):
        _register(client, "bob", auto_login=True)

        response = client.post("/roles/assign", json={"username": "bob", "roles": ["Admin"]})

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
