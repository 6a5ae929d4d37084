"""Tests for authentication endpoints and flows."""

from datetime import datetime, timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient
from jose import jwt

from app.config import Settings
from app.services.jwt import JWTService
from app.storage.memory import MemoryStore


class TestRegistration:
    """Tests for user registration."""

    def test_register_success(self, client: TestClient, store: MemoryStore):
        """Register a new user via API."""
        response = client.post("/api/auth/register", json={"username": "newbie", "password": "password123"})
        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "newbie"
        assert data["userId"]
        assert "token" in data
        assert "am_auth_token" in response.cookies
        assert store.get_user_by_username("newbie") is not None

    def test_password_is_hashed(self, client: TestClient, store: MemoryStore):
        client.post("/api/auth/register", json={"username": "newbie", "password": "password123"})
        stored = store.get_user_by_username("newbie").password
        assert stored != "password123"
        assert stored.startswith("$2")

    def test_register_duplicate_username(self, client: TestClient, test_user: dict):
        """Reject duplicate username registration."""
        response = client.post("/api/auth/register", json={"username": "listener", "password": "password123"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Username already taken"

    def test_register_short_password(self, client: TestClient):
        response = client.post("/api/auth/register", json={"username": "newbie", "password": "short"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request data"

    def test_register_missing_fields(self, client: TestClient):
        response = client.post("/api/auth/register", json={"username": "newbie"})
        assert response.status_code == 400


class TestLogin:
    """Tests for user login."""

    def test_login_success(self, client: TestClient, test_user: dict):
        """Login with valid credentials."""
        response = client.post("/api/auth/login", json={"username": "listener", "password": "password123"})
        assert response.status_code == 200
        data = response.json()
        assert data["userId"] == test_user["user_id"]
        assert data["username"] == "listener"
        assert "am_auth_token" in response.cookies

    def test_login_wrong_password(self, client: TestClient, test_user: dict):
        """Reject login with wrong password."""
        response = client.post("/api/auth/login", json={"username": "listener", "password": "wrongpassword"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    def test_login_unknown_user(self, client: TestClient):
        """Reject login with unknown username."""
        response = client.post("/api/auth/login", json={"username": "nobody", "password": "password123"})
        assert response.status_code == 401

    def test_login_token_works(self, client: TestClient, test_user: dict):
        token = client.post("/api/auth/login", json={"username": "listener", "password": "password123"}).json()[
            "token"
        ]
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200


class TestCurrentUser:
    """Tests for resolving the current identity."""

    def test_me_with_header(self, client: TestClient, test_user: dict):
        response = client.get("/api/auth/me", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json() == {"userId": test_user["user_id"], "username": "listener"}

    def test_me_with_cookie(self, client: TestClient, test_user: dict):
        """The auth cookie is accepted when no header is sent."""
        client.cookies.set("am_auth_token", test_user["token"])
        response = client.get("/api/auth/me")
        assert response.status_code == 200
        assert response.json()["username"] == "listener"

    def test_no_credentials(self, client: TestClient):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_invalid_token(self, client: TestClient):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer invalid.token.here"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_expired_token(self, client: TestClient, test_user: dict, settings: Settings):
        payload = {
            "sub": test_user["user_id"],
            "username": "listener",
            "exp": datetime.utcnow() - timedelta(minutes=1),
        }
        token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_deleted_user(self, client: TestClient, settings: Settings):
        token = JWTService(settings).create_token(user_id="ghost", username="ghost")
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_signed_with_other_secret(self, client: TestClient, test_user: dict, settings: Settings):
        other = Settings()
        other.JWT_SECRET_KEY = "a-different-secret"
        token = JWTService(other).create_token(user_id=test_user["user_id"], username="listener")
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestAppSurface:
    """Tests for cross-cutting application behavior."""

    def test_health_check(self, client: TestClient):
        """Health check returns ok status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["app"] == "audiomind"

    def test_security_headers(self, client: TestClient):
        response = client.get("/api/health")
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"

    def test_mutations_are_audited(self, client: TestClient, test_user: dict):
        with patch("main.logger") as mock_logger:
            client.post("/api/auth/login", json={"username": "listener", "password": "password123"})
            calls = [str(c) for c in mock_logger.info.call_args_list]
            assert any("AUDIT" in c for c in calls)
