"""
Contract tests for the authentication API and service endpoints.

Tests verify:
- Registration status codes and plain-text bodies
- Role defaulting and password hashing on registration
- Login responses (token structure, 401 on bad credentials)
- Tokens of newly registered users being honoured by the book endpoints
- Health, readiness and metrics endpoints
"""

from unittest.mock import AsyncMock

from jose import jwt

from catalog_api.src.config import get_settings
from catalog_api.src.routers.auth import (
    LOGGED_IN_MESSAGE,
    REGISTERED_MESSAGE,
    USERNAME_TAKEN_MESSAGE,
)


REGISTER_URL = "/api/auth/register"
LOGIN_URL = "/api/auth/login"


class TestRegisterEndpoint:
    """Test POST /api/auth/register."""

    def test_register_new_user(self, client, seeded_user_repo):
        """New username returns 201 with a plain-text message."""
        response = client.post(REGISTER_URL, json={"username": "alice", "password": "s3cret"})

        assert response.status_code == 201
        assert response.text == REGISTERED_MESSAGE
        assert response.headers["content-type"].startswith("text/plain")
        assert "alice" in seeded_user_repo.users

    def test_register_stores_hash(self, client, seeded_user_repo, pwd_context):
        """Password is stored as a bcrypt hash, never in plaintext."""
        client.post(REGISTER_URL, json={"username": "alice", "password": "s3cret"})

        stored = seeded_user_repo.users["alice"].password
        assert stored != "s3cret"
        assert stored.startswith("$2")
        assert pwd_context.verify("s3cret", stored)

    def test_register_defaults_role(self, client, seeded_user_repo):
        """Missing role is stored as ROLE_USER."""
        client.post(REGISTER_URL, json={"username": "alice", "password": "pw"})

        assert seeded_user_repo.users["alice"].role == "ROLE_USER"

    def test_register_empty_role_defaults(self, client, seeded_user_repo):
        """Empty role is stored as ROLE_USER."""
        client.post(REGISTER_URL, json={"username": "bob", "password": "pw", "role": ""})

        assert seeded_user_repo.users["bob"].role == "ROLE_USER"

    def test_register_with_explicit_role(self, client, seeded_user_repo):
        """Supplied role is stored as given."""
        client.post(REGISTER_URL, json={"username": "carol", "password": "pw", "role": "ROLE_ADMIN"})

        assert seeded_user_repo.users["carol"].role == "ROLE_ADMIN"

    def test_register_taken_username(self, client, seeded_user_repo):
        """Existing username returns 400 and leaves the stored user intact."""
        original_hash = seeded_user_repo.users["admin"].password

        response = client.post(REGISTER_URL, json={"username": "admin", "password": "other"})

        assert response.status_code == 400
        assert response.text == USERNAME_TAKEN_MESSAGE
        assert seeded_user_repo.users["admin"].password == original_hash

    def test_register_twice(self, client):
        """Second registration of the same name is rejected."""
        first = client.post(REGISTER_URL, json={"username": "dave", "password": "pw"})
        second = client.post(REGISTER_URL, json={"username": "dave", "password": "pw"})

        assert first.status_code == 201
        assert second.status_code == 400

    def test_register_unhashable_password(self, client, seeded_user_repo):
        """A free username with a password bcrypt rejects is not reported as taken."""
        response = client.post(REGISTER_URL, json={"username": "nul", "password": "a\u0000b"})

        assert response.status_code == 400
        assert response.text != USERNAME_TAKEN_MESSAGE
        assert response.text == "Password contains unsupported characters"
        assert "nul" not in seeded_user_repo.users

    def test_register_lost_race(self, client, seeded_user_repo):
        """Conflict raised by the store after the existence check still reads as taken."""
        seeded_user_repo.exists_by_username = AsyncMock(return_value=False)

        response = client.post(REGISTER_URL, json={"username": "admin", "password": "pw"})

        assert response.status_code == 400
        assert response.text == USERNAME_TAKEN_MESSAGE

    def test_register_missing_password(self, client):
        """Malformed body returns 422 with validation details."""
        response = client.post(REGISTER_URL, json={"username": "erin"})

        assert response.status_code == 422
        assert isinstance(response.json()["detail"], list)


class TestLoginEndpoint:
    """Test POST /api/auth/login."""

    def test_login_success(self, client):
        """Valid credentials return a bearer token."""
        response = client.post(LOGIN_URL, json={"username": "admin", "password": "admin123"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == LOGGED_IN_MESSAGE
        assert body["token_type"] == "bearer"
        assert body["expires_in"] == get_settings().jwt_access_token_expire_minutes * 60
        assert len(body["access_token"]) >= 10

    def test_login_token_claims(self, client):
        """Token carries the username and authorities."""
        response = client.post(LOGIN_URL, json={"username": "user", "password": "user123"})
        settings = get_settings()

        claims = jwt.decode(
            response.json()["access_token"],
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer
        )

        assert claims["sub"] == "user"
        assert claims["roles"] == ["ROLE_USER"]
        assert claims["exp"] > claims["iat"]

    def test_login_wrong_password(self, client):
        """Wrong password returns 401."""
        response = client.post(LOGIN_URL, json={"username": "admin", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    def test_login_unknown_user(self, client):
        """Unknown user gets the same 401 as a wrong password."""
        response = client.post(LOGIN_URL, json={"username": "ghost", "password": "admin123"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    def test_registered_user_can_login(self, client):
        """Registration followed by login succeeds."""
        client.post(REGISTER_URL, json={"username": "frank", "password": "pw"})

        response = client.post(LOGIN_URL, json={"username": "frank", "password": "pw"})

        assert response.status_code == 200

    def test_registered_admin_can_write_books(self, client, book_repo):
        """Token of a user registered as ROLE_ADMIN passes the admin guard."""
        client.post(REGISTER_URL, json={"username": "grace", "password": "pw", "role": "ROLE_ADMIN"})
        token = client.post(LOGIN_URL, json={"username": "grace", "password": "pw"}).json()["access_token"]

        response = client.post(
            "/books",
            json={"isbn": "by-grace", "title": "T", "author": "A"},
            headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 201
        assert "by-grace" in book_repo.books

    def test_token_of_removed_user_rejected(self, client, seeded_user_repo, admin_headers):
        """Token stops working once the user row is gone."""
        del seeded_user_repo.users["admin"]

        response = client.post("/books", json={"isbn": "x"}, headers=admin_headers)

        assert response.status_code == 401


class TestServiceEndpoints:
    """Test health, readiness and metrics endpoints."""

    def test_health(self, client):
        """Liveness check answers without a database."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_without_pool(self, client):
        """Readiness fails while no connection pool exists."""
        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["database"] == "unhealthy"

    def test_metrics(self, client):
        """Prometheus exposition includes request metrics."""
        client.get("/books")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert "catalog_book_writes_total" in response.text

    def test_correlation_id_echoed(self, client):
        """Supplied correlation id is echoed back."""
        response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["x-correlation-id"] == "abc-123"
