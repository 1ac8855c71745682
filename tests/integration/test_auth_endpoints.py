"""Integration tests for auth and health endpoints."""
import pytest


@pytest.mark.asyncio
class TestAuthMe:
    """Tests for GET /auth/me endpoint."""

    async def test_me_returns_user_id(self, app_client, auth_headers):
        """Test the token's user id is echoed back."""
        response = await app_client.get("/auth/me", headers=auth_headers("user-42"))

        assert response.status_code == 200
        assert response.json() == {"user_id": "user-42"}

    async def test_me_without_token(self, app_client):
        """Test missing credentials return 401."""
        response = await app_client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    async def test_me_with_invalid_token(self, app_client):
        """Test an invalid token returns 401."""
        response = await app_client.get(
            "/auth/me",
            headers={"Authorization": "Bearer invalid.token.here"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid authentication credentials"


@pytest.mark.asyncio
class TestHealth:
    """Tests for health endpoints."""

    async def test_root(self, app_client):
        """Test the root health check."""
        response = await app_client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_health(self, app_client):
        """Test the health endpoint."""
        response = await app_client.get("/health")

        assert response.json() == {"status": "healthy"}
