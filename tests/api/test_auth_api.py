"""Tests for the auth and dashboard API."""

import pytest
from fastapi.testclient import TestClient

from devdaily.application.admin_service import AdminService
from devdaily.infrastructure.config import settings


@pytest.fixture
def default_admin() -> None:
    AdminService().ensure_default_admin()


class TestLogin:
    @pytest.mark.usefixtures("default_admin")
    def test_login_returns_token_and_cookie(self, client: TestClient) -> None:
        response = client.post(
            "/api/auth/login",
            json={"username": settings.default_admin_username, "password": settings.default_admin_password},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token_type"] == "Bearer"
        assert data["admin"]["username"] == "admin"
        assert response.cookies.get(settings.admin_cookie_name) == data["token"]

    @pytest.mark.usefixtures("default_admin")
    def test_wrong_password(self, client: TestClient) -> None:
        response = client.post("/api/auth/login", json={"identifier": "admin", "password": "nope-nope"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials."
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_missing_identifier(self, client: TestClient) -> None:
        response = client.post("/api/auth/login", json={"password": "whatever"})

        assert response.status_code == 400
        assert "identifier" in response.json()["errors"]


class TestMe:
    def test_me(self, auth_client: TestClient) -> None:
        data = auth_client.get("/api/auth/me").json()["data"]
        assert data["username"] == "admin"
        assert data["permissions"] == ["*"]

    def test_me_requires_token(self, client: TestClient) -> None:
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer bogus"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token."

    def test_cookie_token(self, client: TestClient, admin_token: str) -> None:
        client.cookies.set(settings.admin_cookie_name, admin_token)
        assert client.get("/api/auth/me").status_code == 200

    def test_logout_revokes_token(self, auth_client: TestClient) -> None:
        assert auth_client.post("/api/auth/logout").status_code == 200
        assert auth_client.get("/api/auth/me").status_code == 401


class TestDashboard:
    def test_stats_require_admin(self, client: TestClient) -> None:
        response = client.get("/api/dashboard/stats")
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.usefixtures("demo_catalog")
    def test_stats(self, auth_client: TestClient) -> None:
        data = auth_client.get("/api/dashboard/stats").json()["data"]

        assert data["products"]["published"] == 5
        assert data["marketplaces"] == 4
        assert data["links"]["total"] == 9
        assert data["admins"] == 1

    def test_service_health(self, auth_client: TestClient) -> None:
        response = auth_client.get("/api/dashboard/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "operational"
