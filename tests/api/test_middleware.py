"""Tests for request middleware."""

from fastapi.testclient import TestClient


class TestRequestId:
    def test_generates_request_id(self, client: TestClient) -> None:
        response = client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 36

    def test_echoes_client_request_id(self, client: TestClient) -> None:
        response = client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    def test_error_envelope_carries_request_id(self, client: TestClient) -> None:
        response = client.get("/api/products/missing", headers={"X-Request-ID": "trace-456"})
        assert response.json()["request_id"] == "trace-456"


class TestAdminGuard:
    def test_htmx_requires_admin(self, client: TestClient) -> None:
        response = client.get("/htmx/products/search")
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_public_api_needs_no_token(self, client: TestClient) -> None:
        assert client.get("/api/products").status_code == 200
