"""Tests for the back office pages."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from devdaily.application.admin_service import AdminService
from devdaily.domain.enums import ImageSourceType
from devdaily.infrastructure.config import settings
from devdaily.infrastructure.memory import Repositories


class RecordingImageProcessor:
    def __init__(self) -> None:
        self.calls: list[tuple[bytes, str]] = []
        self.ran_inside_event_loop: bool | None = None

    def process(self, content: bytes, filename: str) -> str:
        self.calls.append((content, filename))
        try:
            asyncio.get_running_loop()
            self.ran_inside_event_loop = True
        except RuntimeError:
            self.ran_inside_event_loop = False
        return "2026/10/viper"


class TestSession:
    def test_admin_redirects_to_login(self, client: TestClient) -> None:
        response = client.get("/admin", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/admin/login"

    def test_login_page_is_public(self, client: TestClient) -> None:
        assert client.get("/admin/login").status_code == 200

    def test_login_sets_cookie(self, client: TestClient) -> None:
        AdminService().ensure_default_admin()

        response = client.post(
            "/admin/login",
            data={"identifier": settings.default_admin_username, "password": settings.default_admin_password},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"].startswith("/admin?notice=")
        assert response.cookies.get(settings.admin_cookie_name)

    def test_login_with_wrong_password(self, client: TestClient) -> None:
        AdminService().ensure_default_admin()

        response = client.post("/admin/login", data={"identifier": "admin", "password": "wrong-password"})

        assert response.status_code == 401
        assert "Invalid credentials." in response.text

    def test_logout(self, auth_client: TestClient) -> None:
        response = auth_client.post("/admin/logout", follow_redirects=False)

        assert response.status_code == 303
        assert auth_client.get("/admin", follow_redirects=False).status_code == 303


@pytest.mark.usefixtures("demo_catalog")
class TestPages:
    @pytest.mark.parametrize(
        "path",
        [
            "/admin",
            "/admin/products",
            "/admin/products/new",
            "/admin/products/1",
            "/admin/products/1/edit",
            "/admin/products/1/links/new",
            "/admin/categories",
            "/admin/categories/new",
            "/admin/marketplaces",
            "/admin/badges",
            "/admin/users",
            "/admin/users/new",
            "/admin/roles",
            "/admin/audit-logs",
            "/admin/profile",
        ],
    )
    def test_page_renders(self, auth_client: TestClient, path: str) -> None:
        assert auth_client.get(path).status_code == 200

    def test_unknown_product_renders_error_page(self, auth_client: TestClient) -> None:
        response = auth_client.get("/admin/products/999")

        assert response.status_code == 404
        assert "text/html" in response.headers["content-type"]


class TestForms:
    def test_create_product(self, auth_client: TestClient, repositories: Repositories, category) -> None:
        response = auth_client.post(
            "/admin/products",
            data={"name": "Razer Viper V3", "market_price": "2199000", "category_id": str(category.id)},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert "/admin/products/" in response.headers["location"]

    @pytest.mark.asyncio
    async def test_upload_is_processed_off_the_event_loop(
        self, auth_client: TestClient, repositories: Repositories, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        processor = RecordingImageProcessor()
        monkeypatch.setattr("devdaily.admin.products.get_image_processor", lambda: processor)

        response = auth_client.post(
            "/admin/products",
            data={"name": "Razer Viper V3", "market_price": "2199000"},
            files={"image_file": ("viper.png", b"png-bytes", "image/png")},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert processor.calls == [(b"png-bytes", "viper.png")]
        assert processor.ran_inside_event_loop is False
        product_id = int(response.headers["location"].split("?")[0].rstrip("/").split("/")[-1])
        product = await repositories.products.get(product_id)
        assert product.image_path == "2026/10/viper"
        assert product.image_source_type == ImageSourceType.UPLOAD

    def test_create_product_validation_errors(self, auth_client: TestClient) -> None:
        response = auth_client.post("/admin/products", data={"name": "", "market_price": "5"})

        assert response.status_code == 422
        assert "Minimum price is 100 IDR" in response.text

    def test_create_category(self, auth_client: TestClient, repositories: Repositories) -> None:
        response = auth_client.post("/admin/categories", data={"name": "Tablets"}, follow_redirects=False)

        assert response.status_code == 303
        assert repositories.categories.get_by_slug("tablets") is not None
