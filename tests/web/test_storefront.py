"""Tests for the public storefront pages."""

import pytest
from fastapi.testclient import TestClient

from devdaily.domain.entities import Category
from devdaily.infrastructure.memory import Repositories

pytestmark = pytest.mark.usefixtures("demo_catalog")


class TestPages:
    def test_home(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Logitech MX Master 3S" in response.text
        assert "Peripherals" in response.text

    def test_listing_search(self, client: TestClient) -> None:
        response = client.get("/search", params={"q": "sony"})

        assert response.status_code == 200
        assert "Sony WH-1000XM5" in response.text
        assert "Logitech MX Master 3S" not in response.text

    def test_product_detail(self, client: TestClient) -> None:
        response = client.get("/product/logitech-mx-master-3s")

        assert response.status_code == 200
        assert "Logitech Official" in response.text
        assert "Rp 1.549.000" in response.text

    def test_category_page_includes_subcategories(self, client: TestClient) -> None:
        response = client.get("/category/peripherals")

        assert response.status_code == 200
        assert "Keychron K2 Wireless Mechanical Keyboard" in response.text
        assert "Logitech MX Master 3S" in response.text

    def test_category_page_with_many_subcategories(self, client: TestClient, repositories: Repositories) -> None:
        """Descendant scope is not limited like visitor category filters."""
        parent = repositories.categories.get_by_slug("peripherals")
        for i in range(11):
            repositories.categories.add(Category(name=f"Accessory {i}", slug=f"accessory-{i}", parent_id=parent.id))

        response = client.get("/category/peripherals")

        assert response.status_code == 200
        assert "Logitech MX Master 3S" in response.text

    def test_inverted_price_range_falls_back(self, client: TestClient) -> None:
        response = client.get("/products", params={"min_price": "500000", "max_price": "100"})

        assert response.status_code == 200
        assert "Invalid product query" in response.text
        assert "Sony WH-1000XM5" in response.text

    def test_static_page(self, client: TestClient) -> None:
        assert client.get("/page/about").status_code == 200


class TestNotFound:
    @pytest.mark.parametrize("path", ["/product/missing", "/category/missing", "/page/missing", "/nowhere"])
    def test_html_404(self, client: TestClient, path: str) -> None:
        response = client.get(path)

        assert response.status_code == 404
        assert "text/html" in response.headers["content-type"]
        assert "The page you are looking for does not exist." in response.text


class TestOutboundLinks:
    def test_go_counts_click_and_redirects(self, client: TestClient, repositories: Repositories) -> None:
        link = repositories.links.all()[0]

        response = client.get(f"/go/{link.id}", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == link.url
        assert repositories.links.get(link.id).clicks == 1

    def test_inactive_link_is_not_followed(self, client: TestClient, repositories: Repositories) -> None:
        link = repositories.links.all()[0]
        link.active = False

        assert client.get(f"/go/{link.id}", follow_redirects=False).status_code == 404
