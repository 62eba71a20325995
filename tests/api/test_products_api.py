"""Tests for the public product API."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from devdaily.application.product import ProductOrchestrator
from devdaily.dtos.product_requests import CreateProductRequest

pytestmark = pytest.mark.usefixtures("demo_catalog")


class TestListProducts:
    def test_returns_published_catalog(self, client: TestClient) -> None:
        response = client.get("/api/products")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert len(body["data"]) == 5
        assert body["meta"]["pagination"]["total_data"] == 5

    def test_pagination_meta(self, client: TestClient) -> None:
        pagination = client.get("/api/products", params={"per_page": 2}).json()["meta"]["pagination"]

        assert pagination == {
            "current_page": 1,
            "per_page": 2,
            "total_data": 5,
            "total_pages": 3,
            "next_page": 2,
            "prev_page": None,
        }

    def test_public_shape_hides_workflow_fields(self, client: TestClient) -> None:
        product = client.get("/api/products").json()["data"][0]
        assert "formatted_price" in product
        assert "status" not in product
        assert "created_by" not in product

    @pytest.mark.asyncio
    async def test_status_parameter_is_ignored(
        self, client: TestClient, orchestrator: ProductOrchestrator, add_link
    ) -> None:
        """Visitors cannot list drafts by asking for them."""
        draft = await orchestrator.create_product(
            CreateProductRequest.from_request({"name": "Secret Prototype", "market_price": "999000"})
        )
        add_link(draft.id)

        response = client.get("/api/products", params={"status": "draft", "include_trashed": "1"})

        slugs = [product["slug"] for product in response.json()["data"]]
        assert len(slugs) == 5
        assert "secret-prototype" not in slugs

    def test_price_filter(self, client: TestClient) -> None:
        data = client.get("/api/products", params={"min_price": "9000000"}).json()["data"]
        assert {product["slug"] for product in data} == {
            "lenovo-thinkpad-x1-carbon-gen-11",
            "dell-ultrasharp-u2723qe-27-4k",
        }

    def test_sort_by_price(self, client: TestClient) -> None:
        data = client.get("/api/products", params={"sort_by": "market_price", "sort_direction": "asc"}).json()["data"]
        prices = [Decimal(product["market_price"]) for product in data]
        assert prices == sorted(prices)

    def test_invalid_price_range(self, client: TestClient) -> None:
        response = client.get("/api/products", params={"min_price": "5000", "max_price": "100"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestSearchProducts:
    def test_search(self, client: TestClient) -> None:
        body = client.get("/api/products/search", params={"q": "logitech"}).json()

        assert [product["slug"] for product in body["data"]] == ["logitech-mx-master-3s"]
        assert body["meta"] == {"keyword": "logitech", "count": 1}

    def test_keyword_is_required(self, client: TestClient) -> None:
        response = client.get("/api/products/search")

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert "q" in body["errors"]


class TestProductDetail:
    def test_detail_with_price_comparison(self, client: TestClient) -> None:
        response = client.get("/api/products/logitech-mx-master-3s")

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["links"]) == 2
        assert Decimal(data["price_range"]["min"]) == Decimal("1549000")
        assert [crumb["slug"] for crumb in data["breadcrumbs"]] == ["peripherals", "mice"]

    def test_detail_counts_views(self, client: TestClient) -> None:
        client.get("/api/products/sony-wh-1000xm5")
        data = client.get("/api/products/sony-wh-1000xm5").json()["data"]
        assert data["view_count"] == 2

    def test_unknown_slug(self, client: TestClient) -> None:
        response = client.get("/api/products/does-not-exist")

        assert response.status_code == 404
        body = response.json()
        assert body["status"] == "error"
        assert body["error_code"] == "PRODUCT_NOT_FOUND"
        assert body["request_id"]


class TestCategoriesApi:
    def test_category_tree(self, client: TestClient) -> None:
        data = client.get("/api/categories").json()["data"]

        assert [category["slug"] for category in data] == ["laptops", "peripherals", "monitors", "audio"]
        peripherals = data[1]
        assert [child["slug"] for child in peripherals["children"]] == ["keyboards", "mice"]
        assert peripherals["product_count"] == 2

    def test_category_detail(self, client: TestClient) -> None:
        data = client.get("/api/categories/mice").json()["data"]
        assert data["name"] == "Mice"

    def test_unknown_category(self, client: TestClient) -> None:
        response = client.get("/api/categories/nope")
        assert response.status_code == 404
        assert response.json()["error_code"] == "CATEGORY_NOT_FOUND"
