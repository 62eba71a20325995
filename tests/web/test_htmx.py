"""Tests for HTMX fragments."""

import json

import pytest
from fastapi.testclient import TestClient

from devdaily.application.product import ProductOrchestrator
from devdaily.dtos.product_requests import CreateProductRequest
from devdaily.infrastructure.memory import Repositories


def hx_trigger(response) -> dict:
    return json.loads(response.headers["HX-Trigger"])


async def make_verified(orchestrator: ProductOrchestrator, add_link, name: str = "Razer Viper V3"):
    """A verified product with one active link, ready to publish."""
    product = await orchestrator.create_product(
        CreateProductRequest.from_request({"name": name, "market_price": "2199000"})
    )
    add_link(product.id)
    await orchestrator.request_verification(product.id)
    return await orchestrator.verify_product(product.id)


class TestBulk:
    @pytest.mark.asyncio
    async def test_partial_failure_is_a_warning(
        self, auth_client: TestClient, orchestrator: ProductOrchestrator, add_link
    ) -> None:
        product = await make_verified(orchestrator, add_link)

        response = auth_client.post("/htmx/products/bulk", data={"action": "publish", "product_ids": [product.id, 999]})

        assert response.status_code == 200
        payload = hx_trigger(response)
        assert payload["showToast"]["type"] == "warning"
        assert payload["showToast"]["message"] == "Processed 2 items: 1 succeeded, 1 failed."
        assert payload["refreshTable"] is True
        assert payload["refreshStats"] is True

    @pytest.mark.asyncio
    async def test_success(self, auth_client: TestClient, orchestrator: ProductOrchestrator, add_link) -> None:
        product = await make_verified(orchestrator, add_link)

        response = auth_client.post("/htmx/products/bulk", data={"action": "publish", "product_ids": [product.id]})

        assert hx_trigger(response)["showToast"] == {"type": "success", "message": "Publish: 1 product updated."}
        assert (await orchestrator.get_product(product.id, admin_mode=True)).status == "published"

    def test_empty_selection(self, auth_client: TestClient) -> None:
        response = auth_client.post("/htmx/products/bulk", data={"action": "archive"})

        assert response.status_code == 422
        assert hx_trigger(response)["showToast"] == {"type": "error", "message": "Select at least one product."}

    def test_requires_login(self, client: TestClient) -> None:
        response = client.post("/htmx/products/bulk", data={"action": "archive", "product_ids": [1]})
        assert response.status_code == 401


class TestProductFragments:
    @pytest.mark.asyncio
    async def test_toggle_status(self, auth_client: TestClient, orchestrator: ProductOrchestrator, add_link) -> None:
        product = await make_verified(orchestrator, add_link)

        response = auth_client.post(f"/htmx/products/{product.id}/toggle-status", data={"target_status": "published"})

        assert response.status_code == 200
        assert f'id="status-{product.id}"' in response.text
        payload = hx_trigger(response)
        assert payload["showToast"]["type"] == "success"
        assert payload["refreshStats"] is True

    @pytest.mark.asyncio
    async def test_invalid_transition(self, auth_client: TestClient, orchestrator: ProductOrchestrator) -> None:
        draft = await orchestrator.create_product(
            CreateProductRequest.from_request({"name": "Draft Mouse", "market_price": "150000"})
        )

        response = auth_client.post(f"/htmx/products/{draft.id}/toggle-status", data={"target_status": "published"})

        assert response.status_code == 422
        assert hx_trigger(response)["showToast"]["type"] == "error"

    @pytest.mark.asyncio
    async def test_delete(self, auth_client: TestClient, orchestrator: ProductOrchestrator, add_link) -> None:
        product = await make_verified(orchestrator, add_link)

        response = auth_client.post(f"/htmx/products/{product.id}/delete")

        assert response.status_code == 200
        assert hx_trigger(response)["showToast"]["message"] == "Product moved to trash."
        assert (await orchestrator.get_product(product.id, admin_mode=True)).deleted_at is not None

    def test_delete_missing_product(self, auth_client: TestClient) -> None:
        response = auth_client.post("/htmx/products/999/delete")
        assert response.status_code == 404

    @pytest.mark.usefixtures("demo_catalog")
    def test_search_rows(self, auth_client: TestClient) -> None:
        response = auth_client.get("/htmx/products/search", params={"search": "sony"})

        assert response.status_code == 200
        assert "Sony WH-1000XM5" in response.text
        assert "Logitech" not in response.text


class TestCatalogFragments:
    @pytest.mark.usefixtures("demo_catalog")
    def test_category_children(self, auth_client: TestClient, repositories: Repositories) -> None:
        parent = repositories.categories.get_by_slug("peripherals")

        response = auth_client.get(f"/htmx/categories/{parent.id}/children")

        assert response.status_code == 200
        assert "Keyboards" in response.text
        assert "Mice" in response.text

    def test_validate_url(self, auth_client: TestClient, marketplace) -> None:
        response = auth_client.post(
            "/htmx/links/validate-url",
            data={"url": "https://shopee.co.id/item", "marketplace_id": str(marketplace.id)},
        )

        assert response.status_code == 200
        assert "does not look like a Tokopedia link" in response.text

    def test_validate_empty_url(self, auth_client: TestClient) -> None:
        response = auth_client.post("/htmx/links/validate-url", data={"url": ""})
        assert response.status_code == 422
