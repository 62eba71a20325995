"""Tests for the product orchestrator facade."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from devdaily.application.product import ProductOrchestrator, build_product_orchestrator
from devdaily.application.product.bulk_service import ProductBulkService
from devdaily.application.product.crud_service import ProductCRUDService
from devdaily.application.product.query_service import ProductQueryService
from devdaily.application.product.workflow_service import ProductWorkflowService
from devdaily.domain.enums import ProductBulkActionType
from devdaily.domain.state_machines import ProductStatus
from devdaily.dtos.product_requests import (
    CreateProductRequest,
    ProductBulkActionRequest,
    ProductDeleteRequest,
    ProductToggleStatusRequest,
    PublishProductRequest,
)
from devdaily.dtos.queries import ProductQuery


@pytest.fixture
def services() -> dict[str, MagicMock]:
    return {name: MagicMock() for name in ("crud", "workflow", "query", "bulk")}


@pytest.fixture
def facade(services: dict[str, MagicMock]) -> ProductOrchestrator:
    return ProductOrchestrator(**services)


class TestDelegation:
    """Every facade method forwards its arguments to one sub-service."""

    @pytest.mark.asyncio
    async def test_create_product_forwards_to_crud(self, facade: ProductOrchestrator, services) -> None:
        request = CreateProductRequest.from_request({"name": "Mouse", "market_price": "150000"})
        services["crud"].create_product = AsyncMock(return_value="created")

        assert await facade.create_product(request) == "created"
        services["crud"].create_product.assert_awaited_once_with(request)

    @pytest.mark.asyncio
    async def test_get_product_forwards_admin_flag(self, facade: ProductOrchestrator, services) -> None:
        services["crud"].get_product = AsyncMock(return_value="product")

        await facade.get_product(9, admin_mode=True)
        services["crud"].get_product.assert_awaited_once_with(9, True)

    @pytest.mark.asyncio
    async def test_get_product_by_slug_forwards_view_flag(self, facade: ProductOrchestrator, services) -> None:
        services["crud"].get_product_by_slug = AsyncMock(return_value="detail")

        await facade.get_product_by_slug("mouse", increment_view_count=False)
        services["crud"].get_product_by_slug.assert_awaited_once_with("mouse", False)

    @pytest.mark.asyncio
    async def test_delete_and_restore_forward_to_crud(self, facade: ProductOrchestrator, services) -> None:
        services["crud"].delete_product = AsyncMock(return_value=True)
        services["crud"].restore_product = AsyncMock(return_value="restored")
        request = ProductDeleteRequest(product_id=3, user_id=1)

        assert await facade.delete_product(request) is True
        assert await facade.restore_product(3, 1) == "restored"
        services["crud"].delete_product.assert_awaited_once_with(request)
        services["crud"].restore_product.assert_awaited_once_with(3, 1)

    @pytest.mark.asyncio
    async def test_workflow_methods_forward_to_workflow(self, facade: ProductOrchestrator, services) -> None:
        workflow = services["workflow"]
        for name in (
            "publish_product",
            "verify_product",
            "request_verification",
            "archive_product",
            "unarchive_product",
            "toggle_product_status",
            "revert_to_draft",
        ):
            setattr(workflow, name, AsyncMock(return_value=name))

        publish = PublishProductRequest(product_id=1)
        toggle = ProductToggleStatusRequest(product_id=1, target_status=ProductStatus.VERIFIED)

        assert await facade.publish_product(publish) == "publish_product"
        assert await facade.verify_product(1, 2, "ok") == "verify_product"
        assert await facade.request_verification(1, 2) == "request_verification"
        assert await facade.archive_product(1, 2, "old") == "archive_product"
        assert await facade.unarchive_product(1, 2) == "unarchive_product"
        assert await facade.toggle_product_status(toggle) == "toggle_product_status"
        assert await facade.revert_to_draft(1, 2, "redo") == "revert_to_draft"

        workflow.publish_product.assert_awaited_once_with(publish)
        workflow.verify_product.assert_awaited_once_with(1, 2, "ok")
        workflow.archive_product.assert_awaited_once_with(1, 2, "old")
        workflow.revert_to_draft.assert_awaited_once_with(1, 2, "redo")
        services["crud"].assert_not_called()

    @pytest.mark.asyncio
    async def test_query_methods_forward_to_query(self, facade: ProductOrchestrator, services) -> None:
        query_service = services["query"]
        query_service.list_products = AsyncMock(return_value="page")
        query_service.search_products = AsyncMock(return_value=[])
        query_service.get_products_by_status = AsyncMock(return_value=[])
        query_service.count_products_by_status = AsyncMock(return_value=4)
        query = ProductQuery.for_admin()

        assert await facade.list_products(query, admin_mode=True) == "page"
        assert await facade.search_products("mouse", {"min_price": "1000"}, 5, 10) == []
        assert await facade.get_products_by_status("draft", 3, 0) == []
        assert await facade.count_products_by_status("draft") == 4

        query_service.list_products.assert_awaited_once_with(query, True)
        query_service.search_products.assert_awaited_once_with("mouse", {"min_price": "1000"}, 5, 10)
        query_service.get_products_by_status.assert_awaited_once_with("draft", 3, 0)

    @pytest.mark.asyncio
    async def test_bulk_action_forwards_to_bulk(self, facade: ProductOrchestrator, services) -> None:
        services["bulk"].bulk_action = AsyncMock(return_value="result")
        request = ProductBulkActionRequest(action=ProductBulkActionType.ARCHIVE, product_ids=(1, 2))

        assert await facade.bulk_action(request) == "result"
        services["bulk"].bulk_action.assert_awaited_once_with(request)


class TestServiceHealth:
    def test_reports_wired_services(self) -> None:
        orchestrator = build_product_orchestrator()

        assert isinstance(orchestrator.crud, ProductCRUDService)
        assert isinstance(orchestrator.workflow, ProductWorkflowService)
        assert isinstance(orchestrator.query, ProductQueryService)
        assert isinstance(orchestrator.bulk, ProductBulkService)
        assert orchestrator.get_service_health() == {
            "crud": "ProductCRUDService",
            "workflow": "ProductWorkflowService",
            "query": "ProductQueryService",
            "bulk": "ProductBulkService",
            "status": "operational",
        }

    def test_sub_services_share_one_repository(self) -> None:
        orchestrator = build_product_orchestrator()
        assert orchestrator.crud.products is orchestrator.workflow.products
        assert orchestrator.query.products is orchestrator.bulk.products
