"""Product orchestrator.

A facade over the CRUD, workflow, query and bulk services. Every method
forwards its arguments unchanged to exactly one sub-service; this layer
adds no transactions, caching or extra validation.
"""

from typing import Any

from devdaily.application.audit_service import AuditService
from devdaily.application.product.bulk_service import ProductBulkService
from devdaily.application.product.crud_service import ProductCRUDService
from devdaily.application.product.interfaces import (
    ProductBulkInterface,
    ProductCRUDInterface,
    ProductOrchestratorInterface,
    ProductQueryInterface,
    ProductWorkflowInterface,
)
from devdaily.application.product.query_service import ProductQueryService
from devdaily.application.product.workflow_service import ProductWorkflowService
from devdaily.domain.repositories import ProductRepository
from devdaily.dtos.bulk import BulkActionResult
from devdaily.dtos.pagination import PaginatedResult
from devdaily.dtos.product_requests import (
    CreateProductRequest,
    ProductBulkActionRequest,
    ProductDeleteRequest,
    ProductQuickEditRequest,
    ProductToggleStatusRequest,
    PublishProductRequest,
    UpdateProductRequest,
)
from devdaily.dtos.queries import ProductQuery
from devdaily.dtos.responses import ProductDetailResponse, ProductResponse
from devdaily.infrastructure.image_processor import ImageProcessor
from devdaily.infrastructure.memory import Repositories, get_repositories


class ProductOrchestrator(ProductOrchestratorInterface):
    """Single entry point for product operations."""

    def __init__(
        self,
        crud: ProductCRUDInterface,
        workflow: ProductWorkflowInterface,
        query: ProductQueryInterface,
        bulk: ProductBulkInterface,
    ) -> None:
        self.crud = crud
        self.workflow = workflow
        self.query = query
        self.bulk = bulk

    # CRUD

    async def create_product(self, request: CreateProductRequest) -> ProductResponse:
        return await self.crud.create_product(request)

    async def get_product(self, product_id: int, admin_mode: bool = False) -> ProductResponse:
        return await self.crud.get_product(product_id, admin_mode)

    async def get_product_by_slug(self, slug: str, increment_view_count: bool = True) -> ProductDetailResponse:
        return await self.crud.get_product_by_slug(slug, increment_view_count)

    async def update_product(self, request: UpdateProductRequest) -> ProductResponse:
        return await self.crud.update_product(request)

    async def delete_product(self, request: ProductDeleteRequest) -> bool:
        return await self.crud.delete_product(request)

    async def restore_product(self, product_id: int, admin_id: int | None = None) -> ProductResponse:
        return await self.crud.restore_product(product_id, admin_id)

    async def quick_edit_product(self, request: ProductQuickEditRequest) -> ProductResponse:
        return await self.crud.quick_edit_product(request)

    # Workflow

    async def publish_product(self, request: PublishProductRequest) -> ProductResponse:
        return await self.workflow.publish_product(request)

    async def verify_product(
        self, product_id: int, admin_id: int | None = None, notes: str | None = None
    ) -> ProductResponse:
        return await self.workflow.verify_product(product_id, admin_id, notes)

    async def request_verification(self, product_id: int, admin_id: int | None = None) -> ProductResponse:
        return await self.workflow.request_verification(product_id, admin_id)

    async def archive_product(
        self, product_id: int, admin_id: int | None = None, reason: str | None = None
    ) -> ProductResponse:
        return await self.workflow.archive_product(product_id, admin_id, reason)

    async def unarchive_product(self, product_id: int, admin_id: int | None = None) -> ProductResponse:
        return await self.workflow.unarchive_product(product_id, admin_id)

    async def toggle_product_status(self, request: ProductToggleStatusRequest) -> ProductResponse:
        return await self.workflow.toggle_product_status(request)

    async def revert_to_draft(
        self, product_id: int, admin_id: int | None = None, reason: str | None = None
    ) -> ProductResponse:
        return await self.workflow.revert_to_draft(product_id, admin_id, reason)

    # Query

    async def list_products(self, query: ProductQuery, admin_mode: bool = False) -> PaginatedResult[ProductResponse]:
        return await self.query.list_products(query, admin_mode)

    async def search_products(
        self,
        keyword: str,
        filters: dict[str, Any] | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ProductResponse]:
        return await self.query.search_products(keyword, filters, limit, offset)

    async def get_products_by_status(self, status: str, limit: int = 20, offset: int = 0) -> list[ProductResponse]:
        return await self.query.get_products_by_status(status, limit, offset)

    async def count_products_by_status(self, status: str) -> int:
        return await self.query.count_products_by_status(status)

    # Bulk

    async def bulk_action(self, request: ProductBulkActionRequest) -> BulkActionResult:
        return await self.bulk.bulk_action(request)

    def get_service_health(self) -> dict[str, str]:
        """Static descriptor of the wired sub-services."""
        return {
            "crud": self.crud.get_service_name(),
            "workflow": self.workflow.get_service_name(),
            "query": self.query.get_service_name(),
            "bulk": self.bulk.get_service_name(),
            "status": "operational",
        }


def build_product_orchestrator(
    products: ProductRepository | None = None,
    repositories: Repositories | None = None,
    image_processor: ImageProcessor | None = None,
    request_id: str | None = None,
) -> ProductOrchestrator:
    """Wire the four sub-services around one product repository.

    Args:
        products: Product storage; defaults to the in-memory repository.
        repositories: Registry for the other aggregates.
        image_processor: Used to remove uploaded images on hard delete.
        request_id: Correlation id attached to log lines.
    """
    repositories = repositories or get_repositories()
    products = products or repositories.products
    audit = AuditService(repositories.audit_logs, repositories.admins)
    crud = ProductCRUDService(products, repositories, audit, image_processor, request_id)
    workflow = ProductWorkflowService(products, repositories, audit, request_id)
    query = ProductQueryService(products, repositories, audit, request_id)
    bulk = ProductBulkService(crud, workflow, request_id)
    return ProductOrchestrator(crud=crud, workflow=workflow, query=query, bulk=bulk)
