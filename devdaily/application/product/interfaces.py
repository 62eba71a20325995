"""Contracts for the product services.

Controllers depend on ``ProductOrchestratorInterface`` only; each
sub-service interface covers one family of operations.
"""

from abc import ABC, abstractmethod
from typing import Any

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


class ProductServiceInterface(ABC):
    def get_service_name(self) -> str:
        return type(self).__name__


class ProductCRUDInterface(ProductServiceInterface):
    @abstractmethod
    async def create_product(self, request: CreateProductRequest) -> ProductResponse: ...

    @abstractmethod
    async def get_product(self, product_id: int, admin_mode: bool = False) -> ProductResponse: ...

    @abstractmethod
    async def get_product_by_slug(
        self, slug: str, increment_view_count: bool = True
    ) -> ProductDetailResponse: ...

    @abstractmethod
    async def update_product(self, request: UpdateProductRequest) -> ProductResponse: ...

    @abstractmethod
    async def delete_product(self, request: ProductDeleteRequest) -> bool: ...

    @abstractmethod
    async def restore_product(self, product_id: int, admin_id: int | None = None) -> ProductResponse: ...

    @abstractmethod
    async def quick_edit_product(self, request: ProductQuickEditRequest) -> ProductResponse: ...


class ProductWorkflowInterface(ProductServiceInterface):
    @abstractmethod
    async def publish_product(self, request: PublishProductRequest) -> ProductResponse: ...

    @abstractmethod
    async def verify_product(
        self, product_id: int, admin_id: int | None = None, notes: str | None = None
    ) -> ProductResponse: ...

    @abstractmethod
    async def request_verification(self, product_id: int, admin_id: int | None = None) -> ProductResponse: ...

    @abstractmethod
    async def archive_product(
        self, product_id: int, admin_id: int | None = None, reason: str | None = None
    ) -> ProductResponse: ...

    @abstractmethod
    async def unarchive_product(self, product_id: int, admin_id: int | None = None) -> ProductResponse: ...

    @abstractmethod
    async def toggle_product_status(self, request: ProductToggleStatusRequest) -> ProductResponse: ...

    @abstractmethod
    async def revert_to_draft(
        self, product_id: int, admin_id: int | None = None, reason: str | None = None
    ) -> ProductResponse: ...


class ProductQueryInterface(ProductServiceInterface):
    @abstractmethod
    async def list_products(
        self, query: ProductQuery, admin_mode: bool = False
    ) -> PaginatedResult[ProductResponse]: ...

    @abstractmethod
    async def search_products(
        self,
        keyword: str,
        filters: dict[str, Any] | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ProductResponse]: ...

    @abstractmethod
    async def get_products_by_status(
        self, status: str, limit: int = 20, offset: int = 0
    ) -> list[ProductResponse]: ...

    @abstractmethod
    async def count_products_by_status(self, status: str) -> int: ...


class ProductBulkInterface(ProductServiceInterface):
    @abstractmethod
    async def bulk_action(self, request: ProductBulkActionRequest) -> BulkActionResult: ...


class ProductOrchestratorInterface(
    ProductCRUDInterface,
    ProductWorkflowInterface,
    ProductQueryInterface,
    ProductBulkInterface,
):
    """Single entry point for every product operation."""

    @abstractmethod
    def get_service_health(self) -> dict[str, str]: ...
