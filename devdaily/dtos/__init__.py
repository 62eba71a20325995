"""Data transfer objects passed between controllers and services."""

from devdaily.dtos.bulk import BulkActionResult
from devdaily.dtos.pagination import PaginatedResult
from devdaily.dtos.product_requests import (
    CreateProductRequest,
    ProductBulkActionRequest,
    ProductDeleteRequest,
    ProductQuickEditRequest,
    ProductToggleStatusRequest,
    PublishProductRequest,
    PublishType,
    UpdateProductRequest,
)
from devdaily.dtos.queries import PUBLIC_CONSTRAINTS, PaginationQuery, ProductQuery
from devdaily.dtos.responses import ProductDetailResponse, ProductResponse

__all__ = [
    "BulkActionResult",
    "PaginatedResult",
    "CreateProductRequest",
    "ProductBulkActionRequest",
    "ProductDeleteRequest",
    "ProductQuickEditRequest",
    "ProductToggleStatusRequest",
    "PublishProductRequest",
    "PublishType",
    "UpdateProductRequest",
    "PUBLIC_CONSTRAINTS",
    "PaginationQuery",
    "ProductQuery",
    "ProductDetailResponse",
    "ProductResponse",
]
