"""Shared plumbing for the product sub-services."""

from datetime import datetime

import structlog

from devdaily.application.audit_service import AuditService
from devdaily.domain.entities import Category, Product, utcnow
from devdaily.domain.exceptions import BusinessRuleError, ProductNotFoundError
from devdaily.domain.repositories import ProductRepository
from devdaily.domain.state_machines import ProductStatus
from devdaily.dtos.responses import ProductResponse
from devdaily.infrastructure.memory import Repositories, get_repositories

logger = structlog.get_logger()


def apply_status(
    product: Product,
    target: ProductStatus,
    admin_id: int | None = None,
    now: datetime | None = None,
    published_at: datetime | None = None,
) -> None:
    """Set a status and the timestamps that go with it.

    ``published_at`` overrides the publication time for scheduled publishing.
    """
    now = now or utcnow()
    if product.status == ProductStatus.ARCHIVED and target != ProductStatus.ARCHIVED:
        product.archived_at = None
    if target == ProductStatus.VERIFIED:
        product.verified_at = now
        product.verified_by = admin_id
    elif target == ProductStatus.PUBLISHED:
        product.published_at = published_at or now
    elif target == ProductStatus.ARCHIVED:
        product.archived_at = now
    elif target == ProductStatus.DRAFT:
        product.verified_at = None
        product.verified_by = None
        product.published_at = None
    product.status = target
    product.updated_at = now


class ProductServiceBase:
    """Repository access and serialization helpers."""

    def __init__(
        self,
        products: ProductRepository,
        repositories: Repositories | None = None,
        audit: AuditService | None = None,
        request_id: str | None = None,
    ) -> None:
        self.products = products
        self.repositories = repositories or get_repositories()
        self.audit = audit or AuditService(self.repositories.audit_logs, self.repositories.admins)
        self.request_id = request_id

    async def _require_product(self, product_id: int, allow_trashed: bool = True) -> Product:
        product = await self.products.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if product.is_deleted and not allow_trashed:
            raise BusinessRuleError(
                "Product is in the trash. Restore it first.",
                details={"product_id": product_id},
            )
        return product

    def _category(self, category_id: int | None) -> Category | None:
        if category_id is None:
            return None
        return self.repositories.categories.get(category_id)

    def _to_response(self, product: Product, admin_mode: bool = True) -> ProductResponse:
        return ProductResponse.from_entity(product, self._category(product.category_id), admin_mode=admin_mode)
