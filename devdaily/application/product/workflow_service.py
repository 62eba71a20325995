"""Product status workflow.

Every status change goes through ``_transition`` so the transition
matrix, timestamps, audit entry and log line stay consistent.
"""

from datetime import datetime
from typing import Any

import structlog

from devdaily.application.product.base import ProductServiceBase, apply_status
from devdaily.application.product.interfaces import ProductWorkflowInterface
from devdaily.domain.entities import Product
from devdaily.domain.exceptions import BusinessRuleError, InvalidStateTransitionError
from devdaily.domain.state_machines import ProductStatus, validate_product_transition
from devdaily.dtos.product_requests import ProductToggleStatusRequest, PublishProductRequest
from devdaily.dtos.responses import ProductResponse

logger = structlog.get_logger()

REVERTIBLE_STATUSES = {
    ProductStatus.PENDING_VERIFICATION,
    ProductStatus.VERIFIED,
    ProductStatus.PUBLISHED,
}


def _rejected(product: Product, target: ProductStatus) -> InvalidStateTransitionError:
    return InvalidStateTransitionError(
        entity_type="Product",
        entity_id=product.id,
        current_state=product.status.value,
        target_state=target.value,
        allowed_transitions=[s.value for s in product.status.allowed_transitions()],
    )


class ProductWorkflowService(ProductServiceBase, ProductWorkflowInterface):
    """Moves products through draft, review, publication and archive."""

    async def _transition(
        self,
        product: Product,
        target: ProductStatus,
        admin_id: int | None,
        action: str,
        notes: str | None = None,
        force: bool = False,
        published_at: datetime | None = None,
    ) -> Product:
        if not force:
            validate_product_transition(product.id, product.status, target)
        previous = product.status
        apply_status(product, target, admin_id, published_at=published_at)
        await self.products.update(product)

        new_values: dict[str, Any] = {"status": target.value}
        if notes:
            new_values["notes"] = notes
        if published_at is not None:
            new_values["published_at"] = published_at.isoformat()
        self.audit.record(
            action,
            "product",
            product.id,
            admin_id=admin_id,
            old_values={"status": previous.value},
            new_values=new_values,
            summary=f"Status changed from {previous.value} to {target.value}",
        )
        logger.info(
            "Product status changed",
            product_id=product.id,
            from_status=previous.value,
            to_status=target.value,
            forced=force,
            published_at=published_at.isoformat() if published_at else None,
            request_id=self.request_id,
        )
        return product

    def _publish_blockers(self, product: Product) -> list[str]:
        blockers = []
        if not product.name.strip():
            blockers.append("Product name is required.")
        if product.market_price <= 0:
            blockers.append("Product price must be greater than zero.")
        if not self.repositories.links.list_by_product(product.id, active_only=True):
            blockers.append("At least one active marketplace link is required.")
        return blockers

    async def publish_product(self, request: PublishProductRequest) -> ProductResponse:
        product = await self._require_product(request.product_id, allow_trashed=False)
        if product.status == ProductStatus.PUBLISHED:
            raise BusinessRuleError("Product is already published.", details={"product_id": product.id})

        if not request.is_forced:
            if not product.status.can_be_published():
                raise _rejected(product, ProductStatus.PUBLISHED)
            blockers = self._publish_blockers(product)
            if blockers:
                raise BusinessRuleError(
                    "Product does not meet publishing requirements.",
                    details={"product_id": product.id, "errors": blockers},
                )

        action = "product.publish_forced" if request.is_forced else "product.publish"
        await self._transition(
            product,
            ProductStatus.PUBLISHED,
            request.admin_id,
            action,
            request.notes,
            force=request.is_forced,
            published_at=request.scheduled_at if request.is_scheduled else None,
        )
        return self._to_response(product)

    async def verify_product(
        self, product_id: int, admin_id: int | None = None, notes: str | None = None
    ) -> ProductResponse:
        product = await self._require_product(product_id, allow_trashed=False)
        if product.status != ProductStatus.PENDING_VERIFICATION:
            raise _rejected(product, ProductStatus.VERIFIED)
        await self._transition(product, ProductStatus.VERIFIED, admin_id, "product.verify", notes)
        return self._to_response(product)

    async def request_verification(self, product_id: int, admin_id: int | None = None) -> ProductResponse:
        product = await self._require_product(product_id, allow_trashed=False)
        await self._transition(product, ProductStatus.PENDING_VERIFICATION, admin_id, "product.request_verification")
        return self._to_response(product)

    async def archive_product(
        self, product_id: int, admin_id: int | None = None, reason: str | None = None
    ) -> ProductResponse:
        product = await self._require_product(product_id, allow_trashed=False)
        await self._transition(product, ProductStatus.ARCHIVED, admin_id, "product.archive", reason)
        return self._to_response(product)

    async def unarchive_product(self, product_id: int, admin_id: int | None = None) -> ProductResponse:
        product = await self._require_product(product_id, allow_trashed=False)
        if product.status != ProductStatus.ARCHIVED:
            raise BusinessRuleError("Product is not archived.", details={"product_id": product_id})
        # Unarchiving always returns the product to draft for re-review
        await self._transition(product, ProductStatus.DRAFT, admin_id, "product.unarchive", force=True)
        return self._to_response(product)

    async def toggle_product_status(self, request: ProductToggleStatusRequest) -> ProductResponse:
        product = await self._require_product(request.product_id, allow_trashed=False)
        if product.status == request.target_status:
            raise _rejected(product, request.target_status)
        if request.target_status == ProductStatus.PUBLISHED and not request.force:
            validate_product_transition(product.id, product.status, request.target_status)
            blockers = self._publish_blockers(product)
            if blockers:
                raise BusinessRuleError(
                    "Product does not meet publishing requirements.",
                    details={"product_id": product.id, "errors": blockers},
                )
        await self._transition(
            product,
            request.target_status,
            request.admin_id,
            "product.status_change",
            request.notes,
            force=request.force,
        )
        return self._to_response(product)

    async def revert_to_draft(
        self, product_id: int, admin_id: int | None = None, reason: str | None = None
    ) -> ProductResponse:
        product = await self._require_product(product_id, allow_trashed=False)
        if product.status not in REVERTIBLE_STATUSES:
            raise _rejected(product, ProductStatus.DRAFT)
        await self._transition(product, ProductStatus.DRAFT, admin_id, "product.revert_to_draft", reason, force=True)
        return self._to_response(product)
