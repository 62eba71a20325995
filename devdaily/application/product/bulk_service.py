"""Bulk product actions.

Each id is processed on its own through the CRUD and workflow services.
A domain error on one id is recorded against that id and the batch
carries on.
"""

from typing import Awaitable, Callable

import structlog

from devdaily.application.product.base import ProductServiceBase
from devdaily.application.product.crud_service import ProductCRUDService
from devdaily.application.product.interfaces import ProductBulkInterface
from devdaily.application.product.workflow_service import ProductWorkflowService
from devdaily.domain.exceptions import BusinessRuleError, DomainError, ValidationError
from devdaily.domain.enums import ProductBulkActionType
from devdaily.domain.state_machines import ProductStatus
from devdaily.dtos.base import MAX_PRICE, MIN_PRICE
from devdaily.dtos.bulk import BulkActionResult
from devdaily.dtos.product_requests import (
    ProductBulkActionRequest,
    ProductDeleteRequest,
    ProductToggleStatusRequest,
    PublishProductRequest,
    UpdateProductRequest,
)

logger = structlog.get_logger()


class ProductBulkService(ProductServiceBase, ProductBulkInterface):
    """Applies one action to many products with per-item accounting."""

    def __init__(
        self,
        crud: ProductCRUDService,
        workflow: ProductWorkflowService,
        request_id: str | None = None,
    ) -> None:
        super().__init__(crud.products, crud.repositories, crud.audit, request_id)
        self.crud = crud
        self.workflow = workflow

    async def bulk_action(self, request: ProductBulkActionRequest) -> BulkActionResult:
        if request.action == ProductBulkActionType.CHANGE_CATEGORY:
            if self.repositories.categories.get(request.category_id) is None:
                raise ValidationError(
                    "Bulk action validation failed",
                    {"category_id": "The selected category does not exist."},
                )

        handler = self._handler_for(request)
        result = BulkActionResult(action=request.action)
        for product_id in request.product_ids:
            try:
                await handler(product_id)
            except DomainError as e:
                result.add_failure(product_id, e.message)
            else:
                result.add_success(product_id)
        result.complete()

        self.audit.record(
            f"product.bulk_{request.action.value}",
            "product",
            None,
            admin_id=request.user_id,
            new_values=result.to_dict(),
            summary=result.summary_message(),
        )
        logger.info(
            "Bulk action completed",
            action=request.action.value,
            success_count=result.success_count,
            failed_count=result.failed_count,
            request_id=self.request_id,
        )
        return result

    def _handler_for(self, request: ProductBulkActionRequest) -> Callable[[int], Awaitable[object]]:
        user_id = request.user_id
        action = request.action

        if action == ProductBulkActionType.PUBLISH:
            return lambda pid: self.workflow.publish_product(PublishProductRequest(product_id=pid, admin_id=user_id))
        if action == ProductBulkActionType.UNPUBLISH:
            return self._unpublish_handler(user_id)
        if action == ProductBulkActionType.ARCHIVE:
            return lambda pid: self.workflow.archive_product(pid, user_id, request.reason)
        if action == ProductBulkActionType.VERIFY:
            return lambda pid: self.workflow.verify_product(pid, user_id, request.reason)
        if action in (ProductBulkActionType.DELETE, ProductBulkActionType.HARD_DELETE):
            hard = action == ProductBulkActionType.HARD_DELETE
            return lambda pid: self.crud.delete_product(
                ProductDeleteRequest(product_id=pid, user_id=user_id, reason=request.reason, hard_delete=hard)
            )
        if action == ProductBulkActionType.RESTORE:
            return lambda pid: self.crud.restore_product(pid, user_id)
        if action == ProductBulkActionType.CHANGE_CATEGORY:
            return lambda pid: self.crud.update_product(
                UpdateProductRequest(
                    product_id=pid,
                    category_id=request.category_id,
                    updated_by=user_id,
                    present_fields=frozenset({"category_id"}),
                )
            )
        return self._price_handler(request)

    def _unpublish_handler(self, user_id: int | None) -> Callable[[int], Awaitable[object]]:
        async def unpublish(product_id: int) -> object:
            product = await self._require_product(product_id, allow_trashed=False)
            if product.status != ProductStatus.PUBLISHED:
                raise BusinessRuleError("Product is not published.")
            return await self.workflow.toggle_product_status(
                ProductToggleStatusRequest(
                    product_id=product_id,
                    target_status=ProductStatus.VERIFIED,
                    admin_id=user_id,
                )
            )

        return unpublish

    def _price_handler(self, request: ProductBulkActionRequest) -> Callable[[int], Awaitable[object]]:
        async def change_price(product_id: int) -> object:
            product = await self._require_product(product_id, allow_trashed=False)
            new_price = request.price_adjustment_type.apply(product.market_price, request.price_value)
            if new_price < MIN_PRICE or new_price > MAX_PRICE:
                raise BusinessRuleError(f"Resulting price {new_price} is outside 100..1,000,000,000 IDR.")
            return await self.crud.update_product(
                UpdateProductRequest(
                    product_id=product_id,
                    market_price=new_price,
                    updated_by=request.user_id,
                    present_fields=frozenset({"market_price"}),
                )
            )

        return change_price
