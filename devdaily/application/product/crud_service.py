"""Product create/read/update/delete operations."""

from typing import Any

import structlog

from devdaily.application.audit_service import AuditService
from devdaily.application.product.base import ProductServiceBase, apply_status
from devdaily.application.product.interfaces import ProductCRUDInterface
from devdaily.domain.entities import Category, Product, utcnow
from devdaily.domain.enums import ImageSourceType
from devdaily.domain.exceptions import BusinessRuleError, ProductNotFoundError, ValidationError
from devdaily.domain.repositories import ProductRepository
from devdaily.domain.slugs import MAX_SLUG_LENGTH, slugify
from devdaily.domain.state_machines import validate_product_transition
from devdaily.dtos.product_requests import (
    CreateProductRequest,
    ProductDeleteRequest,
    ProductQuickEditRequest,
    UpdateProductRequest,
)
from devdaily.dtos.responses import (
    BadgeResponse,
    LinkResponse,
    ProductDetailResponse,
    ProductResponse,
)
from devdaily.infrastructure.image_processor import ImageProcessor
from devdaily.infrastructure.memory import Repositories

logger = structlog.get_logger()


class ProductCRUDService(ProductServiceBase, ProductCRUDInterface):
    """Creates, reads, edits and removes products."""

    def __init__(
        self,
        products: ProductRepository,
        repositories: Repositories | None = None,
        audit: AuditService | None = None,
        image_processor: ImageProcessor | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(products, repositories, audit, request_id)
        self.image_processor = image_processor

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    async def _unique_slug(self, base: str, exclude_id: int | None = None) -> str:
        candidate = base
        suffix = 2
        while await self.products.slug_exists(candidate, exclude_id):
            tail = f"-{suffix}"
            candidate = base[: MAX_SLUG_LENGTH - len(tail)] + tail
            suffix += 1
        return candidate

    async def _check_slug_available(self, slug: str, exclude_id: int | None, message: str) -> None:
        if await self.products.slug_exists(slug, exclude_id):
            raise ValidationError(message, {"slug": "The slug is already taken."})

    def _check_category(self, category_id: int | None, message: str) -> None:
        if category_id is not None and self.repositories.categories.get(category_id) is None:
            raise ValidationError(message, {"category_id": "The selected category does not exist."})

    def _check_badges(self, badge_ids: tuple[int, ...] | list[int], message: str) -> None:
        missing = [badge_id for badge_id in badge_ids if self.repositories.badges.get(badge_id) is None]
        if missing:
            raise ValidationError(message, {"badge_ids": f"Unknown badges: {missing}"})

    # ------------------------------------------------------------------
    # Create / Read
    # ------------------------------------------------------------------

    async def create_product(self, request: CreateProductRequest) -> ProductResponse:
        message = "Product creation validation failed"
        self._check_category(request.category_id, message)
        self._check_badges(request.badge_ids, message)
        if request.slug_was_generated:
            slug = await self._unique_slug(request.slug)
        else:
            await self._check_slug_available(request.slug, None, message)
            slug = request.slug

        now = utcnow()
        product = Product(
            name=request.name,
            slug=slug,
            description=request.description,
            market_price=request.market_price,
            status=request.status,
            category_id=request.category_id,
            badge_ids=list(request.badge_ids),
            image_url=request.image_url,
            image_path=request.image_path,
            image_source_type=request.image_source_type,
            created_by=request.created_by,
            created_at=now,
            updated_at=now,
            last_price_update=now,
        )
        product = await self.products.add(product)

        self.audit.record(
            "product.create",
            "product",
            product.id,
            admin_id=request.created_by,
            new_values=product.snapshot(),
        )
        logger.info(
            "Product created",
            product_id=product.id,
            slug=product.slug,
            status=product.status.value,
            request_id=self.request_id,
        )
        return self._to_response(product)

    async def get_product(self, product_id: int, admin_mode: bool = False) -> ProductResponse:
        product = await self.products.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if not admin_mode and not product.is_publicly_visible():
            raise ProductNotFoundError(product_id)
        return self._to_response(product, admin_mode=admin_mode)

    def _breadcrumbs(self, category: Category | None) -> tuple[dict[str, Any], ...]:
        trail: list[dict[str, Any]] = []
        seen: set[int] = set()
        while category is not None and category.id not in seen:
            seen.add(category.id)
            trail.append({"id": category.id, "name": category.name, "slug": category.slug})
            category = self._category(category.parent_id)
        return tuple(reversed(trail))

    async def get_product_by_slug(self, slug: str, increment_view_count: bool = True) -> ProductDetailResponse:
        product = await self.products.get_by_slug(slug)
        if product is None or not product.is_publicly_visible():
            raise ProductNotFoundError.for_slug(slug)

        if increment_view_count:
            product.view_count = await self.products.increment_view_count(product.id)

        links = []
        for link in self.repositories.links.list_by_product(product.id, active_only=True):
            marketplace = self.repositories.marketplaces.get(link.marketplace_id)
            if marketplace is not None and not marketplace.active:
                continue
            links.append(LinkResponse.from_entity(link, marketplace))
        badges = [
            BadgeResponse.from_entity(badge)
            for badge in (self.repositories.badges.get(badge_id) for badge_id in product.badge_ids)
            if badge is not None
        ]
        category = self._category(product.category_id)
        return ProductDetailResponse(
            product=ProductResponse.from_entity(product, category),
            links=tuple(links),
            badges=tuple(badges),
            subcategory_path=self._breadcrumbs(category),
        )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update_product(self, request: UpdateProductRequest) -> ProductResponse:
        product = await self._require_product(request.product_id, allow_trashed=False)
        if not request.has_changes:
            return self._to_response(product)

        message = "Product update validation failed"
        old_values = product.snapshot()
        changes = request.to_update_dict()

        if "slug" in changes:
            await self._check_slug_available(changes["slug"], product.id, message)
        if "category_id" in changes:
            self._check_category(changes["category_id"], message)
        if "badge_ids" in changes:
            self._check_badges(changes["badge_ids"], message)
        if "status" in changes and changes["status"] != product.status:
            validate_product_transition(product.id, product.status, changes["status"])

        now = utcnow()
        for field_name, value in changes.items():
            if field_name == "status":
                if value != product.status:
                    apply_status(product, value, request.updated_by, now)
            elif field_name == "market_price":
                if value != product.market_price:
                    product.market_price = value
                    product.last_price_update = now
            elif field_name == "badge_ids":
                product.badge_ids = list(value)
            else:
                setattr(product, field_name, value)
        product.updated_at = now
        await self.products.update(product)

        self.audit.record(
            "product.update",
            "product",
            product.id,
            admin_id=request.updated_by,
            old_values=old_values,
            new_values=product.snapshot(),
        )
        logger.info(
            "Product updated",
            product_id=product.id,
            fields=request.changed_fields,
            request_id=self.request_id,
        )
        return self._to_response(product)

    async def quick_edit_product(self, request: ProductQuickEditRequest) -> ProductResponse:
        product = await self._require_product(request.product_id, allow_trashed=False)
        message = "Quick edit validation failed"
        old_values = product.snapshot()
        now = utcnow()

        if request.has("slug") and request.slug:
            await self._check_slug_available(request.slug, product.id, message)
        if request.has("category_id"):
            self._check_category(request.category_id, message)
        if request.has("status") and request.status != product.status:
            validate_product_transition(product.id, product.status, request.status)

        if request.has("name"):
            product.name = request.name
            if request.regenerate_slug and not request.has("slug"):
                product.slug = await self._unique_slug(slugify(request.name), product.id)
        if request.has("slug") and request.slug:
            product.slug = request.slug
        if request.has("description"):
            product.description = request.description
        if request.has("price") and request.price != product.market_price:
            product.market_price = request.price
            product.last_price_update = now
        if request.has("category_id"):
            product.category_id = request.category_id
        if request.has("status") and request.status != product.status:
            apply_status(product, request.status, request.admin_id, now)
        product.updated_at = now
        await self.products.update(product)

        self.audit.record(
            "product.quick_edit",
            "product",
            product.id,
            admin_id=request.admin_id,
            old_values=old_values,
            new_values=product.snapshot(),
        )
        logger.info("Product quick-edited", product_id=product.id, fields=sorted(request.present_fields))
        return self._to_response(product)

    # ------------------------------------------------------------------
    # Delete / Restore
    # ------------------------------------------------------------------

    async def delete_product(self, request: ProductDeleteRequest) -> bool:
        product = await self._require_product(request.product_id)
        old_values = product.snapshot()

        if request.hard_delete:
            await self.products.delete(product.id)
            removed_links = 0
            if request.cascade:
                removed_links = self.repositories.links.delete_by_product(product.id)
            if (
                self.image_processor is not None
                and product.image_source_type == ImageSourceType.UPLOAD
                and product.image_path
            ):
                self.image_processor.delete(product.image_path)
            self.audit.record(
                "product.hard_delete",
                "product",
                product.id,
                admin_id=request.user_id,
                old_values=old_values,
                summary=request.reason or "Permanently deleted",
            )
            logger.info(
                "Product permanently deleted",
                product_id=product.id,
                removed_links=removed_links,
                request_id=self.request_id,
            )
            return True

        if product.is_deleted:
            raise BusinessRuleError("Product is already in the trash.", details={"product_id": product.id})
        product.deleted_at = utcnow()
        product.touch()
        await self.products.update(product)
        self.audit.record(
            "product.delete",
            "product",
            product.id,
            admin_id=request.user_id,
            old_values=old_values,
            new_values=product.snapshot(),
            summary=request.reason or "Moved to trash",
        )
        logger.info("Product moved to trash", product_id=product.id, request_id=self.request_id)
        return True

    async def restore_product(self, product_id: int, admin_id: int | None = None) -> ProductResponse:
        product = await self._require_product(product_id)
        if not product.is_deleted:
            raise BusinessRuleError("Product is not in the trash.", details={"product_id": product_id})
        product.deleted_at = None
        product.touch()
        await self.products.update(product)
        self.audit.record(
            "product.restore",
            "product",
            product.id,
            admin_id=admin_id,
            new_values={"deleted_at": None},
            summary="Restored from trash",
        )
        logger.info("Product restored", product_id=product.id, request_id=self.request_id)
        return self._to_response(product)
