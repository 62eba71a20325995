"""Product request DTOs.

Every DTO is built from raw associative input with ``from_request``,
validates inline and raises ``ValidationError`` with a field -> message
map. Update-style DTOs remember which fields were supplied so only those
columns are written.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Self

from devdaily.domain.entities import utcnow
from devdaily.domain.enums import ImageSourceType, PriceAdjustmentType, ProductBulkActionType
from devdaily.domain.slugs import is_alpha_dash, slugify
from devdaily.domain.state_machines import ProductStatus
from devdaily.dtos.base import InputReader, RequestDTO

MAX_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 2000
MAX_NOTES_LENGTH = 500
MAX_BULK_ITEMS = 1000
MAX_SCHEDULE_AHEAD = timedelta(days=30)


def _read_image(reader: InputReader) -> tuple[ImageSourceType, str | None, str | None]:
    source = reader.choice("image_source_type", ImageSourceType, default=ImageSourceType.URL)
    image_url = reader.url("image_url", label="image URL")
    image_path = reader.string("image_path", max_length=255)
    if source == ImageSourceType.EXTERNAL and image_url is None:
        reader.error("image_url", "An external image requires an image URL.")
    return source or ImageSourceType.URL, image_url, image_path


def _read_slug(reader: InputReader) -> str | None:
    slug = reader.string("slug", max_length=100)
    if slug is None:
        return None
    normalized = slugify(slug)
    if not normalized:
        reader.error("slug", "The slug may only contain letters, numbers and dashes.")
    return normalized or None


# ============================================================================
# CRUD Requests
# ============================================================================


@dataclass(frozen=True)
class CreateProductRequest(RequestDTO):
    """Input for creating a product."""

    name: str
    slug: str
    market_price: Decimal
    description: str | None = None
    category_id: int | None = None
    image_url: str | None = None
    image_path: str | None = None
    image_source_type: ImageSourceType = ImageSourceType.URL
    status: ProductStatus = ProductStatus.DRAFT
    badge_ids: tuple[int, ...] = ()
    created_by: int | None = None
    slug_was_generated: bool = False

    @classmethod
    def from_request(cls, data: Mapping[str, Any], created_by: int | None = None) -> Self:
        reader = InputReader(data)
        name = reader.string("name", required=True, max_length=MAX_NAME_LENGTH, label="product name")
        slug = _read_slug(reader)
        price = reader.price("market_price", required=True, label="market price")
        description = reader.string("description", max_length=MAX_DESCRIPTION_LENGTH)
        category_id = reader.integer("category_id", minimum=1, label="category")
        source, image_url, image_path = _read_image(reader)
        status = reader.choice("status", ProductStatus, default=ProductStatus.DRAFT)
        if status is not None and not status.is_editable():
            reader.error("status", "New products must start as draft or pending verification.")
        badge_ids = reader.int_list("badge_ids", label="badge")
        generated = False
        if slug is None and name:
            slug = slugify(name)
            generated = True
            if not slug:
                reader.error("slug", "A slug could not be generated from the product name.")
        reader.raise_if_errors("Product creation validation failed")
        return cls(
            name=name,
            slug=slug,
            market_price=price,
            description=description,
            category_id=category_id,
            image_url=image_url,
            image_path=image_path,
            image_source_type=source,
            status=status,
            badge_ids=tuple(badge_ids),
            created_by=created_by,
            slug_was_generated=generated,
        )


# Fields an update request may carry, in display order
UPDATABLE_FIELDS = (
    "name",
    "slug",
    "description",
    "market_price",
    "category_id",
    "image_url",
    "image_path",
    "image_source_type",
    "status",
    "badge_ids",
)


@dataclass(frozen=True)
class UpdateProductRequest(RequestDTO):
    """Partial product update.

    Only fields present in the input are listed in ``present_fields``;
    everything else is left untouched by the persistence layer.
    """

    product_id: int
    name: str | None = None
    slug: str | None = None
    description: str | None = None
    market_price: Decimal | None = None
    category_id: int | None = None
    image_url: str | None = None
    image_path: str | None = None
    image_source_type: ImageSourceType | None = None
    status: ProductStatus | None = None
    badge_ids: tuple[int, ...] = ()
    updated_by: int | None = None
    present_fields: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_request(cls, product_id: int, data: Mapping[str, Any], updated_by: int | None = None) -> Self:
        reader = InputReader(data)
        present = {name for name in UPDATABLE_FIELDS if reader.has(name)}
        values: dict[str, Any] = {}
        if "name" in present:
            values["name"] = reader.string(
                "name", required=True, min_length=3, max_length=MAX_NAME_LENGTH, label="product name"
            )
        if "slug" in present:
            slug = reader.string("slug", required=True, max_length=100)
            if slug is not None and not is_alpha_dash(slug):
                reader.error("slug", "The slug may only contain letters, numbers, dashes and underscores.")
            values["slug"] = slug.lower() if slug else slug
        if "description" in present:
            values["description"] = reader.string("description", max_length=MAX_DESCRIPTION_LENGTH)
        if "market_price" in present:
            values["market_price"] = reader.price("market_price", required=True, label="market price")
        if "category_id" in present:
            values["category_id"] = reader.integer("category_id", minimum=1, label="category")
        if "image_url" in present:
            values["image_url"] = reader.url("image_url", label="image URL")
        if "image_path" in present:
            values["image_path"] = reader.string("image_path", max_length=255)
        if "image_source_type" in present:
            values["image_source_type"] = reader.choice(
                "image_source_type", ImageSourceType, required=True, label="image source"
            )
        if "status" in present:
            values["status"] = reader.choice("status", ProductStatus, required=True)
        if "badge_ids" in present:
            values["badge_ids"] = tuple(reader.int_list("badge_ids", label="badge"))
        if product_id is None or product_id <= 0:
            reader.error("product_id", "A valid product id is required.")
        reader.raise_if_errors("Product update validation failed")
        return cls(product_id=product_id, updated_by=updated_by, present_fields=frozenset(present), **values)

    def has(self, field_name: str) -> bool:
        return field_name in self.present_fields

    @property
    def changed_fields(self) -> list[str]:
        return [name for name in UPDATABLE_FIELDS if name in self.present_fields]

    @property
    def has_changes(self) -> bool:
        return bool(self.present_fields)

    def to_update_dict(self) -> dict[str, Any]:
        """Supplied fields only, keyed by column name."""
        return {name: getattr(self, name) for name in self.changed_fields}


QUICK_EDIT_FIELDS = ("name", "slug", "description", "price", "status", "category_id")


@dataclass(frozen=True)
class ProductQuickEditRequest(RequestDTO):
    """Inline edit from the product table."""

    product_id: int
    admin_id: int | None = None
    name: str | None = None
    slug: str | None = None
    description: str | None = None
    price: Decimal | None = None
    status: ProductStatus | None = None
    category_id: int | None = None
    regenerate_slug: bool = False
    present_fields: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_request(cls, product_id: int, data: Mapping[str, Any], admin_id: int | None = None) -> Self:
        reader = InputReader(data)
        present = {name for name in QUICK_EDIT_FIELDS if reader.raw(name) is not None}
        values: dict[str, Any] = {}
        if "name" in present:
            values["name"] = reader.string("name", min_length=3, max_length=MAX_NAME_LENGTH, label="product name")
        if "slug" in present:
            values["slug"] = _read_slug(reader)
        if "description" in present:
            values["description"] = reader.string("description", max_length=MAX_DESCRIPTION_LENGTH)
        if "price" in present:
            values["price"] = reader.price("price")
        if "status" in present:
            values["status"] = reader.choice("status", ProductStatus)
        if "category_id" in present:
            values["category_id"] = reader.integer("category_id", minimum=1, label="category")
        regenerate = reader.boolean("regenerate_slug")
        if not present:
            reader.error("general", "At least one field must be provided.")
        reader.raise_if_errors("Quick edit validation failed")
        return cls(
            product_id=product_id,
            admin_id=admin_id,
            regenerate_slug=regenerate,
            present_fields=frozenset(present),
            **values,
        )

    def has(self, field_name: str) -> bool:
        return field_name in self.present_fields


@dataclass(frozen=True)
class ProductDeleteRequest(RequestDTO):
    """Soft or hard delete of one product."""

    product_id: int
    user_id: int | None = None
    reason: str | None = None
    hard_delete: bool = False
    cascade: bool = True

    @classmethod
    def from_request(cls, data: Mapping[str, Any], user_id: int | None = None) -> Self:
        reader = InputReader(data)
        product_id = reader.integer("product_id", required=True, minimum=1, label="product id")
        reason = reader.string("reason", max_length=MAX_NOTES_LENGTH)
        hard_delete = reader.boolean("hard_delete")
        cascade = reader.boolean("cascade", default=True)
        reader.raise_if_errors("Product deletion validation failed")
        return cls(product_id=product_id, user_id=user_id, reason=reason, hard_delete=hard_delete, cascade=cascade)


# ============================================================================
# Workflow Requests
# ============================================================================


class PublishType(str, Enum):
    IMMEDIATE = "immediate"
    SCHEDULED = "scheduled"
    FORCE = "force"


@dataclass(frozen=True)
class PublishProductRequest(RequestDTO):
    """Publish a product now, later, or bypassing prerequisites."""

    product_id: int
    admin_id: int | None = None
    publish_type: PublishType = PublishType.IMMEDIATE
    scheduled_at: datetime | None = None
    notes: str | None = None

    @classmethod
    def from_request(
        cls,
        data: Mapping[str, Any],
        admin_id: int | None = None,
        now: datetime | None = None,
    ) -> Self:
        now = now or utcnow()
        reader = InputReader(data)
        product_id = reader.integer("product_id", required=True, minimum=1, label="product id")
        publish_type = reader.choice("publish_type", PublishType, default=PublishType.IMMEDIATE, label="publish type")
        scheduled_at = reader.timestamp("scheduled_at", label="schedule time")
        notes = reader.string("notes", max_length=MAX_NOTES_LENGTH)
        if publish_type == PublishType.SCHEDULED:
            if scheduled_at is None:
                reader.error("scheduled_at", "A schedule time is required for scheduled publishing.")
            elif scheduled_at <= now:
                reader.error("scheduled_at", "The schedule time must be in the future.")
            elif scheduled_at - now > MAX_SCHEDULE_AHEAD:
                reader.error("scheduled_at", "Products can be scheduled at most 30 days ahead.")
        reader.raise_if_errors("Publish validation failed")
        return cls(
            product_id=product_id,
            admin_id=admin_id,
            publish_type=publish_type,
            scheduled_at=scheduled_at if publish_type == PublishType.SCHEDULED else None,
            notes=notes,
        )

    @property
    def is_forced(self) -> bool:
        return self.publish_type == PublishType.FORCE

    @property
    def is_scheduled(self) -> bool:
        return self.publish_type == PublishType.SCHEDULED


@dataclass(frozen=True)
class ProductToggleStatusRequest(RequestDTO):
    """Move a product to an explicit target status."""

    product_id: int
    target_status: ProductStatus
    admin_id: int | None = None
    notes: str | None = None
    force: bool = False

    @classmethod
    def from_request(cls, data: Mapping[str, Any], admin_id: int | None = None) -> Self:
        reader = InputReader(data)
        product_id = reader.integer("product_id", required=True, minimum=1, label="product id")
        target = reader.choice("target_status", ProductStatus, required=True, label="target status")
        notes = reader.string("notes", max_length=MAX_NOTES_LENGTH)
        force = reader.boolean("force")
        reader.raise_if_errors("Status change validation failed")
        return cls(product_id=product_id, target_status=target, admin_id=admin_id, notes=notes, force=force)


# ============================================================================
# Bulk Requests
# ============================================================================


@dataclass(frozen=True)
class ProductBulkActionRequest(RequestDTO):
    """One action applied to many products."""

    action: ProductBulkActionType
    product_ids: tuple[int, ...]
    user_id: int | None = None
    category_id: int | None = None
    price_adjustment_type: PriceAdjustmentType | None = None
    price_value: Decimal | None = None
    reason: str | None = None

    @classmethod
    def from_request(
        cls,
        data: Mapping[str, Any],
        user_id: int | None = None,
        max_items: int = MAX_BULK_ITEMS,
    ) -> Self:
        reader = InputReader(data)
        action = reader.choice("action", ProductBulkActionType, required=True)
        ids = reader.int_list("product_ids", label="product id")
        if "product_ids" not in reader.errors:
            if not ids:
                reader.error("product_ids", "Select at least one product.")
            elif len(ids) > max_items:
                reader.error("product_ids", f"At most {max_items} products can be processed at once.")
        if user_id is not None and user_id <= 0:
            reader.error("user_id", "A valid user id is required.")
        category_id = None
        adjustment = None
        price_value = None
        if action == ProductBulkActionType.CHANGE_CATEGORY:
            category_id = reader.integer("category_id", required=True, minimum=1, label="category")
        elif action == ProductBulkActionType.CHANGE_PRICE:
            adjustment = reader.choice(
                "price_adjustment_type", PriceAdjustmentType, required=True, label="price adjustment"
            )
            price_value = reader.decimal("price_value", required=True, minimum=Decimal("0"), label="price value")
            if (
                price_value is not None
                and adjustment == PriceAdjustmentType.PERCENTAGE_DECREASE
                and price_value >= 100
            ):
                reader.error("price_value", "A percentage decrease must be below 100.")
        reason = reader.string("reason", max_length=MAX_NOTES_LENGTH)
        reader.raise_if_errors("Bulk action validation failed")
        return cls(
            action=action,
            product_ids=tuple(dict.fromkeys(ids)),
            user_id=user_id,
            category_id=category_id,
            price_adjustment_type=adjustment,
            price_value=price_value,
            reason=reason,
        )
