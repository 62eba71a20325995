"""Request DTOs for categories, links, marketplaces and badges."""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Self

from devdaily.domain.slugs import slugify
from devdaily.dtos.base import InputReader, RequestDTO

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

MIN_RATING = Decimal("0")
MAX_RATING = Decimal("5")


def _read_color(reader: InputReader, key: str = "color") -> str | None:
    color = reader.string(key, max_length=7)
    if color is not None and not _HEX_COLOR.match(color):
        reader.error(key, "The color must be a hex value such as #64748b.")
    return color


def _read_named_slug(reader: InputReader, name: str | None) -> str | None:
    slug = reader.string("slug", max_length=100)
    slug = slugify(slug) if slug else (slugify(name) if name else None)
    if name and not slug:
        reader.error("slug", "A slug could not be generated.")
    return slug


# ============================================================================
# Categories
# ============================================================================


@dataclass(frozen=True)
class CreateCategoryRequest(RequestDTO):
    name: str
    slug: str
    icon: str = "fas fa-folder"
    parent_id: int | None = None
    sort_order: int = 0
    active: bool = True

    @classmethod
    def from_request(cls, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        name = reader.string("name", required=True, min_length=2, max_length=100, label="category name")
        slug = _read_named_slug(reader, name)
        icon = reader.string("icon", max_length=50) or "fas fa-folder"
        parent_id = reader.integer("parent_id", minimum=1, label="parent category")
        sort_order = reader.integer("sort_order", minimum=0, label="sort order") or 0
        active = reader.boolean("active", default=True)
        reader.raise_if_errors("Category validation failed")
        return cls(name=name, slug=slug, icon=icon, parent_id=parent_id, sort_order=sort_order, active=active)


@dataclass(frozen=True)
class UpdateCategoryRequest(RequestDTO):
    category_id: int
    name: str | None = None
    slug: str | None = None
    icon: str | None = None
    parent_id: int | None = None
    sort_order: int | None = None
    active: bool | None = None
    present_fields: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_request(cls, category_id: int, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        present = {key for key in ("name", "slug", "icon", "parent_id", "sort_order", "active") if reader.has(key)}
        values: dict[str, Any] = {}
        if "name" in present:
            values["name"] = reader.string("name", required=True, min_length=2, max_length=100, label="category name")
        if "slug" in present:
            slug = reader.string("slug", required=True, max_length=100)
            values["slug"] = slugify(slug) if slug else None
        if "icon" in present:
            values["icon"] = reader.string("icon", max_length=50) or "fas fa-folder"
        if "parent_id" in present:
            values["parent_id"] = reader.integer("parent_id", minimum=1, label="parent category")
        if "sort_order" in present:
            values["sort_order"] = reader.integer("sort_order", minimum=0, label="sort order") or 0
        if "active" in present:
            values["active"] = reader.boolean("active")
        reader.raise_if_errors("Category validation failed")
        return cls(category_id=category_id, present_fields=frozenset(present), **values)

    def to_update_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.present_fields)}


# ============================================================================
# Links
# ============================================================================


@dataclass(frozen=True)
class CreateLinkRequest(RequestDTO):
    """An affiliate price entry for a product on one marketplace."""

    product_id: int
    marketplace_id: int
    store_name: str
    url: str
    price: Decimal
    rating: Decimal = Decimal("0.0")
    active: bool = True
    sold_count: int = 0

    @classmethod
    def from_request(cls, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        product_id = reader.integer("product_id", required=True, minimum=1, label="product")
        marketplace_id = reader.integer("marketplace_id", required=True, minimum=1, label="marketplace")
        store_name = reader.string("store_name", required=True, max_length=100, label="store name")
        url = reader.url("url", required=True, label="URL")
        price = reader.price("price", required=True)
        rating = reader.decimal("rating", minimum=MIN_RATING, maximum=MAX_RATING) or Decimal("0.0")
        active = reader.boolean("active", default=True)
        sold_count = reader.integer("sold_count", minimum=0, label="sold count") or 0
        reader.raise_if_errors("Link validation failed")
        return cls(
            product_id=product_id,
            marketplace_id=marketplace_id,
            store_name=store_name,
            url=url,
            price=price,
            rating=rating,
            active=active,
            sold_count=sold_count,
        )


@dataclass(frozen=True)
class UpdateLinkRequest(RequestDTO):
    link_id: int
    marketplace_id: int | None = None
    store_name: str | None = None
    url: str | None = None
    price: Decimal | None = None
    rating: Decimal | None = None
    active: bool | None = None
    sold_count: int | None = None
    present_fields: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_request(cls, link_id: int, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        keys = ("marketplace_id", "store_name", "url", "price", "rating", "active", "sold_count")
        present = {key for key in keys if reader.has(key)}
        values: dict[str, Any] = {}
        if "marketplace_id" in present:
            values["marketplace_id"] = reader.integer("marketplace_id", required=True, minimum=1, label="marketplace")
        if "store_name" in present:
            values["store_name"] = reader.string("store_name", required=True, max_length=100, label="store name")
        if "url" in present:
            values["url"] = reader.url("url", required=True, label="URL")
        if "price" in present:
            values["price"] = reader.price("price", required=True)
        if "rating" in present:
            values["rating"] = reader.decimal("rating", minimum=MIN_RATING, maximum=MAX_RATING) or Decimal("0.0")
        if "active" in present:
            values["active"] = reader.boolean("active")
        if "sold_count" in present:
            values["sold_count"] = reader.integer("sold_count", minimum=0, label="sold count") or 0
        reader.raise_if_errors("Link validation failed")
        return cls(link_id=link_id, present_fields=frozenset(present), **values)

    def to_update_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.present_fields)}


# ============================================================================
# Marketplaces and Badges
# ============================================================================


@dataclass(frozen=True)
class CreateMarketplaceRequest(RequestDTO):
    name: str
    slug: str
    icon: str | None = None
    color: str = "#64748b"
    active: bool = True

    @classmethod
    def from_request(cls, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        name = reader.string("name", required=True, min_length=2, max_length=100, label="marketplace name")
        slug = _read_named_slug(reader, name)
        icon = reader.string("icon", max_length=50)
        color = _read_color(reader) or "#64748b"
        active = reader.boolean("active", default=True)
        reader.raise_if_errors("Marketplace validation failed")
        return cls(name=name, slug=slug, icon=icon, color=color, active=active)


@dataclass(frozen=True)
class CreateBadgeRequest(RequestDTO):
    label: str
    color: str = "#0ea5e9"

    @classmethod
    def from_request(cls, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        label = reader.string("label", required=True, max_length=50)
        color = _read_color(reader) or "#0ea5e9"
        reader.raise_if_errors("Badge validation failed")
        return cls(label=label, color=color)
