"""Response DTOs.

Serializers turn entities into the JSON shapes used by the API and the
templates. ``to_dict`` is the admin shape; ``to_public_dict`` and
``to_detail_dict`` omit internal bookkeeping fields.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Self

from devdaily.domain.entities import (
    Admin,
    AuditLog,
    Badge,
    Category,
    Link,
    Marketplace,
    Product,
    Role,
    format_rupiah,
)
from devdaily.domain.enums import ImageSourceType
from devdaily.domain.images import variant_url
from devdaily.dtos.base import serialize_value


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _category_summary(category: Category | None) -> dict[str, Any] | None:
    if category is None:
        return None
    return {"id": category.id, "name": category.name, "slug": category.slug}


# ============================================================================
# Products
# ============================================================================


@dataclass(frozen=True)
class ProductResponse:
    """Serialized view of a product."""

    id: int
    name: str
    slug: str
    description: str | None
    market_price: Decimal
    status: str
    status_label: str
    category: dict[str, Any] | None
    image_url: str | None
    thumbnail_url: str | None
    image_source_type: str
    view_count: int
    badge_ids: tuple[int, ...]
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None
    verified_at: datetime | None
    verified_by: int | None
    created_by: int | None
    archived_at: datetime | None
    deleted_at: datetime | None
    last_price_update: datetime | None
    last_link_check: datetime | None
    needs_price_update: bool
    needs_link_validation: bool
    admin_mode: bool = False

    @classmethod
    def from_entity(
        cls,
        product: Product,
        category: Category | None = None,
        admin_mode: bool = False,
    ) -> Self:
        if product.image_source_type == ImageSourceType.UPLOAD and product.image_path:
            image_url = variant_url(product.image_path, "med")
            thumbnail_url = variant_url(product.image_path, "thumb")
        else:
            image_url = product.image_url
            thumbnail_url = product.image_url
        return cls(
            id=product.id,
            name=product.name,
            slug=product.slug,
            description=product.description,
            market_price=product.market_price,
            status=product.status.value,
            status_label=product.status.label,
            category=_category_summary(category),
            image_url=image_url,
            thumbnail_url=thumbnail_url,
            image_source_type=product.image_source_type.value,
            view_count=product.view_count,
            badge_ids=tuple(product.badge_ids),
            created_at=product.created_at,
            updated_at=product.updated_at,
            published_at=product.published_at,
            verified_at=product.verified_at,
            verified_by=product.verified_by,
            created_by=product.created_by,
            archived_at=product.archived_at,
            deleted_at=product.deleted_at,
            last_price_update=product.last_price_update,
            last_link_check=product.last_link_check,
            needs_price_update=product.needs_price_update(),
            needs_link_validation=product.needs_link_validation(),
            admin_mode=admin_mode,
        )

    @property
    def formatted_price(self) -> str:
        return format_rupiah(self.market_price)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_dict(self) -> dict[str, Any]:
        """Admin shape with every field."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "market_price": str(self.market_price),
            "formatted_price": self.formatted_price,
            "status": self.status,
            "status_label": self.status_label,
            "category": self.category,
            "image_url": self.image_url,
            "thumbnail_url": self.thumbnail_url,
            "image_source_type": self.image_source_type,
            "view_count": self.view_count,
            "badge_ids": list(self.badge_ids),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "published_at": _iso(self.published_at),
            "verified_at": _iso(self.verified_at),
            "verified_by": self.verified_by,
            "created_by": self.created_by,
            "archived_at": _iso(self.archived_at),
            "deleted_at": _iso(self.deleted_at),
            "last_price_update": _iso(self.last_price_update),
            "last_link_check": _iso(self.last_link_check),
            "needs_price_update": self.needs_price_update,
            "needs_link_validation": self.needs_link_validation,
        }

    def to_public_dict(self) -> dict[str, Any]:
        """Storefront shape without workflow or audit fields."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "market_price": str(self.market_price),
            "formatted_price": self.formatted_price,
            "category": self.category,
            "image_url": self.image_url,
            "thumbnail_url": self.thumbnail_url,
            "view_count": self.view_count,
            "published_at": _iso(self.published_at),
        }

    def to_detail_dict(self) -> dict[str, Any]:
        return {**self.to_public_dict(), "updated_at": _iso(self.updated_at)}


# ============================================================================
# Links, Marketplaces, Badges
# ============================================================================


@dataclass(frozen=True)
class MarketplaceResponse:
    id: int
    name: str
    slug: str
    icon: str | None
    color: str
    active: bool

    @classmethod
    def from_entity(cls, marketplace: Marketplace) -> Self:
        return cls(
            id=marketplace.id,
            name=marketplace.name,
            slug=marketplace.slug,
            icon=marketplace.icon,
            color=marketplace.color,
            active=marketplace.active,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "icon": self.icon,
            "color": self.color,
            "active": self.active,
        }


@dataclass(frozen=True)
class LinkResponse:
    id: int
    product_id: int
    marketplace: MarketplaceResponse | None
    store_name: str
    url: str
    price: Decimal
    rating: Decimal
    active: bool
    sold_count: int
    clicks: int
    last_price_update: datetime | None
    last_validation: datetime | None
    validation_status: str | None

    @classmethod
    def from_entity(cls, link: Link, marketplace: Marketplace | None = None) -> Self:
        return cls(
            id=link.id,
            product_id=link.product_id,
            marketplace=MarketplaceResponse.from_entity(marketplace) if marketplace else None,
            store_name=link.store_name,
            url=link.url,
            price=link.price,
            rating=link.rating,
            active=link.active,
            sold_count=link.sold_count,
            clicks=link.clicks,
            last_price_update=link.last_price_update,
            last_validation=link.last_validation,
            validation_status=link.validation_status,
        )

    @property
    def formatted_price(self) -> str:
        return format_rupiah(self.price)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.to_public_dict(),
            "product_id": self.product_id,
            "active": self.active,
            "clicks": self.clicks,
            "last_price_update": _iso(self.last_price_update),
            "last_validation": _iso(self.last_validation),
            "validation_status": self.validation_status,
        }

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "marketplace": self.marketplace.to_dict() if self.marketplace else None,
            "store_name": self.store_name,
            "url": self.url,
            "price": str(self.price),
            "formatted_price": self.formatted_price,
            "rating": str(self.rating),
            "sold_count": self.sold_count,
        }


@dataclass(frozen=True)
class BadgeResponse:
    id: int
    label: str
    color: str

    @classmethod
    def from_entity(cls, badge: Badge) -> Self:
        return cls(id=badge.id, label=badge.label, color=badge.color)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "color": self.color}


# ============================================================================
# Product Detail
# ============================================================================


@dataclass(frozen=True)
class ProductDetailResponse:
    """A product with its category, badges and active price entries."""

    product: ProductResponse
    links: tuple[LinkResponse, ...] = ()
    badges: tuple[BadgeResponse, ...] = ()
    subcategory_path: tuple[dict[str, Any], ...] = ()

    @property
    def price_range(self) -> dict[str, Any]:
        prices = [link.price for link in self.links if link.active]
        if not prices:
            return {"min": None, "max": None, "count": 0}
        return {"min": str(min(prices)), "max": str(max(prices)), "count": len(prices)}

    @property
    def lowest_price_link(self) -> LinkResponse | None:
        active = [link for link in self.links if link.active]
        return min(active, key=lambda link: link.price) if active else None

    def to_detail_dict(self) -> dict[str, Any]:
        return {
            **self.product.to_detail_dict(),
            "badges": [badge.to_dict() for badge in self.badges],
            "links": [link.to_public_dict() for link in self.links],
            "price_range": self.price_range,
            "breadcrumbs": list(self.subcategory_path),
        }


# ============================================================================
# Categories
# ============================================================================


@dataclass(frozen=True)
class CategoryResponse:
    id: int
    name: str
    slug: str
    icon: str
    parent_id: int | None
    sort_order: int
    active: bool
    product_count: int = 0
    children: tuple["CategoryResponse", ...] = ()

    @classmethod
    def from_entity(
        cls,
        category: Category,
        product_count: int = 0,
        children: tuple["CategoryResponse", ...] = (),
    ) -> Self:
        return cls(
            id=category.id,
            name=category.name,
            slug=category.slug,
            icon=category.icon,
            parent_id=category.parent_id,
            sort_order=category.sort_order,
            active=category.active,
            product_count=product_count,
            children=children,
        )

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "icon": self.icon,
            "parent_id": self.parent_id,
            "sort_order": self.sort_order,
            "active": self.active,
            "product_count": self.product_count,
            "children": [child.to_dict() for child in self.children],
        }


# ============================================================================
# Administration
# ============================================================================


@dataclass(frozen=True)
class AdminResponse:
    id: int
    username: str
    email: str
    name: str
    role: str
    active: bool
    is_locked: bool
    last_login: datetime | None
    created_at: datetime

    @classmethod
    def from_entity(cls, admin: Admin) -> Self:
        return cls(
            id=admin.id,
            username=admin.username,
            email=admin.email,
            name=admin.name,
            role=admin.role,
            active=admin.active,
            is_locked=admin.is_locked,
            last_login=admin.last_login,
            created_at=admin.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "active": self.active,
            "is_locked": self.is_locked,
            "last_login": _iso(self.last_login),
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class RoleResponse:
    id: int
    slug: str
    name: str
    description: str | None
    permissions: tuple[str, ...]
    is_system: bool
    admin_count: int = 0

    @classmethod
    def from_entity(cls, role: Role, admin_count: int = 0) -> Self:
        return cls(
            id=role.id,
            slug=role.slug,
            name=role.name,
            description=role.description,
            permissions=tuple(sorted(role.permissions)),
            is_system=role.is_system,
            admin_count=admin_count,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "permissions": list(self.permissions),
            "is_system": self.is_system,
            "admin_count": self.admin_count,
        }


@dataclass(frozen=True)
class AuditLogResponse:
    id: int
    admin_id: int | None
    admin_name: str | None
    action_type: str
    entity_type: str
    entity_id: int | None
    old_values: dict[str, Any] | None
    new_values: dict[str, Any] | None
    changes_summary: str
    ip_address: str | None
    user_agent: str | None
    performed_at: datetime

    @classmethod
    def from_entity(cls, log: AuditLog, admin_name: str | None = None) -> Self:
        return cls(
            id=log.id,
            admin_id=log.admin_id,
            admin_name=admin_name,
            action_type=log.action_type,
            entity_type=log.entity_type,
            entity_id=log.entity_id,
            old_values=log.old_values,
            new_values=log.new_values,
            changes_summary=log.changes_summary,
            ip_address=log.ip_address,
            user_agent=log.user_agent,
            performed_at=log.performed_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "admin_id": self.admin_id,
            "admin_name": self.admin_name,
            "action_type": self.action_type,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "old_values": serialize_value(self.old_values),
            "new_values": serialize_value(self.new_values),
            "changes_summary": self.changes_summary,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "performed_at": _iso(self.performed_at),
        }


@dataclass(frozen=True)
class LoginResponse:
    token: str = field(repr=False)
    expires_at: datetime
    admin: AdminResponse
    token_type: str = "Bearer"

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "token_type": self.token_type,
            "expires_at": _iso(self.expires_at),
            "admin": self.admin.to_dict(),
        }
