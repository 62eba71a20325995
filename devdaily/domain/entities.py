"""Domain entities.

Entities are mutable dataclasses identified by an integer id that the
repository assigns on first save. Two entities are equal when they are
of the same type and share an id.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from devdaily.domain.enums import ImageSourceType
from devdaily.domain.state_machines import ProductStatus

PRICE_UPDATE_INTERVAL = timedelta(days=7)
LINK_VALIDATION_INTERVAL = timedelta(days=14)
MAX_LOGIN_ATTEMPTS = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_rupiah(amount: Decimal | int | float | None) -> str:
    """Format an amount as Indonesian rupiah, e.g. ``Rp 1.250.000``."""
    if amount is None:
        return "Rp 0"
    whole = int(Decimal(amount).quantize(Decimal("1")))
    return "Rp " + f"{whole:,}".replace(",", ".")


# ============================================================================
# Entity Base
# ============================================================================


@dataclass(eq=False)
class Entity:
    """Base class for entities.

    Attributes:
        id: Repository-assigned identifier, None until first saved.
    """

    id: int | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.id is not None and self.id == other.id

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.id))


# ============================================================================
# Catalog
# ============================================================================


@dataclass(eq=False)
class Product(Entity):
    """A comparable product listed on the storefront."""

    name: str = ""
    slug: str = ""
    description: str | None = None
    market_price: Decimal = Decimal("0.00")
    status: ProductStatus = ProductStatus.DRAFT
    category_id: int | None = None
    badge_ids: list[int] = field(default_factory=list)
    image_url: str | None = None
    image_path: str | None = None
    image_source_type: ImageSourceType = ImageSourceType.URL
    view_count: int = 0
    created_by: int | None = None
    verified_by: int | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    published_at: datetime | None = None
    verified_at: datetime | None = None
    archived_at: datetime | None = None
    deleted_at: datetime | None = None
    last_price_update: datetime | None = None
    last_link_check: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def formatted_price(self) -> str:
        return format_rupiah(self.market_price)

    def is_publicly_visible(self, now: datetime | None = None) -> bool:
        """Check the storefront visibility rules.

        A product is visible when it is published, not trashed, and its
        publication time (if scheduled) has passed.
        """
        if self.is_deleted or self.status != ProductStatus.PUBLISHED:
            return False
        if self.published_at is None:
            return True
        return self.published_at <= (now or utcnow())

    def needs_price_update(self, now: datetime | None = None) -> bool:
        if self.last_price_update is None:
            return True
        return (now or utcnow()) - self.last_price_update >= PRICE_UPDATE_INTERVAL

    def needs_link_validation(self, now: datetime | None = None) -> bool:
        if self.last_link_check is None:
            return True
        return (now or utcnow()) - self.last_link_check >= LINK_VALIDATION_INTERVAL

    def touch(self) -> None:
        self.updated_at = utcnow()

    def snapshot(self) -> dict[str, Any]:
        """Plain values used for audit diffs."""
        return {
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "market_price": str(self.market_price),
            "status": self.status.value,
            "category_id": self.category_id,
            "badge_ids": list(self.badge_ids),
            "image_url": self.image_url,
            "image_path": self.image_path,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }


@dataclass(eq=False)
class Category(Entity):
    """A node in the category tree."""

    name: str = ""
    slug: str = ""
    icon: str = "fas fa-folder"
    parent_id: int | None = None
    sort_order: int = 0
    active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False)
class Marketplace(Entity):
    """An online store that affiliate links point into."""

    name: str = ""
    slug: str = ""
    icon: str | None = None
    color: str = "#64748b"
    active: bool = True
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False)
class Link(Entity):
    """A marketplace offer for a product, used for price comparison."""

    product_id: int = 0
    marketplace_id: int = 0
    store_name: str = ""
    url: str = ""
    price: Decimal = Decimal("0.00")
    rating: Decimal = Decimal("0.0")
    active: bool = True
    sold_count: int = 0
    clicks: int = 0
    last_price_update: datetime | None = None
    last_validation: datetime | None = None
    validation_status: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def formatted_price(self) -> str:
        return format_rupiah(self.price)


@dataclass(eq=False)
class Badge(Entity):
    label: str = ""
    color: str = "#0ea5e9"


# ============================================================================
# Administration
# ============================================================================


@dataclass(eq=False)
class Admin(Entity):
    """A back office user."""

    username: str = ""
    email: str = ""
    name: str = ""
    password_hash: str = ""
    role: str = "editor"
    active: bool = True
    last_login: datetime | None = None
    login_attempts: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_locked(self) -> bool:
        return self.login_attempts >= MAX_LOGIN_ATTEMPTS


@dataclass(eq=False)
class Role(Entity):
    """A named set of permissions."""

    slug: str = ""
    name: str = ""
    description: str | None = None
    permissions: set[str] = field(default_factory=set)
    is_system: bool = False

    def grants(self, permission: str) -> bool:
        return "*" in self.permissions or permission in self.permissions


@dataclass(eq=False)
class AdminToken(Entity):
    """An issued bearer token."""

    token: str = ""
    admin_id: int = 0
    expires_at: datetime = field(default_factory=utcnow)
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) >= self.expires_at


@dataclass(eq=False)
class AuditLog(Entity):
    """A record of an administrative change."""

    admin_id: int | None = None
    action_type: str = ""
    entity_type: str = ""
    entity_id: int | None = None
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    changes_summary: str = ""
    ip_address: str | None = None
    user_agent: str | None = None
    performed_at: datetime = field(default_factory=utcnow)
