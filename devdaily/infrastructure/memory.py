"""In-memory repositories.

The default storage backend. A module-level registry holds one instance
of every repository; tests call ``reset_repositories()`` between cases.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Generic, TypeVar

from devdaily.domain.entities import (
    Admin,
    AdminToken,
    AuditLog,
    Badge,
    Category,
    Entity,
    Link,
    Marketplace,
    Product,
    Role,
    utcnow,
)
from devdaily.domain.filters import ProductFilter
from devdaily.domain.repositories import ProductRepository
from devdaily.domain.state_machines import ProductStatus

T = TypeVar("T", bound=Entity)


# ============================================================================
# Generic Store
# ============================================================================


class InMemoryRepository(Generic[T]):
    """Dict-backed storage with auto-increment ids."""

    def __init__(self) -> None:
        self._items: dict[int, T] = {}
        self._next_id = 1

    def add(self, item: T) -> T:
        item.id = self._next_id
        self._next_id += 1
        self._items[item.id] = item
        return item

    def get(self, item_id: int) -> T | None:
        return self._items.get(item_id)

    def update(self, item: T) -> T:
        self._items[item.id] = item
        return item

    def delete(self, item_id: int) -> bool:
        return self._items.pop(item_id, None) is not None

    def all(self) -> list[T]:
        return list(self._items.values())

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        return [item for item in self._items.values() if predicate(item)]

    def count(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()
        self._next_id = 1


# ============================================================================
# Products
# ============================================================================


def _sort_value(product: Product, sort_by: str):
    value = getattr(product, sort_by)
    return value.lower() if isinstance(value, str) else value


def product_matches(product: Product, filters: ProductFilter) -> bool:
    """Apply a ProductFilter to one product."""
    if filters.only_trashed:
        if not product.is_deleted:
            return False
    elif product.is_deleted and not filters.include_trashed:
        return False
    if filters.statuses and product.status not in filters.statuses:
        return False
    if filters.category_ids and product.category_id not in filters.category_ids:
        return False
    if filters.search:
        needle = filters.search.lower()
        haystack = " ".join(filter(None, (product.name, product.slug, product.description))).lower()
        if needle not in haystack:
            return False
    if filters.min_price is not None and product.market_price < filters.min_price:
        return False
    if filters.max_price is not None and product.market_price > filters.max_price:
        return False
    if filters.badge_ids and not set(filters.badge_ids) & set(product.badge_ids):
        return False
    if filters.verified_by is not None and product.verified_by != filters.verified_by:
        return False
    if filters.date_from or filters.date_to:
        value = getattr(product, filters.date_field)
        if value is None:
            return False
        if filters.date_from and value < filters.date_from:
            return False
        if filters.date_to and value > filters.date_to:
            return False
    if filters.price_checked_before is not None:
        if product.last_price_update is not None and product.last_price_update > filters.price_checked_before:
            return False
    if filters.link_checked_before is not None:
        if product.last_link_check is not None and product.last_link_check > filters.link_checked_before:
            return False
    if filters.published_before is not None:
        if product.published_at is not None and product.published_at > filters.published_before:
            return False
    if filters.product_ids is not None and product.id not in filters.product_ids:
        return False
    return True


class InMemoryProductRepository(ProductRepository):
    """Product storage backed by a dict.

    Entities are copied on the way in and out so callers never share
    mutable state with the store, matching the database backend.
    """

    def __init__(self) -> None:
        self._store: InMemoryRepository[Product] = InMemoryRepository()

    async def get(self, product_id: int) -> Product | None:
        product = self._store.get(product_id)
        return deepcopy(product) if product else None

    async def get_by_slug(self, slug: str) -> Product | None:
        for product in self._store.all():
            if product.slug == slug:
                return deepcopy(product)
        return None

    async def slug_exists(self, slug: str, exclude_id: int | None = None) -> bool:
        return any(p.slug == slug and p.id != exclude_id for p in self._store.all())

    async def add(self, product: Product) -> Product:
        stored = self._store.add(deepcopy(product))
        product.id = stored.id
        return product

    async def update(self, product: Product) -> Product:
        self._store.update(deepcopy(product))
        return product

    async def delete(self, product_id: int) -> bool:
        return self._store.delete(product_id)

    def _matching(self, filters: ProductFilter) -> list[Product]:
        return self._store.filter(lambda product: product_matches(product, filters))

    async def find(
        self,
        filters: ProductFilter,
        sort_by: str = "created_at",
        sort_direction: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> list[Product]:
        matched = sorted(self._matching(filters), key=lambda p: p.id)
        present = [p for p in matched if getattr(p, sort_by) is not None]
        missing = [p for p in matched if getattr(p, sort_by) is None]
        present.sort(key=lambda p: _sort_value(p, sort_by), reverse=sort_direction == "desc")
        ordered = present + missing
        return [deepcopy(p) for p in ordered[offset : offset + limit]]

    async def count(self, filters: ProductFilter) -> int:
        return len(self._matching(filters))

    async def count_by_status(self, status: ProductStatus) -> int:
        return len(self._store.filter(lambda p: p.status == status and not p.is_deleted))

    async def count_by_category(self, category_ids: list[int]) -> int:
        wanted = set(category_ids)
        return len(self._store.filter(lambda p: p.category_id in wanted and not p.is_deleted))

    async def increment_view_count(self, product_id: int) -> int:
        product = self._store.get(product_id)
        if product is None:
            return 0
        product.view_count += 1
        return product.view_count

    def clear(self) -> None:
        self._store.clear()


# ============================================================================
# Catalog Repositories
# ============================================================================


class CategoryRepository(InMemoryRepository[Category]):
    def get_by_slug(self, slug: str) -> Category | None:
        return next((c for c in self.all() if c.slug == slug), None)

    def slug_exists(self, slug: str, exclude_id: int | None = None) -> bool:
        return any(c.slug == slug and c.id != exclude_id for c in self.all())

    def children_of(self, parent_id: int | None, active_only: bool = False) -> list[Category]:
        children = self.filter(lambda c: c.parent_id == parent_id and (c.active or not active_only))
        return sorted(children, key=lambda c: (c.sort_order, c.name.lower()))

    def descendant_ids(self, category_id: int) -> list[int]:
        """Ids of every category below ``category_id``."""
        result: list[int] = []
        pending = [category_id]
        while pending:
            current = pending.pop()
            for child in self.children_of(current):
                if child.id not in result:
                    result.append(child.id)
                    pending.append(child.id)
        return result


class MarketplaceRepository(InMemoryRepository[Marketplace]):
    def get_by_slug(self, slug: str) -> Marketplace | None:
        return next((m for m in self.all() if m.slug == slug), None)


class LinkRepository(InMemoryRepository[Link]):
    def list_by_product(self, product_id: int, active_only: bool = False) -> list[Link]:
        links = self.filter(lambda link: link.product_id == product_id and (link.active or not active_only))
        return sorted(links, key=lambda link: (link.price, link.id))

    def product_ids_with_active_links(self) -> set[int]:
        return {link.product_id for link in self.all() if link.active}

    def product_ids_for_marketplace(self, marketplace_id: int) -> set[int]:
        return {link.product_id for link in self.all() if link.marketplace_id == marketplace_id and link.active}

    def count_by_marketplace(self, marketplace_id: int) -> int:
        return len(self.filter(lambda link: link.marketplace_id == marketplace_id))

    def delete_by_product(self, product_id: int) -> int:
        doomed = [link.id for link in self.list_by_product(product_id)]
        for link_id in doomed:
            self.delete(link_id)
        return len(doomed)


class BadgeRepository(InMemoryRepository[Badge]):
    pass


# ============================================================================
# Administration Repositories
# ============================================================================


class AdminRepository(InMemoryRepository[Admin]):
    def get_by_username(self, username: str) -> Admin | None:
        return next((a for a in self.all() if a.username == username), None)

    def get_by_email(self, email: str) -> Admin | None:
        email = email.lower()
        return next((a for a in self.all() if a.email.lower() == email), None)

    def count_by_role(self, role: str) -> int:
        return len(self.filter(lambda a: a.role == role))


class RoleRepository(InMemoryRepository[Role]):
    def get_by_slug(self, slug: str) -> Role | None:
        return next((r for r in self.all() if r.slug == slug), None)


class TokenRepository(InMemoryRepository[AdminToken]):
    def get_by_token(self, token: str) -> AdminToken | None:
        return next((t for t in self.all() if t.token == token), None)

    def revoke(self, token: str) -> bool:
        record = self.get_by_token(token)
        return self.delete(record.id) if record else False

    def revoke_for_admin(self, admin_id: int) -> int:
        doomed = [t.id for t in self.all() if t.admin_id == admin_id]
        for token_id in doomed:
            self.delete(token_id)
        return len(doomed)

    def purge_expired(self, now: datetime | None = None) -> int:
        now = now or utcnow()
        doomed = [t.id for t in self.all() if t.is_expired(now)]
        for token_id in doomed:
            self.delete(token_id)
        return len(doomed)


class AuditLogRepository(InMemoryRepository[AuditLog]):
    def list_all(
        self,
        page: int = 1,
        per_page: int = 20,
        admin_id: int | None = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
        action_type: str | None = None,
    ) -> tuple[list[AuditLog], int]:
        """List audit logs newest first with filtering and pagination.

        Returns:
            Tuple of (logs, total_count).
        """
        logs = self.all()
        if admin_id is not None:
            logs = [log for log in logs if log.admin_id == admin_id]
        if entity_type:
            logs = [log for log in logs if log.entity_type == entity_type]
        if entity_id is not None:
            logs = [log for log in logs if log.entity_id == entity_id]
        if action_type:
            logs = [log for log in logs if log.action_type == action_type]
        logs.sort(key=lambda log: (log.performed_at, log.id), reverse=True)
        total = len(logs)
        start = (page - 1) * per_page
        return logs[start : start + per_page], total


# ============================================================================
# Registry
# ============================================================================


@dataclass
class Repositories:
    """Every in-memory repository used by the application."""

    products: InMemoryProductRepository = field(default_factory=InMemoryProductRepository)
    categories: CategoryRepository = field(default_factory=CategoryRepository)
    marketplaces: MarketplaceRepository = field(default_factory=MarketplaceRepository)
    links: LinkRepository = field(default_factory=LinkRepository)
    badges: BadgeRepository = field(default_factory=BadgeRepository)
    admins: AdminRepository = field(default_factory=AdminRepository)
    roles: RoleRepository = field(default_factory=RoleRepository)
    tokens: TokenRepository = field(default_factory=TokenRepository)
    audit_logs: AuditLogRepository = field(default_factory=AuditLogRepository)


# Global repository instance
_repositories: Repositories | None = None


def get_repositories() -> Repositories:
    """Get the global repository registry."""
    global _repositories
    if _repositories is None:
        _repositories = Repositories()
    return _repositories


def reset_repositories() -> None:
    """Reset the registry (for testing)."""
    global _repositories
    _repositories = None
