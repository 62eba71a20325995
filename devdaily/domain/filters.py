"""Repository-level product filter."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from devdaily.domain.state_machines import ProductStatus


@dataclass(frozen=True)
class ProductFilter:
    """Filter criteria understood by every product repository.

    ``has_active_links`` and ``marketplace_id`` depend on link data, so
    the query service resolves them into ``product_ids`` before the
    filter reaches a repository.
    """

    statuses: tuple[ProductStatus, ...] = ()
    category_ids: tuple[int, ...] = ()
    search: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    badge_ids: tuple[int, ...] = ()
    verified_by: int | None = None
    date_field: str = "created_at"
    date_from: datetime | None = None
    date_to: datetime | None = None
    price_checked_before: datetime | None = None
    link_checked_before: datetime | None = None
    published_before: datetime | None = None
    include_trashed: bool = False
    only_trashed: bool = False
    has_active_links: bool = False
    marketplace_id: int | None = None
    product_ids: frozenset[int] | None = None
