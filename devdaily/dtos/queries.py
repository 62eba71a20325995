"""Query DTOs.

``ProductQuery`` is an immutable filter, sort and paging description. It
never mutates: ``with_()`` returns a new query with the overrides merged
and re-normalized. Public code paths layer ``PUBLIC_CONSTRAINTS`` on top
of whatever the visitor asked for:

    query = ProductQuery.from_request(params).with_(**PUBLIC_CONSTRAINTS)
"""

import hashlib
import json
import re
from dataclasses import dataclass, fields, replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Self

from devdaily.domain.entities import LINK_VALIDATION_INTERVAL, PRICE_UPDATE_INTERVAL, utcnow
from devdaily.domain.exceptions import ValidationError
from devdaily.domain.filters import ProductFilter
from devdaily.domain.state_machines import ProductStatus
from devdaily.dtos.base import serialize_value

ALLOWED_SORT_FIELDS = (
    "id",
    "name",
    "slug",
    "market_price",
    "view_count",
    "created_at",
    "updated_at",
    "published_at",
    "verified_at",
)
ALLOWED_DATE_FIELDS = ("created_at", "updated_at", "published_at", "verified_at")
DEFAULT_SORT_BY = "created_at"
DEFAULT_SORT_DIRECTION = "desc"
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100
MAX_CATEGORY_FILTERS = 10
MAX_SEARCH_LENGTH = 100

_SEARCH_STRIP = re.compile(r"[^\w\s\-.,]", re.UNICODE)

PUBLIC_CONSTRAINTS: dict[str, Any] = {
    "status": (ProductStatus.PUBLISHED,),
    "include_trashed": False,
    "only_trashed": False,
    "admin_mode": False,
}


def sanitize_search(value: Any) -> str | None:
    """Trim, strip unsafe characters and cap a search keyword."""
    if value is None:
        return None
    text = _SEARCH_STRIP.sub("", str(value)).strip()
    text = re.sub(r"\s+", " ", text)[:MAX_SEARCH_LENGTH].strip()
    return text or None


def _as_list(value: Any) -> list[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [part for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _parse_statuses(value: Any) -> tuple[ProductStatus, ...]:
    statuses: list[ProductStatus] = []
    for item in _as_list(value):
        try:
            status = ProductStatus.parse(item)
        except ValueError:
            continue
        if status not in statuses:
            statuses.append(status)
    return tuple(statuses)


def _parse_ids(value: Any, limit: int | None = None) -> tuple[int, ...]:
    ids: list[int] = []
    for item in _as_list(value):
        try:
            number = int(str(item).strip())
        except ValueError:
            continue
        if number > 0 and number not in ids:
            ids.append(number)
    return tuple(ids[:limit] if limit else ids)


def _parse_price(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return price if price >= 0 else None


def _parse_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "on", "yes"}


def _parse_date(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


# ============================================================================
# Product Query
# ============================================================================


@dataclass(frozen=True)
class ProductQuery:
    """Immutable product listing criteria."""

    status: tuple[ProductStatus, ...] = ()
    category_ids: tuple[int, ...] = ()
    search: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    marketplace_id: int | None = None
    badge_ids: tuple[int, ...] = ()
    has_active_links: bool = False
    needs_price_update: bool = False
    needs_link_validation: bool = False
    date_field: str = "created_at"
    date_from: datetime | None = None
    date_to: datetime | None = None
    verified_by: int | None = None
    sort_by: str = DEFAULT_SORT_BY
    sort_direction: str = DEFAULT_SORT_DIRECTION
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE
    include_trashed: bool = False
    only_trashed: bool = False
    admin_mode: bool = False

    def __post_init__(self) -> None:
        # Normalization runs on every construction, including with_()
        set_ = object.__setattr__
        set_(self, "status", _parse_statuses(self.status))
        set_(self, "category_ids", _parse_ids(self.category_ids))
        set_(self, "badge_ids", _parse_ids(self.badge_ids))
        set_(self, "search", sanitize_search(self.search))
        if self.sort_by not in ALLOWED_SORT_FIELDS:
            set_(self, "sort_by", DEFAULT_SORT_BY)
        direction = str(self.sort_direction).lower()
        set_(self, "sort_direction", direction if direction in ("asc", "desc") else DEFAULT_SORT_DIRECTION)
        if self.date_field not in ALLOWED_DATE_FIELDS:
            set_(self, "date_field", "created_at")
        set_(self, "page", max(1, int(self.page)))
        set_(self, "per_page", min(MAX_PER_PAGE, max(1, int(self.per_page))))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_request(cls, params: Mapping[str, Any] | None, admin_mode: bool = False) -> Self:
        """Build a query from raw request parameters.

        Unknown or malformed values fall back to defaults instead of
        failing, so a hand-edited URL still renders a page.
        """
        params = params or {}
        sort_by = params.get("sort_by") or params.get("sort") or DEFAULT_SORT_BY
        direction = params.get("sort_direction") or params.get("order") or DEFAULT_SORT_DIRECTION
        category_ids = params.get("category_ids", params.get("category_id"))
        return cls(
            status=params.get("status"),
            category_ids=_parse_ids(category_ids, MAX_CATEGORY_FILTERS),
            search=params.get("search") or params.get("q"),
            min_price=_parse_price(params.get("min_price")),
            max_price=_parse_price(params.get("max_price")),
            marketplace_id=_parse_int(params.get("marketplace_id")),
            badge_ids=params.get("badge_ids"),
            has_active_links=_parse_bool(params.get("has_active_links", False)),
            needs_price_update=_parse_bool(params.get("needs_price_update", False)),
            needs_link_validation=_parse_bool(params.get("needs_link_validation", False)),
            date_field=params.get("date_field") or "created_at",
            date_from=_parse_date(params.get("date_from")),
            date_to=_parse_date(params.get("date_to")),
            verified_by=_parse_int(params.get("verified_by")),
            sort_by=sort_by,
            sort_direction=direction,
            page=_parse_int(params.get("page")) or 1,
            per_page=_parse_int(params.get("per_page")) or DEFAULT_PER_PAGE,
            include_trashed=admin_mode and _parse_bool(params.get("include_trashed", False)),
            only_trashed=admin_mode and _parse_bool(params.get("only_trashed", False)),
            admin_mode=admin_mode,
        )

    @classmethod
    def for_public(cls, **overrides: Any) -> Self:
        return cls(**overrides).with_(**PUBLIC_CONSTRAINTS)

    @classmethod
    def for_admin(cls, **overrides: Any) -> Self:
        return cls(**{**overrides, "admin_mode": True})

    def with_(self, **changes: Any) -> Self:
        """Return a copy with ``changes`` applied; ``self`` is untouched."""
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def is_public_query(self) -> bool:
        return (
            not self.admin_mode
            and self.status == (ProductStatus.PUBLISHED,)
            and not self.include_trashed
            and not self.only_trashed
        )

    @property
    def has_filters(self) -> bool:
        return any(
            (
                self.category_ids,
                self.search,
                self.min_price is not None,
                self.max_price is not None,
                self.marketplace_id,
                self.badge_ids,
                self.has_active_links,
                self.needs_price_update,
                self.needs_link_validation,
                self.date_from,
                self.date_to,
                self.verified_by,
            )
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def validate(self) -> None:
        """Check cross-field rules.

        Raises:
            ValidationError: If the query is self-contradictory.
        """
        errors: dict[str, str] = {}
        if self.min_price is not None and self.min_price < 0:
            errors["min_price"] = "Minimum price cannot be negative."
        if self.max_price is not None and self.max_price < 0:
            errors["max_price"] = "Maximum price cannot be negative."
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            errors["min_price"] = "Minimum price cannot be greater than maximum price."
        if self.date_from and self.date_to and self.date_from > self.date_to:
            errors["date_from"] = "Start date must be before end date."
        if self.include_trashed and not self.admin_mode:
            errors["include_trashed"] = "Trashed products are only available to administrators."
        if errors:
            raise ValidationError("Invalid product query", errors)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: serialize_value(getattr(self, f.name)) for f in fields(self)}

    def cache_key(self) -> str:
        payload = json.dumps(self.to_dict(), sort_keys=True, default=str)
        return "product_query_" + hashlib.md5(payload.encode()).hexdigest()

    def to_repository_filters(self, now: datetime | None = None) -> ProductFilter:
        """Translate into the repository filter.

        Non-admin queries also hide products scheduled for a future
        publication time.
        """
        now = now or utcnow()
        date_to = self.date_to
        if date_to is not None and date_to.time() == datetime.min.time():
            date_to = date_to + timedelta(days=1) - timedelta(microseconds=1)
        return ProductFilter(
            statuses=self.status,
            category_ids=self.category_ids,
            search=self.search,
            min_price=self.min_price,
            max_price=self.max_price,
            badge_ids=self.badge_ids,
            verified_by=self.verified_by,
            date_field=self.date_field,
            date_from=self.date_from,
            date_to=date_to,
            price_checked_before=now - PRICE_UPDATE_INTERVAL if self.needs_price_update else None,
            link_checked_before=now - LINK_VALIDATION_INTERVAL if self.needs_link_validation else None,
            published_before=None if self.admin_mode else now,
            include_trashed=self.include_trashed,
            only_trashed=self.only_trashed,
            has_active_links=self.has_active_links,
            marketplace_id=self.marketplace_id,
        )


# ============================================================================
# Pagination Query
# ============================================================================


@dataclass(frozen=True)
class PaginationQuery:
    """Page/per-page pair read from request parameters."""

    page: int = 1
    per_page: int = DEFAULT_PER_PAGE

    @classmethod
    def from_request(cls, params: Mapping[str, Any] | None, default_per_page: int = DEFAULT_PER_PAGE) -> Self:
        params = params or {}
        page = _parse_int(params.get("page")) or 1
        per_page = _parse_int(params.get("per_page")) or default_per_page
        return cls(page=max(1, page), per_page=min(MAX_PER_PAGE, max(1, per_page)))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        return self.per_page
