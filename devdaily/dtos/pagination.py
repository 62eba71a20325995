"""Pagination result container."""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: Items on the current page.
        total: Total number of matching items.
        page: Current page (1-indexed).
        per_page: Items per page.
    """

    items: list[T]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        return max(1, (self.total + self.per_page - 1) // self.per_page)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def map(self, func: Callable[[T], U]) -> "PaginatedResult[U]":
        return PaginatedResult(
            items=[func(item) for item in self.items],
            total=self.total,
            page=self.page,
            per_page=self.per_page,
        )

    def meta(self) -> dict[str, Any]:
        """Pagination block for the API envelope."""
        return {
            "current_page": self.page,
            "per_page": self.per_page,
            "total_data": self.total,
            "total_pages": self.total_pages,
            "next_page": self.page + 1 if self.has_next else None,
            "prev_page": self.page - 1 if self.has_prev else None,
        }


def paginate(items: list[T], page: int, per_page: int) -> PaginatedResult[T]:
    """Slice an in-memory list into a page."""
    start = (page - 1) * per_page
    return PaginatedResult(items=items[start : start + per_page], total=len(items), page=page, per_page=per_page)
