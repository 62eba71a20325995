"""Bulk action outcome aggregate."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from devdaily.domain.entities import utcnow
from devdaily.domain.enums import ProductBulkActionType


@dataclass
class BulkActionResult:
    """Per-item accounting for a bulk action.

    Failures are collected per id instead of aborting the batch, so the
    caller can render a combined success/warning message.
    """

    action: ProductBulkActionType
    success_count: int = 0
    failed_count: int = 0
    failed_items: dict[int, str] = field(default_factory=dict)
    success_ids: list[int] = field(default_factory=list)
    completed_at: datetime | None = None

    def add_success(self, item_id: int) -> None:
        self.success_ids.append(item_id)
        self.success_count += 1

    def add_failure(self, item_id: int, error: str) -> None:
        self.failed_items[item_id] = error
        self.failed_count += 1

    def complete(self) -> "BulkActionResult":
        self.completed_at = utcnow()
        return self

    @property
    def total_processed(self) -> int:
        return self.success_count + self.failed_count

    @property
    def has_failures(self) -> bool:
        return self.failed_count > 0

    @property
    def is_complete_success(self) -> bool:
        return self.failed_count == 0 and self.success_count > 0

    @property
    def success_percentage(self) -> float:
        if self.total_processed == 0:
            return 0.0
        return round(self.success_count / self.total_processed * 100, 2)

    def summary_message(self) -> str:
        if not self.has_failures:
            return f"Successfully processed {self.success_count} items."
        return (
            f"Processed {self.total_processed} items: "
            f"{self.success_count} succeeded, {self.failed_count} failed."
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "success_count": self.success_count,
            "failed_count": self.failed_count,
            "total_processed": self.total_processed,
            "success_percentage": self.success_percentage,
            "failed_items": {str(key): value for key, value in self.failed_items.items()},
            "success_ids": list(self.success_ids),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "message": self.summary_message(),
        }
