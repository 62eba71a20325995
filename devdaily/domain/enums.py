"""Closed value sets used across the catalog."""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class ImageSourceType(str, Enum):
    """Where a product image comes from."""

    URL = "url"
    UPLOAD = "upload"
    EXTERNAL = "external"


class PriceAdjustmentType(str, Enum):
    """How a bulk price change is applied to each product."""

    SET = "set"
    INCREASE = "increase"
    DECREASE = "decrease"
    PERCENTAGE_INCREASE = "percentage_increase"
    PERCENTAGE_DECREASE = "percentage_decrease"

    def apply(self, price: Decimal, value: Decimal) -> Decimal:
        """Return the adjusted price, rounded to two decimals."""
        if self == PriceAdjustmentType.SET:
            result = value
        elif self == PriceAdjustmentType.INCREASE:
            result = price + value
        elif self == PriceAdjustmentType.DECREASE:
            result = price - value
        elif self == PriceAdjustmentType.PERCENTAGE_INCREASE:
            result = price * (Decimal(100) + value) / Decimal(100)
        else:
            result = price * (Decimal(100) - value) / Decimal(100)
        return result.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ProductBulkActionType(str, Enum):
    """Actions that can be applied to many products at once.

    Any string outside this set is rejected before a bulk request is
    constructed.
    """

    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    ARCHIVE = "archive"
    DELETE = "delete"
    HARD_DELETE = "hard_delete"
    RESTORE = "restore"
    VERIFY = "verify"
    CHANGE_CATEGORY = "change_category"
    CHANGE_PRICE = "change_price"

    @property
    def display_name(self) -> str:
        return _BULK_DISPLAY_NAMES[self]

    def requires_confirmation(self) -> bool:
        return self in {
            ProductBulkActionType.DELETE,
            ProductBulkActionType.HARD_DELETE,
            ProductBulkActionType.ARCHIVE,
            ProductBulkActionType.CHANGE_PRICE,
        }

    def is_destructive(self) -> bool:
        return self in {ProductBulkActionType.DELETE, ProductBulkActionType.HARD_DELETE}

    def requires_parameters(self) -> bool:
        return self in {
            ProductBulkActionType.CHANGE_CATEGORY,
            ProductBulkActionType.CHANGE_PRICE,
        }

    def confirmation_message(self, count: int) -> str:
        noun = "product" if count == 1 else "products"
        if self == ProductBulkActionType.HARD_DELETE:
            return f"Permanently delete {count} {noun}? This cannot be undone."
        return f"{self.display_name} {count} {noun}?"

    def success_message(self, count: int) -> str:
        noun = "product" if count == 1 else "products"
        return f"{self.display_name}: {count} {noun} updated."

    @classmethod
    def parse(cls, value: str) -> "ProductBulkActionType":
        """Parse an action string.

        Raises:
            ValueError: If the action is not part of the closed set.
        """
        return cls(str(value).strip().lower())

    @classmethod
    def values(cls) -> list[str]:
        return [action.value for action in cls]


_BULK_DISPLAY_NAMES: dict[ProductBulkActionType, str] = {
    ProductBulkActionType.PUBLISH: "Publish",
    ProductBulkActionType.UNPUBLISH: "Unpublish",
    ProductBulkActionType.ARCHIVE: "Archive",
    ProductBulkActionType.DELETE: "Move to trash",
    ProductBulkActionType.HARD_DELETE: "Delete permanently",
    ProductBulkActionType.RESTORE: "Restore",
    ProductBulkActionType.VERIFY: "Verify",
    ProductBulkActionType.CHANGE_CATEGORY: "Change category",
    ProductBulkActionType.CHANGE_PRICE: "Change price",
}
