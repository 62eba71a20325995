"""Domain layer - entities, state machine, closed value sets and exceptions.

Example usage:
    from devdaily.domain import Product, ProductStatus

    product = Product(name="Galaxy S24", slug="galaxy-s24")
    product.status.can_transition_to(ProductStatus.PENDING_VERIFICATION)  # True
"""

from devdaily.domain.entities import (
    Admin,
    AdminToken,
    AuditLog,
    Badge,
    Category,
    Link,
    Marketplace,
    Product,
    Role,
    format_rupiah,
    utcnow,
)
from devdaily.domain.enums import ImageSourceType, PriceAdjustmentType, ProductBulkActionType
from devdaily.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    DomainError,
    InvalidStateTransitionError,
    NotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from devdaily.domain.state_machines import ProductStatus, validate_product_transition

__all__ = [
    "Admin",
    "AdminToken",
    "AuditLog",
    "Badge",
    "Category",
    "Link",
    "Marketplace",
    "Product",
    "Role",
    "format_rupiah",
    "utcnow",
    "ImageSourceType",
    "PriceAdjustmentType",
    "ProductBulkActionType",
    "AuthenticationError",
    "AuthorizationError",
    "BusinessRuleError",
    "DomainError",
    "InvalidStateTransitionError",
    "NotFoundError",
    "ProductNotFoundError",
    "ValidationError",
    "ProductStatus",
    "validate_product_transition",
]
