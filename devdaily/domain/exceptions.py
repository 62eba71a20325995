"""Domain exceptions.

All domain-level errors raised by entities, DTOs and services. The
API layer maps each family to an HTTP status in one place.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(DomainError):
    """Raised when input fails field-level validation.

    Carries a field -> message map so callers can render errors next to
    the offending inputs.
    """

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        self.errors = dict(errors or {})
        super().__init__(message, details={"errors": self.errors})

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        """Build an error for a single field."""
        return cls(message, {field: message})


# ============================================================================
# Not Found Errors
# ============================================================================


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist or is not visible."""

    error_code = "NOT_FOUND"
    entity_type = "Entity"

    def __init__(self, entity_id: Any, message: str | None = None) -> None:
        self.entity_id = entity_id
        super().__init__(
            message or f"{self.entity_type} not found: {entity_id}",
            details={"entity_type": self.entity_type, "entity_id": entity_id},
        )


class ProductNotFoundError(NotFoundError):
    """Raised when a product cannot be found."""

    error_code = "PRODUCT_NOT_FOUND"
    entity_type = "Product"

    @classmethod
    def for_slug(cls, slug: str) -> "ProductNotFoundError":
        return cls(slug, f"Product not found: {slug}")


class CategoryNotFoundError(NotFoundError):
    error_code = "CATEGORY_NOT_FOUND"
    entity_type = "Category"


class LinkNotFoundError(NotFoundError):
    error_code = "LINK_NOT_FOUND"
    entity_type = "Link"


class MarketplaceNotFoundError(NotFoundError):
    error_code = "MARKETPLACE_NOT_FOUND"
    entity_type = "Marketplace"


class BadgeNotFoundError(NotFoundError):
    error_code = "BADGE_NOT_FOUND"
    entity_type = "Badge"


class AdminNotFoundError(NotFoundError):
    error_code = "ADMIN_NOT_FOUND"
    entity_type = "Admin"


class RoleNotFoundError(NotFoundError):
    error_code = "ROLE_NOT_FOUND"
    entity_type = "Role"


class AuditLogNotFoundError(NotFoundError):
    error_code = "AUDIT_LOG_NOT_FOUND"
    entity_type = "AuditLog"


# ============================================================================
# Access Errors
# ============================================================================


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are missing, wrong or expired."""

    error_code = "UNAUTHORIZED"


class AccountLockedError(AuthenticationError):
    """Raised when an admin account is locked after repeated failures."""

    error_code = "ACCOUNT_LOCKED"


class AuthorizationError(DomainError):
    """Raised when an authenticated admin lacks a permission."""

    error_code = "FORBIDDEN"

    def __init__(self, permission: str, message: str | None = None) -> None:
        self.permission = permission
        super().__init__(
            message or f"Missing permission: {permission}",
            details={"permission": permission},
        )


# ============================================================================
# Business Rule Errors
# ============================================================================


class BusinessRuleError(DomainError):
    """Raised when an operation conflicts with the current state of data."""

    error_code = "BUSINESS_RULE_VIOLATION"


class InvalidStateTransitionError(BusinessRuleError):
    """Raised when an invalid status transition is attempted.

    This error indicates that the requested operation cannot be performed
    in the current state of the entity.
    """

    error_code = "INVALID_STATE_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of entity (e.g., "Product").
            entity_id: ID of the entity.
            current_state: Current state of the entity.
            target_state: Attempted target state.
            allowed_transitions: List of allowed target states from current state.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type}({entity_id}) "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(message)
        self.details = {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "current_state": current_state,
            "target_state": target_state,
            "allowed_transitions": allowed,
        }
