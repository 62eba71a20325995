"""State machine for the product lifecycle.

Products move through editorial review before they appear on the
storefront. The transition table below is the single source of truth
for which status changes are permitted.
"""

from enum import Enum

from devdaily.domain.exceptions import InvalidStateTransitionError


# ============================================================================
# Product State Machine
# ============================================================================


class ProductStatus(str, Enum):
    """Product lifecycle states.

    State diagram:
        DRAFT ◄───────────────┐
          │                   │ revert
          │ request           │
          ▼                   │
        PENDING_VERIFICATION ─┤
          │        ▲          │
          │ verify │ recheck  │
          ▼        │          │
        VERIFIED ──┘          │
          │        ▲          │
          │publish │ unpublish│
          ▼        │          │
        PUBLISHED ─┘──────────┘

        any ──────────► ARCHIVED ──► PUBLISHED
    """

    DRAFT = "draft"
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"
    PUBLISHED = "published"
    ARCHIVED = "archived"

    @property
    def label(self) -> str:
        """Human-readable label."""
        return _PRODUCT_LABELS[self]

    def can_transition_to(self, target: "ProductStatus") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        if target == self:
            return False
        if target == ProductStatus.ARCHIVED:
            return True
        return target in _PRODUCT_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["ProductStatus"]:
        """Get list of valid target states, in declaration order."""
        return [status for status in ProductStatus if self.can_transition_to(status)]

    def is_editable(self) -> bool:
        """Check if the product content may be freely edited."""
        return self in {ProductStatus.DRAFT, ProductStatus.PENDING_VERIFICATION}

    def is_public(self) -> bool:
        """Check if products in this state are visible on the storefront."""
        return self == ProductStatus.PUBLISHED

    def can_be_published(self) -> bool:
        return self == ProductStatus.VERIFIED

    @classmethod
    def parse(cls, value: "str | ProductStatus") -> "ProductStatus":
        """Parse a status string.

        Raises:
            ValueError: If the value is not a known status.
        """
        if isinstance(value, ProductStatus):
            return value
        return cls(str(value).strip().lower())

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]


# Defined outside the enum to avoid Enum member restrictions
_PRODUCT_TRANSITIONS: dict[ProductStatus, set[ProductStatus]] = {
    ProductStatus.DRAFT: {ProductStatus.PENDING_VERIFICATION},
    ProductStatus.PENDING_VERIFICATION: {ProductStatus.VERIFIED, ProductStatus.DRAFT},
    ProductStatus.VERIFIED: {ProductStatus.PUBLISHED, ProductStatus.PENDING_VERIFICATION},
    ProductStatus.PUBLISHED: {ProductStatus.VERIFIED},
    ProductStatus.ARCHIVED: {ProductStatus.PUBLISHED},
}

_PRODUCT_LABELS: dict[ProductStatus, str] = {
    ProductStatus.DRAFT: "Draft",
    ProductStatus.PENDING_VERIFICATION: "Pending Verification",
    ProductStatus.VERIFIED: "Verified",
    ProductStatus.PUBLISHED: "Published",
    ProductStatus.ARCHIVED: "Archived",
}


# ============================================================================
# State Machine Helpers
# ============================================================================


def validate_product_transition(
    product_id: int,
    current_status: ProductStatus,
    target_status: ProductStatus,
) -> None:
    """Validate and raise if product state transition is invalid.

    Args:
        product_id: Product identifier for error message.
        current_status: Current product status.
        target_status: Target product status.

    Raises:
        InvalidStateTransitionError: If transition is not valid.
    """
    if not current_status.can_transition_to(target_status):
        raise InvalidStateTransitionError(
            entity_type="Product",
            entity_id=product_id,
            current_state=current_status.value,
            target_state=target_status.value,
            allowed_transitions=[s.value for s in current_status.allowed_transitions()],
        )
