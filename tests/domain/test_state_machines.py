"""Tests for the product state machine."""

import pytest

from devdaily.domain.exceptions import InvalidStateTransitionError
from devdaily.domain.state_machines import ProductStatus, validate_product_transition


class TestProductStatus:
    """Tests for ProductStatus transitions."""

    def test_draft_can_request_verification(self) -> None:
        """DRAFT can transition to PENDING_VERIFICATION."""
        assert ProductStatus.DRAFT.can_transition_to(ProductStatus.PENDING_VERIFICATION)

    def test_draft_cannot_be_published_directly(self) -> None:
        """DRAFT cannot skip review."""
        assert not ProductStatus.DRAFT.can_transition_to(ProductStatus.PUBLISHED)
        assert not ProductStatus.DRAFT.can_transition_to(ProductStatus.VERIFIED)

    def test_pending_can_be_verified_or_reverted(self) -> None:
        """PENDING_VERIFICATION can go forward to VERIFIED or back to DRAFT."""
        assert ProductStatus.PENDING_VERIFICATION.can_transition_to(ProductStatus.VERIFIED)
        assert ProductStatus.PENDING_VERIFICATION.can_transition_to(ProductStatus.DRAFT)
        assert not ProductStatus.PENDING_VERIFICATION.can_transition_to(ProductStatus.PUBLISHED)

    def test_verified_can_be_published_or_rechecked(self) -> None:
        """VERIFIED can be published or sent back for another check."""
        assert ProductStatus.VERIFIED.can_transition_to(ProductStatus.PUBLISHED)
        assert ProductStatus.VERIFIED.can_transition_to(ProductStatus.PENDING_VERIFICATION)
        assert not ProductStatus.VERIFIED.can_transition_to(ProductStatus.DRAFT)

    def test_published_can_only_be_unpublished_or_archived(self) -> None:
        """PUBLISHED goes back to VERIFIED or into the archive."""
        allowed = ProductStatus.PUBLISHED.allowed_transitions()
        assert allowed == [ProductStatus.VERIFIED, ProductStatus.ARCHIVED]

    def test_archived_can_be_republished(self) -> None:
        """ARCHIVED can return to PUBLISHED."""
        assert ProductStatus.ARCHIVED.can_transition_to(ProductStatus.PUBLISHED)
        assert not ProductStatus.ARCHIVED.can_transition_to(ProductStatus.DRAFT)

    @pytest.mark.parametrize("status", list(ProductStatus))
    def test_every_status_can_be_archived_except_archived(self, status: ProductStatus) -> None:
        """Archiving is allowed from any other status."""
        assert status.can_transition_to(ProductStatus.ARCHIVED) == (status != ProductStatus.ARCHIVED)

    @pytest.mark.parametrize("status", list(ProductStatus))
    def test_self_transition_is_rejected(self, status: ProductStatus) -> None:
        """A status never transitions to itself."""
        assert not status.can_transition_to(status)

    def test_editable_statuses(self) -> None:
        """Only draft and pending products are freely editable."""
        assert ProductStatus.DRAFT.is_editable()
        assert ProductStatus.PENDING_VERIFICATION.is_editable()
        assert not ProductStatus.PUBLISHED.is_editable()

    def test_only_published_is_public(self) -> None:
        """Storefront visibility requires PUBLISHED."""
        assert [s for s in ProductStatus if s.is_public()] == [ProductStatus.PUBLISHED]

    def test_parse_accepts_mixed_case(self) -> None:
        """parse() normalizes case and whitespace."""
        assert ProductStatus.parse(" Published ") == ProductStatus.PUBLISHED

    def test_parse_rejects_unknown(self) -> None:
        """parse() raises for unknown statuses."""
        with pytest.raises(ValueError):
            ProductStatus.parse("deleted")

    def test_labels(self) -> None:
        """Every status has a display label."""
        assert ProductStatus.PENDING_VERIFICATION.label == "Pending Verification"


class TestValidateProductTransition:
    """Tests for validate_product_transition."""

    def test_valid_transition_passes(self) -> None:
        """Valid transitions return without raising."""
        validate_product_transition(1, ProductStatus.VERIFIED, ProductStatus.PUBLISHED)

    def test_invalid_transition_raises(self) -> None:
        """Invalid transitions raise with the allowed targets attached."""
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            validate_product_transition(7, ProductStatus.DRAFT, ProductStatus.PUBLISHED)

        error = exc_info.value
        assert error.error_code == "INVALID_STATE_TRANSITION"
        assert error.details["current_state"] == "draft"
        assert error.details["target_state"] == "published"
        assert error.details["allowed_transitions"] == ["pending_verification", "archived"]
