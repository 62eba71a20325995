"""Tests for domain entities and helpers."""

from datetime import timedelta
from decimal import Decimal

from devdaily.domain.entities import Product, format_rupiah, utcnow
from devdaily.domain.enums import PriceAdjustmentType, ProductBulkActionType
from devdaily.domain.slugs import slugify
from devdaily.domain.state_machines import ProductStatus


class TestProductVisibility:
    """Tests for Product.is_publicly_visible."""

    def test_published_product_is_visible(self) -> None:
        """A published product without a schedule is visible."""
        product = Product(id=1, status=ProductStatus.PUBLISHED)
        assert product.is_publicly_visible()

    def test_draft_product_is_hidden(self) -> None:
        """Unpublished products are never visible."""
        assert not Product(id=1, status=ProductStatus.VERIFIED).is_publicly_visible()

    def test_trashed_product_is_hidden(self) -> None:
        """Trashed products are hidden even when published."""
        product = Product(id=1, status=ProductStatus.PUBLISHED, deleted_at=utcnow())
        assert not product.is_publicly_visible()

    def test_scheduled_product_is_hidden_until_due(self) -> None:
        """A future publication time hides the product."""
        now = utcnow()
        product = Product(id=1, status=ProductStatus.PUBLISHED, published_at=now + timedelta(days=1))
        assert not product.is_publicly_visible(now)
        assert product.is_publicly_visible(now + timedelta(days=2))


class TestProductMaintenance:
    """Tests for the price and link freshness checks."""

    def test_needs_price_update_when_never_updated(self) -> None:
        assert Product(id=1).needs_price_update()

    def test_price_update_interval_is_seven_days(self) -> None:
        now = utcnow()
        product = Product(id=1, last_price_update=now - timedelta(days=6))
        assert not product.needs_price_update(now)
        assert product.needs_price_update(now + timedelta(days=1))

    def test_link_validation_interval_is_fourteen_days(self) -> None:
        now = utcnow()
        product = Product(id=1, last_link_check=now - timedelta(days=14))
        assert product.needs_link_validation(now)


class TestEntityEquality:
    def test_entities_compare_by_id(self) -> None:
        """Entities with the same id are equal regardless of fields."""
        assert Product(id=3, name="A") == Product(id=3, name="B")
        assert Product(id=3) != Product(id=4)

    def test_unsaved_entities_are_never_equal(self) -> None:
        assert Product() != Product()


class TestFormatting:
    def test_format_rupiah_uses_dot_separators(self) -> None:
        assert format_rupiah(Decimal("1250000")) == "Rp 1.250.000"

    def test_format_rupiah_handles_none(self) -> None:
        assert format_rupiah(None) == "Rp 0"

    def test_slugify(self) -> None:
        assert slugify("  Samsung Galaxy S24 Ultra (256GB) ") == "samsung-galaxy-s24-ultra-256gb"

    def test_slugify_strips_accents(self) -> None:
        assert slugify("Café Crème") == "cafe-creme"


class TestPriceAdjustment:
    """Tests for PriceAdjustmentType.apply."""

    def test_set(self) -> None:
        assert PriceAdjustmentType.SET.apply(Decimal("1000"), Decimal("500")) == Decimal("500.00")

    def test_increase_and_decrease(self) -> None:
        assert PriceAdjustmentType.INCREASE.apply(Decimal("1000"), Decimal("250")) == Decimal("1250.00")
        assert PriceAdjustmentType.DECREASE.apply(Decimal("1000"), Decimal("250")) == Decimal("750.00")

    def test_percentages(self) -> None:
        assert PriceAdjustmentType.PERCENTAGE_INCREASE.apply(Decimal("2000"), Decimal("10")) == Decimal("2200.00")
        assert PriceAdjustmentType.PERCENTAGE_DECREASE.apply(Decimal("2000"), Decimal("25")) == Decimal("1500.00")


class TestBulkActionType:
    def test_destructive_actions_require_confirmation(self) -> None:
        for action in ProductBulkActionType:
            if action.is_destructive():
                assert action.requires_confirmation()

    def test_parameterized_actions(self) -> None:
        assert {a for a in ProductBulkActionType if a.requires_parameters()} == {
            ProductBulkActionType.CHANGE_CATEGORY,
            ProductBulkActionType.CHANGE_PRICE,
        }

    def test_confirmation_message_pluralizes(self) -> None:
        assert ProductBulkActionType.ARCHIVE.confirmation_message(1) == "Archive 1 product?"
        assert "cannot be undone" in ProductBulkActionType.HARD_DELETE.confirmation_message(3)
