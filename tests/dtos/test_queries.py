"""Tests for ProductQuery and related DTOs."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from devdaily.domain.enums import ProductBulkActionType
from devdaily.domain.exceptions import ValidationError
from devdaily.domain.state_machines import ProductStatus
from devdaily.dtos.bulk import BulkActionResult
from devdaily.dtos.catalog_requests import CreateBadgeRequest, CreateCategoryRequest, CreateLinkRequest
from devdaily.dtos.pagination import PaginatedResult, paginate
from devdaily.dtos.queries import PUBLIC_CONSTRAINTS, PaginationQuery, ProductQuery, sanitize_search


class TestProductQuery:
    """Tests for ProductQuery normalization."""

    def test_defaults(self) -> None:
        query = ProductQuery()
        assert query.sort_by == "created_at"
        assert query.sort_direction == "desc"
        assert query.page == 1
        assert query.per_page == 20

    def test_unknown_sort_falls_back(self) -> None:
        query = ProductQuery.from_request({"sort_by": "password", "sort_direction": "sideways"})
        assert query.sort_by == "created_at"
        assert query.sort_direction == "desc"

    def test_per_page_is_clamped(self) -> None:
        assert ProductQuery.from_request({"per_page": "500"}).per_page == 100
        assert ProductQuery.from_request({"page": "-3"}).page == 1

    def test_status_list_drops_unknown_values(self) -> None:
        query = ProductQuery.from_request({"status": "draft,bogus,published"})
        assert query.status == (ProductStatus.DRAFT, ProductStatus.PUBLISHED)

    def test_category_filters_are_capped(self) -> None:
        query = ProductQuery.from_request({"category_ids": ",".join(str(i) for i in range(1, 20))})
        assert len(query.category_ids) == 10

    def test_server_side_category_scope_is_not_capped(self) -> None:
        query = ProductQuery.for_public().with_(category_ids=tuple(range(1, 16)))

        query.validate()

        assert len(query.category_ids) == 15

    def test_malformed_values_are_ignored(self) -> None:
        query = ProductQuery.from_request({"min_price": "cheap", "marketplace_id": "x", "date_from": "yesterday"})
        assert query.min_price is None
        assert query.marketplace_id is None
        assert query.date_from is None

    def test_search_is_sanitized(self) -> None:
        assert sanitize_search("  <script>laptop</script>  ") == "scriptlaptopscript"
        assert sanitize_search("   ") is None

    def test_trash_flags_need_admin_mode(self) -> None:
        public = ProductQuery.from_request({"include_trashed": "1"})
        admin = ProductQuery.from_request({"include_trashed": "1"}, admin_mode=True)
        assert not public.include_trashed
        assert admin.include_trashed

    def test_with_returns_new_query(self) -> None:
        """with_() never mutates the original."""
        query = ProductQuery(search="mouse")
        changed = query.with_(page=3, search="keyboard")
        assert query.page == 1
        assert query.search == "mouse"
        assert changed.page == 3
        assert changed.search == "keyboard"

    def test_with_renormalizes(self) -> None:
        assert ProductQuery().with_(per_page=1000).per_page == 100

    def test_public_constraints_override_visitor_input(self) -> None:
        """Visitor supplied status and trash flags are replaced."""
        query = ProductQuery.from_request({"status": "draft"}, admin_mode=True).with_(
            include_trashed=True, only_trashed=True
        )
        public = query.with_(**PUBLIC_CONSTRAINTS)
        assert public.status == (ProductStatus.PUBLISHED,)
        assert not public.include_trashed
        assert not public.only_trashed
        assert not public.admin_mode
        assert public.is_public_query

    def test_for_public(self) -> None:
        assert ProductQuery.for_public(search="mouse").is_public_query

    def test_validate_price_range(self) -> None:
        query = ProductQuery(min_price=Decimal("5000"), max_price=Decimal("100"))
        with pytest.raises(ValidationError) as exc_info:
            query.validate()
        assert "min_price" in exc_info.value.errors

    def test_validate_date_range(self) -> None:
        query = ProductQuery(
            date_from=datetime(2026, 5, 2, tzinfo=timezone.utc),
            date_to=datetime(2026, 5, 1, tzinfo=timezone.utc),
        )
        with pytest.raises(ValidationError):
            query.validate()

    def test_cache_key_is_stable(self) -> None:
        assert ProductQuery(search="a").cache_key() == ProductQuery(search="a").cache_key()
        assert ProductQuery(search="a").cache_key() != ProductQuery(search="b").cache_key()

    def test_repository_filters_extend_date_to_end_of_day(self) -> None:
        query = ProductQuery(date_to=datetime(2026, 5, 1, tzinfo=timezone.utc))
        filters = query.to_repository_filters()
        assert filters.date_to.hour == 23
        assert filters.date_to.minute == 59

    def test_public_filters_hide_scheduled_products(self) -> None:
        now = datetime(2026, 5, 1, tzinfo=timezone.utc)
        assert ProductQuery.for_public().to_repository_filters(now).published_before == now
        assert ProductQuery.for_admin().to_repository_filters(now).published_before is None

    def test_offset(self) -> None:
        assert ProductQuery(page=3, per_page=10).offset == 20


class TestPagination:
    def test_pagination_query(self) -> None:
        query = PaginationQuery.from_request({"page": "2", "per_page": "-5"})
        assert query.page == 2
        assert query.per_page == 1

    def test_paginate_meta(self) -> None:
        result = paginate(list(range(25)), page=2, per_page=10)
        assert result.items == list(range(10, 20))
        assert result.meta() == {
            "current_page": 2,
            "per_page": 10,
            "total_data": 25,
            "total_pages": 3,
            "next_page": 3,
            "prev_page": 1,
        }

    def test_empty_result_has_one_page(self) -> None:
        result = PaginatedResult(items=[], total=0, page=1, per_page=20)
        assert result.total_pages == 1
        assert not result.has_next


class TestBulkActionResult:
    def test_partial_failure_summary(self) -> None:
        result = BulkActionResult(action=ProductBulkActionType.PUBLISH)
        result.add_success(1)
        result.add_failure(2, "Product not found: 2")
        result.complete()

        assert result.has_failures
        assert not result.is_complete_success
        assert result.success_percentage == 50.0
        assert result.summary_message() == "Processed 2 items: 1 succeeded, 1 failed."
        assert result.to_dict()["failed_items"] == {"2": "Product not found: 2"}

    def test_complete_success(self) -> None:
        result = BulkActionResult(action=ProductBulkActionType.ARCHIVE)
        result.add_success(1)
        assert result.is_complete_success
        assert result.summary_message() == "Successfully processed 1 items."


class TestCatalogRequests:
    def test_category_slug_generated_from_name(self) -> None:
        request = CreateCategoryRequest.from_request({"name": "Gaming Laptops"})
        assert request.slug == "gaming-laptops"
        assert request.icon == "fas fa-folder"

    def test_link_rating_bounds(self) -> None:
        data = {
            "product_id": 1,
            "marketplace_id": 1,
            "store_name": "Store",
            "url": "https://shopee.co.id/item",
            "price": "150000",
            "rating": "5.5",
        }
        with pytest.raises(ValidationError) as exc_info:
            CreateLinkRequest.from_request(data)
        assert "rating" in exc_info.value.errors

    def test_link_url_must_be_http(self) -> None:
        data = {"product_id": 1, "marketplace_id": 1, "store_name": "Store", "url": "shopee", "price": "150000"}
        with pytest.raises(ValidationError) as exc_info:
            CreateLinkRequest.from_request(data)
        assert "url" in exc_info.value.errors

    def test_badge_color_must_be_hex(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            CreateBadgeRequest.from_request({"label": "Hot", "color": "red"})
        assert "color" in exc_info.value.errors
