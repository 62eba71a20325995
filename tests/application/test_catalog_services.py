"""Tests for category, link, marketplace, badge and dashboard services."""

from decimal import Decimal

import httpx
import pytest

from devdaily.application.category_service import CategoryService
from devdaily.application.dashboard_service import DashboardService
from devdaily.application.link_service import LinkService
from devdaily.application.marketplace_service import BadgeService, MarketplaceService
from devdaily.application.product import ProductOrchestrator
from devdaily.domain.entities import Category, Link, Marketplace
from devdaily.domain.exceptions import (
    BadgeNotFoundError,
    BusinessRuleError,
    CategoryNotFoundError,
    LinkNotFoundError,
    MarketplaceNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from devdaily.dtos.catalog_requests import (
    CreateBadgeRequest,
    CreateCategoryRequest,
    CreateLinkRequest,
    CreateMarketplaceRequest,
    UpdateCategoryRequest,
    UpdateLinkRequest,
)
from devdaily.dtos.product_requests import CreateProductRequest
from devdaily.infrastructure.memory import Repositories


async def make_product(orchestrator: ProductOrchestrator, name: str = "Keychron K2", **extra):
    return await orchestrator.create_product(
        CreateProductRequest.from_request({"name": name, "market_price": "1450000", **extra})
    )


def mock_client(status_code: int) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ============================================================================
# Categories
# ============================================================================


class TestCategoryService:
    @pytest.fixture
    def service(self, repositories: Repositories) -> CategoryService:
        return CategoryService(repositories)

    @pytest.mark.asyncio
    async def test_create_and_tree(self, service: CategoryService) -> None:
        """Children nest under their parent in the tree."""
        root = await service.create(CreateCategoryRequest.from_request({"name": "Peripherals"}), admin_id=1)
        await service.create(CreateCategoryRequest.from_request({"name": "Mice", "parent_id": root.id}))
        await service.create(CreateCategoryRequest.from_request({"name": "Audio", "sort_order": "5"}))

        tree = await service.get_category_tree()

        assert [node.slug for node in tree] == ["peripherals", "audio"]
        assert [child.slug for child in tree[0].children] == ["mice"]

    @pytest.mark.asyncio
    async def test_subcategories_carry_their_children(self, service: CategoryService) -> None:
        root = await service.create(CreateCategoryRequest.from_request({"name": "Peripherals"}))
        mice = await service.create(CreateCategoryRequest.from_request({"name": "Mice", "parent_id": root.id}))
        await service.create(CreateCategoryRequest.from_request({"name": "Gaming Mice", "parent_id": mice.id}))

        subcategories = await service.get_subcategories(root.id)

        assert [c.slug for c in subcategories] == ["mice"]
        assert subcategories[0].has_children

    @pytest.mark.asyncio
    async def test_duplicate_slug_rejected(self, service: CategoryService) -> None:
        await service.create(CreateCategoryRequest.from_request({"name": "Laptops"}))
        with pytest.raises(ValidationError) as exc_info:
            await service.create(CreateCategoryRequest.from_request({"name": "Laptops"}))
        assert "slug" in exc_info.value.errors

    @pytest.mark.asyncio
    async def test_unknown_parent_rejected(self, service: CategoryService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.create(CreateCategoryRequest.from_request({"name": "Mice", "parent_id": 9}))
        assert "parent_id" in exc_info.value.errors

    @pytest.mark.asyncio
    async def test_cannot_move_under_descendant(self, service: CategoryService) -> None:
        root = await service.create(CreateCategoryRequest.from_request({"name": "Peripherals"}))
        child = await service.create(CreateCategoryRequest.from_request({"name": "Mice", "parent_id": root.id}))

        with pytest.raises(ValidationError):
            await service.update(UpdateCategoryRequest.from_request(root.id, {"parent_id": child.id}))

    @pytest.mark.asyncio
    async def test_product_count_includes_descendants(
        self, service: CategoryService, orchestrator: ProductOrchestrator
    ) -> None:
        root = await service.create(CreateCategoryRequest.from_request({"name": "Peripherals"}))
        child = await service.create(CreateCategoryRequest.from_request({"name": "Mice", "parent_id": root.id}))
        await make_product(orchestrator, category_id=child.id)

        assert (await service.get_category(root.id)).product_count == 1
        assert service.category_scope(root.id) == [root.id, child.id]

    @pytest.mark.asyncio
    async def test_delete_rules(self, service: CategoryService, orchestrator: ProductOrchestrator) -> None:
        root = await service.create(CreateCategoryRequest.from_request({"name": "Peripherals"}))
        child = await service.create(CreateCategoryRequest.from_request({"name": "Mice", "parent_id": root.id}))
        await make_product(orchestrator, category_id=child.id)

        with pytest.raises(BusinessRuleError):
            await service.delete(root.id)
        with pytest.raises(BusinessRuleError):
            await service.delete(child.id)

    @pytest.mark.asyncio
    async def test_inactive_category_hidden_by_slug(self, service: CategoryService) -> None:
        await service.create(CreateCategoryRequest.from_request({"name": "Hidden", "active": "0"}))
        with pytest.raises(CategoryNotFoundError):
            await service.get_category_by_slug("hidden")
        assert (await service.get_category_by_slug("hidden", active_only=False)).slug == "hidden"


# ============================================================================
# Links
# ============================================================================


class TestLinkService:
    @pytest.fixture
    def service(self, repositories: Repositories) -> LinkService:
        return LinkService(repositories)

    @pytest.mark.asyncio
    async def test_create_link(
        self, service: LinkService, orchestrator: ProductOrchestrator, marketplace: Marketplace
    ) -> None:
        product = await make_product(orchestrator)

        link = await service.create(
            CreateLinkRequest.from_request(
                {
                    "product_id": product.id,
                    "marketplace_id": marketplace.id,
                    "store_name": "Keychron Indonesia",
                    "url": "https://www.tokopedia.com/keychron/k2",
                    "price": "1399000",
                    "rating": "4.9",
                }
            ),
            admin_id=1,
        )

        assert link.marketplace.slug == "tokopedia"
        assert link.price == Decimal("1399000.00")
        assert [item.id for item in service.list_for_product(product.id)] == [link.id]

    @pytest.mark.asyncio
    async def test_create_link_for_unknown_product(self, service: LinkService, marketplace: Marketplace) -> None:
        request = CreateLinkRequest(
            product_id=99, marketplace_id=marketplace.id, store_name="S", url="https://a.b/c", price=Decimal("1000")
        )
        with pytest.raises(ProductNotFoundError):
            await service.create(request)

    @pytest.mark.asyncio
    async def test_create_link_for_unknown_marketplace(
        self, service: LinkService, orchestrator: ProductOrchestrator
    ) -> None:
        product = await make_product(orchestrator)
        request = CreateLinkRequest(
            product_id=product.id, marketplace_id=5, store_name="S", url="https://a.b/c", price=Decimal("1000")
        )
        with pytest.raises(MarketplaceNotFoundError):
            await service.create(request)

    @pytest.mark.asyncio
    async def test_url_change_resets_validation(self, service: LinkService, add_link) -> None:
        link = add_link(1)
        link.validation_status = "broken"

        updated = await service.update(UpdateLinkRequest.from_request(link.id, {"url": "https://www.tokopedia.com/new"}))

        assert updated.url == "https://www.tokopedia.com/new"
        assert updated.validation_status is None

    def test_record_click(self, service: LinkService, add_link) -> None:
        link = add_link(1)
        assert service.record_click(link.id) == 1
        assert service.record_click(link.id) == 2

    def test_delete_missing_link(self, service: LinkService) -> None:
        with pytest.raises(LinkNotFoundError):
            service.delete(3)

    def test_validate_url_syntax(self, service: LinkService) -> None:
        assert not service.validate_url("tokopedia.com/item")["valid"]
        with pytest.raises(ValidationError):
            service.validate_url("   ")

    def test_validate_url_marketplace_domain(self, service: LinkService, marketplace: Marketplace) -> None:
        """A host outside the marketplace's domains gives a warning."""
        ok = service.validate_url("https://www.tokopedia.com/item", marketplace.id)
        odd = service.validate_url("https://shopee.co.id/item", marketplace.id)

        assert ok == {"valid": True, "message": "URL looks valid.", "warning": None}
        assert odd["valid"]
        assert odd["warning"] == "The URL does not look like a Tokopedia link."

    @pytest.mark.asyncio
    async def test_check_link_valid(
        self, repositories: Repositories, orchestrator: ProductOrchestrator, add_link
    ) -> None:
        product = await make_product(orchestrator)
        link = add_link(product.id)
        service = LinkService(repositories, client=mock_client(200))

        checked = await service.check_link(link.id)

        assert checked.validation_status == "valid"
        assert checked.last_validation is not None
        assert (await orchestrator.get_product(product.id, admin_mode=True)).last_link_check is not None

    @pytest.mark.asyncio
    async def test_check_link_broken(self, repositories: Repositories, add_link) -> None:
        link = add_link(1)
        service = LinkService(repositories, client=mock_client(404))
        assert (await service.check_link(link.id)).validation_status == "broken"

    @pytest.mark.asyncio
    async def test_check_link_falls_back_to_get(self, repositories: Repositories, add_link) -> None:
        """Servers that reject HEAD are probed with GET."""
        methods = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(405 if request.method == "HEAD" else 200)

        link = add_link(1)
        service = LinkService(repositories, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        assert (await service.check_link(link.id)).validation_status == "valid"
        assert methods == ["HEAD", "GET"]

    @pytest.mark.asyncio
    async def test_check_link_network_error(self, repositories: Repositories, add_link) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        link = add_link(1)
        service = LinkService(repositories, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        assert (await service.check_link(link.id)).validation_status == "error"


# ============================================================================
# Marketplaces and Badges
# ============================================================================


class TestMarketplaceService:
    def test_create_and_duplicate_slug(self, repositories: Repositories) -> None:
        service = MarketplaceService(repositories)
        created = service.create(CreateMarketplaceRequest.from_request({"name": "Shopee", "color": "#ee4d2d"}))

        assert created.slug == "shopee"
        with pytest.raises(ValidationError):
            service.create(CreateMarketplaceRequest.from_request({"name": "Shopee"}))

    def test_marketplace_in_use_cannot_be_deleted(self, repositories: Repositories, marketplace: Marketplace) -> None:
        repositories.links.add(Link(product_id=1, marketplace_id=marketplace.id, url="https://tokopedia.com/x"))
        with pytest.raises(BusinessRuleError):
            MarketplaceService(repositories).delete(marketplace.id)

    def test_update(self, repositories: Repositories, marketplace: Marketplace) -> None:
        service = MarketplaceService(repositories)
        updated = service.update(
            marketplace.id, CreateMarketplaceRequest.from_request({"name": "Tokopedia", "active": "0"})
        )
        assert not updated.active
        assert service.list_marketplaces(active_only=True) == []


class TestBadgeService:
    def test_crud(self, repositories: Repositories) -> None:
        service = BadgeService(repositories)
        badge = service.create(CreateBadgeRequest.from_request({"label": "Best Price"}))

        renamed = service.update(badge.id, CreateBadgeRequest.from_request({"label": "Lowest Price", "color": "#22c55e"}))
        assert service.get_badge(badge.id) == renamed
        assert renamed.color == "#22c55e"

        service.delete(badge.id)
        with pytest.raises(BadgeNotFoundError):
            service.get_badge(badge.id)

    @pytest.mark.asyncio
    async def test_assign_to_product(self, repositories: Repositories, orchestrator: ProductOrchestrator) -> None:
        service = BadgeService(repositories)
        badge = service.create(CreateBadgeRequest(label="Hot"))
        product = await make_product(orchestrator)

        updated = await service.assign_to_product(product.id, [badge.id, badge.id], admin_id=1)

        assert updated.badge_ids == (badge.id,)


# ============================================================================
# Dashboard
# ============================================================================


class TestDashboardService:
    @pytest.mark.asyncio
    async def test_statistics(
        self, repositories: Repositories, orchestrator: ProductOrchestrator, category: Category, add_link
    ) -> None:
        first = await make_product(orchestrator, "One")
        await make_product(orchestrator, "Two")
        await orchestrator.request_verification(first.id)
        broken = add_link(first.id)
        broken.validation_status = "broken"

        stats = await DashboardService(repositories).statistics()

        assert stats["products"]["draft"] == 1
        assert stats["products"]["pending_verification"] == 1
        assert stats["products"]["total"] == 2
        assert stats["categories"] == 1
        assert stats["links"] == {"total": 1, "active": 1, "broken": 1}

    def test_health(self, orchestrator: ProductOrchestrator) -> None:
        assert DashboardService().health(orchestrator)["status"] == "operational"
