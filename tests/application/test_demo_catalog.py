"""Tests for the demo catalog seed."""

import pytest

from devdaily.application.demo_catalog import seed_demo_catalog
from devdaily.application.product import build_product_orchestrator
from devdaily.dtos.queries import ProductQuery
from devdaily.infrastructure.memory import Repositories


class TestSeedDemoCatalog:
    @pytest.mark.asyncio
    async def test_seeds_published_catalog(self, repositories: Repositories) -> None:
        created = await seed_demo_catalog(repositories=repositories)

        assert created == {"marketplaces": 4, "categories": 6, "badges": 2, "products": 5, "links": 9}
        page = await build_product_orchestrator(repositories=repositories).list_products(ProductQuery.for_public())
        assert page.total == 5

    @pytest.mark.asyncio
    async def test_is_idempotent(self, repositories: Repositories) -> None:
        await seed_demo_catalog(repositories=repositories)
        again = await seed_demo_catalog(repositories=repositories)

        assert set(again.values()) == {0}
        assert repositories.links.count() == 9

    @pytest.mark.asyncio
    async def test_subcategories_hang_under_peripherals(self, repositories: Repositories) -> None:
        await seed_demo_catalog(repositories=repositories)
        parent = repositories.categories.get_by_slug("peripherals")
        assert {c.slug for c in repositories.categories.children_of(parent.id)} == {"keyboards", "mice"}
