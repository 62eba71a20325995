"""Read-only product listing, search and counts."""

from dataclasses import replace
from typing import Any

import structlog

from devdaily.application.product.base import ProductServiceBase
from devdaily.application.product.interfaces import ProductQueryInterface
from devdaily.domain.exceptions import ValidationError
from devdaily.domain.filters import ProductFilter
from devdaily.domain.state_machines import ProductStatus
from devdaily.dtos.pagination import PaginatedResult
from devdaily.dtos.queries import MAX_PER_PAGE, PUBLIC_CONSTRAINTS, ProductQuery, sanitize_search
from devdaily.dtos.responses import ProductResponse

logger = structlog.get_logger()


def _parse_status(status: str | ProductStatus) -> ProductStatus:
    try:
        return ProductStatus.parse(status)
    except ValueError:
        raise ValidationError(
            "Invalid product status",
            {"status": f"Status must be one of: {', '.join(ProductStatus.values())}."},
        ) from None


class ProductQueryService(ProductServiceBase, ProductQueryInterface):
    """Lists, searches and counts products."""

    def _resolve_link_filters(self, filters: ProductFilter) -> ProductFilter:
        """Turn link-based criteria into an explicit id restriction."""
        ids: set[int] | None = None
        if filters.has_active_links:
            ids = self.repositories.links.product_ids_with_active_links()
        if filters.marketplace_id is not None:
            in_marketplace = self.repositories.links.product_ids_for_marketplace(filters.marketplace_id)
            ids = in_marketplace if ids is None else ids & in_marketplace
        if ids is None:
            return filters
        if filters.product_ids is not None:
            ids &= filters.product_ids
        return replace(filters, product_ids=frozenset(ids))

    async def list_products(self, query: ProductQuery, admin_mode: bool = False) -> PaginatedResult[ProductResponse]:
        """List one page of products.

        Public callers pass a query that already carries the public
        constraints; nothing here adds them.
        """
        query.validate()
        filters = self._resolve_link_filters(query.to_repository_filters())
        products = await self.products.find(
            filters,
            sort_by=query.sort_by,
            sort_direction=query.sort_direction,
            limit=query.per_page,
            offset=query.offset,
        )
        total = await self.products.count(filters)
        logger.debug(
            "Products listed",
            total=total,
            page=query.page,
            admin_mode=admin_mode,
            cache_key=query.cache_key(),
        )
        return PaginatedResult(
            items=[self._to_response(product, admin_mode=admin_mode) for product in products],
            total=total,
            page=query.page,
            per_page=query.per_page,
        )

    async def search_products(
        self,
        keyword: str,
        filters: dict[str, Any] | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ProductResponse]:
        """Keyword search over the published catalog."""
        cleaned = sanitize_search(keyword)
        if not cleaned:
            raise ValidationError.for_field("keyword", "Search keyword is required.")
        query = ProductQuery.from_request({**(filters or {}), "search": cleaned}).with_(**PUBLIC_CONSTRAINTS)
        repository_filters = self._resolve_link_filters(query.to_repository_filters())
        products = await self.products.find(
            repository_filters,
            sort_by=query.sort_by,
            sort_direction=query.sort_direction,
            limit=max(1, min(limit, MAX_PER_PAGE)),
            offset=max(0, offset),
        )
        logger.info("Products searched", keyword=cleaned, results=len(products))
        return [self._to_response(product, admin_mode=False) for product in products]

    async def get_products_by_status(self, status: str, limit: int = 20, offset: int = 0) -> list[ProductResponse]:
        parsed = _parse_status(status)
        products = await self.products.find(
            ProductFilter(statuses=(parsed,)),
            limit=max(1, min(limit, MAX_PER_PAGE)),
            offset=max(0, offset),
        )
        return [self._to_response(product) for product in products]

    async def count_products_by_status(self, status: str) -> int:
        return await self.products.count_by_status(_parse_status(status))
