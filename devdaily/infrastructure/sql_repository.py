"""Product repository for database operations.

Provides the SQLAlchemy implementation of ``ProductRepository`` with
filtering, sorting and pagination pushed down into SQL.
"""

from typing import Any

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from devdaily.domain.entities import Product
from devdaily.domain.filters import ProductFilter
from devdaily.domain.repositories import ProductRepository
from devdaily.domain.state_machines import ProductStatus
from devdaily.infrastructure.models import ProductModel


def build_conditions(filters: ProductFilter) -> list[Any]:
    """Translate a ProductFilter into SQLAlchemy conditions."""
    conditions: list[Any] = []

    if filters.only_trashed:
        conditions.append(ProductModel.deleted_at.is_not(None))
    elif not filters.include_trashed:
        conditions.append(ProductModel.deleted_at.is_(None))

    if filters.statuses:
        conditions.append(ProductModel.status.in_([s.value for s in filters.statuses]))

    if filters.category_ids:
        conditions.append(ProductModel.category_id.in_(filters.category_ids))

    if filters.search:
        search_pattern = f"%{filters.search}%"
        conditions.append(
            or_(
                ProductModel.name.ilike(search_pattern),
                ProductModel.slug.ilike(search_pattern),
                ProductModel.description.ilike(search_pattern),
            )
        )

    if filters.min_price is not None:
        conditions.append(ProductModel.market_price >= filters.min_price)

    if filters.max_price is not None:
        conditions.append(ProductModel.market_price <= filters.max_price)

    if filters.badge_ids:
        conditions.append(ProductModel.badge_ids.overlap(list(filters.badge_ids)))

    if filters.verified_by is not None:
        conditions.append(ProductModel.verified_by == filters.verified_by)

    date_column = getattr(ProductModel, filters.date_field)
    if filters.date_from is not None:
        conditions.append(date_column >= filters.date_from)
    if filters.date_to is not None:
        conditions.append(date_column <= filters.date_to)

    if filters.price_checked_before is not None:
        conditions.append(
            or_(
                ProductModel.last_price_update.is_(None),
                ProductModel.last_price_update <= filters.price_checked_before,
            )
        )

    if filters.link_checked_before is not None:
        conditions.append(
            or_(
                ProductModel.last_link_check.is_(None),
                ProductModel.last_link_check <= filters.link_checked_before,
            )
        )

    if filters.published_before is not None:
        conditions.append(
            or_(
                ProductModel.published_at.is_(None),
                ProductModel.published_at <= filters.published_before,
            )
        )

    if filters.product_ids is not None:
        conditions.append(ProductModel.id.in_(sorted(filters.product_ids)))

    return conditions


class SqlAlchemyProductRepository(ProductRepository):
    """Repository for product database operations.

    Example usage:
        async with get_session_factory()() as session:
            repo = SqlAlchemyProductRepository(session)
            products = await repo.find(ProductFilter(statuses=(ProductStatus.PUBLISHED,)))
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def _get_row(self, product_id: int) -> ProductModel | None:
        result = await self.session.execute(select(ProductModel).where(ProductModel.id == product_id))
        return result.scalar_one_or_none()

    async def get(self, product_id: int) -> Product | None:
        row = await self._get_row(product_id)
        return row.to_entity() if row else None

    async def get_by_slug(self, slug: str) -> Product | None:
        result = await self.session.execute(select(ProductModel).where(ProductModel.slug == slug))
        row = result.scalar_one_or_none()
        return row.to_entity() if row else None

    async def slug_exists(self, slug: str, exclude_id: int | None = None) -> bool:
        query = select(func.count(ProductModel.id)).where(ProductModel.slug == slug)
        if exclude_id is not None:
            query = query.where(ProductModel.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def add(self, product: Product) -> Product:
        row = ProductModel()
        row.apply(product)
        self.session.add(row)
        await self.session.flush()
        product.id = row.id
        return product

    async def update(self, product: Product) -> Product:
        row = await self._get_row(product.id)
        if row is None:
            return await self.add(product)
        row.apply(product)
        await self.session.flush()
        return product

    async def delete(self, product_id: int) -> bool:
        result = await self.session.execute(delete(ProductModel).where(ProductModel.id == product_id))
        return result.rowcount > 0

    def build_find_query(
        self,
        filters: ProductFilter,
        sort_by: str = "created_at",
        sort_direction: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> Select:
        """Build the listing statement without executing it."""
        query = select(ProductModel)
        conditions = build_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        sort_column = self._get_sort_column(sort_by)
        if sort_direction.lower() == "desc":
            query = query.order_by(sort_column.desc().nulls_last(), ProductModel.id.asc())
        else:
            query = query.order_by(sort_column.asc().nulls_last(), ProductModel.id.asc())

        return query.limit(limit).offset(offset)

    async def find(
        self,
        filters: ProductFilter,
        sort_by: str = "created_at",
        sort_direction: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> list[Product]:
        query = self.build_find_query(filters, sort_by, sort_direction, limit, offset)
        result = await self.session.execute(query)
        return [row.to_entity() for row in result.scalars().all()]

    async def count(self, filters: ProductFilter) -> int:
        query = select(func.count(ProductModel.id))
        conditions = build_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_by_status(self, status: ProductStatus) -> int:
        query = select(func.count(ProductModel.id)).where(
            and_(ProductModel.status == status.value, ProductModel.deleted_at.is_(None))
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_by_category(self, category_ids: list[int]) -> int:
        if not category_ids:
            return 0
        query = select(func.count(ProductModel.id)).where(
            and_(ProductModel.category_id.in_(category_ids), ProductModel.deleted_at.is_(None))
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def increment_view_count(self, product_id: int) -> int:
        statement = (
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(view_count=ProductModel.view_count + 1)
            .returning(ProductModel.view_count)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none() or 0

    def _get_sort_column(self, sort_by: str) -> Any:
        """Get SQLAlchemy column for sorting.

        Args:
            sort_by: Sort field name.

        Returns:
            SQLAlchemy column, ``created_at`` for unknown names.
        """
        sort_columns = {
            "id": ProductModel.id,
            "name": func.lower(ProductModel.name),
            "slug": ProductModel.slug,
            "market_price": ProductModel.market_price,
            "view_count": ProductModel.view_count,
            "created_at": ProductModel.created_at,
            "updated_at": ProductModel.updated_at,
            "published_at": ProductModel.published_at,
            "verified_at": ProductModel.verified_at,
        }
        return sort_columns.get(sort_by, ProductModel.created_at)
