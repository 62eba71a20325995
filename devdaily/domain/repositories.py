"""Product repository contract.

Products are the one aggregate with two storage backends, so services
depend on this interface rather than a concrete class.
"""

from abc import ABC, abstractmethod

from devdaily.domain.entities import Product
from devdaily.domain.filters import ProductFilter
from devdaily.domain.state_machines import ProductStatus


class ProductRepository(ABC):
    """Async storage for products."""

    @abstractmethod
    async def get(self, product_id: int) -> Product | None:
        """Get a product by id, including soft-deleted ones."""

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Product | None:
        """Get a product by slug, including soft-deleted ones."""

    @abstractmethod
    async def slug_exists(self, slug: str, exclude_id: int | None = None) -> bool:
        ...

    @abstractmethod
    async def add(self, product: Product) -> Product:
        """Persist a new product and assign its id."""

    @abstractmethod
    async def update(self, product: Product) -> Product:
        ...

    @abstractmethod
    async def delete(self, product_id: int) -> bool:
        """Remove a product permanently."""

    @abstractmethod
    async def find(
        self,
        filters: ProductFilter,
        sort_by: str = "created_at",
        sort_direction: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> list[Product]:
        ...

    @abstractmethod
    async def count(self, filters: ProductFilter) -> int:
        ...

    @abstractmethod
    async def count_by_status(self, status: ProductStatus) -> int:
        """Count non-deleted products in a status."""

    @abstractmethod
    async def count_by_category(self, category_ids: list[int]) -> int:
        """Count non-deleted products in any of the categories."""

    @abstractmethod
    async def increment_view_count(self, product_id: int) -> int:
        """Increment and return the new view count."""
