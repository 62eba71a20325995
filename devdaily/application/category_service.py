"""Category tree management."""

import structlog

from devdaily.application.audit_service import AuditService
from devdaily.domain.entities import Category, utcnow
from devdaily.domain.exceptions import BusinessRuleError, CategoryNotFoundError, ValidationError
from devdaily.domain.repositories import ProductRepository
from devdaily.dtos.catalog_requests import CreateCategoryRequest, UpdateCategoryRequest
from devdaily.dtos.responses import CategoryResponse
from devdaily.infrastructure.memory import Repositories, get_repositories

logger = structlog.get_logger()


class CategoryService:
    """Service for browsing and editing the category tree."""

    def __init__(
        self,
        repositories: Repositories | None = None,
        products: ProductRepository | None = None,
        audit: AuditService | None = None,
    ) -> None:
        self.repositories = repositories or get_repositories()
        self.categories = self.repositories.categories
        self.products = products or self.repositories.products
        self.audit = audit or AuditService(self.repositories.audit_logs, self.repositories.admins)

    def _require(self, category_id: int) -> Category:
        category = self.categories.get(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    async def _product_count(self, category: Category) -> int:
        return await self.products.count_by_category([category.id, *self.categories.descendant_ids(category.id)])

    async def _build(self, category: Category, active_only: bool) -> CategoryResponse:
        children = tuple(
            [await self._build(child, active_only) for child in self.categories.children_of(category.id, active_only)]
        )
        return CategoryResponse.from_entity(category, await self._product_count(category), children)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_categories(self, active_only: bool = False) -> list[CategoryResponse]:
        """Flat list ordered by sort order then name."""
        categories = [c for c in self.categories.all() if c.active or not active_only]
        categories.sort(key=lambda c: (c.sort_order, c.name.lower()))
        return [CategoryResponse.from_entity(c, await self._product_count(c)) for c in categories]

    async def get_category_tree(self, active_only: bool = True) -> list[CategoryResponse]:
        return [await self._build(root, active_only) for root in self.categories.children_of(None, active_only)]

    async def get_category(self, category_id: int) -> CategoryResponse:
        return await self._build(self._require(category_id), active_only=False)

    async def get_category_by_slug(self, slug: str, active_only: bool = True) -> CategoryResponse:
        category = self.categories.get_by_slug(slug)
        if category is None or (active_only and not category.active):
            raise CategoryNotFoundError(slug, f"Category with slug '{slug}' not found")
        return await self._build(category, active_only)

    async def get_subcategories(self, category_id: int, active_only: bool = True) -> list[CategoryResponse]:
        self._require(category_id)
        return [await self._build(child, active_only) for child in self.categories.children_of(category_id, active_only)]

    def category_scope(self, category_id: int) -> list[int]:
        """A category id followed by all of its descendants."""
        return [category_id, *self.categories.descendant_ids(category_id)]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, request: CreateCategoryRequest, admin_id: int | None = None) -> CategoryResponse:
        if self.categories.slug_exists(request.slug):
            raise ValidationError("Category validation failed", {"slug": "The slug is already taken."})
        if request.parent_id is not None:
            self._require_parent(request.parent_id)
        category = self.categories.add(
            Category(
                name=request.name,
                slug=request.slug,
                icon=request.icon,
                parent_id=request.parent_id,
                sort_order=request.sort_order,
                active=request.active,
            )
        )
        self.audit.record(
            "category.create",
            "category",
            category.id,
            admin_id=admin_id,
            new_values={"name": category.name, "slug": category.slug, "parent_id": category.parent_id},
        )
        logger.info("Category created", category_id=category.id, slug=category.slug)
        return CategoryResponse.from_entity(category)

    def _require_parent(self, parent_id: int) -> Category:
        parent = self.categories.get(parent_id)
        if parent is None:
            raise ValidationError("Category validation failed", {"parent_id": "The parent category does not exist."})
        return parent

    async def update(self, request: UpdateCategoryRequest, admin_id: int | None = None) -> CategoryResponse:
        category = self._require(request.category_id)
        changes = request.to_update_dict()
        old_values = {key: getattr(category, key) for key in changes}

        if changes.get("slug") and self.categories.slug_exists(changes["slug"], category.id):
            raise ValidationError("Category validation failed", {"slug": "The slug is already taken."})
        if changes.get("parent_id") is not None:
            parent_id = changes["parent_id"]
            if parent_id == category.id or parent_id in self.categories.descendant_ids(category.id):
                raise ValidationError(
                    "Category validation failed",
                    {"parent_id": "A category cannot be moved under itself or its descendants."},
                )
            self._require_parent(parent_id)

        for key, value in changes.items():
            if key == "slug" and not value:
                continue
            setattr(category, key, value)
        category.updated_at = utcnow()
        self.categories.update(category)

        self.audit.record(
            "category.update",
            "category",
            category.id,
            admin_id=admin_id,
            old_values=old_values,
            new_values={key: getattr(category, key) for key in changes},
        )
        logger.info("Category updated", category_id=category.id, fields=sorted(changes))
        return CategoryResponse.from_entity(category, await self._product_count(category))

    async def delete(self, category_id: int, admin_id: int | None = None) -> bool:
        category = self._require(category_id)
        if self.categories.children_of(category.id):
            raise BusinessRuleError(
                "Category has subcategories. Move or delete them first.",
                details={"category_id": category_id},
            )
        product_count = await self.products.count_by_category([category.id])
        if product_count:
            raise BusinessRuleError(
                f"Category still has {product_count} products.",
                details={"category_id": category_id, "product_count": product_count},
            )
        self.categories.delete(category.id)
        self.audit.record(
            "category.delete",
            "category",
            category.id,
            admin_id=admin_id,
            old_values={"name": category.name, "slug": category.slug},
        )
        logger.info("Category deleted", category_id=category_id)
        return True
