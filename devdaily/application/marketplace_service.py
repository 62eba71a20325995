"""Marketplace and badge management."""

import structlog

from devdaily.application.audit_service import AuditService
from devdaily.application.product import build_product_orchestrator
from devdaily.domain.entities import Badge, Marketplace
from devdaily.domain.exceptions import (
    BadgeNotFoundError,
    BusinessRuleError,
    MarketplaceNotFoundError,
    ValidationError,
)
from devdaily.domain.repositories import ProductRepository
from devdaily.dtos.catalog_requests import CreateBadgeRequest, CreateMarketplaceRequest
from devdaily.dtos.product_requests import UpdateProductRequest
from devdaily.dtos.responses import BadgeResponse, MarketplaceResponse, ProductResponse
from devdaily.infrastructure.memory import Repositories, get_repositories

logger = structlog.get_logger()


# ============================================================================
# Marketplaces
# ============================================================================


class MarketplaceService:
    """Service for the marketplaces links point into."""

    def __init__(self, repositories: Repositories | None = None, audit: AuditService | None = None) -> None:
        self.repositories = repositories or get_repositories()
        self.marketplaces = self.repositories.marketplaces
        self.audit = audit or AuditService(self.repositories.audit_logs, self.repositories.admins)

    def _require(self, marketplace_id: int) -> Marketplace:
        marketplace = self.marketplaces.get(marketplace_id)
        if marketplace is None:
            raise MarketplaceNotFoundError(marketplace_id)
        return marketplace

    def _check_slug(self, slug: str, exclude_id: int | None = None) -> None:
        existing = self.marketplaces.get_by_slug(slug)
        if existing is not None and existing.id != exclude_id:
            raise ValidationError("Marketplace validation failed", {"slug": "The slug is already taken."})

    def list_marketplaces(self, active_only: bool = False) -> list[MarketplaceResponse]:
        items = [m for m in self.marketplaces.all() if m.active or not active_only]
        return [MarketplaceResponse.from_entity(m) for m in sorted(items, key=lambda m: m.name.lower())]

    def get_marketplace(self, marketplace_id: int) -> MarketplaceResponse:
        return MarketplaceResponse.from_entity(self._require(marketplace_id))

    def create(self, request: CreateMarketplaceRequest, admin_id: int | None = None) -> MarketplaceResponse:
        self._check_slug(request.slug)
        marketplace = self.marketplaces.add(
            Marketplace(
                name=request.name,
                slug=request.slug,
                icon=request.icon,
                color=request.color,
                active=request.active,
            )
        )
        self.audit.record(
            "marketplace.create",
            "marketplace",
            marketplace.id,
            admin_id=admin_id,
            new_values={"name": marketplace.name, "slug": marketplace.slug},
        )
        logger.info("Marketplace created", marketplace_id=marketplace.id, slug=marketplace.slug)
        return MarketplaceResponse.from_entity(marketplace)

    def update(
        self, marketplace_id: int, request: CreateMarketplaceRequest, admin_id: int | None = None
    ) -> MarketplaceResponse:
        marketplace = self._require(marketplace_id)
        self._check_slug(request.slug, marketplace.id)
        old_values = MarketplaceResponse.from_entity(marketplace).to_dict()
        marketplace.name = request.name
        marketplace.slug = request.slug
        marketplace.icon = request.icon
        marketplace.color = request.color
        marketplace.active = request.active
        self.marketplaces.update(marketplace)
        response = MarketplaceResponse.from_entity(marketplace)
        self.audit.record(
            "marketplace.update",
            "marketplace",
            marketplace.id,
            admin_id=admin_id,
            old_values=old_values,
            new_values=response.to_dict(),
        )
        logger.info("Marketplace updated", marketplace_id=marketplace.id)
        return response

    def delete(self, marketplace_id: int, admin_id: int | None = None) -> bool:
        marketplace = self._require(marketplace_id)
        link_count = self.repositories.links.count_by_marketplace(marketplace.id)
        if link_count:
            raise BusinessRuleError(
                f"Marketplace is used by {link_count} links.",
                details={"marketplace_id": marketplace_id, "link_count": link_count},
            )
        self.marketplaces.delete(marketplace.id)
        self.audit.record(
            "marketplace.delete",
            "marketplace",
            marketplace.id,
            admin_id=admin_id,
            old_values={"name": marketplace.name, "slug": marketplace.slug},
        )
        logger.info("Marketplace deleted", marketplace_id=marketplace_id)
        return True


# ============================================================================
# Badges
# ============================================================================


class BadgeService:
    """Service for product badges such as "Best Price"."""

    def __init__(
        self,
        repositories: Repositories | None = None,
        products: ProductRepository | None = None,
        audit: AuditService | None = None,
    ) -> None:
        self.repositories = repositories or get_repositories()
        self.badges = self.repositories.badges
        self.products = products or self.repositories.products
        self.audit = audit or AuditService(self.repositories.audit_logs, self.repositories.admins)

    def _require(self, badge_id: int) -> Badge:
        badge = self.badges.get(badge_id)
        if badge is None:
            raise BadgeNotFoundError(badge_id)
        return badge

    def list_badges(self) -> list[BadgeResponse]:
        return [BadgeResponse.from_entity(b) for b in sorted(self.badges.all(), key=lambda b: b.label.lower())]

    def get_badge(self, badge_id: int) -> BadgeResponse:
        return BadgeResponse.from_entity(self._require(badge_id))

    def create(self, request: CreateBadgeRequest, admin_id: int | None = None) -> BadgeResponse:
        badge = self.badges.add(Badge(label=request.label, color=request.color))
        self.audit.record(
            "badge.create", "badge", badge.id, admin_id=admin_id, new_values={"label": badge.label}
        )
        logger.info("Badge created", badge_id=badge.id)
        return BadgeResponse.from_entity(badge)

    def update(self, badge_id: int, request: CreateBadgeRequest, admin_id: int | None = None) -> BadgeResponse:
        badge = self._require(badge_id)
        old_values = {"label": badge.label, "color": badge.color}
        badge.label = request.label
        badge.color = request.color
        self.badges.update(badge)
        self.audit.record(
            "badge.update",
            "badge",
            badge.id,
            admin_id=admin_id,
            old_values=old_values,
            new_values={"label": badge.label, "color": badge.color},
        )
        return BadgeResponse.from_entity(badge)

    def delete(self, badge_id: int, admin_id: int | None = None) -> bool:
        badge = self._require(badge_id)
        self.badges.delete(badge.id)
        self.audit.record("badge.delete", "badge", badge.id, admin_id=admin_id, old_values={"label": badge.label})
        logger.info("Badge deleted", badge_id=badge_id)
        return True

    async def assign_to_product(
        self, product_id: int, badge_ids: list[int], admin_id: int | None = None
    ) -> ProductResponse:
        """Replace a product's badges.

        Goes through the product update path so the change is validated
        and audited like any other edit.
        """
        orchestrator = build_product_orchestrator(products=self.products, repositories=self.repositories)
        return await orchestrator.update_product(
            UpdateProductRequest(
                product_id=product_id,
                badge_ids=tuple(dict.fromkeys(badge_ids)),
                updated_by=admin_id,
                present_fields=frozenset({"badge_ids"}),
            )
        )
