"""Marketplace link management and link health checks.

Links are the price entries shown in the storefront comparison table.
``check_link`` probes the target URL with httpx and records the outcome
on the link and its product.
"""

from typing import Any
from urllib.parse import urlparse

import httpx
import structlog

from devdaily.application.audit_service import AuditService
from devdaily.domain.entities import Link, utcnow
from devdaily.domain.exceptions import (
    LinkNotFoundError,
    MarketplaceNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from devdaily.domain.repositories import ProductRepository
from devdaily.dtos.base import is_valid_url
from devdaily.dtos.catalog_requests import CreateLinkRequest, UpdateLinkRequest
from devdaily.dtos.responses import LinkResponse
from devdaily.infrastructure.config import settings
from devdaily.infrastructure.memory import Repositories, get_repositories

logger = structlog.get_logger()

VALID = "valid"
BROKEN = "broken"
ERROR = "error"

# Known storefront hosts per marketplace slug
MARKETPLACE_DOMAINS: dict[str, tuple[str, ...]] = {
    "tokopedia": ("tokopedia.com", "tokopedia.link"),
    "shopee": ("shopee.co.id", "shope.ee"),
    "lazada": ("lazada.co.id",),
    "blibli": ("blibli.com",),
    "bukalapak": ("bukalapak.com",),
}


class LinkService:
    """Service for affiliate links."""

    def __init__(
        self,
        repositories: Repositories | None = None,
        products: ProductRepository | None = None,
        audit: AuditService | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self.repositories = repositories or get_repositories()
        self.links = self.repositories.links
        self.products = products or self.repositories.products
        self.audit = audit or AuditService(self.repositories.audit_logs, self.repositories.admins)
        self._client = client
        self.timeout = timeout or settings.link_check_timeout

    def _require(self, link_id: int) -> Link:
        link = self.links.get(link_id)
        if link is None:
            raise LinkNotFoundError(link_id)
        return link

    def _to_response(self, link: Link) -> LinkResponse:
        return LinkResponse.from_entity(link, self.repositories.marketplaces.get(link.marketplace_id))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_for_product(self, product_id: int, active_only: bool = False) -> list[LinkResponse]:
        return [self._to_response(link) for link in self.links.list_by_product(product_id, active_only)]

    def get_link(self, link_id: int) -> LinkResponse:
        return self._to_response(self._require(link_id))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, request: CreateLinkRequest, admin_id: int | None = None) -> LinkResponse:
        if await self.products.get(request.product_id) is None:
            raise ProductNotFoundError(request.product_id)
        if self.repositories.marketplaces.get(request.marketplace_id) is None:
            raise MarketplaceNotFoundError(request.marketplace_id)

        now = utcnow()
        link = self.links.add(
            Link(
                product_id=request.product_id,
                marketplace_id=request.marketplace_id,
                store_name=request.store_name,
                url=request.url,
                price=request.price,
                rating=request.rating,
                active=request.active,
                sold_count=request.sold_count,
                last_price_update=now,
            )
        )
        self.audit.record(
            "link.create",
            "link",
            link.id,
            admin_id=admin_id,
            new_values={"product_id": link.product_id, "url": link.url, "price": str(link.price)},
        )
        logger.info("Link created", link_id=link.id, product_id=link.product_id)
        return self._to_response(link)

    async def update(self, request: UpdateLinkRequest, admin_id: int | None = None) -> LinkResponse:
        link = self._require(request.link_id)
        changes = request.to_update_dict()
        if "marketplace_id" in changes and self.repositories.marketplaces.get(changes["marketplace_id"]) is None:
            raise MarketplaceNotFoundError(changes["marketplace_id"])

        old_values = {key: str(getattr(link, key)) for key in changes}
        now = utcnow()
        for key, value in changes.items():
            if key == "price" and value != link.price:
                link.last_price_update = now
            if key == "url" and value != link.url:
                link.validation_status = None
                link.last_validation = None
            setattr(link, key, value)
        link.updated_at = now
        self.links.update(link)

        self.audit.record(
            "link.update",
            "link",
            link.id,
            admin_id=admin_id,
            old_values=old_values,
            new_values={key: str(getattr(link, key)) for key in changes},
        )
        logger.info("Link updated", link_id=link.id, fields=sorted(changes))
        return self._to_response(link)

    def delete(self, link_id: int, admin_id: int | None = None) -> bool:
        link = self._require(link_id)
        self.links.delete(link.id)
        self.audit.record(
            "link.delete",
            "link",
            link.id,
            admin_id=admin_id,
            old_values={"product_id": link.product_id, "url": link.url},
        )
        logger.info("Link deleted", link_id=link_id, product_id=link.product_id)
        return True

    def record_click(self, link_id: int) -> int:
        link = self._require(link_id)
        link.clicks += 1
        self.links.update(link)
        return link.clicks

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_url(self, url: str | None, marketplace_id: int | None = None) -> dict[str, Any]:
        """Check URL syntax and whether the host matches the marketplace.

        Returns:
            ``{"valid": bool, "message": str, "warning": str | None}``.
        """
        url = (url or "").strip()
        if not url:
            raise ValidationError.for_field("url", "The URL field is required.")
        if not is_valid_url(url):
            return {"valid": False, "message": "The URL must start with http:// or https://.", "warning": None}

        warning = None
        if marketplace_id is not None:
            marketplace = self.repositories.marketplaces.get(marketplace_id)
            if marketplace is None:
                raise MarketplaceNotFoundError(marketplace_id)
            domains = MARKETPLACE_DOMAINS.get(marketplace.slug)
            host = (urlparse(url).hostname or "").lower()
            if domains and not any(host == d or host.endswith("." + d) for d in domains):
                warning = f"The URL does not look like a {marketplace.name} link."
        return {"valid": True, "message": "URL looks valid.", "warning": warning}

    async def _probe(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        response = await client.head(url, follow_redirects=True)
        if response.status_code == 405:
            response = await client.get(url, follow_redirects=True)
        return response

    async def check_link(self, link_id: int) -> LinkResponse:
        """Probe a link and record ``valid``, ``broken`` or ``error``."""
        link = self._require(link_id)
        status_code: int | None = None
        try:
            if self._client is not None:
                response = await self._probe(self._client, link.url)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._probe(client, link.url)
            status_code = response.status_code
            link.validation_status = VALID if status_code < 400 else BROKEN
        except httpx.RequestError as e:
            logger.warning("Link check failed", link_id=link.id, url=link.url, error=str(e))
            link.validation_status = ERROR

        now = utcnow()
        link.last_validation = now
        self.links.update(link)

        product = await self.products.get(link.product_id)
        if product is not None:
            product.last_link_check = now
            await self.products.update(product)

        logger.info(
            "Link checked",
            link_id=link.id,
            status=link.validation_status,
            status_code=status_code,
        )
        return self._to_response(link)
