"""Back office dashboard figures."""

from typing import Any

from devdaily.application.product.interfaces import ProductOrchestratorInterface
from devdaily.domain.repositories import ProductRepository
from devdaily.domain.state_machines import ProductStatus
from devdaily.infrastructure.memory import Repositories, get_repositories


class DashboardService:
    def __init__(self, repositories: Repositories | None = None, products: ProductRepository | None = None) -> None:
        self.repositories = repositories or get_repositories()
        self.products = products or self.repositories.products

    async def statistics(self) -> dict[str, Any]:
        by_status = {status.value: await self.products.count_by_status(status) for status in ProductStatus}
        links = self.repositories.links.all()
        return {
            "products": {**by_status, "total": sum(by_status.values())},
            "categories": self.repositories.categories.count(),
            "marketplaces": self.repositories.marketplaces.count(),
            "links": {
                "total": len(links),
                "active": sum(1 for link in links if link.active),
                "broken": sum(1 for link in links if link.validation_status == "broken"),
            },
            "badges": self.repositories.badges.count(),
            "admins": self.repositories.admins.count(),
        }

    def health(self, orchestrator: ProductOrchestratorInterface) -> dict[str, str]:
        return orchestrator.get_service_health()
