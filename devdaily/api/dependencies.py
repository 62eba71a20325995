"""FastAPI dependencies shared by the API, HTMX and admin routers."""

from collections.abc import AsyncGenerator, Callable

from fastapi import Depends, Request

from devdaily.application.admin_service import AdminService
from devdaily.application.auth_service import AuthService
from devdaily.application.authorization_service import AuthorizationService
from devdaily.application.category_service import CategoryService
from devdaily.application.dashboard_service import DashboardService
from devdaily.application.link_service import LinkService
from devdaily.application.marketplace_service import BadgeService, MarketplaceService
from devdaily.application.product import ProductOrchestrator, build_product_orchestrator
from devdaily.domain.entities import Admin
from devdaily.domain.exceptions import AuthenticationError
from devdaily.domain.repositories import ProductRepository
from devdaily.infrastructure.config import settings
from devdaily.infrastructure.database import get_session_factory
from devdaily.infrastructure.image_processor import get_image_processor
from devdaily.infrastructure.memory import get_repositories
from devdaily.infrastructure.sql_repository import SqlAlchemyProductRepository


# ============================================================================
# Repositories and Services
# ============================================================================


async def get_product_repository() -> AsyncGenerator[ProductRepository, None]:
    """Product storage for the configured backend."""
    if not settings.uses_database:
        yield get_repositories().products
        return
    async with get_session_factory()() as session:
        try:
            yield SqlAlchemyProductRepository(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_orchestrator(
    request: Request,
    products: ProductRepository = Depends(get_product_repository),
) -> ProductOrchestrator:
    """Get the product orchestrator with request ID."""
    return build_product_orchestrator(
        products=products,
        image_processor=get_image_processor(),
        request_id=getattr(request.state, "request_id", None),
    )


def get_category_service(products: ProductRepository = Depends(get_product_repository)) -> CategoryService:
    return CategoryService(products=products)


def get_link_service(products: ProductRepository = Depends(get_product_repository)) -> LinkService:
    return LinkService(products=products)


def get_marketplace_service() -> MarketplaceService:
    return MarketplaceService()


def get_badge_service(products: ProductRepository = Depends(get_product_repository)) -> BadgeService:
    return BadgeService(products=products)


def get_dashboard_service(products: ProductRepository = Depends(get_product_repository)) -> DashboardService:
    return DashboardService(products=products)


def get_auth_service() -> AuthService:
    return AuthService()


def get_authorization_service() -> AuthorizationService:
    return AuthorizationService()


def get_admin_service() -> AdminService:
    return AdminService()


# ============================================================================
# Authentication and Permissions
# ============================================================================


def get_current_admin(request: Request) -> Admin:
    """The admin resolved by ``AdminAuthMiddleware``.

    Raises:
        AuthenticationError: If the request carries no valid token.
    """
    admin = getattr(request.state, "admin", None)
    if admin is None:
        raise AuthenticationError("Authentication required.")
    return admin


def require_permission(permission: str) -> Callable[..., Admin]:
    """Build a dependency that checks one permission.

    Usage:
        admin: Admin = Depends(require_permission("product.update"))
    """

    def dependency(
        admin: Admin = Depends(get_current_admin),
        authorization: AuthorizationService = Depends(get_authorization_service),
    ) -> Admin:
        authorization.authorize(admin, permission)
        return admin

    return dependency
