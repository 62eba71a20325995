"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from devdaily.application.admin_service import AdminService
from devdaily.application.audit_service import AuditService, bind_audit_context
from devdaily.application.auth_service import AuthService
from devdaily.application.authorization_service import PERMISSIONS, AuthorizationService
from devdaily.application.category_service import CategoryService
from devdaily.application.dashboard_service import DashboardService
from devdaily.application.link_service import LinkService
from devdaily.application.marketplace_service import BadgeService, MarketplaceService
from devdaily.application.product import ProductOrchestrator, build_product_orchestrator
from devdaily.application.response_formatter import ResponseFormatter

__all__ = [
    "AdminService",
    "AuditService",
    "bind_audit_context",
    "AuthService",
    "PERMISSIONS",
    "AuthorizationService",
    "CategoryService",
    "DashboardService",
    "LinkService",
    "BadgeService",
    "MarketplaceService",
    "ProductOrchestrator",
    "build_product_orchestrator",
    "ResponseFormatter",
]
