"""Product services and the orchestrator facade."""

from devdaily.application.product.bulk_service import ProductBulkService
from devdaily.application.product.crud_service import ProductCRUDService
from devdaily.application.product.interfaces import ProductOrchestratorInterface
from devdaily.application.product.orchestrator import ProductOrchestrator, build_product_orchestrator
from devdaily.application.product.query_service import ProductQueryService
from devdaily.application.product.workflow_service import ProductWorkflowService

__all__ = [
    "ProductBulkService",
    "ProductCRUDService",
    "ProductOrchestratorInterface",
    "ProductOrchestrator",
    "build_product_orchestrator",
    "ProductQueryService",
    "ProductWorkflowService",
]
