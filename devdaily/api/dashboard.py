"""Dashboard API endpoints (admin only)."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from devdaily.api.dependencies import get_current_admin, get_dashboard_service, get_orchestrator
from devdaily.api.schemas import ApiResponse
from devdaily.application.dashboard_service import DashboardService
from devdaily.application.product import ProductOrchestrator
from devdaily.application.response_formatter import ResponseFormatter
from devdaily.domain.entities import Admin

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=ApiResponse, summary="Catalog statistics")
async def stats(
    admin: Admin = Depends(get_current_admin),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return ResponseFormatter.success(await service.statistics())


@router.get("/health", response_model=ApiResponse, summary="Product service health")
async def service_health(
    admin: Admin = Depends(get_current_admin),
    service: DashboardService = Depends(get_dashboard_service),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Report the wired product sub-services; 503 unless operational."""
    health = service.health(orchestrator)
    status_code = status.HTTP_200_OK if health.get("status") == "operational" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=ResponseFormatter.success(health))
