"""HTMX product fragments.

Provides:
- GET /htmx/products/search - admin table rows
- POST /htmx/products/{id}/toggle-status - status badge
- POST /htmx/products/{id}/delete - removes the row
- POST /htmx/products/bulk - bulk action toast
"""

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse

from devdaily.api.dependencies import get_authorization_service, get_orchestrator, require_permission
from devdaily.application.authorization_service import AuthorizationService
from devdaily.application.product import ProductOrchestrator
from devdaily.domain.entities import Admin
from devdaily.domain.enums import ProductBulkActionType
from devdaily.domain.exceptions import DomainError, ValidationError
from devdaily.dtos.product_requests import (
    ProductBulkActionRequest,
    ProductDeleteRequest,
    ProductToggleStatusRequest,
)
from devdaily.dtos.queries import ProductQuery
from devdaily.htmx.responses import error_toast, fragment, toast, triggers
from devdaily.infrastructure.config import settings
from devdaily.web.forms import read_form

logger = structlog.get_logger()

router = APIRouter(prefix="/htmx/products", tags=["HTMX"], include_in_schema=False)


@router.get("/search", response_class=HTMLResponse)
async def search(
    request: Request,
    admin: Admin = Depends(require_permission("product.view")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> HTMLResponse:
    try:
        query = ProductQuery.from_request(dict(request.query_params), admin_mode=True)
        result = await orchestrator.list_products(query, admin_mode=True)
    except DomainError as e:
        return error_toast(e)
    return fragment(request, "htmx/product_rows.html", {"products": result.items, "result": result})


@router.post("/{product_id}/toggle-status", response_class=HTMLResponse)
async def toggle_status(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.publish")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> HTMLResponse:
    data = await read_form(request)
    try:
        toggle = ProductToggleStatusRequest.from_request({**data, "product_id": product_id}, admin_id=admin.id)
        product = await orchestrator.toggle_product_status(toggle)
    except DomainError as e:
        return error_toast(e)
    return fragment(
        request,
        "htmx/status_badge.html",
        {"product": product},
        headers=triggers("success", f"Status changed to {product.status_label}.", refreshStats=True),
    )


@router.post("/{product_id}/delete", response_class=HTMLResponse)
async def delete(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.delete")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> HTMLResponse:
    data = await read_form(request)
    try:
        await orchestrator.delete_product(
            ProductDeleteRequest(product_id=product_id, user_id=admin.id, reason=data.get("reason"))
        )
    except DomainError as e:
        return error_toast(e)
    return toast("Product moved to trash.", refreshStats=True)


@router.post("/bulk", response_class=HTMLResponse)
async def bulk(
    request: Request,
    admin: Admin = Depends(require_permission("product.bulk")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> HTMLResponse:
    """Run one bulk action and report the outcome as a toast."""
    data = await read_form(request)
    try:
        bulk_request = ProductBulkActionRequest.from_request(data, user_id=admin.id, max_items=settings.bulk_max_items)
        if bulk_request.action == ProductBulkActionType.HARD_DELETE:
            authorization.authorize(admin, "product.bulk.hard_delete")
        result = await orchestrator.bulk_action(bulk_request)
    except ValidationError as e:
        first_error = next(iter(e.errors.values()), e.message)
        return toast(first_error, "error", status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
    except DomainError as e:
        return error_toast(e)
    except Exception as e:
        logger.exception("Bulk action failed", error=str(e))
        return toast(
            "Bulk action failed. Please try again.", "error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if result.is_complete_success:
        message = bulk_request.action.success_message(result.success_count)
        return toast(message, refreshTable=True, refreshStats=True)
    return toast(result.summary_message(), "warning", refreshTable=True, refreshStats=True)
