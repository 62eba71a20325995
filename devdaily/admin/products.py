"""Back office product pages.

The list page carries the filter form and the bulk action form; the
bulk form posts to the HTMX endpoint. Workflow buttons on the detail
page post to one route per action and redirect back with a notice.
"""

from typing import Any, Awaitable, Callable

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from devdaily.admin.common import redirect, render
from devdaily.api.dependencies import (
    get_badge_service,
    get_category_service,
    get_link_service,
    get_orchestrator,
    require_permission,
)
from devdaily.application.category_service import CategoryService
from devdaily.application.link_service import LinkService
from devdaily.application.marketplace_service import BadgeService
from devdaily.application.product import ProductOrchestrator
from devdaily.domain.entities import Admin
from devdaily.domain.enums import ImageSourceType, PriceAdjustmentType, ProductBulkActionType
from devdaily.domain.exceptions import DomainError, ValidationError
from devdaily.domain.state_machines import ProductStatus
from devdaily.dtos.product_requests import (
    CreateProductRequest,
    ProductDeleteRequest,
    ProductQuickEditRequest,
    PublishProductRequest,
    UpdateProductRequest,
)
from devdaily.dtos.queries import ALLOWED_SORT_FIELDS, ProductQuery
from devdaily.dtos.responses import ProductResponse
from devdaily.infrastructure.image_processor import ImageProcessingError, get_image_processor
from devdaily.web.forms import read_form

logger = structlog.get_logger()

router = APIRouter(prefix="/admin/products", include_in_schema=False)


async def _store_upload(request: Request, data: dict[str, Any]) -> dict[str, Any]:
    """Process an uploaded image into variants and point the form data at it."""
    form = await request.form()
    upload = form.get("image_file")
    if not isinstance(upload, UploadFile) or not upload.filename:
        return data
    try:
        content = await upload.read()
        # Pillow decoding and encoding are CPU bound
        base_path = await run_in_threadpool(get_image_processor().process, content, upload.filename)
    except ImageProcessingError as e:
        raise ValidationError.for_field("image_file", str(e)) from e
    return {**data, "image_path": base_path, "image_source_type": ImageSourceType.UPLOAD.value}


async def _form_context(
    categories: CategoryService,
    badges: BadgeService,
    product: ProductResponse | None = None,
    values: dict[str, Any] | None = None,
    errors: dict[str, str] | None = None,
    message: str | None = None,
) -> dict[str, Any]:
    return {
        "product": product,
        "values": values or {},
        "errors": errors or {},
        "message": message,
        "categories": await categories.list_categories(),
        "badges": badges.list_badges(),
        "statuses": list(ProductStatus),
        "image_sources": list(ImageSourceType),
    }


# ============================================================================
# List / Create
# ============================================================================


@router.get("", response_class=HTMLResponse)
async def list_products(
    request: Request,
    admin: Admin = Depends(require_permission("product.view")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    categories: CategoryService = Depends(get_category_service),
) -> HTMLResponse:
    query = ProductQuery.from_request(dict(request.query_params), admin_mode=True)
    try:
        result = await orchestrator.list_products(query, admin_mode=True)
        error = None
    except ValidationError as e:
        query = ProductQuery.for_admin()
        result = await orchestrator.list_products(query, admin_mode=True)
        error = e.message
    return render(
        request,
        "admin/products.html",
        {
            "result": result,
            "query": query,
            "query_error": error,
            "categories": await categories.list_categories(),
            "statuses": list(ProductStatus),
            "sort_fields": ALLOWED_SORT_FIELDS,
            "bulk_actions": list(ProductBulkActionType),
            "price_adjustments": list(PriceAdjustmentType),
        },
    )


@router.get("/new", response_class=HTMLResponse)
async def new_product(
    request: Request,
    admin: Admin = Depends(require_permission("product.create")),
    categories: CategoryService = Depends(get_category_service),
    badges: BadgeService = Depends(get_badge_service),
) -> HTMLResponse:
    return render(request, "admin/product_form.html", await _form_context(categories, badges))


@router.post("", response_class=HTMLResponse)
async def create_product(
    request: Request,
    admin: Admin = Depends(require_permission("product.create")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    categories: CategoryService = Depends(get_category_service),
    badges: BadgeService = Depends(get_badge_service),
) -> Response:
    data = await read_form(request)
    try:
        data = await _store_upload(request, data)
        product = await orchestrator.create_product(CreateProductRequest.from_request(data, created_by=admin.id))
    except ValidationError as e:
        context = await _form_context(categories, badges, values=data, errors=e.errors, message=e.message)
        return render(request, "admin/product_form.html", context, status_code=422)
    return redirect(f"/admin/products/{product.id}", f"Product '{product.name}' created.")


# ============================================================================
# Detail / Edit
# ============================================================================


@router.get("/{product_id}", response_class=HTMLResponse)
async def product_detail(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.view")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    links: LinkService = Depends(get_link_service),
) -> HTMLResponse:
    product = await orchestrator.get_product(product_id, admin_mode=True)
    return render(
        request,
        "admin/product_detail.html",
        {
            "product": product,
            "links": links.list_for_product(product_id),
            "allowed": ProductStatus(product.status).allowed_transitions(),
        },
    )


@router.get("/{product_id}/edit", response_class=HTMLResponse)
async def edit_product(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.update")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    categories: CategoryService = Depends(get_category_service),
    badges: BadgeService = Depends(get_badge_service),
) -> HTMLResponse:
    product = await orchestrator.get_product(product_id, admin_mode=True)
    return render(request, "admin/product_form.html", await _form_context(categories, badges, product=product))


@router.post("/{product_id}", response_class=HTMLResponse)
async def update_product(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.update")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    categories: CategoryService = Depends(get_category_service),
    badges: BadgeService = Depends(get_badge_service),
) -> Response:
    data = await read_form(request)
    # Unchecked checkboxes are not submitted; the form flags the field instead
    if data.pop("badge_ids_present", None) and "badge_ids" not in data:
        data["badge_ids"] = []
    try:
        data = await _store_upload(request, data)
        product = await orchestrator.update_product(
            UpdateProductRequest.from_request(product_id, data, updated_by=admin.id)
        )
    except ValidationError as e:
        current = await orchestrator.get_product(product_id, admin_mode=True)
        context = await _form_context(categories, badges, product=current, values=data, errors=e.errors, message=e.message)
        return render(request, "admin/product_form.html", context, status_code=422)
    except DomainError as e:
        return redirect(f"/admin/products/{product_id}/edit", e.message, "error")
    return redirect(f"/admin/products/{product.id}", "Product updated.")


@router.post("/{product_id}/quick-edit")
async def quick_edit_product(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.update")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> Response:
    data = await read_form(request)
    try:
        product = await orchestrator.quick_edit_product(
            ProductQuickEditRequest.from_request(product_id, data, admin_id=admin.id)
        )
    except DomainError as e:
        return redirect("/admin/products", e.message, "error")
    return redirect("/admin/products", f"Product '{product.name}' saved.")


# ============================================================================
# Trash
# ============================================================================


@router.post("/{product_id}/delete")
async def delete_product(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.delete")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> Response:
    data = await read_form(request)
    try:
        await orchestrator.delete_product(
            ProductDeleteRequest(product_id=product_id, user_id=admin.id, reason=data.get("reason"))
        )
    except DomainError as e:
        return redirect(f"/admin/products/{product_id}", e.message, "error")
    return redirect("/admin/products", "Product moved to trash.")


@router.post("/{product_id}/restore")
async def restore_product(
    product_id: int,
    admin: Admin = Depends(require_permission("product.delete")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> Response:
    try:
        await orchestrator.restore_product(product_id, admin.id)
    except DomainError as e:
        return redirect("/admin/products?only_trashed=1", e.message, "error")
    return redirect(f"/admin/products/{product_id}", "Product restored.")


# ============================================================================
# Workflow
# ============================================================================


async def _workflow(
    product_id: int, action: Callable[[], Awaitable[ProductResponse]], success: str
) -> Response:
    try:
        product = await action()
    except DomainError as e:
        return redirect(f"/admin/products/{product_id}", e.message, "error")
    return redirect(f"/admin/products/{product.id}", success.format(status=product.status_label))


@router.post("/{product_id}/request-verification")
async def request_verification(
    product_id: int,
    admin: Admin = Depends(require_permission("product.update")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> Response:
    return await _workflow(
        product_id, lambda: orchestrator.request_verification(product_id, admin.id), "Sent for verification."
    )


@router.post("/{product_id}/verify")
async def verify(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.verify")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> Response:
    data = await read_form(request)
    return await _workflow(
        product_id, lambda: orchestrator.verify_product(product_id, admin.id, data.get("notes")), "Product verified."
    )


@router.post("/{product_id}/publish")
async def publish(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.publish")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> Response:
    data = await read_form(request)
    try:
        publish_request = PublishProductRequest.from_request({**data, "product_id": product_id}, admin_id=admin.id)
    except ValidationError as e:
        return redirect(f"/admin/products/{product_id}", next(iter(e.errors.values()), e.message), "error")
    return await _workflow(
        product_id, lambda: orchestrator.publish_product(publish_request), "Product is now {status}."
    )


@router.post("/{product_id}/archive")
async def archive(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.archive")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> Response:
    data = await read_form(request)
    return await _workflow(
        product_id, lambda: orchestrator.archive_product(product_id, admin.id, data.get("reason")), "Product archived."
    )


@router.post("/{product_id}/unarchive")
async def unarchive(
    product_id: int,
    admin: Admin = Depends(require_permission("product.archive")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> Response:
    return await _workflow(
        product_id, lambda: orchestrator.unarchive_product(product_id, admin.id), "Product returned to draft."
    )


@router.post("/{product_id}/revert")
async def revert(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("product.update")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> Response:
    data = await read_form(request)
    return await _workflow(
        product_id,
        lambda: orchestrator.revert_to_draft(product_id, admin.id, data.get("reason")),
        "Product reverted to draft.",
    )
