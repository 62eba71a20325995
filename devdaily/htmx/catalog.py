"""HTMX category and link fragments."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from devdaily.api.dependencies import get_category_service, get_link_service, require_permission
from devdaily.application.category_service import CategoryService
from devdaily.application.link_service import LinkService
from devdaily.domain.entities import Admin
from devdaily.domain.exceptions import DomainError
from devdaily.dtos.base import InputReader
from devdaily.htmx.responses import error_toast, fragment, triggers
from devdaily.web.forms import read_form

router = APIRouter(prefix="/htmx", tags=["HTMX"], include_in_schema=False)


@router.get("/categories/{category_id}/children", response_class=HTMLResponse)
async def category_children(
    category_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("category.manage")),
    service: CategoryService = Depends(get_category_service),
) -> HTMLResponse:
    try:
        children = await service.get_subcategories(category_id, active_only=False)
    except DomainError as e:
        return error_toast(e)
    return fragment(request, "htmx/category_children.html", {"children": children, "parent_id": category_id})


@router.post("/links/validate-url", response_class=HTMLResponse)
async def validate_url(
    request: Request,
    admin: Admin = Depends(require_permission("link.manage")),
    service: LinkService = Depends(get_link_service),
) -> HTMLResponse:
    data = await read_form(request)
    reader = InputReader(data)
    marketplace_id = reader.integer("marketplace_id", minimum=1, label="marketplace")
    try:
        reader.raise_if_errors("Link validation failed")
        outcome = service.validate_url(data.get("url"), marketplace_id)
    except DomainError as e:
        return error_toast(e)
    return fragment(request, "htmx/url_validation.html", {"outcome": outcome})


@router.post("/links/{link_id}/check", response_class=HTMLResponse)
async def check_link(
    link_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("link.manage")),
    service: LinkService = Depends(get_link_service),
) -> HTMLResponse:
    try:
        link = await service.check_link(link_id)
    except DomainError as e:
        return error_toast(e)
    toast_type = "success" if link.validation_status == "valid" else "warning"
    return fragment(
        request,
        "htmx/link_status.html",
        {"link": link},
        headers=triggers(toast_type, f"Link is {link.validation_status}."),
    )
