"""Back office pages for categories, links, marketplaces and badges."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from devdaily.admin.common import FormField, redirect, render, render_form
from devdaily.api.dependencies import (
    get_badge_service,
    get_category_service,
    get_link_service,
    get_marketplace_service,
    get_orchestrator,
    require_permission,
)
from devdaily.application.category_service import CategoryService
from devdaily.application.link_service import LinkService
from devdaily.application.marketplace_service import BadgeService, MarketplaceService
from devdaily.application.product import ProductOrchestrator
from devdaily.domain.entities import Admin
from devdaily.domain.exceptions import DomainError, ValidationError
from devdaily.dtos.catalog_requests import (
    CreateBadgeRequest,
    CreateCategoryRequest,
    CreateLinkRequest,
    CreateMarketplaceRequest,
    UpdateCategoryRequest,
    UpdateLinkRequest,
)
from devdaily.dtos.responses import CategoryResponse, LinkResponse, MarketplaceResponse
from devdaily.web.forms import read_form

router = APIRouter(prefix="/admin", include_in_schema=False)


def _list_page(
    request: Request,
    title: str,
    columns: list[tuple[str, str]],
    rows: list[dict[str, Any]],
    create_url: str | None = None,
) -> HTMLResponse:
    return render(
        request,
        "admin/list.html",
        {"title": title, "columns": columns, "rows": rows, "create_url": create_url},
    )


# ============================================================================
# Categories
# ============================================================================


def _category_fields(
    categories: list[CategoryResponse],
    values: dict[str, Any],
    exclude_id: int | None = None,
) -> list[FormField]:
    parents = [(None, "(top level)")] + [(c.id, c.name) for c in categories if c.id != exclude_id]
    return [
        FormField("name", "Name", value=values.get("name"), required=True),
        FormField("slug", "Slug", value=values.get("slug"), help="Leave empty to derive it from the name."),
        FormField("icon", "Icon", value=values.get("icon", "fas fa-folder")),
        FormField("parent_id", "Parent", type="select", value=values.get("parent_id"), options=parents),
        FormField("sort_order", "Sort order", type="number", value=values.get("sort_order", 0)),
        FormField("active", "Active", type="checkbox", value=values.get("active", True)),
    ]


@router.get("/categories", response_class=HTMLResponse)
async def list_categories(
    request: Request,
    admin: Admin = Depends(require_permission("category.manage")),
    categories: CategoryService = Depends(get_category_service),
) -> HTMLResponse:
    items = await categories.list_categories()
    names = {c.id: c.name for c in items}
    rows = [
        {
            "cells": [c.name, c.slug, names.get(c.parent_id, ""), c.product_count, "yes" if c.active else "no"],
            "edit_url": f"/admin/categories/{c.id}/edit",
            "delete_url": f"/admin/categories/{c.id}/delete",
        }
        for c in items
    ]
    columns = [("name", "Name"), ("slug", "Slug"), ("parent", "Parent"), ("products", "Products"), ("active", "Active")]
    return _list_page(request, "Categories", columns, rows, "/admin/categories/new")


@router.get("/categories/new", response_class=HTMLResponse)
async def new_category(
    request: Request,
    admin: Admin = Depends(require_permission("category.manage")),
    categories: CategoryService = Depends(get_category_service),
) -> HTMLResponse:
    fields = _category_fields(await categories.list_categories(), {})
    return render_form(request, "New category", "/admin/categories", fields, cancel_url="/admin/categories")


@router.post("/categories", response_class=HTMLResponse)
async def create_category(
    request: Request,
    admin: Admin = Depends(require_permission("category.manage")),
    categories: CategoryService = Depends(get_category_service),
) -> Response:
    data = await read_form(request)
    try:
        category = await categories.create(CreateCategoryRequest.from_request(data), admin_id=admin.id)
    except DomainError as e:
        fields = _category_fields(await categories.list_categories(), data)
        errors = e.errors if isinstance(e, ValidationError) else {}
        return render_form(
            request, "New category", "/admin/categories", fields, errors, e.message, "/admin/categories"
        )
    return redirect("/admin/categories", f"Category '{category.name}' created.")


@router.get("/categories/{category_id}/edit", response_class=HTMLResponse)
async def edit_category(
    category_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("category.manage")),
    categories: CategoryService = Depends(get_category_service),
) -> HTMLResponse:
    category = await categories.get_category(category_id)
    values = {
        "name": category.name,
        "slug": category.slug,
        "icon": category.icon,
        "parent_id": category.parent_id,
        "sort_order": category.sort_order,
        "active": category.active,
    }
    fields = _category_fields(await categories.list_categories(), values, exclude_id=category_id)
    return render_form(
        request, f"Edit {category.name}", f"/admin/categories/{category_id}", fields, cancel_url="/admin/categories"
    )


@router.post("/categories/{category_id}", response_class=HTMLResponse)
async def update_category(
    category_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("category.manage")),
    categories: CategoryService = Depends(get_category_service),
) -> Response:
    data = await read_form(request)
    try:
        category = await categories.update(UpdateCategoryRequest.from_request(category_id, data), admin_id=admin.id)
    except DomainError as e:
        fields = _category_fields(await categories.list_categories(), data, exclude_id=category_id)
        errors = e.errors if isinstance(e, ValidationError) else {}
        return render_form(
            request, "Edit category", f"/admin/categories/{category_id}", fields, errors, e.message, "/admin/categories"
        )
    return redirect("/admin/categories", f"Category '{category.name}' updated.")


@router.post("/categories/{category_id}/delete")
async def delete_category(
    category_id: int,
    admin: Admin = Depends(require_permission("category.manage")),
    categories: CategoryService = Depends(get_category_service),
) -> Response:
    try:
        await categories.delete(category_id, admin_id=admin.id)
    except DomainError as e:
        return redirect("/admin/categories", e.message, "error")
    return redirect("/admin/categories", "Category deleted.")


# ============================================================================
# Links
# ============================================================================


def _link_fields(marketplaces: list[MarketplaceResponse], values: dict[str, Any]) -> list[FormField]:
    return [
        FormField(
            "marketplace_id",
            "Marketplace",
            type="select",
            value=values.get("marketplace_id"),
            options=[(m.id, m.name) for m in marketplaces],
            required=True,
        ),
        FormField("store_name", "Store name", value=values.get("store_name"), required=True),
        FormField("url", "URL", type="url", value=values.get("url"), required=True),
        FormField("price", "Price", type="number", value=values.get("price"), required=True),
        FormField("rating", "Rating", type="number", value=values.get("rating"), help="0 to 5"),
        FormField("sold_count", "Sold", type="number", value=values.get("sold_count", 0)),
        FormField("active", "Active", type="checkbox", value=values.get("active", True)),
    ]


def _link_values(link: LinkResponse) -> dict[str, Any]:
    return {
        "marketplace_id": link.marketplace.id if link.marketplace else None,
        "store_name": link.store_name,
        "url": link.url,
        "price": link.price,
        "rating": link.rating,
        "sold_count": link.sold_count,
        "active": link.active,
    }


@router.get("/products/{product_id}/links/new", response_class=HTMLResponse)
async def new_link(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("link.manage")),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    marketplaces: MarketplaceService = Depends(get_marketplace_service),
) -> HTMLResponse:
    product = await orchestrator.get_product(product_id, admin_mode=True)
    fields = _link_fields(marketplaces.list_marketplaces(active_only=True), {})
    return render_form(
        request,
        f"New link for {product.name}",
        f"/admin/products/{product_id}/links",
        fields,
        cancel_url=f"/admin/products/{product_id}",
    )


@router.post("/products/{product_id}/links", response_class=HTMLResponse)
async def create_link(
    product_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("link.manage")),
    links: LinkService = Depends(get_link_service),
    marketplaces: MarketplaceService = Depends(get_marketplace_service),
) -> Response:
    data = await read_form(request)
    try:
        await links.create(CreateLinkRequest.from_request({**data, "product_id": product_id}), admin_id=admin.id)
    except ValidationError as e:
        fields = _link_fields(marketplaces.list_marketplaces(active_only=True), data)
        return render_form(
            request,
            "New link",
            f"/admin/products/{product_id}/links",
            fields,
            e.errors,
            e.message,
            f"/admin/products/{product_id}",
        )
    except DomainError as e:
        return redirect(f"/admin/products/{product_id}", e.message, "error")
    return redirect(f"/admin/products/{product_id}", "Link added.")


@router.get("/links/{link_id}/edit", response_class=HTMLResponse)
async def edit_link(
    link_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("link.manage")),
    links: LinkService = Depends(get_link_service),
    marketplaces: MarketplaceService = Depends(get_marketplace_service),
) -> HTMLResponse:
    link = links.get_link(link_id)
    fields = _link_fields(marketplaces.list_marketplaces(), _link_values(link))
    return render_form(
        request,
        f"Edit link: {link.store_name}",
        f"/admin/links/{link_id}",
        fields,
        cancel_url=f"/admin/products/{link.product_id}",
    )


@router.post("/links/{link_id}", response_class=HTMLResponse)
async def update_link(
    link_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("link.manage")),
    links: LinkService = Depends(get_link_service),
    marketplaces: MarketplaceService = Depends(get_marketplace_service),
) -> Response:
    data = await read_form(request)
    current = links.get_link(link_id)
    try:
        link = await links.update(UpdateLinkRequest.from_request(link_id, data), admin_id=admin.id)
    except ValidationError as e:
        fields = _link_fields(marketplaces.list_marketplaces(), {**_link_values(current), **data})
        return render_form(
            request,
            "Edit link",
            f"/admin/links/{link_id}",
            fields,
            e.errors,
            e.message,
            f"/admin/products/{current.product_id}",
        )
    except DomainError as e:
        return redirect(f"/admin/products/{current.product_id}", e.message, "error")
    return redirect(f"/admin/products/{link.product_id}", "Link updated.")


@router.post("/links/{link_id}/delete")
async def delete_link(
    link_id: int,
    admin: Admin = Depends(require_permission("link.manage")),
    links: LinkService = Depends(get_link_service),
) -> Response:
    link = links.get_link(link_id)
    links.delete(link_id, admin_id=admin.id)
    return redirect(f"/admin/products/{link.product_id}", "Link removed.")


# ============================================================================
# Marketplaces
# ============================================================================


def _marketplace_fields(values: dict[str, Any]) -> list[FormField]:
    return [
        FormField("name", "Name", value=values.get("name"), required=True),
        FormField("slug", "Slug", value=values.get("slug")),
        FormField("icon", "Icon", value=values.get("icon")),
        FormField("color", "Color", type="color", value=values.get("color", "#64748b")),
        FormField("active", "Active", type="checkbox", value=values.get("active", True)),
    ]


@router.get("/marketplaces", response_class=HTMLResponse)
async def list_marketplaces(
    request: Request,
    admin: Admin = Depends(require_permission("marketplace.manage")),
    marketplaces: MarketplaceService = Depends(get_marketplace_service),
) -> HTMLResponse:
    rows = [
        {
            "cells": [m.name, m.slug, m.color, "yes" if m.active else "no"],
            "edit_url": f"/admin/marketplaces/{m.id}/edit",
            "delete_url": f"/admin/marketplaces/{m.id}/delete",
        }
        for m in marketplaces.list_marketplaces()
    ]
    columns = [("name", "Name"), ("slug", "Slug"), ("color", "Color"), ("active", "Active")]
    return _list_page(request, "Marketplaces", columns, rows, "/admin/marketplaces/new")


@router.get("/marketplaces/new", response_class=HTMLResponse)
async def new_marketplace(
    request: Request,
    admin: Admin = Depends(require_permission("marketplace.manage")),
) -> HTMLResponse:
    return render_form(
        request, "New marketplace", "/admin/marketplaces", _marketplace_fields({}), cancel_url="/admin/marketplaces"
    )


@router.post("/marketplaces", response_class=HTMLResponse)
async def create_marketplace(
    request: Request,
    admin: Admin = Depends(require_permission("marketplace.manage")),
    marketplaces: MarketplaceService = Depends(get_marketplace_service),
) -> Response:
    data = await read_form(request)
    try:
        marketplace = marketplaces.create(CreateMarketplaceRequest.from_request(data), admin_id=admin.id)
    except DomainError as e:
        errors = e.errors if isinstance(e, ValidationError) else {}
        return render_form(
            request,
            "New marketplace",
            "/admin/marketplaces",
            _marketplace_fields(data),
            errors,
            e.message,
            "/admin/marketplaces",
        )
    return redirect("/admin/marketplaces", f"Marketplace '{marketplace.name}' created.")


@router.get("/marketplaces/{marketplace_id}/edit", response_class=HTMLResponse)
async def edit_marketplace(
    marketplace_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("marketplace.manage")),
    marketplaces: MarketplaceService = Depends(get_marketplace_service),
) -> HTMLResponse:
    marketplace = marketplaces.get_marketplace(marketplace_id)
    values = {
        "name": marketplace.name,
        "slug": marketplace.slug,
        "icon": marketplace.icon,
        "color": marketplace.color,
        "active": marketplace.active,
    }
    return render_form(
        request,
        f"Edit {marketplace.name}",
        f"/admin/marketplaces/{marketplace_id}",
        _marketplace_fields(values),
        cancel_url="/admin/marketplaces",
    )


@router.post("/marketplaces/{marketplace_id}", response_class=HTMLResponse)
async def update_marketplace(
    marketplace_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("marketplace.manage")),
    marketplaces: MarketplaceService = Depends(get_marketplace_service),
) -> Response:
    data = await read_form(request)
    try:
        marketplaces.update(marketplace_id, CreateMarketplaceRequest.from_request(data), admin_id=admin.id)
    except DomainError as e:
        errors = e.errors if isinstance(e, ValidationError) else {}
        return render_form(
            request,
            "Edit marketplace",
            f"/admin/marketplaces/{marketplace_id}",
            _marketplace_fields(data),
            errors,
            e.message,
            "/admin/marketplaces",
        )
    return redirect("/admin/marketplaces", "Marketplace updated.")


@router.post("/marketplaces/{marketplace_id}/delete")
async def delete_marketplace(
    marketplace_id: int,
    admin: Admin = Depends(require_permission("marketplace.manage")),
    marketplaces: MarketplaceService = Depends(get_marketplace_service),
) -> Response:
    try:
        marketplaces.delete(marketplace_id, admin_id=admin.id)
    except DomainError as e:
        return redirect("/admin/marketplaces", e.message, "error")
    return redirect("/admin/marketplaces", "Marketplace deleted.")


# ============================================================================
# Badges
# ============================================================================


def _badge_fields(values: dict[str, Any]) -> list[FormField]:
    return [
        FormField("label", "Label", value=values.get("label"), required=True),
        FormField("color", "Color", type="color", value=values.get("color", "#0ea5e9")),
    ]


@router.get("/badges", response_class=HTMLResponse)
async def list_badges(
    request: Request,
    admin: Admin = Depends(require_permission("badge.manage")),
    badges: BadgeService = Depends(get_badge_service),
) -> HTMLResponse:
    rows = [
        {
            "cells": [b.label, b.color],
            "edit_url": f"/admin/badges/{b.id}/edit",
            "delete_url": f"/admin/badges/{b.id}/delete",
        }
        for b in badges.list_badges()
    ]
    return _list_page(request, "Badges", [("label", "Label"), ("color", "Color")], rows, "/admin/badges/new")


@router.get("/badges/new", response_class=HTMLResponse)
async def new_badge(
    request: Request,
    admin: Admin = Depends(require_permission("badge.manage")),
) -> HTMLResponse:
    return render_form(request, "New badge", "/admin/badges", _badge_fields({}), cancel_url="/admin/badges")


@router.post("/badges", response_class=HTMLResponse)
async def create_badge(
    request: Request,
    admin: Admin = Depends(require_permission("badge.manage")),
    badges: BadgeService = Depends(get_badge_service),
) -> Response:
    data = await read_form(request)
    try:
        badge = badges.create(CreateBadgeRequest.from_request(data), admin_id=admin.id)
    except ValidationError as e:
        return render_form(
            request, "New badge", "/admin/badges", _badge_fields(data), e.errors, e.message, "/admin/badges"
        )
    return redirect("/admin/badges", f"Badge '{badge.label}' created.")


@router.get("/badges/{badge_id}/edit", response_class=HTMLResponse)
async def edit_badge(
    badge_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("badge.manage")),
    badges: BadgeService = Depends(get_badge_service),
) -> HTMLResponse:
    badge = badges.get_badge(badge_id)
    return render_form(
        request,
        f"Edit {badge.label}",
        f"/admin/badges/{badge_id}",
        _badge_fields({"label": badge.label, "color": badge.color}),
        cancel_url="/admin/badges",
    )


@router.post("/badges/{badge_id}", response_class=HTMLResponse)
async def update_badge(
    badge_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("badge.manage")),
    badges: BadgeService = Depends(get_badge_service),
) -> Response:
    data = await read_form(request)
    try:
        badges.update(badge_id, CreateBadgeRequest.from_request(data), admin_id=admin.id)
    except ValidationError as e:
        return render_form(
            request, "Edit badge", f"/admin/badges/{badge_id}", _badge_fields(data), e.errors, e.message, "/admin/badges"
        )
    except DomainError as e:
        return redirect("/admin/badges", e.message, "error")
    return redirect("/admin/badges", "Badge updated.")


@router.post("/badges/{badge_id}/delete")
async def delete_badge(
    badge_id: int,
    admin: Admin = Depends(require_permission("badge.manage")),
    badges: BadgeService = Depends(get_badge_service),
) -> Response:
    try:
        badges.delete(badge_id, admin_id=admin.id)
    except DomainError as e:
        return redirect("/admin/badges", e.message, "error")
    return redirect("/admin/badges", "Badge deleted.")
