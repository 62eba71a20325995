"""Storefront routes.

Every listing goes through ``ProductQuery.with_(**PUBLIC_CONSTRAINTS)``
so visitors only ever see published, non-trashed products whatever the
query string says.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from devdaily.api.dependencies import get_category_service, get_link_service, get_orchestrator
from devdaily.application.category_service import CategoryService
from devdaily.application.link_service import LinkService
from devdaily.application.product import ProductOrchestrator
from devdaily.domain.exceptions import NotFoundError, ValidationError
from devdaily.dtos.pagination import PaginatedResult
from devdaily.dtos.queries import ALLOWED_SORT_FIELDS, PUBLIC_CONSTRAINTS, ProductQuery
from devdaily.dtos.responses import ProductResponse
from devdaily.web.templating import templates

logger = structlog.get_logger()

router = APIRouter(include_in_schema=False)

HOME_PRODUCT_LIMIT = 12

STATIC_PAGES = {
    "about": "About",
    "privacy": "Privacy Policy",
    "terms": "Terms of Service",
}


def _not_found(error: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)


async def _list_public(
    orchestrator: ProductOrchestrator, query: ProductQuery
) -> tuple[PaginatedResult[ProductResponse], ProductQuery, str | None]:
    """Run a visitor query, dropping contradictory ranges instead of failing."""
    try:
        return await orchestrator.list_products(query), query, None
    except ValidationError as e:
        logger.info("Storefront query rejected", errors=e.errors)
        query = query.with_(min_price=None, max_price=None, date_from=None, date_to=None)
        return await orchestrator.list_products(query), query, e.message


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    categories: CategoryService = Depends(get_category_service),
) -> HTMLResponse:
    latest = await orchestrator.list_products(
        ProductQuery.for_public(sort_by="published_at", per_page=HOME_PRODUCT_LIMIT)
    )
    tree = await categories.get_category_tree(active_only=True)
    return templates.TemplateResponse(
        request,
        "pages/home.html",
        {"products": latest.items, "categories": tree},
    )


@router.get("/products", response_class=HTMLResponse)
@router.get("/search", response_class=HTMLResponse)
async def product_listing(
    request: Request,
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    categories: CategoryService = Depends(get_category_service),
) -> HTMLResponse:
    params = dict(request.query_params)
    category_ids = request.query_params.getlist("category_ids")
    if category_ids:
        params["category_ids"] = category_ids
    query = ProductQuery.from_request(params).with_(**PUBLIC_CONSTRAINTS)
    result, query, error = await _list_public(orchestrator, query)
    return templates.TemplateResponse(
        request,
        "pages/products.html",
        {
            "result": result,
            "query": query,
            "query_error": error,
            "categories": await categories.list_categories(active_only=True),
            "sort_fields": ALLOWED_SORT_FIELDS,
        },
    )


@router.get("/product/{slug}", response_class=HTMLResponse)
async def product_detail(
    slug: str,
    request: Request,
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> HTMLResponse:
    try:
        detail = await orchestrator.get_product_by_slug(slug, increment_view_count=True)
    except NotFoundError as e:
        raise _not_found(e) from e
    return templates.TemplateResponse(request, "pages/product.html", {"detail": detail})


@router.get("/category/{slug}", response_class=HTMLResponse)
async def category_page(
    slug: str,
    request: Request,
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
    categories: CategoryService = Depends(get_category_service),
) -> HTMLResponse:
    try:
        category = await categories.get_category_by_slug(slug)
    except NotFoundError as e:
        raise _not_found(e) from e
    query = ProductQuery.from_request(dict(request.query_params)).with_(
        **PUBLIC_CONSTRAINTS, category_ids=tuple(categories.category_scope(category.id))
    )
    result, query, error = await _list_public(orchestrator, query)
    return templates.TemplateResponse(
        request,
        "pages/category.html",
        {"category": category, "result": result, "query": query, "query_error": error},
    )


@router.get("/go/{link_id}")
async def go_to_link(link_id: int, links: LinkService = Depends(get_link_service)) -> RedirectResponse:
    """Count a click and redirect to the marketplace."""
    try:
        link = links.get_link(link_id)
    except NotFoundError as e:
        raise _not_found(e) from e
    if not link.active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link is no longer available")
    links.record_click(link_id)
    return RedirectResponse(url=link.url, status_code=status.HTTP_302_FOUND)


@router.get("/page/{slug}", response_class=HTMLResponse)
async def static_page(slug: str, request: Request) -> HTMLResponse:
    title = STATIC_PAGES.get(slug)
    if title is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return templates.TemplateResponse(request, f"pages/{slug}.html", {"title": title})
