"""Public product API endpoints.

Provides:
- GET /api/products - published products with filters, sort and paging
- GET /api/products/search - keyword search over the published catalog
- GET /api/products/{slug} - product detail with price comparison
"""

from fastapi import APIRouter, Depends, Query, Request

from devdaily.api.dependencies import get_orchestrator
from devdaily.api.schemas import ApiResponse
from devdaily.application.product import ProductOrchestrator
from devdaily.application.response_formatter import ResponseFormatter
from devdaily.dtos.queries import PUBLIC_CONSTRAINTS, ProductQuery

router = APIRouter(prefix="/api/products", tags=["Products"])

# Query parameters visitors may not set
RESERVED_PARAMS = ("status", "admin_mode", "include_trashed", "only_trashed")


def public_query(request: Request) -> ProductQuery:
    """Build the storefront query from the request's query string."""
    params = {key: value for key, value in request.query_params.items() if key not in RESERVED_PARAMS}
    for key in ("category_ids", "badge_ids"):
        values = request.query_params.getlist(key)
        if len(values) > 1:
            params[key] = values
    return ProductQuery.from_request(params).with_(**PUBLIC_CONSTRAINTS, has_active_links=True)


@router.get("", response_model=ApiResponse, summary="List products")
async def list_products(
    request: Request,
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> dict:
    """List published products.

    Filters: ``search``, ``category_id``/``category_ids``, ``min_price``,
    ``max_price``, ``marketplace_id``, ``badge_ids``. Sort with
    ``sort_by`` and ``sort_direction``; page with ``page``/``per_page``.
    """
    query = public_query(request)
    result = await orchestrator.list_products(query, admin_mode=False)
    return ResponseFormatter.paginated(
        result,
        [product.to_public_dict() for product in result.items],
        extra_meta={"filters": {"search": query.search, "category_ids": list(query.category_ids)}},
    )


@router.get("/search", response_model=ApiResponse, summary="Search products")
async def search_products(
    q: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> dict:
    products = await orchestrator.search_products(q, limit=limit, offset=offset)
    return ResponseFormatter.success(
        [product.to_public_dict() for product in products],
        meta={"keyword": q, "count": len(products)},
    )


@router.get("/{slug}", response_model=ApiResponse, summary="Product detail")
async def get_product(
    slug: str,
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> dict:
    detail = await orchestrator.get_product_by_slug(slug)
    return ResponseFormatter.success(detail.to_detail_dict())
