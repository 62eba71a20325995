"""Public category API endpoints."""

from fastapi import APIRouter, Depends

from devdaily.api.dependencies import get_category_service
from devdaily.api.schemas import ApiResponse
from devdaily.application.category_service import CategoryService
from devdaily.application.response_formatter import ResponseFormatter

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("", response_model=ApiResponse, summary="Category tree")
async def list_categories(service: CategoryService = Depends(get_category_service)) -> dict:
    """Active categories as a tree with product counts."""
    tree = await service.get_category_tree(active_only=True)
    return ResponseFormatter.success([category.to_dict() for category in tree])


@router.get("/{slug}", response_model=ApiResponse, summary="Category detail")
async def get_category(slug: str, service: CategoryService = Depends(get_category_service)) -> dict:
    category = await service.get_category_by_slug(slug)
    return ResponseFormatter.success(category.to_dict())
