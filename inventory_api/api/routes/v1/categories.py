"""
Category endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.api.dependencies import get_current_user
from inventory_api.api.responses import DELETE_BLOCKED, NOT_FOUND, VALIDATION_FAILED, Tags, default_error_responses
from inventory_api.api.utils import read_payload
from inventory_api.db.session import get_db
from inventory_api.schemas.auth import MessageResponse
from inventory_api.schemas.categories import CategoryEnvelope, CategoryList
from inventory_api.services.categories import CategoryService

router = APIRouter(
    prefix="/categories",
    tags=[Tags.CATEGORIES],
    dependencies=[Depends(get_current_user)],
    responses=default_error_responses,
)


def get_category_service(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


@router.get("", response_model=CategoryList, summary="List categories with product counts")
async def list_categories(service: CategoryService = Depends(get_category_service)) -> Any:
    """All categories ordered by name, each annotated with its number of products."""
    return {"categories": await service.list_categories()}


@router.post(
    "",
    response_model=CategoryEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
    responses=VALIDATION_FAILED,
)
async def create_category(request: Request, service: CategoryService = Depends(get_category_service)) -> Any:
    """Create a category. Accepts JSON or form data with ``name`` and ``description``."""
    payload, _ = await read_payload(request)
    category = await service.create_category(payload)
    return {"message": "Category created successfully", "category": category}


@router.get("/{category_id}", response_model=CategoryEnvelope, summary="Get a category", responses=NOT_FOUND)
async def get_category(
    category_id: int = Path(..., description="Category ID"),
    service: CategoryService = Depends(get_category_service),
) -> Any:
    return {"category": await service.get_category(category_id)}


@router.api_route(
    "/{category_id}",
    methods=["PUT", "PATCH"],
    response_model=CategoryEnvelope,
    summary="Update a category",
    responses={**NOT_FOUND, **VALIDATION_FAILED},
)
async def update_category(
    request: Request,
    category_id: int = Path(..., description="Category ID"),
    service: CategoryService = Depends(get_category_service),
) -> Any:
    payload, _ = await read_payload(request)
    category = await service.update_category(category_id, payload)
    return {"message": "Category updated successfully", "category": category}


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    summary="Delete a category without products",
    responses={**NOT_FOUND, **DELETE_BLOCKED},
)
async def delete_category(
    category_id: int = Path(..., description="Category ID"),
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, str]:
    """Delete a category. Refused with 400 while products still reference it."""
    await service.delete_category(category_id)
    return {"message": "Category deleted successfully"}
