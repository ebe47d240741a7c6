"""
Product endpoints.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.api.dependencies import get_current_user
from inventory_api.api.responses import NOT_FOUND, VALIDATION_FAILED, Tags, default_error_responses
from inventory_api.api.utils import read_payload
from inventory_api.core.config import settings
from inventory_api.db.session import get_db
from inventory_api.schemas.auth import MessageResponse
from inventory_api.schemas.products import CategoryNames, ProductEnvelope, ProductPage
from inventory_api.services.products import ProductQuery, ProductService

router = APIRouter(
    prefix="/products",
    tags=[Tags.PRODUCTS],
    dependencies=[Depends(get_current_user)],
    responses=default_error_responses,
)


def get_product_service(db: AsyncSession = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_product_query(
    search: Optional[str] = Query(None, description="Case-insensitive substring of the product name"),
    category: Optional[str] = Query(None, description="Exact category name"),
    min_price: Optional[Decimal] = Query(None, allow_inf_nan=False, description="Lowest price, inclusive"),
    max_price: Optional[Decimal] = Query(None, allow_inf_nan=False, description="Highest price, inclusive"),
    sort_by: Optional[str] = Query(None, description="One of price, rating, name, created_at"),
    sort_order: str = Query("desc", description="asc or desc"),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, description="Page size"),
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
) -> ProductQuery:
    return ProductQuery(
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        sort_order=sort_order,
        per_page=per_page,
        page=page,
    )


@router.get("", response_model=ProductPage, summary="Search, filter, sort and paginate products")
async def list_products(
    params: ProductQuery = Depends(get_product_query),
    service: ProductService = Depends(get_product_service),
) -> Any:
    return await service.list_products(params)


@router.get("/categories", response_model=CategoryNames, summary="Category names used by products")
async def list_product_categories(service: ProductService = Depends(get_product_service)) -> Any:
    """Distinct category names that at least one product belongs to, for filter dropdowns."""
    return {"categories": await service.list_category_names()}


@router.post(
    "",
    response_model=ProductEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
    responses=VALIDATION_FAILED,
)
async def create_product(request: Request, service: ProductService = Depends(get_product_service)) -> Any:
    """
    Create a product.

    Send JSON, or ``multipart/form-data`` when uploading an ``image`` file.
    """
    payload, image = await read_payload(request)
    product = await service.create_product(payload, image=image)
    return {"message": "Product created successfully", "product": product}


@router.get("/{product_id}", response_model=ProductEnvelope, summary="Get a product", responses=NOT_FOUND)
async def get_product(
    product_id: int = Path(..., description="Product ID"),
    service: ProductService = Depends(get_product_service),
) -> Any:
    return {"product": await service.get_product(product_id)}


@router.api_route(
    "/{product_id}",
    methods=["PUT", "PATCH"],
    response_model=ProductEnvelope,
    summary="Update a product",
    responses={**NOT_FOUND, **VALIDATION_FAILED},
)
async def update_product(
    request: Request,
    product_id: int = Path(..., description="Product ID"),
    service: ProductService = Depends(get_product_service),
) -> Any:
    """Update the fields that are sent; a new ``image`` file replaces the stored one."""
    payload, image = await read_payload(request)
    product = await service.update_product(product_id, payload, image=image)
    return {"message": "Product updated successfully", "product": product}


@router.delete("/{product_id}", response_model=MessageResponse, summary="Delete a product", responses=NOT_FOUND)
async def delete_product(
    product_id: int = Path(..., description="Product ID"),
    service: ProductService = Depends(get_product_service),
) -> Dict[str, str]:
    await service.delete_product(product_id)
    return {"message": "Product deleted successfully"}
