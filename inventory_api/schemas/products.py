"""
Pydantic schemas for the products resource.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator
from pydantic_core import PydanticCustomError

from inventory_api.services.storage import image_url

TWO_PLACES = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")


def quantize(value: Optional[Decimal]) -> Optional[Decimal]:
    """Round a decimal to the two fractional digits the database stores."""
    if value is None:
        return None
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class ProductCreate(BaseModel):
    """
    Schema for creating a new product.

    ``category`` is the category *name*; the service resolves it to an id.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Product name, unique")
    category: str = Field(..., min_length=1, max_length=255, description="Category name")
    price: Decimal = Field(..., ge=0, le=MAX_PRICE, allow_inf_nan=False, description="Product price")
    rating: Optional[Decimal] = Field(None, ge=0, le=5, allow_inf_nan=False, description="Rating from 0 to 5")
    description: Optional[str] = Field(None, description="Product description")

    @field_validator("name", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("price", "rating")
    @classmethod
    def round_to_cents(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return quantize(v)


class ProductUpdate(BaseModel):
    """
    Schema for updating an existing product. Only fields that were sent are applied.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Product name, unique")
    category: Optional[str] = Field(None, min_length=1, max_length=255, description="Category name")
    price: Optional[Decimal] = Field(None, ge=0, le=MAX_PRICE, allow_inf_nan=False, description="Product price")
    rating: Optional[Decimal] = Field(None, ge=0, le=5, allow_inf_nan=False, description="Rating from 0 to 5")
    description: Optional[str] = Field(None, description="Product description")

    @field_validator("name", "category", "price")
    @classmethod
    def reject_explicit_null(cls, v: Any) -> Any:
        # Only runs for values that were actually sent
        if v is None:
            raise PydanticCustomError("missing", "Field required")
        return v

    @field_validator("name", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("price", "rating")
    @classmethod
    def round_to_cents(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return quantize(v)


class ProductResponse(BaseModel):
    """
    Schema for product response.

    ``category`` and ``image_url`` are computed from the stored row when serializing.
    """

    id: int = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    category_id: Optional[int] = Field(None, description="Category ID")
    category: Optional[str] = Field(None, description="Category name")
    price: Decimal = Field(..., description="Product price")
    rating: Decimal = Field(Decimal("0.00"), description="Product rating")
    image: Optional[str] = Field(None, description="Stored image path")
    image_url: Optional[str] = Field(None, description="Public image URL")
    description: Optional[str] = Field(None, description="Product description")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": 1,
                    "name": "Laptop Pro 15",
                    "category_id": 1,
                    "category": "Electronics",
                    "price": "1299.99",
                    "rating": "4.50",
                    "image": "products/1767225600_laptop.png",
                    "image_url": "/storage/products/1767225600_laptop.png",
                    "description": "High-performance laptop",
                    "created_at": "2026-01-01T00:00:00Z",
                    "updated_at": "2026-01-01T00:00:00Z",
                }
            ]
        },
    }

    @classmethod
    def from_product(cls, product: Any) -> "ProductResponse":
        """Project a ``Product`` row (with its category loaded) into the API shape."""
        return cls(
            id=product.id,
            name=product.name,
            category_id=product.category_id,
            category=product.category.name if product.category is not None else None,
            price=product.price,
            rating=product.rating if product.rating is not None else Decimal("0.00"),
            image=product.image,
            image_url=image_url(product.image),
            description=product.description,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    @field_serializer("price", "rating")
    def serialize_money(self, value: Decimal) -> str:
        return f"{quantize(Decimal(value)):.2f}"


class ProductEnvelope(BaseModel):
    """Single product, optionally with a status message."""

    message: Optional[str] = None
    product: ProductResponse


class ProductPage(BaseModel):
    """
    One page of products, in the paginator shape the frontend consumes.
    """

    data: List[ProductResponse]
    current_page: int
    last_page: int
    per_page: int
    total: int
    from_: Optional[int] = Field(None, alias="from", serialization_alias="from")
    to: Optional[int] = None

    model_config = {"populate_by_name": True}


class CategoryNames(BaseModel):
    """Distinct category names referenced by products."""

    categories: List[str]
