"""
Pydantic schemas for the categories resource.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class CategoryBase(BaseModel):
    """
    Base schema for category data.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Category name, unique")
    description: Optional[str] = Field(None, max_length=500, description="Category description")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class CategoryCreate(CategoryBase):
    """
    Schema for creating a new category.
    """

    pass


class CategoryUpdate(CategoryBase):
    """
    Schema for updating a category. The name stays required, as on create.
    """

    pass


class CategoryResponse(BaseModel):
    """
    Schema for category response.
    """

    id: int = Field(..., description="Category ID")
    name: str = Field(..., description="Category name")
    description: Optional[str] = Field(None, description="Category description")
    products_count: int = Field(0, description="Number of products in this category")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": 1,
                    "name": "Electronics",
                    "description": "Phones, laptops and accessories",
                    "products_count": 3,
                    "created_at": "2026-01-01T00:00:00Z",
                    "updated_at": "2026-01-01T00:00:00Z",
                }
            ]
        },
    }

    @classmethod
    def from_category(cls, category: Any, products_count: int = 0) -> "CategoryResponse":
        """Build the response from a ``Category`` row and its live product count."""
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            products_count=products_count,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


class CategoryEnvelope(BaseModel):
    """Single category, optionally with a status message."""

    message: Optional[str] = None
    category: CategoryResponse


class CategoryList(BaseModel):
    """All categories ordered by name."""

    categories: List[CategoryResponse]
