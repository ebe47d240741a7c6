"""
Standardized API response models for OpenAPI documentation.
"""

from typing import Any, Dict, List, Optional

from fastapi import status
from pydantic import BaseModel, Field


class ErrorResponseModel(BaseModel):
    """Error body returned by every failing request."""

    message: str = Field(..., description="Human readable error message")
    errors: Optional[Dict[str, List[str]]] = Field(None, description="Violations per field")


class ConflictResponseModel(ErrorResponseModel):
    """Delete blocked by existing references."""

    products_count: int = Field(..., description="Number of products still in the category")


# Define tags for route categorization
class Tags:
    """API route tags for documentation grouping."""

    AUTH = "Auth"
    CATEGORIES = "Categories"
    HEALTH = "Health"
    PRODUCTS = "Products"


UNAUTHORIZED: Dict[int | str, Dict[str, Any]] = {
    status.HTTP_401_UNAUTHORIZED: {
        "model": ErrorResponseModel,
        "description": "Unauthorized – Invalid or missing token",
    },
}

NOT_FOUND: Dict[int | str, Dict[str, Any]] = {
    status.HTTP_404_NOT_FOUND: {
        "model": ErrorResponseModel,
        "description": "Not Found – No record with this id",
    },
}

VALIDATION_FAILED: Dict[int | str, Dict[str, Any]] = {
    status.HTTP_422_UNPROCESSABLE_ENTITY: {
        "model": ErrorResponseModel,
        "description": "Validation Error – One or more fields are invalid",
    },
}

DELETE_BLOCKED: Dict[int | str, Dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {
        "model": ConflictResponseModel,
        "description": "Bad Request – Category still has products",
    },
}

# Responses shared by every authenticated route
default_error_responses: Dict[int | str, Dict[str, Any]] = {
    **UNAUTHORIZED,
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "model": ErrorResponseModel,
        "description": "Internal Error – Unexpected server failure",
    },
}
