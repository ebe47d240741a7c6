"""Business logic for categories."""

from typing import Any, List, Mapping, Optional, Tuple

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from inventory_api.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from inventory_api.core.metrics import record_business_event
from inventory_api.db.models import Category, Product
from inventory_api.schemas.categories import CategoryCreate, CategoryResponse, CategoryUpdate
from inventory_api.services.validation import (
    merge_errors,
    normalize_payload,
    parse_payload,
    raise_for_errors,
    unique_message,
    unique_violation_errors,
)


def products_count_expression() -> ColumnElement[int]:
    """Correlated subquery counting the products of the outer ``Category`` row."""
    return (
        select(func.count(Product.id))
        .where(Product.category_id == Category.id)
        .correlate(Category)
        .scalar_subquery()
        .label("products_count")
    )


class CategoryService:
    """Service for category-related operations."""

    def __init__(self, db: AsyncSession):
        """Initialize with database session."""
        self.db = db

    async def _get_with_count(self, category_id: int) -> Tuple[Category, int]:
        query = select(Category, products_count_expression()).where(Category.id == category_id)
        row = (await self.db.execute(query)).first()
        if row is None:
            logger.warning(f"Category with ID {category_id} not found")
            raise NotFoundError("Category not found")
        return row[0], int(row[1] or 0)

    async def _name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Category.id).where(Category.name == name)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        return (await self.db.execute(query.limit(1))).scalar_one_or_none() is not None

    async def _validate(self, schema: Any, payload: Mapping[str, Any], exclude_id: Optional[int] = None) -> Any:
        cleaned = normalize_payload(payload, drop_empty=True)
        data, errors = parse_payload(schema, cleaned)

        # Uniqueness is checked whenever the name itself is well formed
        name = data.name if data is not None else cleaned.get("name")
        if "name" not in errors and isinstance(name, str):
            if await self._name_taken(name, exclude_id=exclude_id):
                errors = merge_errors(errors, {"name": unique_message("name")})

        raise_for_errors(errors)
        return data

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            # A concurrent request stored the same name after our uniqueness check
            errors = unique_violation_errors(exc, ("name",))
            if errors:
                logger.warning(f"Category name taken concurrently: {exc.orig}")
                raise ValidationFailedError(errors) from exc
            raise

    async def get_category_by_name(self, name: str) -> Optional[Category]:
        """Look up a category by its exact name."""
        query = select(Category).where(Category.name == name)
        return (await self.db.execute(query)).scalar_one_or_none()

    async def list_categories(self) -> List[CategoryResponse]:
        """All categories ordered by name, each with its live product count."""
        query = select(Category, products_count_expression()).order_by(Category.name.asc())
        rows = (await self.db.execute(query)).all()
        return [CategoryResponse.from_category(category, int(count or 0)) for category, count in rows]

    async def get_category(self, category_id: int) -> CategoryResponse:
        """Get a specific category by ID."""
        category, count = await self._get_with_count(category_id)
        return CategoryResponse.from_category(category, count)

    async def create_category(self, payload: Mapping[str, Any]) -> CategoryResponse:
        """Validate and create a new category."""
        data: CategoryCreate = await self._validate(CategoryCreate, payload)

        category = Category(name=data.name, description=data.description)
        self.db.add(category)
        await self._commit()
        await self.db.refresh(category)

        logger.info(f"Created new category with ID {category.id}")
        record_business_event("category_created")
        return CategoryResponse.from_category(category, 0)

    async def update_category(self, category_id: int, payload: Mapping[str, Any]) -> CategoryResponse:
        """Update an existing category."""
        category, count = await self._get_with_count(category_id)
        data: CategoryUpdate = await self._validate(CategoryUpdate, payload, exclude_id=category_id)

        category.name = data.name
        category.description = data.description
        await self._commit()
        await self.db.refresh(category)

        logger.info(f"Updated category with ID {category.id}")
        record_business_event("category_updated")
        return CategoryResponse.from_category(category, count)

    async def delete_category(self, category_id: int) -> None:
        """Delete a category that no product references."""
        category, count = await self._get_with_count(category_id)

        if count > 0:
            logger.warning(f"Refusing to delete category {category_id}: {count} products attached")
            raise ConflictError(
                "Cannot delete category with existing products",
                extra={"products_count": count},
            )

        await self.db.delete(category)
        await self.db.commit()

        logger.info(f"Deleted category with ID {category_id}")
        record_business_event("category_deleted")
