"""Business logic for products."""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger
from sqlalchemy import Select, false, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inventory_api.core.config import settings
from inventory_api.core.exceptions import FieldErrors, InvalidReferenceError, NotFoundError, ValidationFailedError
from inventory_api.core.metrics import record_business_event
from inventory_api.db.models import Category, Product
from inventory_api.schemas.products import ProductCreate, ProductPage, ProductResponse, ProductUpdate
from inventory_api.services.categories import CategoryService
from inventory_api.services.storage import ImageUpload, delete_image, save_image, validate_image
from inventory_api.services.validation import (
    merge_errors,
    normalize_payload,
    parse_payload,
    raise_for_errors,
    unique_message,
    unique_violation_errors,
)

# Only these columns may be used for ordering; the request value is never used as a column name
SORTABLE_FIELDS = {
    "price": Product.price,
    "rating": Product.rating,
    "name": Product.name,
    "created_at": Product.created_at,
}


@dataclass
class ProductQuery:
    """
    Filter, sort and pagination parameters for listing products.

    All filters are optional and combined with AND.
    """

    search: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    sort_by: Optional[str] = None
    sort_order: str = "desc"
    per_page: int = settings.DEFAULT_PER_PAGE
    page: int = 1

    def __post_init__(self) -> None:
        if self.search is not None:
            self.search = self.search.strip() or None
        if self.category is not None:
            self.category = self.category.strip() or None
        self.sort_order = "asc" if (self.sort_order or "").lower() == "asc" else "desc"
        self.per_page = max(1, min(self.per_page, settings.MAX_PER_PAGE))
        self.page = max(1, self.page)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the search term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def apply_filters(query: Select, params: ProductQuery, category_id: Optional[int]) -> Select:
    """
    Add the WHERE clauses for ``params``.

    ``category_id`` is the resolved id of ``params.category``; when a category
    name was given but did not resolve, the query matches nothing.
    """
    if params.search:
        query = query.where(Product.name.ilike(f"%{escape_like(params.search)}%", escape="\\"))

    if params.category:
        if category_id is None:
            query = query.where(false())
        else:
            query = query.where(Product.category_id == category_id)

    if params.min_price is not None:
        query = query.where(Product.price >= params.min_price)

    if params.max_price is not None:
        query = query.where(Product.price <= params.max_price)

    return query


def apply_ordering(query: Select, params: ProductQuery) -> Select:
    """
    Add ORDER BY for ``params``.

    Without ``sort_by`` the newest products come first. A ``sort_by`` outside
    the allow-list is ignored and rows keep their id order.
    """
    if params.sort_by is None:
        return query.order_by(Product.created_at.desc(), Product.id.desc())

    column = SORTABLE_FIELDS.get(params.sort_by)
    if column is None:
        return query.order_by(Product.id.asc())

    if params.sort_order == "asc":
        return query.order_by(column.asc(), Product.id.asc())
    return query.order_by(column.desc(), Product.id.desc())


class ProductService:
    """Service for product-related operations."""

    def __init__(self, db: AsyncSession):
        """Initialize with database session."""
        self.db = db
        self.categories = CategoryService(db)

    async def _get_product(self, product_id: int) -> Product:
        query = (
            select(Product)
            .options(selectinload(Product.category))
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        product = (await self.db.execute(query)).scalar_one_or_none()
        if product is None:
            logger.warning(f"Product with ID {product_id} not found")
            raise NotFoundError("Product not found")
        return product

    async def _name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Product.id).where(Product.name == name)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        return (await self.db.execute(query.limit(1))).scalar_one_or_none() is not None

    async def _collect_errors(
        self,
        errors: FieldErrors,
        name: Any,
        raw_image: Any,
        image: Optional[ImageUpload],
        exclude_id: Optional[int] = None,
    ) -> FieldErrors:
        """Add the checks pydantic cannot do: name uniqueness and the uploaded file."""
        if "name" not in errors and isinstance(name, str):
            if await self._name_taken(name, exclude_id=exclude_id):
                errors = merge_errors(errors, {"name": unique_message("name")})

        if raw_image is not None:
            errors = merge_errors(errors, {"image": ["The image field must be an image."]})
        elif image is not None:
            image_errors = validate_image(image.filename, image.content)
            if image_errors:
                errors = merge_errors(errors, {"image": image_errors})

        return errors

    async def _resolve_category(self, name: str) -> int:
        category = await self.categories.get_category_by_name(name)
        if category is None:
            logger.warning(f"Unknown category {name!r}")
            raise InvalidReferenceError({"category": ["The selected category does not exist."]})
        return int(category.id)

    async def _commit(self, stored_image: Optional[str] = None, replaced_image: Optional[str] = None) -> None:
        """
        Commit the pending row changes together with their image files.

        ``stored_image`` was written for this request and is removed again if the
        commit fails. ``replaced_image`` is only removed once the commit succeeded.
        """
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            delete_image(stored_image)
            # A concurrent request stored the same name after our uniqueness check
            errors = unique_violation_errors(exc, ("name",))
            if errors:
                logger.warning(f"Product name taken concurrently: {exc.orig}")
                raise ValidationFailedError(errors) from exc
            raise
        except Exception:
            await self.db.rollback()
            delete_image(stored_image)
            raise

        delete_image(replaced_image)

    async def list_products(self, params: ProductQuery) -> ProductPage:
        """Get one page of products matching ``params``."""
        category_id: Optional[int] = None
        if params.category:
            category = await self.categories.get_category_by_name(params.category)
            category_id = int(category.id) if category is not None else None

        filtered = apply_filters(select(Product), params, category_id)

        count_query = select(func.count()).select_from(filtered.subquery())
        total = int((await self.db.execute(count_query)).scalar_one())

        page_query = (
            apply_ordering(filtered, params)
            .options(selectinload(Product.category))
            .offset(params.offset)
            .limit(params.per_page)
        )
        products = (await self.db.execute(page_query)).scalars().all()

        return ProductPage(
            data=[ProductResponse.from_product(product) for product in products],
            current_page=params.page,
            last_page=max(1, math.ceil(total / params.per_page)),
            per_page=params.per_page,
            total=total,
            from_=params.offset + 1 if products else None,
            to=params.offset + len(products) if products else None,
        )

    async def list_category_names(self) -> List[str]:
        """Distinct names of the categories that at least one product uses."""
        query = (
            select(Category.name)
            .join(Product, Product.category_id == Category.id)
            .distinct()
            .order_by(Category.name.asc())
        )
        return [name for name in (await self.db.execute(query)).scalars().all()]

    async def get_product(self, product_id: int) -> ProductResponse:
        """Get a specific product by ID."""
        return ProductResponse.from_product(await self._get_product(product_id))

    async def create_product(self, payload: Mapping[str, Any], image: Optional[ImageUpload] = None) -> ProductResponse:
        """Validate and create a new product, storing its image if one was uploaded."""
        cleaned = normalize_payload(payload, drop_empty=True)
        raw_image = cleaned.pop("image", None)

        data, errors = parse_payload(ProductCreate, cleaned)
        name = data.name if data is not None else cleaned.get("name")
        errors = await self._collect_errors(errors, name, raw_image, image)
        raise_for_errors(errors)
        assert data is not None

        category_id = await self._resolve_category(data.category)

        stored_image = save_image(image.filename, image.content) if image is not None else None

        product = Product(
            name=data.name,
            category_id=category_id,
            price=data.price,
            rating=data.rating if data.rating is not None else Decimal("0.00"),
            description=data.description,
            image=stored_image,
        )
        self.db.add(product)
        await self._commit(stored_image=stored_image)

        logger.info(f"Created new product with ID {product.id}")
        record_business_event("product_created")
        return ProductResponse.from_product(await self._get_product(product.id))

    async def update_product(
        self, product_id: int, payload: Mapping[str, Any], image: Optional[ImageUpload] = None
    ) -> ProductResponse:
        """
        Update an existing product.

        Only the fields present in ``payload`` change. A new image replaces the
        stored one; the previous file is removed before the new path is saved.
        """
        product = await self._get_product(product_id)

        cleaned = normalize_payload(payload, drop_empty=False)
        raw_image = cleaned.pop("image", None)

        data, errors = parse_payload(ProductUpdate, cleaned)
        name = data.name if data is not None else cleaned.get("name")
        errors = await self._collect_errors(errors, name, raw_image, image, exclude_id=product_id)
        raise_for_errors(errors)
        assert data is not None

        changes: Dict[str, Any] = {}
        for field in data.model_fields_set:
            value = getattr(data, field)
            if field == "category":
                changes["category_id"] = await self._resolve_category(value)
            elif field == "rating":
                changes["rating"] = value if value is not None else Decimal("0.00")
            else:
                changes[field] = value

        previous_image = product.image
        stored_image = save_image(image.filename, image.content) if image is not None else None
        if stored_image is not None:
            changes["image"] = stored_image

        for key, value in changes.items():
            setattr(product, key, value)
        await self._commit(stored_image=stored_image, replaced_image=previous_image if stored_image else None)

        logger.info(f"Updated product with ID {product.id}")
        record_business_event("product_updated")
        return ProductResponse.from_product(await self._get_product(product_id))

    async def delete_product(self, product_id: int) -> None:
        """Delete a product and its stored image."""
        product = await self._get_product(product_id)
        image = product.image

        await self.db.delete(product)
        await self._commit(replaced_image=image)

        logger.info(f"Deleted product with ID {product_id}")
        record_business_event("product_deleted")
