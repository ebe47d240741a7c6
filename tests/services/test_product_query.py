"""
Tests for the product list query builder.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.dialects import sqlite

from inventory_api.core.config import settings
from inventory_api.db.models import Product
from inventory_api.services.products import ProductQuery, apply_filters, apply_ordering, escape_like


def render(query) -> str:
    return str(query.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))


def test_defaults() -> None:
    params = ProductQuery()

    assert params.per_page == settings.DEFAULT_PER_PAGE
    assert params.page == 1
    assert params.sort_order == "desc"
    assert params.offset == 0


def test_normalization() -> None:
    params = ProductQuery(search="  ", category=" Electronics ", sort_order="ASC", per_page=1000, page=3)

    assert params.search is None
    assert params.category == "Electronics"
    assert params.sort_order == "asc"
    assert params.per_page == settings.MAX_PER_PAGE
    assert params.offset == 2 * settings.MAX_PER_PAGE


def test_unknown_sort_order_means_descending() -> None:
    assert ProductQuery(sort_order="up").sort_order == "desc"


def test_escape_like() -> None:
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


def test_no_filters() -> None:
    sql = render(apply_filters(select(Product), ProductQuery(), None))

    assert "WHERE" not in sql


def test_price_filters() -> None:
    params = ProductQuery(min_price=Decimal("100"), max_price=Decimal("200"))
    sql = render(apply_filters(select(Product), params, None))

    assert "products.price >= 100" in sql
    assert "products.price <= 200" in sql


def test_unresolved_category_matches_nothing() -> None:
    sql = render(apply_filters(select(Product), ProductQuery(category="Ghosts"), None))

    assert "0 = 1" in sql or "false" in sql.lower()


def test_resolved_category() -> None:
    sql = render(apply_filters(select(Product), ProductQuery(category="Electronics"), 4))

    assert "products.category_id = 4" in sql


def test_default_ordering() -> None:
    sql = render(apply_ordering(select(Product), ProductQuery()))

    assert "ORDER BY products.created_at DESC, products.id DESC" in sql


def test_allowed_sort_field() -> None:
    sql = render(apply_ordering(select(Product), ProductQuery(sort_by="price", sort_order="asc")))

    assert "ORDER BY products.price ASC, products.id ASC" in sql


def test_disallowed_sort_field_falls_back_to_id() -> None:
    sql = render(apply_ordering(select(Product), ProductQuery(sort_by="name; DROP TABLE products")))

    assert "ORDER BY products.id ASC" in sql
    assert "DROP" not in sql
