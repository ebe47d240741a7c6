"""
Tests for the category endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from inventory_api.db.models import Category
from inventory_api.services.categories import CategoryService

pytestmark = pytest.mark.asyncio


async def test_list_categories_sorted_by_name_with_counts(client: AsyncClient, make_category, make_product) -> None:
    furniture = await make_category("Furniture")
    electronics = await make_category("Electronics")
    await make_category("Appliances")
    await make_product("Laptop", category=electronics)
    await make_product("Mouse", category=electronics)
    await make_product("Chair", category=furniture)

    response = await client.get("/api/categories")

    assert response.status_code == 200
    categories = response.json()["categories"]
    assert [c["name"] for c in categories] == ["Appliances", "Electronics", "Furniture"]
    assert [c["products_count"] for c in categories] == [0, 2, 1]


async def test_create_category(client: AsyncClient) -> None:
    response = await client.post("/api/categories", json={"name": "Sports", "description": "Gym gear"})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Category created successfully"
    assert body["category"]["name"] == "Sports"
    assert body["category"]["description"] == "Gym gear"
    assert body["category"]["products_count"] == 0
    assert isinstance(body["category"]["id"], int)


async def test_create_category_accepts_form_data(client: AsyncClient) -> None:
    response = await client.post("/api/categories", data={"name": "Garden"})

    assert response.status_code == 201
    assert response.json()["category"]["name"] == "Garden"
    assert response.json()["category"]["description"] is None


async def test_create_category_requires_name(client: AsyncClient, session_factory) -> None:
    response = await client.post("/api/categories", json={"description": "No name"})

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["errors"]["name"] == ["The name field is required."]

    async with session_factory() as session:
        assert (await session.execute(select(func.count(Category.id)))).scalar_one() == 0


async def test_create_category_reports_all_fields(client: AsyncClient) -> None:
    response = await client.post("/api/categories", json={"name": "x" * 256, "description": "d" * 501})

    assert response.status_code == 422
    errors = response.json()["errors"]
    assert errors["name"] == ["The name field must not be greater than 255 characters."]
    assert errors["description"] == ["The description field must not be greater than 500 characters."]


async def test_create_category_duplicate_name(client: AsyncClient, make_category) -> None:
    await make_category("Electronics")

    response = await client.post("/api/categories", json={"name": "Electronics"})

    assert response.status_code == 422
    assert response.json()["errors"]["name"] == ["The name has already been taken."]


async def name_never_taken(self, name: str, exclude_id=None) -> bool:
    return False


async def test_create_category_name_taken_concurrently(
    client: AsyncClient, make_category, monkeypatch, session_factory
) -> None:
    await make_category("Electronics")
    monkeypatch.setattr(CategoryService, "_name_taken", name_never_taken)

    response = await client.post("/api/categories", json={"name": "Electronics"})

    assert response.status_code == 422
    assert response.json() == {
        "message": "Validation failed",
        "errors": {"name": ["The name has already been taken."]},
    }
    async with session_factory() as session:
        assert (await session.execute(select(func.count(Category.id)))).scalar_one() == 1


async def test_update_category_name_taken_concurrently(client: AsyncClient, make_category, monkeypatch) -> None:
    await make_category("Electronics")
    furniture = await make_category("Furniture")
    monkeypatch.setattr(CategoryService, "_name_taken", name_never_taken)

    response = await client.put(f"/api/categories/{furniture.id}", json={"name": "Electronics"})

    assert response.status_code == 422
    assert response.json()["errors"] == {"name": ["The name has already been taken."]}
    assert (await client.get(f"/api/categories/{furniture.id}")).json()["category"]["name"] == "Furniture"


async def test_create_category_name_is_case_sensitive(client: AsyncClient, make_category) -> None:
    await make_category("Electronics")

    response = await client.post("/api/categories", json={"name": "electronics"})

    assert response.status_code == 201


async def test_get_category(client: AsyncClient, make_category, make_product) -> None:
    category = await make_category("Electronics", "Gadgets")
    await make_product("Laptop", category=category)

    response = await client.get(f"/api/categories/{category.id}")

    assert response.status_code == 200
    body = response.json()["category"]
    assert body["name"] == "Electronics"
    assert body["description"] == "Gadgets"
    assert body["products_count"] == 1


async def test_get_category_not_found(client: AsyncClient) -> None:
    response = await client.get("/api/categories/999")

    assert response.status_code == 404
    assert response.json() == {"message": "Category not found"}


async def test_update_category(client: AsyncClient, make_category) -> None:
    category = await make_category("Electronics")

    response = await client.put(
        f"/api/categories/{category.id}", json={"name": "Electronic Devices", "description": "All devices"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Category updated successfully"
    assert body["category"]["name"] == "Electronic Devices"
    assert body["category"]["description"] == "All devices"


async def test_update_category_keeps_own_name(client: AsyncClient, make_category) -> None:
    category = await make_category("Electronics")

    response = await client.put(f"/api/categories/{category.id}", json={"name": "Electronics", "description": "New"})

    assert response.status_code == 200
    assert response.json()["category"]["description"] == "New"


async def test_update_category_name_taken_by_other(client: AsyncClient, make_category) -> None:
    await make_category("Electronics")
    furniture = await make_category("Furniture")

    response = await client.put(f"/api/categories/{furniture.id}", json={"name": "Electronics"})

    assert response.status_code == 422
    assert "name" in response.json()["errors"]


async def test_update_category_not_found_before_validation(client: AsyncClient) -> None:
    response = await client.put("/api/categories/999", json={})

    assert response.status_code == 404


async def test_delete_category_without_products(client: AsyncClient, make_category, session_factory) -> None:
    category = await make_category("Empty")

    response = await client.delete(f"/api/categories/{category.id}")

    assert response.status_code == 200
    assert response.json() == {"message": "Category deleted successfully"}
    async with session_factory() as session:
        assert await session.get(Category, category.id) is None


async def test_delete_category_with_products_is_blocked(
    client: AsyncClient, make_category, make_product, session_factory
) -> None:
    category = await make_category("Electronics")
    await make_product("Laptop", category=category)
    await make_product("Mouse", category=category)

    response = await client.delete(f"/api/categories/{category.id}")

    assert response.status_code == 400
    assert response.json() == {
        "message": "Cannot delete category with existing products",
        "products_count": 2,
    }
    async with session_factory() as session:
        assert await session.get(Category, category.id) is not None


async def test_delete_category_not_found(client: AsyncClient) -> None:
    response = await client.delete("/api/categories/999")

    assert response.status_code == 404


async def test_categories_require_authentication(anon_client: AsyncClient) -> None:
    response = await anon_client.get("/api/categories")

    assert response.status_code == 401
    assert response.json() == {"message": "Unauthenticated."}
