"""Seed demo data for development.

Run with ``python -m inventory_api.db.seed``. Existing rows are left untouched,
so the command can be repeated safely.
"""

import asyncio
from decimal import Decimal
from typing import Dict, List

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.logging import configure_logging
from inventory_api.core.security import get_password_hash
from inventory_api.db.models import Category, Product, User
from inventory_api.db.session import async_session_factory, create_tables, engine

DEMO_USER = {"name": "Admin", "email": "admin@example.com", "password": "password"}

DEMO_CATEGORIES: Dict[str, str] = {
    "Electronics": "Computers, peripherals and gadgets",
    "Furniture": "Office and home furniture",
    "Appliances": "Kitchen and household appliances",
    "Sports": "Sports and fitness equipment",
}

DEMO_PRODUCTS: List[Dict[str, str]] = [
    {
        "name": "Laptop Pro 15",
        "category": "Electronics",
        "price": "1299.99",
        "rating": "4.5",
        "description": "High-performance laptop with 16GB RAM and 512GB SSD",
    },
    {
        "name": "Wireless Mouse",
        "category": "Electronics",
        "price": "29.99",
        "rating": "4.2",
        "description": "Ergonomic wireless mouse with precision tracking",
    },
    {
        "name": "Office Chair",
        "category": "Furniture",
        "price": "249.99",
        "rating": "4.7",
        "description": "Comfortable ergonomic office chair with lumbar support",
    },
    {
        "name": "Desk Lamp LED",
        "category": "Furniture",
        "price": "45.99",
        "rating": "4.3",
        "description": "Adjustable LED desk lamp with touch controls",
    },
    {
        "name": "Coffee Maker",
        "category": "Appliances",
        "price": "89.99",
        "rating": "4.6",
        "description": "Programmable coffee maker with 12-cup capacity",
    },
    {
        "name": "Blender Pro",
        "category": "Appliances",
        "price": "129.99",
        "rating": "4.4",
        "description": "Powerful blender for smoothies and food processing",
    },
    {
        "name": "Yoga Mat",
        "category": "Sports",
        "price": "24.99",
        "rating": "4.1",
        "description": "Non-slip yoga mat with carrying strap",
    },
    {
        "name": "Adjustable Dumbbells",
        "category": "Sports",
        "price": "199.99",
        "rating": "4.8",
        "description": "Pair of adjustable dumbbells from 2 to 24 kg",
    },
]


async def seed_demo_data(db: AsyncSession) -> None:
    """Insert the demo user, categories and products that do not exist yet."""
    user = (await db.execute(select(User).where(User.email == DEMO_USER["email"]))).scalar_one_or_none()
    if user is None:
        db.add(
            User(
                name=DEMO_USER["name"],
                email=DEMO_USER["email"],
                hashed_password=get_password_hash(DEMO_USER["password"]),
            )
        )
        logger.info(f"Creating demo user: {DEMO_USER['email']} / {DEMO_USER['password']}")

    category_ids: Dict[str, int] = {}
    for name, description in DEMO_CATEGORIES.items():
        category = (await db.execute(select(Category).where(Category.name == name))).scalar_one_or_none()
        if category is None:
            category = Category(name=name, description=description)
            db.add(category)
            await db.flush()
            logger.info(f"Created category {name}")
        category_ids[name] = int(category.id)

    for item in DEMO_PRODUCTS:
        exists = (await db.execute(select(Product.id).where(Product.name == item["name"]))).scalar_one_or_none()
        if exists is not None:
            continue
        db.add(
            Product(
                name=item["name"],
                category_id=category_ids[item["category"]],
                price=Decimal(item["price"]),
                rating=Decimal(item["rating"]),
                description=item["description"],
            )
        )
        logger.info(f"Created product {item['name']}")

    await db.commit()


async def main() -> None:
    configure_logging()
    await create_tables()
    async with async_session_factory() as db:
        await seed_demo_data(db)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
