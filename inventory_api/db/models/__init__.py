"""
Database models.
"""

from inventory_api.db.models.category import Category
from inventory_api.db.models.product import Product
from inventory_api.db.models.user import RevokedToken, User

__all__ = [
    "Category",
    "Product",
    "RevokedToken",
    "User",
]
