"""
Database model for products.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from inventory_api.db.models.base import utcnow
from inventory_api.db.session import Base


class Product(Base):
    """
    Database model for products.
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_products_rating_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    rating = Column(Numeric(3, 2), nullable=False, default=0, server_default="0")
    image = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    # Foreign keys
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    category = relationship("Category", back_populates="products")

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"
