"""
Database model for categories.
"""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from inventory_api.db.models.base import utcnow
from inventory_api.db.session import Base


class Category(Base):
    """
    Database model for categories.

    ``products_count`` is not stored; it is computed per query by the category service.
    """

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(String(500), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    products = relationship("Product", back_populates="category", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"
