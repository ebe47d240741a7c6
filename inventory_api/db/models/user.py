"""
Database models for authentication.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from inventory_api.db.models.base import utcnow
from inventory_api.db.session import Base


class User(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class RevokedToken(Base):
    """Access token revoked by logout, identified by its ``jti`` claim."""

    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    user_id = Column(Integer, nullable=True, index=True)
    revoked_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
