"""
Shared helpers for database models.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timestamp default for created_at / updated_at columns."""
    return datetime.now(timezone.utc)
