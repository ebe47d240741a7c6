"""
Database session configuration.
"""

from typing import Any, AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from inventory_api.core.config import settings

DATABASE_URL = str(settings.DATABASE_URI)


def build_engine(url: str, **kwargs: Any) -> AsyncEngine:
    """
    Create an async engine for ``url``.

    Pool sizing only applies to server databases; SQLite uses its own pool.
    """
    if not url.startswith("sqlite"):
        kwargs.setdefault("pool_pre_ping", True)
        kwargs.setdefault("pool_size", 10)
        kwargs.setdefault("max_overflow", 20)
    return create_async_engine(url, echo=settings.DEBUG, **kwargs)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite ignores ON DELETE clauses unless foreign keys are switched on per connection
    module = type(dbapi_connection).__module__
    if "sqlite" in module:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(DATABASE_URL)

async_session_factory = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
    class_=AsyncSession,
)

# Base class for all models
Base = declarative_base()


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create all tables known to the model metadata."""
    # Register every model on Base.metadata
    import inventory_api.db.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.

    The session is committed when the request handler finishes and rolled back
    if it raised, so every write request is all-or-nothing.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
