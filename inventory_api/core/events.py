"""
Application lifecycle event handlers.

These functions are executed during application startup and shutdown.
"""

from typing import Callable, List

from loguru import logger
from sqlalchemy import text

from inventory_api.core.config import settings
from inventory_api.db.session import async_session_factory, create_tables, engine


async def connect_to_db() -> None:
    """
    Initialize database connection and make sure the tables exist.
    """
    try:
        # Fail fast during startup if the database is not available
        logger.info("Connecting to database...")

        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))

        await create_tables()
        logger.info("Database connection established and tables verified")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise


async def prepare_media_root() -> None:
    """
    Create the directory uploaded images are written to.
    """
    settings.ensure_media_dirs()
    logger.info(f"Media root ready at {settings.MEDIA_ROOT}")


async def close_db_connection() -> None:
    """
    Close database connection.
    """
    try:
        logger.info("Closing database connections...")
        await engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database connections: {e}")


# List of startup event handlers to be executed in order
startup_event_handlers: List[Callable] = [
    prepare_media_root,
    connect_to_db,
]

# List of shutdown event handlers to be executed in order
shutdown_event_handlers: List[Callable] = [
    close_db_connection,
]
