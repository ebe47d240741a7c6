"""
Health check endpoint.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response, status
from loguru import logger
from pydantic import BaseModel
from sqlalchemy import text

from inventory_api.core.config import settings
from inventory_api.db.session import get_db

router = APIRouter()


class HealthStatus(BaseModel):
    """Health status model."""

    status: str
    version: str
    environment: str

    model_config = {
        "json_schema_extra": {"example": {"status": "ok", "version": "0.1.0", "environment": "development"}}
    }


class ComponentStatus(BaseModel):
    """Component health status model."""

    name: str
    status: str
    details: Optional[Dict[str, Any]] = None


class DetailedHealthStatus(HealthStatus):
    """Detailed health status model with component status information."""

    components: List[ComponentStatus]


@router.get(
    "",
    response_model=HealthStatus,
    summary="Basic health check endpoint",
    responses={200: {"description": "Service is healthy"}},
)
async def health_check() -> HealthStatus:
    """
    Basic health check endpoint.

    Returns a simple status indicating the service is running, along with version
    and environment information.
    """
    return HealthStatus(
        status="ok",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
    )


@router.get(
    "/ready",
    response_model=DetailedHealthStatus,
    summary="Readiness check endpoint",
    responses={200: {"description": "Service is ready"}, 503: {"description": "Service is not ready"}},
)
async def readiness_check(
    response: Response,
    db_session: Any = Depends(get_db),
) -> DetailedHealthStatus:
    """
    Readiness check: the service is ready when the database answers.
    """
    components = []
    all_healthy = True

    try:
        await db_session.execute(text("SELECT 1"))
        dialect = db_session.get_bind().dialect.name
        components.append(ComponentStatus(name="database", status="healthy", details={"type": dialect}))
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        components.append(ComponentStatus(name="database", status="unhealthy", details={"error": str(e)}))
        all_healthy = False

    if not all_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return DetailedHealthStatus(
        status="ok" if all_healthy else "degraded",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        components=components,
    )
