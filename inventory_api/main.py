"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from inventory_api.api.errors import register_exception_handlers
from inventory_api.api.responses import Tags
from inventory_api.api.routes.v1.auth import router as auth_router
from inventory_api.api.routes.v1.categories import router as categories_router
from inventory_api.api.routes.v1.endpoints.health import router as health_router
from inventory_api.api.routes.v1.products import router as products_router
from inventory_api.core.config import settings
from inventory_api.core.events import shutdown_event_handlers, startup_event_handlers
from inventory_api.core.logging import configure_logging
from inventory_api.core.metrics import setup_metrics


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan event handler for startup and shutdown events.
    """
    if settings.SENTRY_DSN:
        sentry_logging = LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            integrations=[
                FastApiIntegration(),
                sentry_logging,
            ],
            environment=settings.ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            release=f"{settings.PROJECT_NAME}@{settings.VERSION}",
        )
        logger.info("Sentry initialized")

    for handler in startup_event_handlers:
        await handler()

    yield

    for handler in shutdown_event_handlers:
        await handler()


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    configure_logging()

    is_production = settings.ENVIRONMENT == "production"
    api_prefix = settings.API_PREFIX.rstrip("/")

    application = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_DESCRIPTION,
        version=settings.VERSION,
        docs_url=f"{api_prefix}/docs" if not is_production else None,
        redoc_url=f"{api_prefix}/redoc" if not is_production else None,
        openapi_url=f"{api_prefix}/openapi.json" if not is_production else None,
        lifespan=lifespan,
        swagger_ui_parameters={
            "deepLinking": True,
            "displayRequestDuration": True,
            "filter": True,
            "tryItOutEnabled": True,
        },
        openapi_tags=[
            {"name": Tags.HEALTH, "description": "Health check and readiness endpoints"},
            {"name": Tags.AUTH, "description": "Login, logout and current user"},
            {"name": Tags.PRODUCTS, "description": "Product management, search and filtering"},
            {"name": Tags.CATEGORIES, "description": "Category management"},
        ],
    )

    register_exception_handlers(application)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.CORS_ORIGINS_STR == "*" else settings.CORS_ORIGINS_STR.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.ENABLE_METRICS:
        setup_metrics(application)
        logger.info("Prometheus metrics enabled")

    application.include_router(health_router, prefix=f"{api_prefix}/health", tags=[Tags.HEALTH])
    application.include_router(auth_router, prefix=api_prefix)
    application.include_router(products_router, prefix=api_prefix)
    application.include_router(categories_router, prefix=api_prefix)

    # Uploaded product images
    application.mount(
        settings.MEDIA_URL.rstrip("/"),
        StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False),
        name="media",
    )

    return application


app = create_application()
