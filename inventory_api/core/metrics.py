"""
Prometheus metrics configuration.
"""

import re
import time
from typing import Any, Callable, cast

from fastapi import FastAPI, Request, Response
from loguru import logger
from prometheus_client import REGISTRY, Counter, Gauge, Histogram
from prometheus_client.exposition import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# Define metrics
REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests count", ["method", "endpoint", "status_code"])

REQUEST_TIME = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0, float("inf")),
)

REQUEST_IN_PROGRESS = Gauge("http_requests_in_progress", "Number of HTTP requests in progress", ["method", "endpoint"])

EXCEPTION_COUNT = Counter(
    "http_exceptions_total", "Total HTTP exceptions count", ["method", "endpoint", "exception_type"]
)

# Inventory events: product_created, category_deleted, ...
INVENTORY_EVENTS = Counter("inventory_events_total", "Total inventory business events", ["event_type"])

METRICS_PATH = "/metrics"

_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def normalize_path(path: str) -> str:
    """Replace numeric path segments with ``{id}`` to keep label cardinality bounded."""
    if path.startswith("/storage/"):
        return "/storage/{path}"
    return _NUMERIC_SEGMENT.sub("/{id}", path)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware that collects Prometheus metrics for HTTP requests.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        method = request.method
        path = request.url.path

        if path == METRICS_PATH:
            response = await call_next(request)
            return cast(Response, response)

        path = normalize_path(path)
        start_time = time.time()
        REQUEST_IN_PROGRESS.labels(method=method, endpoint=path).inc()

        try:
            response = await call_next(request)
            response_typed = cast(Response, response)

            REQUEST_COUNT.labels(method=method, endpoint=path, status_code=response_typed.status_code).inc()
            REQUEST_TIME.labels(method=method, endpoint=path).observe(time.time() - start_time)

            return response_typed
        except Exception as e:
            EXCEPTION_COUNT.labels(method=method, endpoint=path, exception_type=type(e).__name__).inc()
            logger.exception(f"Request failed: {str(e)}")
            raise
        finally:
            REQUEST_IN_PROGRESS.labels(method=method, endpoint=path).dec()


async def metrics_endpoint(request: Request) -> Response:
    """
    Endpoint for exposing Prometheus metrics.
    """
    data = generate_latest(REGISTRY)
    return Response(content=data, headers={"Content-Type": CONTENT_TYPE_LATEST})


def setup_metrics(app: FastAPI) -> None:
    """
    Set up Prometheus metrics and middleware for FastAPI application.
    """
    app.add_middleware(PrometheusMiddleware)
    app.add_route(METRICS_PATH, metrics_endpoint)

    logger.info("Prometheus metrics configured")


def record_business_event(event_type: str) -> None:
    """Record an inventory business event metric."""
    INVENTORY_EVENTS.labels(event_type=event_type).inc()
