"""
API error handling for consistent error responses across the application.

Every error body has the shape ``{"message": str, "errors": {field: [str, ...]}}``,
with ``errors`` present only for field level failures.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory_api.core.exceptions import FieldErrors, InventoryError
from inventory_api.services.validation import describe_error


def create_error_response(message: str, errors: Optional[FieldErrors] = None, **extra: Any) -> Dict[str, Any]:
    """
    Create a standardized error response body.
    """
    body: Dict[str, Any] = {"message": message}
    if errors:
        body["errors"] = errors
    body.update(extra)
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers for the FastAPI application.
    """

    @app.exception_handler(InventoryError)
    async def inventory_exception_handler(request: Request, exc: InventoryError) -> JSONResponse:
        """
        Handle domain errors raised by the services.
        """
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Handle query/path/body parsing errors in the same shape as service validation.
        """
        logger.warning(f"Validation error: {exc.errors()}")

        errors: FieldErrors = {}
        for err in exc.errors():
            field, message = describe_error(err)
            messages = errors.setdefault(field, [])
            if message not in messages:
                messages.append(message)

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=create_error_response("Validation failed", errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """
        Render framework HTTP errors (unknown route, wrong method, ...) with a message key.
        """
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return JSONResponse(
            status_code=exc.status_code,
            content=create_error_response(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        """
        Handle database integrity errors, e.g. two requests inserting the same unique name.
        """
        logger.error(f"Database integrity error: {str(exc.orig)}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=create_error_response("The request conflicts with existing data."),
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """
        Handle general SQLAlchemy errors.
        """
        logger.error(f"Database error: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_error_response("Database error"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Handle all other uncaught exceptions.
        """
        logger.exception(f"Unhandled exception: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_error_response("Server error"),
        )
