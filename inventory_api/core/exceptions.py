"""
Domain exceptions.

Every exception carries the HTTP status it maps to; the handlers in
``inventory_api.api.errors`` render them as ``{"message": ..., "errors": ...}``.
"""

from typing import Any, Dict, List, Optional

from fastapi import status

FieldErrors = Dict[str, List[str]]


class InventoryError(Exception):
    """Base class for errors that are reported to the client."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[FieldErrors] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors
        self.extra = extra or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        body.update(self.extra)
        return body


class NotFoundError(InventoryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationFailedError(InventoryError):
    """One or more field constraints were violated."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Validation failed"

    def __init__(self, errors: FieldErrors, message: Optional[str] = None) -> None:
        super().__init__(message=message, errors=errors)


class InvalidReferenceError(ValidationFailedError):
    """A referenced entity (e.g. a category given by name) does not exist."""

    default_message = "Invalid category"


class ConflictError(InventoryError):
    """The operation is blocked by existing references."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Conflict"


class AuthenticationError(InventoryError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthenticated."
