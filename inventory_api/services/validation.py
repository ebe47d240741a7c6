"""
Request validation helpers.

Pydantic schemas hold the per-field rules; this module runs them against a raw
payload and turns every violation into a human readable message keyed by field
name, so a client gets all problems of a request in one response.
"""

import re
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import ErrorDetails
from sqlalchemy.exc import IntegrityError

from inventory_api.core.exceptions import FieldErrors, ValidationFailedError

ModelT = TypeVar("ModelT", bound=BaseModel)

# pydantic error type -> message template, formatted with the field label and the error context
ERROR_MESSAGES: Dict[str, str] = {
    "missing": "The {field} field is required.",
    "string_type": "The {field} field must be a string.",
    "string_too_short": "The {field} field is required.",
    "string_too_long": "The {field} field must not be greater than {max_length} characters.",
    "decimal_parsing": "The {field} field must be a number.",
    "decimal_type": "The {field} field must be a number.",
    "decimal_max_digits": "The {field} field must be a number.",
    "finite_number": "The {field} field must be a number.",
    "float_parsing": "The {field} field must be a number.",
    "float_type": "The {field} field must be a number.",
    "int_parsing": "The {field} field must be an integer.",
    "int_type": "The {field} field must be an integer.",
    "greater_than_equal": "The {field} field must be at least {ge}.",
    "greater_than": "The {field} field must be greater than {gt}.",
    "less_than_equal": "The {field} field must not be greater than {le}.",
    "less_than": "The {field} field must be less than {lt}.",
    "value_error": "The {field} field is invalid.",
}


def _format_ctx_value(value: Any) -> str:
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return str(value)


def describe_error(error: ErrorDetails) -> Tuple[str, str]:
    """Return ``(field, message)`` for a single pydantic error."""
    loc = [str(part) for part in error.get("loc", ()) if not isinstance(part, int)]
    field = loc[-1] if loc else "body"
    label = field.replace("_", " ")

    template = ERROR_MESSAGES.get(error["type"])
    if template is None:
        return field, f"The {label} field is invalid: {error.get('msg', 'invalid value')}."

    ctx = {key: _format_ctx_value(value) for key, value in (error.get("ctx") or {}).items()}
    try:
        return field, template.format(field=label, **ctx)
    except KeyError:
        return field, f"The {label} field is invalid."


def field_errors_from(exc: ValidationError) -> FieldErrors:
    """Group every error of a ``ValidationError`` by field, preserving order."""
    errors: FieldErrors = {}
    for error in exc.errors():
        field, message = describe_error(error)
        messages = errors.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return errors


def merge_errors(*groups: Optional[FieldErrors]) -> FieldErrors:
    """Combine several field error mappings into one."""
    merged: FieldErrors = {}
    for group in groups:
        for field, messages in (group or {}).items():
            bucket = merged.setdefault(field, [])
            bucket.extend(m for m in messages if m not in bucket)
    return merged


def normalize_payload(payload: Mapping[str, Any], drop_empty: bool) -> Dict[str, Any]:
    """
    Prepare a raw request payload for validation.

    Surrounding whitespace is trimmed and empty strings become ``None``. With
    ``drop_empty`` those keys are removed entirely, so required fields report
    as missing and optional ones fall back to their defaults.
    """
    data: Dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                value = None
        if value is None and drop_empty:
            continue
        data[key] = value
    return data


def parse_payload(schema: Type[ModelT], payload: Mapping[str, Any]) -> Tuple[Optional[ModelT], FieldErrors]:
    """
    Validate ``payload`` against ``schema`` without raising.

    Returns the model (or ``None``) and the collected field errors.
    """
    try:
        return schema.model_validate(dict(payload)), {}
    except ValidationError as exc:
        return None, field_errors_from(exc)


def raise_for_errors(errors: FieldErrors, message: Optional[str] = None) -> None:
    """Raise ``ValidationFailedError`` if any field has violations."""
    if errors:
        raise ValidationFailedError(errors, message=message)


def unique_message(field: str) -> List[str]:
    return [f"The {field.replace('_', ' ')} has already been taken."]


def unique_violation_errors(exc: IntegrityError, fields: Sequence[str]) -> FieldErrors:
    """
    Map a unique constraint failure reported by the database to field errors.

    SQLite reports ``UNIQUE constraint failed: products.name``, PostgreSQL
    ``duplicate key value ... "ix_products_name"`` with ``Key (name)=(...)``.
    Other integrity failures map to nothing.
    """
    message = str(exc.orig).lower()
    if "unique" not in message and "duplicate" not in message:
        return {}

    return {
        field: unique_message(field)
        for field in fields
        if re.search(rf"(?<![a-z0-9]){re.escape(field.lower())}(?![a-z0-9])", message)
    }
