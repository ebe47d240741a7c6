"""
API utility functions.
"""

from typing import Any, Dict, Optional, Tuple

from fastapi import Request, UploadFile
from starlette.datastructures import UploadFile as StarletteUploadFile

from inventory_api.core.exceptions import ValidationFailedError
from inventory_api.services.storage import ImageUpload

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_upload(upload: UploadFile) -> Optional[ImageUpload]:
    """Read an uploaded file into memory. Empty file inputs count as no upload."""
    content = await upload.read()
    await upload.close()
    if not upload.filename and not content:
        return None
    return ImageUpload(filename=upload.filename or "", content=content)


async def read_payload(request: Request, file_field: str = "image") -> Tuple[Dict[str, Any], Optional[ImageUpload]]:
    """
    Read a JSON or form request body.

    Returns the plain fields and, for multipart requests, the file sent as ``file_field``.
    """
    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        payload: Dict[str, Any] = {}
        image: Optional[ImageUpload] = None
        for key, value in form.multi_items():
            if isinstance(value, StarletteUploadFile):
                if key == file_field:
                    image = await read_upload(value)
                else:
                    await value.close()
                continue
            payload[key] = value
        return payload, image

    body = await request.body()
    if not body.strip():
        return {}, None

    try:
        data = await request.json()
    except ValueError:
        raise ValidationFailedError({"body": ["The request body must be valid JSON."]}) from None

    if not isinstance(data, dict):
        raise ValidationFailedError({"body": ["The request body must be a JSON object."]})
    return data, None
