"""
Image file storage for product pictures.

Files live under ``settings.MEDIA_ROOT`` and are referenced from the database by
their path relative to that root (``products/1700000000_chair.png``). The media
root is served at ``settings.MEDIA_URL``.
"""

import re
import time
from io import BytesIO
from pathlib import Path
from typing import List, NamedTuple, Optional

from loguru import logger
from PIL import Image, UnidentifiedImageError

from inventory_api.core.config import settings

PRODUCT_IMAGE_DIR = "products"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ImageUpload(NamedTuple):
    """An uploaded image read into memory."""

    filename: str
    content: bytes


def sanitize_filename(original_filename: str) -> str:
    """Strip directories and unsafe characters from a client supplied filename."""
    name = Path(original_filename.replace("\\", "/")).name
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._")
    return name or "image"


def generate_image_filename(original_filename: str, timestamp: Optional[int] = None) -> str:
    """Build a stored filename: unix timestamp prefix plus the sanitized original name."""
    if timestamp is None:
        timestamp = int(time.time())
    return f"{timestamp}_{sanitize_filename(original_filename)}"


def validate_image(filename: Optional[str], content: bytes) -> List[str]:
    """
    Check an uploaded image.

    Returns the list of violations, empty when the upload is acceptable.
    """
    errors: List[str] = []
    allowed = settings.IMAGE_ALLOWED_EXTENSIONS
    type_message = f"The image field must be a file of type: {', '.join(allowed)}."

    image_format: Optional[str] = None
    try:
        with Image.open(BytesIO(content)) as img:
            img.verify()
            image_format = (img.format or "").lower()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        errors.append("The image field must be an image.")

    if image_format is not None:
        extension = Path(filename or "").suffix.lower().lstrip(".")
        if image_format not in allowed or extension not in allowed:
            errors.append(type_message)

    if len(content) > settings.IMAGE_MAX_SIZE_KB * 1024:
        errors.append(f"The image field must not be greater than {settings.IMAGE_MAX_SIZE_KB} kilobytes.")

    return errors


def _resolve(relative_path: str) -> Optional[Path]:
    root = settings.MEDIA_ROOT.resolve()
    candidate = (root / relative_path).resolve()
    if root != candidate and root not in candidate.parents:
        return None
    return candidate


def save_image(original_filename: str, content: bytes, subdir: str = PRODUCT_IMAGE_DIR) -> str:
    """
    Write image bytes below the media root.

    Returns the stored path relative to the media root.
    """
    target_dir = settings.MEDIA_ROOT / subdir
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = generate_image_filename(original_filename)
    file_path = target_dir / filename
    counter = 1
    while file_path.exists():
        stem, suffix = Path(filename).stem, Path(filename).suffix
        file_path = target_dir / f"{stem}_{counter}{suffix}"
        counter += 1

    file_path.write_bytes(content)
    relative_path = f"{subdir}/{file_path.name}"
    logger.info(f"Stored image {relative_path} ({len(content)} bytes)")
    return relative_path


def delete_image(relative_path: Optional[str]) -> bool:
    """Remove a stored image. Missing files and paths outside the media root are ignored."""
    if not relative_path:
        return False

    file_path = _resolve(relative_path)
    if file_path is None:
        logger.warning(f"Refusing to delete image outside media root: {relative_path}")
        return False
    if not file_path.is_file():
        return False

    file_path.unlink()
    logger.info(f"Deleted image {relative_path}")
    return True


def image_url(relative_path: Optional[str]) -> Optional[str]:
    """Public URL for a stored image."""
    if not relative_path:
        return None
    return f"{settings.MEDIA_URL.rstrip('/')}/{relative_path}"
