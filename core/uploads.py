"""
core/uploads.py -- Local disk storage for profile images.

Files land in Settings.upload_dir as "<epoch-ms>-<sanitized name>" and are
served back by the static mount at /uploads (api/main.py). The returned
reference is the public path, which is what the users table stores.
"""

import logging
import re
import time
from pathlib import Path

from core.config import get_settings

logger = logging.getLogger("eliteapp.uploads")

PUBLIC_PREFIX = "/uploads"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class InvalidUpload(ValueError):
    """The uploaded file is not an acceptable image."""


def sanitize_filename(filename: str) -> str:
    """Strip any directory part and replace characters outside [A-Za-z0-9._-]."""
    name = Path(filename.replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
    return name or "image"


def save_profile_image(data: bytes, filename: str | None, content_type: str | None) -> str:
    """Write an image to the upload directory and return its public reference.

    Raises InvalidUpload when the content type is not image/* or the file is
    empty or larger than Settings.max_upload_bytes.
    """
    settings = get_settings()
    if not content_type or not content_type.startswith("image/"):
        raise InvalidUpload("Only image files are allowed.")
    if not data:
        raise InvalidUpload("Uploaded file is empty.")
    if len(data) > settings.max_upload_bytes:
        raise InvalidUpload(f"Image must be {settings.max_upload_bytes} bytes or smaller.")

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    stored_name = f"{int(time.time() * 1000)}-{sanitize_filename(filename or '')}"
    (upload_dir / stored_name).write_bytes(data)
    logger.info("Stored profile image %s (%d bytes)", stored_name, len(data))
    return f"{PUBLIC_PREFIX}/{stored_name}"
