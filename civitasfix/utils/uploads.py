# civitasfix/utils/uploads.py
from __future__ import annotations

import logging
import random
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from ..config import settings
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")
PUBLIC_PREFIX = "/uploads"
CHUNK_SIZE = 64 * 1024


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def make_filename(original: str) -> str:
    """``<epoch millis>-<9 random digits><original extension>``"""
    ext = Path(original).suffix.lower()
    return f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999):09d}{ext}"


def public_image_url(filename: str) -> str:
    """Web path for a stored image, independent of OS path separators."""
    name = Path(filename.replace("\\", "/")).name
    return f"{PUBLIC_PREFIX}/{name}"


def save_report_image(file: Optional[UploadFile]) -> Optional[str]:
    """Persist an uploaded image and return its public URL, or None if nothing was sent."""
    if file is None or not file.filename:
        return None

    if not file.filename.lower().endswith(ALLOWED_IMAGE_EXTENSIONS):
        raise ValidationError(
            f"Only {', '.join(e.lstrip('.').upper() for e in ALLOWED_IMAGE_EXTENSIONS)} images are allowed.",
            field="image",
        )

    target = upload_dir() / make_filename(file.filename)
    written = 0
    with open(target, "wb") as buffer:
        while True:
            chunk = file.file.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > settings.MAX_UPLOAD_BYTES:
                break
            buffer.write(chunk)

    if written > settings.MAX_UPLOAD_BYTES:
        target.unlink(missing_ok=True)
        raise ValidationError("Image is too large.", field="image")

    logger.info("Stored report image %s", target.name)
    return public_image_url(target.name)


def discard_report_image(image_url: Optional[str]) -> None:
    """Remove a stored image whose report was never saved."""
    if not image_url:
        return
    path = upload_dir() / Path(image_url).name
    path.unlink(missing_ok=True)
    logger.info("Discarded report image %s", path.name)
