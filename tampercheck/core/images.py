"""
Document image intake.

Sets PIL.Image.MAX_IMAGE_PIXELS to prevent decompression-bomb attacks.
The mime type handed to providers comes from the decoded content, not from
the filename or the client's Content-Type header.
"""

import base64
import io
import logging
import os
from dataclasses import dataclass

from fastapi import HTTPException
from PIL import Image

from tampercheck.config import settings

Image.MAX_IMAGE_PIXELS = settings.pil_max_image_pixels

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = [".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp", ".tiff", ".tif"]

_FORMAT_MIME_TYPES = {
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
}


@dataclass(frozen=True)
class DocumentImage:
    """Raw image bytes plus the mime type detected from them."""

    data: bytes
    mime_type: str
    filename: str = "document"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


def validate_image(filename: str, data: bytes) -> DocumentImage:
    """Check extension, size and content integrity, returning the verified image."""
    ext = os.path.splitext(filename or "")[1].lower()

    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=415, detail="Unsupported file format.")

    if len(data) > settings.max_image_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Image too large. Max {settings.max_image_upload_mb}MB allowed.",
        )

    if not data:
        raise HTTPException(status_code=400, detail="Empty file.")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
        # verify() leaves the image unusable; reopen to read the format
        with Image.open(io.BytesIO(data)) as img:
            actual_format = (img.format or "").lower()
    except Exception as e:
        logger.error(f"Corrupted or disguised upload detected ({filename}): {e}")
        raise HTTPException(status_code=400, detail="Invalid file content or format mismatch.")

    mime_type = _FORMAT_MIME_TYPES.get(actual_format)
    if mime_type is None:
        logger.error(f"Format mismatch for {filename}: {actual_format or 'unknown'}")
        raise HTTPException(status_code=400, detail="Invalid file content or format mismatch.")

    return DocumentImage(data=data, mime_type=mime_type, filename=filename)
