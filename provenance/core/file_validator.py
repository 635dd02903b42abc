"""
Upload validation and log sanitization utilities.

Content integrity is not checked here: bytes Pillow cannot parse are
reported by the classification pipeline as an `unknown` result instead of
being rejected at the boundary.
"""

import os
import re
import logging

from fastapi import HTTPException

from provenance.config import settings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp', '.gif', '.heic', '.heif', '.tiff', '.tif', '.bmp', '.avif')


def validate_file(filename: str, filesize: int) -> bool:
    """Check upload size and, when the name carries one, its extension."""
    ext = os.path.splitext(filename or "")[1].lower()

    if ext and ext not in IMAGE_EXTENSIONS:
        raise HTTPException(status_code=415, detail="Unsupported file format.")

    if filesize > settings.max_image_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Image too large. Max {settings.max_image_upload_bytes // 1024 // 1024}MB allowed."
        )

    if filesize == 0:
        logger.warning(f"[ROUTE] Empty upload: {sanitize_log_message(filename or '')}")

    return True


def sanitize_log_message(message: str) -> str:
    """Strip sensitive file paths from log messages."""
    msg = re.sub(r'\/[^\s]+\/tmp[a-zA-Z0-9_]+', '[TEMP_FILE]', message)
    msg = re.sub(r'\/[^\s]+\/([^\/\s]+)', r'.../\1', msg)
    return msg
