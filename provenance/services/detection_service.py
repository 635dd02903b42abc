"""
Detection request helpers: upload → file info, and memory usage logging.
"""

import logging
import os

import psutil
from fastapi import UploadFile

logger = logging.getLogger(__name__)


def build_file_info(upload: UploadFile, content: bytes) -> dict:
    return {
        "name": upload.filename or "image.jpg",
        "size": len(content),
        "type": upload.content_type or "image/jpeg",
    }


def log_memory(stage: str) -> None:
    """Log current process and system memory usage. Only runs when DEBUG logging is active."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    process = psutil.Process(os.getpid())
    mem_info = process.memory_info()
    sys_mem = psutil.virtual_memory()
    logger.debug(
        f"[MEMORY] {stage} | "
        f"PID: {os.getpid()} | "
        f"Process RSS: {mem_info.rss / 1024 / 1024:.2f} MB | "
        f"System Available: {sys_mem.available / 1024 / 1024:.2f} MB / {sys_mem.total / 1024 / 1024:.2f} MB"
    )
