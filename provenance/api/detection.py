"""
Detection routes: /api/ai-image-detection

Accepts multipart/form-data with an 'image' field. Always answers with a
well-formed classification; extraction and external-service failures are
reported inside the result, anything unexpected as a 500 with safe defaults.
"""

import json
import logging
import time
from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from provenance.core.file_validator import sanitize_log_message, validate_file
from provenance.detection.pipeline import classify_image
from provenance.detection.result import summarize
from provenance.schemas.detection import DetectionResponse, DetectionSummary
from provenance.services.detection_service import build_file_info, log_memory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Detection"])


def _missing_image() -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "No image file provided"})


def _analysis_failed(error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": "Failed to analyze image",
            "details": str(error),
            "isAI": False,
            "confidence": 0,
            "type": "unknown",
        },
    )


async def _read_upload(image: UploadFile) -> tuple[bytes, dict]:
    content = await image.read()
    file_info = build_file_info(image, content)
    validate_file(file_info["name"], file_info["size"])
    return content, file_info


@router.post("/ai-image-detection", response_model=DetectionResponse)
async def detect_image(image: Optional[UploadFile] = File(None)):
    """Classify an uploaded image as authentic, AI-generated or AI-enhanced."""
    if image is None:
        return _missing_image()

    try:
        content, file_info = await _read_upload(image)
        safe_name = sanitize_log_message(file_info["name"])
        log_memory(f"Pre-Detect: {safe_name}")

        start_time = time.time()
        result = await classify_image(content, file_info)
        duration = time.time() - start_time

        log_memory(f"Post-Detect: {safe_name}")
        logger.info(f"[ROUTE] {safe_name} classified in {duration:.2f}s: {json.dumps(summarize(result))}")

        payload = result.to_dict()
        payload["fileInfo"] = file_info
        return payload
    except HTTPException:
        raise
    except Exception as e:
        logger.error(sanitize_log_message(f"[ROUTE] AI image detection failed: {e}"))
        return _analysis_failed(e)


@router.post("/ai-image-detection/summary", response_model=DetectionSummary)
async def detect_image_summary(image: Optional[UploadFile] = File(None)):
    """Same classification, reduced to the compact display summary."""
    if image is None:
        return _missing_image()

    try:
        content, file_info = await _read_upload(image)
        result = await classify_image(content, file_info)
        return summarize(result)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(sanitize_log_message(f"[ROUTE] AI image summary failed: {e}"))
        return _analysis_failed(e)
