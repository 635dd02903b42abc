"""
External verification client for the Sightengine genAI-likelihood model.

Only called when no local analyzer found evidence. Every failure (missing
credentials, timeout, network error, non-2xx status, unexpected body) is
recovered here and recorded on the result; nothing propagates.

Wire contract:
    POST multipart/form-data {media, models=genai, api_user, api_secret}
    → {"status": "success", "type": {"ai_generated": 0.0–1.0}, "request": {...}, "media": {...}}
"""

import asyncio
import json
import logging
import math
from typing import Any, Dict, Optional

import aiohttp

from provenance.config import settings
from provenance.detection.result import AnalysisResult, ClassificationType
from provenance.exceptions import ExternalServiceError
from provenance.integrations import http_client as http_module

logger = logging.getLogger(__name__)


def _build_form(image_bytes: bytes, file_info: Dict[str, Any]) -> aiohttp.FormData:
    form = aiohttp.FormData()
    form.add_field(
        "media",
        image_bytes,
        filename=file_info.get("name") or "image.jpg",
        content_type=file_info.get("type") or "image/jpeg",
    )
    form.add_field("models", settings.sightengine_models)
    form.add_field("api_user", settings.sightengine_api_user)
    form.add_field("api_secret", settings.sightengine_api_secret)
    return form


async def request_ai_likelihood(image_bytes: bytes, file_info: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """POST the image and return the decoded JSON body. Raises ExternalServiceError."""
    if not settings.sightengine_configured:
        raise ExternalServiceError("credentials not configured")

    form = _build_form(image_bytes, file_info or {})
    timeout = aiohttp.ClientTimeout(total=settings.sightengine_timeout_sec)

    try:
        async with http_module.request_session() as session:
            async with session.post(settings.sightengine_api_url, data=form, timeout=timeout) as response:
                if not 200 <= response.status < 300:
                    raise ExternalServiceError(f"HTTP {response.status} {response.reason}")
                return await response.json(content_type=None)
    except asyncio.TimeoutError as e:
        raise ExternalServiceError(f"timed out after {settings.sightengine_timeout_sec}s") from e
    except aiohttp.ClientError as e:
        raise ExternalServiceError(f"request failed: {e}") from e
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise ExternalServiceError("response body is not JSON") from e


def parse_ai_likelihood(payload: Any) -> float:
    """Extract the genAI likelihood from a response body. Raises ExternalServiceError."""
    if not isinstance(payload, dict) or payload.get("status") != "success":
        raise ExternalServiceError("Unexpected response structure")

    type_block = payload.get("type")
    if not isinstance(type_block, dict) or type_block.get("ai_generated") is None:
        raise ExternalServiceError("Unexpected response structure")

    raw_score = type_block["ai_generated"]
    if isinstance(raw_score, bool):
        raise ExternalServiceError("Unexpected response structure")
    try:
        score = float(raw_score)
    except (TypeError, ValueError) as e:
        raise ExternalServiceError(f"Non-numeric likelihood: {raw_score!r}") from e

    if not math.isfinite(score) or not 0.0 <= score <= 1.0:
        raise ExternalServiceError("Unexpected response structure")
    return score


async def verify_with_sightengine(
    image_bytes: bytes,
    file_info: Optional[Dict[str, Any]],
    result: AnalysisResult,
) -> None:
    """Fold the remote likelihood into `result`; soft-fails on any service error."""
    logger.info("[SIGHTENGINE] Local checks found no AI, requesting remote verification")

    try:
        payload = await request_ai_likelihood(image_bytes, file_info)
        logger.debug(f"[SIGHTENGINE] Response: {json.dumps(payload)}")
        score = parse_ai_likelihood(payload)
    except ExternalServiceError as e:
        logger.error(f"[SIGHTENGINE] Verification failed: {e}")
        result.add_indicator(f"External verification error: {e}")
        result.record_field("sightengine_error", str(e))
        return

    percentage = round(score * 100)
    result.record_field("sightengine_response", payload)
    result.record_field("sightengine_ai_score", score)

    if score > settings.ai_likelihood_threshold:
        result.mark_ai(score)
        result.set_type_if_authentic(ClassificationType.GENERATED)
        result.add_indicator(f"External verification: {percentage}% AI-generated")
    else:
        result.add_indicator(f"External verification: {percentage}% AI-generated (below threshold)")

    if isinstance(payload.get("request"), dict):
        result.record_field("sightengine_request_id", payload["request"].get("id"))
    if isinstance(payload.get("media"), dict):
        result.record_field("sightengine_media_id", payload["media"].get("id"))

    logger.info(f"[SIGHTENGINE] genAI likelihood {percentage}% (AI={result.is_ai})")
