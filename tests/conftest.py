"""
Shared pytest fixtures for all test modules.

Real network calls never happen: the external verifier is either injected
as an AsyncMock or the shared aiohttp session is patched.
"""

import io
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from provenance.main import app

SOFTWARE_TAG = 0x0131
MAKE_TAG = 0x010F
IMAGE_DESCRIPTION_TAG = 0x010E


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    """FastAPI TestClient; lifespan opens and closes the shared HTTP session."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def verifier():
    """Stand-in for the external verification client."""
    return AsyncMock()


@pytest.fixture
def sightengine_credentials(monkeypatch):
    from provenance.config import settings

    monkeypatch.setattr(settings, "sightengine_api_user", "user-123")
    monkeypatch.setattr(settings, "sightengine_api_secret", "secret-456")
    return settings


# ---------------------------------------------------------------------------
# Shared test-data helpers
# ---------------------------------------------------------------------------


def make_tiny_jpeg(exif_tags: dict = None) -> bytes:
    """Create a minimal 10×10 JPEG in memory, optionally with base-IFD EXIF tags."""
    buf = io.BytesIO()
    img = Image.new("RGB", (10, 10), color=(128, 128, 128))
    if exif_tags:
        exif = Image.Exif()
        for tag, value in exif_tags.items():
            exif[tag] = value
        img.save(buf, format="JPEG", exif=exif.tobytes())
    else:
        img.save(buf, format="JPEG")
    return buf.getvalue()


def make_tiny_png(text_chunks: dict = None, xmp: str = None) -> bytes:
    """Create a minimal PNG carrying tEXt chunks and/or an iTXt XMP packet."""
    info = PngInfo()
    for key, value in (text_chunks or {}).items():
        info.add_text(key, value)
    if xmp:
        info.add_itxt("XML:com.adobe.xmp", xmp)

    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(10, 20, 30)).save(buf, format="PNG", pnginfo=info)
    return buf.getvalue()


def make_mock_session(status=200, payload=None, reason="OK", post_side_effect=None):
    """Build a mock aiohttp session whose .post() returns a context-manager response."""
    mock_resp = MagicMock()
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=None)
    mock_resp.status = status
    mock_resp.reason = reason
    mock_resp.json = AsyncMock(return_value=payload)

    mock_session = MagicMock()
    if post_side_effect is not None:
        mock_session.post = MagicMock(side_effect=post_side_effect)
    else:
        mock_session.post = MagicMock(return_value=mock_resp)
    return mock_session


def patch_session(mock_session):
    """
    Patch http_client.request_session to yield mock_session directly,
    bypassing aiohttp.ClientSession construction entirely.
    """
    @asynccontextmanager
    async def _fake_request_session():
        yield mock_session

    return patch(
        "provenance.integrations.http_client.request_session",
        side_effect=_fake_request_session,
    )


SIGHTENGINE_SUCCESS = {
    "status": "success",
    "request": {"id": "req_abc123", "timestamp": 1700000000.0, "operations": 1},
    "type": {"ai_generated": 0.91},
    "media": {"id": "med_xyz789", "uri": "image.jpg"},
}

SIGHTENGINE_LOW = {
    "status": "success",
    "request": {"id": "req_low"},
    "type": {"ai_generated": 0.3},
    "media": {"id": "med_low"},
}


def make_oversized_png(width: int = 8000, height: int = 6000) -> bytes:
    """1-bit PNG whose pixel count trips Pillow's decompression-bomb error (> 2x the limit)."""
    buf = io.BytesIO()
    Image.new("1", (width, height)).save(buf, format="PNG")
    return buf.getvalue()
