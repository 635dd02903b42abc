"""
System / health routes.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from provenance.config import settings
from provenance.detection.signatures import DEFAULT_CATALOG

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {
        "status": "healthy",
        "external_verification": settings.sightengine_configured,
        "catalog": {
            "generators": len(DEFAULT_CATALOG.generators),
            "keywords": len(DEFAULT_CATALOG.ai_keywords),
        },
    }


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots():
    return "User-agent: *\nDisallow: /"
