"""
Top-level classification pipeline: public entry point for the detection route.

`classify_image` orchestrates:
  1. Metadata extraction (failure → safe `unknown` result, never raised)
  2. Metadata analyzers in fixed order (manifest → XMP → EXIF → IPTC →
     general fields → full-text keyword search)
  3. Filename heuristic
  4. External verification, only when no local pass flagged AI
  5. Finalization (AI without a specific type → `generated`)

Each call owns its AnalysisResult; nothing is shared between runs except
the read-only SignatureCatalog.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from provenance.detection.analyzers import METADATA_ANALYZERS, analyze_filename
from provenance.detection.metadata_extractor import extract_metadata
from provenance.detection.result import AnalysisResult
from provenance.detection.signatures import DEFAULT_CATALOG, SignatureCatalog
from provenance.exceptions import ExtractionError
from provenance.integrations.sightengine import verify_with_sightengine

logger = logging.getLogger(__name__)

Extractor = Callable[[bytes], Dict[str, Any]]
Verifier = Callable[[bytes, Optional[Dict[str, Any]], AnalysisResult], Awaitable[None]]


def run_local_analyzers(
    metadata: Dict[str, Any],
    filename: str,
    catalog: SignatureCatalog = DEFAULT_CATALOG,
    result: AnalysisResult = None,
) -> AnalysisResult:
    """Apply every local pass to one result, in order. No I/O."""
    if result is None:
        result = AnalysisResult(raw_metadata=metadata)

    if not metadata:
        result.add_indicator("No metadata found in image")

    for analyzer in METADATA_ANALYZERS:
        analyzer(metadata, result, catalog)

    analyze_filename(filename, result, catalog)
    return result


async def classify_image(
    image_bytes: bytes,
    file_info: Optional[Dict[str, Any]] = None,
    catalog: SignatureCatalog = DEFAULT_CATALOG,
    extractor: Extractor = None,
    verifier: Verifier = None,
) -> AnalysisResult:
    """
    Decide whether an image is authentic, AI-generated or AI-enhanced.

    Args:
        image_bytes: Raw uploaded bytes.
        file_info: Optional {name, size, type} from the upload boundary.
        catalog: Signature catalog to match against.
        extractor / verifier: Overrides for metadata extraction and the
            external fallback; default to the Pillow/C2PA extractor and
            the Sightengine client.
    """
    file_info = file_info or {}
    extractor = extractor or extract_metadata
    verifier = verifier or verify_with_sightengine
    filename = file_info.get("name") or ""

    try:
        metadata = await asyncio.to_thread(extractor, image_bytes)
    except ExtractionError as e:
        logger.warning(f"[PIPELINE] Metadata extraction failed: {e}")
        return AnalysisResult.extraction_failed(str(e))
    except Exception as e:
        logger.error(f"[PIPELINE] Unexpected extractor failure: {type(e).__name__}: {e}")
        return AnalysisResult.extraction_failed(str(e) or type(e).__name__)

    result = run_local_analyzers(metadata, filename, catalog)
    logger.info(
        f"[PIPELINE] Local passes: is_ai={result.is_ai}, confidence={result.confidence:.2f}, "
        f"type={result.classification_type.value}"
    )

    if not result.is_ai:
        await verifier(image_bytes, file_info, result)
        result.add_indicator("External verification used for final confirmation (local checks found no AI)")
    else:
        result.add_indicator("External verification skipped (AI already detected by local checks)")

    result.finalize()
    return result
