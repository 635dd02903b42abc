"""
Tests for provenance/detection/pipeline.py.

The extractor is replaced with a lambda returning a fixed metadata map and
the external verifier with an AsyncMock, so every run is offline.
"""

from unittest.mock import AsyncMock

import pytest

from provenance.detection.pipeline import classify_image
from provenance.detection.result import ClassificationType
from provenance.detection.signatures import DEFAULT_CATALOG
from provenance.exceptions import ExtractionError
from tests.conftest import SOFTWARE_TAG, make_oversized_png, make_tiny_jpeg

IMAGE_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"
UUID_NAME = "3f2504e0-4f89-11d3-9a0c-0305e82c3301.jpg"


def _fixed(metadata):
    return lambda _bytes: dict(metadata)


def _verifier_returning(score):
    """AsyncMock verifier that folds `score` in the way the remote client does."""
    async def _verify(image_bytes, file_info, result):
        pct = round(score * 100)
        if score > 0.5:
            result.mark_ai(score)
            result.set_type_if_authentic(ClassificationType.GENERATED)
            result.add_indicator(f"External verification: {pct}% AI-generated")
        else:
            result.add_indicator(f"External verification: {pct}% AI-generated (below threshold)")

    return AsyncMock(side_effect=_verify)


# ---------------------------------------------------------------------------
# Fallback gating
# ---------------------------------------------------------------------------


async def test_verifier_called_when_local_passes_find_nothing(verifier):
    result = await classify_image(
        IMAGE_BYTES, {"name": "vacation.jpg"}, extractor=_fixed({"Make": "Canon"}), verifier=verifier
    )

    verifier.assert_awaited_once()
    args = verifier.await_args.args
    assert args[0] == IMAGE_BYTES
    assert args[1] == {"name": "vacation.jpg"}
    assert args[2] is result
    assert result.indicators[-1] == "External verification used for final confirmation (local checks found no AI)"


async def test_verifier_skipped_when_local_passes_flag_ai(verifier):
    result = await classify_image(
        IMAGE_BYTES, {"name": "image.jpg"}, extractor=_fixed({"Software": "Midjourney"}), verifier=verifier
    )

    verifier.assert_not_awaited()
    assert result.is_ai is True
    assert result.indicators[-1] == "External verification skipped (AI already detected by local checks)"


# ---------------------------------------------------------------------------
# End-to-end scenarios
# ---------------------------------------------------------------------------


async def test_no_metadata_below_threshold_stays_authentic():
    verifier = _verifier_returning(0.3)
    result = await classify_image(
        IMAGE_BYTES, {"name": "vacation.jpg"}, extractor=_fixed({}), verifier=verifier
    )

    verifier.assert_awaited_once()
    assert result.is_ai is False
    assert result.classification_type is ClassificationType.AUTHENTIC
    assert result.indicators[0] == "No metadata found in image"
    assert any("below threshold" in indicator for indicator in result.indicators)


async def test_no_metadata_high_remote_score_is_generated():
    result = await classify_image(
        IMAGE_BYTES, {"name": "vacation.jpg"}, extractor=_fixed({}), verifier=_verifier_returning(0.91)
    )

    assert result.is_ai is True
    assert result.confidence == pytest.approx(0.91)
    assert result.classification_type is ClassificationType.GENERATED


async def test_uuid_filename_skips_external_call(verifier):
    result = await classify_image(IMAGE_BYTES, {"name": UUID_NAME}, extractor=_fixed({}), verifier=verifier)

    verifier.assert_not_awaited()
    assert result.is_ai is True
    assert result.confidence == pytest.approx(0.45)
    assert result.classification_type is ClassificationType.GENERATED
    assert any("high false positive risk" in indicator for indicator in result.indicators)


async def test_finalize_assigns_generated_to_untyped_ai(verifier):
    result = await classify_image(
        IMAGE_BYTES, {}, extractor=_fixed({"Software": "DALL-E 3"}), verifier=verifier
    )
    assert result.classification_type is ClassificationType.GENERATED


async def test_extraction_failure_returns_unknown(verifier):
    def _broken(_bytes):
        raise ExtractionError("cannot identify image file")

    result = await classify_image(IMAGE_BYTES, {"name": "x.jpg"}, extractor=_broken, verifier=verifier)

    verifier.assert_not_awaited()
    assert result.is_ai is False
    assert result.confidence == 0.0
    assert result.classification_type is ClassificationType.UNKNOWN
    assert result.error == "cannot identify image file"


async def test_unexpected_extractor_error_returns_unknown(verifier):
    def _crashing(_bytes):
        raise RuntimeError("decoder crashed")

    result = await classify_image(IMAGE_BYTES, {"name": "x.jpg"}, extractor=_crashing, verifier=verifier)

    verifier.assert_not_awaited()
    assert result.classification_type is ClassificationType.UNKNOWN
    assert result.error == "decoder crashed"
    assert result.indicators == ["extraction failed: decoder crashed"]


async def test_identical_inputs_give_identical_results():
    metadata = {"ActionsAction": ["c2pa.created", "c2pa.converted"], "Software": "Adobe Firefly"}

    first = await classify_image(
        IMAGE_BYTES, {"name": "art.png"}, DEFAULT_CATALOG, _fixed(metadata), _verifier_returning(0.3)
    )
    second = await classify_image(
        IMAGE_BYTES, {"name": "art.png"}, DEFAULT_CATALOG, _fixed(metadata), _verifier_returning(0.3)
    )

    assert first == second
    assert first.to_dict() == second.to_dict()


async def test_runs_do_not_share_state(verifier):
    flagged = await classify_image(
        IMAGE_BYTES, {}, extractor=_fixed({"Software": "Midjourney"}), verifier=verifier
    )
    clean = await classify_image(
        IMAGE_BYTES, {}, extractor=_fixed({"Make": "Nikon"}), verifier=verifier
    )

    assert flagged.is_ai is True
    assert clean.is_ai is False
    assert clean.generator is None


# ---------------------------------------------------------------------------
# Real extractor
# ---------------------------------------------------------------------------


async def test_real_jpeg_with_firefly_software(verifier):
    image_bytes = make_tiny_jpeg({SOFTWARE_TAG: "Adobe Firefly"})

    result = await classify_image(image_bytes, {"name": "photo.jpg"}, verifier=verifier)

    verifier.assert_not_awaited()
    assert result.is_ai is True
    assert result.generator == "Adobe Firefly"
    assert result.raw_metadata["Software"] == "Adobe Firefly"


async def test_real_invalid_bytes_are_unknown(verifier):
    result = await classify_image(b"definitely not an image", {"name": "x.jpg"}, verifier=verifier)
    assert result.classification_type is ClassificationType.UNKNOWN
    verifier.assert_not_awaited()


async def test_real_oversized_image_is_unknown(verifier):
    result = await classify_image(make_oversized_png(), {"name": "huge.png"}, verifier=verifier)

    verifier.assert_not_awaited()
    assert result.classification_type is ClassificationType.UNKNOWN
    assert result.is_ai is False
    assert "exceeds limit" in result.error
