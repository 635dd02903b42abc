"""Pure unit tests for provenance/detection/matcher.py."""

import pytest

from provenance.detection.matcher import (
    as_sequence,
    contains_signature,
    find_keywords,
    is_skippable_field,
    matches_source_type,
    to_searchable_string,
)
from provenance.detection.signatures import DEFAULT_CATALOG, SignatureCatalog


# ---------------------------------------------------------------------------
# contains_signature
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("text", [
    "Adobe Firefly",
    "MIDJOURNEY v6",
    "Made with Google AI",
    "made by stable diffusion xl",
    "http://cv.iptc.org/newscodes/digitalsourcetype/trainedAlgorithmicMedia",
    "compositeWithTrainedAlgorithmicMedia",
])
def test_contains_signature_matches(text):
    assert contains_signature(text, DEFAULT_CATALOG) is True


@pytest.mark.parametrize("text", ["Canon EOS R5", "Adobe Photoshop 25.0", "", None, 42, ["firefly"]])
def test_contains_signature_rejects(text):
    assert contains_signature(text, DEFAULT_CATALOG) is False


def test_contains_signature_uses_injected_catalog():
    catalog = SignatureCatalog(
        generators=("acme painter",),
        ai_keywords=(),
        ai_source_types=(),
        generation_actions=(),
        enhancement_actions=(),
        ai_software=(),
        generation_keywords=(),
        search_enhancement_keywords=(),
        filename_enhancement_keywords=(),
    )
    assert contains_signature("ACME Painter 2", catalog) is True
    assert contains_signature("Adobe Firefly", catalog) is False


def test_matches_source_type_is_case_insensitive():
    assert matches_source_type("TRAINEDALGORITHMICMEDIA", DEFAULT_CATALOG)
    assert not matches_source_type("digitalCapture", DEFAULT_CATALOG)


def test_find_keywords_preserves_catalog_order():
    found = find_keywords("Upscaled and EDITED with Midjourney", ("midjourney", "edited", "upscaled", "sora"))
    assert found == ["midjourney", "edited", "upscaled"]


# ---------------------------------------------------------------------------
# as_sequence
# ---------------------------------------------------------------------------


def test_as_sequence_list_passthrough():
    assert as_sequence(["a", "b"]) == ["a", "b"]


def test_as_sequence_indexed_object_orders_numerically():
    indexed = {"10": "k", "2": "c", "0": "a", "1": "b"}
    assert as_sequence(indexed) == ["a", "b", "c", "k"]


def test_as_sequence_int_keys():
    assert as_sequence({1: "c2pa.converted", 0: "c2pa.created"}) == ["c2pa.created", "c2pa.converted"]


def test_as_sequence_scalar_and_none():
    assert as_sequence("c2pa.created") == ["c2pa.created"]
    assert as_sequence(None) == []


# ---------------------------------------------------------------------------
# is_skippable_field / to_searchable_string
# ---------------------------------------------------------------------------


def test_binary_field_names_are_skipped():
    assert is_skippable_field("ThumbnailImage", "x")
    assert is_skippable_field("c2pa_hash", "abc")
    assert is_skippable_field("JPEGData", "abc")


def test_long_hex_string_is_skipped():
    assert is_skippable_field("Digest", "ab" * 30)
    assert not is_skippable_field("Digest", "abcd")


def test_oversized_string_and_bytes_are_skipped():
    assert is_skippable_field("Comment", "x" * 1001)
    assert is_skippable_field("Comment", b"\x00\x01")
    assert is_skippable_field("Comment", None)


def test_searchable_string_includes_keys_values_and_nested():
    metadata = {
        "Software": "Midjourney",
        "Width": 1024,
        "Flags": True,
        "Keywords": ["space", 7, "x" * 600],
        "c2pa": {"claim_generator": "OpenAI", "data": {"secret": "hidden"}},
    }
    text = to_searchable_string(metadata)

    assert "Software Midjourney" in text
    assert "Width 1024" in text
    assert "space 7" in text
    assert "x" * 600 not in text
    assert "claim_generator OpenAI" in text
    assert "hidden" not in text


def test_searchable_string_depth_limit():
    nested = {"level": "deepest"}
    for _ in range(7):
        nested = {"wrap": nested}
    assert "deepest" not in to_searchable_string(nested)
    assert "deepest" in to_searchable_string(nested, max_depth=10)


def test_ai_software_tokens_are_all_generator_names():
    for token in DEFAULT_CATALOG.ai_software:
        assert DEFAULT_CATALOG.is_generator(token)
        assert contains_signature(token, DEFAULT_CATALOG)
