"""
Signal matching primitives shared by every analyzer.

Functions:
  - contains_signature: generator-name / digital-source-type substring test.
  - matches_source_type: digital-source-type substring test only.
  - find_keywords: ordered list of catalog keywords present in a text.
  - as_sequence: normalizes array-like metadata values to a list.
  - is_skippable_field: binary / oversized / hash-like field heuristic.
  - to_searchable_string: flattens a metadata map for full-text search.
"""

import re
from typing import Any, Iterable

from provenance.config import settings
from provenance.detection.signatures import SignatureCatalog

HEX_LIKE = re.compile(r"^[0-9A-Fa-f\s]+$")

BINARY_FIELD_NAMES = (
    "hash", "signature", "thumbnail", "data", "pad", "item0", "item1", "item2", "item3",
    "raw_header", "c2pa_thumbnail", "jpeg_data", "binary", "bytes",
)


def contains_signature(text: Any, catalog: SignatureCatalog) -> bool:
    """Case-insensitive test of `text` against generator names and source types."""
    if not text or not isinstance(text, str):
        return False

    lower_text = text.lower()
    if any(generator in lower_text for generator in catalog.generators):
        return True
    return matches_source_type(text, catalog)


def matches_source_type(text: Any, catalog: SignatureCatalog) -> bool:
    if not text:
        return False
    lower_text = str(text).lower()
    return any(source.lower() in lower_text for source in catalog.ai_source_types)


def find_keywords(text: str, keywords: Iterable[str]) -> list[str]:
    lower_text = text.lower()
    return [keyword for keyword in keywords if keyword.lower() in lower_text]


def _index_key(key: Any):
    try:
        return (0, int(key), "")
    except (TypeError, ValueError):
        return (1, 0, str(key))


def as_sequence(value: Any) -> list:
    """
    Normalize an array-like metadata value to an ordered list.

    Proper sequences are returned as lists, indexed objects such as
    {0: "a", "1": "b"} are ordered by numeric key, scalars are wrapped and
    None becomes an empty list.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, dict):
        return [value[k] for k in sorted(value, key=_index_key)]
    return [value]


def is_skippable_field(key: str, value: Any) -> bool:
    """True for binary-looking, oversized or empty fields excluded from full-text search."""
    key_lower = str(key).lower()
    if any(name in key_lower for name in BINARY_FIELD_NAMES):
        return True

    if value is None or isinstance(value, (bytes, bytearray)):
        return True

    if isinstance(value, str):
        if len(value) > settings.search_string_max_length:
            return True
        if len(value) > 50 and HEX_LIKE.match(value):
            return True

    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_searchable_string(obj: dict, depth: int = 0, max_depth: int = None) -> str:
    """Flatten keys and text/number values of a (nested) metadata map into one string."""
    if max_depth is None:
        max_depth = settings.search_max_depth
    if depth > max_depth or not isinstance(obj, dict):
        return ""

    parts = []
    for key, value in obj.items():
        if is_skippable_field(key, value):
            continue

        parts.append(str(key))

        if isinstance(value, str):
            if value:
                parts.append(value)
        elif _is_number(value):
            parts.append(str(value))
        elif isinstance(value, (list, tuple)):
            for item in value:
                if isinstance(item, str) and 0 < len(item) < settings.search_array_item_max_length:
                    parts.append(item)
                elif _is_number(item):
                    parts.append(str(item))
                elif isinstance(item, dict):
                    nested = to_searchable_string(item, depth + 1, max_depth)
                    if nested:
                        parts.append(nested)
        elif isinstance(value, dict):
            nested = to_searchable_string(value, depth + 1, max_depth)
            if nested:
                parts.append(nested)

    return " ".join(parts)
