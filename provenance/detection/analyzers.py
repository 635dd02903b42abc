"""
Domain analyzers: independent passes over the metadata map (and filename).

Each metadata analyzer has the signature
    analyzer(metadata, result, catalog) -> None
and mutates `result` only through the AnalysisResult merge methods.
METADATA_ANALYZERS fixes their execution order; `analyze_filename` runs after
them. Order matters: generator and type are write-first.
"""

import logging
import re
from typing import Any

from provenance.config import settings
from provenance.detection.matcher import (
    as_sequence,
    contains_signature,
    find_keywords,
    matches_source_type,
    to_searchable_string,
)
from provenance.detection.result import AnalysisResult, ClassificationType
from provenance.detection.signatures import SignatureCatalog

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

# --- Provenance manifest (C2PA) fields ---
MANIFEST_GENERATOR_FIELDS = (
    "claim__generator__info_name", "generator_info_name", "softwareAgent_name", "claim_generator",
)
MANIFEST_ACTION_FIELDS = ("ActionsAction", "actions_action", "c2pa_actions")
MANIFEST_AGENT_FIELDS = ("ActionsSoftwareAgentName", "softwareAgent", "claim_softwareAgent")
MANIFEST_SOURCE_FIELDS = ("actions_digital_source_type", "digitalSourceType", "digital_source_type")

# --- Embedded XML (XMP) fields ---
XMP_SOURCE_FIELDS = (
    "digital_source_type", "digital_source_file_type", "DigitalSourceType",
    "xmp_digital_source_type", "photoshop_digital_source_type",
)
XMP_CREDIT_FIELDS = ("credit", "Credit", "xmp_credit", "iptc_credit", "dc_rights")
XMP_TOOL_FIELDS = ("xmp_toolkit", "xmp_CreatorTool", "CreatorTool", "creatortool")

# --- Camera (EXIF/TIFF) fields ---
EXIF_SOFTWARE_FIELDS = (
    "Software", "software", "ProcessingSoftware", "exif_Software",
    "tiff_Software", "make_note_software",
)
EXIF_DEVICE_FIELDS = (
    "Make", "Model", "CameraModelName", "exif_Make", "exif_Model",
    "tiff_Make", "tiff_Model", "LensMake", "LensModel",
)
EXIF_COMMENT_FIELDS = (
    "UserComment", "ImageDescription", "exif_UserComment",
    "exif_ImageDescription", "tiff_ImageDescription",
)

# --- Press (IPTC) fields ---
IPTC_SOURCE_FIELDS = ("Source", "iptc_Source", "iptc_credit")
IPTC_CAPTION_FIELDS = (
    "Caption", "Caption-Abstract", "iptc_Caption", "iptc_Caption-Abstract",
    "description", "Headline", "iptc_Headline",
)


def _scan_fields(
    metadata: dict,
    result: AnalysisResult,
    catalog: SignatureCatalog,
    fields: tuple,
    confidence: float,
    message: str,
    captures_generator: bool = False,
) -> None:
    """Record every populated field and flag those carrying an AI signature."""
    for field in fields:
        value = metadata.get(field)
        if not value:
            continue

        result.record_field(field, value)

        if contains_signature(value, catalog):
            result.mark_ai(confidence)
            if captures_generator:
                result.set_generator(value)
            result.add_indicator(message.format(field=field, value=value))


def _entry_text(entry: Any, *keys: str) -> str:
    """Text of a list entry; dict entries contribute their first populated key."""
    if isinstance(entry, dict):
        for key in keys:
            if entry.get(key):
                return str(entry[key]).strip()
        return ""
    if entry is None:
        return ""
    return str(entry).strip()


def analyze_provenance_manifest(metadata: dict, result: AnalysisResult, catalog: SignatureCatalog) -> None:
    jumd_type = metadata.get("jumd_type")
    manifest_indicators = [
        isinstance(jumd_type, str) and "c2pa" in jumd_type,
        metadata.get("jumd_label") == "c2pa",
        bool(metadata.get("c2pa")),
        bool(metadata.get("claim__generator__info_name")),
        "ActionsAction" in metadata,
        "ActionsSoftwareAgentName" in metadata,
        bool(metadata.get("actions_digital_source_type")),
    ]
    if not any(manifest_indicators):
        return

    result.mark_ai(0.95)
    result.add_indicator("C2PA provenance data detected")
    result.record_field("c2pa", True)

    for field in MANIFEST_GENERATOR_FIELDS:
        if metadata.get(field):
            result.set_generator(metadata[field])
            result.add_indicator(f"C2PA Generator: {metadata[field]}")
            result.record_field("generator", metadata[field])
            break

    has_generation = False
    has_enhancement = False

    for field in MANIFEST_ACTION_FIELDS:
        if field not in metadata:
            continue

        actions = as_sequence(metadata[field])
        result.record_field(f"{field}_raw", metadata[field])
        result.record_field(f"{field}_parsed", actions)

        for action in actions:
            action_str = _entry_text(action, "action", "label")
            if not action_str or action_str in ("None", "null", "undefined"):
                continue

            if any(ai_action in action_str for ai_action in catalog.any_ai_actions):
                result.mark_ai(0.95)

            if any(gen in action_str for gen in catalog.generation_actions):
                has_generation = True
                result.add_indicator(f"C2PA Action: Image was created ({action_str})")

            if any(enh in action_str for enh in catalog.enhancement_actions):
                has_enhancement = True
                result.add_indicator(f"C2PA Action: Image was enhanced ({action_str})")

    if has_generation and has_enhancement:
        result.set_type(ClassificationType.ENHANCED)
        result.add_indicator("Image was both generated and enhanced by AI")
    elif has_generation:
        result.set_type(ClassificationType.GENERATED)
    elif has_enhancement:
        result.set_type(ClassificationType.ENHANCED)

    for field in MANIFEST_AGENT_FIELDS:
        if field not in metadata:
            continue

        agents = [_entry_text(agent, "name") for agent in as_sequence(metadata[field])]
        agents = [agent for agent in agents if agent]
        if not agents:
            continue

        result.add_indicator(f"C2PA Software Agents: {', '.join(agents)}")
        result.record_field("softwareAgents", agents)

        for agent in agents:
            if contains_signature(agent, catalog):
                result.mark_ai(0.98)
                result.set_generator(agent)

    for field in MANIFEST_SOURCE_FIELDS:
        if metadata.get(field) and matches_source_type(metadata[field], catalog):
            result.add_indicator("C2PA Digital source indicates AI generation")
            result.raise_confidence(0.95)


def analyze_xmp(metadata: dict, result: AnalysisResult, catalog: SignatureCatalog) -> None:
    for field in XMP_SOURCE_FIELDS:
        value = metadata.get(field)
        if not value:
            continue

        result.record_field(field, value)
        if matches_source_type(value, catalog):
            result.mark_ai(0.90)
            result.add_indicator(f"{field}: Indicates AI generation")

    _scan_fields(
        metadata, result, catalog, XMP_CREDIT_FIELDS, 0.85,
        '{field} field indicates AI: "{value}"', captures_generator=True,
    )
    _scan_fields(metadata, result, catalog, XMP_TOOL_FIELDS, 0.80, '{field} indicates AI: "{value}"')


def analyze_exif(metadata: dict, result: AnalysisResult, catalog: SignatureCatalog) -> None:
    _scan_fields(
        metadata, result, catalog, EXIF_SOFTWARE_FIELDS, 0.80,
        '{field} indicates AI: "{value}"', captures_generator=True,
    )
    _scan_fields(metadata, result, catalog, EXIF_DEVICE_FIELDS, 0.75, '{field} indicates AI: "{value}"')
    _scan_fields(metadata, result, catalog, EXIF_COMMENT_FIELDS, 0.70, '{field} indicates AI: "{value}"')


def analyze_iptc(metadata: dict, result: AnalysisResult, catalog: SignatureCatalog) -> None:
    _scan_fields(metadata, result, catalog, IPTC_SOURCE_FIELDS, 0.75, '{field} indicates AI: "{value}"')
    _scan_fields(metadata, result, catalog, IPTC_CAPTION_FIELDS, 0.65, '{field} indicates AI: "{value}"')


def analyze_general_fields(metadata: dict, result: AnalysisResult, catalog: SignatureCatalog) -> None:
    for key, value in metadata.items():
        if not isinstance(value, str) or not 0 < len(value) < settings.general_field_max_length:
            continue
        if key in result.detected_fields or not contains_signature(value, catalog):
            continue

        result.record_field(key, value)
        result.mark_ai(0.60)
        result.add_indicator(f'Field "{key}" contains AI signature: "{value}"')


def _infer_keyword_type(found: list[str], enhancement_keywords: tuple, generation_keywords: tuple) -> ClassificationType:
    """Any enhancement term wins, even alongside generation terms; `generated` otherwise."""
    lowered = {keyword.lower() for keyword in found}
    if any(keyword in lowered for keyword in enhancement_keywords):
        return ClassificationType.ENHANCED
    if any(keyword in lowered for keyword in generation_keywords):
        return ClassificationType.GENERATED
    # No typed keyword at all (e.g. only a generator name)
    return ClassificationType.GENERATED


def _first_generator(found: list[str], catalog: SignatureCatalog):
    return next((keyword for keyword in found if catalog.is_generator(keyword)), None)


def _preview(keywords: list[str], limit: int) -> str:
    suffix = "..." if len(keywords) > limit else ""
    return ", ".join(keywords[:limit]) + suffix


def analyze_keyword_search(metadata: dict, result: AnalysisResult, catalog: SignatureCatalog) -> None:
    """Last-resort pass: search the flattened metadata for the broad AI keyword list."""
    try:
        search_string = to_searchable_string(metadata)
        if len(search_string) < 10:
            return

        found = find_keywords(search_string, catalog.ai_keywords)
        if not found:
            return

        result.mark_ai(0.60 + min(0.4, 0.1 * len(found)))
        result.add_indicator(f"Metadata string search found AI keywords: {_preview(found, 5)}")
        result.record_field("stringSearchKeywords", found)
        result.record_field("metadataSearchString", search_string[:settings.search_preview_length])

        result.set_generator(_first_generator(found, catalog))
        result.set_type_if_authentic(
            _infer_keyword_type(found, catalog.search_enhancement_keywords, catalog.generation_keywords)
        )
    except Exception as e:
        logger.warning(f"[META] String search failed: {e}")
        result.add_indicator(f"String search error: {e}")


def analyze_filename(filename: str, result: AnalysisResult, catalog: SignatureCatalog) -> None:
    """Weak, supplementary signal from the file name (never the directory path)."""
    try:
        name = re.split(r"[\\/]", filename or "")[-1]
        if len(name) < 3:
            return

        found = find_keywords(name, catalog.ai_keywords)
        base_name = re.sub(r"\.[^.]+$", "", name)

        if found:
            result.mark_ai(0.70 + min(0.2, 0.05 * len(found)))
            result.add_indicator(f"Filename contains AI indicators: {_preview(found, 3)}")
            result.record_field("filenameKeywords", found)

            result.set_generator(_first_generator(found, catalog))
            result.set_type_if_authentic(
                _infer_keyword_type(found, catalog.filename_enhancement_keywords, catalog.generation_keywords)
            )
            result.add_indicator("Note: Detection partially based on filename - metadata analysis preferred")

        elif UUID_PATTERN.match(base_name):
            result.mark_ai(0.45)
            result.add_indicator("Filename follows UUID pattern (weak signal - many legitimate uses)")
            result.record_field("hasUuidPattern", True)
            result.set_type_if_authentic(ClassificationType.GENERATED)
            result.add_indicator("Note: UUID pattern is a very weak signal - high false positive risk")
    except Exception as e:
        logger.warning(f"[META] Filename analysis failed: {e}")
        result.add_indicator(f"Filename analysis error: {e}")


METADATA_ANALYZERS = (
    analyze_provenance_manifest,
    analyze_xmp,
    analyze_exif,
    analyze_iptc,
    analyze_general_fields,
    analyze_keyword_search,
)
