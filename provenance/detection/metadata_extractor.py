"""
Metadata extraction: raw image bytes → flat, JSON-friendly field map.

Sources, merged first-writer-wins:
  1. EXIF base IFD + Exif sub-IFD (tag names from PIL.ExifTags.TAGS)
  2. Container text chunks (`img.info`, e.g. PNG tEXt/iTXt)
  3. XMP packet (simple properties, lang-alt/seq/bag containers)
  4. IPTC (caption, headline, credit, source, by-line, keywords)
  5. C2PA active manifest, flattened by integrations.c2pa

Raises ExtractionError when Pillow cannot open the bytes. An image without
any metadata yields an empty dict.
"""

import io
import logging
import re
from typing import Any, Dict

import pillow_heif
from PIL import Image, IptcImagePlugin, UnidentifiedImageError
from PIL.ExifTags import TAGS

from provenance.config import settings
from provenance.exceptions import ExtractionError
from provenance.integrations.c2pa import flatten_manifest, get_c2pa_manifest

# Prevent decompression-bomb attacks
Image.MAX_IMAGE_PIXELS = settings.pil_max_image_pixels
pillow_heif.register_heif_opener()

logger = logging.getLogger(__name__)

EXIF_IFD_POINTER = 0x8769

# EXIF UserComment starts with an 8-byte character-code header
USER_COMMENT_HEADERS = (b"ASCII\x00\x00\x00", b"UNICODE\x00", b"JIS\x00\x00\x00\x00\x00", b"\x00" * 8)

IPTC_FIELDS = {
    (2, 25): "Keywords",
    (2, 80): "By-line",
    (2, 105): "Headline",
    (2, 110): "Credit",
    (2, 115): "Source",
    (2, 116): "CopyrightNotice",
    (2, 120): "Caption-Abstract",
}

# Container/encoder parameters Pillow exposes in `img.info`; not descriptive metadata
ENCODER_INFO_KEYS = frozenset({
    "exif", "xmp", "XML:com.adobe.xmp", "jfif", "jfif_version", "jfif_unit", "jfif_density",
    "dpi", "adobe", "adobe_transform", "progressive", "progression", "interlace",
    "gamma", "transparency", "aspect", "duration", "loop", "background", "version",
})

XMP_ALIASES = {
    "xmptk": "xmp_toolkit",
    "rights": "dc_rights",
}

XMP_ATTRIBUTE = re.compile(r'([A-Za-z][\w.-]*):([A-Za-z][\w.-]*)="([^"]*)"')
XMP_CONTAINER = re.compile(
    r"<([A-Za-z][\w.-]*):([A-Za-z][\w.-]*)>\s*<rdf:(?:Alt|Seq|Bag)>(.*?)</rdf:(?:Alt|Seq|Bag)>\s*</\1:\2>",
    re.DOTALL,
)
XMP_LIST_ITEM = re.compile(r"<rdf:li[^>]*>([^<]*)</rdf:li>")
XMP_ELEMENT = re.compile(r"<([A-Za-z][\w.-]*):([A-Za-z][\w.-]*)(?:\s[^>]*)?>([^<]+)</\1:\2>")

XMP_SKIPPED_PREFIXES = {"xmlns", "xml", "rdf"}


def _decode_bytes(value: bytes) -> str:
    for header in USER_COMMENT_HEADERS:
        if value.startswith(header):
            encoding = "utf-16" if header.startswith(b"UNICODE") else "utf-8"
            return value[len(header):].decode(encoding, errors="ignore").strip("\x00 ").strip()
    return value.decode("utf-8", errors="ignore").strip("\x00 ").strip()


def _clean_value(value: Any) -> Any:
    """Convert Pillow value types (IFDRational, bytes, tuples) to JSON-friendly ones."""
    if isinstance(value, (bytes, bytearray)):
        return _decode_bytes(bytes(value))
    if isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, (tuple, list)):
        return [_clean_value(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _clean_value(v) for k, v in value.items()}
    try:
        number = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return str(value)
    return number if number == number else None  # NaN from 0/0 rationals


def _merge(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if key not in target and value not in (None, "", []):
            target[key] = value


def _read_exif(img: Image.Image) -> Dict[str, Any]:
    exif = img.getexif()
    if not exif:
        return {}

    fields = {}
    tags = dict(exif.items())
    tags.update(exif.get_ifd(EXIF_IFD_POINTER).items())
    for tag, value in tags.items():
        if tag == EXIF_IFD_POINTER:
            continue
        name = TAGS.get(tag, str(tag))
        if name in ("MakerNote", "PrintImageMatching"):
            continue
        fields[name] = _clean_value(value)
    return fields


def _read_info(img: Image.Image) -> Dict[str, Any]:
    fields = {}
    for key, value in img.info.items():
        if not isinstance(key, str) or key in ENCODER_INFO_KEYS:
            continue
        if key == "icc_profile":
            fields["icc_profile"] = "present"
        elif isinstance(value, (str, int, float)):
            fields[key] = value
    return fields


def parse_xmp(packet: str) -> Dict[str, Any]:
    """Pull simple XMP properties out of a packet, keyed by local name."""
    fields: Dict[str, Any] = {}

    def _put(prefix: str, name: str, value: Any) -> None:
        if prefix in XMP_SKIPPED_PREFIXES:
            return
        key = XMP_ALIASES.get(name, name)
        if key not in fields and value not in ("", []):
            fields[key] = value

    for prefix, name, body in XMP_CONTAINER.findall(packet):
        items = [item.strip() for item in XMP_LIST_ITEM.findall(body) if item.strip()]
        _put(prefix, name, items[0] if len(items) == 1 else items)

    for prefix, name, value in XMP_ATTRIBUTE.findall(packet):
        _put(prefix, name, value.strip())

    for prefix, name, value in XMP_ELEMENT.findall(packet):
        _put(prefix, name, value.strip())

    return fields


def _read_xmp(img: Image.Image) -> Dict[str, Any]:
    packet = img.info.get("xmp") or img.info.get("XML:com.adobe.xmp")
    if not packet:
        return {}
    if isinstance(packet, (bytes, bytearray)):
        packet = bytes(packet).decode("utf-8", errors="ignore")

    fields = parse_xmp(packet)
    fields["xmp"] = packet
    return fields


def _read_iptc(img: Image.Image) -> Dict[str, Any]:
    try:
        iptc = IptcImagePlugin.getiptcinfo(img)
    except Exception as e:
        logger.debug(f"[META] IPTC block unreadable: {e}")
        return {}
    if not iptc:
        return {}

    fields = {}
    for record, name in IPTC_FIELDS.items():
        value = iptc.get(record)
        if value is None:
            continue
        if isinstance(value, list):
            fields[name] = [_clean_value(item) for item in value]
        else:
            fields[name] = _clean_value(value)
    return fields


def extract_metadata(image_bytes: bytes) -> Dict[str, Any]:
    if not image_bytes:
        raise ExtractionError("empty image data")

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            mime_type = Image.MIME.get(img.format, "image/jpeg")
            metadata: Dict[str, Any] = {}
            _merge(metadata, _read_exif(img))
            _merge(metadata, _read_info(img))
            _merge(metadata, _read_xmp(img))
            _merge(metadata, _read_iptc(img))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise ExtractionError(str(e) or type(e).__name__) from e

    manifest = get_c2pa_manifest(image_bytes, mime_type)
    if manifest:
        logger.info("[C2PA] Active manifest found")
        _merge(metadata, flatten_manifest(manifest))

    slim_log = {k: (str(v)[:20] + "..." if len(str(v)) > 20 else v) for k, v in metadata.items()}
    logger.info(f"[META] Raw Metadata (Slim): {slim_log}")
    return metadata
