from provenance.schemas.detection import DetectionResponse, DetectionSummary, FileInfo

__all__ = [
    "FileInfo",
    "DetectionResponse",
    "DetectionSummary",
]
