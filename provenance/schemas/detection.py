from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FileInfo(BaseModel):
    name: Optional[str] = None
    size: Optional[int] = None
    type: Optional[str] = None   # MIME type reported by the client


class DetectionResponse(BaseModel):
    """Classification result for one uploaded image, echoed with its file info."""
    model_config = ConfigDict(populate_by_name=True)

    is_ai: bool = Field(False, alias="isAI")
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    type: str = "unknown"        # authentic | generated | enhanced | unknown
    generator: Optional[str] = None
    indicators: List[str] = []
    detected_fields: Dict[str, Any] = Field(default_factory=dict, alias="detectedFields")
    raw_metadata: Dict[str, Any] = Field(default_factory=dict, alias="rawMetadata")
    file_info: Optional[FileInfo] = Field(None, alias="fileInfo")
    error: Optional[str] = None


class DetectionSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_ai: bool = Field(alias="isAI")
    confidence: str              # e.g. "87.5%"
    type: str
    generator: Optional[str] = None
    indicator_count: int = Field(alias="indicatorCount")
    key_fields: List[str] = Field(alias="keyFields")
