"""
Result Accumulator: the mutable state of one classification run.

Every analyzer mutates the result only through the methods below, which
enforce the merge rules:
  - confidence only ever increases (max-merge), clamped to [0, 1]
  - is_ai flips false → true once and is never reset
  - generator is write-once
  - classification type never moves back to `authentic`
  - detected_fields is first-writer-wins per key
  - indicators are append-only
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ClassificationType(str, Enum):
    AUTHENTIC = "authentic"
    GENERATED = "generated"
    ENHANCED = "enhanced"
    UNKNOWN = "unknown"


@dataclass
class AnalysisResult:
    is_ai: bool = False
    confidence: float = 0.0
    classification_type: ClassificationType = ClassificationType.AUTHENTIC
    generator: Optional[str] = None
    indicators: list[str] = field(default_factory=list)
    detected_fields: dict[str, Any] = field(default_factory=dict)
    raw_metadata: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def extraction_failed(cls, reason: str) -> "AnalysisResult":
        return cls(
            classification_type=ClassificationType.UNKNOWN,
            indicators=[f"extraction failed: {reason}"],
            error=reason,
        )

    @property
    def is_authentic(self) -> bool:
        return self.classification_type is ClassificationType.AUTHENTIC

    def raise_confidence(self, candidate: float) -> None:
        candidate = min(1.0, max(0.0, float(candidate)))
        self.confidence = max(self.confidence, candidate)

    def mark_ai(self, confidence: float = None) -> None:
        self.is_ai = True
        if confidence is not None:
            self.raise_confidence(confidence)

    def set_generator(self, candidate: Any) -> None:
        if self.generator is None and candidate:
            self.generator = str(candidate)

    def set_type(self, classification_type: ClassificationType) -> None:
        if classification_type is ClassificationType.AUTHENTIC:
            return
        self.classification_type = classification_type

    def set_type_if_authentic(self, classification_type: ClassificationType) -> None:
        if self.is_authentic:
            self.set_type(classification_type)

    def record_field(self, key: str, value: Any) -> None:
        if key not in self.detected_fields:
            self.detected_fields[key] = value

    def add_indicator(self, message: str) -> None:
        self.indicators.append(message)

    def finalize(self) -> None:
        """AI detected without a more specific type defaults to `generated`."""
        if self.is_ai and self.is_authentic:
            self.classification_type = ClassificationType.GENERATED

    def to_dict(self) -> dict:
        data = {
            "isAI": self.is_ai,
            "confidence": self.confidence,
            "type": self.classification_type.value,
            "generator": self.generator,
            "indicators": list(self.indicators),
            "detectedFields": dict(self.detected_fields),
            "rawMetadata": self.raw_metadata,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


def summarize(result: AnalysisResult) -> dict:
    """Compact, display-oriented view of a result."""
    return {
        "isAI": result.is_ai,
        "confidence": f"{result.confidence * 100:.1f}%",
        "type": result.classification_type.value,
        "generator": result.generator,
        "indicatorCount": len(result.indicators),
        "keyFields": list(result.detected_fields.keys()),
    }
