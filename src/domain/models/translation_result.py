# src/domain/models/translation_result.py
"""
Translation models shared by the OCR/translation stage, the history store and
the overlay.
"""
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_result_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class TranslationRequest:
    """Options for a text-only translation."""
    text: str
    source_language: Optional[str] = None
    target_language: Optional[str] = None


@dataclass(frozen=True)
class BoundingBox:
    x0: int
    y0: int
    x1: int
    y1: int


@dataclass(frozen=True)
class OcrLine:
    text: str
    confidence: float
    bounding_box: BoundingBox


@dataclass(frozen=True)
class OcrResult:
    """
    Text recognised in a captured image.

    Attributes:
        text: Full recognised text, lines joined with newlines
        confidence: Mean word confidence in [0, 1]
        language: Tesseract language string used for recognition
        lines: Per-line text and geometry
    """
    text: str
    confidence: float
    language: str
    lines: List[OcrLine] = field(default_factory=list)

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())


@dataclass(frozen=True)
class TranslationResult:
    """
    Outcome of one OCR+translation or text translation.

    Attributes:
        id: Unique identifier
        source_text: Text that was translated
        translated_text: Translation output
        source_language: Source language code (detected when requested as "auto")
        target_language: Target language code
        confidence: Overall confidence in [0, 1]
        timestamp: Creation time in epoch milliseconds
        cached: Whether the translation was served from cache
        ocr_confidence: OCR confidence when the text came from a capture
        processing_time: Milliseconds spent producing the result
        image_data: Optional base64 PNG of the captured region
    """
    id: str
    source_text: str
    translated_text: str
    source_language: str
    target_language: str
    confidence: float
    timestamp: int
    cached: bool = False
    ocr_confidence: Optional[float] = None
    processing_time: Optional[int] = None
    image_data: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "id": self.id,
            "source_text": self.source_text,
            "translated_text": self.translated_text,
            "source_language": self.source_language,
            "target_language": self.target_language,
            "confidence": self.confidence,
            "timestamp": self.timestamp,
            "cached": self.cached,
        }
        if self.ocr_confidence is not None:
            payload["ocr_confidence"] = self.ocr_confidence
        if self.processing_time is not None:
            payload["processing_time"] = self.processing_time
        return payload
