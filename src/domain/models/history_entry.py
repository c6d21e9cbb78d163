# src/domain/models/history_entry.py
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from src.domain.models.translation_result import TranslationResult


class ExportFormat(Enum):
    JSON = "json"
    CSV = "csv"


@dataclass(frozen=True)
class HistoryEntry:
    """One persisted translation."""
    id: str
    timestamp: int
    source_text: str
    translated_text: str
    source_language: str
    target_language: str
    confidence: float
    image_data: Optional[str] = None

    @classmethod
    def from_result(cls, result: TranslationResult) -> 'HistoryEntry':
        return cls(
            id=result.id,
            timestamp=result.timestamp,
            source_text=result.source_text,
            translated_text=result.translated_text,
            source_language=result.source_language,
            target_language=result.target_language,
            confidence=result.confidence,
            image_data=result.image_data,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HistoryFilters:
    """Query filters for the history store; unset fields do not filter."""
    search: Optional[str] = None
    date_from: Optional[int] = None
    date_to: Optional[int] = None
    source_language: Optional[str] = None
    min_confidence: Optional[float] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass(frozen=True)
class HistoryStats:
    total_count: int
    unique_languages: int
    avg_confidence: float
    most_common_languages: List[Tuple[str, int]] = field(default_factory=list)
