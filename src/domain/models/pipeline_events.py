# src/domain/models/pipeline_events.py
"""
Events broadcast by the capture pipeline to presentation listeners.

The set is closed: listeners switch on the concrete event class (or its
``name``) instead of probing payload fields.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Union

from src.domain.common.errors import DomainError
from src.domain.models.translation_result import TranslationResult


class ProgressStatus(Enum):
    INITIALIZING = "initializing"
    RECOGNIZING = "recognizing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class OcrProgressEvent:
    name: ClassVar[str] = "ocr:progress"

    status: ProgressStatus
    progress: int
    message: str

    def to_payload(self) -> Dict[str, Any]:
        return {"status": self.status.value, "progress": self.progress, "message": self.message}


@dataclass(frozen=True)
class TranslationResultEvent:
    name: ClassVar[str] = "translation:result"

    result: TranslationResult

    def to_payload(self) -> Dict[str, Any]:
        return self.result.to_dict()


@dataclass(frozen=True)
class OverlayVisibilityChangedEvent:
    name: ClassVar[str] = "overlay:visibility-changed"

    visible: bool

    def to_payload(self) -> Dict[str, Any]:
        return {"visible": self.visible}


@dataclass(frozen=True)
class ErrorEvent:
    name: ClassVar[str] = "error"

    type: str
    code: str
    message: str
    details: Optional[Dict[str, Any]] = field(default=None)

    @classmethod
    def from_error(cls, error: DomainError) -> 'ErrorEvent':
        return cls(
            type=error.category.value.lower(),
            code=error.code.value,
            message=error.message,
            details=error.details or None,
        )

    def to_payload(self) -> Dict[str, Any]:
        payload = {"type": self.type, "code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


PipelineEvent = Union[OcrProgressEvent, TranslationResultEvent, OverlayVisibilityChangedEvent, ErrorEvent]
