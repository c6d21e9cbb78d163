#src/domain/services/i_capture_pipeline.py

"""
Capture pipeline interface.

The pipeline coordinates region selection, capture, OCR and translation, the
result overlay and the history store. It is the single entry point used by the
application shell.
"""
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import List, Optional

from src.domain.common.result import Result
from src.domain.models.capture_result import CaptureResult
from src.domain.models.capture_session import PipelineState
from src.domain.models.display_model import Display
from src.domain.models.history_entry import ExportFormat, HistoryEntry, HistoryFilters
from src.domain.models.region_model import Region
from src.domain.models.translation_result import TranslationRequest, TranslationResult


class ICapturePipeline(ABC):
    """
    Interface for the capture/translate/overlay workflow.

    At most one capture is in flight at a time, and at most one text
    translation. Second requests are rejected, never queued.
    """

    @property
    @abstractmethod
    def state(self) -> PipelineState:
        pass

    @property
    @abstractmethod
    def is_translating(self) -> bool:
        pass

    @abstractmethod
    def start_capture(self) -> Result[Future]:
        """
        Begin an interactive capture by showing the selection surface.

        Returns:
            Result containing a Future that resolves with the selected Region,
            or fails with a DomainException when the capture is cancelled.
            Fails with CAPTURE_ALREADY_IN_PROGRESS outside the idle state.
        """
        pass

    @abstractmethod
    def select_region(self, region: Region, display_id: Optional[str] = None) -> Result[bool]:
        """
        Supply the selected region and start processing it.

        Returns:
            Result.ok(True) when a pending selection was resolved,
            Result.ok(False) when there was nothing to resolve
        """
        pass

    @abstractmethod
    def cancel_capture(self) -> Result[bool]:
        """
        Cancel a pending selection.

        Returns:
            Result.ok(True) when a pending selection was cancelled,
            Result.ok(False) when there was nothing to cancel
        """
        pass

    @abstractmethod
    def translate_text(self, request: TranslationRequest) -> Result[TranslationResult]:
        pass

    @abstractmethod
    def show_overlay(self, result: TranslationResult) -> Result[bool]:
        pass

    @abstractmethod
    def hide_overlay(self) -> Result[bool]:
        pass

    @abstractmethod
    def update_overlay_position(self, x: int, y: int) -> Result[bool]:
        pass

    @abstractmethod
    def get_displays(self) -> Result[List[Display]]:
        pass

    @abstractmethod
    def get_primary_display(self) -> Result[Display]:
        pass

    @abstractmethod
    def capture_region(self, region: Region, display_id: Optional[str] = None) -> Result[CaptureResult]:
        pass

    @abstractmethod
    def capture_full_screen(self, display_id: Optional[str] = None) -> Result[CaptureResult]:
        pass

    @abstractmethod
    def get_history(self, filters: Optional[HistoryFilters] = None) -> Result[List[HistoryEntry]]:
        pass

    @abstractmethod
    def delete_history_entry(self, entry_id: str) -> Result[bool]:
        pass

    @abstractmethod
    def clear_history(self) -> Result[int]:
        pass

    @abstractmethod
    def export_history(self, export_format: ExportFormat, directory: Optional[str] = None) -> Result[str]:
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """Cancel any pending selection and all background work."""
        pass
