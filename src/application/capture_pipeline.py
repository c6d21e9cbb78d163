# src/application/capture_pipeline.py
"""
Capture pipeline: the single-flight capture -> OCR/translation -> overlay workflow.

    IDLE --start_capture--> AWAITING_SELECTION --select_region--> PROCESSING --> IDLE
                                     |                                |
                                     +--cancel_capture--> IDLE        +--failure (error event)--> IDLE

Text translation has its own latch and never touches the selector or overlay.
"""
import threading
from concurrent.futures import Future
from typing import List, Optional

from src.domain.common.errors import (
    CaptureAlreadyInProgressError, DomainError, TranslationAlreadyInProgressError, UIError, ValidationError
)
from src.domain.common.result import Result
from src.domain.models.capture_result import CaptureResult
from src.domain.models.capture_session import CaptureSession, PipelineState
from src.domain.models.display_model import Display
from src.domain.models.history_entry import ExportFormat, HistoryEntry, HistoryFilters
from src.domain.models.pipeline_events import (
    ErrorEvent, OcrProgressEvent, OverlayVisibilityChangedEvent, ProgressStatus, TranslationResultEvent
)
from src.domain.models.region_model import Region
from src.domain.models.translation_result import TranslationRequest, TranslationResult
from src.domain.services.i_background_task_service import IBackgroundTaskService, Worker
from src.domain.services.i_capture_pipeline import ICapturePipeline
from src.domain.services.i_capture_service import ICaptureService
from src.domain.services.i_display_service import IDisplayService
from src.domain.services.i_history_repository import IHistoryRepository
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_presentation_gateway import IPresentationGateway
from src.domain.services.i_settings_repository import ISettingsRepository
from src.domain.services.i_translation_service import ITranslationService

PROGRESS_INITIALIZING = 0
PROGRESS_RECOGNIZING = 50
PROGRESS_COMPLETE = 100


def persist_result(history: IHistoryRepository, logger: ILoggerService, result: TranslationResult) -> None:
    """Save a result to history. Failures are logged and never reach the caller."""
    try:
        added = history.add(HistoryEntry.from_result(result))
    except Exception as e:
        logger.error(f"Unexpected error saving translation to history: {e}", result_id=result.id)
        return
    if added.is_failure:
        logger.warning(f"Translation not saved to history: {added.error}", result_id=result.id)


def progress_event(percent: int, message: str) -> OcrProgressEvent:
    if percent >= PROGRESS_COMPLETE:
        status = ProgressStatus.COMPLETE
    elif percent <= PROGRESS_INITIALIZING:
        status = ProgressStatus.INITIALIZING
    else:
        status = ProgressStatus.RECOGNIZING
    return OcrProgressEvent(status=status, progress=percent, message=message)


class CaptureProcessingWorker(Worker[TranslationResult]):
    """Captures the selected region, runs OCR and translation, and saves the result."""

    def __init__(self, region: Region, display_id: Optional[str],
                 capture_service: ICaptureService,
                 translation_service: ITranslationService,
                 history: IHistoryRepository,
                 logger: ILoggerService):
        super().__init__()
        self.region = region
        self.display_id = display_id
        self.capture_service = capture_service
        self.translation_service = translation_service
        self.history = history
        self.logger = logger

    def execute(self) -> Result[TranslationResult]:
        self.report_progress(PROGRESS_INITIALIZING, "Initializing OCR...")

        capture = self.capture_service.capture_region(self.region, self.display_id)
        if capture.is_failure:
            return Result.fail(capture.error)
        self.check_cancellation()

        self.report_progress(PROGRESS_RECOGNIZING, "Recognizing text...")
        translated = self.translation_service.process(capture.value)
        if translated.is_failure:
            return Result.fail(translated.error)
        self.check_cancellation()

        self.report_progress(PROGRESS_COMPLETE, "Complete")
        persist_result(self.history, self.logger, translated.value)
        return translated


class CapturePipeline(ICapturePipeline):
    """
    Coordinates the selector, capture engine, translation stage, overlay and history.

    State, the pending capture session and the translation latch are guarded
    by one re-entrant lock. A second capture or text translation while one is
    active is rejected immediately.
    """

    def __init__(self,
                 capture_service: ICaptureService,
                 display_service: IDisplayService,
                 translation_service: ITranslationService,
                 history: IHistoryRepository,
                 gateway: IPresentationGateway,
                 task_service: IBackgroundTaskService,
                 settings: ISettingsRepository,
                 logger: ILoggerService):
        self.capture_service = capture_service
        self.display_service = display_service
        self.translation_service = translation_service
        self.history = history
        self.gateway = gateway
        self.task_service = task_service
        self.settings = settings
        self.logger = logger

        self._lock = threading.RLock()
        self._state = PipelineState.IDLE
        self._session: Optional[CaptureSession] = None
        self._translating = False

        gateway.bind_selection_handlers(self._on_region_selected, self._on_selection_cancelled)

    @property
    def state(self) -> PipelineState:
        with self._lock:
            return self._state

    @property
    def is_translating(self) -> bool:
        with self._lock:
            return self._translating

    def start_capture(self) -> Result[Future]:
        with self._lock:
            if self._state != PipelineState.IDLE:
                self.logger.warning("Capture requested while busy", state=self._state.value)
                return Result.fail(CaptureAlreadyInProgressError())
            session = CaptureSession()
            self._session = session
            self._state = PipelineState.AWAITING_SELECTION

        self.logger.info("Capture started", session_id=session.id)
        try:
            self.gateway.show_selector()
        except Exception as e:
            error = UIError(f"Failed to show region selector: {e}", inner_error=e)
            self.logger.error(str(error))
            with self._lock:
                if self._session is session:
                    self._session = None
                    self._state = PipelineState.IDLE
            session.reject(error)
            return Result.fail(error)

        return Result.ok(session.future)

    def select_region(self, region: Region, display_id: Optional[str] = None) -> Result[bool]:
        with self._lock:
            if self._state != PipelineState.AWAITING_SELECTION or self._session is None:
                self.logger.debug("Region supplied with no pending capture; ignoring")
                return Result.ok(False)
            session = self._session
            self._session = None
            self._state = PipelineState.PROCESSING

        self._hide_selector()
        session.resolve(region)
        self.logger.info("Region selected", session_id=session.id, region=region.as_tuple(),
                         display_id=display_id)

        worker = CaptureProcessingWorker(region, display_id, self.capture_service,
                                         self.translation_service, self.history, self.logger)
        worker.set_on_progress(self._on_processing_progress)
        worker.set_on_completed(self._on_processing_completed)
        worker.set_on_error(self._on_processing_failed)

        started = self.task_service.execute_task(f"capture-processing-{session.id}", worker)
        if started.is_failure:
            self._on_processing_failed(started.error)
        return Result.ok(True)

    def cancel_capture(self) -> Result[bool]:
        with self._lock:
            if self._state != PipelineState.AWAITING_SELECTION or self._session is None:
                return Result.ok(False)
            session = self._session
            self._session = None
            self._state = PipelineState.IDLE

        self._hide_selector()
        session.cancel()
        self.logger.info("Capture cancelled", session_id=session.id)
        return Result.ok(True)

    def translate_text(self, request: TranslationRequest) -> Result[TranslationResult]:
        with self._lock:
            if self._translating:
                return Result.fail(TranslationAlreadyInProgressError())
            self._translating = True

        try:
            if not request.text or not request.text.strip():
                return Result.fail(ValidationError("Text to translate is empty"))

            resolved = TranslationRequest(
                text=request.text,
                source_language=request.source_language
                or self.settings.get_in("general", "source_language", "auto"),
                target_language=request.target_language
                or self.settings.get_in("translation", "target_language", "th"),
            )
            result = self.translation_service.translate(resolved)
            if result.is_failure:
                self.logger.warning(f"Text translation failed: {result.error}")
                return result

            persist_result(self.history, self.logger, result.value)
            self.gateway.broadcast(TranslationResultEvent(result.value))
            return result
        finally:
            with self._lock:
                self._translating = False

    def show_overlay(self, result: TranslationResult) -> Result[bool]:
        try:
            self.gateway.show_overlay(result)
        except Exception as e:
            return self._ui_failure("Failed to show overlay", e)
        self.gateway.broadcast(OverlayVisibilityChangedEvent(visible=True))
        return Result.ok(True)

    def hide_overlay(self) -> Result[bool]:
        try:
            hidden = self.gateway.hide_overlay()
        except Exception as e:
            return self._ui_failure("Failed to hide overlay", e)
        if hidden:
            self.gateway.broadcast(OverlayVisibilityChangedEvent(visible=False))
        return Result.ok(hidden)

    def update_overlay_position(self, x: int, y: int) -> Result[bool]:
        try:
            self.gateway.move_overlay(x, y)
        except Exception as e:
            return self._ui_failure("Failed to move overlay", e)
        return Result.ok(True)

    def get_displays(self) -> Result[List[Display]]:
        return self.display_service.list_displays()

    def get_primary_display(self) -> Result[Display]:
        return self.display_service.primary_display()

    def capture_region(self, region: Region, display_id: Optional[str] = None) -> Result[CaptureResult]:
        return self.capture_service.capture_region(region, display_id)

    def capture_full_screen(self, display_id: Optional[str] = None) -> Result[CaptureResult]:
        return self.capture_service.capture_full_screen(display_id)

    def get_history(self, filters: Optional[HistoryFilters] = None) -> Result[List[HistoryEntry]]:
        return self.history.get_all(filters)

    def delete_history_entry(self, entry_id: str) -> Result[bool]:
        return self.history.delete(entry_id)

    def clear_history(self) -> Result[int]:
        return self.history.clear()

    def export_history(self, export_format: ExportFormat, directory: Optional[str] = None) -> Result[str]:
        return self.history.export(export_format, directory)

    def shutdown(self) -> None:
        self.cancel_capture()
        self.task_service.cancel_all_tasks()
        with self._lock:
            self._state = PipelineState.IDLE
        self.logger.info("Capture pipeline shut down")

    def _on_region_selected(self, region: Region, display_id: Optional[str]) -> None:
        self.select_region(region, display_id)

    def _on_selection_cancelled(self) -> None:
        if not self.cancel_capture().value:
            self._hide_selector()

    def _on_processing_progress(self, percent: int, message: str) -> None:
        self.gateway.broadcast(progress_event(percent, message))

    def _on_processing_completed(self, result: TranslationResult) -> None:
        try:
            self.gateway.broadcast(TranslationResultEvent(result))
            self.gateway.show_overlay(result)
            self.gateway.broadcast(OverlayVisibilityChangedEvent(visible=True))
            self.logger.info("Capture processed", result_id=result.id, cached=result.cached)
        except Exception as e:
            error = UIError(f"Failed to present translation: {e}", inner_error=e)
            self.logger.error(str(error))
            self.gateway.broadcast(ErrorEvent.from_error(error))
        finally:
            self._return_to_idle()

    def _on_processing_failed(self, error: DomainError) -> None:
        self.logger.error(f"Capture processing failed: {error}")
        try:
            self.gateway.broadcast(ErrorEvent.from_error(error))
        finally:
            self._return_to_idle()

    def _return_to_idle(self) -> None:
        with self._lock:
            if self._state == PipelineState.PROCESSING:
                self._state = PipelineState.IDLE

    def _hide_selector(self) -> None:
        try:
            self.gateway.hide_selector()
        except Exception as e:
            self.logger.error(f"Failed to hide region selector: {e}")

    def _ui_failure(self, message: str, e: Exception) -> Result[bool]:
        error = UIError(f"{message}: {e}", inner_error=e)
        self.logger.error(str(error))
        return Result.fail(error)
