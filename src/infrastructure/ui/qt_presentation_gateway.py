# src/infrastructure/ui/qt_presentation_gateway.py
"""
Qt implementation of the presentation gateway.
"""
import threading
import time
from typing import Any, Callable, List, Optional

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot
from PySide6.QtWidgets import QApplication

from src.domain.models.pipeline_events import OverlayVisibilityChangedEvent, PipelineEvent
from src.domain.models.region_model import Region
from src.domain.models.translation_result import TranslationResult
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_presentation_gateway import EventListener, IPresentationGateway, RegionSelectedHandler
from src.domain.services.i_settings_repository import ISettingsRepository
from src.presentation.components.qt_region_selector import QtRegionSelector
from src.presentation.components.translation_overlay import TranslationOverlay

SELECTOR_SETTLE_SECONDS = 0.15
HIDE_WAIT_TIMEOUT_SECONDS = 2.0


class _QtUIBridge(QObject):
    """Private bridge class that runs UI operations on the main thread."""
    call_signal = Signal(object)

    def __init__(self, logger: ILoggerService):
        super().__init__()
        self.logger = logger
        self.call_signal.connect(self._call_impl, Qt.QueuedConnection)

    @Slot(object)
    def _call_impl(self, func):
        try:
            func()
        except Exception as e:
            self.logger.exception(f"Error in queued UI operation: {e}")


class QtPresentationGateway(IPresentationGateway):
    """
    Drives the region selector and the translation overlay.

    Calls made on the GUI thread run immediately, so show_selector() can
    report failures to its caller. Calls from any other thread are queued onto
    the GUI thread.
    """

    def __init__(self, logger: ILoggerService, settings: ISettingsRepository):
        self.logger = logger
        self.settings = settings
        self._bridge = _QtUIBridge(logger)
        self._main_thread = QApplication.instance().thread()

        self._selector: Optional[QtRegionSelector] = None
        self._overlay: Optional[TranslationOverlay] = None
        self._overlay_visible = False

        self._on_selected: Optional[RegionSelectedHandler] = None
        self._on_cancelled: Optional[Callable[[], None]] = None

        self._listeners: List[EventListener] = []
        self._listeners_lock = threading.Lock()

        self._unsubscribe_settings = settings.on_change("overlay", self._on_overlay_settings_changed)

    def bind_selection_handlers(self, on_selected: RegionSelectedHandler,
                                on_cancelled: Callable[[], None]) -> None:
        self._on_selected = on_selected
        self._on_cancelled = on_cancelled

    def show_selector(self) -> None:
        self._run_on_main_thread(self._show_selector_impl)

    def hide_selector(self) -> None:
        self._run_on_main_thread(self._hide_selector_impl, wait=True)

    def show_overlay(self, result: TranslationResult) -> None:
        self._overlay_visible = True
        self._run_on_main_thread(lambda: self._show_overlay_impl(result))

    def hide_overlay(self) -> bool:
        if self._overlay is None or not self._overlay_visible:
            return False
        self._overlay_visible = False
        self._run_on_main_thread(self._hide_overlay_impl)
        return True

    def move_overlay(self, x: int, y: int) -> None:
        self._run_on_main_thread(lambda: self._ensure_overlay().move_to(x, y))

    def broadcast(self, event: PipelineEvent) -> None:
        self._run_on_main_thread(lambda: self._deliver(event))

    def add_listener(self, listener: EventListener) -> Callable[[], None]:
        with self._listeners_lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def close(self) -> None:
        """Destroy the windows and stop following settings changes."""
        self._unsubscribe_settings()
        if self._selector is not None:
            self._selector.close()
            self._selector = None
        if self._overlay is not None:
            self._overlay.close()
            self._overlay = None
        self._overlay_visible = False

    def _run_on_main_thread(self, func: Callable[[], Any], wait: bool = False) -> None:
        if QThread.currentThread() == self._main_thread:
            func()
            return
        if not wait:
            self._bridge.call_signal.emit(func)
            return

        done = threading.Event()

        def run() -> None:
            try:
                func()
            finally:
                done.set()

        self._bridge.call_signal.emit(run)
        if not done.wait(HIDE_WAIT_TIMEOUT_SECONDS):
            self.logger.warning("Timed out waiting for the GUI thread")

    def _deliver(self, event: PipelineEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)

        self.logger.debug("Broadcasting event", event=event.name)
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                self.logger.error(f"Event listener failed: {e}", event=event.name)

    def _show_selector_impl(self) -> None:
        if self._selector is None:
            self._selector = QtRegionSelector()
            self._selector.region_selected.connect(self._on_region_selected)
            self._selector.selection_cancelled.connect(self._on_selection_cancelled)
        self._selector.begin()

    def _hide_selector_impl(self) -> None:
        if self._selector is None or not self._selector.isVisible():
            return
        self._selector.hide()

        # The window system must drop the dimmed selector before the next screen grab
        deadline = time.monotonic() + SELECTOR_SETTLE_SECONDS
        while time.monotonic() < deadline:
            QApplication.processEvents()
            time.sleep(0.01)

    def _ensure_overlay(self) -> TranslationOverlay:
        if self._overlay is None:
            self._overlay = TranslationOverlay(self.settings.get("overlay"))
            self._overlay.dismissed.connect(self._on_overlay_dismissed)
        return self._overlay

    def _show_overlay_impl(self, result: TranslationResult) -> None:
        self._ensure_overlay().show_result(result)

    def _hide_overlay_impl(self) -> None:
        if self._overlay is not None:
            self._overlay.auto_hide_timer.stop()
            self._overlay.hide()

    def _on_region_selected(self, region: Region, display_id: Optional[str]) -> None:
        if self._on_selected is not None:
            self._on_selected(region, display_id)

    def _on_selection_cancelled(self) -> None:
        if self._on_cancelled is not None:
            self._on_cancelled()
        else:
            self._hide_selector_impl()

    def _on_overlay_dismissed(self) -> None:
        # Closed by the user or by the auto-hide timer
        self._overlay_visible = False
        self._deliver(OverlayVisibilityChangedEvent(visible=False))

    def _on_overlay_settings_changed(self, new_value, old_value) -> None:
        if self._overlay is not None:
            self._run_on_main_thread(lambda: self._overlay.apply_settings(new_value))
