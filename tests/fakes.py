# File: tests/fakes.py
"""In-memory stand-ins for the platform, presentation and storage boundaries."""

import threading
from typing import Callable, Dict, List, Optional, Tuple

from PIL import Image

from src.domain.common.errors import DomainError, DomainException, HistoryError
from src.domain.common.result import Result
from src.domain.models.history_entry import ExportFormat, HistoryEntry, HistoryFilters, HistoryStats
from src.domain.models.translation_result import TranslationResult, new_result_id, now_ms
from src.domain.services.i_background_task_service import IBackgroundTaskService, TaskCancelledException, Worker
from src.domain.services.i_history_repository import IHistoryRepository
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_presentation_gateway import IPresentationGateway
from src.domain.services.i_screen_provider import CaptureSource, IScreenProvider, PlatformScreen
from src.domain.services.i_translation_service import ITranslationService


# --- Logging ---

class RecordingLogger(ILoggerService):
    """Keeps log records in memory instead of printing them."""

    def __init__(self):
        self.records: List[Tuple[str, str, dict]] = []

    def _log(self, level, message, kwargs):
        self.records.append((level, message, kwargs))

    def debug(self, message, **kwargs):
        self._log("debug", message, kwargs)

    def info(self, message, **kwargs):
        self._log("info", message, kwargs)

    def warning(self, message, **kwargs):
        self._log("warning", message, kwargs)

    def error(self, message, **kwargs):
        self._log("error", message, kwargs)

    def critical(self, message, **kwargs):
        self._log("critical", message, kwargs)

    def exception(self, message, **kwargs):
        self._log("error", message, kwargs)

    def set_level(self, level):
        pass

    def messages(self, level: str) -> List[str]:
        return [message for lvl, message, _ in self.records if lvl == level]


# --- Platform ---

class FakeCaptureSource(CaptureSource):
    """Returns a solid image at whatever size is requested."""

    def __init__(self, source_id: str, color=(255, 255, 255), empty: bool = False):
        self._source_id = source_id
        self.color = color
        self.empty = empty
        self.requested_sizes: List[Tuple[int, int]] = []

    @property
    def source_id(self) -> str:
        return self._source_id

    def thumbnail(self, size):
        self.requested_sizes.append(size)
        if self.empty:
            return None
        return Image.new("RGB", size, self.color)


class FakeScreenProvider(IScreenProvider):
    """Two displays: "1" primary 1920x1080 @1.0 and "2" to its right, 2560x1440 @1.5."""

    def __init__(self, screens: Optional[List[PlatformScreen]] = None, primary_id: Optional[str] = "1",
                 sources: Optional[List[FakeCaptureSource]] = None):
        self.screens = screens if screens is not None else [
            PlatformScreen("1", "Built-in Display", 0, 0, 1920, 1080, 1.0),
            PlatformScreen("2", "External Display", 1920, 0, 2560, 1440, 1.5),
        ]
        self.primary_id = primary_id
        self.sources = sources if sources is not None else [
            FakeCaptureSource("screen:0", (255, 0, 0)),
            FakeCaptureSource("screen:1", (0, 0, 255)),
        ]
        self.list_calls = 0
        self.fail_with: Optional[Exception] = None

    def list_screens(self):
        self.list_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.screens)

    def primary_screen(self):
        if self.fail_with is not None:
            raise self.fail_with
        for screen in self.screens:
            if screen.native_id == self.primary_id:
                return screen
        return None

    def list_capture_sources(self):
        return list(self.sources)


# --- Presentation ---

class RecordingGateway(IPresentationGateway):
    """Records surface commands and broadcast events."""

    def __init__(self):
        self.events = []
        self.calls: List[str] = []
        self.selector_visible = False
        self.overlay_result: Optional[TranslationResult] = None
        self.overlay_visible = False
        self.overlay_position: Optional[Tuple[int, int]] = None
        self.fail_show_selector = False
        self.on_selected = None
        self.on_cancelled = None
        self._listeners = []

    def bind_selection_handlers(self, on_selected, on_cancelled):
        self.on_selected = on_selected
        self.on_cancelled = on_cancelled

    def show_selector(self):
        self.calls.append("show_selector")
        if self.fail_show_selector:
            raise RuntimeError("no display server")
        self.selector_visible = True

    def hide_selector(self):
        self.calls.append("hide_selector")
        self.selector_visible = False

    def show_overlay(self, result):
        self.calls.append("show_overlay")
        self.overlay_result = result
        self.overlay_visible = True

    def hide_overlay(self):
        self.calls.append("hide_overlay")
        if self.overlay_result is None or not self.overlay_visible:
            return False
        self.overlay_visible = False
        return True

    def move_overlay(self, x, y):
        self.calls.append("move_overlay")
        self.overlay_position = (x, y)

    def broadcast(self, event):
        self.events.append(event)
        for listener in list(self._listeners):
            listener(event)

    def add_listener(self, listener):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def event_names(self) -> List[str]:
        return [event.name for event in self.events]


# --- Background tasks ---

class InlineTaskService(IBackgroundTaskService):
    """
    Runs workers on the calling thread.

    With ``defer=True`` workers are queued until run_pending() is called, which
    leaves the caller observing the in-between state.
    """

    def __init__(self, defer: bool = False):
        self.defer = defer
        self.pending: Dict[str, Worker] = {}
        self.started: List[str] = []
        self.cancel_all_calls = 0

    def execute_task(self, task_id, worker):
        self.started.append(task_id)
        if self.defer:
            self.pending[task_id] = worker
        else:
            self._run(worker)
        return Result.ok(True)

    def run_pending(self):
        pending, self.pending = self.pending, {}
        for worker in pending.values():
            self._run(worker)

    def cancel_task(self, task_id):
        worker = self.pending.pop(task_id, None)
        if worker is None:
            return Result.fail(f"Task {task_id} not found")
        worker.cancel()
        return Result.ok(True)

    def is_task_running(self, task_id):
        return task_id in self.pending

    def get_running_tasks(self):
        return list(self.pending)

    def cancel_all_tasks(self):
        self.cancel_all_calls += 1
        for task_id in list(self.pending):
            self.cancel_task(task_id)

    @staticmethod
    def _run(worker):
        try:
            result = worker.execute()
        except TaskCancelledException:
            return
        except Exception as e:
            worker.report_error(DomainError.from_exception(e))
            return
        if result.is_success:
            worker.report_completed(result.value)
        else:
            worker.report_error(result.error)


# --- Translation ---

def make_result(source_text="Hello", translated_text="สวัสดี", source_language="en",
                target_language="th", confidence=0.9, timestamp=None, cached=False) -> TranslationResult:
    return TranslationResult(
        id=new_result_id(),
        source_text=source_text,
        translated_text=translated_text,
        source_language=source_language,
        target_language=target_language,
        confidence=confidence,
        timestamp=timestamp if timestamp is not None else now_ms(),
        cached=cached,
    )


class FakeTranslationService(ITranslationService):
    """Returns a canned result, or a canned error when ``error`` is set."""

    def __init__(self):
        self.error: Optional[DomainError] = None
        self.captures = []
        self.requests = []
        self.before_translate: Optional[Callable[[], None]] = None

    def process(self, capture):
        self.captures.append(capture)
        if self.error is not None:
            return Result.fail(self.error)
        return Result.ok(make_result())

    def translate(self, request):
        self.requests.append(request)
        if self.before_translate is not None:
            self.before_translate()
        if self.error is not None:
            return Result.fail(self.error)
        return Result.ok(make_result(source_text=request.text,
                                     source_language=request.source_language,
                                     target_language=request.target_language,
                                     confidence=1.0))

    def clear_cache(self):
        pass


# --- History ---

class InMemoryHistoryRepository(IHistoryRepository):
    """Dictionary-backed history; ``fail_adds`` makes add() fail like a broken database."""

    def __init__(self):
        self.entries: Dict[str, HistoryEntry] = {}
        self.fail_adds = False
        self.raise_on_add = False
        self._lock = threading.Lock()

    def add(self, entry):
        if self.raise_on_add:
            raise RuntimeError("database is locked")
        if self.fail_adds:
            return Result.fail(HistoryError("disk full"))
        with self._lock:
            self.entries[entry.id] = entry
        return Result.ok(entry)

    def get_all(self, filters: Optional[HistoryFilters] = None):
        with self._lock:
            entries = sorted(self.entries.values(), key=lambda e: e.timestamp, reverse=True)
        return Result.ok(entries)

    def get_by_id(self, entry_id):
        return Result.ok(self.entries.get(entry_id))

    def update(self, entry_id, **fields):
        return Result.ok(False)

    def delete(self, entry_id):
        with self._lock:
            return Result.ok(self.entries.pop(entry_id, None) is not None)

    def clear(self):
        with self._lock:
            count = len(self.entries)
            self.entries.clear()
        return Result.ok(count)

    def get_stats(self):
        return Result.ok(HistoryStats(total_count=len(self.entries), unique_languages=0, avg_confidence=0.0))

    def export(self, export_format: ExportFormat, directory=None):
        return Result.ok(f"{directory or '.'}/history.{export_format.value}")

    def close(self):
        pass


def failure_code(future) -> str:
    """The error code a rejected session future failed with."""
    exc = future.exception(timeout=0)
    assert isinstance(exc, DomainException)
    return exc.code.value
