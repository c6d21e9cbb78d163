import pytest

from src.domain.common.di_container import DIContainer
from src.domain.common.errors import (
    CaptureCancelledError, DisplayNotFoundError, DomainError, DomainException, ErrorCategory, ErrorCode,
    OcrError
)
from src.domain.common.result import Result
from src.domain.models.capture_session import CaptureSession
from src.domain.models.display_model import Bounds
from src.domain.models.history_entry import HistoryEntry
from src.domain.models.pipeline_events import (
    ErrorEvent, OcrProgressEvent, OverlayVisibilityChangedEvent, ProgressStatus, TranslationResultEvent
)
from src.domain.models.region_model import Region
from src.domain.services.i_background_task_service import TaskCancelledException, Worker
from tests.fakes import make_result


# --- Result ---

def test_result_success_and_failure():
    ok = Result.ok(3)
    failed = Result.fail(OcrError("no text"))

    assert ok.is_success and ok.value == 3
    assert failed.is_failure and failed.error.code == ErrorCode.OCR_FAILED
    with pytest.raises(ValueError):
        _ = failed.value
    with pytest.raises(ValueError):
        _ = ok.error


def test_result_string_error_is_unknown_domain_error():
    error = Result.fail("something broke").error

    assert isinstance(error, DomainError)
    assert error.category == ErrorCategory.UNKNOWN
    assert error.message == "something broke"


def test_result_chaining():
    assert Result.ok(2).map(lambda v: v * 5).value == 10
    assert Result.ok(2).and_then(lambda v: Result.fail("odd")).is_failure
    assert Result.fail("x").map(lambda v: v + 1).is_failure
    assert Result.ok(1).match(lambda v: "yes", lambda e: "no") == "yes"

    mapped = Result.ok(0).map(lambda v: 1 / v)
    assert isinstance(mapped.error.inner_error, ZeroDivisionError)


def test_unwrap_raises_domain_exception():
    with pytest.raises(DomainException) as excinfo:
        Result.fail(CaptureCancelledError()).unwrap()

    assert excinfo.value.code == ErrorCode.CAPTURE_CANCELLED


def test_from_operation_wraps_exceptions(logger):
    def explode():
        raise OSError("disk gone")

    result = Result.from_operation(explode, logger, OcrError, "Could not read", path="/tmp/x")

    assert result.error.code == ErrorCode.OCR_FAILED
    assert result.error.details == {"path": "/tmp/x"}
    assert logger.messages("error")


def test_from_exception_unwraps_domain_exception():
    original = DisplayNotFoundError("gone", details={"display_id": "3"})

    assert DomainError.from_exception(DomainException(original)) is original
    assert DomainError.from_exception(KeyError("k")).category == ErrorCategory.UNKNOWN


# --- Models ---

def test_region_geometry():
    region = Region.from_bounds(Bounds(1920, 0, 2560, 1440))

    assert (region.right, region.bottom) == (4480, 1440)
    assert Region.from_tuple(region.as_tuple()) == region


def test_history_entry_from_result():
    result = make_result()

    entry = HistoryEntry.from_result(result)

    assert entry.id == result.id
    assert entry.to_dict()["translated_text"] == result.translated_text


def test_capture_session_completes_once():
    session = CaptureSession()

    session.resolve(Region(0, 0, 1, 1))
    session.cancel()

    assert session.is_done
    assert session.future.result(timeout=0) == Region(0, 0, 1, 1)


# --- Events ---

def test_event_names_and_payloads():
    result = make_result(cached=True)

    assert OcrProgressEvent(ProgressStatus.RECOGNIZING, 50, "Recognizing text...").to_payload() == {
        "status": "recognizing", "progress": 50, "message": "Recognizing text..."
    }
    assert TranslationResultEvent(result).name == "translation:result"
    assert TranslationResultEvent(result).to_payload()["cached"] is True
    assert OverlayVisibilityChangedEvent(False).to_payload() == {"visible": False}


def test_error_event_from_error():
    error = DisplayNotFoundError("Display 'x' not found", details={"available_displays": ["1", "2"]})

    event = ErrorEvent.from_error(error)

    assert event.name == "error"
    assert event.to_payload() == {
        "type": "platform",
        "code": "DISPLAY_NOT_FOUND",
        "message": "Display 'x' not found",
        "details": {"available_displays": ["1", "2"]},
    }
    assert "details" not in ErrorEvent.from_error(OcrError("no text")).to_payload()


# --- Container ---

class Base:
    pass


class Impl(Base):
    pass


def test_container_singletons_and_dispose():
    container = DIContainer()
    container.register_singleton(Base, Impl)

    first = container.resolve(Base)
    assert container.resolve(Base) is first

    torn_down = []
    container.dispose(torn_down.append)
    assert torn_down == [first]


def test_container_factory_and_missing_registration():
    container = DIContainer()
    container.register_factory(Base, Impl)

    assert container.resolve(Base) is not container.resolve(Base)
    with pytest.raises(ValueError):
        container.resolve(Impl)


def test_container_detects_cycles():
    container = DIContainer()
    container.register_singleton(Base, lambda: container.resolve(Base))

    with pytest.raises(ValueError):
        container.resolve(Base)


# --- Worker ---

class CountingWorker(Worker[int]):
    def execute(self):
        self.report_progress(50, "half")
        self.check_cancellation()
        return Result.ok(1)


def test_worker_reports_progress_and_honours_cancel():
    worker = CountingWorker()
    progress = []
    worker.set_on_progress(lambda percent, message: progress.append((percent, message)))

    assert worker.execute().value == 1
    worker.cancel()
    with pytest.raises(TaskCancelledException):
        worker.execute()
    assert progress == [(50, "half"), (50, "half")]
