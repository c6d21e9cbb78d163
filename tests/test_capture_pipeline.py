import pytest

from src.application.capture_pipeline import CapturePipeline, progress_event
from src.domain.common.errors import ErrorCode, OcrError
from src.domain.models.capture_session import PipelineState
from src.domain.models.pipeline_events import (
    ErrorEvent, OcrProgressEvent, OverlayVisibilityChangedEvent, ProgressStatus, TranslationResultEvent
)
from src.domain.models.region_model import Region
from src.domain.models.translation_result import TranslationRequest
from tests.fakes import InlineTaskService, failure_code, make_result


@pytest.fixture
def pipeline(capture_service, display_service, translation_service, history, gateway,
             task_service, settings, logger):
    return CapturePipeline(
        capture_service=capture_service,
        display_service=display_service,
        translation_service=translation_service,
        history=history,
        gateway=gateway,
        task_service=task_service,
        settings=settings,
        logger=logger,
    )


@pytest.fixture
def deferred_pipeline(capture_service, display_service, translation_service, history, gateway,
                      settings, logger):
    """Pipeline whose processing stage only runs on task_service.run_pending()."""
    tasks = InlineTaskService(defer=True)
    pipeline = CapturePipeline(capture_service, display_service, translation_service, history,
                               gateway, tasks, settings, logger)
    return pipeline, tasks


# --- Selection ---

def test_start_capture_shows_selector_and_waits(pipeline, gateway):
    result = pipeline.start_capture()

    assert result.is_success
    assert pipeline.state == PipelineState.AWAITING_SELECTION
    assert gateway.selector_visible
    assert not result.value.done()


def test_second_start_capture_is_rejected(pipeline):
    first = pipeline.start_capture()
    second = pipeline.start_capture()

    assert first.is_success
    assert second.is_failure
    assert second.error.code == ErrorCode.CAPTURE_ALREADY_IN_PROGRESS
    assert not first.value.done()


def test_select_region_resolves_future_and_processes(pipeline, gateway, history, translation_service):
    future = pipeline.start_capture().value

    result = pipeline.select_region(Region(100, 100, 500, 300))

    assert result.value is True
    assert future.result(timeout=0) == Region(100, 100, 500, 300)
    assert not gateway.selector_visible
    assert translation_service.captures[0].display_id == "1"
    assert len(history.entries) == 1
    assert pipeline.state == PipelineState.IDLE


def test_selector_hidden_before_processing_dispatched(deferred_pipeline, gateway):
    pipeline, tasks = deferred_pipeline
    calls_at_dispatch = []
    execute_task = tasks.execute_task

    def recording_execute(task_id, worker):
        calls_at_dispatch.extend(gateway.calls)
        return execute_task(task_id, worker)

    tasks.execute_task = recording_execute
    pipeline.start_capture()

    pipeline.select_region(Region(100, 100, 500, 300))

    assert calls_at_dispatch[-1] == "hide_selector"
    assert not gateway.selector_visible


def test_selection_on_secondary_display(pipeline, translation_service):
    pipeline.start_capture()

    pipeline.select_region(Region(0, 0, 100, 100), "2")

    assert translation_service.captures[0].display_id == "2"


def test_events_in_order_after_successful_processing(pipeline, gateway):
    pipeline.start_capture()
    pipeline.select_region(Region(100, 100, 500, 300))

    assert gateway.event_names() == [
        "ocr:progress", "ocr:progress", "ocr:progress",
        "translation:result", "overlay:visibility-changed",
    ]
    progress = [e for e in gateway.events if isinstance(e, OcrProgressEvent)]
    assert [(e.status, e.progress) for e in progress] == [
        (ProgressStatus.INITIALIZING, 0),
        (ProgressStatus.RECOGNIZING, 50),
        (ProgressStatus.COMPLETE, 100),
    ]
    assert gateway.events[-1] == OverlayVisibilityChangedEvent(visible=True)
    assert gateway.overlay_result is gateway.events[3].result


def test_overlay_shown_with_persisted_result(pipeline, gateway, history):
    pipeline.start_capture()
    pipeline.select_region(Region(100, 100, 500, 300))

    shown = gateway.overlay_result
    assert shown is not None
    assert history.entries[shown.id].translated_text == shown.translated_text


def test_cancel_capture_rejects_future(pipeline, gateway):
    future = pipeline.start_capture().value

    result = pipeline.cancel_capture()

    assert result.value is True
    assert failure_code(future) == "CAPTURE_CANCELLED"
    assert not gateway.selector_visible
    assert pipeline.state == PipelineState.IDLE
    assert gateway.events == []


def test_user_dismissing_selector_cancels(pipeline, gateway):
    future = pipeline.start_capture().value

    gateway.on_cancelled()

    assert failure_code(future) == "CAPTURE_CANCELLED"
    assert pipeline.state == PipelineState.IDLE


def test_region_drawn_by_user_is_routed_to_pipeline(pipeline, gateway, translation_service):
    pipeline.start_capture()

    gateway.on_selected(Region(10, 10, 50, 50), "2")

    assert translation_service.captures[0].display_id == "2"


def test_select_and_cancel_without_session_are_no_ops(pipeline, gateway):
    assert pipeline.select_region(Region(0, 0, 10, 10)).value is False
    assert pipeline.cancel_capture().value is False
    assert gateway.events == []
    assert gateway.calls == []
    assert pipeline.state == PipelineState.IDLE


@pytest.mark.parametrize("finish", ["success", "cancel", "failure"])
def test_capture_can_restart_after_finishing(pipeline, translation_service, finish):
    pipeline.start_capture()
    if finish == "cancel":
        pipeline.cancel_capture()
    else:
        if finish == "failure":
            translation_service.error = OcrError("engine crashed")
        pipeline.select_region(Region(0, 0, 10, 10))

    assert pipeline.start_capture().is_success


def test_selector_failure_returns_to_idle(pipeline, gateway):
    gateway.fail_show_selector = True

    result = pipeline.start_capture()

    assert result.is_failure
    assert result.error.code == ErrorCode.UI_ERROR
    assert pipeline.state == PipelineState.IDLE

    gateway.fail_show_selector = False
    assert pipeline.start_capture().is_success


# --- Processing ---

def test_busy_while_processing(deferred_pipeline, gateway):
    pipeline, tasks = deferred_pipeline
    pipeline.start_capture()
    pipeline.select_region(Region(0, 0, 10, 10))

    assert pipeline.state == PipelineState.PROCESSING
    assert pipeline.start_capture().error.code == ErrorCode.CAPTURE_ALREADY_IN_PROGRESS
    assert pipeline.cancel_capture().value is False

    tasks.run_pending()

    assert pipeline.state == PipelineState.IDLE
    assert "translation:result" in gateway.event_names()


def test_ocr_failure_emits_error_and_persists_nothing(pipeline, gateway, history, translation_service):
    translation_service.error = OcrError("No text detected in the selected region")
    pipeline.start_capture()

    pipeline.select_region(Region(100, 100, 500, 300))

    errors = [e for e in gateway.events if isinstance(e, ErrorEvent)]
    assert len(errors) == 1
    assert errors[0].code == "OCR_FAILED"
    assert errors[0].type == "ocr"
    assert "translation:result" not in gateway.event_names()
    assert gateway.overlay_result is None
    assert history.entries == {}
    assert pipeline.state == PipelineState.IDLE
    assert pipeline.start_capture().is_success


def test_capture_failure_mid_processing(pipeline, gateway, screen_provider):
    screen_provider.sources = []
    pipeline.start_capture()

    pipeline.select_region(Region(0, 0, 10, 10))

    assert gateway.events[-1].code == "CAPTURE_FAILED"
    assert pipeline.state == PipelineState.IDLE


def test_out_of_bounds_selection_reports_error_event(pipeline, gateway):
    pipeline.start_capture()

    pipeline.select_region(Region(2000, 100, 500, 300))

    error = gateway.events[-1]
    assert isinstance(error, ErrorEvent)
    assert error.code == "REGION_OUT_OF_BOUNDS"
    assert error.details["display_id"] == "1"


@pytest.mark.parametrize("breakage", ["fail", "raise"])
def test_history_failure_does_not_abort_processing(pipeline, gateway, history, logger, breakage):
    if breakage == "fail":
        history.fail_adds = True
    else:
        history.raise_on_add = True
    pipeline.start_capture()

    pipeline.select_region(Region(0, 0, 10, 10))

    assert "translation:result" in gateway.event_names()
    assert gateway.overlay_visible
    assert pipeline.state == PipelineState.IDLE
    assert any("history" in message for message in logger.messages("warning") + logger.messages("error"))


def test_shutdown_cancels_pending_selection(pipeline, task_service):
    future = pipeline.start_capture().value

    pipeline.shutdown()

    assert failure_code(future) == "CAPTURE_CANCELLED"
    assert task_service.cancel_all_calls == 1
    assert pipeline.state == PipelineState.IDLE


# --- Text translation ---

def test_translate_text_uses_settings_defaults(pipeline, translation_service, settings, gateway, history):
    settings.set_in("translation", "target_language", "ja")

    result = pipeline.translate_text(TranslationRequest("Good morning"))

    assert result.is_success
    request = translation_service.requests[0]
    assert (request.source_language, request.target_language) == ("auto", "ja")
    assert len(history.entries) == 1
    assert gateway.event_names() == ["translation:result"]
    assert gateway.calls == []


def test_translate_text_keeps_explicit_languages(pipeline, translation_service):
    pipeline.translate_text(TranslationRequest("Bonjour", source_language="fr", target_language="en"))

    request = translation_service.requests[0]
    assert (request.source_language, request.target_language) == ("fr", "en")


def test_translate_text_rejects_empty_text(pipeline, translation_service):
    result = pipeline.translate_text(TranslationRequest("   "))

    assert result.error.code == ErrorCode.INVALID_REQUEST
    assert translation_service.requests == []
    assert not pipeline.is_translating


def test_concurrent_text_translation_is_rejected(pipeline, translation_service):
    nested = []
    translation_service.before_translate = lambda: nested.append(
        pipeline.translate_text(TranslationRequest("again"))
    )

    first = pipeline.translate_text(TranslationRequest("Hello"))

    assert first.is_success
    assert nested[0].error.code == ErrorCode.TRANSLATION_ALREADY_IN_PROGRESS
    assert not pipeline.is_translating


def test_text_translation_independent_of_capture(pipeline):
    pipeline.start_capture()

    assert pipeline.translate_text(TranslationRequest("Hello")).is_success
    assert pipeline.state == PipelineState.AWAITING_SELECTION


def test_translate_text_failure_not_persisted(pipeline, translation_service, history, gateway):
    translation_service.error = OcrError("boom")

    result = pipeline.translate_text(TranslationRequest("Hello"))

    assert result.is_failure
    assert history.entries == {}
    assert gateway.events == []


# --- Overlay ---

def test_show_and_hide_overlay(pipeline, gateway):
    result = make_result()

    assert pipeline.show_overlay(result).is_success
    assert pipeline.hide_overlay().value is True

    assert gateway.events == [
        OverlayVisibilityChangedEvent(visible=True),
        OverlayVisibilityChangedEvent(visible=False),
    ]


def test_hide_overlay_without_overlay_emits_nothing(pipeline, gateway):
    assert pipeline.hide_overlay().value is False
    assert gateway.events == []


def test_update_overlay_position(pipeline, gateway):
    assert pipeline.update_overlay_position(40, 60).is_success
    assert gateway.overlay_position == (40, 60)


# --- Pass-throughs ---

def test_display_pass_throughs(pipeline):
    assert [d.id for d in pipeline.get_displays().value] == ["1", "2"]
    assert pipeline.get_primary_display().value.id == "1"
    assert pipeline.capture_region(Region(0, 0, 10, 10), "2").value.display_id == "2"
    assert pipeline.capture_full_screen().value.display_id == "1"


def test_history_pass_throughs(pipeline, history):
    pipeline.translate_text(TranslationRequest("Hello"))
    entry = pipeline.get_history().value[0]

    assert pipeline.delete_history_entry(entry.id).value is True
    pipeline.translate_text(TranslationRequest("Again"))
    assert pipeline.clear_history().value == 1


def test_progress_event_status_mapping():
    assert progress_event(0, "Initializing OCR...").status == ProgressStatus.INITIALIZING
    assert progress_event(50, "Recognizing text...").status == ProgressStatus.RECOGNIZING
    assert progress_event(100, "Complete").to_payload() == {
        "status": "complete", "progress": 100, "message": "Complete"
    }
