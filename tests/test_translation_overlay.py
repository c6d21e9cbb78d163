import pytest
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication

from src.infrastructure.config.json_settings_repository import DEFAULT_SETTINGS
from src.presentation.components.translation_overlay import TranslationOverlay
from tests.fakes import make_result


@pytest.fixture(scope="module")
def qapp():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def overlay(qapp):
    widget = TranslationOverlay(dict(DEFAULT_SETTINGS["overlay"], auto_hide_delay=0))
    yield widget
    widget.close()


def test_markup_in_text_is_shown_literally(overlay):
    result = make_result(source_text="<b>Hello</b>", translated_text="<i>สวัสดี</i>")

    overlay.show_result(result)

    assert overlay.translated_label.textFormat() == Qt.PlainText
    assert overlay.source_label.textFormat() == Qt.PlainText
    assert overlay.translated_label.text() == "<i>สวัสดี</i>"
    assert overlay.source_label.text() == "<b>Hello</b>"


def test_dismiss_emits_once(overlay):
    dismissed = []
    overlay.dismissed.connect(lambda: dismissed.append(True))
    overlay.show_result(make_result())

    overlay.dismiss()
    overlay.dismiss()

    assert dismissed == [True]
    assert not overlay.isVisible()
