import json
import os

from src.domain.common.errors import ErrorCode
from src.infrastructure.config.json_settings_repository import DEFAULT_SETTINGS, JsonSettingsRepository


def test_defaults_written_on_first_use(settings):
    assert settings.get_in("translation", "target_language") == "th"
    assert settings.get_in("overlay", "auto_hide_delay") == 30000
    assert os.path.exists(settings.settings_file)
    with open(settings.settings_file, encoding="utf-8") as f:
        assert json.load(f) == DEFAULT_SETTINGS


def test_get_returns_copies(settings):
    overlay = settings.get("overlay")
    overlay["opacity"] = 5

    assert settings.get_in("overlay", "opacity") == 90


def test_get_in_default_for_unknown_key(settings):
    assert settings.get_in("general", "missing", "fallback") == "fallback"
    assert settings.get("unknown-section") == {}


def test_set_merges_section_defaults_and_persists(settings, tmp_path, logger):
    assert settings.set("ocr", {"confidence": 50}).is_success

    ocr = settings.get("ocr")
    assert ocr["confidence"] == 50
    assert ocr["engine"] == "tesseract"

    reopened = JsonSettingsRepository(str(tmp_path / "settings.json"), logger)
    assert reopened.get_in("ocr", "confidence") == 50


def test_set_rejects_non_mapping(settings):
    result = settings.set("ocr", ["not", "a", "dict"])

    assert result.error.code == ErrorCode.INVALID_REQUEST


def test_on_change_receives_new_and_old_values(settings):
    changes = []
    settings.on_change("overlay", lambda new, old: changes.append((new, old)))

    settings.set_in("overlay", "opacity", 70)

    new, old = changes[0]
    assert new["opacity"] == 70
    assert old["opacity"] == 90


def test_listeners_only_hear_their_section(settings):
    changes = []
    settings.on_change("overlay", lambda new, old: changes.append(new))

    settings.set_in("ocr", "confidence", 10)

    assert changes == []


def test_unsubscribe(settings):
    changes = []
    unsubscribe = settings.on_change("general", lambda new, old: changes.append(new))
    unsubscribe()

    settings.set_in("general", "theme", "light")

    assert changes == []


def test_failing_listener_is_logged_not_raised(settings, logger):
    changes = []

    def broken(new, old):
        raise RuntimeError("listener bug")

    settings.on_change("general", broken)
    settings.on_change("general", lambda new, old: changes.append(new))

    assert settings.set_in("general", "theme", "light").is_success
    assert len(changes) == 1
    assert any("listener" in message for message in logger.messages("error"))


def test_reset_notifies_changed_sections_only(settings):
    settings.set_in("overlay", "opacity", 40)
    notified = []
    for section in DEFAULT_SETTINGS:
        settings.on_change(section, lambda new, old, section=section: notified.append(section))

    assert settings.reset().is_success

    assert notified == ["overlay"]
    assert settings.get_in("overlay", "opacity") == 90


def test_external_edit_is_picked_up(settings):
    settings.get_all()
    stored = settings.get_all()
    stored["translation"]["target_language"] = "ko"
    with open(settings.settings_file, "w", encoding="utf-8") as f:
        json.dump(stored, f)
    mtime = os.path.getmtime(settings.settings_file) + 5
    os.utime(settings.settings_file, (mtime, mtime))

    assert settings.get_in("translation", "target_language") == "ko"


def test_corrupt_file_falls_back_to_defaults(tmp_path, logger):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    repo = JsonSettingsRepository(str(path), logger)

    assert repo.get_in("general", "source_language") == "auto"
    assert any("Error loading settings" in message for message in logger.messages("error"))


def test_malformed_section_falls_back_to_defaults(tmp_path, logger):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"overlay": "big", "general": {"target_language": "ja"}}), encoding="utf-8")

    repo = JsonSettingsRepository(str(path), logger)

    assert repo.get("overlay")["opacity"] == 90
    assert repo.get_in("general", "target_language") == "ja"
    assert "Ignoring malformed settings section" in logger.messages("warning")


def test_missing_keys_filled_from_defaults(tmp_path, logger):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"overlay": {"opacity": 55}, "custom": {"a": 1}}), encoding="utf-8")

    repo = JsonSettingsRepository(str(path), logger)

    assert repo.get_in("overlay", "opacity") == 55
    assert repo.get_in("overlay", "font_size") == 16
    assert repo.get("custom") == {"a": 1}
    assert repo.get_in("history", "database_url") == ""
