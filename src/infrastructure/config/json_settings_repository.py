#src/infrastructure/config/json_settings_repository.py

"""
JSON-based implementation of the settings repository.

Stores settings in a JSON file on disk.
"""
import copy
import json
import os
import threading
from typing import Any, Callable, Dict, List

from src.domain.common.errors import ConfigurationError, ValidationError
from src.domain.common.result import Result
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_settings_repository import ISettingsRepository, SettingsCallback

_SHORTCUT_PREFIX = "CommandOrControl+Shift+"

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "general": {
        "source_language": "auto",
        "auto_start": False,
        "theme": "dark",
        "language": "th",
    },
    "shortcuts": {
        "capture": _SHORTCUT_PREFIX + "X",
        "hide_overlay": _SHORTCUT_PREFIX + "H",
        "show_history": _SHORTCUT_PREFIX + "Y",
        "show_settings": _SHORTCUT_PREFIX + "S",
        "quit": _SHORTCUT_PREFIX + "Q",
    },
    "overlay": {
        "opacity": 90,
        "font_size": 16,
        "font_family": "Sarabun",
        "background_color": "#0f172a",
        "text_color": "#f8fafc",
        "position": "cursor",
        "custom_position": None,
        "auto_hide_delay": 30000,  # ms, 0 disables
        "click_through": False,
        "max_width": 600,
    },
    "ocr": {
        "engine": "tesseract",
        "confidence": 70,
        "language": "auto",
        "preprocess": True,
        "scale_factor": 2.0,
        "tesseract_path": "",
    },
    "translation": {
        "provider": "google",
        "api_endpoint": "",
        "api_key": "",
        "target_language": "th",
        "cache_enabled": True,
        "cache_size": 1000,
        "cache_ttl": 604800,  # seconds
    },
    "history": {
        "database_url": "",
    },
}


class JsonSettingsRepository(ISettingsRepository):
    """
    JSON-based implementation of the settings repository.

    Access is serialized with an RLock. The file is re-read when its
    modification time changes, and missing sections or keys are filled from
    DEFAULT_SETTINGS.
    """

    def __init__(self, settings_file: str, logger: ILoggerService):
        """
        Initialize the repository.

        Args:
            settings_file: Path to the JSON settings file
            logger: Logger service
        """
        self.settings_file = settings_file
        self.logger = logger
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._loaded = False
        self._last_modified = 0.0
        self._lock = threading.RLock()
        self._listeners: Dict[str, List[SettingsCallback]] = {}

    def get(self, section: str) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._load().get(section, {}))

    def get_in(self, section: str, key: str, default: Any = None) -> Any:
        with self._lock:
            return copy.deepcopy(self._load().get(section, {}).get(key, default))

    def get_all(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._load())

    def set(self, section: str, value: Dict[str, Any]) -> Result[bool]:
        if not isinstance(value, dict):
            return Result.fail(ValidationError(
                f"Settings section '{section}' must be a mapping",
                details={"section": section, "type": type(value).__name__}
            ))

        with self._lock:
            settings = self._load()
            old_value = copy.deepcopy(settings.get(section, {}))
            new_value = self._with_defaults(section, value)
            updated = dict(settings)
            updated[section] = new_value

            save_result = self._save(updated)
            if save_result.is_failure:
                return save_result

        self._notify(section, copy.deepcopy(new_value), old_value)
        return Result.ok(True)

    def set_in(self, section: str, key: str, value: Any) -> Result[bool]:
        with self._lock:
            current = self.get(section)
            current[key] = value
            return self.set(section, current)

    def reset(self) -> Result[bool]:
        with self._lock:
            old_settings = copy.deepcopy(self._load())
            defaults = copy.deepcopy(DEFAULT_SETTINGS)
            save_result = self._save(defaults)
            if save_result.is_failure:
                return save_result

        self.logger.info("Settings reset to defaults")
        for section, new_value in defaults.items():
            if old_settings.get(section) != new_value:
                self._notify(section, copy.deepcopy(new_value), old_settings.get(section, {}))
        return Result.ok(True)

    def on_change(self, section: str, callback: SettingsCallback) -> Callable[[], None]:
        with self._lock:
            self._listeners.setdefault(section, []).append(callback)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(section, [])
                if callback in listeners:
                    listeners.remove(callback)

        return unsubscribe

    def _load(self) -> Dict[str, Dict[str, Any]]:
        """Return the cached settings, re-reading the file when it changed on disk."""
        if os.path.exists(self.settings_file):
            try:
                mtime = os.path.getmtime(self.settings_file)
            except OSError as e:
                self.logger.debug(f"Error checking settings file modification time: {e}")
                mtime = self._last_modified
            if self._loaded and mtime <= self._last_modified:
                return self._cache

            try:
                with open(self.settings_file, "r", encoding="utf-8") as f:
                    stored = json.load(f)
                if not isinstance(stored, dict):
                    raise ValueError("top-level value is not an object")
            except (OSError, ValueError) as e:
                self.logger.error(f"Error loading settings from {self.settings_file}: {e}")
                stored = {}

            self._cache = self._merge_defaults(stored)
            self._last_modified = mtime
            self._loaded = True
            self.logger.debug("Settings loaded", path=self.settings_file)
            return self._cache

        if not self._loaded:
            self.logger.warning("Settings file not found. Creating it with default settings.")
            defaults = copy.deepcopy(DEFAULT_SETTINGS)
            if self._save(defaults).is_failure:
                # Keep running on in-memory defaults
                self._cache = defaults
                self._loaded = True
        return self._cache

    def _save(self, settings: Dict[str, Dict[str, Any]]) -> Result[bool]:
        try:
            settings_dir = os.path.dirname(self.settings_file)
            if settings_dir:
                os.makedirs(settings_dir, exist_ok=True)

            temp_path = f"{self.settings_file}.tmp"
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(settings, f, indent=4, ensure_ascii=False)

            # os.replace is atomic on the same filesystem
            os.replace(temp_path, self.settings_file)
        except (OSError, TypeError, ValueError) as e:
            error = ConfigurationError(
                f"Failed to save settings: {e}",
                details={"path": self.settings_file},
                inner_error=e
            )
            self.logger.error(str(error))
            return Result.fail(error)

        self._cache = settings
        self._loaded = True
        self._last_modified = os.path.getmtime(self.settings_file)
        self.logger.debug("Settings saved", path=self.settings_file)
        return Result.ok(True)

    def _merge_defaults(self, stored: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        merged = {}
        for section in DEFAULT_SETTINGS:
            value = stored.get(section)
            if value is not None and not isinstance(value, dict):
                self.logger.warning("Ignoring malformed settings section", section=section,
                                    type=type(value).__name__)
                value = None
            merged[section] = self._with_defaults(section, value or {})
        for section, value in stored.items():
            if section not in merged:
                merged[section] = value
        return merged

    @staticmethod
    def _with_defaults(section: str, value: Dict[str, Any]) -> Dict[str, Any]:
        merged = copy.deepcopy(DEFAULT_SETTINGS.get(section, {}))
        merged.update(copy.deepcopy(value))
        return merged

    def _notify(self, section: str, new_value: Any, old_value: Any) -> None:
        with self._lock:
            listeners = list(self._listeners.get(section, []))

        for callback in listeners:
            try:
                callback(new_value, old_value)
            except Exception as e:
                self.logger.error(f"Error notifying settings listener: {e}", section=section)
