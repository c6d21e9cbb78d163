# src/domain/services/i_settings_repository.py
"""
Settings repository interface for application settings.

Settings are grouped into sections ("general", "overlay", "ocr", ...), each a
dictionary of key/value pairs.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from src.domain.common.result import Result

SettingsCallback = Callable[[Any, Any], None]


class ISettingsRepository(ABC):

    @abstractmethod
    def get(self, section: str) -> Dict[str, Any]:
        """
        Get a whole section.

        Returns:
            A copy of the section, or an empty dictionary for unknown sections
        """
        pass

    @abstractmethod
    def get_in(self, section: str, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def get_all(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def set(self, section: str, value: Dict[str, Any]) -> Result[bool]:
        """
        Replace a section and persist.

        Listeners registered for the section are notified with
        (new_value, old_value).
        """
        pass

    @abstractmethod
    def set_in(self, section: str, key: str, value: Any) -> Result[bool]:
        pass

    @abstractmethod
    def reset(self) -> Result[bool]:
        """Restore the defaults for every section."""
        pass

    @abstractmethod
    def on_change(self, section: str, callback: SettingsCallback) -> Callable[[], None]:
        """
        Register a listener for changes to a section.

        Returns:
            A function that unregisters the listener
        """
        pass
