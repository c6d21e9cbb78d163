# src/domain/services/i_display_service.py
from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.common.result import Result
from src.domain.models.display_model import Display


class IDisplayService(ABC):
    """Enumerates connected displays and their geometry."""

    @abstractmethod
    def list_displays(self) -> Result[List[Display]]:
        """
        Enumerate all displays.

        Order is stable within one call only. Exactly one display is flagged
        primary whenever the platform reports a primary.

        Returns:
            Result containing the displays, or DISPLAY_ENUMERATION_FAILED
        """
        pass

    @abstractmethod
    def primary_display(self) -> Result[Display]:
        """
        Get the primary display.

        Returns:
            Result containing the primary display, or NO_PRIMARY_DISPLAY
        """
        pass

    @property
    @abstractmethod
    def cached_displays(self) -> Optional[List[Display]]:
        """Displays from the most recent successful enumeration, if any."""
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Drop the cached enumeration."""
        pass
