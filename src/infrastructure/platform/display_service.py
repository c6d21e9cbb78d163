# src/infrastructure/platform/display_service.py
"""
Display enumeration on top of the platform screen provider.
"""
import threading
from typing import List, Optional

from src.domain.common.errors import DisplayEnumerationError, NoPrimaryDisplayError
from src.domain.common.result import Result
from src.domain.models.display_model import Bounds, Display
from src.domain.services.i_display_service import IDisplayService
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_screen_provider import IScreenProvider, PlatformScreen


class DisplayService(IDisplayService):
    """
    Builds Display models from the platform's screen list.

    The screen list and the primary screen are read back to back; a monitor
    change between the two reads can leave no display flagged primary for
    that one enumeration.
    """

    def __init__(self, screen_provider: IScreenProvider, logger: ILoggerService):
        self.screen_provider = screen_provider
        self.logger = logger
        self._cache: Optional[List[Display]] = None
        self._lock = threading.Lock()

    def list_displays(self) -> Result[List[Display]]:
        try:
            screens = self.screen_provider.list_screens()
            primary = self.screen_provider.primary_screen()
        except Exception as e:
            error = DisplayEnumerationError(inner_error=e)
            self.logger.error(f"{error}: {e}")
            return Result.fail(error)

        primary_id = primary.native_id if primary is not None else None
        displays = [self._to_display(screen, screen.native_id == primary_id) for screen in screens]

        with self._lock:
            self._cache = displays

        self.logger.debug("Displays enumerated", count=len(displays), primary=primary_id)
        return Result.ok(list(displays))

    def primary_display(self) -> Result[Display]:
        try:
            primary = self.screen_provider.primary_screen()
        except Exception as e:
            error = DisplayEnumerationError(inner_error=e)
            self.logger.error(f"{error}: {e}")
            return Result.fail(error)

        if primary is None or not primary.native_id:
            return Result.fail(NoPrimaryDisplayError())
        return Result.ok(self._to_display(primary, True))

    @property
    def cached_displays(self) -> Optional[List[Display]]:
        with self._lock:
            return list(self._cache) if self._cache is not None else None

    def invalidate(self) -> None:
        with self._lock:
            self._cache = None

    @staticmethod
    def _to_display(screen: PlatformScreen, is_primary: bool) -> Display:
        return Display(
            id=screen.native_id,
            name=screen.label or f"Display {screen.native_id}",
            bounds=Bounds(screen.x, screen.y, screen.width, screen.height),
            scale_factor=max(0.0, float(screen.scale_factor)),
            is_primary=is_primary,
        )
