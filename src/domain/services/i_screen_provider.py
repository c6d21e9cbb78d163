# src/domain/services/i_screen_provider.py

"""
Screen provider interface: the platform boundary for display enumeration and
screen grabbing.

Display enumeration and capture sources come from separate platform calls
with no shared identifier, mirroring how desktop toolkits expose them.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image


@dataclass(frozen=True)
class PlatformScreen:
    """Raw screen description as reported by the platform."""
    native_id: str
    label: str
    x: int
    y: int
    width: int
    height: int
    scale_factor: float = 1.0


class CaptureSource(ABC):
    """A capturable screen handle. Not the same thing as a display."""

    @property
    @abstractmethod
    def source_id(self) -> str:
        pass

    @abstractmethod
    def thumbnail(self, size: Tuple[int, int]) -> Optional[Image.Image]:
        """
        Grab the screen's contents at the requested pixel size.

        Args:
            size: (width, height) in device pixels

        Returns:
            The grabbed image, or None when the source has no image data
        """
        pass


class IScreenProvider(ABC):
    """Interface over the windowing system's screen APIs."""

    @abstractmethod
    def list_screens(self) -> List[PlatformScreen]:
        """All connected screens, in platform order. May raise on platform failure."""
        pass

    @abstractmethod
    def primary_screen(self) -> Optional[PlatformScreen]:
        """The primary screen, or None when the platform reports none."""
        pass

    @abstractmethod
    def list_capture_sources(self) -> List[CaptureSource]:
        """Capture sources for whole screens, in platform order."""
        pass
