# src/domain/services/i_capture_service.py

"""
Capture service interface for validating regions and capturing them.

Defines the contract for the capture engine used by the pipeline and by
headless callers.
"""
from abc import ABC, abstractmethod
from typing import Optional

from src.domain.common.result import Result
from src.domain.models.capture_result import CaptureResult
from src.domain.models.display_model import Display
from src.domain.models.region_model import Region


class ICaptureService(ABC):
    """
    Interface for capture services.

    Defines methods for resolving displays, validating regions and capturing
    regions or whole displays.
    """

    @abstractmethod
    def get_display_by_id(self, display_id: Optional[str] = None) -> Result[Display]:
        """
        Resolve a display.

        Args:
            display_id: Display identifier; None selects the primary display,
                or the first display when none is flagged primary

        Returns:
            Result containing the display, or DISPLAY_NOT_FOUND listing the valid ids
        """
        pass

    @abstractmethod
    def validate_region_structure(self, region: Region) -> Result[bool]:
        """
        Check that a region has non-negative origin and positive size.

        Returns:
            Result.ok(True), or INVALID_REGION
        """
        pass

    @abstractmethod
    def validate_region(self, region: Region, display: Display) -> Result[bool]:
        """
        Check region structure, then that it fits inside the display's bounds.

        Returns:
            Result.ok(True), INVALID_REGION or REGION_OUT_OF_BOUNDS
        """
        pass

    @abstractmethod
    def capture_region(self, region: Region, display_id: Optional[str] = None) -> Result[CaptureResult]:
        """
        Capture a region of a display.

        Args:
            region: Region to capture
            display_id: Optional display identifier (defaults to the primary display)

        Returns:
            Result containing the capture, or a validation/capture error
        """
        pass

    @abstractmethod
    def capture_full_screen(self, display_id: Optional[str] = None) -> Result[CaptureResult]:
        """
        Capture a whole display.

        Args:
            display_id: Optional display identifier (defaults to the primary display)

        Returns:
            Result containing the capture
        """
        pass

    @abstractmethod
    def save_capture(self, capture: CaptureResult, path: str) -> Result[str]:
        """
        Write a capture's image to disk.

        Returns:
            Result containing the saved file path
        """
        pass
