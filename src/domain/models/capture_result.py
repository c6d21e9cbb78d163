# src/domain/models/capture_result.py
"""
Capture result model for a single successful screen capture.
"""
from dataclasses import dataclass

from src.domain.models.region_model import Region


@dataclass(frozen=True)
class CaptureResult:
    """
    Model representing one captured region.

    Attributes:
        image: PNG-encoded image bytes, never empty
        region: The region that was captured
        display_id: Identifier of the display the region was captured from
        timestamp: Capture time in epoch milliseconds
    """
    image: bytes
    region: Region
    display_id: str
    timestamp: int

    @property
    def size_bytes(self) -> int:
        return len(self.image)
