# src/infrastructure/platform/capture_service.py
"""
Capture engine: region validation, display resolution and cropping.
"""
import io
import os
from typing import List, Optional, Tuple

from PIL import Image

from src.domain.common.errors import (
    CaptureFailedError, DisplayNotFoundError, InvalidRegionError, RegionOutOfBoundsError
)
from src.domain.common.result import Result
from src.domain.models.capture_result import CaptureResult
from src.domain.models.display_model import Display
from src.domain.models.region_model import Region
from src.domain.models.translation_result import now_ms
from src.domain.services.i_capture_service import ICaptureService
from src.domain.services.i_display_service import IDisplayService
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_screen_provider import IScreenProvider


class CaptureService(ICaptureService):
    """
    Captures regions of displays as PNG bytes.

    The platform exposes capture sources separately from displays, with no
    shared identifier. Sources are matched to displays by enumeration index,
    falling back to the first source when the index is out of range.
    """

    def __init__(self, display_service: IDisplayService, screen_provider: IScreenProvider,
                 logger: ILoggerService):
        self.display_service = display_service
        self.screen_provider = screen_provider
        self.logger = logger

    def get_display_by_id(self, display_id: Optional[str] = None) -> Result[Display]:
        return self._resolve_display(display_id).map(lambda resolved: resolved[0])

    def validate_region_structure(self, region: Region) -> Result[bool]:
        if region.x < 0 or region.y < 0:
            return Result.fail(InvalidRegionError(
                f"Region coordinates cannot be negative: x={region.x}, y={region.y}",
                details={"region": region.to_dict()}
            ))

        if region.width <= 0 or region.height <= 0:
            return Result.fail(InvalidRegionError(
                f"Region dimensions must be positive: width={region.width}, height={region.height}",
                details={"region": region.to_dict()}
            ))

        return Result.ok(True)

    def validate_region(self, region: Region, display: Display) -> Result[bool]:
        structure = self.validate_region_structure(region)
        if structure.is_failure:
            return structure

        bounds = display.bounds
        if region.right > bounds.right or region.bottom > bounds.bottom:
            return Result.fail(RegionOutOfBoundsError(
                f"Region {region.to_dict()} extends beyond display bounds "
                f"({bounds.width}x{bounds.height} at {bounds.x},{bounds.y})",
                details={"region": region.to_dict(), "display_bounds": bounds.to_dict(),
                         "display_id": display.id}
            ))

        return Result.ok(True)

    def capture_region(self, region: Region, display_id: Optional[str] = None) -> Result[CaptureResult]:
        # Structure is checked before any platform call
        structure = self.validate_region_structure(region)
        if structure.is_failure:
            return Result.fail(structure.error)

        resolved = self._resolve_display(display_id)
        if resolved.is_failure:
            return Result.fail(resolved.error)
        display, index = resolved.value

        bounds_check = self.validate_region(region, display)
        if bounds_check.is_failure:
            return Result.fail(bounds_check.error)

        snapshot = self._snapshot(display, index)
        if snapshot.is_failure:
            return Result.fail(snapshot.error)

        encoded = self._crop_and_encode(snapshot.value, region, display)
        if encoded.is_failure:
            return Result.fail(encoded.error)

        self.logger.debug("Region captured", display_id=display.id, region=region.as_tuple(),
                          size_bytes=len(encoded.value))
        return Result.ok(CaptureResult(
            image=encoded.value,
            region=region,
            display_id=display.id,
            timestamp=now_ms(),
        ))

    def capture_full_screen(self, display_id: Optional[str] = None) -> Result[CaptureResult]:
        display_result = self.get_display_by_id(display_id)
        if display_result.is_failure:
            return Result.fail(display_result.error)

        display = display_result.value
        return self.capture_region(Region.from_bounds(display.bounds), display.id)

    def save_capture(self, capture: CaptureResult, path: str) -> Result[str]:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            with open(path, "wb") as f:
                f.write(capture.image)
        except OSError as e:
            error = CaptureFailedError("Failed to save capture", details={"path": path}, inner_error=e)
            self.logger.error(str(error))
            return Result.fail(error)

        self.logger.debug(f"Capture saved to {path}")
        return Result.ok(path)

    def _resolve_display(self, display_id: Optional[str]) -> Result[Tuple[Display, int]]:
        """Resolve a display together with its index in the enumeration."""
        displays_result = self.display_service.list_displays()
        if displays_result.is_failure:
            return Result.fail(displays_result.error)

        displays: List[Display] = displays_result.value
        available = [d.id for d in displays]

        if not displays:
            return Result.fail(DisplayNotFoundError(
                "No displays available",
                details={"display_id": display_id, "available_displays": available}
            ))

        if not display_id:
            for index, display in enumerate(displays):
                if display.is_primary:
                    return Result.ok((display, index))
            # No display flagged primary in this enumeration
            return Result.ok((displays[0], 0))

        for index, display in enumerate(displays):
            if display.id == display_id:
                return Result.ok((display, index))

        return Result.fail(DisplayNotFoundError(
            f"Display '{display_id}' not found. Available displays: {', '.join(available)}",
            details={"display_id": display_id, "available_displays": available}
        ))

    def _snapshot(self, display: Display, index: int) -> Result[Image.Image]:
        size = (max(1, round(display.bounds.width * display.scale_factor)),
                max(1, round(display.bounds.height * display.scale_factor)))
        try:
            sources = self.screen_provider.list_capture_sources()
            if not sources:
                return Result.fail(CaptureFailedError("No capture sources available"))

            source = sources[index] if index < len(sources) else sources[0]
            image = source.thumbnail(size)
        except Exception as e:
            error = CaptureFailedError("Failed to capture screen", details={"display_id": display.id},
                                       inner_error=e)
            self.logger.error(f"{error}: {e}")
            return Result.fail(error)

        if image is None or image.width == 0 or image.height == 0:
            return Result.fail(CaptureFailedError(
                "Capture source has no thumbnail data",
                details={"source_id": source.source_id, "display_id": display.id}
            ))
        return Result.ok(image)

    def _crop_and_encode(self, snapshot: Image.Image, region: Region, display: Display) -> Result[bytes]:
        left, top, right, bottom = self.crop_box(region, display, snapshot.size)
        try:
            cropped = snapshot.crop((left, top, right, bottom))
            buffer = io.BytesIO()
            cropped.save(buffer, format="PNG")
            data = buffer.getvalue()
        except Exception as e:
            error = CaptureFailedError("Failed to encode captured region", inner_error=e)
            self.logger.error(f"{error}: {e}")
            return Result.fail(error)

        if not data:
            return Result.fail(CaptureFailedError("Captured image is empty",
                                                  details={"display_id": display.id}))
        return Result.ok(data)

    @staticmethod
    def crop_box(region: Region, display: Display, snapshot_size: Tuple[int, int]) -> Tuple[int, int, int, int]:
        """
        Pixel box (left, top, right, bottom) of the region inside the display's snapshot.

        A region inside the display's global rectangle is made display-local
        by subtracting the display origin; any other region is taken as
        already display-local. The result is scaled and clamped to the snapshot.

        The two readings cannot be told apart when a display-local region also
        fits inside the display's global rectangle. On a display at x=1920 a
        local region at x=2000, width 400 is read as global and cropped from
        local x=80. Callers that work in local coordinates on a display away
        from the origin must keep regions out of that overlap.
        """
        bounds = display.bounds
        inside = (bounds.x <= region.x and region.right <= bounds.right
                  and bounds.y <= region.y and region.bottom <= bounds.bottom)
        local_x = region.x - bounds.x if inside else region.x
        local_y = region.y - bounds.y if inside else region.y

        scale = display.scale_factor or 1.0
        width, height = snapshot_size

        left = min(max(0, int(round(local_x * scale))), width - 1)
        top = min(max(0, int(round(local_y * scale))), height - 1)
        right = min(width, max(left + 1, int(round((local_x + region.width) * scale))))
        bottom = min(height, max(top + 1, int(round((local_y + region.height) * scale))))
        return left, top, right, bottom
