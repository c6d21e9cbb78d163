# src/domain/models/display_model.py
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Bounds:
    """Pixel rectangle in global desktop coordinates."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Display:
    """
    One monitor as seen at a single enumeration.

    Attributes:
        id: Identifier, stable within a session
        name: Human-readable label
        bounds: Logical pixel bounds in the global desktop space
        scale_factor: Device pixels per logical pixel
        is_primary: Whether the platform reported this display as primary
    """
    id: str
    name: str
    bounds: Bounds
    scale_factor: float = 1.0
    is_primary: bool = False

    @property
    def width(self) -> int:
        return self.bounds.width

    @property
    def height(self) -> int:
        return self.bounds.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "scale_factor": self.scale_factor,
            "is_primary": self.is_primary,
            "bounds": self.bounds.to_dict(),
        }
