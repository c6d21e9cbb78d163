# src/domain/models/region_model.py
from dataclasses import dataclass
from typing import Dict, Tuple

from src.domain.models.display_model import Bounds


@dataclass(frozen=True)
class Region:
    """Rectangle to capture, in the same coordinate space as a display's bounds."""
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

    @classmethod
    def from_bounds(cls, bounds: Bounds) -> 'Region':
        return cls(bounds.x, bounds.y, bounds.width, bounds.height)

    @classmethod
    def from_tuple(cls, coordinates: Tuple[int, int, int, int]) -> 'Region':
        x, y, width, height = coordinates
        return cls(x, y, width, height)

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
