"""Small geometry and numeric helpers shared by the generation stages."""

from typing import NamedTuple, Tuple, Union

import numpy as np

ArrayLike = Union[float, np.ndarray]


class Rect(NamedTuple):
    """Axis-aligned rectangle in world coordinates."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @classmethod
    def from_size(cls, width: float, height: float) -> "Rect":
        """Rectangle spanning [0, width] x [0, height]."""
        return cls(0.0, 0.0, float(width), float(height))

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x_min + self.x_max) * 0.5, (self.y_min + self.y_max) * 0.5)

    def contains(self, x: float, y: float) -> bool:
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max

    def expand(self, margin: float) -> "Rect":
        """Grow the rectangle by margin on every side."""
        return Rect(self.x_min - margin, self.y_min - margin,
                    self.x_max + margin, self.y_max + margin)

    def scale(self, factor: float) -> "Rect":
        """Scale width and height by factor around the center."""
        cx, cy = self.center
        hw = self.width * factor * 0.5
        hh = self.height * factor * 0.5
        return Rect(cx - hw, cy - hh, cx + hw, cy + hh)

    def corners(self) -> Tuple[Tuple[float, float], ...]:
        return (
            (self.x_min, self.y_min),
            (self.x_max, self.y_min),
            (self.x_max, self.y_max),
            (self.x_min, self.y_max),
        )


def saturate(value: ArrayLike) -> ArrayLike:
    """Clamp to [0, 1]."""
    return np.clip(value, 0.0, 1.0)


def map_range(value: ArrayLike, in_min: float, in_max: float,
              out_min: float, out_max: float) -> ArrayLike:
    """Linearly map value from [in_min, in_max] onto [out_min, out_max]."""
    return out_min + (value - in_min) * (out_max - out_min) / (in_max - in_min)


def map_clamp(value: ArrayLike, in_min: float, in_max: float,
              out_min: float, out_max: float) -> ArrayLike:
    """map_range followed by a clamp to the output range."""
    lo, hi = min(out_min, out_max), max(out_min, out_max)
    return np.clip(map_range(value, in_min, in_max, out_min, out_max), lo, hi)


def normalize(values: np.ndarray) -> np.ndarray:
    """
    Min-max normalize into [0, 1].

    A constant array maps to all zeros.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return values.copy()

    lo = values.min()
    hi = values.max()
    if hi <= lo:
        return np.zeros_like(values)

    return (values - lo) / (hi - lo)
