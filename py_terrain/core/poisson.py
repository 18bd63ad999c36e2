"""
Point sampling for the terrain graph.

Interior points come from Bridson-style Poisson disk sampling, which keeps
every pair of samples at least `radius` apart while filling the extent.
Boundary points form two nested rectangular rings outside the extent so the
Voronoi cells along the real edge stay bounded and regular.
"""

import math
from typing import List, Optional

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .geometry import Rect

logger = structlog.get_logger()

SAMPLE_ATTEMPTS = 30
SAMPLE_EPSILON = 0.0001
NEIGHBOR_SPAN = 2


class SampleGrid:
    """Uniform grid storing the index of at most one sample per cell."""

    def __init__(self, cols: int, rows: int):
        self.cols = cols
        self.rows = rows
        self.cells: List[Optional[int]] = [None] * (rows * cols)

    def get(self, cx: int, cy: int) -> Optional[int]:
        return self.cells[cx + cy * self.cols]

    def set(self, cx: int, cy: int, value: Optional[int]) -> None:
        self.cells[cx + cy * self.cols] = value


class PoissonDiskSampler:
    """
    Accelerated dart throwing over a rectangular extent.

    Candidates are placed on a circle of radius `radius + epsilon` around an
    active sample, starting from a random angle and stepping evenly around
    it. An active sample with no acceptable candidate is retired.
    """

    def __init__(self, extent: Rect, radius: float, attempts: int = SAMPLE_ATTEMPTS):
        self.extent = extent
        self.radius = radius
        self.attempts = attempts
        self.cell_size = radius / math.sqrt(2.0)

        cols = max(1, int(math.ceil(extent.width / self.cell_size)))
        rows = max(1, int(math.ceil(extent.height / self.cell_size)))
        self.grid = SampleGrid(cols, rows)

        self.points: List[tuple] = []
        self.queued: List[int] = []

    def generate_samples(self, prng: AleaPRNG) -> np.ndarray:
        init = prng.point_in_rect(self.extent)
        self._accept(init)

        while self.queued:
            near_index = prng.randrange(0, len(self.queued))
            near_point = self.points[self.queued[near_index]]

            sample = self._generate_sample(prng, near_point)
            if sample is None:
                self.queued.pop(near_index)
            else:
                self._accept(sample)

        return np.array(self.points, dtype=np.float64).reshape(-1, 2)

    def _accept(self, point: tuple) -> None:
        index = len(self.points)
        self.points.append(point)
        self.queued.append(index)
        self.grid.set(*self._cell(point[0], point[1]), index)

    def _generate_sample(self, prng: AleaPRNG, near: tuple) -> Optional[tuple]:
        start = prng.uniform(0.0, 2.0 * math.pi)
        r = self.radius + SAMPLE_EPSILON

        for i in range(self.attempts):
            t = start + 2.0 * math.pi * i / self.attempts
            x = near[0] + math.cos(t) * r
            y = near[1] + math.sin(t) * r

            if not self.extent.contains(x, y):
                continue

            if not self._near_point_in_grid(x, y):
                return (x, y)

        return None

    def _near_point_in_grid(self, x: float, y: float) -> bool:
        """True if (x, y) is within radius of an existing sample."""
        cx, cy = self._cell(x, y)
        radius_sq = self.radius * self.radius

        x_lo = max(cx - NEIGHBOR_SPAN, 0)
        y_lo = max(cy - NEIGHBOR_SPAN, 0)
        x_hi = min(cx + NEIGHBOR_SPAN + 1, self.grid.cols)
        y_hi = min(cy + NEIGHBOR_SPAN + 1, self.grid.rows)

        for gy in range(y_lo, y_hi):
            for gx in range(x_lo, x_hi):
                i = self.grid.get(gx, gy)
                if i is None:
                    continue
                px, py = self.points[i]
                if (px - x) ** 2 + (py - y) ** 2 < radius_sq:
                    return True

        return False

    def _cell(self, x: float, y: float):
        cx = int((x - self.extent.x_min) / self.cell_size)
        cy = int((y - self.extent.y_min) / self.cell_size)
        # points on the max edge land one past the last cell
        return min(cx, self.grid.cols - 1), min(cy, self.grid.rows - 1)


def poisson(prng: AleaPRNG, extent: Rect, radius: float) -> np.ndarray:
    """
    Sample points within extent in a Poisson disk distribution.

    Args:
        prng: Shared random stream
        extent: Rectangle to fill
        radius: Minimum separation between samples

    Returns:
        Array of [x, y] sample coordinates
    """
    sampler = PoissonDiskSampler(extent, radius)
    return sampler.generate_samples(prng)


def generate_boundary_points(extent: Rect, distance: float) -> np.ndarray:
    """
    Generate two rings of points around the extent.

    The inner ring sits `distance` outside the extent and the outer ring
    `2 * distance` outside it. Outer edge points are offset by half a step so
    the triangles between the rings are symmetric.

    Args:
        extent: Sampled extent
        distance: Spacing between ring points, normally the sampling radius

    Returns:
        Array of boundary point coordinates
    """
    inner = extent.expand(distance)
    outer = extent.expand(distance * 2.0)

    points = []
    points.extend(inner.corners())
    points.extend(outer.corners())

    nx = int(inner.width / distance) - 1
    ny = int(inner.height / distance) - 1

    for i in range(1, nx):
        x = inner.x_min + inner.width * i / nx
        points.append((x, inner.y_min))
        points.append((x, inner.y_max))

    for i in range(1, ny):
        y = inner.y_min + inner.height * i / ny
        points.append((inner.x_min, y))
        points.append((inner.x_max, y))

    nx += 1
    ny += 1

    x_lo, x_hi = inner.x_min - distance * 0.5, inner.x_max + distance * 0.5
    y_lo, y_hi = inner.y_min - distance * 0.5, inner.y_max + distance * 0.5

    for i in range(1, nx):
        x = x_lo + (x_hi - x_lo) * i / nx
        points.append((x, inner.y_min - distance))
        points.append((x, inner.y_max + distance))

    for i in range(1, ny):
        y = y_lo + (y_hi - y_lo) * i / ny
        points.append((inner.x_min - distance, y))
        points.append((inner.x_max + distance, y))

    return np.array(points, dtype=np.float64)


def generate_points(prng: AleaPRNG, extent: Rect, radius: float) -> np.ndarray:
    """
    Fill the extent with sample points followed by the boundary rings.

    Interior samples always come first so their indices are stable.
    """
    interior = poisson(prng, extent, radius)
    boundary = generate_boundary_points(extent, radius)

    logger.info("Points generated",
                interior_points=len(interior),
                boundary_points=len(boundary))

    return np.vstack([interior, boundary])
