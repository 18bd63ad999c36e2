"""
Elevation composition.

Elevation lives on the graph vertices and stays in world units throughout;
slope and erosion are computed against the same x/y scale.
"""

import numpy as np
import structlog

from .features import Cone, Slope, TerrainFeatures
from .geometry import ArrayLike, saturate
from .voronoi_graph import TerrainGraph

logger = structlog.get_logger()


def ease_with_power(t: ArrayLike, power: float) -> ArrayLike:
    """
    Generalized exponential in/out easing, symmetric about t = 0.5.

    A power of 1 is the identity.
    """
    t = np.asarray(t, dtype=np.float64)
    low = np.power(np.clip(t * 2.0, 0.0, None), power) * 0.5
    high = 1.0 - np.power(np.clip(2.0 - t * 2.0, 0.0, None), power) * 0.5
    return np.where(t <= 0.5, low, high)


def add_elevation_cone(elevation: np.ndarray, vertices: np.ndarray, cone: Cone) -> None:
    """Add a cone's height, falling off with distance from its center."""
    d = np.hypot(vertices[:, 0] - cone.center[0], vertices[:, 1] - cone.center[1])
    t = saturate(1.0 - d / cone.radius)
    elevation += cone.height * ease_with_power(t, cone.steepness)


def add_elevation_slope(elevation: np.ndarray, vertices: np.ndarray, slope: Slope) -> None:
    """Add a slope's height along the projection onto its direction."""
    sx = slope.direction[0] * slope.length
    sy = slope.direction[1] * slope.length
    length_sq = sx * sx + sy * sy
    if length_sq == 0:
        return

    dx = vertices[:, 0] - slope.origin[0]
    dy = vertices[:, 1] - slope.origin[1]
    t = saturate((dx * sx + dy * sy) / length_sq)
    elevation += slope.height * t


def smooth(elevation: np.ndarray) -> None:
    """Take the square root of each elevation, compressing peaks."""
    np.sqrt(np.maximum(elevation, 0.0), out=elevation)


def relax(graph: TerrainGraph, elevation: np.ndarray) -> None:
    """Replace each elevation with the mean of its connected vertices."""
    average = np.zeros_like(elevation)

    for v in range(len(elevation)):
        neighbors = list(graph.connected_vertices(v))
        if neighbors:
            average[v] = elevation[neighbors].mean()

    elevation[:] = average


def median(values: np.ndarray) -> float:
    """Median, averaging the two middle values for even counts."""
    return float(np.median(values))


def set_sealevel(elevation: np.ndarray, sealevel: float) -> None:
    """Shift elevation so that `sealevel` becomes zero."""
    elevation -= sealevel


def set_median_sealevel(elevation: np.ndarray) -> float:
    """Put sea level at the median, splitting land and water evenly."""
    sealevel = median(elevation)
    set_sealevel(elevation, sealevel)
    return sealevel


def compose_elevation(graph: TerrainGraph, features: TerrainFeatures) -> np.ndarray:
    """
    Bake features into a fresh elevation array.

    Args:
        graph: Terrain graph
        features: Elevation primitives and conditioning switches

    Returns:
        Elevation per graph vertex
    """
    elevation = np.zeros(len(graph.vertices), dtype=np.float64)

    for cone in features.cones:
        add_elevation_cone(elevation, graph.vertices, cone)

    for slope in features.slopes:
        add_elevation_slope(elevation, graph.vertices, slope)

    if features.smooth:
        smooth(elevation)

    if features.relax:
        relax(graph, elevation)

    logger.info("Elevation composed",
                min_elevation=float(elevation.min()) if len(elevation) else 0.0,
                max_elevation=float(elevation.max()) if len(elevation) else 0.0)

    return elevation
