"""
Random elevation primitives.

Features are drawn from the shared stream in a fixed order, so a seed always
reproduces the same set:

1. number of cones, then per cone: steepness, center, radius, height
2. optional huge cone
3. optional huge slope
4. smoothing and relaxation switches
"""

from dataclasses import dataclass, field
from typing import List, Tuple

import structlog

from .alea_prng import AleaPRNG
from .geometry import Rect

logger = structlog.get_logger()


@dataclass(frozen=True)
class Cone:
    """Radial bump; steepness 1 falls off linearly, higher values ease in and out."""
    center: Tuple[float, float]
    radius: float
    height: float
    steepness: float


@dataclass(frozen=True)
class Slope:
    """Linear ramp rising `height` over `length` along `direction` from `origin`."""
    origin: Tuple[float, float]
    direction: Tuple[float, float]
    length: float
    height: float


@dataclass(frozen=True)
class TerrainFeatures:
    """The elevation primitives and conditioning switches for one terrain."""
    cones: List[Cone] = field(default_factory=list)
    slopes: List[Slope] = field(default_factory=list)
    smooth: bool = False
    relax: bool = False
    erode: bool = True


@dataclass(frozen=True)
class FeatureOptions:
    """Ranges used when drawing features."""
    cone_count: Tuple[int, int] = (100, 250)
    steep_chance: float = 0.2
    steep_steepness: Tuple[float, float] = (2.0, 6.0)
    gentle_steepness: Tuple[float, float] = (1.0, 1.5)
    cone_radius: Tuple[float, float] = (50.0, 400.0)
    cone_height: Tuple[float, float] = (25.0, 75.0)
    cone_extent_scale: float = 1.2

    huge_cone_chance: float = 0.5
    huge_cone_radius: Tuple[float, float] = (300.0, 600.0)
    huge_cone_height: Tuple[float, float] = (50.0, 150.0)
    huge_cone_steepness: Tuple[float, float] = (0.9, 1.1)

    slope_chance: float = 0.1
    slope_extent_scale: float = 0.5
    slope_length: Tuple[float, float] = (100.0, 300.0)
    slope_height: Tuple[float, float] = (100.0, 300.0)

    smooth_chance: float = 0.5
    relax_chance: float = 0.5


def generate_features(prng: AleaPRNG, extent: Rect,
                      options: FeatureOptions = FeatureOptions()) -> TerrainFeatures:
    """
    Generate random terrain features.

    Args:
        prng: Shared random stream, already advanced past point sampling
        extent: Terrain extent
        options: Feature ranges

    Returns:
        TerrainFeatures for the elevation engine
    """
    expanded_extent = extent.scale(options.cone_extent_scale)
    smaller_extent = extent.scale(options.slope_extent_scale)

    cones = []
    slopes = []

    for _ in range(prng.randrange(*options.cone_count)):
        if prng.chance(options.steep_chance):
            steepness = prng.uniform(*options.steep_steepness)
        else:
            steepness = prng.uniform(*options.gentle_steepness)

        cones.append(Cone(
            center=prng.point_in_rect(expanded_extent),
            radius=prng.uniform(*options.cone_radius),
            height=prng.uniform(*options.cone_height),
            steepness=steepness,
        ))

    if prng.chance(options.huge_cone_chance):
        cones.append(Cone(
            center=prng.point_in_rect(expanded_extent),
            radius=prng.uniform(*options.huge_cone_radius),
            height=prng.uniform(*options.huge_cone_height),
            steepness=prng.uniform(*options.huge_cone_steepness),
        ))

    if prng.chance(options.slope_chance):
        origin = prng.point_in_rect(smaller_extent)
        direction = prng.direction()
        slopes.append(Slope(
            origin=origin,
            direction=direction,
            length=prng.uniform(*options.slope_length),
            height=prng.uniform(*options.slope_height),
        ))

    smooth = prng.chance(options.smooth_chance)
    relax = prng.chance(options.relax_chance)

    logger.info("Terrain features generated",
                cones=len(cones), slopes=len(slopes),
                smooth=smooth, relax=relax)

    return TerrainFeatures(cones=cones, slopes=slopes, smooth=smooth, relax=relax, erode=True)
