"""
Terrain generation pipeline.

generate_terrain() runs every stage in order from one configuration:
points, features, graph, elevation and hydrology, then regions. All random
draws come from a single AleaPRNG seeded with the configuration seed.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .alea_prng import AleaPRNG
from .features import TerrainFeatures, generate_features
from .geometry import Rect
from .hydrology import HydrologyOptions, TerrainData
from .poisson import generate_points
from .regions import RegionOptions, Regions
from .voronoi_graph import TerrainGraph, generate_terrain_graph

logger = structlog.get_logger()

MAX_SEED = 2 ** 64


class TerrainConfig(BaseModel):
    """Configuration for terrain generation."""

    model_config = ConfigDict(frozen=True)

    domain_size: Tuple[float, float] = Field(
        description="Terrain (width, height) in world units"
    )
    seed: int = Field(
        ge=0, lt=MAX_SEED, description="Seed for the terrain's random stream"
    )
    radius: float = Field(
        gt=0, description="Minimum separation between sample points"
    )
    num_cities: int = Field(default=5, ge=0, description="Number of cities to place")
    num_regions: int = Field(
        default=0, ge=0, description="Requested number of regions (reserved, not used by region growth)"
    )

    @field_validator("domain_size")
    @classmethod
    def _positive_domain(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        width, height = value
        if not (width > 0 and height > 0):
            raise ValueError(f"domain_size must be positive in both axes, got {value}")
        return value

    @property
    def extent(self) -> Rect:
        return Rect.from_size(*self.domain_size)


@dataclass(frozen=True, eq=False)
class Terrain:
    """The complete, read-only result of one generation run."""
    config: TerrainConfig
    extent: Rect
    graph: TerrainGraph
    features: TerrainFeatures
    data: TerrainData
    regions: Regions


def generate_terrain(config: TerrainConfig,
                     hydrology_options: Optional[HydrologyOptions] = None,
                     region_options: Optional[RegionOptions] = None) -> Terrain:
    """
    Generate terrain, hydrology and regions from a configuration.

    Args:
        config: Validated terrain configuration
        hydrology_options: Erosion constants
        region_options: Region scoring and cost constants

    Returns:
        Terrain result sharing no mutable state with other runs
    """
    logger.info("Generating terrain",
                width=config.domain_size[0], height=config.domain_size[1],
                seed=config.seed, radius=config.radius,
                num_cities=config.num_cities)

    prng = AleaPRNG(config.seed)
    extent = config.extent

    points = generate_points(prng, extent, config.radius)
    features = generate_features(prng, extent)

    graph = generate_terrain_graph(points)
    data = TerrainData.generate(graph, features, hydrology_options)
    regions = Regions.generate(graph, data, extent, config.num_cities, region_options)

    logger.info("Terrain generated",
                points=len(graph.points),
                vertices=len(graph.vertices),
                cities=len(regions.cities),
                prng_calls=prng.call_count)

    return Terrain(
        config=config,
        extent=extent,
        graph=graph,
        features=features,
        data=data,
        regions=regions,
    )
