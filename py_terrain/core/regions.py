"""
City placement and region growth.

Process:
1. rank_vertices() - Habitability score per vertex from river flux
2. place_cities() - Greedy picks with spacing suppression
3. expand_regions() - Multi-source cost-based growth from every city
"""

import heapq
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field

from .geometry import Rect, map_clamp, normalize
from .hydrology import TerrainData
from .voronoi_graph import TerrainGraph

logger = structlog.get_logger()


class RegionOptions(BaseModel):
    """Region generation parameters."""

    model_config = ConfigDict(frozen=True)

    flux_saturation: float = Field(
        default=0.05, gt=0, description="Flux at which habitability saturates"
    )
    edge_margin: float = Field(
        default=100.0, gt=0, description="Distance from the domain edge over which habitability fades in"
    )
    city_spacing: float = Field(
        default=100.0, gt=0, description="Distance over which a city suppresses nearby scores"
    )

    # Cost parameters
    sea_cost: float = Field(
        default=100.0, description="Distance multiplier for travel from below sea level"
    )
    coast_cost: float = Field(
        default=1000.0, description="Distance multiplier for crossing the coastline"
    )
    slope_weight: float = Field(
        default=0.25, description="Weight of the squared slope term"
    )
    uphill_divisor: float = Field(
        default=10.0, gt=0, description="Uphill elevation change is divided by this"
    )
    river_weight: float = Field(
        default=100.0, description="Weight of sqrt(flux) at the origin vertex"
    )


@dataclass(frozen=True, eq=False)
class Regions:
    """Habitability, city placement and region assignment."""
    habitability: np.ndarray           # normalized into [0, 1]
    cities: List[int]                  # vertex index of each city
    region_city: List[Optional[int]]   # city vertex owning each vertex

    def region_of(self, v: int) -> Optional[int]:
        """Region index (position in `cities`) of vertex v."""
        city = self.region_city[v]
        if city is None:
            return None
        return self._city_region[city]

    @property
    def _city_region(self) -> Dict[int, int]:
        return {city: i for i, city in enumerate(self.cities)}

    def region_vertices(self, region: int) -> List[int]:
        """All vertices assigned to the given region."""
        city = self.cities[region]
        return [v for v, c in enumerate(self.region_city) if c == city]

    @classmethod
    def generate(cls, graph: TerrainGraph, data: TerrainData, extent: Rect,
                 num_cities: int, options: Optional[RegionOptions] = None) -> "Regions":
        partitioner = RegionPartitioner(graph, data, extent, options)
        return partitioner.generate(num_cities)


class RegionPartitioner:
    """Handles city placement and region growth."""

    def __init__(self, graph: TerrainGraph, data: TerrainData, extent: Rect,
                 options: Optional[RegionOptions] = None) -> None:
        """
        Initialize with the finished terrain.

        Args:
            graph: Terrain graph
            data: Frozen elevation and hydrology
            extent: Terrain extent used for edge attenuation
            options: RegionOptions for configuration
        """
        self.graph = graph
        self.data = data
        self.extent = extent
        self.options = options or RegionOptions()

    def generate(self, num_cities: int) -> Regions:
        """
        Score vertices, place cities and grow their regions.

        Returns:
            Frozen Regions
        """
        logger.info("Starting region generation", num_cities=num_cities)

        habitability = self.rank_vertices()
        cities = self.place_cities(habitability, num_cities)
        region_city = self.expand_regions(cities)

        habitability.flags.writeable = False

        logger.info(f"Generated {len(cities)} regions")
        return Regions(habitability=habitability, cities=cities, region_city=region_city)

    def rank_vertices(self) -> np.ndarray:
        """
        Habitability of each vertex.

        Boundary vertices and vertices at or below sea level score zero.
        Others score by river flux, faded toward the domain edge, and the
        result is min-max normalized.
        """
        vertices = self.graph.vertices
        extent = self.extent

        score = map_clamp(self.data.flux, 0.0, self.options.flux_saturation, 0.0, 1.0)

        dist_x_edge = np.minimum(vertices[:, 0] - extent.x_min, extent.x_max - vertices[:, 0])
        dist_y_edge = np.minimum(vertices[:, 1] - extent.y_min, extent.y_max - vertices[:, 1])

        score = score * map_clamp(dist_x_edge, 0.0, self.options.edge_margin, 0.0, 1.0)
        score = score * map_clamp(dist_y_edge, 0.0, self.options.edge_margin, 0.0, 1.0)

        score[self.graph.boundary] = 0.0
        score[self.data.elevation <= 0.0] = 0.0

        return normalize(score)

    def place_cities(self, habitability: np.ndarray, count: int) -> List[int]:
        """
        Place cities greedily on the best remaining score.

        After each pick every score is scaled by the distance to the new city,
        from 0 at the city up to 1 at `city_spacing`. Ties go to the lowest
        vertex index and no vertex is picked twice.

        Returns:
            Vertex index of each city in placement order
        """
        logger.info("Placing cities")

        n_vertices = len(self.graph.vertices)
        if count > n_vertices:
            logger.warning(f"Not enough vertices for {count} cities. Reducing cities to {n_vertices}")
            count = n_vertices

        scores = np.array(habitability, dtype=np.float64)
        taken = np.zeros(n_vertices, dtype=bool)
        cities = []

        for _ in range(count):
            city = int(np.argmax(np.where(taken, -np.inf, scores)))
            taken[city] = True
            cities.append(city)

            cx, cy = self.graph.vertices[city]
            dist = np.hypot(self.graph.vertices[:, 0] - cx, self.graph.vertices[:, 1] - cy)
            scores *= map_clamp(dist, 0.0, self.options.city_spacing, 0.0, 1.0)

        logger.info(f"Placed {len(cities)} cities")
        return cities

    def travel_cost(self, a: int, b: int) -> float:
        """
        Cost of moving between adjacent vertices a and b.

        Crossing the coastline is the most expensive move, travel from below
        sea level is uniformly expensive, and on land the cost grows with
        slope and with river flux at a.
        """
        elevation = self.data.elevation
        ax, ay = self.graph.vertices[a]
        bx, by = self.graph.vertices[b]
        distance = math.hypot(bx - ax, by - ay)
        if distance == 0:
            return 0.0

        a_below = elevation[a] < 0.0
        b_below = elevation[b] < 0.0

        if a_below != b_below:
            return distance * self.options.coast_cost

        if a_below:
            return distance * self.options.sea_cost

        delta = float(elevation[b] - elevation[a])
        if delta > 0:
            delta /= self.options.uphill_divisor

        slope = delta / distance
        river = math.sqrt(self.data.flux[a])

        return distance * (1.0 + self.options.slope_weight * slope * slope
                           + self.options.river_weight * river)

    def expand_regions(self, cities: List[int]) -> List[Optional[int]]:
        """
        Grow regions outward from every city at once.

        A vertex belongs to the first city that pops it off the queue, which
        is the city with the cheapest cumulative travel cost to it.

        Returns:
            City vertex owning each vertex
        """
        logger.info("Expanding regions")

        region_city: List[Optional[int]] = [None] * len(self.graph.vertices)

        # Priority queue: (cost, insertion order, city, vertex)
        heap = []
        counter = 0

        for city in cities:
            heapq.heappush(heap, (0.0, counter, city, city))
            counter += 1

        while heap:
            cost, _, city, vertex = heapq.heappop(heap)

            if region_city[vertex] is not None:
                continue

            region_city[vertex] = city

            for neighbor in self.graph.connected_vertices(vertex):
                if region_city[neighbor] is not None:
                    continue

                total_cost = cost + self.travel_cost(vertex, neighbor)
                heapq.heappush(heap, (total_cost, counter, city, neighbor))
                counter += 1

        unassigned = sum(1 for c in region_city if c is None)
        if cities and unassigned:
            logger.warning("Vertices unreachable from any city", unassigned=unassigned)

        return region_city
