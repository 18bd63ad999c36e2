"""
Hydrology system for terrain water flow and erosion.

This module implements:
- Priority-flood flow routing (Barnes, Lehman, Mulla 2014, algorithm 4)
- Flux accumulation from uniform rainfall
- Surface normals from the graph's triangle neighbors
- Stylized erosion fed back into elevation over several passes

Flow routing never modifies the height field: depressions are drained by the
order in which the flood visits vertices, not by filling them.
"""

import heapq
from collections import deque
from dataclasses import dataclass
from typing import Iterator, List, Optional

import numpy as np
import structlog

from .elevation import compose_elevation, set_median_sealevel
from .features import TerrainFeatures
from .voronoi_graph import TerrainGraph

logger = structlog.get_logger()

Flow = Optional[int]


@dataclass(frozen=True)
class HydrologyOptions:
    """Erosion loop constants."""
    iterations: int = 5  # erosion passes after the initial hydrology pass
    erosion_scalar: float = 500.0  # elevation removed per unit of erosion
    erosion_min: float = 0.0
    erosion_max: float = 0.02  # bounds a single pass's removal
    creep: float = 0.001  # slope-only erosion independent of flux


@dataclass(frozen=True, eq=False)
class TerrainData:
    """Per-vertex elevation and hydrology, index-aligned with graph vertices."""
    elevation: np.ndarray         # signed, sea level at 0
    normal: np.ndarray            # (n, 3) surface normal
    flow: List[Flow]              # downhill vertex, None for sinks
    flux: np.ndarray              # accumulated water
    erosion: np.ndarray           # erosion magnitude of the last pass
    sealevel: float = 0.0         # raw elevation that became sea level

    @classmethod
    def generate(cls, graph: TerrainGraph, features: TerrainFeatures,
                 options: Optional[HydrologyOptions] = None) -> "TerrainData":
        """
        Bake features into elevation and simulate flow, flux and erosion.

        Args:
            graph: Terrain graph
            features: Elevation primitives
            options: Erosion constants

        Returns:
            Frozen TerrainData
        """
        options = options or HydrologyOptions()

        elevation = compose_elevation(graph, features)

        flow, flux, normal, erosion = hydrology_pass(graph, elevation, options)

        if features.erode:
            for iteration in range(options.iterations):
                erode(elevation, erosion, options.erosion_scalar)
                flow, flux, normal, erosion = hydrology_pass(graph, elevation, options)

                logger.info(f"Erosion iteration {iteration + 1} complete",
                            max_erosion=float(erosion.max()) if len(erosion) else 0.0)

        sealevel = set_median_sealevel(elevation)

        logger.info("Hydrology completed",
                    sealevel=sealevel,
                    land_vertices=int(np.sum(elevation >= 0)),
                    water_vertices=int(np.sum(elevation < 0)),
                    max_flux=float(flux.max()) if len(flux) else 0.0)

        for array in (elevation, normal, flux, erosion):
            array.flags.writeable = False

        return cls(
            elevation=elevation,
            normal=normal,
            flow=flow,
            flux=flux,
            erosion=erosion,
            sealevel=sealevel,
        )


def hydrology_pass(graph: TerrainGraph, elevation: np.ndarray,
                   options: HydrologyOptions):
    """Recompute flow, flux, normal and erosion from the current elevation."""
    flow = generate_flow(graph, elevation)
    flux = generate_flux(graph, flow)
    normal = generate_normal(graph, elevation)
    erosion = generate_erosion(graph, flux, normal, options)
    return flow, flux, normal, erosion


def generate_flow(graph: TerrainGraph, elevation: np.ndarray) -> List[Flow]:
    """
    Route every vertex toward the boundary with a priority flood.

    Boundary vertices seed the queue. The lowest queued vertex is popped and
    each unseen neighbor flows into it, so a vertex inside a depression drains
    over the lowest rim that reaches it. Equal elevations pop in insertion
    order.

    Args:
        graph: Terrain graph
        elevation: Elevation per vertex

    Returns:
        Downhill vertex per vertex, None for boundary sinks
    """
    n_vertices = len(graph.vertices)
    flow: List[Flow] = [None] * n_vertices
    seen = np.zeros(n_vertices, dtype=bool)

    # Priority queue: (elevation, insertion order, vertex)
    pq = []
    counter = 0

    for v in graph.boundary.tolist():
        heapq.heappush(pq, (elevation[v], counter, v))
        counter += 1
        seen[v] = True

    while pq:
        _, _, current = heapq.heappop(pq)

        for neighbor in graph.connected_vertices(current):
            if seen[neighbor]:
                continue

            flow[neighbor] = current
            seen[neighbor] = True

            heapq.heappush(pq, (elevation[neighbor], counter, neighbor))
            counter += 1

    return flow


def traverse_flow(flow: List[Flow], start: int) -> Iterator[int]:
    """Yield start and every vertex downstream of it, ending at a sink."""
    current: Flow = start
    while current is not None:
        yield current
        current = flow[current]


def generate_flux(graph: TerrainGraph, flow: List[Flow]) -> np.ndarray:
    """
    Accumulate uniform rainfall along the flow graph.

    Every vertex receives `1 / n` of rain, and every interior vertex adds the
    same amount to each vertex on its path to the boundary, itself included.
    Upstream vertices are visited before their targets, so each vertex passes
    its total down once.

    Args:
        graph: Terrain graph
        flow: Downhill vertex per vertex

    Returns:
        Flux per vertex
    """
    n_vertices = len(graph.vertices)
    rainfall = 1.0 / n_vertices

    upstream: List[List[int]] = [[] for _ in range(n_vertices)]
    roots = []
    for v, target in enumerate(flow):
        if target is None:
            roots.append(v)
        else:
            upstream[target].append(v)

    # breadth-first from the sinks, so reversed order is upstream first
    order = []
    queue = deque(roots)
    while queue:
        v = queue.popleft()
        order.append(v)
        queue.extend(upstream[v])

    drained = np.zeros(n_vertices, dtype=np.float64)
    drained[graph.interior] = rainfall

    for v in reversed(order):
        target = flow[v]
        if target is not None:
            drained[target] += drained[v]

    return rainfall + drained


def generate_normal(graph: TerrainGraph, elevation: np.ndarray) -> np.ndarray:
    """
    Surface normal of each interior vertex.

    The normal is the cross product of two edges of the triangle spanned by
    the vertex's three neighbors in (x, y, elevation) space, normalized, or
    zero when degenerate. Boundary vertices keep a zero normal.
    """
    normals = np.zeros((len(graph.vertices), 3), dtype=np.float64)
    if len(graph.interior) == 0:
        return normals

    neighbors = graph.interior_neighbor_table()
    positions = np.column_stack([graph.vertices, elevation])

    pa = positions[neighbors[:, 0]]
    pb = positions[neighbors[:, 1]]
    pc = positions[neighbors[:, 2]]

    cross = np.cross(pb - pa, pc - pa)
    length = np.linalg.norm(cross, axis=1)

    nonzero = length > 0
    cross[nonzero] /= length[nonzero][:, None]
    cross[~nonzero] = 0.0

    normals[graph.interior] = cross
    return normals


def generate_erosion(graph: TerrainGraph, flux: np.ndarray, normals: np.ndarray,
                     options: Optional[HydrologyOptions] = None) -> np.ndarray:
    """
    Erosion magnitude per vertex.

    Steeper ground (a larger horizontal normal component) erodes faster,
    from river action scaled by sqrt(flux) and from slow creep.
    """
    options = options or HydrologyOptions()

    scalar = normals[:, 0] ** 2 + normals[:, 1] ** 2
    river = scalar * np.sqrt(flux)
    creep = scalar * options.creep

    erosion = np.clip(river + creep, options.erosion_min, options.erosion_max)
    return erosion


def erode(elevation: np.ndarray, erosion: np.ndarray, scalar: float) -> None:
    """Lower elevation in place by erosion * scalar."""
    elevation -= erosion * scalar
