"""
Planar dual graph of the terrain points.

The Delaunay triangulation of the input points is stored as flat half-edge
arrays: half-edge ``e`` belongs to triangle ``e // 3``, starts at point
``triangles[e]`` and its twin across the shared edge is ``halfedges[e]``
(``EMPTY`` on the convex hull). Every triangle becomes one graph vertex,
placed at its centroid, and every point owns the ring of vertices around it
(its Voronoi cell).
"""

from dataclasses import dataclass
from enum import IntEnum
from functools import cached_property
from typing import Iterator, List, NamedTuple, Optional, Tuple

import numpy as np
import structlog
from scipy.spatial import Delaunay
from sklearn.neighbors import KDTree

logger = structlog.get_logger()

EMPTY = -1


class VertexType(IntEnum):
    """Classification of graph vertices."""
    INTERIOR = 0
    BOUNDARY = 1  # triangle touches a convex hull point


class TerrainGraphEdge(NamedTuple):
    """An edge between two graph vertices and the two points it separates."""
    vertices: Tuple[int, int]
    points: Tuple[int, int]


class VoronoiCell(NamedTuple):
    """Ring of vertex indices around an input point."""
    vertices: Tuple[int, ...]
    hull: bool  # ring is open; the point lies on the convex hull


def next_halfedge(e: int) -> int:
    """Next half-edge within the same triangle."""
    return e - 2 if e % 3 == 2 else e + 1


def triangle_of_edge(e: int) -> int:
    return e // 3


def edge_tuple_of_triangle(t: int) -> Tuple[int, int, int]:
    return (t * 3, t * 3 + 1, t * 3 + 2)


def edges_around_point(halfedges: np.ndarray, incoming: int) -> Iterator[int]:
    """
    Yield the incoming half-edges around a point, starting with `incoming`.

    Stops after a full rotation, or at the hull when the rotation runs out of
    twin half-edges.
    """
    if incoming == EMPTY:
        return

    curr = incoming
    while True:
        yield curr
        nxt = int(halfedges[next_halfedge(curr)])
        if nxt == EMPTY or nxt == incoming:
            return
        curr = nxt


def triangulate(points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Delaunay-triangulate points into counter-clockwise half-edge arrays.

    scipy reports each simplex with a neighbor opposite each of its corners.
    Half-edge ``3t + i`` runs from corner ``i`` to corner ``i + 1`` and so is
    opposite corner ``i + 2``.

    Args:
        points: Array of [x, y] coordinates

    Returns:
        Tuple of (triangles, halfedges) flat index arrays
    """
    tri = Delaunay(points)

    simplices = tri.simplices.astype(np.int64)
    neighbors = tri.neighbors.astype(np.int64)

    a = points[simplices[:, 0]]
    b = points[simplices[:, 1]]
    c = points[simplices[:, 2]]
    orientation = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    clockwise = orientation < 0

    simplices[clockwise] = simplices[clockwise][:, [0, 2, 1]]
    neighbors[clockwise] = neighbors[clockwise][:, [0, 2, 1]]

    n_triangles = len(simplices)
    owner = np.repeat(np.arange(n_triangles), 3)
    corner = np.tile(np.arange(3), n_triangles)

    triangles = simplices.reshape(-1)
    adjacent = neighbors[owner, (corner + 2) % 3]

    halfedges = np.full(len(triangles), EMPTY, dtype=np.int64)
    has_twin = adjacent >= 0

    # corner of the adjacent triangle that faces back at the owner
    facing = np.argmax(neighbors[adjacent[has_twin]] == owner[has_twin][:, None], axis=1)
    halfedges[has_twin] = adjacent[has_twin] * 3 + (facing + 1) % 3

    return triangles, halfedges


def build_incoming_edge_index(triangles: np.ndarray, halfedges: np.ndarray,
                              n_points: int) -> List[int]:
    """
    Map each point to one of its incoming half-edges.

    A hull half-edge is preferred when one exists; rotating from it visits
    every triangle around a hull point.
    """
    incoming = [EMPTY] * n_points

    for e in range(len(triangles)):
        point = int(triangles[next_halfedge(e)])
        if incoming[point] == EMPTY or halfedges[e] == EMPTY:
            incoming[point] = e

    return incoming


def build_cells(triangles: np.ndarray, halfedges: np.ndarray,
                n_points: int) -> List[VoronoiCell]:
    """Build the ring of vertices around each input point."""
    hull = np.zeros(n_points, dtype=bool)
    open_edges = np.flatnonzero(halfedges == EMPTY)
    hull[triangles[open_edges]] = True

    incoming = build_incoming_edge_index(triangles, halfedges, n_points)

    cells = []
    for point, e in enumerate(incoming):
        ring = tuple(triangle_of_edge(h) for h in edges_around_point(halfedges, e))
        # points dropped by the triangulation have no ring at all
        cells.append(VoronoiCell(vertices=ring, hull=bool(hull[point]) or not ring))

    return cells


def build_edges(triangles: np.ndarray, halfedges: np.ndarray) -> List[TerrainGraphEdge]:
    """One edge per pair of twin half-edges, visited in half-edge order."""
    inc = np.flatnonzero((halfedges != EMPTY) & (np.arange(len(halfedges)) < halfedges))
    out = halfedges[inc]

    edges = []
    for e, o in zip(inc.tolist(), out.tolist()):
        edges.append(TerrainGraphEdge(
            vertices=(triangle_of_edge(o), triangle_of_edge(e)),
            points=(int(triangles[o]), int(triangles[e])),
        ))

    return edges


@dataclass(frozen=True, eq=False)
class TerrainGraph:
    """Graph structures for navigating the terrain."""

    points: np.ndarray         # input points, interior samples then boundary
    vertices: np.ndarray       # vertices[t] = centroid of triangle t
    vertex_type: np.ndarray    # VertexType per vertex
    boundary: np.ndarray       # indices of boundary vertices
    interior: np.ndarray       # indices of interior vertices
    edges: List[TerrainGraphEdge]
    cells: List[VoronoiCell]
    triangles: np.ndarray
    halfedges: np.ndarray

    def cell(self, p: int) -> Tuple[int, ...]:
        """Vertices forming the Voronoi cell around point p."""
        return self.cells[p].vertices

    def is_hull_cell(self, p: int) -> bool:
        return self.cells[p].hull

    def is_boundary(self, v: int) -> bool:
        return self.vertex_type[v] == VertexType.BOUNDARY

    def connected_vertices(self, v: int) -> Iterator[int]:
        """Iterate over the vertices sharing an edge with vertex v."""
        for e in edge_tuple_of_triangle(v):
            twin = self.halfedges[e]
            if twin != EMPTY:
                yield triangle_of_edge(int(twin))

    def interior_connected_vertices(self, v: int) -> Optional[Tuple[int, int, int]]:
        """
        Get the three connected vertices of an interior vertex.

        Returns None for boundary vertices, whose triangle may border the hull.
        """
        if self.vertex_type[v] == VertexType.BOUNDARY:
            return None

        ea, eb, ec = edge_tuple_of_triangle(v)
        ha, hb, hc = (int(self.halfedges[ea]), int(self.halfedges[eb]), int(self.halfedges[ec]))

        assert ha != EMPTY and hb != EMPTY and hc != EMPTY, f"interior vertex {v} touches the hull"

        return (triangle_of_edge(ha), triangle_of_edge(hb), triangle_of_edge(hc))

    def interior_neighbor_table(self) -> np.ndarray:
        """(n_interior, 3) array of the connected vertices of each interior vertex."""
        twins = self.halfedges.reshape(-1, 3)[self.interior]
        assert np.all(twins != EMPTY), "interior vertex touches the hull"
        return twins // 3

    @cached_property
    def _vertex_tree(self) -> KDTree:
        return KDTree(np.array(self.vertices))

    @cached_property
    def _point_tree(self) -> KDTree:
        return KDTree(np.array(self.points))

    def find_nearest_vertex(self, x: float, y: float) -> int:
        """Index of the graph vertex closest to (x, y)."""
        _, indices = self._vertex_tree.query([[x, y]], k=1)
        return int(indices[0][0])

    def find_nearest_point(self, x: float, y: float) -> int:
        """Index of the input point (cell) closest to (x, y)."""
        _, indices = self._point_tree.query([[x, y]], k=1)
        return int(indices[0][0])


def _read_only(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


def generate_terrain_graph(points: np.ndarray) -> TerrainGraph:
    """
    Build the dual graph of a point set.

    Args:
        points: Array of [x, y] coordinates; at least three non-collinear

    Returns:
        Immutable TerrainGraph
    """
    points = np.array(points, dtype=np.float64)

    logger.info("Generating terrain graph", points=len(points))

    triangles, halfedges = triangulate(points)
    corners = points[triangles].reshape(-1, 3, 2)
    vertices = corners.mean(axis=1)

    logger.info("Triangulation calculated",
                triangles=len(vertices), halfedges=len(halfedges))

    cells = build_cells(triangles, halfedges, len(points))

    vertex_type = np.full(len(vertices), VertexType.INTERIOR, dtype=np.uint8)
    for cell in cells:
        if cell.hull and cell.vertices:
            vertex_type[list(cell.vertices)] = VertexType.BOUNDARY

    boundary = np.flatnonzero(vertex_type == VertexType.BOUNDARY)
    interior = np.flatnonzero(vertex_type == VertexType.INTERIOR)

    edges = build_edges(triangles, halfedges)

    logger.info("Terrain graph built",
                vertices=len(vertices),
                boundary_vertices=len(boundary),
                interior_vertices=len(interior),
                edges=len(edges))

    return TerrainGraph(
        points=_read_only(points),
        vertices=_read_only(vertices),
        vertex_type=_read_only(vertex_type),
        boundary=_read_only(boundary),
        interior=_read_only(interior),
        edges=edges,
        cells=cells,
        triangles=_read_only(triangles),
        halfedges=_read_only(halfedges),
    )
