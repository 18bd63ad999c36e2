"""
Core terrain generation functionality.
"""

from .alea_prng import AleaPRNG
from .features import Cone, Slope, TerrainFeatures, generate_features
from .geometry import Rect
from .hydrology import HydrologyOptions, TerrainData, traverse_flow
from .poisson import generate_points
from .regions import RegionOptions, Regions
from .terrain import Terrain, TerrainConfig, generate_terrain
from .voronoi_graph import TerrainGraph, VertexType, generate_terrain_graph

__all__ = ['AleaPRNG', 'Cone', 'Slope', 'TerrainFeatures', 'generate_features',
           'Rect', 'HydrologyOptions', 'TerrainData', 'traverse_flow',
           'generate_points', 'RegionOptions', 'Regions',
           'Terrain', 'TerrainConfig', 'generate_terrain',
           'TerrainGraph', 'VertexType', 'generate_terrain_graph']
