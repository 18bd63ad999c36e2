"""
Procedural terrain, hydrology and settlement regions on a Voronoi graph.
"""

from .core import TerrainConfig, generate_terrain

__version__ = "0.1.0"

__all__ = ['TerrainConfig', 'generate_terrain', '__version__']
