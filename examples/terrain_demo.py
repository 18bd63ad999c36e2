#!/usr/bin/env python3
"""
Demo script showing terrain generation and regeneration.
"""

import random
import sys
import time

import numpy as np

from py_terrain.config import configure_logging, settings
from py_terrain.core import generate_terrain


def describe(terrain):
    """Print summary statistics for a generated terrain."""
    elevation = terrain.data.elevation
    regions = terrain.regions

    land = int(np.sum(elevation >= 0))
    water = int(np.sum(elevation < 0))

    print(f"  Points: {len(terrain.graph.points)}")
    print(f"  Vertices: {len(terrain.graph.vertices)} "
          f"({len(terrain.graph.boundary)} boundary)")
    print(f"  Cones: {len(terrain.features.cones)}, slopes: {len(terrain.features.slopes)}, "
          f"smooth={terrain.features.smooth}, relax={terrain.features.relax}")
    print(f"  Land/water vertices: {land}/{water}")
    print(f"  Elevation range: {elevation.min():.1f} to {elevation.max():.1f}")
    print(f"  Max flux: {terrain.data.flux.max():.4f}")

    for i, city in enumerate(regions.cities):
        x, y = terrain.graph.vertices[city]
        size = len(regions.region_vertices(i))
        print(f"    City {i}: vertex {city} at ({x:.0f}, {y:.0f}), region of {size} vertices")


def main():
    """Generate a terrain, then regenerate it with a fresh seed."""
    configure_logging()

    seed = int(sys.argv[1]) if len(sys.argv) > 1 else 42
    config = settings.terrain_config(seed)

    print("Py-Terrain Generation Demo")
    print("=" * 40)

    for _ in range(2):
        start = time.perf_counter()
        terrain = generate_terrain(config)
        elapsed = time.perf_counter() - start

        print(f"\nSeed {config.seed}: generated in {elapsed:.2f}s")
        describe(terrain)

        # regeneration keeps everything but the seed
        config = config.model_copy(update={"seed": random.getrandbits(64)})


if __name__ == "__main__":
    main()
