"""End-to-end tests for terrain generation."""

import numpy as np
import pytest
from pydantic import ValidationError

from py_terrain import TerrainConfig, generate_terrain
from py_terrain.core.geometry import Rect
from py_terrain.core.hydrology import traverse_flow


@pytest.fixture(scope="module")
def config():
    return TerrainConfig(domain_size=(200.0, 200.0), seed=42, radius=10.0, num_cities=3)


@pytest.fixture(scope="module")
def terrain(config):
    return generate_terrain(config)


def assert_terrain_valid(terrain):
    graph = terrain.graph
    data = terrain.data
    regions = terrain.regions

    # at most half the vertices can sit below the median
    assert np.sum(data.elevation < 0) <= len(data.elevation) // 2

    for v in range(len(graph.vertices)):
        assert graph.is_boundary(list(traverse_flow(data.flow, v))[-1])

    assert len(set(regions.cities)) == len(regions.cities)
    if regions.cities:
        assert all(city is not None for city in regions.region_city)


class TestTerrainConfig:
    """Test configuration validation."""

    def test_valid(self, config):
        assert config.extent == Rect(0.0, 0.0, 200.0, 200.0)
        assert config.num_regions == 0

    def test_defaults(self):
        config = TerrainConfig(domain_size=(10, 20), seed=0, radius=1)
        assert config.num_cities == 5

    @pytest.mark.parametrize("kwargs", [
        {"radius": 0.0},
        {"radius": -1.0},
        {"domain_size": (0.0, 100.0)},
        {"domain_size": (100.0, -5.0)},
        {"seed": -1},
        {"seed": 2 ** 64},
        {"num_cities": -1},
        {"num_regions": -2},
    ])
    def test_invalid(self, kwargs):
        values = {"domain_size": (100.0, 100.0), "seed": 1, "radius": 10.0}
        values.update(kwargs)
        with pytest.raises(ValidationError):
            TerrainConfig(**values)

    def test_max_seed(self):
        assert TerrainConfig(domain_size=(1, 1), seed=2 ** 64 - 1, radius=1).seed == 2 ** 64 - 1

    def test_frozen(self, config):
        with pytest.raises(ValidationError):
            config.seed = 7


class TestGenerateTerrain:
    """Test the full pipeline."""

    def test_structure(self, config, terrain):
        assert terrain.config == config
        assert terrain.extent == config.extent
        assert len(terrain.data.elevation) == len(terrain.graph.vertices)
        assert len(terrain.regions.region_city) == len(terrain.graph.vertices)

    def test_invariants(self, terrain):
        assert_terrain_valid(terrain)

    def test_sealevel_split(self, terrain):
        land = int(np.sum(terrain.data.elevation >= 0))
        water = int(np.sum(terrain.data.elevation < 0))
        assert abs(land - water) <= 1

    def test_cities(self, terrain):
        assert len(terrain.regions.cities) == 3
        for city in terrain.regions.cities:
            assert terrain.regions.region_city[city] == city

    def test_deterministic(self, config, terrain):
        """Test that same seed produces identical terrain."""
        again = generate_terrain(config)

        np.testing.assert_array_equal(again.graph.points, terrain.graph.points)
        np.testing.assert_array_equal(again.graph.vertices, terrain.graph.vertices)
        np.testing.assert_array_equal(again.data.elevation, terrain.data.elevation)
        np.testing.assert_array_equal(again.data.flux, terrain.data.flux)
        assert again.features == terrain.features
        assert again.data.flow == terrain.data.flow
        assert again.regions.cities == terrain.regions.cities
        assert again.regions.region_city == terrain.regions.region_city

    def test_different_seed(self, config, terrain):
        other = generate_terrain(config.model_copy(update={"seed": 43}))
        assert other.features != terrain.features

    def test_runs_are_independent(self, config, terrain):
        """Test that a second run leaves the first result untouched."""
        elevation = np.array(terrain.data.elevation)
        generate_terrain(config.model_copy(update={"seed": 99}))
        np.testing.assert_array_equal(terrain.data.elevation, elevation)

    def test_no_cities(self):
        terrain = generate_terrain(TerrainConfig(
            domain_size=(100.0, 100.0), seed=5, radius=10.0, num_cities=0,
        ))
        assert terrain.regions.cities == []
        assert all(city is None for city in terrain.regions.region_city)

    def test_radius_larger_than_domain(self):
        """Test that a single sample still yields a usable terrain."""
        terrain = generate_terrain(TerrainConfig(
            domain_size=(50.0, 50.0), seed=1, radius=100.0, num_cities=2,
        ))
        assert len(terrain.graph.points) == 13
        assert len(terrain.graph.vertices) > 0
        assert_terrain_valid(terrain)

    def test_rectangular_domain(self):
        terrain = generate_terrain(TerrainConfig(
            domain_size=(240.0, 90.0), seed=8, radius=10.0, num_cities=2,
        ))
        assert terrain.graph.vertices[:, 0].max() > 200.0
        assert_terrain_valid(terrain)


@pytest.mark.slow
class TestFullScale:
    """Test a full-size 1000 x 1000 terrain."""

    @pytest.fixture(scope="class")
    def large(self):
        return generate_terrain(TerrainConfig(
            domain_size=(1000.0, 1000.0), seed=42, radius=10.0, num_cities=5,
        ))

    def test_sample_count(self, large):
        interior = large.graph.points
        inside = np.sum((interior[:, 0] >= 0) & (interior[:, 0] <= 1000)
                        & (interior[:, 1] >= 0) & (interior[:, 1] <= 1000))
        assert 6000 <= inside <= 12500

    def test_invariants(self, large):
        assert_terrain_valid(large)

    def test_regions(self, large):
        assert len(large.regions.cities) == 5
        counts = [len(large.regions.region_vertices(i)) for i in range(5)]
        assert sum(counts) == len(large.graph.vertices)
        assert min(counts) > 0
