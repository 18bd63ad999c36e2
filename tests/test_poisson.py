"""Tests for point sampling."""

import numpy as np
import pytest
from scipy.spatial import cKDTree
from scipy.spatial.distance import pdist

from py_terrain.core.alea_prng import AleaPRNG
from py_terrain.core.geometry import Rect
from py_terrain.core.poisson import (
    generate_boundary_points, generate_points, poisson
)


class TestPoissonSampling:
    """Test interior dart throwing."""

    @pytest.fixture
    def samples(self):
        extent = Rect.from_size(200, 150)
        return extent, poisson(AleaPRNG("poisson_test"), extent, 10.0)

    def test_minimum_separation(self, samples):
        """Test that no two samples are closer than the radius."""
        _, points = samples
        assert pdist(points).min() >= 10.0 - 1e-9

    def test_points_in_extent(self, samples):
        extent, points = samples
        assert np.all(points[:, 0] >= extent.x_min)
        assert np.all(points[:, 0] <= extent.x_max)
        assert np.all(points[:, 1] >= extent.y_min)
        assert np.all(points[:, 1] <= extent.y_max)

    def test_coverage(self, samples):
        """Test that the samples leave no large holes in the extent."""
        extent, points = samples
        tree = cKDTree(points)

        xs = np.linspace(extent.x_min + 10, extent.x_max - 10, 40)
        ys = np.linspace(extent.y_min + 10, extent.y_max - 10, 30)
        probes = np.array([(x, y) for x in xs for y in ys])

        distances, _ = tree.query(probes)
        assert distances.max() < 20.0

    def test_reproducibility(self):
        """Test that same seed produces identical samples."""
        extent = Rect.from_size(80, 80)
        a = poisson(AleaPRNG(42), extent, 8.0)
        b = poisson(AleaPRNG(42), extent, 8.0)
        np.testing.assert_array_equal(a, b)

    def test_different_seeds(self):
        extent = Rect.from_size(80, 80)
        a = poisson(AleaPRNG(1), extent, 8.0)
        b = poisson(AleaPRNG(2), extent, 8.0)
        assert a.shape != b.shape or not np.array_equal(a, b)

    def test_radius_larger_than_domain(self):
        """Test that an oversized radius yields a single sample."""
        points = poisson(AleaPRNG(3), Rect.from_size(50, 50), 100.0)
        assert points.shape == (1, 2)

    def test_density(self):
        """Test that the sample count is in the expected order of magnitude."""
        extent = Rect.from_size(300, 300)
        points = poisson(AleaPRNG(4), extent, 10.0)

        hexagonal_limit = extent.width * extent.height / (100.0 * np.sqrt(3) / 2)
        assert 0.5 * hexagonal_limit < len(points) <= 1.1 * hexagonal_limit


class TestBoundaryPoints:
    """Test the boundary rings."""

    def test_boundary_count(self):
        """Test boundary point generation."""
        boundary = generate_boundary_points(Rect.from_size(100, 100), 10.0)

        # 8 corners, 10 inner points and 11 outer points on each side
        assert boundary.shape == (8 + 4 * 10 + 4 * 11, 2)

    def test_boundary_outside_extent(self):
        extent = Rect.from_size(100, 60)
        boundary = generate_boundary_points(extent, 10.0)

        for x, y in boundary:
            assert not (0 < x < 100 and 0 < y < 60)

    def test_rings_offsets(self):
        """Test that every point lies on the inner or outer ring."""
        extent = Rect.from_size(100, 100)
        boundary = generate_boundary_points(extent, 10.0)

        outside = np.maximum.reduce([
            -boundary[:, 0], boundary[:, 0] - 100,
            -boundary[:, 1], boundary[:, 1] - 100,
        ])
        assert np.all(np.isclose(outside, 10.0) | np.isclose(outside, 20.0))

    def test_non_square_extent(self):
        """Test that each axis uses its own point count."""
        boundary = generate_boundary_points(Rect.from_size(200, 100), 10.0)

        inner_bottom = boundary[np.isclose(boundary[:, 1], -10.0)]
        inner_left = boundary[np.isclose(boundary[:, 0], -10.0)]

        # corners plus 20 and 10 evenly spaced points
        assert len(inner_bottom) == 2 + 20
        assert len(inner_left) == 2 + 10

    def test_oversized_radius(self):
        boundary = generate_boundary_points(Rect.from_size(50, 50), 100.0)
        assert len(boundary) == 12


class TestGeneratePoints:
    """Test the combined point set."""

    def test_interior_first(self):
        """Test that interior samples precede the boundary rings."""
        extent = Rect.from_size(100, 100)
        points = generate_points(AleaPRNG(12), extent, 10.0)
        boundary = generate_boundary_points(extent, 10.0)

        np.testing.assert_array_equal(points[-len(boundary):], boundary)
        interior = points[:-len(boundary)]
        assert np.all((interior >= 0) & (interior <= 100))
