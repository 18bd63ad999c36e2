"""Tests for the Alea random stream."""

import math

import pytest

from py_terrain.core.alea_prng import AleaPRNG
from py_terrain.core.geometry import Rect


class TestAleaPRNG:
    """Test seeding and sampling helpers."""

    def test_same_seed_same_sequence(self):
        """Test that equal seeds reproduce the same stream."""
        a = AleaPRNG(42)
        b = AleaPRNG(42)
        assert [a.random() for _ in range(100)] == [b.random() for _ in range(100)]

    def test_different_seeds(self):
        """Test that different seeds produce different streams."""
        a = AleaPRNG(1)
        b = AleaPRNG(2)
        assert [a.random() for _ in range(10)] != [b.random() for _ in range(10)]

    def test_large_seed(self):
        """Test that a full 64-bit seed is accepted."""
        prng = AleaPRNG(2 ** 64 - 1)
        assert 0.0 <= prng.random() < 1.0

    def test_random_range(self):
        """Test that random() stays in [0, 1)."""
        prng = AleaPRNG("range")
        values = [prng.random() for _ in range(1000)]
        assert min(values) >= 0.0
        assert max(values) < 1.0

    def test_call_count(self):
        """Test that every draw is counted."""
        prng = AleaPRNG(3)
        prng.random()
        prng.uniform(1.0, 2.0)
        prng.point_in_rect(Rect.from_size(10, 10))
        assert prng.call_count == 4

    def test_uniform_bounds(self):
        prng = AleaPRNG(5)
        for _ in range(500):
            value = prng.uniform(2.0, 6.0)
            assert 2.0 <= value < 6.0

    def test_randrange_bounds(self):
        prng = AleaPRNG(6)
        values = {prng.randrange(100, 103) for _ in range(500)}
        assert values == {100, 101, 102}

    def test_randrange_empty(self):
        with pytest.raises(ValueError):
            AleaPRNG(6).randrange(5, 5)

    def test_chance_extremes(self):
        """Test that certain outcomes do not consume draws."""
        prng = AleaPRNG(7)
        assert prng.chance(1.0) is True
        assert prng.chance(0.0) is False
        assert prng.call_count == 0

    def test_chance_frequency(self):
        prng = AleaPRNG(8)
        hits = sum(prng.chance(0.2) for _ in range(5000))
        assert 800 < hits < 1200

    def test_choice(self):
        prng = AleaPRNG(9)
        assert prng.choice(["a", "b", "c"]) in ("a", "b", "c")
        with pytest.raises(IndexError):
            prng.choice([])

    def test_direction_is_unit(self):
        prng = AleaPRNG(10)
        for _ in range(50):
            x, y = prng.direction()
            assert math.isclose(math.hypot(x, y), 1.0)

    def test_point_in_rect(self):
        prng = AleaPRNG(11)
        rect = Rect(-60.0, -60.0, 60.0, 40.0)
        for _ in range(200):
            x, y = prng.point_in_rect(rect)
            assert rect.contains(x, y)
