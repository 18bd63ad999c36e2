"""
Alea pseudorandom stream used for every random draw in terrain generation.

Based on Johannes Baagøe's Alea algorithm. A single instance is created per
generation run and passed explicitly to each stage; the order of calls made
against it defines what a seed reproduces.
"""

import math
from typing import Sequence, Tuple

from .geometry import Rect


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """Seeded Alea generator with the sampling helpers terrain generation needs."""

    def __init__(self, seed):
        """Initialize with seed string or number."""
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash_n = 0xEFC8249D

        def mash(data):
            nonlocal mash_n
            data = str(data)
            for char in data:
                mash_n = mash_n + ord(char)
                h = 0.02519603282416938 * mash_n
                mash_n = _uint32(h)
                h -= mash_n
                h *= mash_n
                mash_n = _uint32(h)
                h -= mash_n
                mash_n += h * 0x100000000  # 2^32
            return _uint32(mash_n) * 2.3283064365386963e-10  # 2^-32

        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Random float in [low, high)."""
        return low + (high - low) * self.random()

    def randrange(self, low: int, high: int) -> int:
        """Random integer in [low, high)."""
        if high <= low:
            raise ValueError(f"Empty range [{low}, {high})")
        return low + min(int(self.random() * (high - low)), high - low - 1)

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        if probability >= 1:
            return True
        if probability <= 0:
            return False
        return self.random() < probability

    def choice(self, seq: Sequence):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.randrange(0, len(seq))]

    def direction(self) -> Tuple[float, float]:
        """Random unit vector."""
        t = self.uniform(0.0, 2.0 * math.pi)
        return (math.cos(t), math.sin(t))

    def point_in_rect(self, rect: Rect) -> Tuple[float, float]:
        """Random point inside rect, x drawn before y."""
        x = rect.x_min + (rect.x_max - rect.x_min) * self.random()
        y = rect.y_min + (rect.y_max - rect.y_min) * self.random()
        return (x, y)
