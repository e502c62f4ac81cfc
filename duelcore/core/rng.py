"""Deterministic RNG wrapper built on top of random.Random."""

from __future__ import annotations

from random import Random
from typing import Optional


class RNG:
    """
    The single source of randomness for a match.

    Every roll (hit, damage, crit, heal, enemy level offset) goes through one
    instance, so seeding it reproduces a whole match.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._seed = seed
        self._random = Random(seed)

    @property
    def seed(self) -> Optional[int]:
        """Seed this source was created with (None for OS entropy)."""
        return self._seed

    def random(self) -> float:
        """Return the next random floating point number in the range [0.0, 1.0)."""
        return self._random.random()

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._random.randint(a, b)

    def reseed(self, seed: Optional[int]) -> None:
        """Restart the sequence from a new seed."""
        self._seed = seed
        self._random.seed(seed)
