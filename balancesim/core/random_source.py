"""Injectable randomness for the simulator.

Every random draw the engine makes goes through a RandomSource, so a test
can pin the whole run by passing ``SeededRandom(seed)``. Production runs
use ``wall_clock_random()``, which seeds once from the current time.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class RandomSource(Protocol):
    """Protocol for the random draws the simulator needs."""

    def next_in_range(self, low: int, high: int) -> int:
        """Return a uniform integer in [low, high], both ends inclusive."""
        ...

    def next_probability(self) -> float:
        """Return a uniform float in [0.0, 1.0)."""
        ...


class SeededRandom:
    """RandomSource backed by a private ``random.Random`` instance.

    The module-level ``random`` state is never touched, so two engines in
    the same process cannot disturb each other's sequences.
    """

    def __init__(self, seed: int | None = None):
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def next_in_range(self, low: int, high: int) -> int:
        if high < low:
            raise ValueError(f"empty range [{low}, {high}]")
        return self._rng.randint(low, high)

    def next_probability(self) -> float:
        return self._rng.random()

    def __repr__(self) -> str:
        return f"SeededRandom(seed={self._seed!r})"


def wall_clock_random() -> SeededRandom:
    """Build a SeededRandom seeded from the current wall-clock second."""
    seed = int(time.time())
    logger.debug("Seeding random source from wall clock: %d", seed)
    return SeededRandom(seed)
