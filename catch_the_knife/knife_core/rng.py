"""
RNG - Uniform Sources
=====================

Random sources injected into spawning. Each exposes a single operation,
next_uniform(), returning a float in [0, 1).
"""

from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence


class UniformSource(Protocol):
    """Anything that can produce uniform reals in [0, 1)."""

    def next_uniform(self) -> float:
        ...


class SeededUniformSource:
    """
    Uniform source backed by random.Random.

    Same seed produces the same sequence.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize source.

        Args:
            seed: Random seed for reproducibility. Random if None.
        """
        self._seed = seed
        self._rng = random.Random(seed)
        self._draws = 0

    def next_uniform(self) -> float:
        self._draws += 1
        return self._rng.random()

    @property
    def draws(self) -> int:
        """Number of values drawn since the last reset."""
        return self._draws

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the source.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
        self._rng = random.Random(self._seed)
        self._draws = 0


class SequenceUniformSource:
    """
    Cycles through a fixed list of values.

    Used for tests and replays where every draw must be known in advance.
    """

    def __init__(self, values: Sequence[float]):
        if not values:
            raise ValueError("SequenceUniformSource needs at least one value")
        for value in values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Uniform values must be in [0, 1), got {value}")
        self._values: List[float] = list(values)
        self._index = 0

    def next_uniform(self) -> float:
        value = self._values[self._index]
        self._index = (self._index + 1) % len(self._values)
        return value

    def reset(self) -> None:
        """Rewind to the first value."""
        self._index = 0
