"""Random number generation utilities for the Q-learning engine."""

import numpy as np
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class SeededRNG:
    """Seeded random number generator for reproducible results.

    Each instance owns its own numpy Generator, so two trainers never share
    a random stream and a seeded instance always replays the same draws.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._generator = np.random.default_rng(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return float(self._generator.random())

    def choice(self, seq: Sequence[T]) -> T:
        """Choose random element from a non-empty sequence."""
        if not seq:
            raise ValueError("Cannot choose from an empty sequence")
        return seq[int(self._generator.integers(len(seq)))]
