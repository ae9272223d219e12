"""
Injected random source for the exploration controller.

Anything with random() -> float in [0, 1) satisfies RandomSource:
numpy.random.Generator and random.Random both do. Tests pass a seeded generator.
"""

from typing import Optional, Protocol

import numpy as np


class RandomSource(Protocol):
    """Uniform float source in [0, 1)."""

    def random(self) -> float:
        ...


def default_random_source(seed: Optional[int] = None) -> np.random.Generator:
    """Statistically sound generator for production; seeded for reproducible runs."""
    return np.random.default_rng(seed)
