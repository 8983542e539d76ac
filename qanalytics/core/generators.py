"""
Bounded random number generator used by the backtesting simulations.
"""

from enum import Enum
from typing import Optional

import numpy as np


class Algorithm(Enum):
    """Distribution of the generated values."""
    ONE = 'one'
    UNIFORM_0_1 = 'uniform_0_1'
    UNIFORM_M1_1 = 'uniform_m1_1'
    NORMAL_M1_1 = 'normal_m1_1'
    NORMAL_0_1 = 'normal_0_1'


class NormalRandomGenerator:
    """
    Draws bounded random values.

    The NORMAL_* algorithms clamp a standard normal draw to [-3, 3] and
    rescale it linearly onto [-1, 1] or [0, 1], so values are bounded but
    concentrated around the middle of the range.

    Example:
        >>> gen = NormalRandomGenerator(Algorithm.NORMAL_0_1, seed=7)
        >>> 0.0 <= gen.sample() <= 1.0
        True
    """

    def __init__(self, algorithm: Algorithm = Algorithm.NORMAL_0_1, seed: Optional[int] = None):
        if not isinstance(algorithm, Algorithm):
            raise ValueError(f"Unknown algorithm: {algorithm!r}")

        self.algorithm = algorithm
        self.rng = np.random.default_rng(seed)

    def _clamped_normal(self) -> float:
        return float(np.clip(self.rng.standard_normal(), -3.0, 3.0))

    def sample(self) -> float:
        if self.algorithm is Algorithm.ONE:
            return 1.0
        if self.algorithm is Algorithm.UNIFORM_0_1:
            return float(self.rng.random())
        if self.algorithm is Algorithm.UNIFORM_M1_1:
            return 2.0 * float(self.rng.random()) - 1.0
        if self.algorithm is Algorithm.NORMAL_M1_1:
            return (self._clamped_normal() + 3.0) / 3.0 - 1.0
        return (self._clamped_normal() + 3.0) / 6.0
