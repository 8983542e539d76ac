"""
Sequence generators for numerical integration and deterministic sampling.

    - LinearIterator: count+1 equally spaced points on [start, end]
    - LogarithmicZeroToInfinityIterator: geometric steps on (0, inf)
"""

import math
from typing import Iterator

import numpy as np

from ..config import ZERO


class LinearIterator:
    """
    Equally spaced points start, start + step, ..., end.

    Produces count + 1 values (both ends included). A degenerate range
    (start == end) produces the single value start.

    Example:
        >>> list(LinearIterator(0.0, 1.0, 4))
        [0.0, 0.25, 0.5, 0.75, 1.0]
    """

    def __init__(self, start: float, end: float, count: int):
        count = max(count, 1)
        self.start = start
        self.end = end
        self.step = (end - start) / count
        self.count = count if start != end else 0
        self.position = 0

    def __iter__(self) -> Iterator[float]:
        return self

    def __next__(self) -> float:
        if self.position > self.count:
            raise StopIteration

        value = self.start + self.position * self.step
        self.position += 1
        return value

    def __len__(self) -> int:
        return self.count + 1

    @property
    def is_first(self) -> bool:
        return self.position == 0

    @property
    def is_last(self) -> bool:
        return self.position == self.count

    def has_next(self) -> bool:
        return self.position <= self.count

    def reset(self):
        self.position = 0

    def to_array(self) -> np.ndarray:
        """All points as an array, without consuming the iterator."""
        return self.start + np.arange(self.count + 1) * self.step


class LogarithmicZeroToInfinityIterator:
    """
    Geometric steps between a value close to zero and a large value.

    Neither zero nor infinity is ever produced; the lower limit is pushed
    away from zero to at least ZERO in absolute value. Both limits must
    share a sign, and negative limits produce negative points.

    Args:
        zero: Small limit (sign selects the half-line)
        infinity: Large limit, same sign as zero
        count: Number of steps (count + 1 values are produced)
    """

    def __init__(self, zero: float, infinity: float, count: int):
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")

        zero = math.copysign(max(abs(zero), ZERO), zero)
        if zero * infinity < 0.0:
            raise ValueError("Zero and infinity limits must have the same sign")

        self.sign = -1.0 if zero < 0.0 else 1.0
        self.log_zero = math.log(self.sign * zero)
        self.log_infinity = math.log(self.sign * infinity)
        self.count = count
        self.step = (self.log_infinity - self.log_zero) / count
        self.position = 0

    def __iter__(self) -> Iterator[float]:
        return self

    def __next__(self) -> float:
        if self.position > self.count:
            raise StopIteration

        log_current = self.log_zero + self.position * self.step
        self.position += 1
        return self.sign * math.exp(log_current)

    def __len__(self) -> int:
        return self.count + 1
