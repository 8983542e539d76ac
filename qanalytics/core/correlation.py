"""
Pearson correlation with optional outlier handling.

Two flavours:
    - compute_correlation(exclude_outliers): a pair is dropped when either
      coordinate is an outlier of its own marginal distribution
    - compute_robust_correlation(): drops pairs outside the 2·IQR fences of
      X, then of Y, before computing the plain correlation
"""

from typing import List, Tuple

import pandas as pd

from ..config import ZERO, IQR_RANGE_FACTOR, OutlierSettings
from ..utils import get_logger, pairs
from .fitter import DistributionFitter, quartiles

log = get_logger(__name__)


def _is_missing(value) -> bool:
    return value is None or value != value


class CorrelationFitter:
    """
    Correlation between two equally sized series.

    Pairs where either coordinate is None or NaN are dropped as a whole,
    so the two series stay aligned.

    Example:
        >>> round(CorrelationFitter([1, 2, 3, 4, 5], [2, 4, 6, 8, 10]).compute_correlation(), 9)
        1.0
    """

    MIN_ROBUST_SAMPLES = 4

    def __init__(self, xs: List[float], ys: List[float], settings: OutlierSettings = None):
        if len(xs) != len(ys):
            raise ValueError(f"Size mismatch: {len(xs)} xs vs {len(ys)} ys")

        self.xs: List[float] = []
        self.ys: List[float] = []
        for x, y in zip(xs, ys):
            if _is_missing(x) or _is_missing(y):
                continue
            self.xs.append(float(x))
            self.ys.append(float(y))
        self.settings = settings

    class Builder:
        """Accumulates (x, y) pairs one at a time."""

        def __init__(self):
            self.xs: List[float] = []
            self.ys: List[float] = []

        def __len__(self) -> int:
            return len(self.xs)

        def add(self, x: float, y: float):
            self.xs.append(x)
            self.ys.append(y)

        def build(self, settings: OutlierSettings = None) -> 'CorrelationFitter':
            return CorrelationFitter(self.xs, self.ys, settings)

    def __len__(self) -> int:
        return len(self.xs)

    @property
    def size(self) -> int:
        return len(self.xs)

    @staticmethod
    def _covariance(xs: DistributionFitter, ys: DistributionFitter, exclude_outliers: bool) -> float:
        mean = 0.0
        count = 0
        for i in range(xs.size):
            x = xs.sample(i)
            y = ys.sample(i)
            if exclude_outliers and (xs.is_outlier(x) or ys.is_outlier(y)):
                continue

            mean += (x - xs.mean) * (y - ys.mean)
            count += 1
        return mean / max(count, 1)

    def compute_correlation(self, exclude_outliers: bool = False) -> float:
        """
        Pearson correlation coefficient.

        Args:
            exclude_outliers: Skip pairs where either coordinate falls
                outside its marginal outlier fences

        Returns:
            Correlation in [-1, 1]; 0.0 when either series is constant
        """
        xs = DistributionFitter(self.xs, settings=self.settings).compute(exclude_outliers)
        ys = DistributionFitter(self.ys, settings=self.settings).compute(exclude_outliers)

        covariance = self._covariance(xs, ys, exclude_outliers)
        variance = xs.dev * ys.dev
        if variance < ZERO:
            return 0.0
        return covariance / variance

    @property
    def correlation(self) -> float:
        return self.compute_correlation()

    @staticmethod
    def _filter_on_first(xs: List[float], ys: List[float]) -> Tuple[List[float], List[float]]:
        q1, q3 = quartiles(sorted(xs))
        iqr = (q3 - q1) * IQR_RANGE_FACTOR
        xmin, xmax = q1 - iqr, q3 + iqr

        kept_xs, kept_ys = [], []
        for x, y in zip(xs, ys):
            if x < xmin or x > xmax:
                continue
            kept_xs.append(x)
            kept_ys.append(y)
        return kept_xs, kept_ys

    def filter_outliers(self) -> 'CorrelationFitter':
        """Drop pairs outside the IQR fences of X, then of Y."""
        if not self.xs:
            return CorrelationFitter([], [], self.settings)

        xs, ys = self._filter_on_first(self.xs, self.ys)
        if xs:
            ys, xs = self._filter_on_first(ys, xs)
        return CorrelationFitter(xs, ys, self.settings)

    def compute_robust_correlation(self) -> float:
        if len(self.xs) < self.MIN_ROBUST_SAMPLES:
            return 0.0
        return self.filter_outliers().correlation

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(pairs(self.xs, self.ys), columns=['x', 'y'])

    def save(self, path: str):
        """Write index,x,y rows."""
        self.to_frame().to_csv(path, header=False, index=True)
        log.info("Saved %d correlation pairs to %s", len(self.xs), path)
