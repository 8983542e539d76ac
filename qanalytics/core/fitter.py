"""
Empirical Distribution Fitting with Robust Statistics

DistributionFitter accumulates a sample set and estimates its distribution
without assuming a parametric shape:

1. Moments: mean and population deviation, optionally over inliers only
2. Robust moments: median and MAD-scaled deviation
3. Outliers: interquartile fences or tail-probability trimming
4. Empirical CDF, PDF, inverse CDF and histograms
5. Derived series: log returns, squares, block sums, absolute values

Outlier Policies:
    - Interquartile: fences at Q1 - k·IQR and Q3 + k·IQR with k = 2.0
      (wider than the textbook 1.5, a better fit for normal samples)
    - Probability: trims a fraction p (default 1%) from each tail

Winsorizing vs trimming:
    filter_outliers() clamps extreme values to the fences and keeps the
    sample count; compute(exclude_outliers=True) ignores them instead.
"""

import math
from datetime import date
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from ..config import (
    ZERO,
    TRADING_DAYS_IN_YEAR,
    IQR_RANGE_FACTOR,
    SKEW_IQR_FACTOR,
    MAD_TO_DEV_FACTOR,
    MIN_FILTER_SAMPLES,
    MIN_SKEW_SAMPLES,
    PDF_PROBABILITY_STEP,
    OutliersMode,
    OutlierSettings,
)
from ..utils import get_logger, limit_probability, lower_bound, round_half_up, year_fraction
from .trading_calendar import PriceRecord, ensure_trading_day, next_trading_day

log = get_logger(__name__)


def quartiles(sorted_samples: List[float]):
    """Q1 and Q3 of an already sorted list (positions rounded half up)."""
    n = len(sorted_samples)
    q1 = sorted_samples[min(round_half_up(n * 0.25), n - 1)]
    q3 = sorted_samples[min(round_half_up(n * 0.75), n - 1)]
    return q1, q3


class DistributionFitter:
    """
    Empirical distribution of a sample set.

    Not thread-safe: queries such as icdf() sort the samples in place.

    Attributes:
        samples: Observations in insertion order (until sorted)
        min, max: Running extremes (None while empty)
        total: Running sum of the samples
        inliers: Number of samples used by the last compute()
        mean, dev: Results of the last compute()
        iqr_min, iqr_max: Outlier fences (None until compute_outliers())
        median_mean, median_dev: Results of compute_medians()
        skew: -1, 0, +1 after compute_skew(), None when undetermined

    Example:
        >>> fitter = DistributionFitter([1.0, 2.0, 3.0, 4.0])
        >>> fitter.compute().mean
        2.5
    """

    def __init__(
        self,
        samples: Optional[Iterable[float]] = None,
        settings: Optional[OutlierSettings] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the fitter.

        Args:
            samples: Initial observations (None values are skipped)
            settings: Outlier policy (probability mode, 1% tails by default)
            seed: Seed for the resampling generator
        """
        self.settings = settings if settings is not None else OutlierSettings()
        self.rng = np.random.default_rng(seed)
        self.samples: List[float] = []
        self.clear()
        if samples is not None:
            self.add_all(samples)

    # ------------------------------------------------------------------
    # Sample management
    # ------------------------------------------------------------------

    def clear(self):
        self.samples = []
        self.is_sorted = False
        self.min: Optional[float] = None
        self.max: Optional[float] = None
        self.total = 0.0
        self.inliers = 0
        self.mean = 0.0
        self.dev = 0.0
        self.iqr_min: Optional[float] = None
        self.iqr_max: Optional[float] = None
        self.median_mean = 0.0
        self.median_dev = 0.0
        self.skew: Optional[int] = None
        self.xmin = self.xmax = self.pmin = self.pmax = 0.0
        self.buckets: Optional[np.ndarray] = None

    def add_sample(self, value: Optional[float]):
        """Add one observation; None and NaN mean "no observation"."""
        if value is None or value != value:
            return

        value = float(value)
        self.samples.append(value)
        self.min = value if self.min is None else min(self.min, value)
        self.max = value if self.max is None else max(self.max, value)
        self.total += value
        self.is_sorted = False
        self.iqr_min = None
        self.iqr_max = None

    def add_all(self, values: Iterable[float]):
        for value in values:
            self.add_sample(value)

    def copy(self) -> 'DistributionFitter':
        return DistributionFitter(self.samples, settings=self.settings)

    def _derived(self, values: Iterable[float]) -> 'DistributionFitter':
        return DistributionFitter(values, settings=self.settings)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def size(self) -> int:
        return len(self.samples)

    def sample(self, position: int) -> float:
        return self.samples[position]

    @property
    def abs_max(self) -> Optional[float]:
        if self.min is None or self.max is None:
            return None
        return max(abs(self.min), abs(self.max))

    def _refresh_extrema(self):
        self.min = min(self.samples) if self.samples else None
        self.max = max(self.samples) if self.samples else None
        self.total = 0.0
        for x in self.samples:
            self.total += x
        self.iqr_min = None
        self.iqr_max = None

    def sort(self):
        self.samples.sort()
        self.is_sorted = True
        if self.samples:
            self.min = self.samples[0]
            self.max = self.samples[-1]

    def _ensure_sorted(self):
        if not self.is_sorted:
            self.sort()

    def multiply(self, factor: float):
        """Scale every sample in place."""
        self.samples = [x * factor for x in self.samples]
        if factor < 0.0:
            self.is_sorted = False
        self._refresh_extrema()

    def normalize_regular(self, x: float) -> float:
        return (x - self.mean) / self.dev

    def normalize_median(self, x: float) -> float:
        return (x - self.median_mean) / self.median_dev

    def normalize(self):
        """Standardize every sample in place using the computed mean/dev."""
        self.samples = [self.normalize_regular(x) for x in self.samples]
        self._refresh_extrema()

    # ------------------------------------------------------------------
    # Moments
    # ------------------------------------------------------------------

    def compute(self, exclude_outliers: bool = False) -> 'DistributionFitter':
        """
        Compute mean and population deviation.

        Args:
            exclude_outliers: Recompute the outlier fences first and skip
                samples outside them

        Returns:
            self, for chaining
        """
        if exclude_outliers:
            self.compute_outliers()

        self._compute_total(exclude_outliers)
        self.mean = self.total / max(self.inliers, 1)
        self._compute_dev(exclude_outliers)
        return self

    def _compute_total(self, exclude_outliers: bool):
        self.total = 0.0
        self.inliers = 0
        self.min = None
        self.max = None
        for x in self.samples:
            if exclude_outliers and self.is_outlier(x):
                continue

            self.inliers += 1
            self.total += x
            self.min = x if self.min is None else min(self.min, x)
            self.max = x if self.max is None else max(self.max, x)

    def _compute_dev(self, exclude_outliers: bool):
        var = 0.0
        for x in self.samples:
            if exclude_outliers and self.is_outlier(x):
                continue

            delta = x - self.mean
            var += delta * delta

        self.dev = math.sqrt(var / max(self.inliers, 1))

    def compute_mean_and_dev(self):
        """Mean over all samples with a Bessel-corrected deviation."""
        self.mean = self.total / len(self.samples)
        self.dev = math.sqrt(DistributionFitter.var(self.samples, self.mean))

    @staticmethod
    def mean_of(values: List[float]) -> float:
        if len(values) < 1:
            return float('nan')

        total = 0.0
        for value in values:
            total += value
        return total / len(values)

    @staticmethod
    def var(values: List[float], mean: float) -> float:
        """Sample variance around a given mean (n - 1 denominator)."""
        if len(values) < 2:
            return float('nan')

        total = 0.0
        for value in values:
            delta = value - mean
            total += delta * delta
        return total / max(len(values) - 1, 1)

    @staticmethod
    def dev_of(values: List[float], mean: float) -> float:
        return math.sqrt(DistributionFitter.var(values, mean))

    def compute_medians(self):
        """Median and MAD-based deviation (normal-equivalent)."""
        self.sort()
        n = len(self.samples)
        if n < 2:
            self.median_mean = 0.0
            self.median_dev = 0.0
            return

        upper = n // 2
        lower = upper if n % 2 else upper - 1
        self.median_mean = (self.samples[upper] + self.samples[lower]) / 2.0

        deviations = sorted(abs(x - self.median_mean) for x in self.samples)
        mad = deviations[len(deviations) // 2]
        self.median_dev = MAD_TO_DEV_FACTOR * mad

    # ------------------------------------------------------------------
    # Outliers
    # ------------------------------------------------------------------

    def compute_outliers(self):
        """Set iqr_min/iqr_max according to the configured policy."""
        mode = self.settings.mode
        if mode is OutliersMode.INTERQUARTILE:
            self._compute_outliers_interquartile()
        elif mode is OutliersMode.PROBABILITY:
            self._compute_outliers_probability()
        else:
            raise ValueError(f"Unknown outliers mode: {mode!r}")

    def _compute_outliers_probability(self):
        n = len(self.samples)
        if n < 2:
            return

        ordered = sorted(self.samples)
        count = n * self.settings.probability
        self.iqr_min = ordered[round_half_up(count)]
        self.iqr_max = ordered[round_half_up(n - 1 - count)]

    def _compute_outliers_interquartile(self):
        if len(self.samples) < 2:
            return

        q1, q3 = quartiles(sorted(self.samples))
        iqr = q3 - q1
        self.iqr_min = q1 - iqr * self.settings.iqr_factor
        self.iqr_max = q3 + iqr * self.settings.iqr_factor

    def is_outlier(self, x: float) -> bool:
        if self.iqr_min is None or self.iqr_max is None:
            return False
        return x < self.iqr_min or x > self.iqr_max

    def filter_outliers(self, factor: float = IQR_RANGE_FACTOR) -> 'DistributionFitter':
        """
        Winsorize: clamp samples outside [Q1 - factor·IQR, Q3 + factor·IQR].

        Small sets (fewer than 10 samples) are returned unmodified.

        Returns:
            New fitter, same sample count and order
        """
        if len(self.samples) < MIN_FILTER_SAMPLES:
            return self._derived(self.samples)

        q1, q3 = quartiles(sorted(self.samples))
        iqr = (q3 - q1) * factor
        clipped = np.clip(np.asarray(self.samples), q1 - iqr, q3 + iqr)
        return self._derived(clipped.tolist())

    def limit_outliers(self):
        """In-place winsorizing with the textbook 1.5·IQR fences."""
        if len(self.samples) < MIN_FILTER_SAMPLES:
            return

        q1, q3 = quartiles(sorted(self.samples))
        iqr = q3 - q1
        xmin = q1 - iqr * SKEW_IQR_FACTOR
        xmax = q3 + iqr * SKEW_IQR_FACTOR
        self.samples = [min(max(x, xmin), xmax) for x in self.samples]
        self._refresh_extrema()

    def filter_inliers(self) -> 'DistributionFitter':
        """Drop the samples lying strictly inside the central 49%-51% band."""
        if len(self.samples) < MIN_FILTER_SAMPLES:
            return self._derived(self.samples)

        ordered = sorted(self.samples)
        n = len(ordered)
        xmin = ordered[round_half_up(n * 0.49)]
        xmax = ordered[round_half_up(n * 0.51)]
        return self._derived(x for x in self.samples if not xmin < x < xmax)

    def adjust_pnl_distribution(self, probability: float):
        """Cap the upper tail at its boundary value. The lower tail keeps the worst loss."""
        if len(self.samples) < MIN_FILTER_SAMPLES:
            return

        self.sort()
        probability = limit_probability(probability)
        n = len(self.samples)
        start = round_half_up(n * probability)
        end = round_half_up((n - 1) * (1.0 - probability))
        xmin = self.samples[0]
        xmax = self.samples[end]
        for i in range(n):
            if i < start:
                self.samples[i] = xmin
            elif i > end:
                self.samples[i] = xmax
        self._refresh_extrema()

    def compute_skew(self) -> Optional[int]:
        """
        Skew direction from the tails beyond 1.5·IQR.

        Returns:
            -1 (heavier downside), 0, +1 (heavier upside), or None when
            fewer than 64 samples are available
        """
        self.skew = None
        self.sort()
        if len(self.samples) < MIN_SKEW_SAMPLES:
            return None

        q1, q3 = quartiles(self.samples)
        iqr = q3 - q1
        self.xmin = q1 - iqr * SKEW_IQR_FACTOR
        self.xmax = q3 + iqr * SKEW_IQR_FACTOR

        self.pmin = self.get_cdf(self.xmin)
        self.pmax = 1.0 - self.get_cdf(self.xmax)

        total = (self.pmin * self.xmin + self.pmax * self.xmax) * 10000.0
        rounded = round_half_up(total)
        self.skew = (rounded > 0) - (rounded < 0)
        return self.skew

    # ------------------------------------------------------------------
    # Distribution queries
    # ------------------------------------------------------------------

    def icdf_pos(self, prob: float) -> int:
        return round_half_up((len(self.samples) - 1) * limit_probability(prob))

    def icdf(self, prob: float) -> Optional[float]:
        """Sample at the given cumulative probability, None if empty."""
        self._ensure_sorted()
        pos = self.icdf_pos(prob)
        if pos < 0 or pos >= len(self.samples):
            return None
        return self.samples[pos]

    def get_cdf(self, x: float) -> float:
        """Fraction of samples strictly below x."""
        self._ensure_sorted()
        if not self.samples:
            return 0.0

        i = 0
        for i, sample in enumerate(self.samples):
            if sample >= x:
                break
        else:
            i = len(self.samples)
        return i / len(self.samples)

    def get_pdf(self, x: float) -> float:
        """
        Local density estimate at x.

        Scans forward from the first sample >= x until the cumulative
        probability has grown by at least 1%, and divides by the distance
        travelled. Returns 0 when the samples run out first.
        """
        self._ensure_sorted()
        n = len(self.samples)
        p = None
        for i, sample in enumerate(self.samples):
            if sample < x:
                continue

            if p is None:
                p = i / n
                continue

            dp = i / n - p
            if dp < PDF_PROBABILITY_STEP:
                continue

            dx = sample - x
            if dx < ZERO:
                continue
            return dp / dx

        return 0.0

    def density(self, x: float, dprob: float) -> float:
        """Density over the probability window [cdf(x) - dprob, cdf(x) + dprob]."""
        self._ensure_sorted()
        pos = lower_bound(self.samples, x)
        if pos >= len(self.samples) or len(self.samples) < 2:
            return 0.0

        count = len(self.samples) - 1
        prob = pos / count
        down = round_half_up((prob - dprob) * count)
        up = round_half_up((prob + dprob) * count)
        if down < 0 or up > count:
            return 0.0

        dx = self.samples[up] - self.samples[down]
        if dx < ZERO:
            return 0.0
        return 2.0 * dprob / dx

    def slice(self, prob: float) -> 'DistributionFitter':
        """Leading samples up to cumulative position prob."""
        n = len(self.samples)
        head = []
        for i, x in enumerate(self.samples):
            if i / n > prob:
                break
            head.append(x)
        return self._derived(head)

    def average(self, prob: float) -> float:
        """Mean of the leading samples up to cumulative position prob."""
        n = len(self.samples)
        if n == 0:
            return float('nan')

        total = 0.0
        count = n
        for i, x in enumerate(self.samples):
            if i / n > prob:
                count = i
                break
            total += x
        return total / count

    def rnd(self, n: int = 0) -> float:
        """
        Bootstrap draw: a random existing sample, with replacement.

        Args:
            n: Number of additional draws summed onto the first one

        Returns:
            Sum of n + 1 resampled values
        """
        if not self.samples:
            raise ValueError("Cannot resample an empty distribution")

        last = len(self.samples) - 1
        x = 0.0
        for _ in range(n + 1):
            x += self.samples[round_half_up(last * self.rng.random())]
        return x

    # ------------------------------------------------------------------
    # Histogram
    # ------------------------------------------------------------------

    def compute_histogram(self, count: int) -> np.ndarray:
        """
        Bucket the samples into count equal-width bins over [min, max].

        Bucket i collects samples nearest to min + i·dx, so count + 1
        buckets are produced.
        """
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")

        self.compute()
        self.buckets = np.zeros(count + 1, dtype=int)
        if not self.samples:
            return self.buckets

        dx = (self.max - self.min) / count
        if dx < ZERO:
            self.buckets[0] = len(self.samples)
            return self.buckets

        for x in self.samples:
            bucket = round_half_up((x - self.min) / dx)
            if 0 <= bucket <= count:
                self.buckets[bucket] += 1
        return self.buckets

    @property
    def dx(self) -> float:
        return (self.max - self.min) / (len(self.buckets) - 1)

    def buckets_size(self) -> int:
        return len(self.buckets)

    def bucket_x(self, index: int) -> float:
        return self.min + self.dx * index

    def bucket_y(self, index: int) -> float:
        """Probability density of the bucket."""
        if self.dx < ZERO:
            return 0.0
        return self.buckets[index] / len(self.samples) / self.dx

    def bucket_y_histogram(self, index: int) -> float:
        return float(self.buckets[index])

    def histogram_frame(self, density: bool = True) -> pd.DataFrame:
        ys = self.bucket_y if density else self.bucket_y_histogram
        return pd.DataFrame({
            'x': [self.bucket_x(i) for i in range(self.buckets_size())],
            'y': [ys(i) for i in range(self.buckets_size())],
        })

    def save(self, path: str):
        """Write the density histogram as x,y rows."""
        self.histogram_frame(density=True).to_csv(path, header=False, index=False)
        log.info("Saved density histogram (%d buckets) to %s", self.buckets_size(), path)

    def save_histogram(self, path: str):
        """Write the bucket counts as x,count rows."""
        self.histogram_frame(density=False).to_csv(path, header=False, index=False)
        log.info("Saved histogram (%d buckets) to %s", self.buckets_size(), path)

    # ------------------------------------------------------------------
    # Derived series
    # ------------------------------------------------------------------

    def squared(self) -> 'DistributionFitter':
        return self._derived(x * x for x in self.samples)

    def abs(self) -> 'DistributionFitter':
        return self._derived(abs(x) for x in self.samples)

    def sum(self, count: int) -> 'DistributionFitter':
        """Sums of consecutive non-overlapping blocks of count samples."""
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")

        totals = []
        for i in range(0, len(self.samples) - count + 1, count):
            total = 0.0
            for k in range(count):
                total += self.samples[i + k]
            totals.append(total)
        return self._derived(totals)

    @staticmethod
    def _log_returns(prices: Iterable[float]) -> List[float]:
        returns = []
        previous = None
        for current in prices:
            if current < ZERO:
                previous = None
                continue

            if previous is not None:
                returns.append(math.log(current / previous))
            previous = current
        return returns

    @staticmethod
    def compute_returns_raw(prices: List[PriceRecord]) -> List[float]:
        """Log returns of adjacent positive prices."""
        return DistributionFitter._log_returns(record.price for record in prices)

    @staticmethod
    def compute_returns(prices: List[PriceRecord]) -> 'DistributionFitter':
        return DistributionFitter(DistributionFitter.compute_returns_raw(prices))

    @staticmethod
    def compute_returns_from_prices(prices: List[float]) -> 'DistributionFitter':
        return DistributionFitter(DistributionFitter._log_returns(prices))

    @staticmethod
    def extract_prices(prices: List[PriceRecord]) -> 'DistributionFitter':
        return DistributionFitter(record.price for record in prices)

    @staticmethod
    def generate_prices(
        size: int,
        vol: float,
        seed: Optional[int] = None,
        start: Optional[date] = None
    ) -> List[PriceRecord]:
        """
        Synthetic daily lognormal prices starting at 100.

        Args:
            size: Number of steps (size + 1 records are produced)
            vol: Annualized volatility
            seed: Random seed
            start: First day (default: next trading day after today)

        Returns:
            Price records on consecutive trading days
        """
        rng = np.random.default_rng(seed)
        yf = year_fraction(1)
        mean = vol * vol * 0.5 * yf
        dev = vol * math.sqrt(yf)

        day = ensure_trading_day(start) if start else next_trading_day(date.today())
        spot = 100.0
        prices = []
        for _ in range(size + 1):
            prices.append(PriceRecord(day, spot))
            spot *= math.exp(rng.normal(mean, dev))
            day = next_trading_day(day)
        return prices

    # ------------------------------------------------------------------
    # Annualized statistics
    # ------------------------------------------------------------------

    def get_vol(self, dt: float) -> float:
        """Volatility per unit time of samples observed every dt."""
        return self.dev / math.sqrt(dt)

    def get_growth(self, dt: float) -> float:
        vol = self.get_vol(dt)
        return self.mean / dt + vol * vol * 0.5

    def annual_return(self) -> float:
        return self.mean * TRADING_DAYS_IN_YEAR

    def annual_vol(self) -> float:
        return self.dev * math.sqrt(TRADING_DAYS_IN_YEAR)

    def sharpe(self, n: Optional[int] = None) -> float:
        if self.dev < ZERO:
            return 0.0
        n = len(self.samples) if n is None else n
        return self.mean * math.sqrt(n) / self.dev

    @staticmethod
    def compute_sharpe(prices: List[float]) -> float:
        """Annualized Sharpe ratio of daily log returns."""
        fitter = DistributionFitter.compute_returns_from_prices(prices).compute()
        return fitter.sharpe(TRADING_DAYS_IN_YEAR)

    def __str__(self) -> str:
        return f"Mean={self.mean:.2f} Dev={self.dev:.2f}"
