"""
Numerical Constants and Tunable Parameters

Every threshold used by the fitters, pricers and simulators lives here so
that it can be tuned in one place:

    - ZERO: Numerical epsilon, also the tolerance of bisection searches
    - MINIMUM_PRICE: Floor applied to simulated prices
    - MIN_VOL / MAX_VOL: Implied volatility search bracket (0.1% to 1000%)
    - OUTLIERS_PROBABILITY: Tail fraction dropped in probability mode (1%)
    - IQR_RANGE_FACTOR: Interquartile multiplier (2.0 fits a normal
      distribution better than the textbook 1.5)
"""

import os
import math
import warnings
from dataclasses import dataclass
from enum import Enum


ZERO = 1e-12
ONE = 1.0 - ZERO
INFINITY = 1.0 / ZERO

MINIMUM_PRICE = 0.01
TRADING_DAYS_IN_YEAR = 252

MIN_VOL = 0.1 / 100.0
MAX_VOL = 1000.0 / 100.0

MIN_INTEREST = -10.0
MAX_INTEREST = 10.0
INTEREST_STEPS = 60

OUTLIERS_PROBABILITY = 0.01
IQR_RANGE_FACTOR = 2.0
SKEW_IQR_FACTOR = 1.5
MAD_TO_DEV_FACTOR = 1.4826022185056023
MIN_FILTER_SAMPLES = 10
MIN_SKEW_SAMPLES = 64
PDF_PROBABILITY_STEP = 0.01

MONTE_CARLO_SAMPLES = 10000
MONTE_CARLO_DELTA_BUMP = 0.01

LOG_LEVEL = os.getenv("QANALYTICS_LOG_LEVEL", "WARNING")


class OutliersMode(Enum):
    """Outlier detection policy."""
    INTERQUARTILE = 'interquartile'
    PROBABILITY = 'probability'


@dataclass
class OutlierSettings:
    """
    Outlier detection parameters for a DistributionFitter.

    Attributes:
        mode: Interquartile fences or tail-probability trimming
        probability: Fraction dropped from each tail in probability mode
        iqr_factor: Fence multiplier in interquartile mode
    """
    mode: OutliersMode = OutliersMode.PROBABILITY
    probability: float = OUTLIERS_PROBABILITY
    iqr_factor: float = IQR_RANGE_FACTOR

    def validate(self) -> bool:
        """Check that the tails leave some inliers and the fences are finite."""
        return (
            0.0 <= self.probability < 0.5
            and self.iqr_factor > 0.0
            and math.isfinite(self.iqr_factor)
        )

    def __post_init__(self):
        if not isinstance(self.mode, OutliersMode):
            raise ValueError(f"Unknown outliers mode: {self.mode!r}")

        if not self.validate():
            warnings.warn(
                f"Outlier settings may reject every sample: "
                f"probability={self.probability}, iqr_factor={self.iqr_factor}"
            )
