"""
Lognormal Price Process: Simulation and Calibration

NormalProcess models one asset as geometric Brownian motion:

    dS/S = g·dt + σ·dW

so that over a step dt the log return is Normal with
    mean = (g - ½σ²)·dt,   dev = σ·√dt

Simulation variants:
    - generate_forward / generate_path: a fixed number of steps; the path
      is abandoned (None) as soon as the price drops below MINIMUM_PRICE
    - generate_path_between / generate_path_days: steps over trading days;
      the price is clamped at MINIMUM_PRICE and the path always completes
    - generate_correlated_path: two assets driven by correlated shocks
      z2 = ρ·z1 + √(1-ρ²)·z

Calibration:
    parse_normal_process() fits the log returns of a price history and
    unbiases the lognormal drift:  σ = dev/√dt,  g = ½σ² + mean/dt
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

import numpy as np
from scipy.stats import norm

from ..config import MINIMUM_PRICE, OUTLIERS_PROBABILITY, OutlierSettings, OutliersMode
from ..core.fitter import DistributionFitter
from ..core.trading_calendar import PriceRecord, add_trading_days, ensure_trading_day, trading_days
from ..utils import get_logger, year_fraction

log = get_logger(__name__)


@dataclass(frozen=True)
class NormalProcess:
    """
    Geometric Brownian motion with constant growth and volatility.

    Attributes:
        growth: Instantaneous drift g (per year)
        vol: Annualized volatility σ
        seed: Seed for the path generator

    Example:
        >>> process = NormalProcess(growth=0.05, vol=0.2, seed=42)
        >>> path = process.generate_path(252, 100.0, 1 / 252)
        >>> len(path)
        253
    """
    growth: float
    vol: float
    seed: Optional[int] = None
    rng: np.random.Generator = field(default=None, init=False, repr=False, compare=False)

    OUTLIERS_PROBABILITY = OUTLIERS_PROBABILITY

    def __post_init__(self):
        object.__setattr__(self, 'rng', np.random.default_rng(self.seed))

    def _step(self, dt: float) -> Tuple[float, float]:
        mean = (self.growth - self.vol * self.vol * 0.5) * dt
        dev = self.vol * math.sqrt(dt)
        return mean, dev

    def forward_mean(self, spot: float, time: float) -> float:
        """Expected spot after time: S·e^{gt}."""
        return spot * math.exp(self.growth * time)

    def forward_dev(self, spot: float, time: float) -> float:
        """Standard deviation of the spot after time."""
        var = math.exp(2.0 * self.growth * time) * (math.exp(self.vol * self.vol * time) - 1.0)
        return spot * math.sqrt(var)

    def distribution(self, time: float):
        """Frozen scipy.stats.norm of the log return over time."""
        mean, dev = self._step(time)
        return norm(loc=mean, scale=dev)

    # ------------------------------------------------------------------
    # Count-based simulation (aborts below the price floor)
    # ------------------------------------------------------------------

    def _generate(self, count: int, spot: float, dt: float, values: Optional[List[float]]) -> Optional[float]:
        mean, dev = self._step(dt)
        for z in self.rng.standard_normal(count + 1):
            if values is not None:
                values.append(spot)

            spot *= math.exp(mean + dev * z)
            if spot < MINIMUM_PRICE:
                return None
        return spot

    def generate_forward(self, count: int, spot: float, dt: float) -> Optional[float]:
        """
        Simulate count + 1 steps and return the terminal spot.

        Returns:
            Terminal spot, or None if the price fell below MINIMUM_PRICE
        """
        return self._generate(count, spot, dt, None)

    def generate_path(self, count: int, spot: float, dt: float) -> Optional[List[float]]:
        """
        Simulate a path of count + 1 spots starting at spot.

        Args:
            count: Number of steps
            spot: Initial price
            dt: Step size as a year fraction

        Returns:
            List of spots, or None if the price fell below MINIMUM_PRICE
        """
        values: List[float] = []
        if self._generate(count, spot, dt, values) is None:
            log.debug("Path breached the %.2f price floor", MINIMUM_PRICE)
            return None
        return values

    # ------------------------------------------------------------------
    # Day-based simulation (clamps at the price floor)
    # ------------------------------------------------------------------

    def generate_path_between(self, start_day: date, end_day: date, spot: float, maturity: int) -> List[PriceRecord]:
        """
        Simulate one price per trading day in [start_day, end_day].

        Args:
            start_day: First day (moved forward to a trading day)
            end_day: Last day, inclusive
            spot: Price on the first day
            maturity: Trading days per step

        Returns:
            Price records, never below MINIMUM_PRICE
        """
        mean, dev = self._step(year_fraction(maturity))
        records = []
        for day in trading_days(start_day, end_day):
            records.append(PriceRecord(day, spot))
            spot *= math.exp(mean + dev * self.rng.standard_normal())
            spot = max(spot, MINIMUM_PRICE)
        return records

    def generate_path_days(self, start_day: date, spot: float, maturity: int, count: int) -> List[PriceRecord]:
        end_day = add_trading_days(ensure_trading_day(start_day), count)
        return self.generate_path_between(start_day, end_day, spot, maturity)

    def generate_correlated_path(
        self,
        count: int,
        spot: float,
        dt: float,
        process2: 'NormalProcess',
        spot2: float,
        correlation: float
    ) -> List[Tuple[float, float]]:
        """
        Simulate two assets with correlated shocks.

        Both legs are clamped at MINIMUM_PRICE. The shocks of the second
        asset are drawn from this process's generator.

        Returns:
            count + 1 (spot, spot2) pairs
        """
        icorr = math.sqrt(1.0 - correlation * correlation)
        mean, dev = self._step(dt)
        mean2, dev2 = process2._step(dt)

        values = []
        for _ in range(count + 1):
            values.append((spot, spot2))
            z = self.rng.standard_normal()
            z2 = z * correlation + self.rng.standard_normal() * icorr
            spot = max(spot * math.exp(mean + dev * z), MINIMUM_PRICE)
            spot2 = max(spot2 * math.exp(mean2 + dev2 * z2), MINIMUM_PRICE)
        return values


def parse_normal_process(prices: List[float], dt: float, exclude_outliers: bool = False) -> NormalProcess:
    """
    Calibrate a NormalProcess from a price history.

    Args:
        prices: Prices observed every dt (non-positive prices break the
            return chain)
        dt: Observation interval as a year fraction
        exclude_outliers: Drop the 1% tails of the log returns

    Returns:
        NormalProcess with vol = dev/√dt and growth = ½vol² + mean/dt
    """
    fitter = DistributionFitter.compute_returns_from_prices(prices)
    fitter.settings = OutlierSettings(OutliersMode.PROBABILITY, NormalProcess.OUTLIERS_PROBABILITY)
    fitter.compute(exclude_outliers)

    vol = fitter.dev / math.sqrt(dt)
    growth = vol * vol * 0.5 + fitter.mean / dt
    log.debug("Calibrated growth=%.4f vol=%.4f from %d returns", growth, vol, fitter.size)
    return NormalProcess(growth, vol)
