"""
Quadrature Pricer over a Lognormal Terminal Distribution

Despite the name, MonteCarloPricer is deterministic: instead of drawing
random paths it walks the unit probability interval in equal steps, maps
each point through the inverse CDF of the process's terminal log return
and averages the payoff:

    V ≈ 1/(N+1) · Σ payoff(S·exp(F⁻¹(p_i))),   p_i = i/N, i = 0..N

The end points p = 0 and p = 1 are clamped away from the infinite
quantiles. The payoff is not discounted: the process growth carries the
drift, so pass a NormalProcess with growth = r for a risk-neutral price.
"""

import math

import numpy as np

from ..config import ZERO, ONE, MONTE_CARLO_SAMPLES, MONTE_CARLO_DELTA_BUMP
from ..core.iterators import LinearIterator
from ..utils import sign, timeit
from .black_scholes import OptionType
from .normal_process import NormalProcess


class MonteCarloPricer:
    """
    European option priced by quadrature over a NormalProcess.

    Example:
        >>> process = NormalProcess(growth=0.0, vol=0.2)
        >>> pricer = MonteCarloPricer(process, OptionType.CALL, 100.0, 100.0, 1.0)
        >>> abs(pricer.price() - 7.97) < 0.1
        True
    """

    def __init__(
        self,
        process: NormalProcess,
        option_type: OptionType,
        spot: float,
        strike: float,
        time_to_expiration: float,
        samples: int = MONTE_CARLO_SAMPLES
    ):
        """
        Initialize pricer.

        Args:
            process: Terminal distribution of the underlying
            option_type: Call or Put
            spot: Current underlying price
            strike: Strike price
            time_to_expiration: Year fraction
            samples: Number of probability steps (samples + 1 points)
        """
        self.process = process
        self.option_type = option_type
        self.spot = spot
        self.strike = strike
        self.time_to_expiration = time_to_expiration
        self.samples = samples

    @property
    def is_call(self) -> bool:
        return self.option_type is OptionType.CALL

    def _payoff(self, forward: float) -> float:
        return max(sign(self.is_call) * (forward - self.strike), 0.0)

    def _price(self, spot: float) -> float:
        t = max(self.time_to_expiration, 0.0)
        if self.process.vol * math.sqrt(t) < ZERO:
            return self._payoff(spot * math.exp(self.process.growth * t))

        dist = self.process.distribution(t)
        probabilities = np.clip(LinearIterator(0.0, 1.0, self.samples).to_array(), ZERO, ONE)
        forwards = spot * np.exp(dist.ppf(probabilities))
        payoffs = np.maximum(sign(self.is_call) * (forwards - self.strike), 0.0)
        return float(payoffs.sum()) / (self.samples + 1)

    @timeit
    def price(self) -> float:
        return self._price(self.spot)

    @timeit
    def delta(self) -> float:
        """Forward difference with a 1% spot bump."""
        h = self.spot * MONTE_CARLO_DELTA_BUMP
        return (self._price(self.spot + h) - self._price(self.spot)) / h

    def value_at_expiration(self) -> float:
        return self._payoff(self.spot)
