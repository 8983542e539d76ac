"""
Black-Scholes-Merton Pricing, Greeks and Implied Parameters

This module provides the closed-form European option pricer:

1. Price: Black-Scholes-Merton off the forward F = S·exp((r - q)T), or
   Black-76 straight off the forward when is_black is set
2. Greeks: analytic delta, gamma, speed, vega and theta, plus
   bump-and-reprice theta and vega as cross-checks
3. Implied parameters: volatility, interest rate, spot, strike and
   strike-from-delta by bounded bisection on the pricing function

Pricing formula:
    d1 = (ln(F/K) + ½σ²T) / (σ√T)
    d2 = d1 - σ√T
    V  = ω·e^{-rT}·(F·N(ω·d1) - K·N(ω·d2)),   ω = +1 call, -1 put

Degenerate inputs (σ√T ≈ 0, T ≤ 0) fall back to intrinsic value and
step-function deltas instead of dividing by zero.

Implied searches never mutate the pricer: each trial point is a new
immutable record built with dataclasses.replace, so concurrent searches
over the same contract are independent.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional

from scipy.stats import norm

from ..config import ZERO, MIN_VOL, MAX_VOL, MIN_INTEREST, MAX_INTEREST, INTEREST_STEPS
from ..utils import (
    get_logger, binary_search, binary_search_steps, limit_probability, sign, year_fraction
)

log = get_logger(__name__)

VOL_STEPS = binary_search_steps(MIN_VOL, MAX_VOL, ZERO)


class OptionType(Enum):
    """Option type enumeration."""
    CALL = 'call'
    PUT = 'put'


@dataclass(frozen=True)
class BlackScholes:
    """
    Black-Scholes Option Pricing Model over an immutable contract.

    Attributes:
        option_type: Call or Put
        spot: Underlying price
        strike: Strike price
        time_to_expiration: Year fraction (≤ 0 means expired)
        interest_rate: Continuously compounded risk-free rate
        dividend_yield: Continuous dividend yield
        volatility: Annualized volatility (≥ 0)
        is_black: Treat spot as the forward (Black-76)

    Example:
        >>> bs = BlackScholes(OptionType.CALL, 100, 100, 1.0, 0.0, 0.0, 0.2)
        >>> round(bs.price(), 2)
        7.97
        >>> round(bs.implied_volatility(bs.price()), 6)
        0.2
    """
    option_type: OptionType
    spot: float
    strike: float
    time_to_expiration: float
    interest_rate: float = 0.0
    dividend_yield: float = 0.0
    volatility: float = 0.2
    is_black: bool = False

    def __post_init__(self):
        if self.volatility < 0.0:
            raise ValueError(f"Volatility must be non-negative, got {self.volatility}")
        if self.spot <= 0.0 or self.strike <= 0.0:
            raise ValueError(f"Spot and strike must be positive, got {self.spot}, {self.strike}")

    @property
    def is_call(self) -> bool:
        return self.option_type is OptionType.CALL

    @property
    def sign(self) -> float:
        return sign(self.is_call)

    def copy(self, **changes) -> 'BlackScholes':
        """New contract with some parameters replaced."""
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    @property
    def vsqrt(self) -> float:
        """Total deviation σ√T (zero once expired)."""
        return self.volatility * math.sqrt(max(self.time_to_expiration, 0.0))

    @property
    def forward_price(self) -> float:
        if self.is_black:
            return self.spot
        return self.spot * math.exp((self.interest_rate - self.dividend_yield) * self.time_to_expiration)

    def d1(self) -> float:
        vsqrt = max(self.vsqrt, ZERO)
        v = self.volatility
        return (math.log(self.forward_price / self.strike) + 0.5 * v * v * self.time_to_expiration) / vsqrt

    def d2(self) -> float:
        return self.d1() - self.vsqrt

    def value_at_expiration(self) -> float:
        """Intrinsic value max(ω(S - K), 0)."""
        return max(self.sign * (self.spot - self.strike), 0.0)

    def price(self) -> float:
        """
        Calculate option price.

        Returns:
            Discounted expected payoff, or intrinsic value when σ√T ≈ 0
        """
        vsqrt = self.vsqrt
        if vsqrt < ZERO:
            return self.value_at_expiration()

        t = self.time_to_expiration
        discount = math.exp(-self.interest_rate * t)
        f = self.forward_price
        d1 = (math.log(f / self.strike) + 0.5 * self.volatility ** 2 * t) / vsqrt
        d2 = d1 - vsqrt
        w = self.sign
        return w * discount * (f * norm.cdf(w * d1) - self.strike * norm.cdf(w * d2))

    def forward(self, probability: float) -> float:
        """
        Risk-neutral terminal spot at a given cumulative probability.

        Args:
            probability: Quantile of the terminal distribution

        Returns:
            S·exp(x) with x the quantile of N((r - q - ½σ²)T, σ√T)
        """
        t = self.time_to_expiration
        mean = (self.interest_rate - self.dividend_yield - 0.5 * self.volatility ** 2) * t
        dev = self.vsqrt
        if dev < ZERO:
            return self.spot * math.exp(mean)

        x = norm.ppf(limit_probability(probability), loc=mean, scale=dev)
        return self.spot * math.exp(x)

    # ------------------------------------------------------------------
    # Greeks
    # ------------------------------------------------------------------

    def analytic_delta(self) -> float:
        """
        Calculate Delta (∂V/∂S).

        Expired or zero-variance contracts have a step-function delta:
        0 out of the money, ±1 (discounted by the dividend yield) in it.
        """
        w = self.sign
        if self.time_to_expiration < ZERO:
            if self.is_call:
                return 0.0 if self.spot <= self.strike else 1.0
            return 0.0 if self.spot >= self.strike else -1.0

        carry = math.exp(-self.dividend_yield * self.time_to_expiration)
        if self.vsqrt < ZERO:
            in_the_money = w * (self.forward_price - self.strike) > 0.0
            return w * carry if in_the_money else 0.0

        return w * carry * norm.cdf(w * self.d1())

    def analytic_gamma(self) -> float:
        """Calculate Gamma (∂²V/∂S²), same for calls and puts."""
        vsqrt = max(self.vsqrt, ZERO)
        carry = math.exp(-self.dividend_yield * self.time_to_expiration)
        return carry * norm.pdf(self.d1()) / (self.spot * vsqrt)

    def analytic_speed(self) -> float:
        """Calculate Speed (∂³V/∂S³)."""
        vsqrt = max(self.vsqrt, ZERO)
        return -(self.analytic_gamma() / self.spot) * (self.d1() / vsqrt + 1.0)

    def analytic_vega(self) -> float:
        """
        Calculate Vega (∂V/∂σ).

        Returns vega per 1% change in volatility (not per 100%).
        """
        t = max(self.time_to_expiration, 0.0)
        carry = math.exp(-self.dividend_yield * t)
        return self.spot * carry * norm.pdf(self.d1()) * math.sqrt(t) / 100.0

    def analytic_theta(self) -> float:
        """
        Calculate Theta (∂V/∂t) per year.

        Zero once there is no time value left.
        """
        if self.vsqrt < ZERO:
            return 0.0

        s, k = self.spot, self.strike
        t = self.time_to_expiration
        r, q, v = self.interest_rate, self.dividend_yield, self.volatility
        d1 = self.d1()
        d2 = d1 - self.vsqrt

        decay = -math.exp(-q * t) * s * norm.pdf(d1) * v / (2.0 * math.sqrt(t))
        if self.is_call:
            return (decay
                    - r * k * math.exp(-r * t) * norm.cdf(d2)
                    + q * s * math.exp(-q * t) * norm.cdf(d1))
        return (decay
                + r * k * math.exp(-r * t) * norm.cdf(-d2)
                - q * s * math.exp(-q * t) * norm.cdf(-d1))

    def delta(self) -> float:
        return self.analytic_delta()

    def gamma(self) -> float:
        return self.analytic_gamma()

    def theta(self) -> float:
        """Price change over one trading day (bump-and-reprice)."""
        next_day = self.copy(time_to_expiration=self.time_to_expiration - year_fraction(1))
        return next_day.price() - self.price()

    def numeric_vega(self) -> float:
        """Price change for a +1 vol point bump."""
        bumped = self.copy(volatility=self.volatility + 0.01)
        return bumped.price() - self.price()

    def theoretical_pnl_dev(self, n: int) -> float:
        """
        Deviation of the hedged P&L when rebalancing n times to expiry.

        Derman, "When You Cannot Hedge Continuously":
            σ_PnL ≈ √(π/4) · vega · σ / √n
        """
        vega = self.analytic_vega() * 100.0
        return math.sqrt(math.pi * 0.25) * vega * self.volatility / math.sqrt(n)

    def all_greeks(self) -> Dict[str, float]:
        """
        Calculate all Greeks at once.

        Returns:
            Dictionary with all Greek values
        """
        return {
            'price': self.price(),
            'delta': self.analytic_delta(),
            'gamma': self.analytic_gamma(),
            'speed': self.analytic_speed(),
            'vega': self.analytic_vega(),
            'theta': self.analytic_theta(),
        }

    # ------------------------------------------------------------------
    # Implied parameters
    # ------------------------------------------------------------------

    def _solve(self, name: str, objective, target: float, low: float, high: float, steps: int) -> Optional[float]:
        value = binary_search(objective, target, low, high, steps, ZERO)
        if value < low + ZERO or value > high - ZERO:
            log.debug("No implied %s for target %.6f in [%.6g, %.6g]", name, target, low, high)
            return None
        return value

    def implied_volatility(self, price: float) -> Optional[float]:
        """
        Volatility that reproduces an observed price.

        Args:
            price: Observed option price

        Returns:
            Implied volatility, None when the search ends on the
            [MIN_VOL, MAX_VOL] boundary
        """
        return self._solve(
            'volatility',
            lambda vol: self.copy(volatility=vol).price(),
            price, MIN_VOL, MAX_VOL, VOL_STEPS
        )

    def implied_interest_rate(self, price: float) -> Optional[float]:
        return self._solve(
            'interest rate',
            lambda rate: self.copy(interest_rate=rate).price(),
            price, MIN_INTEREST, MAX_INTEREST, INTEREST_STEPS
        )

    def implied_spot(self, price: float) -> Optional[float]:
        return self._solve(
            'spot',
            lambda spot: self.copy(spot=spot).price(),
            price, self.strike / 10.0, self.strike * 10.0, VOL_STEPS
        )

    def implied_strike(self, price: float) -> Optional[float]:
        return self._solve(
            'strike',
            lambda strike: self.copy(strike=strike).price(),
            price, self.spot * 0.1, self.spot * 3.0, VOL_STEPS
        )

    def implied_strike_from_delta(self, delta: float) -> Optional[float]:
        """Strike within ±10% of spot whose analytic delta matches."""
        return self._solve(
            'strike from delta',
            lambda strike: self.copy(strike=strike).analytic_delta(),
            delta, self.spot * 0.9, self.spot * 1.1, VOL_STEPS
        )

    # ------------------------------------------------------------------
    # Volatility bounds
    # ------------------------------------------------------------------

    @staticmethod
    def is_valid_vol(vol: Optional[float]) -> bool:
        if vol is None:
            return False
        return MIN_VOL + ZERO <= vol <= MAX_VOL - ZERO

    @staticmethod
    def limit_vol(vol: float) -> float:
        return min(max(vol, MIN_VOL), MAX_VOL)
