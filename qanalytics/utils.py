"""
Shared numerical helpers and logging setup.

Bounded bisection, probability clamping, trading-year conversions and
sorted-list lookups used throughout the fitters and pricers.
"""

import math
import bisect
import functools
import time
import logging
from typing import Callable, List, Sequence, Tuple

from .config import ZERO, ONE, TRADING_DAYS_IN_YEAR, LOG_LEVEL


def get_logger(name: str, level: str = LOG_LEVEL) -> logging.Logger:
    """
    Return a named logger with a single console handler.

    Args:
        name: Logger name (typically the module __name__)
        level: Logging level string ("DEBUG", "INFO", "WARNING", "ERROR")

    Returns:
        logging.Logger
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler()
    handler.setFormatter(fmt)
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def timeit(func):
    """Decorator that logs the execution time of any function."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__)
        t0 = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - t0
        logger.debug("%s completed in %.3f s", func.__qualname__, elapsed)
        return result
    return wrapper


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves rounded up."""
    return int(math.floor(x + 0.5))


def limit_probability(p: float) -> float:
    """Clamp a probability to [ZERO, ONE], away from the infinite quantiles."""
    return min(max(p, ZERO), ONE)


def year_fraction(days_to_expiry: int) -> float:
    """Convert trading days to a year fraction."""
    return days_to_expiry / TRADING_DAYS_IN_YEAR


def days_to_expiry(year_fraction: float) -> int:
    """Convert a year fraction to whole trading days."""
    return round_half_up(year_fraction * TRADING_DAYS_IN_YEAR)


def binary_search_steps(start: float, end: float, precision: float) -> int:
    """Number of halvings needed to shrink [start, end] down to precision."""
    return 1 + round_half_up(math.log2(abs(end - start) / precision))


def binary_search_with_status(
    function: Callable[[float], float],
    target: float,
    min_argument: float,
    max_argument: float,
    steps: int,
    precision: float = ZERO
) -> Tuple[float, bool]:
    """
    Bounded bisection search for function(x) == target.

    The function is assumed monotonic on [min_argument, max_argument].
    When the target is not bracketed by the endpoint values, the closer
    endpoint is returned and the search is flagged as failed.

    Args:
        function: Monotonic function to invert
        target: Value to match
        min_argument: Lower end of the bracket
        max_argument: Upper end of the bracket
        steps: Maximum number of halvings
        precision: Acceptable |function(x) - target|

    Returns:
        (argument, converged) tuple
    """
    min_value = function(min_argument)
    if abs(min_value - target) <= precision:
        return min_argument, True

    max_value = function(max_argument)
    if abs(max_value - target) <= precision:
        return max_argument, True

    if (target - min_value) * (target - max_value) > 0.0:
        if abs(target - min_value) < abs(target - max_value):
            return min_argument, False
        return max_argument, False

    best = (min_argument + max_argument) * 0.5
    for _ in range(steps):
        best = (min_argument + max_argument) * 0.5
        value = function(best)
        if abs(target - value) <= precision:
            return best, True

        if (target - min_value) * (target - value) <= 0.0:
            max_argument = best
        else:
            min_value = value
            min_argument = best

    return best, False


def binary_search(
    function: Callable[[float], float],
    target: float,
    min_argument: float,
    max_argument: float,
    steps: int,
    precision: float = ZERO
) -> float:
    """Bounded bisection search, returning only the best argument."""
    argument, _ = binary_search_with_status(
        function, target, min_argument, max_argument, steps, precision
    )
    return argument


def lower_bound(sorted_values: Sequence[float], x: float) -> int:
    """Index of the first element >= x, or len(sorted_values)."""
    return bisect.bisect_left(sorted_values, x)


def interpolate(x1: float, y1: float, x2: float, y2: float, x: float) -> float:
    """Linear interpolation of y = f(x) through (x1, y1) and (x2, y2)."""
    return y1 + (y2 - y1) * (x - x1) / (x2 - x1)


def sign(flag: bool) -> float:
    """+1.0 for calls, -1.0 for puts."""
    return 1.0 if flag else -1.0


def pairs(xs: List[float], ys: List[float]) -> List[Tuple[float, float]]:
    """Zip two equally sized lists, rejecting a size mismatch."""
    if len(xs) != len(ys):
        raise ValueError(f"Size mismatch: {len(xs)} xs vs {len(ys)} ys")
    return list(zip(xs, ys))
