"""
Unit Tests: numerical helpers and configuration

Coverage:
    - round_half_up:          halves round towards +infinity
    - limit_probability:      clamping away from 0 and 1
    - year fractions:         trading-day conversions
    - binary search:          convergence, bracket failure, step count
    - lookups:                lower_bound, interpolate, pairs
    - OutlierSettings:        validation and warnings
    - get_logger:             single handler per logger

Run: pytest tests/ -v --tb=short
"""
import logging
import math

import pytest

from qanalytics.config import ZERO, ONE, MIN_VOL, MAX_VOL, OutlierSettings, OutliersMode
from qanalytics.utils import (
    binary_search,
    binary_search_steps,
    binary_search_with_status,
    days_to_expiry,
    get_logger,
    interpolate,
    limit_probability,
    lower_bound,
    pairs,
    round_half_up,
    sign,
    year_fraction,
)


class TestRounding:
    def test_halves_round_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(-0.5) == 0
        assert round_half_up(-1.5) == -1

    def test_regular_rounding(self):
        assert round_half_up(2.4) == 2
        assert round_half_up(2.6) == 3


class TestProbability:
    def test_clamped_to_open_interval(self):
        assert limit_probability(0.0) == ZERO
        assert limit_probability(1.0) == ONE
        assert limit_probability(-3.0) == ZERO
        assert limit_probability(0.3) == 0.3


class TestYearFraction:
    def test_one_year(self):
        assert year_fraction(252) == pytest.approx(1.0)
        assert days_to_expiry(1.0) == 252

    def test_round_trip_days(self):
        assert days_to_expiry(year_fraction(21)) == 21


class TestBinarySearch:
    def test_vol_steps(self):
        assert binary_search_steps(MIN_VOL, MAX_VOL, ZERO) == 44

    def test_finds_square_root(self):
        root = binary_search(lambda x: x * x, 2.0, 0.0, 2.0, 60, 1e-12)
        assert root == pytest.approx(math.sqrt(2.0), abs=1e-9)

    def test_decreasing_function(self):
        x, converged = binary_search_with_status(lambda x: -x, -0.25, 0.0, 1.0, 60, 1e-12)
        assert converged
        assert x == pytest.approx(0.25)

    def test_target_outside_bracket_returns_closer_end(self):
        x, converged = binary_search_with_status(lambda x: x, 5.0, 0.0, 1.0, 60)
        assert not converged
        assert x == 1.0

        x, converged = binary_search_with_status(lambda x: x, -5.0, 0.0, 1.0, 60)
        assert not converged
        assert x == 0.0

    def test_endpoint_match(self):
        x, converged = binary_search_with_status(lambda x: x, 0.0, 0.0, 1.0, 60)
        assert converged
        assert x == 0.0


class TestLookups:
    def test_lower_bound(self):
        values = [1.0, 2.0, 2.0, 5.0]
        assert lower_bound(values, 2.0) == 1
        assert lower_bound(values, 3.0) == 3
        assert lower_bound(values, 9.0) == 4

    def test_interpolate(self):
        assert interpolate(0.0, 0.0, 2.0, 10.0, 0.5) == pytest.approx(2.5)

    def test_sign(self):
        assert sign(True) == 1.0
        assert sign(False) == -1.0

    def test_pairs_size_mismatch(self):
        with pytest.raises(ValueError):
            pairs([1.0, 2.0], [1.0])
        assert pairs([1.0], [2.0]) == [(1.0, 2.0)]


class TestOutlierSettings:
    def test_defaults(self):
        settings = OutlierSettings()
        assert settings.mode is OutliersMode.PROBABILITY
        assert settings.probability == 0.01
        assert settings.iqr_factor == 2.0
        assert settings.validate()

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            OutlierSettings(mode='tails')

    def test_suspicious_probability_warns(self):
        with pytest.warns(UserWarning):
            OutlierSettings(probability=0.6)


class TestLogger:
    def test_single_handler(self):
        first = get_logger("qanalytics.test_logger")
        second = get_logger("qanalytics.test_logger")
        assert first is second
        assert len(second.handlers) == 1

    def test_level(self):
        logger = get_logger("qanalytics.test_logger_debug", level="DEBUG")
        assert logger.level == logging.DEBUG

    def test_does_not_duplicate_through_root(self):
        logger = get_logger("qanalytics.test_logger_root")
        assert logger.propagate is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
