"""
Unit Tests: NormalProcess simulation and calibration

Coverage:
    - Forward moments and terminal distribution
    - Count-based paths: length, reproducibility, abort below the floor
    - Day-based paths: trading days, clamping at the floor
    - Correlated paths: realized return correlation
    - Calibration: volatility recovered from a simulated history

Run: pytest tests/ -v --tb=short
"""
import math
from datetime import date

import numpy as np
import pytest

from qanalytics.config import MINIMUM_PRICE
from qanalytics.core.correlation import CorrelationFitter
from qanalytics.core.trading_calendar import is_trading_day
from qanalytics.models.normal_process import NormalProcess, parse_normal_process
from qanalytics.utils import year_fraction


DT = year_fraction(1)


class TestMoments:
    def test_forward_mean_and_dev(self):
        process = NormalProcess(0.05, 0.2)
        assert process.forward_mean(100.0, 1.0) == pytest.approx(100.0 * math.exp(0.05))
        expected = 100.0 * math.sqrt(math.exp(0.1) * (math.exp(0.04) - 1.0))
        assert process.forward_dev(100.0, 1.0) == pytest.approx(expected)

    def test_distribution(self):
        dist = NormalProcess(0.05, 0.2).distribution(2.0)
        assert dist.mean() == pytest.approx((0.05 - 0.02) * 2.0)
        assert dist.std() == pytest.approx(0.2 * math.sqrt(2.0))


class TestCountPaths:
    def test_length_and_start(self):
        path = NormalProcess(0.05, 0.2, seed=1).generate_path(100, 50.0, DT)
        assert len(path) == 101
        assert path[0] == 50.0
        assert min(path) >= MINIMUM_PRICE

    def test_seeded_reproducible(self):
        a = NormalProcess(0.0, 0.3, seed=9).generate_path(20, 100.0, DT)
        b = NormalProcess(0.0, 0.3, seed=9).generate_path(20, 100.0, DT)
        assert a == b

    def test_floor_breach_aborts(self):
        process = NormalProcess(0.0, 5.0, seed=2)
        assert process.generate_path(100, 1.0, 1.0) is None
        assert process.generate_forward(100, 1.0, 1.0) is None

    def test_forward_is_positive(self):
        forward = NormalProcess(0.05, 0.2, seed=3).generate_forward(252, 100.0, DT)
        assert forward > MINIMUM_PRICE

    def test_process_is_immutable(self):
        process = NormalProcess(0.05, 0.2)
        with pytest.raises(AttributeError):
            process.vol = 0.3


class TestDayPaths:
    def test_trading_days_only(self):
        process = NormalProcess(0.0, 0.2, seed=4)
        records = process.generate_path_between(date(2024, 3, 2), date(2024, 3, 29), 100.0, 1)
        assert records[0].day == date(2024, 3, 4)
        assert records[-1].day == date(2024, 3, 29)
        assert len(records) == 20
        assert all(is_trading_day(r.day) for r in records)
        assert records[0].price == 100.0

    def test_count_of_days(self):
        records = NormalProcess(0.0, 0.2, seed=5).generate_path_days(date(2024, 3, 4), 100.0, 1, 10)
        assert len(records) == 11

    def test_clamped_at_floor(self):
        process = NormalProcess(0.0, 5.0, seed=6)
        records = process.generate_path_days(date(2024, 3, 4), 1.0, 252, 60)
        assert len(records) == 61
        assert min(r.price for r in records) == MINIMUM_PRICE


class TestCorrelatedPaths:
    def test_realized_correlation(self):
        process = NormalProcess(0.0, 0.2, seed=7)
        other = NormalProcess(0.0, 0.4)
        path = process.generate_correlated_path(5000, 100.0, DT, other, 50.0, 0.6)
        assert len(path) == 5001
        assert path[0] == (100.0, 50.0)

        xs = [math.log(b[0] / a[0]) for a, b in zip(path, path[1:])]
        ys = [math.log(b[1] / a[1]) for a, b in zip(path, path[1:])]
        assert CorrelationFitter(xs, ys).compute_correlation() == pytest.approx(0.6, abs=0.05)


class TestCalibration:
    def test_recovers_volatility(self):
        path = NormalProcess(0.05, 0.3, seed=8).generate_path(5000, 100.0, DT)
        fitted = parse_normal_process(path, DT)
        assert fitted.vol == pytest.approx(0.3, rel=0.05)

    def test_growth_unbiasing(self):
        # Constant log drift m per step: vol = 0, growth = m / dt
        prices = [100.0 * math.exp(0.001 * i) for i in range(50)]
        fitted = parse_normal_process(prices, DT)
        assert fitted.vol == pytest.approx(0.0, abs=1e-9)
        assert fitted.growth == pytest.approx(0.001 / DT)

    def test_exclude_outliers(self):
        rng = np.random.default_rng(10)
        returns = rng.normal(0.0, 0.01, 1000)
        returns[500] = 2.0
        prices = (100.0 * np.exp(np.cumsum(returns))).tolist()
        plain = parse_normal_process(prices, DT)
        robust = parse_normal_process(prices, DT, exclude_outliers=True)
        assert robust.vol < plain.vol


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
