"""
Unit Tests: quadrature, iterators and bounded random generators

Run: pytest tests/ -v --tb=short
"""
import math

import numpy as np
import pytest
from scipy.stats import norm

from qanalytics.core.generators import Algorithm, NormalRandomGenerator
from qanalytics.core.iterators import LinearIterator, LogarithmicZeroToInfinityIterator
from qanalytics.core.quadrature import GaussianQuadrature


class TestLinearIterator:
    def test_points(self):
        assert list(LinearIterator(0.0, 1.0, 4)) == [0.0, 0.25, 0.5, 0.75, 1.0]

    def test_length_and_array(self):
        it = LinearIterator(-1.0, 1.0, 10)
        assert len(it) == 11
        np.testing.assert_allclose(it.to_array(), np.linspace(-1.0, 1.0, 11))

    def test_degenerate_range(self):
        assert list(LinearIterator(3.0, 3.0, 5)) == [3.0]

    def test_first_last_and_reset(self):
        it = LinearIterator(0.0, 1.0, 2)
        assert it.is_first
        next(it)
        next(it)
        assert it.is_last
        next(it)
        assert not it.has_next()
        it.reset()
        assert it.has_next()
        assert next(it) == 0.0


class TestLogarithmicIterator:
    def test_geometric_steps(self):
        points = list(LogarithmicZeroToInfinityIterator(0.01, 100.0, 4))
        np.testing.assert_allclose(points, [0.01, 0.1, 1.0, 10.0, 100.0])

    def test_negative_half_line(self):
        points = list(LogarithmicZeroToInfinityIterator(-0.01, -100.0, 2))
        np.testing.assert_allclose(points, [-0.01, -1.0, -100.0])

    def test_zero_is_pushed_away(self):
        first = next(LogarithmicZeroToInfinityIterator(0.0, 1.0, 10))
        assert first > 0.0

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            LogarithmicZeroToInfinityIterator(0.01, -1.0, 3)
        with pytest.raises(ValueError):
            LogarithmicZeroToInfinityIterator(0.01, 1.0, 0)


class TestGaussianQuadrature:
    def test_polynomials_are_exact(self):
        # An n-point rule integrates polynomials up to degree 2n - 1 exactly
        q3 = GaussianQuadrature.QUADRATURE_3
        q5 = GaussianQuadrature.QUADRATURE_5
        assert q3.area(lambda x: x ** 5, 0.0, 1.0) == pytest.approx(1.0 / 6.0)
        assert q5.area(lambda x: x ** 9, 0.0, 1.0) == pytest.approx(0.1)

    def test_weights_sum_to_interval_width(self):
        xs, ws = GaussianQuadrature.QUADRATURE_5.sample(2.0, 5.0)
        assert ws.sum() == pytest.approx(3.0)
        assert np.all((xs > 2.0) & (xs < 5.0))

    def test_composite_normal_density(self):
        area = GaussianQuadrature.QUADRATURE_5.area(norm.pdf, -6.0, 6.0, count=20)
        assert area == pytest.approx(1.0, abs=1e-8)

    def test_area_with_samples(self):
        area, xs, ws, ys = GaussianQuadrature.QUADRATURE_3.area_with_samples(math.exp, 0.0, 1.0)
        assert area == pytest.approx(math.e - 1.0, rel=1e-5)
        assert len(xs) == len(ws) == len(ys) == 3
        assert len(GaussianQuadrature.QUADRATURE_3.weight_list(0.0, 1.0)) == 3

    def test_size_mismatch(self):
        with pytest.raises(ValueError):
            GaussianQuadrature([1.0, 1.0], [0.0])


class TestNormalRandomGenerator:
    @pytest.mark.parametrize("algorithm, low, high", [
        (Algorithm.UNIFORM_0_1, 0.0, 1.0),
        (Algorithm.UNIFORM_M1_1, -1.0, 1.0),
        (Algorithm.NORMAL_M1_1, -1.0, 1.0),
        (Algorithm.NORMAL_0_1, 0.0, 1.0),
    ])
    def test_bounds(self, algorithm, low, high):
        gen = NormalRandomGenerator(algorithm, seed=3)
        values = [gen.sample() for _ in range(2000)]
        assert min(values) >= low
        assert max(values) <= high

    def test_one(self):
        assert NormalRandomGenerator(Algorithm.ONE).sample() == 1.0

    def test_seeded_reproducible(self):
        a = NormalRandomGenerator(Algorithm.NORMAL_0_1, seed=11)
        b = NormalRandomGenerator(Algorithm.NORMAL_0_1, seed=11)
        assert [a.sample() for _ in range(5)] == [b.sample() for _ in range(5)]

    def test_unknown_algorithm(self):
        with pytest.raises(ValueError):
            NormalRandomGenerator('gauss')


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
