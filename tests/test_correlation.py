"""
Unit Tests: CorrelationFitter

Run: pytest tests/ -v --tb=short
"""
import numpy as np
import pandas as pd
import pytest

from qanalytics.core.correlation import CorrelationFitter


@pytest.fixture(scope="module")
def correlated_pairs():
    rng = np.random.default_rng(23)
    z1 = rng.standard_normal(3000)
    z2 = 0.7 * z1 + np.sqrt(1.0 - 0.7 ** 2) * rng.standard_normal(3000)
    return z1.tolist(), z2.tolist()


class TestCorrelation:
    def test_perfect_linear(self):
        fitter = CorrelationFitter([1, 2, 3, 4, 5], [2, 4, 6, 8, 10])
        assert fitter.compute_correlation() == pytest.approx(1.0)

    def test_anti_correlated(self):
        fitter = CorrelationFitter([1, 2, 3, 4, 5], [5, 4, 3, 2, 1])
        assert fitter.correlation == pytest.approx(-1.0)

    def test_self_correlation(self, correlated_pairs):
        xs, _ = correlated_pairs
        assert CorrelationFitter(xs, xs).compute_correlation() == pytest.approx(1.0)

    def test_constant_series(self):
        assert CorrelationFitter([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]).compute_correlation() == 0.0

    def test_size_mismatch(self):
        with pytest.raises(ValueError):
            CorrelationFitter([1.0, 2.0], [1.0])

    def test_sampled_correlation(self, correlated_pairs):
        xs, ys = correlated_pairs
        fitter = CorrelationFitter(xs, ys)
        plain = fitter.compute_correlation()
        assert plain == pytest.approx(np.corrcoef(xs, ys)[0, 1])
        assert plain == pytest.approx(0.7, abs=0.05)

    def test_trimmed_marginals_lower_correlation(self, correlated_pairs):
        xs, ys = correlated_pairs
        fitter = CorrelationFitter(xs, ys)
        trimmed = fitter.compute_correlation(exclude_outliers=True)
        assert trimmed < fitter.compute_correlation()
        assert trimmed == pytest.approx(0.63, abs=0.02)

    def test_missing_y_drops_pair(self):
        fitter = CorrelationFitter([1, 2, 3, 4, 5], [2, float('nan'), 6, 8, 10])
        assert fitter.size == 4
        assert fitter.compute_correlation() == pytest.approx(1.0)

    def test_missing_x_keeps_alignment(self):
        fitter = CorrelationFitter([float('nan'), 2, 3, 4, 5], [2, 4, 6, 8, 10])
        assert fitter.xs == [2.0, 3.0, 4.0, 5.0]
        assert fitter.ys == [4.0, 6.0, 8.0, 10.0]
        assert fitter.compute_correlation() == pytest.approx(1.0)

    def test_builder_skips_none(self):
        builder = CorrelationFitter.Builder()
        for x, y in [(1.0, 1.0), (None, 5.0), (2.0, 2.0), (3.0, None), (3.0, 3.0)]:
            builder.add(x, y)
        assert builder.build().size == 3


class TestRobustCorrelation:
    def test_needs_four_pairs(self):
        assert CorrelationFitter([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]).compute_robust_correlation() == 0.0

    def test_filter_empty(self):
        filtered = CorrelationFitter([], []).filter_outliers()
        assert filtered.size == 0

    def test_outlier_pair_removed(self):
        xs = [float(x) for x in range(1, 21)] + [1000.0]
        ys = [2.0 * x for x in range(1, 21)] + [-1000.0]
        fitter = CorrelationFitter(xs, ys)
        assert fitter.compute_correlation() < 0.0
        assert fitter.filter_outliers().size == 20
        assert fitter.compute_robust_correlation() == pytest.approx(1.0)


class TestBuilderAndExport:
    def test_builder(self):
        builder = CorrelationFitter.Builder()
        for x in range(5):
            builder.add(float(x), 3.0 * x)
        assert len(builder) == 5
        assert builder.build().correlation == pytest.approx(1.0)

    def test_save(self, tmp_path):
        path = tmp_path / "pairs.csv"
        CorrelationFitter([1.0, 2.0], [3.0, 4.0]).save(str(path))
        frame = pd.read_csv(path, header=None)
        assert frame.values.tolist() == [[0, 1.0, 3.0], [1, 2.0, 4.0]]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
