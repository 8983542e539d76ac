"""
Smoke Tests: diagnostic figures and the report entry point

Run: pytest tests/ -v --tb=short
"""
import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from qanalytics.core.fitter import DistributionFitter
from qanalytics.models.black_scholes import OptionType
from qanalytics.models.normal_process import NormalProcess
from qanalytics.visualization.diagnostics import DiagnosticsPlotter
from qanalytics.visualization.report import main


@pytest.fixture(scope="module")
def plotter():
    return DiagnosticsPlotter(figsize=(6, 4), dpi=60)


class TestDiagnosticsPlotter:
    def test_distribution(self, plotter, tmp_path):
        rng = np.random.default_rng(0)
        path = tmp_path / "dist.png"
        fig = plotter.plot_distribution(DistributionFitter(rng.standard_normal(500)), save_path=str(path))
        assert path.exists()
        plt.close(fig)

    def test_paths(self, plotter):
        process = NormalProcess(0.0, 0.2, seed=1)
        paths = [process.generate_path(50, 100.0, 1 / 252), None]
        fig = plotter.plot_paths(paths)
        assert len(fig.axes[0].lines) == 1
        plt.close(fig)

    def test_implied_vol_and_greeks(self, plotter):
        fig = plotter.plot_implied_vol_check(OptionType.PUT, 100.0, np.linspace(80, 120, 5), 0.25)
        plt.close(fig)
        fig = plotter.plot_greeks(OptionType.CALL, np.linspace(80, 120, 5), 100.0, 0.25)
        plt.close(fig)


class TestReport:
    def test_main_writes_outputs(self, tmp_path):
        main(['--output-dir', str(tmp_path), '--seed', '3'])
        written = {p.name for p in tmp_path.iterdir()}
        assert {
            'returns_density.csv',
            'returns_density.png',
            'simulated_paths.png',
            'correlated_returns.csv',
            'implied_vol_check.png',
            'greeks.png',
        } <= written


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
