"""
Unit Tests: MonteCarloPricer (probability-grid quadrature)

Run: pytest tests/ -v --tb=short
"""
import pytest

from qanalytics.models.black_scholes import BlackScholes, OptionType
from qanalytics.models.monte_carlo import MonteCarloPricer
from qanalytics.models.normal_process import NormalProcess


@pytest.fixture
def flat_process():
    return NormalProcess(growth=0.0, vol=0.25)


class TestMonteCarloPricer:
    @pytest.mark.parametrize("option_type, strike", [
        (OptionType.CALL, 90.0),
        (OptionType.CALL, 110.0),
        (OptionType.PUT, 95.0),
    ])
    def test_matches_closed_form(self, flat_process, option_type, strike):
        mc = MonteCarloPricer(flat_process, option_type, 100.0, strike, 0.5)
        bs = BlackScholes(option_type, 100.0, strike, 0.5, 0.0, 0.0, 0.25)
        assert mc.price() == pytest.approx(bs.price(), abs=0.1)

    def test_deterministic(self, flat_process):
        mc = MonteCarloPricer(flat_process, OptionType.CALL, 100.0, 100.0, 1.0, samples=2000)
        assert mc.price() == mc.price()

    def test_delta_close_to_analytic(self, flat_process):
        mc = MonteCarloPricer(flat_process, OptionType.CALL, 100.0, 100.0, 0.5)
        bs = BlackScholes(OptionType.CALL, 100.0, 100.0, 0.5, 0.0, 0.0, 0.25)
        assert mc.delta() == pytest.approx(bs.analytic_delta(), abs=0.03)

    def test_growth_carries_drift(self):
        # Undiscounted: growth r prices the forward value e^{rT}·BS
        process = NormalProcess(growth=0.05, vol=0.2)
        mc = MonteCarloPricer(process, OptionType.CALL, 100.0, 100.0, 1.0)
        bs = BlackScholes(OptionType.CALL, 100.0, 100.0, 1.0, 0.05, 0.0, 0.2)
        assert mc.price() == pytest.approx(bs.price() * 1.0512711, abs=0.1)

    def test_expired(self, flat_process):
        mc = MonteCarloPricer(flat_process, OptionType.PUT, 90.0, 100.0, 0.0)
        assert mc.price() == mc.value_at_expiration() == 10.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
