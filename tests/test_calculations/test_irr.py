"""Tests for the IRR solver."""

import numpy_financial as npf
import pytest

from chalet_model.calculations.irr import calculate_irr, npv


class TestNPV:
    def test_zero_rate_is_sum(self):
        assert npv(0, [-100, 50, 60]) == 10

    def test_matches_numpy_financial(self):
        cashflows = [-1_000, 300, 400, 500]

        assert npv(0.08, cashflows) == pytest.approx(npf.npv(0.08, cashflows))


class TestCalculateIRR:
    """Tests for Newton-Raphson IRR."""

    def test_single_period(self):
        assert calculate_irr([-1_000, 1_100]) == pytest.approx(10.0)

    def test_matches_numpy_financial(self):
        cashflows = [-100, 39, 59, 55, 20]

        expected = round(npf.irr(cashflows) * 100, 2)
        assert calculate_irr(cashflows) == pytest.approx(expected, abs=0.01)

    def test_negative_irr(self):
        cashflows = [-1_000, 200, 200, 200]

        expected = round(npf.irr(cashflows) * 100, 2)
        assert expected < 0
        assert calculate_irr(cashflows) == pytest.approx(expected, abs=0.01)

    def test_result_is_rounded(self):
        irr = calculate_irr([-77_916, 8_000, 8_000, 8_000, 8_000, 120_000])

        assert irr == round(irr, 2)

    def test_all_zero_cashflows_return_zero(self):
        """A flat NPV has no root to find."""
        assert calculate_irr([0, 0, 0]) == 0.0

    def test_non_convergence_returns_zero(self):
        """No sign change means no root; the solver gives up with 0."""
        assert calculate_irr([100, 100, 100]) == 0.0
