"""Tests for break-even occupancy."""

import pytest

from chalet_model.calculations.break_even import calculate_break_even_occupancy
from chalet_model.calculations.kpis import calculate_kpis
from chalet_model.models import ExpenseAmount, InputField, set_value


class TestBreakEvenOccupancy:

    def test_reference_break_even(self, reference_inputs):
        kpis = calculate_kpis(reference_inputs)

        expected = (kpis.total_expenses + kpis.annual_debt_service) / 200 / 365 * 100
        assert calculate_break_even_occupancy(reference_inputs) == pytest.approx(expected, abs=0.005)

    def test_cashflow_is_zero_at_break_even(self, reference_inputs):
        """With only fixed expenses, occupancy at break-even zeroes the cashflow."""
        occupancy = calculate_break_even_occupancy(reference_inputs)

        kpis = calculate_kpis(set_value(reference_inputs, InputField.OCCUPANCY_RATE, occupancy))

        # Occupancy is rounded to 0.01%, worth at most ADR x days x 0.005%
        assert kpis.annual_cashflow == pytest.approx(0, abs=200 * 365 * 0.00005 + 0.01)

    def test_percentage_revenue_lines_stay_at_baseline(self, detailed_inputs):
        """The closed form keeps revenue-linked expenses at the nominal occupancy."""
        kpis = calculate_kpis(detailed_inputs)
        adr = detailed_inputs.revenue.average_daily_rate.resolved

        expected = (kpis.total_expenses + kpis.annual_debt_service) / adr / 365 * 100
        assert calculate_break_even_occupancy(detailed_inputs, kpis) == pytest.approx(expected, abs=0.005)

    def test_clamped_to_100(self, reference_inputs):
        inputs = set_value(reference_inputs, InputField.AVERAGE_DAILY_RATE, 10)

        assert calculate_break_even_occupancy(inputs) == 100

    def test_clamped_to_0(self, reference_inputs):
        inputs = set_value(reference_inputs, InputField.DOWN_PAYMENT, 300_000)
        inputs = set_value(inputs, ExpenseAmount(0), 0)

        assert calculate_break_even_occupancy(inputs) == 0

    def test_zero_adr_never_breaks_even(self, reference_inputs):
        inputs = set_value(reference_inputs, InputField.AVERAGE_DAILY_RATE, 0)

        assert calculate_break_even_occupancy(inputs) == 100
