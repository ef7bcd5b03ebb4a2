"""Tests for the amortization scheduler."""

import pytest

from chalet_model.calculations.amortization import (
    calculate_loan_balance,
    calculate_periodic_payment,
    generate_amortization_schedule,
)
from chalet_model.models import PaymentFrequency


class TestPeriodicPayment:
    """Tests for the level payment."""

    def test_standard_mortgage_payment(self):
        """$225,000 at 5% over 25 years, monthly."""
        payment = calculate_periodic_payment(225_000, 5, 25, PaymentFrequency.MONTHLY)

        assert payment == pytest.approx(1315.33, abs=0.01)

    def test_zero_rate_is_straight_line(self):
        payment = calculate_periodic_payment(120_000, 0, 10, PaymentFrequency.MONTHLY)

        assert payment == 1_000

    def test_empty_loan_has_no_payment(self):
        assert calculate_periodic_payment(0, 5, 25, PaymentFrequency.MONTHLY) == 0.0


class TestAmortizationSchedule:
    """Tests for the year-by-year schedule."""

    def test_zero_rate_repays_exactly(self):
        """At 0% the principal repaid over the term equals the loan."""
        schedule = generate_amortization_schedule(
            120_000, 0, 10, PaymentFrequency.MONTHLY, projection_years=12
        )

        assert sum(y.principal for y in schedule) == 120_000
        assert all(y.interest == 0 for y in schedule)
        assert schedule[9].balance == 0
        assert schedule[10].payment == 0
        assert schedule[11].balance == 0

    def test_zero_rate_uneven_split_repays_exactly(self):
        """100,000 over 7 years does not divide evenly; the cents still add up."""
        schedule = generate_amortization_schedule(
            100_000, 0, 7, PaymentFrequency.MONTHLY, projection_years=7
        )

        assert round(sum(y.principal for y in schedule), 2) == 100_000
        assert schedule[-1].balance == 0
        assert schedule[0].principal == pytest.approx(14_285.71, abs=0.01)

    def test_principal_is_balance_drop(self):
        schedule = generate_amortization_schedule(
            100_000, 0, 7, PaymentFrequency.MONTHLY, projection_years=7
        )

        opening = 100_000
        for year in schedule:
            assert year.principal == pytest.approx(opening - year.balance, abs=1e-6)
            opening = year.balance

    def test_balance_is_non_increasing(self):
        schedule = generate_amortization_schedule(
            225_000, 5, 25, PaymentFrequency.MONTHLY, projection_years=30
        )

        balances = [y.balance for y in schedule]
        assert all(b1 >= b2 for b1, b2 in zip(balances, balances[1:]))

    def test_loan_is_retired_at_term(self):
        """The balance reaches zero at the end of the amortization period."""
        schedule = generate_amortization_schedule(
            225_000, 5, 25, PaymentFrequency.MONTHLY, projection_years=30
        )

        assert schedule[24].balance == pytest.approx(0, abs=0.01)
        assert sum(y.principal for y in schedule) == pytest.approx(225_000, abs=0.1)
        # No activity once the loan is repaid
        for year in schedule[25:]:
            assert year.payment == 0
            assert year.principal == 0
            assert year.interest == 0

    def test_payment_splits_into_interest_and_principal(self):
        schedule = generate_amortization_schedule(
            225_000, 5, 25, PaymentFrequency.MONTHLY, projection_years=5
        )

        for year in schedule:
            assert year.payment == pytest.approx(year.principal + year.interest, abs=0.02)
            assert year.payment == pytest.approx(1315.33 * 12, abs=0.1)

    def test_first_year_interest_dominates(self):
        schedule = generate_amortization_schedule(
            225_000, 5, 25, PaymentFrequency.MONTHLY, projection_years=1
        )

        assert schedule[0].interest > schedule[0].principal
        assert schedule[0].balance < 225_000

    @pytest.mark.parametrize("frequency", list(PaymentFrequency))
    def test_every_frequency_retires_the_loan(self, frequency):
        schedule = generate_amortization_schedule(
            100_000, 4, 10, frequency, projection_years=10
        )

        assert len(schedule) == 10
        assert schedule[-1].balance == pytest.approx(0, abs=0.01)

    def test_schedule_matches_closed_form_balance(self):
        """Simulated balances agree with the closed-form formula."""
        payment = calculate_periodic_payment(225_000, 5, 25, PaymentFrequency.MONTHLY)
        schedule = generate_amortization_schedule(
            225_000, 5, 25, PaymentFrequency.MONTHLY, projection_years=10
        )

        for year in schedule:
            expected = calculate_loan_balance(225_000, 0.05 / 12, payment, year.year * 12)
            assert year.balance == pytest.approx(expected, abs=0.01)


class TestLoanBalance:
    """Tests for the closed-form balance."""

    def test_zero_rate_balance(self):
        assert calculate_loan_balance(12_000, 0, 1_000, 5) == 7_000

    def test_balance_is_floored_at_zero(self):
        assert calculate_loan_balance(12_000, 0, 1_000, 20) == 0.0
