"""Mortgage amortization: level payment and year-by-year schedule."""

import logging
from dataclasses import dataclass
from typing import List

import numpy_financial as npf

from ..models.inputs import PaymentFrequency
from .utils import round2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AmortizationYear:
    """Loan activity aggregated over one projection year."""

    year: int
    payment: float  # Debt service actually paid during the year
    principal: float
    interest: float
    balance: float  # Outstanding balance at year end


def calculate_periodic_payment(
    loan_amount: float,
    annual_rate: float,
    amortization_years: float,
    frequency: PaymentFrequency,
) -> float:
    """Level payment that retires the loan over the amortization period.

    PMT = L x r x (1 + r)^n / ((1 + r)^n - 1), or L / n when r = 0.

    Args:
        loan_amount: Principal borrowed.
        annual_rate: Nominal annual rate in percent (e.g., 5 for 5%).
        amortization_years: Amortization period in years.
        frequency: Payment frequency.

    Returns:
        Unrounded periodic payment (0 for an empty or zero-term loan).
    """
    payments_per_year = frequency.payments_per_year
    total_payments = amortization_years * payments_per_year
    if loan_amount <= 0 or total_payments <= 0:
        return 0.0

    periodic_rate = annual_rate / 100 / payments_per_year
    if periodic_rate == 0:
        return loan_amount / total_payments

    # numpy_financial returns a cash outflow, so negate
    return float(-npf.pmt(periodic_rate, total_payments, loan_amount))


def generate_amortization_schedule(
    loan_amount: float,
    annual_rate: float,
    amortization_years: float,
    frequency: PaymentFrequency,
    projection_years: int,
) -> List[AmortizationYear]:
    """Simulate the loan payment by payment and aggregate per year.

    Each period charges interest on the running balance and applies the rest
    of the level payment to principal, never more than what is owed. Once
    the loan is retired the remaining years show zero activity. Only the
    yearly aggregates are rounded so rounding error does not compound.

    Args:
        loan_amount: Principal borrowed.
        annual_rate: Nominal annual rate in percent.
        amortization_years: Amortization period in years.
        frequency: Payment frequency.
        projection_years: Number of years to produce (may exceed the term).

    Returns:
        One AmortizationYear per projection year, chronological.
    """
    payments_per_year = frequency.payments_per_year
    periodic_rate = annual_rate / 100 / payments_per_year
    periodic_payment = calculate_periodic_payment(
        loan_amount, annual_rate, amortization_years, frequency
    )

    logger.debug(
        "Amortizing %.2f at %.4f%% over %s years (%d payments/year, %d years projected)",
        loan_amount, annual_rate, amortization_years, payments_per_year, projection_years,
    )

    schedule: List[AmortizationYear] = []
    balance = loan_amount
    opening_balance = round2(loan_amount)

    for year in range(1, projection_years + 1):
        year_interest = 0.0

        for _ in range(payments_per_year):
            if balance <= 1e-9:
                balance = 0.0
                break
            interest = balance * periodic_rate
            principal = min(periodic_payment - interest, balance)
            year_interest += interest
            balance -= principal

        # Principal is the drop in the rounded balance so the yearly figures
        # add up to the loan amount.
        closing_balance = round2(max(0.0, balance))
        principal_repaid = round2(opening_balance - closing_balance)
        interest_paid = round2(year_interest)
        opening_balance = closing_balance

        schedule.append(AmortizationYear(
            year=year,
            payment=round2(principal_repaid + interest_paid),
            principal=principal_repaid,
            interest=interest_paid,
            balance=closing_balance,
        ))

    return schedule


def calculate_loan_balance(
    original_principal: float,
    periodic_rate: float,
    periodic_payment: float,
    periods_elapsed: int,
) -> float:
    """Closed-form remaining balance after a number of level payments.

    Balance = P x (1 + r)^n - PMT x [((1 + r)^n - 1) / r]

    Args:
        original_principal: Original loan amount.
        periodic_rate: Rate per payment period (decimal).
        periodic_payment: Level payment.
        periods_elapsed: Number of payments made.

    Returns:
        Remaining balance, floored at zero.
    """
    if periodic_rate == 0:
        return max(0.0, original_principal - periodic_payment * periods_elapsed)

    growth_factor = (1 + periodic_rate) ** periods_elapsed
    balance = (
        original_principal * growth_factor
        - periodic_payment * ((growth_factor - 1) / periodic_rate)
    )
    return max(0.0, balance)
