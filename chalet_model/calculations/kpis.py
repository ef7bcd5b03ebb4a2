"""First-year KPI evaluator.

Pure function from a ``ProjectInputs`` snapshot to the single-year figures
the projection, break-even and sweep engines read. Every step reports
itself to the active TraceContext, if any.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Optional

from ..models.inputs import ProjectInputs
from ..models.lookups import TRANSFER_DUTY_TIERS
from .amortization import calculate_loan_balance, calculate_periodic_payment
from .expenses import calculate_expenses
from .trace import trace
from .utils import round2, safe_ratio

logger = logging.getLogger(__name__)


class KPIMetric(str, Enum):
    """Numeric KPIs usable as a sweep, simulation or search objective."""

    NIGHTS_SOLD = "nights_sold"
    ANNUAL_REVENUE = "annual_revenue"
    TOTAL_EXPENSES = "total_expenses"
    NOI = "noi"
    LOAN_AMOUNT = "loan_amount"
    PERIODIC_PAYMENT = "periodic_payment"
    ANNUAL_DEBT_SERVICE = "annual_debt_service"
    TRANSFER_DUTIES = "transfer_duties"
    TOTAL_ACQUISITION_FEES = "total_acquisition_fees"
    INITIAL_INVESTMENT = "initial_investment"
    ANNUAL_CASHFLOW = "annual_cashflow"
    PRINCIPAL_PAID_FIRST_YEAR = "principal_paid_first_year"
    PROPERTY_APPRECIATION = "property_appreciation"
    TOTAL_ANNUAL_PROFIT = "total_annual_profit"
    CASHFLOW_ROI = "cashflow_roi"
    CAPITALIZATION_ROI = "capitalization_roi"
    APPRECIATION_ROI = "appreciation_roi"
    TOTAL_ROI = "total_roi"
    CASH_ON_CASH = "cash_on_cash"
    CAP_RATE = "cap_rate"


@dataclass(frozen=True)
class KPIResults:
    """First-year metrics. Money in dollars, ratios in percent."""

    nights_sold: float
    annual_revenue: float
    total_expenses: float
    noi: float
    loan_amount: float
    periodic_payment: float
    annual_debt_service: float
    transfer_duties: float
    total_acquisition_fees: float
    initial_investment: float
    annual_cashflow: float
    principal_paid_first_year: float
    property_appreciation: float
    total_annual_profit: float
    cashflow_roi: float
    capitalization_roi: float
    appreciation_roi: float
    total_roi: float
    cash_on_cash: float
    cap_rate: float
    expenses_by_category: Dict[str, float] = field(default_factory=dict)

    def get(self, metric: KPIMetric) -> float:
        """Read one metric by enum (or its string value)."""
        return getattr(self, KPIMetric(metric).value)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def calculate_transfer_duties(
    purchase_price: float,
    municipal_assessment: Optional[float] = None,
) -> float:
    """Progressive transfer duties on max(price, municipal assessment).

    The assessment only counts when it is positive.

    Example:
        >>> calculate_transfer_duties(300_000)
        2916.0
    """
    if municipal_assessment is not None and municipal_assessment > 0:
        base_amount = max(purchase_price, municipal_assessment)
    else:
        base_amount = purchase_price

    duties = 0.0
    lower = 0.0
    for tier in TRANSFER_DUTY_TIERS:
        if base_amount <= lower:
            break
        duties += (min(base_amount, tier.upper_limit) - lower) * tier.rate
        lower = tier.upper_limit

    return round2(duties)


def calculate_kpis(inputs: ProjectInputs) -> KPIResults:
    """Evaluate the first-year KPIs of a project.

    Args:
        inputs: Project snapshot; ranged inputs are read through ``resolved``.

    Returns:
        KPIResults with every figure rounded to 2 decimals.
    """
    financing = inputs.financing
    revenue_inputs = inputs.revenue
    fees = inputs.acquisition_fees

    adr = revenue_inputs.average_daily_rate.resolved
    occupancy = revenue_inputs.occupancy_rate.resolved
    days_per_year = revenue_inputs.days_per_year

    purchase_price = financing.purchase_price.resolved
    down_payment = financing.down_payment.resolved
    interest_rate = financing.interest_rate.resolved
    amortization_years = financing.amortization_years.resolved
    frequency = financing.payment_frequency
    appreciation_rate = financing.annual_appreciation_rate.resolved
    municipal_assessment = (
        financing.municipal_assessment.resolved
        if financing.municipal_assessment is not None else None
    )

    # Revenue
    nights_sold = trace("kpi.nights_sold", round2(days_per_year * occupancy / 100), {
        "inputs.days_per_year": days_per_year,
        "inputs.occupancy_rate": occupancy,
    })
    annual_revenue = trace("kpi.annual_revenue", round2(adr * nights_sold), {
        "inputs.average_daily_rate": adr,
        "kpi.nights_sold": nights_sold,
    })

    # Expenses
    breakdown = calculate_expenses(inputs.expenses, annual_revenue, purchase_price)
    total_expenses = trace("kpi.total_expenses", breakdown.total, breakdown.by_line)
    noi = trace("kpi.noi", round2(annual_revenue - total_expenses), {
        "kpi.annual_revenue": annual_revenue,
        "kpi.total_expenses": total_expenses,
    })

    # Financing
    loan_amount = trace("kpi.loan_amount", round2(purchase_price - down_payment), {
        "inputs.purchase_price": purchase_price,
        "inputs.down_payment": down_payment,
    })
    periodic_payment = trace(
        "kpi.periodic_payment",
        round2(calculate_periodic_payment(loan_amount, interest_rate, amortization_years, frequency)),
        {
            "kpi.loan_amount": loan_amount,
            "inputs.interest_rate": interest_rate,
            "inputs.amortization_years": amortization_years,
        },
    )
    annual_debt_service = trace(
        "kpi.annual_debt_service",
        round2(periodic_payment * frequency.payments_per_year),
        {"kpi.periodic_payment": periodic_payment},
    )

    # Acquisition
    transfer_duties = trace(
        "kpi.transfer_duties",
        calculate_transfer_duties(purchase_price, municipal_assessment),
        {
            "inputs.purchase_price": purchase_price,
            "inputs.municipal_assessment": municipal_assessment or 0.0,
        },
    )
    notary_fees = fees.notary_fees.resolved
    other_fees = fees.other.resolved
    total_acquisition_fees = trace(
        "kpi.total_acquisition_fees",
        round2(transfer_duties + notary_fees + other_fees),
        {
            "kpi.transfer_duties": transfer_duties,
            "inputs.notary_fees": notary_fees,
            "inputs.other_fees": other_fees,
        },
    )
    initial_investment = trace(
        "kpi.initial_investment",
        round2(down_payment + total_acquisition_fees),
        {
            "inputs.down_payment": down_payment,
            "kpi.total_acquisition_fees": total_acquisition_fees,
        },
    )

    # Returns
    annual_cashflow = trace(
        "kpi.annual_cashflow",
        round2(annual_revenue - total_expenses - annual_debt_service),
        {
            "kpi.annual_revenue": annual_revenue,
            "kpi.total_expenses": total_expenses,
            "kpi.annual_debt_service": annual_debt_service,
        },
    )

    # One year of the rounded level payment against the opening balance
    payments_per_year = frequency.payments_per_year
    balance_after_year = calculate_loan_balance(
        loan_amount,
        interest_rate / 100 / payments_per_year,
        periodic_payment,
        payments_per_year,
    )
    principal_paid_first_year = trace(
        "kpi.principal_paid_first_year",
        round2(loan_amount - balance_after_year) if loan_amount > 0 else 0.0,
        {
            "kpi.loan_amount": loan_amount,
            "inputs.interest_rate": interest_rate,
            "kpi.periodic_payment": periodic_payment,
        },
    )
    property_appreciation = trace(
        "kpi.property_appreciation",
        round2(purchase_price * appreciation_rate / 100),
        {
            "inputs.purchase_price": purchase_price,
            "inputs.appreciation_rate": appreciation_rate,
        },
    )
    total_annual_profit = trace(
        "kpi.total_annual_profit",
        round2(annual_cashflow + principal_paid_first_year + property_appreciation),
        {
            "kpi.annual_cashflow": annual_cashflow,
            "kpi.principal_paid_first_year": principal_paid_first_year,
            "kpi.property_appreciation": property_appreciation,
        },
    )

    total_roi = trace(
        "kpi.total_roi",
        round2(safe_ratio(total_annual_profit, initial_investment, 100)),
        {
            "kpi.total_annual_profit": total_annual_profit,
            "kpi.initial_investment": initial_investment,
        },
    )
    cash_on_cash = trace(
        "kpi.cash_on_cash",
        round2(safe_ratio(annual_cashflow, initial_investment, 100)),
        {
            "kpi.annual_cashflow": annual_cashflow,
            "kpi.initial_investment": initial_investment,
        },
    )
    cap_rate = trace(
        "kpi.cap_rate",
        round2(safe_ratio(annual_revenue - total_expenses, purchase_price, 100)),
        {"kpi.noi": noi, "inputs.purchase_price": purchase_price},
    )

    if initial_investment <= 0:
        logger.debug("Initial investment is %.2f; ROI figures reported as 0", initial_investment)

    return KPIResults(
        nights_sold=nights_sold,
        annual_revenue=annual_revenue,
        total_expenses=total_expenses,
        noi=noi,
        loan_amount=loan_amount,
        periodic_payment=periodic_payment,
        annual_debt_service=annual_debt_service,
        transfer_duties=transfer_duties,
        total_acquisition_fees=total_acquisition_fees,
        initial_investment=initial_investment,
        annual_cashflow=annual_cashflow,
        principal_paid_first_year=principal_paid_first_year,
        property_appreciation=property_appreciation,
        total_annual_profit=total_annual_profit,
        cashflow_roi=round2(safe_ratio(annual_cashflow, initial_investment, 100)),
        capitalization_roi=round2(safe_ratio(principal_paid_first_year, initial_investment, 100)),
        appreciation_roi=round2(safe_ratio(property_appreciation, initial_investment, 100)),
        total_roi=total_roi,
        cash_on_cash=cash_on_cash,
        cap_rate=cap_rate,
        expenses_by_category=breakdown.by_category,
    )
