"""Multi-year projection engine.

Builds the year-by-year forecast (revenue and expense escalation, property
appreciation, amortization, capex) and values exit sales at fixed years.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import List, Optional

import pandas as pd

from ..models.inputs import ProjectInputs
from ..models.lookups import DSCR_UNCONSTRAINED, EXIT_SCENARIO_YEARS, LIMITS
from .amortization import AmortizationYear, generate_amortization_schedule
from .break_even import calculate_break_even_occupancy
from .expenses import calculate_expenses_for_year
from .irr import calculate_irr
from .kpis import calculate_kpis
from .utils import round2, safe_ratio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearProjection:
    """Forecast for a single year (1-indexed). Money in dollars, ratios in %."""

    year: int

    # Operations
    revenue: float
    expenses: float
    capex: float
    noi: float

    # Financing
    debt_service: float
    interest_paid: float
    principal_paid: float
    mortgage_balance: float

    # Cash
    cashflow: float  # NOI - debt service - capex
    cumulative_cashflow: float
    cumulative_principal_paid: float

    # Value
    property_value: float
    equity: float
    appreciation: float
    cumulative_appreciation: float

    # Ratios
    dscr: float
    ltv: float

    # Profit
    total_profit: float  # cashflow + principal + appreciation
    cumulative_total_profit: float
    roi_cashflow: float
    roi_total: float
    roe: float
    npv: float  # This year's cashflow discounted, not a running total


@dataclass(frozen=True)
class ExitScenario:
    """Outcome of selling the property at the end of ``year``."""

    year: int
    property_value: float
    sale_price: float
    mortgage_balance: float
    net_proceeds: float
    total_invested: float
    net_profit: float
    moic: float
    irr: float


@dataclass
class ProjectionResult:
    """Complete multi-year forecast."""

    years: List[YearProjection] = field(default_factory=list)
    exit_scenarios: List[ExitScenario] = field(default_factory=list)

    irr: float = 0.0
    payback_period_cashflow: Optional[int] = None
    payback_period_total: Optional[int] = None
    total_return: float = 0.0
    average_annual_return: float = 0.0
    average_roe: float = 0.0
    min_dscr: float = 0.0
    max_ltv: float = 0.0
    break_even_occupancy: float = 0.0

    def get_year(self, year: int) -> YearProjection:
        """Get the projection for a 1-indexed year."""
        if year < 1 or year > len(self.years):
            raise IndexError(f"Year {year} out of range [1, {len(self.years)}]")
        return self.years[year - 1]

    def get_exit_scenario(self, year: int) -> Optional[ExitScenario]:
        for scenario in self.exit_scenarios:
            if scenario.year == year:
                return scenario
        return None

    def to_dataframe(self) -> pd.DataFrame:
        """One row per projection year, indexed by year."""
        return pd.DataFrame([asdict(y) for y in self.years]).set_index("year")

    def exit_scenarios_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(s) for s in self.exit_scenarios]).set_index("year")


def clamp_projection_years(number_of_years: int) -> int:
    """Clamp a requested horizon to the supported range."""
    return max(LIMITS.min_projection_years, min(LIMITS.max_projection_years, int(number_of_years)))


def exit_years(number_of_years: int) -> List[int]:
    """Exit years: the fixed milestones within the horizon plus the horizon itself."""
    years = {y for y in EXIT_SCENARIO_YEARS if y <= number_of_years}
    years.add(number_of_years)
    return sorted(years)


def _sale_cashflows(
    years: List[YearProjection],
    exit_year: int,
    initial_investment: float,
    net_proceeds: float,
) -> List[float]:
    """IRR series: the investment, then each year's cashflow less capex, with the sale in the last year."""
    cashflows = [-initial_investment]
    for projection in years[:exit_year]:
        cashflows.append(projection.cashflow - projection.capex)
    cashflows[-1] += net_proceeds
    return cashflows


def calculate_projections(inputs: ProjectInputs, number_of_years: int) -> ProjectionResult:
    """Build the multi-year forecast for a project.

    Year k (1-indexed) escalates first-year revenue and fixed expenses by
    (1 + rate)^(k - 1), values the property at price x (1 + appreciation)^k,
    charges capex as a share of that value and reads debt service from the
    amortization schedule computed once up front.

    Args:
        inputs: Project snapshot.
        number_of_years: Horizon in years; use ``clamp_projection_years``
            for user-supplied values.

    Returns:
        ProjectionResult with yearly rows, exit scenarios and aggregates.

    Raises:
        ValueError: If ``number_of_years`` is less than 1.
    """
    if number_of_years < 1:
        raise ValueError(f"number_of_years must be at least 1, got {number_of_years}")

    settings = inputs.resolved_projection_settings()
    financing = inputs.financing

    purchase_price = financing.purchase_price.resolved
    appreciation_rate = financing.annual_appreciation_rate.resolved

    year1 = calculate_kpis(inputs)
    initial_investment = year1.initial_investment

    schedule: List[AmortizationYear] = generate_amortization_schedule(
        year1.loan_amount,
        financing.interest_rate.resolved,
        financing.amortization_years.resolved,
        financing.payment_frequency,
        number_of_years,
    )

    logger.debug(
        "Projecting %s over %d years (loan %.2f, initial investment %.2f)",
        inputs.name, number_of_years, year1.loan_amount, initial_investment,
    )

    def value_at(year: int) -> float:
        return round2(purchase_price * (1 + appreciation_rate / 100) ** year)

    cumulative_cashflow = 0.0
    cumulative_principal = 0.0
    cumulative_appreciation = 0.0
    cumulative_total_profit = 0.0
    cumulative_capex = 0.0
    cumulative_capex_by_year: List[float] = []

    years: List[YearProjection] = []

    for year in range(1, number_of_years + 1):
        revenue_factor = (1 + settings.revenue_escalation_rate / 100) ** (year - 1)

        property_value = value_at(year)
        revenue = round2(year1.annual_revenue * revenue_factor)
        expenses = calculate_expenses_for_year(
            inputs.expenses, year, revenue, property_value, settings.expense_escalation_rate
        )
        capex = round2(property_value * settings.capex_rate / 100)
        cumulative_capex += capex
        cumulative_capex_by_year.append(cumulative_capex)

        noi = round2(revenue - expenses)

        loan_year = schedule[year - 1]
        debt_service = loan_year.payment
        mortgage_balance = loan_year.balance

        cashflow = round2(noi - debt_service - capex)
        cumulative_cashflow += cashflow
        cumulative_principal += loan_year.principal

        year_appreciation = round2(property_value - (purchase_price if year == 1 else value_at(year - 1)))
        cumulative_appreciation += year_appreciation

        equity = round2(property_value - mortgage_balance)
        dscr = round2(noi / debt_service) if debt_service > 0 else DSCR_UNCONSTRAINED
        ltv = round2(safe_ratio(mortgage_balance, property_value, 100))

        total_profit = round2(cashflow + loan_year.principal + year_appreciation)
        cumulative_total_profit += total_profit

        years.append(YearProjection(
            year=year,
            revenue=revenue,
            expenses=expenses,
            capex=capex,
            noi=noi,
            debt_service=debt_service,
            interest_paid=loan_year.interest,
            principal_paid=loan_year.principal,
            mortgage_balance=mortgage_balance,
            cashflow=cashflow,
            cumulative_cashflow=round2(cumulative_cashflow),
            cumulative_principal_paid=round2(cumulative_principal),
            property_value=property_value,
            equity=equity,
            appreciation=year_appreciation,
            cumulative_appreciation=round2(cumulative_appreciation),
            dscr=dscr,
            ltv=ltv,
            total_profit=total_profit,
            cumulative_total_profit=round2(cumulative_total_profit),
            roi_cashflow=round2(safe_ratio(cumulative_cashflow, initial_investment, 100)),
            roi_total=round2(safe_ratio(cumulative_total_profit, initial_investment, 100)),
            roe=round2(safe_ratio(total_profit, equity, 100)),
            npv=round2(cashflow / (1 + settings.discount_rate / 100) ** year),
        ))

    exit_scenarios: List[ExitScenario] = []
    for exit_year in exit_years(number_of_years):
        projection = years[exit_year - 1]
        sale_price = round2(projection.property_value * (1 - settings.sale_costs_rate / 100))
        net_proceeds = round2(sale_price - projection.mortgage_balance)
        total_invested = round2(initial_investment + cumulative_capex_by_year[exit_year - 1])
        net_profit = round2(net_proceeds - total_invested + projection.cumulative_cashflow)

        exit_scenarios.append(ExitScenario(
            year=exit_year,
            property_value=projection.property_value,
            sale_price=sale_price,
            mortgage_balance=projection.mortgage_balance,
            net_proceeds=net_proceeds,
            total_invested=total_invested,
            net_profit=net_profit,
            moic=round2(safe_ratio(net_profit, total_invested)),
            irr=calculate_irr(_sale_cashflows(years, exit_year, initial_investment, net_proceeds)),
        ))

    # The horizon is always the last exit year
    global_irr = calculate_irr(
        _sale_cashflows(years, number_of_years, initial_investment, exit_scenarios[-1].net_proceeds)
    )

    payback_cashflow = next((y.year for y in years if y.cumulative_cashflow > 0), None)
    payback_total = next(
        (y.year for y in years if y.cumulative_total_profit > initial_investment), None
    )

    total_return = years[-1].cumulative_total_profit

    return ProjectionResult(
        years=years,
        exit_scenarios=exit_scenarios,
        irr=global_irr,
        payback_period_cashflow=payback_cashflow,
        payback_period_total=payback_total,
        total_return=total_return,
        average_annual_return=round2(total_return / number_of_years),
        average_roe=round2(sum(y.roe for y in years) / number_of_years),
        min_dscr=round2(min(y.dscr for y in years)),
        max_ltv=round2(max(y.ltv for y in years)),
        break_even_occupancy=calculate_break_even_occupancy(inputs, year1),
    )
