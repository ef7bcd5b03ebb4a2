#!/usr/bin/env python3
"""Example script: KPIs and a multi-year projection for a sample chalet."""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from chalet_model.models import (
    AcquisitionFees,
    ExpenseCategory,
    ExpenseLine,
    ExpenseType,
    FinancingInputs,
    PaymentFrequency,
    ProjectInputs,
    ProjectionSettings,
    RangedScalar,
    RevenueInputs,
)
from chalet_model.calculations.kpis import calculate_kpis
from chalet_model.calculations.projections import calculate_projections, clamp_projection_years
from chalet_model.calculations.trace import TraceContext
from chalet_model.models.lookups import LIMITS


def get_example_inputs() -> ProjectInputs:
    """A short-term rental chalet with ranged ADR, occupancy and management fees."""
    return ProjectInputs(
        name="Lakeside chalet",
        financing=FinancingInputs(
            purchase_price=525_000,
            down_payment=105_000,
            interest_rate=5.25,
            amortization_years=25,
            payment_frequency=PaymentFrequency.MONTHLY,
            annual_appreciation_rate=3,
            municipal_assessment=480_000,
        ),
        revenue=RevenueInputs(
            average_daily_rate=RangedScalar(value=310, min_value=260, max_value=360, default=310),
            occupancy_rate=RangedScalar(value=58, min_value=45, max_value=70, default=58),
        ),
        expenses=[
            ExpenseLine("Property taxes", ExpenseType.FIXED_ANNUAL, 5_600, ExpenseCategory.TAXES),
            ExpenseLine("Insurance", ExpenseType.FIXED_ANNUAL, 2_900, ExpenseCategory.INSURANCE),
            ExpenseLine("Electricity and heating", ExpenseType.FIXED_MONTHLY, 325, ExpenseCategory.UTILITIES),
            ExpenseLine("Internet and streaming", ExpenseType.FIXED_MONTHLY, 110, ExpenseCategory.UTILITIES),
            ExpenseLine(
                "Management and platform fees",
                ExpenseType.PERCENTAGE_REVENUE,
                RangedScalar(value=18, min_value=15, max_value=22, default=18),
                ExpenseCategory.MANAGEMENT,
            ),
            ExpenseLine("Cleaning", ExpenseType.FIXED_MONTHLY, 150, ExpenseCategory.SERVICES),
            ExpenseLine("Maintenance", ExpenseType.PERCENTAGE_PROPERTY_VALUE, 1, ExpenseCategory.MAINTENANCE),
        ],
        acquisition_fees=AcquisitionFees(notary_fees=1_900, other=1_500),
        projection_settings=ProjectionSettings(
            revenue_escalation_rate=2,
            expense_escalation_rate=2.5,
            capex_rate=1,
            discount_rate=8,
            sale_costs_rate=5,
        ),
    )


def print_kpis(inputs: ProjectInputs, show_trace: bool = False):
    print("\n" + "=" * 60)
    print(f"FIRST-YEAR KPIS: {inputs.name}")
    print("=" * 60)

    with TraceContext(enabled=show_trace) as ctx:
        kpis = calculate_kpis(inputs)

    print(f"\n{'Nights sold':<28} {kpis.nights_sold:>14,.2f}")
    print(f"{'Gross revenue':<28} ${kpis.annual_revenue:>13,.2f}")
    print(f"{'Operating expenses':<28} ${kpis.total_expenses:>13,.2f}")
    for category, amount in kpis.expenses_by_category.items():
        print(f"  {category:<26} ${amount:>13,.2f}")
    print(f"{'NOI':<28} ${kpis.noi:>13,.2f}")
    print(f"{'Annual debt service':<28} ${kpis.annual_debt_service:>13,.2f}")
    print(f"{'Cashflow':<28} ${kpis.annual_cashflow:>13,.2f}")
    print(f"{'Initial investment':<28} ${kpis.initial_investment:>13,.2f}")
    print(f"{'Cash-on-cash':<28} {kpis.cash_on_cash:>13.2f}%")
    print(f"{'Cap rate':<28} {kpis.cap_rate:>13.2f}%")
    print(f"{'Total ROI':<28} {kpis.total_roi:>13.2f}%")

    if show_trace:
        print("\n" + ctx.summary())


def print_projection(inputs: ProjectInputs, years: int):
    years = clamp_projection_years(years)
    result = calculate_projections(inputs, years)

    print("\n" + "=" * 60)
    print(f"{years}-YEAR PROJECTION")
    print("=" * 60 + "\n")

    df = result.to_dataframe()[
        ["revenue", "expenses", "noi", "debt_service", "cashflow", "mortgage_balance", "property_value", "dscr"]
    ]
    print(df.to_string(float_format=lambda v: f"{v:,.0f}"))

    print(f"\n{'Exit':<6} {'Sale price':>14} {'Net proceeds':>14} {'Net profit':>14} {'MOIC':>7} {'IRR':>8}")
    print("-" * 67)
    for scenario in result.exit_scenarios:
        print(
            f"{scenario.year:<6} ${scenario.sale_price:>13,.0f} ${scenario.net_proceeds:>13,.0f} "
            f"${scenario.net_profit:>13,.0f} {scenario.moic:>6.2f}x {scenario.irr:>7.2f}%"
        )

    print(f"\nIRR:                   {result.irr:.2f}%")
    print(f"Break-even occupancy:  {result.break_even_occupancy:.2f}%")
    print(f"Cashflow payback:      {result.payback_period_cashflow or 'not reached'}")
    print(f"Total payback:         {result.payback_period_total or 'not reached'}")
    print(f"Minimum DSCR:          {result.min_dscr:.2f}")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Chalet investment model")
    parser.add_argument("--years", type=int, default=LIMITS.default_projection_years, help="Projection horizon (1-30)")
    parser.add_argument("--trace", action="store_true", help="Print the KPI calculation trace")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    inputs = get_example_inputs()
    print_kpis(inputs, show_trace=args.trace)
    print_projection(inputs, args.years)

    print("\nDone.")


if __name__ == "__main__":
    main()
