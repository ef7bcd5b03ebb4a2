#!/usr/bin/env python3
"""Tornado and heatmap sensitivity analysis for the sample chalet.

Usage:
    python examples/run_sensitivity.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chalet_model.calculations.kpis import KPIMetric
from chalet_model.calculations.sensitivity import (
    ParameterRange,
    run_sensitivity_analysis_1d,
    run_sensitivity_analysis_2d,
)
from chalet_model.models import ExpenseAmount, InputField
from run_example import get_example_inputs


def main():
    inputs = get_example_inputs()

    print("=" * 70)
    print("TORNADO: first-year cashflow")
    print("=" * 70)

    ranges = [
        ParameterRange(InputField.AVERAGE_DAILY_RATE, "ADR", min=260, base=310, max=360),
        ParameterRange(InputField.OCCUPANCY_RATE, "Occupancy", min=40, base=58, max=75),
        ParameterRange(InputField.INTEREST_RATE, "Interest rate", min=4, base=5.25, max=6.5),
        ParameterRange(InputField.PURCHASE_PRICE, "Purchase price", min=475_000, base=525_000, max=575_000),
        ParameterRange(ExpenseAmount(4), "Management fees", min=15, base=18, max=22),
    ]
    tornado = run_sensitivity_analysis_1d(inputs, ranges, KPIMetric.ANNUAL_CASHFLOW)

    print(f"\nBase cashflow: ${tornado.base_value:,.2f}\n")
    print(f"{'Parameter':<18} {'At min':>12} {'At max':>12} {'Swing':>12} {'Zero at':>10}")
    print("-" * 68)
    for impact in tornado.impacts:
        zero = f"{impact.critical_point:,.2f}" if impact.critical_point is not None else "-"
        print(
            f"{impact.label:<18} {impact.impact_low:>+12,.0f} {impact.impact_high:>+12,.0f} "
            f"{impact.relative_impact:>12,.0f} {zero:>10}"
        )

    print("\n" + "=" * 70)
    print("HEATMAP: cash-on-cash (%) by ADR and occupancy")
    print("=" * 70 + "\n")

    heatmap = run_sensitivity_analysis_2d(
        inputs,
        ParameterRange(InputField.AVERAGE_DAILY_RATE, "ADR", min=250, base=310, max=370, steps=6),
        ParameterRange(InputField.OCCUPANCY_RATE, "Occupancy", min=40, base=58, max=75, steps=7),
        KPIMetric.CASH_ON_CASH,
        parallel=True,
    )
    print(heatmap.to_dataframe().to_string(float_format=lambda v: f"{v:6.1f}"))


if __name__ == "__main__":
    main()
