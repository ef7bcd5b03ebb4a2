#!/usr/bin/env python3
"""Search price and down payment for the best total ROI under cashflow constraints.

Usage:
    python examples/run_optimizer.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chalet_model.calculations.kpis import KPIMetric, calculate_kpis
from chalet_model.calculations.optimizer import (
    ConstraintOperator,
    OptimizationConfig,
    OptimizationConstraint,
    OptimizationVariable,
    run_optimization,
)
from chalet_model.models import InputField
from run_example import get_example_inputs


def main():
    inputs = get_example_inputs()

    config = OptimizationConfig(
        target_metric=KPIMetric.TOTAL_ROI,
        variables=[
            OptimizationVariable(InputField.PURCHASE_PRICE, "Purchase price", 450_000, 600_000, step=10_000),
            OptimizationVariable(InputField.DOWN_PAYMENT, "Down payment", 60_000, 200_000, step=10_000),
            OptimizationVariable(InputField.AVERAGE_DAILY_RATE, "ADR", 280, 340, step=10),
        ],
        constraints=[
            OptimizationConstraint(KPIMetric.ANNUAL_CASHFLOW, ConstraintOperator.GREATER_THAN, 0),
            OptimizationConstraint(KPIMetric.CASH_ON_CASH, ConstraintOperator.GREATER_THAN, 4),
        ],
        max_iterations=5_000,
        top_k=10,
    )

    print("=" * 70)
    print("CHALET MODEL - GRID SEARCH")
    print("=" * 70)
    print(f"\nBase total ROI: {calculate_kpis(inputs).total_roi:.2f}%")

    result = run_optimization(inputs, config)

    print(f"Evaluated {result.iterations:,} combinations in {result.duration_seconds:.2f}s\n")
    print(result.to_dataframe().to_string(index=False))

    best = result.best
    if best is not None and best.feasible:
        print(
            f"\nBest: total ROI {best.objective_value:.2f}%, "
            f"cashflow ${best.kpis.annual_cashflow:,.0f}, cash-on-cash {best.kpis.cash_on_cash:.2f}%"
        )
    else:
        print("\nNo combination satisfies the constraints.")


if __name__ == "__main__":
    main()
