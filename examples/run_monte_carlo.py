#!/usr/bin/env python3
"""Example Monte Carlo simulation over the ranged inputs of the sample chalet.

Usage:
    python examples/run_monte_carlo.py

ADR, occupancy and management fees carry ranges; each iteration samples
them and records the first-year cashflow and total ROI.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chalet_model.calculations.kpis import KPIMetric
from chalet_model.calculations.monte_carlo import (
    DistributionType,
    MonteCarloConfig,
    run_monte_carlo,
)
from run_example import get_example_inputs


def main():
    print("=" * 70)
    print("CHALET MODEL - MONTE CARLO SIMULATION")
    print("=" * 70)
    print()

    inputs = get_example_inputs()

    def progress(completed, total):
        if completed % 250 == 0 or completed == total:
            pct = completed / total * 100
            print(f"  Progress: {completed:,}/{total:,} ({pct:.0f}%)", end="\r")

    for objective in (KPIMetric.ANNUAL_CASHFLOW, KPIMetric.TOTAL_ROI):
        config = MonteCarloConfig(
            objective=objective,
            n_iterations=2_000,
            seed=42,  # For reproducibility
            distribution=DistributionType.TRIANGULAR,
            parallel=True,
        )

        print(f"Running {config.n_iterations:,} iterations on {objective.value}...")
        result = run_monte_carlo(inputs, config, progress_callback=progress)
        print()
        print(result.summary())

        threshold = 0.0 if objective == KPIMetric.ANNUAL_CASHFLOW else 8.0
        print(f"P({objective.value} > {threshold:g}): {result.probability_above(threshold):.1%}")
        print()


if __name__ == "__main__":
    main()
