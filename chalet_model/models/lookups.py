"""Lookup tables, default assumptions and engine limits."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class TransferDutyTier:
    """One bracket of the progressive transfer-duty schedule."""

    upper_limit: float  # Upper bound of the bracket (inf for the last one)
    rate: float  # Marginal rate as a decimal


# Progressive welcome-tax schedule applied to max(price, municipal assessment)
TRANSFER_DUTY_TIERS = (
    TransferDutyTier(upper_limit=52_800, rate=0.005),
    TransferDutyTier(upper_limit=264_000, rate=0.010),
    TransferDutyTier(upper_limit=float("inf"), rate=0.015),
)


# Projection assumptions used when the inputs carry no settings (all in %)
DEFAULT_PROJECTION_SETTINGS: Dict[str, float] = {
    "revenue_escalation_rate": 2.0,
    "expense_escalation_rate": 2.5,
    "capex_rate": 1.0,
    "discount_rate": 8.0,
    "sale_costs_rate": 5.0,
}

DEFAULT_DAYS_PER_YEAR = 365

# Years at which exit scenarios are valued (the horizon is always added)
EXIT_SCENARIO_YEARS = (5, 10, 15, 20)

# Returned for DSCR when there is no debt service
DSCR_UNCONSTRAINED = 999.0


@dataclass(frozen=True)
class EngineLimits:
    """Bounds shared by the sweep, simulation and search engines."""

    min_projection_years: int = 1
    max_projection_years: int = 30
    default_projection_years: int = 10
    max_optimization_iterations: int = 50_000
    default_optimization_iterations: int = 10_000
    default_top_k_solutions: int = 10
    max_sensitivity_steps: int = 50
    default_sensitivity_steps_1d: int = 10
    default_sensitivity_steps_2d: int = 15
    max_sensitivity_2d_cells: int = 2_500  # 50 x 50, advisory only
    default_monte_carlo_iterations: int = 1_000


LIMITS = EngineLimits()
