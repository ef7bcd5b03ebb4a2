"""Calculation modules for the chalet investment model."""

from .amortization import (
    AmortizationYear,
    calculate_periodic_payment,
    generate_amortization_schedule,
    calculate_loan_balance,
)
from .expenses import (
    ExpenseBreakdown,
    annual_expense_amount,
    calculate_expenses,
    calculate_expenses_for_year,
)
from .irr import calculate_irr, npv
from .kpis import KPIMetric, KPIResults, calculate_kpis, calculate_transfer_duties
from .break_even import calculate_break_even_occupancy

# Multi-year forecast
from .projections import (
    YearProjection,
    ExitScenario,
    ProjectionResult,
    calculate_projections,
    clamp_projection_years,
    exit_years,
)

# Parameter sweeps
from .sensitivity import (
    InvalidRangeError,
    SensitivityCancelled,
    ParameterRange,
    SweepPoint,
    ParameterSweep,
    Impact,
    Sensitivity1DResult,
    Sensitivity2DResult,
    create_scenario_from_point,
    run_sensitivity_analysis_1d,
    run_sensitivity_analysis_2d,
)

# Monte Carlo simulation
from .monte_carlo import (
    DistributionType,
    SampledParameter,
    MonteCarloConfig,
    SampleStatistics,
    MonteCarloResult,
    run_monte_carlo,
)

# Grid-search optimizer
from .optimizer import (
    OptimizationObjective,
    ConstraintOperator,
    OptimizationVariable,
    OptimizationConstraint,
    OptimizationConfig,
    OptimizationSolution,
    OptimizationResult,
    create_scenario_from_solution,
    run_optimization,
)

# Calculation tracing
from .trace import TraceContext, TracedValue, trace
from .formula_registry import FormulaRegistry, FormulaDefinition, FormulaCategory

__all__ = [
    "AmortizationYear",
    "calculate_periodic_payment",
    "generate_amortization_schedule",
    "calculate_loan_balance",
    "ExpenseBreakdown",
    "annual_expense_amount",
    "calculate_expenses",
    "calculate_expenses_for_year",
    "calculate_irr",
    "npv",
    "KPIMetric",
    "KPIResults",
    "calculate_kpis",
    "calculate_transfer_duties",
    "calculate_break_even_occupancy",
    "YearProjection",
    "ExitScenario",
    "ProjectionResult",
    "calculate_projections",
    "clamp_projection_years",
    "exit_years",
    "InvalidRangeError",
    "SensitivityCancelled",
    "ParameterRange",
    "SweepPoint",
    "ParameterSweep",
    "Impact",
    "Sensitivity1DResult",
    "Sensitivity2DResult",
    "create_scenario_from_point",
    "run_sensitivity_analysis_1d",
    "run_sensitivity_analysis_2d",
    "DistributionType",
    "SampledParameter",
    "MonteCarloConfig",
    "SampleStatistics",
    "MonteCarloResult",
    "run_monte_carlo",
    "OptimizationObjective",
    "ConstraintOperator",
    "OptimizationVariable",
    "OptimizationConstraint",
    "OptimizationConfig",
    "OptimizationSolution",
    "OptimizationResult",
    "create_scenario_from_solution",
    "run_optimization",
    "TraceContext",
    "TracedValue",
    "trace",
    "FormulaRegistry",
    "FormulaDefinition",
    "FormulaCategory",
]
