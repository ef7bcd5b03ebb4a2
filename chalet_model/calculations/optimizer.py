"""Grid-search optimizer over decision variables.

Evaluates the KPIs on a regular grid spanning each unlocked variable,
marks each point feasible or not against the constraints and keeps the
best solutions.
"""

import itertools
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..models.inputs import ProjectInputs
from ..models.lookups import LIMITS
from ..models.parameters import ParameterKey, get_value, parse_parameter, set_value
from .kpis import KPIMetric, KPIResults, calculate_kpis

logger = logging.getLogger(__name__)

EQUALITY_TOLERANCE = 0.01


class OptimizationObjective(str, Enum):
    MAXIMIZE = "MAXIMIZE"
    MINIMIZE = "MINIMIZE"


class ConstraintOperator(str, Enum):
    GREATER_THAN = ">="
    LESS_THAN = "<="
    EQUAL = "=="


@dataclass
class OptimizationVariable:
    """A decision variable searched over [min_value, max_value].

    Attributes:
        parameter: Parameter key, or its dotted path
        label: Display label
        min_value: Lower bound
        max_value: Upper bound (always part of the grid)
        step: Grid spacing; None spreads the points evenly
        locked: Locked variables keep their base value
    """
    parameter: ParameterKey
    label: str
    min_value: float
    max_value: float
    step: Optional[float] = None
    locked: bool = False

    def __post_init__(self):
        if isinstance(self.parameter, str):
            self.parameter = parse_parameter(self.parameter)

    def grid(self, points_per_variable: int) -> List[float]:
        """Grid values from min to max, at most ``points_per_variable`` plus the max."""
        if self.max_value <= self.min_value:
            return [self.min_value]

        step = self.step or (self.max_value - self.min_value) / (points_per_variable - 1)
        n_points = min(int((self.max_value - self.min_value) // step) + 1, points_per_variable)
        points = [min(self.min_value + step * i, self.max_value) for i in range(n_points)]

        if points[-1] != self.max_value:
            points.append(self.max_value)
        return points


@dataclass(frozen=True)
class OptimizationConstraint:
    """Feasibility condition on one KPI, e.g. cash_on_cash >= 8."""
    metric: KPIMetric
    operator: ConstraintOperator
    value: float

    def is_satisfied(self, kpis: KPIResults) -> bool:
        actual = kpis.get(self.metric)
        operator = ConstraintOperator(self.operator)
        if operator == ConstraintOperator.GREATER_THAN:
            return actual >= self.value
        if operator == ConstraintOperator.LESS_THAN:
            return actual <= self.value
        return abs(actual - self.value) < EQUALITY_TOLERANCE


@dataclass
class OptimizationConfig:
    """Configuration for a grid search.

    Attributes:
        target_metric: KPI being optimized
        objective: Maximize or minimize the target metric
        variables: Decision variables
        constraints: Feasibility constraints (all must hold)
        max_iterations: Evaluation budget, capped at 50,000
        top_k: Number of solutions returned
    """
    target_metric: KPIMetric
    objective: OptimizationObjective = OptimizationObjective.MAXIMIZE
    variables: List[OptimizationVariable] = field(default_factory=list)
    constraints: List[OptimizationConstraint] = field(default_factory=list)
    max_iterations: int = LIMITS.default_optimization_iterations
    top_k: int = LIMITS.default_top_k_solutions


@dataclass
class OptimizationSolution:
    rank: int
    values: Dict[ParameterKey, float]
    kpis: KPIResults
    objective_value: float
    feasible: bool


@dataclass
class OptimizationResult:
    """Best solutions of a grid search, rank 1 first."""
    solutions: List[OptimizationSolution]
    iterations: int
    duration_seconds: float = 0.0

    @property
    def best(self) -> Optional[OptimizationSolution]:
        return self.solutions[0] if self.solutions else None

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for solution in self.solutions:
            row = {"rank": solution.rank, "objective_value": solution.objective_value,
                   "feasible": solution.feasible}
            row.update({key.path: value for key, value in solution.values.items()})
            rows.append(row)
        return pd.DataFrame(rows)


def check_constraints(kpis: KPIResults, constraints: Sequence[OptimizationConstraint]) -> bool:
    return all(c.is_satisfied(kpis) for c in constraints)


def points_per_variable(max_iterations: int, n_variables: int) -> int:
    """Points per axis so the full grid stays near the evaluation budget."""
    return max(2, int(max_iterations ** (1 / n_variables)))


def create_scenario_from_solution(
    base_inputs: ProjectInputs,
    solution: OptimizationSolution,
) -> ProjectInputs:
    """Apply a solution's variable values to the base inputs."""
    inputs = base_inputs
    for key, value in solution.values.items():
        inputs = set_value(inputs, key, value)
    return inputs


def run_optimization(base_inputs: ProjectInputs, config: OptimizationConfig) -> OptimizationResult:
    """Grid-search the unlocked variables for the best target metric.

    Solutions are ordered feasible first, then by objective value, ranked
    from 1 and truncated to ``top_k``. With no unlocked variables the base
    inputs are the only solution.

    Raises:
        ValueError: If ``max_iterations`` is not positive, or the metric,
            objective or an operator is unknown.
    """
    start = time.perf_counter()
    target_metric = KPIMetric(config.target_metric)
    objective = OptimizationObjective(config.objective)
    for constraint in config.constraints:
        ConstraintOperator(constraint.operator)
    if config.max_iterations < 1:
        raise ValueError(f"max_iterations must be at least 1, got {config.max_iterations}")

    max_iterations = min(config.max_iterations, LIMITS.max_optimization_iterations)
    active = [v for v in config.variables if not v.locked]

    if not active:
        kpis = calculate_kpis(base_inputs)
        solution = OptimizationSolution(
            rank=1,
            values={},
            kpis=kpis,
            objective_value=kpis.get(target_metric),
            feasible=check_constraints(kpis, config.constraints),
        )
        return OptimizationResult(
            solutions=[solution], iterations=1, duration_seconds=time.perf_counter() - start
        )

    n_points = points_per_variable(max_iterations, len(active))
    grids = [variable.grid(n_points) for variable in active]

    logger.debug(
        "Optimizing %s (%s): %d variables, grid %s, budget %d",
        target_metric.value, objective.value, len(active),
        "x".join(str(len(g)) for g in grids), max_iterations,
    )

    solutions: List[OptimizationSolution] = []
    for combination in itertools.islice(itertools.product(*grids), max_iterations):
        inputs = base_inputs
        values: Dict[ParameterKey, float] = {}
        for variable, value in zip(active, combination):
            inputs = set_value(inputs, variable.parameter, value)
            values[variable.parameter] = get_value(inputs, variable.parameter)

        kpis = calculate_kpis(inputs)
        solutions.append(OptimizationSolution(
            rank=0,
            values=values,
            kpis=kpis,
            objective_value=kpis.get(target_metric),
            feasible=check_constraints(kpis, config.constraints),
        ))

    sign = -1 if objective == OptimizationObjective.MAXIMIZE else 1
    solutions.sort(key=lambda s: (not s.feasible, sign * s.objective_value))
    for rank, solution in enumerate(solutions, start=1):
        solution.rank = rank

    return OptimizationResult(
        solutions=solutions[:config.top_k],
        iterations=len(solutions),
        duration_seconds=time.perf_counter() - start,
    )
