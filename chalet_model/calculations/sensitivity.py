"""One- and two-parameter sensitivity sweeps.

Typical usage:
    from chalet_model.calculations.sensitivity import ParameterRange, run_sensitivity_analysis_1d
    from chalet_model.calculations.kpis import KPIMetric
    from chalet_model.models import InputField

    result = run_sensitivity_analysis_1d(
        inputs,
        [
            ParameterRange(InputField.AVERAGE_DAILY_RATE, "ADR", min=150, base=200, max=250),
            ParameterRange(InputField.OCCUPANCY_RATE, "Occupancy", min=40, base=60, max=80),
        ],
        KPIMetric.ANNUAL_CASHFLOW,
    )
    for impact in result.impacts:
        print(impact.label, impact.relative_impact)

Every evaluation overrides leaves of an immutable snapshot and calls the
KPI evaluator; sweep points are independent of each other.
"""

import concurrent.futures
import logging
import multiprocessing
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..models.inputs import ProjectInputs
from ..models.lookups import LIMITS
from ..models.parameters import ParameterKey, applied_value, get_value, parse_parameter, set_value
from .kpis import KPIMetric, calculate_kpis

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class InvalidRangeError(ValueError):
    """A sweep range is empty or inverted."""


class SensitivityCancelled(RuntimeError):
    """A sweep was cancelled between evaluations."""


@dataclass
class ParameterRange:
    """Range over which one parameter is swept.

    Attributes:
        parameter: Parameter key, or its dotted path (e.g. "expenses[2].amount")
        label: Display label
        min: First swept value
        base: Reference value of the parameter (informational)
        max: Last swept value
        steps: Number of intervals; the sweep has steps + 1 points.
            None picks the engine default (10 in 1D, 15 in 2D).
    """
    parameter: ParameterKey
    label: str
    min: float
    base: float
    max: float
    steps: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.parameter, str):
            self.parameter = parse_parameter(self.parameter)

    def validate(self) -> None:
        """Raise InvalidRangeError unless steps >= 1 and min <= max."""
        if self.steps is not None and self.steps < 1:
            raise InvalidRangeError(f"{self.label}: steps must be at least 1, got {self.steps}")
        if self.min > self.max:
            raise InvalidRangeError(f"{self.label}: min {self.min} is greater than max {self.max}")

    def values(self, steps: int) -> List[float]:
        """Evenly spaced values from min to max inclusive."""
        return [float(v) for v in np.linspace(self.min, self.max, steps + 1)]


@dataclass(frozen=True)
class SweepPoint:
    param_value: float
    objective_value: float


@dataclass
class ParameterSweep:
    """Objective curve for one swept parameter."""
    parameter: ParameterKey
    label: str
    values: List[SweepPoint] = field(default_factory=list)


@dataclass(frozen=True)
class Impact:
    """Objective swing when one parameter moves to its range ends."""
    parameter: ParameterKey
    label: str
    value_low: float  # Objective at the parameter's min
    value_high: float  # Objective at the parameter's max
    impact_low: float  # value_low - base objective
    impact_high: float  # value_high - base objective
    relative_impact: float  # max(|impact_low|, |impact_high|)
    critical_point: Optional[float] = None  # Parameter value where the objective crosses zero


@dataclass
class Sensitivity1DResult:
    """Tornado data: impacts sorted most sensitive first, plus every curve."""
    objective: KPIMetric
    base_value: float
    impacts: List[Impact] = field(default_factory=list)
    detailed_results: List[ParameterSweep] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per parameter, in impact order."""
        return pd.DataFrame([
            {
                "parameter": impact.parameter.path,
                "label": impact.label,
                "value_low": impact.value_low,
                "value_high": impact.value_high,
                "impact_low": impact.impact_low,
                "impact_high": impact.impact_high,
                "relative_impact": impact.relative_impact,
                "critical_point": impact.critical_point,
            }
            for impact in self.impacts
        ])

    def curves_dataframe(self) -> pd.DataFrame:
        """Long-format curves: one row per (parameter, swept value)."""
        return pd.DataFrame([
            {
                "parameter": sweep.parameter.path,
                "label": sweep.label,
                "param_value": point.param_value,
                "objective_value": point.objective_value,
            }
            for sweep in self.detailed_results
            for point in sweep.values
        ])


@dataclass
class Sensitivity2DResult:
    """Heatmap data: grid[row][col] pairs y_values[row] with x_values[col]."""
    objective: KPIMetric
    parameter_x: ParameterKey
    parameter_y: ParameterKey
    x_values: List[float]
    y_values: List[float]
    grid: List[List[float]]

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.y_values), len(self.x_values)

    def to_dataframe(self) -> pd.DataFrame:
        """Grid as a DataFrame indexed by y values with x values as columns."""
        return pd.DataFrame(
            self.grid,
            index=pd.Index(self.y_values, name=self.parameter_y.path),
            columns=pd.Index(self.x_values, name=self.parameter_x.path),
        )


def create_scenario_from_point(
    base_inputs: ProjectInputs,
    overrides: Iterable[Tuple[Union[ParameterKey, str], float]],
) -> ProjectInputs:
    """Apply several parameter overrides in order and return the new inputs."""
    inputs = base_inputs
    for key, value in overrides:
        if isinstance(key, str):
            key = parse_parameter(key)
        inputs = set_value(inputs, key, value)
    return inputs


def evaluate_objective(inputs: ProjectInputs, objective: KPIMetric) -> float:
    return calculate_kpis(inputs).get(objective)


def find_critical_point(points: Sequence[SweepPoint]) -> Optional[float]:
    """First parameter value where the curve reaches zero, by linear interpolation."""
    for point in points:
        if point.objective_value == 0:
            return point.param_value

    for left, right in zip(points, points[1:]):
        if (left.objective_value < 0) != (right.objective_value < 0):
            span = right.objective_value - left.objective_value
            fraction = -left.objective_value / span
            return left.param_value + fraction * (right.param_value - left.param_value)
    return None


def run_sensitivity_analysis_1d(
    base_inputs: ProjectInputs,
    parameters: Sequence[ParameterRange],
    objective: KPIMetric,
) -> Sensitivity1DResult:
    """Sweep each parameter independently and rank them by objective swing.

    Args:
        base_inputs: Unmodified project snapshot.
        parameters: Ranges to sweep, one at a time.
        objective: KPI to observe.

    Returns:
        Sensitivity1DResult with impacts sorted by relative_impact, descending.

    Raises:
        InvalidRangeError: If any range is invalid; nothing is evaluated.
    """
    objective = KPIMetric(objective)
    for param in parameters:
        param.validate()

    base_value = evaluate_objective(base_inputs, objective)
    impacts: List[Impact] = []
    detailed_results: List[ParameterSweep] = []

    for param in parameters:
        steps = param.steps or LIMITS.default_sensitivity_steps_1d

        sweep = ParameterSweep(parameter=param.parameter, label=param.label)
        for value in param.values(steps):
            inputs = set_value(base_inputs, param.parameter, value)
            sweep.values.append(SweepPoint(
                get_value(inputs, param.parameter), evaluate_objective(inputs, objective)
            ))
        detailed_results.append(sweep)

        value_low = evaluate_objective(set_value(base_inputs, param.parameter, param.min), objective)
        value_high = evaluate_objective(set_value(base_inputs, param.parameter, param.max), objective)
        impact_low = value_low - base_value
        impact_high = value_high - base_value

        impacts.append(Impact(
            parameter=param.parameter,
            label=param.label,
            value_low=value_low,
            value_high=value_high,
            impact_low=impact_low,
            impact_high=impact_high,
            relative_impact=max(abs(impact_low), abs(impact_high)),
            critical_point=find_critical_point(sweep.values),
        ))

    impacts.sort(key=lambda i: i.relative_impact, reverse=True)

    logger.debug(
        "1D sensitivity on %s: %d parameters, base value %.2f",
        objective.value, len(parameters), base_value,
    )

    return Sensitivity1DResult(
        objective=objective,
        base_value=base_value,
        impacts=impacts,
        detailed_results=detailed_results,
    )


def _axis_steps(param: ParameterRange) -> int:
    steps = param.steps or LIMITS.default_sensitivity_steps_2d
    if steps > LIMITS.max_sensitivity_steps:
        logger.debug(
            "%s: %d steps capped at %d", param.label, steps, LIMITS.max_sensitivity_steps
        )
        steps = LIMITS.max_sensitivity_steps
    return steps


def run_sensitivity_analysis_2d(
    base_inputs: ProjectInputs,
    parameter_x: ParameterRange,
    parameter_y: ParameterRange,
    objective: KPIMetric,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> Sensitivity2DResult:
    """Evaluate the objective over the grid of two swept parameters.

    Every cell applies both overrides to the same base inputs. Each axis is
    capped at 50 steps. Grids above 2,500 cells are logged as a warning but
    computed in full.

    Args:
        base_inputs: Unmodified project snapshot.
        parameter_x: Range along the columns.
        parameter_y: Range along the rows.
        objective: KPI to observe.
        parallel: Evaluate rows on a thread pool.
        max_workers: Max parallel workers (None = CPU count, at most 8).
        progress_callback: Optional callback(completed_cells, total_cells).
        should_cancel: Polled before each cell; returning True aborts the sweep.

    Returns:
        Sensitivity2DResult with grid[row][col].

    Raises:
        InvalidRangeError: If either range is invalid.
        SensitivityCancelled: If ``should_cancel`` returned True.
    """
    objective = KPIMetric(objective)
    parameter_x.validate()
    parameter_y.validate()

    x_values = [
        applied_value(base_inputs, parameter_x.parameter, v)
        for v in parameter_x.values(_axis_steps(parameter_x))
    ]
    y_values = [
        applied_value(base_inputs, parameter_y.parameter, v)
        for v in parameter_y.values(_axis_steps(parameter_y))
    ]
    n_cols = len(x_values)
    total = n_cols * len(y_values)

    if total > LIMITS.max_sensitivity_2d_cells:
        logger.warning(
            "2D sensitivity grid has %d cells (advisory limit %d); computing all of them",
            total, LIMITS.max_sensitivity_2d_cells,
        )

    def check_cancelled() -> None:
        if should_cancel is not None and should_cancel():
            raise SensitivityCancelled("2D sensitivity analysis cancelled")

    def evaluate_cell(x: float, y: float) -> float:
        inputs = set_value(base_inputs, parameter_x.parameter, x)
        inputs = set_value(inputs, parameter_y.parameter, y)
        return evaluate_objective(inputs, objective)

    def evaluate_row(row: int) -> List[float]:
        values = []
        for x in x_values:
            check_cancelled()
            values.append(evaluate_cell(x, y_values[row]))
        return values

    grid: List[Optional[List[float]]] = [None] * len(y_values)

    if parallel and len(y_values) > 1:
        max_workers = max_workers or min(multiprocessing.cpu_count(), 8)
        completed = 0

        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(evaluate_row, row): row for row in range(len(y_values))}
            try:
                for future in concurrent.futures.as_completed(futures):
                    grid[futures[future]] = future.result()
                    completed += n_cols
                    if progress_callback:
                        progress_callback(completed, total)
            except SensitivityCancelled:
                for future in futures:
                    future.cancel()
                raise
    else:
        completed = 0
        for row, y in enumerate(y_values):
            values = []
            for x in x_values:
                check_cancelled()
                values.append(evaluate_cell(x, y))
                completed += 1
                if progress_callback:
                    progress_callback(completed, total)
            grid[row] = values

    logger.debug(
        "2D sensitivity on %s: %d x %d grid", objective.value, len(y_values), n_cols
    )

    return Sensitivity2DResult(
        objective=objective,
        parameter_x=parameter_x.parameter,
        parameter_y=parameter_y.parameter,
        x_values=x_values,
        y_values=y_values,
        grid=grid,
    )
