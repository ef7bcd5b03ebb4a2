"""Monte Carlo simulation over the ranged inputs of a project.

Every input whose range is enabled is sampled independently on each
iteration and the chosen KPI is recorded, giving a distribution instead of
a single point estimate.

Typical usage:
    from chalet_model.calculations.monte_carlo import MonteCarloConfig, run_monte_carlo
    from chalet_model.calculations.kpis import KPIMetric

    config = MonteCarloConfig(objective=KPIMetric.ANNUAL_CASHFLOW, n_iterations=2000, seed=42)
    result = run_monte_carlo(inputs, config)
    print(result.summary())
"""

import concurrent.futures
import logging
import math
import multiprocessing
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

import numpy as np

from ..models.inputs import ProjectInputs
from ..models.lookups import LIMITS
from ..models.parameters import ParameterKey, iter_ranged_parameters, parameter_label, set_value
from .kpis import KPIMetric, calculate_kpis

logger = logging.getLogger(__name__)


class DistributionType(str, Enum):
    """Supported sampling distributions over an input's [min, max] range."""
    NORMAL = "normal"          # Mean at the range default, sigma = (max - min) / 6, truncated
    UNIFORM = "uniform"        # Equal probability between min and max
    TRIANGULAR = "triangular"  # Mode at the range default


@dataclass(frozen=True)
class SampledParameter:
    """A ranged input taking part in the simulation.

    Attributes:
        parameter: Parameter key
        label: Display label
        min_value: Lower bound of the range
        max_value: Upper bound of the range
        default: Central value (mean or mode)
        distribution: How values are drawn
    """
    parameter: ParameterKey
    label: str
    min_value: float
    max_value: float
    default: float
    distribution: DistributionType = DistributionType.NORMAL

    def sample(self, rng: np.random.Generator) -> float:
        """Draw one value inside [min_value, max_value]."""
        if self.max_value <= self.min_value:
            return self.min_value

        if self.distribution == DistributionType.NORMAL:
            std = (self.max_value - self.min_value) / 6
            value = rng.normal(self.default, std)
        elif self.distribution == DistributionType.UNIFORM:
            value = rng.uniform(self.min_value, self.max_value)
        elif self.distribution == DistributionType.TRIANGULAR:
            mode = min(max(self.default, self.min_value), self.max_value)
            value = rng.triangular(self.min_value, mode, self.max_value)
        else:
            raise ValueError(f"Unknown distribution: {self.distribution}")

        # Truncate rather than redraw
        return float(np.clip(value, self.min_value, self.max_value))


@dataclass
class MonteCarloConfig:
    """Configuration for a Monte Carlo run.

    Attributes:
        objective: KPI recorded on each iteration
        n_iterations: Number of iterations
        seed: Random seed for reproducibility
        distribution: Distribution used for every ranged input
        parallel: Whether to run iterations on a thread pool
        max_workers: Max parallel workers (None = CPU count, at most 8)
    """
    objective: KPIMetric = KPIMetric.ANNUAL_CASHFLOW
    n_iterations: int = LIMITS.default_monte_carlo_iterations
    seed: Optional[int] = None
    distribution: DistributionType = DistributionType.NORMAL
    parallel: bool = False
    max_workers: Optional[int] = None


@dataclass(frozen=True)
class SampleStatistics:
    mean: float
    median: float
    std: float  # Population standard deviation
    p10: float
    p90: float
    min: float
    max: float


@dataclass
class MonteCarloResult:
    """Samples and summary statistics of one simulation."""
    objective: KPIMetric
    samples: List[float]
    statistics: SampleStatistics
    parameters: List[SampledParameter] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def n_iterations(self) -> int:
        return len(self.samples)

    def get_distribution(self) -> np.ndarray:
        return np.array(self.samples)

    def probability_above(self, threshold: float) -> float:
        """Share of samples strictly above ``threshold``."""
        return float(np.mean(self.get_distribution() > threshold))

    def summary(self) -> str:
        """Return a formatted summary of results."""
        stats = self.statistics
        lines = [
            "=" * 60,
            "MONTE CARLO SIMULATION RESULTS",
            "=" * 60,
            f"Objective:  {self.objective.value}",
            f"Iterations: {self.n_iterations:,}",
            f"Duration:   {self.duration_seconds:.2f}s",
            "",
            f"  Mean:   {stats.mean:>14,.2f}",
            f"  Median: {stats.median:>14,.2f}",
            f"  Std:    {stats.std:>14,.2f}",
            f"  P10:    {stats.p10:>14,.2f}",
            f"  P90:    {stats.p90:>14,.2f}",
            f"  Min:    {stats.min:>14,.2f}",
            f"  Max:    {stats.max:>14,.2f}",
            "",
            "SAMPLED PARAMETERS",
            "-" * 40,
        ]
        for p in self.parameters:
            lines.append(f"  {p.label:<28} [{p.min_value:,.2f} .. {p.max_value:,.2f}]")
        if not self.parameters:
            lines.append("  (none, every sample equals the base value)")
        lines.append("=" * 60)
        return "\n".join(lines)


def collect_sampled_parameters(
    inputs: ProjectInputs,
    distribution: DistributionType = DistributionType.NORMAL,
) -> List[SampledParameter]:
    """Every input with an enabled range, in declaration order."""
    return [
        SampledParameter(
            parameter=key,
            label=parameter_label(key, inputs),
            min_value=ranged.min_value,
            max_value=ranged.max_value,
            default=ranged.default,
            distribution=distribution,
        )
        for key, ranged in iter_ranged_parameters(inputs)
    ]


def calculate_statistics(samples: List[float]) -> SampleStatistics:
    """Mean, median, population std and nearest-rank P10/P90."""
    values = np.sort(np.asarray(samples, dtype=float))
    n = len(values)
    return SampleStatistics(
        mean=float(np.mean(values)),
        median=float(np.median(values)),
        std=float(np.std(values)),
        p10=float(values[math.floor(n * 0.1)]),
        p90=float(values[math.floor(n * 0.9)]),
        min=float(values[0]),
        max=float(values[-1]),
    )


def _run_single_iteration(
    base_inputs: ProjectInputs,
    parameters: List[SampledParameter],
    objective: KPIMetric,
    seed: int,
) -> float:
    rng = np.random.default_rng(seed)

    inputs = base_inputs
    for param in parameters:
        inputs = set_value(inputs, param.parameter, param.sample(rng))

    return calculate_kpis(inputs).get(objective)


def run_monte_carlo(
    base_inputs: ProjectInputs,
    config: Optional[MonteCarloConfig] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> MonteCarloResult:
    """Run a Monte Carlo simulation.

    Args:
        base_inputs: Project snapshot; its enabled ranges define what is sampled.
        config: Simulation configuration (defaults to MonteCarloConfig()).
        progress_callback: Optional callback(completed, total) for progress updates

    Returns:
        MonteCarloResult with samples in iteration order.

    Raises:
        ValueError: If ``n_iterations`` is not positive or the objective is unknown.
    """
    config = config or MonteCarloConfig()
    objective = KPIMetric(config.objective)
    if config.n_iterations < 1:
        raise ValueError(f"n_iterations must be at least 1, got {config.n_iterations}")

    start = time.perf_counter()
    parameters = collect_sampled_parameters(base_inputs, config.distribution)

    logger.debug(
        "Monte Carlo on %s: %d iterations over %d ranged parameters",
        objective.value, config.n_iterations, len(parameters),
    )

    # One seed per iteration keeps results independent of execution order
    master_rng = np.random.default_rng(config.seed)
    iteration_seeds = master_rng.integers(0, 2**31, size=config.n_iterations)

    samples: List[Optional[float]] = [None] * config.n_iterations

    if config.parallel and config.n_iterations > 10:
        max_workers = config.max_workers or min(multiprocessing.cpu_count(), 8)

        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(
                    _run_single_iteration,
                    base_inputs,
                    parameters,
                    objective,
                    int(iteration_seeds[i]),
                ): i
                for i in range(config.n_iterations)
            }

            for completed, future in enumerate(concurrent.futures.as_completed(futures), start=1):
                samples[futures[future]] = future.result()
                if progress_callback:
                    progress_callback(completed, config.n_iterations)
    else:
        for i in range(config.n_iterations):
            samples[i] = _run_single_iteration(
                base_inputs, parameters, objective, int(iteration_seeds[i])
            )
            if progress_callback:
                progress_callback(i + 1, config.n_iterations)

    return MonteCarloResult(
        objective=objective,
        samples=samples,
        statistics=calculate_statistics(samples),
        parameters=parameters,
        duration_seconds=time.perf_counter() - start,
    )
