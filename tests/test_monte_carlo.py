"""Tests for Monte Carlo simulation engine."""

import pytest
import numpy as np

from chalet_model.calculations.kpis import KPIMetric, calculate_kpis
from chalet_model.calculations.monte_carlo import (
    DistributionType,
    MonteCarloConfig,
    SampledParameter,
    calculate_statistics,
    collect_sampled_parameters,
    run_monte_carlo,
)
from chalet_model.models import ExpenseAmount, InputField


class TestSampledParameter:
    """Test SampledParameter sampling."""

    @pytest.mark.parametrize("distribution", list(DistributionType))
    def test_samples_stay_in_range(self, distribution):
        param = SampledParameter(InputField.OCCUPANCY_RATE, "Occupancy", 50.0, 72.0, 62.0, distribution)
        rng = np.random.default_rng(42)

        samples = [param.sample(rng) for _ in range(2000)]

        assert min(samples) >= 50.0
        assert max(samples) <= 72.0

    def test_normal_centers_on_default(self):
        param = SampledParameter(InputField.AVERAGE_DAILY_RATE, "ADR", 150.0, 250.0, 200.0)
        rng = np.random.default_rng(42)

        samples = [param.sample(rng) for _ in range(10000)]

        # sigma = 100 / 6, truncation at 3 sigma barely matters
        assert 198.0 < np.mean(samples) < 202.0
        assert 15.5 < np.std(samples) < 17.5

    def test_uniform_mean(self):
        param = SampledParameter(InputField.AVERAGE_DAILY_RATE, "ADR", 10.0, 20.0, 12.0, DistributionType.UNIFORM)
        rng = np.random.default_rng(42)

        samples = [param.sample(rng) for _ in range(2000)]

        assert 14.5 < np.mean(samples) < 15.5

    def test_empty_range_returns_min(self):
        param = SampledParameter(InputField.AVERAGE_DAILY_RATE, "ADR", 200.0, 200.0, 200.0)

        assert param.sample(np.random.default_rng(0)) == 200.0


class TestCollectSampledParameters:
    def test_only_enabled_ranges(self, detailed_inputs):
        params = collect_sampled_parameters(detailed_inputs)

        assert [p.parameter for p in params] == [
            InputField.AVERAGE_DAILY_RATE,
            InputField.OCCUPANCY_RATE,
            ExpenseAmount(3),
        ]
        assert params[2].label == "Platform and management"
        assert (params[1].min_value, params[1].max_value, params[1].default) == (50, 72, 62)

    def test_no_ranges(self, reference_inputs):
        assert collect_sampled_parameters(reference_inputs) == []


class TestCalculateStatistics:
    def test_nearest_rank_percentiles(self):
        stats = calculate_statistics([float(v) for v in range(10, 0, -1)])

        assert stats.mean == 5.5
        assert stats.median == 5.5
        assert stats.p10 == 2
        assert stats.p90 == 10
        assert stats.min == 1
        assert stats.max == 10

    def test_population_std(self):
        stats = calculate_statistics([2, 4, 4, 4, 5, 5, 7, 9])

        assert stats.std == 2.0

    def test_single_sample(self):
        stats = calculate_statistics([3.0])

        assert stats.p10 == stats.p90 == stats.median == 3.0
        assert stats.std == 0


class TestRunMonteCarlo:
    """Test full Monte Carlo runs."""

    def test_basic_run(self, detailed_inputs):
        config = MonteCarloConfig(n_iterations=200, seed=42)

        result = run_monte_carlo(detailed_inputs, config)

        assert result.n_iterations == 200
        assert len(result.parameters) == 3
        assert result.statistics.min <= result.statistics.p10 <= result.statistics.median
        assert result.statistics.median <= result.statistics.p90 <= result.statistics.max

    def test_reproducible_with_seed(self, detailed_inputs):
        config = MonteCarloConfig(objective=KPIMetric.TOTAL_ROI, n_iterations=100, seed=7)

        first = run_monte_carlo(detailed_inputs, config)
        second = run_monte_carlo(detailed_inputs, config)

        assert first.samples == second.samples

    def test_different_seeds_differ(self, detailed_inputs):
        first = run_monte_carlo(detailed_inputs, MonteCarloConfig(n_iterations=50, seed=1))
        second = run_monte_carlo(detailed_inputs, MonteCarloConfig(n_iterations=50, seed=2))

        assert first.samples != second.samples

    def test_parallel_matches_sequential(self, detailed_inputs):
        sequential = run_monte_carlo(detailed_inputs, MonteCarloConfig(n_iterations=100, seed=42))
        parallel = run_monte_carlo(
            detailed_inputs, MonteCarloConfig(n_iterations=100, seed=42, parallel=True, max_workers=4)
        )

        assert parallel.samples == sequential.samples

    def test_without_ranges_every_sample_is_base(self, reference_inputs):
        result = run_monte_carlo(reference_inputs, MonteCarloConfig(n_iterations=25, seed=3))

        base = calculate_kpis(reference_inputs).annual_cashflow
        assert result.samples == [base] * 25
        assert result.statistics.std == 0

    def test_samples_respect_range_ends(self, detailed_inputs):
        """Revenue bounds follow from the ADR and occupancy ranges."""
        config = MonteCarloConfig(
            objective=KPIMetric.ANNUAL_REVENUE,
            n_iterations=300,
            seed=11,
            distribution=DistributionType.UNIFORM,
        )

        result = run_monte_carlo(detailed_inputs, config)

        assert result.statistics.min >= 225 * 365 * 0.50 - 1
        assert result.statistics.max <= 325 * 365 * 0.72 + 1

    def test_probability_above(self, detailed_inputs):
        result = run_monte_carlo(detailed_inputs, MonteCarloConfig(n_iterations=100, seed=5))

        assert result.probability_above(result.statistics.min - 1) == 1.0
        assert result.probability_above(result.statistics.max) == 0.0

    def test_progress_callback(self, detailed_inputs):
        calls = []

        run_monte_carlo(
            detailed_inputs,
            MonteCarloConfig(n_iterations=20, seed=1),
            progress_callback=lambda done, total: calls.append((done, total)),
        )

        assert calls[0] == (1, 20)
        assert calls[-1] == (20, 20)

    def test_invalid_iterations(self, detailed_inputs):
        with pytest.raises(ValueError):
            run_monte_carlo(detailed_inputs, MonteCarloConfig(n_iterations=0))

    def test_summary(self, detailed_inputs):
        result = run_monte_carlo(detailed_inputs, MonteCarloConfig(n_iterations=20, seed=1))

        summary = result.summary()

        assert "MONTE CARLO SIMULATION RESULTS" in summary
        assert "annual_cashflow" in summary
        assert "Platform and management" in summary
