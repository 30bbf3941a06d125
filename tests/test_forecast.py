"""Tests for the branching-process forecast."""

import math

import numpy as np
import pytest
from scipy.stats import poisson

from kintime.errors import InvalidParameter
from kintime.forecast import branch, forecast_descendants, simulate_trial
from kintime.models import Forecast


class TestForecast:
    """Tests for descendant-count percentiles."""

    def test_extinction(self):
        """Test that no offspring means no descendants in any generation count."""
        for generations in (1, 5, 20):
            assert forecast_descendants(0.0, generations, 50, seed=1) == Forecast(0.0, 0.0, 0.0)

    def test_same_seed_is_reproducible(self):
        first = forecast_descendants(1.8, 6, 300, start=2, seed=42)
        second = forecast_descendants(1.8, 6, 300, start=2, seed=42)
        assert first == second

    def test_different_seeds_differ(self):
        results = {forecast_descendants(2.0, 6, 200, seed=seed) for seed in range(5)}
        assert len(results) > 1

    def test_percentiles_are_ordered(self):
        for mu in (0.5, 1.0, 2.5):
            result = forecast_descendants(mu, 5, 500, seed=7)
            assert result.p05 <= result.p50 <= result.p95

    @pytest.mark.parametrize("seed", range(10))
    def test_more_offspring_means_more_descendants(self, seed):
        """Test that percentiles never decrease across closely spaced means."""
        mus = [0.90 + step / 100 for step in range(40)]
        results = [forecast_descendants(mu, 5, 21, seed=seed) for mu in mus]
        for mu, lower, higher in zip(mus[1:], results, results[1:]):
            assert lower.p05 <= higher.p05, mu
            assert lower.p50 <= higher.p50, mu
            assert lower.p95 <= higher.p95, mu

    def test_single_generation_with_certain_offspring_scale(self):
        """Test that one generation from a large start concentrates around start * mu."""
        result = forecast_descendants(2.0, 1, 400, start=10_000, seed=11)
        assert abs(result.p50 - 20_000) < 300

    def test_results_are_floats(self):
        result = forecast_descendants(1.2, 3, 10, seed=0)
        assert all(isinstance(p, float) for p in (result.p05, result.p50, result.p95))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"mu": -0.5},
            {"mu": math.inf},
            {"mu": math.nan},
            {"generations": 0},
            {"simulations": 0},
            {"start": 0},
            {"generations": 2.5},
            {"seed": -1},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        params = {"mu": 1.0, "generations": 3, "simulations": 10, "start": 1, "seed": 0, **kwargs}
        with pytest.raises(InvalidParameter):
            forecast_descendants(
                params["mu"], params["generations"], params["simulations"], start=params["start"], seed=params["seed"]
            )

    def test_runaway_population(self):
        with pytest.raises(InvalidParameter):
            forecast_descendants(1000.0, 10, 1, seed=0)


class TestSimulateTrial:
    """Tests for a single trial."""

    def test_total_excludes_starting_population(self):
        assert simulate_trial(0.0, 3, 5, np.random.default_rng(0)) == 0

    def test_trial_uses_given_generator(self):
        a = simulate_trial(1.5, 4, 1, np.random.default_rng(9))
        b = simulate_trial(1.5, 4, 1, np.random.default_rng(9))
        assert a == b

    def test_one_uniform_per_generation(self):
        """Test that the generator advances by the same amount whatever the mean."""
        low = np.random.default_rng(5)
        high = np.random.default_rng(5)
        simulate_trial(0.5, 4, 1, low)
        simulate_trial(4.0, 4, 1, high)
        assert low.random() == high.random()

    def test_trial_grows_with_mean(self):
        totals = [simulate_trial(mu, 6, 2, np.random.default_rng(21)) for mu in (0.8, 0.81, 1.5, 2.0, 2.01)]
        assert totals == sorted(totals)


class TestBranch:
    """Tests for branching driven by given uniforms."""

    def test_extinct_trials_stay_extinct(self):
        uniforms = np.array([[0.0, 0.99, 0.99], [0.5, 0.5, 0.5]])
        totals = branch(1.0, 1, uniforms)
        assert totals[0] == 0.0
        assert totals[1] > 0.0

    def test_median_uniform_gives_median_offspring(self):
        assert branch(2.0, 10, np.array([[0.5]]))[0] == poisson.ppf(0.5, 20.0)
