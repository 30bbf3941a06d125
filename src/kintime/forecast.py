"""Monte Carlo forecast of descendant counts under a Galton-Watson branching process."""

import logging
import math
import numbers

import numpy as np
from scipy.stats import poisson

from kintime.errors import InvalidParameter
from kintime.models import Forecast

logger = logging.getLogger(__name__)

# Largest Poisson mean whose sampled counts are still exact in float64
POISSON_LAM_MAX = float(2**53)

PERCENTILES = (5, 50, 95)


def _check_parameters(mu: float, generations: int, simulations: int, start: int, seed: int) -> None:
    if isinstance(mu, bool) or not isinstance(mu, numbers.Real) or not math.isfinite(mu) or mu < 0:
        raise InvalidParameter("mu", mu, "must be a finite number >= 0")
    counts = (("generations", generations), ("simulations", simulations), ("start", start))
    for name, value in counts:
        if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
            raise InvalidParameter(name, value, "must be an integer >= 1")
    if isinstance(seed, bool) or not isinstance(seed, numbers.Integral) or seed < 0:
        raise InvalidParameter("seed", seed, "must be an integer >= 0")


def branch(mu: float, start: int, uniforms: np.ndarray) -> np.ndarray:
    """
    Run branching processes driven by pre-drawn uniforms and return their totals.

    `uniforms` has one row per trial and one column per generation. Each generation,
    the current z individuals have Poisson(mu) children each; their sum is sampled as
    one Poisson(z * mu) draw through the inverse CDF at that generation's uniform.
    The inverse CDF never decreases as the mean grows, so for fixed uniforms a larger
    mu never yields a smaller population in any generation, nor a smaller total.
    """
    trials, generations = uniforms.shape
    population = np.full(trials, float(start))
    totals = np.zeros(trials)
    for generation in range(generations):
        lam = population * mu
        alive = lam > 0
        if not alive.any():
            break
        if lam.max() > POISSON_LAM_MAX:
            raise InvalidParameter(
                "generations",
                generations,
                f"population outgrows what can be sampled (mean {lam.max():.3g})",
            )
        drawn = np.zeros(trials)
        drawn[alive] = poisson.ppf(uniforms[alive, generation], lam[alive])
        # ppf(0) is -1, the point below the support
        population = np.maximum(drawn, 0.0)
        totals += population
    return totals


def simulate_trial(
    mu: float, generations: int, start: int, rng: np.random.Generator
) -> int:
    """
    Run a single branching process and return the number of descendants produced.

    Exactly one uniform is drawn from `rng` per generation, whatever mu is.
    """
    return int(branch(mu, start, rng.random((1, generations)))[0])


def forecast_descendants(
    mu: float,
    generations: int,
    simulations: int,
    *,
    start: int = 1,
    seed: int,
) -> Forecast:
    """
    Estimate the 5th, 50th and 95th percentiles of total descendants after a number
    of generations.

    Args:
        mu: Mean number of offspring per individual per generation
        generations: Number of generations to simulate
        simulations: Number of independent trials
        start: Population at generation 0, not counted in the totals
        seed: Seed for the trial generators; equal inputs give identical results

    Each trial draws from its own generator spawned from `numpy.random.SeedSequence`,
    so trials are independent and can be run in any order. Because every trial
    consumes one uniform per generation regardless of mu, runs with the same seed
    share their random numbers and the percentiles never decrease as mu grows.
    """
    _check_parameters(mu, generations, simulations, start, seed)

    seeds = np.random.SeedSequence(seed).spawn(simulations)
    uniforms = np.stack([np.random.default_rng(s).random(generations) for s in seeds])
    totals = branch(mu, start, uniforms)
    p05, p50, p95 = np.percentile(totals, PERCENTILES)
    forecast = Forecast(p05=float(p05), p50=float(p50), p95=float(p95))

    logger.info(
        "Forecast mu=%s generations=%d simulations=%d start=%d seed=%s: %s",
        mu,
        generations,
        simulations,
        start,
        seed,
        forecast,
    )
    return forecast
