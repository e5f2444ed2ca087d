"""Discrete samplers: Poisson, binomial and weighted sets."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from ..config import resolve_rng, resolve_sample_count
from ..core.quantity import Quantity, UnitLike
from .continuous import require, require_finite

logger = logging.getLogger(__name__)

POISSON_DIRECT_LIMIT = 30.0
BINOMIAL_DIRECT_LIMIT = 10.0


def poisson(
    lam: float,
    unit: UnitLike = None,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Poisson counts with rate ``lam``.

    Small rates multiply uniforms until the product drops below
    ``exp(-lam)``; rates of 30 or more use a rounded normal approximation
    floored at zero.

    Raises:
        InvalidParameterError: If ``lam`` is not positive.
    """
    require_finite("Poisson", lam)
    require(lam > 0, f"Poisson lambda must be positive, got {lam}")
    n = resolve_sample_count(n)
    rng = resolve_rng(rng)
    if lam < POISSON_DIRECT_LIMIT:
        limit = np.exp(-lam)
        product = np.ones(n)
        counts = np.zeros(n)
        active = np.ones(n, dtype=bool)
        while active.any():
            product[active] *= rng.random(int(active.sum()))
            counts[active] += 1
            active = product > limit
        samples = counts - 1
    else:
        samples = np.maximum(0.0, np.round(lam + np.sqrt(lam) * rng.standard_normal(n)))
    return Quantity(samples, unit)


def binomial(
    trials: float,
    p: float,
    unit: UnitLike = None,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Number of successes in ``trials`` Bernoulli(p) trials.

    Raises:
        InvalidParameterError: If ``trials`` is not a positive integer or
            ``p`` is outside [0, 1].
    """
    require_finite("Binomial", trials, p)
    require(
        trials > 0 and float(trials).is_integer(),
        f"Binomial n must be a positive integer, got {trials}",
    )
    require(0.0 <= p <= 1.0, f"Binomial p must be between 0 and 1, got {p}")
    trials = int(trials)
    n = resolve_sample_count(n)
    rng = resolve_rng(rng)
    if trials * p < BINOMIAL_DIRECT_LIMIT and trials * (1 - p) < BINOMIAL_DIRECT_LIMIT:
        samples = (rng.random((n, trials)) < p).sum(axis=1).astype(float)
    else:
        mean = trials * p
        std = np.sqrt(trials * p * (1 - p))
        samples = np.clip(np.round(mean + std * rng.standard_normal(n)), 0, trials)
    return Quantity(samples, unit)


def weighted(
    values: Sequence[float],
    weights: Sequence[float],
    unit: UnitLike = None,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Draw from discrete ``values`` in proportion to ``weights``.

    Example:
        A Gregorian year in days: ``weighted([365, 366], [303, 97], "day")``.

    Raises:
        InvalidParameterError: For empty or mismatched inputs, negative
            weights, or a zero total weight.
    """
    values = np.asarray(values, dtype=float).ravel()
    weights = np.asarray(weights, dtype=float).ravel()
    require(values.size > 0, "Values array cannot be empty")
    require(values.size == weights.size, "Values and weights arrays must have the same length")
    require_finite("Weighted", *values, *weights)
    require(bool(np.all(weights >= 0)), "Weights must be non-negative")
    total = float(weights.sum())
    require(total > 0, "Total weight must be positive")
    n = resolve_sample_count(n)
    cdf = np.cumsum(weights / total)
    draws = resolve_rng(rng).random(n)
    index = np.minimum(np.searchsorted(cdf, draws, side="left"), values.size - 1)
    return Quantity(values[index], unit)
