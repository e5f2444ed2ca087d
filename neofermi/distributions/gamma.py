"""Gamma and beta samplers.

Gamma draws use the Marsaglia–Tsang squeeze/rejection method, vectorized so
that each pass resamples only the rejected particles. Beta draws use the
gamma ratio ``X / (X + Y)``.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..config import resolve_rng, resolve_sample_count
from ..core.quantity import Quantity, UnitLike
from .continuous import require, require_finite

logger = logging.getLogger(__name__)


def sample_gamma(shape: float, n: int, rng: np.random.Generator) -> np.ndarray:
    """Draw ``n`` unit-scale Gamma(shape) variates.

    Note:
        For ``shape < 1`` the boost trick is applied: sample Gamma(shape + 1)
        and multiply by ``U ** (1 / shape)``.
    """
    if shape < 1.0:
        boosted = sample_gamma(shape + 1.0, n, rng)
        return boosted * rng.random(n) ** (1.0 / shape)

    d = shape - 1.0 / 3.0
    c = 1.0 / np.sqrt(9.0 * d)
    out = np.empty(n)
    pending = np.arange(n)
    passes = 0
    while pending.size:
        passes += 1
        m = pending.size
        x = rng.standard_normal(m)
        v = (1.0 + c * x) ** 3
        u = rng.random(m)
        positive = v > 0
        with np.errstate(invalid="ignore", divide="ignore"):
            squeeze = u < 1.0 - 0.0331 * x**4
            log_test = np.log(u) < 0.5 * x**2 + d * (1.0 - v + np.log(v))
        accept = positive & (squeeze | log_test)
        out[pending[accept]] = d * v[accept]
        pending = pending[~accept]
    logger.debug("gamma(%g): %d particles in %d rejection passes", shape, n, passes)
    return out


def gamma(
    shape: float,
    scale: float = 1.0,
    unit: UnitLike = None,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Gamma distribution with the given shape and scale.

    Raises:
        InvalidParameterError: If ``shape`` or ``scale`` is not positive.
    """
    require_finite("Gamma", shape, scale)
    require(shape > 0, f"Gamma shape must be positive, got {shape}")
    require(scale > 0, f"Gamma scale must be positive, got {scale}")
    n = resolve_sample_count(n)
    return Quantity(sample_gamma(float(shape), n, resolve_rng(rng)) * scale, unit)


def beta(
    alpha: float,
    beta_: float,
    unit: UnitLike = None,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Beta(alpha, beta) distribution sampled as a gamma ratio."""
    require_finite("Beta", alpha, beta_)
    require(alpha > 0, f"Beta alpha must be positive, got {alpha}")
    require(beta_ > 0, f"Beta beta must be positive, got {beta_}")
    n = resolve_sample_count(n)
    rng = resolve_rng(rng)
    x = sample_gamma(float(alpha), n, rng)
    y = sample_gamma(float(beta_), n, rng)
    return Quantity(x / (x + y), unit)


def outof(
    successes: float,
    total: float,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Success rate after ``successes`` out of ``total`` trials.

    Laplace's rule of succession: Beta(successes + 1, total - successes + 1),
    whose mean is ``(successes + 1) / (total + 2)``.
    """
    require(successes >= 0, f"Successes must be non-negative, got {successes}")
    require(
        successes <= total,
        f"Successes ({successes}) cannot exceed total ({total})",
    )
    return beta(successes + 1, total - successes + 1, n=n, rng=rng)


def against(
    for_count: float,
    against_count: float,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Beta(for, against): odds expressed as counts for and against."""
    require(for_count > 0, f"'For' count must be positive, got {for_count}")
    require(against_count > 0, f"'Against' count must be positive, got {against_count}")
    return beta(for_count, against_count, n=n, rng=rng)
