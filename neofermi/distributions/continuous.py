"""Continuous samplers parameterized by confidence intervals.

``lognormal`` and ``normal`` read ``[a, b]`` as the central interval that
holds ``confidence`` of the probability mass, so the default ``0.9`` puts
``a`` and ``b`` at the 5th and 95th percentiles.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
from scipy.special import erfinv

from ..config import DEFAULT_CONFIDENCE, resolve_rng, resolve_sample_count
from ..core.quantity import Quantity, UnitLike
from ..errors import InvalidParameterError

logger = logging.getLogger(__name__)


def require(condition: bool, message: str) -> None:
    """Raise :class:`InvalidParameterError` with ``message`` unless ``condition`` holds."""
    if not condition:
        raise InvalidParameterError(message)


def require_finite(label: str, *values: float) -> None:
    """Reject infinite or NaN sampler parameters."""
    finite = np.isfinite(np.asarray(values, dtype=float))
    shown = ", ".join(str(v) for v in values)
    require(bool(np.all(finite)), f"{label} parameters must be finite, got {shown}")


def z_factor(confidence: float) -> float:
    """Standard-normal quantile bounding a central interval of mass ``confidence``.

    Equivalent to ``-sqrt(2) * erfinv(2 * x - 1)`` with ``x = (1 - confidence) / 2``.
    """
    require(0.0 < confidence < 1.0, f"Confidence must be in (0, 1), got {confidence}")
    return float(math.sqrt(2.0) * erfinv(confidence))


def lognormal(
    a: float,
    b: float,
    unit: UnitLike = None,
    confidence: float = DEFAULT_CONFIDENCE,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Lognormal distribution whose central ``confidence`` interval is ``[a, b]``.

    Args:
        a (float): Lower bound, strictly positive.
        b (float): Upper bound, strictly greater than ``a``.
        unit (str, optional): Unit of the samples.
        confidence (float, optional): Mass inside ``[a, b]``. Defaults to 0.9.
        n (int, optional): Number of particles. Defaults to the configured
            sample count.
        rng (numpy.random.Generator, optional): Random source.

    Returns:
        Quantity: Distribution with ``n`` particles.

    Raises:
        InvalidParameterError: If a bound is non-positive or ``a >= b``.
    """
    require_finite("Lognormal", a, b)
    require(a > 0 and b > 0, f"Lognormal bounds must be positive, got {a} and {b}")
    require(a < b, f"Lognormal lower bound {a} must be less than upper bound {b}")
    n = resolve_sample_count(n)
    mu = math.log(math.sqrt(a * b))
    sigma = math.log(math.sqrt(b / a)) / z_factor(confidence)
    logger.debug("lognormal(%g, %g): mu=%g sigma=%g n=%d", a, b, mu, sigma, n)
    samples = np.exp(mu + sigma * resolve_rng(rng).standard_normal(n))
    return Quantity(samples, unit)


def normal(
    a: float,
    b: float,
    unit: UnitLike = None,
    confidence: float = DEFAULT_CONFIDENCE,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Normal distribution whose central ``confidence`` interval is ``[a, b]``.

    Raises:
        InvalidParameterError: If ``a >= b``.
    """
    require_finite("Normal", a, b)
    require(a < b, f"Normal lower bound {a} must be less than upper bound {b}")
    n = resolve_sample_count(n)
    mean = (a + b) / 2.0
    sigma = 0.5 * (b - a) / z_factor(confidence)
    logger.debug("normal(%g, %g): mean=%g sigma=%g n=%d", a, b, mean, sigma, n)
    return Quantity(mean + sigma * resolve_rng(rng).standard_normal(n), unit)


def plusminus(
    mean: float,
    std: float,
    unit: UnitLike = None,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Normal distribution given directly by mean and standard deviation."""
    require_finite("Plusminus", mean, std)
    require(std >= 0, f"Standard deviation must be non-negative, got {std}")
    n = resolve_sample_count(n)
    return Quantity(mean + std * resolve_rng(rng).standard_normal(n), unit)


def uniform(
    a: float,
    b: float,
    unit: UnitLike = None,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Uniform distribution on ``[a, b)``."""
    require_finite("Uniform", a, b)
    require(a < b, f"Uniform lower bound {a} must be less than upper bound {b}")
    n = resolve_sample_count(n)
    return Quantity(resolve_rng(rng).uniform(a, b, n), unit)


def exponential(
    rate: float,
    unit: UnitLike = None,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Exponential distribution sampled by inverse CDF, ``-ln(1 - U) / rate``."""
    require_finite("Exponential", rate)
    require(rate > 0, f"Exponential rate must be positive, got {rate}")
    n = resolve_sample_count(n)
    u = resolve_rng(rng).random(n)
    return Quantity(-np.log1p(-u) / rate, unit)


def exponential_mean(
    mean: float,
    unit: UnitLike = None,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Exponential distribution parameterized by its mean."""
    require(mean > 0, f"Exponential mean must be positive, got {mean}")
    return exponential(1.0 / mean, unit, n=n, rng=rng)


def to(
    a: float,
    b: float,
    unit: UnitLike = None,
    confidence: float = DEFAULT_CONFIDENCE,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Range distribution: lognormal when both bounds are positive, else normal."""
    if a > 0 and b > 0:
        return lognormal(a, b, unit, confidence, n, rng)
    return normal(a, b, unit, confidence, n, rng)


def percent(
    percentage: float,
    confidence: float = DEFAULT_CONFIDENCE,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Dimensionless multiplicative error factor of ``percentage`` percent."""
    require(percentage > 0, f"Percentage must be positive, got {percentage}")
    top = 1.0 + percentage / 100.0
    return lognormal(1.0 / top, top, None, confidence, n, rng)


def db(
    decibels: float = 1.0,
    confidence: float = DEFAULT_CONFIDENCE,
    n: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Quantity:
    """Dimensionless multiplicative error factor expressed in decibels.

    ``10`` dB spans one order of magnitude either side; ``3`` dB is roughly a
    factor of two.
    """
    require(decibels > 0, f"Decibels must be positive, got {decibels}")
    return lognormal(10.0 ** (-decibels / 10.0), 10.0 ** (decibels / 10.0), None, confidence, n, rng)
