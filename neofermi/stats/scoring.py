"""Continuous Ranked Probability Score for particle forecasts.

``CRPS = E|X - y| - 0.5 * E|X - X'|``. The first term (reliability) is the
mean absolute error of the forecast particles against the observation; the
second (resolution) is half the Gini mean difference and rewards sharp
forecasts. Both are evaluated on the sorted particle array:

* ``E|X - X'| = (2 / n^2) * sum_i (2i - n + 1) * sorted_i`` in O(n log n);
* ``E|X - y|`` from prefix sums, split at ``y``'s insertion point.

The log and dB variants score ``ln`` and ``10 log10`` of both sides and
therefore need strictly positive particles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

import numpy as np

from ..core.quantity import Quantity, as_quantity
from ..core.units import DIMENSIONLESS_UNIT
from ..errors import IncompatibleUnitsError, NonPositiveValueError

Transform = Optional[Callable[[np.ndarray], np.ndarray]]


@dataclass(frozen=True)
class CRPSComponents:
    """Reliability and resolution terms of one CRPS evaluation.

    Attributes:
        reliability: ``E|X - y|``; an array when the observation is a
            distribution.
        resolution: ``0.5 * E|X - X'|``.
        observation_is_scalar: Whether the observation was a scalar.
    """

    reliability: Union[float, np.ndarray]
    resolution: float
    observation_is_scalar: bool

    @property
    def crps(self) -> Union[float, np.ndarray]:
        return self.reliability - self.resolution


def gini_mean_difference(sorted_particles: np.ndarray) -> float:
    """``E|X - X'|`` of a sorted sample, computed without pairwise differences."""
    n = len(sorted_particles)
    weights = 2.0 * np.arange(n) - n + 1.0
    return float(np.sum(weights * sorted_particles) * 2.0 / (n * n))


def mean_absolute_deviation(sorted_particles: np.ndarray, observations: np.ndarray) -> np.ndarray:
    """``mean(|X - y|)`` for each ``y`` in ``observations`` against sorted ``X``."""
    n = len(sorted_particles)
    prefix = np.concatenate(([0.0], np.cumsum(sorted_particles)))
    k = np.searchsorted(sorted_particles, observations, side="right")
    below = observations * k - prefix[k]
    above = (prefix[-1] - prefix[k]) - observations * (n - k)
    return (below + above) / n


def _log_transform(name: str, func: Callable[[np.ndarray], np.ndarray]) -> Callable[[np.ndarray], np.ndarray]:
    def transform(values: np.ndarray) -> np.ndarray:
        if np.any(values <= 0):
            bad = float(values[values <= 0][0])
            raise NonPositiveValueError(
                f"{name} requires strictly positive values, got {bad}"
            )
        return func(values)

    return transform


_LOG = _log_transform("logcrps", np.log)
_DB = _log_transform("dbcrps", lambda x: 10.0 * np.log10(x))


def crps_components(dist, observation, transform: Transform = None) -> CRPSComponents:
    """Compute both CRPS terms, converting the observation into dist's unit.

    Raises:
        IncompatibleUnitsError: If ``dist`` and ``observation`` are not
            base-equal.
        NonPositiveValueError: If ``transform`` is a log transform and a
            particle is not strictly positive.
    """
    dist = as_quantity(dist)
    observation = as_quantity(observation)
    if not dist.unit.equal_base(observation.unit):
        raise IncompatibleUnitsError(
            "crps functions require arguments with compatible units, "
            f"got '{dist.unit}' and '{observation.unit}'"
        )
    forecast = dist.to_particles()
    observed = observation.to(dist.unit).to_particles()
    if transform is not None:
        forecast = transform(forecast)
        observed = transform(observed)
    ordered = np.sort(forecast)
    resolution = 0.5 * gini_mean_difference(ordered)
    reliability = mean_absolute_deviation(ordered, observed)
    if observation.is_scalar():
        return CRPSComponents(float(reliability[0]), resolution, True)
    return CRPSComponents(reliability, resolution, False)


def _wrap(values, unit) -> Quantity:
    if np.ndim(values) == 0:
        return Quantity(float(values), unit)
    return Quantity(values, unit)


def crps(dist, observation) -> Quantity:
    """CRPS of ``dist`` against ``observation``, in dist's unit. Lower is better."""
    dist = as_quantity(dist)
    return _wrap(crps_components(dist, observation).crps, dist.unit)


def crps_reliability(dist, observation) -> Quantity:
    """Reliability term ``E|X - y|`` in dist's unit."""
    dist = as_quantity(dist)
    return _wrap(crps_components(dist, observation).reliability, dist.unit)


def crps_resolution(dist, observation) -> Quantity:
    """Resolution term ``0.5 E|X - X'|`` in dist's unit."""
    dist = as_quantity(dist)
    return Quantity(crps_components(dist, observation).resolution, dist.unit)


def logcrps(dist, observation) -> Quantity:
    """CRPS of the natural logarithms; dimensionless."""
    return _wrap(crps_components(dist, observation, _LOG).crps, DIMENSIONLESS_UNIT)


def logcrps_reliability(dist, observation) -> Quantity:
    return _wrap(crps_components(dist, observation, _LOG).reliability, DIMENSIONLESS_UNIT)


def logcrps_resolution(dist, observation) -> Quantity:
    return Quantity(crps_components(dist, observation, _LOG).resolution, DIMENSIONLESS_UNIT)


def dbcrps(dist, observation) -> Quantity:
    """CRPS in decibels (``10 log10``); dimensionless."""
    return _wrap(crps_components(dist, observation, _DB).crps, DIMENSIONLESS_UNIT)


def dbcrps_reliability(dist, observation) -> Quantity:
    return _wrap(crps_components(dist, observation, _DB).reliability, DIMENSIONLESS_UNIT)


def dbcrps_resolution(dist, observation) -> Quantity:
    return Quantity(crps_components(dist, observation, _DB).resolution, DIMENSIONLESS_UNIT)
