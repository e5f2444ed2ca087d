"""Plot-ready summaries of particle samples: histogram bins and quantile dots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from .core.quantity import Quantity
from .errors import InvalidParameterError

Samples = Union[Quantity, Sequence[float], np.ndarray]


@dataclass(frozen=True)
class HistogramData:
    counts: np.ndarray
    edges: np.ndarray
    min: float
    max: float
    unit: str = ""


@dataclass(frozen=True)
class DotplotData:
    quantiles: np.ndarray
    min: float
    max: float
    unit: str = ""


def _samples(samples: Samples):
    if isinstance(samples, Quantity):
        return samples.to_particles(), samples.unit_string
    values = np.asarray(samples, dtype=float).ravel()
    if values.size == 0:
        raise InvalidParameterError("Cannot summarize an empty sample set")
    return values, ""


def histogram_data(samples: Samples, bins: int = 50, unit: str = "") -> HistogramData:
    """Equal-width bins spanning ``[min, max]``.

    The top edge belongs to the last bin. When every sample is equal the
    whole sample lands in the first bin.
    """
    if bins < 1:
        raise InvalidParameterError(f"Histogram needs at least one bin, got {bins}")
    values, own_unit = _samples(samples)
    lo, hi = float(values.min()), float(values.max())
    span = hi - lo
    edges = lo + np.arange(bins + 1) / bins * span
    counts = np.zeros(bins, dtype=int)
    if span == 0:
        counts[0] = values.size
    else:
        index = np.minimum(np.floor((values - lo) / span * bins).astype(int), bins - 1)
        counts = np.bincount(index, minlength=bins)
    return HistogramData(counts, edges, lo, hi, unit or own_unit)


def dotplot_data(samples: Samples, n_dots: int = 20, unit: str = "") -> DotplotData:
    """Quantiles at the centers of ``n_dots`` equal-probability bins.

    Uses the same floor order-statistic rule as :meth:`Quantity.percentile`.
    """
    if n_dots < 1:
        raise InvalidParameterError(f"Dotplot needs at least one dot, got {n_dots}")
    values, own_unit = _samples(samples)
    ordered = np.sort(values)
    n = ordered.size
    p = (np.arange(n_dots) + 0.5) / n_dots
    index = np.minimum(np.floor(p * n).astype(int), n - 1)
    return DotplotData(ordered[index], float(ordered[0]), float(ordered[-1]), unit or own_unit)


def should_use_log_scale(samples: Samples) -> bool:
    """True for strictly positive samples spanning more than two decades."""
    values, _ = _samples(samples)
    lo, hi = float(values.min()), float(values.max())
    if lo <= 0 or hi <= 0:
        return False
    return hi / lo > 100
