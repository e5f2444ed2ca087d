"""Percentile and moment helpers plus value ± uncertainty formatting."""

from __future__ import annotations

import math
from typing import Dict, Tuple

from ..core.quantity import Quantity, as_quantity
from ..errors import OutOfRangeError

FIXED_PERCENTILES: Dict[str, float] = {
    "p5": 0.05,
    "p10": 0.10,
    "p25": 0.25,
    "p75": 0.75,
    "p90": 0.90,
    "p95": 0.95,
    "p99": 0.99,
}


def _scalar_argument(p) -> float:
    p = as_quantity(p)
    return p.value if p.is_scalar() else p.mean()


def quantile(q: Quantity, p) -> Quantity:
    """Order statistic of ``q`` at probability ``p`` in [0, 1], keeping the unit.

    Raises:
        OutOfRangeError: If ``p`` is outside [0, 1].
    """
    p_value = _scalar_argument(p)
    if not 0.0 <= p_value <= 1.0:
        raise OutOfRangeError(f"quantile() probability must be between 0 and 1, got {p_value}")
    return Quantity(q.percentile(p_value), q.unit)


def percentile(q: Quantity, p) -> Quantity:
    """Alias of :func:`quantile`."""
    return quantile(q, p)


def _fixed(name: str, p: float):
    def helper(q: Quantity) -> Quantity:
        return Quantity(q.percentile(p), q.unit)

    helper.__name__ = name
    helper.__doc__ = f"{int(round(p * 100))}th percentile, keeping the unit."
    return helper


p5 = _fixed("p5", 0.05)
p10 = _fixed("p10", 0.10)
p25 = _fixed("p25", 0.25)
p75 = _fixed("p75", 0.75)
p90 = _fixed("p90", 0.90)
p95 = _fixed("p95", 0.95)
p99 = _fixed("p99", 0.99)


def median(q: Quantity) -> Quantity:
    """50th percentile by the floor rule (not the midpoint average)."""
    return Quantity(q.percentile(0.5), q.unit)


def mean(q: Quantity) -> Quantity:
    return Quantity(q.mean(), q.unit)


def std(q: Quantity) -> Quantity:
    """Population standard deviation with the unit of ``q``."""
    return Quantity(q.std(), q.unit)


def _round_uncertainty(u: float) -> Tuple[float, int]:
    if u <= 0 or not math.isfinite(u):
        return u, 0

    u = abs(float(u))
    exponent = math.floor(math.log10(u))
    leading = u / (10**exponent)

    sig_figs = 2 if 1.0 <= leading < 2.0 else 1
    ndigits = sig_figs - 1 - exponent

    ru = round(u, ndigits)

    if ru == 0:
        ndigits = sig_figs - exponent
        ru = round(u, ndigits)

    return float(ru), int(ndigits)


def round_value_to_uncertainty(value: float, uncertainty: float) -> Tuple[float, float]:
    """
    Round a value and its uncertainty for display:
    - uncertainty to 1 s.f. (2 if leading digit is 1)
    - value rounded to the same decimal place
    """
    ru, ndigits = _round_uncertainty(abs(float(uncertainty)))
    if not math.isfinite(ru) or ru == 0:
        return float(value), float(uncertainty)
    return float(round(float(value), ndigits)), float(ru)


def _format_number_with_rounding(x: float, ndigits: int) -> str:
    xr = round(float(x), ndigits)
    if ndigits > 0:
        return f"{xr:.{ndigits}f}"
    return f"{xr:.0f}"


def format_value_with_uncertainty(value: float, uncertainty: float, unit: str = "") -> str:
    """Render ``"v ± u unit"`` with the value rounded to the uncertainty's place."""
    ru, ndigits = _round_uncertainty(abs(float(uncertainty)))
    if ru == 0 or not math.isfinite(ru):
        v = f"{value:.6g}"
        u = f"{uncertainty:.6g}"
        return f"{v} ± {u} {unit}".strip()

    v_str = _format_number_with_rounding(value, ndigits)
    u_str = _format_number_with_rounding(ru, ndigits)
    return f"{v_str} ± {u_str} {unit}".strip()


def format_quantity(q: Quantity) -> str:
    """Mean ± std for distributions, the bare value for scalars."""
    if q.is_scalar():
        return f"{q.value:.6g} {q.unit_string}".strip()
    return format_value_with_uncertainty(q.mean(), q.std(), q.unit_string)


def describe(q: Quantity) -> Dict[str, object]:
    """Summary statistics of ``q`` in its own unit."""
    return {
        "unit": q.unit_string,
        "dimension": q.dimension_name(),
        "samples": q.sample_count,
        "mean": q.mean(),
        "std": q.std(),
        "p5": q.percentile(0.05),
        "median": q.percentile(0.5),
        "p95": q.percentile(0.95),
        "min": q.min(),
        "max": q.max(),
        "display": format_quantity(q),
    }
