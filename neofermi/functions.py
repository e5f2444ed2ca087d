"""Built-in functions callable from expressions.

Two fixed dispatch tables drive function calls:

* ``MATH_FUNCTIONS`` receive full Quantities, so particles and units flow
  through them element-wise.
* ``DISTRIBUTION_FUNCTIONS`` receive plain numbers (a distribution argument
  is reduced to its mean) together with the session's sampling context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

from . import distributions
from .config import DEFAULT_CONFIDENCE, DEFAULT_SAMPLE_COUNT
from .core.dimensions import Dimension
from .core.quantity import Quantity, as_quantity
from .core.units import DIMENSIONLESS_UNIT, parse_unit
from .errors import IncompatibleUnitsError, InvalidParameterError
from .stats import scoring, summary

logger = logging.getLogger(__name__)

RADIAN, _ = parse_unit("rad")
ANGLE = Dimension.of(angle=1)


@dataclass(frozen=True)
class SamplingContext:
    """Sample count, confidence and random source used by distribution calls."""

    sample_count: int = DEFAULT_SAMPLE_COUNT
    confidence: float = DEFAULT_CONFIDENCE
    rng: Optional[np.random.Generator] = None


def _broadcast_particles(*quantities: Quantity):
    """Particle arrays of equal length, and whether every input was a scalar."""
    arrays = [q.to_particles() for q in quantities]
    n = max(len(a) for a in arrays)
    return [a if len(a) == n else np.resize(a, n) for a in arrays], all(q.is_scalar() for q in quantities)


def _pack(values: np.ndarray, scalar: bool, unit) -> Quantity:
    if scalar:
        return Quantity(float(values[0]), unit)
    return Quantity(values, unit)


def _require_dimensionless(name: str, q: Quantity) -> None:
    if not q.unit.is_dimensionless:
        raise IncompatibleUnitsError(f"{name}() requires dimensionless argument, got '{q.unit}'")


def _require_same_base(name: str, first: Quantity, *others: Quantity) -> None:
    for other in others:
        if not first.unit.equal_base(other.unit):
            raise IncompatibleUnitsError(
                f"{name}() requires arguments with compatible units, got '{first.unit}' and '{other.unit}'"
            )


def _dimensionless_unary(name: str, func: Callable[[np.ndarray], np.ndarray]) -> Callable[[Quantity], Quantity]:
    def wrapped(q: Quantity) -> Quantity:
        q = as_quantity(q)
        _require_dimensionless(name, q)
        with np.errstate(invalid="ignore", divide="ignore"):
            return q.apply(func, DIMENSIONLESS_UNIT)

    wrapped.__name__ = name
    wrapped.__doc__ = f"Element-wise {name} of a dimensionless quantity."
    return wrapped


def _unit_preserving(name: str, func: Callable[[np.ndarray], np.ndarray]) -> Callable[[Quantity], Quantity]:
    def wrapped(q: Quantity) -> Quantity:
        return as_quantity(q).apply(func)

    wrapped.__name__ = name
    wrapped.__doc__ = f"Element-wise {name}, keeping the unit."
    return wrapped


def _in_radians(name: str, q: Quantity) -> Quantity:
    q = as_quantity(q)
    if q.unit.is_dimensionless:
        return q
    if q.unit.dimension == ANGLE:
        return q.to(RADIAN)
    raise IncompatibleUnitsError(f"{name}() requires dimensionless or angle argument, got '{q.unit}'")


def _trig(name: str, func: Callable[[np.ndarray], np.ndarray]) -> Callable[[Quantity], Quantity]:
    def wrapped(q: Quantity) -> Quantity:
        return _in_radians(name, q).apply(func, DIMENSIONLESS_UNIT)

    wrapped.__name__ = name
    wrapped.__doc__ = f"Element-wise {name} of an angle (radians when dimensionless)."
    return wrapped


def _inverse_trig(name: str, func: Callable[[np.ndarray], np.ndarray]) -> Callable[[Quantity], Quantity]:
    def wrapped(q: Quantity) -> Quantity:
        q = as_quantity(q)
        _require_dimensionless(name, q)
        with np.errstate(invalid="ignore"):
            return q.apply(func, RADIAN)

    wrapped.__name__ = name
    wrapped.__doc__ = f"Element-wise {name}, returning radians."
    return wrapped


abs_ = _unit_preserving("abs", np.abs)
floor = _unit_preserving("floor", np.floor)
ceil = _unit_preserving("ceil", np.ceil)
round_ = _unit_preserving("round", np.round)
trunc = _unit_preserving("trunc", np.trunc)

exp = _dimensionless_unary("exp", np.exp)
expm1 = _dimensionless_unary("expm1", np.expm1)
log = _dimensionless_unary("log", np.log)
log10 = _dimensionless_unary("log10", np.log10)
log2 = _dimensionless_unary("log2", np.log2)
log1p = _dimensionless_unary("log1p", np.log1p)
sinh = _dimensionless_unary("sinh", np.sinh)
cosh = _dimensionless_unary("cosh", np.cosh)
tanh = _dimensionless_unary("tanh", np.tanh)
asinh = _dimensionless_unary("asinh", np.arcsinh)
acosh = _dimensionless_unary("acosh", np.arccosh)
atanh = _dimensionless_unary("atanh", np.arctanh)

sin = _trig("sin", np.sin)
cos = _trig("cos", np.cos)
tan = _trig("tan", np.tan)
asin = _inverse_trig("asin", np.arcsin)
acos = _inverse_trig("acos", np.arccos)
atan = _inverse_trig("atan", np.arctan)


def sign(q: Quantity) -> Quantity:
    """Element-wise sign; dimensionless."""
    return as_quantity(q).apply(np.sign, DIMENSIONLESS_UNIT)


def sqrt(q: Quantity) -> Quantity:
    """Square root; the unit is raised to the power 1/2."""
    return as_quantity(q).pow(0.5)


def cbrt(q: Quantity) -> Quantity:
    """Cube root; the unit is raised to the power 1/3."""
    q = as_quantity(q)
    return q.apply(np.cbrt, q.unit.pow(1.0 / 3.0))


def pow_(base: Quantity, exponent: Quantity) -> Quantity:
    """``base ** exponent`` with a dimensionless exponent.

    A distribution exponent is applied element-wise and yields a
    dimensionless result.
    """
    base = as_quantity(base)
    exponent = as_quantity(exponent)
    _require_dimensionless("pow", exponent)
    if exponent.is_scalar():
        return base.pow(exponent.value)
    (b, e), scalar = _broadcast_particles(base, exponent)
    with np.errstate(invalid="ignore", divide="ignore"):
        return _pack(np.power(b, e), scalar, DIMENSIONLESS_UNIT)


def _same_unit_binary(name: str, func) -> Callable[[Quantity, Quantity], Quantity]:
    def wrapped(a: Quantity, b: Quantity) -> Quantity:
        a = as_quantity(a)
        b = as_quantity(b)
        _require_same_base(name, a, b)
        (x, y), scalar = _broadcast_particles(a, b.to(a.unit))
        return _pack(func(x, y), scalar, a.unit)

    wrapped.__name__ = name
    wrapped.__doc__ = f"Element-wise {name} of two base-equal quantities, in the first one's unit."
    return wrapped


min_ = _same_unit_binary("min", np.minimum)
max_ = _same_unit_binary("max", np.maximum)
hypot = _same_unit_binary("hypot", np.hypot)


def atan2(y: Quantity, x: Quantity) -> Quantity:
    """Four-quadrant arctangent of base-equal ``y`` and ``x``, in radians."""
    y = as_quantity(y)
    x = as_quantity(x)
    _require_same_base("atan2", y, x)
    (a, b), scalar = _broadcast_particles(y, x.to(y.unit))
    return _pack(np.arctan2(a, b), scalar, RADIAN)


def clamp(value: Quantity, low: Quantity, high: Quantity) -> Quantity:
    """Limit ``value`` element-wise to ``[low, high]``."""
    value = as_quantity(value)
    low = as_quantity(low)
    high = as_quantity(high)
    _require_same_base("clamp", value, low, high)
    (v, lo, hi), scalar = _broadcast_particles(value, low.to(value.unit), high.to(value.unit))
    return _pack(np.maximum(lo, np.minimum(hi, v)), scalar, value.unit)


MATH_FUNCTIONS: Dict[str, Callable[..., Quantity]] = {
    "abs": abs_,
    "sign": sign,
    "floor": floor,
    "ceil": ceil,
    "round": round_,
    "trunc": trunc,
    "sqrt": sqrt,
    "cbrt": cbrt,
    "exp": exp,
    "expm1": expm1,
    "pow": pow_,
    "log": log,
    "ln": log,
    "log10": log10,
    "log2": log2,
    "log1p": log1p,
    "sin": sin,
    "cos": cos,
    "tan": tan,
    "asin": asin,
    "acos": acos,
    "atan": atan,
    "atan2": atan2,
    "sinh": sinh,
    "cosh": cosh,
    "tanh": tanh,
    "asinh": asinh,
    "acosh": acosh,
    "atanh": atanh,
    "min": min_,
    "max": max_,
    "hypot": hypot,
    "clamp": clamp,
    "quantile": summary.quantile,
    "percentile": summary.percentile,
    "p5": summary.p5,
    "p10": summary.p10,
    "p25": summary.p25,
    "median": summary.median,
    "p75": summary.p75,
    "p90": summary.p90,
    "p95": summary.p95,
    "p99": summary.p99,
    "mean": summary.mean,
    "std": summary.std,
    "crps": scoring.crps,
    "crps_reliability": scoring.crps_reliability,
    "crps_resolution": scoring.crps_resolution,
    "logcrps": scoring.logcrps,
    "logcrps_reliability": scoring.logcrps_reliability,
    "logcrps_resolution": scoring.logcrps_resolution,
    "dbcrps": scoring.dbcrps,
    "dbcrps_reliability": scoring.dbcrps_reliability,
    "dbcrps_resolution": scoring.dbcrps_resolution,
}


def _to(ctx: SamplingContext, a: float, b: float) -> Quantity:
    return distributions.to(a, b, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng)


def _lognormal(ctx: SamplingContext, a: float, b: float) -> Quantity:
    return distributions.lognormal(a, b, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng)


def _normal(ctx: SamplingContext, a: float, b: float) -> Quantity:
    return distributions.normal(a, b, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng)


def _uniform(ctx: SamplingContext, a: float, b: float) -> Quantity:
    return distributions.uniform(a, b, n=ctx.sample_count, rng=ctx.rng)


def _plusminus(ctx: SamplingContext, mean: float, std: float) -> Quantity:
    return distributions.plusminus(mean, std, n=ctx.sample_count, rng=ctx.rng)


def _outof(ctx: SamplingContext, successes: float, total: float) -> Quantity:
    return distributions.outof(successes, total, n=ctx.sample_count, rng=ctx.rng)


def _against(ctx: SamplingContext, for_count: float, against_count: float) -> Quantity:
    return distributions.against(for_count, against_count, n=ctx.sample_count, rng=ctx.rng)


def _beta(ctx: SamplingContext, alpha: float, beta: float) -> Quantity:
    return distributions.beta(alpha, beta, n=ctx.sample_count, rng=ctx.rng)


def _gamma(ctx: SamplingContext, shape: float, scale: float = 1.0) -> Quantity:
    return distributions.gamma(shape, scale, n=ctx.sample_count, rng=ctx.rng)


def _poisson(ctx: SamplingContext, lam: float) -> Quantity:
    return distributions.poisson(lam, n=ctx.sample_count, rng=ctx.rng)


def _exponential(ctx: SamplingContext, rate: float) -> Quantity:
    return distributions.exponential(rate, n=ctx.sample_count, rng=ctx.rng)


def _exponential_mean(ctx: SamplingContext, mean: float) -> Quantity:
    return distributions.exponential_mean(mean, n=ctx.sample_count, rng=ctx.rng)


def _binomial(ctx: SamplingContext, trials: float, p: float) -> Quantity:
    return distributions.binomial(trials, p, n=ctx.sample_count, rng=ctx.rng)


def _percent(ctx: SamplingContext, percentage: float) -> Quantity:
    return distributions.percent(percentage, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng)


def _db(ctx: SamplingContext, decibels: float = 1.0) -> Quantity:
    return distributions.db(decibels, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng)


DISTRIBUTION_FUNCTIONS: Dict[str, Callable[..., Quantity]] = {
    "to": _to,
    "lognormal": _lognormal,
    "normal": _normal,
    "uniform": _uniform,
    "plusminus": _plusminus,
    "outof": _outof,
    "against": _against,
    "beta": _beta,
    "gamma": _gamma,
    "poisson": _poisson,
    "exponential": _exponential,
    "exponential_mean": _exponential_mean,
    "binomial": _binomial,
    "percent": _percent,
    "db": _db,
}


def builtin_names():
    return list(DISTRIBUTION_FUNCTIONS) + list(MATH_FUNCTIONS)


def raw_argument(q: Quantity) -> float:
    """Reduce a Quantity argument to a plain number for distribution constructors."""
    if not isinstance(q, Quantity):
        raise InvalidParameterError(f"Expected a quantity argument, got {q!r}")
    return q.value if q.is_scalar() else q.mean()
