"""The Quantity value type: a scalar or a Monte Carlo particle set with a unit."""

from __future__ import annotations

import math
from typing import Callable, Optional, Sequence, Union

import numpy as np

from ..errors import IncompatibleUnitsError, InvalidParameterError, OutOfRangeError
from .units import DIMENSIONLESS_UNIT, Unit, parse_unit

Number = Union[int, float]
ValueLike = Union[Number, Sequence[float], np.ndarray]
UnitLike = Union[str, Unit, None]

EQUALITY_TOLERANCE = 1e-10

_COMPARATORS = {
    ">": np.greater,
    "<": np.less,
    ">=": np.greater_equal,
    "<=": np.less_equal,
    "==": lambda a, b: np.abs(a - b) < EQUALITY_TOLERANCE,
    "!=": lambda a, b: np.abs(a - b) >= EQUALITY_TOLERANCE,
}


def _freeze(values: np.ndarray) -> np.ndarray:
    values.setflags(write=False)
    return values


def _broadcast(values: np.ndarray, n: int) -> np.ndarray:
    """Repeat ``values`` cyclically to length ``n`` (modular wraparound)."""
    if len(values) == n:
        return values
    return np.resize(values, n)


class Quantity:
    """A physical quantity that is either a scalar or a particle distribution.

    Args:
        value: A number (scalar state) or a non-empty sequence of samples
            (distribution state).
        unit: Unit string such as ``"meters"`` or ``"kg m / s^2"``, a
            :class:`~neofermi.core.units.Unit`, or ``None`` for
            dimensionless. Scale factors implied by the string (``"dozen"``,
            ``"milliyear"``) are folded into the value.

    Raises:
        InvalidParameterError: If ``value`` is an empty sequence.
        UnknownUnitError: If the unit string contains an unknown unit.

    Note:
        Quantities are immutable. Every operation returns a new Quantity and
        particle arrays are exposed read-only.
    """

    __slots__ = ("_value", "_unit")

    def __init__(self, value: ValueLike, unit: UnitLike = None):
        if isinstance(unit, Unit):
            parsed, scale = unit, 1.0
        else:
            parsed, scale = parse_unit(unit)
        self._unit = parsed
        self._value = self._coerce(value, scale)

    @staticmethod
    def _coerce(value: ValueLike, scale: float):
        if np.ndim(value) == 0:
            return float(value) * scale
        arr = np.asarray(value, dtype=float).ravel()
        if arr.size == 0:
            raise InvalidParameterError("Quantity requires at least one sample")
        arr = arr * scale if scale != 1.0 else arr.copy()
        return _freeze(arr)

    @classmethod
    def _raw(cls, value, unit: Unit) -> "Quantity":
        """Build without parsing; ``value`` must already be float or a fresh array."""
        q = cls.__new__(cls)
        q._unit = unit
        if isinstance(value, np.ndarray) and value.ndim > 0:
            q._value = _freeze(np.asarray(value, dtype=float))
        else:
            q._value = float(value)
        return q

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def value(self) -> Union[float, np.ndarray]:
        return self._value

    @property
    def unit(self) -> Unit:
        return self._unit

    @property
    def unit_string(self) -> str:
        return str(self._unit)

    def is_scalar(self) -> bool:
        return not isinstance(self._value, np.ndarray)

    def is_distribution(self) -> bool:
        return isinstance(self._value, np.ndarray)

    @property
    def sample_count(self) -> int:
        return 1 if self.is_scalar() else int(self._value.size)

    def to_particles(self) -> np.ndarray:
        """Return a writable copy of the samples (a singleton for scalars)."""
        if self.is_scalar():
            return np.array([self._value])
        return self._value.copy()

    def _particles(self) -> np.ndarray:
        if self.is_scalar():
            return np.array([self._value])
        return self._value

    def dimension_name(self) -> Optional[str]:
        return self._unit.dimension_name()

    def unit_with_dimension(self) -> str:
        return self._unit.with_dimension()

    def apply(self, func: Callable[[np.ndarray], np.ndarray], unit: Optional[Unit] = None) -> "Quantity":
        """Apply an element-wise numpy function, keeping the scalar/distribution state."""
        result = func(self._particles())
        target = self._unit if unit is None else unit
        if self.is_scalar():
            return Quantity._raw(float(np.asarray(result).reshape(-1)[0]), target)
        return Quantity._raw(np.asarray(result, dtype=float), target)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _combine(self, other: "Quantity", op, unit: Unit, scale: float = 1.0, other_factor: float = 1.0) -> "Quantity":
        with np.errstate(divide="ignore", invalid="ignore"):
            if self.is_scalar() and other.is_scalar():
                result = op(np.float64(self._value), np.float64(other._value) * other_factor)
                return Quantity._raw(float(result) * scale, unit)
            a = self._particles()
            b = other._particles()
            n = max(len(a), len(b))
            result = op(_broadcast(a, n), _broadcast(b, n) * other_factor)
        if scale != 1.0:
            result = result * scale
        return Quantity._raw(np.asarray(result, dtype=float), unit)

    def _require_same_base(self, other: "Quantity", action: str) -> float:
        if not self._unit.equal_base(other._unit):
            raise IncompatibleUnitsError(
                f"Cannot {action} quantities with incompatible units: "
                f"'{self._unit}' and '{other._unit}'"
            )
        return other._unit.conversion_factor(self._unit)

    def add(self, other: "Quantity") -> "Quantity":
        other = as_quantity(other)
        factor = self._require_same_base(other, "add")
        return self._combine(other, np.add, self._unit, other_factor=factor)

    def subtract(self, other: "Quantity") -> "Quantity":
        other = as_quantity(other)
        factor = self._require_same_base(other, "subtract")
        return self._combine(other, np.subtract, self._unit, other_factor=factor)

    def multiply(self, other: "Quantity") -> "Quantity":
        other = as_quantity(other)
        unit, scale = self._unit.multiply(other._unit)
        return self._combine(other, np.multiply, unit, scale)

    def divide(self, other: "Quantity") -> "Quantity":
        other = as_quantity(other)
        unit, scale = self._unit.divide(other._unit)
        return self._combine(other, np.divide, unit, scale)

    def pow(self, exponent: Number) -> "Quantity":
        k = float(exponent)
        with np.errstate(invalid="ignore", divide="ignore"):
            return self.apply(lambda x: np.power(x, k), self._unit.pow(k))

    def negate(self) -> "Quantity":
        return self.apply(np.negative)

    def compare(self, other: "Quantity", op: str) -> "Quantity":
        """Element-wise comparison returning dimensionless 1/0 values.

        Raises:
            IncompatibleUnitsError: If the operands are not base-equal.
            ValueError: If ``op`` is not a known comparison operator.
        """
        if op not in _COMPARATORS:
            raise ValueError(f"Unknown comparison operator: {op}")
        other = as_quantity(other)
        factor = self._require_same_base(other, "compare")
        compare = _COMPARATORS[op]
        result = self._combine(other, lambda a, b: compare(a, b).astype(float), DIMENSIONLESS_UNIT, other_factor=factor)
        return result

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to(self, target: UnitLike) -> "Quantity":
        """Convert into ``target``, which must be base-equal to this unit.

        Raises:
            IncompatibleUnitsError: If the dimensions differ.
        """
        unit = target if isinstance(target, Unit) else parse_unit(target)[0]
        factor = self._unit.conversion_factor(unit)
        return self.apply(lambda x: x * factor, unit)

    def to_si(self) -> "Quantity":
        """Convert into SI base units (``kg m s A K mol cd rad bit``)."""
        unit, factor = self._unit.to_si()
        return self.apply(lambda x: x * factor, unit)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def mean(self) -> float:
        if self.is_scalar():
            return self._value
        return float(np.mean(self._value))

    def median(self) -> float:
        if self.is_scalar():
            return self._value
        return float(np.median(self._value))

    def std(self) -> float:
        """Population standard deviation (0 for scalars)."""
        if self.is_scalar():
            return 0.0
        return float(np.std(self._value))

    def variance(self) -> float:
        if self.is_scalar():
            return 0.0
        return float(np.var(self._value))

    def min(self) -> float:
        return float(np.min(self._particles()))

    def max(self) -> float:
        return float(np.max(self._particles()))

    def percentile(self, p: float) -> float:
        """Order statistic at ``floor(p * n)``, clamped to the last sample.

        Raises:
            OutOfRangeError: If ``p`` is outside [0, 1].
        """
        if not 0.0 <= p <= 1.0:
            raise OutOfRangeError(f"Percentile must be between 0 and 1, got {p}")
        if self.is_scalar():
            return self._value
        ordered = np.sort(self._value)
        n = len(ordered)
        return float(ordered[min(int(math.floor(p * n)), n - 1)])

    # ------------------------------------------------------------------
    # Python protocol
    # ------------------------------------------------------------------

    def __add__(self, other):
        return self.add(other)

    def __radd__(self, other):
        return as_quantity(other).add(self)

    def __sub__(self, other):
        return self.subtract(other)

    def __rsub__(self, other):
        return as_quantity(other).subtract(self)

    def __mul__(self, other):
        return self.multiply(other)

    def __rmul__(self, other):
        return as_quantity(other).multiply(self)

    def __truediv__(self, other):
        return self.divide(other)

    def __rtruediv__(self, other):
        return as_quantity(other).divide(self)

    def __pow__(self, exponent):
        if isinstance(exponent, Quantity):
            if not exponent.is_scalar() or not exponent.unit.is_dimensionless:
                raise InvalidParameterError("Exponent must be a dimensionless scalar")
            exponent = exponent.value
        return self.pow(exponent)

    def __neg__(self):
        return self.negate()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Quantity):
            return NotImplemented
        if self._unit != other._unit or self.is_scalar() != other.is_scalar():
            return False
        if self.is_scalar():
            return self._value == other._value
        return bool(np.array_equal(self._value, other._value))

    __hash__ = None

    def __str__(self) -> str:
        unit = self.unit_string
        if self.is_scalar():
            return f"{_fmt(self._value)} {unit}".strip()
        return (
            f"{_fmt(self.mean())} [{_fmt(self.percentile(0.05))}, "
            f"{_fmt(self.percentile(0.95))}] {unit}"
        ).strip()

    def __repr__(self) -> str:
        if self.is_scalar():
            return f"Quantity({self._value!r}, {self.unit_string!r})"
        return f"Quantity(<{self.sample_count} samples>, {self.unit_string!r})"


def _fmt(x: float) -> str:
    return f"{x:.4g}"


def as_quantity(value) -> Quantity:
    """Wrap plain numbers and arrays as dimensionless Quantities."""
    if isinstance(value, Quantity):
        return value
    return Quantity(value)
