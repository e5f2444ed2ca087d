"""Physical dimensions as rational exponent vectors.

The basis is fixed: mass, length, time, current, temperature, amount,
luminous intensity, angle and information. Opaque custom units (``'widget``)
carry their own labelled exponents alongside the basis so that ``'widget``
and ``'gadget`` never compare as base-equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Optional, Tuple, Union

BASE_DIMENSIONS: Tuple[str, ...] = (
    "mass",
    "length",
    "time",
    "current",
    "temperature",
    "amount",
    "luminous",
    "angle",
    "information",
)

SI_BASE_SYMBOLS: Tuple[str, ...] = ("kg", "m", "s", "A", "K", "mol", "cd", "rad", "bit")

Exponent = Union[int, float, Fraction]


def as_fraction(k: Exponent) -> Fraction:
    """Convert an exponent to a Fraction, snapping floats such as 1/3."""
    if isinstance(k, Fraction):
        return k
    if isinstance(k, int):
        return Fraction(k)
    return Fraction(float(k)).limit_denominator(1000)


@dataclass(frozen=True)
class Dimension:
    """Immutable dimension vector with optional custom-label exponents."""

    exponents: Tuple[Fraction, ...] = (Fraction(0),) * len(BASE_DIMENSIONS)
    custom: Tuple[Tuple[str, Fraction], ...] = ()

    def __post_init__(self) -> None:
        if len(self.exponents) != len(BASE_DIMENSIONS):
            raise ValueError(
                f"Dimension needs {len(BASE_DIMENSIONS)} exponents, got {len(self.exponents)}"
            )

    @classmethod
    def of(cls, **powers: Exponent) -> "Dimension":
        """Build a dimension from keyword exponents, e.g. ``Dimension.of(length=1, time=-1)``."""
        unknown = set(powers) - set(BASE_DIMENSIONS)
        if unknown:
            raise ValueError(f"Unknown base dimensions: {sorted(unknown)}")
        return cls(tuple(as_fraction(powers.get(name, 0)) for name in BASE_DIMENSIONS))

    @classmethod
    def custom_label(cls, label: str) -> "Dimension":
        """Dimension of a single opaque custom unit."""
        return cls(custom=((label, Fraction(1)),))

    @property
    def is_dimensionless(self) -> bool:
        return not any(self.exponents) and not self.custom

    def multiply(self, other: "Dimension") -> "Dimension":
        return Dimension(
            tuple(a + b for a, b in zip(self.exponents, other.exponents)),
            _merge_custom(self.custom, other.custom, 1),
        )

    def divide(self, other: "Dimension") -> "Dimension":
        return Dimension(
            tuple(a - b for a, b in zip(self.exponents, other.exponents)),
            _merge_custom(self.custom, other.custom, -1),
        )

    def pow(self, k: Exponent) -> "Dimension":
        k = as_fraction(k)
        return Dimension(
            tuple(a * k for a in self.exponents),
            tuple((label, p * k) for label, p in self.custom if p * k != 0),
        )

    def equal_base(self, other: "Dimension") -> bool:
        return self == other

    def signature(self) -> Tuple[Fraction, ...]:
        return self.exponents

    def name(self) -> Optional[str]:
        """Human-readable name such as ``"volume"``, or ``None`` when unknown."""
        if self.custom:
            return None
        return DIMENSION_NAMES.get(self.exponents)

    def __str__(self) -> str:
        parts = [
            f"{name}^{_format_power(p)}" if p != 1 else name
            for name, p in zip(BASE_DIMENSIONS, self.exponents)
            if p != 0
        ]
        parts += [f"'{label}^{_format_power(p)}" if p != 1 else f"'{label}" for label, p in self.custom]
        return " ".join(parts) or "dimensionless"


def _merge_custom(a, b, sign: int) -> Tuple[Tuple[str, Fraction], ...]:
    merged: Dict[str, Fraction] = dict(a)
    for label, p in b:
        merged[label] = merged.get(label, Fraction(0)) + sign * p
    return tuple(sorted((label, p) for label, p in merged.items() if p != 0))


def _format_power(p: Fraction) -> str:
    if p.denominator == 1:
        return str(p.numerator)
    return f"{float(p):g}"


DIMENSIONLESS = Dimension()


def _sig(*values: int) -> Tuple[Fraction, ...]:
    return tuple(Fraction(v) for v in values)


# Basis order: mass, length, time, current, temperature, amount, luminous, angle, information
DIMENSION_NAMES: Dict[Tuple[Fraction, ...], str] = {
    _sig(0, 1, 0, 0, 0, 0, 0, 0, 0): "length",
    _sig(1, 0, 0, 0, 0, 0, 0, 0, 0): "mass",
    _sig(0, 0, 1, 0, 0, 0, 0, 0, 0): "time",
    _sig(0, 0, 0, 1, 0, 0, 0, 0, 0): "current",
    _sig(0, 0, 0, 0, 1, 0, 0, 0, 0): "temperature",
    _sig(0, 0, 0, 0, 0, 1, 0, 0, 0): "amount of substance",
    _sig(0, 0, 0, 0, 0, 0, 1, 0, 0): "luminous intensity",
    _sig(0, 0, 0, 0, 0, 0, 0, 1, 0): "angle",
    _sig(0, 0, 0, 0, 0, 0, 0, 0, 1): "information",
    _sig(0, 2, 0, 0, 0, 0, 0, 0, 0): "area",
    _sig(0, 3, 0, 0, 0, 0, 0, 0, 0): "volume",
    _sig(0, 0, -1, 0, 0, 0, 0, 0, 0): "frequency",
    _sig(0, 1, -1, 0, 0, 0, 0, 0, 0): "velocity",
    _sig(0, 1, -2, 0, 0, 0, 0, 0, 0): "acceleration",
    _sig(1, 1, -1, 0, 0, 0, 0, 0, 0): "momentum",
    _sig(1, 1, -2, 0, 0, 0, 0, 0, 0): "force",
    _sig(1, 2, -2, 0, 0, 0, 0, 0, 0): "energy",
    _sig(1, 2, -3, 0, 0, 0, 0, 0, 0): "power",
    _sig(1, -1, -2, 0, 0, 0, 0, 0, 0): "pressure",
    _sig(1, 2, -1, 0, 0, 0, 0, 0, 0): "angular momentum",
    _sig(1, 2, 0, 0, 0, 0, 0, 0, 0): "moment of inertia",
    _sig(0, 3, -1, 0, 0, 0, 0, 0, 0): "flow",
    _sig(1, -3, 0, 0, 0, 0, 0, 0, 0): "mass density",
    _sig(-1, 3, 0, 0, 0, 0, 0, 0, 0): "specific volume",
    _sig(1, 0, -1, 0, 0, 0, 0, 0, 0): "mass flow rate",
    _sig(0, 2, -2, 0, 0, 0, 0, 0, 0): "specific energy",
    _sig(1, 0, -2, 0, 0, 0, 0, 0, 0): "surface tension",
    _sig(0, 0, 1, 1, 0, 0, 0, 0, 0): "charge",
    _sig(1, 2, -3, -1, 0, 0, 0, 0, 0): "voltage",
    _sig(1, 2, -3, -2, 0, 0, 0, 0, 0): "resistance",
    _sig(-1, -2, 3, 2, 0, 0, 0, 0, 0): "conductance",
    _sig(1, 2, -2, -1, 0, 0, 0, 0, 0): "magnetic flux",
    _sig(1, 2, -2, -2, 0, 0, 0, 0, 0): "inductance",
    _sig(1, 0, -2, -1, 0, 0, 0, 0, 0): "magnetic flux density",
    _sig(0, 1, -2, -1, 0, 0, 0, 0, 0): "electric field strength",
    _sig(0, -1, 0, 1, 0, 0, 0, 0, 0): "magnetic field strength",
    _sig(-1, -2, 4, 2, 0, 0, 0, 0, 0): "capacitance",
    _sig(0, -2, 0, 1, 0, 0, 0, 0, 0): "current density",
    _sig(0, -2, 1, 1, 0, 0, 0, 0, 0): "surface charge density",
    _sig(0, -3, 1, 1, 0, 0, 0, 0, 0): "charge density",
    _sig(1, 2, -2, 0, -1, 0, 0, 0, 0): "heat capacity",
    _sig(0, 2, -2, 0, -1, 0, 0, 0, 0): "specific heat capacity",
    _sig(1, 1, -3, 0, -1, 0, 0, 0, 0): "thermal conductivity",
    _sig(0, -3, 0, 0, 0, 1, 0, 0, 0): "concentration",
    _sig(0, 0, -1, 0, 0, 0, 0, 0, 1): "data rate",
    _sig(0, 0, 0, 0, 0, 0, 0, 0, 0): "dimensionless",
}
