"""Units as ordered products of named terms.

A :class:`Unit` keeps each term as the user wrote it (``meters``, ``km``)
together with the definition it resolves to. Multiplication and division
canonicalize the result: terms with the same base merge even when their
prefixes differ, and the numeric scale released by the merge is handed back
to the caller so it can be applied to the values.

Example:
    >>> unit, scale = parse_unit("km")[0].divide(parse_unit("m")[0])
    >>> str(unit), scale
    ('', 1000.0)
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from fractions import Fraction
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import IncompatibleUnitsError, InvalidParameterError, ParseError, UnknownUnitError
from ..suggestions import find_similar
from . import vocabulary
from .dimensions import DIMENSIONLESS, SI_BASE_SYMBOLS, Dimension, Exponent, as_fraction
from .vocabulary import UnitDefinition

logger = logging.getLogger(__name__)

UNIT_ALIASES: Dict[str, str] = {
    # Time
    "yr": "year",
    "yrs": "year",
    "mo": "month",
    "mos": "month",
    "wk": "week",
    "wks": "week",
    "d": "day",
    "hr": "hour",
    "hrs": "hour",
    "min": "minute",
    "mins": "minute",
    "secs": "second",
    "ms": "millisecond",
    "us": "microsecond",
    "ns": "nanosecond",
    "fortnight": "336 hour",
    "fortnights": "336 hour",
    "decade": "3652.425 day",
    "decades": "3652.425 day",
    "century": "36524.25 day",
    "centuries": "36524.25 day",
    "millennium": "365242.5 day",
    "millennia": "365242.5 day",
    # Length
    "yds": "yard",
    # Mass
    "lbs": "pound",
    # Speed
    "mph": "mile/hour",
    "kph": "km/hour",
    "kmh": "km/hour",
    "kmph": "km/hour",
    "mps": "m/s",
    "fps": "foot/second",
    "kn": "knot",
    "kt": "knot",
    "kts": "knot",
    # Volume
    "gal": "gallon",
    "gals": "gallon",
    "qt": "quart",
    "pt": "pint",
    "tbsp": "tablespoon",
    "Tbsp": "tablespoon",
    "tsp": "teaspoon",
    "floz": "fluidounce",
    "cc": "cm^3",
    # Area
    "sqft": "foot^2",
    "sqm": "m^2",
    "sqkm": "km^2",
    "sqmi": "mile^2",
    "sqyd": "yard^2",
    "sqin": "inch^2",
    "ha": "hectare",
    # Energy
    "Cal": "kilocalorie",
    "kWh": "kW hour",
    "kwh": "kW hour",
    "Wh": "W hour",
    "wh": "W hour",
    "ev": "electronvolt",
    # Pressure
    "atm": "atmosphere",
    # Temperature
    "celsius": "degC",
    "fahrenheit": "degF",
    # Frequency
    "hz": "hertz",
    "khz": "kilohertz",
    "mhz": "megahertz",
    "ghz": "gigahertz",
    # Data
    "KB": "kilobyte",
    # Angle
    "arcminute": "arcmin",
    "arcsecond": "arcsec",
    # Astronomy
    "lyr": "lightyear",
    # Counts
    "dozen": "12",
    "doz": "12",
    "gross": "144",
    "score": "20",
    "pair": "2",
    "pairs": "2",
    # Rates
    "rpm": "1/minute",
    "rps": "1/second",
    "bpm": "1/minute",
}


@dataclass(frozen=True)
class UnitTerm:
    """A single ``symbol^power`` factor of a unit."""

    symbol: str
    definition: UnitDefinition
    power: Fraction = Fraction(1)

    def with_power(self, power: Fraction) -> "UnitTerm":
        return UnitTerm(self.symbol, self.definition, power)

    def render(self, power: Optional[Fraction] = None) -> str:
        p = self.power if power is None else power
        if p == 1:
            return self.symbol
        if p.denominator == 1:
            return f"{self.symbol}^{p.numerator}"
        return f"{self.symbol}^{float(p):g}"


class Unit:
    """Canonical product of unit terms.

    Two units compare equal when they have the same dimension and the same
    conversion factor to SI, regardless of spelling. Use :meth:`equal_base`
    to compare dimensions only.
    """

    __slots__ = ("terms",)

    def __init__(self, terms: Sequence[UnitTerm] = ()):
        self.terms: Tuple[UnitTerm, ...] = tuple(terms)

    @classmethod
    def parse(cls, text: Optional[str]) -> Tuple["Unit", float]:
        """Parse a unit string, returning the unit and the value scale it implies."""
        return parse_unit(text)

    @property
    def dimension(self) -> Dimension:
        dim = DIMENSIONLESS
        for term in self.terms:
            dim = dim.multiply(term.definition.dimension.pow(term.power))
        return dim

    @property
    def factor(self) -> float:
        """Size of one of this unit in SI base units."""
        f = 1.0
        for term in self.terms:
            f *= term.definition.factor ** float(term.power)
        return f

    @property
    def is_dimensionless(self) -> bool:
        return self.dimension.is_dimensionless

    def equal_base(self, other: "Unit") -> bool:
        return self.dimension == other.dimension

    def multiply(self, other: "Unit") -> Tuple["Unit", float]:
        return canonicalize(self.terms + other.terms)

    def divide(self, other: "Unit") -> Tuple["Unit", float]:
        inverted = tuple(t.with_power(-t.power) for t in other.terms)
        return canonicalize(self.terms + inverted)

    def pow(self, k: Exponent) -> "Unit":
        if not self.terms:
            return self
        if not math.isfinite(float(k)):
            raise InvalidParameterError(f"Cannot raise unit '{self}' to the non-finite power {k}")
        k = as_fraction(k)
        unit, _ = canonicalize(tuple(t.with_power(t.power * k) for t in self.terms))
        return unit

    def conversion_factor(self, target: "Unit") -> float:
        """Multiplier taking values in this unit to values in ``target``."""
        if not self.equal_base(target):
            raise IncompatibleUnitsError(
                f"Cannot convert from '{self}' to '{target}': "
                f"dimensions {self.dimension} and {target.dimension} differ"
            )
        return self.factor / target.factor

    def to_si(self) -> Tuple["Unit", float]:
        """SI base representation and the factor taking values into it."""
        dim = self.dimension
        terms: List[UnitTerm] = []
        for symbol, power in zip(SI_BASE_SYMBOLS, dim.exponents):
            if power != 0:
                terms.append(UnitTerm(symbol, vocabulary.lookup(symbol), power))
        for label, power in dim.custom:
            terms.append(UnitTerm(f"'{label}", custom_definition(label), power))
        return Unit(_ordered(terms)), self.factor

    def dimension_name(self) -> Optional[str]:
        return self.dimension.name()

    def with_dimension(self) -> str:
        """Render as ``"m^3 {volume}"`` when the dimension has a name."""
        text = str(self)
        name = self.dimension_name()
        if name and name != "dimensionless":
            return f"{text} {{{name}}}"
        return text

    def __eq__(self, other) -> bool:
        if not isinstance(other, Unit):
            return NotImplemented
        return self.equal_base(other) and math.isclose(self.factor, other.factor, rel_tol=1e-12)

    def __hash__(self) -> int:
        return hash(self.dimension)

    def __str__(self) -> str:
        numerator = [t for t in self.terms if t.power > 0]
        denominator = [t for t in self.terms if t.power < 0]
        num = " ".join(t.render() for t in numerator)
        if not denominator:
            return num
        den = " ".join(t.render(-t.power) for t in denominator)
        if len(denominator) > 1:
            den = f"({den})"
        return f"{num or '1'} / {den}"

    def __repr__(self) -> str:
        return f"Unit({str(self)!r})"


DIMENSIONLESS_UNIT = Unit()


def _ordered(terms: Sequence[UnitTerm]) -> Tuple[UnitTerm, ...]:
    return tuple([t for t in terms if t.power > 0] + [t for t in terms if t.power < 0])


def canonicalize(terms: Sequence[UnitTerm]) -> Tuple[Unit, float]:
    """Merge same-base terms and fold dimensionless factors into a scale.

    Returns:
        tuple[Unit, float]: The canonical unit and the factor every value
        must be multiplied by to keep the quantity unchanged.
    """
    scale = 1.0
    merged: List[UnitTerm] = []
    index: Dict[str, int] = {}
    for term in terms:
        if term.power == 0:
            continue
        definition = term.definition
        if definition.dimension.is_dimensionless:
            scale *= definition.factor ** float(term.power)
            continue
        key = definition.base
        if key in index:
            first = merged[index[key]]
            scale *= (definition.factor / first.definition.factor) ** float(term.power)
            merged[index[key]] = first.with_power(first.power + term.power)
        else:
            index[key] = len(merged)
            merged.append(term)
    kept = [t for t in merged if t.power != 0]
    unit = Unit(_ordered(kept))
    if kept and unit.dimension.is_dimensionless:
        scale *= unit.factor
        unit = DIMENSIONLESS_UNIT
    return unit, scale


def custom_definition(label: str) -> UnitDefinition:
    """Opaque definition for a tick-prefixed custom unit such as ``'widget``."""
    label = label.lstrip("'")
    return UnitDefinition(label, Dimension.custom_label(label), 1.0, f"'{label}")


_TOKEN = re.compile(
    r"\s*(?:"
    r"(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)"
    r"|(?P<name>'?[A-Za-z_°µμΩ$][A-Za-z0-9_°µμΩ$]*)"
    r"|(?P<op>\*\*|[*/^()·-])"
    r")"
)


def _tokenize(text: str) -> List[Tuple[str, str]]:
    tokens: List[Tuple[str, str]] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None or match.end() == pos:
            raise ParseError(f"Unexpected character {text[pos]!r} in unit '{text}'", 1, pos + 1)
        kind = match.lastgroup
        value = match.group(kind)
        if kind == "name" and value == "per":
            kind, value = "op", "/"
        tokens.append((kind, value))
        pos = match.end()
    return tokens


class _UnitParser:
    """Recursive-descent parser for unit strings.

    Grammar::

        expr    := product (("/" | "per") product)*
        product := power (("*" | "·")? power)*
        power   := atom (("^" | "**") exponent)?
        atom    := name | number | "(" expr ")"
    """

    def __init__(self, text: str):
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def peek(self) -> Optional[Tuple[str, str]]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self) -> Tuple[str, str]:
        token = self.peek()
        if token is None:
            raise ParseError(f"Unexpected end of unit '{self.text}'")
        self.pos += 1
        return token

    def expect(self, value: str) -> None:
        kind, got = self.take()
        if got != value:
            raise ParseError(f"Expected {value!r} in unit '{self.text}', got {got!r}")

    def parse(self) -> Tuple[List[UnitTerm], float]:
        terms, scale = self.expr()
        if self.peek() is not None:
            raise ParseError(f"Unexpected {self.peek()[1]!r} in unit '{self.text}'")
        return terms, scale

    def expr(self) -> Tuple[List[UnitTerm], float]:
        terms, scale = self.product()
        while self.peek() == ("op", "/"):
            self.take()
            den_terms, den_scale = self.product()
            terms = terms + [t.with_power(-t.power) for t in den_terms]
            scale /= den_scale
        return terms, scale

    def product(self) -> Tuple[List[UnitTerm], float]:
        terms, scale = self.power()
        while True:
            token = self.peek()
            if token in (("op", "*"), ("op", "·")):
                self.take()
            elif token is None or not (token[0] in ("name", "number") or token == ("op", "(")):
                break
            more, more_scale = self.power()
            terms = terms + more
            scale *= more_scale
        return terms, scale

    def power(self) -> Tuple[List[UnitTerm], float]:
        terms, scale = self.atom()
        if self.peek() in (("op", "^"), ("op", "**")):
            self.take()
            k = self.exponent()
            terms = [t.with_power(t.power * k) for t in terms]
            scale = scale ** float(k)
        return terms, scale

    def exponent(self) -> Fraction:
        if self.peek() == ("op", "("):
            self.take()
            k = self.exponent()
            if self.peek() == ("op", "/"):
                self.take()
                k = k / self.exponent()
            self.expect(")")
            return k
        sign = 1
        if self.peek() == ("op", "-"):
            self.take()
            sign = -1
        kind, value = self.take()
        if kind != "number":
            raise ParseError(f"Expected exponent in unit '{self.text}', got {value!r}")
        return sign * as_fraction(float(value))

    def atom(self) -> Tuple[List[UnitTerm], float]:
        kind, value = self.take()
        if kind == "number":
            return [], float(value)
        if kind == "name":
            definition, scale, symbol = resolve_name(value)
            return [UnitTerm(symbol, definition)], scale
        if value == "(":
            result = self.expr()
            self.expect(")")
            return result
        raise ParseError(f"Unexpected {value!r} in unit '{self.text}'")


def resolve_name(name: str) -> Tuple[UnitDefinition, float, str]:
    """Resolve one unit token to ``(definition, value_scale, display_symbol)``.

    Order: custom tick label, alias table, exact vocabulary, plural removal,
    then SI-prefix extraction onto a base unit (``milliyear`` becomes
    ``year`` with scale 1e-3).

    Raises:
        UnknownUnitError: When nothing matches; carries suggestions.
    """
    if name.startswith("'"):
        return custom_definition(name), 1.0, name
    if name in vocabulary.RESERVED_NAMES:
        raise UnknownUnitError(name)
    alias = _ALIAS_DEFINITIONS.get(name)
    if alias is not None:
        return alias, 1.0, name
    definition = vocabulary.lookup(name)
    if definition is not None:
        return definition, 1.0, name
    single = vocabulary.singular(name)
    definition = vocabulary.lookup(single)
    if definition is not None:
        return definition, 1.0, name
    split = vocabulary.extract_prefix(name)
    if split is not None:
        power, base = split
        for candidate in (base, vocabulary.singular(base)):
            definition = vocabulary.lookup(candidate) or _ALIAS_DEFINITIONS.get(candidate)
            if definition is not None and not definition.dimension.is_dimensionless:
                logger.debug("Normalized unit %s to %s x 1e%d", name, base, power)
                return definition, 10.0**power, base
    raise UnknownUnitError(name, find_similar(name, known_unit_names()))


def known_unit_names() -> List[str]:
    return vocabulary.known_unit_names(UNIT_ALIASES)


def is_unit_name(name: str) -> bool:
    """Whether ``name`` resolves to a unit (tick labels always do)."""
    try:
        resolve_name(name)
    except UnknownUnitError:
        return False
    return True


def _alias_definition(alias: str, target: str) -> UnitDefinition:
    direct = vocabulary.lookup(target)
    if direct is not None:
        return direct
    terms, scale = _UnitParser(target).parse()
    unit, collapse = canonicalize(terms)
    return UnitDefinition(alias, unit.dimension, unit.factor * scale * collapse, alias)


_ALIAS_DEFINITIONS: Dict[str, UnitDefinition] = {}
for _alias, _target in UNIT_ALIASES.items():
    _ALIAS_DEFINITIONS[_alias] = _alias_definition(_alias, _target)


@lru_cache(maxsize=1024)
def _parse_cached(text: str) -> Tuple[Unit, float]:
    terms, scale = _UnitParser(text).parse()
    unit, collapse = canonicalize(terms)
    return unit, scale * collapse


def parse_unit(text: Optional[str]) -> Tuple[Unit, float]:
    """Parse a unit string such as ``"kg m / s^2"`` or ``"mph"``.

    Returns:
        tuple[Unit, float]: The canonical unit and the scale factor to fold
        into the value (``"dozen"`` gives the dimensionless unit and 12).

    Raises:
        UnknownUnitError: If a token is not a known unit.
        ParseError: If the string is malformed.
    """
    if text is None or not str(text).strip():
        return DIMENSIONLESS_UNIT, 1.0
    return _parse_cached(str(text).strip())
