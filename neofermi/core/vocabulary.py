"""Unit vocabulary used by estimation expressions.

Every name the unit parser accepts is registered here when the module is
imported: base and derived units with their plural and symbol forms, the
SI-prefixed forms of prefixable units, and dimensionless counting words.
Informal aliases whose targets are themselves unit expressions (``mph``,
``kWh``) are resolved in :mod:`neofermi.core.units`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .dimensions import DIMENSIONLESS, Dimension


@dataclass(frozen=True)
class UnitDefinition:
    """One named unit.

    Attributes:
        name: Canonical name (``"meter"``, ``"kilometer"``).
        dimension: Dimension vector.
        factor: Multiplier converting one of this unit to SI base units.
        base: Grouping key; prefixed forms share the key of their base unit.
        prefixable: Whether SI prefixes may be attached.
    """

    name: str
    dimension: Dimension
    factor: float
    base: str
    prefixable: bool = False


SI_PREFIXES: Tuple[Tuple[str, str, int], ...] = (
    ("yotta", "Y", 24),
    ("zetta", "Z", 21),
    ("exa", "E", 18),
    ("peta", "P", 15),
    ("tera", "T", 12),
    ("giga", "G", 9),
    ("mega", "M", 6),
    ("kilo", "k", 3),
    ("hecto", "h", 2),
    ("deca", "da", 1),
    ("deka", "da", 1),
    ("deci", "d", -1),
    ("centi", "c", -2),
    ("milli", "m", -3),
    ("micro", "u", -6),
    ("nano", "n", -9),
    ("pico", "p", -12),
    ("femto", "f", -15),
    ("atto", "a", -18),
    ("zepto", "z", -21),
    ("yocto", "y", -24),
)

_MICRO_SIGNS = ("μ", "µ")

MULTIPLIERS: Dict[str, float] = {
    "hundred": 1e2,
    "thousand": 1e3,
    "million": 1e6,
    "billion": 1e9,
    "trillion": 1e12,
    "quadrillion": 1e15,
    "quintillion": 1e18,
    "sextillion": 1e21,
    "septillion": 1e24,
}

_IRREGULAR_PLURALS = {"feet": "foot", "inches": "inch"}

_D = Dimension.of
LENGTH = _D(length=1)
MASS = _D(mass=1)
TIME = _D(time=1)
ANGLE = _D(angle=1)

# (name, symbols, plurals, dimension, factor, prefixable)
_BASE_UNITS: Tuple[Tuple[str, Tuple[str, ...], Tuple[str, ...], Dimension, float, bool], ...] = (
    # Length
    ("meter", ("m", "metre"), ("meters", "metres"), LENGTH, 1.0, True),
    ("inch", ("in",), ("inches",), LENGTH, 0.0254, False),
    ("foot", ("ft",), ("feet",), LENGTH, 0.3048, False),
    ("yard", ("yd",), ("yards",), LENGTH, 0.9144, False),
    ("mile", ("mi",), ("miles",), LENGTH, 1609.344, False),
    ("nauticalmile", ("nmi",), ("nauticalmiles",), LENGTH, 1852.0, False),
    ("angstrom", (), ("angstroms",), LENGTH, 1e-10, False),
    ("lightyear", ("ly",), ("lightyears",), LENGTH, 9.4607304725808e15, False),
    ("parsec", ("pc",), ("parsecs",), LENGTH, 3.0856775814913673e16, False),
    ("AU", ("au",), (), LENGTH, 149597870700.0, False),
    # Mass
    ("gram", ("g", "gramme"), ("grams", "grammes"), MASS, 1e-3, True),
    ("tonne", ("t",), ("tonnes",), MASS, 1000.0, True),
    ("ton", (), ("tons",), MASS, 907.18474, False),
    ("pound", ("lb",), ("pounds",), MASS, 0.45359237, False),
    ("ounce", ("oz",), ("ounces",), MASS, 0.028349523125, False),
    ("stone", (), ("stones",), MASS, 6.35029318, False),
    # Time
    ("second", ("s", "sec"), ("seconds",), TIME, 1.0, True),
    ("minute", (), ("minutes",), TIME, 60.0, False),
    ("hour", ("h",), ("hours",), TIME, 3600.0, False),
    ("day", (), ("days",), TIME, 86400.0, False),
    ("week", (), ("weeks",), TIME, 604800.0, False),
    ("month", (), ("months",), TIME, 2629800.0, False),
    ("year", (), ("years",), TIME, 31557600.0, False),
    # Base SI
    ("ampere", ("A", "amp"), ("amperes", "amps"), _D(current=1), 1.0, True),
    ("kelvin", ("K",), ("kelvins",), _D(temperature=1), 1.0, True),
    ("degC", (), (), _D(temperature=1), 1.0, False),
    ("degF", (), (), _D(temperature=1), 5.0 / 9.0, False),
    ("mole", ("mol",), ("moles",), _D(amount=1), 1.0, True),
    ("candela", ("cd",), ("candelas",), _D(luminous=1), 1.0, True),
    # Angle
    ("radian", ("rad",), ("radians",), ANGLE, 1.0, True),
    ("degree", ("deg",), ("degrees",), ANGLE, math.pi / 180.0, False),
    ("arcmin", (), ("arcmins",), ANGLE, math.pi / 10800.0, False),
    ("arcsec", (), ("arcsecs",), ANGLE, math.pi / 648000.0, False),
    ("steradian", ("sr",), ("steradians",), _D(angle=2), 1.0, False),
    # Information
    ("bit", ("b",), ("bits",), _D(information=1), 1.0, True),
    ("byte", ("B",), ("bytes",), _D(information=1), 8.0, True),
    # Area and volume
    ("acre", (), ("acres",), _D(length=2), 4046.8564224, False),
    ("hectare", (), ("hectares",), _D(length=2), 1e4, False),
    ("liter", ("L", "l", "litre"), ("liters", "litres"), _D(length=3), 1e-3, True),
    ("gallon", (), ("gallons",), _D(length=3), 3.785411784e-3, False),
    ("quart", (), ("quarts",), _D(length=3), 9.46352946e-4, False),
    ("pint", (), ("pints",), _D(length=3), 4.73176473e-4, False),
    ("cup", (), ("cups",), _D(length=3), 2.365882365e-4, False),
    ("tablespoon", (), ("tablespoons",), _D(length=3), 1.478676478125e-5, False),
    ("teaspoon", (), ("teaspoons",), _D(length=3), 4.92892159375e-6, False),
    ("fluidounce", (), ("fluidounces",), _D(length=3), 2.95735295625e-5, False),
    # Mechanics
    ("newton", ("N",), ("newtons",), _D(mass=1, length=1, time=-2), 1.0, True),
    ("dyne", (), ("dynes",), _D(mass=1, length=1, time=-2), 1e-5, False),
    ("poundforce", ("lbf",), (), _D(mass=1, length=1, time=-2), 4.4482216152605, False),
    ("joule", ("J",), ("joules",), _D(mass=1, length=2, time=-2), 1.0, True),
    ("calorie", ("cal",), ("calories",), _D(mass=1, length=2, time=-2), 4.184, True),
    ("electronvolt", ("eV",), ("electronvolts",), _D(mass=1, length=2, time=-2), 1.602176634e-19, True),
    ("erg", (), ("ergs",), _D(mass=1, length=2, time=-2), 1e-7, False),
    ("BTU", (), (), _D(mass=1, length=2, time=-2), 1055.05585262, False),
    ("watt", ("W",), ("watts",), _D(mass=1, length=2, time=-3), 1.0, True),
    ("horsepower", ("hp",), (), _D(mass=1, length=2, time=-3), 745.69987158227, False),
    ("pascal", ("Pa",), ("pascals",), _D(mass=1, length=-1, time=-2), 1.0, True),
    ("bar", (), ("bars",), _D(mass=1, length=-1, time=-2), 1e5, True),
    ("atmosphere", (), ("atmospheres",), _D(mass=1, length=-1, time=-2), 101325.0, False),
    ("psi", (), (), _D(mass=1, length=-1, time=-2), 6894.757293168, False),
    ("torr", (), (), _D(mass=1, length=-1, time=-2), 133.32236842105263, False),
    ("mmHg", (), (), _D(mass=1, length=-1, time=-2), 133.322387415, False),
    ("hertz", ("Hz",), (), _D(time=-1), 1.0, True),
    ("knot", (), ("knots",), _D(length=1, time=-1), 1852.0 / 3600.0, False),
    # Electromagnetism
    ("coulomb", ("C",), ("coulombs",), _D(time=1, current=1), 1.0, True),
    ("volt", ("V",), ("volts",), _D(mass=1, length=2, time=-3, current=-1), 1.0, True),
    ("ohm", (), ("ohms",), _D(mass=1, length=2, time=-3, current=-2), 1.0, True),
    ("farad", ("F",), ("farads",), _D(mass=-1, length=-2, time=4, current=2), 1.0, True),
    ("henry", ("H",), ("henries",), _D(mass=1, length=2, time=-2, current=-2), 1.0, True),
    ("siemens", ("S",), (), _D(mass=-1, length=-2, time=3, current=2), 1.0, True),
    ("weber", ("Wb",), ("webers",), _D(mass=1, length=2, time=-2, current=-1), 1.0, True),
    ("tesla", ("T",), ("teslas",), _D(mass=1, time=-2, current=-1), 1.0, True),
    # Photometry
    ("lumen", ("lm",), ("lumens",), _D(luminous=1, angle=2), 1.0, True),
    ("lux", ("lx",), (), _D(luminous=1, angle=2, length=-2), 1.0, True),
)

# Long names that also take abbreviated prefixes (mbar).
_PREFIX_SYMBOLS: Dict[str, Tuple[str, ...]] = {
    "bar": ("bar",),
    "ohm": ("ohm",),
}

# Prefixed forms that would shadow other notation.
RESERVED_NAMES = frozenset({"dB"})


def _build_vocabulary() -> Dict[str, UnitDefinition]:
    table: Dict[str, UnitDefinition] = {}

    def register(key: str, definition: UnitDefinition) -> None:
        if key not in RESERVED_NAMES:
            table.setdefault(key, definition)

    prefixable: List[Tuple[UnitDefinition, Tuple[str, ...], Tuple[str, ...]]] = []
    for name, symbols, plurals, dimension, factor, can_prefix in _BASE_UNITS:
        definition = UnitDefinition(name, dimension, factor, name, can_prefix)
        for key in (name,) + symbols + plurals:
            register(key, definition)
        if can_prefix:
            prefix_symbols = symbols + _PREFIX_SYMBOLS.get(name, ())
            long_forms = (name,) + tuple(s for s in symbols if len(s) > 3) + plurals
            prefixable.append((definition, prefix_symbols, long_forms))

    for word, factor in MULTIPLIERS.items():
        register(word, UnitDefinition(word, DIMENSIONLESS, factor, word))

    for definition, prefix_symbols, long_forms in prefixable:
        for full, abbrev, power in SI_PREFIXES:
            scaled = UnitDefinition(
                f"{full}{definition.name}",
                definition.dimension,
                definition.factor * 10.0**power,
                definition.base,
            )
            for form in long_forms:
                register(f"{full}{form}", scaled)
            abbrevs = (abbrev,) + (_MICRO_SIGNS if full == "micro" else ())
            for a in abbrevs:
                for symbol in prefix_symbols:
                    register(f"{a}{symbol}", scaled)
    return table


VOCABULARY: Dict[str, UnitDefinition] = _build_vocabulary()

_ABBREVIATIONS: Tuple[Tuple[str, int], ...] = tuple(
    sorted(
        {(abbrev, power) for _, abbrev, power in SI_PREFIXES}
        | {(sign, -6) for sign in _MICRO_SIGNS},
        key=lambda item: -len(item[0]),
    )
)


def lookup(name: str) -> Optional[UnitDefinition]:
    """Return the definition registered under ``name`` exactly."""
    return VOCABULARY.get(name)


def singular(name: str) -> str:
    """Strip a plural suffix: ``feet`` to ``foot``, ``meters`` to ``meter``."""
    irregular = _IRREGULAR_PLURALS.get(name.lower())
    if irregular:
        return irregular
    if len(name) > 1 and name.endswith("s"):
        return name[:-1]
    return name


def extract_prefix(name: str) -> Optional[Tuple[int, str]]:
    """Split ``milliyear`` or ``Myear`` into ``(power, base_name)``.

    Full prefix names are matched case-insensitively first, then
    abbreviations case-sensitively, longest first.
    """
    lower = name.lower()
    for full, _, power in SI_PREFIXES:
        if lower.startswith(full) and len(name) > len(full):
            return power, name[len(full):]
    for abbrev, power in _ABBREVIATIONS:
        if name.startswith(abbrev) and len(name) > len(abbrev):
            return power, name[len(abbrev):]
    return None


def dimensionless_multiplier(name: str) -> Optional[float]:
    """Factor of a counting word such as ``million``, else ``None``."""
    return MULTIPLIERS.get(name)


def known_unit_names(extra: Iterable[str] = ()) -> List[str]:
    """Names offered as suggestions for misspelled units.

    Prefixed abbreviations are left out so that suggestions favour
    readable names.
    """
    names: List[str] = []
    for name, symbols, _, _, _, _ in _BASE_UNITS:
        names.append(name)
        names.extend(symbols)
    names.extend(["kilometer", "km", "centimeter", "cm", "millimeter", "mm", "kilogram", "kg"])
    names.extend(extra)
    names.extend(MULTIPLIERS)
    return list(dict.fromkeys(names))
