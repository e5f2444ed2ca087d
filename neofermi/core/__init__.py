"""
Dimension, unit and quantity model.

Modules:
    dimensions:
        Rational exponent vectors over the nine base dimensions, plus
        human-readable dimension names.

    vocabulary:
        Unit definitions, SI prefixes, plural handling and counting words.

    units:
        Canonical unit products, the unit-string parser and alias table.

    quantity:
        The Quantity value type (scalar or particle distribution).
"""

from .dimensions import DIMENSIONLESS, Dimension
from .quantity import Quantity, as_quantity
from .units import DIMENSIONLESS_UNIT, Unit, parse_unit

__all__ = [
    "DIMENSIONLESS",
    "DIMENSIONLESS_UNIT",
    "Dimension",
    "Quantity",
    "Unit",
    "as_quantity",
    "parse_unit",
]
