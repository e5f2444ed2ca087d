"""Error taxonomy raised by the unit model, samplers and evaluator.

Every error derives from :class:`NeoFermiError` and, where it makes sense,
from the matching builtin exception so callers can catch ``ValueError`` or
``NameError`` without importing this module.
"""

from __future__ import annotations

from typing import Optional, Sequence


def format_suggestions(suggestions: Sequence[str]) -> str:
    """Render a ``Did you mean`` hint for up to three names."""
    names = [f"'{s}'" for s in suggestions]
    if not names:
        return ""
    if len(names) == 1:
        return f". Did you mean {names[0]}?"
    return f". Did you mean {', '.join(names[:-1])} or {names[-1]}?"


class NeoFermiError(Exception):
    """Base class for all calculator errors."""


class IncompatibleUnitsError(NeoFermiError, ValueError):
    """Dimension mismatch in add, subtract, convert, compare or scoring."""


class UnknownUnitError(NeoFermiError, ValueError):
    """A unit token that is not in the vocabulary."""

    def __init__(self, unit: str, suggestions: Sequence[str] = ()):
        self.unit = unit
        self.suggestions = list(suggestions)
        hint = format_suggestions(self.suggestions) or ". Use 'name for custom units"
        super().__init__(f"Unknown unit '{unit}'{hint}")


class _UndefinedNameError(NeoFermiError, NameError):
    kind = "name"

    def __init__(self, name: str, suggestions: Sequence[str] = ()):
        self.name = name
        self.suggestions = list(suggestions)
        super().__init__(
            f"Undefined {self.kind}: {name}{format_suggestions(self.suggestions)}"
        )


class UndefinedVariableError(_UndefinedNameError):
    kind = "variable"


class UndefinedFunctionError(_UndefinedNameError):
    kind = "function"


class InvalidParameterError(NeoFermiError, ValueError):
    """Distribution or function parameter outside its domain."""


class OutOfRangeError(NeoFermiError, ValueError):
    """Percentile argument outside [0, 1]."""


class NonPositiveValueError(NeoFermiError, ValueError):
    """Log-scale operation applied to non-positive particles."""


class MixedUnitsError(NeoFermiError, ValueError):
    """Ambiguous unit combination in a range expression."""


class ArityMismatchError(NeoFermiError, TypeError):
    """User-defined function called with the wrong number of arguments."""


class ParseError(NeoFermiError, SyntaxError):
    """Source text that does not match the expression grammar."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        where = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"{message}{where}")


class EvaluationError(NeoFermiError):
    """Structurally invalid expression that parsed but cannot be evaluated."""
