"""Syntax-tree node types.

Each node kind is a frozen dataclass; together they form a closed tagged
union listed in :data:`NODE_TYPES`. Unit annotations are kept as the unit
text the user wrote and are resolved at evaluation time, when custom unit
definitions are known.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Number:
    value: float
    unit: Optional[str] = None


@dataclass(frozen=True)
class SigFigNumber:
    """A ``~``-flagged literal whose written digits imply its uncertainty.

    Attributes:
        text: The literal as written, e.g. ``"1.50e3"``.
    """

    text: str
    unit: Optional[str] = None


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class UnitExpression:
    """One of a unit, e.g. the ``meters`` in ``(2 + 3) meters``."""

    unit: str


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"


@dataclass(frozen=True)
class Range:
    """``left to right [unit]``: lognormal for positive bounds, else normal."""

    left: "Node"
    right: "Node"
    unit: Optional[str] = None


@dataclass(frozen=True)
class UniformRange:
    left: "Node"
    right: "Node"
    unit: Optional[str] = None


@dataclass(frozen=True)
class NormalRange:
    """``mean +- spread [unit]``."""

    mean: "Node"
    spread: "Node"
    unit: Optional[str] = None


@dataclass(frozen=True)
class BetaOf:
    successes: "Node"
    total: "Node"


@dataclass(frozen=True)
class BetaAgainst:
    for_count: "Node"
    against_count: "Node"


@dataclass(frozen=True)
class WeightedSet:
    values: Tuple["Node", ...]
    weights: Tuple["Node", ...]
    unit: Optional[str] = None


@dataclass(frozen=True)
class PercentTwiddle:
    value: float


@dataclass(frozen=True)
class DbTwiddle:
    value: float


@dataclass(frozen=True)
class Conversion:
    """``expression as target``; the target ``"SI"`` means SI base units."""

    expression: "Node"
    target: str


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class LetBinding:
    name: str
    value: "Node"
    body: "Node"


@dataclass(frozen=True)
class IfExpression:
    condition: "Node"
    then_branch: "Node"
    else_branch: "Node"


@dataclass(frozen=True)
class Assignment:
    name: str
    value: "Node"


@dataclass(frozen=True)
class UnitDefinition:
    """``count 'name = value`` declares ``'name`` as ``value / count``."""

    name: str
    count: float
    value: "Node"


@dataclass(frozen=True)
class FunctionDefinition:
    name: str
    params: Tuple[str, ...]
    body: "Node"


@dataclass(frozen=True)
class Program:
    statements: Tuple["Node", ...] = ()


NODE_TYPES = (
    Program,
    Assignment,
    UnitDefinition,
    FunctionDefinition,
    LetBinding,
    IfExpression,
    BinaryOp,
    UnaryOp,
    Range,
    UniformRange,
    NormalRange,
    BetaOf,
    BetaAgainst,
    WeightedSet,
    PercentTwiddle,
    DbTwiddle,
    Conversion,
    FunctionCall,
    Number,
    SigFigNumber,
    Identifier,
    UnitExpression,
)

Node = Union[
    Program,
    Assignment,
    UnitDefinition,
    FunctionDefinition,
    LetBinding,
    IfExpression,
    BinaryOp,
    UnaryOp,
    Range,
    UniformRange,
    NormalRange,
    BetaOf,
    BetaAgainst,
    WeightedSet,
    PercentTwiddle,
    DbTwiddle,
    Conversion,
    FunctionCall,
    Number,
    SigFigNumber,
    Identifier,
    UnitExpression,
]
