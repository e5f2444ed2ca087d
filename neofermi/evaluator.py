"""Tree-walking evaluator that turns syntax trees into Quantities.

The evaluator owns one session environment:

* a scope stack whose bottom frame holds session variables, with ``let``
  bindings and user-function parameters pushed on top;
* user-defined functions and custom unit definitions;
* a lazily built constants table;
* the ``numpy.random.Generator`` every sampler in the session draws from.

Nodes are dispatched through a table keyed by node class. Range-style nodes
(``a to b``, ``a .. b``, ``m +- s``) resolve their bounds' units with the
rules documented on :meth:`Evaluator._range_bounds`.
"""

from __future__ import annotations

import inspect
import logging
import math
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from . import distributions
from .config import Settings, make_rng
from .constants import ConstantTable
from .core.quantity import Quantity
from .core.units import Unit, parse_unit
from .core.vocabulary import dimensionless_multiplier
from .errors import (
    ArityMismatchError,
    EvaluationError,
    IncompatibleUnitsError,
    InvalidParameterError,
    MixedUnitsError,
    NeoFermiError,
    UndefinedFunctionError,
    UndefinedVariableError,
    UnknownUnitError,
)
from .functions import DISTRIBUTION_FUNCTIONS, MATH_FUNCTIONS, SamplingContext, builtin_names, raw_argument
from .parser import nodes, parse
from .suggestions import find_similar

logger = logging.getLogger(__name__)

MIXED_RANGE_MESSAGE = (
    'Cannot mix units and unitless in range. Use trailing unit: "1 to 10 m" not "1 m to 10"'
)


@dataclass
class StatementResult:
    """Outcome of one top-level statement run by :meth:`Evaluator.run`.

    Attributes:
        index: Position of the statement in the program.
        node: The statement's syntax tree.
        value: The statement's value, or ``None`` for definitions and
            failures.
        error: The error raised while evaluating, if any.
    """

    index: int
    node: object
    value: Optional[Quantity] = None
    error: Optional[NeoFermiError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def name(self) -> Optional[str]:
        """Assigned variable name, when the statement is an assignment."""
        if isinstance(self.node, nodes.Assignment):
            return self.node.name
        return None


def _has_unit(q: Quantity) -> bool:
    return not q.unit.is_dimensionless


def _scalar(q: Quantity) -> float:
    return raw_argument(q)


class Evaluator:
    """Evaluate programs against a persistent session environment.

    Args:
        settings (Settings, optional): Sample count, confidence and seed.
        rng (numpy.random.Generator, optional): Random source. Defaults to
            one seeded from ``settings.seed``.

    Example:
        >>> ev = Evaluator(Settings(sample_count=1000, seed=1))
        >>> area = ev.evaluate("side = 2 to 4 m\\nside * side")
        >>> area.unit_string
        'm^2'
    """

    def __init__(self, settings: Optional[Settings] = None, rng: Optional[np.random.Generator] = None):
        self.settings = settings or Settings()
        self.rng = rng if rng is not None else make_rng(self.settings.seed)
        self._scopes: List[Dict[str, Quantity]] = [{}]
        self._functions: Dict[str, nodes.FunctionDefinition] = {}
        self._custom_units: Dict[str, Quantity] = {}
        self._pinned: Dict[str, Quantity] = {}
        self._constants = ConstantTable(self.sampling)
        self.handlers: Dict[type, Callable[[object], Optional[Quantity]]] = {
            nodes.Program: self._program,
            nodes.Assignment: self._assignment,
            nodes.UnitDefinition: self._unit_definition,
            nodes.FunctionDefinition: self._function_definition,
            nodes.LetBinding: self._let_binding,
            nodes.IfExpression: self._if_expression,
            nodes.BinaryOp: self._binary_op,
            nodes.UnaryOp: self._unary_op,
            nodes.Range: self._range,
            nodes.UniformRange: self._uniform_range,
            nodes.NormalRange: self._normal_range,
            nodes.BetaOf: self._beta_of,
            nodes.BetaAgainst: self._beta_against,
            nodes.WeightedSet: self._weighted_set,
            nodes.PercentTwiddle: self._percent_twiddle,
            nodes.DbTwiddle: self._db_twiddle,
            nodes.Conversion: self._conversion,
            nodes.FunctionCall: self._function_call,
            nodes.Number: self._number,
            nodes.SigFigNumber: self._sig_fig_number,
            nodes.Identifier: self._identifier,
            nodes.UnitExpression: self._unit_expression,
        }

    @property
    def sampling(self) -> SamplingContext:
        return SamplingContext(self.settings.sample_count, self.settings.confidence, self.rng)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def evaluate(self, source_or_node: Union[str, object]) -> Optional[Quantity]:
        """Evaluate program text or a syntax tree and return the last value.

        Raises:
            ParseError: If ``source_or_node`` is text that does not parse.
            NeoFermiError: The first error raised by any statement.
        """
        node = parse(source_or_node) if isinstance(source_or_node, str) else source_or_node
        return self.eval_node(node)

    def run(self, source: str) -> List[StatementResult]:
        """Evaluate every statement, recovering from failures between statements.

        A failing statement is logged and recorded; the environment keeps
        whatever the earlier statements committed and the next statement
        runs normally.

        Raises:
            ParseError: If the program text does not parse.
        """
        program = parse(source)
        results: List[StatementResult] = []
        for index, statement in enumerate(program.statements):
            try:
                value = self.eval_node(statement)
            except NeoFermiError as exc:
                error = exc
            except ArithmeticError as exc:
                error = EvaluationError(f"Arithmetic error: {exc}")
                error.__cause__ = exc
            else:
                results.append(StatementResult(index, statement, value))
                continue
            logger.warning("Statement %d failed: %s", index + 1, error)
            results.append(StatementResult(index, statement, error=error))
        return results

    def eval_node(self, node) -> Optional[Quantity]:
        handler = self.handlers.get(type(node))
        if handler is None:
            raise EvaluationError(f"Unknown node type: {type(node).__name__}")
        return handler(node)

    def _value(self, node) -> Quantity:
        value = self.eval_node(node)
        if value is None:
            raise EvaluationError(f"{type(node).__name__} does not produce a value")
        return value

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def get_variable(self, name: str) -> Optional[Quantity]:
        """Session variable or constant named ``name``, or ``None``."""
        if name in self._scopes[0]:
            return self._scopes[0][name]
        return self._constants.get(name)

    def set_variable(self, name: str, value: Quantity) -> None:
        self._scopes[0][name] = value

    def pin_variable(self, name: str, value: Quantity) -> None:
        """Hold ``name`` at ``value``; later assignments to it keep ``value``.

        The assignment's right-hand side is still evaluated so the RNG
        stream seen by the other statements does not shift.
        """
        self._pinned[name] = value
        self._scopes[0][name] = value

    def variable_names(self) -> List[str]:
        """Session variable names followed by every constant name."""
        return list(self._scopes[0]) + self._constants.names()

    def user_variable_names(self) -> List[str]:
        return list(self._scopes[0])

    def clear_variables(self) -> None:
        self._scopes = [{}]

    def reset(self) -> None:
        """Forget variables, functions and custom units, and reseed the RNG."""
        self.clear_variables()
        self._pinned.clear()
        self._functions.clear()
        self._custom_units.clear()
        self.rng = make_rng(self.settings.seed)
        self._constants = ConstantTable(self.sampling)

    def get_user_function(self, name: str) -> Optional[nodes.FunctionDefinition]:
        return self._functions.get(name)

    def get_custom_unit(self, name: str) -> Optional[Quantity]:
        if not name.startswith("'"):
            name = f"'{name}"
        return self._custom_units.get(name)

    def _lookup(self, name: str) -> Optional[Quantity]:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return self._constants.get(name)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _program(self, node: nodes.Program) -> Optional[Quantity]:
        result = None
        for statement in node.statements:
            result = self.eval_node(statement)
        return result

    def _assignment(self, node: nodes.Assignment) -> Quantity:
        value = self._value(node.value)
        if node.name in self._pinned:
            value = self._pinned[node.name]
        self._scopes[0][node.name] = value
        logger.debug("%s = %s", node.name, value)
        return value

    def _unit_definition(self, node: nodes.UnitDefinition) -> Quantity:
        if node.count == 0:
            raise InvalidParameterError(f"Unit definition for {node.name} needs a non-zero count")
        value = self._value(node.value)
        if node.count != 1:
            value = value.divide(Quantity(node.count))
        self._custom_units[node.name] = value
        logger.debug("Defined unit %s as %s", node.name, value)
        return value

    def _function_definition(self, node: nodes.FunctionDefinition) -> None:
        self._functions[node.name] = node
        logger.debug("Defined function %s(%s)", node.name, ", ".join(node.params))
        return None

    # ------------------------------------------------------------------
    # Control flow
    # ------------------------------------------------------------------

    def _let_binding(self, node: nodes.LetBinding) -> Quantity:
        value = self._value(node.value)
        self._scopes.append({node.name: value})
        try:
            return self._value(node.body)
        finally:
            self._scopes.pop()

    def _if_expression(self, node: nodes.IfExpression) -> Quantity:
        condition = self._value(node.condition)
        if condition.is_scalar():
            branch = node.then_branch if condition.value != 0 else node.else_branch
            return self._value(branch)

        then_value = self._value(node.then_branch)
        else_value = self._value(node.else_branch)
        if not then_value.unit.equal_base(else_value.unit):
            raise IncompatibleUnitsError(
                f"if branches have incompatible units: '{then_value.unit}' and '{else_value.unit}'"
            )
        else_value = else_value.to(then_value.unit)
        mask = condition.to_particles()
        a = then_value.to_particles()
        b = else_value.to_particles()
        n = max(len(mask), len(a), len(b))
        selected = np.where(np.resize(mask, n) != 0, np.resize(a, n), np.resize(b, n))
        return Quantity(selected, then_value.unit)

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def _binary_op(self, node: nodes.BinaryOp) -> Quantity:
        left = self._value(node.left)
        right = self._value(node.right)
        op = node.op
        if op == "+":
            return left.add(right)
        if op == "-":
            return left.subtract(right)
        if op == "*":
            return left.multiply(right)
        if op == "/":
            return left.divide(right)
        if op in ("^", "**"):
            if right.is_distribution():
                raise EvaluationError("Exponent cannot be a distribution")
            if _has_unit(right):
                raise IncompatibleUnitsError(f"Exponent must be dimensionless, got '{right.unit}'")
            return left.pow(right.value)
        if op in (">", "<", ">=", "<=", "==", "!="):
            return left.compare(right, op)
        raise EvaluationError(f"Unknown operator: {op}")

    def _unary_op(self, node: nodes.UnaryOp) -> Quantity:
        operand = self._value(node.operand)
        if node.op == "-":
            return operand.negate()
        if node.op == "+":
            return operand
        raise EvaluationError(f"Unknown unary operator: {node.op}")

    # ------------------------------------------------------------------
    # Ranges and explicit distributions
    # ------------------------------------------------------------------

    def _range_bounds(self, node: nodes.Range) -> Tuple[float, float, Optional[Unit]]:
        """Resolve the numeric bounds and unit of ``left to right [unit]``.

        1. A trailing unit and two bare bounds: the unit applies to both.
        2. A trailing unit and a unit-bearing bound: that bound is converted
           into the trailing unit.
        3. Two unit-bearing bounds: they must be base-equal; the left bound
           is converted into the right bound's unit.
        4. Only the left bound has a unit: ambiguous, MixedUnitsError.
        5. Only the right bound has a unit: it acts as the trailing unit.
        6. Neither has a unit: dimensionless. A multiplier word on the right
           literal (``100 to 200 million``) scales the left bound too.
        """
        left = self._value(node.left)
        right = self._value(node.right)

        if node.unit:
            trailing = self._unit_quantity(node.unit)
            scale = _scalar(trailing)
            low = _scalar(left.to(trailing.unit)) if _has_unit(left) else _scalar(left) * scale
            high = _scalar(right.to(trailing.unit)) if _has_unit(right) else _scalar(right) * scale
            return low, high, trailing.unit

        if _has_unit(left) and _has_unit(right):
            if not left.unit.equal_base(right.unit):
                raise IncompatibleUnitsError(
                    f"Range bounds have incompatible units: '{left.unit}' and '{right.unit}'"
                )
            return _scalar(left.to(right.unit)), _scalar(right), right.unit
        if _has_unit(left):
            raise MixedUnitsError(MIXED_RANGE_MESSAGE)
        if _has_unit(right):
            return _scalar(left), _scalar(right), right.unit

        low = _scalar(left)
        multiplier = self._literal_multiplier(node.right)
        if multiplier is not None:
            low *= multiplier
        return low, _scalar(right), None

    def _literal_multiplier(self, node) -> Optional[float]:
        if not isinstance(node, (nodes.Number, nodes.SigFigNumber)) or not node.unit:
            return None
        return dimensionless_multiplier(node.unit.strip())

    def _range(self, node: nodes.Range) -> Quantity:
        low, high, unit = self._range_bounds(node)
        ctx = self.sampling
        return distributions.to(low, high, unit, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng)

    def _loose_bounds(self, first: Quantity, second: Quantity, trailing: Optional[str], prefer: Quantity):
        """Bounds of ``..`` and ``+-`` forms, expressed in one shared unit.

        The unit is the trailing unit, else ``prefer``'s unit, else the
        other operand's unit; bare operands are taken to be in that unit.
        """
        if trailing:
            target = self._unit_quantity(trailing)
            unit, scale = target.unit, _scalar(target)
        else:
            other = second if prefer is first else first
            unit = prefer.unit if _has_unit(prefer) else other.unit
            scale = 1.0

        def convert(q: Quantity) -> float:
            return _scalar(q.to(unit)) if _has_unit(q) else _scalar(q) * scale

        return convert(first), convert(second), unit

    def _uniform_range(self, node: nodes.UniformRange) -> Quantity:
        left = self._value(node.left)
        right = self._value(node.right)
        low, high, unit = self._loose_bounds(left, right, node.unit, prefer=right)
        ctx = self.sampling
        return distributions.uniform(low, high, unit, n=ctx.sample_count, rng=ctx.rng)

    def _normal_range(self, node: nodes.NormalRange) -> Quantity:
        mean = self._value(node.mean)
        spread = self._value(node.spread)
        center, sigma, unit = self._loose_bounds(mean, spread, node.unit, prefer=mean)
        ctx = self.sampling
        return distributions.normal(
            center - sigma, center + sigma, unit, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng
        )

    def _beta_of(self, node: nodes.BetaOf) -> Quantity:
        successes = _scalar(self._value(node.successes))
        total = _scalar(self._value(node.total))
        return distributions.outof(successes, total, n=self.settings.sample_count, rng=self.rng)

    def _beta_against(self, node: nodes.BetaAgainst) -> Quantity:
        for_count = _scalar(self._value(node.for_count))
        against_count = _scalar(self._value(node.against_count))
        return distributions.against(for_count, against_count, n=self.settings.sample_count, rng=self.rng)

    def _weighted_set(self, node: nodes.WeightedSet) -> Quantity:
        values = [_scalar(self._value(v)) for v in node.values]
        weights = [_scalar(self._value(w)) for w in node.weights]
        result = distributions.weighted(values, weights, n=self.settings.sample_count, rng=self.rng)
        if node.unit:
            result = result.multiply(self._unit_quantity(node.unit))
        return result

    def _percent_twiddle(self, node: nodes.PercentTwiddle) -> Quantity:
        ctx = self.sampling
        return distributions.percent(node.value, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng)

    def _db_twiddle(self, node: nodes.DbTwiddle) -> Quantity:
        ctx = self.sampling
        return distributions.db(node.value, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng)

    # ------------------------------------------------------------------
    # Conversion and calls
    # ------------------------------------------------------------------

    def _conversion(self, node: nodes.Conversion) -> Quantity:
        value = self._value(node.expression)
        target = node.target.strip()
        if target == "SI":
            return value.to_si()
        definition = self._custom_units.get(target)
        if definition is not None:
            ratio = value.to(definition.unit).divide(definition)
            label, _ = parse_unit(target)
            return ratio.apply(np.asarray, label)
        unit, _ = parse_unit(target)
        return value.to(unit)

    def _function_call(self, node: nodes.FunctionCall) -> Quantity:
        args = [self._value(arg) for arg in node.args]

        definition = self._functions.get(node.name)
        if definition is not None:
            return self._call_user_function(definition, args)

        if node.name in DISTRIBUTION_FUNCTIONS:
            func = DISTRIBUTION_FUNCTIONS[node.name]
            call_args = [self.sampling] + [raw_argument(a) for a in args]
            shown = len(args)
        elif node.name in MATH_FUNCTIONS:
            func = MATH_FUNCTIONS[node.name]
            call_args = list(args)
            shown = len(args)
        else:
            candidates = builtin_names() + list(self._functions)
            raise UndefinedFunctionError(node.name, find_similar(node.name, candidates))

        try:
            inspect.signature(func).bind(*call_args)
        except TypeError:
            raise ArityMismatchError(
                f"{node.name}() does not accept {shown} argument{'s' if shown != 1 else ''}"
            ) from None
        try:
            return func(*call_args)
        except NeoFermiError:
            raise
        except (ValueError, ArithmeticError) as exc:
            raise EvaluationError(f"Error calling function {node.name}: {exc}") from exc

    def _call_user_function(self, definition: nodes.FunctionDefinition, args: List[Quantity]) -> Quantity:
        if len(args) != len(definition.params):
            raise ArityMismatchError(
                f"Function {definition.name} expects {len(definition.params)} arguments, got {len(args)}"
            )
        self._scopes.append(dict(zip(definition.params, args)))
        try:
            return self._value(definition.body)
        finally:
            self._scopes.pop()

    # ------------------------------------------------------------------
    # Leaves
    # ------------------------------------------------------------------

    def _unit_quantity(self, text: str) -> Quantity:
        """One of the unit ``text``, substituting defined custom units."""
        unit, scale = parse_unit(text)
        plain = [term for term in unit.terms if term.definition.base not in self._custom_units]
        result = Quantity(scale, Unit(plain))
        for term in unit.terms:
            definition = self._custom_units.get(term.definition.base)
            if definition is not None:
                result = result.multiply(definition.pow(float(term.power)))
        return result

    def _number(self, node: nodes.Number) -> Quantity:
        if not node.unit:
            return Quantity(node.value)
        value = node.value
        return self._unit_quantity(node.unit).apply(lambda x: x * value)

    def _sig_fig_number(self, node: nodes.SigFigNumber) -> Quantity:
        value = float(node.text)
        place = sig_fig_place(node.text)
        if not math.isfinite(value) or place > sys.float_info.max_10_exp:
            raise InvalidParameterError(f"Literal ~{node.text} is outside the floating-point range")
        half_width = 0.5 * 10.0**place
        result = distributions.uniform(
            value - half_width, value + half_width, n=self.settings.sample_count, rng=self.rng
        )
        if node.unit:
            result = result.multiply(self._unit_quantity(node.unit))
        return result

    def _identifier(self, node: nodes.Identifier) -> Quantity:
        value = self._lookup(node.name)
        if value is not None:
            return value
        try:
            return Quantity(1.0, node.name)
        except UnknownUnitError:
            candidates = [n for scope in reversed(self._scopes) for n in scope] + self._constants.names()
            raise UndefinedVariableError(node.name, find_similar(node.name, candidates)) from None

    def _unit_expression(self, node: nodes.UnitExpression) -> Quantity:
        return self._unit_quantity(node.unit)


def sig_fig_place(text: str) -> int:
    """Decimal exponent of the last significant digit written in ``text``.

    ``"3.14"`` gives -2, ``"3."`` gives 0, ``"1500"`` gives 2 and
    ``"1.5e3"`` gives 2.
    """
    mantissa, _, exponent = text.lower().partition("e")
    shift = int(exponent) if exponent else 0
    if "." in mantissa:
        place = -len(mantissa.split(".", 1)[1])
    elif mantissa.strip("0") == "":
        place = 0
    else:
        place = len(mantissa) - len(mantissa.rstrip("0"))
    return place + shift
