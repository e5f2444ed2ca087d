"""Tests for program evaluation: units, ranges, scopes, functions and recovery."""

import logging

import numpy as np
import pytest

from neofermi import Evaluator, Quantity, Settings
from neofermi.errors import (
    ArityMismatchError,
    EvaluationError,
    IncompatibleUnitsError,
    InvalidParameterError,
    MixedUnitsError,
    ParseError,
    UndefinedFunctionError,
    UndefinedVariableError,
    UnknownUnitError,
)
from neofermi.evaluator import sig_fig_place
from neofermi.parser.nodes import NODE_TYPES


def test_every_node_type_has_a_handler(evaluator):
    assert set(evaluator.handlers) == set(NODE_TYPES)
    with pytest.raises(EvaluationError, match="Unknown node type"):
        evaluator.eval_node(object())


def test_arithmetic_and_units(evaluator):
    assert evaluator.evaluate("2 + 3 * 4").value == 14
    speed = evaluator.evaluate("10 m / 2 s")
    assert speed.unit_string == "m / s"
    assert speed.value == 5
    area = evaluator.evaluate("(2 m)^2")
    assert area.unit_string == "m^2"
    assert area.value == 4
    assert evaluator.evaluate("5 * meters").unit_string == "meters"


def test_conversions(evaluator):
    metres = evaluator.evaluate("1 km as m")
    assert metres.unit_string == "m"
    assert metres.value == pytest.approx(1000)
    si = evaluator.evaluate("36 km/hour -> SI")
    assert si.unit_string == "m / s"
    assert si.value == pytest.approx(10)
    with pytest.raises(IncompatibleUnitsError):
        evaluator.evaluate("1 km as s")


def test_range_left_unit_only_is_ambiguous(evaluator):
    with pytest.raises(MixedUnitsError, match="trailing unit"):
        evaluator.evaluate("1 meters to 10")


def test_range_right_unit_acts_as_trailing_unit(evaluator):
    q = evaluator.evaluate("1 to 10 meters")
    assert q.is_distribution()
    assert q.unit_string == "meters"
    assert 0.8 < q.percentile(0.05) < 1.25
    assert 8 < q.percentile(0.95) < 12.5


def test_range_trailing_unit_applies_to_bare_bounds(evaluator):
    q = evaluator.evaluate("a = 1\nb = 10\na to b m")
    assert q.unit_string == "m"
    assert 0.8 < q.percentile(0.05) < 1.25


def test_range_trailing_unit_converts_unit_bounds(evaluator):
    q = evaluator.evaluate("lo = 100 cm\nhi = 3\nlo to hi m")
    assert q.unit_string == "m"
    assert 0.8 < q.percentile(0.05) < 1.25
    assert 2.4 < q.percentile(0.95) < 3.75


def test_range_with_two_units(evaluator):
    q = evaluator.evaluate("50 cm to 2 m")
    assert q.unit_string == "m"
    assert 0.4 < q.percentile(0.05) < 0.62
    with pytest.raises(IncompatibleUnitsError):
        evaluator.evaluate("1 m to 10 s")


def test_dimensionless_ranges(evaluator):
    assert evaluator.evaluate("1 to 10").unit_string == ""
    straddling = evaluator.evaluate("-10 to 10")
    assert straddling.mean() == pytest.approx(0, abs=0.5)
    big = evaluator.evaluate("100 to 200 million")
    assert 1.2e8 < big.percentile(0.5) < 1.7e8


def test_uniform_and_normal_ranges(evaluator):
    uniform = evaluator.evaluate("1 .. 3 m")
    assert uniform.unit_string == "m"
    assert uniform.min() >= 1 and uniform.max() <= 3
    normal = evaluator.evaluate("10 ± 1")
    assert normal.percentile(0.05) == pytest.approx(9, abs=0.15)
    assert normal.percentile(0.95) == pytest.approx(11, abs=0.15)
    with_unit = evaluator.evaluate("10 +- 1 m")
    assert with_unit.unit_string == "m"
    assert with_unit.mean() == pytest.approx(10, abs=0.1)


def test_explicit_distribution_forms(evaluator):
    assert evaluator.evaluate("3 out of 10").mean() == pytest.approx(4 / 12, abs=0.02)
    assert evaluator.evaluate("2 against 8").mean() == pytest.approx(0.2, abs=0.02)
    year = evaluator.evaluate("{365: 303, 366: 97} day")
    assert year.unit_string == "day"
    assert set(np.unique(year.value)) <= {365.0, 366.0}
    twiddled = evaluator.evaluate("100 ~10%")
    assert twiddled.percentile(0.5) == pytest.approx(100, rel=0.02)
    assert twiddled.percentile(0.95) == pytest.approx(110, rel=0.02)


def test_sig_fig_literals(evaluator):
    pi_ish = evaluator.evaluate("~3.14")
    assert pi_ish.min() >= 3.135 and pi_ish.max() <= 3.145
    thousands = evaluator.evaluate("~1500 m")
    assert thousands.unit_string == "m"
    assert thousands.min() >= 1450 and thousands.max() <= 1550


@pytest.mark.parametrize(
    "text, place",
    [("3.14", -2), ("3.", 0), ("1500", 2), ("1.5e3", 2), ("0", 0), ("2.50", -2), ("12e-3", -3)],
)
def test_sig_fig_place(text, place):
    assert sig_fig_place(text) == place


def test_undefined_variable_suggests_names(evaluator):
    with pytest.raises(UndefinedVariableError, match="Did you mean") as exc:
        evaluator.evaluate("speed = 3\nsped")
    assert "speed" in exc.value.suggestions


def test_undefined_function_suggests_builtins(evaluator):
    with pytest.raises(UndefinedFunctionError) as exc:
        evaluator.evaluate("sqr(4)")
    assert "sqrt" in exc.value.suggestions


def test_builtin_arity(evaluator):
    with pytest.raises(ArityMismatchError):
        evaluator.evaluate("sqrt(1, 2)")
    with pytest.raises(ArityMismatchError):
        evaluator.evaluate("lognormal(1)")


def test_function_calls_dispatch(evaluator):
    root = evaluator.evaluate("sqrt(16 m^2)")
    assert root.unit_string == "m"
    assert root.value == pytest.approx(4)
    sampled = evaluator.evaluate("lognormal(1, 100)")
    assert sampled.sample_count == 4000
    assert evaluator.evaluate("median(1 to 100)").value == pytest.approx(10, rel=0.1)
    with pytest.raises(InvalidParameterError):
        evaluator.evaluate("binomial(10, 2)")


def test_user_functions(evaluator):
    assert evaluator.evaluate("f(x) = x * 2\nf(21)").value == 42
    assert evaluator.get_user_function("f").params == ("x",)
    with pytest.raises(ArityMismatchError, match="expects 1 arguments, got 2"):
        evaluator.evaluate("f(1, 2)")
    assert evaluator.evaluate("sqrt(x) = x\nsqrt(9)").value == 9


def test_let_shadows_without_leaking(evaluator):
    assert evaluator.evaluate("x = 5\nlet x = 2 in x * 10").value == 20
    assert evaluator.get_variable("x").value == 5
    evaluator.evaluate("let y = 2 in y")
    assert evaluator.get_variable("y") is None


def test_if_with_scalar_condition_evaluates_one_branch(evaluator):
    assert evaluator.evaluate("if 2 > 1 then 10 else 20").value == 10
    assert evaluator.evaluate("if 1 > 0 then 1 m else never_defined").unit_string == "m"


def test_if_with_distribution_condition_selects_per_particle(evaluator):
    result = evaluator.evaluate("x = 0 .. 1\nif x > 0.5 then 1 else 0")
    assert set(np.unique(result.value)) <= {0.0, 1.0}
    assert result.mean() == pytest.approx(0.5, abs=0.05)
    with pytest.raises(IncompatibleUnitsError):
        evaluator.evaluate("if x > 0.5 then 1 m else 1 s")


def test_custom_units(evaluator):
    mass = evaluator.evaluate("1 'widget = 5 kg\n3 'widget")
    assert mass.unit_string == "kg"
    assert mass.value == pytest.approx(15)
    count = evaluator.evaluate("20 kg as 'widget")
    assert count.unit_string == "'widget"
    assert count.value == pytest.approx(4)
    assert evaluator.get_custom_unit("widget").value == 5


def test_unit_definition_with_count(evaluator):
    seconds = evaluator.evaluate("60 'tick = 1 minute\n120 'tick as s")
    assert seconds.unit_string == "s"
    assert seconds.value == pytest.approx(120)
    with pytest.raises(InvalidParameterError):
        evaluator.evaluate("0 'nothing = 1 m")


def test_opaque_custom_units(evaluator):
    apples = evaluator.evaluate("3 'apples + 2 'apples")
    assert apples.unit_string == "'apples"
    assert apples.value == 5
    with pytest.raises(IncompatibleUnitsError):
        evaluator.evaluate("3 'apples + 2 'pears")


def test_operator_errors(evaluator):
    with pytest.raises(IncompatibleUnitsError):
        evaluator.evaluate("1 m > 1 s")
    with pytest.raises(EvaluationError, match="Exponent cannot be a distribution"):
        evaluator.evaluate("2 ^ (1 to 2)")
    with pytest.raises(IncompatibleUnitsError, match="Exponent must be dimensionless"):
        evaluator.evaluate("2 ^ 3 m")


def test_constants(evaluator):
    c = evaluator.evaluate("c")
    assert c.unit_string == "m / s"
    assert c.value == pytest.approx(299792458)
    assert evaluator.evaluate("2 * pi").value == pytest.approx(2 * np.pi)
    assert evaluator.evaluate("G") is evaluator.evaluate("G")
    assert evaluator.evaluate("kB").value == evaluator.evaluate("k_B").value


def test_run_recovers_between_statements(evaluator, caplog):
    with caplog.at_level(logging.WARNING, logger="neofermi.evaluator"):
        results = evaluator.run("a = 2\nb = a * undefined_zz\nc = a + 1\nf(x) = x")
    assert [r.ok for r in results] == [True, False, True, True]
    assert isinstance(results[1].error, UndefinedVariableError)
    assert results[2].value.value == 3
    assert results[2].name == "c"
    assert results[3].value is None
    assert evaluator.get_variable("b") is None
    assert "Statement 2 failed" in caplog.text


def test_failed_assignment_does_not_commit(evaluator):
    results = evaluator.run("a = 1\na = a + 1 s")
    assert not results[1].ok
    assert evaluator.get_variable("a").value == 1


def test_run_propagates_parse_errors(evaluator):
    with pytest.raises(ParseError):
        evaluator.run("a = (")


def test_seeded_sessions_are_reproducible():
    first = Evaluator(Settings(sample_count=500, seed=7)).evaluate("1 to 10")
    second = Evaluator(Settings(sample_count=500, seed=7)).evaluate("1 to 10")
    np.testing.assert_array_equal(first.value, second.value)


def test_confidence_setting_moves_interval():
    ev = Evaluator(Settings(sample_count=20000, confidence=0.5, seed=3))
    q = ev.evaluate("1 to 100")
    assert q.percentile(0.25) == pytest.approx(1, rel=0.15)
    assert q.percentile(0.75) == pytest.approx(100, rel=0.15)


def test_pin_variable_keeps_value(evaluator):
    evaluator.pin_variable("a", Quantity(5))
    assert evaluator.evaluate("a = 1 to 10\nb = a * 2").value == 10


def test_reset_clears_session(evaluator):
    evaluator.evaluate("a = 1\nf(x) = x\n1 'w = 2 kg")
    evaluator.reset()
    assert evaluator.user_variable_names() == []
    assert evaluator.get_user_function("f") is None
    assert evaluator.get_custom_unit("w") is None
    assert "pi" in evaluator.variable_names()


def test_misspelled_unit_after_literal_suggests_names(evaluator):
    with pytest.raises(UnknownUnitError, match="meter") as exc:
        evaluator.evaluate("100 metrs")
    assert "meter" in exc.value.suggestions
    results = evaluator.run("a = 100 metrs\nb = 2 m")
    assert isinstance(results[0].error, UnknownUnitError)
    assert results[1].value.unit_string == "m"


def test_run_continues_after_non_finite_values(evaluator):
    results = evaluator.run("a = 2 ^ (1/0)\nb = (2 m) ^ (1/0)\nc = 1 .. (1/0)\nd = 1")
    assert results[0].ok
    assert isinstance(results[1].error, InvalidParameterError)
    assert isinstance(results[2].error, InvalidParameterError)
    assert results[3].value.value == 1
    assert evaluator.get_variable("d").value == 1


def test_sig_fig_literal_outside_float_range(evaluator):
    with pytest.raises(InvalidParameterError, match="floating-point range"):
        evaluator.evaluate("~1e400")
