"""Tests for the tokenizer and the expression grammar."""

import pytest

from neofermi.errors import ParseError
from neofermi.parser import nodes, parse, parse_expression, tokenize
from neofermi.parser.nodes import (
    BetaAgainst,
    BetaOf,
    BinaryOp,
    Conversion,
    DbTwiddle,
    FunctionCall,
    Identifier,
    IfExpression,
    LetBinding,
    NormalRange,
    Number,
    PercentTwiddle,
    Range,
    SigFigNumber,
    UnaryOp,
    UniformRange,
    UnitExpression,
    WeightedSet,
)


def test_tokenize_numbers_names_and_comments():
    tokens = tokenize("a = 1.5e3 m # trailing comment")
    assert [(t.kind, t.value) for t in tokens] == [
        ("name", "a"),
        ("op", "="),
        ("number", "1.5e3"),
        ("name", "m"),
        ("eof", ""),
    ]


def test_tokenize_range_dots_are_not_decimals():
    values = [t.value for t in tokenize("1..2")]
    assert values[:3] == ["1", "..", "2"]


def test_tokenize_rejects_unknown_characters():
    with pytest.raises(ParseError, match="Unexpected character"):
        tokenize("a @ b")


def test_arithmetic_precedence():
    assert parse_expression("2 + 3 * 4") == BinaryOp("+", Number(2), BinaryOp("*", Number(3), Number(4)))
    assert parse_expression("2 ^ 3 ^ 2") == BinaryOp("^", Number(2), BinaryOp("^", Number(3), Number(2)))
    assert parse_expression("-2 ^ 2") == UnaryOp("-", BinaryOp("^", Number(2), Number(2)))


def test_range_binds_tighter_than_product():
    assert parse_expression("2 * 1 to 10") == BinaryOp("*", Number(2), Range(Number(1), Number(10)))


def test_range_units_on_literals_and_trailing():
    assert parse_expression("1 to 10 meters") == Range(Number(1), Number(10, "meters"))
    assert parse_expression("1 meters to 10") == Range(Number(1, "meters"), Number(10))
    assert parse_expression("lo to hi m") == Range(Identifier("lo"), Identifier("hi"), "m")


def test_units_absorb_only_known_names():
    assert parse_expression("10 m / s") == Number(10, "m / s")
    assert parse_expression("10 m / t0") == BinaryOp("/", Number(10, "m"), Identifier("t0"))
    assert parse_expression("5 km^2") == Number(5, "km^2")
    assert parse_expression("3 m^-1") == Number(3, "m^-1")
    assert parse_expression("60 miles per hour") == Number(60, "miles / hour")
    assert parse_expression("(1 + 2) m") == BinaryOp(
        "*", BinaryOp("+", Number(1), Number(2)), UnitExpression("m")
    )


def test_unknown_word_after_literal_is_kept_as_unit():
    assert parse_expression("100 metrs") == Number(100, "metrs")
    assert parse_expression("~2.5 widgts") == SigFigNumber("2.5", "widgts")
    assert parse_expression("lo to hi metrs") == Range(Identifier("lo"), Identifier("hi"), "metrs")
    assert parse("a = 1 m\nb = 2").statements[1] == nodes.Assignment("b", Number(2))
    with pytest.raises(ParseError):
        parse_expression("3 sqrt(4)")


def test_conversions():
    assert parse_expression("x as km") == Conversion(Identifier("x"), "km")
    assert parse_expression("x -> SI") == Conversion(Identifier("x"), "SI")
    assert parse_expression("x as km/hour") == Conversion(Identifier("x"), "km / hour")


def test_distribution_forms():
    assert parse_expression("1 .. 3") == UniformRange(Number(1), Number(3))
    assert parse_expression("10 ± 1") == NormalRange(Number(10), Number(1))
    assert parse_expression("10 +- 1 m") == NormalRange(Number(10), Number(1, "m"))
    assert parse_expression("3 out of 10") == BetaOf(Number(3), Number(10))
    assert parse_expression("2 against 8") == BetaAgainst(Number(2), Number(8))
    assert parse_expression("{1: 2, 3: 4} day") == WeightedSet(
        (Number(1), Number(3)), (Number(2), Number(4)), "day"
    )


def test_twiddles_and_sig_figs():
    assert parse_expression("100 ~10%") == BinaryOp("*", Number(100), PercentTwiddle(10.0))
    assert parse_expression("5 ~3 dB") == BinaryOp("*", Number(5), DbTwiddle(3.0))
    assert parse_expression("~3.14") == SigFigNumber("3.14")
    assert parse_expression("~1500 m") == SigFigNumber("1500", "m")


def test_let_and_if():
    assert parse_expression("let x = 2 in x * x") == LetBinding(
        "x", Number(2), BinaryOp("*", Identifier("x"), Identifier("x"))
    )
    assert parse_expression("if x > 1 then 2 else 3") == IfExpression(
        BinaryOp(">", Identifier("x"), Number(1)), Number(2), Number(3)
    )


def test_function_calls_including_keyword_named_to():
    assert parse_expression("max(1, 2)") == FunctionCall("max", (Number(1), Number(2)))
    assert parse_expression("to(1, 10)") == FunctionCall("to", (Number(1), Number(10)))
    assert parse_expression("rand()") == FunctionCall("rand", ())


def test_program_statements():
    program = parse("a = 1\nf(x, y) = x + y\n1 'widget = 5 kg\nf(a, 2)")
    kinds = [type(s) for s in program.statements]
    assert kinds == [nodes.Assignment, nodes.FunctionDefinition, nodes.UnitDefinition, FunctionCall]
    definition = program.statements[2]
    assert definition.name == "'widget"
    assert definition.count == 1
    assert definition.value == Number(5, "kg")
    assert program.statements[1].params == ("x", "y")


def test_separators_comments_and_bracketed_newlines():
    assert len(parse("a = 1; b = 2").statements) == 2
    assert len(parse("# header\n\na = 2 # note\n").statements) == 1
    assert len(parse("max(1,\n    2)").statements) == 1


def test_parse_errors_report_position():
    with pytest.raises(ParseError) as exc:
        parse("a = 1\nb = * 2")
    assert exc.value.line == 2
    with pytest.raises(ParseError):
        parse("a = (1 + 2")
    with pytest.raises(ParseError):
        parse("1 < 2 < 3")
    with pytest.raises(ParseError):
        parse_expression("a = 1")
    with pytest.raises(ParseError, match="keyword"):
        parse_expression("then")
