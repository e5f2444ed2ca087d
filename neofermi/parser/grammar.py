"""Tokenizer and recursive-descent parser for estimation programs.

Precedence, loosest first::

    statement   := name "=" expr | name "(" params ")" "=" expr
                 | number tick "=" expr | expr
    expr        := comparison (("as" | "->") target)*
    comparison  := additive (cmp additive)?
    additive    := term (("+" | "-") term)*
    term        := range (("*" | "/") range)*
    range       := unary [("to" | ".." | "+-" | "±") unary [unit]
                          | "out" "of" unary | "against" unary]
    unary       := "-" unary | power
    power       := postfix (("^" | "**") unary)?
    postfix     := primary ("~" number ("%" | "dB"))*
    primary     := number [unit] | "~" number [unit] | tick-unit
                 | name "(" args ")" | name | "(" expr ")" [unit]
                 | "{" additive ":" additive ("," ...)* "}" [unit]
                 | "let" name "=" expr "in" expr
                 | "if" expr "then" expr "else" expr

The first non-keyword name after a literal is its unit, so ``100 metrs`` fails
unit resolution rather than parsing. After that the unit absorbs ``^ n``,
``/ unit``, ``per unit`` and juxtaposed units only while the following
names are known units, so ``10 m / s`` is a velocity but ``10 m / t0``
divides by a variable.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.units import is_unit_name
from ..errors import ParseError
from . import nodes

logger = logging.getLogger(__name__)

KEYWORDS = frozenset({"let", "in", "if", "then", "else", "to", "as", "out", "of", "against"})
COMPARISONS = (">=", "<=", "==", "!=", ">", "<")
NON_UNIT_WORDS = frozenset({"per", "dB", "db", "SI"})

_TOKEN = re.compile(
    r"(?P<newline>\n)"
    r"|(?P<skip>[ \t\r]+|\#[^\n]*)"
    r"|(?P<number>(?:\d+(?:\.(?!\.)\d*)?|\.\d+)(?:[eE][-+]?\d+)?)"
    r"|(?P<tick>'[A-Za-z_][\w]*)"
    r"|(?P<name>[A-Za-z_µμ°Ω$][\wµμ°Ω$]*)"
    r"|(?P<op>\*\*|->|\.\.|\+-|±|>=|<=|==|!=|[-+*/^(){}<>,:=~%;])"
)


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int
    column: int


def tokenize(source: str) -> List[Token]:
    """Split ``source`` into tokens, ending with an ``eof`` token.

    Newlines inside parentheses or braces are dropped so that calls and
    weighted sets may span lines.

    Raises:
        ParseError: On a character that starts no token.
    """
    tokens: List[Token] = []
    line, line_start, depth, pos = 1, 0, 0, 0
    while pos < len(source):
        match = _TOKEN.match(source, pos)
        if match is None:
            raise ParseError(f"Unexpected character {source[pos]!r}", line, pos - line_start + 1)
        kind = match.lastgroup
        value = match.group(kind)
        column = pos - line_start + 1
        pos = match.end()
        if kind == "newline":
            if depth == 0:
                tokens.append(Token("newline", value, line, column))
            line += 1
            line_start = pos
            continue
        if kind == "skip":
            continue
        if value in ("(", "{"):
            depth += 1
        elif value in (")", "}"):
            depth = max(depth - 1, 0)
        tokens.append(Token(kind, value, line, column))
    tokens.append(Token("eof", "", line, pos - line_start + 1))
    return tokens


class _Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        tok = self.peek()
        if tok.kind != "eof":
            self.pos += 1
        return tok

    def at_op(self, *values: str, offset: int = 0) -> bool:
        tok = self.peek(offset)
        return tok.kind == "op" and tok.value in values

    def at_keyword(self, word: str, offset: int = 0) -> bool:
        tok = self.peek(offset)
        return tok.kind == "name" and tok.value == word

    def error(self, message: str, tok: Optional[Token] = None) -> ParseError:
        tok = tok or self.peek()
        return ParseError(message, tok.line, tok.column)

    def expect_op(self, value: str) -> Token:
        if not self.at_op(value):
            raise self.error(f"Expected '{value}', got {self.describe(self.peek())}")
        return self.advance()

    def expect_keyword(self, word: str) -> Token:
        if not self.at_keyword(word):
            raise self.error(f"Expected '{word}', got {self.describe(self.peek())}")
        return self.advance()

    def expect_name(self) -> str:
        tok = self.peek()
        if tok.kind != "name" or tok.value in KEYWORDS:
            raise self.error(f"Expected a name, got {self.describe(tok)}")
        return self.advance().value

    @staticmethod
    def describe(tok: Token) -> str:
        if tok.kind == "eof":
            return "end of input"
        if tok.kind == "newline":
            return "end of line"
        return f"'{tok.value}'"

    def unit_ahead(self, offset: int = 0) -> bool:
        tok = self.peek(offset)
        if tok.kind == "tick":
            return True
        return tok.kind == "name" and tok.value not in KEYWORDS and is_unit_name(tok.value)

    def unit_word_ahead(self) -> bool:
        """A name after a literal is read as its unit, known or not.

        Unknown names are left for unit resolution to reject with
        suggestions. Calls, keywords and ``per``/``dB`` are not unit words.
        """
        if self.unit_ahead():
            return True
        tok = self.peek()
        return (
            tok.kind == "name"
            and tok.value not in KEYWORDS
            and tok.value not in NON_UNIT_WORDS
            and not self.at_op("(", offset=1)
        )

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def program(self) -> nodes.Program:
        statements = []
        while True:
            while self.at_op(";") or self.peek().kind == "newline":
                self.advance()
            if self.peek().kind == "eof":
                break
            statements.append(self.statement())
            tok = self.peek()
            if not (tok.kind in ("newline", "eof") or self.at_op(";")):
                raise self.error(f"Unexpected {self.describe(tok)}")
        return nodes.Program(tuple(statements))

    def statement(self):
        tok = self.peek()
        if tok.kind == "name" and tok.value not in KEYWORDS:
            if self.at_op("=", offset=1):
                self.pos += 2
                return nodes.Assignment(tok.value, self.expression())
            if self.at_op("(", offset=1) and self.function_definition_ahead():
                return self.function_definition()
        label = self.peek(1)
        if tok.kind == "number" and label.kind == "tick" and self.at_op("=", offset=2):
            self.pos += 3
            return nodes.UnitDefinition(label.value, float(tok.value), self.expression())
        return self.expression()

    def function_definition_ahead(self) -> bool:
        offset = 2
        if self.at_op(")", offset=offset):
            return self.at_op("=", offset=offset + 1)
        while True:
            tok = self.peek(offset)
            if tok.kind != "name" or tok.value in KEYWORDS:
                return False
            offset += 1
            if self.at_op(")", offset=offset):
                return self.at_op("=", offset=offset + 1)
            if not self.at_op(",", offset=offset):
                return False
            offset += 1

    def function_definition(self) -> nodes.FunctionDefinition:
        name = self.advance().value
        self.expect_op("(")
        params: List[str] = []
        if not self.at_op(")"):
            params.append(self.expect_name())
            while self.at_op(","):
                self.advance()
                params.append(self.expect_name())
        self.expect_op(")")
        self.expect_op("=")
        return nodes.FunctionDefinition(name, tuple(params), self.expression())

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def expression(self):
        node = self.comparison()
        while self.at_op("->") or self.at_keyword("as"):
            self.advance()
            node = nodes.Conversion(node, self.conversion_target())
        return node

    def comparison(self):
        node = self.additive()
        if self.at_op(*COMPARISONS):
            op = self.advance().value
            node = nodes.BinaryOp(op, node, self.additive())
        return node

    def additive(self):
        node = self.term()
        while self.at_op("+", "-"):
            op = self.advance().value
            node = nodes.BinaryOp(op, node, self.term())
        return node

    def term(self):
        node = self.range()
        while self.at_op("*", "/"):
            op = self.advance().value
            node = nodes.BinaryOp(op, node, self.range())
        return node

    def range(self):
        left = self.unary()
        if self.at_keyword("to"):
            self.advance()
            right = self.unary()
            return nodes.Range(left, right, self.trailing_unit())
        if self.at_op(".."):
            self.advance()
            right = self.unary()
            return nodes.UniformRange(left, right, self.trailing_unit())
        if self.at_op("+-", "±"):
            self.advance()
            spread = self.unary()
            return nodes.NormalRange(left, spread, self.trailing_unit())
        if self.at_keyword("out"):
            self.advance()
            self.expect_keyword("of")
            return nodes.BetaOf(left, self.unary())
        if self.at_keyword("against"):
            self.advance()
            return nodes.BetaAgainst(left, self.unary())
        return left

    def trailing_unit(self) -> Optional[str]:
        return self.unit_text() if self.unit_word_ahead() else None

    def unary(self):
        if self.at_op("-"):
            self.advance()
            return nodes.UnaryOp("-", self.unary())
        if self.at_op("+"):
            self.advance()
            return self.unary()
        return self.power()

    def power(self):
        base = self.postfix()
        if self.at_op("^", "**"):
            self.advance()
            return nodes.BinaryOp("^", base, self.unary())
        return base

    def postfix(self):
        node = self.primary()
        while self.twiddle_ahead():
            node = nodes.BinaryOp("*", node, self.twiddle())
        return node

    def twiddle_ahead(self) -> bool:
        if not (self.at_op("~") and self.peek(1).kind == "number"):
            return False
        marker = self.peek(2)
        return (marker.kind == "op" and marker.value == "%") or (
            marker.kind == "name" and marker.value in ("dB", "db")
        )

    def twiddle(self):
        self.advance()
        value = float(self.advance().value)
        if self.advance().value == "%":
            return nodes.PercentTwiddle(value)
        return nodes.DbTwiddle(value)

    def primary(self):
        tok = self.peek()
        if tok.kind == "number":
            self.advance()
            return nodes.Number(float(tok.value), self.trailing_unit())
        if tok.kind == "tick":
            return nodes.UnitExpression(self.unit_text())
        if self.at_op("~"):
            if self.twiddle_ahead():
                return self.twiddle()
            self.advance()
            literal = self.peek()
            if literal.kind != "number":
                raise self.error(f"Expected a number after '~', got {self.describe(literal)}")
            self.advance()
            return nodes.SigFigNumber(literal.value, self.trailing_unit())
        if self.at_op("("):
            self.advance()
            inner = self.expression()
            self.expect_op(")")
            if self.unit_ahead():
                return nodes.BinaryOp("*", inner, nodes.UnitExpression(self.unit_text()))
            return inner
        if self.at_op("{"):
            return self.weighted_set()
        if tok.kind == "name":
            if tok.value == "let":
                return self.let_binding()
            if tok.value == "if":
                return self.if_expression()
            if tok.value in KEYWORDS and not (tok.value == "to" and self.at_op("(", offset=1)):
                raise self.error(f"Unexpected keyword '{tok.value}'")
            self.advance()
            if self.at_op("("):
                return nodes.FunctionCall(tok.value, self.call_arguments())
            return nodes.Identifier(tok.value)
        raise self.error(f"Unexpected {self.describe(tok)}")

    def call_arguments(self) -> Tuple:
        self.expect_op("(")
        args = []
        if not self.at_op(")"):
            args.append(self.expression())
            while self.at_op(","):
                self.advance()
                args.append(self.expression())
        self.expect_op(")")
        return tuple(args)

    def let_binding(self) -> nodes.LetBinding:
        self.expect_keyword("let")
        name = self.expect_name()
        self.expect_op("=")
        value = self.expression()
        self.expect_keyword("in")
        return nodes.LetBinding(name, value, self.expression())

    def if_expression(self) -> nodes.IfExpression:
        self.expect_keyword("if")
        condition = self.expression()
        self.expect_keyword("then")
        then_branch = self.expression()
        self.expect_keyword("else")
        return nodes.IfExpression(condition, then_branch, self.expression())

    def weighted_set(self) -> nodes.WeightedSet:
        self.expect_op("{")
        values, weights = [], []
        while True:
            values.append(self.additive())
            self.expect_op(":")
            weights.append(self.additive())
            if not self.at_op(","):
                break
            self.advance()
            if self.at_op("}"):
                break
        self.expect_op("}")
        return nodes.WeightedSet(tuple(values), tuple(weights), self.trailing_unit())

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def unit_text(self) -> str:
        parts = [self.advance().value]
        while True:
            if self.at_op("^", "**"):
                if self.peek(1).kind == "number":
                    self.advance()
                    parts[-1] += "^" + self.advance().value
                    continue
                if self.at_op("-", offset=1) and self.peek(2).kind == "number":
                    self.advance()
                    self.advance()
                    parts[-1] += "^-" + self.advance().value
                    continue
                break
            if (self.at_op("/") or self.at_keyword("per")) and self.unit_ahead(1):
                self.advance()
                parts.extend(["/", self.advance().value])
                continue
            if self.unit_ahead():
                parts.append(self.advance().value)
                continue
            break
        return " ".join(parts)

    def conversion_target(self) -> str:
        if self.at_keyword("SI"):
            self.advance()
            return "SI"
        parts: List[str] = []
        depth = 0
        while True:
            tok = self.peek()
            if tok.kind in ("name", "tick") and tok.value not in KEYWORDS:
                parts.append(tok.value)
            elif tok.kind == "number" and parts:
                parts.append(tok.value)
            elif self.at_op("/", "*", "^", "**"):
                parts.append(tok.value)
            elif self.at_op("-") and parts and parts[-1] in ("^", "**"):
                parts.append(tok.value)
            elif self.at_op("("):
                depth += 1
                parts.append(tok.value)
            elif self.at_op(")") and depth > 0:
                depth -= 1
                parts.append(tok.value)
            else:
                break
            self.advance()
        if not parts:
            raise self.error(f"Expected a unit after conversion, got {self.describe(self.peek())}")
        return " ".join(parts)


def parse(source: str) -> nodes.Program:
    """Parse program text into a :class:`~neofermi.parser.nodes.Program`.

    Raises:
        ParseError: With the line and column of the first offending token.
    """
    program = _Parser(tokenize(source)).program()
    logger.debug("Parsed %d statement(s)", len(program.statements))
    return program


def parse_expression(source: str):
    """Parse a single expression (no assignment or definition)."""
    parser = _Parser(tokenize(source))
    while parser.peek().kind == "newline":
        parser.advance()
    node = parser.expression()
    while parser.peek().kind == "newline":
        parser.advance()
    if parser.peek().kind != "eof":
        raise parser.error(f"Unexpected {parser.describe(parser.peek())}")
    return node
