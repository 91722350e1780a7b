"""Precedence-climbing parser for cellang formulas.

Operator precedence (lowest to highest):
  1. Concatenation: &                  (chains)
  2. Equality: = == != <>              (at most one per level)
  3. Relation: >= > < <=               (at most one per level)
  4. Additive: + -                     (chains)
  5. Multiplicative: * /               (chains)
  6. Unary: leading + or - on a primary -> ABS(x) / NEGATE(x)
  7. Primaries: number, string, name call, (group), cell reference or range

Every operator is rewritten into a call of a named built-in, so ``1 + 2``
parses to ``ADD(1, 2)``.  A bare name is a call with no arguments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from cellang.formulas.errors import NESTING_TOO_DEEP, ParseError
from cellang.formulas.expressions import Block, Expression, FunctionCall, Literal
from cellang.formulas.tokens import Token, TokenKind

OPERATOR_FUNCTIONS: dict[TokenKind, str] = {
    TokenKind.PLUS: "ADD",
    TokenKind.MINUS: "SUBTRACT",
    TokenKind.STAR: "MULTIPLY",
    TokenKind.SLASH: "DIVIDE",
    TokenKind.GREATER_EQ: "GREATER_EQUAL",
    TokenKind.GREATER_T: "GREATER_THAN",
    TokenKind.LESS_T: "LESS_THAN",
    TokenKind.LESS_EQ: "LESS_EQUAL",
    TokenKind.EQUAL: "EQUAL",
    TokenKind.NOT_EQUAL: "NOT_EQUAL",
    TokenKind.AMPERSAND: "CONCAT",
}

UNARY_FUNCTIONS: dict[TokenKind, str] = {
    TokenKind.PLUS: "ABS",
    TokenKind.MINUS: "NEGATE",
}

# Cell addresses are at most nine digits long.
MAX_CELL_DIGITS = 9


@dataclass(frozen=True)
class Level:
    operators: frozenset[TokenKind]
    chaining: bool


# Lowest precedence first.
LEVELS: tuple[Level, ...] = (
    Level(frozenset({TokenKind.AMPERSAND}), chaining=True),
    Level(frozenset({TokenKind.EQUAL, TokenKind.NOT_EQUAL}), chaining=False),
    Level(
        frozenset({TokenKind.GREATER_EQ, TokenKind.GREATER_T, TokenKind.LESS_T, TokenKind.LESS_EQ}),
        chaining=False,
    ),
    Level(frozenset({TokenKind.PLUS, TokenKind.MINUS}), chaining=True),
    Level(frozenset({TokenKind.STAR, TokenKind.SLASH}), chaining=True),
)

_EOF = Token(TokenKind.EOF)


class _Parser:
    """Single-pass cursor over a token sequence."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens = list(tokens)
        self.pos = 0

    # -- cursor ---------------------------------------------------------

    @property
    def current(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return _EOF

    def at(self, *kinds: TokenKind) -> bool:
        return self.current.kind in kinds

    def advance(self) -> Token:
        token = self.current
        if self.pos < len(self.tokens):
            self.pos += 1
        return token

    def expect(self, kind: TokenKind) -> Token:
        token = self.current
        if token.kind is not kind:
            raise ParseError(
                f"Unexpected '{token.kind}', expected '{kind}'.",
                position=token.offset,
            )
        return self.advance()

    # -- grammar --------------------------------------------------------

    def parse(self) -> Expression | None:
        expr = self.sequence()
        if self.pos < len(self.tokens):
            raise ParseError(
                "Tokens left on input, missing bracket?", position=self.current.offset
            )
        return expr

    def sequence(self) -> Expression | None:
        """``expr (, expr)*``; more than one member makes a Block."""
        expr = self.expression()
        if not self.at(TokenKind.COMMA):
            return expr
        if expr is None:
            raise ParseError(
                "Empty expression before comma in block.", position=self.current.offset
            )
        body = [expr]
        while self.at(TokenKind.COMMA):
            self.advance()
            expr = self.expression()
            if expr is None:
                raise ParseError(
                    "Empty expression after comma in block.", position=self.current.offset
                )
            body.append(expr)
        return Block(tuple(body))

    def expression(self) -> Expression | None:
        return self.binary(0)

    def binary(self, level: int) -> Expression | None:
        if level >= len(LEVELS):
            return self.unary()

        rule = LEVELS[level]
        left = self.binary(level + 1)
        if not self.at(*rule.operators):
            return left
        if left is None:
            token = self.current
            raise ParseError(
                f"Unexpected '{token.kind}', expected left side of the expression.",
                position=token.offset,
            )

        while self.at(*rule.operators):
            op = self.advance()
            right = self.binary(level + 1)
            if right is None:
                raise ParseError(
                    "Expected right side of the expression.", position=self.current.offset
                )
            left = FunctionCall(OPERATOR_FUNCTIONS[op.kind], (left, right))
            if not rule.chaining:
                break
        return left

    def unary(self) -> Expression | None:
        if not self.at(*UNARY_FUNCTIONS):
            return self.primary()
        sign = self.advance()
        operand = self.primary()
        if operand is None:
            raise ParseError(
                f"Unexpected token: '{self.current.kind}'.", position=self.current.offset
            )
        return FunctionCall(UNARY_FUNCTIONS[sign.kind], (operand,))

    def primary(self) -> Expression | None:
        token = self.current
        kind = token.kind

        if kind is TokenKind.NUMBER:
            self.advance()
            return Literal(float(token.value))

        if kind is TokenKind.STRING:
            self.advance()
            return Literal(token.value)

        if kind is TokenKind.NAME:
            self.advance()
            args: tuple[Expression, ...] = ()
            if self.at(TokenKind.BRACKET_L):
                args = self.arguments()
            return FunctionCall(token.value, args)

        if kind is TokenKind.BRACKET_L:
            self.advance()
            if self.at(TokenKind.BRACKET_R):
                raise ParseError("Empty expression in brackets.", position=self.current.offset)
            expr = self.sequence()
            if expr is None:
                raise ParseError(
                    f"Unexpected '{self.current.kind}', expected expression.",
                    position=self.current.offset,
                )
            self.expect(TokenKind.BRACKET_R)
            return expr

        if kind is TokenKind.CELL:
            self.advance()
            begin = cell_address(token)
            if self.at(TokenKind.CELL):
                end = cell_address(self.advance())
                return FunctionCall("GET_RANGE", (Literal(float(begin)), Literal(float(end))))
            return FunctionCall("GET_CELL", (Literal(float(begin)),))

        return None

    def arguments(self) -> tuple[Expression, ...]:
        """``( [expr (, expr)*] )`` after a function name."""
        self.expect(TokenKind.BRACKET_L)
        if self.at(TokenKind.BRACKET_R):
            self.advance()
            return ()

        args: list[Expression] = []
        while True:
            arg = self.expression()
            if arg is None:
                if args:
                    message = "Empty expression after comma in argument list."
                elif self.at(TokenKind.COMMA):
                    message = "Empty expression before comma in argument list."
                else:
                    message = f"Unexpected '{self.current.kind}', expected expression."
                raise ParseError(message, position=self.current.offset)
            args.append(arg)
            if not self.at(TokenKind.COMMA):
                break
            self.advance()
        self.expect(TokenKind.BRACKET_R)
        return tuple(args)


def cell_address(token: Token) -> int:
    """Convert a cell token's digits to an address.

    Raises:
        ParseError: If the digits are longer than ``MAX_CELL_DIGITS``.
    """
    digits = token.value or ""
    if len(digits) > MAX_CELL_DIGITS:
        raise ParseError(
            f"Cell index too long: '{digits}' (at most {MAX_CELL_DIGITS} digits).",
            position=token.offset,
        )
    if not digits.isdigit():
        raise ParseError(f"Invalid cell index: '{digits}'.", position=token.offset)
    return int(digits)


def parse_or_raise(tokens: Sequence[Token]) -> Expression | None:
    """Parse *tokens*, raising ``ParseError`` on invalid input.

    Returns ``None`` for an empty token sequence.  Brackets nested deeper
    than the interpreter stack allows are a ``ParseError`` as well.
    """
    if not tokens:
        return None
    try:
        return _Parser(tokens).parse()
    except RecursionError:
        raise ParseError(NESTING_TOO_DEEP, position=tokens[0].offset) from None


def parse(tokens: Sequence[Token] | None) -> tuple[Expression | None, str | None]:
    """Parse *tokens* into an expression tree.

    Returns:
        ``(expression, None)`` on success, ``(None, None)`` for empty input and
        ``(None, message)`` on a syntax error.  A failed parse never returns a
        partial tree.
    """
    try:
        return parse_or_raise(tokens or ()), None
    except ParseError as exc:
        return None, exc.message
