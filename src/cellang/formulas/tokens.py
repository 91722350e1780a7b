"""Token kinds, tokens and the ordered token definition set."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable


class TokenKind(str, Enum):
    """Closed set of token kinds.  The value is the canonical text used in messages."""

    EOF = "<eof>"
    CELL = "cell"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    LESS_EQ = "<="
    LESS_T = "<"
    EQUAL = "== or ="
    NOT_EQUAL = "!= or <>"
    GREATER_T = ">"
    GREATER_EQ = ">="
    AMPERSAND = "&"
    BRACKET_L = "("
    BRACKET_R = ")"
    COMMA = ","
    NAME = "name"
    NUMBER = "number"
    STRING = "string"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    """A single lexeme.  ``value`` defaults to the canonical text of ``kind``."""

    kind: TokenKind
    value: str | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        if self.value is None:
            object.__setattr__(self, "value", self.kind.value)

    def __str__(self) -> str:
        return f"{self.kind}: {self.value}"


@dataclass(frozen=True)
class TokenDefinition:
    """A pattern matched at an exact offset of the input line.

    Attributes:
        pattern: Regular expression, compiled once.
        kind: Default token kind for a match.
        ignore: Matches are skipped and produce no token (whitespace, comments).
        resolve_kind: Maps the processed text to a concrete kind.
        process: Turns the raw matched text into the token value.
    """

    pattern: re.Pattern[str]
    kind: TokenKind
    ignore: bool = False
    resolve_kind: Callable[[str], TokenKind] | None = None
    process: Callable[[str], str] | None = None
    name: str = field(default="", compare=False)

    def match(self, text: str, offset: int) -> int:
        """Return the length of the match starting exactly at *offset* (0 if none)."""
        if not text or offset >= len(text):
            return 0
        m = self.pattern.match(text, offset)
        return m.end() - offset if m else 0

    def make_value(self, raw: str) -> str:
        return self.process(raw) if self.process else raw

    def kind_for(self, value: str) -> TokenKind:
        return self.resolve_kind(value) if self.resolve_kind else self.kind


# ---------------------------------------------------------------------------
# Post-processors and kind resolvers
# ---------------------------------------------------------------------------


def unquote_string(raw: str) -> str:
    """Strip the surrounding quotes and collapse doubled quote characters.

    ``"a""b"`` becomes ``a"b``; only the opening quote character is an escape.
    """
    if not raw:
        return ""
    quote = raw[0]
    return raw[1:-1].replace(quote * 2, quote)


def strip_cell_sigil(raw: str) -> str:
    """``$12`` and ``:12`` both become ``12``."""
    return raw[1:]


_OPERATOR_KINDS: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "<=": TokenKind.LESS_EQ,
    "<": TokenKind.LESS_T,
    ">": TokenKind.GREATER_T,
    ">=": TokenKind.GREATER_EQ,
    "=": TokenKind.EQUAL,
    "==": TokenKind.EQUAL,
    "<>": TokenKind.NOT_EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    ",": TokenKind.COMMA,
    "&": TokenKind.AMPERSAND,
    "(": TokenKind.BRACKET_L,
    ")": TokenKind.BRACKET_R,
}


def operator_kind(value: str) -> TokenKind:
    return _OPERATOR_KINDS.get(value, TokenKind.UNKNOWN)


# ---------------------------------------------------------------------------
# Definition set
# ---------------------------------------------------------------------------

# Order is significant: the first definition that matches at an offset wins,
# so names, numbers and strings are tried before operators.
DEFINITIONS: tuple[TokenDefinition, ...] = (
    TokenDefinition(re.compile(r"\s+"), TokenKind.UNKNOWN, ignore=True, name="whitespace"),
    TokenDefinition(re.compile(r"#.*$"), TokenKind.UNKNOWN, ignore=True, name="comment"),
    TokenDefinition(re.compile(r"[a-zA-Z_@][a-zA-Z0-9_@]*"), TokenKind.NAME, name="name"),
    TokenDefinition(
        re.compile(r"([0-9]+\.[0-9]+|[0-9]+|\.[0-9]+)([Ee][+-]?[0-9]+)?"),
        TokenKind.NUMBER,
        name="number",
    ),
    TokenDefinition(
        re.compile(r'"(""|[^"])*"|\'(\'\'|[^\'])*\'|`(``|[^`])*`'),
        TokenKind.STRING,
        process=unquote_string,
        name="string",
    ),
    TokenDefinition(
        re.compile(r"[$:][0-9]+"),
        TokenKind.CELL,
        process=strip_cell_sigil,
        name="cell",
    ),
    TokenDefinition(
        re.compile(r"<=|>=|!=|<>|==?|<|>|\+|-|\*|/|,|&|\(|\)"),
        TokenKind.UNKNOWN,
        resolve_kind=operator_kind,
        name="operator",
    ),
)
