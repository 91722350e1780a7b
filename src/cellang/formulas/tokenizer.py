"""Incremental tokenizer.

A statement may span several lines: while a ``(`` is left open the tokenizer
reports ``NEEDS_MORE`` and the caller feeds the next line with the same token
list.  Scope depth is recomputed from that list on every call, so the list is
the only state carried between calls.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from cellang.formulas.errors import LexError
from cellang.formulas.tokens import DEFINITIONS, Token, TokenDefinition, TokenKind


class TokenizerResult(str, Enum):
    OK = "ok"
    NEEDS_MORE = "needs_more"
    ERROR = "error"


def scope_level(tokens: Sequence[Token] | None) -> int:
    """Count of ``(`` not yet closed by a ``)`` in *tokens*."""
    scope = 0
    for token in tokens or ():
        if token.kind is TokenKind.BRACKET_L:
            scope += 1
        elif token.kind is TokenKind.BRACKET_R:
            scope -= 1
    return scope


def scan(
    line: str,
    tokens: list[Token],
    definitions: Sequence[TokenDefinition] = DEFINITIONS,
) -> int:
    """Append the tokens of *line* to *tokens* and return the resulting scope depth.

    Raises:
        LexError: On an unmatched ``)`` or a character no definition accepts.
            *tokens* is left as it was when the error was found; ``tokenize``
            clears it.
    """
    scope = scope_level(tokens)
    offset = 0
    while offset < len(line):
        for definition in definitions:
            length = definition.match(line, offset)
            if length <= 0:
                continue
            if not definition.ignore:
                value = definition.make_value(line[offset:offset + length])
                token = Token(definition.kind_for(value), value, offset)
                if token.kind is TokenKind.BRACKET_L:
                    scope += 1
                elif token.kind is TokenKind.BRACKET_R:
                    scope -= 1
                    if scope < 0:
                        raise LexError(
                            "Unexpected ')' without previous active scopes.", offset
                        )
                tokens.append(token)
            offset += length
            break
        else:
            raise LexError(f"Unexpected character at offset {offset}.", offset)
    return scope


def tokenize(line: str | None, tokens: list[Token]) -> tuple[TokenizerResult, str | None]:
    """Tokenize one input line into *tokens*.

    Args:
        line: The line of source text (without its newline).
        tokens: Accumulated tokens of the statement in progress.  Extended in
            place on ``OK`` and ``NEEDS_MORE``; always emptied on ``ERROR``.

    Returns:
        ``(result, error)`` where *error* is ``None`` unless *result* is
        ``ERROR``.
    """
    if line is None:
        tokens.clear()
        return TokenizerResult.ERROR, "Input is null."

    try:
        scope = scan(line, tokens)
    except LexError as exc:
        tokens.clear()
        return TokenizerResult.ERROR, exc.message

    if scope > 0:
        return TokenizerResult.NEEDS_MORE, None
    return TokenizerResult.OK, None
