"""Evaluation entry points.

``evaluate`` is the non-throwing contract used by the front end.
``compile_formula`` and ``evaluate_formula`` run the whole pipeline on a
piece of text and raise the stage's ``FormulaError`` instead.
"""

from __future__ import annotations

from typing import Any

from cellang.formulas.errors import NESTING_TOO_DEEP, EvalError, LexError
from cellang.formulas.expressions import Context, Expression
from cellang.formulas.parser import parse_or_raise
from cellang.formulas.tokenizer import scan
from cellang.formulas.tokens import Token


def evaluate(expression: Expression, context: Context) -> tuple[Any, str | None]:
    """Evaluate *expression* against *context*.

    Returns:
        ``(value, None)`` on success or ``(None, message)`` on the first
        evaluation error, including a tree nested too deeply to walk.
    """
    try:
        return expression.evaluate(context), None
    except EvalError as exc:
        return None, exc.message
    except RecursionError:
        return None, NESTING_TOO_DEEP


def compile_formula(text: str) -> Expression | None:
    """Tokenize and parse a complete statement, which may span several lines.

    Raises:
        LexError: On a bad character, an unmatched ``)`` or a bracket still
            open at the end of *text*.
        ParseError: On a syntax error.
    """
    tokens: list[Token] = []
    scope = 0
    for line in text.splitlines() or [""]:
        scope = scan(line, tokens)
    if scope > 0:
        raise LexError(f"Unexpected end of input: {scope} unclosed '('.")
    return parse_or_raise(tokens)


def evaluate_formula(text: str, context: Context) -> Any:
    """Compile and evaluate *text*; an empty statement evaluates to ``None``.

    Raises:
        FormulaError: From whichever stage failed first.
    """
    expression = compile_formula(text)
    if expression is None:
        return None
    try:
        return expression.evaluate(context)
    except RecursionError:
        raise EvalError(NESTING_TOO_DEEP) from None
