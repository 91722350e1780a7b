"""Arithmetic and comparison formula functions.

The parser rewrites operators into these: ``+`` is ``ADD``, unary ``-`` is
``NEGATE``, ``<=`` is ``LESS_EQUAL`` and so on.
"""

from __future__ import annotations

from typing import Any, Sequence

from cellang.formulas.errors import FunctionError
from cellang.formulas.expressions import Expression, evaluate_args
from cellang.formulas.values import as_number
from cellang.functions.registry import register_builtin


def _numbers(name: str, ctx: Any, args: Sequence[Expression]) -> list[float]:
    """Evaluate all arguments and require each to be a number."""
    return [as_number(value, name) for value in evaluate_args(args, ctx)]


# ---------- Arithmetic ----------


@register_builtin("ADD", 2)
def _fn_add(ctx: Any, args: Sequence[Expression]) -> float:
    a, b = _numbers("ADD", ctx, args)
    return a + b


@register_builtin("SUBTRACT", 2)
def _fn_subtract(ctx: Any, args: Sequence[Expression]) -> float:
    a, b = _numbers("SUBTRACT", ctx, args)
    return a - b


@register_builtin("MULTIPLY", 2)
def _fn_multiply(ctx: Any, args: Sequence[Expression]) -> float:
    a, b = _numbers("MULTIPLY", ctx, args)
    return a * b


@register_builtin("DIVIDE", 2)
def _fn_divide(ctx: Any, args: Sequence[Expression]) -> float:
    """DIVIDE(a, b): errors on a zero divisor."""
    a, b = _numbers("DIVIDE", ctx, args)
    if b == 0:
        raise FunctionError("DIVIDE", "DIVIDE: division by zero.")
    return a / b


@register_builtin("NEGATE", 1)
def _fn_negate(ctx: Any, args: Sequence[Expression]) -> float:
    (a,) = _numbers("NEGATE", ctx, args)
    return -a


@register_builtin("ABS", 1)
def _fn_abs(ctx: Any, args: Sequence[Expression]) -> float:
    (a,) = _numbers("ABS", ctx, args)
    return abs(a)


# ---------- Comparison ----------


@register_builtin("LESS_THAN", 2)
def _fn_less_than(ctx: Any, args: Sequence[Expression]) -> bool:
    a, b = _numbers("LESS_THAN", ctx, args)
    return a < b


@register_builtin("LESS_EQUAL", 2)
def _fn_less_equal(ctx: Any, args: Sequence[Expression]) -> bool:
    a, b = _numbers("LESS_EQUAL", ctx, args)
    return a <= b


@register_builtin("GREATER_THAN", 2)
def _fn_greater_than(ctx: Any, args: Sequence[Expression]) -> bool:
    a, b = _numbers("GREATER_THAN", ctx, args)
    return a > b


@register_builtin("GREATER_EQUAL", 2)
def _fn_greater_equal(ctx: Any, args: Sequence[Expression]) -> bool:
    a, b = _numbers("GREATER_EQUAL", ctx, args)
    return a >= b
