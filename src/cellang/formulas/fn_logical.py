"""Equality and logical formula functions: EQUAL, NOT_EQUAL, AND, OR, NOT, IF.

Empty, ``""``, zero, FALSE and an empty range count as false; everything
else counts as true.
"""

from __future__ import annotations

from typing import Any, Sequence

from cellang.formulas.errors import FunctionError
from cellang.formulas.expressions import Expression, evaluate_args
from cellang.formulas.values import is_truthy, values_equal
from cellang.functions.registry import register_builtin


@register_builtin("EQUAL", 2)
def _fn_equal(ctx: Any, args: Sequence[Expression]) -> bool:
    """EQUAL(a, b): any two values are comparable; ``EQUAL(0, "")`` is TRUE."""
    a, b = evaluate_args(args, ctx)
    return values_equal(a, b)


@register_builtin("NOT_EQUAL", 2)
def _fn_not_equal(ctx: Any, args: Sequence[Expression]) -> bool:
    a, b = evaluate_args(args, ctx)
    return not values_equal(a, b)


@register_builtin("AND", 1, variadic=True)
def _fn_and(ctx: Any, args: Sequence[Expression]) -> bool:
    """AND(val1, val2, ...): TRUE if all arguments are truthy."""
    return all(is_truthy(a) for a in evaluate_args(args, ctx))


@register_builtin("OR", 1, variadic=True)
def _fn_or(ctx: Any, args: Sequence[Expression]) -> bool:
    """OR(val1, val2, ...): TRUE if any argument is truthy."""
    return any(is_truthy(a) for a in evaluate_args(args, ctx))


@register_builtin("NOT", 1)
def _fn_not(ctx: Any, args: Sequence[Expression]) -> bool:
    (a,) = evaluate_args(args, ctx)
    return not is_truthy(a)


@register_builtin("IF", 2, variadic=True)
def _fn_if(ctx: Any, args: Sequence[Expression]) -> Any:
    """IF(condition, then_value [, else_value]): only the chosen branch is evaluated."""
    if len(args) > 3:
        raise FunctionError("IF", f"IF: function accepts at most 3 arguments, got {len(args)}.")
    if is_truthy(args[0].evaluate(ctx)):
        return args[1].evaluate(ctx)
    if len(args) == 3:
        return args[2].evaluate(ctx)
    return False


@register_builtin("TRUE", 0)
def _fn_true(ctx: Any, args: Sequence[Expression]) -> bool:
    return True


@register_builtin("FALSE", 0)
def _fn_false(ctx: Any, args: Sequence[Expression]) -> bool:
    return False
