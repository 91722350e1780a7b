"""Cell and range accessors: GET_CELL, GET_RANGE, SET_CELL, SET_RANGE, COPY_RANGE.

Addresses are evaluated to numbers and truncated to integers before they
reach the context.  A range a call reads or fills holds at most
``MAX_RANGE_CELLS`` addresses; clearing a range with Empty has no limit.
"""

from __future__ import annotations

from typing import Any, Sequence

from cellang.formulas.errors import FunctionError
from cellang.formulas.expressions import Expression, evaluate_args
from cellang.formulas.values import MAX_RANGE_CELLS, as_address, is_range
from cellang.functions.registry import register_builtin


def _addresses(name: str, ctx: Any, args: Sequence[Expression]) -> list[int]:
    return [as_address(value, name) for value in evaluate_args(args, ctx)]


def _storable(name: str, value: Any) -> Any:
    if is_range(value):
        raise FunctionError(name, f"{name}: a range cannot be stored in a cell.")
    return value


def _check_span(name: str, start: int, end: int) -> None:
    size = abs(end - start) + 1
    if size > MAX_RANGE_CELLS:
        raise FunctionError(
            name, f"{name}: range of {size} cells exceeds the limit of {MAX_RANGE_CELLS}."
        )


@register_builtin("GET_CELL", 1)
def _fn_get_cell(ctx: Any, args: Sequence[Expression]) -> Any:
    (address,) = _addresses("GET_CELL", ctx, args)
    return ctx.get(address)


@register_builtin("GET_RANGE", 2)
def _fn_get_range(ctx: Any, args: Sequence[Expression]) -> dict[int, Any]:
    start, end = _addresses("GET_RANGE", ctx, args)
    _check_span("GET_RANGE", start, end)
    return ctx.get_range(start, end)


@register_builtin("SET_CELL", 2)
def _fn_set_cell(ctx: Any, args: Sequence[Expression]) -> Any:
    """SET_CELL(addr, value): store *value*, returning it."""
    (address,) = _addresses("SET_CELL", ctx, args[:1])
    value = _storable("SET_CELL", args[1].evaluate(ctx))
    ctx.set(address, value)
    return value


@register_builtin("SET_RANGE", 3)
def _fn_set_range(ctx: Any, args: Sequence[Expression]) -> Any:
    """SET_RANGE(start, end, value): fill the range, returning *value*."""
    start, end = _addresses("SET_RANGE", ctx, args[:2])
    value = _storable("SET_RANGE", args[2].evaluate(ctx))
    if value is not None:
        _check_span("SET_RANGE", start, end)
    ctx.set_range(start, end, value)
    return value


@register_builtin("COPY_RANGE", 4)
def _fn_copy_range(ctx: Any, args: Sequence[Expression]) -> None:
    """COPY_RANGE(src_start, src_end, dst_start, dst_end): cyclic copy, returns Empty."""
    src_start, src_end, dst_start, dst_end = _addresses("COPY_RANGE", ctx, args)
    _check_span("COPY_RANGE", src_start, src_end)
    _check_span("COPY_RANGE", dst_start, dst_end)
    ctx.copy_range(src_start, src_end, dst_start, dst_end)
    return None
