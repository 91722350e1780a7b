"""Text formula functions: CONCAT, PRINT, INSPECT."""

from __future__ import annotations

from typing import Any, Sequence

from cellang.formulas.errors import FunctionError
from cellang.formulas.expressions import Expression, evaluate_args, render
from cellang.formulas.values import to_text
from cellang.functions.registry import register_builtin


@register_builtin("CONCAT", 1, variadic=True)
def _fn_concat(ctx: Any, args: Sequence[Expression]) -> str:
    """CONCAT(val1, ...): ranges contribute their values in address order, Empty adds nothing."""
    return "".join(to_text(value) for value in evaluate_args(args, ctx))


@register_builtin("PRINT", 1, variadic=True)
def _fn_print(ctx: Any, args: Sequence[Expression]) -> str:
    """PRINT(val1, ...): write the concatenated text and a newline to the context output."""
    text = "".join(to_text(value) for value in evaluate_args(args, ctx))
    stream = getattr(ctx, "stdout", None)
    if stream is None:
        raise FunctionError("PRINT", "PRINT: context has no output stream.")
    stream.write(text + "\n")
    return text


@register_builtin("INSPECT", 1)
def _fn_inspect(ctx: Any, args: Sequence[Expression]) -> str:
    """INSPECT(expr): canonical text of the unevaluated argument."""
    return render(args[0])
