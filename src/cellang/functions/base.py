"""Callable functions as seen by the evaluator."""

from __future__ import annotations

from typing import Any, Callable, Sequence

from cellang.formulas.errors import FunctionError
from cellang.formulas.expressions import Expression

# (context, unevaluated argument expressions) -> value
NativeCallable = Callable[[Any, Sequence[Expression]], Any]


class Function:
    """A named function with a declared arity.

    Attributes:
        name: Name the function is registered under.
        parameter_count: Exact argument count, or the minimum when variadic.
        is_variadic: Whether more than ``parameter_count`` arguments are accepted.
    """

    name: str
    parameter_count: int
    is_variadic: bool

    def check_arity(self, count: int) -> None:
        """Raise ``FunctionError`` if *count* arguments do not fit the declared arity."""
        if self.is_variadic:
            if count < self.parameter_count:
                raise FunctionError(
                    self.name,
                    f"{self.name}: function requires at least {self.parameter_count} "
                    f"argument{'s' if self.parameter_count != 1 else ''}, got {count}.",
                )
        elif count != self.parameter_count:
            raise FunctionError(
                self.name,
                f"{self.name}: function requires exactly {self.parameter_count} "
                f"argument{'s' if self.parameter_count != 1 else ''}, got {count}.",
            )

    def invoke(self, context: Any, args: Sequence[Expression]) -> Any:
        raise NotImplementedError


class BuiltInFunction(Function):
    """Wraps a native Python callable.

    The callable receives the context and the *unevaluated* argument
    expressions, and evaluates whichever operands it needs.
    """

    def __init__(
        self,
        name: str,
        parameter_count: int,
        is_variadic: bool,
        func: NativeCallable,
    ) -> None:
        if not name:
            raise ValueError("Function name is empty.")
        if func is None:
            raise ValueError(f"No callable given for function {name!r}.")
        self.name = name
        self.parameter_count = max(parameter_count, 0)
        self.is_variadic = is_variadic
        self._func = func

    def invoke(self, context: Any, args: Sequence[Expression]) -> Any:
        return self._func(context, args)

    def __repr__(self) -> str:
        return f"<function:{self.name}>"
