"""Expression tree: literals, function calls and blocks.

Trees are immutable.  ``evaluate`` never mutates a node; side effects only
happen through the context handed to built-ins.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from cellang.formulas.errors import NESTING_TOO_DEEP, EvalError, FunctionError
from cellang.formulas.values import format_number, is_number


class FunctionLike(Protocol):
    name: str

    def check_arity(self, count: int) -> None: ...

    def invoke(self, context: Any, args: Sequence["Expression"]) -> Any: ...


class Context(Protocol):
    """What evaluation needs from a context."""

    def lookup_function(self, name: str) -> FunctionLike | None: ...


class Expression:
    """Base class of every tree node."""

    def evaluate(self, context: Context) -> Any:
        """Return the value of this node.

        Raises:
            EvalError: On the first failure found while evaluating.
        """
        raise NotImplementedError

    def inspect(self) -> str:
        """Canonical, re-parseable text of this node, e.g. ``ADD(1, 2)`` for ``1+2``."""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.inspect()


def quote_string(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


@dataclass(frozen=True)
class Literal(Expression):
    value: Any

    def evaluate(self, context: Context) -> Any:
        return self.value

    def inspect(self) -> str:
        value = self.value
        if isinstance(value, bool):
            return "TRUE()" if value else "FALSE()"
        if is_number(value):
            if math.isinf(value):
                # 1e999 overflows back to infinity when re-parsed
                return "1e999" if value > 0 else "NEGATE(1e999)"
            return format_number(value)
        if value is None:
            return '""'
        return quote_string(str(value))


@dataclass(frozen=True)
class FunctionCall(Expression):
    name: str
    args: tuple[Expression, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))

    def evaluate(self, context: Context) -> Any:
        function = context.lookup_function(self.name)
        if function is None:
            raise FunctionError(self.name)
        function.check_arity(len(self.args))
        return function.invoke(context, self.args)

    def inspect(self) -> str:
        return f"{self.name}({', '.join(arg.inspect() for arg in self.args)})"


@dataclass(frozen=True)
class Block(Expression):
    """Members evaluated in order; the value is the last member's value."""

    body: tuple[Expression, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "body", tuple(self.body))

    def evaluate(self, context: Context) -> Any:
        result = None
        for member in self.body:
            result = member.evaluate(context)
        return result

    def inspect(self) -> str:
        return f"({', '.join(member.inspect() for member in self.body)})"


def evaluate_args(args: Sequence[Expression], context: Context) -> list[Any]:
    """Evaluate every argument in order; the first error propagates unchanged."""
    return [arg.evaluate(context) for arg in args]


def render(expression: Expression) -> str:
    """``expression.inspect()``, reporting a tree too deep to walk as ``EvalError``."""
    try:
        return expression.inspect()
    except RecursionError:
        raise EvalError(NESTING_TOO_DEEP) from None
