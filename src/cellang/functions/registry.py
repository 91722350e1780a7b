"""Process-wide registry of built-in functions.

Built-ins register themselves with ``register_builtin`` while
``cellang.formulas.builtins`` is imported; the registry is then sealed and
only read from.  Names are case-insensitive.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from cellang.functions.base import BuiltInFunction, Function, NativeCallable

_BUILTIN_FUNCTIONS: dict[str, Function] = {}
_sealed = False


def _key(name: str) -> str:
    return name.upper()


def add_builtin(function: Function) -> Function:
    """Add *function* to the global registry.

    Raises:
        RuntimeError: If the registry has been sealed.
        ValueError: If a function with the same name already exists.
    """
    if _sealed:
        raise RuntimeError(
            f"Cannot register {function.name!r}: the built-in registry is sealed."
        )
    key = _key(function.name)
    if key in _BUILTIN_FUNCTIONS:
        raise ValueError(f"Cannot overwrite global function {function.name!r}.")
    _BUILTIN_FUNCTIONS[key] = function
    return function


def register_builtin(
    name: str, parameter_count: int, *, variadic: bool = False
) -> Callable[[NativeCallable], NativeCallable]:
    """Decorator that registers a native callable as a built-in by name.

    Args:
        name: The lookup name for this function.
        parameter_count: Exact argument count, or the minimum when *variadic*.
        variadic: Accept more than *parameter_count* arguments.

    Returns:
        The callable, unmodified.
    """

    def decorator(fn: NativeCallable) -> NativeCallable:
        add_builtin(BuiltInFunction(name, parameter_count, variadic, fn))
        return fn

    return decorator


def seal_registry() -> None:
    """Reject any further registration."""
    global _sealed
    _sealed = True


def is_sealed() -> bool:
    return _sealed


def get_builtin(name: str) -> Function | None:
    """Look up a built-in by case-insensitive *name*; ``None`` if absent."""
    return _BUILTIN_FUNCTIONS.get(_key(name))


def builtin_functions() -> Mapping[str, Function]:
    """Read-only view of the registry keyed by upper-case name."""
    return MappingProxyType(_BUILTIN_FUNCTIONS)
