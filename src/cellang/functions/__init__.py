"""Function objects and the global built-in registry."""

from cellang.functions.base import BuiltInFunction, Function
from cellang.functions.registry import (
    builtin_functions,
    get_builtin,
    register_builtin,
)

__all__ = [
    "BuiltInFunction",
    "Function",
    "builtin_functions",
    "get_builtin",
    "register_builtin",
]
