"""Dynamic values and the coercion rules shared by every built-in.

Values are plain Python objects:

- Number: ``float`` (``int`` is accepted and widened)
- String: ``str``
- Boolean: ``bool``
- Empty: ``None``
- Range: ``dict[int, value]`` in iteration order of the range

``bool`` is a subclass of ``int`` in Python, so every helper checks for it
first; a Boolean is never a Number.
"""

from __future__ import annotations

from typing import Any

from cellang.formulas.errors import FunctionError

# Cell addresses are written with at most nine digits.
MAX_ADDRESS = 999_999_999

# Largest range a built-in reads or fills in one call.
MAX_RANGE_CELLS = 1_000_000


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_range(value: Any) -> bool:
    return isinstance(value, dict)


def type_name(value: Any) -> str:
    """Return the user-facing type name of *value*."""
    if value is None:
        return "empty"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if is_range(value):
        return "range"
    return type(value).__name__


def as_number(value: Any, func_name: str) -> float:
    """Return *value* as a float or raise a ``FunctionError`` naming *func_name*."""
    if not is_number(value):
        raise FunctionError(
            func_name, f"{func_name}: expected number, got {type_name(value)}."
        )
    return float(value)


def as_address(value: Any, func_name: str) -> int:
    """Truncate a numeric *value* to a cell address."""
    number = as_number(value, func_name)
    if number != number or number in (float("inf"), float("-inf")):
        raise FunctionError(func_name, f"{func_name}: invalid cell address {number!r}.")
    address = int(number)
    if address < 0 or address > MAX_ADDRESS:
        raise FunctionError(func_name, f"{func_name}: cell address {address} out of range.")
    return address


def is_falsy(value: Any) -> bool:
    """Empty, the empty string, zero, ``False`` and an empty range are falsy."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if is_number(value):
        return value == 0
    if is_range(value):
        return len(value) == 0
    return False


def is_truthy(value: Any) -> bool:
    return not is_falsy(value)


def format_number(value: float) -> str:
    """Canonical text of a number: ``1`` for 1.0, ``0.5``, ``1e+20``."""
    number = float(value)
    if number.is_integer() and abs(number) < 1e16:
        return str(int(number))
    return repr(number)


def to_text(value: Any) -> str:
    """Stringify *value* the way ``CONCAT`` and ``PRINT`` see it.

    A range is flattened in ascending address order, whichever way it was read.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if is_number(value):
        return format_number(value)
    if is_range(value):
        return "".join(to_text(value[address]) for address in sorted(value))
    return str(value)


def values_equal(left: Any, right: Any) -> bool:
    """Structural equality after folding falsy values to ``False``."""
    if is_falsy(left):
        left = False
    if is_falsy(right):
        right = False
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return float(left) == float(right)
    if is_range(left) and is_range(right):
        return list(left.items()) == list(right.items())
    return type(left) is type(right) and left == right
