"""Error types for tokenizing, parsing and evaluating formulas."""

from __future__ import annotations


class FormulaError(Exception):
    """Base class for all formula-related errors."""

    @property
    def message(self) -> str:
        return str(self)


class LexError(FormulaError):
    """Input text that cannot be split into tokens.

    Attributes:
        offset: Offset in the line where tokenizing stopped, if known.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        super().__init__(message)


class ParseError(FormulaError):
    """Syntax error in a token sequence.

    Attributes:
        position: Offset of the offending token, if known.
    """

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        super().__init__(message)


class EvalError(FormulaError):
    """Failure while evaluating an expression tree."""


class FunctionError(EvalError):
    """Unknown function, wrong number of arguments or bad operand.

    Attributes:
        func_name: The function that caused the error.
    """

    def __init__(self, func_name: str, message: str | None = None) -> None:
        self.func_name = func_name
        msg = message or f"'{func_name}' is not a function."
        super().__init__(msg)


# One entry per pipeline stage.
ENGINE_ERRORS: tuple[type[FormulaError], ...] = (LexError, ParseError, EvalError)

# Reported when a tree is too deep for the interpreter stack.
NESTING_TOO_DEEP = "Expression nested too deeply."
