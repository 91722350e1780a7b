"""cellang: a spreadsheet-style formula language over numbered cells."""

__version__ = "0.3.0"

from cellang.formulas import builtins as _builtins  # noqa: E402,F401  registers built-ins
from cellang.context import CellContext  # noqa: E402
from cellang.formulas import (  # noqa: E402
    ENGINE_ERRORS,
    EvalError,
    FormulaError,
    FunctionError,
    LexError,
    ParseError,
    TokenizerResult,
    compile_formula,
    evaluate,
    evaluate_formula,
    parse,
    tokenize,
)
from cellang.functions import BuiltInFunction, Function  # noqa: E402

__all__ = [
    "BuiltInFunction",
    "CellContext",
    "ENGINE_ERRORS",
    "EvalError",
    "FormulaError",
    "Function",
    "FunctionError",
    "LexError",
    "ParseError",
    "TokenizerResult",
    "compile_formula",
    "evaluate",
    "evaluate_formula",
    "parse",
    "tokenize",
]
