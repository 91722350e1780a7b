"""Formula tokenizing, parsing and evaluation.

Public API::

    from cellang.formulas import tokenize, parse, evaluate, evaluate_formula
"""

from cellang.formulas.errors import (
    ENGINE_ERRORS,
    NESTING_TOO_DEEP,
    EvalError,
    FormulaError,
    FunctionError,
    LexError,
    ParseError,
)
from cellang.formulas.evaluator import compile_formula, evaluate, evaluate_formula
from cellang.formulas.expressions import Block, Expression, FunctionCall, Literal, render
from cellang.formulas.parser import parse, parse_or_raise
from cellang.formulas.tokenizer import TokenizerResult, scope_level, tokenize
from cellang.formulas.tokens import Token, TokenKind

__all__ = [
    "ENGINE_ERRORS",
    "Block",
    "EvalError",
    "Expression",
    "FormulaError",
    "FunctionCall",
    "FunctionError",
    "LexError",
    "Literal",
    "NESTING_TOO_DEEP",
    "ParseError",
    "Token",
    "TokenKind",
    "TokenizerResult",
    "compile_formula",
    "evaluate",
    "evaluate_formula",
    "parse",
    "parse_or_raise",
    "render",
    "scope_level",
    "tokenize",
]
