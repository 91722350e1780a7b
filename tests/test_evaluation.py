"""Tests for expression evaluation and the built-in function library."""

from __future__ import annotations

import io
from typing import Any

import pytest

from cellang import CellContext
from cellang.formulas import (
    NESTING_TOO_DEEP,
    Block,
    EvalError,
    FunctionCall,
    FunctionError,
    LexError,
    Literal,
    ParseError,
    Token,
    TokenizerResult,
    compile_formula,
    evaluate,
    evaluate_formula,
    parse,
    render,
    tokenize,
)


# ────────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────────


@pytest.fixture
def ctx() -> CellContext:
    return CellContext()


def _eval(text: str, context: CellContext | None = None) -> Any:
    """Compile and evaluate a formula string."""
    return evaluate_formula(text, context if context is not None else CellContext())


def _error(text: str, context: CellContext | None = None) -> str:
    expr = compile_formula(text)
    assert expr is not None
    value, error = evaluate(expr, context if context is not None else CellContext())
    assert value is None
    assert error is not None
    return error


# ────────────────────────────────────────────────────────────────
# Tree nodes
# ────────────────────────────────────────────────────────────────


class TestNodes:
    def test_literal(self, ctx: CellContext) -> None:
        assert Literal(3.0).evaluate(ctx) == 3.0
        assert Literal("x").evaluate(ctx) == "x"

    def test_literal_inspect(self) -> None:
        assert Literal(1.0).inspect() == "1"
        assert Literal(0.5).inspect() == "0.5"
        assert Literal(1e20).inspect() == "1e+20"
        assert Literal('say "hi"').inspect() == '"say ""hi"""'
        assert Literal(True).inspect() == "TRUE()"

    def test_block_yields_last_value(self, ctx: CellContext) -> None:
        block = Block((Literal(1.0), Literal("last")))
        assert block.evaluate(ctx) == "last"

    def test_block_keeps_side_effects_in_order(self, ctx: CellContext) -> None:
        assert _eval("(SET_CELL(1, 5), SET_CELL(2, $1 * 2), $2)", ctx) == 10.0
        assert ctx.get(1) == 5.0

    def test_block_stops_at_first_error(self, ctx: CellContext) -> None:
        error = _error("(SET_CELL(1, 5), DIVIDE(1, 0), SET_CELL(2, 7))", ctx)
        assert "DIVIDE" in error
        assert ctx.get(1) == 5.0
        assert ctx.get(2) is None

    def test_evaluation_does_not_mutate_tree(self, ctx: CellContext) -> None:
        expr = compile_formula("1 + 2")
        before = expr.inspect()
        expr.evaluate(ctx)
        assert expr.inspect() == before

    def test_unknown_function(self) -> None:
        assert _error("NOPE(1)") == "'NOPE' is not a function."

    def test_typo_without_parens_is_unknown_function(self) -> None:
        assert _error("pie") == "'pie' is not a function."

    def test_arity_checked_before_invoke(self, ctx: CellContext) -> None:
        with pytest.raises(FunctionError, match="ADD: function requires exactly 2"):
            FunctionCall("ADD", (Literal(1.0),)).evaluate(ctx)

    def test_variadic_minimum(self) -> None:
        assert "at least 1" in _error("CONCAT()")

    def test_function_names_case_insensitive(self) -> None:
        assert _eval("add(1, 2)") == 3.0


# ────────────────────────────────────────────────────────────────
# Arithmetic and comparison
# ────────────────────────────────────────────────────────────────


class TestArithmetic:
    def test_precedence_example(self) -> None:
        expr = compile_formula("1 + 2 * 3")
        assert expr.inspect() == "ADD(1, MULTIPLY(2, 3))"
        assert evaluate(expr, CellContext()) == (7.0, None)

    def test_operations(self) -> None:
        assert _eval("7 - 10") == -3.0
        assert _eval("2.5 * 4") == 10.0
        assert _eval("-(3)") == -3.0
        assert _eval("+(-3)") == 3.0
        assert _eval("ABS(-4)") == 4.0

    def test_divide(self) -> None:
        assert _eval("DIVIDE(4, 2)") == 2.0
        assert _eval("1 / 4") == 0.25

    def test_divide_by_zero(self) -> None:
        error = _error("DIVIDE(4, 0)")
        assert "DIVIDE" in error
        assert "zero" in error

    def test_string_operand_rejected(self) -> None:
        assert _error('1 + "a"') == "ADD: expected number, got string."

    def test_empty_cell_operand_rejected(self) -> None:
        assert _error("$1 + 1") == "ADD: expected number, got empty."

    def test_boolean_is_not_a_number(self) -> None:
        assert _error("TRUE + 1") == "ADD: expected number, got boolean."

    def test_comparisons(self) -> None:
        assert _eval("1 < 2") is True
        assert _eval("2 <= 2") is True
        assert _eval("1 > 2") is False
        assert _eval("3 >= 4") is False

    def test_comparison_requires_numbers(self) -> None:
        assert "LESS_THAN" in _error('"a" < 1')

    def test_first_error_wins(self) -> None:
        assert _error('DIVIDE(1, 0) + "x"') == "DIVIDE: division by zero."


# ────────────────────────────────────────────────────────────────
# Equality and logic
# ────────────────────────────────────────────────────────────────


class TestEqualityAndLogic:
    def test_falsy_values_equal(self) -> None:
        assert _eval('EQUAL(0, "")') is True
        assert _eval('EQUAL(1, "")') is False
        assert _eval('$9 = ""') is True
        assert _eval("$9 == 0") is True

    def test_structural_equality(self) -> None:
        assert _eval('"a" = "a"') is True
        assert _eval('"1" = 1') is False
        assert _eval("2 = 2.0") is True
        assert _eval("TRUE() = 1") is False

    def test_not_equal(self) -> None:
        assert _eval('1 <> "1"') is True
        assert _eval('0 != ""') is False

    def test_and_or_not(self) -> None:
        assert _eval("AND(1, \"x\", TRUE)") is True
        assert _eval("AND(1, 0)") is False
        assert _eval("OR(0, \"\", $1)") is False
        assert _eval("OR(0, 2)") is True
        assert _eval("NOT(\"\")") is True
        assert _eval("NOT(5)") is False

    def test_non_empty_range_truthy(self, ctx: CellContext) -> None:
        assert _eval("AND($1:3)", ctx) is True

    def test_if_is_lazy(self, ctx: CellContext) -> None:
        assert _eval('IF(1 < 2, "yes", DIVIDE(1, 0))', ctx) == "yes"
        assert _eval('IF(0, SET_CELL(1, 1), "no")', ctx) == "no"
        assert ctx.get(1) is None

    def test_if_without_else(self) -> None:
        assert _eval("IF(0, 1)") is False

    def test_if_too_many_arguments(self) -> None:
        assert "at most 3" in _error("IF(1, 2, 3, 4)")


# ────────────────────────────────────────────────────────────────
# Text
# ────────────────────────────────────────────────────────────────


class TestText:
    def test_concat_operator(self) -> None:
        assert _eval('"a" & 1 & TRUE') == "a1TRUE"

    def test_concat_numbers_canonical(self) -> None:
        assert _eval("CONCAT(1.5, 2)") == "1.52"

    def test_concat_empty_contributes_nothing(self) -> None:
        assert _eval('CONCAT("a", $99, "b")') == "ab"

    def test_concat_flattens_range_in_address_order(self, ctx: CellContext) -> None:
        ctx.set(1, "x")
        ctx.set(3, "z")
        assert _eval("CONCAT($1:3)", ctx) == "xz"
        ctx.set(2, "y")
        assert _eval("CONCAT($3:1)", ctx) == "xyz"
        assert _eval("CONCAT(GET_RANGE(3, 1))", ctx) == "xyz"

    def test_inspect_returns_unevaluated_form(self) -> None:
        assert _eval("INSPECT(1 + 2 * 3)") == "ADD(1, MULTIPLY(2, 3))"
        assert _eval("INSPECT(DIVIDE(1, 0))") == "DIVIDE(1, 0)"

    def test_print_writes_to_context_output(self) -> None:
        out = io.StringIO()
        context = CellContext(stdout=out)
        assert _eval('PRINT("n=", 3)', context) == "n=3"
        assert out.getvalue() == "n=3\n"

    def test_print_without_output_stream(self) -> None:
        assert _error('PRINT("x")') == "PRINT: context has no output stream."


# ────────────────────────────────────────────────────────────────
# Cells and ranges
# ────────────────────────────────────────────────────────────────


class TestCells:
    def test_get_cell(self, ctx: CellContext) -> None:
        ctx.set(5, 42.0)
        assert _eval("$5", ctx) == 42.0
        assert _eval("GET_CELL(5.9)", ctx) == 42.0

    def test_get_cell_non_numeric(self) -> None:
        assert _error('GET_CELL("a")') == "GET_CELL: expected number, got string."

    def test_get_cell_negative(self) -> None:
        assert "out of range" in _error("GET_CELL(-1)")

    def test_get_range(self, ctx: CellContext) -> None:
        ctx.set(2, "b")
        assert _eval("$1:3", ctx) == {1: None, 2: "b", 3: None}

    def test_set_cell_and_read_back(self, ctx: CellContext) -> None:
        assert _eval('SET_CELL(1, "v")', ctx) == "v"
        assert _eval("$1", ctx) == "v"

    def test_set_range(self, ctx: CellContext) -> None:
        _eval("SET_RANGE(3, 1, 0)", ctx)
        assert ctx.cells() == {1: 0.0, 2: 0.0, 3: 0.0}

    def test_oversized_range_rejected(self, ctx: CellContext) -> None:
        error = _error("GET_RANGE(0, 999999999)", ctx)
        assert error == "GET_RANGE: range of 1000000000 cells exceeds the limit of 1000000."
        assert "exceeds the limit" in _error('SET_RANGE(1, 2000000, "x")', ctx)
        assert "exceeds the limit" in _error("COPY_RANGE(1, 1, 0, 999999999)", ctx)
        assert ctx.cells() == {}

    def test_clearing_any_range_allowed(self, ctx: CellContext) -> None:
        ctx.set(7, "x")
        assert _eval("SET_RANGE(0, 999999999, $99)", ctx) is None
        assert ctx.cells() == {}

    def test_range_cannot_be_stored(self, ctx: CellContext) -> None:
        assert "range cannot be stored" in _error("SET_CELL(1, $2:3)", ctx)

    def test_copy_range_cycles(self, ctx: CellContext) -> None:
        _eval('SET_CELL(10, "A"), SET_CELL(11, "B"), COPY_RANGE(10, 11, 20, 23)', ctx)
        assert [ctx.get(a) for a in (20, 21, 22, 23)] == ["A", "B", "A", "B"]

    def test_cell_sum(self, ctx: CellContext) -> None:
        ctx.set(1, 2.0)
        ctx.set(2, 3.0)
        assert _eval("$1 + $2 * 2", ctx) == 8.0


# ────────────────────────────────────────────────────────────────
# Round trip through inspect
# ────────────────────────────────────────────────────────────────


class TestRoundTrip:
    @pytest.mark.parametrize(
        "tree",
        [
            FunctionCall("ADD", (Literal(1.0), FunctionCall("MULTIPLY", (Literal(2.0), Literal(0.5))))),
            FunctionCall("NEGATE", (Literal(-3.25),)),
            FunctionCall("AND", (Literal(1.0), FunctionCall("NOT", (Literal(""),)))),
            FunctionCall("EQUAL", (Literal('q"uote'), Literal('q"uote'))),
            FunctionCall("OR", (Literal(False), Literal(1e-7))),
            Block((Literal(1.0), FunctionCall("DIVIDE", (Literal(1e20), Literal(4.0))))),
            Literal(float("inf")),
            FunctionCall("ADD", (Literal(float("-inf")), Literal(1.0))),
        ],
    )
    def test_reparse_evaluates_the_same(self, tree: Any) -> None:
        reparsed = compile_formula(tree.inspect())
        assert reparsed is not None
        assert reparsed.evaluate(CellContext()) == tree.evaluate(CellContext())

    def test_overflowing_number_literal(self) -> None:
        tree = compile_formula("1e400")
        assert tree.inspect() == "1e999"
        assert compile_formula(tree.inspect()).evaluate(CellContext()) == float("inf")

    def test_negative_infinity_form(self) -> None:
        assert Literal(float("-inf")).inspect() == "NEGATE(1e999)"
        assert _eval("NEGATE(1e999)") == float("-inf")


# ────────────────────────────────────────────────────────────────
# Pipeline errors
# ────────────────────────────────────────────────────────────────


class TestPipelineErrors:
    def test_lex_error(self) -> None:
        with pytest.raises(LexError):
            compile_formula("1 ? 2")

    def test_unclosed_bracket(self) -> None:
        with pytest.raises(LexError, match="unclosed"):
            compile_formula("ADD(1,")

    def test_multi_line_statement(self) -> None:
        assert _eval("ADD(1,\n 2)") == 3.0

    def test_parse_error(self) -> None:
        with pytest.raises(ParseError):
            compile_formula("1 +")

    def test_eval_error_type(self) -> None:
        with pytest.raises(EvalError):
            _eval("DIVIDE(1, 0)")

    def test_empty_statement(self) -> None:
        assert _eval("   # nothing") is None


# ────────────────────────────────────────────────────────────────
# Deep trees
# ────────────────────────────────────────────────────────────────


def _long_sum(terms: int) -> str:
    return " + ".join(["1"] * terms)


def _nested(depth: int) -> str:
    return "(" * depth + "1" + ")" * depth


class TestNesting:
    def test_long_sum_reports_error(self) -> None:
        expr = compile_formula(_long_sum(500))
        assert evaluate(expr, CellContext()) == (None, NESTING_TOO_DEEP)

    def test_long_sum_raises_eval_error(self) -> None:
        with pytest.raises(EvalError, match="nested too deeply"):
            _eval(_long_sum(500))

    def test_short_sum_still_evaluates(self) -> None:
        assert _eval(_long_sum(50)) == 50.0

    def test_deep_brackets_report_parse_error(self) -> None:
        tokens: list[Token] = []
        assert tokenize(_nested(200), tokens) == (TokenizerResult.OK, None)
        assert parse(tokens) == (None, NESTING_TOO_DEEP)

    def test_deep_brackets_raise_parse_error(self) -> None:
        with pytest.raises(ParseError, match="nested too deeply"):
            compile_formula(_nested(200))

    def test_moderate_brackets_parse(self) -> None:
        assert _eval(_nested(20)) == 1.0

    def test_inspect_of_deep_tree(self) -> None:
        expr = compile_formula(_long_sum(2000))
        with pytest.raises(EvalError, match="nested too deeply"):
            render(expr)
        assert _error(f"INSPECT({_long_sum(2000)})") == NESTING_TOO_DEEP
