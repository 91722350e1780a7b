"""Tests for CellContext storage, ranges, function lookup and locking."""

from __future__ import annotations

import threading
from typing import Any, Sequence

import pytest

from cellang import BuiltInFunction, CellContext, evaluate_formula
from cellang.formulas.expressions import Expression, evaluate_args


@pytest.fixture
def ctx() -> CellContext:
    return CellContext()


class TestCells:
    def test_unset_cell_is_empty(self, ctx: CellContext) -> None:
        assert ctx.get(7) is None

    def test_set_and_get(self, ctx: CellContext) -> None:
        ctx.set(7, "x")
        assert ctx.get(7) == "x"

    def test_setting_empty_removes(self, ctx: CellContext) -> None:
        ctx.set(7, "x")
        ctx.set(7, None)
        assert ctx.cells() == {}

    def test_cells_snapshot_sorted(self, ctx: CellContext) -> None:
        ctx.set(3, "c")
        ctx.set(1, "a")
        assert list(ctx.cells()) == [1, 3]


class TestRanges:
    def test_get_range_inclusive(self, ctx: CellContext) -> None:
        ctx.set(2, "b")
        assert ctx.get_range(1, 3) == {1: None, 2: "b", 3: None}

    def test_get_range_direction_symmetric(self, ctx: CellContext) -> None:
        for address in range(2, 6):
            ctx.set(address, float(address))
        forward = ctx.get_range(2, 5)
        backward = ctx.get_range(5, 2)
        assert list(forward) == [2, 3, 4, 5]
        assert list(backward) == [5, 4, 3, 2]
        assert set(forward.items()) == set(backward.items())

    def test_single_cell_range(self, ctx: CellContext) -> None:
        assert ctx.get_range(4, 4) == {4: None}

    def test_set_range_either_direction(self, ctx: CellContext) -> None:
        ctx.set_range(5, 3, "v")
        assert ctx.cells() == {3: "v", 4: "v", 5: "v"}

    def test_set_range_empty_clears(self, ctx: CellContext) -> None:
        ctx.set_range(1, 4, 1.0)
        ctx.set_range(2, 3, None)
        assert ctx.cells() == {1: 1.0, 4: 1.0}

    def test_copy_range_cycles_source(self, ctx: CellContext) -> None:
        ctx.set(10, "A")
        ctx.set(11, "B")
        ctx.copy_range(10, 11, 20, 23)
        assert [ctx.get(a) for a in range(20, 24)] == ["A", "B", "A", "B"]

    def test_copy_range_destination_order(self, ctx: CellContext) -> None:
        ctx.set(1, "A")
        ctx.set(2, "B")
        ctx.copy_range(1, 2, 12, 10)
        assert [ctx.get(a) for a in (12, 11, 10)] == ["A", "B", "A"]

    def test_copy_range_shorter_destination(self, ctx: CellContext) -> None:
        ctx.set_range(1, 3, "s")
        ctx.copy_range(1, 3, 7, 7)
        assert ctx.cells() == {1: "s", 2: "s", 3: "s", 7: "s"}

    def test_copy_range_overlap_reads_snapshot(self, ctx: CellContext) -> None:
        ctx.set(1, "A")
        ctx.set(2, "B")
        ctx.copy_range(1, 2, 2, 5)
        assert [ctx.get(a) for a in range(1, 6)] == ["A", "A", "B", "A", "B"]

    def test_copy_empty_source_clears(self, ctx: CellContext) -> None:
        ctx.set(5, "x")
        ctx.copy_range(1, 1, 5, 5)
        assert ctx.get(5) is None

    def test_clearing_full_address_span(self, ctx: CellContext) -> None:
        ctx.set(5, "x")
        ctx.set(999_999_999, "y")
        ctx.set_range(999_999_999, 0, None)
        assert ctx.cells() == {}

    def test_copy_empty_source_over_full_span(self, ctx: CellContext) -> None:
        ctx.set(500, "x")
        ctx.copy_range(1, 2, 0, 999_999_999)
        assert ctx.cells() == {}

    def test_get_range_with_many_stored_cells(self, ctx: CellContext) -> None:
        ctx.set_range(1, 100, "v")
        assert ctx.get_range(99, 101) == {99: "v", 100: "v", 101: None}


def _fn_twice(context: Any, args: Sequence[Expression]) -> float:
    (value,) = evaluate_args(args, context)
    return value * 2


class TestFunctions:
    def test_builtin_lookup_case_insensitive(self, ctx: CellContext) -> None:
        assert ctx.lookup_function("concat") is ctx.lookup_function("CONCAT")

    def test_unknown_function(self, ctx: CellContext) -> None:
        assert ctx.lookup_function("NOPE") is None

    def test_register_local_function(self, ctx: CellContext) -> None:
        ctx.register_function(BuiltInFunction("Twice", 1, False, _fn_twice))
        assert evaluate_formula("TWICE(4)", ctx) == 8.0
        assert evaluate_formula("twice(1.5)", ctx) == 3.0

    def test_local_overrides_builtin(self, ctx: CellContext) -> None:
        ctx.register_function(BuiltInFunction("ADD", 2, False, lambda c, a: "local"))
        assert evaluate_formula("1 + 2", ctx) == "local"
        assert evaluate_formula("1 + 2", CellContext()) == 3.0

    def test_register_is_upsert(self, ctx: CellContext) -> None:
        ctx.register_function(BuiltInFunction("F", 0, False, lambda c, a: 1))
        ctx.register_function(BuiltInFunction("f", 0, False, lambda c, a: 2))
        assert evaluate_formula("F", ctx) == 2


class TestLifecycle:
    def test_context_manager_releases_state(self) -> None:
        with CellContext() as ctx:
            ctx.set(1, "x")
            ctx.register_function(BuiltInFunction("F", 0, False, lambda c, a: 1))
        assert ctx.closed
        assert ctx.cells() == {}
        assert ctx.lookup_function("F") is None

    def test_streams_kept(self) -> None:
        import io

        out = io.StringIO()
        ctx = CellContext(stdout=out)
        assert ctx.stdout is out
        assert ctx.stdin is None


class TestConcurrency:
    def test_concurrent_writers_and_range_reads(self, ctx: CellContext) -> None:
        """Range reads never observe a half-written range fill."""
        torn: list[dict[int, Any]] = []
        stop = threading.Event()

        def writer(value: str) -> None:
            while not stop.is_set():
                ctx.set_range(0, 49, value)

        def reader() -> None:
            for _ in range(300):
                snapshot = ctx.get_range(0, 49)
                if len(set(snapshot.values())) > 1:
                    torn.append(snapshot)

        ctx.set_range(0, 49, "a")
        writers = [threading.Thread(target=writer, args=(v,)) for v in ("a", "b")]
        for t in writers:
            t.start()
        try:
            reader()
        finally:
            stop.set()
            for t in writers:
                t.join()
        assert torn == []

    def test_concurrent_counters(self, ctx: CellContext) -> None:
        def work(base: int) -> None:
            for i in range(200):
                ctx.set(base + i, float(i))

        threads = [threading.Thread(target=work, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(ctx.cells()) == 800
