"""Runtime memory: integer-addressed cells plus a per-context function table.

Every public operation takes the context lock for its own duration only, so
concurrent callers never see a torn read inside one call.  There is no
isolation across calls.
"""

from __future__ import annotations

import threading
from typing import IO, Any

from cellang.functions.base import Function
from cellang.functions.registry import get_builtin


def _span(start: int, end: int) -> range:
    """Inclusive addresses from *start* toward *end*, in that direction."""
    step = 1 if end >= start else -1
    return range(start, end + step, step)


class CellContext:
    """Cells and functions an expression evaluates against.

    Args:
        stdin: Input stream for I/O-capable built-ins.
        stdout: Output stream, used by ``PRINT``.
        stderr: Error stream.
    """

    def __init__(
        self,
        stdin: IO[str] | None = None,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
    ) -> None:
        self.stdin = stdin
        self.stdout = stdout
        self.stderr = stderr
        self._lock = threading.Lock()
        self._cells: dict[int, Any] = {}
        self._functions: dict[str, Function] = {}
        self._closed = False

    # ------------------------------------------------------------------
    # Cells
    # ------------------------------------------------------------------

    def _store(self, address: int, value: Any) -> None:
        if value is None:
            self._cells.pop(address, None)
        else:
            self._cells[address] = value

    def get(self, address: int) -> Any:
        """Value at *address*, ``None`` (Empty) when unset."""
        with self._lock:
            return self._cells.get(address)

    def set(self, address: int, value: Any) -> None:
        """Store *value* at *address*; ``None`` removes the entry."""
        with self._lock:
            self._store(address, value)

    def _stored_in(self, span: range) -> dict[int, Any]:
        """Non-empty cells inside *span*.  Caller holds the lock.

        Walks whichever is smaller, the span or the stored cells.
        """
        if len(span) > len(self._cells):
            return {a: v for a, v in self._cells.items() if a in span}
        return {a: self._cells[a] for a in span if a in self._cells}

    def get_range(self, start: int, end: int) -> dict[int, Any]:
        """Inclusive range from *start* toward *end*, unset cells as ``None``."""
        span = _span(start, end)
        with self._lock:
            stored = self._stored_in(span)
        return {address: stored.get(address) for address in span}

    def set_range(self, start: int, end: int, value: Any) -> None:
        """Assign *value* to every address between *start* and *end* inclusive."""
        span = range(min(start, end), max(start, end) + 1)
        with self._lock:
            if value is None:
                for address in self._stored_in(span):
                    del self._cells[address]
                return
            for address in span:
                self._cells[address] = value

    def copy_range(self, src_start: int, src_end: int, dst_start: int, dst_end: int) -> None:
        """Copy a source range over a destination range.

        The source is read once; its values are written in destination order,
        wrapping around when the destination is longer than the source.
        """
        source = _span(src_start, src_end)
        destination = _span(dst_start, dst_end)
        with self._lock:
            stored = self._stored_in(source)
            if not stored:
                for address in self._stored_in(destination):
                    del self._cells[address]
                return
            snapshot = [stored.get(address) for address in source]
            for i, address in enumerate(destination):
                self._store(address, snapshot[i % len(snapshot)])

    def cells(self) -> dict[int, Any]:
        """Snapshot of every non-empty cell, in ascending address order."""
        with self._lock:
            return dict(sorted(self._cells.items()))

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def lookup_function(self, name: str) -> Function | None:
        """Case-insensitive lookup: context-local table first, then built-ins."""
        with self._lock:
            function = self._functions.get(name.upper())
        if function is not None:
            return function
        return get_builtin(name)

    def register_function(self, function: Function) -> None:
        """Add or replace *function* in this context's own table."""
        with self._lock:
            self._functions[function.name.upper()] = function

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release cells and local functions.  Streams are owned by the caller."""
        with self._lock:
            self._cells.clear()
            self._functions.clear()
            self._closed = True

    def __enter__(self) -> CellContext:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<CellContext cells={len(self._cells)} functions={len(self._functions)}>"
