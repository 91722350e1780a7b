"""Load the built-in function library into the global registry, then seal it."""

from __future__ import annotations

from cellang.formulas import fn_cells, fn_logical, fn_math, fn_text  # noqa: F401
from cellang.functions.registry import seal_registry

seal_registry()
