"""Event schema and module-level emit helpers.

All timestamps use UTC ISO-8601 with ``Z`` suffix.  The ``emit()`` family
of functions is safe to call from any context -- failures are swallowed
and reported on stderr.
"""

from __future__ import annotations

import sys
import time
import traceback
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class EventLevel(str, Enum):
    info = "info"
    error = "error"


class EventType(str, Enum):
    # Session lifecycle
    session_started = "session_started"
    session_completed = "session_completed"

    # Statements
    statement_evaluated = "statement_evaluated"
    statement_failed = "statement_failed"


# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

LEX_ERROR = "lex_error"
PARSE_ERROR = "parse_error"
EVAL_ERROR = "eval_error"

# Long source text is cut before it is logged.
_MAX_VALUE_LEN = 256


def truncate_context(context: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *context* with long string values truncated."""
    out: dict[str, Any] = {}
    for k, v in context.items():
        if isinstance(v, dict):
            out[k] = truncate_context(v)
        elif isinstance(v, str) and len(v) > _MAX_VALUE_LEN:
            out[k] = v[:_MAX_VALUE_LEN] + "...[truncated]"
        else:
            out[k] = v
    return out


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


def _utc_now() -> str:
    """Return current UTC timestamp in ISO-8601 with Z suffix."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class CellEvent(BaseModel):
    """A single structured log event."""

    schema_version: int = 1
    ts: str = Field(default_factory=_utc_now)
    level: EventLevel
    event_type: EventType
    context: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
    error_code: str | None = None


def statement_context(
    *,
    session_id: str,
    line_number: int,
    source: str,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Attribution every statement event carries."""
    ctx: dict[str, Any] = {
        "session_id": session_id,
        "line_number": line_number,
        "source": source,
    }
    if extra:
        ctx.update(extra)
    return ctx


# ---------------------------------------------------------------------------
# Module-level sink reference
# ---------------------------------------------------------------------------

# Set by ``configure_logging``; ``None`` means events are discarded.
_sink: Any = None  # EventSink | None


def configure_logging(log_dir: Path | str | None, *, fsync: bool = False) -> None:
    """Point the module-level sink at *log_dir*, or disable logging with ``None``.

    This should be called early in a CLI command.  If it is never called,
    ``emit()`` silently discards events.
    """
    global _sink
    if log_dir is None:
        _sink = None
        return

    from cellang.logging.sink import EventSink

    _sink = EventSink(Path(log_dir), fsync=fsync)


def get_sink() -> Any:
    """Return the module-level sink, or None."""
    return _sink


# ---------------------------------------------------------------------------
# Rate-limited stderr warnings
# ---------------------------------------------------------------------------

_last_stderr_ts: float = 0.0
_STDERR_INTERVAL_SECS = 60.0


def _stderr_warning(msg: str) -> None:
    """Print a warning to stderr, rate-limited to one per 60 seconds."""
    global _last_stderr_ts
    now = time.monotonic()
    if _last_stderr_ts and now - _last_stderr_ts < _STDERR_INTERVAL_SECS:
        return
    _last_stderr_ts = now
    try:
        print(f"[cellang] {msg}", file=sys.stderr)
    except Exception:
        pass


# ---------------------------------------------------------------------------
# Safe emit helpers
# ---------------------------------------------------------------------------


def emit(event: CellEvent, *, session_id: str | None = None) -> None:
    """Write an event to the global log and optionally to a per-session log.

    **Never raises.**  On failure, prints a rate-limited warning to stderr.
    """
    try:
        sink = get_sink()
        if sink is None:
            return
        event = event.model_copy(update={"context": truncate_context(event.context)})
        sink.write(event, session_id=session_id)
    except Exception:
        _stderr_warning(f"logging failed: {traceback.format_exc()}")


def emit_info(
    event_type: EventType,
    message: str,
    context: dict[str, Any] | None = None,
    *,
    session_id: str | None = None,
) -> None:
    """Convenience: emit an info-level event."""
    emit(
        CellEvent(
            level=EventLevel.info,
            event_type=event_type,
            message=message,
            context=context or {},
        ),
        session_id=session_id,
    )


def emit_error(
    event_type: EventType,
    message: str,
    context: dict[str, Any] | None = None,
    *,
    error_code: str | None = None,
    session_id: str | None = None,
) -> None:
    """Convenience: emit an error-level event."""
    emit(
        CellEvent(
            level=EventLevel.error,
            event_type=event_type,
            message=message,
            context=context or {},
            error_code=error_code,
        ),
        session_id=session_id,
    )
