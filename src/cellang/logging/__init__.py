"""Structured event logging for cellang sessions.

Provides an event schema, a filesystem NDJSON sink, and safe emit
helpers that never raise uncaught exceptions.
"""

from cellang.logging.events import (
    CellEvent,
    EventLevel,
    EventType,
    configure_logging,
    emit,
    emit_error,
    emit_info,
    get_sink,
    statement_context,
)
from cellang.logging.sink import EventSink

__all__ = [
    "CellEvent",
    "EventLevel",
    "EventSink",
    "EventType",
    "configure_logging",
    "emit",
    "emit_error",
    "emit_info",
    "get_sink",
    "statement_context",
]
