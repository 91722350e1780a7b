"""Filesystem NDJSON event sink with concurrency-safe appends.

Events are appended as one JSON line per event:

- ``<log_dir>/events.ndjson``  -- global event log
- ``<log_dir>/sessions/<session_id>.ndjson``  -- per-session log

Writes use ``json.dumps(sort_keys=True)`` for deterministic output.  Each
append holds an exclusive ``fcntl.flock`` on the target file; reads hold a
shared lock.  Without ``fcntl`` (Windows) locking is skipped.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

from cellang.logging.events import CellEvent

try:
    import fcntl

    _HAS_FCNTL = True
except ImportError:
    _HAS_FCNTL = False

# Path-component validation: reject anything that could escape the log dir
_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


class EventSink:
    """Append-only NDJSON log writer with file locking."""

    def __init__(self, log_dir: Path, *, fsync: bool = False) -> None:
        self.log_dir = log_dir
        self._fsync = fsync
        self.log_dir.mkdir(parents=True, exist_ok=True)
        (self.log_dir / "sessions").mkdir(exist_ok=True)

    @property
    def global_path(self) -> Path:
        return self.log_dir / "events.ndjson"

    def write(self, event: CellEvent, *, session_id: str | None = None) -> None:
        """Append *event* to the global log and optionally a per-session log."""
        line = json.dumps(event.model_dump(mode="json"), sort_keys=True, default=str) + "\n"

        self._append(self.global_path, line)

        if session_id and _SAFE_ID_RE.match(session_id):
            self._append(self.log_dir / "sessions" / f"{session_id}.ndjson", line)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def read_events(
        self,
        *,
        level: str | None = None,
        event_type: str | None = None,
        session_id: str | None = None,
        limit: int = 200,
    ) -> list[dict[str, Any]]:
        """Read events from the global log, most-recent-first, with filters."""
        events = self._read_ndjson(self.global_path)

        if level:
            events = [e for e in events if e.get("level") == level]
        if event_type:
            events = [e for e in events if e.get("event_type") == event_type]
        if session_id:
            events = [
                e for e in events
                if e.get("context", {}).get("session_id") == session_id
            ]

        events.reverse()
        return events[:limit]

    def read_session_log(self, session_id: str) -> list[dict[str, Any]]:
        """Read all events for a specific session, oldest first."""
        if not _SAFE_ID_RE.match(session_id):
            return []
        return self._read_ndjson(self.log_dir / "sessions" / f"{session_id}.ndjson")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _append(self, path: Path, line: str) -> None:
        """Append a single line to *path* under exclusive file lock."""
        path.parent.mkdir(parents=True, exist_ok=True)

        if _HAS_FCNTL:
            fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_APPEND)
            try:
                fcntl.flock(fd, fcntl.LOCK_EX)
                os.write(fd, line.encode("utf-8"))
                if self._fsync:
                    os.fsync(fd)
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
                os.close(fd)
        else:
            with open(path, "a", encoding="utf-8") as f:
                f.write(line)
                if self._fsync:
                    f.flush()
                    os.fsync(f.fileno())

    def _read_ndjson(self, path: Path) -> list[dict[str, Any]]:
        """Read an NDJSON file under a shared lock, skipping unparseable lines."""
        if not path.exists():
            return []

        if _HAS_FCNTL:
            fd = os.open(str(path), os.O_RDONLY)
            try:
                fcntl.flock(fd, fcntl.LOCK_SH)
                size = os.fstat(fd).st_size
                raw = os.read(fd, size).decode("utf-8", errors="replace")
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
                os.close(fd)
        else:
            raw = path.read_text(encoding="utf-8")

        events: list[dict[str, Any]] = []
        for line in raw.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                events.append(json.loads(line))
            except json.JSONDecodeError:
                continue
        return events
