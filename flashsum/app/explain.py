from __future__ import annotations

"""Explain Mode: one JSON line per session milestone.

Off by default; ``flashsum --explain`` turns it on. A line looks like
``[EXPLAIN] session_complete :: {"count":5,"session_id":3,"sum":214}``.
The session worker and the auto-repeat thread may trace at the same time, so
writes are serialized.
"""

import json
import sys
import threading
from typing import Any, Dict, Optional, TextIO

PREFIX = "[EXPLAIN]"

_enabled = False
_stream: Optional[TextIO] = None
_lock = threading.Lock()


def enable(flag: bool = True, stream: Optional[TextIO] = None) -> None:
    """Switch tracing on or off; ``stream`` defaults to stdout."""
    global _enabled, _stream
    with _lock:
        _enabled = bool(flag)
        _stream = stream


def enabled() -> bool:
    return _enabled


def format_line(event: str, payload: Dict[str, Any] | None = None) -> str:
    try:
        body = json.dumps(payload or {}, separators=(",", ":"), sort_keys=True, default=str)
    except (TypeError, ValueError):
        return f"{PREFIX} {event}"
    return f"{PREFIX} {event} :: {body}"


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not _enabled:
        return
    line = format_line(event, payload)
    with _lock:
        out = _stream or sys.stdout
        out.write(line + "\n")
        out.flush()
