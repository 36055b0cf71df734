from __future__ import annotations

"""Tiny pub/sub event bus carrying lifecycle signals to the presentation layer."""

import logging
import threading
from typing import Any, Callable, Dict, List

from ..session.models import (
    AUTO_REPEAT_TICK,
    AUTO_REPEAT_WAITING,
    CLEAR_SCREEN,
    COUNTDOWN_TICK,
    SESSION_COMPLETE,
    SHOW_NUMBER,
)

APP_SETTINGS_CHANGED = "app_settings_changed"

ALL_EVENTS = (
    CLEAR_SCREEN,
    COUNTDOWN_TICK,
    SHOW_NUMBER,
    SESSION_COMPLETE,
    AUTO_REPEAT_WAITING,
    AUTO_REPEAT_TICK,
    APP_SETTINGS_CHANGED,
)

logger = logging.getLogger("flashsum.events")

Handler = Callable[[Any], None]


class EventBus:
    """Fire-and-forget dispatch; handlers run on the emitting thread."""

    def __init__(self) -> None:
        self._subs: Dict[str, List[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event: str, handler: Handler) -> None:
        with self._lock:
            self._subs.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        with self._lock:
            handlers = self._subs.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        with self._lock:
            handlers = list(self._subs.get(event, []))
        for h in handlers:
            try:
                h(payload)
            except Exception:
                # A broken listener must not take the session worker down.
                logger.exception("handler for %r failed", event)
