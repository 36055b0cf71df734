from __future__ import annotations

"""Interruptible waits for the session worker."""

import threading
import time
from dataclasses import dataclass
from typing import Tuple

POLL_INTERVAL_S = 0.010


@dataclass(frozen=True)
class LoopTiming:
    """Countdown shown before the first number."""

    countdown_values: Tuple[int, ...] = (3, 2, 1)
    countdown_interval_ms: int = 1000


def sleep_until_interruptible(deadline: float, stop: threading.Event) -> bool:
    """Block until ``deadline`` (``time.monotonic`` seconds) or until ``stop`` is set.

    Returns True if the wait was cut short by ``stop``.
    """
    while True:
        if stop.is_set():
            return True
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        if stop.wait(min(remaining, POLL_INTERVAL_S)):
            return True
