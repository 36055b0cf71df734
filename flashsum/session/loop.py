from __future__ import annotations

"""The timed reveal loop run on the session worker thread.

Phases: countdown, reveal each number for its display duration with a gap in
between, then publish the result. Every wait is interruptible through the
``stop`` event; on cancellation the screen is cleared, state returns to Idle
and no result is recorded.
"""

import random
import threading
import time
from typing import Any, Callable, List, Optional

from ..app.explain import trace as xtrace
from .generator import next_value
from .models import (
    CLEAR_SCREEN,
    COUNTDOWN_TICK,
    SESSION_COMPLETE,
    SHOW_NUMBER,
    Complete,
    Idle,
    SessionConfig,
    SessionResult,
    SessionState,
    ShowingNumbers,
    ShowNumber,
)
from .timing import LoopTiming, sleep_until_interruptible

Emit = Callable[[str, Any], None]


def run_session_loop(
    emit: Emit,
    config: SessionConfig,
    session_id: int,
    stop: threading.Event,
    *,
    set_state: Callable[[SessionState], None],
    store_result: Callable[[SessionResult], None],
    arm_auto_repeat: Callable[[int], None],
    timing: Optional[LoopTiming] = None,
    rng: Optional[random.Random] = None,
) -> Optional[SessionResult]:
    """Run one session to completion or cancellation.

    Returns the result, or None when cancelled.
    """
    timing = timing or LoopTiming()
    rng = rng or random.Random()

    def cancelled() -> None:
        emit(CLEAR_SCREEN, None)
        set_state(Idle())
        xtrace("session_cancelled", {"session_id": session_id})

    emit(CLEAR_SCREEN, None)

    # Countdown ticks are anchored to one instant so they do not drift.
    interval_s = timing.countdown_interval_ms / 1000.0
    countdown_start = time.monotonic()
    for idx, value in enumerate(timing.countdown_values):
        if stop.is_set():
            cancelled()
            return None
        if sleep_until_interruptible(countdown_start + idx * interval_s, stop):
            cancelled()
            return None
        emit(COUNTDOWN_TICK, str(value))

    begin_at = countdown_start + len(timing.countdown_values) * interval_s
    if sleep_until_interruptible(begin_at, stop):
        cancelled()
        return None
    emit(CLEAR_SCREEN, None)

    number_duration_s = config.number_duration_ms / 1000.0
    gap_s = config.delay_between_numbers_ms / 1000.0

    # Sequential scheduling: the next reveal is relative to when the previous
    # one actually cleared, so a stalled process never skips a number.
    next_on_at = time.monotonic()

    last_payload: Optional[str] = None
    running_sum = 0
    total = 0
    numbers: List[int] = []

    for i in range(config.total_numbers):
        if sleep_until_interruptible(next_on_at, stop):
            cancelled()
            return None

        draw = next_value(
            rng,
            config.digits_per_number,
            config.allow_negative_numbers,
            i,
            running_sum,
            last_payload,
        )

        set_state(ShowingNumbers(current=i + 1, total=config.total_numbers))

        last_payload = draw.text
        running_sum = max(0, running_sum + draw.value)
        total += draw.value
        numbers.append(draw.value)

        emit(
            SHOW_NUMBER,
            ShowNumber(
                session_id=session_id,
                index=i + 1,
                total=config.total_numbers,
                value=draw.value,
                running_sum=running_sum,
            ),
        )

        shown_at = time.monotonic()
        interrupted = sleep_until_interruptible(shown_at + number_duration_s, stop)
        emit(CLEAR_SCREEN, None)
        if interrupted or stop.is_set():
            set_state(Idle())
            xtrace("session_cancelled", {"session_id": session_id, "shown": i + 1})
            return None

        next_on_at = time.monotonic() + gap_s

    emit(CLEAR_SCREEN, None)

    result = SessionResult(session_id=session_id, numbers=numbers, sum=total)
    store_result(result)
    # Armed before the announcement so a listener validating straight from the
    # session_complete handler always finds the marker.
    arm_auto_repeat(session_id)
    set_state(Complete())
    emit(SESSION_COMPLETE, result)
    xtrace("session_complete", {"session_id": session_id, "count": len(numbers), "sum": total})
    return result
