from __future__ import annotations

"""Auto-repeat: restart a drill after the previous one has been validated.

There is no timer pool. After ``mark_validated_and_schedule_info`` hands back a
delay and the generation it was issued under, a short-lived thread counts the
delay down, emitting ``auto_repeat_tick`` once per visible second, and starts
the next session only if the generation is still current. Reconfiguring or
cancelling the plan bumps the generation, so a stale resume wakes up and exits
without effect.
"""

import logging
import math
import threading
import time
from typing import Optional

from ..app.explain import trace as xtrace
from .errors import SessionError
from .loop import Emit
from .manager import SessionManager
from .models import AUTO_REPEAT_TICK, AUTO_REPEAT_WAITING, AutoRepeatTick, AutoRepeatWaiting, SessionConfig

logger = logging.getLogger("flashsum.scheduler")

TICK_CHECK_INTERVAL_S = 0.120


def now_ms() -> int:
    return int(time.time() * 1000)


def schedule_auto_repeat_if_needed(
    manager: SessionManager,
    emit: Emit,
    session_id: int,
) -> Optional[AutoRepeatWaiting]:
    """Consume the validation marker for ``session_id`` and schedule the next run.

    Returns the waiting payload (also emitted as ``auto_repeat_waiting``), or
    None when nothing was scheduled.
    """
    info = manager.mark_validated_and_schedule_info(session_id)
    if info is None:
        return None
    delay_ms, remaining, config, generation = info

    payload = AutoRepeatWaiting(
        session_id=session_id,
        next_start_at_ms=now_ms() + delay_ms,
        remaining=remaining,
    )
    emit(AUTO_REPEAT_WAITING, payload)
    xtrace("auto_repeat_scheduled", payload.to_json())

    threading.Thread(
        target=_resume_after_delay,
        args=(manager, emit, session_id, delay_ms, remaining, config, generation),
        name=f"flashsum-auto-repeat-{session_id}",
        daemon=True,
    ).start()
    return payload


def _resume_after_delay(
    manager: SessionManager,
    emit: Emit,
    session_id: int,
    delay_ms: int,
    remaining: int,
    config: SessionConfig,
    generation: int,
) -> None:
    end_at = time.monotonic() + delay_ms / 1000.0
    last_sent: Optional[int] = None

    while True:
        if manager.auto_repeat_generation() != generation:
            return
        left = end_at - time.monotonic()
        if left <= 0:
            break
        seconds_left = math.ceil(left)
        if seconds_left != last_sent:
            last_sent = seconds_left
            emit(AUTO_REPEAT_TICK, AutoRepeatTick(session_id=session_id, seconds_left=seconds_left, remaining=remaining))
        time.sleep(min(left, TICK_CHECK_INTERVAL_S))

    if manager.auto_repeat_generation() != generation:
        return

    emit(AUTO_REPEAT_TICK, AutoRepeatTick(session_id=session_id, seconds_left=0, remaining=remaining))
    try:
        new_id = manager.start(config)
    except SessionError as e:
        logger.warning("auto-repeat after session %s not started: %s", session_id, e)
        return
    xtrace("auto_repeat_started", {"after": session_id, "session_id": new_id, "remaining": remaining})
