from __future__ import annotations

"""Session Manager: owns the single session worker and its shared state.

One drill runs at a time. The manager hands out session ids, keeps a small
FIFO cache of finished results and holds the auto-repeat plan. Each shared
field has its own short-held lock; none is held across a sleep or a join.
"""

import itertools
import logging
import random
import threading
from collections import deque
from typing import Callable, Deque, Optional, Tuple

from ..app.explain import trace as xtrace
from .errors import AlreadyRunning, NotFound
from .loop import Emit, run_session_loop
from .models import AutoRepeatPlan, Idle, SessionConfig, SessionResult, SessionState, ShowingNumbers
from .normalize import validate_config
from .timing import LoopTiming

logger = logging.getLogger("flashsum.session")

ScheduleInfo = Tuple[int, int, SessionConfig, int]


class SessionManager:
    MAX_RECENT_RESULTS = 8

    def __init__(
        self,
        emit: Emit,
        *,
        timing: Optional[LoopTiming] = None,
        rng_factory: Optional[Callable[[], random.Random]] = None,
    ) -> None:
        self._emit = emit
        self._timing = timing or LoopTiming()
        self._rng_factory = rng_factory or random.Random

        self._state: SessionState = Idle()
        self._state_lock = threading.Lock()

        self._worker: Optional[threading.Thread] = None
        self._worker_lock = threading.Lock()

        self._stop: Optional[threading.Event] = None
        self._stop_lock = threading.Lock()

        self._session_ids = itertools.count(1)
        self._session_id_lock = threading.Lock()

        self._recent_results: Deque[SessionResult] = deque(maxlen=self.MAX_RECENT_RESULTS)
        self._results_lock = threading.Lock()

        self._plan: Optional[AutoRepeatPlan] = None
        self._plan_lock = threading.Lock()
        self._generation = 1
        self._generation_lock = threading.Lock()

    # --- Queries ---

    def state(self) -> SessionState:
        with self._state_lock:
            return self._state

    def is_running(self) -> bool:
        with self._worker_lock:
            return self._worker is not None and self._worker.is_alive()

    def auto_repeat_generation(self) -> int:
        with self._generation_lock:
            return self._generation

    def auto_repeat_plan(self) -> Optional[AutoRepeatPlan]:
        with self._plan_lock:
            return self._plan

    def result_for(self, session_id: int) -> SessionResult:
        with self._results_lock:
            for result in reversed(self._recent_results):
                if result.session_id == session_id:
                    return result
        raise NotFound()

    # --- Commands ---

    def start(self, config: SessionConfig) -> int:
        """Spawn the session worker for ``config`` and return its session id.

        Raises:
            InvalidConfig: ``config`` violates the hard bounds.
            AlreadyRunning: a previous worker is still alive.
        """
        self._cleanup_finished_worker()
        validate_config(config)

        with self._worker_lock:
            if self._worker is not None and self._worker.is_alive():
                raise AlreadyRunning()

            stop_flag = threading.Event()
            with self._stop_lock:
                self._stop = stop_flag
            self._set_state(ShowingNumbers(current=0, total=config.total_numbers))
            session_id = self._next_session_id()

            worker = threading.Thread(
                target=self._run,
                args=(config, session_id, stop_flag),
                name=f"flashsum-session-{session_id}",
                daemon=True,
            )
            self._worker = worker
            worker.start()

        xtrace("session_started", {"session_id": session_id, "digits": config.digits_per_number, "total": config.total_numbers})
        return session_id

    def stop(self) -> None:
        """Cancel the plan, forget cached results and shut the worker down. Idempotent."""
        self._cleanup_finished_worker()

        self.configure_auto_repeat(None)
        with self._results_lock:
            self._recent_results.clear()

        with self._stop_lock:
            stop_flag, self._stop = self._stop, None
        if stop_flag is not None:
            stop_flag.set()

        with self._worker_lock:
            worker, self._worker = self._worker, None
        # A handler running on the worker may call stop(); it cannot join itself.
        if worker is not None and worker is not threading.current_thread():
            worker.join()

        self._set_state(Idle())

    def configure_auto_repeat(self, plan: Optional[AutoRepeatPlan]) -> None:
        """Replace the plan; any resume scheduled under the old generation becomes a no-op."""
        with self._plan_lock:
            self._plan = plan
        with self._generation_lock:
            self._generation += 1

    def mark_validated_and_schedule_info(self, session_id: int) -> Optional[ScheduleInfo]:
        """Consume the awaiting-validation marker for ``session_id``.

        Returns ``(delay_ms, remaining_after_decrement, config, generation)``
        or None when there is no plan, the marker belongs to another session,
        or no repeats remain.
        """
        generation = self.auto_repeat_generation()
        with self._plan_lock:
            plan = self._plan
            if plan is None:
                return None
            if plan.awaiting_validation_session_id != session_id:
                return None
            if plan.remaining == 0:
                return None
            plan = plan.consumed()
            self._plan = plan
        return plan.delay_ms, plan.remaining, plan.config, generation

    # --- Worker side ---

    def _run(self, config: SessionConfig, session_id: int, stop_flag: threading.Event) -> None:
        try:
            run_session_loop(
                self._emit,
                config,
                session_id,
                stop_flag,
                set_state=self._set_state,
                store_result=self._store_result,
                arm_auto_repeat=self._arm_auto_repeat,
                timing=self._timing,
                rng=self._rng_factory(),
            )
        except Exception:
            logger.exception("session %s worker failed", session_id)
            self._set_state(Idle())

    def _set_state(self, state: SessionState) -> None:
        with self._state_lock:
            self._state = state

    def _store_result(self, result: SessionResult) -> None:
        with self._results_lock:
            self._recent_results.append(result)

    def _arm_auto_repeat(self, session_id: int) -> None:
        with self._plan_lock:
            if self._plan is not None and self._plan.remaining > 0:
                self._plan = self._plan.awaiting(session_id)

    def _next_session_id(self) -> int:
        with self._session_id_lock:
            return next(self._session_ids)

    def _cleanup_finished_worker(self) -> None:
        with self._worker_lock:
            worker = self._worker
            if worker is None or worker.is_alive():
                return
            self._worker = None
            with self._stop_lock:
                self._stop = None
        worker.join()


__all__ = ["SessionManager", "ScheduleInfo"]
