from __future__ import annotations

"""Command surface handed to the presentation layer.

Every entry point the UI can call lives on ``DrillCommands``. The object is
built explicitly with its collaborators (no module-level singletons), so a
CLI, a GUI or a test can each own an independent instance.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from ..audio.cues import SoundCues
from ..session.answers import I64_MAX, I64_MIN, parse_answer_text, validate_answer
from ..session.errors import InvalidAnswerFormat
from ..session.manager import SessionManager
from ..session.models import (
    AutoRepeatWaiting,
    SessionResult,
    StartSessionResponse,
    SubmitAnswerResponse,
)
from ..session.normalize import normalize_auto_repeat, normalize_session_config
from ..session.scheduler import schedule_auto_repeat_if_needed
from ..stats.history import AttemptHistory, AttemptRecord
from .events import EventBus
from .explain import trace as xtrace
from .settings import AppSettings, SettingsStore

logger = logging.getLogger("flashsum.commands")


class DrillCommands:
    def __init__(
        self,
        manager: SessionManager,
        bus: EventBus,
        *,
        settings: Optional[SettingsStore] = None,
        cues: Optional[SoundCues] = None,
        history: Optional[AttemptHistory] = None,
    ) -> None:
        self.manager = manager
        self.bus = bus
        self.settings = settings or SettingsStore(bus.emit)
        self.cues = cues or SoundCues(enabled=False)
        self.history = history or AttemptHistory()

    def ping(self) -> str:
        return "pong"

    # --- Session lifecycle ---

    def start_session(
        self,
        config: Mapping[str, Any],
        auto_repeat: Optional[Mapping[str, Any]] = None,
    ) -> StartSessionResponse:
        """Normalize ``config``, (re)configure auto-repeat and start a drill.

        Raises:
            InvalidConfig: malformed input or hard bounds violated.
            AlreadyRunning: another drill is still being shown.
        """
        session_config, effective_config = normalize_session_config(config)
        plan, effective_auto_repeat = normalize_auto_repeat(auto_repeat, session_config)
        # Replacing the plan (or clearing it) also invalidates pending resumes.
        self.manager.configure_auto_repeat(plan)

        session_id = self.manager.start(session_config)
        logger.debug("session %s started (auto-repeat: %s)", session_id, plan is not None)
        return StartSessionResponse(
            session_id=session_id,
            effective_config=effective_config,
            effective_auto_repeat=effective_auto_repeat,
        )

    def stop_session(self) -> None:
        self.manager.stop()

    def cancel_auto_repeat(self) -> None:
        self.manager.configure_auto_repeat(None)

    def mark_validated(self, session_id: int) -> Optional[AutoRepeatWaiting]:
        return schedule_auto_repeat_if_needed(self.manager, self.bus.emit, session_id)

    def acknowledge_complete(self, session_id: int) -> Optional[AutoRepeatWaiting]:
        return schedule_auto_repeat_if_needed(self.manager, self.bus.emit, session_id)

    def result_for(self, session_id: int) -> SessionResult:
        return self.manager.result_for(session_id)

    # --- Answers ---

    def submit_answer(self, session_id: int, provided_sum: int) -> SubmitAnswerResponse:
        """Compare ``provided_sum`` with the cached sum, then maybe schedule a repeat.

        Raises:
            InvalidAnswerFormat: ``provided_sum`` is not a signed 64-bit integer.
            NotFound: the session's result is unknown or was evicted.
        """
        # bool is an int subclass but never a valid answer.
        if isinstance(provided_sum, bool) or not isinstance(provided_sum, int):
            raise InvalidAnswerFormat()
        if provided_sum < I64_MIN or provided_sum > I64_MAX:
            raise InvalidAnswerFormat()
        result = self.manager.result_for(session_id)
        validation = validate_answer(result.sum, provided_sum)
        xtrace("answer_validated", {"session_id": session_id, **validation.to_json()})
        self._record_attempt(result, validation.provided_sum, validation.correct, validation.delta)

        waiting = schedule_auto_repeat_if_needed(self.manager, self.bus.emit, session_id)
        return SubmitAnswerResponse(validation=validation, auto_repeat_waiting=waiting)

    def submit_answer_text(self, session_id: int, provided_text: str) -> SubmitAnswerResponse:
        """Parse a typed answer and delegate to ``submit_answer``.

        Raises:
            InvalidAnswerFormat: the text is not a plain signed 64-bit integer.
        """
        return self.submit_answer(session_id, parse_answer_text(provided_text))

    def _record_attempt(self, result: SessionResult, provided: int, correct: bool, delta: int) -> None:
        # Every value of a session has the same width.
        digits = len(str(abs(result.numbers[0]))) if result.numbers else 1
        self.history.record(
            AttemptRecord(
                session_id=result.session_id,
                answered_at=datetime.now(timezone.utc),
                digits=digits,
                total_numbers=max(1, len(result.numbers)),
                expected_sum=result.sum,
                provided_sum=provided,
                correct=correct,
                delta=delta,
            )
        )

    # --- Settings and sound ---

    def get_app_settings(self) -> AppSettings:
        return self.settings.get()

    def set_color_scheme(self, color_scheme: str) -> AppSettings:
        return self.settings.set_color_scheme(color_scheme)

    def set_theme_mode(self, theme_mode: str) -> AppSettings:
        return self.settings.set_theme_mode(theme_mode)

    def play_sound_kind(self, kind: str) -> None:
        self.cues.play_kind(kind)

    def set_sound_enabled(self, enabled: bool) -> None:
        self.cues.set_enabled(enabled)
