from __future__ import annotations

"""Session data model: input schemas, effective configs, state and payloads.

Raw command input is validated with Pydantic (it is untrusted); everything the
engine hands around internally is a plain dataclass with a ``to_json`` helper
for the presentation layer.
"""

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel


# --- Lifecycle signal names ---

CLEAR_SCREEN = "clear_screen"
COUNTDOWN_TICK = "countdown_tick"
SHOW_NUMBER = "show_number"
SESSION_COMPLETE = "session_complete"
AUTO_REPEAT_WAITING = "auto_repeat_waiting"
AUTO_REPEAT_TICK = "auto_repeat_tick"


# --- Untrusted input ---

class SessionConfigInput(BaseModel):
    digits_per_number: int
    number_duration_s: float
    delay_between_numbers_s: float
    total_numbers: int
    allow_negative_numbers: bool = False


class AutoRepeatConfigInput(BaseModel):
    enabled: bool
    repeats: int
    delay_s: float


# --- Effective configuration ---

@dataclass(frozen=True)
class SessionConfig:
    digits_per_number: int
    number_duration_ms: int
    delay_between_numbers_ms: int
    total_numbers: int
    allow_negative_numbers: bool = False


@dataclass(frozen=True)
class SessionConfigEffective:
    """Echo of the clamped config in seconds (one decimal) for display."""

    digits_per_number: int
    number_duration_s: float
    delay_between_numbers_s: float
    total_numbers: int
    allow_negative_numbers: bool

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AutoRepeatPlan:
    remaining: int
    delay_ms: int
    config: SessionConfig
    awaiting_validation_session_id: Optional[int] = None

    def awaiting(self, session_id: int) -> "AutoRepeatPlan":
        return replace(self, awaiting_validation_session_id=session_id)

    def consumed(self) -> "AutoRepeatPlan":
        return replace(self, awaiting_validation_session_id=None, remaining=max(0, self.remaining - 1))


@dataclass(frozen=True)
class AutoRepeatEffective:
    enabled: bool
    repeats: int
    delay_s: float

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


# --- Runtime state ---

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class ShowingNumbers:
    current: int
    total: int


@dataclass(frozen=True)
class Complete:
    pass


SessionState = Union[Idle, ShowingNumbers, Complete]


# --- Lifecycle payloads ---

@dataclass(frozen=True)
class ShowNumber:
    session_id: int
    index: int
    total: int
    value: int
    running_sum: int

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SessionResult:
    session_id: int
    numbers: List[int] = field(default_factory=list)
    sum: int = 0

    def to_json(self) -> Dict[str, Any]:
        return {"session_id": self.session_id, "numbers": list(self.numbers), "sum": self.sum}


@dataclass(frozen=True)
class AutoRepeatWaiting:
    session_id: int
    next_start_at_ms: int
    remaining: int

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AutoRepeatTick:
    session_id: int
    seconds_left: int
    remaining: int

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


# --- Command responses ---

@dataclass(frozen=True)
class StartSessionResponse:
    session_id: int
    effective_config: SessionConfigEffective
    effective_auto_repeat: Optional[AutoRepeatEffective] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "effective_config": self.effective_config.to_json(),
            "effective_auto_repeat": self.effective_auto_repeat.to_json() if self.effective_auto_repeat else None,
        }


@dataclass(frozen=True)
class ValidationResult:
    expected_sum: int
    provided_sum: int
    correct: bool
    delta: int

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SubmitAnswerResponse:
    validation: ValidationResult
    auto_repeat_waiting: Optional[AutoRepeatWaiting] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "validation": self.validation.to_json(),
            "auto_repeat_waiting": self.auto_repeat_waiting.to_json() if self.auto_repeat_waiting else None,
        }
