from .errors import AlreadyRunning, InvalidAnswerFormat, InvalidConfig, NotFound, SessionError
from .manager import SessionManager
from .models import (
    AutoRepeatPlan,
    Complete,
    Idle,
    SessionConfig,
    SessionConfigEffective,
    SessionResult,
    SessionState,
    ShowingNumbers,
    ShowNumber,
)
from .normalize import normalize_auto_repeat, normalize_session_config, validate_config
from .scheduler import schedule_auto_repeat_if_needed
from .timing import LoopTiming

__all__ = [
    "SessionError",
    "InvalidConfig",
    "AlreadyRunning",
    "NotFound",
    "InvalidAnswerFormat",
    "SessionManager",
    "AutoRepeatPlan",
    "SessionConfig",
    "SessionConfigEffective",
    "SessionResult",
    "SessionState",
    "Idle",
    "ShowingNumbers",
    "Complete",
    "ShowNumber",
    "normalize_session_config",
    "normalize_auto_repeat",
    "validate_config",
    "schedule_auto_repeat_if_needed",
    "LoopTiming",
]
