from __future__ import annotations

"""Clamp untrusted session input into a bounded, always-usable config.

Normalization never fails on numeric content: non-finite or out-of-range
values snap to the nearest bound. Only input of the wrong shape (missing
fields, non-numeric strings) is rejected with ``InvalidConfig``.
"""

import math
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from .errors import InvalidConfig
from .models import (
    AutoRepeatConfigInput,
    AutoRepeatEffective,
    AutoRepeatPlan,
    SessionConfig,
    SessionConfigEffective,
    SessionConfigInput,
)

MIN_DIGITS = 1
MAX_DIGITS = 18
MIN_TOTAL_NUMBERS = 1
MAX_TOTAL_NUMBERS = 10_000
MIN_DURATION_S = 0.1
MAX_DURATION_S = 60.0
MIN_DELAY_S = 0.0
MAX_DELAY_S = 60.0
MAX_DURATION_MS = 60_000
MAX_DELAY_MS = 60_000

MIN_REPEATS = 1
MAX_REPEATS = 20
MIN_REPEAT_DELAY_S = 5.0
MAX_REPEAT_DELAY_S = 120.0
MIN_REPEAT_DELAY_MS = 5_000


def _round_half_away(v: float) -> float:
    return math.copysign(math.floor(abs(v) + 0.5), v)


def round_1_decimal(v: float) -> float:
    return _round_half_away(v * 10.0) / 10.0


def clamp_float(v: float, lo: float, hi: float) -> float:
    if not math.isfinite(v):
        return lo
    return max(lo, min(hi, v))


def clamp_int(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, int(v)))


def seconds_to_ms_clamped(seconds: float, min_ms: int, max_ms: int) -> int:
    ms = seconds * 1000.0
    if not math.isfinite(ms):
        return min_ms
    ms = _round_half_away(ms)
    ms_int = 0 if ms <= 0 else int(ms)
    return max(min_ms, min(max_ms, ms_int))


def _coerce(model, raw):
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise InvalidConfig(f"malformed {model.__name__}: {e.error_count()} invalid field(s)") from e


def normalize_session_config(
    raw: Union[SessionConfigInput, Mapping[str, Any]],
) -> Tuple[SessionConfig, SessionConfigEffective]:
    """Clamp every field of ``raw`` into range.

    Returns:
        The engine config (milliseconds) and its display echo (seconds,
        rounded to one decimal).
    """
    inp = _coerce(SessionConfigInput, raw)

    digits = clamp_int(inp.digits_per_number, MIN_DIGITS, MAX_DIGITS)
    total_numbers = clamp_int(inp.total_numbers, MIN_TOTAL_NUMBERS, MAX_TOTAL_NUMBERS)

    # The UI offers 0.1-5 s; input is untrusted so allow up to a minute.
    duration_s = clamp_float(inp.number_duration_s, MIN_DURATION_S, MAX_DURATION_S)
    delay_s = clamp_float(inp.delay_between_numbers_s, MIN_DELAY_S, MAX_DELAY_S)

    config = SessionConfig(
        digits_per_number=digits,
        number_duration_ms=seconds_to_ms_clamped(duration_s, 1, MAX_DURATION_MS),
        delay_between_numbers_ms=seconds_to_ms_clamped(delay_s, 0, MAX_DELAY_MS),
        total_numbers=total_numbers,
        allow_negative_numbers=bool(inp.allow_negative_numbers),
    )
    effective = SessionConfigEffective(
        digits_per_number=config.digits_per_number,
        number_duration_s=round_1_decimal(config.number_duration_ms / 1000.0),
        delay_between_numbers_s=round_1_decimal(config.delay_between_numbers_ms / 1000.0),
        total_numbers=config.total_numbers,
        allow_negative_numbers=config.allow_negative_numbers,
    )
    return config, effective


def normalize_auto_repeat(
    raw: Union[AutoRepeatConfigInput, Mapping[str, Any], None],
    config: SessionConfig,
) -> Tuple[Optional[AutoRepeatPlan], Optional[AutoRepeatEffective]]:
    """Build the auto-repeat plan for ``config``; ``(None, None)`` when disabled."""
    if raw is None:
        return None, None
    inp = _coerce(AutoRepeatConfigInput, raw)
    if not inp.enabled:
        return None, None

    repeats = clamp_int(inp.repeats, MIN_REPEATS, MAX_REPEATS)
    delay_s = clamp_float(inp.delay_s, MIN_REPEAT_DELAY_S, MAX_REPEAT_DELAY_S)
    delay_ms = max(int(_round_half_away(delay_s * 1000.0)), MIN_REPEAT_DELAY_MS)

    plan = AutoRepeatPlan(remaining=repeats, delay_ms=delay_ms, config=config)
    return plan, AutoRepeatEffective(enabled=True, repeats=repeats, delay_s=delay_ms / 1000.0)


def validate_config(config: SessionConfig) -> None:
    """Hard bounds check; raises ``InvalidConfig`` on the first violation."""
    if config.digits_per_number <= 0 or config.number_duration_ms <= 0 or config.total_numbers <= 0:
        raise InvalidConfig("digits_per_number, number_duration_ms, and total_numbers must be > 0")
    # 10^digits must stay well inside a signed 64-bit integer.
    if config.digits_per_number > MAX_DIGITS:
        raise InvalidConfig(f"digits_per_number must be <= {MAX_DIGITS}")
    if config.total_numbers > MAX_TOTAL_NUMBERS:
        raise InvalidConfig(f"total_numbers must be <= {MAX_TOTAL_NUMBERS}")
    if config.number_duration_ms > MAX_DURATION_MS:
        raise InvalidConfig(f"number_duration_ms must be <= {MAX_DURATION_MS}")
    if config.delay_between_numbers_ms < 0 or config.delay_between_numbers_ms > MAX_DELAY_MS:
        raise InvalidConfig(f"delay_between_numbers_ms must be within 0..{MAX_DELAY_MS}")
