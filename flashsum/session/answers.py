from __future__ import annotations

"""Answer parsing and comparison against the expected sum."""

import re

from .errors import InvalidAnswerFormat
from .models import ValidationResult

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
MAX_ANSWER_LEN = 64

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def saturate_i64(v: int) -> int:
    return max(I64_MIN, min(I64_MAX, v))


def parse_answer_text(text: str) -> int:
    """Parse a typed answer such as ``" 1,234 "`` or ``"-17"``.

    Raises:
        InvalidAnswerFormat: empty, too long, not a plain integer, or outside
            the signed 64-bit range.
    """
    cleaned = str(text).strip().replace(",", "")
    if not cleaned or len(cleaned) > MAX_ANSWER_LEN:
        raise InvalidAnswerFormat()
    if not _INTEGER_RE.fullmatch(cleaned):
        raise InvalidAnswerFormat()
    value = int(cleaned)
    if value < I64_MIN or value > I64_MAX:
        raise InvalidAnswerFormat()
    return value


def validate_answer(expected_sum: int, provided_sum: int) -> ValidationResult:
    delta = saturate_i64(provided_sum - expected_sum)
    return ValidationResult(
        expected_sum=expected_sum,
        provided_sum=provided_sum,
        correct=delta == 0,
        delta=delta,
    )
