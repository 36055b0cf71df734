from __future__ import annotations

"""Constrained number generation for a drill.

Each value has a fixed digit count and no leading zero. The first value of a
session is never negative, and a negative value is only drawn when its
magnitude fits under the running sum, so the sum never drops below zero.

All functions are pure given the supplied ``random.Random``; the caller keeps
the running sum and the previous payload.
"""

import random
from typing import NamedTuple, Optional

MAX_DUPLICATE_ATTEMPTS = 256


class Draw(NamedTuple):
    text: str
    value: int


def max_for_digits(digits: int) -> int:
    return 9 if digits <= 1 else 10**digits - 1


def random_fixed_digits(rng: random.Random, digits: int) -> str:
    if digits <= 1:
        # No leading zero, so 0 itself is excluded.
        return str(rng.randint(1, 9))
    return str(rng.randrange(10 ** (digits - 1), 10**digits))


def random_fixed_digits_capped(rng: random.Random, digits: int, max_inclusive: int) -> Optional[str]:
    """Like ``random_fixed_digits`` but never above ``max_inclusive``.

    Returns None when no value of the requested width fits under the cap.
    """
    if digits <= 1:
        if max_inclusive < 1:
            return None
        return str(rng.randint(1, min(max_inclusive, 9)))

    lo = 10 ** (digits - 1)
    if max_inclusive < lo:
        return None
    cap_exclusive = min(max_inclusive + 1, 10**digits)
    return str(rng.randrange(lo, cap_exclusive))


def random_number_with_constraints(
    rng: random.Random,
    digits: int,
    allow_negative_numbers: bool,
    index: int,
    running_sum: int,
) -> Draw:
    allow_negative_here = allow_negative_numbers and index > 0

    # Negative magnitudes are capped by the running sum and by the digit width.
    sum_cap = 0 if running_sum <= 0 else min(running_sum, max_for_digits(digits))

    if allow_negative_here and sum_cap > 0 and rng.random() < 0.5:
        magnitude = random_fixed_digits_capped(rng, digits, sum_cap)
        if magnitude is not None:
            magnitude_value = int(magnitude)
            if running_sum - magnitude_value >= 0:
                return Draw(f"-{magnitude}", -magnitude_value)

    magnitude = random_fixed_digits(rng, digits)
    return Draw(magnitude, int(magnitude))


def next_value(
    rng: random.Random,
    digits: int,
    allow_negative_numbers: bool,
    index: int,
    running_sum: int,
    last_payload: Optional[str] = None,
) -> Draw:
    """Draw the value for step ``index`` (0-based), avoiding a repeat of ``last_payload``.

    Duplicate suppression is best-effort: after ``MAX_DUPLICATE_ATTEMPTS``
    draws the last candidate is accepted even if it repeats.
    """
    attempt = 0
    while True:
        draw = random_number_with_constraints(rng, digits, allow_negative_numbers, index, running_sum)
        if draw.text != last_payload:
            return draw
        attempt += 1
        if attempt >= MAX_DUPLICATE_ATTEMPTS:
            return draw
