from __future__ import annotations

"""Randomness helpers for seeding and per-session generators."""

import os
import random
from typing import Optional


def _env_seed() -> Optional[int]:
    seed = os.environ.get("SEED")
    if seed is None:
        return None
    try:
        return int(seed)
    except ValueError:
        return None


def seed_if_needed() -> None:
    """Seed the global RNG if the SEED env var is set."""
    s = _env_seed()
    if s is not None:
        random.seed(s)


def make_rng() -> random.Random:
    """Fresh generator for one session.

    With SEED set, sessions draw their seeds from the (seeded) global RNG, so a
    run of several sessions is reproducible while each session still differs.
    """
    if _env_seed() is not None:
        return random.Random(random.getrandbits(64))
    return random.Random()
