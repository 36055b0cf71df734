from __future__ import annotations

"""In-memory attempt history: a small ring buffer of validated answers.

Nothing is written to disk; the buffer lives as long as the process.
"""

import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List

import pandas as pd
from pydantic import BaseModel, Field, field_validator

COLUMNS = ["session_id", "answered_at", "digits", "total_numbers", "expected_sum", "provided_sum", "correct", "delta"]


class AttemptRecord(BaseModel):
    session_id: int = Field(ge=1)
    answered_at: datetime
    digits: int = Field(ge=1, le=18)
    total_numbers: int = Field(ge=1, le=10_000)
    expected_sum: int
    provided_sum: int
    correct: bool
    delta: int

    @field_validator("answered_at")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class AttemptHistory:
    def __init__(self, capacity: int = 50) -> None:
        self._records: Deque[AttemptRecord] = deque(maxlen=max(1, int(capacity)))
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def record(self, record: AttemptRecord) -> None:
        with self._lock:
            self._records.append(record)

    def records(self) -> List[AttemptRecord]:
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def to_frame(self) -> pd.DataFrame:
        rows = [r.model_dump() for r in self.records()]
        if not rows:
            return pd.DataFrame({c: pd.Series(dtype="object") for c in COLUMNS})
        return pd.DataFrame(rows, columns=COLUMNS)

    def summarize(self) -> Dict[str, Any]:
        """Totals plus per-digit-count accuracy over the buffered attempts."""
        df = self.to_frame()
        if df.empty:
            return {"attempts": 0, "correct": 0, "accuracy": 0.0, "mean_abs_delta": 0.0, "by_digits": {}}

        correct = df["correct"].astype(bool)
        by_digits: Dict[int, Dict[str, Any]] = {}
        for digits, grp in df.groupby("digits", sort=True):
            ok = grp["correct"].astype(bool)
            by_digits[int(digits)] = {
                "attempts": int(len(grp)),
                "correct": int(ok.sum()),
                "accuracy": float(ok.mean()),
            }
        return {
            "attempts": int(len(df)),
            "correct": int(correct.sum()),
            "accuracy": float(correct.mean()),
            "mean_abs_delta": float(df["delta"].astype("float64").abs().mean()),
            "by_digits": by_digits,
        }


def format_summary(summary: Dict[str, Any]) -> str:
    """Return a human-readable summary of ``AttemptHistory.summarize()``."""
    attempts = int(summary.get("attempts", 0))
    correct = int(summary.get("correct", 0))
    lines = [f"Total: {correct}/{attempts} correct"]
    if attempts:
        lines.append(f"Mean miss: {summary.get('mean_abs_delta', 0.0):.1f}")
    for digits, node in sorted((summary.get("by_digits") or {}).items()):
        lines.append(f"{digits} digit(s): {node.get('correct', 0)}/{node.get('attempts', 0)}")
    return "\n".join(lines)
