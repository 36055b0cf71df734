from __future__ import annotations

"""Synth interface the sound cues are rendered on.

A cue is a short pattern of strikes. Each strike sounds one or more MIDI notes
together for a fixed time; backends only have to switch notes on and off.
"""

import time
from typing import Iterable, NamedTuple, Sequence, Tuple


class Strike(NamedTuple):
    notes: Tuple[int, ...]
    velocity: int
    dur_ms: int


class Synth:
    """Base class for cue playback backends."""

    def __init__(self, sample_rate: int, gain: float) -> None:
        self.sample_rate = sample_rate
        self.gain = gain

    def program_select(self, program: int) -> None:
        """Select the General MIDI program cues are played with."""
        raise NotImplementedError

    def notes_on(self, midis: Sequence[int], velocity: int) -> None:
        raise NotImplementedError

    def notes_off(self, midis: Sequence[int]) -> None:
        raise NotImplementedError

    def strike(self, strike: Strike) -> None:
        self.notes_on(strike.notes, strike.velocity)
        try:
            self.sleep_ms(strike.dur_ms)
        finally:
            self.notes_off(strike.notes)

    def play_pattern(self, pattern: Iterable[Strike]) -> None:
        for s in pattern:
            self.strike(s)

    def sleep_ms(self, ms: int) -> None:
        time.sleep(ms / 1000.0)

    def close(self) -> None:
        """Release resources."""
        pass
