from __future__ import annotations

"""FluidSynth backend for sound cues."""

import logging
import sys
from typing import Any, Dict, Sequence

from .synthesis import Synth

logger = logging.getLogger("flashsum.audio")

CUE_CHANNEL = 0


class FluidSynthSynth(Synth):
    """Plays cues through pyfluidsynth on a single channel."""

    def __init__(self, soundfont_path: str, sample_rate: int = 44100, gain: float = 0.5, program: int = 0) -> None:
        super().__init__(sample_rate=sample_rate, gain=gain)
        try:
            import fluidsynth  # type: ignore
        except ImportError as e:  # pragma: no cover - optional extra
            raise RuntimeError("sound cues need the 'audio' extra (pyfluidsynth)") from e

        self._fs = fluidsynth.Synth(samplerate=float(sample_rate), gain=gain)
        self._start_driver()
        self._sfid = self._fs.sfload(soundfont_path)
        if self._sfid < 0:
            self._fs.delete()
            raise RuntimeError(f"SoundFont could not be loaded: {soundfont_path}")
        self.program_select(program)
        logger.debug("fluidsynth ready (soundfont=%s, program=%s)", soundfont_path, program)

    def _start_driver(self) -> None:
        # CoreAudio avoids SDL warnings on macOS; elsewhere let fluidsynth pick.
        if sys.platform == "darwin":
            try:
                self._fs.start(driver="coreaudio")
                return
            except Exception as e:
                logger.debug("coreaudio driver unavailable (%s); using default", e)
        self._fs.start()

    def program_select(self, program: int) -> None:
        self._fs.program_select(CUE_CHANNEL, self._sfid, 0, max(0, min(127, int(program))))

    def notes_on(self, midis: Sequence[int], velocity: int) -> None:
        for m in midis:
            self._fs.noteon(CUE_CHANNEL, m, velocity)

    def notes_off(self, midis: Sequence[int]) -> None:
        for m in midis:
            self._fs.noteoff(CUE_CHANNEL, m)

    def close(self) -> None:
        self._fs.delete()


def make_synth_from_config(cfg: Dict[str, Any]) -> Synth:
    """Build the synth described by the ``audio`` config section.

    Raises:
        RuntimeError: pyfluidsynth is missing or the SoundFont cannot be loaded.
        ValueError: unsupported backend.
    """
    audio = cfg.get("audio", {})
    backend = audio.get("backend", "fluidsynth")
    if backend != "fluidsynth":
        raise ValueError(f"Unsupported backend: {backend}")
    return FluidSynthSynth(
        soundfont_path=str(audio.get("soundfont_path")),
        sample_rate=int(audio.get("sample_rate", 44100)),
        gain=float(audio.get("gain", 0.5)),
        program=int(audio.get("program", 0)),
    )
