from __future__ import annotations

"""Fire-and-forget sound cues (beep, applause, buzzer).

Cues are rendered as short note patterns on a ``Synth`` owned by a single
audio worker thread. The synth is created lazily on that thread; if it cannot
be created the failure is logged once and every later cue is dropped, so the
drill keeps running without sound.
"""

import logging
import queue
import threading
from typing import Callable, Dict, Optional, Tuple

from .synthesis import Strike, Synth

logger = logging.getLogger("flashsum.audio")

CUES: Dict[str, Tuple[Strike, ...]] = {
    "beep": (Strike((84,), 100, 120),),
    "applause": (
        Strike((72,), 90, 90),
        Strike((76,), 90, 90),
        Strike((79,), 95, 90),
        Strike((72, 76, 79, 84), 105, 500),
    ),
    "buzzer": (Strike((40, 41, 46), 115, 450),),
}

_SHUTDOWN = object()


class SoundCues:
    def __init__(self, synth_factory: Optional[Callable[[], Synth]] = None, enabled: bool = True) -> None:
        self._synth_factory = synth_factory
        self._enabled = threading.Event()
        if enabled:
            self._enabled.set()
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._worker_lock = threading.Lock()
        self._failed = False

    def set_enabled(self, flag: bool) -> None:
        if flag:
            self._enabled.set()
        else:
            self._enabled.clear()

    def is_enabled(self) -> bool:
        return self._enabled.is_set()

    def play_kind(self, kind: str) -> None:
        """Queue cue ``kind``; returns immediately.

        Raises:
            ValueError: ``kind`` is not a known cue.
        """
        if kind not in CUES:
            raise ValueError(f"unknown sound kind: {kind}")
        if not self.is_enabled():
            logger.debug("sound disabled; skipping %s", kind)
            return
        if self._synth_factory is None or self._failed:
            return
        self._ensure_worker()
        self._queue.put(kind)

    def close(self) -> None:
        with self._worker_lock:
            worker, self._worker = self._worker, None
        if worker is not None:
            self._queue.put(_SHUTDOWN)
            worker.join(timeout=2.0)

    def _ensure_worker(self) -> None:
        with self._worker_lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(target=self._run, name="flashsum-audio", daemon=True)
            self._worker.start()

    def _run(self) -> None:
        if self._synth_factory is None:
            return
        try:
            synth = self._synth_factory()
        except Exception as e:
            self._failed = True
            logger.error("audio worker failed to initialise synth: %s", e)
            return
        logger.info("audio worker initialised")
        try:
            while True:
                item = self._queue.get()
                if item is _SHUTDOWN:
                    break
                try:
                    synth.play_pattern(CUES[str(item)])
                except Exception as e:
                    logger.error("failed to play %s: %s", item, e)
        finally:
            try:
                synth.close()
            except Exception as e:
                logger.warning("failed to close synth: %s", e)
            logger.info("audio worker stopped")
