"""Paced playback of a recorded sweep session."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from enum import Enum
from typing import Deque, List, Optional

from .models import Sample

logger = logging.getLogger(__name__)

DEFAULT_BASE_INTERVAL_MS = 30.0
DEFAULT_SPEED = 1.0
MIN_SPEED = 0.1
MAX_SPEED = 10.0
STALL_RESET_MS = 250.0


class ReplayState(Enum):
    IDLE = "idle"
    PLAYING = "playing"


class ReplayScheduler:
    """
    Step through a loaded session at a fixed nominal interval.

    Pacing ignores the recorded timestamps: one sample is released every
    ``base_interval_ms / speed`` milliseconds of caller time, so irregular
    original sampling still plays back evenly. Callers pass the current time
    as ``now_ms``; a single :meth:`tick` may release several samples when the
    interval is shorter than the caller's tick period.

    Reaching the end of the sequence returns to :attr:`ReplayState.IDLE`;
    there is no looping.
    """

    def __init__(
        self,
        base_interval_ms: float = DEFAULT_BASE_INTERVAL_MS,
        speed: float = DEFAULT_SPEED,
    ) -> None:
        if base_interval_ms <= 0:
            raise ValueError("base_interval_ms must be positive")
        self._base_interval_ms = float(base_interval_ms)
        self._speed = DEFAULT_SPEED
        self.set_speed(speed)

        self._samples: tuple[Sample, ...] = ()
        self._cursor = 0
        self._state = ReplayState.IDLE
        self._last_advance_ms = 0.0
        self._pending: Deque[Sample] = deque()

    # ------------------------------------------------------------ properties
    @property
    def state(self) -> ReplayState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is ReplayState.PLAYING

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def base_interval_ms(self) -> float:
        return self._base_interval_ms

    @property
    def interval_ms(self) -> float:
        """Effective time between released samples at the current speed."""
        return self._base_interval_ms / self._speed

    @property
    def length(self) -> int:
        return len(self._samples)

    @property
    def position(self) -> int:
        return self._cursor

    @property
    def progress(self) -> float:
        if not self._samples:
            return 0.0
        return min(1.0, self._cursor / len(self._samples))

    @property
    def samples(self) -> tuple[Sample, ...]:
        return self._samples

    # ------------------------------------------------------------- controls
    def load(self, samples: Iterable[Sample]) -> None:
        """Replace the sequence; playback stops and the cursor rewinds."""
        self._samples = tuple(samples)
        self._cursor = 0
        self._pending.clear()
        self._state = ReplayState.IDLE
        logger.debug("Replay loaded with %d samples", len(self._samples))

    def start(self, now_ms: float) -> bool:
        """
        Begin playback from the current cursor.

        Returns ``False`` (and stays idle) when there is nothing left to play.
        """
        if self._state is ReplayState.PLAYING:
            return True
        if self._cursor >= len(self._samples):
            return False
        self._state = ReplayState.PLAYING
        self._last_advance_ms = float(now_ms)
        logger.info(
            "Replay started at %d/%d (speed %.1fx)",
            self._cursor,
            len(self._samples),
            self._speed,
        )
        return True

    def stop(self) -> None:
        if self._state is ReplayState.IDLE:
            return
        self._state = ReplayState.IDLE
        self._pending.clear()
        logger.info("Replay stopped at %d/%d", self._cursor, len(self._samples))

    def set_speed(self, speed: float) -> None:
        self._speed = max(MIN_SPEED, min(MAX_SPEED, float(speed)))

    def seek(self, fraction: float) -> None:
        """Move the cursor to ``fraction`` of the sequence, in any state."""
        fraction = max(0.0, min(1.0, float(fraction)))
        self._cursor = int(round(fraction * len(self._samples)))
        self._pending.clear()

    # -------------------------------------------------------------- playback
    def tick(self, now_ms: float) -> int:
        """
        Release every sample whose interval has elapsed since the last one.

        The pacing reference advances by whole intervals, so playback speed
        does not depend on how often the caller ticks. After a stall longer
        than :data:`STALL_RESET_MS` the reference is re-anchored to ``now_ms``
        and only one sample is released.

        Returns the number of samples released by this call.
        """
        if self._state is not ReplayState.PLAYING:
            return 0
        if self._cursor >= len(self._samples):
            self._finish()
            return 0

        interval = self.interval_ms
        if now_ms - self._last_advance_ms > max(STALL_RESET_MS, 2.0 * interval):
            self._last_advance_ms = float(now_ms) - interval

        released = 0
        while now_ms - self._last_advance_ms >= interval:
            self._pending.append(self._samples[self._cursor])
            self._cursor += 1
            self._last_advance_ms += interval
            released += 1
            if self._cursor >= len(self._samples):
                self._finish()
                break
        return released

    def current_sample(self) -> Optional[Sample]:
        """Hand out the oldest released sample exactly once."""
        if not self._pending:
            return None
        return self._pending.popleft()

    def drain_released(self) -> List[Sample]:
        """Hand out every released sample, oldest first."""
        samples = list(self._pending)
        self._pending.clear()
        return samples

    def _finish(self) -> None:
        self._state = ReplayState.IDLE
        logger.info("Replay finished after %d samples", len(self._samples))


__all__ = [
    "DEFAULT_BASE_INTERVAL_MS",
    "DEFAULT_SPEED",
    "MAX_SPEED",
    "MIN_SPEED",
    "STALL_RESET_MS",
    "ReplayScheduler",
    "ReplayState",
]
