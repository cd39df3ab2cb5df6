from __future__ import annotations

from collections import deque
from typing import Deque, Iterable


class RateController:
    """
    Estimate the effective sample rate from recent sample timestamps.

    Notes
    -----
    - Timestamps are in milliseconds, as carried by sweep samples.
    - Replayed sessions may contain non-monotonic timestamps; a window whose
      span is not positive reports ``default_hz``.
    """

    def __init__(self, window_size: int = 100, default_hz: float = 0.0) -> None:
        if window_size <= 1:
            raise ValueError("window_size must be > 1")
        self._times_ms: Deque[float] = deque(maxlen=window_size)
        self.default_hz = float(default_hz)

    def add_sample_time(self, t_ms: float) -> None:
        """
        Append a new sample timestamp.

        Parameters
        ----------
        t_ms:
            Sample timestamp in milliseconds.
        """
        self._times_ms.append(float(t_ms))

    @property
    def estimated_hz(self) -> float:
        """Estimate Hz from the current timestamp window."""
        if len(self._times_ms) < 2:
            return self.default_hz
        span_ms = self._times_ms[-1] - self._times_ms[0]
        if span_ms <= 0:
            return self.default_hz
        count = len(self._times_ms) - 1
        return count * 1000.0 / span_ms

    @property
    def buffer_span_ms(self) -> float:
        """Time span (milliseconds) covered by the current timestamp window."""
        if len(self._times_ms) < 2:
            return 0.0
        return self._times_ms[-1] - self._times_ms[0]

    @property
    def buffer_size(self) -> int:
        return len(self._times_ms)

    def reset(self) -> None:
        self._times_ms.clear()

    def feed_times(self, times_ms: Iterable[float]) -> None:
        """Convenience method to bulk-add timestamps."""
        for t in times_ms:
            self.add_sample_time(t)
