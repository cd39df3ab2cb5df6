"""Per-angle adaptive distance filter.

Each whole degree of the sweep owns an independent bucket holding a short
window of recent raw readings and an exponential moving average. A reading is
run through three stages in order:

1. outlier rejection (absolute range, then a ``k``-sigma gate once the
   window holds enough history),
2. a sliding median over the window,
3. exponential smoothing of the median output.

A rejected reading leaves the bucket untouched and the caller gets the
previous average back.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional

import numpy as np

from ..core.models import ANGLE_COUNT, clamp_angle

DEFAULT_ALPHA = 0.3
MIN_ALPHA = 0.1
MAX_ALPHA = 0.9

DEFAULT_WINDOW_SIZE = 5
MIN_WINDOW_SIZE = 3
MAX_WINDOW_SIZE = 15

DEFAULT_OUTLIER_K = 2.0
MIN_OUTLIER_K = 1.0
MAX_OUTLIER_K = 5.0

DEFAULT_MIN_DISTANCE = 10.0
DEFAULT_MAX_DISTANCE = 400.0

# Window length required before the sigma gate and the median kick in.
OUTLIER_MIN_SAMPLES = 5
MEDIAN_MIN_SAMPLES = 3


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class _AngleBucket:
    __slots__ = ("window", "ema")

    def __init__(self, window_size: int) -> None:
        self.window: Deque[float] = deque(maxlen=window_size)
        self.ema: Optional[float] = None

    def resize(self, window_size: int) -> None:
        # deque(..., maxlen) keeps the newest values when shrinking.
        self.window = deque(self.window, maxlen=window_size)


class AdaptiveFilter:
    """
    Bucketed outlier rejection + median + EMA for one sweep sensor.

    Parameters are clamped silently into their valid ranges; ``apply`` never
    raises for numeric input.
    """

    def __init__(
        self,
        alpha: float = DEFAULT_ALPHA,
        window_size: int = DEFAULT_WINDOW_SIZE,
        outlier_k: float = DEFAULT_OUTLIER_K,
        min_distance: float = DEFAULT_MIN_DISTANCE,
        max_distance: float = DEFAULT_MAX_DISTANCE,
    ) -> None:
        self._alpha = DEFAULT_ALPHA
        self._window_size = DEFAULT_WINDOW_SIZE
        self._outlier_k = DEFAULT_OUTLIER_K
        self._min_distance = DEFAULT_MIN_DISTANCE
        self._max_distance = DEFAULT_MAX_DISTANCE
        self._buckets: List[Optional[_AngleBucket]] = [None] * ANGLE_COUNT

        self.set_alpha(alpha)
        self.set_window_size(window_size)
        self.set_outlier_threshold(outlier_k)
        self.set_distance_range(min_distance, max_distance)

    # ------------------------------------------------------------ parameters
    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def outlier_k(self) -> float:
        return self._outlier_k

    @property
    def distance_range(self) -> tuple[float, float]:
        return self._min_distance, self._max_distance

    def set_alpha(self, alpha: float) -> None:
        self._alpha = _clamp(float(alpha), MIN_ALPHA, MAX_ALPHA)

    def set_window_size(self, window_size: int) -> None:
        size = int(_clamp(int(round(float(window_size))), MIN_WINDOW_SIZE, MAX_WINDOW_SIZE))
        if size == self._window_size:
            return
        self._window_size = size
        for bucket in self._buckets:
            if bucket is not None:
                bucket.resize(size)

    def set_outlier_threshold(self, k: float) -> None:
        self._outlier_k = _clamp(float(k), MIN_OUTLIER_K, MAX_OUTLIER_K)

    def set_distance_range(self, min_distance: float, max_distance: float) -> None:
        low = max(0.0, float(min_distance))
        high = max(low, float(max_distance))
        self._min_distance = low
        self._max_distance = high

    # ------------------------------------------------------------- filtering
    def apply(self, raw_value: float, angle: float) -> float:
        """Filter one reading taken at ``angle`` and return the smoothed value."""
        index = clamp_angle(angle)
        bucket = self._buckets[index]
        if bucket is None:
            bucket = _AngleBucket(self._window_size)
            self._buckets[index] = bucket

        value = float(raw_value)
        if self._is_outlier(value, bucket):
            return bucket.ema if bucket.ema is not None else 0.0

        bucket.window.append(value)
        if len(bucket.window) >= MEDIAN_MIN_SAMPLES:
            median_out = float(np.median(np.fromiter(bucket.window, dtype=np.float64)))
        else:
            median_out = value

        if bucket.ema is None:
            bucket.ema = median_out
        else:
            bucket.ema = self._alpha * median_out + (1.0 - self._alpha) * bucket.ema
        return bucket.ema

    def _is_outlier(self, value: float, bucket: _AngleBucket) -> bool:
        # NaN fails both comparisons, so test the accepted range positively.
        if not (self._min_distance <= value <= self._max_distance):
            return True
        if len(bucket.window) < OUTLIER_MIN_SAMPLES:
            return False
        window = np.fromiter(bucket.window, dtype=np.float64)
        mean = float(window.mean())
        std = float(window.std())
        return abs(value - mean) > self._outlier_k * std

    def reset(self) -> None:
        """Drop all per-angle state."""
        self._buckets = [None] * ANGLE_COUNT

    # ------------------------------------------------------------- inspection
    def ema_at(self, angle: float) -> Optional[float]:
        bucket = self._buckets[clamp_angle(angle)]
        return None if bucket is None else bucket.ema

    def window_at(self, angle: float) -> tuple[float, ...]:
        bucket = self._buckets[clamp_angle(angle)]
        return () if bucket is None else tuple(bucket.window)

    def active_angles(self) -> list[int]:
        """Angles that have accepted at least one reading."""
        return [i for i, bucket in enumerate(self._buckets) if bucket is not None and bucket.ema is not None]


__all__ = [
    "AdaptiveFilter",
    "DEFAULT_ALPHA",
    "DEFAULT_MAX_DISTANCE",
    "DEFAULT_MIN_DISTANCE",
    "DEFAULT_OUTLIER_K",
    "DEFAULT_WINDOW_SIZE",
    "MAX_ALPHA",
    "MAX_OUTLIER_K",
    "MAX_WINDOW_SIZE",
    "MIN_ALPHA",
    "MIN_OUTLIER_K",
    "MIN_WINDOW_SIZE",
]
