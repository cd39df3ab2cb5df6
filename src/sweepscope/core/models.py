"""Shared dataclasses for sweep samples and pipeline status."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

MIN_ANGLE = 0
MAX_ANGLE = 180
ANGLE_COUNT = MAX_ANGLE - MIN_ANGLE + 1

# Exclusive bounds on a raw echo distance (cm).
MIN_VALID_DISTANCE = 0.0
MAX_VALID_DISTANCE = 999.0


def clamp_angle(angle: float) -> int:
    """Round ``angle`` to whole degrees and clamp it into ``[0, 180]``."""
    try:
        value = float(angle)
    except (TypeError, ValueError):
        return MIN_ANGLE
    if math.isnan(value):
        return MIN_ANGLE
    if math.isinf(value):
        return MAX_ANGLE if value > 0 else MIN_ANGLE
    return max(MIN_ANGLE, min(MAX_ANGLE, int(round(value))))


def is_valid_distance(distance: float) -> bool:
    """Return True when ``distance`` is a usable echo reading."""
    try:
        value = float(distance)
    except (TypeError, ValueError):
        return False
    if math.isnan(value):
        return False
    return MIN_VALID_DISTANCE < value < MAX_VALID_DISTANCE


@dataclass(frozen=True)
class Sample:
    angle: int
    raw_distance: float
    filtered_distance: float
    timestamp_ms: int

    @classmethod
    def from_raw(cls, angle: float, distance: float, timestamp_ms: int) -> "Sample":
        """Build an unfiltered sample (filtered distance mirrors the raw one)."""
        raw = float(distance)
        return cls(
            angle=clamp_angle(angle),
            raw_distance=raw,
            filtered_distance=raw,
            timestamp_ms=int(timestamp_ms),
        )

    @property
    def is_valid(self) -> bool:
        return is_valid_distance(self.raw_distance)

    def with_filtered(self, filtered_distance: float) -> "Sample":
        return replace(self, filtered_distance=float(filtered_distance))


class PipelineMode(Enum):
    """Where :class:`~sweepscope.core.pipeline.PipelineController` pulls samples from."""

    LIVE = "live"
    REPLAY = "replay"


@dataclass(frozen=True)
class PipelineStatus:
    connected: bool
    recording: bool
    replaying: bool
    sample_count: int
    mode: PipelineMode = PipelineMode.LIVE
    recorded_count: int = 0
    replay_progress: float = 0.0
    replay_speed: float = 1.0
    sample_rate_hz: float = 0.0
    last_error: Optional[str] = None


__all__ = [
    "ANGLE_COUNT",
    "MAX_ANGLE",
    "MIN_ANGLE",
    "MAX_VALID_DISTANCE",
    "MIN_VALID_DISTANCE",
    "PipelineMode",
    "PipelineStatus",
    "Sample",
    "clamp_angle",
    "is_valid_distance",
]
