"""
The sweep sensor firmware streams one ASCII line per echo:

  angle,distance[,timestamp]

  - angle     : servo position in degrees, integer or integer-like float
  - distance  : echo distance in centimetres
  - timestamp : optional integer milliseconds; the local clock is used
                when the field is missing

``parse_line()`` turns such a line into a :class:`~sweepscope.core.models.Sample`.
Non-finite angles or distances (``nan``, ``inf``) make the line malformed.
Other range checks are left to the caller: ``"999,1200,0"`` parses, the
angle is clamped, and ``Sample.is_valid`` reports the bad distance.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Optional, Sequence

from ..core.models import Sample

logger = logging.getLogger(__name__)


def wall_clock_ms() -> int:
    """Current wall-clock time in integer milliseconds."""
    return int(time.time() * 1000)


def parse_fields(text: str) -> Optional[tuple[float, float, Optional[int]]]:
    """
    Split ``text`` into ``(angle, distance, timestamp_or_None)``.

    Returns ``None`` when fewer than two fields are present, any of the
    first three fields is not numeric, or the angle or distance is not finite.
    """
    parts: Sequence[str] = [p.strip() for p in text.split(",")]
    if len(parts) < 2:
        return None
    try:
        angle = float(parts[0])
        distance = float(parts[1])
        timestamp = int(float(parts[2])) if len(parts) > 2 and parts[2] else None
    except (ValueError, OverflowError):
        return None
    if not (math.isfinite(angle) and math.isfinite(distance)):
        return None
    return angle, distance, timestamp


def parse_line(line: str, now_ms: Optional[int] = None) -> Sample | None:
    """
    Parse one sensor line into an unfiltered :class:`Sample`.

    Invalid lines return ``None`` so callers can skip them without raising.
    """
    text = line.strip()
    if not text:
        return None

    fields = parse_fields(text)
    if fields is None:
        logger.debug("Dropping malformed sensor line: %r", text)
        return None

    angle, distance, timestamp = fields
    if timestamp is None:
        timestamp = wall_clock_ms() if now_ms is None else int(now_ms)
    return Sample.from_raw(angle, distance, timestamp)


def format_line(sample: Sample) -> str:
    """Render ``sample`` in the wire format (raw distance)."""
    return f"{sample.angle},{sample.raw_distance:.1f},{sample.timestamp_ms}"
