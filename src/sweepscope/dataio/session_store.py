"""Reading and writing recorded sweep sessions.

A session file is UTF-8 text::

    # SweepScope session recording
    # Created: 2026-10-18T14:03:11
    # Samples: 2
    # Columns: angle,distance,timestamp

    45.0,123.5,1678912345
    47.0,121.0,1678912375

Angle and distance carry one decimal, the timestamp is integer
milliseconds, and the distance column holds the raw reading so a replay goes
through the filter exactly like live data.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from ..core.models import Sample
from ..sensors.sweep_line import parse_fields, wall_clock_ms

logger = logging.getLogger(__name__)

HEADER_TITLE = "SweepScope session recording"
COLUMNS = ("angle", "distance", "timestamp")


class SessionFileError(OSError):
    """Raised when a session file cannot be written or yields no samples."""


def format_record(sample: Sample) -> str:
    return f"{float(sample.angle):.1f},{sample.raw_distance:.1f},{int(sample.timestamp_ms)}"


def _header_lines(count: int) -> List[str]:
    return [
        f"# {HEADER_TITLE}",
        f"# Created: {datetime.now().isoformat(timespec='seconds')}",
        f"# Samples: {count}",
        f"# Columns: {','.join(COLUMNS)}",
    ]


def write_session(path: Path, samples: Iterable[Sample]) -> int:
    """
    Write the valid entries of ``samples`` to ``path``.

    Directories are created as needed. Returns the number of records written.
    """
    valid = [s for s in samples if s.is_valid]
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="\n") as fh:
            for line in _header_lines(len(valid)):
                fh.write(line + "\n")
            fh.write("\n")
            for sample in valid:
                fh.write(format_record(sample) + "\n")
    except OSError as exc:
        raise SessionFileError(f"Cannot write session {path}: {exc}") from exc
    return len(valid)


def read_session(path: Path, *, clock_ms: Callable[[], int] = wall_clock_ms) -> List[Sample]:
    """
    Load the valid samples stored in ``path``.

    Comment and blank lines are skipped; malformed or out-of-range records
    are dropped without aborting the load. Records without a timestamp get
    the load-time clock.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            lines = fh.readlines()
    except (OSError, UnicodeDecodeError) as exc:
        raise SessionFileError(f"Cannot read session {path}: {exc}") from exc

    load_time = int(clock_ms())
    samples: List[Sample] = []
    skipped = 0
    for lineno, raw_line in enumerate(lines, start=1):
        text = raw_line.strip()
        if not text or text.startswith("#"):
            continue
        fields = parse_fields(text)
        if fields is None:
            skipped += 1
            logger.debug("%s:%d: malformed record %r", path, lineno, text)
            continue
        angle, distance, timestamp = fields
        sample = Sample.from_raw(angle, distance, load_time if timestamp is None else timestamp)
        if not sample.is_valid:
            skipped += 1
            continue
        samples.append(sample)

    if not samples:
        raise SessionFileError(f"No valid samples in {path}")
    if skipped:
        logger.info("Loaded %d samples from %s (%d records skipped)", len(samples), path, skipped)
    return samples


class SessionStore:
    """
    Failure-tolerant front end over :func:`write_session` / :func:`read_session`.

    Errors are logged and reported as ``False`` / ``None`` so a bad path never
    takes the running pipeline down. The most recent message is kept in
    :attr:`last_error`.
    """

    def __init__(self, *, clock_ms: Callable[[], int] = wall_clock_ms) -> None:
        self._clock_ms = clock_ms
        self.last_error: Optional[str] = None

    def save(self, samples: Iterable[Sample], destination: Path | str) -> bool:
        try:
            count = write_session(Path(destination), samples)
        except SessionFileError as exc:
            self.last_error = str(exc)
            logger.error("%s", exc)
            return False
        self.last_error = None
        logger.info("Saved %d samples to %s", count, destination)
        return True

    def load(self, source: Path | str) -> Optional[List[Sample]]:
        try:
            samples = read_session(Path(source), clock_ms=self._clock_ms)
        except SessionFileError as exc:
            self.last_error = str(exc)
            logger.warning("%s", exc)
            return None
        self.last_error = None
        return samples


__all__ = [
    "SessionFileError",
    "SessionStore",
    "format_record",
    "read_session",
    "write_session",
]
