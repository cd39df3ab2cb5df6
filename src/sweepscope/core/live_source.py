from __future__ import annotations

"""
Non-blocking line sources feeding the pipeline tick.

The pipeline asks a source for at most one line per tick and must never
wait on it. Sources that wrap a blocking stream (serial port, pipe, stdin)
use :func:`start_reader` to pump lines into a bounded queue from a daemon
thread; the tick then drains that queue with ``get_nowait``.
"""

import logging
import queue
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 2048


class LineSource(Protocol):
    """What the pipeline needs from a transport: next line or ``None``."""

    @property
    def connected(self) -> bool:  # pragma: no cover - protocol
        ...

    def read_line(self) -> Optional[str]:  # pragma: no cover - protocol
        ...


class IterableLineSource:
    """Serve lines from an in-memory iterable, one per call."""

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines: Iterator[str] = iter(lines)
        self._exhausted = False

    @property
    def connected(self) -> bool:
        return not self._exhausted

    def read_line(self) -> Optional[str]:
        if self._exhausted:
            return None
        try:
            return next(self._lines)
        except StopIteration:
            self._exhausted = True
            return None


class QueueLineSource:
    """
    Bounded queue of pending lines.

    When the producer outpaces the consumer the oldest line is dropped.
    """

    def __init__(self, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._queue: queue.Queue[str] = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()
        self._dropped = 0

    @property
    def connected(self) -> bool:
        return not self._closed.is_set() or not self._queue.empty()

    @property
    def dropped(self) -> int:
        return self._dropped

    def offer(self, line: str) -> None:
        """Best-effort put that drops the oldest line when the queue is full."""
        try:
            self._queue.put_nowait(line)
        except queue.Full:
            try:
                self._queue.get_nowait()
                self._dropped += 1
            except queue.Empty:
                pass
            self._queue.put_nowait(line)

    def close(self) -> None:
        self._closed.set()

    def read_line(self) -> Optional[str]:
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def __len__(self) -> int:
        return self._queue.qsize()


def reader_loop(
    stream: Iterable[str],
    sink: QueueLineSource,
    *,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """Copy stripped, non-empty lines from ``stream`` into ``sink``."""
    try:
        for raw_line in stream:
            if stop_event is not None and stop_event.is_set():
                break
            line = raw_line.strip()
            if not line:
                continue
            sink.offer(line)
    except (OSError, ValueError) as exc:
        logger.warning("Line stream closed with error: %s", exc)
    finally:
        sink.close()


@dataclass
class StreamReaderHandle:
    thread: threading.Thread
    stop_event: threading.Event
    source: QueueLineSource

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if join:
            self.thread.join(timeout)

    def is_alive(self) -> bool:
        return self.thread.is_alive()


def start_reader(
    stream: Iterable[str],
    *,
    source: Optional[QueueLineSource] = None,
    maxsize: int = DEFAULT_QUEUE_SIZE,
    thread_name: Optional[str] = None,
) -> StreamReaderHandle:
    """
    Start a daemon thread that copies lines from *stream* into a queue source.

    Only the queue is shared with the thread; all pipeline state stays on
    the tick side.
    """
    sink = source or QueueLineSource(maxsize=maxsize)
    stop_event = threading.Event()

    def _target() -> None:
        reader_loop(stream, sink, stop_event=stop_event)

    thread = threading.Thread(
        target=_target,
        name=thread_name or "SweepScopeLineReader",
        daemon=True,
    )
    thread.start()
    return StreamReaderHandle(thread=thread, stop_event=stop_event, source=sink)
