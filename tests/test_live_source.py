from __future__ import annotations

import io
import time

import pytest

from sweepscope.core.live_source import (
    IterableLineSource,
    QueueLineSource,
    reader_loop,
    start_reader,
)


def test_iterable_source_serves_lines_then_none() -> None:
    source = IterableLineSource(["a", "b"])
    assert source.connected
    assert source.read_line() == "a"
    assert source.read_line() == "b"
    assert source.read_line() is None
    assert not source.connected
    assert source.read_line() is None


def test_queue_source_drops_oldest_when_full() -> None:
    source = QueueLineSource(maxsize=2)
    for line in ("a", "b", "c"):
        source.offer(line)

    assert source.dropped == 1
    assert source.read_line() == "b"
    assert source.read_line() == "c"
    assert source.read_line() is None


def test_queue_source_rejects_zero_size() -> None:
    with pytest.raises(ValueError):
        QueueLineSource(maxsize=0)


def test_reader_loop_strips_and_skips_blank_lines() -> None:
    sink = QueueLineSource()
    reader_loop(["10,100,1\n", "\n", "  12,90,2  \r\n"], sink)

    assert sink.read_line() == "10,100,1"
    assert sink.read_line() == "12,90,2"
    assert sink.read_line() is None
    assert not sink.connected


def test_start_reader_background_thread() -> None:
    stream = io.StringIO("45,123.5,1678912345\n46,120.0,1678912375\n")
    handle = start_reader(stream)

    lines = []
    deadline = time.time() + 1.0
    while time.time() < deadline and len(lines) < 2:
        line = handle.source.read_line()
        if line is None:
            time.sleep(0.01)
            continue
        lines.append(line)

    handle.stop(join=True, timeout=1.0)

    assert lines == ["45,123.5,1678912345", "46,120.0,1678912375"]
    assert not handle.is_alive()
