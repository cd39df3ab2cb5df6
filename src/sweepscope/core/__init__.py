"""Core sweep pipeline: samples, history, replay, and live sources.

This package sits between the sensor transport and the display. The
:class:`~sweepscope.core.pipeline.PipelineController` (imported from
:mod:`sweepscope.core.pipeline` or the top-level package) ties these pieces
to the filter and the session store.
"""

# Data structures shared by the pipeline
from .history_buffer import HistoryBuffer
from .models import PipelineMode, PipelineStatus, Sample, clamp_angle, is_valid_distance

# Playback and live input
from .live_source import IterableLineSource, LineSource, QueueLineSource, start_reader
from .replay import ReplayScheduler, ReplayState

__all__ = [
    "HistoryBuffer",
    "IterableLineSource",
    "LineSource",
    "PipelineMode",
    "PipelineStatus",
    "QueueLineSource",
    "ReplayScheduler",
    "ReplayState",
    "Sample",
    "clamp_angle",
    "is_valid_distance",
    "start_reader",
]
