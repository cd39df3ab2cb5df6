"""Sweep sensor line format and a synthetic sensor for offline runs."""

from .simulated import SimulatedSweepSource
from .sweep_line import format_line, parse_line

__all__ = ["SimulatedSweepSource", "format_line", "parse_line"]
