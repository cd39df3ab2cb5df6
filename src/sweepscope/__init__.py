"""SweepScope: filtering, buffering and replay for rotating range sensors."""

from .core.models import PipelineMode, PipelineStatus, Sample
from .core.pipeline import Command, CommandKind, PipelineController

__all__ = [
    "Command",
    "CommandKind",
    "PipelineController",
    "PipelineMode",
    "PipelineStatus",
    "Sample",
]

__version__ = "0.1.0"
