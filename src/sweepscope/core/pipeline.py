"""Single-threaded sweep pipeline: source -> filter -> history (-> recording)."""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Any, Callable, Deque, List, Optional

from ..analysis.adaptive_filter import AdaptiveFilter
from ..analysis.rate import RateController
from ..config.runtime import SweepConfig
from ..dataio.file_paths import session_file
from ..dataio.session_store import SessionStore
from ..sensors.sweep_line import parse_line, wall_clock_ms
from ..tools.debug import time_block
from .history_buffer import HistoryBuffer
from .live_source import LineSource
from .models import PipelineMode, PipelineStatus, Sample
from .replay import ReplayScheduler

__all__ = [
    "Command",
    "CommandKind",
    "PipelineController",
    "TickResult",
]

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class CommandKind(Enum):
    SET_ALPHA = auto()
    SET_MEDIAN_WINDOW = auto()
    SET_OUTLIER_THRESHOLD = auto()
    SET_DISTANCE_RANGE = auto()
    RESET_FILTERS = auto()
    START_RECORDING = auto()
    STOP_RECORDING = auto()
    LOAD_REPLAY = auto()
    STOP_REPLAY = auto()
    SET_REPLAY_SPEED = auto()
    SEEK_REPLAY = auto()
    CLEAR_HISTORY = auto()
    SET_LIVE_SOURCE = auto()


@dataclass(frozen=True)
class Command:
    """One queued control request, applied at the start of the next tick."""

    kind: CommandKind
    value: Any = None


@dataclass(frozen=True)
class TickResult:
    """What a single :meth:`PipelineController.tick` produced, oldest first."""

    samples: tuple[Sample, ...] = ()
    mode: PipelineMode = PipelineMode.LIVE

    @property
    def sample(self) -> Optional[Sample]:
        """The newest sample ingested by the tick, if any."""
        return self.samples[-1] if self.samples else None


class PipelineController:
    """
    Owns every piece of pipeline state and mutates it only inside :meth:`tick`.

    Control methods (``set_alpha``, ``start_recording``, ``load_replay`` ...)
    just queue a :class:`Command`; the queue is drained at the start of the
    next tick. Readers use
    :meth:`get_snapshot` and :meth:`get_status`, which return immutable values.

    Live and replay ingestion are mutually exclusive and tracked by a single
    :class:`PipelineMode`.
    """

    def __init__(
        self,
        source: Optional[LineSource] = None,
        *,
        config: Optional[SweepConfig] = None,
        store: Optional[SessionStore] = None,
        clock_ms: Callable[[], float] = monotonic_ms,
        wall_clock: Callable[[], int] = wall_clock_ms,
        recordings_dir: Optional[Path] = None,
    ) -> None:
        cfg = (config or SweepConfig()).sanitized()
        self._config = cfg
        self._source = source
        self._store = store or SessionStore(clock_ms=wall_clock)
        self._clock_ms = clock_ms
        self._wall_clock = wall_clock
        self._recordings_dir = recordings_dir

        self._filter = AdaptiveFilter(
            alpha=cfg.alpha,
            window_size=cfg.median_window,
            outlier_k=cfg.outlier_k,
            min_distance=cfg.min_distance_cm,
            max_distance=cfg.max_distance_cm,
        )
        self._history: HistoryBuffer[Sample] = HistoryBuffer(
            high_water=cfg.history_high_water,
            low_water=cfg.history_low_water,
        )
        self._replay = ReplayScheduler(
            base_interval_ms=cfg.replay_base_interval_ms,
            speed=cfg.replay_speed,
        )
        self._rate = RateController(window_size=100)

        self._mode = PipelineMode.LIVE
        self._recording: Optional[List[Sample]] = None
        self._recording_path: Optional[Path] = None
        self._commands: Deque[Command] = deque()
        self._last_error: Optional[str] = None
        self._last_saved_path: Optional[Path] = None

    @classmethod
    def from_config(
        cls,
        config: SweepConfig,
        source: Optional[LineSource] = None,
        **kwargs: Any,
    ) -> "PipelineController":
        """Build a controller from a loaded :class:`SweepConfig`."""
        return cls(source, config=config, **kwargs)

    # ------------------------------------------------------------ read side
    @property
    def mode(self) -> PipelineMode:
        return self._mode

    @property
    def config(self) -> SweepConfig:
        return self._config

    @property
    def adaptive_filter(self) -> AdaptiveFilter:
        return self._filter

    @property
    def replay(self) -> ReplayScheduler:
        return self._replay

    @property
    def last_saved_path(self) -> Optional[Path]:
        return self._last_saved_path

    @property
    def pending_commands(self) -> int:
        return len(self._commands)

    def get_snapshot(self) -> tuple[Sample, ...]:
        return self._history.snapshot()

    def get_status(self) -> PipelineStatus:
        source = self._source
        return PipelineStatus(
            connected=bool(source is not None and source.connected),
            recording=self._recording is not None,
            replaying=self._mode is PipelineMode.REPLAY,
            sample_count=len(self._history),
            mode=self._mode,
            recorded_count=len(self._recording) if self._recording is not None else 0,
            replay_progress=self._replay.progress,
            replay_speed=self._replay.speed,
            sample_rate_hz=self._rate.estimated_hz,
            last_error=self._last_error,
        )

    # -------------------------------------------------------- control side
    def submit(self, command: Command) -> None:
        self._commands.append(command)

    def set_alpha(self, alpha: float) -> None:
        self.submit(Command(CommandKind.SET_ALPHA, float(alpha)))

    def set_median_window(self, size: int) -> None:
        self.submit(Command(CommandKind.SET_MEDIAN_WINDOW, int(size)))

    def set_outlier_threshold(self, k: float) -> None:
        self.submit(Command(CommandKind.SET_OUTLIER_THRESHOLD, float(k)))

    def set_distance_range(self, min_cm: float, max_cm: float) -> None:
        self.submit(Command(CommandKind.SET_DISTANCE_RANGE, (float(min_cm), float(max_cm))))

    def reset_filters(self) -> None:
        self.submit(Command(CommandKind.RESET_FILTERS))

    def start_recording(self, destination: Path | str | None = None) -> None:
        self.submit(Command(CommandKind.START_RECORDING, destination))

    def stop_recording(self) -> None:
        self.submit(Command(CommandKind.STOP_RECORDING))

    def load_replay(self, path: Path | str) -> None:
        self.submit(Command(CommandKind.LOAD_REPLAY, path))

    def stop_replay(self) -> None:
        self.submit(Command(CommandKind.STOP_REPLAY))

    def set_replay_speed(self, speed: float) -> None:
        self.submit(Command(CommandKind.SET_REPLAY_SPEED, float(speed)))

    def seek_replay(self, fraction: float) -> None:
        self.submit(Command(CommandKind.SEEK_REPLAY, float(fraction)))

    def clear_history(self) -> None:
        self.submit(Command(CommandKind.CLEAR_HISTORY))

    def set_live_source(self, source: Optional[LineSource]) -> None:
        self.submit(Command(CommandKind.SET_LIVE_SOURCE, source))

    # ------------------------------------------------------------------ tick
    def tick(self) -> TickResult:
        """
        Apply queued commands, then ingest new samples.

        Live mode reads at most one line. Replay mode ingests every sample the
        scheduler released since the previous tick.
        """
        with time_block("pipeline.tick"):
            self._drain_commands()

            if self._mode is PipelineMode.REPLAY:
                candidates = self._next_replay_samples()
            else:
                sample = self._next_live_sample()
                candidates = [sample] if sample is not None else []

            ingested = tuple(self._ingest(s) for s in candidates if s.is_valid)
            return TickResult(samples=ingested, mode=self._mode)

    def _next_live_sample(self) -> Optional[Sample]:
        if self._source is None:
            return None
        line = self._source.read_line()
        if line is None:
            return None
        return parse_line(line, now_ms=self._wall_clock())

    def _next_replay_samples(self) -> List[Sample]:
        self._replay.tick(self._clock_ms())
        samples = self._replay.drain_released()
        if not self._replay.is_playing:
            self._mode = PipelineMode.LIVE
            logger.info("Replay ended, resuming live input")
        return samples

    def _ingest(self, sample: Sample) -> Sample:
        filtered = sample.with_filtered(self._filter.apply(sample.raw_distance, sample.angle))
        self._history.push(filtered)
        if self._recording is not None:
            self._recording.append(filtered)
        self._rate.add_sample_time(filtered.timestamp_ms)
        return filtered

    # -------------------------------------------------------------- commands
    def _drain_commands(self) -> None:
        while self._commands:
            self._apply(self._commands.popleft())

    def _apply(self, command: Command) -> None:
        kind = command.kind
        value = command.value
        if kind is CommandKind.SET_ALPHA:
            self._filter.set_alpha(value)
        elif kind is CommandKind.SET_MEDIAN_WINDOW:
            self._filter.set_window_size(value)
        elif kind is CommandKind.SET_OUTLIER_THRESHOLD:
            self._filter.set_outlier_threshold(value)
        elif kind is CommandKind.SET_DISTANCE_RANGE:
            self._filter.set_distance_range(*value)
        elif kind is CommandKind.RESET_FILTERS:
            self._filter.reset()
        elif kind is CommandKind.START_RECORDING:
            self._begin_recording(value)
        elif kind is CommandKind.STOP_RECORDING:
            self._end_recording()
        elif kind is CommandKind.LOAD_REPLAY:
            self._begin_replay(value)
        elif kind is CommandKind.STOP_REPLAY:
            self._end_replay()
        elif kind is CommandKind.SET_REPLAY_SPEED:
            self._replay.set_speed(value)
        elif kind is CommandKind.SEEK_REPLAY:
            self._replay.seek(value)
        elif kind is CommandKind.CLEAR_HISTORY:
            self._history.clear()
            self._filter.reset()
            self._rate.reset()
        elif kind is CommandKind.SET_LIVE_SOURCE:
            self._source = value
            self._rate.reset()
        else:  # pragma: no cover - exhaustive enum
            logger.warning("Ignoring unknown command %r", command)

    def _begin_recording(self, destination: Path | str | None) -> None:
        if self._mode is PipelineMode.REPLAY:
            logger.warning("Recording is unavailable while a replay is running")
            return
        if self._recording is not None:
            return
        if destination is not None:
            self._recording_path = Path(destination)
        else:
            self._recording_path = session_file("sweep", base=self._recordings_dir)
        self._recording = []
        logger.info("Recording started -> %s", self._recording_path)

    def _end_recording(self) -> None:
        if self._recording is None:
            return
        samples, self._recording = self._recording, None
        path, self._recording_path = self._recording_path, None
        if not samples or path is None:
            logger.info("Recording stopped with no samples; nothing saved")
            return
        if self._store.save(samples, path):
            self._last_saved_path = path
            self._last_error = None
        else:
            self._last_error = self._store.last_error

    def _begin_replay(self, path: Path | str) -> None:
        samples = self._store.load(path)
        if samples is None:
            self._last_error = self._store.last_error
            return
        self._last_error = None
        self._end_recording()
        self._replay.load(samples)
        if self._replay.start(self._clock_ms()):
            self._mode = PipelineMode.REPLAY
            logger.info("Replaying %d samples from %s", len(samples), path)

    def _end_replay(self) -> None:
        self._replay.stop()
        if self._mode is PipelineMode.REPLAY:
            self._mode = PipelineMode.LIVE
            logger.info("Replay stopped, resuming live input")
