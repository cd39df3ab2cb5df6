"""Qt timer that drives :class:`PipelineController` at a fixed cadence."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Qt, Signal, Slot

from ..core.models import PipelineStatus
from ..core.pipeline import PipelineController

logger = logging.getLogger(__name__)


class PipelineTicker(QObject):
    """
    Non-visual driver that calls ``tick()`` from the Qt event loop.

    Widgets connect to the signals and only ever read the immutable values
    they carry; commands go through the controller's ``set_*``/``start_*``
    methods and take effect on the following tick.
    """

    sample_ingested = Signal(object)
    snapshot_ready = Signal(object)
    status_changed = Signal(object)

    def __init__(
        self,
        controller: PipelineController,
        parent: Optional[QObject] = None,
        *,
        interval_ms: Optional[int] = None,
        snapshot_every: int = 2,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._snapshot_every = max(1, int(snapshot_every))
        self._tick_count = 0
        self._last_status: Optional[PipelineStatus] = None

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.PreciseTimer)
        self._timer.setInterval(interval_ms or controller.config.tick_interval_ms())
        self._timer.timeout.connect(self._on_tick)

    @property
    def controller(self) -> PipelineController:
        return self._controller

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def interval_ms(self) -> int:
        return self._timer.interval()

    def is_running(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        if self._timer.isActive():
            return
        logger.info("Pipeline ticker started (%d ms)", self._timer.interval())
        self._timer.start()

    def stop(self) -> None:
        if not self._timer.isActive():
            return
        self._timer.stop()
        logger.info("Pipeline ticker stopped after %d ticks", self._tick_count)

    @Slot()
    def _on_tick(self) -> None:
        result = self._controller.tick()
        self._tick_count += 1

        for sample in result.samples:
            self.sample_ingested.emit(sample)
        if self._tick_count % self._snapshot_every == 0:
            self.snapshot_ready.emit(self._controller.get_snapshot())

        status = self._controller.get_status()
        if status != self._last_status:
            self._last_status = status
            self.status_changed.emit(status)
