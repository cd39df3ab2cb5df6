from __future__ import annotations

import pytest

QtCore = pytest.importorskip("PySide6.QtCore")

from sweepscope.config import SweepConfig  # noqa: E402
from sweepscope.core.live_source import IterableLineSource  # noqa: E402
from sweepscope.core.pipeline import PipelineController  # noqa: E402
from sweepscope.core.models import Sample  # noqa: E402
from sweepscope.dataio.session_store import write_session  # noqa: E402
from sweepscope.gui.ticker import PipelineTicker  # noqa: E402


@pytest.fixture(scope="module")
def qt_app():
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app


def test_ticker_drives_controller_and_emits(qt_app) -> None:
    controller = PipelineController(
        IterableLineSource(["10,100,1", "12,100,2", "14,100,3"]),
        config=SweepConfig(tick_hz=50.0),
    )
    ticker = PipelineTicker(controller, snapshot_every=2)
    assert ticker.interval_ms() == 20

    samples, snapshots, statuses = [], [], []
    ticker.sample_ingested.connect(samples.append)
    ticker.snapshot_ready.connect(snapshots.append)
    ticker.status_changed.connect(statuses.append)

    for _ in range(4):
        ticker._on_tick()

    assert ticker.tick_count == 4
    assert [s.angle for s in samples] == [10, 12, 14]
    assert len(snapshots) == 2
    assert len(snapshots[-1]) == 3
    assert statuses
    assert statuses[-1].sample_count == 3


def test_ticker_start_stop(qt_app) -> None:
    ticker = PipelineTicker(PipelineController(None), interval_ms=5)
    assert not ticker.is_running()
    ticker.start()
    assert ticker.is_running()
    ticker.stop()
    ticker.stop()
    assert not ticker.is_running()


def test_ticker_emits_each_replayed_sample(qt_app, tmp_path) -> None:
    session = tmp_path / "session.txt"
    write_session(session, [Sample.from_raw(i, 100.0, i) for i in range(8)])
    clock = {"now": 0.0}
    controller = PipelineController(None, clock_ms=lambda: clock["now"])
    controller.set_replay_speed(10.0)
    controller.load_replay(session)

    ticker = PipelineTicker(controller, interval_ms=16)
    samples = []
    ticker.sample_ingested.connect(samples.append)

    ticker._on_tick()
    clock["now"] = 16.0
    ticker._on_tick()

    assert [s.angle for s in samples] == [0, 1, 2, 3, 4]
