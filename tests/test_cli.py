from __future__ import annotations

from pathlib import Path

from sweepscope import cli
from sweepscope.cli import main, run
from sweepscope.core.live_source import IterableLineSource
from sweepscope.core.models import Sample
from sweepscope.core.pipeline import PipelineController
from sweepscope.dataio.session_store import read_session, write_session


class _FakeTime:
    def __init__(self) -> None:
        self.now = 100.0
        self.events: list[str] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.events.append("sleep")
        self.now += seconds


def test_simulate_records_session(tmp_path: Path) -> None:
    target = tmp_path / "sim.txt"
    code = main(
        [
            "--config",
            str(tmp_path / "none.yaml"),
            "--duration",
            "0.3",
            "--record",
            str(target),
            "simulate",
            "--seed",
            "4",
        ]
    )
    assert code == 0
    assert target.exists()
    assert len(read_session(target)) > 0


def test_replay_runs_to_completion(tmp_path: Path) -> None:
    session = tmp_path / "session.txt"
    write_session(session, [Sample.from_raw(i, 100.0, i) for i in range(5)])

    code = main(
        [
            "--config",
            str(tmp_path / "none.yaml"),
            "--duration",
            "5",
            "replay",
            str(session),
            "--speed",
            "10",
        ]
    )
    assert code == 0


def test_replay_of_missing_file_fails(tmp_path: Path) -> None:
    code = main(["--config", str(tmp_path / "none.yaml"), "replay", str(tmp_path / "missing.txt")])
    assert code == 1


def test_run_paces_every_tick_and_stops_when_source_ends(monkeypatch) -> None:
    fake = _FakeTime()
    monkeypatch.setattr(cli.time, "monotonic", fake.monotonic)
    monkeypatch.setattr(cli.time, "sleep", fake.sleep)

    controller = PipelineController(IterableLineSource(["10,100,1", "12,100,2", "14,100,3"]))
    real_tick = controller.tick

    def recording_tick():
        fake.events.append("tick")
        return real_tick()

    monkeypatch.setattr(controller, "tick", recording_tick)

    run(controller, duration_s=0.0, status_interval_s=60.0, stop_when_idle=True)

    assert fake.events == ["tick", "sleep", "tick", "sleep", "tick", "sleep", "tick"]
    assert [s.angle for s in controller.get_snapshot()] == [10, 12, 14]


def test_run_stops_at_duration(monkeypatch) -> None:
    fake = _FakeTime()
    monkeypatch.setattr(cli.time, "monotonic", fake.monotonic)
    monkeypatch.setattr(cli.time, "sleep", fake.sleep)

    lines = [f"{i % 181},100,{i}" for i in range(1000)]
    controller = PipelineController(IterableLineSource(lines))
    run(controller, duration_s=0.5, status_interval_s=60.0, stop_when_idle=False)

    assert 29 <= len(controller.get_snapshot()) <= 31
