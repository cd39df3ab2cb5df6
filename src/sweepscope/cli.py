"""Headless command line for running the sweep pipeline without a GUI.

Three sources are supported:

- ``sweepscope simulate`` feeds the pipeline from a synthetic sweeping sensor,
- ``sweepscope stdin`` reads ``angle,distance[,timestamp]`` lines from stdin,
- ``sweepscope replay FILE`` plays back a recorded session.

The loop ticks at ``tick_hz`` from the config file and logs a status line
every ``--status-interval`` seconds.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .config import AppPaths, load_config
from .core.live_source import start_reader
from .core.pipeline import PipelineController
from .sensors.simulated import SimulatedSweepSource
from .tools.debug import debug_enabled

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sweepscope", description="SweepScope headless pipeline runner")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML config file (default: $SWEEPSCOPE_CONFIG or ./sweepscope.yaml)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Seconds to run before exiting; 0 runs until the source ends (default: 10)",
    )
    parser.add_argument(
        "--status-interval",
        type=float,
        default=1.0,
        help="Seconds between status log lines (default: 1.0)",
    )
    parser.add_argument(
        "--record",
        type=str,
        default=None,
        help="Record the session to this file (simulate/stdin only)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Run against the synthetic sweep sensor")
    sim.add_argument("--seed", type=int, default=None, help="Random seed for the simulator")
    sim.add_argument("--step", type=int, default=2, help="Servo step in degrees (default: 2)")

    sub.add_parser("stdin", help="Read sensor lines from standard input")

    rep = sub.add_parser("replay", help="Play back a recorded session file")
    rep.add_argument("path", type=str, help="Session file to replay")
    rep.add_argument("--speed", type=float, default=None, help="Replay speed factor (0.1-10)")
    return parser


def _log_status(controller: PipelineController) -> None:
    status = controller.get_status()
    logger.info(
        "mode=%s samples=%d rate=%.1f Hz recording=%s (%d) replay=%.0f%%",
        status.mode.value,
        status.sample_count,
        status.sample_rate_hz,
        status.recording,
        status.recorded_count,
        status.replay_progress * 100.0,
    )


def run(controller: PipelineController, *, duration_s: float, status_interval_s: float, stop_when_idle: bool) -> None:
    """Tick ``controller`` at its configured cadence until time or input runs out."""
    interval_s = controller.config.tick_interval_ms() / 1000.0
    started = time.monotonic()
    next_status = started + status_interval_s
    next_tick = started
    while True:
        controller.tick()
        now = time.monotonic()
        if duration_s > 0 and now - started >= duration_s:
            break
        if stop_when_idle:
            status = controller.get_status()
            if not (status.replaying or status.connected):
                break
        if now >= next_status:
            _log_status(controller)
            next_status = now + status_interval_s
        next_tick += interval_s
        delay = next_tick - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        else:
            next_tick = time.monotonic()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose or debug_enabled() else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    paths = AppPaths()
    cfg = load_config(args.config if args.config is not None else paths.config_file)
    stop_when_idle = False

    if args.command == "simulate":
        source = SimulatedSweepSource(step_deg=max(1, args.step), seed=args.seed)
        controller = PipelineController.from_config(cfg, source, recordings_dir=paths.recordings)
    elif args.command == "stdin":
        handle = start_reader(sys.stdin, thread_name="SweepScopeLineReader(stdin)")
        controller = PipelineController.from_config(cfg, handle.source, recordings_dir=paths.recordings)
        stop_when_idle = True
    else:
        controller = PipelineController.from_config(cfg, None, recordings_dir=paths.recordings)
        if args.speed is not None:
            controller.set_replay_speed(args.speed)
        controller.load_replay(Path(args.path).expanduser())
        stop_when_idle = True

    if args.record and args.command != "replay":
        controller.start_recording(Path(args.record).expanduser())

    try:
        run(
            controller,
            duration_s=max(0.0, args.duration),
            status_interval_s=max(0.1, args.status_interval),
            stop_when_idle=stop_when_idle,
        )
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        controller.stop_recording()
        controller.tick()
        _log_status(controller)

    status = controller.get_status()
    if status.last_error:
        logger.error("%s", status.last_error)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
