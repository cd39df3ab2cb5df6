"""Synthetic sweep sensor used for demos, benchmarks, and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from ..core.models import MAX_ANGLE, MIN_ANGLE
from .sweep_line import wall_clock_ms


def default_scene(angle: int) -> float:
    """Back wall at 200 cm with one box between 60° and 80°."""
    if 60 <= angle <= 80:
        return 80.0
    return 200.0


@dataclass
class SimulatedSweepSource:
    """
    Emit ``angle,distance,timestamp`` lines as a servo sweeping back and forth.

    The sweep position and direction live on the instance so several
    simulators can run side by side. Each call to :meth:`read_line` produces
    exactly one line.
    """

    step_deg: int = 2
    noise_cm: float = 1.5
    spike_probability: float = 0.02
    dropout_probability: float = 0.01
    scene: Callable[[int], float] = default_scene
    seed: Optional[int] = None
    clock_ms: Callable[[], int] = wall_clock_ms

    angle: int = field(init=False, default=MIN_ANGLE)
    direction: int = field(init=False, default=1)
    _rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.step_deg <= 0:
            raise ValueError("step_deg must be positive")
        self._rng = np.random.default_rng(self.seed)

    @property
    def connected(self) -> bool:
        return True

    def read_line(self) -> Optional[str]:
        angle = self.angle
        distance = self._measure(angle)
        self._advance()
        return f"{angle},{distance:.1f},{int(self.clock_ms())}"

    def _measure(self, angle: int) -> float:
        roll = self._rng.random()
        if roll < self.dropout_probability:
            # Firmware reports a lost echo as 0.
            return 0.0
        base = float(self.scene(angle))
        if roll < self.dropout_probability + self.spike_probability:
            return base * float(self._rng.uniform(0.3, 1.8))
        return max(0.1, base + float(self._rng.normal(0.0, self.noise_cm)))

    def _advance(self) -> None:
        nxt = self.angle + self.direction * self.step_deg
        if nxt > MAX_ANGLE or nxt < MIN_ANGLE:
            self.direction = -self.direction
            nxt = self.angle + self.direction * self.step_deg
        self.angle = max(MIN_ANGLE, min(MAX_ANGLE, nxt))
