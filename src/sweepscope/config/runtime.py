"""Runtime configuration for the sweep pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from ..analysis import adaptive_filter as af
from ..core import replay

# Nested YAML sections that are flattened into SweepConfig fields.
_SECTIONS = ("pipeline", "filter", "history", "replay")


@dataclass(slots=True)
class SweepConfig:
    """
    Tuning knobs for filtering, history, replay and tick cadence.

    The defaults match a hobby servo + ultrasonic ranger sweeping at ~30 Hz.
    """

    alpha: float = af.DEFAULT_ALPHA
    median_window: int = af.DEFAULT_WINDOW_SIZE
    outlier_k: float = af.DEFAULT_OUTLIER_K
    min_distance_cm: float = af.DEFAULT_MIN_DISTANCE
    max_distance_cm: float = af.DEFAULT_MAX_DISTANCE

    history_high_water: int = 1000
    history_low_water: int = 800

    replay_base_interval_ms: float = replay.DEFAULT_BASE_INTERVAL_MS
    replay_speed: float = replay.DEFAULT_SPEED

    tick_hz: float = 60.0

    def sanitized(self) -> SweepConfig:
        """Return a copy with every value clamped into its valid range."""
        min_cm = max(0.0, float(self.min_distance_cm))
        high = max(2, int(self.history_high_water))
        return SweepConfig(
            alpha=min(af.MAX_ALPHA, max(af.MIN_ALPHA, float(self.alpha))),
            median_window=min(af.MAX_WINDOW_SIZE, max(af.MIN_WINDOW_SIZE, int(self.median_window))),
            outlier_k=min(af.MAX_OUTLIER_K, max(af.MIN_OUTLIER_K, float(self.outlier_k))),
            min_distance_cm=min_cm,
            max_distance_cm=max(min_cm, float(self.max_distance_cm)),
            history_high_water=high,
            history_low_water=min(high, max(1, int(self.history_low_water))),
            replay_base_interval_ms=max(1.0, float(self.replay_base_interval_ms)),
            replay_speed=min(replay.MAX_SPEED, max(replay.MIN_SPEED, float(self.replay_speed))),
            tick_hz=_sane_tick_hz(self.tick_hz),
        )

    def tick_interval_ms(self) -> int:
        return max(1, int(round(1000.0 / self.tick_hz)))


def _sane_tick_hz(value: Any) -> float:
    try:
        hz = float(value)
    except (TypeError, ValueError):
        return 60.0
    if not math.isfinite(hz) or hz < 30.0:
        return 30.0
    return min(hz, 500.0)


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`SweepConfig`."""
    return {f.name for f in fields(SweepConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten known nesting patterns (``filter:``, ``history:`` ...)."""
    merged: MutableMapping[str, Any] = {}
    for key, value in data.items():
        if key in _SECTIONS and isinstance(value, Mapping):
            merged.update(value)
        else:
            merged[key] = value
    return merged


def config_from_mapping(data: Mapping[str, Any] | None) -> SweepConfig:
    """Build :class:`SweepConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return SweepConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return SweepConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> SweepConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`SweepConfig`.
    """
    if path is None:
        return SweepConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return SweepConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


def save_config(path: str | Path, cfg: SweepConfig) -> None:
    """Persist ``cfg`` as sectioned YAML that :func:`load_config` reads back."""
    cfg_path = Path(path)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "filter": {
            "alpha": cfg.alpha,
            "median_window": cfg.median_window,
            "outlier_k": cfg.outlier_k,
            "min_distance_cm": cfg.min_distance_cm,
            "max_distance_cm": cfg.max_distance_cm,
        },
        "history": {
            "history_high_water": cfg.history_high_water,
            "history_low_water": cfg.history_low_water,
        },
        "replay": {
            "replay_base_interval_ms": cfg.replay_base_interval_ms,
            "replay_speed": cfg.replay_speed,
        },
        "tick_hz": cfg.tick_hz,
    }
    with cfg_path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False)


__all__ = ["SweepConfig", "config_from_mapping", "load_config", "save_config"]
