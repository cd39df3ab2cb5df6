from __future__ import annotations

import math

import pytest

from sweepscope.analysis.adaptive_filter import AdaptiveFilter


def test_first_reading_passes_through() -> None:
    f = AdaptiveFilter()
    assert f.apply(123.0, 45) == 123.0
    assert f.ema_at(45) == 123.0


def test_constant_input_converges_monotonically() -> None:
    f = AdaptiveFilter()
    outputs = [f.apply(50.0, 30)]
    for _ in range(100):
        outputs.append(f.apply(100.0, 30))

    for previous, current in zip(outputs, outputs[1:]):
        assert current >= previous - 1e-9
        assert current <= 100.0 + 1e-9
    assert abs(outputs[-1] - 100.0) < 1e-6


def test_ema_uses_midpoint_of_even_window() -> None:
    f = AdaptiveFilter(alpha=0.3, window_size=4)
    f.apply(100.0, 10)
    assert f.apply(104.0, 10) == pytest.approx(101.2)
    assert f.apply(102.0, 10) == pytest.approx(101.44)
    # sorted window 100, 102, 104, 106 -> median 103
    assert f.apply(106.0, 10) == pytest.approx(0.3 * 103.0 + 0.7 * 101.44)


def test_window_never_exceeds_configured_size() -> None:
    f = AdaptiveFilter(window_size=5, outlier_k=5.0)
    for value in range(100, 120):
        f.apply(float(value), 60)
        assert len(f.window_at(60)) <= 5
    assert f.window_at(60) == (115.0, 116.0, 117.0, 118.0, 119.0)


def test_shrinking_window_keeps_newest_values() -> None:
    f = AdaptiveFilter(window_size=7, outlier_k=5.0)
    for value in range(100, 107):
        f.apply(float(value), 5)
    f.set_window_size(3)
    assert f.window_size == 3
    assert f.window_at(5) == (104.0, 105.0, 106.0)


def test_statistical_outlier_returns_previous_average() -> None:
    f = AdaptiveFilter()
    for value in (100.0, 101.0, 99.0, 100.0, 102.0):
        f.apply(value, 90)
    ema_before = f.ema_at(90)
    window_before = f.window_at(90)

    assert f.apply(150.0, 90) == ema_before
    assert f.ema_at(90) == ema_before
    assert f.window_at(90) == window_before


def test_zero_variance_window_rejects_any_change_until_reset() -> None:
    f = AdaptiveFilter()
    for _ in range(5):
        f.apply(100.0, 60)
    assert f.window_at(60) == (100.0,) * 5
    ema_before = f.ema_at(60)
    assert ema_before == pytest.approx(100.0)

    assert f.apply(101.0, 60) == ema_before
    assert f.apply(99.0, 60) == ema_before
    assert f.window_at(60) == (100.0,) * 5
    assert f.apply(100.0, 60) == pytest.approx(100.0)

    f.reset()
    assert f.apply(101.0, 60) == 101.0
    assert f.window_at(60) == (101.0,)


def test_out_of_range_reading_is_rejected() -> None:
    f = AdaptiveFilter(min_distance=10.0, max_distance=400.0)
    assert f.apply(5.0, 20) == 0.0
    assert f.ema_at(20) is None

    f.apply(100.0, 20)
    assert f.apply(450.0, 20) == 100.0
    assert f.apply(math.nan, 20) == 100.0
    assert f.window_at(20) == (100.0,)


def test_buckets_are_independent_per_angle() -> None:
    f = AdaptiveFilter()
    f.apply(50.0, 10)
    f.apply(300.0, 11)
    assert f.ema_at(10) == 50.0
    assert f.ema_at(11) == 300.0


def test_angle_is_rounded_and_clamped() -> None:
    f = AdaptiveFilter()
    f.apply(100.0, 250)
    f.apply(60.0, -5)
    f.apply(70.0, 44.6)
    assert f.ema_at(180) == 100.0
    assert f.ema_at(0) == 60.0
    assert f.ema_at(45) == 70.0
    assert f.active_angles() == [0, 45, 180]


def test_setters_clamp_silently() -> None:
    f = AdaptiveFilter()
    f.set_alpha(5.0)
    assert f.alpha == 0.9
    f.set_alpha(0.0)
    assert f.alpha == 0.1
    f.set_window_size(40)
    assert f.window_size == 15
    f.set_window_size(1)
    assert f.window_size == 3
    f.set_outlier_threshold(0.2)
    assert f.outlier_k == 1.0
    f.set_outlier_threshold(9.0)
    assert f.outlier_k == 5.0
    f.set_distance_range(50.0, 20.0)
    assert f.distance_range == (50.0, 50.0)


def test_reset_clears_every_bucket() -> None:
    f = AdaptiveFilter()
    for angle in range(0, 181, 10):
        f.apply(120.0, angle)
    f.reset()
    assert f.active_angles() == []
    assert f.ema_at(90) is None
    assert f.window_at(90) == ()
    assert f.apply(80.0, 90) == 80.0
