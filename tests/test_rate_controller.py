import pytest

from sweepscope.analysis.rate import RateController


def test_rate_controller_estimates_rate_for_regular_samples() -> None:
    rc = RateController(window_size=100)
    t = 0.0
    for _ in range(100):
        rc.add_sample_time(t)
        t += 33.3  # ~30 Hz sweep
    est = rc.estimated_hz
    assert 29.0 < est < 31.0


def test_rate_controller_falls_back_for_non_monotonic_window() -> None:
    rc = RateController(window_size=4, default_hz=5.0)
    rc.feed_times([100.0, 50.0, 20.0])
    assert rc.estimated_hz == 5.0
    rc.reset()
    assert rc.buffer_size == 0
    assert rc.buffer_span_ms == 0.0


def test_rate_controller_requires_window() -> None:
    with pytest.raises(ValueError):
        RateController(window_size=1)
