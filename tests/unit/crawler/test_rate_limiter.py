"""
Tests for the rolling window limiter and per-domain throttle.
"""

import pytest

from ogie.crawler.rate_limiter import DomainThrottle, RollingWindowLimiter


class ManualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.mark.unit
class TestRollingWindowLimiter:
    def test_allows_up_to_max_events_per_window(self):
        clock = ManualClock()
        limiter = RollingWindowLimiter(3, window_seconds=60, clock=clock)
        for _ in range(3):
            assert limiter.delay() == 0.0
            limiter.record()
        assert limiter.delay() == pytest.approx(60.0)

    def test_window_rolls(self):
        clock = ManualClock()
        limiter = RollingWindowLimiter(2, window_seconds=60, clock=clock)
        limiter.record()
        clock.now = 30.0
        limiter.record()
        clock.now = 45.0
        assert limiter.delay() == pytest.approx(15.0)
        clock.now = 60.0
        assert limiter.delay() == 0.0
        limiter.record()
        assert limiter.delay() == pytest.approx(30.0)

    def test_explicit_timestamps(self):
        limiter = RollingWindowLimiter(1, window_seconds=10, clock=ManualClock())
        limiter.record(100.0)
        assert limiter.delay(104.0) == pytest.approx(6.0)
        assert limiter.delay(110.0) == 0.0

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            RollingWindowLimiter(0)


@pytest.mark.unit
class TestDomainThrottle:
    def test_spacing_per_domain(self):
        clock = ManualClock()
        throttle = DomainThrottle(0.5, clock=clock)
        assert throttle.delay("a.com") == 0.0
        throttle.record_start("a.com")
        clock.now = 0.2
        assert throttle.delay("a.com") == pytest.approx(0.3)
        assert throttle.delay("b.com") == 0.0
        clock.now = 0.6
        assert throttle.delay("a.com") == 0.0

    def test_zero_delay_never_waits(self):
        throttle = DomainThrottle(0.0, clock=ManualClock())
        throttle.record_start("a.com")
        assert throttle.delay("a.com") == 0.0
