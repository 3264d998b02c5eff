"""Tests for the hourly API key rate limiter."""

from datetime import datetime, timedelta, timezone

from hr_compliance.services.rate_limiter import HourlyRateLimiter


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class TestHourlyRateLimiter:
    """Test fixed-window counting."""

    def test_allows_up_to_limit(self):
        limiter = HourlyRateLimiter(clock=FakeClock())

        assert all(limiter.check(1, 3) for _ in range(3))
        assert limiter.check(1, 3) is False

    def test_keys_are_counted_separately(self):
        limiter = HourlyRateLimiter(clock=FakeClock())

        assert limiter.check(1, 1) is True
        assert limiter.check(1, 1) is False
        assert limiter.check(2, 1) is True

    def test_window_resets_after_an_hour(self):
        clock = FakeClock()
        limiter = HourlyRateLimiter(clock=clock)
        limiter.check(1, 1)
        assert limiter.check(1, 1) is False

        clock.advance(minutes=59)
        assert limiter.check(1, 1) is False

        clock.advance(minutes=1)
        assert limiter.check(1, 1) is True

    def test_remaining_and_retry_after(self):
        clock = FakeClock()
        limiter = HourlyRateLimiter(clock=clock)

        assert limiter.remaining(1, 10) == 10
        assert limiter.retry_after(1) == 0

        limiter.check(1, 10)
        limiter.check(1, 10)
        clock.advance(minutes=30)

        assert limiter.remaining(1, 10) == 8
        assert 1799 <= limiter.retry_after(1) <= 1801

    def test_purge_expired_drops_finished_windows(self):
        clock = FakeClock()
        limiter = HourlyRateLimiter(clock=clock)
        limiter.check(1, 10)
        clock.advance(minutes=30)
        limiter.check(2, 10)

        clock.advance(minutes=31)
        assert limiter.purge_expired() == 1
        assert len(limiter) == 1

        limiter.reset()
        assert len(limiter) == 0
