"""Per-key hourly request quota held in process memory."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from hr_compliance.models.base import utcnow

RATE_LIMIT_WINDOW = timedelta(hours=1)


@dataclass
class RateWindow:
    """Request count inside one window."""

    count: int
    reset_time: datetime


class HourlyRateLimiter:
    """Fixed one-hour window counter keyed by API key id.

    A window opens on the first request for a key (or the first request
    after the previous window ended) and lasts one hour. State lives in this
    process only and is lost on restart.
    """

    def __init__(
        self,
        window: timedelta = RATE_LIMIT_WINDOW,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.window = window
        self.clock = clock
        self._windows: dict[int, RateWindow] = {}

    def check(self, key_id: int, limit: int) -> bool:
        """Count a request against ``key_id``; False if the quota is spent."""
        now = self.clock()
        current = self._windows.get(key_id)

        if current is None or current.reset_time <= now:
            self._windows[key_id] = RateWindow(count=1, reset_time=now + self.window)
            return True

        if current.count >= limit:
            return False

        current.count += 1
        return True

    def retry_after(self, key_id: int) -> int:
        """Seconds until the key's current window resets."""
        current = self._windows.get(key_id)
        if current is None:
            return 0
        remaining = (current.reset_time - self.clock()).total_seconds()
        return max(0, int(remaining) + 1)

    def remaining(self, key_id: int, limit: int) -> int:
        """Requests left in the key's current window."""
        current = self._windows.get(key_id)
        if current is None or current.reset_time <= self.clock():
            return limit
        return max(0, limit - current.count)

    def purge_expired(self) -> int:
        """Drop windows that have ended. Returns how many were removed."""
        now = self.clock()
        expired = [key_id for key_id, w in self._windows.items() if w.reset_time <= now]
        for key_id in expired:
            del self._windows[key_id]
        return len(expired)

    def reset(self) -> None:
        """Forget every window."""
        self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


# Process-wide limiter shared by the API-key auth dependency
rate_limiter = HourlyRateLimiter()
