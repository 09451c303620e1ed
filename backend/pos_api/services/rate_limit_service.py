"""
Request Rate Limiting Service

WHY: Throttle abusive clients before they reach authentication or the
database. Counts requests per client IP in fixed windows.

Configuration (see config.py):
- RATE_LIMIT_ENABLED
- RATE_LIMIT_WINDOW: window length in minutes
- RATE_LIMIT_MAX_REQUESTS: allowed requests per IP per window

The counter lives in process memory, so each worker process enforces its
own budget.
"""

import threading
import time
from dataclasses import dataclass


@dataclass
class _Window:
    started_at: float
    count: int


class FixedWindowRateLimiter:
    def __init__(self, max_requests: int, window_seconds: float, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> tuple[bool, int]:
        """
        Record one request for key.

        Returns (allowed, retry_after_seconds).
        """
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.started_at >= self.window_seconds:
                window = _Window(started_at=now, count=0)
                self._windows[key] = window
                self._evict_expired(now)

            window.count += 1
            if window.count > self.max_requests:
                retry_after = int(window.started_at + self.window_seconds - now) + 1
                return False, retry_after

        return True, 0

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _evict_expired(self, now: float) -> None:
        stale = [k for k, w in self._windows.items() if now - w.started_at >= self.window_seconds]
        for k in stale:
            del self._windows[k]


def init_rate_limiter(app) -> FixedWindowRateLimiter:
    limiter = FixedWindowRateLimiter(
        max_requests=app.config["RATE_LIMIT_MAX_REQUESTS"],
        window_seconds=app.config["RATE_LIMIT_WINDOW"] * 60,
    )
    app.extensions["rate_limiter"] = limiter
    return limiter
