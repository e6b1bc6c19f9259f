"""Utilities for applying delay and rate limiting to Brevo API calls."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional


@dataclass
class DelayPolicy:
    """Fixed pause applied between consecutive requests (e.g. pagination)."""

    delay_seconds: float = 0.0

    def wait(self) -> None:
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)


class RateLimiter:
    """Token bucket style rate limiter enforcing minimum interval between calls."""

    def __init__(self, calls_per_minute: Optional[float]) -> None:
        self._interval = 60.0 / float(calls_per_minute) if calls_per_minute else 0.0
        self._lock = threading.Lock()
        self._next_available = 0.0

    @property
    def interval(self) -> float:
        return self._interval

    def acquire(self) -> None:
        if self._interval <= 0:
            return
        with self._lock:
            now = time.monotonic()
            if now < self._next_available:
                time.sleep(self._next_available - now)
                now = time.monotonic()
            self._next_available = now + self._interval


class RateLimitedExecutor:
    """Wrapper that enforces rate limiting when invoking an upsert executor."""

    def __init__(self, executor, *, rate_limiter: Optional[RateLimiter] = None) -> None:
        self._executor = executor
        self._rate_limiter = rate_limiter or RateLimiter(None)

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    def upsert(self, *args, **kwargs):
        self._rate_limiter.acquire()
        return self._executor.upsert(*args, **kwargs)

    def __getattr__(self, item):  # pragma: no cover - simple delegation
        return getattr(self._executor, item)
