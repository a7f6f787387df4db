from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional, Tuple

# Google Chat accepts 60 writes per minute per space; leave headroom for others
DEFAULT_WEBHOOK_RATE_LIMIT = 50
DEFAULT_WEBHOOK_RATE_PERIOD = 60.0


class RateLimiter:
    """
    Fixed-capacity permit pool refilled once per window.

    At most ``limit`` permits are handed out between two resets; the pool is
    refilled to exactly ``limit`` as soon as ``period_seconds`` have elapsed
    since the previous reset. Safe to share between threads.
    """

    def __init__(
        self,
        limit: int,
        period_seconds: float = DEFAULT_WEBHOOK_RATE_PERIOD,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        if period_seconds <= 0:
            raise ValueError(f"period_seconds must be positive, got {period_seconds}")

        self.limit = limit
        self.period_seconds = period_seconds
        self._clock = clock
        self._cond = threading.Condition(threading.Lock())
        self._permits = limit
        self._last_reset = clock()

    def _refill_if_due(self, now: float) -> None:
        # caller holds the lock
        if now - self._last_reset >= self.period_seconds:
            self._permits = self.limit
            self._last_reset = now
            self._cond.notify_all()

    def try_acquire(self) -> bool:
        """Take a permit if one is available right now."""
        with self._cond:
            self._refill_if_due(self._clock())
            if self._permits > 0:
                self._permits -= 1
                return True
            return False

    def acquire(self, timeout: Optional[float] = None) -> bool:
        """Take a permit, blocking until the window resets if the pool is empty.

        Returns False only when ``timeout`` expires first.
        """
        deadline = None if timeout is None else self._clock() + timeout
        with self._cond:
            while True:
                now = self._clock()
                self._refill_if_due(now)
                if self._permits > 0:
                    self._permits -= 1
                    return True

                wait_for = self.period_seconds - (now - self._last_reset)
                if deadline is not None:
                    remaining = deadline - now
                    if remaining <= 0:
                        return False
                    wait_for = min(wait_for, remaining)
                self._cond.wait(timeout=max(wait_for, 0.0))

    def available(self) -> int:
        with self._cond:
            self._refill_if_due(self._clock())
            return self._permits

    def reset(self) -> None:
        """Refill the pool immediately and start a new window."""
        with self._cond:
            self._permits = self.limit
            self._last_reset = self._clock()
            self._cond.notify_all()


_registry: Dict[Tuple[int, float], RateLimiter] = {}
_registry_lock = threading.Lock()


def get_webhook_rate_limiter(
    limit: int = DEFAULT_WEBHOOK_RATE_LIMIT,
    period_seconds: float = DEFAULT_WEBHOOK_RATE_PERIOD,
) -> RateLimiter:
    """Return the process-wide limiter for the given ceiling."""
    key = (limit, float(period_seconds))
    with _registry_lock:
        limiter = _registry.get(key)
        if limiter is None:
            limiter = RateLimiter(limit, period_seconds)
            _registry[key] = limiter
        return limiter
