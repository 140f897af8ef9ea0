"""In-process fixed-window rate limiting."""

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from food_search.domain.rate_limit import (
    RateLimitConfig,
    RateLimitCounter,
    RateLimitResult,
)

RATE_LIMITS: dict[str, RateLimitConfig] = {
    "search": RateLimitConfig(window_seconds=60, max_requests=60),
}

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class RateLimiter:
    """Counts requests per identity in fixed windows.

    Counters live in a private map guarded by a lock, so two admissions for the
    same identity never read the same count. Expired counters are dropped by
    ``sweep``.
    """

    clock: Callable[[], datetime] = _utc_now
    _counters: dict[str, RateLimitCounter] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def admit(self, identity: str, config: RateLimitConfig) -> RateLimitResult:
        """Record a request for the identity and report whether it is allowed."""
        now = self.clock()
        with self._lock:
            counter = self._counters.get(identity)
            if counter is None or counter.reset_at < now:
                reset_at = now + timedelta(seconds=config.window_seconds)
                self._counters[identity] = RateLimitCounter(count=1, reset_at=reset_at)
                return RateLimitResult(
                    allowed=True,
                    remaining=config.max_requests - 1,
                    reset_at=reset_at,
                )

            if counter.count >= config.max_requests:
                return RateLimitResult(
                    allowed=False, remaining=0, reset_at=counter.reset_at
                )

            counter.count += 1
            return RateLimitResult(
                allowed=True,
                remaining=config.max_requests - counter.count,
                reset_at=counter.reset_at,
            )

    def sweep(self) -> int:
        """Drop counters whose window has expired and return how many."""
        now = self.clock()
        with self._lock:
            expired = [
                key for key, counter in self._counters.items() if counter.reset_at < now
            ]
            for key in expired:
                del self._counters[key]
        return len(expired)

    def tracked_identities(self) -> int:
        """Return the number of identities currently holding a counter."""
        with self._lock:
            return len(self._counters)

    async def run_sweeper(self, interval_seconds: float = 300) -> None:
        """Sweep expired counters every interval until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                _logger.info("Rate limiter sweep removed %s counters", removed)
