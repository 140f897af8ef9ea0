"""Rate limiting domain models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RateLimitConfig:
    """Fixed-window limit: at most max_requests per window_seconds."""

    window_seconds: int
    max_requests: int


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single admission check."""

    allowed: bool
    remaining: int
    reset_at: datetime


@dataclass
class RateLimitCounter:
    """Requests counted for one identity in the current window."""

    count: int
    reset_at: datetime
