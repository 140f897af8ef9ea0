"""Response cache for FoodData Central searches."""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for search responses."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache.

    An expired entry is dropped when it is read, and every write drops all
    expired entries, so the map holds at most the entries written within
    one TTL.
    """

    clock: Callable[[], datetime] = lambda: datetime.now(tz=UTC)
    _entries: dict[str, _CacheEntry] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self.clock() >= entry.expires_at:
                self._entries.pop(key, None)
                return None
            return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL."""
        now = self.clock()
        with self._lock:
            expired = [
                entry_key
                for entry_key, entry in self._entries.items()
                if now >= entry.expires_at
            ]
            for entry_key in expired:
                del self._entries[entry_key]
            self._entries[key] = _CacheEntry(
                value=value, expires_at=now + timedelta(seconds=ttl_seconds)
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def search_cache_key(
    query: str, page_size: int, page_number: int, data_type: str | None
) -> str:
    """Build the cache key for one FDC search request."""
    return f"fdc:search:{query.lower()}:{page_size}:{page_number}:{data_type or '*'}"
