"""Advisory key-value cache for recommendation results."""

import threading
import time
from collections.abc import Callable
from typing import Protocol

import structlog


logger = structlog.get_logger()

DEFAULT_TTL_SECONDS = 300


class RecommendationCache(Protocol):
    """Protocol for a TTL key-value cache.

    Callers must stay correct when every lookup misses.
    """

    def get(self, key: str) -> object | None:
        """Return the cached value, or None if absent or expired."""
        ...

    def put(self, key: str, value: object, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        """Store a value that expires after ttl_seconds."""
        ...

    def invalidate(self, key: str) -> None:
        """Drop one key."""
        ...

    def clear(self) -> None:
        """Drop every key."""
        ...


class InMemoryRecommendationCache:
    """Process-local TTL cache guarded by a lock.

    Expired entries are dropped lazily on lookup.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        """Initialize the cache.

        Args:
            clock: Monotonic clock in seconds (for tests).
        """
        self._clock = clock or time.monotonic
        self._entries: dict[str, tuple[object, float]] = {}
        self._lock = threading.Lock()
        self._log = logger.bind(component="cache")

    def get(self, key: str) -> object | None:
        """Return the cached value, or None if absent or expired.

        Args:
            key: Cache key.

        Returns:
            Cached value or None.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                self._log.debug("cache_expired", key=key)
                return None
            return value

    def put(self, key: str, value: object, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        """Store a value.

        Args:
            key: Cache key.
            value: Value to store.
            ttl_seconds: Lifetime; non-positive values are not stored.
        """
        if ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def invalidate(self, key: str) -> None:
        """Drop one key if present."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every key."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        """Number of stored entries, including not yet evicted expired ones."""
        with self._lock:
            return len(self._entries)
