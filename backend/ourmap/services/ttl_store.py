"""Keyed store with expiry, and a fixed-window rate limiter built on it.

Short-lived counters (rate limits, one-time codes) go through the
``TTLStore`` protocol rather than module-level dicts so a shared backend
can be dropped in for multi-instance deployments.  ``MemoryTTLStore`` is
the single-process default.
"""
import logging
import threading
import time
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TTLStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl_seconds: float) -> None: ...

    def delete(self, key: str) -> None: ...

    def incr(self, key: str, ttl_seconds: float) -> int:
        """Atomically add one to ``key``; a new key starts at 1 and expires after ``ttl_seconds``."""
        ...

    def ttl(self, key: str) -> Optional[float]:
        """Seconds until ``key`` expires, or None when absent."""
        ...


class MemoryTTLStore:
    """Thread-safe in-process TTLStore."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def _live(self, key: str) -> Optional[tuple[Any, float]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._data[key]
            return None
        return entry

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._live(key)
            return entry[0] if entry else None

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._data[key] = (value, self._clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def incr(self, key: str, ttl_seconds: float) -> int:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                self._data[key] = (1, self._clock() + ttl_seconds)
                return 1
            # Keep the original expiry; only the counter moves.
            count = entry[0] + 1
            self._data[key] = (count, entry[1])
            return count

    def ttl(self, key: str) -> Optional[float]:
        with self._lock:
            entry = self._live(key)
            return entry[1] - self._clock() if entry else None


class RateLimiter:
    """Allow ``max_attempts`` per ``window_seconds`` per identifier."""

    def __init__(self, store: TTLStore, max_attempts: int, window_seconds: float, prefix: str = "ratelimit"):
        self.store = store
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.prefix = prefix

    def hit(self, identifier: str) -> bool:
        """Record an attempt; returns False once the limit is exceeded."""
        key = f"{self.prefix}:{identifier}"
        if self.store.incr(key, self.window_seconds) > self.max_attempts:
            logger.warning("Rate limit exceeded for %s", key)
            return False
        return True

    def reset(self, identifier: str) -> None:
        self.store.delete(f"{self.prefix}:{identifier}")
