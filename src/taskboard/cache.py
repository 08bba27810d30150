from __future__ import annotations

import time
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple


# PUBLIC_INTERFACE
class Cache(ABC):
    """Abstract key/value cache with per-entry expiry."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the live value stored under key, or None."""

    @abstractmethod
    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store value under key for ttl_seconds."""

    @abstractmethod
    def forget(self, key: str) -> bool:
        """Remove key. Return True if a live entry was removed."""

    def remember(self, key: str, ttl_seconds: float, factory: Callable[[], Optional[Any]]) -> Optional[Any]:
        """
        Read-through lookup: return the cached value, or call factory and
        cache its result.

        A None result from factory is returned but not cached, so the next
        call tries again. Two callers missing at the same time may both call
        factory.
        """
        value = self.get(key)
        if value is not None:
            return value
        value = factory()
        if value is not None:
            self.put(key, value, ttl_seconds)
        return value


class InMemoryCache(Cache):
    """
    Thread-safe process-local cache. Expired entries are dropped when read
    and swept on every put.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = RLock()
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            now = self._clock()
            expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
            for k in expired:
                del self._entries[k]
            self._entries[key] = (now + ttl_seconds, value)

    def size(self) -> int:
        """Number of stored entries, expired ones not yet swept included."""
        with self._lock:
            return len(self._entries)

    def forget(self, key: str) -> bool:
        with self._lock:
            live = self.get(key) is not None
            self._entries.pop(key, None)
            return live
