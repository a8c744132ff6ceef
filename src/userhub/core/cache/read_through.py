"""Thread-safe read-through cache with per-entry TTL."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NamedTuple, TypeVar

from cachetools import TLRUCache
from loguru import logger

V = TypeVar("V")


class _CacheEntry(NamedTuple):
    value: Any
    ttl: float


def _expires_at(_key: str, entry: _CacheEntry, now: float) -> float:
    return now + entry.ttl


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    invalidations: int = 0


class ReadThroughCache:
    """In-memory key/value cache where every entry carries its own TTL.

    Expired entries are detected lazily on access; there is no background
    sweep. A single lock guards the map, and concurrent misses on the same
    key are collapsed so that ``compute`` runs once per key at a time.

    The cache also owns the directory *generation*: a counter bumped on
    every write. Callers that embed it in their keys never read entries
    written before the last bump, and a value computed while a bump happened
    is returned to its caller but never stored.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: TLRUCache[str, _CacheEntry] = TLRUCache(
            maxsize=max_entries, ttu=_expires_at, timer=timer
        )
        self._lock = threading.RLock()
        self._key_locks: dict[str, threading.Lock] = {}
        self._generation = 0
        self.stats = CacheStats()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def bump_generation(self) -> int:
        """Advance the directory generation and return the new value."""
        with self._lock:
            self._generation += 1
            return self._generation

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
        return default if entry is None else entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = _CacheEntry(value, ttl)

    def get_or_compute(self, key: str, ttl: float, compute: Callable[[], V]) -> V:
        """Return the live cached value for ``key`` or compute and store it.

        Args:
            key: Cache key
            ttl: Seconds the computed value stays valid
            compute: Producer invoked on a miss

        Returns:
            The cached or freshly computed value

        Raises:
            Whatever ``compute`` raises; nothing is stored in that case.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self.stats.hits += 1
                return entry.value
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                entry = self._entries.get(key)
                if entry is not None:
                    # Filled by a concurrent miss while this one waited
                    self.stats.hits += 1
                    return entry.value
                self.stats.misses += 1
                generation = self._generation

            try:
                value = compute()
                with self._lock:
                    if self._generation == generation:
                        self._entries[key] = _CacheEntry(value, ttl)
                    else:
                        # A write landed while computing; the value may predate it
                        logger.debug("Cache store skipped for {} (generation moved)", key)
            finally:
                with self._lock:
                    if self._key_locks.get(key) is key_lock:
                        del self._key_locks[key]

        return value

    def invalidate(self, key: str) -> bool:
        """Remove ``key``; returns whether a live entry was present."""
        with self._lock:
            removed = self._entries.pop(key, None) is not None
            self.stats.invalidations += 1
        logger.debug("Cache invalidate {} (present={})", key, removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generation += 1
        logger.info("Cache cleared")
