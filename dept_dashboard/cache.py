"""
In-memory TTL cache in front of the fetch orchestrator.

The cache is an explicit object handed to callers. The Streamlit app builds
one per process; tests build their own around a fake clock.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from .config import DEFAULT_CACHE_TTL_MS
from .loaders.fetch import FetchResult, fetch_and_parse

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload, when it was stored, and how long it stays valid."""

    payload: Any
    created_at: float
    ttl_ms: float

    def is_valid(self, now: float) -> bool:
        return now - self.created_at < self.ttl_ms


class TTLCache:
    """
    Key-scoped cache whose entries expire ``ttl_ms`` after being stored.

    Expired entries are removed on lookup and reported as a miss. Keys are
    independent; a lock only protects the map itself.
    """

    def __init__(
        self,
        default_ttl_ms: float = DEFAULT_CACHE_TTL_MS,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        self._default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str, ttl_ms: float | None = None) -> Any | None:
        """Return the payload for key, or None if missing or expired.

        ttl_ms, when given, replaces the TTL the entry was stored with.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            max_age = entry.ttl_ms if ttl_ms is None else ttl_ms
            if now - entry.created_at < max_age:
                return entry.payload
            del self._entries[key]
        logger.debug("Cache entry expired: %s", key)
        return None

    def set(self, key: str, value: Any, ttl_ms: float | None = None) -> None:
        entry = CacheEntry(
            payload=value,
            created_at=self._clock(),
            ttl_ms=self._default_ttl_ms if ttl_ms is None else ttl_ms,
        )
        with self._lock:
            self._entries[key] = entry

    def clear(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def has(self, key: str) -> bool:
        """True if an entry exists for key, expired or not."""
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


Fetcher = Callable[[str, str], FetchResult]


def fetch_with_cache(
    url: str,
    kind: str,
    cache: TTLCache,
    key: str | None = None,
    ttl_ms: float | None = None,
    fetcher: Fetcher = fetch_and_parse,
    force_refresh: bool = False,
) -> FetchResult:
    """Return a cached FetchResult for key, or fetch and cache a fresh one.

    A hit performs no network I/O. Only successful results are stored; a
    failed fetch is returned to the caller and leaves the cache untouched.
    force_refresh drops the entry first, like an explicit clear(key).

    Concurrent misses on the same key each fetch; the last one to finish
    is what stays cached.
    """
    key = key or url
    if force_refresh:
        cache.clear(key)

    cached = cache.get(key, ttl_ms)
    if cached is not None:
        logger.debug("Cache hit: %s", key)
        return cached

    logger.debug("Cache miss: %s", key)
    result = fetcher(url, kind)
    if result.ok:
        cache.set(key, result, ttl_ms)
    else:
        logger.warning("Not caching failed fetch for %s: %s", key, result.message)
    return result
