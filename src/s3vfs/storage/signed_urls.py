"""Bounded cache of presigned URLs.

Entries are keyed by (key, operation, variant) and carry a monotonic expiry.
Expired entries are evicted lazily when touched, or when room is needed.
Thread-safe for concurrent access within a single process.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import NamedTuple

logger = logging.getLogger(__name__)


class SignedUrlKey(NamedTuple):
    """Cache key for one presigned URL."""

    key: str
    operation: str
    variant: str = ""


class _CachedUrl(NamedTuple):
    url: str
    expires_at: float


class SignedUrlCache:
    """LRU-bounded mapping of presigned URLs with per-entry expiry."""

    def __init__(
        self,
        max_entries: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of URLs held; 0 disables caching.
            clock: Monotonic clock in seconds (injectable for tests).
        """
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[SignedUrlKey, _CachedUrl] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, cache_key: SignedUrlKey) -> str | None:
        """Return a live URL, or None if absent or expired."""
        with self._lock:
            cached = self._entries.get(cache_key)
            if cached is None:
                return None
            if cached.expires_at <= self._clock():
                del self._entries[cache_key]
                logger.debug("Evicted expired signed URL for %s", cache_key.operation)
                return None
            self._entries.move_to_end(cache_key)
            return cached.url

    def put(self, cache_key: SignedUrlKey, url: str, ttl_seconds: float) -> None:
        """Store a URL valid for ``ttl_seconds`` from now."""
        if self._max_entries <= 0 or ttl_seconds <= 0:
            return
        with self._lock:
            now = self._clock()
            self._entries[cache_key] = _CachedUrl(url=url, expires_at=now + ttl_seconds)
            self._entries.move_to_end(cache_key)
            if len(self._entries) > self._max_entries:
                self._evict(now)

    def _evict(self, now: float) -> None:
        expired = [k for k, v in self._entries.items() if v.expires_at <= now]
        for cache_key in expired:
            del self._entries[cache_key]
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        logger.debug("Signed URL cache evicted to %d entries", len(self._entries))
