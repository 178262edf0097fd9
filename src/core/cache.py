#!/usr/bin/env python3
"""
In-process cache store for JSON blobs with per-entry TTL.

Default backend for CacheManager when Redis is not configured, and the
store used in tests.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class InMemoryCache:
    """
    Thread-safe TTL store with least-recently-used eviction.

    Implements the cache store contract used by CacheManager:
    get(key) -> blob or None, put(key, blob, ttl_seconds), delete(key).
    An entry is gone once ttl_seconds have passed since it was written.
    """

    def __init__(self, max_entries: int = 1000, clock: Callable[[], float] = time.time):
        """
        Args:
            max_entries: Entries kept before the least recently used are dropped
            clock: Epoch-seconds time source (injectable for tests)
        """
        self.max_entries = max_entries
        self._clock = clock
        # key -> (blob, expires_at); order is least -> most recently used
        self._entries: 'OrderedDict[str, Tuple[str, float]]' = OrderedDict()
        self._lock = threading.RLock()
        self._counters = {'hits': 0, 'misses': 0, 'puts': 0, 'deletes': 0, 'evictions': 0}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() >= entry[1]:
                del self._entries[key]
                logger.debug(f"Cache key expired: {key}")
                entry = None

            if entry is None:
                self._counters['misses'] += 1
                return None

            self._entries.move_to_end(key)
            self._counters['hits'] += 1
            return entry[0]

    def put(self, key: str, blob: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (blob, self._clock() + ttl_seconds)
            self._entries.move_to_end(key)
            self._counters['puts'] += 1

            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._counters['evictions'] += 1
                logger.debug(f"Evicted cache key: {evicted}")

    def delete(self, key: str) -> bool:
        """Returns True if the key was present."""
        with self._lock:
            if self._entries.pop(key, None) is None:
                return False
            self._counters['deletes'] += 1
            return True

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            lookups = self._counters['hits'] + self._counters['misses']
            return {
                'backend': 'memory',
                'entries': len(self._entries),
                'max_entries': self.max_entries,
                'hit_rate': round(self._counters['hits'] / lookups * 100, 1) if lookups else 0.0,
                **self._counters
            }
