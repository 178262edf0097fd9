#!/usr/bin/env python3
"""
Cache manager with per-family TTL policy.

Wraps a raw cache store (in-memory or Redis) and owns key naming, TTLs and
JSON (de)serialization for the three cache families:

- ``analysis:<feedback_id>`` single-item analysis results
- ``digest:<window>`` windowed digest reports
- ``similar:<feedback_id>`` ranked similarity lookups
"""

import json
import logging
from typing import Any, Dict, Optional
from enum import Enum

logger = logging.getLogger(__name__)


class CacheStrategy(Enum):
    """Cache store backends."""
    MEMORY_ONLY = "memory"
    PERSISTENT = "redis"


DEFAULT_TTLS = {
    'analysis': 6 * 60 * 60,  # 6 hours
    'digest': 10 * 60,        # 10 minutes
    'similar': 30 * 60,       # 30 minutes
}


class CacheManager:
    """
    Read-through / write-through helper over a cache store.

    The store is always subordinate to the database: any blob that is absent,
    expired or undecodable is reported as a miss.
    """

    def __init__(self, store, ttls: Optional[Dict[str, int]] = None):
        """
        Initialize cache manager.

        Args:
            store: Object with get(key), put(key, blob, ttl_seconds), delete(key)
            ttls: Per-family TTL overrides in seconds
        """
        self.store = store
        self.ttls = dict(DEFAULT_TTLS)
        if ttls:
            self.ttls.update(ttls)

    # Key builders

    @staticmethod
    def analysis_key(feedback_id: int) -> str:
        return f"analysis:{feedback_id}"

    @staticmethod
    def digest_key(window: str) -> str:
        return f"digest:{window}"

    @staticmethod
    def similar_key(feedback_id: int) -> str:
        return f"similar:{feedback_id}"

    # JSON access

    def get_json(self, key: str) -> Optional[Any]:
        """
        Get decoded value from cache.

        Returns:
            Decoded JSON value, or None on miss
        """
        blob = self.store.get(key)
        if blob is None:
            logger.debug(f"Cache miss: {key}")
            return None

        try:
            value = json.loads(blob)
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e}")
            self.store.delete(key)
            return None

        logger.debug(f"Cache hit: {key}")
        return value

    def put_json(self, key: str, value: Any, family: str) -> None:
        """
        Serialize and store value with the family's TTL.

        Args:
            key: Cache key
            value: JSON-serializable value
            family: TTL family ('analysis', 'digest' or 'similar')
        """
        ttl = self.ttls[family]
        self.store.put(key, json.dumps(value, ensure_ascii=False, default=str), ttl)

    def invalidate(self, key: str) -> None:
        """Delete cache entry."""
        self.store.delete(key)
        logger.debug(f"Invalidated cache key: {key}")

    def get_stats(self) -> Dict[str, Any]:
        """Get store statistics plus configured TTLs."""
        if hasattr(self.store, 'purge_expired'):
            self.store.purge_expired()
        stats = self.store.get_stats() if hasattr(self.store, 'get_stats') else {}
        return {**stats, 'ttls': dict(self.ttls)}


def create_cache_store(backend: str = "memory", redis_url: Optional[str] = None):
    """
    Build a cache store for the configured backend.

    Args:
        backend: 'memory' or 'redis'
        redis_url: Redis URL, required for the redis backend

    Returns:
        Cache store instance
    """
    strategy = CacheStrategy(backend)

    if strategy is CacheStrategy.PERSISTENT:
        if not redis_url:
            raise ValueError("REDIS_URL is required when CACHE_BACKEND=redis")
        from .redis_cache import RedisCache
        logger.info("Using Redis cache store")
        return RedisCache(redis_url)

    from ..cache import InMemoryCache
    logger.info("Using in-memory cache store")
    return InMemoryCache()
