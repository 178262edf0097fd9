#!/usr/bin/env python3
"""
Redis-backed cache store.

Same get/put/delete contract as InMemoryCache, shared across processes.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

import redis

logger = logging.getLogger(__name__)


def redact_url(url: str) -> str:
    """Replace any password in a connection URL with ***."""
    parts = urlsplit(url)
    if parts.password is None:
        return url

    host = parts.netloc.rsplit('@', 1)[1]
    netloc = f"{parts.username or ''}:***@{host}"
    return urlunsplit(parts._replace(netloc=netloc))


class RedisCache:
    """Cache store backed by a Redis server (expiry handled by SETEX)."""

    def __init__(self, url: str, client: Optional[redis.Redis] = None):
        """
        Initialize Redis cache store.

        Args:
            url: Redis connection URL (redis://host:port/db)
            client: Pre-built client, mainly for tests
        """
        self.url = url
        self.client = client or redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        return self.client.get(key)

    def put(self, key: str, blob: str, ttl_seconds: int) -> None:
        self.client.setex(key, ttl_seconds, blob)
        logger.debug(f"Cached key: {key} (TTL: {ttl_seconds}s)")

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(key))

    def ping(self) -> bool:
        """Test Redis connection."""
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    def get_stats(self) -> Dict[str, Any]:
        return {
            'backend': 'redis',
            'url': redact_url(self.url),
            'connected': self.ping()
        }
