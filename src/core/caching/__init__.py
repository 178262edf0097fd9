#!/usr/bin/env python3
"""
Caching layer for analysis, digest and similarity results.

Provides cache stores and the TTL/key policy on top of them.
"""

from .cache_manager import CacheManager, CacheStrategy, create_cache_store

__all__ = [
    'CacheManager', 'CacheStrategy', 'create_cache_store'
]
