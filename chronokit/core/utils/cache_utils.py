"""
Centralized caching utilities using cachetools.

Provides named, size-bounded LRU caches. chronokit uses them to hand out one
immutable formatter instance per (pattern, zone, locale) instead of building a
new one on every call. Callers that share a cache across threads must guard it
with the lock returned alongside it.
"""

import threading
from typing import Any

import structlog
from cachetools import LRUCache

logger = structlog.get_logger(__name__)

# Global registry of named caches and their locks
_cache_registry: dict[str, LRUCache] = {}
_lock_registry: dict[str, threading.RLock] = {}
_registry_lock = threading.Lock()


def get_lru_cache(name: str, maxsize: int = 128) -> LRUCache:
    """
    Get or create a named LRU cache.

    Args:
        name: Unique identifier for the cache (e.g., 'date_formatters')
        maxsize: Maximum number of entries in cache (default: 128)

    Returns:
        LRUCache instance. The maxsize of an existing cache is not changed.

    Example:
        cache = get_lru_cache('my_cache', maxsize=500)
        cache['key'] = 'value'
        value = cache.get('key', default_value)
    """
    with _registry_lock:
        if name not in _cache_registry:
            logger.info(
                "Creating new LRU cache",
                cache_name=name,
                maxsize=maxsize
                )
            _cache_registry[name] = LRUCache(maxsize=maxsize)
            _lock_registry[name] = threading.RLock()
        return _cache_registry[name]


def get_cache_lock(name: str) -> threading.RLock:
    """
    Get the lock guarding a named cache (creating the cache if needed).

    Args:
        name: Cache identifier

    Returns:
        Re-entrant lock to hold while reading or writing the cache
    """
    get_lru_cache(name)
    return _lock_registry[name]


def clear_cache(name: str) -> bool:
    """
    Clear a named cache.

    Args:
        name: Cache identifier

    Returns:
        True if cache existed and was cleared, False if not found
    """
    if name in _cache_registry:
        with _lock_registry[name]:
            _cache_registry[name].clear()
        logger.info("Cache cleared", cache_name=name)
        return True
    return False


def clear_all_caches() -> int:
    """
    Clear all registered caches.

    Returns:
        Number of caches cleared
    """
    count = 0
    for name in list(_cache_registry):
        if clear_cache(name):
            count += 1
    logger.info("All caches cleared", cache_count=count)
    return count


def get_cache_stats(name: str) -> dict[str, Any] | None:
    """
    Get statistics for a named cache.

    Args:
        name: Cache identifier

    Returns:
        Dict with cache stats (size, maxsize) or None if not found
    """
    if name not in _cache_registry:
        return None

    cache = _cache_registry[name]
    return {
        "name": name,
        "current_size": len(cache),
        "maxsize": cache.maxsize,
        }


def list_caches() -> list[dict[str, Any]]:
    """
    List all registered caches with their stats.

    Returns:
        List of cache statistics
    """
    return [
        get_cache_stats(name)
        for name in list(_cache_registry)
        ]
