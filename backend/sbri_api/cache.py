"""
Named, bounded TTL caches shared by the routers.

Each cache is a cachetools TTLCache created on first use; access goes through
one lock. Hit and miss counters feed the /metrics endpoint.
"""
import threading
from typing import Any, Hashable

from cachetools import TTLCache


class AppCache:
    """Registry of named TTLCaches."""

    def __init__(self):
        self._lock = threading.Lock()
        self._caches: dict[str, TTLCache] = {}
        self._hits: dict[str, int] = {}
        self._misses: dict[str, int] = {}

    def _get_or_create(self, name: str, maxsize: int, ttl: int) -> TTLCache:
        cache = self._caches.get(name)
        if cache is None:
            cache = self._caches[name] = TTLCache(maxsize=maxsize, ttl=ttl)
            self._hits[name] = 0
            self._misses[name] = 0
        return cache

    def get(self, cache_name: str, key: Hashable) -> Any:
        """Cached value, or None when absent or expired."""
        with self._lock:
            cache = self._caches.get(cache_name)
            if cache is None:
                return None
            value = cache.get(key)
            if value is None:
                self._misses[cache_name] += 1
            else:
                self._hits[cache_name] += 1
            return value

    def set(self, cache_name: str, key: Hashable, value: Any, maxsize: int = 128, ttl: int = 600) -> None:
        with self._lock:
            self._get_or_create(cache_name, maxsize, ttl)[key] = value

    def invalidate(self, cache_name: str | None = None, key: Hashable | None = None) -> None:
        """Drop one key, one cache, or (with no arguments) everything."""
        with self._lock:
            if cache_name is None:
                for cache in self._caches.values():
                    cache.clear()
                return
            cache = self._caches.get(cache_name)
            if cache is None:
                return
            if key is None:
                cache.clear()
            else:
                cache.pop(key, None)

    def stats(self) -> dict:
        with self._lock:
            return {
                name: {
                    "size": len(cache),
                    "maxsize": cache.maxsize,
                    "ttl": cache.ttl,
                    "hits": self._hits.get(name, 0),
                    "misses": self._misses.get(name, 0),
                }
                for name, cache in self._caches.items()
            }


# Global cache instance, import this in routers
app_cache = AppCache()
