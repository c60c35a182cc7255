"""
Catalog metadata caching.

Each adapter owns one MetadataCache. Entries expire after a TTL, are
dropped for the affected table after DDL run through the adapter, and are
dropped wholesale when the adapter reconnects or disconnects.
Uses cachetools TTLCache for automatic expiration.
"""
import functools
import logging
import threading

import cachetools

logger = logging.getLogger(__name__)

__all__ = ['MetadataCache', 'cacheable']


class MetadataCache:
    """Named TTL caches for one connection.
    """

    def __init__(self, maxsize: int = 100, ttl: int = 300) -> None:
        self.maxsize = maxsize
        self.ttl = ttl
        self._caches: dict[str, cachetools.TTLCache] = {}
        self._lock = threading.RLock()

    def get_cache(self, name: str) -> cachetools.TTLCache:
        """Get or create the TTL cache with the given name.
        """
        if name not in self._caches:
            with self._lock:
                if name not in self._caches:
                    self._caches[name] = cachetools.TTLCache(maxsize=self.maxsize, ttl=self.ttl)
        return self._caches[name]

    def clear_all(self) -> None:
        """Clear all managed caches."""
        with self._lock:
            for cache in self._caches.values():
                cache.clear()

    def clear_cache(self, name: str) -> None:
        """Clear a specific cache by name."""
        with self._lock:
            if name in self._caches:
                self._caches[name].clear()

    def clear_for_table(self, table_name: str) -> None:
        """Clear all cache entries related to a specific table.

        Args:
            table_name: Name of the table to clear cache entries for
        """
        table_lower = table_name.lower()
        with self._lock:
            for cache in self._caches.values():
                keys_to_clear = [
                    key for key in list(cache.keys())
                    if table_lower in str(key).lower()
                ]
                for key in keys_to_clear:
                    if key in cache:
                        del cache[key]
                        logger.debug(f'Cleared cache entry {key} for table {table_name}')


def _create_cache_key(method_args: tuple, method_kwargs: dict) -> str:
    """Create a deterministic cache key from arguments.
    """
    args_str = ':'.join(repr(arg) for arg in method_args)
    kwargs_str = ':'.join(f'{k}={v!r}' for k, v in sorted(method_kwargs.items()))
    return f'{args_str}:{kwargs_str}'


def cacheable(cache_name: str):
    """Decorator for caching adapter metadata results.

    The decorated method's instance must expose a ``metadata_cache``
    attribute. Respects a ``bypass_cache`` keyword to skip the cache lookup;
    a bypassed call still refreshes the cached entry.

    Args:
        cache_name: Name of the cache within the instance's MetadataCache
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, bypass_cache=False, **kwargs):
            cache = self.metadata_cache.get_cache(cache_name)
            cache_key = _create_cache_key(args, kwargs)

            if not bypass_cache and cache_key in cache:
                logger.debug(f'Cache hit for {method.__name__}({cache_key})')
                return cache[cache_key]

            if bypass_cache:
                logger.debug(f'Bypassing cache for {method.__name__}({cache_key})')
            else:
                logger.debug(f'Cache miss for {method.__name__}({cache_key})')
            result = method(self, *args, **kwargs)
            cache[cache_key] = result
            return result

        return wrapper
    return decorator
