"""
TTL cache for derived console views.

The engines are pure, so a result computed for a given (community, group
scope, window bounds) key can be served again until it goes stale.
"""

from typing import Any, Dict, Hashable, Optional, Tuple
import time

from modconsole.util.logger import get_logger

logger = get_logger("result_cache")


class ResultCache:
    """
    TTL-based cache for engine results.

    Entries are stored with the time they were written and dropped on the
    first lookup after ``ttl_seconds`` have passed.
    """

    def __init__(self, ttl_seconds: float = 60):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Time-to-live in seconds for cached entries (default: 60).
                A TTL of 0 disables caching.
        """
        self._cache: Dict[Hashable, Tuple[float, Any]] = {}
        self._ttl_seconds = ttl_seconds

    def get(self, cache_key: Hashable) -> Optional[Any]:
        """
        Return a cached result if still valid, None if expired or missing.
        """
        if cache_key in self._cache:
            timestamp, result = self._cache[cache_key]
            if time.monotonic() - timestamp < self._ttl_seconds:
                logger.debug("[CACHE] Hit for key: %s", cache_key)
                return result
            del self._cache[cache_key]
            logger.debug("[CACHE] Expired key: %s", cache_key)
        return None

    def set(self, cache_key: Hashable, result: Any) -> None:
        """Cache a result with the current timestamp."""
        if self._ttl_seconds <= 0:
            return
        self._cache[cache_key] = (time.monotonic(), result)
        logger.debug("[CACHE] Set key: %s", cache_key)

    def invalidate(self, community_id: Optional[str] = None) -> int:
        """
        Drop cached entries.

        Args:
            community_id: When given, only keys whose first element is this
                community are dropped. Otherwise the whole cache is cleared.

        Returns:
            Number of entries invalidated.
        """
        if community_id is None:
            count = len(self._cache)
            self._cache.clear()
            logger.debug("[CACHE] Cleared all %d entries", count)
            return count

        keys_to_delete = [
            key for key in self._cache
            if isinstance(key, tuple) and key and key[0] == community_id
        ]
        for key in keys_to_delete:
            del self._cache[key]
        logger.debug("[CACHE] Cleared %d entries for community %s", len(keys_to_delete), community_id)
        return len(keys_to_delete)

    def stats(self) -> Dict[str, float]:
        """Return cache size and TTL."""
        return {
            "size": len(self._cache),
            "ttl_seconds": self._ttl_seconds,
        }
