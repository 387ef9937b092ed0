"""
Expiring in-memory cache.

Entries live for a fixed number of seconds; the oldest tenth is evicted
when the cache is full.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExpiringCache(Generic[T]):
    """
    Key/value cache with a time-to-live per entry.

    Instances are injected where caching is wanted; there is no shared
    module-level cache.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the cache.

        Args:
            ttl_seconds: Lifetime of an entry in seconds
            max_entries: Maximum number of entries kept
            clock: Time source, in seconds
        """
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[T, float]] = {}
        self._hits = 0
        self._misses = 0

        logger.info(f"Expiring cache initialized: ttl={ttl_seconds}s, max entries={max_entries}")

    def get(self, key: str) -> Optional[T]:
        """
        Get a value if present and not expired.

        Args:
            key: Cache key

        Returns:
            Cached value, or None
        """
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        value, stored_at = entry
        age = self._clock() - stored_at
        if age >= self.ttl_seconds:
            logger.debug(f"Cache entry expired for {key} (age: {age:.1f}s)")
            del self._entries[key]
            self._misses += 1
            return None

        self._hits += 1
        return value

    def put(self, key: str, value: T) -> None:
        """Store a value."""
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self._evict_oldest()
        self._entries[key] = (value, self._clock())

    def delete(self, key: str) -> None:
        """Remove an entry if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all entries and reset statistics."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached value for key, fetching and storing it on a miss.

        Failed fetches are not cached.

        Args:
            key: Cache key
            fetch: Coroutine factory producing the value

        Returns:
            Cached or freshly fetched value
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        value = await fetch()
        self.put(key, value)
        return value

    def _evict_oldest(self) -> None:
        evict_count = max(1, self.max_entries // 10)
        oldest = sorted(self._entries.items(), key=lambda item: item[1][1])[:evict_count]
        for key, _ in oldest:
            del self._entries[key]
        logger.debug(f"Evicted {len(oldest)} old cache entries")

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with entry count, hits, misses and hit rate
        """
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0

        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_percent": round(hit_rate, 2),
        }

    def __len__(self) -> int:
        return len(self._entries)
