"""In-memory resolution cache with TTL support."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Hashable, Optional, Union

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry:
    key: Hashable
    value: Any
    expires_at: datetime


class ResolutionCache:
    """Cache with TTL support shared by the catalog and the geocoder.

    Expiry is checked lazily on read: an entry read at or after its
    ``expires_at`` is a miss and is dropped. With ``max_entries`` set, a
    write past the limit first purges expired entries and then evicts the
    least recently stored ones. Entries live for the process lifetime only.
    """

    def __init__(
        self,
        ttl: Union[int, float, timedelta] = 86400,
        clock: Clock = utcnow,
        max_entries: Optional[int] = None,
    ):
        """Initialize the cache.

        Args:
            ttl: Default time-to-live, in seconds or as a timedelta
            clock: Callable returning the current time
            max_entries: Upper bound on stored entries, None for unbounded
        """
        self.ttl = ttl if isinstance(ttl, timedelta) else timedelta(seconds=ttl)
        self.clock = clock
        self.max_entries = max_entries
        self._entries: Dict[Hashable, CacheEntry] = {}

        self.metrics = {
            'hits': 0,
            'misses': 0,
            'expired': 0,
            'evicted': 0,
        }

    def get(self, key: Hashable) -> Optional[Any]:
        """Get value from cache if not expired."""
        entry = self._entries.get(key)
        if entry is None:
            self.metrics['misses'] += 1
            return None

        if self.clock() >= entry.expires_at:
            self.metrics['expired'] += 1
            self.metrics['misses'] += 1
            # Only drop the entry we looked at; a concurrent set wins
            if self._entries.get(key) is entry:
                del self._entries[key]
            logger.debug(f"Cache entry expired for key: {key}")
            return None

        self.metrics['hits'] += 1
        return entry.value

    def set(self, key: Hashable, value: Any, ttl: Union[int, float, timedelta, None] = None) -> None:
        """Store value in cache with an expiry time."""
        if ttl is None:
            lifetime = self.ttl
        elif isinstance(ttl, timedelta):
            lifetime = ttl
        else:
            lifetime = timedelta(seconds=ttl)

        # Re-inserting moves the key to the end of the eviction order
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key=key, value=value, expires_at=self.clock() + lifetime)

        if self.max_entries is not None and len(self._entries) > self.max_entries:
            self.purge_expired()
            while len(self._entries) > self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                self.metrics['evicted'] += 1
                logger.debug(f"Cache full, evicted key: {oldest}")

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        self.metrics['expired'] += len(expired)
        return len(expired)

    def invalidate(self, key: Hashable) -> None:
        """Invalidate a cache entry."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all cache entries."""
        self._entries.clear()
        logger.info("Resolution cache cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def get_metrics(self) -> Dict[str, Any]:
        """Get cache metrics."""
        metrics = dict(self.metrics)
        total_access = metrics['hits'] + metrics['misses']
        if total_access > 0:
            metrics['hit_rate'] = (metrics['hits'] / total_access) * 100
        metrics['entries'] = len(self._entries)
        return metrics
