"""
Route Cache - Time-Windowed Optimization Results

Caller-owned store of optimization results keyed by (start, end).
Entries are fresh for a fixed TTL measured from the result's computed_at;
every put sweeps out entries that have gone stale, so the store stays
bounded by the number of distinct keys seen within one TTL window.
Concurrent writers for the same key are allowed; the last write wins.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Generic, Optional, TypeVar

from clearway.models import GeoPoint

logger = logging.getLogger(__name__)

V = TypeVar('V')


def cache_key(start: GeoPoint, end: GeoPoint) -> str:
    """Canonical key for an origin/destination pair (6 decimal places)"""
    return f"{start.lat:.6f},{start.lng:.6f}->{end.lat:.6f},{end.lng:.6f}"


@dataclass
class CacheEntry(Generic[V]):
    value: V
    computed_at: datetime


class RouteCache(Generic[V]):
    """
    Thread-safe TTL cache

    Usage:
        cache = RouteCache(ttl_seconds=300)
        cache.put(key, result, computed_at=now)
        cache.get(key, now)  # result while fresh, None after the TTL
    """

    def __init__(self, ttl_seconds: float = 300):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self.ttl_seconds = ttl_seconds
        self._entries: Dict[str, CacheEntry[V]] = {}
        self._lock = threading.Lock()

        # Statistics
        self.hits = 0
        self.misses = 0
        self.expirations = 0

    def get(self, key: str, now: datetime) -> Optional[V]:
        """Return the cached value if still fresh, else None (expired entries are evicted)"""
        with self._lock:
            entry = self._entries.get(key)

            if entry is None:
                self.misses += 1
                return None

            if not self._is_fresh(entry, now):
                del self._entries[key]
                self.expirations += 1
                self.misses += 1
                logger.debug(f"Cache entry expired: {key}")
                return None

            self.hits += 1
            return entry.value

    def put(self, key: str, value: V, computed_at: datetime):
        """Store a result; entries already stale at computed_at are swept out"""
        with self._lock:
            self._evict_expired(computed_at)
            self._entries[key] = CacheEntry(value=value, computed_at=computed_at)

    def _is_fresh(self, entry: CacheEntry[V], now: datetime) -> bool:
        return (now - entry.computed_at).total_seconds() < self.ttl_seconds

    def _evict_expired(self, now: datetime) -> int:
        # Caller holds the lock
        expired = [k for k, e in self._entries.items() if not self._is_fresh(e, now)]
        for key in expired:
            del self._entries[key]
        self.expirations += len(expired)
        return len(expired)

    def purge_expired(self, now: datetime) -> int:
        """Remove all expired entries, returning how many were removed"""
        with self._lock:
            return self._evict_expired(now)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_statistics(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self._lock:
            lookups = self.hits + self.misses
            return {
                'size': len(self._entries),
                'ttlSeconds': self.ttl_seconds,
                'hits': self.hits,
                'misses': self.misses,
                'expirations': self.expirations,
                'hitRate': round(self.hits / lookups * 100, 1) if lookups else 0.0
            }
