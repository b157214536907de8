"""In-process cache backend implementation."""

import logging
import math
import time
from typing import Any, Callable, Optional

from cachetools import TLRUCache

from ..backends.base import CacheBackend

logger = logging.getLogger(__name__)


class MemoryCacheBackend(CacheBackend):
    """In-memory cache backend with per-entry expiration.

    Entries are held in a ``cachetools.TLRUCache`` whose time-to-use is
    derived from the TTL passed to :meth:`set`, so entries of different
    kinds can live side by side with independent lifetimes.
    """

    def __init__(
        self,
        max_items: int = 10000,
        default_ttl: Optional[int] = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        """Initialize memory cache backend.

        Args:
            max_items: Maximum number of entries before LRU eviction
            default_ttl: TTL used when ``set`` is called without one
                (None means entries never expire)
            timer: Clock used for expiration
        """
        self.max_items = max_items
        self.default_ttl = default_ttl
        self._cache: TLRUCache = TLRUCache(
            maxsize=max_items, ttu=self._time_to_use, timer=timer
        )

        # Statistics tracking
        self._stats = {"hits": 0, "misses": 0, "errors": 0, "total_operations": 0}

    @staticmethod
    def _time_to_use(key: str, value: tuple[bytes, Optional[int]], now: float) -> float:
        _, ttl = value
        if ttl is None:
            return math.inf
        return now + ttl

    async def get(self, key: str) -> Optional[bytes]:
        """Retrieve data from memory cache."""
        self._stats["total_operations"] += 1

        entry = self._cache.get(key)
        if entry is not None:
            self._stats["hits"] += 1
            logger.debug(f"Cache HIT for key: {key}")
            return entry[0]

        self._stats["misses"] += 1
        logger.debug(f"Cache MISS for key: {key}")
        return None

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> bool:
        """Store data in memory cache."""
        self._stats["total_operations"] += 1

        if ttl is None:
            ttl = self.default_ttl

        if ttl is not None and ttl <= 0:
            logger.debug(f"Cache SKIP for key: {key} (TTL: {ttl})")
            return False

        self._cache[key] = (value, ttl)
        logger.debug(f"Cache SET for key: {key} (TTL: {ttl})")
        return True

    async def exists(self, key: str) -> bool:
        """Check if cache key exists in memory."""
        self._stats["total_operations"] += 1
        return key in self._cache

    async def health_check(self) -> dict[str, Any]:
        """Report memory cache occupancy."""
        return {
            "status": "connected",
            "backend": "memory",
            "items": self._cache.currsize,
            "max_items": self.max_items,
        }

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total_ops = self._stats["total_operations"]
        if total_ops > 0:
            hit_rate = (self._stats["hits"] / total_ops) * 100
        else:
            hit_rate = 0.0

        return {
            "backend": "memory",
            "hit_rate": round(hit_rate, 2),
            "total_hits": self._stats["hits"],
            "total_misses": self._stats["misses"],
            "total_errors": self._stats["errors"],
            "total_operations": total_ops,
            "total_keys": self._cache.currsize,
        }
