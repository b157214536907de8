"""skinproxy cache extension.

Pluggable cache backends (in-process TTL cache or Redis), deterministic key
generation and a Starlette middleware caching whole responses by URL.
"""

__version__ = "0.1.0"

from .backends import (
    CacheBackend,
    CacheBackendUnavailable,
    CacheError,
    MemoryCacheBackend,
    RedisCacheBackend,
)
from .middleware import EdgeCacheMiddleware
from .settings import CacheRedisSettings, CacheSettings
from .utils import CacheKeyGenerator

__all__ = [
    "CacheBackend",
    "CacheError",
    "CacheBackendUnavailable",
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "CacheSettings",
    "CacheRedisSettings",
    "EdgeCacheMiddleware",
    "CacheKeyGenerator",
]
