"""Cache backend implementations."""

from .base import CacheBackend, CacheBackendUnavailable, CacheError
from .memory import MemoryCacheBackend
from .redis import RedisCacheBackend

__all__ = [
    "CacheBackend",
    "CacheError",
    "CacheBackendUnavailable",
    "MemoryCacheBackend",
    "RedisCacheBackend",
]
