"""Redis cache backend implementation."""

import logging
from typing import Any, Optional

import redis.asyncio as redis

from ..backends.base import CacheBackend, CacheBackendUnavailable, CacheError
from ..settings import CacheRedisSettings

logger = logging.getLogger(__name__)


class RedisCacheBackend(CacheBackend):
    """Redis-based cache backend with async support.

    Used as the durable store: every value is written with ``SETEX`` so
    Redis expires it on its own, no eviction is ever issued by the proxy.
    """

    def __init__(
        self,
        host: str,
        port: int = 6379,
        password: Optional[str] = None,
        db: int = 0,
        **kwargs,
    ):
        """Initialize Redis cache backend.

        Args:
            host: Redis host
            port: Redis port
            password: Redis password (optional)
            db: Redis database number
            **kwargs: Additional Redis connection parameters
        """
        self.host = host
        self.port = port
        self.password = password
        self.db = db
        self._client: Optional[redis.Redis] = None
        self.connection_kwargs = kwargs

        # Statistics tracking
        self._stats = {"hits": 0, "misses": 0, "errors": 0, "total_operations": 0}

    async def _get_client(self) -> redis.Redis:
        """Get Redis client with connection pooling."""
        if self._client is None:
            client = redis.Redis(
                host=self.host,
                port=self.port,
                password=self.password,
                db=self.db,
                decode_responses=False,
                **self.connection_kwargs,
            )
            try:
                # Test connection
                await client.ping()
                logger.debug(f"Connected to Redis at {self.host}:{self.port}")
            except Exception as e:
                logger.error(f"Failed to connect to Redis: {e}")
                await client.aclose()
                raise CacheBackendUnavailable(f"Redis unavailable: {e}") from e

            self._client = client

        return self._client

    async def get(self, key: str) -> Optional[bytes]:
        """Retrieve data from Redis cache."""
        try:
            client = await self._get_client()
            self._stats["total_operations"] += 1

            data = await client.get(key)
            if data is not None:
                self._stats["hits"] += 1
                logger.debug(f"Cache HIT for key: {key}")
                return data
            else:
                self._stats["misses"] += 1
                logger.debug(f"Cache MISS for key: {key}")
                return None

        except CacheBackendUnavailable:
            self._stats["errors"] += 1
            raise
        except Exception as e:
            self._stats["errors"] += 1
            logger.error(f"Redis get error for key {key}: {e}")
            raise CacheError(f"Failed to get key {key}: {e}") from e

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> bool:
        """Store data in Redis cache."""
        if ttl is not None and ttl <= 0:
            logger.debug(f"Cache SKIP for key: {key} (TTL: {ttl})")
            return False

        try:
            client = await self._get_client()
            self._stats["total_operations"] += 1

            if ttl is not None:
                await client.setex(key, ttl, value)
            else:
                await client.set(key, value)

            logger.debug(f"Cache SET for key: {key} (TTL: {ttl})")
            return True

        except CacheBackendUnavailable:
            self._stats["errors"] += 1
            return False
        except Exception as e:
            self._stats["errors"] += 1
            logger.error(f"Redis set error for key {key}: {e}")
            return False

    async def exists(self, key: str) -> bool:
        """Check if cache key exists in Redis."""
        try:
            client = await self._get_client()
            self._stats["total_operations"] += 1

            result = await client.exists(key)
            return result > 0

        except CacheBackendUnavailable:
            self._stats["errors"] += 1
            return False
        except Exception as e:
            self._stats["errors"] += 1
            logger.error(f"Redis exists error for key {key}: {e}")
            return False

    async def health_check(self) -> dict[str, Any]:
        """Check Redis health and return metrics."""
        try:
            client = await self._get_client()

            # Ping Redis
            await client.ping()

            # Get Redis info
            info = await client.info()

            return {
                "status": "connected",
                "backend": "redis",
                "host": self.host,
                "port": self.port,
                "db": self.db,
                "redis_version": info.get("redis_version", "unknown"),
                "connected_clients": info.get("connected_clients", 0),
                "used_memory_human": info.get("used_memory_human", "0B"),
            }

        except CacheBackendUnavailable:
            return {
                "status": "disconnected",
                "backend": "redis",
                "host": self.host,
                "port": self.port,
                "error": "Backend unavailable",
            }
        except Exception as e:
            logger.error(f"Redis health check error: {e}")
            return {
                "status": "error",
                "backend": "redis",
                "host": self.host,
                "port": self.port,
                "error": str(e),
            }

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total_ops = self._stats["total_operations"]
        if total_ops > 0:
            hit_rate = (self._stats["hits"] / total_ops) * 100
        else:
            hit_rate = 0.0

        return {
            "backend": "redis",
            "hit_rate": round(hit_rate, 2),
            "total_hits": self._stats["hits"],
            "total_misses": self._stats["misses"],
            "total_errors": self._stats["errors"],
            "total_operations": total_ops,
        }

    @classmethod
    def from_settings(cls, settings: CacheRedisSettings) -> "RedisCacheBackend":
        """Create Redis backend from settings."""
        if not settings.host:
            raise ValueError("Redis host must be configured")

        return cls(
            host=settings.host,
            port=settings.port,
            password=settings.password.get_secret_value()
            if settings.password
            else None,
            db=settings.db,
        )

    async def close(self):
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("Redis connection closed")
