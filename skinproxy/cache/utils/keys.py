"""Cache key generation utilities."""

import hashlib
import logging

logger = logging.getLogger(__name__)


class CacheKeyGenerator:
    """Generate deterministic cache keys.

    Two families of keys are produced:

    - entity keys for the durable store, ``<kind>:<identifier>``
      (e.g. ``username:Notch`` or ``profile:069a79f444e94726a5befca90e38aeec``)
    - edge keys for whole responses, ``edge:<full request URL>``

    Both are prefixed with the namespace when one is configured.
    """

    def __init__(
        self,
        namespace: str = "",
        max_key_length: int = 2048,
    ):
        """Initialize cache key generator.

        Args:
            namespace: Optional deployment namespace prepended to every key
            max_key_length: Maximum cache key length (for Redis compatibility, default 2048)
        """
        self.namespace = namespace
        self.max_key_length = max_key_length

    def _join(self, *parts: str) -> str:
        if self.namespace:
            parts = (self.namespace,) + parts
        return ":".join(parts)

    def _limit(self, cache_key: str, cache_type: str) -> str:
        # Hash the entire key if too long
        if len(cache_key) > self.max_key_length:
            key_hash = hashlib.md5(cache_key.encode("utf-8")).hexdigest()
            cache_key = self._join(cache_type, "hash", key_hash)
        return cache_key

    def entity(self, kind: str, identifier: str) -> str:
        """Generate the durable cache key of an entity.

        Args:
            kind: Entity kind (``username`` or ``profile``)
            identifier: Username or UUID, used verbatim

        Returns:
            Cache key string
        """
        cache_key = self._limit(self._join(kind, identifier), kind)
        logger.debug(f"Generated cache key: {cache_key}")
        return cache_key

    def username(self, name: str) -> str:
        """Key holding the UUID of a username."""
        return self.entity("username", name)

    def profile(self, uuid: str) -> str:
        """Key holding the serialized profile of a UUID."""
        return self.entity("profile", uuid)

    def from_url(self, url: str) -> str:
        """Generate the edge cache key of a request URL.

        The full URL is used, query string included, so two requests only
        share an entry when their URLs are byte-identical.

        Args:
            url: Full request URL

        Returns:
            Cache key string
        """
        cache_key = self._limit(self._join("edge", url), "edge")
        logger.debug(f"Generated cache key: {cache_key}")
        return cache_key
