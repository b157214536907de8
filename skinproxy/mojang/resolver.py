"""Player identity resolution backed by the durable cache."""

import logging
from typing import Optional

from pydantic import ValidationError

from skinproxy.cache import CacheBackend, CacheError, CacheKeyGenerator

from .client import MojangClient
from .errors import UpstreamError
from .models import Profile, Textures
from .textures import extract_textures

logger = logging.getLogger(__name__)

UUID_LENGTHS = (32, 36)


def is_uuid(value: str) -> bool:
    """Tell whether ``value`` looks like a UUID (undashed or dashed).

    Only the length is checked, the content is never inspected.
    """
    return len(value) in UUID_LENGTHS


class IdentityResolver:
    """Resolve usernames to UUIDs and UUIDs to profiles.

    Each lookup reads the durable cache first and falls back to the Mojang
    services on a miss. Usernames and profiles live in separate key
    namespaces with their own TTL.
    """

    def __init__(
        self,
        cache_backend: CacheBackend,
        client: MojangClient,
        key_generator: CacheKeyGenerator,
        username_ttl: int,
        profile_ttl: int,
    ):
        self.cache_backend = cache_backend
        self.client = client
        self.key_generator = key_generator
        self.username_ttl = username_ttl
        self.profile_ttl = profile_ttl

    async def _cached(self, key: str) -> Optional[bytes]:
        try:
            return await self.cache_backend.get(key)
        except CacheError as e:
            logger.warning(f"Error retrieving from cache: {e}")
            return None

    async def resolve_uuid(self, user: str) -> Optional[str]:
        """Return the UUID of ``user``, or None if it does not exist.

        UUID-looking input is returned as is, without any lookup.
        """
        if is_uuid(user):
            return user

        cache_key = self.key_generator.username(user)
        cached = await self._cached(cache_key)
        if cached:
            return cached.decode("utf-8")

        uuid = await self.client.fetch_uuid(user)
        if uuid is None:
            return None

        await self.cache_backend.set(
            cache_key, uuid.encode("utf-8"), ttl=self.username_ttl
        )
        return uuid

    async def resolve_profile(self, uuid: Optional[str]) -> Optional[Profile]:
        """Return the profile of ``uuid``, or None if it does not exist."""
        if uuid is None:
            return None

        cache_key = self.key_generator.profile(uuid)
        cached = await self._cached(cache_key)
        if cached:
            try:
                return Profile.model_validate_json(cached)
            except ValidationError as e:
                logger.warning(f"Ignoring unreadable cached profile {cache_key}: {e}")

        raw = await self.client.fetch_profile(uuid)
        if raw is None:
            return None

        try:
            profile = Profile.model_validate_json(raw)
        except ValidationError as e:
            raise UpstreamError(f"Invalid profile response for {uuid}: {e}") from e

        await self.cache_backend.set(
            cache_key, raw.encode("utf-8"), ttl=self.profile_ttl
        )
        return profile

    async def resolve_textures(self, user: str) -> Textures:
        """Return skin and cape URLs of ``user`` (username or UUID)."""
        uuid = await self.resolve_uuid(user)
        profile = await self.resolve_profile(uuid)
        return extract_textures(profile)
