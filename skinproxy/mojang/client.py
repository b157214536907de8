"""Mojang services HTTP client."""

import logging
from typing import Optional

import httpx

from .errors import UpstreamError
from .settings import UpstreamSettings

logger = logging.getLogger(__name__)


class MojangClient:
    """Thin async client for the Mojang username and session services.

    Lookups answer ``None`` when the service has no record: any non-2xx
    status as well as ``204 No Content``. Transport failures are raised as
    :class:`UpstreamError`. Nothing is retried.
    """

    def __init__(
        self,
        api_url: str = "https://api.mojang.com",
        session_url: str = "https://sessionserver.mojang.com",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        """Initialize Mojang client.

        Args:
            api_url: Base URL of the username lookup service
            session_url: Base URL of the profile (session) service
            client: Shared HTTP client, one is created when omitted
            timeout: Request timeout in seconds for a created client
        """
        self.api_url = api_url.rstrip("/")
        self.session_url = session_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: UpstreamSettings, client: Optional[httpx.AsyncClient] = None
    ) -> "MojangClient":
        """Create client from settings."""
        return cls(
            api_url=settings.api_url,
            session_url=settings.session_url,
            client=client,
            timeout=settings.timeout,
        )

    async def _get(self, url: str) -> httpx.Response:
        try:
            return await self.client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Upstream request to {url} failed: {e}")
            raise UpstreamError(f"Upstream request failed: {e}") from e

    @staticmethod
    def _found(response: httpx.Response) -> bool:
        return response.is_success and response.status_code != httpx.codes.NO_CONTENT

    async def fetch_uuid(self, username: str) -> Optional[str]:
        """Look up the UUID of a username.

        Returns:
            UUID (without dashes) or None if not found
        """
        response = await self._get(f"{self.api_url}/users/profiles/minecraft/{username}")
        if not self._found(response):
            logger.info(
                f"Username not found upstream: {username} ({response.status_code})"
            )
            return None

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid username lookup response: {e}") from e

        if not isinstance(body, dict):
            raise UpstreamError(f"Invalid username lookup response: {body!r}")

        return body.get("id")

    async def fetch_profile(self, uuid: str) -> Optional[str]:
        """Look up the profile of a UUID.

        Returns:
            Raw profile JSON text or None if not found
        """
        response = await self._get(
            f"{self.session_url}/session/minecraft/profile/{uuid}"
        )
        if not self._found(response):
            logger.info(f"Profile not found upstream: {uuid} ({response.status_code})")
            return None

        return response.text

    async def fetch_texture(self, url: str) -> bytes:
        """Download texture image bytes."""
        response = await self._get(url)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Texture download from {url} failed: {e}")
            raise UpstreamError(f"Texture download failed: {e}") from e

        return response.content

    async def close(self) -> None:
        """Close the HTTP client if owned."""
        if self._owns_client:
            await self.client.aclose()
