"""Endpoint responses and cross-cutting header policy."""

import json
import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from starlette.responses import Response

from .client import MojangClient
from .resolver import IdentityResolver

logger = logging.getLogger(__name__)

NOT_FOUND_BODY = b"Not found"


def cache_control(max_age: int) -> str:
    """Public Cache-Control value for ``max_age`` seconds."""
    return f"public, max-age={max_age}"


@dataclass(frozen=True)
class AssembledResponse:
    """Immutable description of an outbound response."""

    content: bytes
    status_code: int = 200
    headers: tuple[tuple[str, str], ...] = ()
    media_type: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        """Return the value of header ``name`` (case insensitive)."""
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None

    def with_header(self, name: str, value: str) -> "AssembledResponse":
        """Return a copy with header ``name`` set to ``value``."""
        lowered = name.lower()
        headers = tuple((k, v) for k, v in self.headers if k.lower() != lowered)
        return replace(self, headers=headers + ((name, value),))

    def to_response(self) -> Response:
        """Build the Starlette response."""
        return Response(
            content=self.content,
            status_code=self.status_code,
            headers=dict(self.headers),
            media_type=self.media_type,
        )


def not_found() -> AssembledResponse:
    """Plain 404 response."""
    return AssembledResponse(
        content=NOT_FOUND_BODY, status_code=404, media_type="text/plain"
    )


def _json_body(value) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


class HeaderPolicy:
    """Headers applied to every proxied response.

    - ``Access-Control-Allow-Origin`` echoes the request origin when the
      whitelist is empty or lists it
    - ``Origin`` is appended to ``Vary``
    - a default ``Cache-Control`` is set when the endpoint gave none
    """

    def __init__(self, origin_whitelist: Sequence[str], default_max_age: int):
        self.origin_whitelist = list(origin_whitelist)
        self.default_max_age = default_max_age

    def allows(self, origin: Optional[str]) -> bool:
        """Tell whether ``origin`` may read the response."""
        if origin is None:
            return False
        return not self.origin_whitelist or origin in self.origin_whitelist

    def apply(
        self, response: AssembledResponse, origin: Optional[str]
    ) -> AssembledResponse:
        """Return ``response`` with the policy headers applied."""
        if self.allows(origin):
            response = response.with_header("Access-Control-Allow-Origin", origin)

        vary = response.header("Vary")
        if not vary:
            response = response.with_header("Vary", "Origin")
        elif "origin" not in [v.strip().lower() for v in vary.split(",")]:
            response = response.with_header("Vary", f"{vary}, Origin")

        if response.header("Cache-Control") is None:
            response = response.with_header(
                "Cache-Control", cache_control(self.default_max_age)
            )

        return response


class ResponseAssembler:
    """Build the responses of the four proxy endpoints."""

    def __init__(
        self,
        resolver: IdentityResolver,
        client: MojangClient,
        username_ttl: int,
        profile_ttl: int,
        skin_ttl: int,
    ):
        self.resolver = resolver
        self.client = client
        self.username_ttl = username_ttl
        self.profile_ttl = profile_ttl
        self.skin_ttl = skin_ttl

    async def uuid(self, user: str) -> AssembledResponse:
        """``/uuid/<user>``: UUID of a username.

        An unknown user still answers 200, without ``id``/``uuid``.
        """
        uuid = await self.resolver.resolve_uuid(user)
        body = {"id": uuid, "uuid": uuid, "user": user, "name": user}
        return AssembledResponse(
            content=_json_body({k: v for k, v in body.items() if v is not None}),
            headers=(("Cache-Control", cache_control(self.username_ttl)),),
            media_type="application/json",
        )

    async def profile(self, user: str) -> AssembledResponse:
        """``/profile/<user>``: full profile, ``null`` for an unknown user."""
        uuid = await self.resolver.resolve_uuid(user)
        profile = await self.resolver.resolve_profile(uuid)
        if profile is None:
            content = b"null"
        else:
            content = profile.model_dump_json(exclude_unset=True).encode("utf-8")

        return AssembledResponse(
            content=content,
            headers=(("Cache-Control", cache_control(self.profile_ttl)),),
            media_type="application/json",
        )

    async def texture(self, user: str, kind: str) -> AssembledResponse:
        """``/skin/<user>`` and ``/cape/<user>``: texture image bytes."""
        textures = await self.resolver.resolve_textures(user)
        url = getattr(textures, kind)
        if not url:
            logger.debug(f"No {kind} for {user}")
            return not_found()

        content = await self.client.fetch_texture(url)
        return AssembledResponse(
            content=content,
            headers=(("Cache-Control", cache_control(self.skin_ttl)),),
        )

    async def skin(self, user: str) -> AssembledResponse:
        """Skin image of ``user``."""
        return await self.texture(user, "skin")

    async def cape(self, user: str) -> AssembledResponse:
        """Cape image of ``user``."""
        return await self.texture(user, "cape")
