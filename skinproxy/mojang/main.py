"""skinproxy.mojang Application."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=log_level,
    format="%(levelname)s - %(message)s",
)

import httpx
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from skinproxy.cache import (
    CacheBackend,
    CacheKeyGenerator,
    CacheRedisSettings,
    CacheSettings,
    EdgeCacheMiddleware,
    MemoryCacheBackend,
    RedisCacheBackend,
)

from . import __version__ as skinproxy_version
from .client import MojangClient
from .errors import DEFAULT_STATUS_CODES, add_exception_handlers
from .resolver import IdentityResolver
from .responses import AssembledResponse, HeaderPolicy, ResponseAssembler, not_found
from .settings import ApiSettings, UpstreamSettings

logger = logging.getLogger(__name__)

Handler = Callable[[str], Awaitable[AssembledResponse]]

# Player endpoints answer the same whatever the request method
PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]


def durable_cache_from_settings(
    cache_settings: CacheSettings, redis_settings: CacheRedisSettings
) -> CacheBackend:
    """Redis when a host is configured, in-process cache otherwise."""
    if redis_settings.host:
        logger.info(
            f"Using Redis durable cache at {redis_settings.host}:{redis_settings.port}"
        )
        return RedisCacheBackend.from_settings(redis_settings)

    logger.info("Using in-memory durable cache")
    return MemoryCacheBackend(max_items=cache_settings.max_items)


def create_app(
    api_settings: Optional[ApiSettings] = None,
    upstream_settings: Optional[UpstreamSettings] = None,
    cache_settings: Optional[CacheSettings] = None,
    redis_settings: Optional[CacheRedisSettings] = None,
    durable_cache: Optional[CacheBackend] = None,
    edge_cache: Optional[CacheBackend] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Create the proxy application.

    Cache backends and the upstream HTTP client can be injected, otherwise
    they are built from settings.
    """
    api_settings = api_settings or ApiSettings()
    upstream_settings = upstream_settings or UpstreamSettings()
    cache_settings = cache_settings or CacheSettings()

    if durable_cache is None:
        durable_cache = durable_cache_from_settings(
            cache_settings, redis_settings or CacheRedisSettings()
        )

    if edge_cache is None and cache_settings.edge_enable:
        edge_cache = MemoryCacheBackend(
            max_items=cache_settings.max_items,
            default_ttl=cache_settings.edge_default_ttl,
        )

    key_generator = CacheKeyGenerator(
        cache_settings.namespace, max_key_length=cache_settings.max_key_length
    )
    client = MojangClient.from_settings(upstream_settings, client=http_client)
    resolver = IdentityResolver(
        durable_cache,
        client,
        key_generator,
        username_ttl=api_settings.username_ttl,
        profile_ttl=api_settings.profile_ttl,
    )
    assembler = ResponseAssembler(
        resolver,
        client,
        username_ttl=api_settings.username_ttl,
        profile_ttl=api_settings.profile_ttl,
        skin_ttl=api_settings.skin_ttl,
    )
    policy = HeaderPolicy(
        api_settings.origin_whitelist, default_max_age=api_settings.skin_ttl
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.close()
        await durable_cache.close()
        if edge_cache is not None:
            await edge_cache.close()

    app = FastAPI(
        title=api_settings.name,
        version=skinproxy_version,
        root_path=api_settings.root_path,
        debug=api_settings.debug,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.resolver = resolver
    app.state.assembler = assembler
    app.state.durable_cache = durable_cache
    app.state.edge_cache = edge_cache

    add_exception_handlers(app, DEFAULT_STATUS_CODES)

    async def handle_not_found(request: Request, exc: StarletteHTTPException):
        return not_found().to_response()

    app.add_exception_handler(404, handle_not_found)

    async def proxy(request: Request, handler: Handler, user: str):
        # Only the first segment after the endpoint prefix names the player
        response = await handler(user.split("/")[0])
        response = policy.apply(response, request.headers.get("origin"))
        return response.to_response()

    @app.api_route("/uuid/{user:path}", methods=PROXY_METHODS, tags=["Players"])
    async def get_uuid(request: Request, user: str):
        """UUID of a player."""
        return await proxy(request, assembler.uuid, user)

    @app.api_route("/profile/{user:path}", methods=PROXY_METHODS, tags=["Players"])
    async def get_profile(request: Request, user: str):
        """Profile of a player."""
        return await proxy(request, assembler.profile, user)

    @app.api_route("/skin/{user:path}", methods=PROXY_METHODS, tags=["Textures"])
    async def get_skin(request: Request, user: str):
        """Skin image of a player."""
        return await proxy(request, assembler.skin, user)

    @app.api_route("/cape/{user:path}", methods=PROXY_METHODS, tags=["Textures"])
    async def get_cape(request: Request, user: str):
        """Cape image of a player."""
        return await proxy(request, assembler.cape, user)

    # Health Check Endpoints
    @app.get("/_mgmt/ping", tags=["Liveliness/Readiness"])
    def ping():
        """Ping."""
        return {"message": "PONG"}

    @app.get("/_mgmt/health", tags=["Liveliness/Readiness"])
    async def health():
        """Health check."""
        return {
            "status": "UP",
            "version": skinproxy_version,
            "cache": {
                "durable": await durable_cache.health_check(),
                "edge": await edge_cache.health_check() if edge_cache else None,
            },
            "stats": {
                "durable": await durable_cache.get_stats(),
                "edge": await edge_cache.get_stats() if edge_cache else None,
            },
        }

    if edge_cache is not None:
        app.add_middleware(
            EdgeCacheMiddleware,
            cache_backend=edge_cache,
            key_generator=key_generator,
            default_ttl=cache_settings.edge_default_ttl,
        )

    return app


app = create_app()
