"""Edge cache middleware for whole-response caching."""

import base64
import json
import logging
import re
from typing import Callable, Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from .backends import CacheBackend
from .utils import CacheKeyGenerator

logger = logging.getLogger(__name__)

MAX_AGE_RE = re.compile(r"(?:^|[,\s])max-age\s*=\s*\"?(\d+)\"?", re.IGNORECASE)


def max_age_from(cache_control: Optional[str]) -> Optional[int]:
    """Return the ``max-age`` directive of a Cache-Control value, if any."""
    if not cache_control:
        return None
    match = MAX_AGE_RE.search(cache_control)
    if not match:
        return None
    return int(match.group(1))


class EdgeCacheMiddleware(BaseHTTPMiddleware):
    """Middleware caching complete responses keyed by request URL.

    Intercepts requests to the proxy endpoints and serves the stored
    response, headers included, when one exists. On a miss the downstream
    pipeline runs and its final response is stored for as long as its own
    ``Cache-Control: max-age`` allows. Adds an X-Cache header to indicate
    cache status (HIT/MISS/SKIP/ERROR).
    """

    def __init__(
        self,
        app: ASGIApp,
        cache_backend: CacheBackend,
        key_generator: CacheKeyGenerator,
        cache_paths: Optional[list[str]] = None,
        cache_statuses: Optional[Iterable[int]] = None,
        default_ttl: int = 3600,
        cache_status_header: str = "X-Cache",
    ):
        """Initialize edge cache middleware.

        Args:
            app: ASGI application
            cache_backend: Cache backend implementation
            key_generator: Cache key generator
            cache_paths: URL path prefixes to cache (defaults to the proxy endpoints)
            cache_statuses: Response status codes worth storing
            default_ttl: TTL used when a response carries no max-age
            cache_status_header: Header name for cache status
        """
        super().__init__(app)
        self.cache_backend = cache_backend
        self.key_generator = key_generator
        self.cache_paths = cache_paths or ["/uuid/", "/profile/", "/skin/", "/cape/"]
        self.cache_statuses = set(cache_statuses or [200, 404])
        self.default_ttl = default_ttl
        self.cache_status_header = cache_status_header

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """Process request through the edge cache.

        Args:
            request: HTTP request
            call_next: Next middleware/endpoint handler

        Returns:
            HTTP response with cache status header
        """
        # Skip non-cacheable requests
        if not self._should_cache_request(request):
            response = await call_next(request)
            response.headers[self.cache_status_header] = "SKIP"
            return response

        cache_key = self.key_generator.from_url(str(request.url))

        # Try to get from cache
        try:
            cached_response = await self._get_cached_response(cache_key)
            if cached_response:
                logger.debug(f"Cache HIT for key: {cache_key}")
                cached_response.headers[self.cache_status_header] = "HIT"
                return cached_response
        except Exception as e:
            logger.warning(f"Error retrieving from cache: {e}")

        # Cache miss - call next handler
        logger.debug(f"Cache MISS for key: {cache_key}")
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"Error processing request: {e}")
            error_response = JSONResponse(
                {"detail": "Internal server error"}, status_code=500
            )
            error_response.headers[self.cache_status_header] = "ERROR"
            return error_response

        if response.status_code in self.cache_statuses:
            try:
                await self._cache_response(cache_key, response)
                response.headers[self.cache_status_header] = "MISS"
            except Exception as e:
                logger.error(f"Error caching response: {e}")
                response.headers[self.cache_status_header] = "ERROR"
        else:
            response.headers[self.cache_status_header] = "MISS"

        return response

    def _should_cache_request(self, request: Request) -> bool:
        """Determine if request goes through the edge cache.

        Args:
            request: HTTP request

        Returns:
            True if request path starts with one of the cacheable prefixes
        """
        path = request.url.path
        return any(path.startswith(cache_path) for cache_path in self.cache_paths)

    def _ttl_for(self, response: Response) -> int:
        max_age = max_age_from(response.headers.get("cache-control"))
        if max_age is None:
            return self.default_ttl
        return max_age

    async def _get_cached_response(self, cache_key: str) -> Optional[Response]:
        """Retrieve cached response.

        Args:
            cache_key: Cache key

        Returns:
            Cached response or None
        """
        cached_data = await self.cache_backend.get(cache_key)
        if not cached_data:
            return None

        try:
            response_data = json.loads(cached_data.decode("utf-8"))

            content = response_data.get("content", "")
            if response_data.get("content_type") == "base64":
                content = base64.b64decode(content)

            # Reconstruct response
            return Response(
                content=content,
                status_code=response_data.get("status_code", 200),
                headers=response_data.get("headers", {}),
                media_type=response_data.get("media_type"),
            )

        except Exception as e:
            logger.error(f"Error deserializing cached response: {e}")
            return None

    async def _cache_response(self, cache_key: str, response: Response) -> None:
        """Cache response data.

        Args:
            cache_key: Cache key
            response: HTTP response
        """
        # Read response body
        response_body = b""

        # Handle both async and sync iterators
        if hasattr(response.body_iterator, "__aiter__"):
            async for chunk in response.body_iterator:
                response_body += chunk
        else:
            for chunk in response.body_iterator:
                response_body += chunk

        # Replace original response body iterator with an async generator
        async def body_generator():
            yield response_body

        response.body_iterator = body_generator()

        headers = {
            name: value
            for name, value in response.headers.items()
            if name != self.cache_status_header.lower()
        }

        response_data = {
            "content": base64.b64encode(response_body).decode("ascii"),
            "content_type": "base64",
            "status_code": response.status_code,
            "headers": headers,
            "media_type": getattr(response, "media_type", None),
        }

        serialized_data = json.dumps(response_data).encode("utf-8")
        await self.cache_backend.set(
            cache_key, serialized_data, ttl=self._ttl_for(response)
        )
