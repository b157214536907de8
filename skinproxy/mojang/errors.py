"""skinproxy.mojang errors."""

import logging
from typing import Callable

from fastapi import FastAPI
from starlette import status
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class ProxyError(Exception):
    """Base exception for request-aborting proxy faults."""


class UpstreamError(ProxyError):
    """Network or protocol failure while talking to an upstream service."""


class MalformedTextureBlob(ProxyError):
    """Profile textures property could not be decoded."""


DEFAULT_STATUS_CODES = {
    UpstreamError: status.HTTP_502_BAD_GATEWAY,
    MalformedTextureBlob: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def exception_handler_factory(status_code: int) -> Callable:
    """Create a FastAPI exception handler returning ``status_code``."""

    def handler(request: Request, exc: Exception):
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
        return JSONResponse(content={"detail": str(exc)}, status_code=status_code)

    return handler


def add_exception_handlers(
    app: FastAPI, status_codes: dict[type[Exception], int]
) -> None:
    """Add exception handlers to the FastAPI app."""
    for exc, code in status_codes.items():
        app.add_exception_handler(exc, exception_handler_factory(code))
