"""API middleware for authentication and request logging."""

import logging
import secrets
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from fednotes.core.config import FEDNOTES_API_KEY

logger = logging.getLogger(__name__)

# Paths that don't require authentication
PUBLIC_PATHS = {"/up", "/health", "/docs", "/openapi.json", "/redoc"}


def _is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc")


async def api_key_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """
    Middleware to validate API key authentication.

    Only active when FEDNOTES_API_KEY is set; a local single-user install
    runs without a key. Public paths are always exempt.
    """
    if not FEDNOTES_API_KEY or _is_public(request.url.path):
        return await call_next(request)

    api_key = request.headers.get("X-API-Key")
    if not api_key:
        authorization = request.headers.get("Authorization", "")
        if authorization.startswith("Bearer "):
            api_key = authorization[7:]

    if not api_key:
        return JSONResponse(
            status_code=401,
            content={"error": "Missing X-API-Key header"},
        )

    if not secrets.compare_digest(api_key, FEDNOTES_API_KEY):
        return JSONResponse(
            status_code=401,
            content={"error": "Invalid API key"},
        )

    return await call_next(request)


async def request_logging_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Log method, path, status and duration of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    # Liveness polling would flood the log
    if request.url.path != "/up":
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
    return response
