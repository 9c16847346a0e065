"""
Rate limiting for the analytics API.

A single slowapi limiter keyed by client address. Endpoints that run
the quote pipeline or compute indicators opt into the heavy limit with
``@limiter.limit(settings.rate_limit_heavy)``.
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import settings

HTTP_429 = 429

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit_default])


async def rate_limit_exceeded_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return a 429 in the shared ErrorResponse shape."""
    return JSONResponse(
        status_code=HTTP_429,
        content={"error": "Rate limit exceeded", "detail": str(exc.detail)},
    )
