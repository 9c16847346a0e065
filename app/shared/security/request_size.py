"""
Request body size guard.

Rejects requests whose declared Content-Length exceeds the configured
limit before the body is read.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

HTTP_413 = 413


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Answers 413 when Content-Length is above ``max_bytes``.

    Args:
        app: Wrapped ASGI application.
        max_bytes: Largest accepted body, in bytes.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        super().__init__(app)
        self._max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self._max_bytes:
            logger.warning("Rejected %s %s: body of %s bytes", request.method, request.url.path, declared)
            return JSONResponse(
                status_code=HTTP_413,
                content={
                    "error": "Request too large",
                    "detail": f"Body exceeds {self._max_bytes} bytes",
                },
            )
        return await call_next(request)
