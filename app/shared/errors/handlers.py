"""
Centralized error handlers for FastAPI.

Maps analytics domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.analytics.errors import (
    AnalyticsDomainError,
    InsufficientHistoryError,
    InvalidHoldingError,
    InvalidParameterError,
    NotFoundError,
    StaleQuoteError,
)

logger = logging.getLogger(__name__)

HTTP_404 = 404
HTTP_409 = 409
HTTP_422 = 422
HTTP_500 = 500
HTTP_503 = 503


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(InvalidHoldingError)
    async def handle_invalid_holding(
        _request: Request, exc: InvalidHoldingError
    ) -> JSONResponse:
        """Handle rejected holdings (non-positive shares or price)."""
        logger.warning("Invalid holding: %s", exc.reason)
        return _error_response(HTTP_422, "Invalid holding", exc.reason)

    @app.exception_handler(InvalidParameterError)
    async def handle_invalid_parameter(
        _request: Request, exc: InvalidParameterError
    ) -> JSONResponse:
        """Handle malformed indicator, timeframe or alert parameters."""
        logger.warning("Invalid parameter %s: %s", exc.name, exc.reason)
        return _error_response(HTTP_422, "Invalid parameter", f"{exc.name}: {exc.reason}")

    @app.exception_handler(NotFoundError)
    async def handle_not_found(
        _request: Request, exc: NotFoundError
    ) -> JSONResponse:
        """Handle lookups and removals of absent identifiers."""
        logger.warning("%s not found: %s", exc.kind, exc.identifier)
        return _error_response(HTTP_404, f"{exc.kind} not found")

    @app.exception_handler(StaleQuoteError)
    async def handle_stale_quote(
        _request: Request, exc: StaleQuoteError
    ) -> JSONResponse:
        """Handle a provider outage when no snapshot is known yet."""
        logger.warning("Stale quote: %s (%s)", exc.symbol, exc.reason)
        return _error_response(HTTP_503, "Market data unavailable")

    @app.exception_handler(InsufficientHistoryError)
    async def handle_insufficient_history(
        _request: Request, exc: InsufficientHistoryError
    ) -> JSONResponse:
        """Handle series requests for stocks without stored history."""
        logger.warning("No history for %s", exc.symbol)
        return _error_response(HTTP_409, "Price history unavailable")

    @app.exception_handler(AnalyticsDomainError)
    async def handle_analytics_domain(
        _request: Request, exc: AnalyticsDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled analytics domain errors."""
        logger.error("Unhandled analytics domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
