"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (health and analytics)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, body size limit, rate limiting)
- Logging configuration

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.interfaces.analytics.dependencies import (
    get_alert_evaluator,
    get_alert_repository,
    get_ledger,
    get_portfolio_repository,
)
from app.interfaces.analytics.router import router as analytics_router
from app.interfaces.health import router as health_router
from app.shared.errors.handlers import register_error_handlers
from app.shared.logging import configure_logging
from app.shared.security.headers import SecurityHeadersMiddleware
from app.shared.security.request_size import RequestSizeLimitMiddleware
from app.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load stored state on startup and flush it on shutdown."""
    ledger = get_ledger()
    evaluator = get_alert_evaluator()
    logger.info(
        "%s %s started: %d holdings, %d alerts",
        settings.project_name,
        settings.version,
        len(ledger.holdings()),
        len(evaluator.alerts()),
    )

    yield

    get_portfolio_repository().save(ledger.portfolio())
    get_alert_repository().save(evaluator.alerts())
    logger.info("State saved, shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(analytics_router, prefix="/api/v1")

    return app


app = create_app()
