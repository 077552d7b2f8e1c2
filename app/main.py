"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (commissions, custody, break-even, trades, health)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- Monthly custody fee scheduler (started in the lifespan)

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.interfaces.commissions.break_even_router import router as break_even_router
from app.interfaces.commissions.custody_router import router as custody_router
from app.interfaces.commissions.dependencies import (
    build_custody_fee_scheduler,
    get_engine,
    set_custody_fee_scheduler,
)
from app.interfaces.commissions.router import router as commissions_router
from app.interfaces.commissions.trades_router import router as trades_router
from app.interfaces.health import router as health_router
from app.shared.errors.handlers import register_error_handlers
from app.shared.logging import configure_logging
from app.shared.security.headers import SecurityHeadersMiddleware
from app.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: prepare the database and run the custody fee job."""
    scheduler = None
    engine = get_engine()

    if settings.custody_job_enabled:
        scheduler = build_custody_fee_scheduler(engine)
        set_custody_fee_scheduler(scheduler)
        scheduler.start()
    else:
        logger.info("Monthly custody fee job disabled.")

    yield

    if scheduler is not None:
        scheduler.stop()
        set_custody_fee_scheduler(None)


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
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(commissions_router, prefix="/api/v1")
    app.include_router(custody_router, prefix="/api/v1")
    app.include_router(break_even_router, prefix="/api/v1")
    app.include_router(trades_router, prefix="/api/v1")

    return app


app = create_app()
