"""FastAPI application setup and configuration."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ibcrm import __version__
from ibcrm.api.middleware.error_handler import setup_exception_handlers
from ibcrm.api.middleware.logging import RequestLoggingMiddleware, setup_logging
from ibcrm.api.middleware.rate_limit import RateLimitMiddleware
from ibcrm.api.middleware.timeout import RequestTimeoutMiddleware
from ibcrm.api.routers import auth_router, health_router, users_router
from ibcrm.api.schemas import ErrorResponse
from ibcrm.shared.config import get_settings
from ibcrm.shared.database import shutdown, startup

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Authentication failed"},
    422: {"model": ErrorResponse, "description": "Validation error"},
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Opens the database on startup and disposes of it on shutdown.
    """
    await startup()
    yield
    await shutdown()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()
    setup_logging()

    application = FastAPI(
        title="IB Recruiting CRM API",
        description="Account, session and profile management for the recruiting CRM.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    cors_origins = settings.cors_origins_list
    if settings.is_production and not cors_origins:
        logger.warning(
            "No CORS_ORIGINS configured in production. "
            "API will not be accessible from browsers."
        )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "Accept",
            "Origin",
            "X-Requested-With",
            "X-Request-ID",
        ],
        max_age=600,
    )

    setup_exception_handlers(application)

    # Added last-to-first: logging wraps rate limiting, which wraps the timeout
    application.add_middleware(
        RequestTimeoutMiddleware,
        timeout_seconds=settings.request_timeout_seconds,
    )
    application.add_middleware(
        RateLimitMiddleware,
        enabled=settings.rate_limit_enabled,
    )
    application.add_middleware(RequestLoggingMiddleware)

    application.include_router(
        health_router,
        prefix="/health",
        tags=["Health"],
    )
    application.include_router(
        auth_router,
        prefix="/auth",
        tags=["Authentication"],
        responses=ERROR_RESPONSES,
    )
    application.include_router(
        users_router,
        prefix="/users",
        tags=["Users"],
        responses=ERROR_RESPONSES,
    )

    return application


# Create app instance
app = create_app()
