# app/middleware/middleware.py
"""
Middleware components for the blog CMS backend.

This module contains middleware for security headers, request logging
with request ids, and CORS handling. It also contains the lifespan event
handler that validates configuration, checks the database and disposes
the engine on shutdown.
"""

from asyncio import get_event_loop
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import getLogger
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from rich.traceback import install
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from uvloop import Loop

from app.configs import file_logger, settings
from app.db import check_connection, close_db
from app.errors import ConfigurationError
from app.monitoring import bind_request_id, clear_context, configure_logging
from app.services.storage import get_storage_service
from app.utils.helpers import get_summary, host

logger = file_logger(getLogger(__name__))

REQUEST_ID_HEADER = "X-Request-ID"

install()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Manage application startup and shutdown.

    Startup fails with ``ConfigurationError`` when the database URL or a
    Cloudinary credential is missing, and with ``DatabaseConnectionError``
    when the database cannot be reached.
    """
    # Startup
    configure_logging()
    logger.info(f"Starting {app.title}...")

    if missing := settings.missing_required():
        error = ConfigurationError("Invalid application configuration", missing=missing)
        logger.critical(error.detail)
        raise error

    try:
        await check_connection()
        get_storage_service()

        logger.info(f"is uvloop: {type(get_event_loop()) is Loop}")
        logger.info("Services initialized successfully")
        logger.info("Services:")
        logger.info(f"  - Backend API: http://localhost:{settings.PORT}")
        logger.info(f"  - API Documentation: http://localhost:{settings.PORT}/docs")
        logger.info(f"  - Health Check: http://localhost:{settings.PORT}/health")

    except Exception:
        logger.exception("Failed to initialize services")
        raise

    yield

    # Shutdown
    logger.info(f"Shutting down {app.title}...")
    try:
        await close_db()
        logger.info("Services cleaned up successfully")
    except Exception:
        logger.exception("Error during service cleanup")


def configure_cors(app: FastAPI) -> None:
    """Allow the admin dashboard and the public website as browser origins."""
    allowed_origins = settings.cors_origins
    if settings.ENVIRONMENT == "development":
        allowed_origins += [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Log request summary and timing information under a request id."""

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        bind_request_id(request_id)

        start_time = perf_counter()
        summary = get_summary(request)

        route_info = summary or f"{request.method} {request.url.path}"
        logger.info(f"Request: {route_info}, from ip: {host(request)}")

        try:
            response = await call_next(request)
            duration = perf_counter() - start_time

            logger.info(
                f"Response: {response.status_code} for {request.method} {request.url.path} "
                f"in {duration:.2f}s",
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers to all responses."""

        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response
