"""Middleware configuration for FastAPI application.

Provides:
- CORS middleware setup
- Trusted host middleware (production)
- Request timing middleware
"""

import time
from typing import List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from counsel_admin.core.config import settings
from counsel_admin.core.logging import get_logger

logger = get_logger(__name__)


def setup_cors_middleware(app: FastAPI) -> None:
    """Configure CORS for the dashboard front end."""
    cors_origins = settings.resolved_cors_origins

    logger.info(
        "CORS configured",
        environment=settings.ENVIRONMENT,
        origins=cors_origins,
        credentials=settings.CORS_CREDENTIALS,
        methods=settings.CORS_METHODS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
        expose_headers=["X-Process-Time"],
    )


def setup_trusted_host_middleware(app: FastAPI) -> None:
    """Restrict Host headers in production."""
    if not settings.is_production:
        return

    allowed_hosts: List[str] = list(settings.ALLOWED_HOST_PATTERNS)
    if settings.FRONTEND_DOMAIN:
        allowed_hosts.append(settings.FRONTEND_DOMAIN)
        allowed_hosts.append(f"*.{settings.FRONTEND_DOMAIN}")

    app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)


def setup_timing_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(round(process_time, 4))
        return response


def setup_all_middleware(app: FastAPI) -> None:
    """Setup all middleware in order; CORS first so preflight requests work."""
    setup_cors_middleware(app)
    setup_trusted_host_middleware(app)
    setup_timing_middleware(app)
