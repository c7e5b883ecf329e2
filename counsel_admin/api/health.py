"""Health check and monitoring endpoints.

Provides endpoints for:
- Basic health checks
- Detailed service status
- Kubernetes readiness/liveness probes
"""

import asyncio
import time
from typing import Any, Dict

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from counsel_admin.core.blob_store import get_blob_store
from counsel_admin.core.config import settings
from counsel_admin.core.db_client import db
from counsel_admin.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])

STARTED_AT = time.time()


@router.get("/")
async def root() -> Dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "running",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/health",
        "status_endpoint": "/status",
    }


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint with document store connectivity verification.

    Returns 200 if healthy, 503 if the database is unavailable.
    """
    db_available = await db.test_connection(timeout=5.0)

    if not db_available:
        logger.warning("Health check failed: database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "timestamp": time.time(),
                "version": settings.VERSION,
                "database": "unavailable",
            },
        )

    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "database": "connected",
    }


@router.get("/status")
async def detailed_status() -> Dict[str, Any]:
    """Detailed status endpoint with service health checks."""
    db_available = await db.test_connection(timeout=5.0)

    blob_store = get_blob_store()
    blob_available = await asyncio.to_thread(blob_store.health_check)

    return {
        "application": {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG,
            "status": "healthy" if db_available else "degraded",
        },
        "services": {
            "document_store": {
                "status": "connected" if db_available else "unavailable",
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
            },
            "blob_store": {
                "status": "connected" if blob_available else "unavailable",
                "bucket": blob_store.bucket_name,
                "initialized": blob_store.is_initialized,
            },
        },
        "configuration": {
            "cors_origins": settings.resolved_cors_origins,
            "api_prefix": settings.API_V1_STR,
            "log_level": settings.LOG_LEVEL,
            "log_format": settings.LOG_FORMAT,
            "default_page_size": settings.DEFAULT_PAGE_SIZE,
        },
        "system": {
            "timestamp": time.time(),
            "uptime": round(time.time() - STARTED_AT, 3),
        },
    }


@router.get("/ready")
async def readiness_check() -> Dict[str, Any]:
    """Readiness probe endpoint for Kubernetes."""
    db_available = await db.test_connection(timeout=5.0)

    if not db_available:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "ready": False,
                "reason": "Database not ready",
                "timestamp": time.time(),
            },
        )

    return {"ready": True, "timestamp": time.time()}


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """Liveness probe endpoint for Kubernetes."""
    return {"alive": True, "timestamp": time.time()}
