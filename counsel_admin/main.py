"""FastAPI Application Entry Point.

Admin dashboard backend for the legal-services platform:
- Lawyer onboarding review (approve / disapprove)
- Read-only payment transactions
- Blog authoring with cover images in Google Cloud Storage
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from counsel_admin.core.config import settings
from counsel_admin.core.logging import configure_logging, setup_request_logging, get_logger
from counsel_admin.core.exceptions import setup_exception_handlers
from counsel_admin.core.db_client import db
from counsel_admin.core.middleware import (
    setup_cors_middleware,
    setup_timing_middleware,
    setup_trusted_host_middleware,
)

# Configure logging first
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info(
        "Starting application",
        project_name=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
    )

    startup_tasks = []

    try:
        if settings.is_development:
            await db.create_tables()
            startup_tasks.append("Database tables created/verified")

        if await db.test_connection():
            startup_tasks.append("Document store connected")
        else:
            logger.warning("Database connection test failed")
    except (SQLAlchemyError, OSError) as e:
        logger.error("Failed to initialize database", error=str(e))
        if settings.is_production:
            raise

    logger.info("Application startup completed", tasks=startup_tasks)

    yield

    logger.info("Shutting down application")
    await db.close_all()
    logger.info("Application shutdown completed")


API_DESCRIPTION = """# Counsel Admin API

## Overview
Back office for the legal-services platform: review lawyer applications,
inspect payment transactions and publish blog posts.

## Authentication
Single admin login:
- `POST /api/v1/auth/login` returns a session token
- **Header**: `Authorization: Bearer <session_token>`

## Pagination
List endpoints return `{"items": [...], "next_cursor": "...", "has_more": true}`.
Pass `next_cursor` back as `cursor` to load the next page.
"""

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=API_DESCRIPTION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.DEBUG else None,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Setup middleware (CORS first, then trusted hosts)
setup_cors_middleware(app)
setup_trusted_host_middleware(app)

# Setup exception handlers AFTER CORS middleware
setup_exception_handlers(app)

# Setup request logging
setup_request_logging(app)

setup_timing_middleware(app)


# Include health router (root level endpoints)
from counsel_admin.api.health import router as health_router  # noqa: E402

app.include_router(health_router, tags=["Health"])

from counsel_admin.api.v1.auth import router as auth_router  # noqa: E402
from counsel_admin.api.v1.lawyers import router as lawyers_router  # noqa: E402
from counsel_admin.api.v1.transactions import router as transactions_router  # noqa: E402
from counsel_admin.api.v1.blog_posts import router as blog_posts_router  # noqa: E402

app.include_router(
    auth_router, prefix=f"{settings.API_V1_STR}/auth", tags=["Authentication"]
)
app.include_router(lawyers_router, prefix=settings.API_V1_STR, tags=["Lawyers"])
app.include_router(
    transactions_router, prefix=settings.API_V1_STR, tags=["Transactions"]
)
app.include_router(blog_posts_router, prefix=settings.API_V1_STR, tags=["Blog Posts"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "counsel_admin.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )
