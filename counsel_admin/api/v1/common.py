"""
Shared utilities and dependencies for the v1 routers.

Application errors (``CounselAdminError`` subclasses) propagate to the
handlers in ``counsel_admin.core.exceptions``; routers only translate HTTP
inputs into service calls.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Query, UploadFile

from counsel_admin.core.config import settings
from counsel_admin.core.exceptions import RecordValidationError
from counsel_admin.core.logging import get_api_logger
from counsel_admin.services.image_upload import ImageFile

# Shared logger instance
logger = get_api_logger()


@dataclass
class PageParams:
    cursor: Optional[str]
    limit: int


def get_page_params(
    cursor: Optional[str] = Query(
        None, description="Opaque cursor returned as next_cursor by the previous page"
    ),
    limit: int = Query(
        settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Page size",
    ),
) -> PageParams:
    """Cursor pagination query parameters."""
    return PageParams(cursor=cursor or None, limit=limit)


async def read_image_upload(file: UploadFile) -> ImageFile:
    """
    Read a multipart image into memory.

    Reads at most one byte past ``MAX_IMAGE_SIZE`` so oversized uploads are
    rejected without buffering them whole.
    """
    if not file.filename:
        raise RecordValidationError("Filename is required")

    content = await file.read(settings.MAX_IMAGE_SIZE + 1)
    return ImageFile(
        filename=file.filename,
        content=content,
        content_type=file.content_type,
    )


def log_operation_start(operation: str, **context) -> None:
    """Log the start of an operation consistently."""
    logger.info(f"{operation} started", **context)


def log_operation_success(operation: str, **context) -> None:
    """Log successful operation completion consistently."""
    logger.info(f"{operation} completed successfully", **context)
