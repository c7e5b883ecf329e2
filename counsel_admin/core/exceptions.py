import uuid
import traceback
from typing import Any, Dict, Optional
from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from counsel_admin.core.config import settings
from counsel_admin.core.logging import get_logger

logger = get_logger(__name__)


class CounselAdminError(Exception):
    """Base exception for the admin application."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class DocumentStoreError(CounselAdminError):
    """Document store read/write failure."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "DOCUMENT_STORE_ERROR", details)


class RecordNotFoundError(CounselAdminError):
    """Requested document does not exist."""

    def __init__(
        self,
        message: str = "Record not found",
        collection: Optional[str] = None,
        record_id: Optional[str] = None,
    ):
        details = {}
        if collection:
            details["collection"] = collection
        if record_id:
            details["id"] = record_id
        super().__init__(message, "NOT_FOUND", details)


class InvalidCursorError(CounselAdminError):
    """Continuation cursor could not be decoded."""

    def __init__(self, message: str = "Invalid pagination cursor"):
        super().__init__(message, "INVALID_CURSOR")


class RecordValidationError(CounselAdminError):
    """Client-side validation failed before any store call was made."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class ConfirmationRequiredError(CounselAdminError):
    """Destructive operation attempted without explicit confirmation."""

    def __init__(self, message: str = "Deletion must be confirmed"):
        super().__init__(message, "CONFIRMATION_REQUIRED")


class RecordBusyError(CounselAdminError):
    """Another update for the same record is still in flight."""

    def __init__(self, record_id: str):
        super().__init__(
            "An update for this record is already in progress",
            "RECORD_BUSY",
            {"id": record_id},
        )


class BlobStoreError(CounselAdminError):
    """Object storage failure."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "BLOB_STORE_ERROR", details)


class ImageUploadError(BlobStoreError):
    """Image upload aborted; the target document was not modified."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.error_code = "IMAGE_UPLOAD_ERROR"


class AuthenticationError(CounselAdminError):
    """Authentication related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "AUTHENTICATION_ERROR", details)


STATUS_CODE_MAP = {
    "AUTHENTICATION_ERROR": status.HTTP_401_UNAUTHORIZED,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID_CURSOR": status.HTTP_400_BAD_REQUEST,
    "CONFIRMATION_REQUIRED": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "RECORD_BUSY": status.HTTP_409_CONFLICT,
    "DOCUMENT_STORE_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
    "BLOB_STORE_ERROR": status.HTTP_502_BAD_GATEWAY,
    "IMAGE_UPLOAD_ERROR": status.HTTP_502_BAD_GATEWAY,
}


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "INTERNAL_ERROR",
    details: Optional[Dict[str, Any]] = None,
    error_id: Optional[str] = None,
    request_path: Optional[str] = None,
) -> JSONResponse:
    """Create standardized error response."""

    error_id = error_id or str(uuid.uuid4())[:8]

    error_response = {
        "error": {
            "code": error_code,
            "message": message,
            "error_id": error_id,
        }
    }

    if details:
        error_response["error"]["details"] = details

    if request_path:
        error_response["error"]["path"] = request_path

    return JSONResponse(status_code=status_code, content=error_response)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    error_id = str(uuid.uuid4())[:8]

    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
        error_id=error_id,
    )

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code="HTTP_ERROR",
        error_id=error_id,
        request_path=str(request.url.path),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    error_id = str(uuid.uuid4())[:8]

    logger.warning(
        "Validation exception occurred",
        errors=exc.errors(),
        path=request.url.path,
        method=request.method,
        error_id=error_id,
    )

    formatted_errors = [
        {
            "field": ".".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Request validation failed",
        error_code="VALIDATION_ERROR",
        details={"validation_errors": formatted_errors},
        error_id=error_id,
        request_path=str(request.url.path),
    )


async def counsel_admin_exception_handler(
    request: Request, exc: CounselAdminError
) -> JSONResponse:
    """Handle custom application exceptions."""
    error_id = str(uuid.uuid4())[:8]

    status_code = STATUS_CODE_MAP.get(
        exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR
    )

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Application exception occurred",
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        path=request.url.path,
        method=request.method,
        error_id=error_id,
    )

    return create_error_response(
        status_code=status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
        error_id=error_id,
        request_path=str(request.url.path),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        error_id=error_id,
        exc_info=True,
    )

    if settings.is_development:
        details = {
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc().split("\n"),
        }
        message = str(exc)
    else:
        details = None
        message = "An unexpected error occurred"

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message=message,
        error_code="INTERNAL_ERROR",
        details=details,
        error_id=error_id,
        request_path=str(request.url.path),
    )


def setup_exception_handlers(app):
    """Setup all exception handlers for the FastAPI app."""

    # Custom application exceptions
    app.add_exception_handler(CounselAdminError, counsel_admin_exception_handler)

    # HTTP exceptions
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Validation errors
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # General exception handler (catch-all)
    app.add_exception_handler(Exception, general_exception_handler)
