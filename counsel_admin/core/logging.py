import logging
import logging.config
import time

import structlog

from counsel_admin.core.config import settings

HEALTH_ENDPOINTS = ("/health", "/ready", "/live")


def configure_logging() -> None:
    """Configure application logging based on settings."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            (
                structlog.processors.JSONRenderer()
                if settings.LOG_FORMAT == "json"
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if settings.LOG_FORMAT == "json":
        formatter_class = "pythonjsonlogger.jsonlogger.JsonFormatter"
        format_string = "%(asctime)s %(name)s %(levelname)s %(message)s"
    else:
        formatter_class = "logging.Formatter"
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": "counsel_admin.core.logging.HealthCheckFilter",
            },
        },
        "formatters": {
            "default": {
                "class": formatter_class,
                "format": format_string,
            },
        },
        "handlers": {
            "default": {
                "formatter": "default",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "formatter": "default",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"],
            },
        },
        "loggers": {
            "": {
                "level": settings.LOG_LEVEL,
                "handlers": ["default"],
                "propagate": False,
            },
            "uvicorn.error": {
                "level": "INFO",
                "handlers": ["default"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["access"],
                "propagate": False,
            },
            # Third-party loggers
            "google": {
                "level": "WARNING",
                "handlers": ["default"],
                "propagate": False,
            },
            "urllib3": {
                "level": "WARNING",
                "handlers": ["default"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "INFO" if settings.DB_ECHO else "WARNING",
                "handlers": ["default"],
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)

    if not settings.DEBUG:
        logging.getLogger("asyncio").setLevel(logging.WARNING)


class RequestLoggingMiddleware:
    """ASGI middleware that logs each HTTP request with its duration."""

    def __init__(self, app):
        self.app = app
        self.logger = structlog.get_logger("request")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["path"] in HEALTH_ENDPOINTS:
            await self.app(scope, receive, send)
            return

        method = scope["method"]
        path = scope["path"]
        start_time = time.perf_counter()
        self.logger.info("Request started", method=method, path=path)

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                self.logger.info(
                    "Response started",
                    method=method,
                    path=path,
                    status_code=message["status"],
                )
            elif message["type"] == "http.response.body" and not message.get(
                "more_body", False
            ):
                self.logger.info(
                    "Request completed",
                    method=method,
                    path=path,
                    duration=round(time.perf_counter() - start_time, 4),
                )
            await send(message)

        await self.app(scope, receive, send_wrapper)


class HealthCheckFilter(logging.Filter):
    """Filter out health check requests from uvicorn access logs."""

    def filter(self, record):
        message = record.getMessage()
        return not any(endpoint in message for endpoint in HEALTH_ENDPOINTS)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def setup_request_logging(app):
    """Setup request logging middleware."""
    if settings.DEBUG:
        app.add_middleware(RequestLoggingMiddleware)


# Application-specific loggers
def get_api_logger() -> structlog.BoundLogger:
    """Get API logger."""
    return get_logger("api")


def get_db_logger() -> structlog.BoundLogger:
    """Get database logger."""
    return get_logger("database")


def get_auth_logger() -> structlog.BoundLogger:
    """Get authentication logger."""
    return get_logger("auth")


def get_service_logger(service_name: str) -> structlog.BoundLogger:
    """Get service-specific logger."""
    return get_logger(f"service.{service_name}")
