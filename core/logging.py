"""Structured logging configuration for the Issue Tracker."""

import logging
import sys
import time
from collections.abc import Mapping, MutableMapping
from functools import lru_cache
from typing import Any

import structlog
from structlog.types import Processor

APP_CONTEXT = "issue_tracker"


def _json_output() -> bool:
    """JSON lines unless LOG_JSON is off or the app runs in debug mode."""
    from .config import get_settings

    settings = get_settings()
    return settings.log_json and not settings.debug


def _add_app_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any] | str | bytes | bytearray | tuple[Any, ...]:
    event_dict["app"] = APP_CONTEXT
    return event_dict


def get_processors(json_output: bool) -> list[Processor]:
    """Get structlog processors for the chosen renderer."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _add_app_context,
    ]

    if json_output:
        return shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return shared_processors + [
        structlog.dev.ConsoleRenderer(
            colors=False,
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """Configure structured logging. Call once at application startup."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=get_processors(_json_output()),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


# =============================================================================
# Context Management
# =============================================================================


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in all subsequent log entries."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_context_value(key: str, default: str = "-") -> str:
    """Read a bound context variable, e.g. the current request_id."""
    return structlog.contextvars.get_contextvars().get(key, default)


# =============================================================================
# FastAPI Integration
# =============================================================================


class RequestLoggingMiddleware:
    """
    ASGI middleware that logs one entry when a request arrives and one when
    its response has been sent, then clears the bound context.

    Must sit inside RequestIDMiddleware so both entries carry request_id.
    """

    def __init__(self, app):
        self.app = app
        self._logger: structlog.stdlib.BoundLogger | None = None

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        if self._logger is None:
            self._logger = get_logger("http")
        return self._logger

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        method = scope.get("method", "")
        path = scope.get("path", "")
        query = scope.get("query_string", b"").decode("latin-1")

        self.logger.info("request_started", method=method, path=path, query=query or None)

        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if status_code >= 500:
                log_method = self.logger.error
            elif status_code >= 400:
                log_method = self.logger.warning
            else:
                log_method = self.logger.info

            log_method(
                "request_complete",
                method=method,
                path=path,
                status_code=status_code,
                duration_seconds=round(time.perf_counter() - start_time, 3),
            )

            clear_context()


# =============================================================================
# Lazy-loaded Module Loggers
# =============================================================================


class _LazyLogger:
    """Defers get_logger() until first use so importing never configures logging."""

    def __init__(self, name: str):
        self._name = name
        self._logger: structlog.stdlib.BoundLogger | None = None

    def __getattr__(self, name: str):
        if self._logger is None:
            self._logger = get_logger(self._name)
        return getattr(self._logger, name)


db_logger = _LazyLogger("database")


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "get_context_value",
    "RequestLoggingMiddleware",
    "db_logger",
]
