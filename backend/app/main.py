"""
FastAPI application entry point.

Uses structured logging from core.logging module. The database handle is
created here and handed to the app; it is opened when the app starts and
disposed when it shuts down.

Run with:
    uvicorn backend.app.main:app
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import Settings, get_settings
from core.db import DatabaseManager
from core.logging import RequestLoggingMiddleware, configure_logging, get_logger

from .error_handlers import register_exception_handlers
from .middleware.request_id import RequestIDMiddleware
from .routers import issues as issues_router

logger = get_logger("api")


def check_database_health(
    database: DatabaseManager, max_retries: int = 3, retry_delay: float = 2.0
) -> bool:
    """
    Check database connectivity with retry logic.

    Args:
        database: Initialized database handle
        max_retries: Maximum number of connection attempts
        retry_delay: Seconds to wait between retries

    Returns:
        True if database is reachable

    Raises:
        RuntimeError: If database is unreachable after all retries
    """
    for attempt in range(max_retries):
        result = database.health_check()
        if result["healthy"]:
            logger.info("database_health_check_passed", attempt=attempt + 1)
            return True
        logger.warning(
            "database_health_check_failed",
            attempt=attempt + 1,
            max_retries=max_retries,
            error=result["error"],
        )
        if attempt < max_retries - 1:
            time.sleep(retry_delay * (attempt + 1))

    raise RuntimeError(
        f"Database unreachable after {max_retries} attempts. "
        "Check DATABASE_URL configuration and database server status."
    )


def create_app(
    database: DatabaseManager | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        database: Database handle to serve requests from. A new one is
            created from settings.database_url when omitted.
        settings: Settings override; defaults to get_settings().
    """
    settings = settings or get_settings()
    database = database or DatabaseManager()

    configure_logging(level="DEBUG" if settings.debug else settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("app_startup", app_name=settings.app_name)

        database.initialize(settings.database_url)
        database.create_all_tables()
        logger.info("database_initialized")

        check_database_health(database)

        yield

        logger.info("app_shutdown")
        database.dispose()

    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        # Only allow methods actually used by the API
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # Structured request logging, inside the request ID middleware so entries carry the ID
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    def health_check():
        """
        Health check endpoint (liveness probe).

        Returns minimal information to avoid exposing infrastructure details.
        """
        return {"status": "ok"}

    @app.get("/health/ready", tags=["health"])
    def readiness_check():
        """
        Readiness check endpoint.

        Returns 200 if the database answers, 503 if not.
        """
        checks = {"database": database.health_check()["healthy"]}

        if not checks["database"]:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "checks": checks},
            )

        return {"status": "ready", "checks": checks}

    app.include_router(issues_router.router, prefix=settings.api_prefix)

    return app


app = create_app()
