"""
Exception handlers for the Issue Tracker API.

Response shapes:
- HTTP errors (400 malformed body, 404, 405): {"detail", "status_code"}
- A pydantic model rejecting its input: 422 with the error list
- Store unreachable: 503 {"error": "storage unavailable"}
- Anything else: 500 with a generic message

Request IDs are logged server-side but never included in a response body.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException

from core.errors import StorageUnavailableError
from core.logging import get_context_value, get_logger

logger = get_logger("backend.errors")

STORAGE_UNAVAILABLE = "storage unavailable"


def _response_payload(detail: str, status_code: int) -> dict:
    return {
        "detail": detail,
        "status_code": status_code,
    }


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.warning(
            "http_exception",
            detail=exc.detail,
            status_code=exc.status_code,
            path=request.url.path,
            request_id=get_context_value("request_id"),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_response_payload(str(exc.detail), exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        errors = exc.errors(include_url=False, include_context=False)
        logger.warning(
            "validation_error",
            model=exc.title,
            error_count=exc.error_count(),
            request_id=get_context_value("request_id"),
        )
        return JSONResponse(
            status_code=422,
            content={
                **_response_payload("Validation error", 422),
                "errors": errors,
            },
        )

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError):
        logger.error(
            "storage_unavailable",
            operation=exc.operation,
            method=request.method,
            path=request.url.path,
            error=str(exc),
            request_id=get_context_value("request_id"),
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": STORAGE_UNAVAILABLE},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=get_context_value("request_id"),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_response_payload("Internal server error", 500),
        )
