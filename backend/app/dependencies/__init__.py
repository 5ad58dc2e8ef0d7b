"""
FastAPI dependency injection module.

Provides centralized dependencies for:
- The database handle attached to the application
- Per-request database sessions
- Request body decoding (JSON or form)
"""

from collections.abc import Iterator
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from core.db import DatabaseManager

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

# =============================================================================
# Database Dependencies
# =============================================================================


def get_database(request: Request) -> DatabaseManager:
    """Get the DatabaseManager the application was created with."""
    return request.app.state.database


def get_db(database: DatabaseManager = Depends(get_database)) -> Iterator[Session]:
    """
    Session per request: commit on success, rollback on error.

    Usage:
        @router.get("/issues/{project}")
        def list_issues(db: Session = Depends(get_db)):
            ...
    """
    with database.session() as session:
        yield session


# =============================================================================
# Request Body
# =============================================================================


async def get_request_body(request: Request) -> dict[str, Any]:
    """
    Decode a JSON object or form body into a dict.

    An empty body decodes to {}. Undecodable JSON or a JSON value that is not
    an object is rejected with 400.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    raw = await request.body()
    if not raw.strip():
        return {}

    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not isinstance(payload, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Malformed request body",
        )
    return payload


__all__ = [
    "get_database",
    "get_db",
    "get_request_body",
]
