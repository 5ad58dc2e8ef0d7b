"""
Error taxonomy for issue operations.

Request-shape and not-found conditions are values (IssueErrorKind) carried in
service results. StorageUnavailableError is the only exception that crosses
the store/handler boundary.
"""

from enum import Enum


class IssueErrorKind(str, Enum):
    """Recoverable issue errors. The value is the stable wire token."""

    MISSING_REQUIRED_FIELD = "required field(s) missing"
    MISSING_ID = "missing _id"
    NO_UPDATE_FIELDS = "no update field(s) sent"
    UPDATE_FAILED = "could not update"
    DELETE_FAILED = "could not delete"


class StorageUnavailableError(Exception):
    """Raised when the underlying database cannot be reached."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        message = f"Storage unavailable during {operation}"
        if cause is not None:
            message = f"{message}: {type(cause).__name__}"
        super().__init__(message)


__all__ = ["IssueErrorKind", "StorageUnavailableError"]
