"""
Pydantic schemas for request and response validation.

Request schemas ignore unknown keys; only allow-listed fields are read.
Scalars sent for text fields are stored as their JSON text ("5", "true");
structured values (objects, arrays) count as not supplied.
"""

import json
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

from core.models.issue import as_utc

_TEXT_FIELDS = ("issue_title", "issue_text", "created_by", "assigned_to", "status_text")


def _coerce_open(value: Any) -> bool | None:
    """'true' -> True, any other non-empty string -> False, '' or any other type -> not supplied."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value == "":
            return None
        return value == "true"
    return None


def _coerce_id(value: Any) -> str | None:
    """Any non-string _id becomes its JSON text, which never matches a stored id."""
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


def _coerce_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return None
    return json.dumps(value)


# =============================================================================
# Requests
# =============================================================================


class IssueCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    issue_title: str | None = None
    issue_text: str | None = None
    created_by: str | None = None
    assigned_to: str | None = None
    status_text: str | None = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def normalize_text(cls, v: Any) -> str | None:
        return _coerce_text(v)


class IssueUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    issue_id: str | None = Field(default=None, alias="_id")
    issue_title: str | None = None
    issue_text: str | None = None
    created_by: str | None = None
    assigned_to: str | None = None
    status_text: str | None = None
    open: bool | None = None

    @field_validator("issue_id", mode="before")
    @classmethod
    def normalize_id(cls, v: Any) -> str | None:
        return _coerce_id(v)

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def normalize_text(cls, v: Any) -> str | None:
        return _coerce_text(v)

    @field_validator("open", mode="before")
    @classmethod
    def normalize_open(cls, v: Any) -> bool | None:
        return _coerce_open(v)


class IssueDeleteRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    issue_id: str | None = Field(default=None, alias="_id")

    @field_validator("issue_id", mode="before")
    @classmethod
    def normalize_id(cls, v: Any) -> str | None:
        return _coerce_id(v)


# =============================================================================
# Responses
# =============================================================================


class IssueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    project: str
    issue_title: str
    issue_text: str
    created_by: str
    assigned_to: str = ""
    status_text: str = ""
    open: bool = True
    created_on: datetime
    updated_on: datetime

    @field_serializer("created_on", "updated_on")
    def serialize_timestamp(self, value: datetime) -> str:
        return as_utc(value).isoformat()


class IssueActionResponse(BaseModel):
    """Acknowledgment for a successful update or delete."""

    model_config = ConfigDict(populate_by_name=True)

    result: str
    issue_id: str = Field(
        validation_alias=AliasChoices("_id", "issue_id"), serialization_alias="_id"
    )


class IssueErrorResponse(BaseModel):
    """Recoverable error. _id is echoed when the request carried one."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    issue_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("_id", "issue_id"),
        serialization_alias="_id",
    )
