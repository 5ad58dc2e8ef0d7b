"""
Issue SQLAlchemy model.
"""

import re
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.db import Base

_ISSUE_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_issue_id() -> str:
    """Generate a new opaque issue identifier (UUID4 as 32 hex chars)."""
    return uuid.uuid4().hex


def is_valid_issue_id(value: Any) -> bool:
    """Return True when value has the store's identifier format."""
    return isinstance(value, str) and bool(_ISSUE_ID_PATTERN.match(value))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Issue(Base):
    """
    A tracked work item scoped to a project.

    project is a plain string tag, not a foreign key. id, project and
    created_on never change after insert; updated_on is refreshed by every
    successful update.
    """
    __tablename__ = "issues"
    __table_args__ = (
        Index("ix_issues_project_open", "project", "open"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_issue_id)
    project: Mapped[str] = mapped_column(String(255), index=True)
    issue_title: Mapped[str] = mapped_column(String(512))
    issue_text: Mapped[str] = mapped_column(Text)
    created_by: Mapped[str] = mapped_column(String(255))
    assigned_to: Mapped[str] = mapped_column(String(255), default="")
    status_text: Mapped[str] = mapped_column(String(255), default="")
    open: Mapped[bool] = mapped_column(Boolean, default=True)
    created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<Issue {self.id} project={self.project!r} open={self.open}>"
