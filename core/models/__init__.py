"""
SQLAlchemy models for the Issue Tracker.

Single source of truth for all database models.

Usage:
    from core.models import Issue
"""

from core.db import Base
from .issue import Issue, is_valid_issue_id, new_issue_id, utcnow

__all__ = [
    # Base
    "Base",
    # Issue
    "Issue",
    "is_valid_issue_id",
    "new_issue_id",
    "utcnow",
]
