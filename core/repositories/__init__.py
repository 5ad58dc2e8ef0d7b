"""
Repository pattern implementations for data access.

Repositories provide a clean abstraction over database operations and are
bound to a single session (one unit of work per request).

Usage:
    from core.repositories import IssueRepository

    with database.session() as session:
        repo = IssueRepository(session)
        issues = repo.find({"project": "apitest", "open": True})
"""

from .base import BaseRepository
from .issue_repository import IssueRepository

__all__ = [
    "BaseRepository",
    "IssueRepository",
]
