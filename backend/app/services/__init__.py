"""
Backend services for the Issue Tracker.
"""

from . import issue_query, issue_service

__all__ = [
    "issue_query",
    "issue_service",
]
