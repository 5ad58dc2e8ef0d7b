"""
Issue repository: equality-filtered reads and id-based mutation.
"""

from collections.abc import Mapping
from typing import Any

from core.logging import get_logger
from core.models import Issue, is_valid_issue_id, utcnow
from core.models.issue import as_utc

from .base import BaseRepository

logger = get_logger("repository.issue")

_IMMUTABLE_COLUMNS = frozenset({"id", "project", "created_on", "updated_on"})


class IssueRepository(BaseRepository[Issue]):
    """
    Repository for Issue records.

    Malformed identifiers are treated exactly like unknown ones: lookups
    return None and deletes return False without touching the database.
    """

    model = Issue

    def get_by_id(self, issue_id: Any) -> Issue | None:  # type: ignore[override]
        """Get an issue by id, or None when missing or malformed."""
        if not is_valid_issue_id(issue_id):
            return None
        return super().get_by_id(issue_id)

    def insert(self, **fields) -> Issue:
        """
        Persist a new issue and return it with id and timestamps assigned.

        created_on and updated_on are set to the same instant.
        """
        now = utcnow()
        fields.setdefault("created_on", now)
        fields.setdefault("updated_on", fields["created_on"])
        issue = self.create(**fields)
        logger.info("issue_inserted", issue_id=issue.id, project=issue.project)
        return issue

    def find(
        self,
        filters: Mapping[str, Any],
        sort: str | None = None,
        limit: int | None = None,
    ) -> list[Issue]:
        """
        Return every issue whose columns equal all given filter values.

        Args:
            filters: Column name -> expected value. Unknown columns raise ValueError.
            sort: Column name to order by; a leading '-' sorts descending.
                Defaults to creation time, with ties broken by id.
            limit: Maximum number of issues to return.

        Returns:
            List of matching issues (possibly empty).
        """
        conditions = self.filter_conditions(filters)

        with self.storage_guard("find"):
            query = self.session.query(Issue).filter(*conditions)

            if sort:
                descending = sort.startswith("-")
                column_name = sort.lstrip("-")
                if column_name not in Issue.__table__.columns:
                    raise ValueError(f"Unknown sort key: {column_name}")
                column = getattr(Issue, column_name)
                query = query.order_by(column.desc() if descending else column.asc(), Issue.id)
            else:
                query = query.order_by(Issue.created_on.asc(), Issue.id.asc())

            if limit is not None:
                query = query.limit(limit)

            return query.all()

    def update_by_id(self, issue_id: Any, **fields) -> Issue | None:
        """
        Apply the given fields to an issue and refresh updated_on.

        Returns:
            The updated issue, or None when no issue has that id.
        """
        issue = self.get_by_id(issue_id)
        if issue is None:
            return None

        columns = Issue.__table__.columns
        for key in fields:
            if key not in columns or key in _IMMUTABLE_COLUMNS:
                raise ValueError(f"Field is not updatable: {key}")

        with self.storage_guard("update_by_id"):
            for key, value in fields.items():
                setattr(issue, key, value)

            # updated_on never moves backwards, even if the clock does
            previous = as_utc(issue.updated_on)
            issue.updated_on = max(utcnow(), previous)
            self.session.flush()

        logger.info("issue_updated", issue_id=issue.id, fields=sorted(fields))
        return issue

    def delete_by_id(self, issue_id: Any) -> bool:
        """Delete an issue by id. Returns whether a record was removed."""
        if not is_valid_issue_id(issue_id):
            return False
        removed = self.delete(issue_id)
        if removed:
            logger.info("issue_deleted", issue_id=issue_id)
        return removed
