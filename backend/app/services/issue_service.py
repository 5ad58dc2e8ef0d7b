"""
Issue service - bridges FastAPI endpoints with the issue repository.

Validation and not-found conditions come back as IssueOutcome values carrying
an IssueErrorKind; the router turns each kind into a response. Only
StorageUnavailableError propagates as an exception.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy.orm import Session

from core.constants import OPTIONAL_CREATE_FIELDS, REQUIRED_CREATE_FIELDS
from core.errors import IssueErrorKind
from core.logging import get_logger
from core.models import Issue
from core.repositories import IssueRepository

from ..schemas import IssueCreateRequest, IssueDeleteRequest, IssueUpdateRequest
from .issue_query import build_issue_query, build_update_set

logger = get_logger("api.issue_service")


@dataclass(frozen=True)
class IssueOutcome:
    """Result of a write operation: a payload or an error kind, never both."""

    issue: Issue | None = None
    issue_id: str | None = None
    error: IssueErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: IssueErrorKind, issue_id: str | None = None) -> "IssueOutcome":
        return cls(issue_id=issue_id, error=error)


def list_issues(
    db: Session,
    project: str,
    params: Mapping[str, str],
    max_limit: int,
) -> list[Issue]:
    """
    List a project's issues matching the allow-listed query parameters.

    Args:
        db: Database session.
        project: Project name from the request path.
        params: Raw query parameters.
        max_limit: Cap for a client-supplied limit.

    Returns:
        Matching issues by creation time (ties broken by id) unless a sort was requested.
    """
    query = build_issue_query(project, params, max_limit)
    issues = IssueRepository(db).find(query.filters, sort=query.sort, limit=query.limit)
    logger.debug("issues_listed", project=project, filters=sorted(query.filters), count=len(issues))
    return issues


def create_issue(db: Session, project: str, request: IssueCreateRequest) -> IssueOutcome:
    """
    Validate and insert a new issue.

    Every required field must be a non-empty string; optional fields default
    to "" and the issue starts open. Nothing is written on validation failure.
    """
    values = request.model_dump()
    missing = [name for name in REQUIRED_CREATE_FIELDS if not values.get(name)]
    if missing:
        logger.info("issue_create_rejected", project=project, missing=missing)
        return IssueOutcome.failure(IssueErrorKind.MISSING_REQUIRED_FIELD)

    fields = {name: values[name] for name in REQUIRED_CREATE_FIELDS}
    fields.update({name: values.get(name) or "" for name in OPTIONAL_CREATE_FIELDS})

    repo = IssueRepository(db)
    issue = repo.insert(project=project, open=True, **fields)
    repo.commit()
    logger.info("issue_created", issue_id=issue.id, project=project)
    return IssueOutcome(issue=issue, issue_id=issue.id)


def update_issue(db: Session, request: IssueUpdateRequest) -> IssueOutcome:
    """
    Apply a partial update.

    Checks run in order: missing _id, empty update set, unknown/malformed id.
    Empty-string values count as not supplied.
    """
    issue_id = request.issue_id
    if not issue_id:
        return IssueOutcome.failure(IssueErrorKind.MISSING_ID)

    updates = build_update_set(request.model_dump(exclude={"issue_id"}))
    if not updates:
        return IssueOutcome.failure(IssueErrorKind.NO_UPDATE_FIELDS, issue_id)

    repo = IssueRepository(db)
    issue = repo.update_by_id(issue_id, **updates)
    if issue is None:
        logger.info("issue_update_failed", issue_id=issue_id)
        return IssueOutcome.failure(IssueErrorKind.UPDATE_FAILED, issue_id)
    repo.commit()

    return IssueOutcome(issue=issue, issue_id=issue_id)


def delete_issue(db: Session, request: IssueDeleteRequest) -> IssueOutcome:
    """Remove an issue permanently."""
    issue_id = request.issue_id
    if not issue_id:
        return IssueOutcome.failure(IssueErrorKind.MISSING_ID)

    repo = IssueRepository(db)
    if not repo.delete_by_id(issue_id):
        logger.info("issue_delete_failed", issue_id=issue_id)
        return IssueOutcome.failure(IssueErrorKind.DELETE_FAILED, issue_id)
    repo.commit()

    return IssueOutcome(issue_id=issue_id)
