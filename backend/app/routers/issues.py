"""
Issue endpoints scoped to a project.

    GET    /issues/{project}   list issues matching query filters
    POST   /issues/{project}   create an issue
    PUT    /issues/{project}   partially update an issue by _id
    DELETE /issues/{project}   delete an issue by _id

Recoverable errors are answered with 200 and an {"error": ...} body.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.config import Settings, get_settings
from core.constants import RESULT_DELETED, RESULT_UPDATED

from ..dependencies import get_db, get_request_body
from ..schemas import (
    IssueActionResponse,
    IssueCreateRequest,
    IssueDeleteRequest,
    IssueErrorResponse,
    IssueResponse,
    IssueUpdateRequest,
)
from ..services import issue_service
from ..services.issue_service import IssueOutcome

router = APIRouter(prefix="/issues", tags=["issues"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    200: {"model": IssueErrorResponse, "description": "Issue or error object"},
}


def _error_response(outcome: IssueOutcome) -> JSONResponse:
    payload = IssueErrorResponse(error=outcome.error.value, issue_id=outcome.issue_id)
    return JSONResponse(content=payload.model_dump(by_alias=True, exclude_none=True))


@router.get("/{project}", response_model=list[IssueResponse])
def list_issues(
    project: str,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    List a project's issues.

    Any issue field may be passed as a query parameter for exact matching;
    `open` takes "true"/"false". `sort` orders by a field ("-field" for
    descending) and `limit` caps the count.
    """
    issues = issue_service.list_issues(
        db,
        project,
        request.query_params,
        max_limit=settings.issue_list_max_limit,
    )
    return [IssueResponse.model_validate(issue) for issue in issues]


@router.post("/{project}", response_model=IssueResponse, responses=_ERROR_RESPONSES)
def create_issue(
    project: str,
    body: dict[str, Any] = Depends(get_request_body),
    db: Session = Depends(get_db),
):
    """Create an issue. issue_title, issue_text and created_by are required."""
    outcome = issue_service.create_issue(db, project, IssueCreateRequest.model_validate(body))
    if not outcome.ok:
        return _error_response(outcome)
    return IssueResponse.model_validate(outcome.issue)


@router.put("/{project}", response_model=IssueActionResponse, responses=_ERROR_RESPONSES)
def update_issue(
    project: str,
    body: dict[str, Any] = Depends(get_request_body),
    db: Session = Depends(get_db),
):
    """Overwrite the non-empty fields sent alongside _id."""
    outcome = issue_service.update_issue(db, IssueUpdateRequest.model_validate(body))
    if not outcome.ok:
        return _error_response(outcome)
    return IssueActionResponse(result=RESULT_UPDATED, issue_id=outcome.issue_id)


@router.delete("/{project}", response_model=IssueActionResponse, responses=_ERROR_RESPONSES)
def delete_issue(
    project: str,
    body: dict[str, Any] = Depends(get_request_body),
    db: Session = Depends(get_db),
):
    """Delete the issue identified by _id."""
    outcome = issue_service.delete_issue(db, IssueDeleteRequest.model_validate(body))
    if not outcome.ok:
        return _error_response(outcome)
    return IssueActionResponse(result=RESULT_DELETED, issue_id=outcome.issue_id)
