"""
Query-string and update-set construction for issue endpoints.

Only allow-listed keys are read. Malformed values (an 'open' that is not
'true'/'false', an unparseable timestamp, an unknown sort field, a
non-positive limit) are treated as absent.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from core.constants import (
    BOOLEAN_FILTER_FIELDS,
    FILTERABLE_FIELDS,
    MUTABLE_FIELDS,
    SORTABLE_FIELDS,
    TIMESTAMP_FILTER_FIELDS,
)


@dataclass
class IssueQuery:
    """Store query built from a request: equality filters plus ordering and cap."""

    filters: dict[str, Any] = field(default_factory=dict)
    sort: str | None = None
    limit: int | None = None


def parse_bool(value: str) -> bool | None:
    """'true' -> True, 'false' -> False, anything else -> None."""
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_sort(value: str) -> str | None:
    """Map a sort parameter ('field' or '-field') to an ordering key."""
    descending = value.startswith("-")
    column = SORTABLE_FIELDS.get(value[1:] if descending else value)
    if column is None:
        return None
    return f"-{column}" if descending else column


def parse_limit(value: str, max_limit: int) -> int | None:
    try:
        limit = int(value)
    except ValueError:
        return None
    if limit < 1:
        return None
    return min(limit, max_limit)


def build_issue_query(project: str, params: Mapping[str, str], max_limit: int) -> IssueQuery:
    """
    Build the list query for a project from request query parameters.

    Args:
        project: Project from the request path; always part of the filter.
        params: Query parameters (string values).
        max_limit: Upper bound applied to a supplied limit.

    Returns:
        IssueQuery whose filter keys are model column names.
    """
    query = IssueQuery(filters={"project": project})

    for name, column in FILTERABLE_FIELDS.items():
        if name not in params:
            continue
        raw = params[name]
        if name in BOOLEAN_FILTER_FIELDS:
            value = parse_bool(raw)
        elif name in TIMESTAMP_FILTER_FIELDS:
            value = parse_timestamp(raw)
        else:
            value = raw
        if value is not None:
            query.filters[column] = value

    if "sort" in params:
        query.sort = parse_sort(params["sort"])
    if "limit" in params:
        query.limit = parse_limit(params["limit"], max_limit)

    return query


def build_update_set(values: Mapping[str, Any]) -> dict[str, Any]:
    """
    Keep the supplied mutable fields, dropping absent and empty-string values.

    An empty form input never blanks a stored field.
    """
    return {
        name: values[name]
        for name in MUTABLE_FIELDS
        if values.get(name) is not None and values.get(name) != ""
    }
