"""
Application constants for the Issue Tracker.

Field allow-lists used to build store filters and update sets. Client-supplied
keys outside these lists never reach a query.
"""

# =============================================================================
# Issue Fields
# =============================================================================

# Wire name of the identifier field
ID_FIELD = "_id"

REQUIRED_CREATE_FIELDS = ("issue_title", "issue_text", "created_by")

OPTIONAL_CREATE_FIELDS = ("assigned_to", "status_text")

# Fields a PUT may overwrite. project, created_on and updated_on are never client-writable.
MUTABLE_FIELDS = (
    "issue_title",
    "issue_text",
    "created_by",
    "assigned_to",
    "status_text",
    "open",
)

STRING_FILTER_FIELDS = (
    "issue_title",
    "issue_text",
    "created_by",
    "assigned_to",
    "status_text",
)

BOOLEAN_FILTER_FIELDS = ("open",)

TIMESTAMP_FILTER_FIELDS = ("created_on", "updated_on")

# Query parameter name -> model attribute. Everything else in a query string is ignored.
FILTERABLE_FIELDS = {
    ID_FIELD: "id",
    **{name: name for name in STRING_FILTER_FIELDS},
    **{name: name for name in BOOLEAN_FILTER_FIELDS},
    **{name: name for name in TIMESTAMP_FILTER_FIELDS},
}

SORTABLE_FIELDS = {
    ID_FIELD: "id",
    "project": "project",
    **{name: name for name in STRING_FILTER_FIELDS},
    "open": "open",
    "created_on": "created_on",
    "updated_on": "updated_on",
}

# =============================================================================
# Response Tokens
# =============================================================================

RESULT_UPDATED = "successfully updated"
RESULT_DELETED = "successfully deleted"
