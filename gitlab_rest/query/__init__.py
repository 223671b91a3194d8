"""Declarative query-parameter mapping for list endpoints."""

from gitlab_rest.query.fields import QueryField, QueryModel, render_date, render_value
from gitlab_rest.query.models import (
    CommitRefsQuery,
    EventQuery,
    GetCommitsRequest,
    TreeQuery,
)


__all__ = [
    "CommitRefsQuery",
    "EventQuery",
    "GetCommitsRequest",
    "QueryField",
    "QueryModel",
    "TreeQuery",
    "render_date",
    "render_value",
]
