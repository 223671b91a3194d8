"""Query option models for list endpoints."""

from datetime import date, datetime
from typing import Annotated, Any, ClassVar, Literal

from pydantic import Field, field_validator

from gitlab_rest.models.events import EventAction, EventTargetType
from gitlab_rest.models.repository import CommitRefType
from gitlab_rest.query.fields import QueryField, QueryModel, render_date


class EventQuery(QueryModel):
    """Filters for event listings."""

    action: EventAction | None = None
    target_type: EventTargetType | None = None
    before: date | None = None
    after: date | None = None
    scope: str | None = None
    sort: Literal["asc", "desc"] | None = None
    per_page: Annotated[int, Field(ge=1, le=100)] | None = None

    QUERY_FIELDS: ClassVar[dict[str, QueryField]] = {
        "action": QueryField("action"),
        "target_type": QueryField("target_type"),
        "before": QueryField("before", render_date),
        "after": QueryField("after", render_date),
        "scope": QueryField("scope"),
        "sort": QueryField("sort"),
        "per_page": QueryField("per_page"),
    }

    @field_validator("before", "after", mode="before")
    @classmethod
    def truncate_datetime(cls, v: Any) -> Any:
        """Accept datetimes; the API filters on calendar days."""
        if isinstance(v, datetime):
            return v.date()
        return v


class GetCommitsRequest(QueryModel):
    """Filters for commit listings.

    ``max_results`` limits the number of commits read client-side; zero or
    less reads them all. It is not sent to the server.
    """

    ref_name: str | None = None
    path: str | None = None
    first_parent: bool | None = None
    max_results: int = 0

    QUERY_FIELDS: ClassVar[dict[str, QueryField]] = {
        "ref_name": QueryField("ref_name"),
        "path": QueryField("path"),
        "first_parent": QueryField("first_parent"),
    }

    @field_validator("ref_name", "path", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class TreeQuery(QueryModel):
    """Options for repository tree listings."""

    path: str | None = None
    ref: str | None = None
    recursive: bool | None = None

    QUERY_FIELDS: ClassVar[dict[str, QueryField]] = {
        "path": QueryField("path"),
        "ref": QueryField("ref"),
        "recursive": QueryField("recursive"),
    }


class CommitRefsQuery(QueryModel):
    """Options for listing the refs that contain a commit."""

    type: CommitRefType = CommitRefType.ALL

    QUERY_FIELDS: ClassVar[dict[str, QueryField]] = {
        "type": QueryField("type"),
    }
