"""Project and user activity events."""

from datetime import datetime
from enum import Enum

from gitlab_rest.models.base import ResourceModel


class EventAction(str, Enum):
    """Action recorded by an event."""

    CREATED = "created"
    UPDATED = "updated"
    CLOSED = "closed"
    REOPENED = "reopened"
    PUSHED = "pushed"
    COMMENTED = "commented"
    MERGED = "merged"
    JOINED = "joined"
    LEFT = "left"
    DESTROYED = "destroyed"
    EXPIRED = "expired"
    APPROVED = "approved"


class EventTargetType(str, Enum):
    """Kind of object an event refers to."""

    ISSUE = "issue"
    MILESTONE = "milestone"
    MERGE_REQUEST = "merge_request"
    NOTE = "note"
    PROJECT = "project"
    SNIPPET = "snippet"
    USER = "user"
    EPIC = "epic"


class Event(ResourceModel):
    """An activity event."""

    id: int | None = None
    project_id: int | None = None
    action_name: str
    target_id: int | None = None
    target_iid: int | None = None
    target_type: str | None = None
    target_title: str | None = None
    author_id: int | None = None
    author_username: str | None = None
    created_at: datetime | None = None
