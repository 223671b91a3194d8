"""Plain data records returned by the GitLab API."""

from gitlab_rest.models.base import ResourceModel
from gitlab_rest.models.events import Event, EventAction, EventTargetType
from gitlab_rest.models.jobs import Job, JobStatus
from gitlab_rest.models.repository import (
    Commit,
    CommitRefType,
    Diff,
    Ref,
    Tree,
    TreeEntryType,
)


__all__ = [
    "Commit",
    "CommitRefType",
    "Diff",
    "Event",
    "EventAction",
    "EventTargetType",
    "Job",
    "JobStatus",
    "Ref",
    "ResourceModel",
    "Tree",
    "TreeEntryType",
]
