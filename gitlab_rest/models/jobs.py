"""CI job records."""

from datetime import datetime
from enum import Enum

from gitlab_rest.models.base import ResourceModel


class JobStatus(str, Enum):
    """Status of a CI job.

    ``MANUAL`` means the job is pending until a user starts it.
    """

    UNKNOWN = "unknown"
    RUNNING = "running"
    PENDING = "pending"
    FAILED = "failed"
    SUCCESS = "success"
    CREATED = "created"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    MANUAL = "manual"


class Job(ResourceModel):
    """A CI job of a pipeline."""

    id: int
    name: str
    status: JobStatus = JobStatus.UNKNOWN
    stage: str | None = None
    ref: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    web_url: str | None = None
