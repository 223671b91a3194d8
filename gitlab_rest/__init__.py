"""Typed client for the GitLab REST API."""

from gitlab_rest.api import GitLabClient, RepositoryClient
from gitlab_rest.fetch import (
    ClientConfig,
    ErrorRecord,
    GitLabApiError,
    PaginatedSequence,
    ResponseDecodeError,
    RetryPolicy,
)


__all__ = [
    "ClientConfig",
    "ErrorRecord",
    "GitLabApiError",
    "GitLabClient",
    "PaginatedSequence",
    "RepositoryClient",
    "ResponseDecodeError",
    "RetryPolicy",
]
