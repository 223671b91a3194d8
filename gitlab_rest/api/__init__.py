"""Client entry point and resource facades."""

from gitlab_rest.api.client import GitLabClient
from gitlab_rest.api.repository import RepositoryClient


__all__ = ["GitLabClient", "RepositoryClient"]
