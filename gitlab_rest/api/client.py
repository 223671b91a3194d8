"""GitLab client entry point."""

from types import TracebackType
from typing import Any, TypeVar, overload

import httpx

from gitlab_rest.api.repository import RepositoryClient
from gitlab_rest.fetch.client import BodyConsumer, RequestExecutor
from gitlab_rest.fetch.config import ClientConfig
from gitlab_rest.fetch.models import HttpMethod, RequestDescriptor, RetryPolicy
from gitlab_rest.fetch.pagination import PaginatedSequence
from gitlab_rest.fetch.redact import redact_url_credentials
from gitlab_rest.fetch.transport import build_http_client, escape_path_segment
from gitlab_rest.models.events import Event
from gitlab_rest.models.jobs import Job, JobStatus
from gitlab_rest.observability.logging import get_logger
from gitlab_rest.query.models import EventQuery
from gitlab_rest.settings.app import AppSettings, get_settings


logger = get_logger(__name__)

T = TypeVar("T")


class GitLabClient:
    """Typed access to a GitLab REST API.

    ``host_url`` is the API root, e.g. ``https://gitlab.example.com/api/v4``.
    Paths passed to the verb methods are relative to it. The transport is
    configured once here and shared by every call of this client; close the
    client (or use it as a context manager) to release its connections.
    """

    def __init__(
        self,
        host_url: str,
        api_token: str | None = None,
        config: ClientConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            host_url: API root URL.
            api_token: Private token; anonymous access when None.
            config: Client configuration.
            transport: Optional httpx transport override.
        """
        self._host_url = host_url.rstrip("/")
        self._api_token = api_token
        self._config = config or ClientConfig()
        self._http = build_http_client(self._config, transport)
        self._executor = RequestExecutor(self._http, self._config.retry_policy)
        self._log = logger.bind(
            component="api",
            host=redact_url_credentials(self._host_url),
        )

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "GitLabClient":
        """Create a client from environment settings.

        Args:
            settings: Settings to use; loaded from the environment when None.
            transport: Optional httpx transport override.

        Returns:
            Configured client.
        """
        settings = settings or get_settings()
        config = ClientConfig(
            timeout_seconds=settings.gitlab_timeout_seconds,
            retry_policy=RetryPolicy(max_attempts=settings.gitlab_max_attempts),
        )
        return cls(
            host_url=settings.gitlab_url,
            api_token=settings.gitlab_token,
            config=config,
            transport=transport,
        )

    @property
    def host_url(self) -> str:
        """API root URL."""
        return self._host_url

    @property
    def config(self) -> ClientConfig:
        """Client configuration."""
        return self._config

    @property
    def executor(self) -> RequestExecutor:
        """Request executor shared by all calls of this client."""
        return self._executor

    def descriptor(
        self,
        method: HttpMethod,
        path: str,
        data: Any = None,
    ) -> RequestDescriptor:
        """Build the descriptor of one call against this server."""
        return RequestDescriptor(
            method=method,
            host_url=self._host_url,
            path=path,
            data=data,
            api_token=self._api_token,
        )

    def get(self, path: str, target_type: type[T]) -> T:
        """GET one resource and decode it into ``target_type``."""
        return self._executor.to(self.descriptor(HttpMethod.GET, path), target_type)

    @overload
    def post(self, path: str, data: Any = None, target_type: None = None) -> None: ...

    @overload
    def post(self, path: str, data: Any, target_type: type[T]) -> T: ...

    def post(
        self, path: str, data: Any = None, target_type: type[T] | None = None
    ) -> T | None:
        """POST a JSON body; decode the response when a type is given."""
        return self._send(HttpMethod.POST, path, data, target_type)

    @overload
    def put(self, path: str, data: Any = None, target_type: None = None) -> None: ...

    @overload
    def put(self, path: str, data: Any, target_type: type[T]) -> T: ...

    def put(
        self, path: str, data: Any = None, target_type: type[T] | None = None
    ) -> T | None:
        """PUT a JSON body; decode the response when a type is given."""
        return self._send(HttpMethod.PUT, path, data, target_type)

    def delete(self, path: str, data: Any = None) -> None:
        """DELETE a resource."""
        self._send(HttpMethod.DELETE, path, data, None)

    def get_all(self, path: str, item_type: type[T]) -> PaginatedSequence[T]:
        """Lazily list every item of a paginated endpoint."""
        return self._executor.get_all(self.descriptor(HttpMethod.GET, path), item_type)

    def stream(self, path: str, consumer: BodyConsumer) -> None:
        """GET a resource and hand its raw body to ``consumer``."""
        self._executor.stream(self.descriptor(HttpMethod.GET, path), consumer)

    def repository(self, project: int | str) -> RepositoryClient:
        """Access the repository of a project.

        Args:
            project: Numeric project id or namespaced path.

        Returns:
            Repository facade bound to this client.
        """
        return RepositoryClient(self, project)

    def events(self, query: EventQuery | None = None) -> PaginatedSequence[Event]:
        """List events of the authenticated user."""
        return self.get_all(self._with_query("/events", query), Event)

    def project_events(
        self,
        project: int | str,
        query: EventQuery | None = None,
    ) -> PaginatedSequence[Event]:
        """List events of a project."""
        path = f"/projects/{escape_path_segment(project)}/events"
        return self.get_all(self._with_query(path, query), Event)

    def project_jobs(
        self,
        project: int | str,
        scope: JobStatus | None = None,
    ) -> PaginatedSequence[Job]:
        """List CI jobs of a project, optionally filtered by status."""
        path = f"/projects/{escape_path_segment(project)}/jobs"
        if scope is not None:
            path += f"?scope={scope.value}"
        return self.get_all(path, Job)

    def close(self) -> None:
        """Release pooled connections."""
        self._http.close()
        self._log.debug("client_closed")

    def __enter__(self) -> "GitLabClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _send(
        self,
        method: HttpMethod,
        path: str,
        data: Any,
        target_type: type[T] | None,
    ) -> T | None:
        descriptor = self.descriptor(method, path, data)
        if target_type is None:
            self._executor.execute(descriptor)
            return None
        return self._executor.to(descriptor, target_type)

    @staticmethod
    def _with_query(path: str, query: EventQuery | None) -> str:
        return query.apply_to(path) if query is not None else path
