"""Unit tests for the GitLab client entry point."""

import json

import httpx
import pytest

from gitlab_rest.api.client import GitLabClient
from gitlab_rest.api.repository import RepositoryClient
from gitlab_rest.fetch.errors import GitLabApiError
from gitlab_rest.fetch.metrics import RequestMetrics
from gitlab_rest.models.events import Event, EventAction
from gitlab_rest.models.jobs import Job, JobStatus
from gitlab_rest.query.models import EventQuery
from gitlab_rest.settings.app import AppSettings


HOST = "https://gitlab.example.com/api/v4"


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Start every test with fresh metrics."""
    RequestMetrics.reset()


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_client(recorder: Recorder, token: str | None = "t0ken") -> GitLabClient:
    return GitLabClient(HOST, api_token=token, transport=httpx.MockTransport(recorder))


class TestVerbs:
    """Tests for the generic verb methods."""

    def test_get_decodes(self) -> None:
        """GET decodes into the requested type."""
        recorder = Recorder(httpx.Response(200, json={"id": 5, "name": "lint"}))

        with make_client(recorder) as client:
            job = client.get("/projects/1/jobs/5", Job)

        assert job == Job(id=5, name="lint")
        assert recorder.last.url.path == "/api/v4/projects/1/jobs/5"
        assert recorder.last.url.params["private_token"] == "t0ken"

    def test_post_without_type_discards_body(self) -> None:
        """POST without a target type returns None."""
        recorder = Recorder(httpx.Response(201, json={"id": 1}))

        with make_client(recorder) as client:
            result = client.post("/projects/1/star", {"note": "x"})

        assert result is None
        assert recorder.last.method == "POST"
        assert json.loads(recorder.last.content) == {"note": "x"}

    def test_put_with_type(self) -> None:
        """PUT decodes the response when asked."""
        recorder = Recorder(httpx.Response(200, json={"id": 9, "name": "build"}))

        with make_client(recorder) as client:
            job = client.put("/projects/1/jobs/9/retry", None, Job)

        assert job.name == "build"
        assert recorder.last.method == "PUT"
        assert recorder.last.headers["Content-Length"] == "0"

    def test_delete(self) -> None:
        """DELETE issues the call and returns nothing."""
        recorder = Recorder(httpx.Response(204))

        with make_client(recorder) as client:
            client.delete("/projects/1/jobs/9/artifacts")

        assert recorder.last.method == "DELETE"

    def test_error_propagates(self) -> None:
        """Server errors surface as GitLabApiError."""
        recorder = Recorder(httpx.Response(404, json={"message": "404 Not found"}))

        with make_client(recorder) as client, pytest.raises(GitLabApiError) as exc_info:
            client.get("/projects/404", Job)

        assert exc_info.value.status_code == 404

    def test_stream(self) -> None:
        """stream hands the raw body to the consumer."""
        recorder = Recorder(httpx.Response(200, content=b"raw"))
        chunks: list[bytes] = []

        with make_client(recorder) as client:
            client.stream("/projects/1/jobs/5/trace", chunks.extend)

        assert b"".join(chunks) == b"raw"


class TestListings:
    """Tests for paginated listings."""

    def test_events_with_query(self) -> None:
        """Event filters are sent as query parameters."""
        recorder = Recorder(
            httpx.Response(200, json=[{"id": 1, "action_name": "pushed to"}])
        )

        with make_client(recorder) as client:
            events = list(client.events(EventQuery(action=EventAction.PUSHED)))

        assert events == [Event(id=1, action_name="pushed to")]
        assert recorder.last.url.params["action"] == "pushed"
        assert recorder.last.headers["PRIVATE-TOKEN"] == "t0ken"

    def test_project_events_escapes_path(self) -> None:
        """Namespaced project paths are one escaped segment."""
        recorder = Recorder(httpx.Response(200, json=[]))

        with make_client(recorder) as client:
            list(client.project_events("group/app"))

        assert recorder.last.url.raw_path.startswith(
            b"/api/v4/projects/group%2Fapp/events"
        )

    def test_project_jobs_scope(self) -> None:
        """Job listings filter by status scope."""
        recorder = Recorder(
            httpx.Response(200, json=[{"id": 3, "name": "deploy", "status": "manual"}])
        )

        with make_client(recorder) as client:
            jobs = list(client.project_jobs(7, JobStatus.MANUAL))

        assert jobs[0].status == JobStatus.MANUAL
        assert recorder.last.url.params["scope"] == "manual"

    def test_unknown_fields_ignored(self) -> None:
        """Extra fields returned by newer servers do not break decoding."""
        recorder = Recorder(
            httpx.Response(200, json=[{"id": 3, "name": "x", "coverage": 91.5}])
        )

        with make_client(recorder) as client:
            jobs = list(client.project_jobs(7))

        assert jobs == [Job(id=3, name="x")]


class TestConstruction:
    """Tests for client construction."""

    def test_host_trailing_slash_removed(self) -> None:
        """The host URL is normalized."""
        client = GitLabClient(HOST + "/")

        assert client.host_url == HOST
        client.close()

    def test_repository_facade(self) -> None:
        """repository() binds a facade to this client."""
        with GitLabClient(HOST) as client:
            assert isinstance(client.repository("group/app"), RepositoryClient)

    def test_from_settings(self) -> None:
        """Settings feed the host, token, timeout and attempts."""
        settings = AppSettings(
            GITLAB_URL="https://git.internal/api/v4",
            GITLAB_TOKEN="glpat-env",
            GITLAB_TIMEOUT_SECONDS=30,
            GITLAB_MAX_ATTEMPTS=5,
        )
        recorder = Recorder(httpx.Response(200, json={"id": 1, "name": "a"}))

        with GitLabClient.from_settings(
            settings, transport=httpx.MockTransport(recorder)
        ) as client:
            client.get("/jobs/1", Job)

        assert client.host_url == "https://git.internal/api/v4"
        assert client.config.timeout_seconds == 30
        assert client.config.retry_policy.max_attempts == 5
        assert recorder.last.url.params["private_token"] == "glpat-env"
