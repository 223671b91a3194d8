"""Unit tests for lazy Link-header pagination."""

import httpx
import pytest

from gitlab_rest.fetch.client import RequestExecutor
from gitlab_rest.fetch.errors import GitLabApiError, ResponseDecodeError
from gitlab_rest.fetch.metrics import RequestMetrics
from gitlab_rest.fetch.models import HttpMethod, RequestDescriptor, RetryPolicy
from gitlab_rest.fetch.pagination import (
    PageIterator,
    PageState,
    PageStateTransitionError,
    parse_next_link,
)


HOST = "https://gitlab.example.com/api/v4"


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Start every test with fresh metrics."""
    RequestMetrics.reset()


def page_url(page: int) -> str:
    """URL of a page as the server advertises it."""
    return f"{HOST}/projects?page={page}&per_page=20"


def link_to(page: int) -> dict[str, str]:
    """Link header pointing at ``page``."""
    return {"Link": f'<{page_url(page)}>; rel="next", <{page_url(1)}>; rel="first"'}


class FakeServer:
    """Serves numbered pages from a dict and records every request."""

    def __init__(self, pages: dict[int, httpx.Response]) -> None:
        self.pages = pages
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        page = int(request.url.params.get("page", "1"))
        return self.pages[page]

    def executor(self) -> RequestExecutor:
        client = httpx.Client(transport=httpx.MockTransport(self))
        return RequestExecutor(client, RetryPolicy(max_attempts=1, interval_ms=0))


def first_page(token: str | None = "t0ken") -> RequestDescriptor:
    return RequestDescriptor(
        method=HttpMethod.GET, host_url=HOST, path="/projects", api_token=token
    )


class TestParseNextLink:
    """Tests for Link header parsing."""

    def test_next_among_relations(self) -> None:
        """The next relation is found regardless of position."""
        header = (
            '<https://h/p?page=1>; rel="first", '
            '<https://h/p?page=3>; rel="next", '
            '<https://h/p?page=9>; rel="last"'
        )

        assert parse_next_link(header) == "https://h/p?page=3"

    def test_no_next_relation(self) -> None:
        """Last pages carry no next relation."""
        header = '<https://h/p?page=1>; rel="first", <https://h/p?page=9>; rel="last"'

        assert parse_next_link(header) is None

    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_header(self, header: str | None) -> None:
        """Absent headers mean no next page."""
        assert parse_next_link(header) is None

    def test_unquoted_relation(self) -> None:
        """Relations without quotes are accepted."""
        assert parse_next_link("<https://h/p?page=2>; rel=next") == "https://h/p?page=2"


class TestPaginatedSequence:
    """Tests for PaginatedSequence iteration."""

    def test_no_request_until_iterated(self) -> None:
        """Creating the sequence issues no request."""
        server = FakeServer({1: httpx.Response(200, json=[1])})

        server.executor().get_all(first_page(), int)

        assert server.requests == []

    def test_follows_next_links(self) -> None:
        """Two pages of 20 and 5 items take exactly two calls."""
        server = FakeServer(
            {
                1: httpx.Response(200, json=list(range(20)), headers=link_to(2)),
                2: httpx.Response(200, json=list(range(20, 25))),
            }
        )

        items = list(server.executor().get_all(first_page(), int))

        assert items == list(range(25))
        assert len(server.requests) == 2
        metrics = RequestMetrics.get_instance()
        assert metrics.pages_fetched_total == 2
        assert metrics.items_fetched_total == 25

    def test_token_sent_as_header_on_every_page(self) -> None:
        """Pages carry PRIVATE-TOKEN; only the entry URL has the parameter."""
        server = FakeServer(
            {
                1: httpx.Response(200, json=[1], headers=link_to(2)),
                2: httpx.Response(200, json=[2]),
            }
        )

        list(server.executor().get_all(first_page(), int))

        first, second = server.requests
        assert first.headers["PRIVATE-TOKEN"] == "t0ken"
        assert first.url.params["private_token"] == "t0ken"
        assert second.headers["PRIVATE-TOKEN"] == "t0ken"
        assert "private_token" not in second.url.params
        assert str(second.url) == page_url(2)

    def test_anonymous_pages_have_no_token_header(self) -> None:
        """Without a token no credential header is sent."""
        server = FakeServer({1: httpx.Response(200, json=[1])})

        list(server.executor().get_all(first_page(token=None), int))

        assert "PRIVATE-TOKEN" not in server.requests[0].headers

    def test_empty_page_ends_sequence(self) -> None:
        """A zero-item page ends iteration even with a next link."""
        server = FakeServer({1: httpx.Response(200, json=[], headers=link_to(2))})

        items = list(server.executor().get_all(first_page(), int))

        assert items == []
        assert len(server.requests) == 1

    def test_reiteration_restarts(self) -> None:
        """Each iteration is an independent pass from the first page."""
        server = FakeServer(
            {
                1: httpx.Response(200, json=[1, 2], headers=link_to(2)),
                2: httpx.Response(200, json=[3]),
            }
        )
        sequence = server.executor().get_all(first_page(), int)

        assert list(sequence) == [1, 2, 3]
        assert list(sequence) == [1, 2, 3]
        assert len(server.requests) == 4

    def test_interleaved_iterators_are_independent(self) -> None:
        """Two live iterators do not share cursor or buffer."""
        server = FakeServer(
            {
                1: httpx.Response(200, json=[1], headers=link_to(2)),
                2: httpx.Response(200, json=[2]),
            }
        )
        sequence = server.executor().get_all(first_page(), int)

        a, b = iter(sequence), iter(sequence)

        assert next(a) == 1
        assert next(b) == 1
        assert next(a) == 2
        assert list(b) == [2]

    def test_take_stops_fetching(self) -> None:
        """No page past the last wanted item is requested."""
        server = FakeServer(
            {
                1: httpx.Response(200, json=list(range(20)), headers=link_to(2)),
                2: httpx.Response(200, json=list(range(20, 40))),
            }
        )

        items = list(server.executor().get_all(first_page(), int).take(3))

        assert items == [0, 1, 2]
        assert len(server.requests) == 1
        metrics = RequestMetrics.get_instance()
        assert metrics.pages_fetched_total == 1
        assert metrics.items_fetched_total == 20

    def test_take_across_pages(self) -> None:
        """A cap larger than one page continues on the next page."""
        server = FakeServer(
            {
                1: httpx.Response(200, json=[0, 1], headers=link_to(2)),
                2: httpx.Response(200, json=[2, 3]),
            }
        )

        assert list(server.executor().get_all(first_page(), int).take(3)) == [0, 1, 2]

    def test_take_rejects_non_positive(self) -> None:
        """At least one item must be requested."""
        sequence = FakeServer({}).executor().get_all(first_page(), int)

        with pytest.raises(ValueError, match="at least 1"):
            sequence.take(0)

    def test_repeated_next_url_stops(self) -> None:
        """A next link pointing back to a fetched page ends the pass."""
        first = RequestDescriptor(
            method=HttpMethod.GET, host_url=HOST, path="/projects?page=1&per_page=20"
        )
        server = FakeServer(
            {
                1: httpx.Response(200, json=[1], headers=link_to(2)),
                2: httpx.Response(200, json=[2], headers=link_to(1)),
            }
        )

        items = list(server.executor().get_all(first, int))

        assert items == [1, 2]
        assert len(server.requests) == 2

    def test_failed_page_raises_and_ends_pass(self) -> None:
        """A page error propagates after earlier items and ends the pass."""
        server = FakeServer(
            {
                1: httpx.Response(200, json=[1], headers=link_to(2)),
                2: httpx.Response(500, json={"message": "500 Internal Server Error"}),
            }
        )
        iterator = iter(server.executor().get_all(first_page(), int))

        assert next(iterator) == 1
        with pytest.raises(GitLabApiError) as exc_info:
            next(iterator)

        assert exc_info.value.status_code == 500
        assert exc_info.value.record.url == page_url(2)
        assert iterator.state == PageState.DONE
        with pytest.raises(StopIteration):
            next(iterator)

    def test_bad_page_shape_raises_decode_error(self) -> None:
        """Items that do not match the item type raise ResponseDecodeError."""
        server = FakeServer({1: httpx.Response(200, json={"not": "a list"})})

        with pytest.raises(ResponseDecodeError):
            list(server.executor().get_all(first_page(), int))

    def test_repr_hides_token(self) -> None:
        """The token never shows up in the sequence repr."""
        sequence = FakeServer({}).executor().get_all(first_page("glpat-x"), int)

        assert "glpat-x" not in repr(sequence)


class TestPageIterator:
    """Tests for the per-pass state machine."""

    def test_states_through_a_pass(self) -> None:
        """LOADING, DRAINING, LOADING, DRAINING, DONE."""
        server = FakeServer(
            {
                1: httpx.Response(200, json=[1, 2], headers=link_to(2)),
                2: httpx.Response(200, json=[3]),
            }
        )
        iterator: PageIterator[int] = PageIterator(
            server.executor(), page_url(1), None, int
        )

        assert iterator.state == PageState.LOADING
        assert next(iterator) == 1
        assert iterator.state == PageState.DRAINING
        assert iterator.buffered == 1
        assert iterator.cursor == page_url(2)
        assert next(iterator) == 2
        assert iterator.state == PageState.LOADING
        assert next(iterator) == 3
        assert iterator.state == PageState.DONE
        assert iterator.cursor is None

    def test_done_is_terminal(self) -> None:
        """No transition leaves DONE."""
        iterator: PageIterator[int] = PageIterator(
            FakeServer({1: httpx.Response(200, json=[])}).executor(),
            page_url(1),
            None,
            int,
        )
        list(iterator)

        with pytest.raises(PageStateTransitionError):
            iterator._transition_to(PageState.LOADING)
