"""Lazy pagination over GitLab list endpoints.

A ``PaginatedSequence`` issues no request until it is iterated. Each
iteration gets its own ``PageIterator``, a small state machine that holds
one page in memory and follows the ``rel="next"`` entry of the ``Link``
response header:

    LOADING --(page with items)--> DRAINING --(buffer empty, cursor)--> LOADING
    LOADING --(empty page / no cursor)--> DONE
    DRAINING --(buffer empty, no cursor)--> DONE
"""

from collections import deque
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from gitlab_rest.fetch.constants import LINK_REL_NEXT
from gitlab_rest.fetch.metrics import RequestMetrics
from gitlab_rest.fetch.redact import redact_url_credentials
from gitlab_rest.observability.logging import get_logger


if TYPE_CHECKING:
    from gitlab_rest.fetch.client import RequestExecutor


logger = get_logger(__name__)

T = TypeVar("T")


def parse_next_link(link_header: str | None) -> str | None:
    """Extract the URL of the next page from a Link header.

    Args:
        link_header: Raw header value, e.g.
            ``<https://h/api/v4/projects?page=2>; rel="next", <...>; rel="last"``.

    Returns:
        The next page URL, or None when there is no next relation.

    Examples:
        >>> parse_next_link('<https://h/p?page=2>; rel="next", <https://h/p?page=1>; rel="first"')
        'https://h/p?page=2'
        >>> parse_next_link('<https://h/p?page=1>; rel="first"') is None
        True
    """
    if not link_header:
        return None

    for entry in link_header.split(","):
        target, *params = entry.split(";")
        if any(LINK_REL_NEXT in param for param in params):
            url = target.strip(" \t<>")
            return url or None
    return None


class PageState(str, Enum):
    """State of one pagination pass.

    - LOADING: buffer empty, the page at the cursor is fetched on next pull
    - DRAINING: buffered items are handed out in order
    - DONE: no buffered items and nothing left to fetch
    """

    LOADING = "LOADING"
    DRAINING = "DRAINING"
    DONE = "DONE"


_VALID_TRANSITIONS: dict[PageState, set[PageState]] = {
    PageState.LOADING: {PageState.DRAINING, PageState.DONE},
    PageState.DRAINING: {PageState.LOADING, PageState.DONE},
    PageState.DONE: set(),  # Terminal state
}


class PageStateTransitionError(Exception):
    """Raised when an illegal pagination state transition is attempted."""

    def __init__(self, from_state: PageState, to_state: PageState) -> None:
        """Initialize the transition error.

        Args:
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal pagination state transition: {from_state.value} -> {to_state.value}"
        )


class PageIterator(Generic[T]):
    """One pass over a paginated endpoint.

    Cursor and buffer belong to this instance only. Advancing the same
    instance from several threads is not supported; create one iterator
    per consumer instead.
    """

    def __init__(
        self,
        executor: "RequestExecutor",
        start_url: str,
        api_token: str | None,
        item_type: type[T],
        max_items: int | None = None,
    ) -> None:
        """Initialize the iterator in the LOADING state.

        Args:
            executor: Executor used for page requests.
            start_url: URL of the first page.
            api_token: Private token, sent as a header on every page.
            item_type: Type of one list item.
            max_items: Stop after this many items; no further page is fetched.
        """
        self._executor = executor
        self._api_token = api_token
        self._page_type: Any = list[item_type]  # type: ignore[valid-type]
        self._cursor: str | None = start_url
        self._buffer: deque[T] = deque()
        self._fetched_urls: set[str] = set()
        self._max_items = max_items
        self._yielded = 0
        self._state = PageState.LOADING
        self._metrics = RequestMetrics.get_instance()
        self._log = logger.bind(
            component="fetch",
            start_url=redact_url_credentials(start_url),
        )

    @property
    def state(self) -> PageState:
        """Get the current state."""
        return self._state

    @property
    def cursor(self) -> str | None:
        """URL of the next page to fetch, if any."""
        return self._cursor

    @property
    def buffered(self) -> int:
        """Number of items of the current page not handed out yet."""
        return len(self._buffer)

    def __iter__(self) -> "PageIterator[T]":
        return self

    def __next__(self) -> T:
        if self._state == PageState.LOADING:
            self._load_page()

        if self._state == PageState.DONE:
            raise StopIteration

        item = self._buffer.popleft()
        self._yielded += 1
        if self._max_items is not None and self._yielded >= self._max_items:
            self._buffer.clear()
            self._cursor = None
            self._transition_to(PageState.DONE)
        elif not self._buffer:
            self._transition_to(
                PageState.LOADING if self._cursor is not None else PageState.DONE
            )
        return item

    def _load_page(self) -> None:
        """Fetch the page at the cursor and refill the buffer."""
        url = self._cursor
        if url is None or url in self._fetched_urls:
            self._cursor = None
            self._transition_to(PageState.DONE)
            return

        try:
            body, link_header = self._executor.fetch_page(url, self._api_token)
            items: list[T] = self._executor.decode(body, self._page_type, url)
        except Exception:
            # A failed page ends the pass, like an exception inside a generator.
            self._cursor = None
            self._transition_to(PageState.DONE)
            raise

        self._fetched_urls.add(url)
        self._cursor = parse_next_link(link_header)
        self._metrics.record_page(len(items))
        self._log.debug(
            "page_fetched",
            url=redact_url_credentials(url),
            items=len(items),
            has_next=self._cursor is not None,
        )

        # An empty page ends the pass even if the server still sent a next link.
        if not items:
            self._cursor = None
            self._transition_to(PageState.DONE)
            return

        self._buffer.extend(items)
        self._transition_to(PageState.DRAINING)

    def _transition_to(self, target: PageState) -> None:
        """Move to a new state.

        Args:
            target: The target state.

        Raises:
            PageStateTransitionError: If the transition is invalid.
        """
        if target not in _VALID_TRANSITIONS[self._state]:
            raise PageStateTransitionError(self._state, target)
        self._state = target


class PaginatedSequence(Generic[T]):
    """Lazy, re-iterable sequence over a paginated list endpoint.

    Every ``iter()`` starts a fresh pass at the start URL; passes do not
    share state and are not resumable.
    """

    def __init__(
        self,
        executor: "RequestExecutor",
        start_url: str,
        api_token: str | None,
        item_type: type[T],
        max_items: int | None = None,
    ) -> None:
        """Initialize the sequence.

        Args:
            executor: Executor used for page requests.
            start_url: URL of the first page.
            api_token: Private token for page requests.
            item_type: Type of one list item.
            max_items: Optional cap on the number of items per pass.
        """
        self._executor = executor
        self._start_url = start_url
        self._api_token = api_token
        self._item_type = item_type
        self._max_items = max_items

    @property
    def start_url(self) -> str:
        """URL of the first page."""
        return self._start_url

    def __iter__(self) -> PageIterator[T]:
        # TODO: send the token only as the PRIVATE-TOKEN header once the
        # entry URL no longer needs the private_token query parameter.
        return PageIterator(
            executor=self._executor,
            start_url=self._start_url,
            api_token=self._api_token,
            item_type=self._item_type,
            max_items=self._max_items,
        )

    def take(self, count: int) -> "PaginatedSequence[T]":
        """Limit every pass to the first ``count`` items.

        Pages beyond the one holding the last wanted item are not fetched.

        Args:
            count: Maximum number of items, at least 1.

        Returns:
            New sequence over the same endpoint.
        """
        if count < 1:
            msg = f"count must be at least 1, got {count}"
            raise ValueError(msg)
        return PaginatedSequence(
            executor=self._executor,
            start_url=self._start_url,
            api_token=self._api_token,
            item_type=self._item_type,
            max_items=count,
        )

    def __repr__(self) -> str:
        return f"PaginatedSequence({redact_url_credentials(self._start_url)!r})"
