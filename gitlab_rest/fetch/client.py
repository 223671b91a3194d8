"""Request executor: one HTTP call per request descriptor."""

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from gitlab_rest.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    GZIP_ENCODING,
    HEADER_ACCEPT,
    HEADER_ACCEPT_ENCODING,
    HEADER_CONTENT_LENGTH,
    HEADER_CONTENT_TYPE,
    HEADER_LINK,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    JSON_CONTENT_TYPE,
    PRIVATE_TOKEN_HEADER,
)
from gitlab_rest.fetch.error_translator import translate_error_body
from gitlab_rest.fetch.errors import ErrorRecord, GitLabApiError, ResponseDecodeError
from gitlab_rest.fetch.metrics import (
    FAILURE_DECODE,
    FAILURE_HTTP_ERROR,
    FAILURE_TRANSPORT,
    RequestMetrics,
)
from gitlab_rest.fetch.models import HttpMethod, RequestDescriptor, RetryPolicy
from gitlab_rest.fetch.pagination import PaginatedSequence
from gitlab_rest.fetch.redact import redact_headers, redact_url_credentials
from gitlab_rest.fetch.retry import call_with_retry
from gitlab_rest.observability.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

BodyConsumer = Callable[[Iterator[bytes]], None]


@lru_cache(maxsize=256)
def _adapter_for(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


class RequestExecutor:
    """Executes GitLab API calls with retries and error translation.

    Two request shapes are offered:
    - ``stream``/``execute``: fire the call and optionally hand the raw
      body to a consumer (blob and archive downloads)
    - ``to``: fetch and decode one JSON value into a target type

    List endpoints go through ``get_all``, which returns a lazy
    ``PaginatedSequence``.
    """

    def __init__(self, http_client: httpx.Client, retry_policy: RetryPolicy) -> None:
        """Initialize the executor.

        Args:
            http_client: Configured httpx client; owned by the caller.
            retry_policy: Retry policy applied to every round trip.
        """
        self._http = http_client
        self._retry_policy = retry_policy
        self._metrics = RequestMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    def execute(self, descriptor: RequestDescriptor) -> None:
        """Issue a call and discard the response body.

        Args:
            descriptor: The call to issue.

        Raises:
            GitLabApiError: If the server returns a non-success status.
            httpx.TransportError: If no response was received after retries.
        """
        self.stream(descriptor, None)

    def stream(
        self,
        descriptor: RequestDescriptor,
        consumer: BodyConsumer | None,
    ) -> None:
        """Issue a call and hand the response byte stream to a consumer.

        The connection stays open only while the consumer runs and is
        released on every exit path, including consumer exceptions.

        Args:
            descriptor: The call to issue.
            consumer: Receives an iterator of decompressed body chunks.

        Raises:
            GitLabApiError: If the server returns a non-success status.
            httpx.TransportError: If no response was received after retries.
        """
        request = self._build_request(descriptor)
        with self._open(request, descriptor.method, descriptor.serialize_body()) as response:
            if consumer is not None:
                consumer(response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE))

    def to(self, descriptor: RequestDescriptor, target_type: type[T]) -> T:
        """Issue a call and decode the JSON response body.

        Args:
            descriptor: The call to issue.
            target_type: Type the body is validated into.

        Returns:
            Decoded value.

        Raises:
            GitLabApiError: If the server returns a non-success status.
            ResponseDecodeError: If the body does not match ``target_type``.
            httpx.TransportError: If no response was received after retries.
        """
        request = self._build_request(descriptor)
        with self._open(request, descriptor.method, descriptor.serialize_body()) as response:
            body = response.read()
            self._metrics.record_bytes(len(body))

        result: T = self.decode(body, target_type, str(request.url))
        return result

    def get_all(
        self,
        descriptor: RequestDescriptor,
        item_type: type[T],
    ) -> PaginatedSequence[T]:
        """Create a lazy sequence over a paginated list endpoint.

        No request is issued until the sequence is iterated.

        Args:
            descriptor: GET descriptor of the first page.
            item_type: Type of one list item.

        Returns:
            Re-iterable lazy sequence of items.
        """
        return PaginatedSequence(
            executor=self,
            start_url=descriptor.api_url,
            api_token=descriptor.api_token,
            item_type=item_type,
        )

    def fetch_page(self, url: str, api_token: str | None) -> tuple[bytes, str | None]:
        """Fetch one page of a list endpoint.

        Args:
            url: Absolute page URL.
            api_token: Private token, sent as a header.

        Returns:
            Tuple of (response body, Link header value or None).

        Raises:
            GitLabApiError: If the server returns a non-success status.
            httpx.TransportError: If no response was received after retries.
        """
        headers = self._base_headers()
        if api_token is not None:
            headers[PRIVATE_TOKEN_HEADER] = api_token

        request = self._http.build_request(HttpMethod.GET.value, url, headers=headers)
        with self._open(request, HttpMethod.GET, None) as response:
            body = response.read()
            self._metrics.record_bytes(len(body))
            return body, response.headers.get(HEADER_LINK)

    def decode(self, body: bytes, target_type: type[T], url: str) -> T:
        """Validate a JSON body into a target type.

        Args:
            body: Raw JSON body.
            target_type: Type the body is validated into.
            url: URL of the call, used in the error message.

        Returns:
            Decoded value.

        Raises:
            ResponseDecodeError: If the body does not match ``target_type``.
        """
        try:
            value: T = _adapter_for(target_type).validate_json(body)
        except ValidationError as exc:
            self._metrics.record_failure(FAILURE_DECODE)
            raise ResponseDecodeError(
                url=redact_url_credentials(url),
                target=_type_name(target_type),
                reason=str(exc),
            ) from exc
        return value

    def _base_headers(self) -> dict[str, str]:
        return {
            HEADER_ACCEPT: JSON_CONTENT_TYPE,
            HEADER_ACCEPT_ENCODING: GZIP_ENCODING,
        }

    def _build_request(self, descriptor: RequestDescriptor) -> httpx.Request:
        """Build the transport request for a descriptor.

        Args:
            descriptor: The call to issue.

        Returns:
            Unsent httpx request.
        """
        headers = self._base_headers()
        content: bytes | None = None

        body = descriptor.serialize_body()
        if body is not None:
            headers[HEADER_CONTENT_TYPE] = JSON_CONTENT_TYPE
            content = body.encode("utf-8")
        elif descriptor.method == HttpMethod.PUT:
            # Some servers reject a PUT without a declared length.
            headers[HEADER_CONTENT_LENGTH] = "0"

        return self._http.build_request(
            descriptor.method.value,
            descriptor.api_url,
            headers=headers,
            content=content,
        )

    @contextmanager
    def _open(
        self,
        request: httpx.Request,
        method: HttpMethod,
        body: str | None,
    ) -> Iterator[httpx.Response]:
        """Send a request through the retry policy and yield the response.

        Args:
            request: Request to send.
            method: Method of the call, kept for the error record.
            body: Serialized request body, kept for the error record.

        Yields:
            Successful streaming response; closed when the block exits.

        Raises:
            GitLabApiError: If the server returns a non-success status.
        """
        url = redact_url_credentials(str(request.url))
        log = self._log.bind(method=method.value, url=url)
        log.debug("request_start", headers=redact_headers(dict(request.headers)))
        start_time_ns = time.perf_counter_ns()

        try:
            response = call_with_retry(
                lambda: self._http.send(request, stream=True),
                self._retry_policy,
                log,
            )
        except httpx.TransportError:
            self._metrics.record_failure(FAILURE_TRANSPORT)
            raise

        try:
            self._metrics.record_request(response.status_code)
            log.debug(
                "request_complete",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter_ns() - start_time_ns) / 1_000_000, 2),
            )
            if not HTTP_STATUS_OK_MIN <= response.status_code < HTTP_STATUS_OK_MAX:
                raise self._to_api_error(response, method, url, body)
            yield response
        finally:
            response.close()

    def _to_api_error(
        self,
        response: httpx.Response,
        method: HttpMethod,
        url: str,
        body: str | None,
    ) -> GitLabApiError:
        """Translate a non-success response into an API error.

        Args:
            response: Open error response.
            method: Method of the original call.
            url: Redacted URL of the original call.
            body: Serialized request body, if any.

        Returns:
            Exception ready to be raised.
        """
        message, error_object = translate_error_body(response.read())
        self._metrics.record_failure(FAILURE_HTTP_ERROR)
        record = ErrorRecord(
            status_code=response.status_code,
            message=message,
            error_object=error_object,
            method=method,
            url=url,
            request_body=body,
        )
        return GitLabApiError(record)
