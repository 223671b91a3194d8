"""Data models for the HTTP fetch layer."""

from collections.abc import Callable
from enum import Enum
from typing import Annotated, Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from gitlab_rest.fetch.constants import PRIVATE_TOKEN_PARAM


_BODY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


class HttpMethod(str, Enum):
    """HTTP verbs issued by the request executor."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def accepts_body(self) -> bool:
        """Whether a request body is written for this verb."""
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.DELETE)


class RequestDescriptor(BaseModel):
    """Immutable description of one HTTP call.

    The descriptor is built once per logical call and discarded when the
    call returns.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: HttpMethod = Field(description="HTTP verb")
    host_url: Annotated[str, Field(min_length=1, description="Server base URL")]
    path: str = Field(description="Path relative to the host, may carry a query")
    data: Any = Field(default=None, description="Request body, serialized as JSON")
    api_token: str | None = Field(default=None, description="Private token")

    @property
    def url(self) -> str:
        """Absolute URL without credentials."""
        path = self.path if self.path.startswith("/") else "/" + self.path
        return self.host_url.rstrip("/") + path

    @property
    def api_url(self) -> str:
        """Entry URL with the private token appended as a query parameter."""
        if self.api_token is None:
            return self.url
        separator = "&" if "?" in self.path else "?"
        return f"{self.url}{separator}{PRIVATE_TOKEN_PARAM}={self.api_token}"

    @property
    def has_body(self) -> bool:
        """Check if a JSON payload is written for this call."""
        return self.data is not None and self.method.accepts_body

    def serialize_body(self) -> str | None:
        """Serialize the request body to a JSON string.

        Returns:
            JSON text, or None when no payload is written.
        """
        if not self.has_body:
            return None
        raw = _BODY_ADAPTER.dump_json(self.data, by_alias=True, exclude_none=True)
        return raw.decode("utf-8")


def is_transport_failure(error: BaseException) -> bool:
    """Default retry predicate: only failures with no HTTP response.

    Args:
        error: The exception raised by the operation.

    Returns:
        True for connection, DNS, timeout and protocol failures.
    """
    return isinstance(error, httpx.TransportError)


class RetryPolicy(BaseModel):
    """Configuration for retry behavior.

    Retries guard against transport failures. Server error responses are
    never retried; they are translated into an ErrorRecord instead.
    The wait before attempt ``n`` is
    ``interval_ms * (backoff_multiplier ^ (n - 1))``, capped at
    ``max_interval_ms``. The default multiplier keeps the interval fixed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: Annotated[int, Field(ge=1, le=20)] = 3
    interval_ms: Annotated[int, Field(ge=0, le=60000)] = 1000
    max_interval_ms: Annotated[int, Field(ge=0, le=300000)] = 30000
    backoff_multiplier: Annotated[float, Field(ge=1.0, le=5.0)] = 1.0
    predicate: Callable[[BaseException], bool] | None = Field(
        default=None,
        description="Custom retryable-failure check; defaults to transport failures",
    )

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Determine if an operation should be invoked again.

        Args:
            error: The failure raised by the last attempt.
            attempt: Number of the attempt that failed (0-indexed).

        Returns:
            True if another attempt should be made.
        """
        if attempt >= self.max_attempts - 1:
            return False

        check = self.predicate or is_transport_failure
        return bool(check(error))

    def get_delay_ms(self, attempt: int) -> int:
        """Calculate delay before the next attempt.

        Args:
            attempt: Number of the attempt that failed (0-indexed).

        Returns:
            Delay in milliseconds.
        """
        delay = self.interval_ms * (self.backoff_multiplier**attempt)
        return int(min(delay, self.max_interval_ms))
