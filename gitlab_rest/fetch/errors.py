"""Error types for the fetch layer.

Server error responses surface as a single exception type,
``GitLabApiError``, which carries an immutable ``ErrorRecord``. Transport
failures are not wrapped: the ``httpx`` exception reaches the caller as is.
"""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from gitlab_rest.fetch.models import HttpMethod


class ErrorRecord(BaseModel):
    """Normalized description of a failed remote call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=100, le=999, description="HTTP status code")
    message: str = Field(description="Message extracted from the error body")
    error_object: dict[str, Any] | None = Field(
        default=None, description="Parsed JSON error body, if it was an object"
    )
    method: HttpMethod = Field(description="Method of the original call")
    url: Annotated[str, Field(min_length=1, description="Redacted call URL")]
    request_body: str | None = Field(
        default=None, description="Serialized request body, if one was sent"
    )

    def describe(self) -> str:
        """Build the human-readable failure description.

        Returns:
            One-line description including the original call.
        """
        text = (
            f"GitLab server returned an error ({self.status_code}): "
            f"{self.message}. Original call: {self.method.value} {self.url}"
        )
        if self.request_body is not None:
            text += f". With data {self.request_body}"
        return text


class GitLabApiError(Exception):
    """Raised when the server answers with a non-success status.

    Attributes:
        record: The structured error record.
    """

    def __init__(self, record: ErrorRecord) -> None:
        """Initialize the API error.

        Args:
            record: Structured description of the failure.
        """
        super().__init__(record.describe())
        self.record = record

    @property
    def status_code(self) -> int:
        """HTTP status code of the failed call."""
        return self.record.status_code

    @property
    def error_message(self) -> str:
        """Message extracted from the server error body."""
        return self.record.message

    @property
    def error_object(self) -> dict[str, Any] | None:
        """Parsed server error body, if it was a JSON object."""
        return self.record.error_object


class ResponseDecodeError(Exception):
    """Raised when a successful response does not match the expected shape.

    Attributes:
        url: Redacted URL of the call.
        target: Name of the type the body was decoded into.
    """

    def __init__(self, url: str, target: str, reason: str) -> None:
        """Initialize the decode error.

        Args:
            url: Redacted URL of the call.
            target: Name of the expected type.
            reason: Underlying validation or parse failure.
        """
        self.url = url
        self.target = target
        super().__init__(f"Cannot decode response of {url} as {target}: {reason}")
