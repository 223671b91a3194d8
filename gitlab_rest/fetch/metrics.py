"""Metrics collection for the HTTP fetch layer."""

from dataclasses import dataclass, field
from typing import ClassVar


FAILURE_HTTP_ERROR = "HTTP_ERROR"
FAILURE_TRANSPORT = "TRANSPORT"
FAILURE_DECODE = "DECODE"


@dataclass
class RequestMetrics:
    """Metrics for GitLab API requests.

    Singleton class that tracks request counts by status code, retries,
    failures by kind and pagination progress.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_retry_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    pages_fetched_total: int = 0
    items_fetched_total: int = 0

    _instance: ClassVar["RequestMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RequestMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, status_code: int) -> None:
        """Record a request that produced an HTTP response.

        Args:
            status_code: HTTP status code.
        """
        self.http_requests_total[status_code] = (
            self.http_requests_total.get(status_code, 0) + 1
        )

    def record_bytes(self, bytes_received: int) -> None:
        """Record bytes read from a response body."""
        self.http_bytes_total += bytes_received

    def record_retry(self) -> None:
        """Record a retry attempt."""
        self.http_retry_total += 1

    def record_failure(self, kind: str) -> None:
        """Record a failed call.

        Args:
            kind: One of the FAILURE_* constants.
        """
        self.http_failures_total[kind] = self.http_failures_total.get(kind, 0) + 1

    def record_page(self, item_count: int) -> None:
        """Record a fetched page and the number of items it carried."""
        self.pages_fetched_total += 1
        self.items_fetched_total += item_count

    @property
    def request_count(self) -> int:
        """Total number of requests that produced a response."""
        return sum(self.http_requests_total.values())

    def to_dict(self) -> dict[str, int | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_requests_total": dict(self.http_requests_total),
            "http_retry_total": self.http_retry_total,
            "http_failures_total": dict(self.http_failures_total),
            "http_bytes_total": self.http_bytes_total,
            "pages_fetched_total": self.pages_fetched_total,
            "items_fetched_total": self.items_fetched_total,
        }
