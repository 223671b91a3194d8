"""HTTP execution core for the GitLab REST client.

This module provides:
- A request executor with JSON bodies and gzip responses
- A bounded, interval-based retry policy for transport failures
- Translation of server error bodies into structured error records
- Lazy, restartable pagination that follows Link header ``next`` relations
- Header and URL redaction for logging
- Metrics collection for observability
"""

from gitlab_rest.fetch.client import RequestExecutor
from gitlab_rest.fetch.config import ClientConfig, TlsVersion
from gitlab_rest.fetch.error_translator import translate_error_body
from gitlab_rest.fetch.errors import ErrorRecord, GitLabApiError, ResponseDecodeError
from gitlab_rest.fetch.metrics import RequestMetrics
from gitlab_rest.fetch.models import (
    HttpMethod,
    RequestDescriptor,
    RetryPolicy,
    is_transport_failure,
)
from gitlab_rest.fetch.pagination import (
    PageIterator,
    PageState,
    PaginatedSequence,
    parse_next_link,
)
from gitlab_rest.fetch.redact import redact_headers, redact_url_credentials
from gitlab_rest.fetch.retry import call_with_retry
from gitlab_rest.fetch.transport import (
    build_http_client,
    build_ssl_context,
    escape_path_segment,
)


__all__ = [
    # Executor
    "RequestExecutor",
    # Config
    "ClientConfig",
    "TlsVersion",
    # Models
    "HttpMethod",
    "RequestDescriptor",
    "RetryPolicy",
    "is_transport_failure",
    # Retry
    "call_with_retry",
    # Errors
    "ErrorRecord",
    "GitLabApiError",
    "ResponseDecodeError",
    "translate_error_body",
    # Pagination
    "PaginatedSequence",
    "PageIterator",
    "PageState",
    "parse_next_link",
    # Transport
    "build_http_client",
    "build_ssl_context",
    "escape_path_segment",
    # Metrics
    "RequestMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
