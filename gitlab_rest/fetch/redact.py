"""Credential redaction for log lines and error messages."""

import re

from gitlab_rest.fetch.constants import PRIVATE_TOKEN_PARAM


# Headers that must never appear in logs
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "private-token",
        "job-token",
        "proxy-authorization",
        "set-cookie",
    }
)

REDACTED_VALUE = "[REDACTED]"

_USERINFO_PATTERN = re.compile(r"(https?://)([^:/@]+):([^@/]+)@")
_TOKEN_PARAM_PATTERN = re.compile(
    rf"([?&]{PRIVATE_TOKEN_PARAM}=)[^&#]*", flags=re.IGNORECASE
)


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers for logging.

    Args:
        headers: Original headers dictionary.

    Returns:
        New dictionary with sensitive values redacted.
    """
    return {
        key: REDACTED_VALUE if is_sensitive_header(key) else value
        for key, value in headers.items()
    }


def is_sensitive_header(header_name: str) -> bool:
    """Check if a header name is sensitive."""
    return header_name.lower() in SENSITIVE_HEADERS


def redact_url_credentials(url: str) -> str:
    """Redact credentials from a URL.

    Masks ``user:password@`` userinfo and the ``private_token`` query
    parameter.

    Args:
        url: URL that may contain credentials.

    Returns:
        URL with credentials redacted.
    """
    url = _USERINFO_PATTERN.sub(r"\1[REDACTED]:[REDACTED]@", url)
    return _TOKEN_PARAM_PATTERN.sub(rf"\g<1>{REDACTED_VALUE}", url)
