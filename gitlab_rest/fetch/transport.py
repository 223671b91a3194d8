"""Transport setup shared by every request of a client.

Configuration happens once, when a client is constructed. Nothing here
mutates process-wide state.
"""

import ssl
from urllib.parse import quote

import httpx

from gitlab_rest.fetch.config import ClientConfig, TlsVersion
from gitlab_rest.fetch.constants import HEADER_USER_AGENT


_TLS_VERSIONS: dict[TlsVersion, ssl.TLSVersion] = {
    TlsVersion.TLS_1_2: ssl.TLSVersion.TLSv1_2,
    TlsVersion.TLS_1_3: ssl.TLSVersion.TLSv1_3,
}


def build_ssl_context(min_version: TlsVersion) -> ssl.SSLContext:
    """Create a verifying SSL context with a protocol floor.

    Args:
        min_version: Lowest TLS version to negotiate.

    Returns:
        Configured SSL context.
    """
    context = ssl.create_default_context()
    context.minimum_version = _TLS_VERSIONS[min_version]
    return context


def build_http_client(
    config: ClientConfig,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create the HTTP client owned by a GitLab client.

    Args:
        config: Client configuration.
        transport: Optional transport override (tests, proxies).

    Returns:
        Configured httpx client.
    """
    verify: ssl.SSLContext | bool = (
        build_ssl_context(config.min_tls_version) if config.verify_tls else False
    )
    headers = {HEADER_USER_AGENT: config.user_agent, **config.extra_headers}
    return httpx.Client(
        verify=verify,
        timeout=config.timeout_seconds,
        follow_redirects=config.follow_redirects,
        headers=headers,
        transport=transport,
    )


def escape_path_segment(value: str | int) -> str:
    """Percent-encode a value for use as a single URL path segment.

    Slashes are escaped too, so ``group/sub-group/project``
    addresses one project instead of three path levels. httpx sends
    existing escapes unchanged.

    Args:
        value: Identifier or namespaced path.

    Returns:
        Escaped path segment.

    Examples:
        >>> escape_path_segment("group/sub-group/project")
        'group%2Fsub-group%2Fproject'
        >>> escape_path_segment(42)
        '42'
    """
    return quote(str(value), safe="")
