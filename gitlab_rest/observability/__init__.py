"""Observability helpers for applications using the client."""

from gitlab_rest.observability.logging import (
    bind_host_context,
    clear_host_context,
    configure_logging,
    get_logger,
    reset_logging,
)


__all__ = [
    "bind_host_context",
    "clear_host_context",
    "configure_logging",
    "get_logger",
    "reset_logging",
]
