"""Structured logging for the client.

Client modules log through ``get_logger``, which wraps a standard library
logger below the ``gitlab_rest`` namespace. Until an application attaches a
handler (directly or with ``configure_logging``), the standard library's
WARNING threshold applies and the client's debug events are dropped.
"""

import logging
import sys
from typing import TextIO

import structlog


ROOT_LOGGER_NAME = "gitlab_rest"
_HANDLER_NAME = "gitlab_rest.structlog"

# Runs in the emitting thread; rendering happens in the handler's formatter.
_PROCESSORS: list[structlog.types.Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


def get_logger(name: str = ROOT_LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    """Get a structured logger backed by a standard library logger.

    Args:
        name: Standard library logger name, usually ``__name__``.

    Returns:
        Bound logger; its events go through the ``logging`` hierarchy.
    """
    logger: structlog.stdlib.BoundLogger = structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    return logger


def configure_logging(
    level: int = logging.INFO,
    output: TextIO | None = None,
    json_format: bool = True,
) -> None:
    """Render the client's events to a stream.

    Only the ``gitlab_rest`` logger tree is configured; the root logger and
    other libraries (httpx logs full request URLs) are left alone. Calling
    again replaces the previous setup.

    Args:
        level: Logging level (default: INFO). The client itself only emits
            ``debug`` events.
        output: Output stream (default: stderr at call time).
        json_format: Whether to use JSON format (default: True).
    """
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    handler = logging.StreamHandler(output or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    reset_logging()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def reset_logging() -> None:
    """Remove the handler installed by ``configure_logging``."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def bind_host_context(host_url: str) -> None:
    """Bind the target GitLab host to all subsequent log messages.

    Args:
        host_url: Base URL of the server.
    """
    structlog.contextvars.bind_contextvars(gitlab_host=host_url)


def clear_host_context() -> None:
    """Clear the target host from log messages."""
    structlog.contextvars.unbind_contextvars("gitlab_host")
