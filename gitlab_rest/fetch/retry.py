"""Bounded, interval-based retry around a single network round trip."""

import time
from collections.abc import Callable
from typing import TypeVar

import structlog

from gitlab_rest.fetch.metrics import RequestMetrics
from gitlab_rest.fetch.models import RetryPolicy
from gitlab_rest.observability.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


def call_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    log: structlog.stdlib.BoundLogger | None = None,
) -> T:
    """Invoke an operation, retrying failures the policy accepts.

    The calling thread sleeps between attempts. After ``max_attempts``
    attempts, or on the first failure the policy rejects, the last failure
    propagates unchanged.

    Args:
        operation: Performs one round trip; raises on failure.
        policy: Retry policy to apply.
        log: Bound logger; the module logger is used when omitted.

    Returns:
        The operation's result.
    """
    log = log or logger.bind(component="fetch")
    metrics = RequestMetrics.get_instance()
    attempt = 0

    while True:
        try:
            return operation()
        except Exception as exc:
            if not policy.should_retry(exc, attempt):
                raise

            delay_ms = policy.get_delay_ms(attempt)
            attempt += 1
            metrics.record_retry()
            log.debug(
                "retry_attempt",
                attempt=attempt,
                delay_ms=delay_ms,
                max_attempts=policy.max_attempts,
                error=type(exc).__name__,
            )
            time.sleep(delay_ms / 1000.0)
