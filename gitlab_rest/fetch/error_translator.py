"""Translation of server error bodies into messages.

GitLab returns structured errors in several shapes (a ``message`` string,
a ``message`` object keyed by field, an ``error`` string, or plain text from
a proxy in front of it). Extraction is best effort and never raises.
"""

import json
from typing import Any

from gitlab_rest.fetch.constants import (
    EMPTY_RESPONSE_MESSAGE,
    UNPARSABLE_MESSAGE_TEMPLATE,
)


_MESSAGE_KEYS = ("message", "error")


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _find_message_value(parsed: dict[str, Any]) -> Any:
    for key in _MESSAGE_KEYS:
        if key in parsed:
            return parsed[key]
    return None


def translate_error_body(raw: bytes) -> tuple[str, dict[str, Any] | None]:
    """Extract a human-readable message from a server error body.

    Args:
        raw: Raw (already decompressed) response body.

    Returns:
        Tuple of (message, parsed error object or None).

    Examples:
        >>> translate_error_body(b'{"message": "404 Project Not Found"}')[0]
        '404 Project Not Found'
        >>> translate_error_body(b"")
        ('Empty Response', None)
    """
    if not raw:
        return EMPTY_RESPONSE_MESSAGE, None

    text = raw.decode("utf-8", errors="replace")
    parsed = _parse_json(text)
    error_object = parsed if isinstance(parsed, dict) else None

    value = _find_message_value(error_object) if error_object is not None else None
    if value is None:
        return UNPARSABLE_MESSAGE_TEMPLATE.format(raw=text), error_object

    if isinstance(value, str):
        return value, error_object

    return json.dumps(value, separators=(",", ":"), ensure_ascii=False), error_object
