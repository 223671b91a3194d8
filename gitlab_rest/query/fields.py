"""Declarative mapping of query options to URL query parameters.

Query models list their options in a ``QUERY_FIELDS`` mapping from model
attribute to ``QueryField``. The mapping is checked against the model's
fields when the class is created, and option values are validated by
pydantic when an instance is created.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar
from urllib.parse import quote, urlencode

from pydantic import BaseModel, ConfigDict


def render_value(value: Any) -> str:
    """Render an option value the way the API expects it.

    Args:
        value: Option value.

    Returns:
        Query string representation.
    """
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime | date):
        return value.isoformat()
    return str(value)


def render_date(value: date) -> str:
    """Render a date or datetime as ``YYYY-MM-DD``."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


@dataclass(frozen=True)
class QueryField:
    """One query option.

    Attributes:
        key: Query parameter name.
        render: Turns a non-None value into its query string form.
    """

    key: str
    render: Callable[[Any], str] = render_value


class QueryModel(BaseModel):
    """Base class for query option models."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    QUERY_FIELDS: ClassVar[dict[str, QueryField]] = {}

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        unknown = set(cls.QUERY_FIELDS) - set(cls.model_fields)
        if unknown:
            msg = f"{cls.__name__}.QUERY_FIELDS names unknown fields: {sorted(unknown)}"
            raise TypeError(msg)

        keys = [field.key for field in cls.QUERY_FIELDS.values()]
        if len(keys) != len(set(keys)):
            msg = f"{cls.__name__}.QUERY_FIELDS maps two options to the same key"
            raise TypeError(msg)

    def query_params(self) -> list[tuple[str, str]]:
        """Render the options that are set, in declaration order.

        Returns:
            List of (key, value) pairs.
        """
        params: list[tuple[str, str]] = []
        for name, field in self.QUERY_FIELDS.items():
            value = getattr(self, name)
            if value is None:
                continue
            params.append((field.key, field.render(value)))
        return params

    def to_query_string(self) -> str:
        """Render the options as an escaped query string (without ``?``)."""
        return urlencode(self.query_params(), quote_via=quote, safe="")

    def apply_to(self, path: str) -> str:
        """Append the options to a path.

        Args:
            path: Path that may already carry a query string.

        Returns:
            Path with the options appended.
        """
        query = self.to_query_string()
        if not query:
            return path
        separator = "&" if "?" in path else "?"
        return f"{path}{separator}{query}"
