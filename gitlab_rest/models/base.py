"""Shared Pydantic base models."""

from pydantic import BaseModel, ConfigDict


class ResourceModel(BaseModel):
    """Base model for records returned by the server.

    Immutable; unknown fields are ignored so newer server versions do not
    break decoding.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)
