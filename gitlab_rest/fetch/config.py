"""Configuration models for the HTTP fetch layer."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gitlab_rest.fetch.models import RetryPolicy
from gitlab_rest.fetch.redact import is_sensitive_header


class TlsVersion(str, Enum):
    """Lowest TLS protocol version the client negotiates."""

    TLS_1_2 = "TLSv1.2"
    TLS_1_3 = "TLSv1.3"


class ClientConfig(BaseModel):
    """Configuration for a GitLab client.

    Applied once when the client builds its transport; read-only after that.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        "gitlab-rest/0.1"
    )
    timeout_seconds: Annotated[float, Field(ge=1.0, le=600.0)] = 100.0
    min_tls_version: TlsVersion = TlsVersion.TLS_1_2
    verify_tls: bool = True
    follow_redirects: bool = False
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    extra_headers: dict[str, str] = Field(
        default_factory=dict, description="Headers added to every request"
    )

    @field_validator("extra_headers")
    @classmethod
    def validate_no_auth_headers(cls, v: dict[str, str]) -> dict[str, str]:
        """Ensure no credentials are stored in config."""
        for key in v:
            if is_sensitive_header(key):
                msg = (
                    f"Header '{key}' must not be stored in config; "
                    "pass the token to the client instead"
                )
                raise ValueError(msg)
        return v
