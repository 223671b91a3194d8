"""Client settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment configuration for a GitLab client."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    gitlab_url: str = Field(
        default="https://gitlab.com/api/v4", validation_alias="GITLAB_URL"
    )
    gitlab_token: str | None = Field(default=None, validation_alias="GITLAB_TOKEN")
    gitlab_timeout_seconds: float = Field(
        default=100.0, validation_alias="GITLAB_TIMEOUT_SECONDS"
    )
    gitlab_max_attempts: int = Field(default=3, validation_alias="GITLAB_MAX_ATTEMPTS")


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
