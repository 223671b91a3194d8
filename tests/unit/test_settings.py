"""Unit tests for environment settings."""

from pathlib import Path

import pytest

from gitlab_rest.settings.app import AppSettings, get_settings


ENV_NAMES = (
    "GITLAB_URL",
    "GITLAB_TOKEN",
    "GITLAB_TIMEOUT_SECONDS",
    "GITLAB_MAX_ATTEMPTS",
)


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Without environment variables the public instance is used."""
        for name in ENV_NAMES:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.chdir(tmp_path)

        settings = get_settings()

        assert settings.gitlab_url == "https://gitlab.com/api/v4"
        assert settings.gitlab_token is None
        assert settings.gitlab_timeout_seconds == 100.0
        assert settings.gitlab_max_attempts == 3

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Values come from GITLAB_* variables."""
        monkeypatch.setenv("GITLAB_URL", "https://git.example.com/api/v4")
        monkeypatch.setenv("GITLAB_TOKEN", "glpat-env")
        monkeypatch.setenv("GITLAB_TIMEOUT_SECONDS", "15")
        monkeypatch.setenv("GITLAB_MAX_ATTEMPTS", "1")

        settings = AppSettings()

        assert settings.gitlab_url == "https://git.example.com/api/v4"
        assert settings.gitlab_token == "glpat-env"
        assert settings.gitlab_timeout_seconds == 15.0
        assert settings.gitlab_max_attempts == 1

    def test_reads_env_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """A .env file in the working directory is honored."""
        for name in ENV_NAMES:
            monkeypatch.delenv(name, raising=False)
        (tmp_path / ".env").write_text("GITLAB_TOKEN=glpat-file\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        assert AppSettings().gitlab_token == "glpat-file"
