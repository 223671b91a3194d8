"""Command-line interface."""

from gitlab_rest.cli.main import cli


__all__ = ["cli"]
