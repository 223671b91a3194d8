"""CLI commands for browsing a GitLab server."""

import logging
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import BinaryIO

import click
import httpx
from pydantic import BaseModel

from gitlab_rest.api.client import GitLabClient
from gitlab_rest.fetch.errors import GitLabApiError, ResponseDecodeError
from gitlab_rest.fetch.metrics import RequestMetrics
from gitlab_rest.fetch.redact import redact_url_credentials
from gitlab_rest.models.events import EventAction
from gitlab_rest.models.jobs import JobStatus
from gitlab_rest.observability.logging import (
    bind_host_context,
    configure_logging,
    get_logger,
)
from gitlab_rest.query.models import EventQuery, GetCommitsRequest


logger = get_logger(__name__)


@contextmanager
def _open_client(ctx: click.Context) -> Iterator[GitLabClient]:
    """Open a client from the environment and turn failures into exit code 1.

    Args:
        ctx: Click context; ``ctx.obj["transport"]`` overrides the transport.

    Yields:
        Client bound to the configured server.
    """
    client = GitLabClient.from_settings(transport=ctx.obj.get("transport"))
    bind_host_context(redact_url_credentials(client.host_url))
    try:
        yield client
    except (GitLabApiError, ResponseDecodeError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except httpx.TransportError as e:
        click.echo(f"Error: cannot reach {client.host_url}: {e}", err=True)
        sys.exit(1)
    finally:
        client.close()
        logger.debug(
            "cli_request_metrics",
            component="cli",
            **RequestMetrics.get_instance().to_dict(),
        )


def _format_cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _echo_models(
    items: Iterable[BaseModel],
    json_output: bool,
    columns: tuple[str, ...],
) -> None:
    """Print records as JSON lines or tab-separated columns."""
    for item in items:
        if json_output:
            click.echo(item.model_dump_json(exclude_none=True))
        else:
            click.echo("\t".join(_format_cell(getattr(item, c)) for c in columns))


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Log requests, retries and pages.")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, json_logs: bool) -> None:
    """Browse a GitLab server from the command line.

    The server and token come from GITLAB_URL and GITLAB_TOKEN.
    """
    ctx.ensure_object(dict)
    configure_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        json_format=json_logs,
    )


@cli.command()
@click.argument("project")
@click.option("--ref", "ref_name", help="Branch or tag name.")
@click.option("--path", "file_path", help="Only commits touching this path.")
@click.option("--first-parent", is_flag=True, help="Follow only the first parent.")
@click.option("--limit", type=click.IntRange(min=1), help="Maximum number of commits.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON lines.")
@click.pass_context
def commits(  # noqa: PLR0913
    ctx: click.Context,
    project: str,
    ref_name: str | None,
    file_path: str | None,
    first_parent: bool,
    limit: int | None,
    json_output: bool,
) -> None:
    """List commits of PROJECT (id or namespaced path)."""
    request = GetCommitsRequest(
        ref_name=ref_name,
        path=file_path,
        first_parent=True if first_parent else None,
        max_results=limit or 0,
    )
    with _open_client(ctx) as client:
        items = client.repository(project).get_commits(request)
        _echo_models(items, json_output, ("short_id", "committed_date", "title"))


@cli.command()
@click.option("--project", help="Project id or path; defaults to your own events.")
@click.option(
    "--action",
    type=click.Choice([action.value for action in EventAction]),
    help="Only events with this action.",
)
@click.option(
    "--after",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Only events after this day (YYYY-MM-DD).",
)
@click.option("--limit", type=click.IntRange(min=1), help="Maximum number of events.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON lines.")
@click.pass_context
def events(  # noqa: PLR0913
    ctx: click.Context,
    project: str | None,
    action: str | None,
    after: datetime | None,
    limit: int | None,
    json_output: bool,
) -> None:
    """List activity events."""
    query = EventQuery(
        action=EventAction(action) if action else None,
        after=after.date() if after else None,
    )
    with _open_client(ctx) as client:
        if project is None:
            items = client.events(query)
        else:
            items = client.project_events(project, query)
        if limit is not None:
            items = items.take(limit)
        _echo_models(
            items,
            json_output,
            ("created_at", "author_username", "action_name", "target_title"),
        )


@cli.command()
@click.argument("project")
@click.option(
    "--scope",
    type=click.Choice([status.value for status in JobStatus]),
    help="Only jobs with this status.",
)
@click.option("--limit", type=click.IntRange(min=1), help="Maximum number of jobs.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON lines.")
@click.pass_context
def jobs(
    ctx: click.Context,
    project: str,
    scope: str | None,
    limit: int | None,
    json_output: bool,
) -> None:
    """List CI jobs of PROJECT."""
    with _open_client(ctx) as client:
        items = client.project_jobs(project, JobStatus(scope) if scope else None)
        if limit is not None:
            items = items.take(limit)
        _echo_models(items, json_output, ("id", "status", "stage", "name", "ref"))


def _download_blob(ctx: click.Context, project: str, sha: str, out: BinaryIO) -> None:
    def consume(chunks: Iterator[bytes]) -> None:
        for chunk in chunks:
            out.write(chunk)

    with _open_client(ctx) as client:
        client.repository(project).get_raw_blob(sha, consume)


@cli.command()
@click.argument("project")
@click.argument("sha")
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the blob to this file instead of stdout.",
)
@click.pass_context
def blob(ctx: click.Context, project: str, sha: str, output_path: Path | None) -> None:
    """Download the raw content of blob SHA from PROJECT."""
    if output_path is None:
        _download_blob(ctx, project, sha, sys.stdout.buffer)
        return

    try:
        with output_path.open("wb") as f:
            _download_blob(ctx, project, sha, f)
    except BaseException:
        # No partial or empty file is left behind when the download fails.
        output_path.unlink(missing_ok=True)
        raise


if __name__ == "__main__":
    cli()
