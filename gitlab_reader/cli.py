import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import BinaryIO, TypeVar

import click
import structlog
from pydantic import SecretStr

from gitlab_reader.client import GitLabApi, GitLabClient
from gitlab_reader.config import GitLabSettings
from gitlab_reader.errors import GitLabError
from gitlab_reader.models import ArchiveFormat
from gitlab_reader.output import format_output

T = TypeVar("T")


TAG_COLUMNS = ["name", "commit.short_id", "commit.committed_date", "message"]
COMMIT_COLUMNS = ["short_id", "author_name", "committed_date", "title"]


def configure_logging(log_level: str) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[log_level.upper()]
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def output(function: Callable) -> Callable:
    function = click.option(
        "--output",
        "-o",
        help="output type",
        default="table",
        type=click.Choice(["table", "json", "yaml"]),
    )(function)
    return function


def run(
    settings: GitLabSettings, operation: Callable[[GitLabClient], Awaitable[T]]
) -> T:
    async def _run() -> T:
        async with GitLabApi.from_settings(settings) as api:
            return await operation(api.client(settings.token.get_secret_value()))

    try:
        return asyncio.run(_run())
    except GitLabError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--url", help="Full path to the GitLab API root.")
@click.option("--token", help="GitLab private token. Defaults to $GITLAB_TOKEN.")
@click.option("--timeout", type=float, help="Deadline of an operation in seconds.")
@click.option(
    "--log-level",
    help="log-level of the command. Defaults to INFO.",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
)
@click.pass_context
def cli(
    ctx: click.Context,
    url: str | None,
    token: str | None,
    timeout: float | None,
    log_level: str | None,
) -> None:
    """Read-only access to GitLab repositories."""
    overrides: dict[str, object] = {}
    if url:
        overrides["url"] = url
    if token:
        overrides["token"] = SecretStr(token)
    if timeout is not None:
        overrides["timeout"] = timeout
    if log_level:
        overrides["log_level"] = log_level
    settings = GitLabSettings().model_copy(update=overrides)
    configure_logging(settings.log_level)
    ctx.obj = settings


@cli.command()
@click.argument("project")
@click.option("--prefix", default="", help="Only the tag matching this prefix.")
@output
@click.pass_obj
def tags(settings: GitLabSettings, project: str, prefix: str, output: str) -> None:
    """List tags of PROJECT."""
    result = run(
        settings,
        lambda client: client.tags(project, prefix, timeout=settings.timeout),
    )
    content = [tag.model_dump(mode="json") for tag in result]
    click.echo(format_output(output, content, TAG_COLUMNS))


@cli.command()
@click.argument("project")
@click.argument("path")
@click.option("--ref", required=True, help="Branch, tag or commit hash.")
@click.pass_obj
def file(settings: GitLabSettings, project: str, path: str, ref: str) -> None:
    """Print the content of PATH in PROJECT at --ref."""
    content = run(
        settings,
        lambda client: client.file(project, path, ref, timeout=settings.timeout),
    )
    click.echo(content, nl=False)


@cli.command()
@click.argument("project")
@click.pass_obj
def project(settings: GitLabSettings, project: str) -> None:
    """Print metadata of PROJECT as JSON."""
    info = run(
        settings,
        lambda client: client.project_info(project, timeout=settings.timeout),
    )
    click.echo(info.model_dump_json(indent=2, by_alias=True))


@cli.command()
@click.argument("project_id", type=int)
@click.option("--ref", required=True, help="Branch, tag or commit hash.")
@click.option(
    "--format",
    "archive_format",
    default=ArchiveFormat.ZIP.value,
    type=click.Choice([f.value for f in ArchiveFormat]),
    help="Archive format.",
)
@click.option(
    "--output-file",
    "-f",
    "output_file",
    required=True,
    type=click.File("wb"),
    help="Where to write the archive, - for stdout.",
)
@click.pass_obj
def archive(
    settings: GitLabSettings,
    project_id: int,
    ref: str,
    archive_format: str,
    output_file: BinaryIO,
) -> None:
    """Download the repository archive of numeric PROJECT_ID at --ref."""

    async def _download(client: GitLabClient) -> int:
        size = 0
        stream = await client.archive(
            project_id, ref, ArchiveFormat(archive_format), timeout=settings.timeout
        )
        async with stream:
            async for chunk in stream.aiter_bytes():
                output_file.write(chunk)
                size += len(chunk)
        return size

    size = run(settings, _download)
    structlog.get_logger(__name__).info(
        "archive downloaded", project_id=project_id, ref=ref, size=size
    )


@cli.command()
@click.argument("project")
@click.argument("ref")
@output
@click.pass_obj
def commits(settings: GitLabSettings, project: str, ref: str, output: str) -> None:
    """Print the commit history of PROJECT starting at REF.

    REF may be a branch, a tag or a (short) commit hash.
    """
    result = run(
        settings,
        lambda client: client.commits(project, ref, timeout=settings.timeout),
    )
    content = [commit.model_dump(mode="json") for commit in result]
    click.echo(format_output(output, content, COMMIT_COLUMNS))
