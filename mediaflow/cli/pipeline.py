"""CLI for running pipelines and waiting on mounted files."""

from pathlib import Path

from loguru import logger
import typer
from typing_extensions import Annotated

from mediaflow.cli.metrics import print_snapshot
from mediaflow.commands import GCSObject
from mediaflow.config.sentry import report_errors
from mediaflow.containers import container
from mediaflow.lib.cor import ConsistencyTimeout, PollState, format_errors
from mediaflow.lib.cor.reporting import describe_error
from mediaflow.pipelines import new_context

app = typer.Typer()


@app.command("transcribe")
def transcribe(
    bucket: Annotated[str, typer.Argument(help="Bucket holding the videos.")],
    objects: Annotated[
        list[str],
        typer.Argument(help="Names of the video objects to transcribe."),
    ],
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            "-t",
            help="Deadline in seconds for each run. Defaults to the configured pipeline timeout.",
        ),
    ] = None,
    show_metrics: Annotated[
        bool,
        typer.Option("--show-metrics", "-m", help="Print the command counters when done."),
    ] = False,
):
    """Runs the transcription pipeline once per object."""
    if timeout is not None and timeout <= 0:
        raise typer.BadParameter("must be positive", param_hint="--timeout")

    settings = container.settings()
    timeout = timeout if timeout is not None else settings.pipeline_timeout

    factory = container.pipeline_factory()
    executor = container.executor()

    failed: list[str] = []
    for name in objects:
        video = GCSObject(bucket=bucket, name=name)
        with logger.contextualize(object=video.uri):
            result = executor.execute(factory.create(), new_context(video, timeout))

        if result.succeeded():
            typer.echo(f"{video.uri}: {result.output}")
            continue

        failed.append(video.uri)
        report_errors(result.context)
        for line in format_errors(result.context):
            typer.echo(f"{video.uri}: {line}", err=True)

    if show_metrics:
        print_snapshot(container.metrics().snapshot())

    if failed:
        logger.error(f"{len(failed)} of {len(objects)} runs failed: {', '.join(failed)}")
        raise typer.Exit(code=1)


@app.command("wait-file")
def wait_file(
    path: Annotated[Path, typer.Argument(help="Path to wait for.")],
    retries: Annotated[
        int | None,
        typer.Option("--retries", "-r", min=1, help="Number of checks before giving up."),
    ] = None,
    delay: Annotated[
        float | None,
        typer.Option("--delay", "-d", min=0, help="Seconds between two checks."),
    ] = None,
):
    """Waits until a file exists, failing when it never shows up."""
    poller = container.poller()
    try:
        result = poller.wait_for_file(path, attempts=retries, delay=delay)
    except ConsistencyTimeout as e:
        typer.echo(describe_error(e), err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"{path} found after {result.attempts} attempt(s)")


@app.command("wait-update")
def wait_update(
    path: Annotated[Path, typer.Argument(help="Path to wait for.")],
    threshold: Annotated[
        float,
        typer.Option(
            "--threshold",
            "-T",
            help="Maximum age in seconds of the file modification time.",
        ),
    ],
    retries: Annotated[
        int | None,
        typer.Option("--retries", "-r", min=1, help="Number of checks before giving up."),
    ] = None,
    delay: Annotated[
        float | None,
        typer.Option("--delay", "-d", min=0, help="Seconds between two checks."),
    ] = None,
):
    """Waits until a file was recently modified. Never fails on a stale file."""
    if threshold <= 0:
        raise typer.BadParameter("must be positive", param_hint="--threshold")

    poller = container.poller()
    result = poller.wait_for_file_update(path, threshold, attempts=retries, delay=delay)

    if result.state == PollState.SUCCEEDED:
        typer.echo(f"{path} updated (attempt {result.attempts})")
    else:
        typer.echo(f"{path} not updated after {result.attempts} attempt(s), using existing file")


if __name__ == "__main__":
    app()
