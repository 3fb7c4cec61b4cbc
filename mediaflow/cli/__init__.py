"""CLI entry point for mediaflow."""

import typer

from mediaflow.config.logging import configure_logging
from mediaflow.config.sentry import init_sentry
from mediaflow.containers import container

from .pipeline import app as pipeline_app

app = typer.Typer()
app.add_typer(pipeline_app, name="pipeline", help="Pipeline execution and file consistency commands.")


@app.callback()
def main(ctx: typer.Context) -> None:
    """Media processing pipelines."""
    settings = container.settings()
    configure_logging(settings)
    init_sentry(settings)

    container.init_resources()
    ctx.call_on_close(container.shutdown_resources)
