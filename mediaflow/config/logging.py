"""Configuration and setup for logging in pipelines."""

import sys

from loguru import logger

from mediaflow.lib.cor import (
    Command,
    CommandTrace,
    Context,
    ExecutionResult,
    IgnoreAllObserver,
    Pipeline,
)
from mediaflow.settings import MediaflowSettings


class LoggingObserver(IgnoreAllObserver):
    """Observer that logs pipeline and command lifecycle events."""

    def _format_pipeline_and_command(self, pipeline: Pipeline, command_name: str) -> str:
        return f"{pipeline.name}.{command_name}"

    def on_pipeline_start(self, pipeline: Pipeline, ctx: Context) -> None:
        with logger.contextualize(pipeline_name=pipeline.name):
            logger.info("Starting pipeline '{pipeline_name}'", pipeline_name=pipeline.name)

    def on_command_start(self, pipeline: Pipeline, command: Command, ctx: Context) -> None:
        with logger.contextualize(pipeline_name=pipeline.name, command_name=command.name):
            logger.info(f"{self._format_pipeline_and_command(pipeline, command.name)}: Starting")

    def on_command_finish(self, pipeline: Pipeline, command: Command, trace: CommandTrace) -> None:
        with logger.contextualize(
            pipeline_name=pipeline.name,
            command_name=command.name,
            duration=trace.duration,
            succeeded=trace.succeeded,
        ):
            name = self._format_pipeline_and_command(pipeline, command.name)
            if trace.succeeded:
                logger.info(f"{name}: Completed in {trace.duration:.2f}s")
            else:
                for error in trace.errors:
                    logger.warning(f"{name}: Failed with {type(error).__name__}: {error}")

    def on_pipeline_finish(self, pipeline: Pipeline, result: ExecutionResult) -> None:
        with logger.contextualize(
            pipeline_name=pipeline.name,
            result_status=result.status.value,
            result_succeeded=result.succeeded(),
        ):
            if result.succeeded():
                logger.success(
                    "Pipeline '{pipeline_name}' finished successfully", pipeline_name=pipeline.name
                )
            else:
                logger.warning(
                    "Pipeline '{pipeline_name}' finished with errors in: {failed}",
                    pipeline_name=pipeline.name,
                    failed=", ".join(result.errors),
                )


def configure_logging(settings: MediaflowSettings) -> None:
    logger.remove()  # Remove default handler

    # Serialize to JSON on stderr; the runtime collects it from there.
    logger.add(
        sys.stderr,
        serialize=True,
        level=settings.log_level.upper(),
        format="{message}",
        backtrace=True,
        diagnose=settings.debug,  # Include variable values only in debug mode
    )
