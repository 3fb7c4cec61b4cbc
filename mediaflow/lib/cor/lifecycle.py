"""Defines lifecycle hooks for pipeline execution."""

from typing import TYPE_CHECKING, Protocol

from mediaflow.lib.cor.commands import Command
from mediaflow.lib.cor.context import Context
from mediaflow.lib.cor.pipeline import Pipeline

if TYPE_CHECKING:
    from mediaflow.lib.cor.executor import CommandTrace, ExecutionResult


class PipelineObserver(Protocol):
    """Observer protocol for pipeline execution lifecycle events.

    Observers are notified in registration order. They cannot change the
    control flow: the executor always runs every command. An observer that
    raises is logged and ignored.
    """

    def on_pipeline_start(self, pipeline: Pipeline, ctx: Context) -> None:
        """Called before the first command runs.

        Args:
            pipeline: The pipeline that is starting.
            ctx: The context shared by the run.
        """
        ...

    def on_command_start(self, pipeline: Pipeline, command: Command, ctx: Context) -> None:
        """Called when a command is about to execute.

        Args:
            pipeline: The pipeline to which the command belongs.
            command: The command that is starting.
            ctx: The context shared by the run.
        """
        ...

    def on_command_finish(
        self, pipeline: Pipeline, command: Command, trace: "CommandTrace"
    ) -> None:
        """Called when a command returns, whether it succeeded or recorded errors.

        Args:
            pipeline: The pipeline to which the command belongs.
            command: The command that finished.
            trace: Timing and outcome of the command execution.
        """
        ...

    def on_pipeline_finish(self, pipeline: Pipeline, result: "ExecutionResult") -> None:
        """Called after the last command ran, or after the run was cancelled.

        Args:
            pipeline: The pipeline that has finished.
            result: The result of the pipeline execution.
        """
        ...


class IgnoreAllObserver:
    """A pipeline observer that does nothing.

    Useful as a base class for observers interested in a subset of events.
    """

    def on_pipeline_start(self, pipeline: Pipeline, ctx: Context) -> None:
        return None

    def on_command_start(self, pipeline: Pipeline, command: Command, ctx: Context) -> None:
        return None

    def on_command_finish(
        self, pipeline: Pipeline, command: Command, trace: "CommandTrace"
    ) -> None:
        return None

    def on_pipeline_finish(self, pipeline: Pipeline, result: "ExecutionResult") -> None:
        return None
