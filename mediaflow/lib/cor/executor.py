"""Defines the sequential pipeline executor."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
import time
from typing import Annotated, final

from loguru import logger

from mediaflow.lib.cor.commands import Command, Instrumentation
from mediaflow.lib.cor.context import CTX_OUT, Context
from mediaflow.lib.cor.errors import OperationCancelled
from mediaflow.lib.cor.lifecycle import PipelineObserver
from mediaflow.lib.cor.metrics import MetricsRecorder
from mediaflow.lib.cor.pipeline import Pipeline

DEFAULT_PIPELINE_NAME = "pipeline"


class ExecutionStatus(Enum):
    """Final status of a pipeline run.

    `COMPLETED` means every command was invoked, not that every command
    succeeded; inspect `ExecutionResult.errors` for that.
    """

    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class CommandTrace:
    """Trace information for a single command execution."""

    name: Annotated[str, "The name of the command."]
    duration: Annotated[float, "Duration of the command execution in seconds."]
    errors: Annotated[
        list[Exception], "Errors the command recorded during this execution."
    ] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors


@dataclass
class ExecutionResult:
    """Result of a pipeline run."""

    pipeline_name: Annotated[str, "Name of the pipeline."]
    status: Annotated[ExecutionStatus, "Final status of the run."]
    traces: Annotated[list[CommandTrace], "Traces of the commands that were invoked."]
    context: Annotated[Context, "The context used during the run."]

    @property
    def errors(self) -> Mapping[str, list[Exception]]:
        """Accumulated errors, keyed by command name."""
        return self.context.errors

    @property
    def durations(self) -> dict[str, float]:
        return {trace.name: trace.duration for trace in self.traces}

    @property
    def output(self) -> str | None:
        """The primary output of the run, if a command wrote one."""
        return CTX_OUT.get(self.context) if CTX_OUT.is_set(self.context) else None

    def total_duration(self) -> float:
        return sum(self.durations.values())

    def succeeded(self) -> bool:
        """Check if the run completed without any recorded error."""
        return self.status == ExecutionStatus.COMPLETED and not self.context.has_errors()


@final
class PipelineExecutor:
    """Runs pipeline commands in order against a shared context.

    Failures do not stop the sequence: commands record their errors in the
    context and the executor moves on, so later independent commands still
    run. The caller decides on overall success by inspecting the accumulated
    errors. Only cancellation of the context scope stops the run early.

    Args:
        observers: Observers notified of lifecycle events.
        metrics: Recorder counting failures of raising commands that carry no
            `Instrumentation` of their own. Ignored once shut down.
    """

    def __init__(
        self,
        observers: Sequence[PipelineObserver] | None = None,
        metrics: MetricsRecorder | None = None,
    ) -> None:
        self._observers: list[PipelineObserver] = list(observers or [])
        self._metrics = metrics

    def run(self, commands: Iterable[Command], ctx: Context) -> ExecutionResult:
        """Execute `commands` in order with the shared `ctx`."""
        return self.execute(Pipeline(DEFAULT_PIPELINE_NAME, commands), ctx)

    def execute(self, pipeline: Pipeline, ctx: Context | None = None) -> ExecutionResult:
        """Execute a pipeline.

        Args:
            pipeline: The pipeline to execute.
            ctx: Context for the run. A fresh one is created when omitted.

        Returns:
            The result of the run, holding the context and its errors.
        """
        ctx = ctx if ctx is not None else Context()
        scope = ctx.scope()
        traces: list[CommandTrace] = []
        status = ExecutionStatus.COMPLETED

        self._notify("on_pipeline_start", pipeline, ctx)

        for command in pipeline:
            if scope.done:
                reason = scope.reason or "cancelled"
                logger.warning(
                    f"Pipeline '{pipeline.name}' cancelled before '{command.name}': {reason}"
                )
                ctx.add_error(pipeline.name, OperationCancelled(reason))
                status = ExecutionStatus.CANCELLED
                break

            self._notify("on_command_start", pipeline, command, ctx)
            trace = self._execute_command(command, ctx)
            traces.append(trace)
            self._notify("on_command_finish", pipeline, command, trace)

        result = ExecutionResult(
            pipeline_name=pipeline.name,
            status=status,
            traces=traces,
            context=ctx,
        )
        self._notify("on_pipeline_finish", pipeline, result)
        return result

    def _execute_command(self, command: Command, ctx: Context) -> CommandTrace:
        errors_before = len(ctx.errors_for(command.name))
        start_time = time.perf_counter()

        try:
            command.execute(ctx)
        except Exception as e:
            # Commands are expected to record their own errors.
            logger.exception(f"Command '{command.name}' raised instead of recording an error")
            ctx.add_error(command.name, e)
            self._count_error(command)

        duration = time.perf_counter() - start_time
        return CommandTrace(
            name=command.name,
            duration=duration,
            errors=ctx.errors_for(command.name)[errors_before:],
        )

    def _count_error(self, command: Command) -> None:
        """Count a raised error against the command's own counters when it has them."""
        instrumentation = getattr(command, "instrumentation", None)
        if isinstance(instrumentation, Instrumentation):
            instrumentation.error_counter.add(1)
        elif self._metrics is not None and not self._metrics.closed:
            _, error_counter = self._metrics.command_counters(command.name)
            error_counter.add(1)

    def _notify(self, hook: str, *args: object) -> None:
        for observer in self._observers:
            try:
                getattr(observer, hook)(*args)
            except Exception:
                logger.exception(f"Observer {observer!r} failed on {hook}")
