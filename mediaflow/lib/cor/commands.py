"""Defines the Command protocol and the instrumentation shared by commands.

A Command is a single unit of work in a pipeline. It reads its input from the
context, performs a side effect, and either writes its output back to the
context or records an error under its own name. Commands never raise.
"""

from typing import Any, Callable, Protocol, runtime_checkable

from loguru import logger

from mediaflow.lib.cor.context import Context
from mediaflow.lib.cor.errors import CommandError
from mediaflow.lib.cor.metrics import Counter, MetricsRecorder


@runtime_checkable
class Command(Protocol):
    """Contract every pipeline command satisfies.

    Attributes:
        name: Stable identifier, unique within a pipeline. Used as the error
            accumulator key and the metrics label.
        input_key: Context key read by the command, or "" for none.
        output_key: Context key written by the command, or "" for none.
    """

    @property
    def name(self) -> str: ...

    @property
    def input_key(self) -> str: ...

    @property
    def output_key(self) -> str: ...

    def execute(self, ctx: Context) -> None:
        """Run the command against the context.

        On success the output is written under `output_key` and the success
        counter is incremented. On failure the error is recorded with
        `ctx.add_error(name, error)`, the error counter is incremented and no
        output is written.
        """
        ...


class Instrumentation:
    """Name, parameter keys and counters held by a command.

    Commands compose an `Instrumentation` and delegate their bookkeeping to
    it, instead of inheriting from a common base class. It holds no
    per-invocation state, so a command can be executed any number of times.

    Args:
        name: The command name.
        metrics: Recorder issuing the command's success and error counters.
        input_key: Context key the command reads.
        output_key: Context key the command writes.
    """

    def __init__(
        self,
        name: str,
        metrics: MetricsRecorder,
        input_key: str = "",
        output_key: str = "",
    ) -> None:
        if not name or not name.strip():
            raise ValueError("Command name must be a non-empty string")
        self._name = name
        self._input_key = input_key
        self._output_key = output_key
        self._success_counter, self._error_counter = metrics.command_counters(name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def input_key(self) -> str:
        return self._input_key

    @property
    def output_key(self) -> str:
        return self._output_key

    @property
    def success_counter(self) -> Counter:
        return self._success_counter

    @property
    def error_counter(self) -> Counter:
        return self._error_counter

    def record_success(self, ctx: Context, value: Any = None) -> None:
        """Count a success and write `value` under the output key, if any."""
        self._success_counter.add(1)
        if self._output_key:
            ctx.set(self._output_key, value)

    def record_failure(self, ctx: Context, error: Exception) -> None:
        """Count a failure and append `error` to the context accumulator."""
        self._error_counter.add(1)
        ctx.add_error(self._name, error)
        logger.warning(f"Command '{self._name}' failed: {error}")

    def __repr__(self) -> str:
        return (
            f"Instrumentation(name={self._name}, input_key={self._input_key}, "
            f"output_key={self._output_key})"
        )


type CommandFunction = Callable[[Context, Any], Any]
"""A function receiving the context and the input value, returning the output value."""


class FunctionCommand:
    """Adapts a plain function into a `Command`.

    The function receives the context and the value stored under `input_key`
    (None when the command has no input key) and returns the value to store
    under `output_key`. A `CommandError` raised by the function is recorded as
    the command's failure; missing input keys surface as `MissingKey`.

    Args:
        name: The command name.
        func: The function implementing the command.
        metrics: Recorder issuing the command counters.
        input_key: Context key to read.
        output_key: Context key to write.
    """

    def __init__(
        self,
        name: str,
        func: CommandFunction,
        metrics: MetricsRecorder,
        input_key: str = "",
        output_key: str = "",
    ) -> None:
        self._func = func
        self._instrumentation = Instrumentation(name, metrics, input_key, output_key)

    @property
    def name(self) -> str:
        return self._instrumentation.name

    @property
    def input_key(self) -> str:
        return self._instrumentation.input_key

    @property
    def output_key(self) -> str:
        return self._instrumentation.output_key

    @property
    def instrumentation(self) -> Instrumentation:
        return self._instrumentation

    def execute(self, ctx: Context) -> None:
        try:
            value = ctx.get(self.input_key) if self.input_key else None
            result = self._func(ctx, value)
        except CommandError as e:
            self._instrumentation.record_failure(ctx, e)
            return
        self._instrumentation.record_success(ctx, result)

    def __repr__(self) -> str:
        return f"FunctionCommand(name={self.name})"
