from mediaflow.lib.cor.commands import Command, FunctionCommand, Instrumentation
from mediaflow.lib.cor.context import CTX_OUT, Context, ContextKey
from mediaflow.lib.cor.errors import (
    CommandError,
    ConsistencyTimeout,
    DuplicateCommandError,
    ExternalToolFailure,
    MissingKey,
    OperationCancelled,
    RemoteCallFailure,
    RemoteOperationFailure,
    TypeMismatch,
)
from mediaflow.lib.cor.executor import (
    CommandTrace,
    ExecutionResult,
    ExecutionStatus,
    PipelineExecutor,
)
from mediaflow.lib.cor.lifecycle import IgnoreAllObserver, PipelineObserver
from mediaflow.lib.cor.metrics import (
    ERROR_COUNTER,
    SUCCESS_COUNTER,
    Counter,
    CounterSnapshot,
    MetricsRecorder,
)
from mediaflow.lib.cor.pipeline import Pipeline
from mediaflow.lib.cor.polling import (
    ConsistencyPoller,
    PollRequest,
    PollResult,
    PollState,
    wait_for_file,
    wait_for_file_update,
)
from mediaflow.lib.cor.reporting import format_errors
from mediaflow.lib.cor.scope import ExecutionScope

__all__ = [
    # Core types
    "Command",
    "Context",
    "ContextKey",
    "CTX_OUT",
    "ExecutionScope",
    "FunctionCommand",
    "Instrumentation",
    "Pipeline",
    # Execution
    "PipelineExecutor",
    "ExecutionResult",
    "ExecutionStatus",
    "CommandTrace",
    # Lifecycle
    "PipelineObserver",
    "IgnoreAllObserver",
    # Metrics
    "Counter",
    "CounterSnapshot",
    "MetricsRecorder",
    "SUCCESS_COUNTER",
    "ERROR_COUNTER",
    # Polling
    "ConsistencyPoller",
    "PollRequest",
    "PollResult",
    "PollState",
    "wait_for_file",
    "wait_for_file_update",
    # Errors
    "CommandError",
    "MissingKey",
    "TypeMismatch",
    "ExternalToolFailure",
    "RemoteCallFailure",
    "RemoteOperationFailure",
    "ConsistencyTimeout",
    "OperationCancelled",
    "DuplicateCommandError",
    "format_errors",
]
