"""Error taxonomy for command pipelines.

Commands never raise these errors to the executor. They record them in the
context error accumulator under their own name, wrapping the underlying cause
with `raise ... from ...` semantics (the cause is kept in `__cause__`).
"""


class CommandError(Exception):
    """Base exception for errors recorded by pipeline commands."""


class MissingKey(CommandError, KeyError):
    """Raised when a context key is read before any command wrote it."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Context key '{key}' is not set")

    def __str__(self) -> str:
        # KeyError quotes its single argument; keep the plain message.
        return self.args[0]


class TypeMismatch(CommandError, TypeError):
    """Raised when a context value does not have the type its key declares."""

    def __init__(self, key: str, expected: type, actual: type) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Context key '{key}' holds {actual.__name__}, expected {expected.__name__}"
        )


class ExternalToolFailure(CommandError):
    """Raised when a local binary fails to launch or exits with a non-zero status."""

    def __init__(self, tool: str, reason: str, returncode: int | None = None) -> None:
        self.tool = tool
        self.reason = reason
        self.returncode = returncode
        super().__init__(f"Error running '{tool}': {reason}")


class RemoteCallFailure(CommandError):
    """Raised when a remote API call cannot be submitted or its transport fails."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Remote call '{operation}' failed: {reason}")


class RemoteOperationFailure(CommandError):
    """Raised when a remote job completes but reports an error for the requested item."""

    def __init__(self, item: str, reason: str) -> None:
        self.item = item
        self.reason = reason
        super().__init__(f"Remote operation failed for '{item}': {reason}")


class ConsistencyTimeout(CommandError):
    """Raised when a path does not become visible within the polling budget."""

    def __init__(self, path: str, attempts: int) -> None:
        self.path = path
        self.attempts = attempts
        super().__init__(f"File '{path}' not found after {attempts} attempts")


class OperationCancelled(CommandError):
    """Raised when the execution scope was cancelled or its deadline passed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Operation cancelled: {reason}")


class DuplicateCommandError(ValueError):
    """Raised when two commands with the same name are added to a pipeline."""
