"""Shared execution context passed to every command of a pipeline run."""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from mediaflow.lib.cor.errors import MissingKey, TypeMismatch
from mediaflow.lib.cor.scope import ExecutionScope

T = TypeVar("T")


class Context:
    """Per-run parameter store, error accumulator and cancellation scope.

    Keys are logical identifiers agreed on by the command that writes a value
    and the command that reads it. The context enforces no schema and performs
    no type checks on plain `get`/`set`; use a `ContextKey` for checked access.

    A context is created once per pipeline run and must not be shared between
    concurrent runs.

    Args:
        scope: The execution scope for the run. A fresh, never-expiring scope is
            created when omitted.
        params: Optional initial parameters, inserted in iteration order.
    """

    def __init__(
        self,
        scope: ExecutionScope | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> None:
        self._scope = scope or ExecutionScope()
        self._params: dict[str, Any] = dict(params or {})
        self._errors: dict[str, list[Exception]] = {}

    # Parameters

    def get(self, key: str) -> Any:
        """Return the value stored under `key`.

        Raises:
            MissingKey: If nothing was written under `key`.
        """
        try:
            return self._params[key]
        except KeyError:
            raise MissingKey(key) from None

    def set(self, key: str, value: Any) -> None:
        self._params[key] = value

    def has(self, key: str) -> bool:
        return key in self._params

    def keys(self) -> list[str]:
        """Keys in insertion order."""
        return list(self._params)

    def __contains__(self, key: object) -> bool:
        return key in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    # Errors

    def add_error(self, command_name: str, error: Exception) -> None:
        """Append an error for `command_name`, keeping any earlier ones."""
        self._errors.setdefault(command_name, []).append(error)

    @property
    def errors(self) -> Mapping[str, list[Exception]]:
        """Read-only view of the accumulated errors, keyed by command name."""
        return MappingProxyType(self._errors)

    def errors_for(self, command_name: str) -> list[Exception]:
        return list(self._errors.get(command_name, []))

    def error_count(self) -> int:
        return sum(len(errors) for errors in self._errors.values())

    def has_errors(self) -> bool:
        return any(self._errors.values())

    # Scope

    def scope(self) -> ExecutionScope:
        return self._scope

    def __repr__(self) -> str:
        return f"Context(keys={self.keys()}, errors={self.error_count()})"


class ContextKey(Generic[T]):
    """Typed accessor for a well-known context key.

    Pairs a key name with the type of the values stored under it, so readers
    get a checked conversion instead of an unchecked cast.

    Example:
        ```python
        AUDIO_FILE = ContextKey("audio_file", str)
        AUDIO_FILE.set(ctx, "gs://audio/video.wav")
        uri = AUDIO_FILE.get(ctx)  # str
        ```
    """

    def __init__(self, name: str, value_type: type[T]) -> None:
        self.name = name
        self.value_type = value_type

    def get(self, ctx: Context) -> T:
        """Read the value, checking its type.

        Raises:
            MissingKey: If the key is not set.
            TypeMismatch: If the stored value is not a `value_type`.
        """
        value = ctx.get(self.name)
        if not isinstance(value, self.value_type):
            raise TypeMismatch(self.name, self.value_type, type(value))
        return value

    def set(self, ctx: Context, value: T) -> None:
        if not isinstance(value, self.value_type):
            raise TypeMismatch(self.name, self.value_type, type(value))
        ctx.set(self.name, value)

    def is_set(self, ctx: Context) -> bool:
        return ctx.has(self.name)

    def __repr__(self) -> str:
        return f"ContextKey({self.name!r}, {self.value_type.__name__})"


CTX_OUT = ContextKey("__OUT__", str)
"""Primary output key: the pipeline's final, externally visible result."""
