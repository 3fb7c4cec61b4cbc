"""Rendering of accumulated pipeline errors for operators."""

from mediaflow.lib.cor.context import Context


def _cause_of(error: BaseException) -> BaseException | None:
    if error.__cause__ is not None:
        return error.__cause__
    if error.__suppress_context__:
        return None
    return error.__context__


def describe_error(error: BaseException) -> str:
    """Render an error followed by its chain of causes."""
    parts = [f"{type(error).__name__}: {error}"]
    seen = {id(error)}
    cause = _cause_of(error)
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        parts.append(f"{type(cause).__name__}: {cause}")
        cause = _cause_of(cause)
    return " <- ".join(parts)


def format_errors(ctx: Context) -> list[str]:
    """One `<command>: <error>` line per accumulated error, in insertion order."""
    return [
        f"{command}: {describe_error(error)}"
        for command, errors in ctx.errors.items()
        for error in errors
    ]
