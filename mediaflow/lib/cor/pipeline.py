from collections.abc import Iterable, Iterator

from mediaflow.lib.cor.commands import Command
from mediaflow.lib.cor.errors import DuplicateCommandError


class Pipeline:
    """Pipeline represents an ordered sequence of commands.

    Commands are executed in the order they were added. Names must be unique
    within a pipeline because they key the error accumulator and the metrics.

    Args:
        name: The name of the pipeline.
        commands: Optional initial commands, added in order.
    """

    def __init__(self, name: str, commands: Iterable[Command] | None = None) -> None:
        self._name = name
        self._commands: list[Command] = []
        for command in commands or []:
            self.add(command)

    def add(self, command: Command) -> "Pipeline":
        """Append a command to the pipeline.

        Raises:
            DuplicateCommandError: If a command with the same name was already added.
        """
        if any(c.name == command.name for c in self._commands):
            raise DuplicateCommandError(
                f"Duplicate command name '{command.name}' in pipeline '{self._name}'"
            )
        self._commands.append(command)
        return self

    def __repr__(self) -> str:
        command_names = ", ".join(c.name for c in self._commands)
        return f"{self.name}(commands=[{command_names}])"

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def commands(self) -> list[Command]:
        """Get the commands of the pipeline."""
        return list(self._commands)

    @property
    def name(self) -> str:
        return self._name
