"""Standard shell commands: help, clear, history, script, stacktrace, exit.

These commands operate on the shell itself rather than on the CRM, and are
registered alongside the domain commands at startup.
"""

import logging
import traceback
from pathlib import Path
from typing import Any, Iterator, List, Optional

from prompt_toolkit.history import History

from .commands import CommandParameter, CommandRegistry, ShellCommand
from .completion import CommandCompletion
from .console import ConsoleService
from .errors import ExitRequest, InvalidArgumentError

logger = logging.getLogger(__name__)


class CommandNameValueProvider:
    """Complete command names for 'help <command>'.

    Attached explicitly to a parameter, so supports() matches nothing.
    Unavailable commands are left out, as in the help listing.
    """

    def __init__(self, registry: CommandRegistry):
        self._registry = registry

    def supports(self, param_type: Any) -> bool:
        return False

    def complete(self, fragment: str) -> Iterator[CommandCompletion]:
        for command in self._registry.available_commands():
            for name in (command.name,) + tuple(command.aliases):
                if name.startswith(fragment):
                    yield CommandCompletion(name, command.description)


class BuiltinCommands:
    """Provides the shell's standard commands.

    Args:
        registry: Registry used for help listings, script execution and the
            last recorded error.
        console: Output service.
        history: Prompt history backing the 'history' command.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        console: ConsoleService,
        history: Optional[History] = None,
    ):
        self._registry = registry
        self._console = console
        self._history = history

    def get_user_commands(self) -> List[ShellCommand]:
        return [
            ShellCommand(
                name="help",
                description="Display help about available commands",
                handler=self.help,
                parameters=(
                    CommandParameter(
                        name="command",
                        description="Command to describe",
                        required=False,
                        value_provider=CommandNameValueProvider(self._registry),
                    ),
                ),
            ),
            ShellCommand(
                name="clear",
                description="Clear the shell screen",
                handler=self.clear,
            ),
            ShellCommand(
                name="history",
                description="Display the command history",
                handler=self.history,
                parameters=(
                    CommandParameter(
                        name="count",
                        description="Number of most recent entries to show",
                        type=int,
                        required=False,
                    ),
                ),
            ),
            ShellCommand(
                name="script",
                description="Read and execute commands from a file",
                handler=self.script,
                parameters=(
                    CommandParameter(
                        name="file",
                        description="Script file, one command per line",
                        type=Path,
                        capture_rest=True,
                    ),
                ),
            ),
            ShellCommand(
                name="stacktrace",
                description="Display the full stacktrace of the last error",
                handler=self.stacktrace,
            ),
            ShellCommand(
                name="exit",
                description="Exit the shell",
                handler=self.exit,
                aliases=("quit",),
            ),
        ]

    def help(self, command: Optional[str] = None) -> None:
        if command:
            self._console.lines(self._registry.build_command_help_text(command))
        else:
            self._console.lines(self._registry.build_help_text())

    def clear(self) -> None:
        self._console.clear()

    def history(self, count: Optional[int] = None) -> List[str]:
        """Print prompt history entries, oldest first."""
        if self._history is None:
            self._console.write("history is not available")
            return []
        if count is not None and count < 0:
            raise InvalidArgumentError("count", str(count), "a non-negative integer")

        # load_history_strings() yields newest first
        entries = list(reversed(list(self._history.load_history_strings())))
        if count is not None:
            entries = entries[-count:] if count else []
        for entry in entries:
            self._console.write("%s", entry)
        return entries

    def script(self, file: Path) -> int:
        """Execute each non-blank, non-comment line of a file.

        Stops at the first failing line; the error propagates to the caller.
        An 'exit' line ends the script, not the shell running it.

        Returns:
            Number of commands executed.
        """
        try:
            with open(file, "r") as f:
                lines = f.read().splitlines()
        except OSError as e:
            logger.warning(f"Cannot read script {file}: {e}")
            raise InvalidArgumentError("file", str(file), "a readable file")

        executed = 0
        for line in lines:
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            logger.debug(f"script {file}: {stripped}")
            try:
                self._registry.execute(stripped)
            except ExitRequest:
                logger.info(f"script {file}: exit after {executed} commands")
                break
            executed += 1
        return executed

    def stacktrace(self) -> None:
        error = self._registry.last_error
        if error is None:
            self._console.write("no error recorded")
            return
        formatted = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        self._console.traceback(formatted)

    def exit(self) -> None:
        raise ExitRequest()
