"""Interactive read-eval loop for the CRM shell.

Reads lines with a prompt_toolkit PromptSession (history, TAB completion,
dynamic prompt) and hands each one to the command registry. Command
failures are printed and the loop keeps going; Ctrl+D or 'exit' ends it.
"""

import logging
import shlex
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import History, InMemoryHistory
from prompt_toolkit.styles import Style

from .commands import CommandRegistry
from .completion import ShellCompleter
from .console import ConsoleService
from .errors import ExitRequest, ShellError
from .prompt import ConnectedPromptProvider

logger = logging.getLogger(__name__)

PROMPT_STYLE = Style.from_dict({
    "prompt": "ansigreen bold",
})


class InteractiveShell:
    """Runs commands from the terminal, a single line, or a script file."""

    def __init__(
        self,
        registry: CommandRegistry,
        console: ConsoleService,
        prompt_provider: ConnectedPromptProvider,
        history: Optional[History] = None,
        complete_while_typing: bool = False,
    ):
        self._registry = registry
        self._console = console
        self._prompt_provider = prompt_provider
        self._history = history or InMemoryHistory()
        self._complete_while_typing = complete_while_typing
        self._session: Optional[PromptSession] = None

    @property
    def history(self) -> History:
        return self._history

    def run_line(self, line: str) -> bool:
        """Execute one input line and report any failure.

        Returns:
            True if the command ran (or the line was blank), False if it failed.

        Raises:
            ExitRequest: When the line asked the shell to exit.
        """
        try:
            self._registry.execute(line)
            return True
        except ExitRequest:
            raise
        except ShellError as e:
            logger.info(f"Command failed: {line.strip()!r}: {e}")
            self._console.error(str(e))
            return False
        except Exception as e:
            logger.exception(f"Unexpected error running {line.strip()!r}")
            self._console.error(
                f"{type(e).__name__}: {e}. Details of the error have been omitted. "
                "You can use the 'stacktrace' command to print the full stacktrace."
            )
            return False

    def run_command(self, line: str) -> bool:
        """Execute one line outside the interactive loop.

        An exit request just ends the line successfully.
        """
        try:
            return self.run_line(line)
        except ExitRequest:
            return True

    def run_script(self, path: str) -> bool:
        """Run every command of a script file, stopping at the first failure."""
        return self.run_command(f"script {shlex.quote(path)}")

    def _create_session(self) -> PromptSession:
        return PromptSession(
            message=self._prompt_provider,
            history=self._history,
            completer=ShellCompleter(self._registry),
            complete_while_typing=self._complete_while_typing,
            complete_in_thread=True,
            style=PROMPT_STYLE,
        )

    def run(self) -> None:
        """Read and execute commands until exit or end of input."""
        if self._session is None:
            self._session = self._create_session()

        logger.info("Interactive shell started")
        while True:
            try:
                line = self._session.prompt()
            except KeyboardInterrupt:
                continue
            except EOFError:
                break

            try:
                self.run_line(line)
            except ExitRequest:
                break
        logger.info("Interactive shell stopped")
