"""Console output for the CRM shell, rendered with rich."""

from typing import List, Optional, Tuple

from rich.console import Console
from rich.text import Text

# Help-line style names -> rich styles
_LINE_STYLES = {
    "bold": "bold",
    "dim": "dim",
    "": "",
}


class ConsoleService:
    """Writes command output, errors and help text to the terminal.

    Messages are built as rich Text objects, so square brackets typed by the
    user are printed literally instead of being parsed as markup.
    """

    PREFIX = "> "

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console(highlight=False)

    @property
    def console(self) -> Console:
        return self._console

    def write(self, msg: str, *args: str) -> None:
        """Print a "> "-prefixed message in yellow.

        Args:
            msg: printf-style format string.
            args: Values substituted into msg.
        """
        text = Text(self.PREFIX)
        text.append(msg % args if args else msg, style="yellow")
        self._console.print(text)

    def error(self, msg: str) -> None:
        self._console.print(Text(msg, style="red"))

    def lines(self, lines: List[Tuple[str, str]]) -> None:
        """Print styled (text, style) lines such as help output."""
        for line, style in lines:
            self._console.print(Text(line, style=_LINE_STYLES.get(style, style)))

    def traceback(self, formatted: str) -> None:
        self._console.print(Text(formatted.rstrip("\n"), style="red"))

    def clear(self) -> None:
        self._console.clear()
