"""Commands for working with people in the directory."""

from typing import List

from .commands import CommandParameter, ShellCommand
from .console import ConsoleService
from .models import Person


class PeopleCommands:
    """Provides the 'directory' command."""

    def __init__(self, console: ConsoleService):
        self._console = console

    def get_user_commands(self) -> List[ShellCommand]:
        return [
            ShellCommand(
                name="directory",
                description="Interact with the directory",
                handler=self.directory,
                parameters=(
                    CommandParameter(
                        name="person",
                        description="Person reference, e.g. '(#3) Stephane Maldini' (TAB to complete)",
                        type=Person,
                        capture_rest=True,
                    ),
                ),
            ),
        ]

    def directory(self, person: Person) -> Person:
        self._console.write("working with %s.", person.name)
        return person
