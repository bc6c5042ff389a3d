"""Commands that connect to and disconnect from the CRM.

The two commands gate each other through availability predicates:
'connect' is only offered while disconnected and 'disconnect' only while
connected.
"""

from typing import List

from .commands import Availability, CommandParameter, ShellCommand
from .console import ConsoleService
from .session import ConnectionState


class ConnectionCommands:
    """Provides the 'connect' and 'disconnect' commands."""

    def __init__(self, console: ConsoleService, session: ConnectionState):
        self._console = console
        self._session = session

    def get_user_commands(self) -> List[ShellCommand]:
        return [
            ShellCommand(
                name="connect",
                description="Connect to the CRM",
                handler=self.connect,
                parameters=(
                    CommandParameter(name="username", description="User name"),
                    CommandParameter(name="password", description="Password (not checked)"),
                ),
                availability=self.connect_availability,
            ),
            ShellCommand(
                name="disconnect",
                description="Disconnect from the CRM",
                handler=self.disconnect,
                availability=self.disconnect_availability,
            ),
        ]

    def connect(self, username: str, password: str) -> None:
        self._session.connect(username, password)
        self._console.write("connected %s.", username)

    def connect_availability(self) -> Availability:
        if not self._session.is_connected():
            return Availability.available()
        return Availability.unavailable("you're already connected")

    def disconnect(self) -> None:
        self._session.disconnect()

    def disconnect_availability(self) -> Availability:
        if self._session.is_connected():
            return Availability.available()
        return Availability.unavailable("you're not connected")
