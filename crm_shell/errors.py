"""Error types for the CRM shell.

Every user-facing failure derives from ShellError so the interactive loop
can report it and keep reading input. DirectoryError and RegistryError
signal broken startup wiring and are not meant to be caught by the loop.
"""

from typing import Optional


class ShellError(Exception):
    """Base class for errors reported to the shell user."""
    pass


class CommandNotFoundError(ShellError):
    """No command is registered under the given name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No command found for '{name}'. Type 'help' to list commands.")


class CommandUnavailableError(ShellError):
    """The command exists but its availability predicate denied it."""

    def __init__(self, name: str, reason: Optional[str] = None):
        self.name = name
        self.reason = reason
        detail = f" because {reason}" if reason else ""
        super().__init__(f"Command '{name}' exists but is not currently available{detail}.")


class MissingArgumentError(ShellError):
    """A required parameter was not supplied."""

    def __init__(self, command: str, parameter: str):
        self.command = command
        self.parameter = parameter
        super().__init__(f"Parameter '{parameter}' is required for '{command}'.")


class TooManyArgumentsError(ShellError):
    """More positional values were supplied than the command declares."""

    def __init__(self, command: str, extra: str):
        self.command = command
        self.extra = extra
        super().__init__(f"Too many arguments for '{command}': unexpected '{extra}'.")


class InvalidArgumentError(ShellError):
    """A plain (non-entity) argument has an unusable value."""

    def __init__(self, parameter: str, value: str, expected: str):
        self.parameter = parameter
        self.value = value
        self.expected = expected
        super().__init__(f"Invalid value '{value}' for '{parameter}': expected {expected}.")


class ArgumentResolutionError(ShellError):
    """A token could not be resolved to an entity.

    Attributes:
        token: The raw token typed by the user.
        parameter: Name of the parameter being resolved, filled in by the
            registry when the error crosses the dispatch boundary.
    """

    def __init__(self, token: str, message: str, parameter: Optional[str] = None):
        self.token = token
        self.parameter = parameter
        self.detail = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.parameter:
            return f"Cannot resolve '{self.parameter}' from '{self.token}': {self.detail}"
        return f"Cannot resolve '{self.token}': {self.detail}"

    def for_parameter(self, parameter: str) -> "ArgumentResolutionError":
        """Attach the parameter name and refresh the message."""
        self.parameter = parameter
        self.args = (self._format_message(),)
        return self


class MalformedTokenError(ArgumentResolutionError):
    """The token carries no '(#<id>)' marker."""

    def __init__(self, token: str):
        super().__init__(token, "expected a reference like '(#42) Jane Doe'")


class UnknownEntityError(ArgumentResolutionError):
    """The token is well-formed but no entity has that id."""

    def __init__(self, token: str, entity_id: int):
        self.entity_id = entity_id
        super().__init__(token, f"no person with id {entity_id}")


class DirectoryError(Exception):
    """The person directory was seeded or read incorrectly."""
    pass


class RegistryError(Exception):
    """Commands were registered incorrectly."""
    pass


class ExitRequest(Exception):
    """Raised by the exit command to stop the interactive loop."""
    pass
