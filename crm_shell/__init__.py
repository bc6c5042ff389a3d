"""Interactive CRM shell: person directory lookup with typed arguments and completion."""

from .commands import Availability, CommandParameter, CommandRegistry, ShellCommand
from .directory import PersonDirectory
from .models import DEFAULT_PEOPLE, Person, format_person_token
from .session import ConnectionState

__version__ = "0.1.0"

__all__ = [
    "Availability",
    "CommandParameter",
    "CommandRegistry",
    "ConnectionState",
    "DEFAULT_PEOPLE",
    "Person",
    "PersonDirectory",
    "ShellCommand",
    "format_person_token",
]
