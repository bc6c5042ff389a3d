"""Argument converters that turn raw tokens into typed values.

A converter declares which parameter types it can produce through
supports(), so the command registry can pick one by capability rather
than by looking at concrete classes.
"""

import re
from typing import Any, Optional, Protocol, runtime_checkable

from .directory import PersonDirectory
from .errors import MalformedTokenError, UnknownEntityError, ArgumentResolutionError
from .models import Person


@runtime_checkable
class Converter(Protocol):
    """Interface for argument converters."""

    def supports(self, param_type: Any) -> bool:
        """Return True if this converter can produce values for param_type."""
        ...

    def convert(self, token: str) -> Any:
        """Convert a raw token, raising ArgumentResolutionError on failure."""
        ...


class PersonConverter:
    """Resolve tokens like "(#42) Jane Doe" to a Person.

    Only the "(#<id>)" marker matters: any text before or after it is
    ignored, so completion candidates can be passed back verbatim.
    """

    PATTERN = re.compile(r"\(#(\d+)\).*")

    def __init__(self, directory: PersonDirectory):
        self._directory = directory

    def supports(self, param_type: Any) -> bool:
        return isinstance(param_type, type) and issubclass(Person, param_type)

    def convert(self, token: str) -> Person:
        """Resolve a token to a Person.

        Raises:
            MalformedTokenError: If the token has no "(#<digits>)" marker.
            UnknownEntityError: If no person has the embedded id.
        """
        match = self.PATTERN.search(token)
        if not match or not match.group(1):
            raise MalformedTokenError(token)

        person_id = int(match.group(1))
        person = self._directory.find_by_id(person_id)
        if person is None:
            raise UnknownEntityError(token, person_id)
        return person

    def resolve(self, token: str) -> Optional[Person]:
        """Resolve a token to a Person, or None if it cannot be resolved.

        Malformed tokens and unknown ids both yield None; use convert()
        to tell them apart.
        """
        try:
            return self.convert(token)
        except ArgumentResolutionError:
            return None
