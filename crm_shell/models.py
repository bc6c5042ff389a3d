"""Data models for the CRM shell."""

from dataclasses import dataclass
from typing import Tuple

# Seed list loaded at startup; ids are assigned from 1 in this order
DEFAULT_PEOPLE: Tuple[str, ...] = (
    "Brian Dussault",
    "Brian Clozel",
    "Stephane Maldini",
    "Stephane Nicoll",
    "James Watters",
    "James Bayer",
    "Cornelia Davis",
    "Madhura Bhave",
    "Eric Bottard",
)


@dataclass(frozen=True)
class Person:
    """A directory record.

    Attributes:
        id: Unique numeric identifier, assigned when the directory is loaded.
        name: Display name.
    """
    id: int
    name: str


def format_person_token(person: Person) -> str:
    """Format a person as the token accepted by PersonConverter.

    Example:
        Person(3, "Stephane Maldini") -> "(#3) Stephane Maldini"
    """
    return f"(#{person.id}) {person.name}"
