"""In-memory person directory.

The directory is filled exactly once by load(). Until then readers block on
an initialization barrier, so nothing observes a half-populated map. After
loading, lookups take a snapshot under the lock and filter outside it.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional

from .errors import DirectoryError
from .models import DEFAULT_PEOPLE, Person

logger = logging.getLogger(__name__)

# Seconds a reader waits for load() before giving up
DEFAULT_READY_TIMEOUT = 5.0


class PersonDirectory:
    """Thread-safe store of Person records keyed by id."""

    def __init__(self, ready_timeout: float = DEFAULT_READY_TIMEOUT):
        """Initialize an empty directory.

        Args:
            ready_timeout: Seconds a read waits for the initial load before
                raising DirectoryError.
        """
        self._people: Dict[int, Person] = {}
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._ready_timeout = ready_timeout

    @classmethod
    def from_names(cls, names: Iterable[str] = DEFAULT_PEOPLE, **kwargs) -> "PersonDirectory":
        """Create a directory and load it from a list of names."""
        directory = cls(**kwargs)
        directory.load(names)
        return directory

    def load(self, names: Iterable[str]) -> None:
        """Bulk-insert people, assigning ids from 1 in iteration order.

        Args:
            names: Display names of the people to store.

        Raises:
            DirectoryError: If the directory was already loaded or a name
                is blank or not a string.
        """
        people: Dict[int, Person] = {}
        for index, name in enumerate(names, start=1):
            if not isinstance(name, str) or not name.strip():
                raise DirectoryError(f"Invalid person name at position {index}: {name!r}")
            people[index] = Person(id=index, name=name.strip())

        with self._lock:
            if self._ready.is_set():
                raise DirectoryError("Person directory is already loaded")
            self._people.update(people)
            self._ready.set()

        logger.info(f"Loaded {len(people)} people into the directory")

    @property
    def is_loaded(self) -> bool:
        return self._ready.is_set()

    def _await_ready(self) -> None:
        if not self._ready.wait(self._ready_timeout):
            raise DirectoryError(
                f"Person directory was not loaded within {self._ready_timeout}s"
            )

    def _snapshot(self) -> List[Person]:
        self._await_ready()
        with self._lock:
            return list(self._people.values())

    def find_by_id(self, person_id: int) -> Optional[Person]:
        """Look up a person by id.

        Returns:
            The stored Person, or None if no person has that id.
        """
        self._await_ready()
        with self._lock:
            return self._people.get(person_id)

    def find_by_name(self, fragment: str) -> List[Person]:
        """Find people whose name contains a fragment, ignoring case.

        An empty fragment matches everyone. Results follow insertion order.
        """
        needle = fragment.lower()
        return [p for p in self._snapshot() if needle in p.name.lower()]

    def all(self) -> List[Person]:
        """Return every person in insertion order."""
        return self._snapshot()

    def __len__(self) -> int:
        with self._lock:
            return len(self._people)
