"""Completion for the interactive CRM shell.

Provides:
- ValueProvider: interface for sources of argument completion candidates
- PersonValueProvider: "(#id) name" candidates from the person directory
- PathValueProvider: filesystem paths for script files
- ShellCompleter: prompt_toolkit completer for command names and arguments

Command names are completed on the first word. Once a command name is
followed by a space, the completer works out which parameter is being typed
and asks that parameter's value provider for candidates.
"""

import logging
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Iterator, NamedTuple, Optional, Protocol, Tuple

from prompt_toolkit.completion import CompleteEvent, Completer, Completion, PathCompleter
from prompt_toolkit.document import Document

from .directory import PersonDirectory
from .models import Person, format_person_token

if TYPE_CHECKING:
    from .commands import CommandParameter, CommandRegistry, ShellCommand

logger = logging.getLogger(__name__)

_WORD = re.compile(r"\S+")


class CommandCompletion(NamedTuple):
    """A completion candidate for a command argument."""
    value: str
    description: str = ""


class ValueProvider(Protocol):
    """Interface for argument completion sources."""

    def supports(self, param_type: Any) -> bool:
        """Return True if this provider can complete values for param_type."""
        ...

    def complete(self, fragment: str) -> Iterable[CommandCompletion]:
        """Return candidates for the partially typed fragment."""
        ...


class PersonValueProvider:
    """Complete Person arguments from the directory.

    Candidates are formatted as "(#<id>) <name>", which PersonConverter
    accepts back unchanged. Results are computed from the directory on every
    call and returned as a one-shot generator.
    """

    def __init__(self, directory: PersonDirectory):
        self._directory = directory

    def supports(self, param_type: Any) -> bool:
        return isinstance(param_type, type) and issubclass(Person, param_type)

    def complete(self, fragment: str) -> Iterator[CommandCompletion]:
        for person in self._directory.find_by_name(fragment):
            yield CommandCompletion(format_person_token(person), "person")


class PathValueProvider:
    """Complete filesystem paths for Path arguments.

    Delegates the directory listing to prompt_toolkit's PathCompleter and
    returns full replacement values, with a trailing / on directories.
    """

    def __init__(self, expanduser: bool = True):
        self._path_completer = PathCompleter(expanduser=expanduser)

    def supports(self, param_type: Any) -> bool:
        return param_type is Path

    def complete(self, fragment: str) -> Iterator[CommandCompletion]:
        path_doc = Document(text=fragment, cursor_position=len(fragment))
        for completion in self._path_completer.get_completions(path_doc, CompleteEvent()):
            keep = len(fragment) + completion.start_position
            value = fragment[:keep] + completion.text
            if os.path.isdir(os.path.expanduser(value)):
                if not value.endswith('/'):
                    value += '/'
                yield CommandCompletion(value, "directory")
            else:
                yield CommandCompletion(value, "file")


class ShellCompleter(Completer):
    """Complete command names and arguments for the CRM shell.

    Only commands whose availability predicate currently allows them are
    suggested, and arguments of unavailable commands are not completed.

    Example usage:
        "dir" -> completes to "directory"
        "directory steph" -> "(#3) Stephane Maldini", "(#4) Stephane Nicoll"
    """

    def __init__(self, registry: "CommandRegistry"):
        self._registry = registry

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor.lstrip()

        name_match = _WORD.match(text)
        if name_match is None or name_match.end() == len(text):
            yield from self._complete_command_name(text)
            return

        command = self._registry.get(name_match.group())
        if command is None or not command.check_availability().is_available:
            return

        arg_text = text[name_match.end():].lstrip()
        located = self._locate_parameter(command, arg_text)
        if located is None:
            return
        param, partial = located

        provider = self._registry.value_provider_for(param)
        if provider is None:
            return

        try:
            candidates = list(provider.complete(partial))
        except Exception as e:
            logger.warning(f"Completion for '{command.name} {param.name}' failed: {e}")
            return

        for candidate in candidates:
            yield Completion(
                candidate.value,
                start_position=-len(partial),
                display=candidate.value,
                display_meta=candidate.description,
            )

    def _complete_command_name(self, partial: str) -> Iterable[Completion]:
        partial_lower = partial.lower()
        for command in self._registry.available_commands():
            for name in (command.name,) + tuple(command.aliases):
                if name.lower().startswith(partial_lower):
                    yield Completion(
                        name,
                        start_position=-len(partial),
                        display=name,
                        display_meta=command.description,
                    )

    @staticmethod
    def _locate_parameter(
        command: "ShellCommand", arg_text: str
    ) -> Optional[Tuple["CommandParameter", str]]:
        """Find the parameter under the cursor and the text typed for it.

        A trailing space means the previous word is finished and the next
        parameter is being started. A capture_rest parameter owns everything
        from its first word to the cursor.

        Returns:
            (parameter, partial text), or None if every parameter is filled.
        """
        words = list(_WORD.finditer(arg_text))
        if not words or arg_text[-1].isspace():
            index = len(words)
        else:
            index = len(words) - 1

        for position, param in enumerate(command.parameters):
            if param.capture_rest and position <= index:
                if position < len(words):
                    return param, arg_text[words[position].start():]
                return param, ""
            if position == index:
                partial = words[index].group() if index < len(words) else ""
                return param, partial
        return None
