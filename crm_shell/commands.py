"""Command registry for the CRM shell.

Commands are declared as ShellCommand descriptors carrying a handler, a
parameter schema and an optional availability predicate. The registry
parses a raw input line against that schema, converts typed parameters
through whichever registered converter supports the declared type, checks
availability and finally calls the handler with keyword arguments.

Types:
- Availability: Result of an availability predicate.
- CommandParameter: Definition of a command parameter for argument parsing.
- ShellCommand: Declaration of a user-facing command.
- CommandRegistry: Name -> command lookup, dispatch and help listing.
"""

import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .converters import Converter
from .completion import ValueProvider
from .errors import (
    ArgumentResolutionError,
    CommandNotFoundError,
    CommandUnavailableError,
    ExitRequest,
    InvalidArgumentError,
    MissingArgumentError,
    RegistryError,
    TooManyArgumentsError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Availability:
    """Whether a command may currently be invoked.

    Attributes:
        is_available: True if the command can run.
        reason: Human-readable explanation when unavailable.
    """
    is_available: bool
    reason: Optional[str] = None

    @classmethod
    def available(cls) -> "Availability":
        return cls(True)

    @classmethod
    def unavailable(cls, reason: str) -> "Availability":
        return cls(False, reason)


@dataclass(frozen=True)
class CommandParameter:
    """Definition of a command parameter for argument parsing.

    Attributes:
        name: Parameter name, used as the handler keyword argument.
        description: Brief description for help text.
        type: Declared parameter kind. Converters and value providers are
            chosen by asking each one whether it supports this type.
        required: Whether the parameter must be supplied.
        capture_rest: If True, this parameter captures all remaining words
            as a single string. Only valid for the last parameter.
        value_provider: Explicit completion source, overriding lookup by type.
    """
    name: str
    description: str = ""
    type: Any = str
    required: bool = True
    capture_rest: bool = False
    value_provider: Optional[ValueProvider] = None


@dataclass(frozen=True)
class ShellCommand:
    """Declaration of a user-facing command.

    Attributes:
        name: Command name for invocation and autocompletion.
        description: Brief description shown in completion and help.
        handler: Callable invoked with the converted arguments as keywords.
        parameters: Parameter schema, in positional order.
        availability: Optional predicate gating invocation.
        aliases: Alternative names for the command.
    """
    name: str
    description: str
    handler: Callable[..., Any]
    parameters: Tuple[CommandParameter, ...] = ()
    availability: Optional[Callable[[], Availability]] = None
    aliases: Tuple[str, ...] = field(default=())

    def check_availability(self) -> Availability:
        if self.availability is None:
            return Availability.available()
        return self.availability()

    @property
    def usage(self) -> str:
        parts = [self.name]
        for param in self.parameters:
            label = f"<{param.name}>" if param.required else f"[{param.name}]"
            parts.append(label)
        return " ".join(parts)


def split_command_line(line: str) -> Tuple[str, str]:
    """Split an input line into command name and raw argument string."""
    parts = line.strip().split(maxsplit=1)
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


def _capture_rest(text: str) -> str:
    """Value of a capture_rest parameter.

    A single quoted word is unquoted verbatim; anything else is the
    remaining words joined by single spaces.
    """
    text = text.strip()
    if text[:1] in ("'", '"'):
        try:
            words = shlex.split(text)
        except ValueError:
            words = []
        if len(words) == 1:
            return words[0]
    return ' '.join(text.split())


def parse_command_args(command: ShellCommand, raw_args: str) -> Dict[str, str]:
    """Map a raw argument string onto the command's parameters.

    Words are assigned to parameters positionally, with shell-style quoting,
    so 'connect "jane doe" "my secret"' passes values containing spaces.
    A capture_rest parameter takes the rest of the line.

    Args:
        command: The command whose schema drives parsing.
        raw_args: Raw argument string from user input.

    Returns:
        Dictionary of parameter name -> raw string value. Parameters with
        no corresponding word are absent.

    Raises:
        TooManyArgumentsError: If words remain after every parameter is filled.
        InvalidArgumentError: If a quotation is not closed.
    """
    lexer = shlex.shlex(raw_args, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ''
    result: Dict[str, str] = {}

    try:
        for param in command.parameters:
            if param.capture_rest:
                rest = lexer.instream.read()
                if rest.strip():
                    result[param.name] = _capture_rest(rest)
                break

            word = lexer.get_token()
            if word is None:
                break
            result[param.name] = word

        extra = list(lexer)
    except ValueError:
        raise InvalidArgumentError("arguments", raw_args.strip(), "closed quotes")

    if extra:
        raise TooManyArgumentsError(command.name, ' '.join(extra))

    return result


class CommandRegistry:
    """Registry of shell commands, converters and value providers.

    Populate it at startup with add()/register(), add_converter() and
    add_value_provider(), then call seal(). A sealed registry rejects any
    further registration.
    """

    def __init__(self):
        self._commands: Dict[str, ShellCommand] = {}
        self._aliases: Dict[str, str] = {}
        self._converters: List[Converter] = []
        self._value_providers: List[ValueProvider] = []
        self._sealed = False
        self.last_error: Optional[BaseException] = None

    # -- registration -----------------------------------------------------

    def _check_open(self) -> None:
        if self._sealed:
            raise RegistryError("Command registry is sealed")

    def add(self, command: ShellCommand) -> ShellCommand:
        """Register a command descriptor.

        Raises:
            RegistryError: If the registry is sealed, a name or alias is
                already taken, or a capture_rest parameter is not last.
        """
        self._check_open()
        for name in (command.name,) + tuple(command.aliases):
            if name in self._commands or name in self._aliases:
                raise RegistryError(f"Command name '{name}' is already registered")
        for param in command.parameters[:-1]:
            if param.capture_rest:
                raise RegistryError(
                    f"Parameter '{param.name}' of '{command.name}' captures the rest "
                    "of the line but is not the last parameter"
                )

        self._commands[command.name] = command
        for alias in command.aliases:
            self._aliases[alias] = command.name
        logger.debug(f"Registered command '{command.name}'")
        return command

    def register(
        self,
        name: str,
        description: str,
        parameters: Optional[List[CommandParameter]] = None,
        availability: Optional[Callable[[], Availability]] = None,
        aliases: Optional[List[str]] = None,
    ) -> Callable:
        """Decorator to register a function as a command.

        Example:
            @registry.register("greet", "Say hello",
                               parameters=[CommandParameter("name")])
            def greet(name):
                console.write("hello %s", name)
        """
        def decorator(func: Callable) -> Callable:
            self.add(ShellCommand(
                name=name,
                description=description,
                handler=func,
                parameters=tuple(parameters or ()),
                availability=availability,
                aliases=tuple(aliases or ()),
            ))
            return func
        return decorator

    def add_converter(self, converter: Converter) -> None:
        self._check_open()
        self._converters.append(converter)

    def add_value_provider(self, provider: ValueProvider) -> None:
        self._check_open()
        self._value_providers.append(provider)

    def seal(self) -> None:
        """Freeze the registry; later registration raises RegistryError."""
        self._sealed = True
        logger.info(f"Command registry sealed with {len(self._commands)} commands")

    @property
    def sealed(self) -> bool:
        return self._sealed

    # -- lookup -----------------------------------------------------------

    def get(self, name: str) -> Optional[ShellCommand]:
        """Get a command by name or alias."""
        if name in self._commands:
            return self._commands[name]
        if name in self._aliases:
            return self._commands[self._aliases[name]]
        return None

    def all_commands(self) -> List[ShellCommand]:
        """Get all registered commands sorted by name."""
        return sorted(self._commands.values(), key=lambda c: c.name)

    def available_commands(self) -> List[ShellCommand]:
        """Get commands whose availability predicate currently allows them."""
        return [c for c in self.all_commands() if c.check_availability().is_available]

    def converter_for(self, param_type: Any) -> Optional[Converter]:
        for converter in self._converters:
            if converter.supports(param_type):
                return converter
        return None

    def value_provider_for(self, param: CommandParameter) -> Optional[ValueProvider]:
        """Pick the completion source for a parameter.

        An explicit value_provider wins; otherwise the first registered
        provider that supports the parameter type is used.
        """
        if param.value_provider is not None:
            return param.value_provider
        for provider in self._value_providers:
            if provider.supports(param.type):
                return provider
        return None

    # -- dispatch ---------------------------------------------------------

    def _convert(self, param: CommandParameter, raw: str) -> Any:
        converter = self.converter_for(param.type)
        if converter is not None:
            try:
                return converter.convert(raw)
            except ArgumentResolutionError as e:
                raise e.for_parameter(param.name)

        if param.type is Path:
            return Path(raw).expanduser()
        if param.type is int:
            try:
                return int(raw)
            except ValueError:
                raise InvalidArgumentError(param.name, raw, "an integer")
        return raw

    def resolve_arguments(self, command: ShellCommand, raw_args: str) -> Dict[str, Any]:
        """Parse and convert the arguments for a command.

        Raises:
            MissingArgumentError: If a required parameter is absent.
            TooManyArgumentsError: If surplus words remain.
            ArgumentResolutionError: If a typed parameter cannot be resolved.
            InvalidArgumentError: If a plain typed parameter is malformed.
        """
        raw_values = parse_command_args(command, raw_args)
        kwargs: Dict[str, Any] = {}
        for param in command.parameters:
            if param.name not in raw_values:
                if param.required:
                    raise MissingArgumentError(command.name, param.name)
                continue
            kwargs[param.name] = self._convert(param, raw_values[param.name])
        return kwargs

    def execute(self, line: str) -> Any:
        """Run one input line.

        Returns:
            Whatever the handler returns, or None for a blank line.

        Raises:
            ShellError: For any user-facing failure (unknown command,
                unavailable command, bad arguments or handler errors).
            ExitRequest: When the exit command runs.
        """
        name, raw_args = split_command_line(line)
        if not name:
            return None

        try:
            command = self.get(name)
            if command is None:
                raise CommandNotFoundError(name)

            availability = command.check_availability()
            if not availability.is_available:
                raise CommandUnavailableError(command.name, availability.reason)

            kwargs = self.resolve_arguments(command, raw_args)
            logger.debug(f"Executing '{command.name}' with {sorted(kwargs)}")
            return command.handler(**kwargs)
        except ExitRequest:
            raise
        except Exception as e:
            self.last_error = e
            raise

    # -- help -------------------------------------------------------------

    def build_help_text(self) -> List[Tuple[str, str]]:
        """Build help lines for every currently available command.

        Returns:
            List of (text, style) tuples for display.
        """
        lines = [("Available commands:", "bold")]
        for command in self.available_commands():
            names = ", ".join((command.name,) + tuple(command.aliases))
            padding = max(2, 20 - len(names))
            lines.append((f"  {names}{' ' * padding}- {command.description}", "dim"))
        return lines

    def build_command_help_text(self, name: str) -> List[Tuple[str, str]]:
        """Build detailed help lines for one command.

        Raises:
            CommandNotFoundError: If no such command exists, or it is
                currently unavailable.
        """
        command = self.get(name)
        if command is None or not command.check_availability().is_available:
            raise CommandNotFoundError(name)

        lines = [
            (command.name, "bold"),
            (f"  {command.description}", ""),
            ("", ""),
            ("Usage:", "bold"),
            (f"  {command.usage}", "dim"),
        ]
        if command.parameters:
            lines.append(("", ""))
            lines.append(("Parameters:", "bold"))
            for param in command.parameters:
                flag = "required" if param.required else "optional"
                lines.append((f"  {param.name} ({flag}) - {param.description}", "dim"))
        if command.aliases:
            lines.append(("", ""))
            lines.append((f"Aliases: {', '.join(command.aliases)}", "dim"))
        return lines
