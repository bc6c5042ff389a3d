"""Application wiring and command-line entry point for the CRM shell.

Usage:
    crm-shell                          # interactive
    crm-shell -c "directory (#3)"      # run one command and exit
    crm-shell --script commands.txt    # run a script and exit
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from prompt_toolkit.history import FileHistory, History, InMemoryHistory

from .builtin_commands import BuiltinCommands
from .commands import CommandRegistry
from .completion import PathValueProvider, PersonValueProvider
from .config import DEFAULT_PROJECT_CONFIG, ShellConfig, load_config
from .connection_commands import ConnectionCommands
from .console import ConsoleService
from .converters import PersonConverter
from .directory import PersonDirectory
from .people_commands import PeopleCommands
from .prompt import ConnectedPromptProvider
from .session import ConnectionState
from .shell import InteractiveShell
from .trace import configure_logging

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """The wired-up components of a running shell."""
    config: ShellConfig
    directory: PersonDirectory
    session: ConnectionState
    registry: CommandRegistry
    console: ConsoleService
    shell: InteractiveShell


def create_history(history_file: str) -> History:
    """Create the prompt history, file-backed unless history_file is empty."""
    if not history_file:
        return InMemoryHistory()
    path = Path(history_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return FileHistory(str(path))


def create_application(
    config: Optional[ShellConfig] = None,
    console: Optional[ConsoleService] = None,
    history: Optional[History] = None,
) -> Application:
    """Build the directory, session state, registry and shell.

    The directory is fully loaded and the registry sealed before the shell
    is returned, so no command can observe a partially built application.

    Raises:
        DirectoryError: If the configured people list is invalid.
        RegistryError: If two commands claim the same name.
    """
    config = config or ShellConfig()
    console = console or ConsoleService()
    if history is None:
        history = create_history(config.history_file)

    directory = PersonDirectory.from_names(config.people)
    session = ConnectionState()

    registry = CommandRegistry()
    registry.add_converter(PersonConverter(directory))
    registry.add_value_provider(PersonValueProvider(directory))
    registry.add_value_provider(PathValueProvider())

    command_sets = [
        BuiltinCommands(registry, console, history),
        PeopleCommands(console),
        ConnectionCommands(console, session),
    ]
    for command_set in command_sets:
        for command in command_set.get_user_commands():
            registry.add(command)
    registry.seal()

    shell = InteractiveShell(
        registry=registry,
        console=console,
        prompt_provider=ConnectedPromptProvider(session, config.app_name),
        history=history,
        complete_while_typing=config.complete_while_typing,
    )
    return Application(
        config=config,
        directory=directory,
        session=session,
        registry=registry,
        console=console,
        shell=shell,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Interactive CRM shell with person directory lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  crm-shell
  crm-shell -c "directory (#3) Stephane Maldini"
  crm-shell --script commands.txt

Settings are read from .crm_shell/config.json, ~/.crm_shell/config.json
and CRM_SHELL_* environment variables.
        """,
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env)"
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_PROJECT_CONFIG,
        help=f"Project config file (default: {DEFAULT_PROJECT_CONFIG})"
    )
    parser.add_argument(
        "--command", "-c",
        type=str,
        help="Run a single command and exit (non-interactive mode)"
    )
    parser.add_argument(
        "--script",
        type=str,
        help="Run commands from a file and exit (non-interactive mode)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging to the trace file"
    )
    args = parser.parse_args(argv)

    if os.path.exists(args.env_file):
        load_dotenv(args.env_file)

    config = load_config(project_path=args.config)
    trace_path = configure_logging(config.trace_log, config.log_level, args.verbose)
    logger.info(f"Starting CRM shell (config: {config.source}, trace: {trace_path})")

    app = create_application(config)

    if args.command:
        return 0 if app.shell.run_command(args.command) else 1
    if args.script:
        return 0 if app.shell.run_script(args.script) else 1

    if not sys.stdin.isatty():
        sys.exit(
            "Error: crm-shell needs an interactive terminal.\n"
            "Use --command or --script for non-interactive use."
        )

    app.shell.run()
    return 0
