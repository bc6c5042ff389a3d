"""Shared fixtures for crm_shell tests."""

import io

import pytest
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console

from crm_shell.app import create_application
from crm_shell.config import ShellConfig
from crm_shell.console import ConsoleService
from crm_shell.directory import PersonDirectory


@pytest.fixture
def console():
    """ConsoleService writing plain text to an in-memory buffer."""
    return ConsoleService(Console(file=io.StringIO(), width=200, color_system=None, highlight=False))


@pytest.fixture
def directory():
    """Directory seeded with the default nine people."""
    return PersonDirectory.from_names()


@pytest.fixture
def app(console):
    """Fully wired application with in-memory history."""
    config = ShellConfig(history_file="", trace_log="")
    return create_application(config, console=console, history=InMemoryHistory())


@pytest.fixture
def output(console):
    """Callable returning everything written to the test console so far."""
    return lambda: console.console.file.getvalue()
