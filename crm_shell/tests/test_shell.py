"""Tests for InteractiveShell and the command-line entry point."""

import logging
import os
from unittest.mock import MagicMock, patch

import pytest
from prompt_toolkit.history import FileHistory, InMemoryHistory

from crm_shell.app import create_application, create_history, main
from crm_shell.commands import ShellCommand
from crm_shell.config import ShellConfig
from crm_shell.errors import DirectoryError
from crm_shell.shell import InteractiveShell


class TestRunLine:

    def test_success(self, app, output):
        assert app.shell.run_line("directory (#2) Brian Clozel") is True
        assert output() == "> working with Brian Clozel.\n"

    def test_blank_line(self, app, output):
        assert app.shell.run_line("") is True
        assert output() == ""

    def test_unknown_command_reported(self, app, output):
        assert app.shell.run_line("frobnicate") is False
        assert "frobnicate" in output()

    def test_unexpected_error_suggests_stacktrace(self, console, output):
        registry = MagicMock()
        registry.execute.side_effect = RuntimeError("boom")
        shell = InteractiveShell(registry, console, prompt_provider=MagicMock())

        assert shell.run_line("anything") is False
        text = output()
        assert "RuntimeError: boom" in text
        assert "stacktrace" in text

    def test_exit_propagates(self, app):
        from crm_shell.errors import ExitRequest
        with pytest.raises(ExitRequest):
            app.shell.run_line("exit")

    def test_run_command_treats_exit_as_success(self, app):
        assert app.shell.run_command("quit") is True


class TestInteractiveLoop:

    def _shell_with_inputs(self, app, inputs):
        session = MagicMock()
        session.prompt.side_effect = inputs
        app.shell._session = session
        return session

    def test_runs_until_eof(self, app, output):
        self._shell_with_inputs(app, ["connect jlong pw", "directory (#5)", EOFError()])
        app.shell.run()
        assert app.session.is_connected() is True
        assert "working with James Watters." in output()

    def test_ctrl_c_keeps_running(self, app):
        session = self._shell_with_inputs(app, [KeyboardInterrupt(), "connect a b", EOFError()])
        app.shell.run()
        assert session.prompt.call_count == 3
        assert app.session.is_connected() is True

    def test_exit_stops_loop(self, app):
        session = self._shell_with_inputs(app, ["exit", "connect a b"])
        app.shell.run()
        assert session.prompt.call_count == 1
        assert app.session.is_connected() is False

    def test_exit_inside_script_keeps_shell_running(self, app, tmp_path):
        script = tmp_path / "leave.crm"
        script.write_text("exit\n")
        session = self._shell_with_inputs(app, [f"script {script}", "connect a b", EOFError()])
        app.shell.run()
        assert session.prompt.call_count == 3
        assert app.session.is_connected() is True

    def test_errors_do_not_stop_loop(self, app, output):
        self._shell_with_inputs(app, ["disconnect", "directory oops", "connect a b", EOFError()])
        app.shell.run()
        assert "you're not connected" in output()
        assert app.session.is_connected() is True


class TestCreateApplication:

    def test_registers_all_commands(self, app):
        names = {c.name for c in app.registry.all_commands()}
        assert {"directory", "connect", "disconnect", "help", "clear",
                "history", "script", "stacktrace", "exit"} <= names
        assert app.registry.sealed is True

    def test_registry_sealed_after_startup(self, app):
        from crm_shell.errors import RegistryError
        with pytest.raises(RegistryError):
            app.registry.add(ShellCommand("late", "Late", handler=lambda: None))

    def test_directory_loaded_from_config(self, console):
        config = ShellConfig(history_file="", trace_log="", people=["Ada Lovelace"])
        app = create_application(config, console=console, history=InMemoryHistory())
        assert app.directory.is_loaded
        assert app.registry.execute("directory (#1)").name == "Ada Lovelace"

    def test_invalid_people_rejected(self, console):
        config = ShellConfig(history_file="", trace_log="", people=["Ada", "  "])
        with pytest.raises(DirectoryError):
            create_application(config, console=console, history=InMemoryHistory())

    def test_prompt_uses_app_name(self, console):
        config = ShellConfig(history_file="", trace_log="", app_name="acme CRM")
        app = create_application(config, console=console, history=InMemoryHistory())
        assert app.shell._prompt_provider.render() == "acme CRM (disconnected)> "


class TestCreateHistory:

    def test_in_memory_when_empty(self):
        assert isinstance(create_history(""), InMemoryHistory)

    def test_file_history_creates_parent(self, tmp_path):
        history_file = tmp_path / "nested" / "history"
        history = create_history(str(history_file))
        assert isinstance(history, FileHistory)
        assert history_file.parent.is_dir()


class TestMain:

    @pytest.fixture(autouse=True)
    def isolated_env(self, monkeypatch, tmp_path):
        for key in list(os.environ):
            if key.startswith("CRM_SHELL_"):
                monkeypatch.delenv(key)
        monkeypatch.setenv("CRM_SHELL_HISTORY_FILE", "")
        monkeypatch.setenv("CRM_SHELL_TRACE_LOG", "")
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("COLUMNS", "200")

        root = logging.getLogger("crm_shell")
        handlers, level, propagate = list(root.handlers), root.level, root.propagate
        yield tmp_path
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)
        root.propagate = propagate

    def _args(self, tmp_path, *extra):
        return [
            "--env-file", str(tmp_path / "missing.env"),
            "--config", str(tmp_path / "missing.json"),
            *extra,
        ]

    def test_single_command(self, isolated_env, capsys):
        code = main(self._args(isolated_env, "-c", "directory (#3) Stephane Maldini"))
        assert code == 0
        assert "working with Stephane Maldini." in capsys.readouterr().out

    def test_failed_command(self, isolated_env, capsys):
        code = main(self._args(isolated_env, "-c", "disconnect"))
        assert code == 1
        assert "you're not connected" in capsys.readouterr().out

    def test_script(self, isolated_env, capsys):
        script = isolated_env / "run.crm"
        script.write_text("connect jlong pw\ndirectory (#6) James Bayer\n")
        assert main(self._args(isolated_env, "--script", str(script))) == 0
        out = capsys.readouterr().out
        assert "connected jlong." in out
        assert "working with James Bayer." in out

    def test_env_file_loaded(self, isolated_env, capsys, monkeypatch):
        env_file = isolated_env / ".env"
        env_file.write_text("CRM_SHELL_PEOPLE=Ada Lovelace,Alan Turing\n")
        monkeypatch.delenv("CRM_SHELL_PEOPLE", raising=False)
        args = ["--env-file", str(env_file), "--config", str(isolated_env / "missing.json"),
                "-c", "directory (#2)"]
        try:
            assert main(args) == 0
        finally:
            os.environ.pop("CRM_SHELL_PEOPLE", None)
        assert "working with Alan Turing." in capsys.readouterr().out

    def test_requires_terminal(self, isolated_env):
        with patch("sys.stdin") as stdin:
            stdin.isatty.return_value = False
            with pytest.raises(SystemExit) as exc_info:
                main(self._args(isolated_env))
        assert "interactive terminal" in str(exc_info.value.code)
