"""Configuration for the CRM shell.

Settings come from, in priority order:
1. Environment variables: CRM_SHELL_<SETTING>=<value>
2. The first JSON file found: .crm_shell/config.json, else
   ~/.crm_shell/config.json (only one file is read)
3. Default values

A .env file is loaded into the environment by the entry point before
load_config() runs, so values placed there behave like real environment
variables.

Example config.json:
    {
        "app_name": "spring CRM",
        "history_file": "~/.crm_shell/history",
        "log_level": "INFO",
        "trace_log": "/tmp/crm_shell_trace.log",
        "complete_while_typing": false,
        "people": ["Ada Lovelace", "Alan Turing"]
    }
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import DEFAULT_PEOPLE
from .prompt import DEFAULT_APP_NAME

logger = logging.getLogger(__name__)

ENV_PREFIX = "CRM_SHELL_"

DEFAULT_PROJECT_CONFIG = ".crm_shell/config.json"


def _default_history_file() -> str:
    return str(Path.home() / ".crm_shell" / "history")


def _default_user_config() -> str:
    return str(Path.home() / ".crm_shell" / "config.json")


# Accepted JSON types per setting; trace_log may also be null
_SETTING_TYPES = {
    "app_name": str,
    "history_file": str,
    "log_level": str,
    "trace_log": (str, type(None)),
    "complete_while_typing": bool,
    "people": list,
}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ShellConfig:
    """Settings for the interactive shell.

    Attributes:
        app_name: Name shown in the prompt.
        history_file: Prompt history file. Empty string keeps history in memory.
        log_level: Logging level name for the trace log.
        trace_log: Trace log path. None uses the default temp-dir file,
            empty string disables logging output.
        complete_while_typing: Show completions without pressing TAB.
        people: Names loaded into the person directory at startup.
    """
    app_name: str = DEFAULT_APP_NAME
    history_file: str = field(default_factory=_default_history_file)
    log_level: str = "INFO"
    trace_log: Optional[str] = None
    complete_while_typing: bool = False
    people: List[str] = field(default_factory=lambda: list(DEFAULT_PEOPLE))

    # Where the file-based settings came from (not a setting)
    _source: str = field(default="default", repr=False)

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls) if not f.name.startswith("_")]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["ShellConfig"] = None) -> "ShellConfig":
        """Create config from a dictionary, on top of base.

        Unknown keys are ignored with a warning.
        """
        valid_fields = set(cls.field_names())
        kwargs = {}
        for key, value in data.items():
            if key in valid_fields:
                kwargs[key] = value
            else:
                logger.warning(f"Unknown config setting '{key}' - ignoring")

        for key, expected in _SETTING_TYPES.items():
            if key in kwargs and not isinstance(kwargs[key], expected):
                logger.warning(
                    f"Config setting '{key}' has type {type(kwargs[key]).__name__} - ignoring"
                )
                del kwargs[key]

        if "people" in kwargs and not all(isinstance(p, str) for p in kwargs["people"]):
            logger.warning("Config setting 'people' must be a list of names - ignoring")
            del kwargs["people"]

        return replace(base or cls(), **kwargs)

    @classmethod
    def from_file(
        cls,
        project_path: str = DEFAULT_PROJECT_CONFIG,
        user_path: Optional[str] = None,
    ) -> Optional["ShellConfig"]:
        """Load config from the first readable JSON file.

        Returns:
            ShellConfig if a config file was found and loaded, None otherwise.
        """
        if user_path is None:
            user_path = _default_user_config()

        for path in [project_path, user_path]:
            config_path = Path(path)
            if not config_path.exists():
                continue
            try:
                with open(config_path, 'r') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    logger.warning(f"Config file {path} must contain a JSON object")
                    continue

                logger.info(f"Loaded config from {path}")
                config = cls.from_dict(data)
                config._source = path
                return config

            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON in config file {path}: {e}")
            except OSError as e:
                logger.warning(f"Error reading config file {path}: {e}")

        return None

    @classmethod
    def env_overrides(cls) -> Dict[str, Any]:
        """Collect settings from CRM_SHELL_* environment variables.

        Examples:
            CRM_SHELL_APP_NAME="acme CRM"
            CRM_SHELL_HISTORY_FILE=
            CRM_SHELL_COMPLETE_WHILE_TYPING=true
        """
        data: Dict[str, Any] = {}
        for name in cls.field_names():
            env_key = f"{ENV_PREFIX}{name.upper()}"
            if env_key not in os.environ:
                continue
            value = os.environ[env_key]
            if name == "complete_while_typing":
                data[name] = _parse_bool(value)
            elif name == "people":
                data[name] = [p.strip() for p in value.split(",") if p.strip()]
            else:
                data[name] = value
        return data

    @property
    def source(self) -> str:
        return self._source


def load_config(
    project_path: str = DEFAULT_PROJECT_CONFIG,
    user_path: Optional[str] = None,
) -> ShellConfig:
    """Load shell config with the file and environment fallback chain.

    Args:
        project_path: Project-level config path.
        user_path: User-level config path (default: ~/.crm_shell/config.json).

    Returns:
        Merged ShellConfig with all sources applied.
    """
    config = ShellConfig.from_file(project_path, user_path) or ShellConfig()

    env_data = ShellConfig.env_overrides()
    if env_data:
        source = config.source
        config = ShellConfig.from_dict(env_data, base=config)
        config._source = source
        logger.info(f"Applied environment config overrides: {sorted(env_data)}")

    return config
