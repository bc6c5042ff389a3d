"""Logging setup for the CRM shell.

The terminal belongs to the prompt, so log records are written to a trace
file instead of stderr.

Path resolution:
- CRM_SHELL_TRACE_LOG (or the trace_log config setting) names the file
- An empty value disables logging output entirely
- Otherwise crm_shell_trace.log in the system temp directory is used
"""

import logging
import os
import tempfile
from typing import Optional

DEFAULT_TRACE_FILENAME = "crm_shell_trace.log"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_trace_path(
    configured: Optional[str] = None,
    default_filename: str = DEFAULT_TRACE_FILENAME,
) -> Optional[str]:
    """Resolve the trace file path.

    Args:
        configured: Path from configuration. Empty string disables tracing,
            None falls back to the default.
        default_filename: Fallback filename in the temp directory.

    Returns:
        Resolved file path, or None if tracing is disabled.
    """
    if configured == "":
        return None
    if configured:
        return os.path.expanduser(configured)
    return os.path.join(tempfile.gettempdir(), default_filename)


def configure_logging(
    trace_log: Optional[str] = None,
    level: str = "INFO",
    verbose: bool = False,
) -> Optional[str]:
    """Route the crm_shell loggers to the trace file.

    Args:
        trace_log: Configured trace path (see resolve_trace_path).
        level: Logging level name; unknown names fall back to INFO.
        verbose: Force DEBUG regardless of level.

    Returns:
        The trace file path in use, or None if logging is disabled.
    """
    root = logging.getLogger("crm_shell")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.propagate = False

    path = resolve_trace_path(trace_log)
    if path is None:
        root.addHandler(logging.NullHandler())
        return None

    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    if verbose:
        root.setLevel(logging.DEBUG)
    else:
        resolved = getattr(logging, level.upper(), None)
        root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    return path
