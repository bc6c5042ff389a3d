"""Connection state for the CRM shell session."""

import logging
import threading

logger = logging.getLogger(__name__)


class ConnectionState:
    """Holds whether the shell is connected to the CRM.

    Credentials are accepted but never checked: connect() always succeeds.
    The flag is only changed through connect() and disconnect(); everything
    else reads it through is_connected().
    """

    def __init__(self):
        self._connected = False
        self._lock = threading.Lock()

    def connect(self, username: str, password: str) -> None:
        """Mark the session as connected.

        Args:
            username: User name, recorded in the log.
            password: Accepted and discarded.
        """
        with self._lock:
            self._connected = True
        logger.info(f"Connected as {username}")

    def disconnect(self) -> None:
        """Mark the session as disconnected."""
        with self._lock:
            self._connected = False
        logger.info("Disconnected")

    def is_connected(self) -> bool:
        with self._lock:
            return self._connected
