"""Prompt rendering for the interactive shell."""

from prompt_toolkit.formatted_text import FormattedText

from .session import ConnectionState

DEFAULT_APP_NAME = "spring CRM"


class ConnectedPromptProvider:
    """Render the prompt from the current connection state.

    The provider is handed to PromptSession as a callable message, so it is
    re-evaluated before every input line.
    """

    def __init__(self, session: ConnectionState, app_name: str = DEFAULT_APP_NAME):
        self._session = session
        self._app_name = app_name

    def render(self) -> str:
        status = "connected" if self._session.is_connected() else "disconnected"
        return f"{self._app_name} ({status})> "

    def __call__(self) -> FormattedText:
        return FormattedText([("class:prompt", self.render())])
