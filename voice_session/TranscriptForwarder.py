"""Forwards a finished dictation into a text input when listening stops."""
import logging
from typing import TYPE_CHECKING, Callable, Optional

from voice_session.types import SessionState

if TYPE_CHECKING:
    from voice_session.SessionController import SessionController


class TranscriptForwarder:
    """Appends transcript + interim text to an input buffer once a session stops.

    Observes the controller's state. When is_listening is False and there is
    non-blank text, the text is appended to the buffer (joined with the
    separator) and the controller transcript is reset, so the same dictation
    is never forwarded twice. Text the buffer already ends with is skipped.

    Args:
        text: Initial content of the input buffer
        separator: Inserted between existing input and forwarded text
        on_text_change: Optional callable receiving the new buffer content
        verbose: Enable logging of forwarded text
    """

    def __init__(
        self,
        text: str = '',
        separator: str = ' ',
        on_text_change: Optional[Callable[[str], None]] = None,
        verbose: bool = False
    ) -> None:
        self._text = text
        self._separator = separator
        self._on_text_change = on_text_change
        self._verbose = verbose
        self._controller: Optional['SessionController'] = None

    @property
    def text(self) -> str:
        return self._text

    def clear(self) -> None:
        self._text = ''

    def attach(self, controller: 'SessionController') -> Callable[[], None]:
        """Start observing a controller.

        Returns:
            Disposer that stops observing
        """
        self._controller = controller
        return controller.subscribe(self.on_state_change)

    def on_state_change(self, old_state: SessionState, new_state: SessionState) -> None:
        if new_state.is_listening:
            return

        dictated = new_state.transcript + new_state.interim_transcript
        if not dictated.strip():
            return

        if not self._text.endswith(dictated):
            self._text = f"{self._text}{self._separator}{dictated}" if self._text else dictated
            if self._verbose:
                logging.info(f"TranscriptForwarder: forwarded '{dictated}'")
            if self._on_text_change is not None:
                self._on_text_change(self._text)

        if self._controller is not None:
            self._controller.reset_transcript()
