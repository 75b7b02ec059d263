"""Protocol definitions for the recognition engine capability and state observers.

This module defines structural interfaces using Python's Protocol for duck typing.
"""

from typing import Callable, Protocol

from voice_session.types import SessionState


class RecognitionEngine(Protocol):
    """Continuous speech recognition capability supplied by the host.

    The engine is asynchronous: start() and stop() are requests, and the
    authoritative lifecycle is reported back through the 'started' and
    'ended' events. Events from one engine are delivered in emission order
    on the controller's thread.

    Events:
        'started': handler()
        'result': handler(segments: list[ResultSegment])
        'ended': handler()
        'error': handler(code: str)
    """

    def configure(self, language: str, continuous: bool,
                  interim_results: bool, max_alternatives: int) -> None:
        """Apply recognition settings before the next start()."""
        ...

    def start(self) -> None:
        """Request recognition to start.

        Raises:
            EngineStateError: If the engine is already running
        """
        ...

    def stop(self) -> None:
        """Request recognition to stop; 'ended' follows asynchronously.

        Raises:
            EngineStateError: If the engine is not running
        """
        ...

    def on(self, event: str, handler: Callable[..., None]) -> Callable[[], None]:
        """Register an event handler.

        Returns:
            Callable that unregisters the handler
        """
        ...


class SessionStateObserver(Protocol):
    """Callable receiving (old_state, new_state) after every state change."""

    def __call__(self, old_state: SessionState, new_state: SessionState) -> None:
        ...
