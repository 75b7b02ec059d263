"""Handler registry for recognition engine events.

Engines inherit from EngineEventEmitter to get the on()/emit() half of the
RecognitionEngine protocol. Registration returns a disposer so the owner of
a binding can detach every handler before discarding the engine.
"""

import logging
from typing import Callable, Dict, List, Optional

from voice_session.types import ENGINE_EVENTS


class EngineEventEmitter:
    """Per-event handler lists with disposer-based unsubscription.

    Error Handling:
        - Unknown event names raise ValueError on both on() and emit()
        - A failing handler is logged; remaining handlers still run

    Example:
        >>> emitter = EngineEventEmitter()
        >>> dispose = emitter.on('started', lambda: print('started'))
        >>> emitter.emit('started')
        started
        >>> dispose()
    """

    def __init__(self, verbose: bool = False) -> None:
        """Initialize emitter with empty handler lists.

        Args:
            verbose: Enable logging of handler registration
        """
        self._handlers: Dict[str, List[Callable[..., None]]] = {event: [] for event in ENGINE_EVENTS}
        self._verbose: bool = verbose

    def on(self, event: str, handler: Callable[..., None]) -> Callable[[], None]:
        """Register a handler for an engine event.

        Args:
            event: One of 'started', 'result', 'ended', 'error'
            handler: Callable invoked with the event arguments

        Returns:
            Disposer; calling it more than once is a no-op

        Raises:
            ValueError: If event is not an engine event
        """
        handlers = self._handlers_for(event)
        handlers.append(handler)
        if self._verbose:
            logging.debug(f"{self.__class__.__name__}: handler registered for '{event}'")

        def dispose() -> None:
            if handler in handlers:
                handlers.remove(handler)
                if self._verbose:
                    logging.debug(f"{self.__class__.__name__}: handler removed for '{event}'")

        return dispose

    def emit(self, event: str, *args) -> None:
        """Invoke every handler registered for event, in registration order.

        The handler list is copied first, so handlers may dispose themselves
        or others while the event is being delivered.

        Args:
            event: Engine event name
            *args: Arguments passed to each handler
        """
        for handler in list(self._handlers_for(event)):
            try:
                handler(*args)
            except Exception as e:
                logging.error(
                    f"{self.__class__.__name__}: '{event}' handler failed: {e}",
                    exc_info=True
                )

    def handler_count(self, event: Optional[str] = None) -> int:
        """Number of registered handlers for one event, or for all events."""
        if event is not None:
            return len(self._handlers_for(event))
        return sum(len(handlers) for handlers in self._handlers.values())

    def _handlers_for(self, event: str) -> List[Callable[..., None]]:
        if event not in self._handlers:
            raise ValueError(f"Unknown engine event: {event!r}")
        return self._handlers[event]
