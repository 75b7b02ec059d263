"""
SessionStateStore - Holds the session state snapshot and notifies observers.

The controller is the only writer. Readers get immutable SessionState
snapshots, either by polling get_state() or by subscribing to receive
(old_state, new_state) after every change.

All access happens on the controller's thread, so no locking is done here.
An update made by an observer while observers are being notified is queued
and delivered after the current round, so every observer sees changes in
the order they were made.
"""
import dataclasses
import logging
from collections import deque
from typing import Callable, Deque, List, Optional, Tuple

from voice_session.protocols import SessionStateObserver
from voice_session.types import SessionState

_FIELDS = frozenset(f.name for f in dataclasses.fields(SessionState))


class SessionStateStore:
    """
    Session state container with observer pattern.

    Attributes:
        _state: Current SessionState snapshot
        _observers: Callables receiving (old_state, new_state)
        _pending: Changes not yet delivered to observers
    """

    def __init__(self, initial: Optional[SessionState] = None):
        """
        Args:
            initial: Starting snapshot; defaults to SessionState()
        """
        self._state: SessionState = initial if initial is not None else SessionState()
        self._observers: List[SessionStateObserver] = []
        self._pending: Deque[Tuple[SessionState, SessionState]] = deque()
        self._notifying = False

    def get_state(self) -> SessionState:
        return self._state

    def update(self, **changes) -> SessionState:
        """
        Replace the given fields and notify observers if anything changed.

        Args:
            **changes: SessionState field values

        Returns:
            The current snapshot after the update

        Raises ValueError
        """
        unknown = set(changes) - _FIELDS
        if unknown:
            raise ValueError(f"Unknown session state fields: {', '.join(sorted(unknown))}")

        old_state = self._state
        new_state = dataclasses.replace(old_state, **changes)
        if new_state == old_state:
            return old_state

        self._state = new_state
        self._pending.append((old_state, new_state))
        if not self._notifying:
            self._drain_pending()
        return new_state

    def subscribe(self, observer: SessionStateObserver) -> Callable[[], None]:
        """
        Args:
            observer: Callable that receives (old_state, new_state)

        Returns:
            Disposer that removes the observer
        """
        self._observers.append(observer)

        def dispose() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return dispose

    def observer_count(self) -> int:
        return len(self._observers)

    def _drain_pending(self) -> None:
        self._notifying = True
        try:
            while self._pending:
                old_state, new_state = self._pending.popleft()
                self._notify_observers(old_state, new_state)
        finally:
            self._notifying = False

    def _notify_observers(self, old_state: SessionState, new_state: SessionState) -> None:
        # Copy so observers can unsubscribe while being notified
        for observer in list(self._observers):
            try:
                observer(old_state, new_state)
            except Exception as e:
                logging.error(f"State observer failed: {e}", exc_info=True)
