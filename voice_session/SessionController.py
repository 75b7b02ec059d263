"""
SessionController - Start/stop/toggle control surface over a recognition engine.

The controller binds one RecognitionEngine, translates its event stream into
SessionState updates and consumer callbacks, and absorbs engine-level
start/stop races so callers never see them.

State Machine (engine-bound mode):
- Idle --start_listening()--> (engine 'started') --> Listening
- Listening --'ended' / fatal 'error'--> Idle
- Listening --stop_listening()--> (engine 'ended') --> Idle

start_listening() and stop_listening() are requests. The authoritative
transitions happen only when the engine reports 'started' or 'ended'.
"""
import dataclasses
import logging
from typing import Callable, Iterable, List, Optional

from voice_session.ErrorMessages import describe_error, is_silent_error
from voice_session.SessionStateStore import SessionStateStore
from voice_session.errors import EngineUnavailableError
from voice_session.protocols import RecognitionEngine, SessionStateObserver
from voice_session.types import (
    EVENT_ENDED,
    EVENT_ERROR,
    EVENT_RESULT,
    EVENT_STARTED,
    ResultSegment,
    SessionConfig,
    SessionState,
)


class SessionController:
    """
    Owns the recognition session state and the engine binding.

    Unsupported mode:
        When no engine factory is given, or the factory raises
        EngineUnavailableError or ImportError, the controller reports
        is_supported=False and every control operation is a no-op.

    Threading:
        Engine events and public operations must run on the same thread.
        No locking is done.

    Attributes:
        config: Current SessionConfig
        _engine: Bound engine, None when unsupported or disposed
        _disposers: Unsubscribe callables for the four engine handlers
        _store: SessionStateStore with the current snapshot
    """

    # Only the top hypothesis of each segment is used
    MAX_ALTERNATIVES = 1

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        engine_factory: Optional[Callable[[], RecognitionEngine]] = None,
        verbose: bool = False
    ):
        """
        Initialize the controller and bind an engine if the host provides one.

        Args:
            config: Session configuration; defaults to SessionConfig()
            engine_factory: Creates a new engine per binding; None means the
                            host has no recognition capability
            verbose: Enable lifecycle logging
        """
        self.config: SessionConfig = config if config is not None else SessionConfig()
        self._engine_factory = engine_factory
        self._verbose = verbose
        self._engine: Optional[RecognitionEngine] = None
        self._disposers: List[Callable[[], None]] = []
        self._disposed = False

        engine = self._create_engine()
        self._store = SessionStateStore(SessionState(is_supported=engine is not None))
        if engine is not None:
            self._bind(engine)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """Current immutable state snapshot."""
        return self._store.get_state()

    def subscribe(self, observer: SessionStateObserver) -> Callable[[], None]:
        """
        Args:
            observer: Callable that receives (old_state, new_state)

        Returns:
            Disposer that removes the observer
        """
        return self._store.subscribe(observer)

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def start_listening(self) -> None:
        """
        Request a new listening session.

        No-op when unsupported or already listening. Clears the previous
        error and both transcripts before asking the engine to start.
        """
        if self._engine is None or self._store.get_state().is_listening:
            return

        self._store.update(error=None, transcript='', interim_transcript='')
        try:
            self._engine.start()
        except Exception as e:
            # Double start race: the running session continues
            logging.warning(f"Speech recognition start error: {e}")
            return

        if self._verbose:
            logging.info(f"SessionController: start requested (language={self.config.language})")

    def stop_listening(self) -> None:
        """
        Request the current session to stop.

        No-op when unsupported or not listening. is_listening turns False
        only when the engine reports 'ended'.
        """
        if self._engine is None or not self._store.get_state().is_listening:
            return

        try:
            self._engine.stop()
        except Exception as e:
            logging.warning(f"Speech recognition stop error: {e}")
            return

        if self._verbose:
            logging.info("SessionController: stop requested")

    def toggle_listening(self) -> None:
        """
        Stop if listening, otherwise start.

        Convenience method for UI toggle buttons.
        """
        if self._store.get_state().is_listening:
            self.stop_listening()
        else:
            self.start_listening()

    def reset_transcript(self) -> None:
        """Clear final and interim text; is_listening and error are untouched."""
        self._store.update(transcript='', interim_transcript='')

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reconfigure(self, **changes) -> None:
        """
        Replace configuration fields, rebinding the engine when needed.

        A change of language or continuous stops and detaches the current
        engine, then binds a fresh one. Callback-only changes take effect
        on the next event without rebinding.

        Args:
            **changes: SessionConfig field values
        """
        new_config = dataclasses.replace(self.config, **changes)
        needs_rebind = new_config.engine_settings() != self.config.engine_settings()
        self.config = new_config

        if not needs_rebind or self._disposed or self._engine is None:
            return

        self._unbind()
        engine = self._create_engine()
        if engine is None:
            self._store.update(is_supported=False)
            return
        self._bind(engine)

    def dispose(self) -> None:
        """
        Stop any in-flight session and release the engine binding.

        Safe to call more than once. After disposal the control surface
        behaves as in unsupported mode, except that is_supported keeps
        its last value.
        """
        if self._disposed:
            return
        self._disposed = True
        self._unbind()

    def _create_engine(self) -> Optional[RecognitionEngine]:
        if self._engine_factory is None:
            return None
        try:
            return self._engine_factory()
        except (EngineUnavailableError, ImportError) as e:
            logging.warning(f"Speech recognition not supported: {e}")
            return None

    def _bind(self, engine: RecognitionEngine) -> None:
        engine.configure(
            self.config.language,
            self.config.continuous,
            True,  # interim results are always requested
            self.MAX_ALTERNATIVES
        )
        self._disposers = [
            engine.on(EVENT_STARTED, self._handle_started),
            engine.on(EVENT_RESULT, self._handle_result),
            engine.on(EVENT_ENDED, self._handle_ended),
            engine.on(EVENT_ERROR, self._handle_error),
        ]
        self._engine = engine

        if self._verbose:
            logging.info(
                f"SessionController: engine bound "
                f"(language={self.config.language}, continuous={self.config.continuous})"
            )

    def _unbind(self) -> None:
        """Best-effort stop, then detach all handlers from the current engine."""
        engine = self._engine
        if engine is None:
            return

        try:
            engine.stop()
        except Exception as e:
            logging.debug(f"Ignoring engine stop error during unbind: {e}")

        for dispose in self._disposers:
            dispose()
        self._disposers = []
        self._engine = None

        # The detached engine can no longer report 'ended'
        if self._store.get_state().is_listening:
            self._store.update(is_listening=False)

        if self._verbose:
            logging.info("SessionController: engine unbound")

    # ------------------------------------------------------------------
    # Engine event handlers
    # ------------------------------------------------------------------

    def _handle_started(self) -> None:
        self._store.update(is_listening=True, error=None)

    def _handle_result(self, segments: Iterable[ResultSegment]) -> None:
        """
        Apply one result batch: finals first, then interims.

        Final text is appended to the transcript and clears the interim
        text. Interim text replaces the previous interim value.
        """
        segments = list(segments)
        final_text = ''.join(segment.text for segment in segments if segment.is_final)
        interim_text = ''.join(segment.text for segment in segments if not segment.is_final)

        if final_text:
            transcript = self._store.get_state().transcript + final_text
            self._store.update(transcript=transcript, interim_transcript='')
            self._invoke(self.config.on_final_result, transcript)

        if interim_text:
            self._store.update(interim_transcript=interim_text)
            self._invoke(self.config.on_interim_result, interim_text)

    def _handle_ended(self) -> None:
        self._store.update(is_listening=False)
        self._invoke(self.config.on_ended)

        if self._verbose:
            logging.info("SessionController: session ended")

    def _handle_error(self, code: str) -> None:
        if is_silent_error(code):
            if self._verbose:
                logging.info("SessionController: recognition aborted by caller")
            return

        message = describe_error(code, self.config.language)
        logging.warning(f"Speech recognition error '{code}': {message}")
        self._store.update(error=message, is_listening=False)
        self._invoke(self.config.on_error, message)

    def _invoke(self, callback: Optional[Callable], *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            logging.error(f"Session callback {getattr(callback, '__name__', callback)!r} failed: {e}",
                          exc_info=True)
