"""RecognitionEngine backed by a remote recognition server speaking JSON text frames.

The host owns the connection: it passes a send_text callable for outbound
frames and feeds every inbound text frame to dispatch() on the controller's
thread.

Outbound frames (client -> server):
  {"type": "control_command", "command": "start", "session_id", "timestamp",
   "language", "continuous", "interim_results", "max_alternatives"}
  {"type": "control_command", "command": "shutdown", "session_id", "timestamp"}

Inbound frames (server -> client):
  session_created    -> session id recorded, no event
  session_started    -> 'started'
  recognition_result -> 'result' with one segment (status partial/final)
  session_closed     -> optional 'error', then 'ended'
  error              -> fatal only: 'error', then 'ended'
"""

import json
import logging
import time
from typing import Callable, Optional

from voice_session.EngineEventEmitter import EngineEventEmitter
from voice_session.ErrorMessages import NETWORK, NO_SPEECH
from voice_session.errors import EngineStateError
from voice_session.types import (
    EVENT_ENDED,
    EVENT_ERROR,
    EVENT_RESULT,
    EVENT_STARTED,
    ResultSegment,
)

logger = logging.getLogger(__name__)

# session_closed reasons that are reported as an engine error before 'ended'
_CLOSE_REASON_ERRORS = {
    "timeout": NO_SPEECH,
    "error": NETWORK,
}


def normalize_error_code(wire_code: str) -> str:
    """Convert a server error code such as ``INTERNAL_ERROR`` to ``internal-error``."""
    return wire_code.strip().lower().replace("_", "-")


class RemoteRecognitionEngine(EngineEventEmitter):
    """Translates remote server frames into RecognitionEngine events.

    Running state follows the server: it becomes True on start() and False
    once the server closes the session or reports a fatal error.
    dispatch() never raises; malformed frames are logged and dropped.

    Args:
        send_text: Sends one outbound JSON text frame.
        session_id: Identifier stamped on outbound frames; replaced by the
                    id the server assigns in session_created.
        verbose: Enable logging of handler registration and frames.
    """

    def __init__(
        self,
        send_text: Callable[[str], None],
        session_id: str = "",
        verbose: bool = False,
    ) -> None:
        super().__init__(verbose=verbose)
        self._send_text = send_text
        self._session_id = session_id
        self._running = False
        self._stop_requested = False
        self.language: Optional[str] = None
        self.continuous = True
        self.interim_results = True
        self.max_alternatives = 1

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # RecognitionEngine control
    # ------------------------------------------------------------------

    def configure(self, language: str, continuous: bool,
                  interim_results: bool, max_alternatives: int) -> None:
        self.language = language
        self.continuous = continuous
        self.interim_results = interim_results
        self.max_alternatives = max_alternatives

    def start(self) -> None:
        """Send the start command.

        Raises:
            EngineStateError: If a session is already running.
        """
        if self._running:
            raise EngineStateError("recognition already started")

        self._send_command(
            "start",
            language=self.language,
            continuous=self.continuous,
            interim_results=self.interim_results,
            max_alternatives=self.max_alternatives,
        )
        self._running = True
        self._stop_requested = False

    def stop(self) -> None:
        """Send the shutdown command; 'ended' follows when the server closes the session.

        Raises:
            EngineStateError: If no session is running.
        """
        if not self._running:
            raise EngineStateError("recognition not started")
        if self._stop_requested:
            return

        self._stop_requested = True
        self._send_command("shutdown")

    def connection_lost(self) -> None:
        """Report a dropped connection: 'error' (network) then 'ended' if a session was running."""
        if not self._running:
            return

        logger.warning("RemoteRecognitionEngine[%s]: connection lost", self._session_id)
        self._running = False
        self.emit(EVENT_ERROR, NETWORK)
        self.emit(EVENT_ENDED)

    # ------------------------------------------------------------------
    # Inbound frames
    # ------------------------------------------------------------------

    def dispatch(self, json_text: str) -> None:
        """Decode one server text frame and emit the matching engine events.

        Algorithm:
            1. Parse JSON; log and return on parse error or non-object payload.
            2. Route by type; unknown types are logged at debug level.
            3. Missing required fields are logged and the frame is dropped.

        Args:
            json_text: Raw UTF-8 JSON string from a text frame.
        """
        try:
            obj = json.loads(json_text)
        except (json.JSONDecodeError, ValueError):
            logger.warning("RemoteRecognitionEngine: invalid JSON frame, ignoring")
            return

        if not isinstance(obj, dict):
            logger.warning("RemoteRecognitionEngine: frame is not a JSON object, ignoring")
            return

        msg_type = obj.get("type")
        try:
            if msg_type == "session_created":
                self._on_session_created(obj)
            elif msg_type == "session_started":
                self._on_session_started(obj)
            elif msg_type == "recognition_result":
                self._on_recognition_result(obj)
            elif msg_type == "session_closed":
                self._on_session_closed(obj)
            elif msg_type == "error":
                self._on_error(obj)
            else:
                logger.debug("RemoteRecognitionEngine: ignoring message type %r", msg_type)
        except KeyError as exc:
            logger.warning("RemoteRecognitionEngine: missing field %s in %s", exc, msg_type)

    def _on_session_created(self, obj: dict) -> None:
        self._session_id = obj["session_id"]
        if self._verbose:
            logger.info("RemoteRecognitionEngine[%s]: session created", self._session_id)

    def _on_session_started(self, obj: dict) -> None:
        self._session_id = obj.get("session_id", self._session_id)
        self._running = True
        if self._verbose:
            logger.info("RemoteRecognitionEngine[%s]: recognition started", self._session_id)
        self.emit(EVENT_STARTED)

    def _on_recognition_result(self, obj: dict) -> None:
        status = obj["status"]
        if status not in ("partial", "final"):
            logger.warning("RemoteRecognitionEngine: unknown status %r, ignoring", status)
            return

        is_final = status == "final"
        if not is_final and not self.interim_results:
            return

        self.emit(EVENT_RESULT, [ResultSegment(text=obj["text"], is_final=is_final)])

        # Single-utterance mode ends the session after the first final result
        if is_final and not self.continuous and self._running and not self._stop_requested:
            self._stop_requested = True
            self._send_command("shutdown")

    def _on_session_closed(self, obj: dict) -> None:
        reason = obj["reason"]
        if self._verbose:
            logger.info("RemoteRecognitionEngine[%s]: session closed (%s)", self._session_id, reason)

        self._running = False
        code = _CLOSE_REASON_ERRORS.get(reason)
        if code is not None:
            self.emit(EVENT_ERROR, code)
        self.emit(EVENT_ENDED)

    def _on_error(self, obj: dict) -> None:
        code = normalize_error_code(obj["error_code"])
        if not obj.get("fatal", False):
            logger.warning(
                "RemoteRecognitionEngine[%s]: server error %s: %s",
                self._session_id, code, obj.get("message", ""),
            )
            return

        self._running = False
        self.emit(EVENT_ERROR, code)
        self.emit(EVENT_ENDED)

    def _send_command(self, command: str, **fields) -> None:
        frame = {
            "type": "control_command",
            "session_id": self._session_id,
            "command": command,
            "timestamp": time.time(),
        }
        frame.update(fields)
        self._send_text(json.dumps(frame))
