"""WebSocket transport for RemoteRecognitionEngine.

Everything runs on one asyncio event loop: outbound control frames travel
from the synchronous send_text() through an asyncio.Queue to the websocket
send coroutine, and inbound text frames are dispatched to the engine from
the receive coroutine. The SessionController driving the engine must be
called from the same loop so engine events and control operations never
interleave.
"""

import asyncio
import json
import logging
from typing import Any, Optional

from voice_session.engines.RemoteRecognitionEngine import RemoteRecognitionEngine

logger = logging.getLogger(__name__)

_SEND_QUEUE_MAXSIZE = 20
# Time close() waits for queued frames to reach the socket
_CLOSE_DRAIN_TIMEOUT = 1.0
_PROTOCOL_VERSION = "v1"


class WsEngineTransport:
    """Connects a RemoteRecognitionEngine to a recognition server.

    Outbound: engine send_text() -> bounded asyncio.Queue -> websocket.send(str).
    Inbound: websocket text frames -> engine.dispatch(json_text).

    On ConnectionClosed the receive loop calls engine.connection_lost(), which
    reports a network error and ends a running session.

    Args:
        server_url: WebSocket URL (ws://host:port).
        verbose: Enable verbose engine logging.
    """

    def __init__(self, server_url: str, verbose: bool = False) -> None:
        self._server_url = server_url
        self._send_queue: Optional[asyncio.Queue] = None
        self._drain_task: Optional[asyncio.Task] = None
        self._receive_task: Optional[asyncio.Task] = None
        self._websocket: Any = None
        self.engine = RemoteRecognitionEngine(send_text=self.send_text, verbose=verbose)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection and wait for the session_created frame.

        Raises:
            ConnectionError: If the server sends something other than a v1 session_created.
        """
        import websockets

        websocket = await websockets.connect(self._server_url)
        first_message = await websocket.recv()

        if not isinstance(first_message, str):
            await websocket.close()
            raise ConnectionError("Expected text session_created frame; got binary.")

        try:
            obj = json.loads(first_message)
        except json.JSONDecodeError:
            await websocket.close()
            raise ConnectionError("Expected session_created, got a non-JSON frame.")

        if not isinstance(obj, dict):
            await websocket.close()
            raise ConnectionError(f"Expected session_created, got a JSON {type(obj).__name__}.")

        if obj.get("type") != "session_created":
            await websocket.close()
            raise ConnectionError(f"Expected session_created, got: {obj.get('type')}")

        protocol_version = obj.get("protocol_version")
        if protocol_version != _PROTOCOL_VERSION:
            await websocket.close()
            raise ConnectionError(f"Unsupported protocol version: {protocol_version}")

        self.engine.dispatch(first_message)
        await self.start(websocket)

    async def start(self, websocket: Any) -> None:
        """Attach to an already-connected websocket and start send/receive tasks.

        Args:
            websocket: Object supporting async send(str) and async iteration.
        """
        self._websocket = websocket
        self._send_queue = asyncio.Queue(maxsize=_SEND_QUEUE_MAXSIZE)
        loop = asyncio.get_running_loop()
        self._drain_task = loop.create_task(self._drain_loop())
        self._receive_task = loop.create_task(self._receive_loop())

    async def close(self) -> None:
        """Flush queued frames, cancel send/receive tasks and close the websocket.

        Frames still queued after _CLOSE_DRAIN_TIMEOUT seconds are dropped.
        """
        if self._drain_task is not None and not self._drain_task.done():
            try:
                await asyncio.wait_for(self._send_queue.join(), timeout=_CLOSE_DRAIN_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning(
                    "WsEngineTransport: %d control frame(s) not sent before close",
                    self._send_queue.qsize(),
                )

        for task in (self._drain_task, self._receive_task):
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._drain_task = None
        self._receive_task = None

        if self._websocket is not None:
            try:
                await self._websocket.close()
            except Exception as e:
                logger.debug("WsEngineTransport: error closing websocket: %s", e)
            self._websocket = None

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def send_text(self, text: str) -> None:
        """Queue an outbound text frame; must be called on the loop thread.

        Raises:
            ConnectionError: If the transport has not been started.
        """
        if self._send_queue is None:
            raise ConnectionError("WsEngineTransport is not connected")
        try:
            self._send_queue.put_nowait(text)
        except asyncio.QueueFull:
            logger.warning("WsEngineTransport: send queue full, dropping control frame")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _drain_loop(self) -> None:
        """Async task: drain the send queue and call websocket.send(text)."""
        while True:
            text = await self._send_queue.get()
            try:
                await self._websocket.send(text)
            except Exception:
                logger.exception("WsEngineTransport: error sending control frame")
            finally:
                self._send_queue.task_done()

    async def _receive_loop(self) -> None:
        """Async task: dispatch every inbound text frame to the engine."""
        from websockets.exceptions import ConnectionClosed

        try:
            async for message in self._websocket:
                if isinstance(message, str):
                    self.engine.dispatch(message)
                else:
                    logger.debug("WsEngineTransport: unexpected binary frame in receive loop")
            logger.info("WsEngineTransport: connection closed")
            self.engine.connection_lost()
        except ConnectionClosed:
            logger.warning("WsEngineTransport: connection closed by server")
            self.engine.connection_lost()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("WsEngineTransport: unexpected error in receive loop")
            self.engine.connection_lost()
