# main.py
"""Runs a dictation session through a SessionController from the command line.

Usage:
    python main.py --frames=samples/greeting.jsonl [--config=...] [-v]
    python main.py --server-url=ws://host:port [--seconds=10] [--config=...] [-v]

--frames replays recorded server frames (one JSON text frame per line).
--server-url dictates against a live recognition server for up to --seconds.
The text forwarded into the input buffer is printed to stdout. Exits with
code 1 on errors.
"""
import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from voice_session.ConfigLoader import forwarding_separator, load_config_dict, session_config_from_dict
from voice_session.LoggingSetup import setup_logging
from voice_session.SessionController import SessionController
from voice_session.TranscriptForwarder import TranscriptForwarder
from voice_session.engines.RemoteRecognitionEngine import RemoteRecognitionEngine
from voice_session.engines.WsEngineTransport import WsEngineTransport

APP_DIR = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = APP_DIR / "config" / "voice_session.json"
LOGS_DIR = APP_DIR / "logs"

DEFAULT_SECONDS = 10.0
# Time allowed for the server to close the session after a stop request
STOP_GRACE_SECONDS = 2.0


@dataclass
class CliArgs:
    frames_path: Optional[Path] = None
    server_url: Optional[str] = None
    config_path: Path = DEFAULT_CONFIG_PATH
    seconds: float = DEFAULT_SECONDS
    verbose: bool = False


def parse_args(argv: List[str]) -> CliArgs:
    """Parse CLI arguments.

    Raises:
        ValueError: If neither or both of --frames and --server-url are given,
                    or --seconds is not a positive number.
    """
    args = CliArgs(verbose="-v" in argv)

    for arg in argv:
        if arg.startswith("--frames="):
            args.frames_path = Path(arg.split("=", 1)[1])
        elif arg.startswith("--server-url="):
            args.server_url = arg.split("=", 1)[1]
        elif arg.startswith("--config="):
            args.config_path = Path(arg.split("=", 1)[1])
        elif arg.startswith("--seconds="):
            args.seconds = float(arg.split("=", 1)[1])

    if (args.frames_path is None) == (args.server_url is None):
        raise ValueError("exactly one of --frames=<path> or --server-url=ws://host:port is required")
    if args.seconds <= 0:
        raise ValueError(f"--seconds must be positive, got {args.seconds}")

    return args


def run_replay(frames_path: Path, config_path: Path, verbose: bool = False) -> str:
    """Feed every frame of frames_path to a controller and return the forwarded text.

    Args:
        frames_path: JSON lines file with server frames
        config_path: Path to voice_session.json
        verbose: Enable lifecycle logging

    Returns:
        Text accumulated in the input buffer after the session ends
    """
    config = load_config_dict(config_path)
    session_config = session_config_from_dict(config).with_callbacks(
        on_error=lambda message: logging.error(f"Recognition error: {message}")
    )

    engine = RemoteRecognitionEngine(
        send_text=lambda frame: logging.info(f"-> {frame}"),
        verbose=verbose
    )
    controller = SessionController(session_config, engine_factory=lambda: engine, verbose=verbose)
    forwarder = TranscriptForwarder(separator=forwarding_separator(config), verbose=verbose)
    detach = forwarder.attach(controller)

    try:
        controller.start_listening()
        with open(frames_path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if line:
                    engine.dispatch(line)
        controller.stop_listening()
    finally:
        controller.dispose()
        detach()

    return forwarder.text


async def run_live(server_url: str, config_path: Path, seconds: float = DEFAULT_SECONDS,
                   verbose: bool = False) -> str:
    """Dictate against a live server until the session ends or seconds elapse.

    Args:
        server_url: WebSocket URL of the recognition server
        config_path: Path to voice_session.json
        seconds: Listening time before a stop is requested
        verbose: Enable lifecycle logging

    Returns:
        Text accumulated in the input buffer after the session ends
    """
    config = load_config_dict(config_path)
    ended = asyncio.Event()
    session_config = session_config_from_dict(config).with_callbacks(
        on_ended=ended.set,
        on_error=lambda message: logging.error(f"Recognition error: {message}")
    )

    transport = WsEngineTransport(server_url, verbose=verbose)
    await transport.connect()

    controller = SessionController(session_config, engine_factory=lambda: transport.engine, verbose=verbose)
    forwarder = TranscriptForwarder(separator=forwarding_separator(config), verbose=verbose)
    detach = forwarder.attach(controller)

    try:
        controller.start_listening()
        try:
            await asyncio.wait_for(ended.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            controller.stop_listening()
            try:
                await asyncio.wait_for(ended.wait(), timeout=STOP_GRACE_SECONDS)
            except asyncio.TimeoutError:
                logging.warning("Server did not close the session after stop request")
    finally:
        controller.dispose()
        detach()
        await transport.close()

    return forwarder.text


if __name__ == "__main__":
    try:
        args = parse_args(sys.argv[1:])
        is_frozen = getattr(sys, 'frozen', False)
        setup_logging(LOGS_DIR, verbose=args.verbose, is_frozen=is_frozen)

        if args.frames_path is not None:
            text = run_replay(args.frames_path, args.config_path, verbose=args.verbose)
        else:
            text = asyncio.run(run_live(args.server_url, args.config_path, args.seconds, args.verbose))
        print(text)

    except KeyboardInterrupt:
        logging.info("Interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logging.error(f"ERROR: {type(e).__name__}: {e}")
        import traceback
        logging.error(traceback.format_exc())
        sys.exit(1)
