# voice_session/LoggingSetup.py
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "voice_session.log"
LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# Per-frame DEBUG output of the websockets library drowns session logs
QUIET_LOGGERS = ("websockets",)


def _attach(root_logger: logging.Logger, handler: logging.Handler,
            level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def setup_logging(logs_dir: Path, verbose: bool = False, is_frozen: bool = False):
    """
    Route session logs to logs_dir/voice_session.log and, outside a frozen app, stdout.

    Any handlers already on the root logger are replaced, so calling this
    twice does not duplicate output.

    Args:
        logs_dir: Directory for the rotating log file; created if missing
        verbose: DEBUG level with controller lifecycle details; INFO otherwise
        is_frozen: Frozen builds have no console, so only the file is written
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    _attach(root_logger, RotatingFileHandler(
        logs_dir / LOG_FILE_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding='utf-8'
    ), level, formatter)

    if not is_frozen:
        _attach(root_logger, logging.StreamHandler(sys.stdout), level, formatter)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO)

    logging.info(f"Session logging to {logs_dir / LOG_FILE_NAME} (level={logging.getLevelName(level)})")
