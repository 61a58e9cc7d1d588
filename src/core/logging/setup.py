"""Logging setup and configuration."""

import logging
import secrets
import shutil
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import TextIO

from core.logging.context import set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_LOG_DIR = Path("logs")
DEFAULT_ROTATION_WHEN = "midnight"
DEFAULT_BACKUP_COUNT = 7
DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG

# Transport libraries log every connection at DEBUG/INFO
NOISY_LOGGERS = [
    "aiohttp",
    "aiohttp.access",
    "aiohttp.client",
    "asyncio",
    "urllib3",
]


class ArchivingTimedRotatingFileHandler(TimedRotatingFileHandler):
    """
    TimedRotatingFileHandler that moves rotated files to an archive folder.

    Example:
        Before rotation:
            logs/2026-01-05/site_transfer_0105_1430.log

        After rotation (daily at midnight):
            logs/2026-01-05/site_transfer_0105_1430.log (new file)
            logs/2026-01-05/archive/site_transfer_0105_1430.log.2026-01-05
    """

    def __init__(self, filename, archive_dir=None, **kwargs):
        super().__init__(filename, **kwargs)
        self.archive_dir = Path(archive_dir) if archive_dir else Path(self.baseFilename).parent / "archive"
        self.archive_dir.mkdir(parents=True, exist_ok=True)

    def doRollover(self):
        super().doRollover()

        log_path = Path(self.baseFilename)
        for rotated_file in log_path.parent.glob(f"{log_path.name}.*"):
            try:
                shutil.move(str(rotated_file), str(self.archive_dir / rotated_file.name))
            except OSError as e:
                # Logging from inside a handler would recurse
                print(f"Warning: Failed to archive {rotated_file}: {e}", file=sys.stderr)


def get_log_file_path(log_dir: Path, name: str = "site_transfer") -> Path:
    """
    Build log file path with a date subfolder.

    Structure: {log_dir}/{YYYY-MM-DD}/{name}_{MMDD}_{HHMM}.log
    """
    now = datetime.now()
    return log_dir / now.strftime("%Y-%m-%d") / f"{name}_{now.strftime('%m%d_%H%M')}.log"


def _console_handler(level: int, json_format: bool, stream: TextIO | None = None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    return handler


def _file_handler(
    log_file: Path,
    level: int,
    json_format: bool,
    rotation_when: str,
    backup_count: int,
) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = ArchivingTimedRotatingFileHandler(
        log_file,
        when=rotation_when,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    return handler


def setup_logging(
    name: str = "site_transfer",
    log_dir: Path | None = None,
    json_format: bool = True,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    rotation_when: str = DEFAULT_ROTATION_WHEN,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    suppress_noisy: bool = True,
    execution_id: str | None = None,
    log_to_stdout: bool = True,
    console_stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure the root logger for a transfer run.

    With ``log_to_stdout`` (the default) everything goes to the console
    stream (stdout unless ``console_stream`` is given), as JSON
    when ``json_format`` is set, for collection by the host. Otherwise the
    console gets human-readable lines and a rotating file under ``log_dir``
    gets the JSON (or console) format.

    Args:
        name: Logger name and log file prefix
        log_dir: Directory for log files (default: ./logs)
        json_format: Use JSON lines (default: True)
        console_level: Console handler level (default: INFO)
        file_level: File handler level (default: DEBUG)
        rotation_when: When to rotate log files ('midnight', 'H', ...)
        backup_count: Number of rotated files to keep (default: 7)
        suppress_noisy: Quiet down HTTP client loggers
        execution_id: Execution identifier for context
        log_to_stdout: Skip the file handler (default: True)
        console_stream: Stream for the console handler (default: sys.stdout)

    Returns:
        Logger named ``name``
    """
    if execution_id:
        set_log_context(execution_id=execution_id)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.handlers.clear()
    root_logger.addHandler(
        _console_handler(console_level, json_format and log_to_stdout, console_stream)
    )

    if not log_to_stdout:
        root_logger.addHandler(
            _file_handler(
                get_log_file_path(log_dir or DEFAULT_LOG_DIR, name=name),
                file_level,
                json_format,
                rotation_when,
                backup_count,
            )
        )

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.debug("Logging initialized", extra={"operation": "setup_logging"})
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def generate_execution_id() -> str:
    """
    Generate unique execution identifier.

    Format: x-YYYYMMDD-HHMMSS-XXXX where XXXX is random hex.
    """
    return f"x-{datetime.now().strftime('%Y%m%d-%H%M%S')}-{secrets.token_hex(2)}"
