"""
Console and log-file output for the classifier.

Every record is written as ``[YYYY-MM-DD HH:MM:SS] LEVEL: message`` in local
time: informational lines to stdout, errors to stderr, and both to the log
file, which is truncated at the start of each run.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)

_installed_handlers: list[logging.Handler] = []


class _BelowErrorFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def enable_utf8_console() -> None:
    """Switch the Windows console to the UTF-8 code page so non-ASCII mod names print correctly."""
    if sys.platform != "win32":
        return
    try:
        import ctypes
        ctypes.windll.kernel32.SetConsoleOutputCP(65001)
    except (ImportError, AttributeError, OSError) as e:
        logger.debug(f"Could not switch console code page to UTF-8: {e}")
    for stream in (sys.stdout, sys.stderr):
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(encoding="utf-8")


def shutdown_logging() -> None:
    root = logging.getLogger()
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.flush()
        handler.close()


def configure_logging(log_path: Optional[Path], level: int = logging.INFO) -> Optional[Path]:
    """Install console and file handlers on the root logger.

    Returns the log file path actually in use, or None if the file could not
    be opened, in which case output goes to the console only.
    """
    shutdown_logging()
    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    out_handler = logging.StreamHandler(sys.stdout)
    out_handler.addFilter(_BelowErrorFilter())
    err_handler = logging.StreamHandler(sys.stderr)
    err_handler.setLevel(logging.ERROR)
    handlers: list[logging.Handler] = [out_handler, err_handler]

    opened: Optional[Path] = None
    file_error: Optional[OSError] = None
    if log_path is not None:
        try:
            # FileHandler flushes after every record; mode "w" truncates per run.
            handlers.append(logging.FileHandler(log_path, mode="w", encoding="utf-8"))
            opened = log_path
        except OSError as e:
            file_error = e

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _installed_handlers.append(handler)

    if file_error is not None:
        logger.error(f"Cannot open log file {log_path}: {file_error}")
    return opened
