"""
Logging configuration for the desktop application.

The run's log is kept in memory and written to the monthly log file only
when flushed (at shutdown or when a fault is reported).  Sandbox runs never
flush, so nothing reaches disk.
"""
import sys
import threading
from pathlib import Path
from typing import List, Optional

from loguru import logger as _logger

from config.settings import settings


class LogBuffer:
    """Loguru sink that keeps formatted records until they are saved."""

    def __init__(self):
        self._lock = threading.Lock()
        self._messages: List[str] = []
        self._saved = 0

    def write(self, message) -> None:
        with self._lock:
            self._messages.append(str(message))

    @property
    def messages(self) -> List[str]:
        with self._lock:
            return list(self._messages)

    def save(self, path: Optional[Path]) -> bool:
        """Append messages recorded since the last save to ``path``."""
        if path is None:
            return False

        with self._lock:
            pending = self._messages[self._saved:]
            if not pending:
                return False
            path = Path(path)
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'a', encoding='utf-8') as f:
                f.writelines(pending)
            self._saved = len(self._messages)
        return True


log_buffer = LogBuffer()


def setup_logging():
    """Configure logging for the application."""
    # Remove default logger
    _logger.remove()

    # Console logging
    if sys.stderr:
        _logger.add(
            sys.stderr,
            level=settings.LOG_LEVEL,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            colorize=True
        )

    # In-memory run log, saved by flush_log()
    _logger.add(
        log_buffer.write,
        level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | {message}",
        colorize=False,
    )


def flush_log(path: Optional[Path]) -> bool:
    """Write pending log records to ``path``; a ``None`` path (sandbox) keeps them in memory."""
    try:
        return log_buffer.save(path)
    except OSError as e:
        _logger.error(f"Failed to save log to {path}: {e}")
        return False


# Setup logging when module is imported
setup_logging()

# Export the configured logger
logger = _logger
