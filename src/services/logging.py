"""
Logging - Application logging configuration and disk persistence.

Provides:
- Python logging configuration with console and optional file output
- Log persistence to daily files: suiwallet-YYYY-MM-DD.log
- Automatic cleanup of old log files
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
import logging

from utils import get_logs_dir


LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_FILE_PREFIX = "suiwallet-"


class DailyFileHandler(logging.Handler):
    """Appends formatted records to today's log file."""

    def __init__(self, logs_dir: Optional[Path] = None, level: int = logging.INFO):
        super().__init__(level)
        self.logs_dir = logs_dir
        self.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            append_log(self.format(record), logs_dir=self.logs_dir)
        except Exception:
            self.handleError(record)


def configure_logging(level: int = logging.INFO, retention_days: int = 0,
                      logs_dir: Optional[Path] = None) -> None:
    """
    Configure Python logging for the application.

    Sets up a root logger with console output, plus daily log files when
    retention_days > 0.

    Args:
        level: Logging level (default: INFO)
        retention_days: Keep log files this many days (0 = no log files)
        logs_dir: Directory for log files (default: app logs dir)
    """
    root_logger = logging.getLogger()

    # Only configure if not already configured
    if root_logger.handlers:
        return

    root_logger.setLevel(level)

    # Console handler with simple format
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if retention_days > 0:
        root_logger.addHandler(DailyFileHandler(logs_dir, level))
        deleted = cleanup_old_logs(retention_days, logs_dir)
        if deleted:
            logging.getLogger(__name__).info(f"Cleaned up {deleted} old log file(s)")


def get_log_file_path(date: Optional[datetime] = None, logs_dir: Optional[Path] = None) -> Path:
    """Get the log file path for a specific date (defaults to today)."""
    if date is None:
        date = datetime.now()
    filename = f"{LOG_FILE_PREFIX}{date.strftime('%Y-%m-%d')}.log"
    return (logs_dir or get_logs_dir()) / filename


def append_log(message: str, logs_dir: Optional[Path] = None) -> None:
    """Append a log line to today's log file."""
    log_path = get_log_file_path(logs_dir=logs_dir)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(log_path, 'a', encoding='utf-8') as f:
        f.write(message + '\n')


def load_recent_logs(max_lines: int, logs_dir: Optional[Path] = None) -> list[str]:
    """
    Load up to max_lines recent log lines, oldest first.

    Falls back to yesterday's file when today's is short.
    """
    if max_lines <= 0:
        return []

    lines = _read_tail(get_log_file_path(logs_dir=logs_dir), max_lines)
    if len(lines) < max_lines:
        yesterday = datetime.now() - timedelta(days=1)
        earlier = _read_tail(get_log_file_path(yesterday, logs_dir), max_lines - len(lines))
        lines = earlier + lines
    return lines


def _read_tail(file_path: Path, n: int) -> list[str]:
    if not file_path.exists():
        return []
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return [line.rstrip('\n') for line in f.readlines()[-n:]]
    except (OSError, UnicodeDecodeError):
        return []


def cleanup_old_logs(retention_days: int, logs_dir: Optional[Path] = None) -> int:
    """
    Delete log files older than retention_days.

    Args:
        retention_days: Delete files older than this (0 = delete all)
        logs_dir: Directory to clean (default: app logs dir)

    Returns:
        Number of files deleted
    """
    if retention_days < 0:
        return 0

    logs_dir = logs_dir or get_logs_dir()
    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for file_path in logs_dir.glob(f"{LOG_FILE_PREFIX}*.log"):
        # Parse date from filename
        try:
            date_str = file_path.stem.replace(LOG_FILE_PREFIX, "")
            file_date = datetime.strptime(date_str, "%Y-%m-%d")

            if file_date < cutoff_date:
                file_path.unlink()
                deleted_count += 1
        except (ValueError, OSError):
            # Skip files that don't match expected format
            pass

    return deleted_count
