"""
Logging configuration for openclaw-migrate.

Console output is short and meant for the person running the migration;
the optional log file captures everything at DEBUG, as text or JSON
lines. Every handler carries a redaction filter so that credential
values moved into the secret store never show up in a log line.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Set

REDACTED = "***"

# Values shorter than this are too likely to collide with ordinary words
_MIN_SECRET_LENGTH = 4

_secrets: Set[str] = set()
_secrets_lock = threading.Lock()


def register_secret(value: str):
    """Mask a credential value in all subsequent log output."""
    if value and len(value) >= _MIN_SECRET_LENGTH:
        with _secrets_lock:
            _secrets.add(value)


def clear_secrets():
    with _secrets_lock:
        _secrets.clear()


def redact(text: str) -> str:
    with _secrets_lock:
        values = sorted(_secrets, key=len, reverse=True)
    for value in values:
        if value in text:
            text = text.replace(value, REDACTED)
    return text


class RedactingFilter(logging.Filter):
    """Replaces registered secret values in the formatted message."""

    def filter(self, record: logging.LogRecord) -> bool:
        if _secrets:
            message = record.getMessage()
            cleaned = redact(message)
            if cleaned != message:
                record.msg = cleaned
                record.args = None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with LogContext data under "data"."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.lineno}",
        }

        context = getattr(record, "extra_data", None)
        if context:
            entry["data"] = context

        if record.exc_info:
            entry["exception"] = redact(self.formatException(record.exc_info))

        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Colors the level name on a terminal."""

    COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "\033[36m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = self.COLORS.get(record.levelno)
        if not color:
            return text
        return text.replace(record.levelname, f"{color}{record.levelname}{self.RESET}", 1)


CONSOLE_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(filename)s:%(lineno)d] %(message)s"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    json_logs: bool = False,
):
    """
    Configure logging for openclaw-migrate.

    Replaces any handlers already on the root logger, so calling it again
    (for example from tests) does not duplicate output.

    Args:
        level: Console logging level (default: INFO)
        log_file: Append a full DEBUG log to this file (optional)
        json_logs: Write the log file as JSON lines
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG if log_file else level)

    redactor = RedactingFilter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.addFilter(redactor)
    fmt = VERBOSE_CONSOLE_FORMAT if level <= logging.DEBUG else CONSOLE_FORMAT
    if sys.stderr.isatty():
        console_handler.setFormatter(ColoredFormatter(fmt))
    else:
        console_handler.setFormatter(logging.Formatter(fmt))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(redactor)
        file_handler.setFormatter(JSONFormatter() if json_logs else logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)


class LogContext:
    """
    Attach key/value context to every record logged inside the block.

    Contexts nest; an inner block sees the outer keys plus its own.

    Example:
        with LogContext(source="/home/me/.openclaw", dry_run=True):
            logger.info("Migrating")  # record.extra_data has source and dry_run
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._old_factory = None

    def __enter__(self):
        self._old_factory = previous = logging.getLogRecordFactory()
        context = self.context

        def record_factory(*args, **kwargs):
            record = previous(*args, **kwargs)
            merged = dict(getattr(record, "extra_data", None) or {})
            merged.update(context)
            record.extra_data = merged
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, *args):
        logging.setLogRecordFactory(self._old_factory)
