"""Operational logging for the server and CLI.

Everything that is not part of the exchange audit trail goes here: server
startup, rejected admin requests, rate limiting, store failures.

- stderr: INFO and above, one "LEVEL [event] message" line per record
- <log_dir>/delegate-auth/system.jsonl: WARNING and above, once
  configure_system_logger_file() has been given the configured path
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "configure_system_logger_file",
    "get_system_logger",
]

import logging
import sys
from pathlib import Path

from delegate_auth.constants import APP_NAME
from delegate_auth.telemetry.jsonl import JSONLFormatter, prepare_log_file

SYSTEM_LOGGER_NAME = f"{APP_NAME}.system"


class ConsoleFormatter(logging.Formatter):
    """Short human-readable lines for stderr."""

    def format(self, record: logging.LogRecord) -> str:
        if not isinstance(record.msg, dict):
            return f"{record.levelname} {record.getMessage()}"
        event = record.msg.get("event")
        text = record.msg.get("message") or ""
        if event:
            return f"{record.levelname} [{event}] {text}".rstrip()
        return f"{record.levelname} {text}".rstrip()


def get_system_logger() -> logging.Logger:
    """Return the "delegate-auth.system" logger, attaching stderr output once."""
    logger = logging.getLogger(SYSTEM_LOGGER_NAME)
    if getattr(logger, "_delegate_auth_ready", False):
        return logger

    logger.setLevel(logging.INFO)
    logger.propagate = False
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO)
    console.setFormatter(ConsoleFormatter())
    logger.addHandler(console)
    logger._delegate_auth_ready = True  # type: ignore[attr-defined]
    return logger


def configure_system_logger_file(log_path: Path) -> bool:
    """Also write WARNING and above to *log_path* as JSON lines.

    Idempotent per path. If the log directory cannot be created the failure
    is reported on stderr and the server keeps running without a file log.

    Returns:
        True if the file handler is active.
    """
    logger = get_system_logger()
    target = str(log_path.resolve())
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return True

    try:
        prepare_log_file(log_path)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError as e:
        logger.warning(
            {
                "event": "system_log_unavailable",
                "message": f"Cannot write system log {log_path}: {e}",
                "component": "telemetry",
            }
        )
        return False

    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(JSONLFormatter())
    logger.addHandler(file_handler)
    return True
