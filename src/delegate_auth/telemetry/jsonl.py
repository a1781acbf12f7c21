"""JSON Lines log files.

Every delegate-auth log file (system.jsonl, audit/exchange.jsonl) holds one
JSON object per line, led by "time" (UTC, millisecond precision, "Z" suffix)
and "level". Messages are logged as dicts or pydantic models:

    logger.warning({"event": "exchange_failed", "message": "..."})
    -> {"time": "2026-03-04T10:48:37.123Z", "level": "WARNING", "event": ...}

Log directories are owner-only (0700) and log files 0600: the audit trail
names delegates and clients.
"""

from __future__ import annotations

__all__ = [
    "JSONLFormatter",
    "open_jsonl_logger",
    "prepare_log_file",
    "pseudonymize",
]

import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel

LOG_DIR_MODE = 0o700
LOG_FILE_MODE = 0o600


class JSONLFormatter(logging.Formatter):
    """Render a record as one JSON line with "time" and "level" first."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "time": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
        }
        entry.update(_message_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _message_fields(record: logging.LogRecord) -> dict[str, Any]:
    msg = record.msg
    if isinstance(msg, BaseModel):
        return msg.model_dump(mode="json", exclude_none=True)
    if isinstance(msg, dict):
        return dict(msg)
    return {"message": record.getMessage()}


def prepare_log_file(log_file: Path) -> None:
    """Create the parent directory of *log_file*, owner-only.

    Raises:
        OSError: If the directory cannot be created or restricted.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    if os.name == "posix":
        log_file.parent.chmod(LOG_DIR_MODE)


def open_jsonl_logger(name: str, log_file: Path, level: int = logging.INFO) -> logging.Logger:
    """Return logger *name* writing JSON lines to *log_file* only.

    Calling this again for the same name replaces the previous file handler,
    so a logger never writes one event twice.

    Raises:
        OSError: If the log directory or file cannot be created.
    """
    prepare_log_file(log_file)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()

    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(JSONLFormatter())
    logger.addHandler(handler)

    if os.name == "posix":
        log_file.chmod(LOG_FILE_MODE)
    return logger


def pseudonymize(value: str, length: int = 8) -> str:
    """Short, stable stand-in for an identifier that must not be logged verbatim.

    >>> pseudonymize("admin@example.com")  # doctest: +ELLIPSIS
    'sha256:...'
    """
    if not value:
        return "sha256:empty"
    return "sha256:" + hashlib.sha256(value.encode("utf-8")).hexdigest()[:length]
