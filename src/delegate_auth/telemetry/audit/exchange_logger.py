"""Exchange audit logger.

Logs delegate token exchanges to audit/exchange.jsonl:
- exchange_succeeded: a session token was minted (user id hashed)
- exchange_failed: the full reason the exchange was refused

This is the error-observability collaborator of the exchange orchestrator.
Failure details logged here are never returned to the caller.
"""

from __future__ import annotations

__all__ = [
    "ExchangeAuditLogger",
    "create_exchange_audit_logger",
]

import logging
from pathlib import Path

from delegate_auth.constants import APP_NAME
from delegate_auth.exceptions import UnknownDelegate, UserNotFound
from delegate_auth.telemetry.jsonl import open_jsonl_logger, pseudonymize
from delegate_auth.telemetry.models import ExchangeEvent

EXCHANGE_LOGGER_NAME = f"{APP_NAME}.audit.exchange"


class ExchangeAuditLogger:
    """Audit logger for delegate token exchanges.

    Usage:
        audit = create_exchange_audit_logger(config.exchange_log_path)
        orchestrator = ExchangeOrchestrator(..., reporter=audit)
    """

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize exchange audit logger.

        Args:
            logger: Configured logger (JSONL file handler in production).
        """
        self._logger = logger

    def _log_event(self, event: ExchangeEvent, level: int = logging.INFO) -> None:
        self._logger.log(level, event.model_dump(exclude_none=True))

    def log_exchange_succeeded(self, user_id: str, *, client: str | None = None) -> None:
        """Log a successful exchange.

        Args:
            user_id: Trusted user id the session token was minted for.
            client: Caller's network address, if known.
        """
        self._log_event(
            ExchangeEvent(
                event="exchange_succeeded",
                status="Success",
                user_id=pseudonymize(user_id),
                client=client,
                message="Session token issued for delegated user",
            )
        )

    def report_failure(self, error: Exception, *, client: str | None = None) -> None:
        """Log why an exchange was refused.

        Args:
            error: The exception raised inside the exchange flow.
            client: Caller's network address, if known.
        """
        delegate_uuid = error.delegate_uuid if isinstance(error, UnknownDelegate) else None
        user_id = pseudonymize(error.user_id) if isinstance(error, UserNotFound) else None
        cause = error.__cause__

        self._log_event(
            ExchangeEvent(
                event="exchange_failed",
                status="Failure",
                user_id=user_id,
                delegate_uuid=delegate_uuid,
                client=client,
                error_type=type(error).__name__,
                error_message=str(error),
                cause_type=type(cause).__name__ if cause is not None else None,
            ),
            level=logging.WARNING,
        )


def create_exchange_audit_logger(log_path: Path | None = None) -> ExchangeAuditLogger:
    """Create an exchange audit logger.

    Args:
        log_path: JSONL file to write to. If None, events go to the standard
            logging hierarchy under "delegate-auth.audit.exchange".

    Returns:
        ExchangeAuditLogger instance.
    """
    if log_path is None:
        return ExchangeAuditLogger(logging.getLogger(EXCHANGE_LOGGER_NAME))
    return ExchangeAuditLogger(open_jsonl_logger(EXCHANGE_LOGGER_NAME, log_path))
