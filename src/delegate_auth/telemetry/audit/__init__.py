"""Audit logging for delegate token exchanges."""

from delegate_auth.telemetry.audit.exchange_logger import (
    ExchangeAuditLogger,
    create_exchange_audit_logger,
)

__all__ = [
    "ExchangeAuditLogger",
    "create_exchange_audit_logger",
]
