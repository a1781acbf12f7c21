"""Delegate token exchange flow."""

from delegate_auth.exchange.orchestrator import (
    ExchangeOrchestrator,
    ExchangeReporter,
    LoginHook,
    RateLimitReset,
)

__all__ = [
    "ExchangeOrchestrator",
    "ExchangeReporter",
    "LoginHook",
    "RateLimitReset",
]
