"""Security primitives for the exchange endpoint."""

from delegate_auth.security.rate_limiter import ExchangeRateLimiter, create_rate_limiter

__all__ = [
    "ExchangeRateLimiter",
    "create_rate_limiter",
]
