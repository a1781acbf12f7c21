"""Rate limiting for token exchange attempts.

Every exchange attempt counts against the calling client (keyed by remote
address) within a sliding window. Exceeding the limit rejects further
attempts until old ones age out of the window; a successful exchange clears
the client's history so a legitimate user is not penalized for earlier
failures.

Usage:
    limiter = ExchangeRateLimiter()

    # Check before each exchange attempt
    allowed, count = limiter.check(client_id)
    if not allowed:
        # Reject with 429
        ...

    # Clear history after a successful exchange
    limiter.reset(client_id)
"""

from __future__ import annotations

__all__ = [
    "ExchangeRateLimiter",
    "create_rate_limiter",
]

from collections import deque
from dataclasses import dataclass, field
from time import monotonic
from typing import TYPE_CHECKING

from delegate_auth.constants import DEFAULT_RATE_MAX_ATTEMPTS, DEFAULT_RATE_WINDOW_SECONDS

if TYPE_CHECKING:
    from delegate_auth.config import RateLimitSettings


@dataclass(slots=True)
class ExchangeRateLimiter:
    """Track exchange attempts per client using a sliding window.

    Thread-safety: This class is NOT thread-safe. All calls happen on the
    event loop thread without awaiting in between, so no locking is needed.

    Attributes:
        window_seconds: Duration of the sliding window.
        max_attempts: Attempts allowed per client within the window.
        sweep_threshold: Tracked client count that triggers dropping clients
            with no attempts inside the window.
    """

    window_seconds: float = DEFAULT_RATE_WINDOW_SECONDS
    max_attempts: int = DEFAULT_RATE_MAX_ATTEMPTS

    # Idle clients are swept once this many are tracked
    sweep_threshold: int = 10_000

    # Internal state: {client_id: deque[timestamp]}
    _windows: dict[str, deque[float]] = field(default_factory=dict)

    def check(self, client_id: str) -> tuple[bool, int]:
        """Record an attempt if it is within the limit.

        Args:
            client_id: Identifier of the calling client.

        Returns:
            Tuple of (is_allowed, current_count).
            is_allowed is False if the limit would be exceeded.
            current_count is the number of attempts in the current window
            (including this one if allowed).
        """
        now = monotonic()
        cutoff = now - self.window_seconds

        window = self._windows.get(client_id)
        if window is None:
            if len(self._windows) >= self.sweep_threshold:
                self._sweep(cutoff)
            window = self._windows[client_id] = deque()

        # Prune old entries outside the window
        while window and window[0] < cutoff:
            window.popleft()

        current_count = len(window)
        if current_count >= self.max_attempts:
            return False, current_count

        window.append(now)
        return True, current_count + 1

    def get_count(self, client_id: str) -> int:
        """Get current attempt count without recording a new attempt."""
        window = self._windows.get(client_id)
        if not window:
            return 0
        cutoff = monotonic() - self.window_seconds
        return sum(1 for t in window if t >= cutoff)

    def reset(self, client_id: str) -> None:
        """Forget all attempts by *client_id*.

        Called after a successful exchange.
        """
        self._windows.pop(client_id, None)

    def _sweep(self, cutoff: float) -> None:
        idle = [cid for cid, window in self._windows.items() if not window or window[-1] < cutoff]
        for cid in idle:
            del self._windows[cid]

    def clear(self) -> None:
        """Clear all tracking data."""
        self._windows.clear()

    @property
    def tracked_clients(self) -> int:
        """Number of clients currently being tracked."""
        return len(self._windows)


def create_rate_limiter(settings: "RateLimitSettings | None" = None) -> ExchangeRateLimiter | None:
    """Create a rate limiter from configuration.

    Args:
        settings: Rate limiting settings. If None or disabled, returns None.

    Returns:
        ExchangeRateLimiter instance if enabled, None otherwise.
    """
    if settings is None or not settings.enabled:
        return None

    return ExchangeRateLimiter(
        window_seconds=settings.window_seconds,
        max_attempts=settings.max_attempts,
    )
