"""Delegate token exchange.

The orchestrator is the trust boundary of the exchange flow:

    verify assertion -> find user -> on-login hook -> reset rate limit -> mint

Every failure, expected or not, is reported with full detail and then
collapsed into a single ExchangeFailed. The caller cannot tell a forged
signature from an unknown delegate or a missing user.
"""

from __future__ import annotations

__all__ = [
    "ExchangeOrchestrator",
    "ExchangeReporter",
    "LoginHook",
    "RateLimitReset",
]

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Protocol, TypeVar

from delegate_auth.constants import APP_NAME, DEFAULT_COLLABORATOR_TIMEOUT_SECONDS
from delegate_auth.exceptions import (
    DelegateAuthError,
    DownstreamFailure,
    ExchangeFailed,
    UserNotFound,
)

if TYPE_CHECKING:
    from delegate_auth.assertions.verifier import AssertionVerifier
    from delegate_auth.sessions.tokens import SessionTokenIssuer
    from delegate_auth.users.directory import User, UserDirectory

_logger = logging.getLogger(f"{APP_NAME}.exchange")

T = TypeVar("T")

LoginHook = Callable[["User"], Awaitable[None]]
RateLimitReset = Callable[[], Awaitable[None]]


class ExchangeReporter(Protocol):
    """Receives the outcome of every exchange attempt.

    ExchangeAuditLogger implements this.
    """

    def log_exchange_succeeded(self, user_id: str, *, client: str | None = None) -> None: ...

    def report_failure(self, error: Exception, *, client: str | None = None) -> None: ...


class ExchangeOrchestrator:
    """Exchanges delegate assertions for session tokens.

    Usage:
        orchestrator = ExchangeOrchestrator(verifier, users, issuer, reporter=audit)
        try:
            session_token = await orchestrator.exchange(token)
        except ExchangeFailed:
            # respond with the generic not-found error
            ...
    """

    def __init__(
        self,
        verifier: "AssertionVerifier",
        users: "UserDirectory",
        issuer: "SessionTokenIssuer",
        *,
        on_login: LoginHook | None = None,
        reporter: ExchangeReporter | None = None,
        timeout: float = DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize orchestrator.

        Args:
            verifier: Turns assertions into trusted user ids.
            users: Resolves user ids to user records.
            issuer: Mints session tokens.
            on_login: Awaited with the user before the token is minted.
            reporter: Receives success and failure details. Failures are
                logged at WARNING on the module logger if None.
            timeout: Seconds allowed for each collaborator call.
        """
        self._verifier = verifier
        self._users = users
        self._issuer = issuer
        self._on_login = on_login
        self._reporter = reporter
        self._timeout = timeout

    async def exchange(
        self,
        token: str,
        *,
        reset_rate_limit: RateLimitReset | None = None,
        client: str | None = None,
    ) -> str:
        """Exchange a delegate assertion for a fresh session token.

        Args:
            token: Delegate-signed assertion.
            reset_rate_limit: Awaited after the user is logged in, to clear
                the caller's failed-attempt history.
            client: Caller's address, passed through to the reporter.

        Returns:
            A new session token. Repeated calls return different tokens.

        Raises:
            ExchangeFailed: On any failure. The original error is chained.
        """
        try:
            user_id = await self._verifier.verify(token)

            user = await self._bounded(self._users.find_user(user_id), "user lookup")
            if user is None:
                raise UserNotFound(user_id)

            if self._on_login is not None:
                await self._bounded(self._on_login(user), "login hook")
            if reset_rate_limit is not None:
                await reset_rate_limit()

            session_token = await self._bounded(self._issuer.mint(user.id), "token mint")
        except DelegateAuthError as e:
            self._report(e, client)
            raise ExchangeFailed() from e
        except Exception as e:
            # Unexpected collaborator errors collapse like any other failure
            wrapped = DownstreamFailure(f"Unexpected error during exchange: {e}")
            wrapped.__cause__ = e
            self._report(wrapped, client)
            raise ExchangeFailed() from wrapped

        if self._reporter is not None:
            try:
                self._reporter.log_exchange_succeeded(user.id, client=client)
            except Exception as e:
                self._log_reporter_error(e)
        return session_token

    async def _bounded(self, awaitable: Awaitable[T], operation: str) -> T:
        """Await *awaitable* within the collaborator timeout.

        Raises:
            DownstreamFailure: On timeout.
        """
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise DownstreamFailure(f"{operation} did not complete within {self._timeout}s") from e

    def _report(self, error: Exception, client: str | None) -> None:
        """Hand *error* to the reporter, falling back to the module logger.

        If the reporter itself raises, that error and the original failure
        are both logged here.
        """
        if self._reporter is not None:
            try:
                self._reporter.report_failure(error, client=client)
                return
            except Exception as e:
                self._log_reporter_error(e)
        _logger.warning(
            {
                "event": "exchange_failed",
                "message": str(error),
                "error_type": type(error).__name__,
            }
        )

    def _log_reporter_error(self, error: Exception) -> None:
        _logger.error(
            {
                "event": "exchange_reporter_failed",
                "message": f"Exchange reporter raised: {error}",
                "error_type": type(error).__name__,
            }
        )
