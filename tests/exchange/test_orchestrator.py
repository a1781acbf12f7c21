"""Unit tests for the exchange orchestrator.

Collaborators are replaced by small fakes so each failure path can be
driven directly. Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from delegate_auth.constants import EXCHANGE_FAILURE_MESSAGE
from delegate_auth.exceptions import (
    DownstreamFailure,
    ExchangeFailed,
    InvalidSignature,
    UnknownDelegate,
    UserNotFound,
)
from delegate_auth.exchange.orchestrator import ExchangeOrchestrator
from delegate_auth.users.directory import InMemoryUserDirectory, User


class FakeVerifier:
    """Returns a fixed user id or raises a fixed error."""

    def __init__(self, user_id: str = "42", error: Exception | None = None) -> None:
        self.user_id = user_id
        self.error = error

    async def verify(self, token: str) -> str:
        if self.error is not None:
            raise self.error
        return self.user_id


class CountingIssuer:
    """Mints predictable, distinct tokens."""

    def __init__(self) -> None:
        self.minted: list[str] = []

    async def mint(self, user_id: str) -> str:
        token = f"session-{user_id}-{len(self.minted)}"
        self.minted.append(token)
        return token


class SlowIssuer:
    async def mint(self, user_id: str) -> str:
        await asyncio.sleep(5)
        return "never"


class BrokenIssuer:
    async def mint(self, user_id: str) -> str:
        raise RuntimeError("signing backend down")


def _orchestrator(
    *,
    verifier: FakeVerifier | None = None,
    users: InMemoryUserDirectory | None = None,
    issuer: object | None = None,
    on_login: AsyncMock | None = None,
    reporter: MagicMock | None = None,
    timeout: float = 1.0,
) -> ExchangeOrchestrator:
    return ExchangeOrchestrator(
        verifier or FakeVerifier(),  # type: ignore[arg-type]
        users or InMemoryUserDirectory([User(id="42", username="alice")]),
        issuer or CountingIssuer(),  # type: ignore[arg-type]
        on_login=on_login,
        reporter=reporter,
        timeout=timeout,
    )


class TestExchangeSuccess:
    """Tests for the happy path."""

    @pytest.mark.asyncio
    async def test_returns_minted_token(self) -> None:
        # Arrange
        issuer = CountingIssuer()
        orchestrator = _orchestrator(issuer=issuer)

        # Act
        token = await orchestrator.exchange("assertion")

        # Assert
        assert token == issuer.minted[0]

    @pytest.mark.asyncio
    async def test_repeated_exchange_returns_fresh_token(self) -> None:
        orchestrator = _orchestrator()

        first = await orchestrator.exchange("assertion")
        second = await orchestrator.exchange("assertion")

        assert first != second

    @pytest.mark.asyncio
    async def test_login_hook_and_rate_limit_reset_run_before_mint(self) -> None:
        # Arrange
        calls: list[str] = []

        async def on_login(user: User) -> None:
            calls.append(f"login:{user.username}")

        async def reset() -> None:
            calls.append("reset")

        class RecordingIssuer:
            async def mint(self, user_id: str) -> str:
                calls.append(f"mint:{user_id}")
                return "token"

        orchestrator = _orchestrator(issuer=RecordingIssuer(), on_login=on_login)  # type: ignore[arg-type]

        # Act
        await orchestrator.exchange("assertion", reset_rate_limit=reset)

        # Assert
        assert calls == ["login:alice", "reset", "mint:42"]

    @pytest.mark.asyncio
    async def test_token_minted_for_resolved_user_id(self) -> None:
        """A user vouched for by e-mail gets a token for their id."""
        # Arrange
        issuer = CountingIssuer()
        users = InMemoryUserDirectory([User(id="42", username="alice", email="admin@example.com")])
        orchestrator = _orchestrator(verifier=FakeVerifier("admin@example.com"), users=users, issuer=issuer)

        # Act
        await orchestrator.exchange("assertion")

        # Assert
        assert issuer.minted == ["session-42-0"]

    @pytest.mark.asyncio
    async def test_success_reported(self) -> None:
        # Arrange
        reporter = MagicMock()
        orchestrator = _orchestrator(reporter=reporter)

        # Act
        await orchestrator.exchange("assertion", client="10.0.0.1")

        # Assert
        reporter.log_exchange_succeeded.assert_called_once_with("42", client="10.0.0.1")
        reporter.report_failure.assert_not_called()


class TestExchangeFailure:
    """Every failure collapses to ExchangeFailed with the real cause reported."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            InvalidSignature("bad signature"),
            UnknownDelegate("0f8fad5bd9cb469fa16570867728950e"),
            DownstreamFailure("registry down"),
        ],
    )
    async def test_verifier_errors_collapse(self, error: Exception) -> None:
        # Arrange
        reporter = MagicMock()
        orchestrator = _orchestrator(verifier=FakeVerifier(error=error), reporter=reporter)

        # Act
        with pytest.raises(ExchangeFailed) as exc_info:
            await orchestrator.exchange("assertion", client="10.0.0.1")

        # Assert
        assert str(exc_info.value) == EXCHANGE_FAILURE_MESSAGE
        assert exc_info.value.__cause__ is error
        reporter.report_failure.assert_called_once_with(error, client="10.0.0.1")

    @pytest.mark.asyncio
    async def test_unknown_user_fails_without_side_effects(self) -> None:
        # Arrange
        issuer = CountingIssuer()
        on_login = AsyncMock()
        reset = AsyncMock()
        reporter = MagicMock()
        orchestrator = _orchestrator(
            verifier=FakeVerifier("nobody"),
            issuer=issuer,
            on_login=on_login,
            reporter=reporter,
        )

        # Act
        with pytest.raises(ExchangeFailed) as exc_info:
            await orchestrator.exchange("assertion", reset_rate_limit=reset)

        # Assert
        assert isinstance(exc_info.value.__cause__, UserNotFound)
        on_login.assert_not_called()
        reset.assert_not_called()
        assert issuer.minted == []

    @pytest.mark.asyncio
    async def test_login_hook_failure_prevents_mint(self) -> None:
        # Arrange
        issuer = CountingIssuer()
        on_login = AsyncMock(side_effect=DownstreamFailure("last-login update failed"))
        orchestrator = _orchestrator(issuer=issuer, on_login=on_login)

        # Act
        with pytest.raises(ExchangeFailed):
            await orchestrator.exchange("assertion")

        # Assert
        assert issuer.minted == []

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped_as_downstream_failure(self) -> None:
        # Arrange
        reporter = MagicMock()
        orchestrator = _orchestrator(issuer=BrokenIssuer(), reporter=reporter)

        # Act
        with pytest.raises(ExchangeFailed) as exc_info:
            await orchestrator.exchange("assertion")

        # Assert
        cause = exc_info.value.__cause__
        assert isinstance(cause, DownstreamFailure)
        assert isinstance(cause.__cause__, RuntimeError)
        reported = reporter.report_failure.call_args.args[0]
        assert reported is cause

    @pytest.mark.asyncio
    async def test_slow_collaborator_times_out(self) -> None:
        # Arrange
        reporter = MagicMock()
        orchestrator = _orchestrator(issuer=SlowIssuer(), reporter=reporter, timeout=0.05)

        # Act
        with pytest.raises(ExchangeFailed) as exc_info:
            await orchestrator.exchange("assertion")

        # Assert
        assert isinstance(exc_info.value.__cause__, DownstreamFailure)
        assert "token mint" in str(exc_info.value.__cause__)

    @pytest.mark.asyncio
    async def test_failures_are_indistinguishable_to_caller(self) -> None:
        """Different causes produce the same exception type and message."""
        # Arrange
        bad_signature = _orchestrator(verifier=FakeVerifier(error=InvalidSignature("x")))
        no_user = _orchestrator(verifier=FakeVerifier("nobody"))

        # Act
        with pytest.raises(ExchangeFailed) as first:
            await bad_signature.exchange("assertion")
        with pytest.raises(ExchangeFailed) as second:
            await no_user.exchange("assertion")

        # Assert
        assert type(first.value) is type(second.value)
        assert str(first.value) == str(second.value)

    @pytest.mark.asyncio
    async def test_failure_logged_without_reporter(self, caplog: pytest.LogCaptureFixture) -> None:
        orchestrator = _orchestrator(verifier=FakeVerifier(error=InvalidSignature("bad")))

        with caplog.at_level("WARNING", logger="delegate-auth.exchange"):
            with pytest.raises(ExchangeFailed):
                await orchestrator.exchange("assertion")

        assert any("InvalidSignature" in str(r.msg) for r in caplog.records)


class TestBrokenReporter:
    """A reporter that raises never changes the caller-visible outcome."""

    @pytest.mark.asyncio
    async def test_failure_still_collapses(self, caplog: pytest.LogCaptureFixture) -> None:
        # Arrange
        reporter = MagicMock()
        reporter.report_failure.side_effect = OSError("audit disk full")
        orchestrator = _orchestrator(verifier=FakeVerifier(error=InvalidSignature("bad")), reporter=reporter)

        # Act
        with caplog.at_level("WARNING", logger="delegate-auth.exchange"):
            with pytest.raises(ExchangeFailed) as exc_info:
                await orchestrator.exchange("assertion")

        # Assert
        assert str(exc_info.value) == EXCHANGE_FAILURE_MESSAGE
        events = [r.msg["event"] for r in caplog.records if isinstance(r.msg, dict)]
        assert "exchange_reporter_failed" in events
        assert "exchange_failed" in events

    @pytest.mark.asyncio
    async def test_success_still_returns_token(self, caplog: pytest.LogCaptureFixture) -> None:
        # Arrange
        reporter = MagicMock()
        reporter.log_exchange_succeeded.side_effect = RuntimeError("audit broken")
        orchestrator = _orchestrator(reporter=reporter)

        # Act
        with caplog.at_level("ERROR", logger="delegate-auth.exchange"):
            token = await orchestrator.exchange("assertion")

        # Assert
        assert token == "session-42-0"
        assert any(
            isinstance(r.msg, dict) and r.msg["event"] == "exchange_reporter_failed" for r in caplog.records
        )
