"""Application configuration for delegate-auth.

Defines configuration models for assertion verification, session tokens,
rate limiting, the API server, storage and logging. User creates config via
`delegate-auth init`. Config is stored at the OS-appropriate location (via
click.get_app_dir) unless overridden with --config or DELEGATE_AUTH_CONFIG.

Example usage:
    # Load from config file
    config = AppConfig.load_from_file(config_path)

    # Save new configuration
    config.save_to_file(config_path)
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_LOG_DIR",
    "ApiConfig",
    "AppConfig",
    "AssertionConfig",
    "ExchangeConfig",
    "LoggingConfig",
    "RateLimitSettings",
    "SessionConfig",
    "StorageConfig",
    "generate_default_config",
    "get_config_path",
]

import os
import secrets
import sys
from pathlib import Path
from typing import Literal

import click
from pydantic import BaseModel, Field

from delegate_auth.constants import (
    APP_NAME,
    ASSERTION_ALGORITHM,
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_ASSERTION_LEEWAY_SECONDS,
    DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
    DEFAULT_RATE_MAX_ATTEMPTS,
    DEFAULT_RATE_WINDOW_SECONDS,
    DEFAULT_SESSION_TTL_SECONDS,
    DELEGATES_FILENAME,
    MAX_ASSERTION_LEEWAY_SECONDS,
    MAX_COLLABORATOR_TIMEOUT_SECONDS,
    MAX_SESSION_TTL_SECONDS,
    MIN_COLLABORATOR_TIMEOUT_SECONDS,
    MIN_SESSION_SECRET_LENGTH,
    MIN_SESSION_TTL_SECONDS,
    USERS_FILENAME,
)
from delegate_auth.exceptions import ConfigurationError
from delegate_auth.utils.json_store import read_json_model, write_json_model


# =============================================================================
# Platform-specific defaults
# =============================================================================


def _get_platform_log_dir() -> str:
    """Get platform-appropriate base log directory following OS conventions.

    Returns:
        Platform-specific base log directory path (unexpanded).
        Logs go in <base>/delegate-auth/.

    Platform conventions:
        - macOS: ~/Library/Logs
        - Linux: ~/.local/state (XDG Base Directory Specification for logs/state)
        - Windows: ~/AppData/Local
    """
    if sys.platform == "darwin":
        return "~/Library/Logs"
    elif sys.platform == "win32":
        return "~/AppData/Local"
    else:
        return os.environ.get("XDG_STATE_HOME", "~/.local/state")


DEFAULT_LOG_DIR = _get_platform_log_dir()


def get_config_path(override: str | Path | None = None) -> Path:
    """Resolve the config file location.

    Precedence: explicit override, then $DELEGATE_AUTH_CONFIG, then the
    application directory.

    Args:
        override: Path given on the command line, if any.

    Returns:
        Path to config.json.
    """
    if override:
        return Path(override).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path).expanduser()
    return Path(click.get_app_dir(APP_NAME)) / CONFIG_FILENAME


# =============================================================================
# Assertion Verification
# =============================================================================


class AssertionConfig(BaseModel):
    """Delegate assertion verification settings.

    Attributes:
        algorithm: Signing algorithm assertions must declare. Pinned to RS256;
            any other value in a token header is rejected.
        leeway_seconds: Clock skew tolerance for exp/nbf/iat checks.
        require_expiry: If True, assertions without an 'exp' claim are rejected.
    """

    algorithm: Literal["RS256"] = ASSERTION_ALGORITHM
    leeway_seconds: int = Field(
        default=DEFAULT_ASSERTION_LEEWAY_SECONDS,
        ge=0,
        le=MAX_ASSERTION_LEEWAY_SECONDS,
    )
    require_expiry: bool = False


# =============================================================================
# Session Tokens
# =============================================================================


class SessionConfig(BaseModel):
    """Session token issuance settings.

    Attributes:
        secret: HMAC key for minted session tokens. Never logged.
        ttl_seconds: Session token lifetime (60-86400).
        issuer: Value of the 'iss' claim in minted tokens.
    """

    secret: str = Field(min_length=MIN_SESSION_SECRET_LENGTH, repr=False)
    ttl_seconds: int = Field(
        default=DEFAULT_SESSION_TTL_SECONDS,
        ge=MIN_SESSION_TTL_SECONDS,
        le=MAX_SESSION_TTL_SECONDS,
    )
    issuer: str = Field(default=APP_NAME, min_length=1)


# =============================================================================
# Exchange
# =============================================================================


class RateLimitSettings(BaseModel):
    """Per-client limit on exchange attempts.

    Attributes:
        enabled: Whether exchange attempts are rate limited.
        window_seconds: Sliding window duration for counting attempts.
        max_attempts: Attempts allowed per client within the window.
            A successful exchange resets the client's count.
    """

    enabled: bool = True
    window_seconds: int = Field(default=DEFAULT_RATE_WINDOW_SECONDS, ge=1)
    max_attempts: int = Field(default=DEFAULT_RATE_MAX_ATTEMPTS, ge=1)


class ExchangeConfig(BaseModel):
    """Exchange flow settings.

    Attributes:
        collaborator_timeout_seconds: Upper bound for each external call
            (delegate lookup, user lookup, token mint).
    """

    collaborator_timeout_seconds: float = Field(
        default=DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
        ge=MIN_COLLABORATOR_TIMEOUT_SECONDS,
        le=MAX_COLLABORATOR_TIMEOUT_SECONDS,
    )
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)


# =============================================================================
# API Server
# =============================================================================


class ApiConfig(BaseModel):
    """HTTP API settings.

    Attributes:
        host: Bind address.
        port: TCP port.
        admin_token: Bearer token required for /api/* management routes.
    """

    host: str = Field(default=DEFAULT_API_HOST, min_length=1)
    port: int = Field(default=DEFAULT_API_PORT, ge=1, le=65535)
    admin_token: str = Field(min_length=32, repr=False)


# =============================================================================
# Storage & Logging
# =============================================================================


class StorageConfig(BaseModel):
    """Delegate and user record storage.

    Relative paths are resolved against the config file's directory.

    Attributes:
        delegates_path: JSON file holding registered delegates.
        users_path: JSON file holding the users delegates may vouch for.
    """

    delegates_path: str = Field(default=DELEGATES_FILENAME, min_length=1)
    users_path: str = Field(default=USERS_FILENAME, min_length=1)


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Logs are stored in <log_dir>/delegate-auth/:
        <log_dir>/
        └── delegate-auth/
            ├── system.jsonl          # WARNING and above
            └── audit/
                └── exchange.jsonl    # Every exchange attempt

    Attributes:
        log_dir: Base directory for logs.
        log_level: Logging level (DEBUG or INFO).
    """

    log_dir: str = Field(default=DEFAULT_LOG_DIR, min_length=1)
    log_level: Literal["DEBUG", "INFO"] = "INFO"


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Main application configuration for delegate-auth.

    Attributes:
        session: Session token issuance settings (required).
        api: HTTP API settings (required).
        assertion: Assertion verification settings.
        exchange: Exchange flow settings.
        storage: Delegate storage settings.
        logging: Logging configuration.
    """

    session: SessionConfig
    api: ApiConfig
    assertion: AssertionConfig = Field(default_factory=AssertionConfig)
    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to config.json.

        Returns:
            AppConfig: Loaded and validated configuration.

        Raises:
            ConfigurationError: If file is missing, not JSON, or invalid.
        """
        try:
            return read_json_model(
                config_path,
                cls,
                what="config",
                hint=f"Run '{APP_NAME} init' to create it (--force replaces an invalid file).",
            )
        except (FileNotFoundError, ValueError) as e:
            raise ConfigurationError(str(e)) from e

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file with owner-only permissions.

        Args:
            config_path: Path where config.json will be written.

        Raises:
            OSError: If file cannot be written.
        """
        write_json_model(config_path, self)

    # -------------------------------------------------------------------------
    # Derived paths
    # -------------------------------------------------------------------------

    @property
    def log_base_dir(self) -> Path:
        """Directory holding all delegate-auth logs."""
        return Path(self.logging.log_dir).expanduser() / APP_NAME

    @property
    def system_log_path(self) -> Path:
        """Path to system.jsonl."""
        return self.log_base_dir / "system.jsonl"

    @property
    def exchange_log_path(self) -> Path:
        """Path to audit/exchange.jsonl."""
        return self.log_base_dir / "audit" / "exchange.jsonl"

    def delegates_path(self, config_path: Path) -> Path:
        """Resolve the delegate store path.

        Args:
            config_path: Location of the config file this config came from.

        Returns:
            Absolute path to the delegates JSON file.
        """
        return _resolve_storage_path(self.storage.delegates_path, config_path)

    def users_path(self, config_path: Path) -> Path:
        """Resolve the user store path (see delegates_path)."""
        return _resolve_storage_path(self.storage.users_path, config_path)


def _resolve_storage_path(value: str, config_path: Path) -> Path:
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return config_path.parent / path


def generate_default_config(**overrides: object) -> AppConfig:
    """Create a configuration with freshly generated secrets.

    Args:
        **overrides: Top-level sections to replace (e.g. logging=LoggingConfig(...)).

    Returns:
        AppConfig with a random session secret and admin token.
    """
    data: dict[str, object] = {
        "session": SessionConfig(secret=secrets.token_urlsafe(48)),
        "api": ApiConfig(admin_token=secrets.token_hex(32)),
    }
    data.update(overrides)
    return AppConfig.model_validate(data)
