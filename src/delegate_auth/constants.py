"""Application-wide constants for delegate-auth.

Constants that define application behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "DELEGATES_FILENAME",
    "USERS_FILENAME",
    # Delegate identifiers
    "UUID_HEX_LENGTH",
    "UUID_GROUP_LENGTHS",
    "UUID_VALIDATION_MESSAGE",
    # Assertions
    "ASSERTION_ALGORITHM",
    "DELEGATE_UUID_CLAIM",
    "USER_ID_CLAIM",
    "DEFAULT_ASSERTION_LEEWAY_SECONDS",
    "MAX_ASSERTION_LEEWAY_SECONDS",
    "DEFAULT_ASSERTION_TTL_SECONDS",
    # Session tokens
    "SESSION_TOKEN_ALGORITHM",
    "DEFAULT_SESSION_TTL_SECONDS",
    "MIN_SESSION_TTL_SECONDS",
    "MAX_SESSION_TTL_SECONDS",
    "MIN_SESSION_SECRET_LENGTH",
    # Exchange
    "EXCHANGE_PATH",
    "DEFAULT_COLLABORATOR_TIMEOUT_SECONDS",
    "MIN_COLLABORATOR_TIMEOUT_SECONDS",
    "MAX_COLLABORATOR_TIMEOUT_SECONDS",
    "EXCHANGE_FAILURE_MESSAGE",
    # Rate limiting
    "DEFAULT_RATE_WINDOW_SECONDS",
    "DEFAULT_RATE_MAX_ATTEMPTS",
    # API server
    "DEFAULT_API_HOST",
    "DEFAULT_API_PORT",
    "MAX_REQUEST_SIZE",
]

# =============================================================================
# Application identity
# =============================================================================

APP_NAME = "delegate-auth"

# Environment variable that overrides the config file location
CONFIG_ENV_VAR = "DELEGATE_AUTH_CONFIG"

CONFIG_FILENAME = "config.json"
DELEGATES_FILENAME = "delegates.json"
USERS_FILENAME = "users.json"

# =============================================================================
# Delegate identifiers
# =============================================================================

# Stored form is the hyphen-stripped hex string
UUID_HEX_LENGTH = 32

# Canonical form is 8-4-4-4-12
UUID_GROUP_LENGTHS: tuple[int, ...] = (8, 4, 4, 4, 12)

UUID_VALIDATION_MESSAGE = "Application UUID must be a 32 character long lower case UUID version 4."

# =============================================================================
# Assertions (delegate tokens)
# =============================================================================

# The only algorithm an assertion may declare
ASSERTION_ALGORITHM = "RS256"

DELEGATE_UUID_CLAIM = "delegateUuid"
USER_ID_CLAIM = "userId"

# Clock skew tolerance applied to exp/nbf/iat checks
DEFAULT_ASSERTION_LEEWAY_SECONDS = 0
MAX_ASSERTION_LEEWAY_SECONDS = 300

# Lifetime used by the `assertion sign` CLI helper
DEFAULT_ASSERTION_TTL_SECONDS = 300

# =============================================================================
# Session tokens
# =============================================================================

SESSION_TOKEN_ALGORITHM = "HS256"
DEFAULT_SESSION_TTL_SECONDS = 3600
MIN_SESSION_TTL_SECONDS = 60
MAX_SESSION_TTL_SECONDS = 86400

# HS256 keys shorter than the hash output are rejected by PyJWT
MIN_SESSION_SECRET_LENGTH = 32

# =============================================================================
# Exchange
# =============================================================================

EXCHANGE_PATH = "/auth/delegate/exchange"

# Upper bound for registry lookups, user resolution and token minting
DEFAULT_COLLABORATOR_TIMEOUT_SECONDS = 5.0
MIN_COLLABORATOR_TIMEOUT_SECONDS = 0.1
MAX_COLLABORATOR_TIMEOUT_SECONDS = 60.0

# Caller-visible message for every exchange failure
EXCHANGE_FAILURE_MESSAGE = "Unable to exchange token"

# =============================================================================
# Rate limiting
# =============================================================================

DEFAULT_RATE_WINDOW_SECONDS = 60
DEFAULT_RATE_MAX_ATTEMPTS = 20

# =============================================================================
# API server
# =============================================================================

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8780

# 1 MiB
MAX_REQUEST_SIZE = 1024 * 1024
