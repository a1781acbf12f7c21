"""Local user resolution."""

from delegate_auth.users.directory import (
    FileUserDirectory,
    InMemoryUserDirectory,
    User,
    UserDirectory,
)

__all__ = [
    "FileUserDirectory",
    "InMemoryUserDirectory",
    "User",
    "UserDirectory",
]
