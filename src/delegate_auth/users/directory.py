"""User lookup for the exchange flow.

A verified assertion names a user; the directory resolves that name to a
local user record. A user may be named by id, username or e-mail address.

Two implementations are provided:
- InMemoryUserDirectory: list of users held in memory (tests, embedding)
- FileUserDirectory: JSON file shared between the server and the CLI
"""

from __future__ import annotations

__all__ = [
    "FileUserDirectory",
    "InMemoryUserDirectory",
    "User",
    "UserDirectory",
    "UserStoreFile",
]

import asyncio
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from delegate_auth.exceptions import DownstreamFailure, ValidationError
from delegate_auth.utils.json_store import read_json_model, write_json_model


class User(BaseModel):
    """A local user account.

    Attributes:
        id: Stable user identifier (session tokens are minted for this value).
        username: Login name.
        email: Contact address, if any.
    """

    id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    email: str | None = None


class UserStoreFile(BaseModel):
    """On-disk layout of the users JSON file."""

    users: list[User] = Field(default_factory=list)


@runtime_checkable
class UserDirectory(Protocol):
    """Resolves trusted user ids to user records."""

    async def find_user(self, user_id: str) -> User | None:
        """Return the user named by *user_id*, or None if there is none.

        Raises:
            DownstreamFailure: If the user store is unavailable.
        """
        ...


def _match_user(users: list[User], user_id: str) -> User | None:
    """Find a user by id, then username, then e-mail (case-insensitive)."""
    for user in users:
        if user.id == user_id:
            return user
    for user in users:
        if user.username == user_id:
            return user
    lowered = user_id.lower()
    for user in users:
        if user.email is not None and user.email.lower() == lowered:
            return user
    return None


class InMemoryUserDirectory:
    """User directory backed by a list of users.

    Matching is exact: first on id, then username, then e-mail
    (case-insensitive for e-mail only).
    """

    def __init__(self, users: list[User] | None = None) -> None:
        self._users: list[User] = list(users or [])

    def add(self, user: User) -> None:
        """Register a user."""
        self._users.append(user)

    async def find_user(self, user_id: str) -> User | None:
        return _match_user(self._users, user_id)


class FileUserDirectory:
    """User directory persisted to a JSON file.

    Re-read whenever the file's modification time changes, so users added
    by the CLI are visible to a running server.

    Usage:
        users = FileUserDirectory(config.users_path(config_path))
        user = await users.find_user("42")
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._users: list[User] = []
        self._loaded_mtime_ns: int | None = None

    @property
    def path(self) -> Path:
        """Location of the backing file."""
        return self._path

    def load(self) -> list[User]:
        """Return current users, re-reading the file if it changed.

        Raises:
            DownstreamFailure: If the file exists but cannot be read or parsed.
        """
        try:
            mtime_ns = self._path.stat().st_mtime_ns
        except FileNotFoundError:
            self._users = []
            self._loaded_mtime_ns = None
            return self._users
        except OSError as e:
            raise DownstreamFailure(f"Cannot access user store {self._path}: {e}") from e

        if mtime_ns != self._loaded_mtime_ns:
            try:
                store = read_json_model(self._path, UserStoreFile, what="users")
            except (OSError, ValueError) as e:
                raise DownstreamFailure(str(e)) from e
            self._users = store.users
            self._loaded_mtime_ns = mtime_ns
        return self._users

    def add(self, user: User) -> None:
        """Append *user* to the file.

        Raises:
            ValidationError: If a user with the same id already exists.
            DownstreamFailure: If the file cannot be read or written.
        """
        users = list(self.load())
        if any(existing.id == user.id for existing in users):
            raise ValidationError(f"User '{user.id}' already exists.")
        users.append(user)
        try:
            write_json_model(self._path, UserStoreFile(users=users))
            mtime_ns = self._path.stat().st_mtime_ns
        except OSError as e:
            raise DownstreamFailure(f"Cannot write user store {self._path}: {e}") from e

        # Two writes can land within one mtime tick; cache what was written
        self._users = users
        self._loaded_mtime_ns = mtime_ns

    async def find_user(self, user_id: str) -> User | None:
        users = await asyncio.to_thread(self.load)
        return _match_user(users, user_id)
