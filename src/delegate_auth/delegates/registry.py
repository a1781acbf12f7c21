"""Delegate registry: storage of delegate public keys by uuid.

The exchange flow only needs ``get_public_key``; the remaining methods serve
the management API and CLI. Lookups are by exact match on the stored
(hyphen-stripped) uuid; hyphenated input is stripped first.

Two implementations are provided:
- InMemoryDelegateRegistry: process-local dict (tests, embedding)
- FileDelegateRegistry: JSON file shared between the server and the CLI

Storage errors raise DownstreamFailure; "not found" is signalled by None.
"""

from __future__ import annotations

__all__ = [
    "DelegateRecord",
    "DelegateRegistry",
    "DelegateStoreFile",
    "FileDelegateRegistry",
    "InMemoryDelegateRegistry",
]

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from delegate_auth.constants import APP_NAME
from delegate_auth.delegates.guard import apply_registration_guard
from delegate_auth.delegates.identifiers import strip_uuid, to_canonical_uuid
from delegate_auth.exceptions import DelegateAlreadyRegisteredError, DownstreamFailure
from delegate_auth.utils.json_store import read_json_model, write_json_model

_logger = logging.getLogger(f"{APP_NAME}.delegates.registry")


class DelegateRecord(BaseModel):
    """A registered delegate.

    Attributes:
        uuid: Hyphen-stripped, lower case UUID version 4 (32 characters).
        public_key: PEM encoded RSA public key verifying this delegate's assertions.
        created_at: Registration time (UTC).
    """

    uuid: str = Field(min_length=32, max_length=32)
    public_key: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def canonical_uuid(self) -> str:
        """Hyphenated 8-4-4-4-12 form of the uuid."""
        return to_canonical_uuid(self.uuid)


class DelegateStoreFile(BaseModel):
    """On-disk layout of the delegates JSON file."""

    delegates: list[DelegateRecord] = Field(default_factory=list)


@runtime_checkable
class DelegateRegistry(Protocol):
    """Lookup and registration of delegates.

    Implementations must make create() atomic with the registration guard:
    a record that fails validation is never persisted.
    """

    async def get_public_key(self, uuid: str) -> str | None:
        """Return the delegate's public key, or None if not registered.

        Raises:
            DownstreamFailure: If the backing store is unavailable.
        """
        ...

    async def get(self, uuid: str) -> DelegateRecord | None:
        """Return the full record, or None if not registered."""
        ...

    async def list_all(self) -> list[DelegateRecord]:
        """Return all records, oldest first."""
        ...

    async def create(self, values: dict[str, Any]) -> DelegateRecord:
        """Validate and store a new delegate.

        Raises:
            ValidationError: If the uuid or public key is invalid.
            DelegateAlreadyRegisteredError: If the uuid is taken.
        """
        ...


class InMemoryDelegateRegistry:
    """Delegate registry held in process memory.

    Reads take a snapshot of the dict and need no lock; writes are
    serialized so the guard and the insert happen as one unit.
    """

    def __init__(self, records: list[DelegateRecord] | None = None) -> None:
        self._records: dict[str, DelegateRecord] = {r.uuid: r for r in records or []}
        self._lock = asyncio.Lock()

    async def get_public_key(self, uuid: str) -> str | None:
        record = self._records.get(strip_uuid(uuid))
        return record.public_key if record is not None else None

    async def get(self, uuid: str) -> DelegateRecord | None:
        return self._records.get(strip_uuid(uuid))

    async def list_all(self) -> list[DelegateRecord]:
        return sorted(self._records.values(), key=lambda r: r.created_at)

    async def create(self, values: dict[str, Any]) -> DelegateRecord:
        async with self._lock:
            guarded = apply_registration_guard(dict(values))
            if guarded["uuid"] in self._records:
                raise DelegateAlreadyRegisteredError(guarded["uuid"])

            record = DelegateRecord(uuid=guarded["uuid"], public_key=guarded["public_key"])
            self._records[record.uuid] = record

        _logger.info(
            {
                "event": "delegate_registered",
                "message": f"Registered delegate {record.canonical_uuid}",
                "delegate_uuid": record.uuid,
            }
        )
        return record


class FileDelegateRegistry:
    """Delegate registry persisted to a JSON file.

    The file is re-read whenever its modification time changes, so delegates
    added by the CLI become visible to a running server. File I/O runs in a
    worker thread to keep the event loop free.

    Usage:
        registry = FileDelegateRegistry(config.delegates_path(config_path))
        key = await registry.get_public_key(delegate_uuid)
    """

    def __init__(self, path: Path) -> None:
        """Initialize file-backed registry.

        Args:
            path: Location of the delegates JSON file. It is created on the
                first registration if missing.
        """
        self._path = path
        self._lock = asyncio.Lock()
        self._records: dict[str, DelegateRecord] = {}
        self._loaded_mtime_ns: int | None = None

    @property
    def path(self) -> Path:
        """Location of the backing file."""
        return self._path

    def _read_records(self) -> dict[str, DelegateRecord]:
        """Return current records, re-reading the file if it changed.

        Raises:
            DownstreamFailure: If the file exists but cannot be read or parsed.
        """
        try:
            mtime_ns = self._path.stat().st_mtime_ns
        except FileNotFoundError:
            self._records = {}
            self._loaded_mtime_ns = None
            return self._records
        except OSError as e:
            raise DownstreamFailure(f"Cannot access delegate store {self._path}: {e}") from e

        if mtime_ns == self._loaded_mtime_ns:
            return self._records

        try:
            store = read_json_model(self._path, DelegateStoreFile, what="delegates")
        except (OSError, ValueError) as e:
            raise DownstreamFailure(str(e)) from e

        self._records = {r.uuid: r for r in store.delegates}
        self._loaded_mtime_ns = mtime_ns
        return self._records

    def _write_records(self, records: dict[str, DelegateRecord]) -> None:
        store = DelegateStoreFile(delegates=sorted(records.values(), key=lambda r: r.created_at))
        try:
            write_json_model(self._path, store)
            mtime_ns = self._path.stat().st_mtime_ns
        except OSError as e:
            raise DownstreamFailure(f"Cannot write delegate store {self._path}: {e}") from e

        # Two writes can land within one mtime tick; cache what was written
        self._records = records
        self._loaded_mtime_ns = mtime_ns

    async def _snapshot(self) -> dict[str, DelegateRecord]:
        return await asyncio.to_thread(self._read_records)

    async def get_public_key(self, uuid: str) -> str | None:
        record = (await self._snapshot()).get(strip_uuid(uuid))
        return record.public_key if record is not None else None

    async def get(self, uuid: str) -> DelegateRecord | None:
        return (await self._snapshot()).get(strip_uuid(uuid))

    async def list_all(self) -> list[DelegateRecord]:
        records = await self._snapshot()
        return sorted(records.values(), key=lambda r: r.created_at)

    async def create(self, values: dict[str, Any]) -> DelegateRecord:
        async with self._lock:
            guarded = apply_registration_guard(dict(values))
            current = dict(await self._snapshot())
            if guarded["uuid"] in current:
                raise DelegateAlreadyRegisteredError(guarded["uuid"])

            record = DelegateRecord(uuid=guarded["uuid"], public_key=guarded["public_key"])
            current[record.uuid] = record
            await asyncio.to_thread(self._write_records, current)

        _logger.info(
            {
                "event": "delegate_registered",
                "message": f"Registered delegate {record.canonical_uuid}",
                "delegate_uuid": record.uuid,
                "store": str(self._path),
            }
        )
        return record
