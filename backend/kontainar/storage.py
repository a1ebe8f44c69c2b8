# Overview: String-keyed blob storage backends that collections serialize into.

"""
Key-value storage.

The dashboard persisted every collection as one JSON string under one key.
This module keeps that contract: a backend only knows how to get, set and
remove opaque strings by key. Serialization lives in CollectionStore.

Backends:
- SqlStorage: rows of the storage_entries table (one row per key).
- MemoryStorage: a dict; used by unit tests and the "memory" backend setting.
"""

from __future__ import annotations

import threading
from typing import Iterable, Protocol

from .extensions import db
from .models import StorageEntry
from .services.concurrency import run_with_retry
from .time_utils import utcnow


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> Iterable[str]: ...


class MemoryStorage:
    """Process-local storage. Contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("storage values must be strings")
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


class SqlStorage:
    """
    Storage backed by the storage_entries table.

    Must be used inside an application context. Each set/remove commits
    immediately, so one collection write is one transaction.
    """

    def get_item(self, key: str) -> str | None:
        entry = db.session.get(StorageEntry, key)
        if entry is None:
            return None
        return entry.value

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("storage values must be strings")

        # A failed commit rolls the session back, so every attempt re-applies the write.
        def _write():
            entry = db.session.get(StorageEntry, key)
            if entry is None:
                entry = StorageEntry(key=key, value=value)
                db.session.add(entry)
            else:
                entry.value = value
                entry.updated_at = utcnow()
            db.session.commit()

        run_with_retry(_write)

    def remove_item(self, key: str) -> None:
        def _remove():
            entry = db.session.get(StorageEntry, key)
            if entry is None:
                return
            db.session.delete(entry)
            db.session.commit()

        run_with_retry(_remove)

    def keys(self) -> list[str]:
        rows = db.session.query(StorageEntry.key).order_by(StorageEntry.key.asc()).all()
        return [row[0] for row in rows]


def build_storage(backend: str) -> KeyValueStorage:
    if backend == "memory":
        return MemoryStorage()
    if backend == "sql":
        return SqlStorage()
    raise ValueError(f"Unknown storage backend: {backend}")
