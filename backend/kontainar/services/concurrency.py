# Overview: Locking and retry helpers for read-modify-write cycles on collections.

from __future__ import annotations

import threading
import time
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError

from ..extensions import db


_registry_lock = threading.Lock()
_key_locks: dict[str, threading.RLock] = {}


def lock_for_key(key: str) -> threading.RLock:
    """Return the process-wide mutex guarding one storage key."""
    with _registry_lock:
        lock = _key_locks.get(key)
        if lock is None:
            lock = threading.RLock()
            _key_locks[key] = lock
        return lock


@contextmanager
def key_lock(key: str):
    """
    Serialize load -> transform -> save cycles on a single key.

    NOTE: only guards callers inside this process. Two processes writing the
    same key still follow last-full-write-wins.
    """
    lock = lock_for_key(key)
    with lock:
        yield


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (e.g. SQLite "database is locked").
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
