"""
Per-user serialization.

Saves, edits, duplicate-day confirmation, achievement evaluation and
review rebuilds all read-then-write per-user state (entries, unlock set,
review cache). FastAPI runs the sync endpoints in a thread pool, so each
user gets one lock and those operations run one at a time per user.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

_registry_lock = threading.Lock()
_user_locks: dict[str, threading.RLock] = {}


def _lock_for(user_id: str) -> threading.RLock:
    with _registry_lock:
        lock = _user_locks.get(user_id)
        if lock is None:
            lock = threading.RLock()
            _user_locks[user_id] = lock
        return lock


@contextmanager
def user_lock(user_id: str) -> Iterator[None]:
    lock = _lock_for(user_id)
    with lock:
        yield
