"""Per-key lock registry for serialising read-modify-write on one record."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class KeyedLocks:
    """Hands out one re-entrant lock per key.

    Thread-safe: the registry itself is guarded by a lock so two callers
    asking for the same key always receive the same RLock. Locks are never
    evicted; rides and drivers are never deleted either.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._lock_for(key):
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
