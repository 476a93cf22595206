import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class KeyedLock:
    """
    One exclusive lock per key (employee id), created on first use.

    Holders of different keys never block each other; the registry lock is
    only held while looking a key up.
    """

    def __init__(self):
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield
