"""Per-key mutual exclusion for vehicle operations."""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from fleettrack import config
from fleettrack.services.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLock:
    """
    A lock per key, so work on different vehicles never waits on each other.

    Entries are created on first use and dropped once no thread holds or
    waits for them.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = config.LOCK_TIMEOUT if timeout is None else timeout
        self._entries: Dict[str, _Entry] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """
        Hold the lock for ``key`` for the duration of the block.

        Raises:
            StoreUnavailableError: If the lock is not acquired within the timeout
        """
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1

        acquired = entry.lock.acquire(timeout=self.timeout)
        try:
            if not acquired:
                logger.warning(f"Timed out waiting for lock on {key}")
                raise StoreUnavailableError(
                    f"Timed out after {self.timeout}s waiting for another operation on {key}")
            yield
        finally:
            if acquired:
                entry.lock.release()
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
