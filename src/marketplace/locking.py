"""Keyed in-process locks.

Every state-changing marketplace operation names the records it will touch
(``product:<id>``, ``order:<id>``, ``payment:<id>``) and holds their locks for
the whole unit of work. Keys are always acquired in sorted order so two
operations over overlapping record sets cannot deadlock.
"""

import threading
from collections.abc import Iterable
from contextlib import contextmanager

import structlog
from protean import UnitOfWork

logger = structlog.get_logger(__name__)


def product_key(product_id) -> str:
    return f"product:{product_id}"


def order_key(order_id) -> str:
    return f"order:{order_id}"


def payment_key(payment_id) -> str:
    return f"payment:{payment_id}"


def product_keys(product_ids: Iterable) -> list[str]:
    return [product_key(product_id) for product_id in product_ids]


class KeyedLocks:
    """A registry of re-entrant locks that exist only while someone uses them.

    Each entry counts the holders and waiters of its key and is dropped when
    the last of them releases.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key -> [RLock, users]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, key: str) -> threading.RLock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.RLock(), 0]
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, *keys: str):
        ordered = sorted(set(keys))
        acquired = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                lock.acquire()
                acquired.append((key, lock))
            yield ordered
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._checkin(key)


locks = KeyedLocks()


@contextmanager
def atomically(*keys: str):
    """Hold ``keys`` and run the body inside one unit of work.

    The unit of work commits when the body returns and rolls back when it
    raises, so nothing the body registered becomes visible on failure.
    """
    with locks.hold(*keys) as held:
        logger.debug("locks_acquired", keys=held)
        with UnitOfWork():
            yield
