"""Unit-of-work boundary for stock and order mutations.

Every write that touches a stock counter runs inside
``UnitOfWork.atomic()``: the per-key mutexes are taken first (sorted, so
two orders sharing products can never deadlock), then a database
transaction is opened.  The mutexes are released only after the
transaction has committed or rolled back, so no competing request can
read a counter that is about to change.

The mutexes serialise contenders inside one process.  Across processes
the repositories additionally lock rows with ``SELECT FOR UPDATE`` and
``StockAdjuster`` guards the UPDATE itself, so the discipline holds on
PostgreSQL/MySQL deployments as well.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import structlog
from django.conf import settings
from django.db import transaction

from modules.core.exceptions import ResourceBusy

logger = structlog.get_logger(__name__)


def _canonical(value: object) -> str:
    # "ABC..." and "abc..." name the same row; they must share a lock.
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        return str(value)


def product_key(product_id: object) -> str:
    return f"product:{_canonical(product_id)}"


def order_key(order_id: object) -> str:
    return f"order:{_canonical(order_id)}"


class _Slot:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLockRegistry:
    """Process-local mutexes, one per key.

    A key's mutex exists only while some thread holds it or waits for
    it, and is dropped when the last user leaves.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: Dict[str, _Slot] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    def _checkout(self, key: str) -> _Slot:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.users += 1
            return slot

    def _checkin(self, key: str, slot: _Slot) -> None:
        with self._guard:
            slot.users -= 1
            if slot.users == 0:
                del self._slots[key]

    @contextmanager
    def hold(self, keys: Iterable[str], timeout: float) -> Iterator[None]:
        """Hold every lock in *keys* for the duration of the block.

        Raises:
            ResourceBusy: a lock was not acquired within *timeout* seconds.
        """
        acquired: List[Tuple[str, _Slot]] = []
        try:
            for key in sorted(set(keys)):
                slot = self._checkout(key)
                if not slot.lock.acquire(timeout=timeout):
                    self._checkin(key, slot)
                    logger.warning("lock.timeout", key=key, timeout=timeout)
                    raise ResourceBusy(f"Timed out waiting for {key}.", key=key)
                acquired.append((key, slot))
            yield
        finally:
            for key, slot in reversed(acquired):
                slot.lock.release()
                self._checkin(key, slot)


# Shared by every UnitOfWork built without an explicit registry, so
# services constructed per request still contend on the same mutexes.
default_lock_registry = KeyedLockRegistry()


class UnitOfWork:
    """Lock + transaction scope handed to the services."""

    def __init__(
        self,
        locks: Optional[KeyedLockRegistry] = None,
        using: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._locks = locks if locks is not None else default_lock_registry
        self._using = using
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        if self._timeout is not None:
            return self._timeout
        return float(getattr(settings, "STOCK_LOCK_TIMEOUT", 10.0))

    @contextmanager
    def atomic(
        self,
        products: Iterable[object] = (),
        orders: Iterable[object] = (),
    ) -> Iterator[None]:
        keys = [product_key(p) for p in products] + [order_key(o) for o in orders]
        with self._locks.hold(keys, timeout=self.timeout):
            with transaction.atomic(using=self._using):
                yield
