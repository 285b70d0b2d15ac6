"""Single-connection guard serializing every access to the chat database."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Callable, TypeVar

from .errors import StorePoisonedError


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ConnectionGuard:
    """Own one SQLite connection and hand it out to one caller at a time.

    Reads and writes share the same lock. The outermost acquisition runs inside
    a transaction that commits when the caller returns and rolls back when it
    raises, so no other caller ever observes a half-applied operation. Nested
    acquisitions on the same thread join that transaction; only the outermost
    one commits or rolls back. If the rollback itself fails the guard is
    poisoned: the on-disk state can no longer be trusted and every later
    acquisition raises :class:`StorePoisonedError`.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        self._lock = threading.RLock()
        self._poisoned: BaseException | None = None
        self._closed = False
        self._depth = 0

    @property
    def poisoned(self) -> bool:
        return self._poisoned is not None

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            self._check_usable()
            if self._depth:
                self._depth += 1
                try:
                    yield self._conn
                finally:
                    self._depth -= 1
                return
            self._depth = 1
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                if self._conn.in_transaction:
                    self._poison(exc)
                raise
            finally:
                self._depth = 0

    def with_connection(self, fn: Callable[[sqlite3.Connection], T]) -> T:
        with self.connection() as conn:
            return fn(conn)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._conn.close()

    def _check_usable(self) -> None:
        if self._poisoned is not None:
            raise StorePoisonedError(
                f"database guard poisoned by earlier failure: {self._poisoned}"
            )
        if self._closed:
            raise StorePoisonedError("database connection is closed")

    def _poison(self, cause: BaseException) -> None:
        # ``with self._conn`` already attempted the rollback; a transaction still
        # open here means it did not take.
        try:
            self._conn.rollback()
        except sqlite3.Error:
            LOGGER.critical("Rollback failed; refusing further database access", exc_info=True)
            self._poisoned = cause
            return
        if self._conn.in_transaction:
            LOGGER.critical("Transaction still open after rollback; refusing further database access")
            self._poisoned = cause


__all__ = ["ConnectionGuard"]
