"""High level helpers for the chat database."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from . import messages as message_store
from . import settings as settings_ledger
from . import threads as thread_store
from .errors import IntegrityViolation, StoreError, UnstorableValue
from .guard import ConnectionGuard
from .models import Message, NewMessage, Thread
from .schema import connect, initialize


LOGGER = logging.getLogger(__name__)


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except StoreError:
        raise
    except sqlite3.IntegrityError as exc:
        LOGGER.warning("%s rejected by constraint: %s", operation, exc)
        raise IntegrityViolation(str(exc)) from exc
    except sqlite3.Error as exc:
        LOGGER.exception("%s failed", operation)
        raise StoreError(str(exc)) from exc
    except (UnicodeEncodeError, TypeError, ValueError) as exc:
        # Text sqlite cannot encode, or tool invocations json cannot serialize.
        LOGGER.warning("%s rejected unstorable value: %s", operation, exc)
        raise UnstorableValue(str(exc)) from exc


class ChatStateDB:
    """Thread, message and settings-ledger operations over one guarded file.

    Each public method holds the guard for its whole duration, so a message
    insert and the matching thread touch are seen together or not at all.
    Engine failures surface as :class:`StoreError`; constraint failures as
    :class:`IntegrityViolation`. Nothing is retried here.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = connect(self.path)
        LOGGER.info("Running chat DB migrations", extra={"meta": {"db_path": str(self.path)}})
        initialize(conn)
        LOGGER.info("Chat DB migrations finished", extra={"meta": {"db_path": str(self.path)}})
        self._guard = ConnectionGuard(conn)

    @property
    def guard(self) -> ConnectionGuard:
        return self._guard

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------
    def create_thread(self) -> Thread:
        with _translate_errors("create_thread"):
            thread = self._guard.with_connection(thread_store.create_thread)
        LOGGER.debug("Created thread %s", thread.id)
        return thread

    def list_threads(self) -> list[Thread]:
        with _translate_errors("list_threads"):
            return self._guard.with_connection(thread_store.list_threads)

    def get_thread(self, thread_id: str) -> Thread | None:
        with _translate_errors("get_thread"):
            with self._guard.connection() as conn:
                return thread_store.get_thread(conn, thread_id)

    def update_thread_title(self, thread_id: str, title: str) -> None:
        with _translate_errors("update_thread_title"):
            with self._guard.connection() as conn:
                thread_store.update_thread_title(conn, thread_id, title)

    def delete_thread(self, thread_id: str) -> None:
        with _translate_errors("delete_thread"):
            with self._guard.connection() as conn:
                deleted = thread_store.delete_thread(conn, thread_id)
        if deleted:
            LOGGER.debug("Deleted thread %s", thread_id)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------
    def save_message(self, thread_id: str, message: NewMessage) -> Message:
        with _translate_errors("save_message"):
            with self._guard.connection() as conn:
                return message_store.save_message(conn, thread_id, message)

    def list_messages(self, thread_id: str) -> list[Message]:
        with _translate_errors("list_messages"):
            with self._guard.connection() as conn:
                return message_store.list_messages(conn, thread_id)

    def get_message(self, message_id: str) -> Message | None:
        with _translate_errors("get_message"):
            with self._guard.connection() as conn:
                return message_store.get_message(conn, message_id)

    def delete_message(self, message_id: str) -> None:
        with _translate_errors("delete_message"):
            with self._guard.connection() as conn:
                message_store.delete_message(conn, message_id)

    def delete_messages_by_thread(self, thread_id: str) -> int:
        with _translate_errors("delete_messages_by_thread"):
            with self._guard.connection() as conn:
                return message_store.delete_messages_by_thread(conn, thread_id)

    # ------------------------------------------------------------------
    # Settings submissions
    # ------------------------------------------------------------------
    def mark_settings_submitted(self, tool_call_id: str, settings_key: str) -> None:
        with _translate_errors("mark_settings_submitted"):
            with self._guard.connection() as conn:
                settings_ledger.mark_submitted(conn, tool_call_id, settings_key)

    def is_settings_submitted(self, tool_call_id: str) -> bool:
        with _translate_errors("is_settings_submitted"):
            with self._guard.connection() as conn:
                return settings_ledger.is_submitted(conn, tool_call_id)

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------
    def close(self) -> None:
        self._guard.close()


__all__ = ["ChatStateDB"]
