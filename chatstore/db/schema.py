"""SQLite schema management for the chat database."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable


LOGGER = logging.getLogger(__name__)

MigrationFn = Callable[[sqlite3.Connection], None]


def connect(db_path: Path | str) -> sqlite3.Connection:
    """Return a SQLite connection with conservative defaults."""

    connection = sqlite3.connect(str(db_path), check_same_thread=False)
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute("PRAGMA foreign_keys=ON;")
    connection.execute("PRAGMA synchronous=NORMAL;")
    return connection


def initialize(connection: sqlite3.Connection) -> None:
    """Bring ``connection`` up to the current schema.

    Safe to call on every start against a fresh, legacy or current file. Any
    failure is logged and re-raised so startup aborts on a broken schema.
    """

    migrate(connection)
    # Foreign keys are per-session and off by default in SQLite.
    connection.execute("PRAGMA foreign_keys=ON;")


def migrate(connection: sqlite3.Connection) -> None:
    """Apply all known migrations in a re-entrant, idempotent fashion."""

    LOGGER.debug("Ensuring migration ledger")
    _ensure_ledger(connection)

    for migration_id, migration_fn in _MIGRATIONS:
        if _already_applied(connection, migration_id):
            continue
        LOGGER.info("Applying migration %s", migration_id)
        try:
            migration_fn(connection)
            with connection:
                _mark_applied(connection, migration_id)
        except Exception:  # noqa: BLE001 - surface precise failure context to logs
            LOGGER.exception(
                "Migration %s failed. Inspect the _migrations ledger for partial state.",
                migration_id,
            )
            raise
        LOGGER.info("Applied migration %s", migration_id)


def _ensure_ledger(connection: sqlite3.Connection) -> None:
    with connection:
        connection.execute(
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                id TEXT PRIMARY KEY,
                applied_at TEXT NOT NULL
            )
            """
        )


def _already_applied(connection: sqlite3.Connection, migration_id: str) -> bool:
    row = connection.execute(
        "SELECT 1 FROM _migrations WHERE id=?",
        (migration_id,),
    ).fetchone()
    return row is not None


def _mark_applied(connection: sqlite3.Connection, migration_id: str) -> None:
    connection.execute(
        "INSERT OR REPLACE INTO _migrations(id, applied_at) VALUES(?, ?)",
        (migration_id, datetime.now(tz=timezone.utc).isoformat(timespec="seconds")),
    )


def _table_exists(connection: sqlite3.Connection, table: str) -> bool:
    row = connection.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name=?",
        (table,),
    ).fetchone()
    return row is not None


def _column_exists(connection: sqlite3.Connection, table: str, column: str) -> bool:
    return any(
        row[1] == column for row in connection.execute(f"PRAGMA table_info({table})")
    )


def _index_exists(connection: sqlite3.Connection, table: str, name: str) -> bool:
    if not _table_exists(connection, table):
        return False
    return any(
        row[1] == name for row in connection.execute(f"PRAGMA index_list({table})")
    )


def _migration_001_init(connection: sqlite3.Connection) -> None:
    connection.executescript(
        """
        PRAGMA foreign_keys=ON;

        CREATE TABLE IF NOT EXISTS threads (
          id TEXT PRIMARY KEY,
          title TEXT,
          created_at TEXT NOT NULL,
          updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS messages (
          id TEXT PRIMARY KEY,
          thread_id TEXT NOT NULL,
          role TEXT NOT NULL,
          content TEXT NOT NULL,
          created_at TEXT NOT NULL,
          FOREIGN KEY(thread_id) REFERENCES threads(id) ON DELETE CASCADE
        );
        CREATE INDEX IF NOT EXISTS idx_messages_thread_id ON messages(thread_id);
        """
    )


def _migration_002_message_tool_invocations(connection: sqlite3.Connection) -> None:
    # Files written before tool calls were persisted lack this column.
    if _column_exists(connection, "messages", "tool_invocations"):
        return
    with connection:
        connection.execute("ALTER TABLE messages ADD COLUMN tool_invocations TEXT")


def _migration_003_settings_submissions(connection: sqlite3.Connection) -> None:
    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS settings_submissions (
          tool_call_id TEXT NOT NULL,
          settings_key TEXT NOT NULL,
          submitted_at TEXT NOT NULL,
          PRIMARY KEY(tool_call_id, settings_key)
        );
        """
    )


def _migration_004_thread_activity_index(connection: sqlite3.Connection) -> None:
    if _index_exists(connection, "threads", "idx_threads_updated_at"):
        return
    with connection:
        connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_threads_updated_at ON threads(updated_at DESC)"
        )


_MIGRATIONS: list[tuple[str, MigrationFn]] = [
    ("001_init", _migration_001_init),
    ("002_message_tool_invocations", _migration_002_message_tool_invocations),
    ("003_settings_submissions", _migration_003_settings_submissions),
    ("004_thread_activity_index", _migration_004_thread_activity_index),
]

MIGRATION_IDS = tuple(migration_id for migration_id, _ in _MIGRATIONS)


__all__ = ["MIGRATION_IDS", "connect", "initialize", "migrate"]
