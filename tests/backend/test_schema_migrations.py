import os
import sqlite3
import tempfile

import pytest

from chatstore.db import schema


@pytest.mark.parametrize("passes", [1, 2, 3])
def test_initialize_runs_without_error_multiple_times(passes: int) -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = os.path.join(tmpdir, "chat.db")
        conn = schema.connect(db_path)
        try:
            for _ in range(passes):
                schema.initialize(conn)

            cursor = conn.execute("SELECT id FROM _migrations ORDER BY id")
            applied = [row[0] for row in cursor.fetchall()]
            assert applied == list(schema.MIGRATION_IDS)
        finally:
            conn.close()


def test_tables_columns_and_index_created(tmp_path) -> None:
    conn = schema.connect(tmp_path / "chat.db")
    try:
        schema.initialize(conn)
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        assert {"threads", "messages", "settings_submissions"} <= tables

        thread_columns = {row[1]: row for row in conn.execute("PRAGMA table_info(threads)")}
        assert set(thread_columns) == {"id", "title", "created_at", "updated_at"}
        assert thread_columns["title"][3] == 0

        message_columns = {row[1] for row in conn.execute("PRAGMA table_info(messages)")}
        assert message_columns == {
            "id",
            "thread_id",
            "role",
            "content",
            "created_at",
            "tool_invocations",
        }

        indexes = {row[1] for row in conn.execute("PRAGMA index_list(messages)")}
        assert "idx_messages_thread_id" in indexes

        foreign_keys = list(conn.execute("PRAGMA foreign_key_list(messages)"))
        assert foreign_keys[0][2] == "threads"
        assert foreign_keys[0][6].upper() == "CASCADE"
    finally:
        conn.close()


def test_foreign_keys_enabled_after_initialize(tmp_path) -> None:
    conn = sqlite3.connect(tmp_path / "chat.db")
    try:
        conn.execute("PRAGMA foreign_keys=OFF")
        schema.initialize(conn)
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    finally:
        conn.close()


def test_legacy_file_gains_tool_invocations_column(tmp_path) -> None:
    db_path = tmp_path / "chat.db"
    legacy = sqlite3.connect(db_path)
    legacy.executescript(
        """
        CREATE TABLE threads (
            id TEXT PRIMARY KEY,
            title TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        CREATE TABLE messages (
            id TEXT PRIMARY KEY,
            thread_id TEXT NOT NULL,
            role TEXT NOT NULL,
            content TEXT NOT NULL,
            created_at TEXT NOT NULL,
            FOREIGN KEY (thread_id) REFERENCES threads(id) ON DELETE CASCADE
        );
        INSERT INTO threads VALUES ('t-1', 'Old', '2024-01-01T00:00:00+00:00', '2024-01-01T00:00:00+00:00');
        INSERT INTO messages VALUES ('m-1', 't-1', 'user', 'hi', '2024-01-01T00:00:00+00:00');
        """
    )
    legacy.close()

    conn = schema.connect(db_path)
    try:
        schema.initialize(conn)
        schema.initialize(conn)
        columns = [row[1] for row in conn.execute("PRAGMA table_info(messages)")]
        assert columns.count("tool_invocations") == 1
        row = conn.execute(
            "SELECT content, tool_invocations FROM messages WHERE id='m-1'"
        ).fetchone()
        assert row["content"] == "hi"
        assert row["tool_invocations"] is None
    finally:
        conn.close()


def test_file_with_column_but_no_ledger_is_adopted(tmp_path) -> None:
    db_path = tmp_path / "chat.db"
    current = sqlite3.connect(db_path)
    current.executescript(
        """
        CREATE TABLE threads (id TEXT PRIMARY KEY, title TEXT, created_at TEXT NOT NULL, updated_at TEXT NOT NULL);
        CREATE TABLE messages (
            id TEXT PRIMARY KEY,
            thread_id TEXT NOT NULL REFERENCES threads(id) ON DELETE CASCADE,
            role TEXT NOT NULL,
            content TEXT NOT NULL,
            created_at TEXT NOT NULL,
            tool_invocations TEXT
        );
        """
    )
    current.close()

    conn = schema.connect(db_path)
    try:
        schema.initialize(conn)
        applied = [row[0] for row in conn.execute("SELECT id FROM _migrations ORDER BY id")]
        assert applied == list(schema.MIGRATION_IDS)
    finally:
        conn.close()


def test_migration_failure_is_raised(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken(connection: sqlite3.Connection) -> None:
        connection.execute("CREATE TABLE threads (")

    monkeypatch.setattr(schema, "_MIGRATIONS", [("001_init", _broken)])
    conn = schema.connect(tmp_path / "chat.db")
    try:
        with pytest.raises(sqlite3.Error):
            schema.initialize(conn)
        assert conn.execute("SELECT COUNT(*) FROM _migrations").fetchone()[0] == 0
    finally:
        conn.close()
