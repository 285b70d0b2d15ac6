"""Thread persistence. Every function takes the guarded connection explicitly."""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime
from typing import Any, Mapping

from .models import Thread, format_timestamp, parse_timestamp, utc_now


_THREAD_COLUMNS = "id, title, created_at, updated_at"


def _row_to_thread(row: Mapping[str, Any] | sqlite3.Row) -> Thread:
    return Thread(
        id=str(row["id"]),
        title=row["title"],
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


def create_thread(conn: sqlite3.Connection) -> Thread:
    thread_id = str(uuid.uuid4())
    now = utc_now()
    stamp = format_timestamp(now)
    conn.execute(
        "INSERT INTO threads(id, title, created_at, updated_at) VALUES(?, NULL, ?, ?)",
        (thread_id, stamp, stamp),
    )
    return Thread(id=thread_id, title=None, created_at=now, updated_at=now)


def get_thread(conn: sqlite3.Connection, thread_id: str) -> Thread | None:
    row = conn.execute(
        f"SELECT {_THREAD_COLUMNS} FROM threads WHERE id = ?",
        (thread_id,),
    ).fetchone()
    if row is None:
        return None
    return _row_to_thread(row)


def list_threads(conn: sqlite3.Connection) -> list[Thread]:
    """Return every thread, most recently active first."""

    rows = conn.execute(
        f"""
        SELECT {_THREAD_COLUMNS}
          FROM threads
      ORDER BY updated_at DESC, rowid DESC
        """
    ).fetchall()
    return [_row_to_thread(row) for row in rows]


def update_thread_title(conn: sqlite3.Connection, thread_id: str, title: str) -> bool:
    cursor = conn.execute(
        "UPDATE threads SET title = ?, updated_at = ? WHERE id = ?",
        (title, format_timestamp(utc_now()), thread_id),
    )
    return cursor.rowcount > 0


def touch_thread(
    conn: sqlite3.Connection, thread_id: str, *, at: datetime | None = None
) -> bool:
    """Refresh ``updated_at`` without altering the title."""

    stamp = format_timestamp(at or utc_now())
    cursor = conn.execute(
        "UPDATE threads SET updated_at = ? WHERE id = ?",
        (stamp, thread_id),
    )
    return cursor.rowcount > 0


def delete_thread(conn: sqlite3.Connection, thread_id: str) -> bool:
    # Messages go with it through ON DELETE CASCADE.
    cursor = conn.execute("DELETE FROM threads WHERE id = ?", (thread_id,))
    return cursor.rowcount > 0


__all__ = [
    "create_thread",
    "delete_thread",
    "get_thread",
    "list_threads",
    "touch_thread",
    "update_thread_title",
]
