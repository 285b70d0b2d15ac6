"""Message persistence.

Messages are append-only: there is no update path. Saving a message also bumps
the parent thread's ``updated_at`` to the message's ``created_at``; callers run
both statements under one guard acquisition so the pair is indivisible.

Tool invocations are opaque to this layer. They are written as a JSON array and
read back verbatim; a stored value that does not decode to a list reads back as
``None`` rather than failing the surrounding query.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from typing import Any, Mapping

from .models import Message, NewMessage, format_timestamp, parse_timestamp, utc_now
from .threads import touch_thread


LOGGER = logging.getLogger(__name__)

_MESSAGE_COLUMNS = "id, thread_id, role, content, tool_invocations, created_at"


def _serialize(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False)


def _deserialize_invocations(payload: str | bytes | None) -> list[Any] | None:
    if payload is None:
        return None
    try:
        decoded = json.loads(payload)
    except (TypeError, json.JSONDecodeError):
        LOGGER.debug("Ignoring undecodable tool_invocations payload")
        return None
    if not isinstance(decoded, list):
        LOGGER.debug("Ignoring non-list tool_invocations payload")
        return None
    return decoded


def _row_to_message(row: Mapping[str, Any] | sqlite3.Row) -> Message:
    return Message(
        id=str(row["id"]),
        thread_id=str(row["thread_id"]),
        role=row["role"],
        content=row["content"],
        tool_invocations=_deserialize_invocations(row["tool_invocations"]),
        created_at=parse_timestamp(row["created_at"]),
    )


def save_message(
    conn: sqlite3.Connection, thread_id: str, message: NewMessage
) -> Message:
    """Insert ``message`` into ``thread_id`` and touch the thread.

    Raises :class:`sqlite3.IntegrityError` when the thread does not exist.
    """

    message_id = str(uuid.uuid4())
    now = utc_now()
    invocations_json = (
        _serialize(message.tool_invocations)
        if message.tool_invocations is not None
        else None
    )
    conn.execute(
        f"INSERT INTO messages({_MESSAGE_COLUMNS}) VALUES(?, ?, ?, ?, ?, ?)",
        (
            message_id,
            thread_id,
            message.role,
            message.content,
            invocations_json,
            format_timestamp(now),
        ),
    )
    touch_thread(conn, thread_id, at=now)
    return Message(
        id=message_id,
        thread_id=thread_id,
        role=message.role,
        content=message.content,
        tool_invocations=message.tool_invocations,
        created_at=now,
    )


def list_messages(conn: sqlite3.Connection, thread_id: str) -> list[Message]:
    """Return the thread's messages in insertion order.

    An unknown thread and a thread without messages both yield ``[]``.
    """

    rows = conn.execute(
        f"""
        SELECT {_MESSAGE_COLUMNS}
          FROM messages
         WHERE thread_id = ?
      ORDER BY created_at ASC, rowid ASC
        """,
        (thread_id,),
    ).fetchall()
    return [_row_to_message(row) for row in rows]


def get_message(conn: sqlite3.Connection, message_id: str) -> Message | None:
    row = conn.execute(
        f"SELECT {_MESSAGE_COLUMNS} FROM messages WHERE id = ?",
        (message_id,),
    ).fetchone()
    if row is None:
        return None
    return _row_to_message(row)


def delete_message(conn: sqlite3.Connection, message_id: str) -> bool:
    cursor = conn.execute("DELETE FROM messages WHERE id = ?", (message_id,))
    return cursor.rowcount > 0


def delete_messages_by_thread(conn: sqlite3.Connection, thread_id: str) -> int:
    cursor = conn.execute("DELETE FROM messages WHERE thread_id = ?", (thread_id,))
    return cursor.rowcount


__all__ = [
    "delete_message",
    "delete_messages_by_thread",
    "get_message",
    "list_messages",
    "save_message",
]
