"""Ledger of settings forms already submitted from a tool call."""

from __future__ import annotations

import sqlite3

from .models import format_timestamp, utc_now


def mark_submitted(conn: sqlite3.Connection, tool_call_id: str, settings_key: str) -> None:
    conn.execute(
        """
        INSERT OR REPLACE INTO settings_submissions(tool_call_id, settings_key, submitted_at)
        VALUES(?, ?, ?)
        """,
        (tool_call_id, settings_key, format_timestamp(utc_now())),
    )


def is_submitted(conn: sqlite3.Connection, tool_call_id: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM settings_submissions WHERE tool_call_id = ? LIMIT 1",
        (tool_call_id,),
    ).fetchone()
    return row is not None


__all__ = ["is_submitted", "mark_submitted"]
