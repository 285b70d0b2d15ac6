"""Typed records returned by the chat store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as fixed-width UTC ISO-8601 so text order is time order."""

    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(raw: str | None) -> datetime:
    if not raw:
        return utc_now()
    try:
        parsed = datetime.fromisoformat(str(raw))
    except ValueError:
        return utc_now()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(slots=True)
class Thread:
    id: str
    title: str | None
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }


@dataclass(slots=True)
class NewMessage:
    """Caller-supplied fields of a message about to be saved."""

    role: str
    content: str
    tool_invocations: list[Any] | None = None


@dataclass(slots=True)
class Message:
    id: str
    thread_id: str
    role: str
    content: str
    created_at: datetime
    tool_invocations: list[Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "threadId": self.thread_id,
            "role": self.role,
            "content": self.content,
            "createdAt": format_timestamp(self.created_at),
        }
        if self.tool_invocations is not None:
            payload["toolInvocations"] = self.tool_invocations
        return payload


__all__ = [
    "Message",
    "NewMessage",
    "Thread",
    "format_timestamp",
    "parse_timestamp",
    "utc_now",
]
