"""Embedded SQLite persistence for chat threads and messages."""

from .errors import IntegrityViolation, StoreError, StorePoisonedError, UnstorableValue
from .guard import ConnectionGuard
from .models import Message, NewMessage, Thread
from .store import ChatStateDB

__all__ = [
    "ChatStateDB",
    "ConnectionGuard",
    "IntegrityViolation",
    "Message",
    "NewMessage",
    "StoreError",
    "StorePoisonedError",
    "Thread",
    "UnstorableValue",
]
