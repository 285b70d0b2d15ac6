"""Exceptions raised at the public boundary of the chat store."""

from __future__ import annotations


class StoreError(RuntimeError):
    """A storage operation failed; ``str(exc)`` carries the engine's message."""


class IntegrityViolation(StoreError):
    """A constraint rejected the write, e.g. a message for an unknown thread."""


class UnstorableValue(StoreError):
    """A value could not be encoded for storage (unpaired surrogate, non-JSON data)."""


class StorePoisonedError(StoreError):
    """The connection guard can no longer vouch for the database state."""


__all__ = ["IntegrityViolation", "StoreError", "StorePoisonedError", "UnstorableValue"]
