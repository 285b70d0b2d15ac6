"""Credential storage backed by the operating system keychain.

Secrets never touch the SQLite file. ``keyring`` picks the native backend:
Keychain on macOS, Credential Manager on Windows and Secret Service on Linux.
"""

from __future__ import annotations

import logging

import keyring
from keyring.errors import KeyringError, PasswordDeleteError


LOGGER = logging.getLogger(__name__)

DEFAULT_SERVICE = "com.aios.chat"

KNOWN_CREDENTIAL_KEYS: tuple[str, ...] = (
    "anthropic_api_key",
    "perplexity_api_key",
    "email_address",
    "email_username",
    "email_password",
    "email_imap_host",
    "email_imap_port",
    "email_imap_security",
    "email_smtp_host",
    "email_smtp_port",
    "email_smtp_security",
    "email_ssl_verify",
)


class CredentialError(RuntimeError):
    """The keychain backend refused or failed an operation."""


class SecretStore:
    """Named secrets stored under a single keyring service."""

    def __init__(self, service: str = DEFAULT_SERVICE) -> None:
        self.service = service

    def get(self, key: str) -> str | None:
        try:
            return keyring.get_password(self.service, key)
        except KeyringError as exc:
            raise CredentialError(str(exc)) from exc

    def set(self, key: str, value: str) -> None:
        try:
            keyring.set_password(self.service, key, value)
        except KeyringError as exc:
            raise CredentialError(str(exc)) from exc

    def delete(self, key: str) -> None:
        """Remove ``key``; deleting a key that is not stored succeeds."""

        if self.get(key) is None:
            return
        try:
            keyring.delete_password(self.service, key)
        except PasswordDeleteError:
            LOGGER.debug("Credential %s vanished before delete", key)
        except KeyringError as exc:
            raise CredentialError(str(exc)) from exc

    @staticmethod
    def list_known_keys() -> tuple[str, ...]:
        return KNOWN_CREDENTIAL_KEYS

    def get_all(self) -> dict[str, str]:
        """Return every known credential that is currently stored."""

        credentials: dict[str, str] = {}
        for key in self.list_known_keys():
            try:
                value = self.get(key)
            except CredentialError:
                LOGGER.warning("Skipping unreadable credential %s", key, exc_info=True)
                continue
            if value is not None:
                credentials[key] = value
        return credentials


__all__ = ["CredentialError", "DEFAULT_SERVICE", "KNOWN_CREDENTIAL_KEYS", "SecretStore"]
