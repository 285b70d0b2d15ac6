"""Shared helpers for API blueprints."""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, current_app, jsonify, request
from pydantic import BaseModel, ValidationError

from chatstore.credentials import CredentialError, SecretStore
from chatstore.db import ChatStateDB, IntegrityViolation, StoreError, UnstorableValue

LOGGER = logging.getLogger(__name__)

_SENTINEL_VALUES = {"", "null", "none", "undefined", "~"}


def coerce_identifier(value: object | None) -> str | None:
    """Normalize inbound thread/message identifiers.

    Path segments and query parameters can be empty strings or literal
    "null"/"undefined". The store only understands real string identifiers.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in _SENTINEL_VALUES:
        return None
    return text


def state_db() -> ChatStateDB:
    return current_app.config["CHAT_STATE_DB"]


def secret_store() -> SecretStore:
    return current_app.config["SECRET_STORE"]


def parse_payload(model: type[BaseModel]) -> Any:
    """Validate the JSON body against ``model``; raises ``ValidationError``."""

    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    return model.model_validate(payload)


def error_response(message: str, status: int, **extra: Any):  # type: ignore[no-untyped-def]
    body: dict[str, Any] = {"error": message}
    body.update(extra)
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    """Flatten store, keychain and validation failures into ``{"error": ...}``."""

    @app.errorhandler(ValidationError)
    def _validation_error(exc: ValidationError):  # type: ignore[no-untyped-def]
        return error_response(
            "validation_error",
            400,
            detail=exc.errors(include_url=False, include_context=False, include_input=False),
        )

    @app.errorhandler(IntegrityViolation)
    def _integrity_violation(exc: IntegrityViolation):  # type: ignore[no-untyped-def]
        return error_response(str(exc), 409)

    @app.errorhandler(UnstorableValue)
    def _unstorable_value(exc: UnstorableValue):  # type: ignore[no-untyped-def]
        return error_response(str(exc), 400)

    @app.errorhandler(StoreError)
    def _store_error(exc: StoreError):  # type: ignore[no-untyped-def]
        return error_response(str(exc), 500)

    @app.errorhandler(CredentialError)
    def _credential_error(exc: CredentialError):  # type: ignore[no-untyped-def]
        LOGGER.error("Keychain operation failed: %s", exc)
        return error_response(str(exc), 500)


__all__ = [
    "coerce_identifier",
    "error_response",
    "parse_payload",
    "register_error_handlers",
    "secret_store",
    "state_db",
]
