"""Keychain-backed credential endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify

from .schemas import CredentialPayload
from .utils import coerce_identifier, error_response, parse_payload, secret_store

bp = Blueprint("credentials_api", __name__, url_prefix="/api")


@bp.get("/credentials")
def get_all_credentials():
    return jsonify({"credentials": secret_store().get_all()})


@bp.get("/credentials/<key>")
def get_credential(key: str):
    identifier = coerce_identifier(key)
    if identifier is None:
        return error_response("credential_key_required", 400)
    return jsonify({"key": identifier, "value": secret_store().get(identifier)})


@bp.put("/credentials/<key>")
def set_credential(key: str):
    identifier = coerce_identifier(key)
    if identifier is None:
        return error_response("credential_key_required", 400)
    payload: CredentialPayload = parse_payload(CredentialPayload)
    secret_store().set(identifier, payload.value)
    return jsonify({"ok": True})


@bp.delete("/credentials/<key>")
def delete_credential(key: str):
    identifier = coerce_identifier(key)
    if identifier is None:
        return error_response("credential_key_required", 400)
    secret_store().delete(identifier)
    return jsonify({"ok": True})


__all__ = ["bp"]
