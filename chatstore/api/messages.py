"""Message endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify

from .schemas import NewMessagePayload
from .utils import coerce_identifier, error_response, parse_payload, state_db

bp = Blueprint("messages_api", __name__, url_prefix="/api")


@bp.post("/threads/<thread_id>/messages")
def save_message(thread_id: str):
    identifier = coerce_identifier(thread_id)
    if identifier is None:
        return error_response("thread_id_required", 400)
    payload: NewMessagePayload = parse_payload(NewMessagePayload)
    message = state_db().save_message(identifier, payload.to_new_message())
    return jsonify(message.to_dict()), 201


@bp.get("/threads/<thread_id>/messages")
def list_messages(thread_id: str):
    identifier = coerce_identifier(thread_id)
    if identifier is None:
        return jsonify({"messages": []})
    messages = state_db().list_messages(identifier)
    return jsonify({"messages": [message.to_dict() for message in messages]})


@bp.delete("/messages/<message_id>")
def delete_message(message_id: str):
    identifier = coerce_identifier(message_id)
    if identifier is None:
        return error_response("message_id_required", 400)
    state_db().delete_message(identifier)
    return jsonify({"ok": True})


__all__ = ["bp"]
