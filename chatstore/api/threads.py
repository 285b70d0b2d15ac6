"""Thread endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify

from .schemas import ThreadTitlePayload
from .utils import coerce_identifier, error_response, parse_payload, state_db

bp = Blueprint("threads_api", __name__, url_prefix="/api")


@bp.post("/threads")
def create_thread():
    thread = state_db().create_thread()
    return jsonify(thread.to_dict()), 201


@bp.get("/threads")
def list_threads():
    threads = state_db().list_threads()
    return jsonify({"threads": [thread.to_dict() for thread in threads]})


@bp.delete("/threads/<thread_id>")
def delete_thread(thread_id: str):
    identifier = coerce_identifier(thread_id)
    if identifier is None:
        return error_response("thread_id_required", 400)
    state_db().delete_thread(identifier)
    return jsonify({"ok": True})


@bp.put("/threads/<thread_id>/title")
def update_thread_title(thread_id: str):
    identifier = coerce_identifier(thread_id)
    if identifier is None:
        return error_response("thread_id_required", 400)
    payload: ThreadTitlePayload = parse_payload(ThreadTitlePayload)
    state_db().update_thread_title(identifier, payload.title)
    return jsonify({"ok": True})


__all__ = ["bp"]
