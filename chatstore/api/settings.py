"""Settings-submission ledger endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify

from .schemas import SettingsSubmissionPayload
from .utils import coerce_identifier, parse_payload, state_db

bp = Blueprint("settings_api", __name__, url_prefix="/api")


@bp.post("/settings/submissions")
def mark_submitted():
    payload: SettingsSubmissionPayload = parse_payload(SettingsSubmissionPayload)
    state_db().mark_settings_submitted(payload.tool_call_id, payload.settings_key)
    return jsonify({"ok": True})


@bp.get("/settings/submissions/<tool_call_id>")
def is_submitted(tool_call_id: str):
    identifier = coerce_identifier(tool_call_id)
    submitted = identifier is not None and state_db().is_settings_submitted(identifier)
    return jsonify({"submitted": submitted})


__all__ = ["bp"]
