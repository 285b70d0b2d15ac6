from __future__ import annotations

import json
import logging

from chatstore.logging_setup import CorrelationIdFilter, JsonlFormatter, PlainFormatter, _rotating_handler


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("chatstore.db.store", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_jsonl_formatter_emits_single_object() -> None:
    record = _record("Created thread %s", correlation_id="cid-1", meta={"db_path": "/tmp/chat.db"})
    record.args = ("t-1",)
    payload = json.loads(JsonlFormatter().format(record))
    assert payload["message"] == "Created thread t-1"
    assert payload["level"] == "info"
    assert payload["correlation_id"] == "cid-1"
    assert payload["meta"] == {"db_path": "/tmp/chat.db"}
    assert payload["event"] == "log"


def test_plain_formatter_includes_correlation_and_meta() -> None:
    record = _record("hello", correlation_id="cid-2", meta={"k": 1}, event="http.request")
    line = PlainFormatter().format(record)
    assert "[INFO]" in line
    assert "cid=cid-2" in line
    assert line.endswith('hello {"k": 1}')


def test_correlation_filter_outside_request_sets_none() -> None:
    record = _record("x")
    assert CorrelationIdFilter().filter(record) is True
    assert record.correlation_id is None


def test_unserializable_meta_is_repr() -> None:
    record = _record("x", meta={"obj": object()})
    payload = json.loads(JsonlFormatter().format(record))
    assert "repr" in payload["meta"]


def test_long_messages_are_truncated() -> None:
    payload = json.loads(JsonlFormatter().format(_record("x" * 2500)))
    assert payload["message"].startswith("x" * 2000)
    assert payload["message"].endswith("[truncated 500 chars]")


def test_rotated_files_keep_their_extension(tmp_path) -> None:
    handler = _rotating_handler(tmp_path / "chatstore.jsonl", logging.INFO, JsonlFormatter())
    try:
        rotated = handler.namer(str(tmp_path / "chatstore.jsonl.2024-01-31"))
        assert rotated == str(tmp_path / "chatstore-2024-01-31.jsonl")
    finally:
        handler.close()
