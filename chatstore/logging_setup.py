"""Process-wide logging: a plain log and a JSONL log, rotated at midnight."""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Any

from flask import g, has_request_context, request


_LOG_CONFIGURED = False
_REQUEST_LOGGER_NAME = "chatstore.api"
_MAX_MESSAGE_CHARS = 2000
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level() -> int:
    name = os.getenv("LOG_LEVEL")
    if not name:
        debug = os.getenv("FLASK_DEBUG", "").strip().lower()
        name = "DEBUG" if debug not in {"", "0", "false"} else "INFO"
    return getattr(logging, name.upper(), logging.INFO)


def _record_fields(formatter: logging.Formatter, record: logging.LogRecord) -> dict[str, Any]:
    """Fields shared by both output formats; ``meta`` is always JSON-safe."""

    message = record.getMessage()
    if len(message) > _MAX_MESSAGE_CHARS:
        dropped = len(message) - _MAX_MESSAGE_CHARS
        message = f"{message[:_MAX_MESSAGE_CHARS]}...[truncated {dropped} chars]"

    meta = getattr(record, "meta", None)
    if meta is not None:
        try:
            json.dumps(meta)
        except (TypeError, ValueError):
            meta = {"repr": repr(meta)}

    return {
        "timestamp": formatter.formatTime(record, datefmt=_TIMESTAMP_FORMAT),
        "level": record.levelname.lower(),
        "logger": record.name,
        "correlation_id": getattr(record, "correlation_id", None),
        "event": getattr(record, "event", None) or "log",
        "message": message,
        "stack": formatter.formatException(record.exc_info) if record.exc_info else None,
        "meta": meta,
    }


class CorrelationIdFilter(logging.Filter):
    """Stamp each record with the current request's correlation id, if any."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "correlation_id", None):
            return True
        correlation_id = None
        if has_request_context():
            correlation_id = getattr(g, "correlation_id", None) or request.headers.get(
                "X-Correlation-Id"
            )
        record.correlation_id = correlation_id
        return True


class JsonlFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        fields = _record_fields(self, record)
        payload = {key: value for key, value in fields.items() if value is not None}
        payload["correlation_id"] = fields["correlation_id"]
        return json.dumps(payload, ensure_ascii=False)


class PlainFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        fields = _record_fields(self, record)
        parts = [fields["timestamp"], f"[{record.levelname}]", record.name]
        if fields["correlation_id"]:
            parts.append(f"cid={fields['correlation_id']}")
        parts.append(fields["message"])
        if fields["meta"] is not None:
            parts.append(json.dumps(fields["meta"], ensure_ascii=False))
        line = " ".join(parts)
        if fields["stack"]:
            line = f"{line}\n{fields['stack']}"
        return line


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=path, when="midnight", backupCount=14, encoding="utf-8"
    )
    # chatstore.log.2024-01-31 -> chatstore-2024-01-31.log
    handler.namer = lambda name: f"{path.with_suffix('')}-{name.rsplit('.', 1)[-1]}{path.suffix}"
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())
    return handler


def setup_logging(log_dir: Path | None = None) -> None:
    """Replace the root handlers once per process; later calls are no-ops."""

    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    directory = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    directory.mkdir(parents=True, exist_ok=True)
    level = _resolve_level()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        _rotating_handler(directory / "chatstore.log", level, PlainFormatter()),
        _rotating_handler(directory / "chatstore.jsonl", level, JsonlFormatter()),
    ]
    _LOG_CONFIGURED = True


def get_request_logger() -> logging.Logger:
    return logging.getLogger(_REQUEST_LOGGER_NAME)


__all__ = ["CorrelationIdFilter", "JsonlFormatter", "PlainFormatter", "get_request_logger", "setup_logging"]
