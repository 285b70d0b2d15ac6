"""Request middleware that assigns per-request correlation identifiers."""

from __future__ import annotations

import time
import uuid

from flask import g, request

from chatstore.logging_setup import get_request_logger


def new_request_id() -> str:
    return "req_" + uuid.uuid4().hex[:10]


def before_request() -> None:
    """Attach a correlation identifier to ``flask.g`` for downstream logging."""

    correlation_id = (
        request.headers.get("X-Correlation-Id")
        or request.headers.get("X-Request-Id")
        or new_request_id()
    )
    g.correlation_id = correlation_id
    g._request_perf_start = time.perf_counter()


def after_request(response):  # type: ignore[no-untyped-def]
    """Emit a concise summary log and propagate the correlation header."""

    start_perf: float | None = getattr(g, "_request_perf_start", None)
    duration_ms: int | None = None
    if isinstance(start_perf, (int, float)):
        duration_ms = int((time.perf_counter() - start_perf) * 1000)
    correlation_id: str | None = getattr(g, "correlation_id", None)

    get_request_logger().info(
        "HTTP %s %s -> %s (%sms)",
        request.method,
        request.path,
        response.status_code,
        duration_ms if duration_ms is not None else -1,
        extra={
            "correlation_id": correlation_id,
            "event": "http.request",
            "meta": {
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        },
    )

    if correlation_id:
        response.headers.setdefault("X-Correlation-Id", correlation_id)
    return response


__all__ = ["after_request", "before_request", "new_request_id"]
