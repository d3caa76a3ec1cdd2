# Overview: Logs every API request and response through app.logger.

from __future__ import annotations

import time

from flask import Flask, current_app, g, request

REDACTED = "[redacted]"
SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie"}
SENSITIVE_FIELDS = {"password", "access_token", "token"}


def _redact(value):
    if isinstance(value, dict):
        return {
            k: (REDACTED if str(k).lower() in SENSITIVE_FIELDS else _redact(v))
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_redact(v) for v in value]
    return value


def _headers() -> dict:
    return {
        name: (REDACTED if name.lower() in SENSITIVE_HEADERS else value)
        for name, value in request.headers.items()
    }


def _log_request() -> None:
    g.request_started_at = time.perf_counter()
    body = None
    if current_app.config.get("LOG_REQUEST_BODIES") and request.is_json:
        body = _redact(request.get_json(silent=True))
    current_app.logger.info(
        "API Request %s %s",
        request.method,
        request.path,
        extra={
            "url": request.url,
            "query": request.args.to_dict(flat=False),
            "headers": _headers(),
            "body": body,
        },
    )


def _log_response(response):
    started = g.pop("request_started_at", None)
    duration_ms = round((time.perf_counter() - started) * 1000, 2) if started is not None else None
    content = None
    if current_app.config.get("LOG_REQUEST_BODIES") and response.is_json:
        content = _redact(response.get_json(silent=True))
    current_app.logger.info(
        "API Response %s %s -> %s (%s ms)",
        request.method,
        request.path,
        response.status_code,
        duration_ms,
        extra={"status": response.status_code, "content": content},
    )
    return response


def init_request_logging(app: Flask) -> None:
    """Attach request/response logging to routes under /api."""

    @app.before_request
    def log_api_request():
        if request.path.startswith("/api"):
            _log_request()

    @app.after_request
    def log_api_response(response):
        if request.path.startswith("/api"):
            return _log_response(response)
        return response
