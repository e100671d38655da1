"""JSON logging for the drafting services.

Every record is emitted as one JSON object. Fields bound with
:func:`log_context` (session, run, stage, section ...) are attached to every
record logged inside the block, and anything passed through ``extra=`` that
can be serialised is kept as well.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

LOG_LEVEL_ENV_VAR = "BOOK_DRAFTER_LOG_LEVEL"
CAPTURE_WARNINGS_ENV_VAR = "BOOK_DRAFTER_CAPTURE_WARNINGS"

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("book_drafter_log_context", default={})

# Attributes every LogRecord carries; never copied into the payload as extras.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "observability_context"}

# Emitted right after the base fields so pipeline logs read consistently.
_LEADING_FIELDS = (
    "service",
    "session_id",
    "run_id",
    "provider",
    "stage",
    "section",
    "state",
)


class ContextFilter(logging.Filter):
    """Copy the active :func:`log_context` fields and the service name onto records."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401 - inherited docstring
        context = _LOG_CONTEXT.get()
        if context:
            record.observability_context = dict(context)
            for key, value in context.items():
                if not hasattr(record, key):
                    setattr(record, key, value)
        if getattr(record, "service", None) is None:
            record.service = self.service_name
        return True


class JsonFormatter(logging.Formatter):
    """Serialise a record, its bound context and its JSON-safe extras."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited docstring
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in _LEADING_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        context = getattr(record, "observability_context", None) or {}
        extras = {**context, **record.__dict__}
        for key, value in extras.items():
            if key in payload or key in _RECORD_ATTRIBUTES or key.startswith("_"):
                continue
            if value is not None and _is_json_safe(value):
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def _is_json_safe(value: Any) -> bool:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


def _env_flag(name: str) -> bool:
    raw = os.getenv(name)
    return bool(raw) and raw.strip().lower() in _TRUTHY


def _logging_config(service_name: str, level: str | int) -> dict[str, Any]:
    handler_names = ["stdout"]
    quiet = {"level": "WARNING"}
    server = {"handlers": handler_names, "level": level, "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": f"{__name__}.JsonFormatter"}},
        "filters": {
            "context": {"()": f"{__name__}.ContextFilter", "service_name": service_name}
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "json",
                "filters": ["context"],
            }
        },
        "root": {"level": level, "handlers": handler_names},
        "loggers": {
            "uvicorn": server,
            "uvicorn.error": server,
            "uvicorn.access": server,
            "httpx": quiet,
            "httpcore": quiet,
        },
    }


def setup_logging(
    service_name: str,
    level: str | int | None = None,
    *,
    capture_warnings: bool | None = None,
) -> None:
    """Route all logging of the process to stdout as JSON.

    ``level`` falls back to ``BOOK_DRAFTER_LOG_LEVEL`` and then ``INFO``;
    ``capture_warnings`` falls back to ``BOOK_DRAFTER_CAPTURE_WARNINGS``.
    Calling it again rebuilds the handlers.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV_VAR, "INFO").strip().upper() or "INFO"
    logging.config.dictConfig(_logging_config(service_name, level))

    if capture_warnings is None:
        capture_warnings = _env_flag(CAPTURE_WARNINGS_ENV_VAR)
    logging.captureWarnings(capture_warnings)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind ``fields`` to every record logged inside the block.

    Nested blocks inherit the outer fields; passing ``None`` unbinds one.
    """

    merged = dict(_LOG_CONTEXT.get())
    for key, value in fields.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    token = _LOG_CONTEXT.set(merged)
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


def current_log_context() -> Dict[str, Any]:
    return dict(_LOG_CONTEXT.get())
