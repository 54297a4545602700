"""Structured logging for ``pantry.*`` events.

Every client operation binds a short correlation id; the filters below copy
it onto each record and scrub anything that could carry the API key or a
basket body. Nothing here runs on import: applications call
configure_logging() to route the ``pantry`` logger somewhere.
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from pantry.core.config import LogSettings, settings

REDACTED = "[REDACTED]"

# The key travels in the request path, so URLs are treated like credentials.
SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "api_key",
        "pantry_api_key",
        "x-api-key",
        "authorization",
        "cookie",
        "url",
        "content",
        "body",
        "payload",
    }
)

_operation_id: ContextVar[str | None] = ContextVar("pantry_operation_id", default=None)

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "operation_id",
}


@contextmanager
def operation_scope(operation_id: str) -> Iterator[str]:
    """Bind ``operation_id`` to every record logged inside the block."""
    token = _operation_id.set(operation_id)
    try:
        yield operation_id
    finally:
        _operation_id.reset(token)


def current_operation_id() -> str | None:
    return _operation_id.get()


def redact(value: Any, sensitive_keys: frozenset[str] = SENSITIVE_KEYS) -> Any:
    """Replace values stored under sensitive keys, descending into containers."""
    if isinstance(value, Mapping):
        return {
            key: REDACTED if str(key).lower() in sensitive_keys else redact(item, sensitive_keys)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(redact(item, sensitive_keys) for item in value)
    return value


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class OperationIdFilter(logging.Filter):
    """Stamp records with the operation id bound in the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "operation_id", None) is None:
            operation_id = _operation_id.get()
            if operation_id is not None:
                record.operation_id = operation_id
        return True


class SensitiveDataFilter(logging.Filter):
    def __init__(self, sensitive_keys: Iterable[str] = SENSITIVE_KEYS) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(key.lower() for key in sensitive_keys)

    def filter(self, record: logging.LogRecord) -> bool:
        scrubbed = redact(_extra_fields(record), self.sensitive_keys)
        for key, value in scrubbed.items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, event and extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        operation_id = getattr(record, "operation_id", None)
        if operation_id is not None:
            payload["operation_id"] = operation_id
        payload.update(redact(_extra_fields(record)))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _make_handler(cfg: LogSettings) -> logging.Handler:
    if cfg.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    path = Path(cfg.file_path or "logs/pantry.log")
    path.parent.mkdir(parents=True, exist_ok=True)
    if cfg.max_bytes:
        return RotatingFileHandler(
            path, maxBytes=cfg.max_bytes, backupCount=cfg.backup_count, encoding="utf-8"
        )
    return logging.FileHandler(path, encoding="utf-8")


def configure_logging(log_settings: LogSettings | None = None) -> logging.Logger:
    """Route the ``pantry`` logger to stdout or a file.

    Args:
        log_settings: Logging settings; the global ``settings.log`` if omitted.

    Returns:
        The configured ``pantry`` logger.
    """
    cfg = log_settings or settings.log

    handler = _make_handler(cfg)
    handler.addFilter(OperationIdFilter())
    handler.addFilter(SensitiveDataFilter())
    if cfg.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter())

    pantry_logger = logging.getLogger("pantry")
    for old in list(pantry_logger.handlers):
        pantry_logger.removeHandler(old)
        old.close()
    pantry_logger.addHandler(handler)
    pantry_logger.setLevel(getattr(logging, cfg.level.upper(), logging.INFO))
    pantry_logger.propagate = False

    # httpx logs every request URL at INFO, and the URL carries the key.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return pantry_logger
