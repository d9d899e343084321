"""Application logging configuration utilities."""

from __future__ import annotations

import contextvars
import json
import logging
import os
import pathlib
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict

_LOG_CONFIGURED = False
_REQUEST_ID_CTX: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_USER_ID_CTX: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "user_id", default=None
)
# Record attribute -> context variable copied onto every record.
_CONTEXT_FIELDS: Dict[str, contextvars.ContextVar[Any]] = {
    "request_id": _REQUEST_ID_CTX,
    "user_id": _USER_ID_CTX,
}

BASE_DIR = pathlib.Path(__file__).resolve().parent.parent
DEFAULT_LOG_FILE = "logs/app.jsonl"

_QUIET_LOGGERS = ("uvicorn", "httpx", "sqlalchemy.engine")


class RequestContextFilter(logging.Filter):
    """Copy request and user context onto log records.

    Values passed explicitly through ``extra`` win over the context.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for field, context_var in _CONTEXT_FIELDS.items():
            if getattr(record, field, None) is None:
                setattr(record, field, context_var.get())
        return True


class JsonFormatter(logging.Formatter):
    """Serialize log records as JSON lines, keeping ``extra`` fields."""

    _RESERVED = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in self._RESERVED and not key.startswith("_") and value is not None
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=True, default=str)


def set_request_id(request_id: str | None) -> contextvars.Token[str | None]:
    """Bind the current request ID to the logging context."""
    return _REQUEST_ID_CTX.set(request_id)


def reset_request_id(token: contextvars.Token[str | None]) -> None:
    _REQUEST_ID_CTX.reset(token)


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


def bind_user_id(user_id: int | None) -> contextvars.Token[int | None]:
    """Attach the authenticated user to subsequent log records."""
    return _USER_ID_CTX.set(user_id)


def _resolve_log_file(configured: str | None) -> pathlib.Path | None:
    """Return the JSON log path, or ``None`` when file logging is switched off."""
    if configured is None:
        configured = os.getenv("LOG_FILE", DEFAULT_LOG_FILE)
    if not configured.strip():
        return None
    path = pathlib.Path(configured)
    if not path.is_absolute():
        path = BASE_DIR.parent / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def configure_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Install the console handler and, unless ``LOG_FILE`` is empty, the JSON file handler.

    ``level`` and ``log_file`` default to the ``LOG_LEVEL`` and ``LOG_FILE``
    environment variables. Repeated calls are no-ops.
    """
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    level_name = (level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    console_level = logging.getLevelName(level_name)
    if not isinstance(console_level, int):
        console_level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    context_filter = RequestContextFilter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.addFilter(context_filter)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s "
            "(request_id=%(request_id)s user_id=%(user_id)s)"
        )
    )
    root_logger.addHandler(console_handler)

    log_path = _resolve_log_file(log_file)
    if log_path is not None:
        file_handler = RotatingFileHandler(log_path, maxBytes=10_000_000, backupCount=5)
        file_handler.setLevel(logging.INFO)
        file_handler.addFilter(context_filter)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _LOG_CONFIGURED = True


__all__ = [
    "JsonFormatter",
    "RequestContextFilter",
    "bind_user_id",
    "configure_logging",
    "get_request_id",
    "reset_request_id",
    "set_request_id",
]
