"""
Structured JSON logging for ledger entrypoints (stdlib-only).

- One JSON object per log line (stdout)
- Core fields on every line: timestamp, severity, service, env, version,
  event_type, message, logger
- Extra fields passed via `log_event(..., **fields)` (or `extra={...}`) are merged
  into the payload; Decimals keep their exact text and dates render as ISO.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sharedledger import __version__

DEFAULT_SERVICE = "shared-ledger"
DEFAULT_ENV = "local"

# Attributes every LogRecord carries; anything else on the record is an extra field.
_RECORD_ATTRS: frozenset[str] = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "event_type"}


def _one_line(v: Any, *, max_len: int) -> str:
    s = " ".join(str(v).splitlines()).strip()
    if len(s) > max_len:
        s = s[: max_len - 1] + "…"
    return s


def _json_default(v: Any) -> Any:
    if isinstance(v, Decimal):
        return str(v)
    isoformat = getattr(v, "isoformat", None)
    if callable(isoformat):
        return isoformat()
    return str(v)


class JsonLogFormatter(logging.Formatter):
    def __init__(self, *, service: str | None = None, env: str | None = None, version: str | None = None) -> None:
        super().__init__()
        self._service = (service or os.getenv("SERVICE_NAME") or DEFAULT_SERVICE).strip()
        self._env = (env or os.getenv("ENV") or DEFAULT_ENV).strip()
        self._version = version or __version__

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (format required by logging)
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname,
            "service": self._service,
            "env": self._env,
            "version": self._version,
            "event_type": getattr(record, "event_type", None) or "log",
            "message": _one_line(record.getMessage(), max_len=4000),
            "logger": record.name,
        }
        if record.exc_info:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info))[-8000:]

        for k, v in record.__dict__.items():
            if k in _RECORD_ATTRS or k.startswith("_"):
                continue
            payload[k] = v

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=_json_default)


def init_structured_logging(
    *,
    service: str | None = None,
    env: str | None = None,
    version: str | None = None,
    level: str | int | None = None,
) -> None:
    """
    Route all stdlib logging to one JSON-lines handler on stdout.

    Safe to call multiple times (last call wins).
    """
    lvl = level or (os.getenv("LOG_LEVEL") or "INFO").upper()
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter(service=service, env=env, version=version))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(lvl)
    logging.captureWarnings(True)


def log_event(
    logger: logging.Logger,
    event_type: str,
    *,
    severity: str = "INFO",
    message: str | None = None,
    **fields: Any,
) -> None:
    """Emit a semantic event with a stable `event_type` (e.g. 'ledger.fetched')."""
    lvl = logging.getLevelName(str(severity).upper())
    if not isinstance(lvl, int):
        lvl = logging.INFO
    logger.log(lvl, message or event_type, extra={"event_type": event_type, **fields})


__all__ = ["JsonLogFormatter", "init_structured_logging", "log_event"]
