"""Logging configuration for user-api.

One stdout handler, one of two formatters:

  _ContainerFormatter: human-readable single lines for local runs.  Every
    line shows the request id; WARNING and above also show [file:line].

  _JsonFormatter: JSON Lines for log aggregation (LOG_JSON=true).  The
    request context fields set by RequestContextMiddleware become
    top-level keys.

Services log user ids and emails.  Plaintext passwords and password
hashes never go to a logger.
"""

from __future__ import annotations

import json
import logging
import sys
import time

CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "login",
    "status_code",
    "duration_ms",
)

_QUIET_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpcore",
    "httpx",
    "sqlalchemy.engine",
)

_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def _timestamp(formatter: logging.Formatter, record: logging.LogRecord) -> str:
    # UTC with milliseconds: 2026-10-19T08:15:02.114Z
    return f"{formatter.formatTime(record, _DATEFMT)}.{int(record.msecs):03d}Z"


class _ContainerFormatter(logging.Formatter):
    """`<ts> <LEVEL> <logger> [<request id>]  <message>`"""

    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        line = "{ts} {level:<8} {name} [{rid}]  {msg}".format(
            ts=_timestamp(self, record),
            level=record.levelname,
            name=record.name,
            rid=getattr(record, "request_id", "-"),
            msg=record.getMessage(),
        )
        if record.levelno >= logging.WARNING:
            line += f"  [{record.filename}:{record.lineno}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class _JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": _timestamp(self, record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Replace the root handlers with a single stdout handler.

    Unknown level names fall back to INFO.  Chatty libraries are held at
    WARNING unless the root level is stricter.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
