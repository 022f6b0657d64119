"""Central logging utilities for Daily Git Brief.

One place to configure logging for the service, the one-shot collection mode
and ad-hoc scripts. Output is either colored human-readable lines (default) or
one JSON object per line (LOG_FORMAT=json).

Environment variables:
    LOG_LEVEL=INFO|DEBUG|...  (overridden by an explicit ``level`` argument)
    LOG_FORMAT=console|json   (default: console)
    LOG_NO_COLOR=1            disable color output on a TTY
    LOG_TIMEZONE=utc|local    (default: utc, collection dates are UTC too)

Usage:
    from daily_git_brief.common.logging_utils import configure_logging, get_logger
    configure_logging(service="collector")  # idempotent
    logger = get_logger(__name__)

Calling configure_logging() more than once is a no-op unless ``force=True``.
"""
from __future__ import annotations

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

_CONFIG_LOCK = threading.Lock()
_ALREADY_CONFIGURED = False

# Attributes every LogRecord carries; anything else was passed via ``extra=``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}

_PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _record_time(record: logging.LogRecord, tz_local: bool) -> datetime:
    ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return ts.astimezone() if tz_local else ts


class ColorFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\x1b[38;5;245m",
        "INFO": "\x1b[38;5;39m",
        "WARNING": "\x1b[38;5;214m",
        "ERROR": "\x1b[38;5;196m",
        "CRITICAL": "\x1b[48;5;196m\x1b[38;5;231m",
    }
    RESET = "\x1b[0m"

    def __init__(self, tz_local: bool):
        super().__init__()
        self.tz_local = tz_local

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        ts_str = _record_time(record, self.tz_local).strftime(_DATE_FORMAT)
        line = f"{ts_str} | {record.levelname:<8} | {record.name} | {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        color = self.COLORS.get(record.levelname)
        return f"{color}{line}{self.RESET}" if color else line


class JsonFormatter(logging.Formatter):
    def __init__(self, tz_local: bool):
        super().__init__()
        self.tz_local = tz_local

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "ts": _record_time(record, self.tz_local).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except (TypeError, ValueError):
                payload[key] = repr(value)
        return json.dumps(payload, ensure_ascii=False)


def _build_console_formatter(tz_local: bool) -> logging.Formatter:
    if os.getenv("LOG_FORMAT", "console").lower() == "json":
        return JsonFormatter(tz_local=tz_local)
    if sys.stderr.isatty() and os.getenv("LOG_NO_COLOR") != "1":
        return ColorFormatter(tz_local=tz_local)
    return logging.Formatter(fmt=_PLAIN_FORMAT, datefmt=_DATE_FORMAT)


def configure_logging(
    service: str | None = None,
    *,
    level: Optional[str] = None,
    log_file: Optional[str | Path] = None,
    force: bool = False,
) -> None:
    """Configure root logging once.

    Parameters
    ----------
    service: Optional logical service name, added as ``service`` field to records
        emitted through :func:`get_logger`.
    level: Log level name; falls back to ``LOG_LEVEL`` and then INFO.
    log_file: Optional file that receives plain-text records in addition to stderr.
    force: Reconfigure even if logging was already configured.
    """
    global _ALREADY_CONFIGURED
    with _CONFIG_LOCK:
        if _ALREADY_CONFIGURED and not force:
            return

        level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
        tz_local = os.getenv("LOG_TIMEZONE", "utc").lower() == "local"

        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)

        console = logging.StreamHandler()
        console.setFormatter(_build_console_formatter(tz_local))
        root.addHandler(console)

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(fmt=_PLAIN_FORMAT, datefmt=_DATE_FORMAT))
            root.addHandler(file_handler)

        root.setLevel(getattr(logging, level_name, logging.INFO))
        _ServiceLoggerAdapter.BASE_SERVICE = service
        _ALREADY_CONFIGURED = True


def get_logger(name: str) -> logging.Logger | logging.LoggerAdapter:
    base = logging.getLogger(name)
    if _ServiceLoggerAdapter.BASE_SERVICE:
        return _ServiceLoggerAdapter(base, {"service": _ServiceLoggerAdapter.BASE_SERVICE})
    return base


class _ServiceLoggerAdapter(logging.LoggerAdapter):
    # Set by configure_logging when a service name is given
    BASE_SERVICE: Optional[str] = None

    def process(self, msg: Any, kwargs: Dict[str, Any]):  # noqa: D401
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("service", self.extra["service"])
        kwargs["extra"] = extra
        return msg, kwargs


__all__ = [
    "configure_logging",
    "get_logger",
]
