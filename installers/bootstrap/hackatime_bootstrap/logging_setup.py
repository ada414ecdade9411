"""Console and structured file logging for bootstrap runs."""

from __future__ import annotations

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence


_LOGGER_NAME = "hackatime_bootstrap"
_REDACTED = "***REDACTED***"
_SECRET_FLAGS = ("--key",)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        if hasattr(record, "event"):
            payload["event"] = getattr(record, "event")
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(level: str = "INFO", log_dir: Path | None = None, keep_files: int = 7) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.TimedRotatingFileHandler(
            filename=str(log_dir / "hackatime-bootstrap.log"),
            when="midnight",
            backupCount=max(2, keep_files),
            encoding="utf-8",
        )
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    logger.debug("logging configured", extra={"event": "logging_configured"})
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)


def redact_args(args: Sequence[str]) -> list[str]:
    """Copy of a command line with the value after each secret flag masked."""
    out: list[str] = []
    mask_next = False
    for arg in args:
        if mask_next:
            out.append(_REDACTED)
            mask_next = False
        elif arg in _SECRET_FLAGS:
            out.append(arg)
            mask_next = True
        else:
            out.append(arg)
    return out
