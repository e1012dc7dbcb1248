"""Logging setup for extragrid.

Production writes one JSON object per line to stdout, development writes
coloured text to stderr. Standard library loggers (uvicorn and friends) are
routed through loguru so everything shares one format.
"""

import json
import logging
import sys
import traceback
from typing import Any

from loguru import logger

_SEVERITIES = {
    "TRACE": "DEBUG",
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "SUCCESS": "INFO",
    "WARNING": "WARNING",
    "ERROR": "ERROR",
    "CRITICAL": "CRITICAL",
}

_DEVELOPMENT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> {extra}"
    "{exception}"
)

_STANDARD_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "httpcore")


def serialize_record(record: dict[str, Any]) -> str:
    """Turn a loguru record into a single JSON line.

    Structured fields passed as ``extra={...}`` are flattened to the top level.
    """
    entry: dict[str, Any] = {
        "severity": _SEVERITIES.get(record["level"].name, "INFO"),
        "message": record["message"],
        "time": record["time"].isoformat(),
        "logger": record["name"],
    }

    if record["level"].no >= logging.ERROR:
        entry["location"] = {
            "file": record["file"].path,
            "line": record["line"],
            "function": record["function"],
        }

    exception = record["exception"]
    if exception is not None:
        entry["exception"] = {
            "type": exception.type.__name__ if exception.type else None,
            "value": str(exception.value) if exception.value else None,
            "traceback": "".join(traceback.format_exception(exception.type, exception.value, exception.traceback))
            if exception.traceback
            else None,
        }

    for key, value in record.get("extra", {}).items():
        if key.startswith("_"):
            continue
        if key == "extra" and isinstance(value, dict):
            entry.update(value)
        else:
            entry[key] = value

    return json.dumps(entry, default=str)


def _json_sink(message: Any) -> None:
    sys.stdout.write(serialize_record(message.record) + "\n")
    sys.stdout.flush()


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(*, is_production: bool, log_level: str = "INFO") -> None:
    """Configure loguru for the server or the CLI.

    Args:
        is_production: JSON lines on stdout when True, coloured text on stderr otherwise.
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    logger.remove()

    if is_production:
        logger.add(_json_sink, level=log_level, format="{message}", backtrace=False, diagnose=False)
    else:
        logger.add(
            sys.stderr,
            level=log_level,
            format=_DEVELOPMENT_FORMAT,
            colorize=True,
            backtrace=True,
            diagnose=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=log_level, force=True)
    for name in _STANDARD_LOGGERS:
        logging.getLogger(name).setLevel(log_level)
        logging.getLogger(name).handlers = [InterceptHandler()]
