"""Logging setup shared by the netgap server and client.

Both sides run one thread per connection or channel, so every record
carries the emitting thread's name next to the logger name.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

_ROOT = "netgap"
_TEXT_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s (%(threadName)s): %(message)s"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Keys: timestamp, level, logger, thread, message, and exception when a
    traceback is attached.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def setup_logging(
    level: int = logging.INFO,
    *,
    json_format: bool = False,
) -> logging.Logger:
    """Send netgap logs to stderr at ``level``.

    Stdout is left to the client's report. Only one stderr handler is ever
    attached; repeated calls just move the level of the existing one.

    Args:
        level: Threshold for the ``netgap`` logger and its handler.
        json_format: Emit JSON lines instead of the human-readable format.

    Returns:
        The ``netgap`` logger.
    """
    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    # records stop at "netgap" and never reach handlers on the root logger
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for one netgap module, e.g. ``get_logger("client.worker")``.

    Args:
        name: Dotted module path below the package.

    Returns:
        ``logging.getLogger("netgap.<name>")``.
    """
    return logging.getLogger(f"{_ROOT}.{name}")
