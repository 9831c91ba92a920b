"""
Log formatting for Unmask.

JSON lines when output is piped or written to a file, a short human line
on a terminal. Both stamp the request id bound by CorrelationIdMiddleware;
the JSON form also carries the caller's user id and any ``extra=`` fields.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .context import get_request_id, get_user_id

# Attributes every LogRecord has; anything else came in through extra=.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _extras(record: logging.LogRecord) -> dict:
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}


class JSONFormatter(logging.Formatter):
    """
    {"timestamp": "2025-01-15T10:30:00.000Z", "level": "INFO", "logger": "lib.messages",
     "message": "...", "request_id": "req-...", "user_id": "...", <extras>}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in (("request_id", get_request_id()), ("user_id", get_user_id())):
            if value:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(_extras(record))
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        request_id = get_request_id()
        prefix = f"[{request_id[:12]}] " if request_id else ""
        line = (
            f"{datetime.now():%Y-%m-%d %H:%M:%S} [{record.levelname}] "
            f"{record.name}: {prefix}{record.getMessage()}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Replace the root handlers.

    json_format=None picks JSON unless stderr is a terminal. When *log_file*
    is given, JSON lines also go to a rotating file there.
    """
    if json_format is None:
        json_format = not sys.stderr.isatty()

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for existing in list(root.handlers):
        root.removeHandler(existing)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JSONFormatter() if json_format else HumanFormatter())
    root.addHandler(console)

    if log_file:
        _add_file_handler(root, Path(log_file))


def _add_file_handler(root: logging.Logger, path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS)
    except OSError as e:
        logging.getLogger(__name__).error("Log file %s unavailable: %s", path, e)
        return
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)
