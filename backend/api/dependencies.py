"""
Shared dependencies for the Timesheet API.
Logging, rate limiting, database access and the response envelope live here
so every router imports them from one place.
"""
import logging
import logging.handlers
from typing import Any, Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

from tslib.database import TimesheetDatabase, get_engine

from . import config

# ── Structured JSON Logging setup ───────────────────────────────
import json as _json
from datetime import datetime as _dt, timezone as _tz


class _JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _dt.fromtimestamp(record.created, tz=_tz.utc).strftime('%Y-%m-%dT%H:%M:%S.') + f"{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return _json.dumps(entry, ensure_ascii=False)


_logger = logging.getLogger('timesheet')
_logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))
if not _logger.handlers:
    _stderr_handler = logging.StreamHandler()
    _stderr_handler.setFormatter(_JsonFormatter())
    _logger.addHandler(_stderr_handler)
    if config.LOG_FILE:
        _file_handler = logging.handlers.RotatingFileHandler(
            config.LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=3
        )
        _file_handler.setFormatter(_JsonFormatter())
        _logger.addHandler(_file_handler)

# ── Rate Limiter ─────────────────────────────────────────────────
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[config.RATE_LIMIT],
    enabled=config.RATE_LIMIT_ENABLED,
)


def get_db() -> TimesheetDatabase:
    """Get a database handle for the current DATABASE_URL from the main module."""
    import api.main as _main
    if not _main.DATABASE_URL:
        raise RuntimeError("Database is not configured: set DATABASE_URL or DB_HOST/DB_PORT/DB_NAME/DB_USER/DB_PASSWORD")
    options = None if _main.DATABASE_URL.startswith('sqlite') else config.pool_options()
    return TimesheetDatabase(get_engine(_main.DATABASE_URL, options))


def envelope(data: Any = None, message: Optional[str] = None, count: Optional[int] = None) -> dict:
    """Wrap a payload in the success envelope; lists get a ``count``."""
    body: dict = {"status": "success"}
    if message is not None:
        body["message"] = message
    if data is not None:
        if count is None and isinstance(data, list):
            count = len(data)
        if count is not None:
            body["count"] = count
        body["data"] = data
    return body
