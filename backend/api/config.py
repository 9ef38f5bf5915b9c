"""
Runtime configuration for the Timesheet API, read from environment variables.
A `.env` file next to the backend is loaded by api.main before this module
is imported.
"""
import os
from typing import Optional
from urllib.parse import quote_plus


def _flag(name: str, default: str = '') -> bool:
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


ENVIRONMENT = os.environ.get('TIMESHEET_ENV', 'production').lower()
IS_DEVELOPMENT = ENVIRONMENT == 'development'

PORT = int(os.environ.get('PORT', '3000'))

# Comma-separated list; "*" allows any origin
_raw_origins = os.environ.get('CORS_ORIGIN', '*')
CORS_ORIGINS = [o.strip() for o in _raw_origins.split(',') if o.strip()] or ['*']

LOG_LEVEL = os.environ.get('TIMESHEET_LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.environ.get('TIMESHEET_LOG_FILE', '')

RATE_LIMIT = os.environ.get('RATE_LIMIT', '200/minute')
RATE_LIMIT_ENABLED = _flag('RATE_LIMIT_ENABLED', 'true')

AUTO_INIT_DB = _flag('TIMESHEET_AUTO_INIT_DB')

# ── Database pool ───────────────────────────────────────────────
DB_MAX_CONNECTIONS = int(os.environ.get('DB_MAX_CONNECTIONS', '20'))
DB_IDLE_TIMEOUT_MS = int(os.environ.get('DB_IDLE_TIMEOUT', '30000'))
DB_CONNECTION_TIMEOUT_MS = int(os.environ.get('DB_CONNECTION_TIMEOUT', '2000'))
DB_SSL = _flag('DB_SSL')

_DB_PARTS = ('DB_HOST', 'DB_PORT', 'DB_NAME', 'DB_USER', 'DB_PASSWORD')


def database_url() -> Optional[str]:
    """Return the configured SQLAlchemy URL, or None when nothing is set.

    DATABASE_URL wins; otherwise a PostgreSQL URL is assembled from the
    DB_* variables, all of which must then be present.
    """
    url = os.environ.get('DATABASE_URL')
    if url:
        return url
    present = {k: os.environ.get(k) for k in _DB_PARTS}
    if not any(present.values()):
        return None
    missing = [k for k, v in present.items() if not v]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")
    url = (
        f"postgresql://{quote_plus(present['DB_USER'])}:{quote_plus(present['DB_PASSWORD'])}"
        f"@{present['DB_HOST']}:{present['DB_PORT']}/{present['DB_NAME']}"
    )
    if DB_SSL:
        url += "?sslmode=require"
    return url


def pool_options() -> dict:
    """create_engine() keyword arguments derived from the DB_* pool settings."""
    return {
        'pool_size': DB_MAX_CONNECTIONS,
        'max_overflow': 0,
        'pool_recycle': max(1, DB_IDLE_TIMEOUT_MS // 1000),
        'pool_timeout': max(1, DB_CONNECTION_TIMEOUT_MS // 1000),
    }
