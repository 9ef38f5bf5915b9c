"""
High-level database access for the timesheet schema.

Every statement borrows a pooled connection from the engine and returns it
when done; writes run inside their own short transaction.
"""
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, event, func, select, text
from sqlalchemy.engine import Engine

from .schema import PRIMARY_KEYS, metadata
from .timeutils import format_time

# ── Process-wide engine registry ──────────────────────────────
# Maps database URL → Engine so every request shares one connection pool.
_ENGINES: Dict[str, Engine] = {}


def _enable_sqlite_foreign_keys(dbapi_conn, _record):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def get_engine(url: str, pool_options: Optional[dict] = None) -> Engine:
    """Return the shared engine for ``url``, creating it on first use."""
    engine = _ENGINES.get(url)
    if engine is not None:
        return engine
    options = dict(pool_options or {})
    if url.startswith('sqlite'):
        # SQLite ignores pool sizing and needs FK enforcement switched on
        options = {'connect_args': {'check_same_thread': False}}
    engine = create_engine(url, pool_pre_ping=True, **options)
    if url.startswith('sqlite'):
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
    _ENGINES[url] = engine
    return engine


def dispose_engines() -> None:
    """Close every pooled connection (used on shutdown and by tests)."""
    for engine in _ENGINES.values():
        engine.dispose()
    _ENGINES.clear()


def _plain(value: Any) -> Any:
    # summed hours carry float noise (7.499999...)
    if isinstance(value, float):
        return round(value, 2)
    return value


def row_to_dict(row) -> Dict[str, Any]:
    return {k: _plain(v) for k, v in row._mapping.items()}


class TimesheetDatabase:
    def __init__(self, engine: Engine):
        self.engine = engine

    # ── Reads ──────────────────────────────────────────────────
    def fetchall(self, stmt) -> List[Dict[str, Any]]:
        with self.engine.connect() as conn:
            return [row_to_dict(r) for r in conn.execute(stmt)]

    def fetchone(self, stmt) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        return row_to_dict(row) if row is not None else None

    def scalar(self, stmt) -> Any:
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar()

    def exists(self, table, pk_value) -> bool:
        pk = PRIMARY_KEYS[table]
        return self.scalar(select(pk).where(pk == pk_value)) is not None

    def count(self, table, column, value) -> int:
        return int(self.scalar(
            select(func.count()).select_from(table).where(column == value)
        ) or 0)

    def get_record(self, table, pk_value) -> Optional[Dict[str, Any]]:
        """Fetch one bare table row by primary key."""
        pk = PRIMARY_KEYS[table]
        return self.fetchone(select(table).where(pk == pk_value))

    # ── Writes ─────────────────────────────────────────────────
    def insert(self, table, values: dict) -> Dict[str, Any]:
        """Insert a row and return it as stored (defaults included)."""
        with self.engine.begin() as conn:
            result = conn.execute(table.insert().values(**values))
            new_id = result.inserted_primary_key[0]
        return self.get_record(table, new_id)

    def update(self, table, pk_value, values: dict, also=()) -> Optional[Dict[str, Any]]:
        """Update one row by primary key.

        Statements in ``also`` run in the same transaction, after the update.
        """
        pk = PRIMARY_KEYS[table]
        stmt = (
            table.update()
            .where(pk == pk_value)
            .values(**values, updated_at=func.now())
        )
        with self.engine.begin() as conn:
            result = conn.execute(stmt)
            for extra in also:
                conn.execute(extra)
        if result.rowcount == 0:
            return None
        return self.get_record(table, pk_value)

    def delete(self, table, pk_value) -> int:
        pk = PRIMARY_KEYS[table]
        with self.engine.begin() as conn:
            result = conn.execute(table.delete().where(pk == pk_value))
        return result.rowcount

    # ── Diagnostics ────────────────────────────────────────────
    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def get_stats(self) -> Dict[str, int]:
        """Row counts per table."""
        stats = {}
        with self.engine.connect() as conn:
            for table in metadata.sorted_tables:
                stats[table.name] = int(conn.execute(
                    select(func.count()).select_from(table)
                ).scalar() or 0)
        return stats


def jsonable(value: Any) -> Any:
    """Render dates and times the way the API serializes them."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return format_time(value)
    return value
