"""Checks shared by the entity services."""
from datetime import date
from typing import Iterable, Optional

from ..enums import match_value, values
from ..errors import bad_request
from ..timeutils import parse_date, parse_pagination


def require_choice(enum_cls, value, label: str, *, ignore_case: bool = False) -> str:
    """Return the canonical enum value or raise a 400 naming the allowed values."""
    canonical = match_value(enum_cls, value, ignore_case=ignore_case)
    if canonical is None:
        raise bad_request(f"Invalid {label}. Must be one of: {', '.join(values(enum_cls))}")
    return canonical


def require_existing(db, table, pk_value, message: str) -> None:
    if not db.exists(table, pk_value):
        raise bad_request(message)


def require_date(value, label: str) -> date:
    try:
        return parse_date(value)
    except ValueError:
        raise bad_request(f"{label} must be a valid date") from None


def optional_date(value, label: str) -> Optional[date]:
    if value is None or value == '':
        return None
    return require_date(value, label)


def update_fields(data: dict, immutable: Iterable[str] = ()) -> dict:
    """Supplied fields minus identifiers; 400 when nothing is left to change."""
    skip = set(immutable)
    fields = {k: v for k, v in data.items() if k not in skip}
    if not fields:
        raise bad_request("No fields to update")
    return fields


def check_date_window(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise bad_request("End date must be on or after start date")


def paginate(stmt, page: Optional[int], limit: Optional[int]):
    """Apply LIMIT/OFFSET only when the caller asked for a page."""
    if page is None and limit is None:
        return stmt
    p = parse_pagination(page, limit)
    return stmt.limit(p['limit']).offset(p['offset'])
