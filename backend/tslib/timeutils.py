"""Date, time and small input helpers used across services and forms."""
import re
from datetime import date, datetime, time
from typing import Optional, Union

_TIME_RE = re.compile(r'^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$')
_EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def parse_time(value: Union[str, time]) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a :class:`datetime.time`.

    Raises ValueError for anything else.
    """
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid time: {value!r}")
    m = _TIME_RE.match(value.strip())
    if not m:
        raise ValueError(f"Invalid time: {value!r}")
    return time(int(m.group(1)), int(m.group(2)), int(m.group(3) or 0))


def parse_date(value: Union[str, date]) -> date:
    """Parse an ISO ``YYYY-MM-DD`` date or the form's ``dd/mm/yyyy``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid date: {value!r}")
    text = value.strip()
    for fmt in ('%Y-%m-%d', '%d/%m/%Y'):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    # ISO timestamps such as 2024-03-01T00:00:00Z
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}") from None


def format_date(value: date) -> str:
    return value.strftime('%Y-%m-%d')


def format_time(value: time) -> str:
    return value.strftime('%H:%M:%S')


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def calculate_hours(check_in: Union[str, time], check_out: Union[str, time]) -> float:
    """Hours between check-in and check-out, rounded to two decimals.

    Seconds are ignored; the result is negative when check-out precedes
    check-in, callers reject that case before storing.
    """
    start = parse_time(check_in)
    end = parse_time(check_out)
    return round((_minutes(end) - _minutes(start)) / 60, 2)


def parse_pagination(page: Optional[int] = None, limit: Optional[int] = None) -> dict:
    """Clamp page/limit query values and derive the row offset."""
    page = page if page and page > 0 else 1
    limit = limit if limit and 0 < limit <= MAX_PAGE_SIZE else DEFAULT_PAGE_SIZE
    return {'page': page, 'limit': limit, 'offset': (page - 1) * limit}


def is_valid_email(email: str) -> bool:
    return bool(email) and bool(_EMAIL_RE.match(email))


def sanitize_string(value: str) -> str:
    """Trim and collapse internal whitespace."""
    return re.sub(r'\s+', ' ', value.strip())


def generate_username(name: str) -> str:
    """First initial + last name, lowercase ("Jane Wanjiru" -> "jwanjiru")."""
    parts = sanitize_string(name).lower().split(' ')
    if len(parts) == 1:
        return parts[0]
    return f"{parts[0][0]}{parts[-1]}"
