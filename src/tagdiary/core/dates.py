"""Date keys - the canonical per-day identity of a diary entry."""

import logging
import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tagdiary.errors import MalformedDate

# Accepts the zero-padded ISO form and the legacy unpadded form (2024-1-5).
_DATE_KEY_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")

logger = logging.getLogger(__name__)

RELATIVE_DAYS = {"yesterday": -1, "today": 0, "tomorrow": 1}


def to_date_key(value: date) -> str:
    """Format a date as a zero-padded YYYY-MM-DD key."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def parse_date_key(key: str) -> date:
    """Parse a date key into a date. Raises MalformedDate instead of guessing."""
    if not isinstance(key, str):
        raise MalformedDate(f"Date key must be a string, got {type(key).__name__}")

    match = _DATE_KEY_RE.match(key.strip())
    if not match:
        raise MalformedDate(f"Invalid date key: {key!r}")

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise MalformedDate(f"Invalid date key: {key!r} ({e})") from e


def normalize_date_key(value: date | str) -> str:
    """Return the canonical key for a date or a (possibly unpadded) key string."""
    if isinstance(value, date):
        return to_date_key(value)
    return to_date_key(parse_date_key(value))


def is_valid_date_key(key: str) -> bool:
    """True if the key parses to a real calendar date."""
    try:
        parse_date_key(key)
    except MalformedDate:
        return False
    return True


def today_in(tz_name: str | None = None) -> date:
    """Today's date in the named timezone, or the host's local date."""
    if not tz_name:
        return date.today()
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {tz_name!r}, using local date")
        return date.today()
    return datetime.now(tz).date()


def resolve_date(value: str, as_of: date | None = None) -> date:
    """Resolve 'today', 'yesterday', 'tomorrow' or a date key."""
    as_of = as_of or date.today()
    offset = RELATIVE_DAYS.get(value.strip().lower())
    if offset is not None:
        return offset_date(as_of, offset)
    return parse_date_key(value)


def offset_date(value: date, days: int) -> date:
    """Shift a date by a number of days."""
    return value + timedelta(days=days)


def is_today(value: date | str, as_of: date | None = None) -> bool:
    as_of = as_of or date.today()
    if isinstance(value, str):
        value = parse_date_key(value)
    return value == as_of


def sort_date_keys(keys) -> list[str]:
    """Sort keys chronologically by parsed date, not by string order."""
    return sorted(keys, key=parse_date_key)
