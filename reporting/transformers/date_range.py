"""
Resolve inclusive calendar-date windows into query bounds.

Dates travel as ``YYYY-MM-DD`` strings. Anything else (missing, malformed,
or not a real calendar date) is treated as "unbounded" rather than an error.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional
import re

_DATE_PARAM_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DateRangeBounds:
    """
    Inclusive date keys plus the instants used to filter timestamps.
    
    ``to_exclusive_iso`` is midnight UTC of the day after ``to_date`` so a
    ``created_at < to_exclusive_iso`` filter keeps the whole final day.
    """
    from_date: Optional[str]
    to_date: Optional[str]
    from_iso: Optional[str]
    to_exclusive_iso: Optional[str]
    
    @property
    def from_datetime(self) -> Optional[datetime]:
        return _date_key_to_datetime(self.from_date) if self.from_date else None
    
    @property
    def to_exclusive_datetime(self) -> Optional[datetime]:
        return _date_key_to_datetime(next_day(self.to_date)) if self.to_date else None


def normalize_date_param(value: Any) -> Optional[str]:
    """Return ``value`` if it is a valid ``YYYY-MM-DD`` calendar date, else None"""
    if not value or not isinstance(value, str):
        return None
    if not _DATE_PARAM_RE.match(value):
        return None
    try:
        date.fromisoformat(value)
    except ValueError:
        return None
    return value


def get_date_range_bounds(from_date: Any = None, to_date: Any = None) -> DateRangeBounds:
    """
    Validate both ends of a window and derive its comparison bounds.
    
    A reversed window (from after to) is swapped, not rejected.
    """
    from_key = normalize_date_param(from_date)
    to_key = normalize_date_param(to_date)
    
    if from_key and to_key and from_key > to_key:
        from_key, to_key = to_key, from_key
    
    return DateRangeBounds(
        from_date=from_key,
        to_date=to_key,
        from_iso=date_key_to_iso_start(from_key) if from_key else None,
        to_exclusive_iso=date_key_to_iso_start(next_day(to_key)) if to_key else None,
    )


def next_day(date_key: str) -> str:
    """Calendar day after ``date_key`` (UTC)"""
    return (date.fromisoformat(date_key) + timedelta(days=1)).isoformat()


def date_key_to_iso_start(date_key: str) -> str:
    return f"{date_key}T00:00:00.000Z"


def _date_key_to_datetime(date_key: str) -> datetime:
    return datetime.combine(date.fromisoformat(date_key), time.min, tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into an aware UTC datetime.
    
    Accepts datetimes and ISO-8601 strings (a trailing ``Z`` is allowed).
    Naive values are taken as UTC. Returns None when unparseable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_date_key(value: Any) -> Optional[str]:
    """UTC calendar date (``YYYY-MM-DD``) of a timestamp, or None"""
    parsed = parse_timestamp(value)
    return parsed.date().isoformat() if parsed else None
