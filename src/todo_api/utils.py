from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

# Anything a caller may hand us for a due date
DateLike = Union[date, datetime, str]


# PUBLIC_INTERFACE
def parse_date_like(value: Optional[DateLike]) -> Optional[date]:
    """
    Normalize a date-like value into a calendar ``date``.

    - None stays None.
    - A datetime is reduced to its calendar day; aware values are converted to UTC first.
    - A date is returned as-is.
    - A string is parsed as an ISO8601 date ('2025-01-31') or datetime ('2025-01-31T13:45:00Z').
    """
    if value is None:
        return None

    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        s = value.strip()
        try:
            return date.fromisoformat(s)
        except ValueError:
            pass
        try:
            return parse_date_like(datetime.fromisoformat(s.replace("Z", "+00:00")))
        except ValueError as e:
            raise ValueError(
                "Invalid due_date format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
            ) from e

    raise ValueError("Invalid type for due_date; expected date, datetime, or ISO8601 string.")


# PUBLIC_INTERFACE
def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[datetime, str]) -> datetime:
    """Parse a stored timestamp; naive values are taken to be UTC."""
    dt = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# PUBLIC_INTERFACE
def next_timestamp(previous: Union[datetime, str]) -> datetime:
    """
    Return a UTC timestamp strictly later than ``previous``.

    Normally this is just the current time; when the clock has not moved past
    ``previous`` (coarse clocks, back-to-back writes) it is ``previous`` plus
    one microsecond.
    """
    prev = parse_timestamp(previous)
    now = utcnow()
    if now <= prev:
        return prev + timedelta(microseconds=1)
    return now
