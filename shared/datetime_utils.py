"""
Date/time parsing and conversion utilities — framework-agnostic.

Everything is normalised to timezone-aware UTC so that day boundaries used
for session ids, unique-visit detection and analytics buckets agree.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a date/time value into a timezone-aware UTC datetime.

    Accepts:
    - ``None`` → ``None``
    - ``datetime`` → converted to UTC (naive assumed UTC)
    - ``int`` / ``float`` → treated as Unix epoch seconds
    - ``str`` ending in ``"Z"`` → converted to ``+00:00`` before parsing
    - Any ISO 8601 string (``datetime.fromisoformat``)

    Returns:
        A timezone-aware ``datetime`` in UTC, or ``None`` if *value* is ``None``
        or cannot be parsed.
    """
    if value is None:
        return None
    try:
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, (int, float)):
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        else:
            raw = str(value).strip()
            if not raw:
                return None
            if raw.endswith("Z"):
                raw = raw[:-1] + "+00:00"
            dt = datetime.fromisoformat(raw)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, OSError, OverflowError):
        return None


def is_date_only(value: Any) -> bool:
    """True for a bare ``YYYY-MM-DD`` string."""
    return isinstance(value, str) and bool(_DATE_ONLY_RE.match(value.strip()))


def start_of_day(moment: datetime) -> datetime:
    """Midnight UTC of the day containing *moment*."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def day_key(moment: datetime) -> str:
    """``YYYY-MM-DD`` UTC calendar day of *moment*."""
    return start_of_day(moment).date().isoformat()


def parse_window_end(value: Any) -> Optional[datetime]:
    """Parse the exclusive upper bound of a date window.

    A date-only value covers that whole day, so the bound becomes the
    following midnight.
    """
    parsed = parse_datetime(value)
    if parsed is not None and is_date_only(value):
        return parsed + timedelta(days=1)
    return parsed
