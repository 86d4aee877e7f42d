"""
Privacy-friendly visitor session identity.

A session id is a truncated SHA-256 of IP + User-Agent + UTC calendar day, so
the same visitor keeps one id for a day and the IP itself is never stored.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Mapping, Optional

SESSION_ID_LENGTH = 16


def generate_session_id(
    ip: Optional[str], user_agent: Optional[str], timestamp: datetime
) -> str:
    """Derive the session id for *ip* / *user_agent* on the day of *timestamp*.

    Naive timestamps are treated as UTC.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    day = timestamp.astimezone(timezone.utc).date().isoformat()
    data = f"{ip or 'unknown'}-{user_agent or ''}-{day}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()[:SESSION_ID_LENGTH]


def has_do_not_track(headers: Mapping[str, str]) -> bool:
    """Return True when the request carries a Do-Not-Track opt-out."""
    dnt = headers.get("dnt") or headers.get("do-not-track")
    return dnt in ("1", "true")
