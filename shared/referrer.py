"""Referrer normalisation for visit tracking."""

from __future__ import annotations

from typing import NamedTuple, Optional
from urllib.parse import urlsplit

DIRECT = "direct"


class ReferrerInfo(NamedTuple):
    referrer: str
    referrer_domain: Optional[str]


def parse_referrer(value: Optional[str]) -> ReferrerInfo:
    """Split a referrer into the stored value and its bare domain.

    Empty or ``"direct"`` referrers map to the ``direct`` sentinel with no
    domain. The domain is the URL hostname with a leading ``www.`` removed,
    or ``None`` when the value is not an absolute URL.
    """
    if not value or value == DIRECT:
        return ReferrerInfo(DIRECT, None)

    try:
        parts = urlsplit(value)
        hostname = parts.hostname
    except ValueError:
        return ReferrerInfo(value, None)

    if not parts.scheme or not hostname:
        return ReferrerInfo(value, None)

    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return ReferrerInfo(value, hostname)
