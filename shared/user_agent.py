"""
User-Agent classification into the coarse buckets stored on visits.

Browser and OS families come from ``ua_parser`` and are folded onto a small
label set ("Chrome Mobile" counts as Chrome, "Mac OS X" as macOS). Device
class is decided from the raw header: ua-parser reports device models, not
form factors.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

from ua_parser import parse

_MOBILE_RE = re.compile(r"mobile|android|iphone|ipod|blackberry|iemobile|opera mini", re.IGNORECASE)
_TABLET_RE = re.compile(r"tablet|ipad|playbook|silk", re.IGNORECASE)

UNKNOWN = "unknown"

# Checked in order: Edge and Opera families also match the Chrome check
_BROWSER_LABELS = (
    ("Edge", "Edge"),
    ("Opera", "Opera"),
    ("Chrom", "Chrome"),
    ("Firefox", "Firefox"),
    ("Safari", "Safari"),
)

_LINUX_FAMILIES = {
    "Linux",
    "Ubuntu",
    "Kubuntu",
    "Debian",
    "Fedora",
    "Red Hat",
    "SUSE",
    "Mint",
    "Arch Linux",
    "Gentoo",
    "Slackware",
}


class UserAgentInfo(NamedTuple):
    device: str
    browser: str
    os: str


def _detect_device(user_agent: str) -> str:
    if _MOBILE_RE.search(user_agent):
        return "mobile"
    if _TABLET_RE.search(user_agent):
        return "tablet"
    return "desktop"


def _browser_label(family: Optional[str]) -> str:
    if not family:
        return UNKNOWN
    for needle, label in _BROWSER_LABELS:
        if needle in family:
            return label
    return UNKNOWN


def _os_label(family: Optional[str]) -> str:
    if not family:
        return UNKNOWN
    if family.startswith("Windows"):
        return "Windows"
    if family == "iOS":
        return "iOS"
    if family in ("Mac OS X", "Mac OS", "macOS"):
        return "macOS"
    if family == "Android":
        return "Android"
    if family in _LINUX_FAMILIES:
        return "Linux"
    return UNKNOWN


def parse_user_agent(user_agent: Optional[str]) -> UserAgentInfo:
    """Classify a raw ``User-Agent`` header.

    Returns:
        ``UserAgentInfo`` with device in {desktop, mobile, tablet, unknown},
        browser in {Chrome, Firefox, Safari, Edge, Opera, unknown} and
        os in {Windows, macOS, Linux, Android, iOS, unknown}.
    """
    if not user_agent:
        return UserAgentInfo(UNKNOWN, UNKNOWN, UNKNOWN)

    ua = parse(user_agent)
    return UserAgentInfo(
        device=_detect_device(user_agent),
        browser=_browser_label(ua.user_agent.family if ua.user_agent else None),
        os=_os_label(ua.os.family if ua.os else None),
    )
