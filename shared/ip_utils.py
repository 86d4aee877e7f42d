"""
Client IP and request-context resolution for FastAPI requests.

Takes an explicit ``Request`` parameter so the functions are testable without
a running server.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from shared.session import has_do_not_track


def get_client_ip(request: Request) -> str:
    """Extract the real client IP from a FastAPI ``Request``.

    Checks proxy headers in priority order before falling back to the
    direct connection address:

    1. ``X-Forwarded-For`` — standard proxy header (first IP in list)
    2. ``X-Real-IP`` — nginx / other reverse proxies

    Returns:
        The resolved client IP string, or ``"unknown"`` if none can be found.
    """
    for header in ("X-Forwarded-For", "X-Real-IP"):
        ip_value: str | None = request.headers.get(header)
        if ip_value:
            client_ip: str = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


@dataclass(frozen=True)
class ClientContext:
    """Request facts the services need, detached from the framework.

    ``ip`` is used only transiently (geolocation, session derivation) by the
    tracking and lead paths; comments keep it as anti-abuse metadata.
    """

    ip: str
    user_agent: str = ""
    referer: Optional[str] = None
    do_not_track: bool = False


def get_client_context(request: Request) -> ClientContext:
    return ClientContext(
        ip=get_client_ip(request),
        user_agent=request.headers.get("User-Agent", ""),
        referer=request.headers.get("Referer"),
        do_not_track=has_do_not_track(request.headers),
    )
