"""IP geolocation through an ordered chain of public lookup APIs.

The client IP is used only for the lookup and is never stored. Every failure
mode (timeout, transport error, non-2xx status, unusable payload) falls
through to the next provider, and an exhausted chain yields
``UNKNOWN_LOCATION``; the locator never raises.
"""

import asyncio
import ipaddress
from typing import Any, NamedTuple, Optional, Protocol, Sequence

from infrastructure.http_client import HttpClient
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

_MAPPED_PREFIX = "::ffff:"


class GeoLocation(NamedTuple):
    country: str
    country_code: str
    city: str
    region: str


UNKNOWN_LOCATION = GeoLocation("Unknown", "XX", "Unknown", "Unknown")


def strip_mapped_prefix(ip: str) -> str:
    if ip.lower().startswith(_MAPPED_PREFIX):
        return ip[len(_MAPPED_PREFIX):]
    return ip


def is_non_routable(ip: Optional[str]) -> bool:
    """True for addresses that can never be geolocated.

    Covers empty values, ``unknown``, unparsable strings, loopback, private,
    link-local and unspecified addresses, including IPv4-mapped IPv6 forms.
    """
    if not ip or ip.strip().lower() == "unknown":
        return True
    try:
        addr = ipaddress.ip_address(ip.strip())
    except ValueError:
        return True
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        addr = addr.ipv4_mapped
    return (
        addr.is_loopback
        or addr.is_private
        or addr.is_link_local
        or addr.is_unspecified
    )


class GeoProvider(Protocol):
    name: str

    async def lookup(self, ip: str) -> Optional[GeoLocation]: ...


class IpApiProvider:
    """ip-api.com lookup; only ``status == "success"`` payloads are accepted."""

    name = "ip-api"

    def __init__(self, http_client: HttpClient, url_template: str) -> None:
        self._http = http_client
        self._url_template = url_template

    async def lookup(self, ip: str) -> Optional[GeoLocation]:
        response = await self._http.get(
            self._url_template.format(ip=strip_mapped_prefix(ip)),
            params={"fields": "status,message,country,countryCode,city,regionName"},
        )
        if response.status_code != 200:
            return None
        data: dict[str, Any] = response.json()
        if data.get("status") != "success" or not data.get("country") or not data.get("countryCode"):
            return None
        return GeoLocation(
            country=data["country"],
            country_code=str(data["countryCode"]).upper(),
            city=data.get("city") or "Unknown",
            region=data.get("regionName") or "Unknown",
        )


class IpApiCoProvider:
    """ipapi.co lookup; error payloads and ``XX`` country codes are rejected."""

    name = "ipapi.co"

    def __init__(self, http_client: HttpClient, url_template: str) -> None:
        self._http = http_client
        self._url_template = url_template

    async def lookup(self, ip: str) -> Optional[GeoLocation]:
        response = await self._http.get(
            self._url_template.format(ip=strip_mapped_prefix(ip))
        )
        if response.status_code != 200:
            return None
        data: dict[str, Any] = response.json()
        if data.get("error"):
            return None
        code = str(data.get("country_code") or "").upper()
        if not data.get("country_name") or not code or code == "XX":
            return None
        return GeoLocation(
            country=data["country_name"],
            country_code=code,
            city=data.get("city") or "Unknown",
            region=data.get("region") or "Unknown",
        )


class GeoLocator:
    def __init__(self, providers: Sequence[GeoProvider], timeout: float = 5.0) -> None:
        self._providers = list(providers)
        self._timeout = timeout

    async def locate(self, ip: Optional[str]) -> GeoLocation:
        if is_non_routable(ip):
            return UNKNOWN_LOCATION

        for provider in self._providers:
            try:
                location = await asyncio.wait_for(provider.lookup(ip), self._timeout)
            except asyncio.TimeoutError:
                log.warning("geolocation_timeout", provider=provider.name, ip_hash=hash_ip(ip))
                continue
            except Exception as e:
                log.warning(
                    "geolocation_provider_failed",
                    provider=provider.name,
                    ip_hash=hash_ip(ip),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            if location is not None:
                return location
            log.debug("geolocation_no_result", provider=provider.name)

        return UNKNOWN_LOCATION
