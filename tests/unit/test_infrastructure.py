"""Unit tests for the infrastructure layer."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from config import EmailSettings
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.geolocation import (
    UNKNOWN_LOCATION,
    GeoLocation,
    GeoLocator,
    IpApiCoProvider,
    IpApiProvider,
    is_non_routable,
    strip_mapped_prefix,
)
from infrastructure.http_client import HttpClient


# ── Helpers ───────────────────────────────────────────────────────────────────


def _response(status_code=200, payload=None, text=""):
    resp = MagicMock(status_code=status_code, text=text)
    resp.json.return_value = payload or {}
    return resp


class _StaticProvider:
    def __init__(self, name, result=None, error=None, delay=0.0):
        self.name = name
        self._result = result
        self._error = error
        self._delay = delay
        self.calls = []

    async def lookup(self, ip):
        self.calls.append(ip)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error:
            raise self._error
        return self._result


BERLIN = GeoLocation("Germany", "DE", "Berlin", "Berlin")
TOKYO = GeoLocation("Japan", "JP", "Tokyo", "Tokyo")


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    async def test_post_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "post", return_value=fake_resp)
        resp = await client.post("http://example.com")
        assert resp.status_code == 200
        await client.aclose()

    async def test_get_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "get", return_value=fake_resp)
        resp = await client.get("http://example.com", params={"a": "1"})
        assert resp.status_code == 200
        await client.aclose()

    async def test_get_propagates_exception(self, mocker):
        client = HttpClient()
        mocker.patch.object(client._client, "get", side_effect=Exception("timeout"))
        with pytest.raises(Exception, match="timeout"):
            await client.get("http://example.com")
        await client.aclose()

    async def test_context_manager_closes(self, mocker):
        client = HttpClient()
        closer = mocker.patch.object(client._client, "aclose")
        async with client:
            pass
        closer.assert_awaited_once()


# ── Address classification ────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "ip, expected",
    [
        ("127.0.0.1", True),
        ("::1", True),
        ("10.1.2.3", True),
        ("192.168.0.10", True),
        ("172.16.5.4", True),
        ("169.254.1.1", True),
        ("fc00::1", True),
        ("::ffff:192.168.1.1", True),
        ("0.0.0.0", True),
        ("unknown", True),
        ("", True),
        (None, True),
        ("not-an-ip", True),
        ("8.8.8.8", False),
        ("::ffff:8.8.8.8", False),
        ("2001:4860:4860::8888", False),
    ],
)
def test_is_non_routable(ip, expected):
    assert is_non_routable(ip) is expected


def test_strip_mapped_prefix():
    assert strip_mapped_prefix("::ffff:8.8.8.8") == "8.8.8.8"
    assert strip_mapped_prefix("8.8.8.8") == "8.8.8.8"


# ── Providers ─────────────────────────────────────────────────────────────────


class TestIpApiProvider:
    def _make(self, resp):
        http = MagicMock()
        http.get = AsyncMock(return_value=resp)
        return IpApiProvider(http, "http://ip-api.com/json/{ip}"), http

    async def test_success_payload(self):
        provider, http = self._make(
            _response(
                payload={
                    "status": "success",
                    "country": "Germany",
                    "countryCode": "de",
                    "city": "Berlin",
                    "regionName": "Berlin",
                }
            )
        )
        assert await provider.lookup("::ffff:8.8.8.8") == BERLIN
        assert http.get.call_args.args[0] == "http://ip-api.com/json/8.8.8.8"

    async def test_fail_status_rejected(self):
        provider, _ = self._make(_response(payload={"status": "fail", "message": "reserved range"}))
        assert await provider.lookup("8.8.8.8") is None

    async def test_non_200_rejected(self):
        provider, _ = self._make(_response(status_code=429))
        assert await provider.lookup("8.8.8.8") is None

    async def test_missing_city_uses_sentinel(self):
        provider, _ = self._make(
            _response(payload={"status": "success", "country": "Japan", "countryCode": "JP"})
        )
        assert await provider.lookup("8.8.8.8") == GeoLocation("Japan", "JP", "Unknown", "Unknown")


class TestIpApiCoProvider:
    def _make(self, resp):
        http = MagicMock()
        http.get = AsyncMock(return_value=resp)
        return IpApiCoProvider(http, "https://ipapi.co/{ip}/json/")

    async def test_success_payload(self):
        provider = self._make(
            _response(
                payload={
                    "country_name": "Japan",
                    "country_code": "JP",
                    "city": "Tokyo",
                    "region": "Tokyo",
                }
            )
        )
        assert await provider.lookup("1.1.1.1") == TOKYO

    @pytest.mark.parametrize(
        "payload",
        [
            {"error": True, "reason": "RateLimited"},
            {"country_name": "Nowhere", "country_code": "XX"},
            {"country_code": "JP"},
        ],
        ids=["error", "xx_code", "no_country"],
    )
    async def test_unusable_payload_rejected(self, payload):
        assert await self._make(_response(payload=payload)).lookup("1.1.1.1") is None


# ── GeoLocator ────────────────────────────────────────────────────────────────


class TestGeoLocator:
    async def test_non_routable_skips_providers(self):
        provider = _StaticProvider("p", result=BERLIN)
        locator = GeoLocator([provider])
        assert await locator.locate("192.168.1.5") == UNKNOWN_LOCATION
        assert provider.calls == []

    async def test_first_usable_result_wins(self):
        first = _StaticProvider("a", result=BERLIN)
        second = _StaticProvider("b", result=TOKYO)
        assert await GeoLocator([first, second]).locate("8.8.8.8") == BERLIN
        assert second.calls == []

    async def test_falls_through_on_exception(self):
        broken = _StaticProvider("a", error=RuntimeError("boom"))
        backup = _StaticProvider("b", result=TOKYO)
        assert await GeoLocator([broken, backup]).locate("8.8.8.8") == TOKYO

    async def test_falls_through_on_none(self):
        empty = _StaticProvider("a", result=None)
        backup = _StaticProvider("b", result=TOKYO)
        assert await GeoLocator([empty, backup]).locate("8.8.8.8") == TOKYO

    async def test_timeout_moves_to_next_provider(self):
        slow = _StaticProvider("slow", result=BERLIN, delay=1.0)
        backup = _StaticProvider("b", result=TOKYO)
        assert await GeoLocator([slow, backup], timeout=0.01).locate("8.8.8.8") == TOKYO

    async def test_exhausted_chain_returns_sentinel(self):
        locator = GeoLocator(
            [_StaticProvider("a", error=ValueError("bad json")), _StaticProvider("b")]
        )
        assert await locator.locate("8.8.8.8") == UNKNOWN_LOCATION


# ── ZeptoMailProvider ─────────────────────────────────────────────────────────


LEAD = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "message": "I'd like a website",
    "country": "United Kingdom",
    "page": "contact",
    "createdAt": datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc),
}


class TestZeptoMailProvider:
    def _make(self, token="test-token", admin_email="owner@example.com", status_code=201):
        settings = EmailSettings(
            zepto_api_token=token,
            admin_email=admin_email,
            admin_dashboard_url="https://admin.example.com/",
        )
        http = MagicMock()
        http.post = AsyncMock(return_value=_response(status_code=status_code))
        return ZeptoMailProvider(settings=settings, http_client=http), http

    async def test_notification_goes_to_site_owner(self):
        provider, http = self._make()
        assert await provider.send_lead_notification(LEAD) is True

        kwargs = http.post.call_args.kwargs
        payload = kwargs["json"]
        assert payload["to"][0]["email_address"]["address"] == "owner@example.com"
        assert payload["subject"] == "New Lead: Ada Lovelace contacted you"
        assert payload["reply_to"] == [{"address": "ada@example.com"}]
        assert "https://admin.example.com/dashboard/leads" in payload["htmlbody"]
        assert "2024-06-01 09:30 UTC" in payload["textbody"]
        assert kwargs["headers"]["Authorization"] == "Zoho-enczapikey test-token"

    async def test_acknowledgement_goes_to_submitter(self):
        provider, http = self._make()
        assert await provider.send_lead_acknowledgement(LEAD) is True
        payload = http.post.call_args.kwargs["json"]
        assert payload["to"][0]["email_address"] == {
            "address": "ada@example.com",
            "name": "Ada Lovelace",
        }
        assert payload["subject"] == "Thank you for contacting me!"
        assert "Ada Lovelace" in payload["htmlbody"]

    async def test_html_is_escaped(self):
        provider, http = self._make()
        await provider.send_lead_acknowledgement({**LEAD, "message": "<script>x</script>"})
        assert "<script>" not in http.post.call_args.kwargs["json"]["htmlbody"]

    async def test_skipped_without_token(self):
        provider, http = self._make(token="")
        assert await provider.send_lead_acknowledgement(LEAD) is False
        http.post.assert_not_called()

    async def test_notification_skipped_without_admin_email(self):
        provider, http = self._make(admin_email="")
        assert await provider.send_lead_notification(LEAD) is False
        http.post.assert_not_called()

    async def test_error_status_returns_false(self):
        provider, _ = self._make(status_code=500)
        assert await provider.send_lead_acknowledgement(LEAD) is False

    async def test_transport_error_returns_false(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=Exception("connection reset"))
        assert await provider.send_lead_acknowledgement(LEAD) is False
