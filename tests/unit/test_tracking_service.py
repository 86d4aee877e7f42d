"""Unit tests for TrackingService (visits and events)."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from errors import ValidationError
from infrastructure.geolocation import UNKNOWN_LOCATION, GeoLocation
from repositories.visit_repository import VisitRepository
from schemas.dto.requests.track import TrackEventRequest, TrackVisitRequest
from services.tracking_service import TrackingService
from shared.ip_utils import ClientContext

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _service(unique=True, location=None):
    visits = MagicMock()
    visits.claim_daily_session = AsyncMock(return_value=unique)
    visits.insert = AsyncMock(return_value=ObjectId())
    events = MagicMock()
    events.insert = AsyncMock(return_value=ObjectId("507f1f77bcf86cd799439011"))
    geo = MagicMock()
    geo.locate = AsyncMock(return_value=location or GeoLocation("Germany", "DE", "Berlin", "Berlin"))
    return TrackingService(visits, events, geo), visits, events, geo


def _client(**overrides):
    values = dict(ip="8.8.8.8", user_agent=CHROME_UA, referer=None, do_not_track=False)
    values.update(overrides)
    return ClientContext(**values)


class TestTrackVisit:
    async def test_dnt_skips_before_validation(self):
        service, visits, _, geo = _service()
        # Missing page/path would otherwise fail
        assert await service.track_visit(None, _client(do_not_track=True)) is None
        visits.insert.assert_not_called()
        geo.locate.assert_not_called()

    @pytest.mark.parametrize(
        "payload",
        [None, TrackVisitRequest(page="home"), TrackVisitRequest(path="/")],
        ids=["no_body", "no_path", "no_page"],
    )
    async def test_page_and_path_required(self, payload):
        service, visits, _, _ = _service()
        with pytest.raises(ValidationError, match="Page and path are required"):
            await service.track_visit(payload, _client())
        visits.insert.assert_not_called()

    async def test_stores_enriched_visit_without_ip(self):
        service, visits, _, _ = _service()
        result = await service.track_visit(
            TrackVisitRequest(page="home", path="/", referrer="https://www.google.com/"),
            _client(),
        )
        assert result.is_unique is True
        assert len(result.session_id) == 16

        visit = visits.insert.call_args.args[0]
        assert visit.session_id == result.session_id
        assert (visit.device, visit.browser, visit.os) == ("desktop", "Chrome", "Windows")
        assert (visit.country, visit.country_code, visit.city) == ("Germany", "DE", "Berlin")
        assert visit.referrer_domain == "google.com"
        assert "8.8.8.8" not in visit.to_mongo().values()

    async def test_client_session_id_is_trusted(self):
        service, visits, _, _ = _service(unique=False)
        result = await service.track_visit(
            TrackVisitRequest(page="home", path="/", session_id="client-sid"), _client()
        )
        assert result.session_id == "client-sid"
        assert result.is_unique is False
        assert visits.claim_daily_session.call_args.args[0] == "client-sid"

    async def test_same_visitor_same_day_same_session(self):
        service, visits, _, _ = _service()
        first = await service.track_visit(TrackVisitRequest(page="a", path="/a"), _client())
        second = await service.track_visit(TrackVisitRequest(page="b", path="/b"), _client())
        assert first.session_id == second.session_id

    @pytest.mark.parametrize(
        "payload_ref, header_ref, expected",
        [
            ("https://news.ycombinator.com/", "https://google.com/", "https://news.ycombinator.com/"),
            (None, "https://google.com/", "https://google.com/"),
            (None, None, "direct"),
        ],
        ids=["payload_wins", "header_fallback", "direct"],
    )
    async def test_referrer_resolution(self, payload_ref, header_ref, expected):
        service, visits, _, _ = _service()
        await service.track_visit(
            TrackVisitRequest(page="home", path="/", referrer=payload_ref),
            _client(referer=header_ref),
        )
        assert visits.insert.call_args.args[0].referrer == expected

    async def test_unknown_location_still_recorded(self):
        service, visits, _, _ = _service(location=UNKNOWN_LOCATION)
        await service.track_visit(TrackVisitRequest(page="home", path="/"), _client(ip="127.0.0.1"))
        visit = visits.insert.call_args.args[0]
        assert (visit.country, visit.country_code) == ("Unknown", "XX")


class _SessionMarkers:
    """In-memory stand-in for the visitSessions collection (unique on sessionId+day)."""

    def __init__(self):
        self.keys = set()

    async def update_one(self, filter_, update, upsert=False):
        key = (filter_["sessionId"], filter_["day"])
        inserted = key not in self.keys
        self.keys.add(key)
        return MagicMock(upserted_id=ObjectId() if inserted else None)

    async def delete_one(self, filter_):
        self.keys.discard((filter_["sessionId"], filter_["day"]))


class TestDailyUniqueness:
    def _service(self, markers, insert=None):
        collection = MagicMock()
        collection.insert_one = insert or AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
        geo = MagicMock()
        geo.locate = AsyncMock(return_value=UNKNOWN_LOCATION)
        return TrackingService(VisitRepository(collection, markers), MagicMock(), geo)

    async def test_unique_once_per_session_per_utc_day(self, mocker):
        markers = _SessionMarkers()
        service = self._service(markers)
        clock = mocker.patch("services.tracking_service.utcnow")
        payload = TrackVisitRequest(page="home", path="/", session_id="sid-1")

        results = []
        for moment in (
            datetime(2024, 5, 1, 0, 5, tzinfo=timezone.utc),
            datetime(2024, 5, 1, 23, 55, tzinfo=timezone.utc),
            datetime(2024, 5, 2, 0, 1, tzinfo=timezone.utc),
        ):
            clock.return_value = moment
            results.append((await service.track_visit(payload, _client())).is_unique)

        assert results == [True, False, True]
        assert markers.keys == {("sid-1", "2024-05-01"), ("sid-1", "2024-05-02")}

    async def test_failed_insert_releases_marker(self):
        markers = _SessionMarkers()
        insert = AsyncMock(side_effect=[RuntimeError("write failed"), MagicMock(inserted_id=ObjectId())])
        service = self._service(markers, insert=insert)
        payload = TrackVisitRequest(page="home", path="/", session_id="sid-2")

        with pytest.raises(RuntimeError):
            await service.track_visit(payload, _client())
        assert markers.keys == set()

        retry = await service.track_visit(payload, _client())
        assert retry.is_unique is True

    async def test_failed_insert_keeps_marker_owned_by_earlier_visit(self, mocker):
        mocker.patch(
            "services.tracking_service.utcnow",
            return_value=datetime(2024, 5, 1, 12, tzinfo=timezone.utc),
        )
        markers = _SessionMarkers()
        markers.keys.add(("sid-3", "2024-05-01"))
        service = self._service(
            markers, insert=AsyncMock(side_effect=RuntimeError("write failed"))
        )
        with pytest.raises(RuntimeError):
            await service.track_visit(
                TrackVisitRequest(page="home", path="/", session_id="sid-3"), _client()
            )
        assert ("sid-3", "2024-05-01") in markers.keys


class TestTrackEvent:
    async def test_dnt_skips(self):
        service, _, events, _ = _service()
        assert await service.track_event(None, _client(do_not_track=True)) is None
        events.insert.assert_not_called()

    async def test_required_fields(self):
        service, _, events, _ = _service()
        with pytest.raises(ValidationError, match="Event name, page, and path are required"):
            await service.track_event(TrackEventRequest(page="home", path="/"), _client())
        events.insert.assert_not_called()

    async def test_returns_event_id_and_keeps_metadata(self):
        service, _, events, _ = _service()
        metadata = {"button": "hire-me", "position": 3}
        event_id = await service.track_event(
            TrackEventRequest(event_name="cta_click", page="home", path="/", metadata=metadata),
            _client(),
        )
        assert event_id == "507f1f77bcf86cd799439011"
        event = events.insert.call_args.args[0]
        assert event.metadata == metadata
        assert event.country_code == "DE"
