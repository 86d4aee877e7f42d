"""Unit tests for ad status rules and AdService."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from errors import BusinessRuleError, NotFoundError
from repositories.ad_repository import AdRepository
from schemas.dto.requests.ad import CreateAdRequest, ListAdsQuery, UpdateAdRequest
from schemas.models.ad import AdDoc
from services.ad_service import AdService, ad_to_api, derive_ad_status, is_ad_active
from shared.datetime_utils import utcnow

NOW = datetime(2024, 6, 15, 12, tzinfo=timezone.utc)
AD_ID = ObjectId("507f1f77bcf86cd799439011")
DAY = timedelta(days=1)


def _ad(**overrides) -> AdDoc:
    now = utcnow()
    values = dict(
        _id=AD_ID,
        title="Hosting",
        image="https://cdn.example.com/a.png",
        link="https://example.com",
        start_date=now - DAY,
        end_date=now + 30 * DAY,
        status="active",
        created_at=now - DAY,
    )
    values.update(overrides)
    return AdDoc(**values)


def _service(existing=None):
    repo = MagicMock()
    repo.insert = AsyncMock(return_value=AD_ID)
    repo.find_by_id = AsyncMock(return_value=existing)
    repo.update_by_id = AsyncMock(side_effect=lambda oid, update: _merged(update["$set"]))
    repo.delete_by_id = AsyncMock(return_value=True)
    repo.increment = AsyncMock(return_value=True)
    repo.list_ads = AsyncMock(return_value=[_ad()])
    return AdService(repo), repo


def _merged(fields: dict) -> AdDoc:
    return AdDoc.model_validate({**_ad().to_mongo(), **fields})


# ── Pure rules ────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "requested, start, end, expected",
    [
        ("draft", NOW - DAY, NOW + DAY, "draft"),
        ("active", NOW - 2 * DAY, NOW - DAY, "expired"),
        ("active", NOW - DAY, NOW + DAY, "active"),
        ("expired", NOW - DAY, NOW + DAY, "active"),
        ("active", NOW + DAY, NOW + 2 * DAY, "draft"),
    ],
    ids=["draft_sticky", "past_end", "within", "expired_revived", "not_started"],
)
def test_derive_ad_status(requested, start, end, expected):
    assert derive_ad_status(requested, start, end, NOW) == expected


class TestIsAdActive:
    def test_active_within_bounds(self):
        ad = _ad(start_date=NOW - DAY, end_date=NOW + DAY)
        assert is_ad_active(ad, NOW) is True

    def test_stale_active_status_past_end(self):
        ad = _ad(start_date=NOW - 2 * DAY, end_date=NOW - DAY, status="active")
        assert is_ad_active(ad, NOW) is False

    def test_draft_never_active(self):
        ad = _ad(start_date=NOW - DAY, end_date=NOW + DAY, status="draft")
        assert is_ad_active(ad, NOW) is False

    def test_api_view_carries_flag(self):
        data = ad_to_api(_ad(start_date=NOW - DAY, end_date=NOW + DAY), NOW)
        assert data["isActive"] is True
        assert data["_id"] == str(AD_ID)
        assert "startDate" in data


# ── Service ───────────────────────────────────────────────────────────────────


class TestCreateAd:
    def _request(self, **overrides):
        now = utcnow()
        values = {
            "title": "Hosting",
            "image": "https://cdn.example.com/a.png",
            "link": "https://example.com",
            "startDate": now - DAY,
            "endDate": now + DAY,
            "status": "active",
        }
        values.update(overrides)
        return CreateAdRequest(**values)

    async def test_rejects_end_before_start(self):
        service, repo = _service()
        now = utcnow()
        with pytest.raises(BusinessRuleError, match="End date must be after start date"):
            await service.create_ad(self._request(startDate=now, endDate=now - DAY))
        repo.insert.assert_not_called()

    async def test_status_derived(self):
        service, repo = _service()
        ad = await service.create_ad(self._request())
        assert ad.status == "active"
        assert ad.id == AD_ID
        assert repo.insert.call_args.args[0].clicks == 0

    async def test_draft_kept(self):
        service, _ = _service()
        ad = await service.create_ad(self._request(status="draft"))
        assert ad.status == "draft"


class TestUpdateAd:
    async def test_merged_bounds_checked_when_one_changes(self):
        existing = _ad()
        service, repo = _service(existing)
        with pytest.raises(BusinessRuleError):
            await service.update_ad(
                str(AD_ID), UpdateAdRequest(endDate=existing.start_date - DAY)
            )
        repo.update_by_id.assert_not_called()

    async def test_status_rederived_on_write(self):
        existing = _ad()
        service, repo = _service(existing)
        await service.update_ad(str(AD_ID), UpdateAdRequest(endDate=utcnow() - timedelta(hours=1)))
        fields = repo.update_by_id.call_args.args[1]["$set"]
        assert fields["status"] == "expired"
        assert "endDate" in fields
        assert "title" not in fields

    async def test_missing_ad(self):
        service, _ = _service(existing=None)
        with pytest.raises(NotFoundError, match="Ad not found"):
            await service.update_ad(str(AD_ID), UpdateAdRequest(title="x"))


class TestAdCounters:
    async def test_click_increments(self):
        service, repo = _service()
        await service.record_click(str(AD_ID))
        repo.increment.assert_awaited_once_with(AD_ID, "clicks")

    async def test_impression_on_missing_ad(self):
        service, repo = _service()
        repo.increment = AsyncMock(return_value=False)
        with pytest.raises(NotFoundError):
            await service.record_impression(str(AD_ID))

    async def test_invalid_id_is_not_found(self):
        service, repo = _service()
        with pytest.raises(NotFoundError):
            await service.record_click("bogus")
        repo.increment.assert_not_called()


class TestListAds:
    async def test_active_filter_passes_now(self):
        service, repo = _service()
        ads = await service.list_ads(ListAdsQuery(active=True, limit=5))
        kwargs = repo.list_ads.call_args.kwargs
        assert kwargs["active_at"] is not None
        assert kwargs["limit"] == 5
        assert ads[0]["isActive"] is True

    async def test_repository_query_shape(self):
        collection = MagicMock()
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.to_list = AsyncMock(return_value=[])
        collection.find.return_value = cursor
        await AdRepository(collection).list_ads(active_at=NOW, limit=10)
        query = collection.find.call_args.args[0]
        assert query == {"status": "active", "startDate": {"$lte": NOW}, "endDate": {"$gte": NOW}}
        cursor.sort.assert_called_once_with([("priority", -1), ("createdAt", -1)])
