"""
Ad management.

Status is derived from the date bounds on every write: an explicit "draft"
is kept, otherwise an ad is "expired" once its end has passed, "active"
while now lies within its bounds, and "draft" before it starts.
"""

from __future__ import annotations

from datetime import datetime

from errors import BusinessRuleError, NotFoundError
from repositories.ad_repository import AdRepository
from schemas.dto.requests.ad import CreateAdRequest, ListAdsQuery, UpdateAdRequest
from schemas.models.ad import AdDoc
from services.common import require_object_id
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)

AD_NOT_FOUND = "Ad not found"
DATE_RANGE_MESSAGE = "End date must be after start date"


def derive_ad_status(status: str, start: datetime, end: datetime, now: datetime) -> str:
    if status == "draft":
        return "draft"
    if end < now:
        return "expired"
    if start <= now <= end:
        return "active"
    return "draft"


def is_ad_active(ad: AdDoc, now: datetime) -> bool:
    """Live check that does not trust a stale persisted status alone."""
    return ad.status == "active" and ad.start_date <= now <= ad.end_date


def _check_range(start: datetime, end: datetime) -> None:
    if end < start:
        raise BusinessRuleError(DATE_RANGE_MESSAGE, field="endDate")


def ad_to_api(ad: AdDoc, now: datetime) -> dict:
    return {**ad.to_api(), "isActive": is_ad_active(ad, now)}


class AdService:
    def __init__(self, ad_repo: AdRepository) -> None:
        self._ads = ad_repo

    async def list_ads(self, query: ListAdsQuery) -> list[dict]:
        now = utcnow()
        ads = await self._ads.list_ads(
            active_at=now if query.active else None, limit=query.limit
        )
        return [ad_to_api(ad, now) for ad in ads]

    async def get_ad(self, ad_id: str) -> AdDoc:
        ad = await self._ads.find_by_id(require_object_id(ad_id, AD_NOT_FOUND))
        if ad is None:
            raise NotFoundError(AD_NOT_FOUND)
        return ad

    async def create_ad(self, payload: CreateAdRequest) -> AdDoc:
        _check_range(payload.start_date, payload.end_date)
        now = utcnow()
        ad = AdDoc(
            title=payload.title,
            description=payload.description,
            image=payload.image,
            link=payload.link,
            priority=payload.priority,
            start_date=payload.start_date,
            end_date=payload.end_date,
            status=derive_ad_status(payload.status, payload.start_date, payload.end_date, now),
            created_at=now,
            updated_at=now,
        )
        ad.id = await self._ads.insert(ad)
        log.info("ad_created", ad_id=str(ad.id), status=ad.status)
        return ad

    async def update_ad(self, ad_id: str, payload: UpdateAdRequest) -> AdDoc:
        existing = await self.get_ad(ad_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        start = changes.get("start_date", existing.start_date)
        end = changes.get("end_date", existing.end_date)
        if "start_date" in changes or "end_date" in changes:
            _check_range(start, end)

        now = utcnow()
        requested_status = changes.get("status", existing.status)
        changes["status"] = derive_ad_status(requested_status, start, end, now)
        changes["updated_at"] = now

        update = AdDoc.model_validate({**existing.model_dump(), **changes})
        fields = update.model_dump(by_alias=True, include=set(changes))
        ad = await self._ads.update_by_id(existing.id, {"$set": fields})
        if ad is None:
            raise NotFoundError(AD_NOT_FOUND)
        log.info("ad_updated", ad_id=ad_id, status=ad.status)
        return ad

    async def delete_ad(self, ad_id: str) -> None:
        if not await self._ads.delete_by_id(require_object_id(ad_id, AD_NOT_FOUND)):
            raise NotFoundError(AD_NOT_FOUND)
        log.info("ad_deleted", ad_id=ad_id)

    async def record_click(self, ad_id: str) -> None:
        await self._bump(ad_id, "clicks")

    async def record_impression(self, ad_id: str) -> None:
        await self._bump(ad_id, "impressions")

    async def _bump(self, ad_id: str, field: str) -> None:
        if not await self._ads.increment(require_object_id(ad_id, AD_NOT_FOUND), field):
            raise NotFoundError(AD_NOT_FOUND)
