"""
Ad endpoints.

GET  /api/ads                   — public list (``active=true`` for live ads)
POST /api/ads/{ad_id}/click     — public click counter
POST /api/ads/{ad_id}/impression — public impression counter
GET/POST/PUT/DELETE /api/ads[/{ad_id}] — admin management
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from dependencies import get_ad_service, require_admin
from schemas.dto.requests.ad import CreateAdRequest, ListAdsQuery, UpdateAdRequest
from schemas.dto.responses.common import envelope
from services.ad_service import AdService, ad_to_api
from shared.datetime_utils import utcnow
from shared.jwt_utils import AdminIdentity

router = APIRouter(prefix="/ads", tags=["ads"])


@router.get("")
async def list_ads(
    query: Annotated[ListAdsQuery, Query()],
    service: AdService = Depends(get_ad_service),
):
    return envelope({"ads": await service.list_ads(query)})


@router.get("/{ad_id}")
async def get_ad(
    ad_id: str,
    admin: AdminIdentity = Depends(require_admin),
    service: AdService = Depends(get_ad_service),
):
    ad = await service.get_ad(ad_id)
    return envelope({"ad": ad_to_api(ad, utcnow())})


@router.post("")
async def create_ad(
    payload: CreateAdRequest,
    admin: AdminIdentity = Depends(require_admin),
    service: AdService = Depends(get_ad_service),
):
    ad = await service.create_ad(payload)
    return JSONResponse(
        status_code=201,
        content=envelope({"ad": ad_to_api(ad, utcnow())}, "Ad created successfully"),
    )


@router.put("/{ad_id}")
async def update_ad(
    ad_id: str,
    payload: UpdateAdRequest,
    admin: AdminIdentity = Depends(require_admin),
    service: AdService = Depends(get_ad_service),
):
    ad = await service.update_ad(ad_id, payload)
    return envelope({"ad": ad_to_api(ad, utcnow())}, "Ad updated successfully")


@router.delete("/{ad_id}")
async def delete_ad(
    ad_id: str,
    admin: AdminIdentity = Depends(require_admin),
    service: AdService = Depends(get_ad_service),
):
    await service.delete_ad(ad_id)
    return envelope(message="Ad deleted successfully")


@router.post("/{ad_id}/click")
async def track_click(ad_id: str, service: AdService = Depends(get_ad_service)):
    await service.record_click(ad_id)
    return envelope(message="Click tracked")


@router.post("/{ad_id}/impression")
async def track_impression(ad_id: str, service: AdService = Depends(get_ad_service)):
    await service.record_impression(ad_id)
    return envelope(message="Impression tracked")
