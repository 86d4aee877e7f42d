"""
Admin analytics endpoints.

Every route except GET /api/analytics/test requires an admin token. Window
filters (startDate inclusive, endDate exclusive) apply to visits and events
on ``timestamp`` and to leads on ``createdAt``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from dependencies import get_analytics_service, require_admin
from schemas.dto.requests.analytics import (
    DateWindowQuery,
    RecentVisitsQuery,
    TopItemsQuery,
    TrafficQuery,
)
from schemas.dto.responses.common import envelope
from services.analytics_service import AnalyticsService
from shared.datetime_utils import utcnow

router = APIRouter(prefix="/analytics", tags=["analytics"])
admin_router = APIRouter(dependencies=[Depends(require_admin)])


def _csv_response(body: str, filename: str) -> Response:
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/test")
async def analytics_test():
    body = envelope(message="Analytics routes are working")
    body["timestamp"] = utcnow().isoformat()
    return body


@admin_router.get("/overview")
async def overview(
    query: Annotated[DateWindowQuery, Query()],
    service: AnalyticsService = Depends(get_analytics_service),
):
    return envelope(await service.overview(query))


@admin_router.get("/traffic")
async def traffic(
    query: Annotated[TrafficQuery, Query()],
    service: AnalyticsService = Depends(get_analytics_service),
):
    return envelope({"traffic": await service.traffic(query)})


@admin_router.get("/countries")
async def countries(
    query: Annotated[TopItemsQuery, Query()],
    service: AnalyticsService = Depends(get_analytics_service),
):
    return envelope({"countries": await service.top_countries(query)})


@admin_router.get("/pages")
async def pages(
    query: Annotated[TopItemsQuery, Query()],
    service: AnalyticsService = Depends(get_analytics_service),
):
    return envelope({"pages": await service.top_pages(query)})


@admin_router.get("/events")
async def events(
    query: Annotated[TopItemsQuery, Query()],
    service: AnalyticsService = Depends(get_analytics_service),
):
    return envelope({"events": await service.top_events(query)})


@admin_router.get("/recent-visits")
async def recent_visits(
    query: Annotated[RecentVisitsQuery, Query()],
    service: AnalyticsService = Depends(get_analytics_service),
):
    return envelope({"visits": await service.recent_visits(query.limit)})


@admin_router.get("/export/visits")
async def export_visits(
    query: Annotated[DateWindowQuery, Query()],
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _csv_response(await service.export_visits_csv(query), "visits.csv")


@admin_router.get("/export/leads")
async def export_leads(
    query: Annotated[DateWindowQuery, Query()],
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _csv_response(await service.export_leads_csv(query), "leads.csv")


router.include_router(admin_router)
