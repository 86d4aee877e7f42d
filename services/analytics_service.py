"""
Read-only analytics over visits, events and leads.

Every aggregation runs inside MongoDB; this service only assembles windows
and shapes results. Windows are ``[start, end)``: visits and events filter
on ``timestamp``, leads on ``createdAt``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from repositories.base import window_filter
from repositories.lead_repository import LeadRepository
from repositories.visit_repository import EventRepository, VisitRepository
from schemas.dto.requests.analytics import DateWindowQuery, TopItemsQuery, TrafficQuery
from shared.export_utils import leads_to_csv, visits_to_csv
from shared.time_bucket_utils import get_bucket_config


def _with_string_id(doc: dict[str, Any]) -> dict[str, Any]:
    if "_id" in doc:
        return {**doc, "_id": str(doc["_id"])}
    return doc


class AnalyticsService:
    def __init__(
        self,
        visit_repo: VisitRepository,
        event_repo: EventRepository,
        lead_repo: LeadRepository,
    ) -> None:
        self._visits = visit_repo
        self._events = event_repo
        self._leads = lead_repo

    @staticmethod
    def _timestamp_window(window: Optional[DateWindowQuery]) -> dict[str, Any]:
        if window is None:
            return {}
        return window_filter("timestamp", window.start_date, window.end_date)

    async def overview(self, window: DateWindowQuery) -> dict[str, int]:
        """Headline counters. Lead totals ignore the window."""
        match = self._timestamp_window(window)
        total_visits, unique_visitors, total_leads, new_leads, total_events = await asyncio.gather(
            self._visits.count(match),
            self._visits.count_unique_sessions(match),
            self._leads.count({}),
            self._leads.count({"status": "new"}),
            self._events.count(match),
        )
        return {
            "totalVisits": total_visits,
            "uniqueVisitors": unique_visitors,
            "totalLeads": total_leads,
            "newLeads": new_leads,
            "totalEvents": total_events,
        }

    async def traffic(self, query: TrafficQuery) -> list[dict[str, Any]]:
        return await self._visits.traffic(
            self._timestamp_window(query), get_bucket_config(query.period)
        )

    async def top_countries(self, query: TopItemsQuery) -> list[dict[str, Any]]:
        return await self._visits.top_countries(self._timestamp_window(query), query.limit)

    async def top_pages(self, query: TopItemsQuery) -> list[dict[str, Any]]:
        return await self._visits.top_pages(self._timestamp_window(query), query.limit)

    async def top_events(self, query: TopItemsQuery) -> list[dict[str, Any]]:
        return await self._events.top_events(self._timestamp_window(query), query.limit)

    async def recent_visits(self, limit: int = 20) -> list[dict[str, Any]]:
        return [_with_string_id(doc) for doc in await self._visits.recent(limit)]

    async def export_visits_csv(self, window: DateWindowQuery) -> str:
        return visits_to_csv(await self._visits.for_export(self._timestamp_window(window)))

    async def export_leads_csv(self, window: DateWindowQuery) -> str:
        match = window_filter("createdAt", window.start_date, window.end_date)
        return leads_to_csv(await self._leads.for_export(match))
