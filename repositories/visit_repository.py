"""
Repositories for the tracking collections.

  VisitRepository  → visits + visitSessions
  EventRepository  → events

Analytics pipelines over visits and events live here as well, so every
query against these collections has one home.
"""

from __future__ import annotations

from typing import Any

from pymongo.asynchronous.collection import AsyncCollection

from repositories.base import BaseRepository
from schemas.models.visit import EventDoc, VisitDoc
from shared.datetime_utils import utcnow
from shared.time_bucket_utils import TimeBucketConfig, create_mongo_time_bucket_expr

RECENT_VISIT_PROJECTION = {
    "page": 1,
    "path": 1,
    "device": 1,
    "browser": 1,
    "country": 1,
    "timestamp": 1,
}

EXPORT_VISIT_PROJECTION = {
    "page": 1,
    "path": 1,
    "device": 1,
    "browser": 1,
    "country": 1,
    "city": 1,
    "timestamp": 1,
}


def _unique_sessions_stage() -> dict[str, Any]:
    return {"$size": "$uniqueVisitors"}


class VisitRepository(BaseRepository[VisitDoc]):
    model = VisitDoc

    def __init__(self, collection: AsyncCollection, sessions: AsyncCollection) -> None:
        super().__init__(collection)
        self._sessions = sessions

    async def claim_daily_session(self, session_id: str, day: str) -> bool:
        """Record that *session_id* was seen on *day*.

        Returns True only for the request whose upsert inserted the marker,
        so exactly one visit per session and day is flagged unique even
        under concurrent submissions.
        """
        result = await self._sessions.update_one(
            {"sessionId": session_id, "day": day},
            {"$setOnInsert": {"sessionId": session_id, "day": day, "createdAt": utcnow()}},
            upsert=True,
        )
        return result.upserted_id is not None

    async def release_daily_session(self, session_id: str, day: str) -> None:
        """Drop a marker whose visit was never stored, so a retry counts as unique."""
        await self._sessions.delete_one({"sessionId": session_id, "day": day})

    async def count_unique_sessions(self, match: dict[str, Any]) -> int:
        return len(await self._col.distinct("sessionId", match))

    async def traffic(
        self, match: dict[str, Any], bucket_config: TimeBucketConfig
    ) -> list[dict[str, Any]]:
        pipeline = [
            {"$match": match},
            {
                "$group": {
                    "_id": create_mongo_time_bucket_expr(bucket_config),
                    "visits": {"$sum": 1},
                    "uniqueVisitors": {"$addToSet": "$sessionId"},
                }
            },
            {
                "$project": {
                    "_id": 0,
                    "date": "$_id",
                    "visits": 1,
                    "uniqueVisitors": _unique_sessions_stage(),
                }
            },
            {"$sort": {"date": 1}},
        ]
        return await self.aggregate(pipeline)

    async def top_countries(self, match: dict[str, Any], limit: int) -> list[dict[str, Any]]:
        pipeline = [
            {"$match": {**match, "country": {"$ne": "Unknown"}}},
            {
                "$group": {
                    "_id": "$country",
                    "countryCode": {"$first": "$countryCode"},
                    "visits": {"$sum": 1},
                    "uniqueVisitors": {"$addToSet": "$sessionId"},
                }
            },
            {
                "$project": {
                    "_id": 0,
                    "country": "$_id",
                    "countryCode": 1,
                    "visits": 1,
                    "uniqueVisitors": _unique_sessions_stage(),
                }
            },
            {"$sort": {"visits": -1, "country": 1}},
            {"$limit": limit},
        ]
        return await self.aggregate(pipeline)

    async def top_pages(self, match: dict[str, Any], limit: int) -> list[dict[str, Any]]:
        pipeline = [
            {"$match": match},
            {
                "$group": {
                    "_id": "$page",
                    "path": {"$first": "$path"},
                    "visits": {"$sum": 1},
                    "uniqueVisitors": {"$addToSet": "$sessionId"},
                }
            },
            {
                "$project": {
                    "_id": 0,
                    "page": "$_id",
                    "path": 1,
                    "visits": 1,
                    "uniqueVisitors": _unique_sessions_stage(),
                }
            },
            {"$sort": {"visits": -1, "page": 1}},
            {"$limit": limit},
        ]
        return await self.aggregate(pipeline)

    async def recent(self, limit: int) -> list[dict[str, Any]]:
        cursor = (
            self._col.find({}, RECENT_VISIT_PROJECTION)
            .sort([("timestamp", -1)])
            .limit(limit)
        )
        return await cursor.to_list(length=None)

    async def for_export(self, match: dict[str, Any]) -> list[dict[str, Any]]:
        cursor = self._col.find(match, EXPORT_VISIT_PROJECTION).sort([("timestamp", -1)])
        return await cursor.to_list(length=None)


class EventRepository(BaseRepository[EventDoc]):
    model = EventDoc

    async def top_events(self, match: dict[str, Any], limit: int) -> list[dict[str, Any]]:
        pipeline = [
            {"$match": match},
            {"$group": {"_id": "$eventName", "count": {"$sum": 1}}},
            {"$project": {"_id": 0, "eventName": "$_id", "count": 1}},
            {"$sort": {"count": -1, "eventName": 1}},
            {"$limit": limit},
        ]
        return await self.aggregate(pipeline)
