"""
MongoDB index definitions, applied once at startup by create_app().

create_index is idempotent, so re-running on every boot is safe.
"""

from __future__ import annotations

from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.database import AsyncDatabase

from shared.logging import get_logger

log = get_logger(__name__)

# Session markers only matter for the day they describe
VISIT_SESSION_TTL_SECONDS = 2 * 24 * 60 * 60


async def ensure_indexes(db: AsyncDatabase) -> None:
    visits = db["visits"]
    await visits.create_index([("sessionId", ASCENDING), ("timestamp", DESCENDING)])
    await visits.create_index([("timestamp", DESCENDING)])
    await visits.create_index([("page", ASCENDING), ("timestamp", DESCENDING)])
    await visits.create_index([("country", ASCENDING), ("timestamp", DESCENDING)])

    sessions = db["visitSessions"]
    await sessions.create_index(
        [("sessionId", ASCENDING), ("day", ASCENDING)], unique=True
    )
    await sessions.create_index(
        [("createdAt", ASCENDING)], expireAfterSeconds=VISIT_SESSION_TTL_SECONDS
    )

    events = db["events"]
    await events.create_index([("eventName", ASCENDING), ("timestamp", DESCENDING)])
    await events.create_index([("timestamp", DESCENDING)])

    leads = db["leads"]
    await leads.create_index([("status", ASCENDING), ("createdAt", DESCENDING)])
    await leads.create_index([("email", ASCENDING)])
    await leads.create_index([("createdAt", DESCENDING)])

    ads = db["ads"]
    await ads.create_index(
        [("status", ASCENDING), ("startDate", ASCENDING), ("endDate", ASCENDING)]
    )
    await ads.create_index([("status", ASCENDING), ("priority", DESCENDING)])

    blogs = db["blogs"]
    await blogs.create_index([("slug", ASCENDING)], unique=True)
    await blogs.create_index([("published", ASCENDING), ("date", DESCENDING)])
    await blogs.create_index([("status", ASCENDING), ("publishedAt", ASCENDING)])
    await blogs.create_index([("category", ASCENDING)])

    comments = db["comments"]
    await comments.create_index(
        [("blog", ASCENDING), ("approved", ASCENDING), ("createdAt", DESCENDING)]
    )

    projects = db["projects"]
    await projects.create_index([("featured", DESCENDING), ("order", ASCENDING)])
    await projects.create_index([("isCustomCode", ASCENDING)])
    await projects.create_index([("category", ASCENDING)])

    services = db["services"]
    await services.create_index([("active", ASCENDING), ("order", ASCENDING)])

    log.info("mongodb_indexes_ensured")
