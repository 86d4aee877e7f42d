"""
Visit and event ingestion.

The client IP only feeds geolocation and session derivation; it is never
written to storage. Geolocation never fails a request: any lookup problem
resolves to the "Unknown" sentinel inside GeoLocator.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from errors import ValidationError
from infrastructure.geolocation import GeoLocator
from repositories.visit_repository import EventRepository, VisitRepository
from schemas.dto.requests.track import TrackEventRequest, TrackVisitRequest
from schemas.models.visit import EventDoc, VisitDoc
from shared.datetime_utils import day_key, utcnow
from shared.ip_utils import ClientContext
from shared.logging import get_logger, hash_ip, should_sample
from shared.referrer import DIRECT, parse_referrer
from shared.session import generate_session_id
from shared.user_agent import parse_user_agent

log = get_logger(__name__)


@dataclass(frozen=True)
class VisitResult:
    session_id: str
    is_unique: bool


class TrackingService:
    def __init__(
        self,
        visit_repo: VisitRepository,
        event_repo: EventRepository,
        geo_locator: GeoLocator,
    ) -> None:
        self._visits = visit_repo
        self._events = event_repo
        self._geo = geo_locator

    async def track_visit(
        self, payload: Optional[TrackVisitRequest], client: ClientContext
    ) -> Optional[VisitResult]:
        """Record a page visit. Returns None when Do-Not-Track suppressed it."""
        if client.do_not_track:
            log.debug("tracking_skipped_dnt", kind="visit")
            return None

        payload = payload or TrackVisitRequest()
        if not payload.page or not payload.path:
            raise ValidationError("Page and path are required")

        now = utcnow()
        session_id = payload.session_id or generate_session_id(
            client.ip, client.user_agent, now
        )

        day = day_key(now)
        is_unique, geo = await asyncio.gather(
            self._visits.claim_daily_session(session_id, day),
            self._geo.locate(client.ip),
        )
        ua = parse_user_agent(client.user_agent)
        ref = parse_referrer(payload.referrer or client.referer or DIRECT)

        visit = VisitDoc(
            page=payload.page,
            path=payload.path,
            session_id=session_id,
            is_unique=is_unique,
            device=ua.device,
            browser=ua.browser,
            os=ua.os,
            user_agent=client.user_agent,
            referrer=ref.referrer,
            referrer_domain=ref.referrer_domain,
            country=geo.country,
            country_code=geo.country_code,
            city=geo.city,
            region=geo.region,
            timestamp=now,
            do_not_track=False,
        )
        try:
            await self._visits.insert(visit)
        except Exception:
            if is_unique:
                await self._visits.release_daily_session(session_id, day)
            raise

        if should_sample("track"):
            log.info(
                "visit_tracked",
                page=payload.page,
                session_id=session_id,
                is_unique=is_unique,
                country=geo.country_code,
                ip_hash=hash_ip(client.ip),
            )
        return VisitResult(session_id=session_id, is_unique=is_unique)

    async def track_event(
        self, payload: Optional[TrackEventRequest], client: ClientContext
    ) -> Optional[str]:
        """Record a custom event and return its id, or None under Do-Not-Track."""
        if client.do_not_track:
            log.debug("tracking_skipped_dnt", kind="event")
            return None

        payload = payload or TrackEventRequest()
        if not payload.event_name or not payload.page or not payload.path:
            raise ValidationError("Event name, page, and path are required")

        now = utcnow()
        session_id = payload.session_id or generate_session_id(
            client.ip, client.user_agent, now
        )
        geo = await self._geo.locate(client.ip)

        event = EventDoc(
            event_name=payload.event_name,
            page=payload.page,
            path=payload.path,
            metadata=payload.metadata or {},
            session_id=session_id,
            country=geo.country,
            country_code=geo.country_code,
            timestamp=now,
        )
        event_id = await self._events.insert(event)

        if should_sample("track"):
            log.info("event_tracked", event_name=payload.event_name, session_id=session_id)
        return str(event_id)
