"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Long-lived collaborators (database, geolocation
chain, lead notifier) are created once in the app lifespan and read from
app.state; repositories and services are cheap per-request wrappers.
"""

from __future__ import annotations

from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import AppSettings
from errors import AuthenticationError, ForbiddenError
from repositories.ad_repository import AdRepository
from repositories.blog_repository import BlogRepository, CommentRepository
from repositories.content_repository import ProjectRepository, ServiceRepository
from repositories.lead_repository import LeadRepository
from repositories.visit_repository import EventRepository, VisitRepository
from services.ad_service import AdService
from services.analytics_service import AnalyticsService
from services.blog_service import BlogService
from services.lead_service import LeadService
from services.offering_service import OfferingService
from services.project_service import ProjectService
from services.tracking_service import TrackingService
from shared.ip_utils import ClientContext, get_client_context
from shared.jwt_utils import AdminIdentity, identity_from_claims, verify_access_jwt
from shared.logging import get_logger

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


def get_client(request: Request) -> ClientContext:
    return get_client_context(request)


# ── Auth ─────────────────────────────────────────────────────────────────────


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: AppSettings = Depends(get_settings),
) -> AdminIdentity:
    """Verify the bearer token and require the admin role.

    Raises AuthenticationError (401) for a missing or invalid token and
    ForbiddenError (403) for a valid token without the admin role.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")
    try:
        claims = verify_access_jwt(credentials.credentials, settings.jwt)
    except jwt.PyJWTError as e:
        log.info("admin_token_rejected", error_type=type(e).__name__)
        raise AuthenticationError("Not authorized, token failed")

    identity = identity_from_claims(claims, settings.jwt.jwt_admin_role)
    if identity is None:
        raise ForbiddenError("Not authorized to access this route")
    return identity


# ── Services ─────────────────────────────────────────────────────────────────


async def get_tracking_service(request: Request, db=Depends(get_db)) -> TrackingService:
    return TrackingService(
        VisitRepository(db["visits"], db["visitSessions"]),
        EventRepository(db["events"]),
        request.app.state.geo_locator,
    )


async def get_lead_service(request: Request, db=Depends(get_db)) -> LeadService:
    return LeadService(
        LeadRepository(db["leads"]),
        request.app.state.geo_locator,
        request.app.state.lead_notifier,
    )


async def get_analytics_service(db=Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(
        VisitRepository(db["visits"], db["visitSessions"]),
        EventRepository(db["events"]),
        LeadRepository(db["leads"]),
    )


async def get_ad_service(db=Depends(get_db)) -> AdService:
    return AdService(AdRepository(db["ads"]))


async def get_blog_service(db=Depends(get_db)) -> BlogService:
    return BlogService(BlogRepository(db["blogs"]), CommentRepository(db["comments"]))


async def get_project_service(db=Depends(get_db)) -> ProjectService:
    return ProjectService(ProjectRepository(db["projects"]))


async def get_offering_service(db=Depends(get_db)) -> OfferingService:
    return OfferingService(ServiceRepository(db["services"]))
