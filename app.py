"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.geolocation import GeoLocator, IpApiCoProvider, IpApiProvider
from infrastructure.http_client import HttpClient
from repositories.indexes import ensure_indexes
from routes.ad_routes import router as ad_router
from routes.analytics_routes import router as analytics_router
from routes.blog_routes import router as blog_router
from routes.health_routes import router as health_router
from routes.lead_routes import router as lead_router
from routes.project_routes import router as project_router
from routes.service_routes import router as service_router
from routes.track_routes import router as track_router
from services.notification_service import LeadNotifier
from shared.log_context import setup_logging_middleware
from shared.logging import get_logger, setup_logging

API_PREFIX = "/api"

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging, settings.env)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]
        app.state.settings = settings

        geo_http = HttpClient(
            timeout=settings.geo.geo_timeout_seconds,
            headers={"User-Agent": settings.geo.geo_user_agent},
        )
        email_http = HttpClient(timeout=10.0)
        app.state.geo_locator = GeoLocator(
            [
                IpApiProvider(geo_http, settings.geo.geo_primary_url),
                IpApiCoProvider(geo_http, settings.geo.geo_secondary_url),
            ],
            timeout=settings.geo.geo_timeout_seconds,
        )
        app.state.lead_notifier = LeadNotifier(
            ZeptoMailProvider(settings.email, email_http),
            enabled=settings.email.lead_emails_enabled,
        )

        await ensure_indexes(app.state.db)
        log.info("app_started", env=settings.env, db_name=settings.db.db_name)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await app.state.lead_notifier.drain()
        await geo_http.aclose()
        await email_http.aclose()
        await mongo_client.close()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "DNT", "Do-Not-Track"],
    )

    register_error_handlers(app, expose_stack=settings.is_development)
    setup_logging_middleware(app)

    for router in (
        health_router,
        track_router,
        lead_router,
        analytics_router,
        ad_router,
        blog_router,
        project_router,
        service_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    return app
