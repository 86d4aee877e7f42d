"""Integration tests for the HTTP surface: envelopes, auth and exports.

Services are replaced through ``dependency_overrides`` so no database or
network access happens; the routers, error handlers and admin guard run for
real.
"""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient

from config import AppSettings, JWTSettings
from dependencies import (
    get_ad_service,
    get_analytics_service,
    get_blog_service,
    get_lead_service,
    get_tracking_service,
)
from errors import NotFoundError, register_error_handlers
from routes.ad_routes import router as ad_router
from routes.analytics_routes import router as analytics_router
from routes.blog_routes import router as blog_router
from routes.lead_routes import router as lead_router
from routes.track_routes import router as track_router
from services.tracking_service import TrackingService, VisitResult

# Ensure a MONGODB_URI is present so AppSettings can be instantiated
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/")

SECRET = "integration-test-secret-at-least-32-bytes"


def _token(**claims) -> str:
    payload = {"sub": "user-1", **claims}
    return jwt.encode(payload, SECRET, algorithm="HS256")


ADMIN_HEADERS = {"Authorization": f"Bearer {_token(role='admin')}"}


def _provide(value):
    return lambda: value


@pytest.fixture
def services():
    tracking = MagicMock()
    tracking.track_visit = AsyncMock(return_value=VisitResult(session_id="abc123", is_unique=True))
    tracking.track_event = AsyncMock(return_value="evt-1")

    leads = MagicMock()
    leads.create_lead = AsyncMock(return_value=MagicMock(id=ObjectId("507f1f77bcf86cd799439011")))

    analytics = MagicMock()
    analytics.export_visits_csv = AsyncMock(return_value='"Page","Path"\n"Home","/"\n')

    ads = MagicMock()
    ads.record_click = AsyncMock(return_value=None)
    ads.get_ad = AsyncMock(side_effect=NotFoundError("Ad not found"))

    blog = MagicMock()
    blog.add_comment = AsyncMock(return_value=None)
    blog.categories = AsyncMock(return_value={"categories": ["Dev"], "categoriesWithCounts": []})

    return {
        get_tracking_service: tracking,
        get_lead_service: leads,
        get_analytics_service: analytics,
        get_ad_service: ads,
        get_blog_service: blog,
    }


@pytest.fixture
def client(services):
    settings = AppSettings(jwt=JWTSettings(jwt_secret=SECRET))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.db = MagicMock()
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    for router in (track_router, lead_router, analytics_router, ad_router, blog_router):
        app.include_router(router, prefix="/api")
    for dependency, mock in services.items():
        app.dependency_overrides[dependency] = _provide(mock)

    with TestClient(app) as test_client:
        yield test_client


class TestTracking:
    def test_visit_created(self, client):
        resp = client.post("/api/track/visit", json={"page": "Home", "path": "/"})
        assert resp.status_code == 201
        assert resp.json() == {"success": True, "data": {"sessionId": "abc123", "isUnique": True}}

    def test_event_created(self, client):
        resp = client.post("/api/track/event", json={"eventName": "cta_click", "page": "Home", "path": "/"})
        assert resp.status_code == 201
        assert resp.json()["data"] == {"eventId": "evt-1"}

    def test_do_not_track_is_acknowledged_without_storing(self, client):
        real = TrackingService(MagicMock(), MagicMock(), MagicMock())
        client.app.dependency_overrides[get_tracking_service] = lambda: real
        resp = client.post("/api/track/visit", json={"page": "Home", "path": "/"}, headers={"DNT": "1"})
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "message": "Tracking skipped (Do Not Track)",
            "data": {"skipped": True},
        }

    def test_do_not_track_wins_over_malformed_body(self, client, services):
        resp = client.post("/api/track/visit", json={"page": 123}, headers={"DNT": "1"})
        assert resp.status_code == 200
        assert resp.json()["data"] == {"skipped": True}
        services[get_tracking_service].track_visit.assert_not_called()

    def test_do_not_track_header_variant_on_events(self, client, services):
        resp = client.post(
            "/api/track/event", content=b"not json", headers={"Do-Not-Track": "true"}
        )
        assert resp.status_code == 200
        services[get_tracking_service].track_event.assert_not_called()

    def test_wrong_field_type_is_a_validation_error(self, client, services):
        resp = client.post("/api/track/visit", json={"page": 123, "path": "/"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["message"] == "Validation failed"
        assert body["errors"][0]["field"] == "page"
        services[get_tracking_service].track_visit.assert_not_called()

    def test_invalid_json_body(self, client):
        resp = client.post(
            "/api/track/visit", content=b"{oops", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Request body must be valid JSON"}

    def test_missing_page_is_rejected(self, client):
        real = TrackingService(MagicMock(), MagicMock(), MagicMock())
        client.app.dependency_overrides[get_tracking_service] = lambda: real
        resp = client.post("/api/track/visit", json={"path": "/"})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Page and path are required"}

    def test_liveness_route(self, client):
        resp = client.get("/api/track/test")
        assert resp.json() == {"success": True, "message": "Tracking routes are working"}


class TestLeads:
    def test_create_lead(self, client):
        resp = client.post(
            "/api/leads/create",
            json={"name": "Ada", "email": "ada@example.com", "message": "Hello"},
        )
        assert resp.status_code == 201
        assert resp.json() == {
            "success": True,
            "message": "Lead created successfully",
            "data": {"leadId": "507f1f77bcf86cd799439011"},
        }

    def test_invalid_email_uses_validation_envelope(self, client, services):
        resp = client.post(
            "/api/leads/create",
            json={"name": "Ada", "email": "not-an-email", "message": "Hello"},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert body["errors"][0]["field"] == "email"
        services[get_lead_service].create_lead.assert_not_called()


class TestAdminGuard:
    def test_missing_token(self, client):
        resp = client.get("/api/leads")
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Not authorized, no token"}

    def test_bad_token(self, client):
        resp = client.get("/api/leads", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Not authorized, token failed"

    def test_token_signed_with_other_secret(self, client):
        forged = jwt.encode({"sub": "x", "role": "admin"}, "another-secret-that-is-32-bytes-long", algorithm="HS256")
        resp = client.get("/api/leads", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    def test_non_admin_token(self, client):
        headers = {"Authorization": f"Bearer {_token(role='user')}"}
        resp = client.get("/api/analytics/overview", headers=headers)
        assert resp.status_code == 403
        assert resp.json()["message"] == "Not authorized to access this route"

    def test_public_analytics_liveness_needs_no_token(self, client):
        resp = client.get("/api/analytics/test")
        assert resp.status_code == 200
        assert "timestamp" in resp.json()


class TestAnalyticsExport:
    def test_visits_csv(self, client, services):
        resp = client.get(
            "/api/analytics/export/visits?startDate=2024-01-01&endDate=2024-01-31",
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.headers["content-disposition"] == "attachment; filename=visits.csv"
        assert resp.text.startswith('"Page","Path"')
        services[get_analytics_service].export_visits_csv.assert_awaited_once()

    def test_invalid_window_date(self, client):
        resp = client.get("/api/analytics/export/visits?startDate=yesterday", headers=ADMIN_HEADERS)
        assert resp.status_code == 400
        assert resp.json()["success"] is False


class TestAds:
    def test_click_is_public(self, client):
        resp = client.post("/api/ads/507f1f77bcf86cd799439011/click")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Click tracked"}

    def test_unknown_ad(self, client):
        resp = client.get("/api/ads/nope", headers=ADMIN_HEADERS)
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Ad not found"}


class TestBlog:
    def test_categories_not_captured_as_slug(self, client, services):
        resp = client.get("/api/blog/categories")
        assert resp.status_code == 200
        assert resp.json()["data"]["categories"] == ["Dev"]
        services[get_blog_service].categories.assert_awaited_once()

    def test_honeypot_comment_is_acknowledged(self, client):
        resp = client.post(
            "/api/blog/hello/comments",
            json={"name": "Bot", "message": "Buy now please", "website": "spam.example"},
        )
        assert resp.status_code == 201
        assert resp.json() == {"success": True, "message": "Comment submitted"}


def test_unknown_route(client):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Route not found"}
