"""
Public tracking endpoints.

POST /api/track/visit   — record a page visit
POST /api/track/event   — record a custom event
GET  /api/track/test    — liveness probe for the tracking router

Requests carrying DNT: 1 are acknowledged with 200 and nothing is stored.
Bodies are parsed only after that check, so a DNT request is never rejected
for its payload.
"""

from __future__ import annotations

import json
from typing import Optional, TypeVar

import pydantic
from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dependencies import get_client, get_tracking_service
from errors import ValidationError
from schemas.dto.requests.track import TrackEventRequest, TrackVisitRequest
from schemas.dto.responses.common import envelope
from services.tracking_service import TrackingService
from shared.ip_utils import ClientContext

router = APIRouter(prefix="/track", tags=["tracking"])

DNT_MESSAGE = "Tracking skipped (Do Not Track)"

BodyT = TypeVar("BodyT", bound=pydantic.BaseModel)


def _skipped() -> JSONResponse:
    return JSONResponse(status_code=200, content=envelope({"skipped": True}, DNT_MESSAGE))


async def _read_body(request: Request, model: type[BodyT]) -> Optional[BodyT]:
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))


@router.post("/visit")
async def track_visit(
    request: Request,
    client: ClientContext = Depends(get_client),
    service: TrackingService = Depends(get_tracking_service),
):
    if client.do_not_track:
        return _skipped()
    payload = await _read_body(request, TrackVisitRequest)
    result = await service.track_visit(payload, client)
    if result is None:
        return _skipped()
    return JSONResponse(
        status_code=201,
        content=envelope({"sessionId": result.session_id, "isUnique": result.is_unique}),
    )


@router.post("/event")
async def track_event(
    request: Request,
    client: ClientContext = Depends(get_client),
    service: TrackingService = Depends(get_tracking_service),
):
    if client.do_not_track:
        return _skipped()
    payload = await _read_body(request, TrackEventRequest)
    event_id = await service.track_event(payload, client)
    if event_id is None:
        return _skipped()
    return JSONResponse(status_code=201, content=envelope({"eventId": event_id}))


@router.get("/test")
async def track_test():
    return envelope(message="Tracking routes are working")
