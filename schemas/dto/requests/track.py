"""
Request DTOs for the public tracking endpoints.

Every field is optional at the schema level: a Do-Not-Track request must be
answered before any field is checked, so the tracking service enforces the
required fields itself.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TrackVisitRequest(BaseModel):
    """Body for POST /api/track/visit."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    page: Optional[str] = None
    path: Optional[str] = None
    referrer: Optional[str] = None
    # Previously issued id; trusted as-is when present
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class TrackEventRequest(BaseModel):
    """Body for POST /api/track/event. ``metadata`` is stored untouched."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    event_name: Optional[str] = Field(default=None, alias="eventName")
    page: Optional[str] = None
    path: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    session_id: Optional[str] = Field(default=None, alias="sessionId")
